"""Config loader for the bridge automation."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, MutableMapping, Optional

from web3 import Web3

DEFAULT_ACROSS_API = "https://app.across.to/api"
BRIDGED_SUFFIX = "-bridged"


class ConfigError(ValueError):
    """Raised when configuration data is invalid or missing."""


def _require_keys(data: Mapping[str, Any], keys: Iterable[str], context: str) -> None:
    missing = [key for key in keys if key not in data]
    if missing:
        raise ConfigError(f"{context} missing required keys: {', '.join(missing)}")


def _to_checksum(value: str, *, field_name: str) -> str:
    try:
        return Web3.to_checksum_address(value)
    except Exception as exc:  # web3 raises ValueError for malformed inputs
        raise ConfigError(f"Invalid address for {field_name}: {value}") from exc


def _to_int(value: Any, *, field_name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid integer for {field_name}: {value!r}") from exc


def _to_float(value: Any, *, field_name: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid number for {field_name}: {value!r}") from exc


def _to_amount(value: Any, *, field_name: str) -> Decimal:
    try:
        amount = Decimal(str(value))
    except InvalidOperation as exc:
        raise ConfigError(f"Invalid amount for {field_name}: {value}") from exc
    if not amount.is_finite() or amount <= 0:
        raise ConfigError(f"{field_name} must be a positive number")
    return amount


@dataclass(frozen=True)
class ChainConfig:
    """Configuration for a blockchain network."""

    chain_id: int
    name: str
    rpc_url: Optional[str] = None
    explorer_url: Optional[str] = None
    spoke_pool: Optional[str] = None
    native_currency: str = "ETH"

    def ensure_rpc_url(self) -> str:
        """Return the RPC URL or raise if it is missing."""
        if not self.rpc_url:
            raise ConfigError(f"RPC URL required but not configured for chain {self.chain_id}")
        return self.rpc_url


@dataclass(frozen=True)
class BridgeOperation:
    """A single configured transfer request."""

    name: str
    token_symbol: str
    origin_chain_id: int
    destination_chain_id: int
    input_amount: Decimal
    enabled: bool = True
    decimals: Optional[int] = None
    use_native_token: bool = False
    use_bridged: bool = False


@dataclass(frozen=True)
class RetryPolicy:
    """Re-quote policy applied when a quote misses the thresholds."""

    enabled: bool = False
    max_attempts: int = 1
    delay_minutes: float = 0.0


@dataclass(frozen=True)
class ThresholdConfig:
    """Acceptance limits for quotes."""

    min_output_percentage: float
    max_fill_time_seconds: int
    retry: RetryPolicy = field(default_factory=RetryPolicy)


@dataclass(frozen=True)
class NotificationConfig:
    """Which lifecycle events produce a notification log line."""

    on_start: bool = False
    on_threshold_failure: bool = False
    on_execution_start: bool = False
    on_execution_complete: bool = False
    on_error: bool = False


@dataclass(frozen=True)
class MonitoringConfig:
    """Deposit status polling parameters."""

    status_polling_interval_ms: int = 10_000
    max_polling_attempts: int = 30
    max_consecutive_errors: Optional[int] = None
    notifications: NotificationConfig = field(default_factory=NotificationConfig)


@dataclass(frozen=True)
class OptionsConfig:
    """Run-time switches."""

    auto_execute: bool = False
    max_slippage: float = 0.5
    save_history: bool = True
    history_file: str = "transaction_history.json"
    verbose_logging: bool = False
    show_quote_details: bool = True
    api_timeout: int = 30


@dataclass(frozen=True)
class ApiUrlsConfig:
    """API endpoints used for quoting and status checks."""

    across_api: str = DEFAULT_ACROSS_API

    @property
    def suggested_fees(self) -> str:
        return f"{self.across_api.rstrip('/')}/suggested-fees"

    @property
    def deposit_status(self) -> str:
        return f"{self.across_api.rstrip('/')}/deposit/status"


@dataclass(frozen=True)
class BridgeConfig:
    """Typed wrapper around the bridge automation configuration."""

    chains: Dict[int, ChainConfig]
    tokens: Dict[str, Dict[str, str]]
    token_decimals: Dict[str, int]
    operations: List[BridgeOperation]
    thresholds: ThresholdConfig
    monitoring: MonitoringConfig
    options: OptionsConfig
    api_urls: ApiUrlsConfig
    raw: Mapping[str, Any] = field(repr=False, default_factory=dict)

    def chain(self, chain_id: int) -> ChainConfig:
        """Return the chain descriptor or raise ``ConfigError``."""
        try:
            return self.chains[int(chain_id)]
        except KeyError as exc:
            raise ConfigError(f"Chain {chain_id} is not configured") from exc

    @property
    def enabled_operations(self) -> List[BridgeOperation]:
        return [operation for operation in self.operations if operation.enabled]

    def to_dict(self) -> Dict[str, Any]:
        """Return the original configuration mapping."""
        return dict(self.raw)


def _normalize_chains(chains: Any) -> Dict[int, ChainConfig]:
    if not isinstance(chains, Mapping) or not chains:
        raise ConfigError("chains must be a non-empty mapping keyed by chain id")

    result: Dict[int, ChainConfig] = {}
    for key, chain_data in chains.items():
        chain_id = _to_int(key, field_name="chain id")
        _require_keys(chain_data, ["name"], f"chain {chain_id}")
        spoke_pool = chain_data.get("spoke_pool")
        result[chain_id] = ChainConfig(
            chain_id=chain_id,
            name=str(chain_data["name"]),
            rpc_url=chain_data.get("rpc_url"),
            explorer_url=chain_data.get("explorer_url"),
            spoke_pool=_to_checksum(spoke_pool, field_name=f"chain {chain_id} spoke_pool") if spoke_pool else None,
            native_currency=str(chain_data.get("native_currency", "ETH")),
        )
    return result


def _normalize_tokens(tokens: Any) -> Dict[str, Dict[str, str]]:
    if not isinstance(tokens, Mapping):
        raise ConfigError("tokens must be a mapping of symbol to chain addresses")

    result: Dict[str, Dict[str, str]] = {}
    for symbol, addresses in tokens.items():
        if not isinstance(addresses, Mapping):
            raise ConfigError(f"tokens.{symbol} must map chain ids to addresses")
        normalized: Dict[str, str] = {}
        for key, address in addresses.items():
            chain_key = str(key)
            base = chain_key[: -len(BRIDGED_SUFFIX)] if chain_key.endswith(BRIDGED_SUFFIX) else chain_key
            if not base.isdigit():
                raise ConfigError(f"tokens.{symbol} has invalid chain key: {chain_key}")
            normalized[chain_key] = _to_checksum(address, field_name=f"token {symbol} on {chain_key}")
        result[str(symbol)] = normalized
    return result


def _normalize_decimals(decimals: Any) -> Dict[str, int]:
    if not isinstance(decimals, Mapping):
        raise ConfigError("token_decimals must be a mapping of symbol to decimals")
    result: Dict[str, int] = {}
    for symbol, value in decimals.items():
        count = _to_int(value, field_name=f"token_decimals.{symbol}")
        if count < 0:
            raise ConfigError(f"token_decimals.{symbol} must be non-negative")
        result[str(symbol)] = count
    return result


def _parse_operation(data: Mapping[str, Any], index: int) -> BridgeOperation:
    context = f"bridge_operations[{index}]"
    _require_keys(
        data,
        ["name", "token_symbol", "origin_chain_id", "destination_chain_id", "input_amount"],
        context,
    )
    decimals = data.get("decimals")
    operation = BridgeOperation(
        name=str(data["name"]),
        enabled=bool(data.get("enabled", True)),
        token_symbol=str(data["token_symbol"]),
        origin_chain_id=_to_int(data["origin_chain_id"], field_name=f"{context}.origin_chain_id"),
        destination_chain_id=_to_int(data["destination_chain_id"], field_name=f"{context}.destination_chain_id"),
        input_amount=_to_amount(data["input_amount"], field_name=f"{context}.input_amount"),
        decimals=_to_int(decimals, field_name=f"{context}.decimals") if decimals is not None else None,
        use_native_token=bool(data.get("use_native_token", False)),
        use_bridged=bool(data.get("use_bridged", False)),
    )
    if operation.origin_chain_id == operation.destination_chain_id:
        raise ConfigError(f"{context} origin and destination chains must differ")
    return operation


def _parse_thresholds(data: Mapping[str, Any]) -> ThresholdConfig:
    _require_keys(data, ["min_output_percentage", "max_fill_time_seconds"], "thresholds")
    retry_data = data.get("retry", {})
    retry = RetryPolicy(
        enabled=bool(retry_data.get("enabled", False)),
        max_attempts=_to_int(retry_data.get("max_attempts", 1), field_name="thresholds.retry.max_attempts"),
        delay_minutes=_to_float(retry_data.get("delay_minutes", 0), field_name="thresholds.retry.delay_minutes"),
    )
    thresholds = ThresholdConfig(
        min_output_percentage=_to_float(data["min_output_percentage"], field_name="thresholds.min_output_percentage"),
        max_fill_time_seconds=_to_int(data["max_fill_time_seconds"], field_name="thresholds.max_fill_time_seconds"),
        retry=retry,
    )
    if thresholds.min_output_percentage <= 0 or thresholds.min_output_percentage > 1:
        raise ConfigError("thresholds.min_output_percentage must be between 0 (exclusive) and 1")
    if thresholds.max_fill_time_seconds <= 0:
        raise ConfigError("thresholds.max_fill_time_seconds must be positive")
    if retry.max_attempts < 1:
        raise ConfigError("thresholds.retry.max_attempts must be at least 1")
    if retry.delay_minutes < 0:
        raise ConfigError("thresholds.retry.delay_minutes cannot be negative")
    return thresholds


def _parse_monitoring(data: Mapping[str, Any]) -> MonitoringConfig:
    notifications = data.get("notifications", {})
    max_errors = data.get("max_consecutive_errors")
    if max_errors is not None:
        max_errors = _to_int(max_errors, field_name="monitoring.max_consecutive_errors")
    monitoring = MonitoringConfig(
        status_polling_interval_ms=_to_int(
            data.get("status_polling_interval_ms", 10_000),
            field_name="monitoring.status_polling_interval_ms",
        ),
        max_polling_attempts=_to_int(data.get("max_polling_attempts", 30), field_name="monitoring.max_polling_attempts"),
        max_consecutive_errors=max_errors,
        notifications=NotificationConfig(
            on_start=bool(notifications.get("on_start", False)),
            on_threshold_failure=bool(notifications.get("on_threshold_failure", False)),
            on_execution_start=bool(notifications.get("on_execution_start", False)),
            on_execution_complete=bool(notifications.get("on_execution_complete", False)),
            on_error=bool(notifications.get("on_error", False)),
        ),
    )
    if monitoring.status_polling_interval_ms < 0:
        raise ConfigError("monitoring.status_polling_interval_ms cannot be negative")
    if monitoring.max_polling_attempts <= 0:
        raise ConfigError("monitoring.max_polling_attempts must be positive")
    if monitoring.max_consecutive_errors is not None and monitoring.max_consecutive_errors <= 0:
        raise ConfigError("monitoring.max_consecutive_errors must be positive when set")
    return monitoring


def _parse_options(data: Mapping[str, Any]) -> OptionsConfig:
    options = OptionsConfig(
        auto_execute=bool(data.get("auto_execute", False)),
        max_slippage=_to_float(data.get("max_slippage", 0.5), field_name="options.max_slippage"),
        save_history=bool(data.get("save_history", True)),
        history_file=str(data.get("history_file", "transaction_history.json")),
        verbose_logging=bool(data.get("verbose_logging", False)),
        show_quote_details=bool(data.get("show_quote_details", True)),
        api_timeout=_to_int(data.get("api_timeout", 30), field_name="options.api_timeout"),
    )
    if options.api_timeout <= 0:
        raise ConfigError("options.api_timeout must be positive")
    return options


def parse_config(data: Mapping[str, Any]) -> BridgeConfig:
    """Validate a raw configuration mapping and build the typed config."""
    _require_keys(data, ["chains", "tokens", "bridge_operations", "thresholds"], "config")

    operations_data = data["bridge_operations"]
    if not isinstance(operations_data, list):
        raise ConfigError("bridge_operations must be a list")

    return BridgeConfig(
        chains=_normalize_chains(data["chains"]),
        tokens=_normalize_tokens(data["tokens"]),
        token_decimals=_normalize_decimals(data.get("token_decimals", {})),
        operations=[_parse_operation(item, idx) for idx, item in enumerate(operations_data)],
        thresholds=_parse_thresholds(data["thresholds"]),
        monitoring=_parse_monitoring(data.get("monitoring", {})),
        options=_parse_options(data.get("options", {})),
        api_urls=ApiUrlsConfig(across_api=str(data.get("api_urls", {}).get("across_api", DEFAULT_ACROSS_API))),
        raw=data,
    )


def _load_json(path: Path) -> MutableMapping[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as fh:
            return json.load(fh)
    except FileNotFoundError as exc:
        raise ConfigError(f"Config file not found: {path}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Config file contains invalid JSON: {path}") from exc


def load_config(config_path: Optional[Path] = None) -> BridgeConfig:
    """Load and validate bridge configuration data."""
    config_path = config_path or Path("config.json")
    return parse_config(_load_json(config_path))


__all__ = [
    "ApiUrlsConfig",
    "BridgeConfig",
    "BridgeOperation",
    "ChainConfig",
    "ConfigError",
    "MonitoringConfig",
    "NotificationConfig",
    "OptionsConfig",
    "RetryPolicy",
    "ThresholdConfig",
    "load_config",
    "parse_config",
]
