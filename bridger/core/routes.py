"""Token, chain and route lookups against the static configuration."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_EVEN, Decimal, localcontext
from typing import Any, Dict, List

from bridger.config import BridgeConfig, BridgeOperation, ConfigError
from bridger.config.loader import BRIDGED_SUFFIX
from bridger.core.utils import AmountLike, to_decimal

FALLBACK_DECIMALS: Dict[str, int] = {
    "ETH": 18,
    "WETH": 18,
    "DAI": 18,
    "USDC": 6,
    "USDC.e": 6,
    "USDT": 6,
    "WBTC": 8,
}
DEFAULT_DECIMALS = 18


class NotSupportedError(ConfigError):
    """Raised when a token is not available on a requested chain."""


@dataclass(frozen=True)
class Route:
    """Origin/destination token pair handed to the bridging client."""

    origin_chain_id: int
    destination_chain_id: int
    input_token: str
    output_token: str
    is_native: bool = False

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "originChainId": self.origin_chain_id,
            "destinationChainId": self.destination_chain_id,
            "inputToken": self.input_token,
            "outputToken": self.output_token,
        }
        if self.is_native:
            data["isNative"] = True
        return data


def resolve_token_address(config: BridgeConfig, symbol: str, chain_id: int, use_bridged: bool = False) -> str:
    """Return the token address on ``chain_id``, preferring the bridged variant when asked."""
    addresses = config.tokens.get(symbol, {})
    if use_bridged:
        bridged = addresses.get(f"{int(chain_id)}{BRIDGED_SUFFIX}")
        if bridged:
            return bridged

    address = addresses.get(str(int(chain_id)))
    if address:
        return address
    raise NotSupportedError(f"Token {symbol} not supported on chain {chain_id}")


def resolve_decimals(config: BridgeConfig, symbol: str) -> int:
    if symbol in config.token_decimals:
        return config.token_decimals[symbol]
    return FALLBACK_DECIMALS.get(symbol, DEFAULT_DECIMALS)


def operation_decimals(config: BridgeConfig, operation: BridgeOperation) -> int:
    """Return the decimals override of ``operation`` or the token default."""
    if operation.decimals is not None:
        return operation.decimals
    return resolve_decimals(config, operation.token_symbol)


def chain_name(config: BridgeConfig, chain_id: int) -> str:
    chain = config.chains.get(int(chain_id))
    return chain.name if chain else f"Chain {chain_id}"


def supported_chains(config: BridgeConfig) -> List[int]:
    return list(config.chains)


def supported_tokens_for_chain(config: BridgeConfig, chain_id: int) -> List[str]:
    """Return the token symbols with a plain (non-bridged) entry on ``chain_id``."""
    key = str(int(chain_id))
    return [symbol for symbol, addresses in config.tokens.items() if key in addresses]


def is_bridge_supported(config: BridgeConfig, origin_chain_id: int, destination_chain_id: int, symbol: str) -> bool:
    addresses = config.tokens.get(symbol, {})
    return str(int(origin_chain_id)) in addresses and str(int(destination_chain_id)) in addresses


def _is_native(config: BridgeConfig, symbol: str, chain_id: int) -> bool:
    chain = config.chains.get(int(chain_id))
    native = chain.native_currency if chain else "ETH"
    return symbol == native


def build_route(
    config: BridgeConfig,
    symbol: str,
    origin_chain_id: int,
    destination_chain_id: int,
    use_native_token: bool = False,
    use_bridged: bool = False,
) -> Route:
    """Build the route for bridging ``symbol``; ``use_bridged`` applies to the output token only."""
    input_token = resolve_token_address(config, symbol, origin_chain_id)
    output_token = resolve_token_address(config, symbol, destination_chain_id, use_bridged=use_bridged)
    return Route(
        origin_chain_id=int(origin_chain_id),
        destination_chain_id=int(destination_chain_id),
        input_token=input_token,
        output_token=output_token,
        is_native=bool(use_native_token and _is_native(config, symbol, origin_chain_id)),
    )


def list_routes(config: BridgeConfig, symbol: str) -> List[Route]:
    """Enumerate every ordered chain pair that lists ``symbol``."""
    addresses = config.tokens.get(symbol)
    if not addresses:
        return []

    chain_ids = [int(key) for key in addresses if key.isdigit()]
    routes: List[Route] = []
    for origin in chain_ids:
        for destination in chain_ids:
            if origin == destination:
                continue
            routes.append(
                Route(
                    origin_chain_id=origin,
                    destination_chain_id=destination,
                    input_token=addresses[str(origin)],
                    output_token=addresses[str(destination)],
                )
            )
    return routes


def _group_thousands(value: Decimal, min_places: int) -> str:
    text = f"{value:,f}"
    if "." not in text:
        return text if min_places == 0 else f"{text}.{'0' * min_places}"
    whole, fraction = text.split(".")
    fraction = fraction.rstrip("0").ljust(min_places, "0")
    return f"{whole}.{fraction}" if fraction else whole


def format_token_amount(config: BridgeConfig, amount: AmountLike, symbol: str) -> str:
    """Format a human-readable amount for display, e.g. ``"1,000.50 USDC"``."""
    decimals = resolve_decimals(config, symbol)
    if decimals == 18:
        min_places, max_places = 0, 6
    elif decimals == 8:
        min_places, max_places = 0, 8
    elif decimals == 6:
        min_places, max_places = 2, 4
    else:
        min_places, max_places = 0, 3

    value = to_decimal(amount)
    with localcontext() as ctx:
        # quantize needs room for every integer digit plus the fraction
        ctx.prec = max(ctx.prec, value.adjusted() + max_places + 2)
        value = value.quantize(Decimal(1).scaleb(-max_places), rounding=ROUND_HALF_EVEN)
    return f"{_group_thousands(value, min_places)} {symbol}"


def describe_operation(config: BridgeConfig, operation: BridgeOperation) -> str:
    """Return a one-line human-readable summary of ``operation``."""
    origin = chain_name(config, operation.origin_chain_id)
    destination = chain_name(config, operation.destination_chain_id)
    amount = format_token_amount(config, operation.input_amount, operation.token_symbol)
    native = operation.use_native_token and _is_native(config, operation.token_symbol, operation.origin_chain_id)
    token_display = f"{operation.token_symbol} (native)" if native else operation.token_symbol
    return f"Bridge {amount} from {origin} to {destination} using {token_display}"


__all__ = [
    "DEFAULT_DECIMALS",
    "FALLBACK_DECIMALS",
    "NotSupportedError",
    "Route",
    "build_route",
    "chain_name",
    "describe_operation",
    "format_token_amount",
    "is_bridge_supported",
    "list_routes",
    "operation_decimals",
    "resolve_decimals",
    "resolve_token_address",
    "supported_chains",
    "supported_tokens_for_chain",
]
