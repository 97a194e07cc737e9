"""Quote execution and progress tracking."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, Tuple

from bridger.config import BridgeConfig, BridgeOperation
from bridger.core.across import (
    STATUS_PENDING,
    STATUS_TX_SUCCESS,
    STEP_APPROVE,
    STEP_DEPOSIT,
    STEP_FILL,
    AcrossClient,
    ProgressEvent,
    Quote,
)
from bridger.core.routes import chain_name
from bridger.core.utils import get_logger

LOGGER = get_logger("bridger.execution")

TIMESTAMP_PLACEHOLDER = "[Timestamp not available in readable format]"


@dataclass
class ExecutionResult:
    """Outcome of one execution attempt, filled in as progress events arrive."""

    success: bool = False
    deposit_id: Optional[int] = None
    origin_tx_hash: Optional[str] = None
    destination_tx_hash: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def failure(cls, error: str) -> "ExecutionResult":
        return cls(success=False, error=error)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def render_timestamp(value: Any) -> str:
    """Render an epoch-seconds value (int, float or numeric string) or ``datetime``."""
    if isinstance(value, datetime):
        moment = value
    else:
        if isinstance(value, bool):
            raise TypeError("boolean is not a timestamp")
        seconds = int(value) if isinstance(value, (int, str)) else float(value)
        moment = datetime.fromtimestamp(seconds, tz=timezone.utc)
    return moment.isoformat()


class ExecutionDriver:
    """Fold progress events from the bridging client into an ``ExecutionResult``."""

    def __init__(self, config: BridgeConfig, operation: BridgeOperation) -> None:
        self.config = config
        self.operation = operation
        self.result = ExecutionResult()
        self._handlers: Dict[Tuple[str, str], Callable[[ProgressEvent], None]] = {
            (STEP_APPROVE, STATUS_PENDING): self._approve_pending,
            (STEP_APPROVE, STATUS_TX_SUCCESS): self._approve_success,
            (STEP_DEPOSIT, STATUS_PENDING): self._deposit_pending,
            (STEP_DEPOSIT, STATUS_TX_SUCCESS): self._deposit_success,
            (STEP_FILL, STATUS_PENDING): self._fill_pending,
            (STEP_FILL, STATUS_TX_SUCCESS): self._fill_success,
        }

    def handle(self, event: ProgressEvent) -> ExecutionResult:
        handler = self._handlers.get((event.step, event.status))
        if handler is None:
            LOGGER.debug("Ignoring progress event %s/%s", event.step, event.status)
        else:
            handler(event)
        return self.result

    def _approve_pending(self, event: ProgressEvent) -> None:
        LOGGER.info("Approving token transfer...")

    def _approve_success(self, event: ProgressEvent) -> None:
        LOGGER.info("Token approval successful: %s", event.tx_hash)

    def _deposit_pending(self, event: ProgressEvent) -> None:
        LOGGER.info("Sending funds to Across...")

    def _deposit_success(self, event: ProgressEvent) -> None:
        self.result.deposit_id = event.deposit_id
        self.result.origin_tx_hash = event.tx_hash
        LOGGER.info("Deposit successful:")
        LOGGER.info("- Transaction hash: %s", event.tx_hash)
        LOGGER.info("- Deposit ID: %s", event.deposit_id)
        LOGGER.info(
            "- Waiting for funds to be bridged to %s...",
            chain_name(self.config, self.operation.destination_chain_id),
        )

    def _fill_pending(self, event: ProgressEvent) -> None:
        LOGGER.info("Relayer processing your transfer on destination chain...")

    def _fill_success(self, event: ProgressEvent) -> None:
        self.result.success = True
        if event.tx_hash:
            self.result.destination_tx_hash = event.tx_hash
        LOGGER.info(
            "Bridge complete! Funds received on %s",
            chain_name(self.config, self.operation.destination_chain_id),
        )
        if event.tx_hash:
            LOGGER.info("- Fill transaction hash: %s", event.tx_hash)

        if event.fill_tx_timestamp is not None:
            try:
                rendered = render_timestamp(event.fill_tx_timestamp)
            except (TypeError, ValueError, OverflowError, OSError):
                rendered = TIMESTAMP_PLACEHOLDER
            LOGGER.info("- Fill timestamp: %s", rendered)


def execute_operation(
    config: BridgeConfig,
    client: AcrossClient,
    quote: Quote,
    operation: BridgeOperation,
) -> ExecutionResult:
    """Execute ``quote``; client failures come back as a failed result, never as an exception.

    Identifiers captured before the failure (deposit id, origin hash) are kept
    so the caller can still poll the deposit.
    """
    LOGGER.info("Executing bridge transaction for %s...", operation.name)
    driver = ExecutionDriver(config, operation)
    try:
        client.execute_quote(quote=quote, on_progress=driver.handle)
    except Exception as exc:
        LOGGER.error("Error executing quote: %s", exc)
        result = driver.result
        result.success = False
        result.error = str(exc)
        return result
    return driver.result


__all__ = [
    "ExecutionDriver",
    "ExecutionResult",
    "TIMESTAMP_PLACEHOLDER",
    "execute_operation",
    "render_timestamp",
]
