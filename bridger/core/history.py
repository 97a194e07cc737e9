"""Append-only JSON ledger of attempted bridge operations."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from bridger.config import BridgeConfig, BridgeOperation
from bridger.core.across import Quote
from bridger.core.execution import ExecutionResult
from bridger.core.routes import operation_decimals
from bridger.core.utils import format_units, get_logger, load_json_file

LOGGER = get_logger("bridger.history")


def load_history(path: Path) -> List[Dict[str, Any]]:
    """Read the ledger at ``path``; a missing file is an empty ledger.

    Raises ``OSError`` or ``ValueError`` when the file cannot be read or is
    not a JSON array.
    """
    if not path.exists():
        return []
    data = load_json_file(path)
    if not isinstance(data, list):
        raise ValueError(f"History file {path} does not contain a JSON array")
    return data


def _format_amount(value: int, decimals: int) -> str:
    try:
        return format_units(value, decimals)
    except (TypeError, ValueError) as exc:
        LOGGER.warning("Could not format amount %r: %s", value, exc)
        return str(value)


def build_record(
    config: BridgeConfig,
    operation: BridgeOperation,
    result: ExecutionResult,
    quote: Optional[Quote] = None,
    *,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Return the JSON-safe ledger entry for one attempt."""
    timestamp = (now or datetime.now(timezone.utc)).isoformat()
    record_result: Dict[str, Any] = {
        "success": bool(result.success),
        "deposit_id": str(result.deposit_id) if result.deposit_id is not None else None,
        "origin_tx_hash": result.origin_tx_hash,
        "destination_tx_hash": result.destination_tx_hash,
        "error": result.error,
    }

    if quote is not None:
        decimals = operation_decimals(config, operation)
        record_result["output_amount"] = _format_amount(quote.output_amount, decimals)
        record_result["fees"] = {
            "relay_fee": _format_amount(quote.fees.relay_fee, decimals),
            "lp_fee": _format_amount(quote.fees.lp_fee, decimals),
        }

    return {
        "timestamp": timestamp,
        "operation": {
            "name": operation.name,
            "token_symbol": operation.token_symbol,
            "origin_chain_id": int(operation.origin_chain_id),
            "destination_chain_id": int(operation.destination_chain_id),
            "input_amount": str(operation.input_amount),
        },
        "result": record_result,
    }


class HistoryRecorder:
    """Best-effort writer for the transaction history file."""

    def __init__(
        self,
        config: BridgeConfig,
        *,
        path: Optional[Path] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self.config = config
        self.path = path or Path(config.options.history_file)
        self._clock = clock

    def record(
        self,
        operation: BridgeOperation,
        result: ExecutionResult,
        quote: Optional[Quote] = None,
    ) -> bool:
        """Append an entry; returns ``False`` when history is disabled or the write failed."""
        if not self.config.options.save_history:
            return False

        try:
            history = load_history(self.path)
        except (OSError, ValueError) as exc:
            LOGGER.warning("Could not read history file %s: %s", self.path, exc)
            history = []

        history.append(build_record(self.config, operation, result, quote, now=self._clock()))

        try:
            with self.path.open("w", encoding="utf-8") as fh:
                json.dump(history, fh, indent=2)
        except (OSError, TypeError, ValueError) as exc:
            LOGGER.error("Could not save to history file %s: %s", self.path, exc)
            return False

        if self.config.options.verbose_logging:
            LOGGER.info("Transaction saved to history file")
        return True


__all__ = ["HistoryRecorder", "build_record", "load_history"]
