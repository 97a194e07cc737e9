"""Utility helpers shared across bridger core modules."""

from __future__ import annotations

import json
import logging
from decimal import ROUND_DOWN, Decimal, InvalidOperation, localcontext
from pathlib import Path
from typing import Any, Optional, Union

from web3 import Web3

AmountLike = Union[int, float, str, Decimal]


def get_logger(name: str = "bridger") -> logging.Logger:
    """Return a configured logger that prints to stdout."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
    return logger


def load_json_file(path: Path) -> Any:
    """Load JSON data from ``path``."""
    with path.open("r", encoding="utf-8") as fh:
        return json.load(fh)


def ensure_web3_connected(web3: Web3, *, expected_chain_id: Optional[int] = None) -> None:
    """Validate that ``web3`` is connected and optionally matches the expected chain id."""
    if not web3.is_connected():
        raise ConnectionError("Failed to connect to the configured RPC endpoint")
    if expected_chain_id is not None and web3.eth.chain_id != expected_chain_id:
        raise ValueError(f"RPC chain ID mismatch: expected {expected_chain_id}, got {web3.eth.chain_id}")


def to_decimal(value: AmountLike) -> Decimal:
    """Convert ``value`` to ``Decimal`` going through ``str`` for floats."""
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"Invalid amount: {value!r}") from exc


def parse_units(amount: AmountLike, decimals: int) -> int:
    """Convert a human-readable amount to the smallest token unit, rounding down."""
    if decimals < 0:
        raise ValueError("decimals must be non-negative")
    with localcontext() as ctx:
        ctx.prec = 80
        value = to_decimal(amount).scaleb(decimals)
        return int(value.quantize(Decimal("1"), rounding=ROUND_DOWN))


def format_units(value: int, decimals: int) -> str:
    """Render a smallest-unit integer as a plain decimal string (``1000000, 6 -> "1"``)."""
    if isinstance(value, bool) or not isinstance(value, int):
        value = int(str(value))
    negative = value < 0
    digits = str(abs(value)).rjust(decimals + 1, "0")
    whole, fraction = digits[: len(digits) - decimals], digits[len(digits) - decimals :]
    fraction = fraction.rstrip("0")
    text = f"{whole}.{fraction}" if fraction else whole
    return f"-{text}" if negative else text


__all__ = [
    "AmountLike",
    "ensure_web3_connected",
    "format_units",
    "get_logger",
    "load_json_file",
    "parse_units",
    "to_decimal",
]
