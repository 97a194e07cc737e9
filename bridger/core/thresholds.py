"""Quote acceptance checks."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from bridger.config import BridgeConfig, BridgeOperation
from bridger.core.across import Quote
from bridger.core.routes import operation_decimals
from bridger.core.utils import get_logger, parse_units, to_decimal

LOGGER = get_logger("bridger.thresholds")


@dataclass(frozen=True)
class ThresholdCheck:
    """Outcome of comparing a quote against the configured limits."""

    output_percentage: Decimal
    fill_time_sec: int
    meets_output: bool
    meets_fill_time: bool

    @property
    def accepted(self) -> bool:
        return self.meets_output and self.meets_fill_time


def check_thresholds(config: BridgeConfig, quote: Quote, operation: BridgeOperation) -> ThresholdCheck:
    """Compare ``quote`` with the thresholds, using the operation's own input amount."""
    thresholds = config.thresholds
    input_amount = parse_units(operation.input_amount, operation_decimals(config, operation))
    if input_amount <= 0:
        raise ValueError(f"Operation {operation.name} has a zero input amount after unit conversion")

    output_percentage = Decimal(quote.output_amount) / Decimal(input_amount)
    minimum = to_decimal(thresholds.min_output_percentage)

    check = ThresholdCheck(
        output_percentage=output_percentage,
        fill_time_sec=quote.estimated_fill_time_sec,
        meets_output=output_percentage >= minimum,
        meets_fill_time=quote.estimated_fill_time_sec <= thresholds.max_fill_time_seconds,
    )

    LOGGER.info("Threshold check:")
    LOGGER.info(
        "- Output percentage: %.4f%% (minimum: %s%%)",
        output_percentage * 100,
        minimum * 100,
    )
    LOGGER.info("- Fill time: %ss (maximum: %ss)", check.fill_time_sec, thresholds.max_fill_time_seconds)
    LOGGER.info("- Meets all thresholds: %s", check.accepted)
    return check


def quote_meets_thresholds(config: BridgeConfig, quote: Quote, operation: BridgeOperation) -> bool:
    return check_thresholds(config, quote, operation).accepted


__all__ = ["ThresholdCheck", "check_thresholds", "quote_meets_thresholds"]
