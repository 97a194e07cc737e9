"""Quote acquisition for configured bridge operations."""

from __future__ import annotations

from decimal import Decimal

from bridger.config import BridgeConfig, BridgeOperation
from bridger.core.across import AcrossClient, Quote
from bridger.core.routes import build_route, describe_operation, operation_decimals
from bridger.core.utils import format_units, get_logger, parse_units

LOGGER = get_logger("bridger.quotes")


def fee_percentage(quote: Quote) -> Decimal:
    """Return relay plus LP fees as a percentage of the deposited amount."""
    if quote.input_amount == 0:
        return Decimal(0)
    return Decimal(quote.fees.total) * 100 / Decimal(quote.input_amount)


def log_quote(quote: Quote, *, symbol: str, decimals: int) -> None:
    LOGGER.info("Quote details:")
    LOGGER.info("- Input amount: %s %s", format_units(quote.input_amount, decimals), symbol)
    LOGGER.info("- Output amount: %s %s", format_units(quote.output_amount, decimals), symbol)
    LOGGER.info("- Estimated fill time: %s seconds", quote.estimated_fill_time_sec)
    LOGGER.info("- Total relay fee: %s %s", format_units(quote.fees.relay_fee, decimals), symbol)
    LOGGER.info("- LP fee: %s %s", format_units(quote.fees.lp_fee, decimals), symbol)
    LOGGER.info("- Total fee percentage: %.4f%%", fee_percentage(quote))


def request_quote(config: BridgeConfig, client: AcrossClient, operation: BridgeOperation) -> Quote:
    """Quote ``operation`` through ``client``; errors are logged and re-raised."""
    decimals = operation_decimals(config, operation)
    try:
        input_amount = parse_units(operation.input_amount, decimals)
        route = build_route(
            config,
            operation.token_symbol,
            operation.origin_chain_id,
            operation.destination_chain_id,
            use_native_token=operation.use_native_token,
            use_bridged=operation.use_bridged,
        )
        if config.options.verbose_logging:
            LOGGER.info("Getting quote for %s", describe_operation(config, operation))

        quote = client.get_quote(route=route, input_amount=input_amount)
    except Exception as exc:
        LOGGER.error("Error getting quote: %s", exc)
        raise

    if config.options.show_quote_details:
        log_quote(quote, symbol=operation.token_symbol, decimals=decimals)
    return quote


__all__ = ["fee_percentage", "log_quote", "request_quote"]
