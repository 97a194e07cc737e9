import dataclasses
from decimal import Decimal

import pytest

from bridger.core.routes import (
    NotSupportedError,
    build_route,
    chain_name,
    describe_operation,
    format_token_amount,
    is_bridge_supported,
    list_routes,
    operation_decimals,
    resolve_decimals,
    resolve_token_address,
    supported_tokens_for_chain,
)
from fakes import USDC_OPTIMISM, USDC_OPTIMISM_BRIDGED, WETH_ARBITRUM, WETH_OPTIMISM


def test_resolve_token_address_returns_configured_address(config):
    for symbol, addresses in config.tokens.items():
        for key, address in addresses.items():
            if key.isdigit():
                assert resolve_token_address(config, symbol, int(key)) == address


def test_resolve_token_address_unsupported(config):
    with pytest.raises(NotSupportedError, match="WBTC not supported on chain 10"):
        resolve_token_address(config, "WBTC", 10)
    with pytest.raises(NotSupportedError):
        resolve_token_address(config, "DOGE", 1)


def test_resolve_token_address_bridged_variant(config):
    assert resolve_token_address(config, "USDC", 10, use_bridged=True) == USDC_OPTIMISM_BRIDGED
    assert resolve_token_address(config, "USDC", 10) == USDC_OPTIMISM
    # no bridged entry on Ethereum: falls back to the plain address
    assert resolve_token_address(config, "USDC", 1, use_bridged=True) == config.tokens["USDC"]["1"]


def test_resolve_decimals_order(config):
    assert resolve_decimals(config, "USDC") == 6
    assert resolve_decimals(config, "WBTC") == 8
    assert resolve_decimals(config, "USDT") == 6
    assert resolve_decimals(config, "UNKNOWN") == 18


def test_operation_decimals_prefers_override(config):
    operation = dataclasses.replace(config.operations[1], decimals=None)
    assert operation_decimals(config, operation) == 6
    assert operation_decimals(config, dataclasses.replace(operation, decimals=4)) == 4


def test_build_route_native_eth(config):
    route = build_route(config, "ETH", 42161, 10, use_native_token=True)
    assert route.input_token == WETH_ARBITRUM
    assert route.output_token == WETH_OPTIMISM
    assert route.is_native is True
    assert route.to_dict()["isNative"] is True

    wrapped = build_route(config, "ETH", 42161, 10)
    assert wrapped.is_native is False
    assert "isNative" not in wrapped.to_dict()


def test_build_route_native_flag_only_for_chain_currency(config):
    route = build_route(config, "USDC", 1, 10, use_native_token=True)
    assert route.is_native is False


def test_build_route_bridged_output(config):
    route = build_route(config, "USDC", 1, 10)
    assert route.output_token == USDC_OPTIMISM
    assert build_route(config, "USDC", 1, 10, use_bridged=True).output_token == USDC_OPTIMISM_BRIDGED


def test_build_route_unsupported_chain(config):
    with pytest.raises(NotSupportedError):
        build_route(config, "WBTC", 42161, 10)


def test_list_routes_skips_bridged_keys(config):
    routes = list_routes(config, "USDC")
    pairs = {(r.origin_chain_id, r.destination_chain_id) for r in routes}
    assert len(routes) == 6
    assert (1, 10) in pairs and (10, 137) in pairs
    assert all(r.origin_chain_id != r.destination_chain_id for r in routes)
    assert all(r.output_token != USDC_OPTIMISM_BRIDGED for r in routes)
    assert list_routes(config, "DOGE") == []


def test_discovery_helpers(config):
    assert chain_name(config, 42161) == "Arbitrum"
    assert chain_name(config, 59144) == "Chain 59144"
    assert set(supported_tokens_for_chain(config, 42161)) == {"ETH", "WBTC"}
    assert is_bridge_supported(config, 1, 42161, "WBTC") is True
    assert is_bridge_supported(config, 10, 42161, "WBTC") is False


@pytest.mark.parametrize(
    "amount, symbol, expected",
    [
        (Decimal("0.001"), "ETH", "0.001 ETH"),
        (Decimal("1.1234567"), "ETH", "1.123457 ETH"),
        (Decimal("1000"), "USDC", "1,000.00 USDC"),
        (Decimal("10.12345"), "USDC", "10.1234 USDC"),
        (Decimal("0.5"), "WBTC", "0.5 WBTC"),
    ],
)
def test_format_token_amount(config, amount, symbol, expected):
    assert format_token_amount(config, amount, symbol) == expected


def test_describe_operation(config):
    assert (
        describe_operation(config, config.operations[0])
        == "Bridge 0.001 ETH from Arbitrum to Optimism using ETH (native)"
    )
    assert (
        describe_operation(config, config.operations[1])
        == "Bridge 10.00 USDC from Ethereum to Polygon using USDC"
    )


def test_format_token_amount_handles_large_values(config):
    assert format_token_amount(config, Decimal("1e25"), "ETH") == "10,000,000,000,000,000,000,000,000 ETH"
    assert format_token_amount(config, Decimal("123456789012345678901234567.5"), "USDC") == (
        "123,456,789,012,345,678,901,234,567.50 USDC"
    )
