from __future__ import annotations

import copy
from typing import Any, Callable, Dict

import pytest

from bridger.config import BridgeConfig, parse_config
from bridger.core.across import DepositParams, FeeBreakdown, Quote
from fakes import (
    ARBITRUM,
    BASE_CONFIG,
    DEPOSITOR,
    OPTIMISM,
    SPOKE_POOL_ARBITRUM,
    WETH_ARBITRUM,
    WETH_OPTIMISM,
)


def _merge(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
    return base


@pytest.fixture
def config_data(tmp_path) -> Dict[str, Any]:
    data = copy.deepcopy(BASE_CONFIG)
    data["options"]["history_file"] = str(tmp_path / "transaction_history.json")
    return data


@pytest.fixture
def make_config(config_data) -> Callable[..., BridgeConfig]:
    """Build a config from the base data with nested overrides; history goes to ``tmp_path``."""

    def factory(**overrides: Any) -> BridgeConfig:
        return parse_config(_merge(copy.deepcopy(config_data), overrides))

    return factory


@pytest.fixture
def config(make_config) -> BridgeConfig:
    return make_config()


@pytest.fixture
def make_quote() -> Callable[..., Quote]:
    def factory(
        input_amount: int = 10**15,
        output_amount: int = 995 * 10**12,
        fill_time: int = 45,
        relay_fee: int = 4 * 10**12,
        lp_fee: int = 10**12,
        is_native: bool = True,
    ) -> Quote:
        deposit = DepositParams(
            origin_chain_id=ARBITRUM,
            destination_chain_id=OPTIMISM,
            input_token=WETH_ARBITRUM,
            output_token=WETH_OPTIMISM,
            input_amount=input_amount,
            output_amount=output_amount,
            recipient=DEPOSITOR,
            spoke_pool_address=SPOKE_POOL_ARBITRUM,
            quote_timestamp=1_700_000_000,
            fill_deadline=1_700_021_600,
            is_native=is_native,
        )
        return Quote(
            deposit=deposit,
            fees=FeeBreakdown(relay_fee=relay_fee, lp_fee=lp_fee),
            estimated_fill_time_sec=fill_time,
        )

    return factory
