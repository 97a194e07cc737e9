"""Shared fakes and configuration data for the test suite."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import requests

from bridger.core.across import ProgressEvent, Quote

ARBITRUM = 42161
OPTIMISM = 10
ETHEREUM = 1
POLYGON = 137

WETH_ARBITRUM = "0x82aF49447D8a07e3bd95BD0d56f35241523fBab1"
WETH_OPTIMISM = "0x4200000000000000000000000000000000000006"
USDC_OPTIMISM = "0x0b2C639c533813f4Aa9D7837CAf62653d097Ff85"
USDC_OPTIMISM_BRIDGED = "0x7F5c764cBc14f9669B88837ca1490cCa17c31607"
SPOKE_POOL_ARBITRUM = "0xe35e9842fceaCA96570B734083f4a58e8F7C5f2A"
DEPOSITOR = "0x1111111111111111111111111111111111111111"

BASE_CONFIG: Dict[str, Any] = {
    "bridge_operations": [
        {
            "name": "ETH Arbitrum to Optimism",
            "enabled": True,
            "token_symbol": "ETH",
            "origin_chain_id": ARBITRUM,
            "destination_chain_id": OPTIMISM,
            "input_amount": "0.001",
            "decimals": 18,
            "use_native_token": True,
        },
        {
            "name": "USDC Ethereum to Polygon",
            "enabled": False,
            "token_symbol": "USDC",
            "origin_chain_id": ETHEREUM,
            "destination_chain_id": POLYGON,
            "input_amount": 10,
            "decimals": 6,
        },
    ],
    "thresholds": {
        "min_output_percentage": 0.995,
        "max_fill_time_seconds": 60,
        "retry": {"enabled": False, "max_attempts": 3, "delay_minutes": 10},
    },
    "monitoring": {
        "status_polling_interval_ms": 10000,
        "max_polling_attempts": 5,
        "notifications": {"on_threshold_failure": True, "on_error": True},
    },
    "tokens": {
        "ETH": {
            "1": "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2",
            "10": WETH_OPTIMISM,
            "42161": WETH_ARBITRUM,
        },
        "USDC": {
            "1": "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48",
            "10": USDC_OPTIMISM,
            "10-bridged": USDC_OPTIMISM_BRIDGED,
            "137": "0x3c499c542cEF5E3811e1192ce70d8cC03d5c3359",
        },
        "WBTC": {
            "1": "0x2260FAC5E5542a773Aa44fBCfeDf7C193bc2C599",
            "42161": "0x2f2a2543B76A4166549F7aaB2e75Bef0aefC5B0f",
        },
    },
    "chains": {
        "1": {"name": "Ethereum", "rpc_url": "https://eth.example", "spoke_pool": "0x5c7BCd6E7De5423a257D81B442095A1a6ced35C5"},
        "10": {"name": "Optimism", "rpc_url": "https://op.example", "spoke_pool": "0x6f26Bf09B1C792e3228e5467807a900A503c0281"},
        "42161": {"name": "Arbitrum", "rpc_url": "https://arb.example", "spoke_pool": SPOKE_POOL_ARBITRUM},
        "137": {
            "name": "Polygon",
            "rpc_url": "https://polygon.example",
            "spoke_pool": "0x9295ee1d8C5b022Be115A2AD3c30C72E34e7F096",
            "native_currency": "POL",
        },
    },
    "token_decimals": {"ETH": 18, "USDC": 6},
    "options": {
        "auto_execute": True,
        "save_history": True,
        "history_file": "transaction_history.json",
        "show_quote_details": True,
    },
}


class DummyResponse:
    def __init__(self, status_code: int = 200, json_data: Any = None, json_error: Optional[Exception] = None):
        self.status_code = status_code
        self._json = json_data if json_data is not None else {}
        self._json_error = json_error
        self.ok = 200 <= status_code < 300

    def json(self) -> Any:
        if self._json_error is not None:
            raise self._json_error
        return self._json

    def raise_for_status(self) -> None:
        if not self.ok:
            raise requests.HTTPError(f"{self.status_code} error", response=self)


class FakeSession:
    """Returns queued responses (or raises queued exceptions) from ``get``."""

    def __init__(self, responses: List[Any]):
        self.responses = list(responses)
        self.calls: List[Dict[str, Any]] = []

    def get(self, url: str, params: Optional[Dict[str, Any]] = None, timeout: Optional[int] = None) -> DummyResponse:
        self.calls.append({"url": url, "params": params, "timeout": timeout})
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


def status_response(status: str, **extra: Any) -> DummyResponse:
    return DummyResponse(json_data={"status": status, **extra})


class FakeClient:
    """Stand-in for ``AcrossClient`` that replays quotes and progress events."""

    def __init__(
        self,
        quotes: List[Any],
        events: Optional[List[ProgressEvent]] = None,
        execute_error: Optional[Exception] = None,
    ):
        self.quotes = list(quotes)
        self.events = events or []
        self.execute_error = execute_error
        self.quote_calls: List[Dict[str, Any]] = []
        self.executed: List[Quote] = []

    def get_quote(self, *, route, input_amount):
        self.quote_calls.append({"route": route, "input_amount": input_amount})
        item = self.quotes.pop(0) if len(self.quotes) > 1 else self.quotes[0]
        if isinstance(item, Exception):
            raise item
        return item

    def execute_quote(self, *, quote, on_progress):
        self.executed.append(quote)
        for event in self.events:
            on_progress(event)
        if self.execute_error is not None:
            raise self.execute_error


class FakeCall:
    """A bound contract function: records ``build_transaction`` and answers ``call``."""

    def __init__(self, contract: "FakeContract", name: str, args: tuple):
        self.contract = contract
        self.name = name
        self.args = args

    def build_transaction(self, params: Dict[str, Any]) -> Dict[str, Any]:
        tx = {**params, "to": self.contract.address, "data": self.name}
        self.contract.eth.built.append(tx)
        return tx

    def call(self) -> Any:
        return self.contract.call_results[self.name]


class _Functions:
    def __init__(self, contract: "FakeContract"):
        self._contract = contract

    def __getattr__(self, name: str):
        def bind(*args: Any) -> FakeCall:
            self._contract.calls.append((name, args))
            return FakeCall(self._contract, name, args)

        return bind


class _Event:
    def __init__(self, contract: "FakeContract", name: str):
        self._contract = contract
        self._name = name

    def process_receipt(self, receipt: Dict[str, Any], errors: Any = None) -> List[Dict[str, Any]]:
        return self._contract.event_logs.get(self._name, [])


class _Events:
    def __init__(self, contract: "FakeContract"):
        self._contract = contract

    def __getattr__(self, name: str):
        return lambda: _Event(self._contract, name)


class FakeContract:
    def __init__(self, eth: "FakeEth", address: str):
        self.eth = eth
        self.address = address
        self.calls: List[Any] = []
        self.call_results: Dict[str, Any] = {}
        self.event_logs: Dict[str, List[Dict[str, Any]]] = {}
        self.functions = _Functions(self)
        self.events = _Events(self)


class FakeEth:
    """Origin-chain RPC stand-in; every sent transaction gets a receipt with the next queued status."""

    def __init__(self, chain_id: int, receipt_statuses: Optional[List[int]] = None):
        self.chain_id = chain_id
        self.contracts: Dict[str, FakeContract] = {}
        self.receipt_statuses = list(receipt_statuses or [])
        self.built: List[Dict[str, Any]] = []
        self.sent: List[bytes] = []

    def contract(self, address: str, abi: Any) -> FakeContract:
        if address not in self.contracts:
            self.contracts[address] = FakeContract(self, address)
        return self.contracts[address]

    def get_transaction_count(self, address: str) -> int:
        return len(self.sent)

    def send_raw_transaction(self, raw: bytes) -> bytes:
        self.sent.append(raw)
        return bytes([len(self.sent)]) * 32

    def wait_for_transaction_receipt(self, tx_hash: bytes) -> Dict[str, Any]:
        status = self.receipt_statuses.pop(0) if self.receipt_statuses else 1
        return {"status": status, "transactionHash": tx_hash, "blockNumber": 100}


class FakeWeb3:
    def __init__(self, chain_id: int, receipt_statuses: Optional[List[int]] = None, connected: bool = True):
        self.eth = FakeEth(chain_id, receipt_statuses)
        self._connected = connected

    def is_connected(self) -> bool:
        return self._connected


class SignedTx:
    def __init__(self, raw_transaction: bytes):
        self.raw_transaction = raw_transaction


class FakeAccount:
    def __init__(self, address: str = DEPOSITOR):
        self.address = address
        self.signed: List[Dict[str, Any]] = []

    def sign_transaction(self, tx: Dict[str, Any]) -> SignedTx:
        self.signed.append(tx)
        return SignedTx(f"signed-{tx['data']}".encode())
