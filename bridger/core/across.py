"""Across protocol client: suggested-fee quotes and SpokePool deposits."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional

import requests
from eth_account.signers.local import LocalAccount
from web3 import Web3
from web3.contract import Contract
from web3.logs import DISCARD

from bridger.config import BridgeConfig, ChainConfig
from bridger.contracts import load_contract_abi
from bridger.core.routes import Route
from bridger.core.status import FILLED_STATUSES, fetch_deposit_status
from bridger.core.tokens import allowance_of, get_contract
from bridger.core.utils import ensure_web3_connected, get_logger

LOGGER = get_logger("bridger.across")

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

STEP_APPROVE = "approve"
STEP_DEPOSIT = "deposit"
STEP_FILL = "fill"
STATUS_PENDING = "pending"
STATUS_TX_SUCCESS = "txSuccess"


@dataclass(frozen=True)
class FeeBreakdown:
    """Fee components in the token's smallest unit."""

    relay_fee: int
    lp_fee: int
    relay_fee_pct: Optional[str] = None
    lp_fee_pct: Optional[str] = None

    @property
    def total(self) -> int:
        return self.relay_fee + self.lp_fee


@dataclass(frozen=True)
class DepositParams:
    """Arguments for ``SpokePool.depositV3`` derived from a quote."""

    origin_chain_id: int
    destination_chain_id: int
    input_token: str
    output_token: str
    input_amount: int
    output_amount: int
    recipient: str
    spoke_pool_address: str
    quote_timestamp: int
    fill_deadline: int
    exclusive_relayer: str = ZERO_ADDRESS
    exclusivity_deadline: int = 0
    is_native: bool = False


@dataclass(frozen=True)
class Quote:
    """Priced and time-estimated proposal for one transfer."""

    deposit: DepositParams
    fees: FeeBreakdown
    estimated_fill_time_sec: int
    raw: Mapping[str, Any] = field(default_factory=dict, repr=False)

    @property
    def input_amount(self) -> int:
        return self.deposit.input_amount

    @property
    def output_amount(self) -> int:
        return self.deposit.output_amount


@dataclass(frozen=True)
class ProgressEvent:
    """One step transition reported while a quote executes."""

    step: str
    status: str
    tx_hash: Optional[str] = None
    deposit_id: Optional[int] = None
    fill_tx_timestamp: Any = None
    payload: Mapping[str, Any] = field(default_factory=dict, repr=False)


ProgressCallback = Callable[[ProgressEvent], None]


def _fee_total(payload: Mapping[str, Any], key: str) -> int:
    fee = payload.get(key) or {}
    return int(fee.get("total", 0))


def parse_suggested_fees(
    payload: Mapping[str, Any],
    *,
    route: Route,
    input_amount: int,
    recipient: str,
    default_spoke_pool: Optional[str] = None,
) -> Quote:
    """Build a ``Quote`` from a ``/suggested-fees`` response body."""
    if payload.get("isAmountTooLow"):
        raise ValueError(f"Input amount {input_amount} is below the Across minimum for this route")

    for key in ("totalRelayFee", "timestamp", "fillDeadline"):
        if key not in payload:
            raise ValueError(f"Across quote response missing '{key}'")

    relay_fee = _fee_total(payload, "totalRelayFee")
    lp_fee = _fee_total(payload, "lpFee")
    output_amount = payload.get("outputAmount")
    output_amount = int(output_amount) if output_amount is not None else input_amount - relay_fee

    spoke_pool = payload.get("spokePoolAddress") or default_spoke_pool
    if not spoke_pool:
        raise ValueError(f"No SpokePool address known for chain {route.origin_chain_id}")

    deposit = DepositParams(
        origin_chain_id=route.origin_chain_id,
        destination_chain_id=route.destination_chain_id,
        input_token=route.input_token,
        output_token=route.output_token,
        input_amount=int(input_amount),
        output_amount=output_amount,
        recipient=Web3.to_checksum_address(recipient),
        spoke_pool_address=Web3.to_checksum_address(spoke_pool),
        quote_timestamp=int(payload["timestamp"]),
        fill_deadline=int(payload["fillDeadline"]),
        exclusive_relayer=Web3.to_checksum_address(payload.get("exclusiveRelayer") or ZERO_ADDRESS),
        exclusivity_deadline=int(payload.get("exclusivityDeadline") or 0),
        is_native=route.is_native,
    )
    fees = FeeBreakdown(
        relay_fee=relay_fee,
        lp_fee=lp_fee,
        relay_fee_pct=(payload.get("totalRelayFee") or {}).get("pct"),
        lp_fee_pct=(payload.get("lpFee") or {}).get("pct"),
    )
    fill_time = payload.get("estimatedFillTimeSec", payload.get("expectedFillTimeSec", 0))
    return Quote(deposit=deposit, fees=fees, estimated_fill_time_sec=int(fill_time or 0), raw=dict(payload))


class AcrossClient:
    """Quote and execute transfers through the Across API and SpokePool contracts."""

    def __init__(
        self,
        *,
        config: BridgeConfig,
        account: LocalAccount,
        session: Optional[requests.Session] = None,
        web3_factory: Callable[[str], Web3] = lambda url: Web3(Web3.HTTPProvider(url)),
        fill_check_attempts: int = 3,
        fill_check_interval: float = 5.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.config = config
        self.account = account
        self.address = account.address
        self.session = session or requests.Session()
        self._web3_factory = web3_factory
        self._fill_check_attempts = fill_check_attempts
        self._fill_check_interval = fill_check_interval
        self._sleep = sleep
        self._web3_by_chain: Dict[int, Web3] = {}

    def get_quote(self, *, route: Route, input_amount: int) -> Quote:
        """Fetch suggested fees for ``route`` and return a normalized quote."""
        url = self.config.api_urls.suggested_fees
        params: Dict[str, Any] = {
            "inputToken": route.input_token,
            "outputToken": route.output_token,
            "originChainId": route.origin_chain_id,
            "destinationChainId": route.destination_chain_id,
            "amount": str(input_amount),
            "depositor": self.address,
        }
        try:
            response = self.session.get(url, params=params, timeout=self.config.options.api_timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise ConnectionError(f"Failed to fetch Across quote from {url}: {exc}") from exc

        origin = self.config.chains.get(route.origin_chain_id)
        return parse_suggested_fees(
            response.json(),
            route=route,
            input_amount=input_amount,
            recipient=self.address,
            default_spoke_pool=origin.spoke_pool if origin else None,
        )

    def execute_quote(self, *, quote: Quote, on_progress: ProgressCallback) -> None:
        """Approve (when needed), deposit and briefly wait for the fill, reporting each step."""
        deposit = quote.deposit
        chain = self.config.chain(deposit.origin_chain_id)
        web3 = self._web3_for(chain)

        spoke_pool = web3.eth.contract(
            address=deposit.spoke_pool_address,
            abi=load_contract_abi("spoke_pool.json"),
        )

        if not deposit.is_native:
            self._ensure_allowance(web3, deposit, on_progress)

        on_progress(ProgressEvent(step=STEP_DEPOSIT, status=STATUS_PENDING))
        call = spoke_pool.functions.depositV3(
            self.address,
            deposit.recipient,
            deposit.input_token,
            deposit.output_token,
            deposit.input_amount,
            deposit.output_amount,
            deposit.destination_chain_id,
            deposit.exclusive_relayer,
            deposit.quote_timestamp,
            deposit.fill_deadline,
            deposit.exclusivity_deadline,
            b"",
        )
        receipt = self._send(web3, call, value=deposit.input_amount if deposit.is_native else 0)
        deposit_id = _extract_deposit_id(spoke_pool, receipt)
        on_progress(
            ProgressEvent(
                step=STEP_DEPOSIT,
                status=STATUS_TX_SUCCESS,
                tx_hash=Web3.to_hex(receipt["transactionHash"]),
                deposit_id=deposit_id,
            )
        )

        if deposit_id is None:
            LOGGER.warning("Deposit event not found in receipt; skipping fill check")
            return

        on_progress(ProgressEvent(step=STEP_FILL, status=STATUS_PENDING))
        self._wait_for_fill(deposit.origin_chain_id, deposit_id, on_progress)

    def _web3_for(self, chain: ChainConfig) -> Web3:
        """Return the connection for ``chain``, created and checked on first use."""
        web3 = self._web3_by_chain.get(chain.chain_id)
        if web3 is None:
            web3 = self._web3_factory(chain.ensure_rpc_url())
            ensure_web3_connected(web3, expected_chain_id=chain.chain_id)
            self._web3_by_chain[chain.chain_id] = web3
        return web3

    def _ensure_allowance(self, web3: Web3, deposit: DepositParams, on_progress: ProgressCallback) -> None:
        allowance = allowance_of(web3, deposit.input_token, self.address, deposit.spoke_pool_address)
        if allowance >= deposit.input_amount:
            LOGGER.debug("Allowance %s covers input amount %s", allowance, deposit.input_amount)
            return

        on_progress(ProgressEvent(step=STEP_APPROVE, status=STATUS_PENDING))
        token = get_contract(web3, deposit.input_token)
        receipt = self._send(web3, token.functions.approve(deposit.spoke_pool_address, deposit.input_amount))
        on_progress(
            ProgressEvent(
                step=STEP_APPROVE,
                status=STATUS_TX_SUCCESS,
                tx_hash=Web3.to_hex(receipt["transactionHash"]),
            )
        )

    def _send(self, web3: Web3, call: Any, *, value: int = 0) -> Mapping[str, Any]:
        tx = call.build_transaction(
            {
                "from": self.address,
                "value": value,
                "nonce": web3.eth.get_transaction_count(self.address),
                "chainId": web3.eth.chain_id,
            }
        )
        signed = self.account.sign_transaction(tx)
        tx_hash = web3.eth.send_raw_transaction(signed.raw_transaction)
        LOGGER.debug("Broadcast transaction %s", Web3.to_hex(tx_hash))

        receipt = web3.eth.wait_for_transaction_receipt(tx_hash)
        if receipt["status"] != 1:
            raise RuntimeError(f"Transaction {Web3.to_hex(tx_hash)} reverted in block {receipt['blockNumber']}")
        return receipt

    def _wait_for_fill(self, origin_chain_id: int, deposit_id: int, on_progress: ProgressCallback) -> None:
        for attempt in range(1, self._fill_check_attempts + 1):
            try:
                payload = fetch_deposit_status(self.config, origin_chain_id, deposit_id, session=self.session)
            except (requests.RequestException, ValueError) as exc:
                LOGGER.debug("Fill check %s failed: %s", attempt, exc)
            else:
                if payload["status"].lower() in FILLED_STATUSES:
                    on_progress(
                        ProgressEvent(
                            step=STEP_FILL,
                            status=STATUS_TX_SUCCESS,
                            tx_hash=payload.get("fillTx"),
                            deposit_id=deposit_id,
                            fill_tx_timestamp=payload.get("fillTxTimestamp"),
                            payload=payload,
                        )
                    )
                    return
            if attempt < self._fill_check_attempts:
                self._sleep(self._fill_check_interval)


def _extract_deposit_id(spoke_pool: Contract, receipt: Mapping[str, Any]) -> Optional[int]:
    for event_name in ("FundsDeposited", "V3FundsDeposited"):
        event = getattr(spoke_pool.events, event_name)()
        logs = event.process_receipt(receipt, errors=DISCARD)
        if logs:
            return int(logs[0]["args"]["depositId"])
    return None


__all__ = [
    "AcrossClient",
    "DepositParams",
    "FeeBreakdown",
    "ProgressCallback",
    "ProgressEvent",
    "Quote",
    "STATUS_PENDING",
    "STATUS_TX_SUCCESS",
    "STEP_APPROVE",
    "STEP_DEPOSIT",
    "STEP_FILL",
    "ZERO_ADDRESS",
    "parse_suggested_fees",
]
