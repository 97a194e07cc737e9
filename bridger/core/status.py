"""Deposit status polling against the Across API."""

from __future__ import annotations

import time
from typing import Any, Callable, Dict, Optional

import requests

from bridger.config import BridgeConfig
from bridger.core.utils import get_logger

LOGGER = get_logger("bridger.status")

FILLED_STATUSES = frozenset({"filled", "success", "fill"})
FAILED_STATUSES = frozenset({"failed"})


def fetch_deposit_status(
    config: BridgeConfig,
    origin_chain_id: int,
    deposit_id: int,
    *,
    session: Optional[requests.Session] = None,
) -> Dict[str, Any]:
    """Return the status payload for a deposit.

    Raises ``requests.RequestException`` on transport or HTTP errors and
    ``ValueError`` when the body is not a JSON object with a ``status`` field.
    """
    http = session or requests
    response = http.get(
        config.api_urls.deposit_status,
        params={"originChainId": int(origin_chain_id), "depositId": int(deposit_id)},
        timeout=config.options.api_timeout,
    )
    response.raise_for_status()
    payload = response.json()
    if not isinstance(payload, dict) or not isinstance(payload.get("status"), str):
        raise ValueError(f"Malformed deposit status response: {payload!r}")
    return payload


def poll_deposit_status(
    config: BridgeConfig,
    origin_chain_id: int,
    deposit_id: int,
    *,
    session: Optional[requests.Session] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    """Poll until the deposit is filled or failed, or the attempt budget runs out.

    Returns ``True`` only for a confirmed fill. Request errors are retried like
    an in-progress status unless ``monitoring.max_consecutive_errors`` is set.
    """
    monitoring = config.monitoring
    interval = monitoring.status_polling_interval_ms / 1000
    consecutive_errors = 0

    LOGGER.info("Polling status for deposit ID: %s", deposit_id)

    for attempt in range(1, monitoring.max_polling_attempts + 1):
        try:
            payload = fetch_deposit_status(config, origin_chain_id, deposit_id, session=session)
        except (requests.RequestException, ValueError) as exc:
            consecutive_errors += 1
            LOGGER.warning("Error polling deposit status (attempt %s): %s", attempt, exc)
            limit = monitoring.max_consecutive_errors
            if limit is not None and consecutive_errors >= limit:
                LOGGER.error(
                    "Status endpoint failed %s times in a row; giving up on deposit %s",
                    consecutive_errors,
                    deposit_id,
                )
                return False
        else:
            consecutive_errors = 0
            status = payload["status"].lower()
            LOGGER.info("Deposit status (attempt %s): %s", attempt, status)

            if status in FILLED_STATUSES:
                LOGGER.info("Deposit successfully completed!")
                return True
            if status in FAILED_STATUSES:
                LOGGER.error("Deposit failed!")
                return False
            LOGGER.info("Deposit still in progress. Waiting %s seconds for next check...", interval)

        if attempt < monitoring.max_polling_attempts:
            sleep(interval)

    LOGGER.warning("Exceeded maximum polling attempts. Please check the deposit status manually.")
    return False


__all__ = ["FAILED_STATUSES", "FILLED_STATUSES", "fetch_deposit_status", "poll_deposit_status"]
