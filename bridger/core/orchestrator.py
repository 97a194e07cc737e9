"""Sequential runner for the configured bridge operations."""

from __future__ import annotations

import time
from typing import Callable, List, Optional, Tuple

import requests

from bridger.config import BridgeConfig, BridgeOperation
from bridger.core.across import AcrossClient, Quote
from bridger.core.execution import ExecutionResult, execute_operation
from bridger.core.history import HistoryRecorder
from bridger.core.quotes import request_quote
from bridger.core.routes import describe_operation
from bridger.core.status import poll_deposit_status
from bridger.core.thresholds import quote_meets_thresholds
from bridger.core.utils import get_logger

LOGGER = get_logger("bridger.orchestrator")

THRESHOLD_REJECTED = "Quote did not meet thresholds"
AUTO_EXECUTE_DISABLED = "Auto-execute disabled"


class BridgeRunner:
    """Quote, check, execute, poll and record each enabled operation in order."""

    def __init__(
        self,
        *,
        config: BridgeConfig,
        client: AcrossClient,
        recorder: Optional[HistoryRecorder] = None,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.config = config
        self.client = client
        self.recorder = recorder or HistoryRecorder(config)
        self.session = session
        self._sleep = sleep

    def run(self) -> List[bool]:
        """Run every enabled operation; returns one success flag per operation."""
        operations = self.config.enabled_operations
        if not operations:
            LOGGER.warning("No enabled bridge operations found. Please enable at least one operation.")
            return []

        LOGGER.info("Found %s enabled operations:", len(operations))
        for idx, operation in enumerate(operations, start=1):
            LOGGER.info("%s. %s: %s", idx, operation.name, self._describe(operation))

        outcomes = [self.run_operation(operation) for operation in operations]
        LOGGER.info(
            "All operations completed (%s succeeded, %s failed).",
            sum(outcomes),
            len(outcomes) - sum(outcomes),
        )
        return outcomes

    def run_operation(self, operation: BridgeOperation) -> bool:
        """Run one operation; any failure is recorded and reported as ``False``."""
        quote: Optional[Quote] = None
        try:
            LOGGER.info("-" * 52)
            LOGGER.info("STARTING BRIDGE OPERATION: %s", operation.name)
            LOGGER.info("%s", describe_operation(self.config, operation))
            LOGGER.info("-" * 52)
            self._notify("on_start", "Starting operation %s", operation.name)

            quote, accepted = self._quote_until_accepted(operation)
            if not accepted:
                LOGGER.info("Quote does not meet thresholds. Operation cancelled.")
                self._notify("on_threshold_failure", "Thresholds not met for operation %s", operation.name)
                self.recorder.record(operation, ExecutionResult.failure(THRESHOLD_REJECTED), quote)
                return False

            if not self.config.options.auto_execute:
                LOGGER.info("Quote meets thresholds and is ready to execute.")
                LOGGER.info("Auto-execute is disabled; set options.auto_execute to true to send transactions.")
                self.recorder.record(operation, ExecutionResult.failure(AUTO_EXECUTE_DISABLED), quote)
                return False

            self._notify("on_execution_start", "Starting execution of operation %s", operation.name)
            result = execute_operation(self.config, self.client, quote, operation)

            if result.deposit_id is not None and not result.success:
                if poll_deposit_status(
                    self.config,
                    operation.origin_chain_id,
                    result.deposit_id,
                    session=self.session,
                    sleep=self._sleep,
                ):
                    result.success = True

            self.recorder.record(operation, result, quote)
            self._notify(
                "on_execution_complete",
                "Operation %s completed with status: %s",
                operation.name,
                "Success" if result.success else "Failed",
            )
            return result.success
        except Exception as exc:
            LOGGER.error("Error executing bridge operation %s: %s", operation.name, exc)
            self._notify("on_error", "Error in operation %s: %s", operation.name, exc)
            self.recorder.record(operation, ExecutionResult.failure(str(exc)), quote)
            return False

    def _quote_until_accepted(self, operation: BridgeOperation) -> Tuple[Quote, bool]:
        retry = self.config.thresholds.retry
        max_attempts = retry.max_attempts if retry.enabled else 1

        attempt = 1
        while True:
            quote = request_quote(self.config, self.client, operation)
            if quote_meets_thresholds(self.config, quote, operation):
                return quote, True
            if attempt >= max_attempts:
                return quote, False

            LOGGER.info(
                "Quote rejected (attempt %s/%s); retrying in %s minutes",
                attempt,
                max_attempts,
                retry.delay_minutes,
            )
            self._sleep(retry.delay_minutes * 60)
            attempt += 1

    def _describe(self, operation: BridgeOperation) -> str:
        try:
            return describe_operation(self.config, operation)
        except (ArithmeticError, ValueError) as exc:
            LOGGER.warning("Could not describe operation %s: %s", operation.name, exc)
            return operation.name

    def _notify(self, event: str, message: str, *args: object) -> None:
        if getattr(self.config.monitoring.notifications, event):
            LOGGER.info("Notification: " + message, *args)


__all__ = ["AUTO_EXECUTE_DISABLED", "BridgeRunner", "THRESHOLD_REJECTED"]
