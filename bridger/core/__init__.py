"""Core domain logic for the bridge automation."""

from .across import AcrossClient, ProgressEvent, Quote
from .execution import ExecutionDriver, ExecutionResult, execute_operation
from .history import HistoryRecorder, load_history
from .orchestrator import BridgeRunner
from .quotes import request_quote
from .routes import NotSupportedError, Route, build_route, list_routes, resolve_decimals, resolve_token_address
from .status import poll_deposit_status
from .thresholds import check_thresholds, quote_meets_thresholds

__all__ = [
    "AcrossClient",
    "BridgeRunner",
    "ExecutionDriver",
    "ExecutionResult",
    "HistoryRecorder",
    "NotSupportedError",
    "ProgressEvent",
    "Quote",
    "Route",
    "build_route",
    "check_thresholds",
    "execute_operation",
    "list_routes",
    "load_history",
    "poll_deposit_status",
    "quote_meets_thresholds",
    "request_quote",
    "resolve_decimals",
    "resolve_token_address",
]
