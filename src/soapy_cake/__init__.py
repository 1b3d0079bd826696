"""
SoapyCake - Python client for the CAKE SOAP API

Builds SOAP envelopes for CAKE operations, runs them over HTTPS with
retries, decodes the XML responses into records and converts timestamps
between UTC and the CAKE instance's time zone.
"""

from .admin import Admin, OperationSpec, OPERATIONS
from .admin_batched import AdminBatched, BatchedRequest, BatchedResult, BATCHED_METHODS
from .client import Client, ClientConfig, resolve_option
from .performance import SessionCache, default_session_cache
from .recovery import RetryPolicy, ExponentialBackoff
from .request import Request
from .response import Response, decode_response, count_records
from .runtime.errors import *
from .time_converter import TimeConverter

__version__ = "1.0.0"
__all__ = [
    # Clients
    "Client",
    "ClientConfig",
    "resolve_option",
    "Admin",
    "AdminBatched",

    # Operations
    "OperationSpec",
    "OPERATIONS",
    "BatchedRequest",
    "BatchedResult",
    "BATCHED_METHODS",

    # Codec
    "Request",
    "Response",
    "decode_response",
    "count_records",
    "TimeConverter",

    # Transport and recovery
    "SessionCache",
    "default_session_cache",
    "RetryPolicy",
    "ExponentialBackoff",

    # Errors
    "ErrorCode",
    "SoapyCakeError",
    "ConfigurationError",
    "BatchedUsageError",
    "RequestFailed",
    "RateLimitError",
    "TransportError",
    "HTTPFailure",
    "ErrorHandler",
]
