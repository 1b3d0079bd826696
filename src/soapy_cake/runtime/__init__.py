"""
Runtime components for the CAKE client.
"""

from .errors import *

__all__ = [
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
