"""
Error recovery components for the CAKE client.

Provides retry policies used by the client to ride out throttling and
transient transport failures.
"""

from .retry import RetryPolicy, ExponentialBackoff

__all__ = [
    "RetryPolicy",
    "ExponentialBackoff",
]
