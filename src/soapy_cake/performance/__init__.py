"""
Transport resource management for the CAKE client.
"""

from .pool import SessionCache, PoolClosed, default_session_cache

__all__ = [
    "SessionCache",
    "PoolClosed",
    "default_session_cache",
]
