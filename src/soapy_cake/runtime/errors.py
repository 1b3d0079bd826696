"""
SoapyCake Error Model

This module provides the error handling framework for the CAKE client.
Every remote-call failure surfaces as a RequestFailed (or one of its
subclasses) carrying the request path, the outbound envelope and whatever
response body was received.
"""

from __future__ import annotations
from typing import Optional, Dict, Any
from enum import IntEnum


class ErrorCode(IntEnum):
    """Error codes used across the client."""

    UNKNOWN = 1

    # Configuration errors (100-199)
    CONFIGURATION = 100
    MISSING_CREDENTIAL = 101
    WRITE_DISABLED = 102
    UNKNOWN_OPERATION = 103

    # Remote call errors (200-299)
    REQUEST_FAILED = 200
    CONNECTION_FAILED = 201
    TIMEOUT = 202
    RATE_LIMITED = 203
    HTTP_ERROR = 204
    REMOTE_FAULT = 205
    INVALID_XML = 206

    # Usage errors (300-399)
    BATCHED_USAGE = 300


class SoapyCakeError(Exception):
    """
    Base class for all client errors.

    Carries a message, an error code, optional details and the
    underlying exception that caused it.
    """

    default_code = ErrorCode.UNKNOWN

    def __init__(self, message: str, code: Optional[ErrorCode] = None,
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        """
        Initialize an error.

        Args:
            message: Error message
            code: Error code (defaults to the class default)
            details: Additional error details
            cause: Underlying exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.code = code if code is not None else self.default_code
        self.details = details or {}
        self.cause = cause

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        result: Dict[str, Any] = {
            "code": self.code.value,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        if self.cause:
            result["cause"] = str(self.cause)
        return result


class ConfigurationError(SoapyCakeError):
    """Missing credentials, unknown operations or writes while write-disabled."""

    default_code = ErrorCode.CONFIGURATION


class BatchedUsageError(SoapyCakeError):
    """Invalid batched method name or caller-supplied pagination parameters."""

    default_code = ErrorCode.BATCHED_USAGE


class RequestFailed(SoapyCakeError):
    """
    A remote call failed.

    This is the single error shape surfaced to callers for remote-call
    failures. ``request_path``, ``request_body`` and ``response_body`` are
    attached once, by the client, through :meth:`enrich`.
    """

    default_code = ErrorCode.REQUEST_FAILED

    def __init__(self, message: str, request_path: Optional[str] = None,
                 request_body: Optional[str] = None, response_body: Optional[str] = None,
                 code: Optional[ErrorCode] = None, details: Optional[Dict[str, Any]] = None,
                 cause: Optional[Exception] = None):
        super().__init__(message, code, details, cause)
        self.request_path = request_path
        self.request_body = request_body
        self.response_body = response_body

    def enrich(self, request_path: str, request_body: str,
               response_body: Optional[str] = None) -> "RequestFailed":
        """
        Build a copy of this error with request context attached.

        The concrete class is kept so retry classification still applies.
        A response body already carried by this error wins over the one
        passed in.
        """
        enriched = self._copy()
        enriched.request_path = request_path
        enriched.request_body = request_body
        enriched.response_body = self.response_body or response_body
        enriched.cause = self.cause or self
        return enriched

    def _copy(self) -> "RequestFailed":
        return type(self)(
            self.message,
            request_path=self.request_path,
            request_body=self.request_body,
            response_body=self.response_body,
            code=self.code,
            details=dict(self.details),
            cause=self.cause,
        )

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        for key in ("request_path", "request_body", "response_body"):
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        return result


class RateLimitError(RequestFailed):
    """CAKE refused the call because of throttling."""

    default_code = ErrorCode.RATE_LIMITED


class TransportError(RequestFailed):
    """Connection failure or timeout talking to CAKE."""

    default_code = ErrorCode.CONNECTION_FAILED


class HTTPFailure(RequestFailed):
    """CAKE answered with a non-2xx HTTP status."""

    default_code = ErrorCode.HTTP_ERROR

    def __init__(self, message: str, status_code: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.status_code = status_code

    def _copy(self) -> "HTTPFailure":
        copy = super()._copy()
        copy.status_code = self.status_code
        return copy


class ErrorHandler:
    """
    Utility class for categorizing errors.
    """

    RETRYABLE = (RateLimitError, TransportError)

    @staticmethod
    def is_retryable(error: Exception) -> bool:
        """
        Check if an error is retryable.

        Only throttling and transport-level failures are retried. HTTP
        failures, SOAP faults and configuration errors are terminal.

        Args:
            error: Exception to check

        Returns:
            True if the error should be retried
        """
        return isinstance(error, ErrorHandler.RETRYABLE)


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
