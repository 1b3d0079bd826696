"""
CAKE SOAP client.

Executes a single CAKE operation end to end: write gate, envelope
serialization, HTTPS POST with retries, response decoding and error
enrichment.
"""

from __future__ import annotations
import logging
import os
import re
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Union

import requests

from .performance.pool import SessionCache, default_session_cache
from .recovery.retry import ExponentialBackoff, RetryPolicy
from .request import Request
from .response import Record, decode_response
from .runtime.errors import (
    ConfigurationError,
    ErrorCode,
    ErrorHandler,
    HTTPFailure,
    RequestFailed,
    TransportError,
)
from .time_converter import TimeConverter


ENV_PREFIX = "CAKE_"

# Seconds; applies to both connecting and reading
NET_TIMEOUT = 600

HEADERS = {"Content-Type": "application/soap+xml;charset=UTF-8"}

API_KEY_PLACEHOLDER = "{{{ INSERT API KEY }}}"

TRUTHY = ("1", "true", "yes", "on")


def resolve_option(opts: Mapping[str, Any], key: str, default: Any = None) -> Any:
    """
    Resolve one option: explicit value, then ``CAKE_<KEY>`` environment
    variable, then the default.
    """
    value = opts.get(key)
    if value is not None:
        return value
    return os.environ.get(f"{ENV_PREFIX}{key.upper()}", default)


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in TRUTHY
    return bool(value)


@dataclass(frozen=True)
class ClientConfig:
    """Configuration for the CAKE client."""

    domain: str
    api_key: str
    retry_count: int = 4
    write_enabled: bool = False
    time_zone: Optional[str] = None
    time_offset: Optional[int] = None
    xml_response: bool = False
    log_curl: bool = False
    response: Optional[str] = None

    @classmethod
    def resolve(cls, opts: Optional[Mapping[str, Any]] = None) -> "ClientConfig":
        """
        Build a config from explicit options with environment fallback.

        Raises:
            ConfigurationError: If the domain or API key is missing
        """
        opts = opts or {}
        domain = resolve_option(opts, "domain")
        if not domain:
            raise ConfigurationError("Cake domain missing", ErrorCode.MISSING_CREDENTIAL)
        api_key = resolve_option(opts, "api_key")
        if not api_key:
            raise ConfigurationError("Cake API key missing", ErrorCode.MISSING_CREDENTIAL)

        time_offset = resolve_option(opts, "time_offset")
        return cls(
            domain=domain,
            api_key=api_key,
            retry_count=int(resolve_option(opts, "retry_count", 4)),
            write_enabled=resolve_option(opts, "write_enabled") in ("yes", True),
            time_zone=resolve_option(opts, "time_zone"),
            time_offset=int(time_offset) if time_offset not in (None, "") else None,
            xml_response=_as_bool(resolve_option(opts, "xml_response", False)),
            log_curl=_as_bool(resolve_option(opts, "log_curl", False)),
            response=resolve_option(opts, "response"),
        )


class Client:
    """
    CAKE SOAP client.

    Options are resolved once at construction (explicit keyword, then
    ``CAKE_<OPTION>`` environment variable, then default) and never change
    afterwards. A client holds no per-call state, so one instance can serve
    several threads as long as the underlying session is shared safely.

    Example:
        ```python
        client = Client(domain="cake.example.com", api_key="secret", time_zone="Europe/Berlin")
        request = Request("admin", "export", "offers", 6, {"offer_id": 1})
        offers = client.run(request)
        ```
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        logger: Optional[logging.Logger] = None,
        session_cache: Optional[SessionCache] = None,
        retry_policy: Optional[RetryPolicy] = None,
        **opts: Any,
    ):
        """
        Initialize the client.

        Args:
            config: Ready-made configuration; built from ``opts`` when omitted
            logger: Sink for diagnostic lines, defaults to this module's logger
            session_cache: Where to get the HTTP session, defaults to the
                process-wide cache
            retry_policy: Overrides the default 3^n backoff policy
            **opts: Options for ClientConfig.resolve (domain, api_key,
                retry_count, write_enabled, time_zone, time_offset,
                xml_response, log_curl, response)

        Raises:
            ConfigurationError: For missing credentials or time zone
        """
        self.config = config or ClientConfig.resolve(opts)
        self.logger = logger or logging.getLogger(__name__)
        self.time_converter = TimeConverter(self.config.time_zone, self.config.time_offset)
        self.session_cache = session_cache or default_session_cache
        self.retry_policy = retry_policy or ExponentialBackoff(
            max_attempts=self.config.retry_count + 1,
            base_delay=1.0,
            factor=3.0,
            retry_on=ErrorHandler.RETRYABLE,
            logger=self.logger,
        )

    @property
    def base_url(self) -> str:
        return f"https://{self.config.domain}"

    @property
    def session(self) -> requests.Session:
        return self.session_cache.get(self.base_url)

    @property
    def xml_response(self) -> bool:
        return self.config.xml_response

    @property
    def write_enabled(self) -> bool:
        return self.config.write_enabled

    @property
    def read_only(self) -> bool:
        return not self.config.write_enabled

    def run(self, request: Request) -> Union[str, List[Record], Record]:
        """
        Execute a request.

        Args:
            request: The operation to run

        Returns:
            Raw XML when the client is in xml_response mode, otherwise the
            decoded records (one dict for short responses)

        Raises:
            ConfigurationError: If the request writes and writes are disabled
            RequestFailed: If the call failed, after retries where they apply
        """
        self._check_write_enabled(request)
        request.api_key = self.config.api_key
        request.time_converter = self.time_converter

        return self.retry_policy.execute(self._run_once, request)

    def close(self) -> None:
        """Close the HTTP session for this client's domain."""
        self.session_cache.discard(self.base_url)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def _run_once(self, request: Request) -> Union[str, List[Record], Record]:
        body = None
        try:
            body = self._response_body(request)
            return decode_response(body, self.xml_response, self.time_converter, request.short_response)
        except RequestFailed as e:
            raise e.enrich(request.path, request.xml, body) from e

    def _check_write_enabled(self, request: Request) -> None:
        if request.read_only or self.write_enabled:
            return
        raise ConfigurationError(
            "Writes not enabled (pass write_enabled=True or set CAKE_WRITE_ENABLED=yes)",
            ErrorCode.WRITE_DISABLED,
        )

    def _response_body(self, request: Request) -> str:
        return request.response or self.config.response or self._http_response(request)

    def _http_response(self, request: Request) -> str:
        self.logger.info(f"soapy_cake:request {request}")
        if self.config.log_curl:
            self._log_curl_command(request)

        try:
            response = self.session.post(
                f"{self.base_url}{request.path}",
                data=request.xml.encode("utf-8"),
                headers=HEADERS,
                timeout=(NET_TIMEOUT, NET_TIMEOUT),
            )
        except requests.exceptions.Timeout as e:
            raise TransportError(f"Request timed out: {e}", code=ErrorCode.TIMEOUT, cause=e) from e
        except (requests.exceptions.ConnectionError, requests.exceptions.ChunkedEncodingError) as e:
            raise TransportError(f"Connection failed: {e}", cause=e) from e
        except requests.exceptions.RequestException as e:
            raise RequestFailed(f"Request failed: {e}", cause=e) from e

        if not 200 <= response.status_code < 300:
            raise HTTPFailure(
                f"Request failed with HTTP {response.status_code}",
                status_code=response.status_code,
                response_body=response.text,
            )

        self.logger.debug(f"soapy_cake:response {len(response.content)} bytes from {request.path}")
        return response.text

    def _log_curl_command(self, request: Request) -> None:
        curl_headers = " ".join(f'-H "{key}: {value}"' for key, value in HEADERS.items())
        curl_body = re.sub(r">\s*<", "><", request.xml.replace("\n", ""))
        curl_body = curl_body.replace(self.config.api_key, API_KEY_PLACEHOLDER)
        self.logger.info(f"curl --data '{curl_body}' {curl_headers} {self.base_url}{request.path}")


__all__ = ["Client", "ClientConfig", "resolve_option", "NET_TIMEOUT", "HEADERS", "API_KEY_PLACEHOLDER"]
