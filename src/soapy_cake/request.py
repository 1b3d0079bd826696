"""
CAKE request descriptor and SOAP envelope builder.
"""

from __future__ import annotations
import xml.etree.ElementTree as ET
from datetime import date, datetime
from enum import IntEnum
from typing import Any, Dict, Optional

from .const import translate_const
from .time_converter import TimeConverter


SOAP_ENV_NS = "http://www.w3.org/2003/05/soap-envelope"

# Services whose result is a single element rather than a collection
SHORT_RESPONSE_SERVICES = frozenset({"addedit", "track", "signup"})


class Request:
    """
    A single call to a CAKE operation.

    ``api_key`` and ``time_converter`` are set by the client when the request
    is dispatched; ``xml`` can only be built after that.
    """

    def __init__(
        self,
        role: str,
        service: str,
        method: str,
        version: int,
        params: Optional[Dict[str, Any]] = None,
        read_only: bool = True,
        response: Optional[str] = None,
    ):
        """
        Initialize a request.

        Args:
            role: API role, e.g. "admin"
            service: CAKE service, e.g. "export"
            method: Remote operation name, e.g. "offers"
            version: API version of the operation
            params: Operation parameters
            read_only: False for operations that change data in CAKE
            response: Canned response body; skips the network when set
        """
        self.role = role
        self.service = service
        self.method = method
        self.version = version
        self.params = dict(params or {})
        self.read_only = read_only
        self.response = response
        self.api_key: Optional[str] = None
        self.time_converter: Optional[TimeConverter] = None

    @property
    def short_response(self) -> bool:
        return self.service in SHORT_RESPONSE_SERVICES

    @property
    def namespace(self) -> str:
        return f"http://cakemarketing.com/{self._role_path}/{self.version}/"

    @property
    def path(self) -> str:
        return f"/{self._role_path}/{self.version}/{self.service}.asmx"

    @property
    def _role_path(self) -> str:
        return "api" if self.role == "admin" else self.role

    @property
    def xml(self) -> str:
        """Serialize the request into a SOAP 1.2 envelope."""
        if not self.api_key or self.time_converter is None:
            raise RuntimeError("Request has not been dispatched (api_key/time_converter missing)")

        envelope = ET.Element("env:Envelope", {"xmlns:env": SOAP_ENV_NS, "xmlns:cake": self.namespace})
        ET.SubElement(envelope, "env:Header")
        body = ET.SubElement(envelope, "env:Body")
        call = ET.SubElement(body, f"cake:{self.method}")

        ET.SubElement(call, "cake:api_key").text = self.api_key
        for key, value in self.params.items():
            ET.SubElement(call, f"cake:{key}").text = self.format_param(key, value)

        ET.indent(envelope)
        return ET.tostring(envelope, encoding="unicode")

    def format_param(self, key: str, value: Any) -> Optional[str]:
        """
        Render a parameter value as CAKE expects it.

        Raises:
            ValueError: For symbolic ids CAKE does not know
        """
        if value is None:
            return None
        if isinstance(value, (datetime, date)):
            return self.time_converter.to_remote(value)
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, IntEnum):
            return str(int(value))
        if key.endswith("_date") and isinstance(value, str):
            return self.time_converter.to_remote(datetime.fromisoformat(value))
        return str(translate_const(key, value))

    def __str__(self) -> str:
        return f"{self.role}:{self.service}:{self.method}:{self.version} {self.params}"

    def __repr__(self) -> str:
        return f"Request({self.role!r}, {self.service!r}, {self.method!r}, version={self.version})"


__all__ = ["Request", "SOAP_ENV_NS", "SHORT_RESPONSE_SERVICES"]
