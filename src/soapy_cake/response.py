"""
CAKE response decoding.

Turns a SOAP response body into either the raw XML text or Python records.
Tag names lose their namespace and are normalized to snake_case, and leaf
values are typed: CAKE timestamps become aware UTC datetimes, "true" and
"false" become booleans and numeric ``*_id`` fields become ints.
"""

from __future__ import annotations
import logging
import re
import xml.etree.ElementTree as ET
from typing import Any, Dict, List, Optional, Union

from .runtime.errors import ErrorCode, RateLimitError, RequestFailed
from .time_converter import TimeConverter, is_remote_timestamp


logger = logging.getLogger(__name__)

XSI_NIL = "{http://www.w3.org/2001/XMLSchema-instance}nil"

RATE_LIMIT_MESSAGE = "Restricted"

# Result children that describe the call rather than hold records
METADATA_FIELDS = frozenset({"success", "message", "row_count", "summary"})

_FIRST_CAP = re.compile(r"(.)([A-Z][a-z]+)")
_ALL_CAP = re.compile(r"([a-z0-9])([A-Z])")

Record = Dict[str, Any]


def strip_ns(tag: str) -> str:
    """Remove namespace URI prefix: ``{http://...}Name`` -> ``Name``."""
    if tag.startswith("{"):
        return tag.split("}", 1)[1]
    return tag


def snake_case(name: str) -> str:
    """``CountryCode`` -> ``country_code``; snake_case names pass through."""
    return _ALL_CAP.sub(r"\1_\2", _FIRST_CAP.sub(r"\1_\2", name)).lower()


class Response:
    """
    A single CAKE response body.

    Errors reported by CAKE (SOAP faults, ``success=false``) are raised
    before any conversion, whichever shape the caller asked for.
    """

    def __init__(self, body: str, short_response: bool = False,
                 time_converter: Optional[TimeConverter] = None):
        self.body = body
        self.short_response = short_response
        self.time_converter = time_converter
        self._root: Optional[ET.Element] = None

    def to_xml(self) -> str:
        """Return the body unmodified once it has been checked for errors."""
        self.check_errors()
        return self.body

    def to_records(self) -> Union[List[Record], Record]:
        """
        Decode the body into records.

        Short responses (addedit/track/signup services) decode to a single
        dict; everything else decodes to a list, with a single record
        giving a one-element list and an empty collection an empty list.
        """
        self.check_errors()
        result = self._result()
        if self.short_response:
            return self._element_value(result) or {}
        return [self._element_value(row) for row in self._rows(result)]

    def count(self) -> int:
        """Number of records in the body, without decoding them."""
        self.check_errors()
        return len(self._rows(self._result()))

    def check_errors(self) -> None:
        """
        Raise if CAKE reported a failure.

        Raises:
            RateLimitError: If CAKE throttled the call
            RequestFailed: For SOAP faults, unsuccessful results and bad XML
        """
        root = self._parse()

        fault = self._find(root, "Fault")
        if fault is not None:
            reason = self._find(fault, "Text")
            message = reason.text if reason is not None and reason.text else "Unknown error"
            raise RequestFailed(message, response_body=self.body, code=ErrorCode.REMOTE_FAULT)

        result = self._result()
        success = self._child(result, "success")
        if success is not None and (success.text or "").strip() == "true":
            return

        message = self._error_message(root)
        if message == RATE_LIMIT_MESSAGE:
            raise RateLimitError(message, response_body=self.body)
        raise RequestFailed(message, response_body=self.body)

    def _parse(self) -> ET.Element:
        if self._root is None:
            try:
                self._root = ET.fromstring(self.body)
            except ET.ParseError as e:
                raise RequestFailed(
                    f"Invalid XML response: {e}",
                    response_body=self.body,
                    code=ErrorCode.INVALID_XML,
                    cause=e,
                ) from e
        return self._root

    def _result(self) -> ET.Element:
        """Locate ``Body > *Response > *Result``."""
        body = self._find(self._parse(), "Body")
        response = next(iter(body), None) if body is not None else None
        result = next(iter(response), None) if response is not None else None
        if result is None:
            raise RequestFailed(
                "Unexpected response structure",
                response_body=self.body,
                code=ErrorCode.INVALID_XML,
            )
        return result

    @staticmethod
    def _rows(result: ET.Element) -> List[ET.Element]:
        for child in result:
            if snake_case(strip_ns(child.tag)) not in METADATA_FIELDS:
                return list(child)
        return []

    def _error_message(self, root: ET.Element) -> str:
        for name in ("message", "Text"):
            element = self._find(root, name)
            if element is not None and element.text and element.text.strip():
                return element.text.strip()
        return "Unknown error"

    def _element_value(self, element: ET.Element, key: str = "") -> Any:
        if element.get(XSI_NIL) == "true":
            return None

        children = list(element)
        if not children:
            text = (element.text or "").strip()
            return self._leaf_value(key, text) if text else None

        record: Record = {}
        repeated = set()
        for child in children:
            name = snake_case(strip_ns(child.tag))
            value = self._element_value(child, name)
            if name not in record:
                record[name] = value
                continue
            if name not in repeated:
                record[name] = [record[name]]
                repeated.add(name)
            record[name].append(value)
        return record

    def _leaf_value(self, key: str, text: str) -> Any:
        if is_remote_timestamp(text) and self.time_converter is not None:
            return self.time_converter.from_remote(text)
        if text in ("true", "false"):
            return text == "true"
        if key.endswith("_id") and text.lstrip("-").isdigit():
            return int(text)
        return text

    @staticmethod
    def _find(element: ET.Element, name: str) -> Optional[ET.Element]:
        for candidate in element.iter():
            if strip_ns(candidate.tag) == name:
                return candidate
        return None

    @staticmethod
    def _child(element: ET.Element, name: str) -> Optional[ET.Element]:
        for candidate in element:
            if strip_ns(candidate.tag) == name:
                return candidate
        return None


def decode_response(
    body: str,
    want_raw: bool,
    time_converter: Optional[TimeConverter],
    short_response: bool = False,
) -> Union[str, List[Record], Record]:
    """
    Decode a CAKE response into the shape the caller asked for.

    Args:
        body: Raw response body
        want_raw: Return the XML text instead of records
        time_converter: Converter for timestamp fields
        short_response: The operation returns a single result element

    Returns:
        The raw XML, a list of records, or one record for short responses
    """
    response = Response(body, short_response, time_converter)
    if want_raw:
        return response.to_xml()
    records = response.to_records()
    logger.debug(f"Decoded {len(records) if isinstance(records, list) else 1} record(s)")
    return records


def count_records(body: str) -> int:
    """Count the records of a raw XML page."""
    return Response(body).count()


__all__ = [
    "Response",
    "decode_response",
    "count_records",
    "snake_case",
    "strip_ns",
    "RATE_LIMIT_MESSAGE",
]
