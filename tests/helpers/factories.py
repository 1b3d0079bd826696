"""
Test factories for CAKE response bodies and HTTP responses.

Builds SOAP bodies shaped like the ones CAKE returns so decoder, client
and batching tests share one source of fixtures.
"""

from __future__ import annotations
from typing import Any, Dict, Iterable, Optional
from unittest.mock import Mock
from xml.sax.saxutils import escape


SOAP_NS = "http://www.w3.org/2003/05/soap-envelope"
XSI_NS = "http://www.w3.org/2001/XMLSchema-instance"


def _fields(fields: Dict[str, Any]) -> str:
    parts = []
    for key, value in fields.items():
        if value is None:
            parts.append(f"<{key} />")
        elif isinstance(value, dict):
            parts.append(f"<{key}>{_fields(value)}</{key}>")
        else:
            parts.append(f"<{key}>{escape(str(value))}</{key}>")
    return "".join(parts)


def _envelope(method: str, result: str, version: int = 6) -> str:
    return (
        f'<soap:Envelope xmlns:soap="{SOAP_NS}" xmlns:xsi="{XSI_NS}">'
        f"<soap:Body>"
        f'<{method}Response xmlns="http://cakemarketing.com/api/{version}/">'
        f"<{method}Result>{result}</{method}Result>"
        f"</{method}Response>"
        f"</soap:Body>"
        f"</soap:Envelope>"
    )


def mk_rows_xml(
    rows: Iterable[Dict[str, Any]] = (),
    method: str = "Offers",
    container: str = "offers",
    row_tag: str = "offer",
    success: bool = True,
    message: str = "",
) -> str:
    """
    Build a list-operation response body.

    Args:
        rows: One dict of field -> text per row
        method: Remote method, used for the Response/Result element names
        container: Collection element name
        row_tag: Element name of each row
        success: Value of the success flag
        message: Value of the message element
    """
    rows = list(rows)
    body = "".join(f"<{row_tag}>{_fields(row)}</{row_tag}>" for row in rows)
    result = (
        f"<success>{'true' if success else 'false'}</success>"
        f"<message>{escape(message)}</message>"
        f"<row_count>{len(rows)}</row_count>"
        f"<{container}>{body}</{container}>"
    )
    return _envelope(method, result)


def mk_offer_rows(start: int, count: int) -> list:
    """Rows with consecutive offer ids, starting at ``start``."""
    return [{"offer_id": i, "offer_name": f"Offer {i}"} for i in range(start, start + count)]


def mk_short_xml(fields: Dict[str, Any], method: str = "Creative", success: bool = True,
                 message: str = "") -> str:
    """Build an addedit/signup style single-result body."""
    result = (
        f"<success>{'true' if success else 'false'}</success>"
        f"<message>{escape(message)}</message>"
        f"{_fields(fields)}"
    )
    return _envelope(method, result, version=2)


def mk_error_xml(message: str, method: str = "Offers") -> str:
    """Build a body with success=false and the given message."""
    return mk_rows_xml(method=method, success=False, message=message)


def mk_fault_xml(reason: str) -> str:
    """Build a SOAP 1.2 fault body."""
    return (
        f'<soap:Envelope xmlns:soap="{SOAP_NS}">'
        f"<soap:Body><soap:Fault>"
        f"<soap:Code><soap:Value>soap:Receiver</soap:Value></soap:Code>"
        f'<soap:Reason><soap:Text xml:lang="en">{escape(reason)}</soap:Text></soap:Reason>'
        f"</soap:Fault></soap:Body>"
        f"</soap:Envelope>"
    )


def mk_http_response(text: str = "", status_code: int = 200) -> Mock:
    """A stand-in for requests.Response."""
    response = Mock()
    response.status_code = status_code
    response.text = text
    response.content = text.encode("utf-8")
    return response


def rate_limited_then(body: str, failures: int, status_code: int = 200) -> list:
    """HTTP responses: ``failures`` throttled answers followed by ``body``."""
    restricted = mk_http_response(mk_error_xml("Restricted"), status_code)
    return [restricted] * failures + [mk_http_response(body)]


__all__ = [
    "mk_rows_xml",
    "mk_offer_rows",
    "mk_short_xml",
    "mk_error_xml",
    "mk_fault_xml",
    "mk_http_response",
    "rate_limited_then",
    "SOAP_NS",
    "XSI_NS",
]
