from .factories import (
    mk_rows_xml,
    mk_offer_rows,
    mk_short_xml,
    mk_error_xml,
    mk_fault_xml,
    mk_http_response,
    rate_limited_then,
    SOAP_NS,
    XSI_NS,
)

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
