"""
Batched access to CAKE list operations.

CAKE caps how many rows a list operation returns per call. The batched
wrapper hides that: it pages through an operation with ``start_at_row`` /
``row_limit`` and hands the caller one lazy stream of records.
"""

from __future__ import annotations
import logging
from typing import Any, Dict, Iterator, Optional

from .admin import Admin
from .response import count_records
from .runtime.errors import BatchedUsageError


logger = logging.getLogger(__name__)

# Admin operations that accept start_at_row / row_limit and return rows
BATCHED_METHODS = frozenset({
    "advertisers",
    "affiliates",
    "campaigns",
    "offers",
    "creatives",
    "clicks",
    "conversions",
    "events",
    "conversion_changes",
})

PAGING_PARAMS = ("start_at_row", "row_limit")


def check_params(params: Dict[str, Any]) -> None:
    """
    Reject caller-supplied pagination parameters.

    Raises:
        BatchedUsageError: If ``start_at_row`` or ``row_limit`` is set
    """
    if any(key in params for key in PAGING_PARAMS):
        raise BatchedUsageError("Cannot set row_limit/start_at_row in batched mode!")


class BatchedRequest:
    """
    Pagination cursor and driver for one pass over an operation.

    ``offset`` is the 1-based row the next page starts at. Iterating fetches
    a page only once the previous page's rows have been consumed, and stops
    after the first page holding fewer than ``limit`` rows. In raw-XML mode
    each page's XML is yielded as one element.
    """

    LIMIT = 500

    def __init__(self, admin: Admin, method: str, params: Dict[str, Any], limit: Optional[int] = None):
        check_params(params)
        limit = self.LIMIT if limit is None else limit
        if limit < 1:
            raise BatchedUsageError(f"Invalid page size {limit}")
        self.admin = admin
        self.method = method
        self.params = dict(params)
        self.limit = limit
        self.offset = 1
        self.rows_seen = 0

    def __iter__(self) -> Iterator[Any]:
        xml_response = self.admin.xml_response
        while True:
            page = self._fetch_page()
            if xml_response:
                size = count_records(page)
                yield page
            else:
                rows = list(page)
                size = len(rows)
                yield from rows

            self.offset += self.limit
            self.rows_seen += size
            if size < self.limit:
                logger.debug(f"{self.method}: exhausted after {self.rows_seen} row(s)")
                return

    def _fetch_page(self) -> Any:
        page_params = {**self.params, "start_at_row": self.offset, "row_limit": self.limit}
        logger.debug(f"{self.method}: fetching rows {self.offset}..{self.offset + self.limit - 1}")
        return getattr(self.admin, self.method)(page_params)


class BatchedResult:
    """
    Re-iterable view over a batched operation.

    Each ``iter()`` starts a fresh pass from the first row; within one pass
    no page is fetched twice.
    """

    def __init__(self, admin: Admin, method: str, params: Dict[str, Any], limit: Optional[int] = None):
        check_params(params)
        self.admin = admin
        self.method = method
        self.params = dict(params)
        self.limit = limit

    def __iter__(self) -> Iterator[Any]:
        return iter(BatchedRequest(self.admin, self.method, self.params, self.limit))

    def __repr__(self) -> str:
        return f"BatchedResult({self.method!r}, {self.params!r}, limit={self.limit})"


def _batched(name: str):
    def call(self: "AdminBatched", params: Optional[Dict[str, Any]] = None,
             page_size: Optional[int] = None) -> BatchedResult:
        return self.batched_call(name, params, page_size)

    call.__name__ = name
    call.__doc__ = f"Stream every row of ``{name}``, {BatchedRequest.LIMIT} rows per call by default."
    return call


class AdminBatched:
    """
    Admin operations as lazy, unbounded record streams.

    Example:
        ```python
        batched = AdminBatched(domain="cake.example.com", api_key="secret", time_zone="UTC")
        for offer in batched.offers({"advertiser_id": 1}):
            ...
        ```
    """

    def __init__(self, admin: Optional[Admin] = None, **opts: Any):
        """
        Initialize the batched wrapper.

        Args:
            admin: Admin to page through; built from ``opts`` when omitted
            **opts: Client options (see Client)
        """
        self.admin = admin or Admin(**opts)

    def batched_call(self, method: str, params: Optional[Dict[str, Any]] = None,
                     page_size: Optional[int] = None) -> BatchedResult:
        """
        Page through an admin operation.

        Args:
            method: Operation name, one of BATCHED_METHODS
            params: Operation parameters, without start_at_row / row_limit
            page_size: Rows per call, defaults to BatchedRequest.LIMIT

        Returns:
            A lazy iterable of records (raw XML pages in xml_response mode)

        Raises:
            BatchedUsageError: For other operations or paging parameters
        """
        if method not in BATCHED_METHODS:
            raise BatchedUsageError(f"Invalid method {method}")
        if page_size is not None and page_size < 1:
            raise BatchedUsageError(f"Invalid page size {page_size}")
        return BatchedResult(self.admin, method, params or {}, page_size)

    advertisers = _batched("advertisers")
    affiliates = _batched("affiliates")
    campaigns = _batched("campaigns")
    offers = _batched("offers")
    creatives = _batched("creatives")
    clicks = _batched("clicks")
    conversions = _batched("conversions")
    events = _batched("events")
    conversion_changes = _batched("conversion_changes")


__all__ = ["AdminBatched", "BatchedRequest", "BatchedResult", "BATCHED_METHODS"]
