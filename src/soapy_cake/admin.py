"""
CAKE admin API.

Maps each admin operation name to the service, remote method and API
version it runs against, and exposes one method per operation on Admin.
"""

from __future__ import annotations
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from .client import Client
from .request import Request
from .runtime.errors import ConfigurationError, ErrorCode


class OperationSpec(BaseModel):
    """
    Static description of one CAKE operation.

    Attributes:
        service: CAKE service, e.g. "export"
        method: Remote method name; differs from the operation name for
            aliases such as ``affiliate_bills`` -> ``export_affiliate_bills``
        version: API version of the remote method
        read_only: False for operations that change data in CAKE
        defaults: Parameters always sent, overridable by the caller
    """

    service: str
    method: str
    version: int = Field(ge=1)
    read_only: bool = True
    defaults: Dict[str, Any] = Field(default_factory=dict)

    model_config = {"frozen": True}


def _op(service: str, method: str, version: int, read_only: bool = True, **defaults: Any) -> OperationSpec:
    return OperationSpec(service=service, method=method, version=version, read_only=read_only, defaults=defaults)


OPERATIONS: Dict[str, OperationSpec] = {
    # accounting
    "affiliate_bills": _op("accounting", "export_affiliate_bills", 2),
    "advertiser_bills": _op("accounting", "export_advertiser_bills", 2),
    "mark_affiliate_bill_as_received": _op("accounting", "mark_affiliate_bill_as_received", 1, read_only=False),
    "mark_affiliate_bill_as_paid": _op("accounting", "mark_affiliate_bill_as_paid", 1, read_only=False),
    # export
    "advertisers": _op("export", "advertisers", 6),
    "affiliates": _op("export", "affiliates", 5),
    "campaigns": _op("export", "campaigns", 7),
    "offers": _op("export", "offers", 6),
    "creatives": _op("export", "creatives", 5),
    # reports
    "campaign_summary": _op("reports", "campaign_summary", 3),
    "offer_summary": _op("reports", "offer_summary", 3),
    "affiliate_summary": _op("reports", "affiliate_summary", 3),
    "advertiser_summary": _op("reports", "advertiser_summary", 3),
    "clicks": _op("reports", "clicks", 12),
    "conversions": _op("reports", "conversions", 15, conversion_type="conversions"),
    "conversion_changes": _op("reports", "conversion_changes", 17),
    "events": _op("reports", "conversions", 15, conversion_type="events"),
    "traffic": _op("reports", "traffic_export", 1),
    "caps": _op("reports", "caps", 1),
    # get
    "verticals": _op("get", "verticals", 1),
    "countries": _op("get", "countries", 3),
    "currencies": _op("get", "currencies", 3),
    "tiers": _op("get", "affiliate_tiers", 1),
    "blacklist_reasons": _op("get", "blacklist_reasons", 1),
    # addedit
    "update_creative": _op("addedit", "creative", 2, read_only=False),
    "update_campaign": _op("addedit", "campaign", 4, read_only=False),
    "add_blacklist": _op("addedit", "blacklist", 1, read_only=False),
    # signup
    "affiliate_signup": _op("signup", "affiliate", 1, read_only=False),
}


def _operation(name: str):
    def call(self: "Admin", params: Optional[Dict[str, Any]] = None, **kwargs: Any):
        return self.invoke(name, params, **kwargs)

    spec = OPERATIONS[name]
    call.__name__ = name
    call.__doc__ = f"Run {spec.service}::{spec.method} (v{spec.version})."
    return call


class Admin:
    """
    Client for the CAKE admin role.

    Every operation takes its parameters as a dict, keyword arguments or
    both. A ``response`` parameter is not sent to CAKE; it supplies a canned
    response body instead.

    Example:
        ```python
        admin = Admin(domain="cake.example.com", api_key="secret", time_zone="Europe/Berlin")
        for offer in admin.offers(advertiser_id=1, start_at_row=1, row_limit=100):
            print(offer["offer_id"])
        ```
    """

    role = "admin"

    def __init__(self, client: Optional[Client] = None, **opts: Any):
        """
        Initialize the admin client.

        Args:
            client: Client to run requests with; built from ``opts`` when omitted
            **opts: Client options (see Client)
        """
        self.client = client or Client(**opts)

    @property
    def xml_response(self) -> bool:
        return self.client.xml_response

    def build_request(self, name: str, params: Optional[Dict[str, Any]] = None, **kwargs: Any) -> Request:
        """
        Build the request for an operation without running it.

        Raises:
            ConfigurationError: If the operation is unknown
        """
        spec = OPERATIONS.get(name)
        if spec is None:
            raise ConfigurationError(f"Unknown API call {self.role}::{name}", ErrorCode.UNKNOWN_OPERATION)

        merged = {**spec.defaults, **(params or {}), **kwargs}
        canned = merged.pop("response", None)
        return Request(
            self.role,
            spec.service,
            spec.method,
            spec.version,
            merged,
            read_only=spec.read_only,
            response=canned,
        )

    def invoke(self, name: str, params: Optional[Dict[str, Any]] = None, **kwargs: Any):
        """
        Run an operation by name.

        Args:
            name: Operation name, a key of OPERATIONS
            params: Operation parameters
            **kwargs: More parameters, merged over ``params``

        Returns:
            Raw XML, a list of records, or a single record for addedit and
            signup operations
        """
        return self.client.run(self.build_request(name, params, **kwargs))

    # accounting
    affiliate_bills = _operation("affiliate_bills")
    advertiser_bills = _operation("advertiser_bills")
    mark_affiliate_bill_as_received = _operation("mark_affiliate_bill_as_received")
    mark_affiliate_bill_as_paid = _operation("mark_affiliate_bill_as_paid")

    # export
    advertisers = _operation("advertisers")
    affiliates = _operation("affiliates")
    campaigns = _operation("campaigns")
    offers = _operation("offers")
    creatives = _operation("creatives")

    # reports
    campaign_summary = _operation("campaign_summary")
    offer_summary = _operation("offer_summary")
    affiliate_summary = _operation("affiliate_summary")
    advertiser_summary = _operation("advertiser_summary")
    clicks = _operation("clicks")
    conversions = _operation("conversions")
    conversion_changes = _operation("conversion_changes")
    events = _operation("events")
    traffic = _operation("traffic")
    caps = _operation("caps")

    # get
    verticals = _operation("verticals")
    countries = _operation("countries")
    currencies = _operation("currencies")
    tiers = _operation("tiers")
    blacklist_reasons = _operation("blacklist_reasons")

    # addedit
    update_creative = _operation("update_creative")
    update_campaign = _operation("update_campaign")
    add_blacklist = _operation("add_blacklist")

    # signup
    affiliate_signup = _operation("affiliate_signup")


__all__ = ["Admin", "OperationSpec", "OPERATIONS"]
