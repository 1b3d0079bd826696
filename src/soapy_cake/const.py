"""
Symbolic values for CAKE id parameters.

CAKE takes numeric ids for enum-like request parameters. Callers may pass
the symbolic name instead (``offer_status_id="public"``) and the request
codec translates it through these tables.
"""

from __future__ import annotations
from enum import IntEnum
from typing import Any, Dict, Type


class AccountStatus(IntEnum):
    ACTIVE = 1
    INACTIVE = 2
    PENDING = 3


class OfferStatus(IntEnum):
    PUBLIC = 1
    PRIVATE = 2
    APPLY_TO_RUN = 3
    INACTIVE = 4


class OfferType(IntEnum):
    HOSTED = 1
    HOST_N_POST = 2
    THIRD_PARTY = 3


class Currency(IntEnum):
    USD = 1
    EUR = 2
    GBD = 3
    AUD = 4
    CAD = 5


class PaymentSetting(IntEnum):
    SYSTEM_DEFAULT = 1
    OFFER_CURRENCY = 2
    AFFILIATE_CURRENCY = 3


class PriceFormat(IntEnum):
    CPA = 1
    CPC = 2
    CPM = 3
    FIXED = 4
    REVSHARE = 5


class ConversionBehaviour(IntEnum):
    SYSTEM = 0
    ADV_OFF = 1
    ADV_NO_AFF = 2
    IGNORE = 3
    NO_ADV_AFF = 4
    NO_ADV_NO_AFF = 5


class CapType(IntEnum):
    CLICK = 1
    CONVERSION = 2


class CapInterval(IntEnum):
    DISABLED = 0
    DAILY = 1
    WEEKLY = 2
    MONTHLY = 3


CONSTS: Dict[str, Type[IntEnum]] = {
    "account_status_id": AccountStatus,
    "offer_status_id": OfferStatus,
    "offer_type_id": OfferType,
    "currency_id": Currency,
    "payment_setting_id": PaymentSetting,
    "price_format_id": PriceFormat,
    "conversion_behaviour_id": ConversionBehaviour,
    "cap_type_id": CapType,
    "cap_interval_id": CapInterval,
}


def translate_const(key: str, value: Any) -> Any:
    """
    Map a symbolic parameter value to its numeric CAKE id.

    Values for keys without a table, and values that are not strings,
    are returned unchanged.

    Raises:
        ValueError: If the key has a table and the name is not in it
    """
    table = CONSTS.get(key)
    if table is None or not isinstance(value, str) or value.isdigit():
        return value
    try:
        return int(table[value.upper()])
    except KeyError:
        raise ValueError(f"Invalid value {value!r} for {key}") from None


__all__ = [
    "AccountStatus",
    "OfferStatus",
    "OfferType",
    "Currency",
    "PaymentSetting",
    "PriceFormat",
    "ConversionBehaviour",
    "CapType",
    "CapInterval",
    "CONSTS",
    "translate_const",
]
