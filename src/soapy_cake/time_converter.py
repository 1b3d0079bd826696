"""
Conversion between CAKE local timestamps and UTC.

CAKE reads and writes wall-clock times in the advertiser's configured time
zone, formatted ``YYYY-MM-DDTHH:MM:SS`` with no offset suffix.
"""

from __future__ import annotations
import logging
import re
import warnings
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Any, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .runtime.errors import ConfigurationError, ErrorCode


logger = logging.getLogger(__name__)

CAKE_TIME_FORMAT = "%Y-%m-%dT%H:%M:%S"

CAKE_TIMESTAMP = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?$")

LEGACY_WARNING = (
    "Deprecated: time_offset / CAKE_TIME_OFFSET ignores daylight saving time. "
    "Please use time_zone / CAKE_TIME_ZONE instead."
)


def is_remote_timestamp(value: Any) -> bool:
    """Check whether a value looks like a CAKE timestamp string."""
    return isinstance(value, str) and CAKE_TIMESTAMP.match(value) is not None


class TimeConverter:
    """
    Converts timestamps between UTC and CAKE local time.

    A named time zone applies DST. The legacy fixed hour offset does not:
    it adds the same number of hours all year round, so its output is an
    hour off during DST. That behavior is kept for existing deployments.

    Example:
        ```python
        converter = TimeConverter("Europe/Berlin")
        converter.to_remote(datetime(2015, 6, 2, 12, 30, tzinfo=timezone.utc))
        # '2015-06-02T14:30:00'
        ```
    """

    def __init__(self, time_zone: Optional[str] = None, time_offset: Optional[Union[int, str]] = None):
        """
        Initialize the converter.

        Args:
            time_zone: IANA zone name, e.g. "Europe/Berlin"
            time_offset: Deprecated fixed hour offset; takes precedence over time_zone

        Raises:
            ConfigurationError: If neither is given or the zone is unknown
        """
        self.time_offset: Optional[int] = None
        self.zone: tzinfo

        if time_offset not in (None, ""):
            self.time_offset = int(time_offset)
            self.zone = timezone(timedelta(hours=self.time_offset))
        elif time_zone:
            try:
                self.zone = ZoneInfo(time_zone)
            except (ZoneInfoNotFoundError, ValueError) as e:
                raise ConfigurationError(
                    f"Unknown time zone {time_zone!r}", ErrorCode.CONFIGURATION, cause=e
                ) from e
        else:
            raise ConfigurationError("Cake time zone missing", ErrorCode.MISSING_CREDENTIAL)

    @property
    def legacy(self) -> bool:
        """True when running on a fixed hour offset."""
        return self.time_offset is not None

    def to_remote(self, value: Union[datetime, date]) -> str:
        """
        Format a timestamp or date as CAKE local time.

        Naive datetimes are taken as UTC. A bare date is taken as midnight
        UTC, so Berlin renders 2015-01-02 as "2015-01-02T01:00:00".
        """
        self._warn_legacy()
        return self._as_utc(value).astimezone(self.zone).strftime(CAKE_TIME_FORMAT)

    def from_remote(self, value: str) -> datetime:
        """
        Parse a CAKE local timestamp into an aware UTC datetime.

        Raises:
            ValueError: If the value is not a CAKE timestamp
        """
        self._warn_legacy()
        if not is_remote_timestamp(value):
            raise ValueError(f"Invalid CAKE timestamp: {value!r}")
        local = datetime.strptime(value[:19], CAKE_TIME_FORMAT)
        if "." in value:
            fraction = value.split(".", 1)[1][:6].ljust(6, "0")
            local = local.replace(microsecond=int(fraction))
        return local.replace(tzinfo=self.zone).astimezone(timezone.utc)

    @staticmethod
    def _as_utc(value: Union[datetime, date]) -> datetime:
        if isinstance(value, datetime):
            if value.tzinfo is None:
                return value.replace(tzinfo=timezone.utc)
            return value.astimezone(timezone.utc)
        if isinstance(value, date):
            return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
        raise TypeError(f"Cannot convert {type(value).__name__} to a CAKE timestamp")

    def _warn_legacy(self) -> None:
        if self.legacy:
            logger.warning(LEGACY_WARNING)
            warnings.warn(LEGACY_WARNING, DeprecationWarning, stacklevel=3)

    def __repr__(self) -> str:
        if self.legacy:
            return f"TimeConverter(time_offset={self.time_offset})"
        return f"TimeConverter(time_zone={str(self.zone)!r})"


__all__ = ["TimeConverter", "is_remote_timestamp", "CAKE_TIME_FORMAT"]
