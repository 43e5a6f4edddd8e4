"""Civil date normalization in one fixed reference timezone.

Hey future me - EVERY bucketing key in reelcal comes out of this module!
Consolidation keys, the fuzzy window distance and the calendar cells all use
CivilDate.iso, so two records land on the same day if and only if this
module says so.

Why a fixed zone instead of the host's local time?
- CI runners are UTC, the laptop is Central, the export was logged in Central
- Using datetime.astimezone() without an argument would give each machine a
  different calendar. We always convert into ONE configured zone.

Parsing rules:
- aware datetime          -> converted into the civil zone
- naive datetime          -> interpreted as wall-clock time IN the civil zone
- "YYYY-MM-DD"            -> civil noon of that day (noon survives +-11h skew)
- other ISO-8601 strings  -> datetime.fromisoformat(), then the rules above
- anything else           -> InvalidInstantError (no silent fallback!)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from reelcal.domain.exceptions import ConfigurationError, InvalidInstantError

DEFAULT_TIMEZONE = "America/Chicago"
CIVIL_NOON = time(12, 0)

_DATE_ONLY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass(frozen=True)
class CivilDate:
    """Calendar date components in the civil timezone.

    Attributes:
        year: Four digit year
        month: 0-based month (0 = January)
        day: Day of month (1-31)
        iso: Canonical "YYYY-MM-DD" bucketing key
    """

    year: int
    month: int
    day: int
    iso: str

    @classmethod
    def from_date(cls, value: date) -> CivilDate:
        """Build from a plain calendar date."""
        return cls(year=value.year, month=value.month - 1, day=value.day, iso=value.isoformat())

    @classmethod
    def from_iso(cls, iso: str) -> CivilDate:
        """Build from a "YYYY-MM-DD" string.

        Raises:
            InvalidInstantError: If the string is not a valid calendar date
        """
        return cls.from_date(_parse_iso_date(iso))

    def as_date(self) -> date:
        """Return the plain calendar date."""
        return date(self.year, self.month + 1, self.day)

    @property
    def weekday(self) -> int:
        """Day of week with Monday=0 ... Sunday=6."""
        return self.as_date().weekday()


def _parse_iso_date(iso: str) -> date:
    if not isinstance(iso, str) or not _DATE_ONLY_RE.match(iso.strip()):
        raise InvalidInstantError(iso)
    try:
        return date.fromisoformat(iso.strip())
    except ValueError as e:
        raise InvalidInstantError(iso) from e


class CivilDateNormalizer:
    """Converts instants into calendar dates of one fixed civil timezone.

    Stateless apart from the zone, so one instance can be shared by every
    stage of a pipeline run.
    """

    def __init__(self, timezone: str = DEFAULT_TIMEZONE) -> None:
        """Initialize the normalizer.

        Args:
            timezone: IANA timezone name (e.g. "America/Chicago")

        Raises:
            ConfigurationError: If the timezone name is unknown
        """
        try:
            self._zone = ZoneInfo(timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ConfigurationError(f"Unknown civil timezone: {timezone}") from e
        self.timezone = timezone

    @property
    def zone(self) -> ZoneInfo:
        """The civil timezone."""
        return self._zone

    def parse_instant(self, value: datetime | date | str) -> datetime:
        """Parse a value into an aware datetime expressed in the civil zone.

        Args:
            value: datetime, date or ISO-8601 string

        Returns:
            Timezone-aware datetime in the civil zone

        Raises:
            InvalidInstantError: If the value cannot be parsed
        """
        if isinstance(value, datetime):
            instant = value
        elif isinstance(value, date):
            return datetime.combine(value, CIVIL_NOON, tzinfo=self._zone)
        elif isinstance(value, str):
            text = value.strip()
            if _DATE_ONLY_RE.match(text):
                return datetime.combine(_parse_iso_date(text), CIVIL_NOON, tzinfo=self._zone)
            try:
                instant = datetime.fromisoformat(text)
            except ValueError as e:
                raise InvalidInstantError(value) from e
        else:
            raise InvalidInstantError(value)

        if instant.tzinfo is None:
            # Naive means "wall clock in the civil zone", never "host local time"
            instant = instant.replace(tzinfo=self._zone)
        return instant.astimezone(self._zone)

    def civil_date(self, instant: datetime | date | str) -> CivilDate:
        """Get the civil calendar date of an instant.

        Idempotent: civil_date(parse_instant(x)) == civil_date(x).

        Raises:
            InvalidInstantError: If the instant cannot be parsed
        """
        return CivilDate.from_date(self.parse_instant(instant).date())

    def add_days(self, iso: str, days: int) -> str:
        """Shift a civil date string by a number of days.

        Goes through the zone (civil noon + wall-clock timedelta) instead of
        counting 86400-second blocks, so DST transitions never skip or repeat
        a calendar day.

        Args:
            iso: "YYYY-MM-DD" civil date
            days: Days to add (may be negative)

        Returns:
            Shifted "YYYY-MM-DD" civil date
        """
        anchor = datetime.combine(_parse_iso_date(iso), CIVIL_NOON, tzinfo=self._zone)
        return self.civil_date(anchor + timedelta(days=days)).iso

    def days_between(
        self, earlier: datetime | date | str, later: datetime | date | str
    ) -> int:
        """Civil-date distance in days (later - earlier, may be negative)."""
        start = self.civil_date(earlier).as_date()
        end = self.civil_date(later).as_date()
        return (end - start).days


__all__ = ["CIVIL_NOON", "DEFAULT_TIMEZONE", "CivilDate", "CivilDateNormalizer"]
