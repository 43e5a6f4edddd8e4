"""Calendar Projector - buckets the timeline onto a fixed month grid.

Hey future me - the grid is ALWAYS 6 weeks x 7 days = 42 cells per month!
Months that fit in 4 or 5 rows still get 6; trailing cells spill into the
next month and are flagged is_current_month=False. The templates rely on
that for a uniform layout, so don't "optimize" the empty rows away.

Weeks start on MONDAY (day_of_week 0 = Monday ... 6 = Sunday).

Every date here is a civil date string from the CivilDateNormalizer, and
day stepping goes through normalizer.add_days() - never through host
local time.

Output shape (CalendarModel.to_dict) is the templating contract:
    {
        "years": [2025, 2024],
        "moviesByDate": {"2025-03-02": [...]},
        "quotesByDate": {"2025-03-02": "..."},
        "calendarsByYear": {2025: {"months": [{name, monthNum, weeks}, ...]}},
    }
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from reelcal.domain.entities import WatchRecord
from reelcal.domain.value_objects import CivilDate, CivilDateNormalizer

logger = logging.getLogger(__name__)

MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)
WEEKS_PER_MONTH = 6
DAYS_PER_WEEK = 7


@dataclass(frozen=True)
class DayCell:
    """One cell of a month grid."""

    date: str
    day_num: int
    day_of_week: int
    records: tuple[WatchRecord, ...]
    quote: str | None
    is_current_month: bool


@dataclass(frozen=True)
class MonthGrid:
    """A month rendered as 6 rows of 7 cells."""

    name: str
    month_num: int  # 0-based
    weeks: tuple[tuple[DayCell, ...], ...]

    @property
    def cells(self) -> list[DayCell]:
        """All 42 cells in reading order."""
        return [cell for week in self.weeks for cell in week]


@dataclass(frozen=True)
class YearCalendar:
    """Twelve month grids of one year."""

    year: int
    months: tuple[MonthGrid, ...]


@dataclass(frozen=True)
class CalendarModel:
    """Everything the templating layer needs."""

    years: list[int]
    records_by_date: dict[str, tuple[WatchRecord, ...]]
    quotes_by_date: dict[str, str]
    calendars_by_year: dict[int, YearCalendar] = field(default_factory=dict)

    def to_dict(
        self, serialize: Callable[[WatchRecord], Any] | None = None
    ) -> dict[str, Any]:
        """Render the templating contract.

        Args:
            serialize: Optional record serializer (e.g. to JSON-ready dicts).
                Without it records are passed through as WatchRecord objects.

        Returns:
            Dict with years, moviesByDate, quotesByDate and calendarsByYear
        """
        convert = serialize or (lambda record: record)

        def cell_dict(cell: DayCell) -> dict[str, Any]:
            return {
                "date": cell.date,
                "dayNum": cell.day_num,
                "dayOfWeek": cell.day_of_week,
                "movies": [convert(r) for r in cell.records],
                "quote": cell.quote,
                "isCurrentMonth": cell.is_current_month,
            }

        return {
            "years": list(self.years),
            "moviesByDate": {
                iso: [convert(r) for r in records] for iso, records in self.records_by_date.items()
            },
            "quotesByDate": dict(self.quotes_by_date),
            "calendarsByYear": {
                year: {
                    "months": [
                        {
                            "name": month.name,
                            "monthNum": month.month_num,
                            "weeks": [[cell_dict(c) for c in week] for week in month.weeks],
                        }
                        for month in calendar.months
                    ]
                }
                for year, calendar in self.calendars_by_year.items()
            },
        }


class CalendarProjector:
    """Projects a merged timeline onto per-year month grids."""

    def __init__(
        self,
        normalizer: CivilDateNormalizer,
        quotes: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize projector.

        Args:
            normalizer: Civil date normalizer (bucketing + day stepping)
            quotes: Optional custom quote per civil date ("YYYY-MM-DD")
        """
        self._normalizer = normalizer
        self._quotes = dict(quotes or {})

    def project(self, records: Iterable[WatchRecord]) -> CalendarModel:
        """Build the calendar model.

        Args:
            records: Visible dataset (merge order is kept inside each day)

        Returns:
            CalendarModel with only the years that have records
        """
        buckets: dict[str, list[WatchRecord]] = {}
        years: set[int] = set()
        for record in records:
            civil = self._normalizer.civil_date(record.watched_at)
            buckets.setdefault(civil.iso, []).append(record)
            years.add(civil.year)

        by_date = {iso: tuple(bucket) for iso, bucket in buckets.items()}
        ordered_years = sorted(years, reverse=True)
        calendars = {year: self._build_year(year, by_date) for year in ordered_years}

        logger.debug(
            "Projected %d dates across %d years",
            len(by_date),
            len(ordered_years),
        )
        return CalendarModel(
            years=ordered_years,
            records_by_date=by_date,
            quotes_by_date=dict(self._quotes),
            calendars_by_year=calendars,
        )

    def _build_year(
        self, year: int, by_date: Mapping[str, tuple[WatchRecord, ...]]
    ) -> YearCalendar:
        months = tuple(self._build_month(year, month_num, by_date) for month_num in range(12))
        return YearCalendar(year=year, months=months)

    # Hey future me - the grid starts on the Monday on/before the 1st. If the 1st IS a Monday
    # the offset is 0 and the first row starts on the 1st itself.
    def _build_month(
        self,
        year: int,
        month_num: int,
        by_date: Mapping[str, tuple[WatchRecord, ...]],
    ) -> MonthGrid:
        first = CivilDate.from_date(date(year, month_num + 1, 1))
        cursor = self._normalizer.add_days(first.iso, -first.weekday)

        weeks: list[tuple[DayCell, ...]] = []
        for _ in range(WEEKS_PER_MONTH):
            week: list[DayCell] = []
            for day_of_week in range(DAYS_PER_WEEK):
                civil = CivilDate.from_iso(cursor)
                week.append(
                    DayCell(
                        date=cursor,
                        day_num=civil.day,
                        day_of_week=day_of_week,
                        records=by_date.get(cursor, ()),
                        quote=self._quotes.get(cursor),
                        is_current_month=civil.month == month_num,
                    )
                )
                cursor = self._normalizer.add_days(cursor, 1)
            weeks.append(tuple(week))

        return MonthGrid(name=MONTH_NAMES[month_num], month_num=month_num, weeks=tuple(weeks))


__all__ = [
    "DAYS_PER_WEEK",
    "MONTH_NAMES",
    "WEEKS_PER_MONTH",
    "CalendarModel",
    "CalendarProjector",
    "DayCell",
    "MonthGrid",
    "YearCalendar",
]
