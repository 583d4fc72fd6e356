"""Calendar period helpers for cohort bucketing.

Cohorts are keyed by the first day of the calendar period that contains a
customer's first transaction. The helpers in this module map dates onto
those period starts, render the display labels used throughout reports and
exports, and measure distances between dates in whole calendar months.

Quick Start
-----------
>>> from datetime import date
>>> from revenue_cohorts.foundation.periods import (
...     PeriodGranularity, bucket_start, period_label, month_offset,
... )
>>> start = bucket_start(date(2023, 5, 20), PeriodGranularity.QUARTER)
>>> start
datetime.date(2023, 4, 1)
>>> period_label(start, PeriodGranularity.QUARTER)
'Q2 2023'
>>> month_offset(start, date(2023, 9, 1))
5
"""

from __future__ import annotations

import calendar
from datetime import date, datetime
from enum import Enum


class PeriodGranularity(str, Enum):
    """Supported cohort granularities."""

    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"


class InvalidGranularityError(ValueError):
    """Raised when a cohort granularity is not one of the supported values."""


def coerce_granularity(value: PeriodGranularity | str) -> PeriodGranularity:
    """Return ``value`` as a :class:`PeriodGranularity`.

    Parameters
    ----------
    value:
        Either an enum member or its string value (``"month"``,
        ``"quarter"`` or ``"year"``).

    Raises
    ------
    InvalidGranularityError
        If ``value`` does not name a supported granularity.
    """
    if isinstance(value, PeriodGranularity):
        return value
    try:
        return PeriodGranularity(value)
    except ValueError as exc:
        supported = ", ".join(item.value for item in PeriodGranularity)
        raise InvalidGranularityError(
            f"Unsupported granularity: {value!r}. Expected one of: {supported}"
        ) from exc


def as_date(value: date) -> date:
    """Reduce a ``datetime`` to its calendar date; plain dates pass through."""
    if isinstance(value, datetime):
        return value.date()
    return value


def bucket_start(value: date, granularity: PeriodGranularity | str) -> date:
    """Return the first day of the period containing ``value``.

    Only the calendar year and month are consulted. A ``datetime`` is reduced
    to its date without any timezone conversion.

    Examples
    --------
    >>> bucket_start(date(2023, 11, 30), "quarter")
    datetime.date(2023, 10, 1)
    >>> bucket_start(date(2023, 11, 30), "year")
    datetime.date(2023, 1, 1)
    """
    granularity = coerce_granularity(granularity)
    value = as_date(value)

    if granularity is PeriodGranularity.MONTH:
        return date(value.year, value.month, 1)
    if granularity is PeriodGranularity.QUARTER:
        start_month = ((value.month - 1) // 3) * 3 + 1
        return date(value.year, start_month, 1)
    return date(value.year, 1, 1)


def period_label(start: date, granularity: PeriodGranularity | str) -> str:
    """Return the display label for a period starting at ``start``.

    Month periods render as ``YYYY-MM``, quarters as ``Q<n> YYYY`` and years
    as ``YYYY``.
    """
    granularity = coerce_granularity(granularity)

    if granularity is PeriodGranularity.MONTH:
        return f"{start.year}-{start.month:02d}"
    if granularity is PeriodGranularity.QUARTER:
        quarter = (start.month - 1) // 3 + 1
        return f"Q{quarter} {start.year}"
    return str(start.year)


def month_offset(cohort_start: date, target: date) -> int:
    """Number of calendar months from ``cohort_start`` to ``target``.

    The day of month is ignored on both sides, so 2023-01-31 to 2023-02-01
    is one month and 2023-01-01 to 2023-01-31 is zero.
    """
    return (target.year - cohort_start.year) * 12 + (target.month - cohort_start.month)


def add_months(value: date, months: int) -> date:
    """Shift ``value`` by ``months`` calendar months.

    The day of month is kept, clamped to the last day of the target month
    when it does not exist there (e.g. Jan 31 + 1 month -> Feb 28).
    """
    value = as_date(value)
    month_index = value.year * 12 + (value.month - 1) + months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(value.day, last_day))
