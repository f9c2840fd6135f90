"""
Season Calendar

Date arithmetic for calendar years and winter seasons. A winter season
runs from September 1 through August 31 of the following year and is
labelled "<startYear>-<endYY>", e.g. "2023-24".

Activity start times are local wall-clock strings such as
"2024-01-15T10:00:00Z"; the trailing zone marker is ignored so that the
date and year are the ones the athlete saw.
"""

from datetime import date, datetime
from typing import Optional, Union

SEASON_START_MONTH = 9

DateLike = Union[str, date, datetime]


def parse_local_datetime(value: DateLike) -> datetime:
    """
    Parse a local start time into a naive wall-clock datetime.

    Args:
        value: ISO-8601 string, date or datetime

    Returns:
        Naive datetime

    Raises:
        ValueError: If the string cannot be parsed
    """
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)

    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1]
    try:
        parsed = datetime.fromisoformat(text)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Unparseable activity date: {value!r}") from e

    return parsed.replace(tzinfo=None)


def local_date(value: Optional[DateLike]) -> Optional[date]:
    if value is None:
        return None
    return parse_local_datetime(value).date()


def year_of(value: Optional[DateLike]) -> Optional[int]:
    if value is None:
        return None
    return parse_local_datetime(value).year


def season_label(start_year: int) -> str:
    return f"{start_year}-{(start_year + 1) % 100:02d}"


def season_for(value: Optional[DateLike]) -> Optional[str]:
    """
    Get the winter season a date falls in.

    Sep 1 opens a new season; Aug 31 still belongs to the previous one.

    Args:
        value: Local start time (string, date or datetime) or None

    Returns:
        Season label, or None when no date is given
    """
    if value is None:
        return None

    moment = parse_local_datetime(value)
    if moment.month >= SEASON_START_MONTH:
        return season_label(moment.year)
    return season_label(moment.year - 1)


def season_start_year(label: str) -> int:
    """"2024-25" -> 2024"""
    return int(label.split("-")[0])


def season_start(start_year: int) -> datetime:
    return datetime(start_year, SEASON_START_MONTH, 1)


def day_of_season(value: DateLike, start_year: int) -> int:
    """Whole days since local midnight on Sep 1 of start_year (Sep 1 is 0)"""
    return (parse_local_datetime(value) - season_start(start_year)).days


def day_of_year(value: DateLike) -> int:
    """Ordinal day within the calendar year (1-366)"""
    return parse_local_datetime(value).timetuple().tm_yday
