import re
from typing import Optional, Tuple

MONTH_STEMS = ["jan", "feb", "mar", "apr", "may", "jun", "jul"]
MONTH_NAME = {
    0: "January",
    1: "February",
    2: "March",
    3: "April",
    4: "May",
    5: "June",
    6: "July",
}
DAYS_PER_MONTH = 24
DAYS_PER_YEAR = len(MONTH_STEMS) * DAYS_PER_MONTH
HOURS_PER_DAY = 24

DATE_PREFIX_RE = re.compile(r"^(?P<month>[A-Za-z]+)\s+(?P<day>\d+)\s+of\s+YR(?P<year>\d+)", re.IGNORECASE)


def month_index(month_text: str) -> Optional[int]:
    stem = (month_text or "")[:3].lower()
    if stem not in MONTH_STEMS:
        return None
    return MONTH_STEMS.index(stem)


def parse_date_prefix(text: Optional[str]) -> Optional[Tuple[int, int, int]]:
    """
    Return (year, month_index, day) for a line starting with '<Month> <day> of YR<year>'.
    Month indices are zero based over the seven month Utopian year.
    """
    if not text:
        return None

    match = DATE_PREFIX_RE.match(text.strip())
    if not match:
        return None

    index = month_index(match.group("month"))
    if index is None:
        return None
    return int(match.group("year")), index, int(match.group("day"))


def date_prefix_text(line: Optional[str]) -> str:
    match = DATE_PREFIX_RE.match((line or "").strip())
    return match.group(0) if match else ""


def day_tick(year: int, month: int, day: int) -> int:
    return year * DAYS_PER_YEAR + month * DAYS_PER_MONTH + (day - 1)


def date_tick(text: Optional[str]) -> Optional[int]:
    key = parse_date_prefix(text)
    if not key:
        return None
    return day_tick(*key)


def format_day_tick(tick: int) -> str:
    year, rest = divmod(tick, DAYS_PER_YEAR)
    month, day = divmod(rest, DAYS_PER_MONTH)
    return f"{MONTH_NAME[month]} {day + 1} of YR{year}"


def elapsed_hours(date_from: Optional[str], date_to: Optional[str]) -> Optional[int]:
    # Inclusive: a report covering a single day spans one hour of real time.
    start = date_tick(date_from)
    end = date_tick(date_to)
    if start is None or end is None:
        return None
    return abs(end - start) + 1


def day_in_range(tick: Optional[int], start: Optional[int], end: Optional[int]) -> bool:
    if tick is None:
        return False
    if start is not None and tick < start:
        return False
    if end is not None and tick > end:
        return False
    return True
