# utils/date_utils.py

import calendar
import re
from datetime import date
from typing import Optional

from config import RETIREMENT_AGE

DATE_FORMAT = "%d-%m-%Y"

_FULL_DATE = re.compile(r"^(\d{1,2})[/\-](\d{1,2})[/\-](\d{4})$")


def parse_date(value: Optional[str]) -> Optional[date]:
    """
    Parse a dd-MM-yyyy (or dd/MM/yyyy) string.

    Returns None for empty input or a string that does not name a real date.
    """
    if not value:
        return None
    match = _FULL_DATE.match(value.strip())
    if not match:
        return None
    day, month, year = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError:
        return None


def format_date(value: date) -> str:
    return value.strftime(DATE_FORMAT)


def date_range_in_days(start: date, end: date) -> int:
    """Number of calendar days from start to end, both ends included."""
    return abs((end - start).days) + 1


def calculate_age(birth_date: date, today: Optional[date] = None) -> int:
    today = today or date.today()
    age = today.year - birth_date.year
    if (today.month, today.day) < (birth_date.month, birth_date.day):
        age -= 1
    return age


def calculate_retirement_date(birth_date: date) -> date:
    year = birth_date.year + RETIREMENT_AGE
    try:
        return birth_date.replace(year=year)
    except ValueError:
        # 29 February in a non-leap target year
        return date(year, 2, 28)


def days_in_month(month: int, year: int) -> int:
    return calendar.monthrange(year, month)[1]


def month_name(month: int) -> str:
    return calendar.month_name[month]
