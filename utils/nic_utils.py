# utils/nic_utils.py

import re
from datetime import date, timedelta
from typing import Optional

from models.employee import Gender

OLD_NIC = re.compile(r"^(\d{2})(\d{3})(\d{3})(\d)([VX])$")
NEW_NIC = re.compile(r"^(\d{4})(\d{3})(\d{4})(\d)$")

# Day-of-year values above this offset belong to female holders
FEMALE_OFFSET = 500


def clean_nic(nic: str) -> str:
    return re.sub(r"\s", "", nic or "").upper()


def _expand_year(yy: int, today: Optional[date] = None) -> int:
    current_year = (today or date.today()).year
    century = (current_year // 100) * 100
    if yy <= current_year % 100:
        return century + yy
    return century - 100 + yy


def _is_valid_day_of_year(day_of_year: int, year: int) -> bool:
    is_leap = (year % 4 == 0 and year % 100 != 0) or year % 400 == 0
    return 1 <= day_of_year <= (366 if is_leap else 365)


def parse_nic(nic: str, today: Optional[date] = None) -> Optional[dict]:
    """
    Decode a Sri Lankan NIC number in the old (YYDDDSSSC + V/X) or new
    (YYYYDDDSSSSC) format.

    Returns a dict with format, birth_year, day_of_year, gender and
    date_of_birth, or None when the number is not a valid NIC.
    """
    cleaned = clean_nic(nic)

    match = OLD_NIC.match(cleaned)
    if match:
        fmt = "old"
        birth_year = _expand_year(int(match.group(1)), today)
    else:
        match = NEW_NIC.match(cleaned)
        if not match:
            return None
        fmt = "new"
        birth_year = int(match.group(1))

    day_of_year = int(match.group(2))
    gender = Gender.FEMALE if day_of_year > FEMALE_OFFSET else Gender.MALE
    if day_of_year > FEMALE_OFFSET:
        day_of_year -= FEMALE_OFFSET

    if not _is_valid_day_of_year(day_of_year, birth_year):
        return None

    return {
        "format": fmt,
        "birth_year": birth_year,
        "day_of_year": day_of_year,
        "gender": gender,
        "date_of_birth": date(birth_year, 1, 1) + timedelta(days=day_of_year - 1),
    }


def convert_old_nic_to_new(nic: str, today: Optional[date] = None) -> Optional[str]:
    match = OLD_NIC.match(clean_nic(nic))
    if not match:
        return None
    yy, ddd, sss, check = match.group(1), match.group(2), match.group(3), match.group(4)
    return f"{_expand_year(int(yy), today)}{ddd}0{sss}{check}"
