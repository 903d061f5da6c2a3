# utils/errors.py

class InvalidArgumentError(ValueError):
    """Raised when a caller passes a month/year that does not name a real month."""


def validate_month_year(month, year):
    if not isinstance(month, int) or isinstance(month, bool) or not 1 <= month <= 12:
        raise InvalidArgumentError(f"month must be an integer in 1..12, got {month!r}")
    if not isinstance(year, int) or isinstance(year, bool) or year <= 0:
        raise InvalidArgumentError(f"year must be a positive integer, got {year!r}")
