"""Date parsing utilities."""

from datetime import date, timedelta
from dateutil import parser as date_parser


def parse_date(date_str: str) -> date:
    """Parse a transaction date.

    Accepts anything dateutil understands ("2024-01-15", "Jan 15 2024")
    plus "today" and "yesterday".

    Raises:
        ValueError: If date string cannot be parsed
    """
    value = date_str.strip().lower()
    today = date.today()
    if value == "today":
        return today
    if value == "yesterday":
        return today - timedelta(days=1)

    try:
        return date_parser.parse(value).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")
