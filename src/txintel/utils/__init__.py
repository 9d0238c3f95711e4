"""Utility functions for txintel."""

from txintel.utils.date_parser import parse_date
from txintel.utils.amount_parser import parse_amount, to_cents
from txintel.utils.vectors import cosine_similarities

__all__ = ["parse_date", "parse_amount", "to_cents", "cosine_similarities"]
