"""Utility functions for envelopes."""

from envelopes.utils.csv_parser import parse_csv, normalize_header_name
from envelopes.utils.date_parser import parse_date, month_to_range
from envelopes.utils.amount_parser import parse_amount
from envelopes.utils.import_key import build_import_key

__all__ = [
    "parse_csv",
    "normalize_header_name",
    "parse_date",
    "month_to_range",
    "parse_amount",
    "build_import_key",
]
