"""Utility functions for ledgercore."""

from ledgercore.utils.date_parser import get_date_range, parse_date
from ledgercore.utils.amount_parser import parse_amount, parse_line_spec
from ledgercore.utils.logging import setup_logging

__all__ = ["get_date_range", "parse_date", "parse_amount", "parse_line_spec", "setup_logging"]
