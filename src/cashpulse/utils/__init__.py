"""Utility functions for cashpulse."""

from cashpulse.utils.date_parser import parse_date, parse_timestamp
from cashpulse.utils.amount_parser import parse_amount

__all__ = ["parse_date", "parse_timestamp", "parse_amount"]
