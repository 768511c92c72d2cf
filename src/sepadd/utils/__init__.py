"""Utility functions for sepadd."""

from sepadd.utils.date_parser import parse_iso_date, parse_collection_date
from sepadd.utils.amount_parser import normalize_amount, sum_amounts

__all__ = ["parse_iso_date", "parse_collection_date", "normalize_amount", "sum_amounts"]
