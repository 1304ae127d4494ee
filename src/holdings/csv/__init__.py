"""Brokerage CSV parsing and aggregation."""

from holdings.csv.parser import (
    ColumnMap,
    HoldingRow,
    ParsedFile,
    RawCsvRow,
    clean_number,
    detect_columns,
    parse_csv_text,
)
from holdings.csv.positions import SymbolGroup, build_position, build_positions
from holdings.csv.aggregator import ImportFile, aggregate_files, merge_parsed_files
from holdings.csv.session import ImportSession

__all__ = [
    "ColumnMap",
    "HoldingRow",
    "ParsedFile",
    "RawCsvRow",
    "clean_number",
    "detect_columns",
    "parse_csv_text",
    "SymbolGroup",
    "build_position",
    "build_positions",
    "ImportFile",
    "aggregate_files",
    "merge_parsed_files",
    "ImportSession",
]
