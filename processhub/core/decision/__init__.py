"""
Decision rule evaluation and spreadsheet helpers.
"""

from .engine import NO_MATCH, assign_rule_ids, evaluate_condition, execute_rules
from .spreadsheet import (
    DEFAULT_EXPORT_FILENAME,
    XLSX_MIME_TYPE,
    SpreadsheetError,
    build_workbook,
    parse_spreadsheet,
)

__all__ = [
    "NO_MATCH",
    "assign_rule_ids",
    "evaluate_condition",
    "execute_rules",
    "DEFAULT_EXPORT_FILENAME",
    "XLSX_MIME_TYPE",
    "SpreadsheetError",
    "build_workbook",
    "parse_spreadsheet",
]
