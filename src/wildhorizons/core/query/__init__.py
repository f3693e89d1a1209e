"""Query validation and filtering over in-memory record snapshots."""

from __future__ import annotations

from .fields import ABSENT, Absent, FieldValue, Flag, Text, read_field
from .filters import (
    NESTED_KEYS,
    Predicate,
    apply_filter,
    compile_filter,
    filter_records,
    merge_path_filter,
)
from .validator import DESTINATION_FILTERS, QueryValidator, validate_query

__all__ = [
    "ABSENT",
    "Absent",
    "DESTINATION_FILTERS",
    "FieldValue",
    "Flag",
    "NESTED_KEYS",
    "Predicate",
    "QueryValidator",
    "Text",
    "apply_filter",
    "compile_filter",
    "filter_records",
    "merge_path_filter",
    "read_field",
    "validate_query",
]
