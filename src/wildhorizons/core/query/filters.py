"""Compile query-string filters into record predicates.

A query mapping such as ``{"continent": "africa", "fun_fact": "elephant"}``
becomes the conjunction of one test per entry:

- **Nested keys** (``fun_fact``, ``description``) match when at least one
  entry of the record's ``details`` list contains the value as a
  case-insensitive substring.
- **Top-level booleans** match when they equal ``value == "true"``. Only the
  literal lower-case ``"true"`` is truthy.
- **Top-level strings** match on case-insensitive *exact* equality.
- Anything else (missing field, number, list, null) is a non-match.

None of these paths raise on unexpected record shapes; heterogeneous records
simply fail to match.

Usage
-----
>>> records = [{"name": "Serengeti", "continent": "Africa"}]
>>> filter_records(records, {"continent": "africa"})
[{'name': 'Serengeti', 'continent': 'Africa'}]
"""

from __future__ import annotations

from collections.abc import Callable, Collection, Iterable, Mapping
from typing import Any

from wildhorizons.core.records import DETAILS_FIELD, Record

from .fields import Flag, Text, read_field
from .validator import DESTINATION_FILTERS

Predicate = Callable[[Mapping[str, Any]], bool]

NESTED_KEYS: frozenset[str] = frozenset({"fun_fact", "description"})


def _always(_: Mapping[str, Any]) -> bool:
    return True


def _nested_test(key: str, value: str) -> Predicate:
    needle = value.lower()

    def test(record: Mapping[str, Any]) -> bool:
        details = record.get(DETAILS_FIELD)
        if not isinstance(details, list):
            return False
        for detail in details:
            if not isinstance(detail, Mapping):
                continue
            text = detail.get(key)
            haystack = text if isinstance(text, str) else ""
            if needle in haystack.lower():
                return True
        return False

    return test


def _field_test(key: str, value: str, allowed: Collection[str]) -> Predicate:
    wanted_flag = value == "true"
    wanted_text = value.lower()

    def test(record: Mapping[str, Any]) -> bool:
        field = read_field(record, key, allowed)
        if isinstance(field, Flag):
            return field.value == wanted_flag
        if isinstance(field, Text):
            return field.value.lower() == wanted_text
        return False

    return test


def compile_filter(
    query: Mapping[str, str],
    allowed: Collection[str] = DESTINATION_FILTERS,
) -> Predicate:
    """Build the conjunction of per-key tests described by ``query``.

    An empty mapping compiles to a predicate that accepts every record.
    """
    tests: list[Predicate] = []
    for key, value in query.items():
        if key in NESTED_KEYS:
            tests.append(_nested_test(key, value))
        else:
            tests.append(_field_test(key, value, allowed))

    if not tests:
        return _always

    def predicate(record: Mapping[str, Any]) -> bool:
        return all(test(record) for test in tests)

    return predicate


def apply_filter(records: Iterable[Record], predicate: Predicate) -> list[Record]:
    """Return the records accepted by ``predicate``, in their original order."""
    return [record for record in records if predicate(record)]


def filter_records(
    records: Iterable[Record],
    query: Mapping[str, str],
    allowed: Collection[str] = DESTINATION_FILTERS,
) -> list[Record]:
    """Compile ``query`` and apply it to ``records`` in one call."""
    return apply_filter(records, compile_filter(query, allowed))


def merge_path_filter(query: Mapping[str, str], key: str, value: str) -> dict[str, str]:
    """Merge a path-derived filter into ``query``.

    The path value always wins over a query-string value under the same key:
    ``/api/continent/africa?continent=asia`` filters on Africa.
    """
    merged = dict(query)
    merged[key] = value
    return merged


__all__ = [
    "NESTED_KEYS",
    "Predicate",
    "apply_filter",
    "compile_filter",
    "filter_records",
    "merge_path_filter",
]
