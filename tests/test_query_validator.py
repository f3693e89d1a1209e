"""Unit tests for the filter-key allowlist."""

from __future__ import annotations

import pytest

from wildhorizons.core.errors import QueryValidationError
from wildhorizons.core.query import DESTINATION_FILTERS, QueryValidator, validate_query


def test_all_known_keys_pass() -> None:
    query = {key: "x" for key in DESTINATION_FILTERS}
    assert validate_query(query) is None


def test_empty_query_passes() -> None:
    assert validate_query({}) is None


def test_first_unknown_key_is_reported() -> None:
    """Keys are visited in insertion order; the earliest offender wins."""
    assert validate_query({"zzz": "1", "name": "x"}) == "zzz"
    assert validate_query({"name": "x", "zzz": "1", "aaa": "2"}) == "zzz"


def test_values_are_not_inspected() -> None:
    assert validate_query({"is_open_to_public": "definitely-not-a-bool"}) is None


def test_custom_allowlist() -> None:
    validator = QueryValidator({"title", "location"})
    assert validator.allowed == frozenset({"title", "location"})
    assert validator.validate({"title": "fox"}) is None
    assert validator.validate({"country": "kenya"}) == "country"


def test_require_valid_raises_with_offending_key() -> None:
    with pytest.raises(QueryValidationError) as excinfo:
        QueryValidator().require_valid({"name": "x", "colour": "red"})

    assert excinfo.value.key == "colour"
    assert str(excinfo.value) == 'Invalid filter key: "colour".'
    assert isinstance(excinfo.value, ValueError)
