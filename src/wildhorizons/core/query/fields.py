"""Restricted, tagged access to record fields.

The filter engine reads fields by caller-supplied names. Instead of handing
back whatever object sits under that key, :func:`read_field` only looks up
allowlisted keys and classifies the value into one of three shapes:

- :class:`Absent`: the key is missing, not allowlisted, or holds a type the
  engine does not compare (numbers, lists, objects, null).
- :class:`Flag`: a JSON boolean.
- :class:`Text`: a JSON string.

Callers dispatch on the tag, so "missing" and "wrong type" both fall through
to a non-match rather than an exception.
"""

from __future__ import annotations

from collections.abc import Collection, Mapping
from dataclasses import dataclass
from typing import Any

from .validator import DESTINATION_FILTERS


@dataclass(frozen=True, slots=True)
class Absent:
    """No comparable value under the requested key."""


@dataclass(frozen=True, slots=True)
class Flag:
    value: bool


@dataclass(frozen=True, slots=True)
class Text:
    value: str


FieldValue = Absent | Flag | Text

ABSENT = Absent()


def read_field(
    record: Mapping[str, Any],
    key: str,
    allowed: Collection[str] = DESTINATION_FILTERS,
) -> FieldValue:
    """Return the tagged value of ``record[key]``.

    Keys outside ``allowed`` are never dereferenced and read as :data:`ABSENT`.
    """
    if key not in allowed:
        return ABSENT
    value = record.get(key)
    if isinstance(value, bool):
        return Flag(value)
    if isinstance(value, str):
        return Text(value)
    return ABSENT


__all__ = ["Absent", "Flag", "Text", "FieldValue", "ABSENT", "read_field"]
