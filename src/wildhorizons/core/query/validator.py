"""Allowlist check for query-string filter keys.

Only key membership is checked; values are never inspected. Keys are visited
in insertion order so the *first* unknown key is the one reported, which keeps
error messages deterministic for a given URL.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from wildhorizons.core.errors import QueryValidationError

DESTINATION_FILTERS: frozenset[str] = frozenset(
    {
        "name",
        "location",
        "country",
        "continent",
        "is_open_to_public",
        "uuid",
        "fun_fact",
        "description",
    }
)


class QueryValidator:
    """Reusable allowlist validator bound to one fixed set of filter keys."""

    __slots__ = ("_allowed",)

    def __init__(self, allowed: Iterable[str] = DESTINATION_FILTERS) -> None:
        self._allowed: frozenset[str] = frozenset(allowed)

    @property
    def allowed(self) -> frozenset[str]:
        return self._allowed

    def validate(self, query: Mapping[str, str]) -> str | None:
        """Return the first key of ``query`` outside the allowlist, or ``None``."""
        for key in query:
            if key not in self._allowed:
                return key
        return None

    def require_valid(self, query: Mapping[str, str]) -> None:
        """Raise :class:`QueryValidationError` for the first unknown key."""
        invalid = self.validate(query)
        if invalid is not None:
            raise QueryValidationError(invalid)


def validate_query(
    query: Mapping[str, str],
    allowed: Iterable[str] = DESTINATION_FILTERS,
) -> str | None:
    """Return the first unrecognized key in ``query`` or ``None`` if all are known."""
    return QueryValidator(allowed).validate(query)


__all__ = ["DESTINATION_FILTERS", "QueryValidator", "validate_query"]
