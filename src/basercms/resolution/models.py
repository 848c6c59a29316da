"""
Reference Resolution Models

Value types for turning human-supplied identifiers (names, titles,
emails) into the numeric ids the baserCMS API requires.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from src.basercms.endpoints import EntityKind


class ReferenceKind(str, Enum):
    """Kinds of reference the resolver knows how to look up."""

    USER = "user"
    CATEGORY = "category"
    CONTENT_CONTAINER = "content_container"
    CUSTOM_FIELD = "custom_field"
    CUSTOM_LINK = "custom_link"


@dataclass(frozen=True)
class EntityReference:
    """
    A human-supplied identifier, valid for a single request.

    Attributes:
        kind: Kind of entity referred to
        raw_value: Email, name or title as given by the caller
        scope: Parent id the entity is scoped under (e.g. blog content for categories)
    """

    kind: ReferenceKind
    raw_value: str | None = None
    scope: int | None = None

    @property
    def is_absent(self) -> bool:
        """Empty strings count as absent input."""
        return self.raw_value is None or self.raw_value == ""


@dataclass(frozen=True)
class ResolvedId:
    """
    Outcome of resolving one reference.

    ``numeric_id`` is None only for optional kinds, where "no identifier"
    is itself the fallback and the field is left out of the request.
    """

    numeric_id: int | None
    matched: bool = False
    used_default: bool = False

    @classmethod
    def found(cls, numeric_id: int) -> ResolvedId:
        return cls(numeric_id=numeric_id, matched=True, used_default=False)

    @classmethod
    def default(cls, numeric_id: int | None) -> ResolvedId:
        return cls(numeric_id=numeric_id, matched=False, used_default=True)

    @classmethod
    def omitted(cls) -> ResolvedId:
        return cls(numeric_id=None, matched=False, used_default=False)

    @property
    def has_id(self) -> bool:
        return self.numeric_id is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "numeric_id": self.numeric_id,
            "matched": self.matched,
            "used_default": self.used_default,
        }


@dataclass(frozen=True)
class ResolutionPolicy:
    """
    Per-kind resolution configuration.

    Attributes:
        kind: Reference kind this policy applies to
        entity_kind: Remote entity kind that is listed during lookup
        match_fields: Candidate fields compared for exact equality, in priority order
        filter_field: Field used to narrow the listing server-side, if supported
        default_id: Id substituted when lookup fails (None means omit)
        optional: Absent input yields "no identifier" instead of the default
        scoped: Lookup requires a parent id
        default_scope: Parent id used when a scoped lookup has none
        extra_filters: Fixed filters added to every lookup
    """

    kind: ReferenceKind
    entity_kind: EntityKind
    match_fields: tuple[str, ...]
    filter_field: str | None = None
    default_id: int | None = None
    optional: bool = False
    scoped: bool = False
    default_scope: int | None = None
    extra_filters: dict[str, Any] = field(default_factory=dict)

    def build_filters(self, raw_value: str) -> dict[str, Any]:
        filters = dict(self.extra_filters)
        if self.filter_field:
            filters[self.filter_field] = raw_value
        return filters

    def matches(self, candidate: dict[str, Any], raw_value: str) -> bool:
        """Exact, case-sensitive equality on any match field."""
        return any(candidate.get(name) == raw_value for name in self.match_fields)

    def fallback(self) -> ResolvedId:
        return ResolvedId.default(self.default_id)


# =============================================================================
# Lookup Results
# =============================================================================


@dataclass(frozen=True)
class Found:
    """Lookup located a candidate."""

    candidate: dict[str, Any]

    @property
    def numeric_id(self) -> int:
        return int(self.candidate["id"])


@dataclass(frozen=True)
class NotFound:
    """Lookup located nothing. ``reason`` describes why."""

    reason: str
    error: bool = False


LookupResult = Found | NotFound
