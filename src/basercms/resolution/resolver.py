"""
Reference Resolver

Turns a human-supplied identifier into the numeric id a create or edit
call needs, falling back to a configured default when the lookup finds
nothing or fails.

Resolution flow:
1. Absent input: optional kinds yield "no identifier", others the default.
   No remote call is made.
2. One listing call, filtered server-side where the API supports it.
3. First candidate (in list order) with an exact match on any match field.
4. No match or a failed lookup: the kind's fallback.

Lookup failures never propagate. A secondary reference that cannot be
resolved must not block the primary write.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from src.basercms.config import BaserCMSConfig
from src.basercms.endpoints import EntityKind
from src.basercms.exceptions import InvalidArgumentError
from src.basercms.protocols import EntityService
from src.basercms.resolution.models import (
    EntityReference,
    Found,
    LookupResult,
    NotFound,
    ReferenceKind,
    ResolutionPolicy,
    ResolvedId,
)
from src.common.telemetry import get_tracer

logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)


def default_policies(config: BaserCMSConfig | None = None) -> dict[ReferenceKind, ResolutionPolicy]:
    """
    Build the standard policy table.

    Args:
        config: Source of the per-kind default ids. If None, uses built-in defaults.
    """
    default_user_id = config.default_user_id if config else 1
    default_blog_content_id = config.default_blog_content_id if config else 1

    return {
        ReferenceKind.USER: ResolutionPolicy(
            kind=ReferenceKind.USER,
            entity_kind=EntityKind.USER,
            match_fields=("email",),
            filter_field="email",
            default_id=default_user_id,
        ),
        ReferenceKind.CONTENT_CONTAINER: ResolutionPolicy(
            kind=ReferenceKind.CONTENT_CONTAINER,
            entity_kind=EntityKind.BLOG_CONTENT,
            match_fields=("title",),
            filter_field="title",
            default_id=default_blog_content_id,
        ),
        ReferenceKind.CATEGORY: ResolutionPolicy(
            kind=ReferenceKind.CATEGORY,
            entity_kind=EntityKind.BLOG_CATEGORY,
            match_fields=("name", "title"),
            filter_field="title",
            default_id=None,
            optional=True,
            scoped=True,
            default_scope=default_blog_content_id,
        ),
        ReferenceKind.CUSTOM_FIELD: ResolutionPolicy(
            kind=ReferenceKind.CUSTOM_FIELD,
            entity_kind=EntityKind.CUSTOM_FIELD,
            match_fields=("name",),
            filter_field="name",
            optional=True,
            extra_filters={"status": 1},
        ),
        ReferenceKind.CUSTOM_LINK: ResolutionPolicy(
            kind=ReferenceKind.CUSTOM_LINK,
            entity_kind=EntityKind.CUSTOM_LINK,
            match_fields=("name",),
            filter_field="name",
            optional=True,
            scoped=True,
            extra_filters={"contain": "CustomFields"},
        ),
    }


class ReferenceResolver:
    """
    Resolves entity references against an EntityService.

    Holds no mutable state; one instance can serve concurrent requests as
    long as each request supplies its own session.
    """

    def __init__(
        self,
        service: EntityService,
        policies: Mapping[ReferenceKind, ResolutionPolicy] | None = None,
    ):
        """
        Initialize the resolver.

        Args:
            service: Authenticated session used for lookups
            policies: Per-kind policies. If None, uses default_policies().
        """
        self._service = service
        self._policies = dict(policies) if policies is not None else default_policies()

    def policy_for(self, kind: ReferenceKind | str) -> ResolutionPolicy:
        """
        Return the policy for a kind.

        Raises:
            InvalidArgumentError: If the kind is not supported
        """
        try:
            kind = ReferenceKind(kind)
        except ValueError:
            raise InvalidArgumentError(
                f"Unsupported reference kind: {kind!r}", field="kind"
            ) from None

        policy = self._policies.get(kind)
        if policy is None:
            raise InvalidArgumentError(f"Unsupported reference kind: {kind.value!r}", field="kind")
        return policy

    async def resolve(
        self,
        kind: ReferenceKind | str,
        raw_value: str | None = None,
        scope: int | None = None,
    ) -> ResolvedId:
        """
        Resolve a raw value to a numeric id.

        Args:
            kind: Reference kind
            raw_value: Email, name or title. None or "" counts as absent.
            scope: Parent id for scoped kinds; ignored otherwise

        Returns:
            ResolvedId. Never raises for lookup failures.

        Raises:
            InvalidArgumentError: If the kind is not supported
        """
        policy = self.policy_for(kind)
        reference = EntityReference(
            kind=policy.kind,
            raw_value=raw_value,
            scope=scope if policy.scoped else None,
        )
        return await self.resolve_reference(reference)

    async def resolve_reference(self, reference: EntityReference) -> ResolvedId:
        """Resolve an already-built reference."""
        policy = self.policy_for(reference.kind)

        if reference.is_absent:
            if policy.optional:
                return ResolvedId.omitted()
            return ResolvedId.default(policy.default_id)

        with tracer.start_as_current_span("basercms.resolve") as span:
            span.set_attribute("resolution.kind", policy.kind.value)

            result = await self.lookup(reference)

            if isinstance(result, Found):
                span.set_attribute("resolution.matched", True)
                return ResolvedId.found(result.numeric_id)

            span.set_attribute("resolution.matched", False)
            span.set_attribute("resolution.reason", result.reason)
            span.set_attribute("resolution.error", result.error)
            logger.info(
                f"No {policy.kind.value} matched {reference.raw_value!r} "
                f"({result.reason}); using fallback {policy.default_id!r}"
            )
            return policy.fallback()

    async def lookup(self, reference: EntityReference) -> LookupResult:
        """
        Look up the candidate matching a reference.

        Returns the whole candidate so callers can inspect more than its id
        (e.g. the field type behind a custom link).

        Returns:
            Found(candidate) or NotFound(reason)
        """
        policy = self.policy_for(reference.kind)

        if reference.is_absent:
            return NotFound("no value supplied")

        scope = reference.scope
        if policy.scoped and scope is None:
            scope = policy.default_scope
            if scope is None:
                return NotFound("no scope supplied")

        raw_value = reference.raw_value
        try:
            candidates = await self._service.list(
                policy.entity_kind,
                policy.build_filters(raw_value),
                scope=scope if policy.scoped else None,
            )
        except Exception as e:
            logger.warning(f"Lookup of {policy.kind.value} {raw_value!r} failed: {e}")
            return NotFound(f"lookup failed: {e}", error=True)

        for candidate in candidates or []:
            if isinstance(candidate, dict) and policy.matches(candidate, raw_value):
                if _candidate_id(candidate) is None:
                    logger.warning(
                        f"Matched {policy.kind.value} {raw_value!r} has no usable id: "
                        f"{candidate.get('id')!r}"
                    )
                    return NotFound("candidate has no usable id")
                return Found(candidate)

        return NotFound("no exact match")


def _candidate_id(candidate: Mapping[str, object]) -> int | None:
    value = candidate.get("id")
    if isinstance(value, bool):
        return None
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
