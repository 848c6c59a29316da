"""
Request Assembler

Combines resolved reference ids with caller-supplied fields into the
payload a baserCMS add or edit call expects.

Create and edit are deliberately asymmetric:
- build_create() fills every field, using the documented default for
  anything the caller left out.
- build_edit() carries only the fields present in the caller's input,
  plus a ``modified`` timestamp.

Usage:
    assembler = RequestAssembler(resolver)
    request = await assembler.blog_post_create(title="Hello", detail="...")
    await session.create(EntityKind.BLOG_POST, request.payload.to_request())
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from pydantic import ValidationError

from src.basercms.endpoints import EntityKind
from src.basercms.exceptions import InvalidArgumentError
from src.basercms.payloads import (
    CREATE_PAYLOADS,
    UPDATE_PAYLOADS,
    CreatePayload,
    UpdatePayload,
)
from src.basercms.resolution import (
    Found,
    LookupResult,
    ReferenceKind,
    ReferenceResolver,
    ResolvedId,
)

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

_WHITESPACE = re.compile(r"\s+")
_NON_SLUG = re.compile(r"[^a-zA-Z0-9_]")


def category_slug(title: str) -> str:
    """Derive a category name from its title."""
    return _NON_SLUG.sub("", _WHITESPACE.sub("_", title.lower()))


@dataclass(frozen=True)
class AssembledRequest:
    """
    A validated payload together with how its references were resolved.

    Attributes:
        payload: Create or update payload
        resolutions: ResolvedId per payload field that came from a reference
    """

    payload: CreatePayload | UpdatePayload
    resolutions: dict[str, ResolvedId] = field(default_factory=dict)

    def to_request(self) -> dict[str, Any]:
        return self.payload.to_request()


class RequestAssembler:
    """
    Builds add/edit payloads.

    Stateless apart from its collaborators; safe to share across requests
    when each request brings its own resolver.
    """

    def __init__(
        self,
        resolver: ReferenceResolver | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """
        Initialize the assembler.

        Args:
            resolver: Resolver for name-to-id lookups. Only the blog post
                helpers need one.
            clock: Source of the current time for timestamps
        """
        self._resolver = resolver
        self._clock = clock

    def timestamp(self) -> str:
        return self._clock().strftime(TIMESTAMP_FORMAT)

    # =========================================================================
    # Generic
    # =========================================================================

    def build_create(self, kind: EntityKind, fields: Mapping[str, Any]) -> CreatePayload:
        """
        Build a full create payload.

        None values count as "not supplied" and are replaced by defaults.

        Raises:
            InvalidArgumentError: If a required field is missing or a value is invalid
        """
        payload_cls = CREATE_PAYLOADS.get(kind)
        if payload_cls is None:
            raise InvalidArgumentError(f"Cannot create entities of kind {kind.value!r}")

        data = {key: value for key, value in fields.items() if value is not None}
        now = self.timestamp()
        for name in payload_cls.timestamp_fields:
            if not data.get(name):
                data[name] = now

        return _validate(payload_cls, data)

    def build_edit(self, kind: EntityKind, fields: Mapping[str, Any]) -> UpdatePayload:
        """
        Build a partial update payload.

        Every key in ``fields`` is sent as given, including explicit None.
        Keys the caller did not supply never appear.

        Raises:
            InvalidArgumentError: If a supplied value is invalid
        """
        payload_cls = UPDATE_PAYLOADS.get(kind)
        if payload_cls is None:
            raise InvalidArgumentError(f"Cannot edit entities of kind {kind.value!r}")

        data = dict(fields)
        data["modified"] = self.timestamp()
        return _validate(payload_cls, data)

    # =========================================================================
    # Blog Posts
    # =========================================================================

    async def blog_post_create(
        self,
        title: str,
        detail: str,
        email: str | None = None,
        category: str | None = None,
        blog_content: str | None = None,
    ) -> AssembledRequest:
        """
        Resolve references and build an addBlogPost payload.

        User and blog content fall back to their configured defaults.
        The category is resolved within the resolved blog content and is
        left empty when it cannot be found.
        """
        if not title:
            raise InvalidArgumentError("title is required", field="title")
        if not detail:
            raise InvalidArgumentError("detail is required", field="detail")

        resolver = self._require_resolver()
        user = await resolver.resolve(ReferenceKind.USER, email)
        blog_content_ref = await resolver.resolve(ReferenceKind.CONTENT_CONTAINER, blog_content)
        category_ref = await resolver.resolve(
            ReferenceKind.CATEGORY, category, scope=blog_content_ref.numeric_id
        )

        payload = self.build_create(
            EntityKind.BLOG_POST,
            {
                "blog_content_id": blog_content_ref.numeric_id,
                "title": title,
                "detail": detail,
                "blog_category_id": category_ref.numeric_id,
                "user_id": user.numeric_id,
            },
        )
        return AssembledRequest(
            payload=payload,
            resolutions={
                "user_id": user,
                "blog_content_id": blog_content_ref,
                "blog_category_id": category_ref,
            },
        )

    async def blog_post_edit(self, fields: Mapping[str, Any]) -> AssembledRequest:
        """
        Resolve references and build an editBlogPost payload.

        ``fields`` holds only what the caller supplied. Explicit ids win
        over names. A name that cannot be resolved falls back the same way
        as on create, except the category, which is then left out entirely.
        """
        data = dict(fields)
        email = data.pop("email", None)
        blog_content = data.pop("blog_content", None)
        category = data.pop("category", None)

        resolver = self._require_resolver()
        resolutions: dict[str, ResolvedId] = {}

        if "user_id" not in data and email:
            user = await resolver.resolve(ReferenceKind.USER, email)
            resolutions["user_id"] = user
            data["user_id"] = user.numeric_id

        blog_content_id = data.get("blog_content_id")
        if blog_content_id is None and blog_content:
            blog_content_ref = await resolver.resolve(ReferenceKind.CONTENT_CONTAINER, blog_content)
            resolutions["blog_content_id"] = blog_content_ref
            blog_content_id = blog_content_ref.numeric_id
            data["blog_content_id"] = blog_content_id

        if "blog_category_id" not in data and category:
            category_ref = await resolver.resolve(
                ReferenceKind.CATEGORY, category, scope=blog_content_id
            )
            resolutions["blog_category_id"] = category_ref
            if category_ref.has_id:
                data["blog_category_id"] = category_ref.numeric_id

        payload = self.build_edit(EntityKind.BLOG_POST, data)
        return AssembledRequest(payload=payload, resolutions=resolutions)

    # =========================================================================
    # Helpers for other kinds
    # =========================================================================

    def blog_category_create(self, fields: Mapping[str, Any], default_blog_content_id: int) -> CreatePayload:
        data = dict(fields)
        title = data.get("title")
        if not title:
            raise InvalidArgumentError("title is required", field="title")
        if not data.get("name"):
            data["name"] = category_slug(title)
        if not data.get("blog_content_id"):
            data["blog_content_id"] = default_blog_content_id
        return self.build_create(EntityKind.BLOG_CATEGORY, data)

    def content_create(
        self,
        kind: EntityKind,
        fields: Mapping[str, Any],
        placement_keys: Sequence[str] = ("site_id", "parent_id", "name", "title", "status"),
    ) -> CreatePayload:
        """
        Build a blog or custom content payload.

        Placement fields (site, parent folder, name, title, status) move
        into the nested ``content`` object the API expects.
        """
        data = {key: value for key, value in fields.items() if value is not None}
        content = {key: data.pop(key) for key in placement_keys if key in data}
        data["content"] = content
        return self.build_create(kind, data)

    def custom_links(self, lookups: Sequence[LookupResult]) -> dict[str, dict[str, Any]]:
        """
        Build ``custom_links`` entries for the custom fields that were found.

        Keys are ``new_<n>`` where n is the 1-based position of the field
        name in the caller's list, so skipped names leave gaps.
        """
        links: dict[str, dict[str, Any]] = {}
        for position, result in enumerate(lookups, start=1):
            if not isinstance(result, Found):
                logger.info(f"Custom field #{position} not linked: {result.reason}")
                continue
            custom_field = result.candidate
            links[f"new_{position}"] = {
                "name": custom_field.get("name"),
                "custom_field_id": custom_field.get("id"),
                "type": custom_field.get("type"),
                "display_front": True,
                "use_api": True,
                "status": True,
                "title": custom_field.get("title"),
                "search_target_admin": True,
                "search_target_front": True,
            }
        return links

    def _require_resolver(self) -> ReferenceResolver:
        if self._resolver is None:
            raise RuntimeError("RequestAssembler was created without a resolver")
        return self._resolver


def _validate(payload_cls: type[Any], data: dict[str, Any]) -> Any:
    try:
        return payload_cls.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ()))
        raise InvalidArgumentError(
            f"Invalid {location or 'input'}: {first.get('msg', str(e))}",
            field=location or None,
        ) from e
