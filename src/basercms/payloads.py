"""
Request Payload Models

One closed pair of payload shapes per entity kind:

- ``*Create`` models are full objects. Every field carries either the
  caller's value or its documented default, and ``to_request()`` sends
  all of them.
- ``*Update`` models are partial. Every field defaults to None, and
  ``to_request()`` sends only the fields that were explicitly set plus
  the ``modified`` timestamp, so an edit never overwrites data the caller
  did not mention.

Payloads are validated at construction; pydantic.ValidationError is
translated to InvalidArgumentError by the RequestAssembler.
"""

from __future__ import annotations

from typing import Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field

from src.basercms.endpoints import EntityKind

ListDirection = Literal["ASC", "DESC"]

CustomFieldType = Literal[
    "BcCcAutoZip",
    "BcCcCheckbox",
    "BcCcDate",
    "BcCcDateTime",
    "BcCcEmail",
    "BcCcFile",
    "BcCcHidden",
    "BcCcMultiple",
    "BcCcPassword",
    "BcCcPref",
    "BcCcRadio",
    "BcCcRelated",
    "BcCcSelect",
    "BcCcTel",
    "BcCcText",
    "BcCcTextarea",
    "BcCcWysiwyg",
]


class CreatePayload(BaseModel):
    """Full object for an add call."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: ClassVar[EntityKind]
    # Fields stamped with the current time when the caller leaves them out
    timestamp_fields: ClassVar[tuple[str, ...]] = ()

    def to_request(self) -> dict[str, Any]:
        return self.model_dump()


class UpdatePayload(BaseModel):
    """Partial object for an edit call."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: ClassVar[EntityKind]

    modified: str = Field(..., description="Modification timestamp")

    def to_request(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class ContentFields(BaseModel):
    """Content-tree placement shared by blog and custom contents."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    site_id: int = 1
    parent_id: int = 1
    name: str
    title: str
    status: int = 0


# =============================================================================
# Blog
# =============================================================================


class BlogPostCreate(CreatePayload):
    kind: ClassVar[EntityKind] = EntityKind.BLOG_POST
    timestamp_fields: ClassVar[tuple[str, ...]] = ("posted",)

    blog_content_id: int
    no: int | None = None
    name: str = ""
    title: str = Field(..., min_length=1)
    content: str = ""
    detail: str = ""
    blog_category_id: int | None = None
    user_id: int
    status: int = 0
    eye_catch: str = ""
    posted: str


class BlogPostUpdate(UpdatePayload):
    kind: ClassVar[EntityKind] = EntityKind.BLOG_POST

    title: str | None = None
    detail: str | None = None
    content: str | None = None
    status: int | None = None
    name: str | None = None
    eye_catch: str | None = None
    user_id: int | None = None
    blog_content_id: int | None = None
    blog_category_id: int | None = None


class BlogCategoryCreate(CreatePayload):
    kind: ClassVar[EntityKind] = EntityKind.BLOG_CATEGORY

    blog_content_id: int
    no: int | None = None
    name: str
    title: str = Field(..., min_length=1)
    status: int = 1
    parent_id: int | None = None
    lft: int | None = None
    rght: int | None = None


class BlogCategoryUpdate(UpdatePayload):
    kind: ClassVar[EntityKind] = EntityKind.BLOG_CATEGORY

    title: str | None = None
    name: str | None = None
    blog_content_id: int | None = None
    parent_id: int | None = None
    status: int | None = None
    lft: int | None = None
    rght: int | None = None


class BlogContentCreate(CreatePayload):
    kind: ClassVar[EntityKind] = EntityKind.BLOG_CONTENT

    description: str = ""
    template: str = "blog"
    list_count: int = 10
    list_direction: ListDirection = "DESC"
    feed_count: int = 10
    tag_use: bool = True
    comment_use: bool = False
    comment_approve: bool = False
    widget_area: int | None = 0
    eye_catch_size: str = ""
    use_content: bool = True
    content: ContentFields


class BlogContentUpdate(UpdatePayload):
    kind: ClassVar[EntityKind] = EntityKind.BLOG_CONTENT

    name: str | None = None
    title: str | None = None
    description: str | None = None
    template: str | None = None
    list_count: int | None = None
    list_direction: ListDirection | None = None
    feed_count: int | None = None
    tag_use: bool | None = None
    comment_use: bool | None = None
    comment_approve: bool | None = None
    widget_area: int | None = None
    eye_catch_size: str | None = None
    use_content: bool | None = None
    status: int | None = None


class BlogTagCreate(CreatePayload):
    kind: ClassVar[EntityKind] = EntityKind.BLOG_TAG
    timestamp_fields: ClassVar[tuple[str, ...]] = ("created", "modified")

    name: str = Field(..., min_length=1)
    created: str
    modified: str


class BlogTagUpdate(UpdatePayload):
    kind: ClassVar[EntityKind] = EntityKind.BLOG_TAG

    name: str | None = None


# =============================================================================
# Custom Content
# =============================================================================


class CustomContentCreate(CreatePayload):
    kind: ClassVar[EntityKind] = EntityKind.CUSTOM_CONTENT

    custom_table_id: int
    description: str = ""
    template: str = "default"
    widget_area: int | None = None
    list_count: int = 10
    list_order: str = "id"
    list_direction: ListDirection = "DESC"
    content: ContentFields


class CustomContentUpdate(UpdatePayload):
    kind: ClassVar[EntityKind] = EntityKind.CUSTOM_CONTENT

    custom_table_id: int | None = None
    name: str | None = None
    title: str | None = None
    description: str | None = None
    template: str | None = None
    list_count: int | None = None
    list_order: str | None = None
    list_direction: ListDirection | None = None
    status: int | None = None


class CustomTableCreate(CreatePayload):
    kind: ClassVar[EntityKind] = EntityKind.CUSTOM_TABLE
    timestamp_fields: ClassVar[tuple[str, ...]] = ("created", "modified")

    type: str = "1"
    name: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    display_field: str = "title"
    has_child: int = 0
    created: str
    modified: str


class CustomTableUpdate(UpdatePayload):
    kind: ClassVar[EntityKind] = EntityKind.CUSTOM_TABLE

    name: str | None = None
    title: str | None = None
    type: str | None = None
    display_field: str | None = None
    has_child: int | None = None
    custom_links: dict[str, dict[str, Any]] | None = None


class CustomFieldCreate(CreatePayload):
    kind: ClassVar[EntityKind] = EntityKind.CUSTOM_FIELD

    name: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    type: CustomFieldType
    status: int = 1
    source: str = ""


class CustomFieldUpdate(UpdatePayload):
    kind: ClassVar[EntityKind] = EntityKind.CUSTOM_FIELD

    name: str | None = None
    title: str | None = None
    type: CustomFieldType | None = None
    status: int | None = None
    source: str | None = None


class CustomEntryCreate(CreatePayload):
    """Custom field values are extra keys merged into the entry."""

    model_config = ConfigDict(frozen=True, extra="allow")

    kind: ClassVar[EntityKind] = EntityKind.CUSTOM_ENTRY
    timestamp_fields: ClassVar[tuple[str, ...]] = ("published",)

    custom_table_id: int
    name: str = ""
    title: str = Field(..., min_length=1)
    parent_id: int | None = None
    lft: int | None = None
    rght: int | None = None
    level: int | None = None
    status: bool = False
    publish_begin: str | None = None
    publish_end: str | None = None
    published: str
    creator_id: int = 1


class CustomEntryUpdate(UpdatePayload):
    model_config = ConfigDict(frozen=True, extra="allow")

    kind: ClassVar[EntityKind] = EntityKind.CUSTOM_ENTRY

    title: str | None = None
    name: str | None = None
    status: bool | None = None
    publish_begin: str | None = None
    publish_end: str | None = None
    published: str | None = None
    creator_id: int | None = None


class CustomLinkCreate(CreatePayload):
    kind: ClassVar[EntityKind] = EntityKind.CUSTOM_LINK

    name: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    custom_table_id: int
    custom_field_id: int
    type: str = ""
    display_front: bool = True
    use_api: bool = True
    search_target_admin: bool = True
    search_target_front: bool = True
    status: bool = True


class CustomLinkUpdate(UpdatePayload):
    kind: ClassVar[EntityKind] = EntityKind.CUSTOM_LINK

    name: str | None = None
    title: str | None = None
    custom_table_id: int | None = None
    custom_field_id: int | None = None
    type: str | None = None
    display_front: bool | None = None
    use_api: bool | None = None
    search_target_admin: bool | None = None
    search_target_front: bool | None = None
    status: bool | None = None


CREATE_PAYLOADS: dict[EntityKind, type[CreatePayload]] = {
    cls.kind: cls
    for cls in (
        BlogPostCreate,
        BlogCategoryCreate,
        BlogContentCreate,
        BlogTagCreate,
        CustomContentCreate,
        CustomTableCreate,
        CustomFieldCreate,
        CustomEntryCreate,
        CustomLinkCreate,
    )
}

UPDATE_PAYLOADS: dict[EntityKind, type[UpdatePayload]] = {
    cls.kind: cls
    for cls in (
        BlogPostUpdate,
        BlogCategoryUpdate,
        BlogContentUpdate,
        BlogTagUpdate,
        CustomContentUpdate,
        CustomTableUpdate,
        CustomFieldUpdate,
        CustomEntryUpdate,
        CustomLinkUpdate,
    )
}
