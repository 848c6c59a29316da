"""
Tool Input Models

Pydantic models describing the arguments of each MCP tool. They serve
twice: ``model_json_schema()`` produces the advertised inputSchema, and
``model_validate()`` checks incoming arguments before any remote call.

Edit inputs leave every field unset by default so handlers can use
``model_dump(exclude_unset=True)`` to see exactly what the caller sent.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from src.basercms.payloads import CustomFieldType

ListDirection = Literal["ASC", "DESC"]


class ToolInput(BaseModel):
    """Base for tool arguments."""

    model_config = ConfigDict(extra="forbid")


class NoInput(ToolInput):
    pass


class IdInput(ToolInput):
    id: int = Field(..., description="Entity ID")


class PageInput(ToolInput):
    limit: int | None = Field(default=None, description="Number of items to return")
    page: int | None = Field(default=None, description="Page number (1-based)")
    keyword: str | None = Field(default=None, description="Search keyword")


# =============================================================================
# Blog Posts
# =============================================================================


class AddBlogPostInput(ToolInput):
    title: str = Field(..., min_length=1, description="Post title")
    detail: str = Field(..., min_length=1, description="Post body (HTML allowed)")
    email: EmailStr | None = Field(
        default=None, description="Author email. Defaults to the default user."
    )
    category: str | None = Field(
        default=None, description="Category name or title. Omit for no category."
    )
    blog_content: str | None = Field(
        default=None, description="Blog title. Defaults to the default blog."
    )


class EditBlogPostInput(ToolInput):
    id: int = Field(..., description="Post ID")
    title: str | None = Field(default=None, description="Post title")
    detail: str | None = Field(default=None, description="Post body")
    content: str | None = Field(default=None, description="Post summary")
    email: EmailStr | None = Field(default=None, description="Author email")
    category: str | None = Field(default=None, description="Category name or title")
    blog_content: str | None = Field(default=None, description="Blog title")
    status: int | None = Field(default=None, description="0: unpublished, 1: published")
    name: str | None = Field(default=None, description="Post slug")
    eye_catch: str | None = Field(default=None, description="Eye-catch image URL")
    blog_category_id: int | None = Field(
        default=None, description="Category ID. Takes precedence over category."
    )
    user_id: int | None = Field(default=None, description="User ID. Takes precedence over email.")
    blog_content_id: int | None = Field(
        default=None, description="Blog ID. Takes precedence over blog_content."
    )


class GetBlogPostsInput(PageInput):
    blog_content_id: int | None = Field(default=None, description="Blog ID")
    status: int | None = Field(default=None, description="0: unpublished, 1: published")


# =============================================================================
# Blog Categories
# =============================================================================


class AddBlogCategoryInput(ToolInput):
    title: str = Field(..., min_length=1, description="Category title")
    name: str | None = Field(
        default=None, description="Category name. Derived from the title when omitted."
    )
    blog_content_id: int | None = Field(
        default=None, description="Blog ID. Defaults to the default blog."
    )
    parent_id: int | None = Field(default=None, description="Parent category ID")
    status: int = Field(default=1, description="0: unpublished, 1: published")
    lft: int | None = Field(default=None, description="Tree left value")
    rght: int | None = Field(default=None, description="Tree right value")


class EditBlogCategoryInput(ToolInput):
    id: int = Field(..., description="Category ID")
    title: str | None = Field(default=None, description="Category title")
    name: str | None = Field(default=None, description="Category name")
    blog_content_id: int | None = Field(default=None, description="Blog ID")
    parent_id: int | None = Field(default=None, description="Parent category ID")
    status: int | None = Field(default=None, description="0: unpublished, 1: published")
    lft: int | None = Field(default=None, description="Tree left value")
    rght: int | None = Field(default=None, description="Tree right value")


class GetBlogCategoriesInput(PageInput):
    blog_content_id: int | None = Field(
        default=None, description="Blog ID. Defaults to the default blog."
    )
    status: int | None = Field(default=None, description="0: unpublished, 1: published")


# =============================================================================
# Blog Contents
# =============================================================================


class AddBlogContentInput(ToolInput):
    name: str = Field(..., min_length=1, description="Blog name, used in the URL")
    title: str = Field(..., min_length=1, description="Blog title")
    description: str | None = Field(default=None, description="Description")
    template: str = Field(default="blog", description="Template name")
    list_count: int = Field(default=10, description="Posts per list page")
    list_direction: ListDirection = Field(default="DESC", description="List order")
    feed_count: int = Field(default=10, description="Posts per feed")
    tag_use: bool = Field(default=True, description="Enable tags")
    comment_use: bool = Field(default=False, description="Enable comments")
    comment_approve: bool = Field(default=False, description="Require comment approval")
    widget_area: int = Field(default=0, description="Widget area ID")
    eye_catch_size: str = Field(default="", description="Eye-catch size settings")
    use_content: bool = Field(default=True, description="Use the summary field")
    site_id: int = Field(default=1, description="Site ID")
    parent_id: int = Field(default=1, description="Parent folder ID")
    status: int = Field(default=0, description="0: unpublished, 1: published")


class EditBlogContentInput(ToolInput):
    id: int = Field(..., description="Blog ID")
    name: str | None = Field(default=None, description="Blog name")
    title: str | None = Field(default=None, description="Blog title")
    description: str | None = Field(default=None, description="Description")
    template: str | None = Field(default=None, description="Template name")
    list_count: int | None = Field(default=None, description="Posts per list page")
    list_direction: ListDirection | None = Field(default=None, description="List order")
    feed_count: int | None = Field(default=None, description="Posts per feed")
    tag_use: bool | None = Field(default=None, description="Enable tags")
    comment_use: bool | None = Field(default=None, description="Enable comments")
    comment_approve: bool | None = Field(default=None, description="Require comment approval")
    widget_area: int | None = Field(default=None, description="Widget area ID")
    eye_catch_size: str | None = Field(default=None, description="Eye-catch size settings")
    use_content: bool | None = Field(default=None, description="Use the summary field")
    status: int | None = Field(default=None, description="0: unpublished, 1: published")


class GetBlogContentsInput(PageInput):
    status: int | None = Field(default=None, description="0: unpublished, 1: published")
    site_id: int | None = Field(default=None, description="Site ID")


# =============================================================================
# Blog Tags
# =============================================================================


class AddBlogTagInput(ToolInput):
    name: str = Field(..., min_length=1, description="Tag name")


class EditBlogTagInput(ToolInput):
    id: int = Field(..., description="Tag ID")
    name: str = Field(..., min_length=1, description="Tag name")


class GetBlogTagsInput(PageInput):
    name: str | None = Field(default=None, description="Filter by tag name")


# =============================================================================
# Custom Contents
# =============================================================================


class AddCustomContentInput(ToolInput):
    name: str = Field(..., min_length=1, description="Content name, used in the URL")
    title: str = Field(..., min_length=1, description="Content title")
    custom_table_id: int = Field(..., description="Custom table ID")
    description: str | None = Field(default=None, description="Description")
    template: str = Field(default="default", description="Template name")
    list_count: int = Field(default=10, description="Entries per list page")
    list_order: str = Field(default="id", description="List sort field")
    list_direction: ListDirection = Field(default="DESC", description="List order")
    site_id: int = Field(default=1, description="Site ID")
    parent_id: int = Field(default=1, description="Parent folder ID")
    status: int = Field(default=0, description="0: unpublished, 1: published")


class EditCustomContentInput(ToolInput):
    id: int = Field(..., description="Custom content ID")
    custom_table_id: int | None = Field(default=None, description="Custom table ID")
    name: str | None = Field(default=None, description="Content name")
    title: str | None = Field(default=None, description="Content title")
    description: str | None = Field(default=None, description="Description")
    template: str | None = Field(default=None, description="Template name")
    list_count: int | None = Field(default=None, description="Entries per list page")
    list_order: str | None = Field(default=None, description="List sort field")
    list_direction: ListDirection | None = Field(default=None, description="List order")
    status: int | None = Field(default=None, description="0: unpublished, 1: published")


class GetCustomContentsInput(PageInput):
    status: int | None = Field(default=None, description="0: unpublished, 1: published")
    site_id: int | None = Field(default=None, description="Site ID")
    custom_table_id: int | None = Field(default=None, description="Custom table ID")


# =============================================================================
# Custom Tables
# =============================================================================


class AddCustomTableInput(ToolInput):
    name: str = Field(..., min_length=1, description="Table name")
    title: str = Field(..., min_length=1, description="Table title")
    custom_field_names: list[str] | None = Field(
        default=None, description="Names of existing custom fields to link"
    )


class EditCustomTableInput(ToolInput):
    id: int = Field(..., description="Custom table ID")
    name: str | None = Field(default=None, description="Table name")
    title: str | None = Field(default=None, description="Table title")
    type: str | None = Field(default=None, description="Table type")
    display_field: str | None = Field(default=None, description="Field used as entry label")
    has_child: int | None = Field(default=None, description="Entries may have children")
    custom_field_names: list[str] | None = Field(
        default=None, description="Names of existing custom fields to link"
    )


class GetCustomTablesInput(PageInput):
    status: int | None = Field(default=None, description="0: disabled, 1: enabled")
    type: str | None = Field(default=None, description="Table type")


# =============================================================================
# Custom Fields
# =============================================================================


class AddCustomFieldInput(ToolInput):
    name: str = Field(..., min_length=1, description="Field name")
    title: str = Field(..., min_length=1, description="Field title")
    type: CustomFieldType = Field(..., description="Field type")
    source: list[str] | None = Field(
        default=None, description="Choices for radio, select and similar types"
    )


class EditCustomFieldInput(ToolInput):
    id: int = Field(..., description="Custom field ID")
    name: str | None = Field(default=None, description="Field name")
    title: str | None = Field(default=None, description="Field title")
    type: CustomFieldType | None = Field(default=None, description="Field type")
    status: int | None = Field(default=None, description="0: disabled, 1: enabled")
    source: list[str] | None = Field(default=None, description="Choices")


class GetCustomFieldsInput(PageInput):
    name: str | None = Field(default=None, description="Filter by field name")
    status: int | None = Field(default=None, description="0: disabled, 1: enabled")
    type: CustomFieldType | None = Field(default=None, description="Filter by field type")


# =============================================================================
# Custom Entries
# =============================================================================


class AddCustomEntryInput(ToolInput):
    custom_table_id: int = Field(..., description="Custom table ID")
    title: str = Field(..., min_length=1, description="Entry title")
    name: str = Field(default="", description="Entry slug")
    status: bool = Field(default=False, description="Published")
    publish_begin: str | None = Field(
        default=None, description="Publish start (YYYY-MM-DD HH:MM:SS)"
    )
    publish_end: str | None = Field(default=None, description="Publish end (YYYY-MM-DD HH:MM:SS)")
    published: str | None = Field(
        default=None, description="Publish date (YYYY-MM-DD HH:MM:SS). Defaults to now."
    )
    creator_id: int = Field(default=1, description="Author user ID")
    custom_fields: dict[str, Any] = Field(
        default_factory=dict,
        description=(
            "Custom field values keyed by field name. For file fields, give a "
            "readable local file path."
        ),
    )


class EditCustomEntryInput(ToolInput):
    custom_table_id: int = Field(..., description="Custom table ID")
    id: int = Field(..., description="Custom entry ID")
    title: str | None = Field(default=None, description="Entry title")
    name: str | None = Field(default=None, description="Entry slug")
    status: bool | None = Field(default=None, description="Published")
    publish_begin: str | None = Field(default=None, description="Publish start")
    publish_end: str | None = Field(default=None, description="Publish end")
    published: str | None = Field(default=None, description="Publish date")
    creator_id: int | None = Field(default=None, description="Author user ID")
    custom_fields: dict[str, Any] | None = Field(
        default=None, description="Custom field values keyed by field name"
    )


class CustomEntryIdInput(ToolInput):
    custom_table_id: int = Field(..., description="Custom table ID")
    id: int = Field(..., description="Custom entry ID")


class GetCustomEntriesInput(ToolInput):
    custom_table_id: int = Field(..., description="Custom table ID")
    status: int | None = Field(default=None, description="0: unpublished, 1: published")
    limit: int = Field(default=20, description="Number of items to return")
    page: int = Field(default=1, description="Page number (1-based)")


# =============================================================================
# Custom Links
# =============================================================================


class AddCustomLinkInput(ToolInput):
    name: str = Field(..., min_length=1, description="Link name")
    title: str = Field(..., min_length=1, description="Link title")
    custom_table_id: int = Field(..., description="Custom table ID")
    custom_field_id: int = Field(..., description="Custom field ID")
    type: str | None = Field(default=None, description="Field type")
    display_front: bool = Field(default=True, description="Show on the front end")
    use_api: bool = Field(default=True, description="Expose through the API")
    search_target_admin: bool = Field(default=True, description="Searchable in admin")
    search_target_front: bool = Field(default=True, description="Searchable on the front end")
    status: bool = Field(default=True, description="Enabled")


class EditCustomLinkInput(ToolInput):
    id: int = Field(..., description="Custom link ID")
    name: str | None = Field(default=None, description="Link name")
    title: str | None = Field(default=None, description="Link title")
    custom_table_id: int | None = Field(default=None, description="Custom table ID")
    custom_field_id: int | None = Field(default=None, description="Custom field ID")
    type: str | None = Field(default=None, description="Field type")
    display_front: bool | None = Field(default=None, description="Show on the front end")
    use_api: bool | None = Field(default=None, description="Expose through the API")
    search_target_admin: bool | None = Field(default=None, description="Searchable in admin")
    search_target_front: bool | None = Field(
        default=None, description="Searchable on the front end"
    )
    status: bool | None = Field(default=None, description="Enabled")


class GetCustomLinksInput(PageInput):
    status: int | None = Field(default=None, description="0: disabled, 1: enabled")
    custom_table_id: int | None = Field(default=None, description="Custom table ID")
    custom_field_id: int | None = Field(default=None, description="Custom field ID")
    type: str | None = Field(default=None, description="Filter by type")
