"""
baserCMS Endpoint Table

Maps each remote entity kind to its admin API controller and to the keys
under which the API wraps single entities and collections.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class EntityKind(str, Enum):
    """Remote object categories, each with its own identifier space."""

    USER = "user"
    BLOG_POST = "blog_post"
    BLOG_CATEGORY = "blog_category"
    BLOG_CONTENT = "blog_content"
    BLOG_TAG = "blog_tag"
    CUSTOM_CONTENT = "custom_content"
    CUSTOM_TABLE = "custom_table"
    CUSTOM_FIELD = "custom_field"
    CUSTOM_ENTRY = "custom_entry"
    CUSTOM_LINK = "custom_link"


@dataclass(frozen=True)
class EndpointSpec:
    """
    Location of one entity kind in the admin API.

    Attributes:
        plugin: Plugin path segment (e.g. "bc-blog")
        controller: Controller path segment (e.g. "blog_posts")
        singular_key: Response key wrapping a single entity
        plural_key: Response key wrapping a collection
        scope_param: Name of the parent id this kind is scoped under
        scope_in_path: Scope goes into the index/add path instead of the query
        scope_required: Every operation, not just listing, carries the scope
    """

    plugin: str
    controller: str
    singular_key: str
    plural_key: str
    scope_param: str | None = None
    scope_in_path: bool = False
    scope_required: bool = False

    def collection_path(self, action: str, scope: int | None = None) -> str:
        """Path for index/add style actions."""
        path = f"{self.plugin}/{self.controller}/{action}"
        if scope is not None and self.scope_in_path:
            path += f"/{scope}"
        return f"{path}.json"

    def member_path(self, action: str, entity_id: int | str) -> str:
        """Path for view/edit/delete style actions."""
        return f"{self.plugin}/{self.controller}/{action}/{entity_id}.json"

    def scope_query(self, scope: int | None) -> dict[str, int]:
        """Query parameters carrying the scope, when it is not part of the path."""
        if scope is None or self.scope_in_path or not self.scope_param:
            return {}
        return {self.scope_param: scope}


LOGIN_PATH = "baser-core/users/login.json"

ENDPOINTS: dict[EntityKind, EndpointSpec] = {
    EntityKind.USER: EndpointSpec("baser-core", "users", "user", "users"),
    EntityKind.BLOG_POST: EndpointSpec(
        "bc-blog", "blog_posts", "blogPost", "blogPosts", scope_param="blog_content_id"
    ),
    EntityKind.BLOG_CATEGORY: EndpointSpec(
        "bc-blog",
        "blog_categories",
        "blogCategory",
        "blogCategories",
        scope_param="blog_content_id",
        scope_in_path=True,
        scope_required=True,
    ),
    EntityKind.BLOG_CONTENT: EndpointSpec("bc-blog", "blog_contents", "blogContent", "blogContents"),
    EntityKind.BLOG_TAG: EndpointSpec("bc-blog", "blog_tags", "blogTag", "blogTags"),
    EntityKind.CUSTOM_CONTENT: EndpointSpec(
        "bc-custom-content", "custom_contents", "customContent", "customContents"
    ),
    EntityKind.CUSTOM_TABLE: EndpointSpec(
        "bc-custom-content", "custom_tables", "customTable", "customTables"
    ),
    EntityKind.CUSTOM_FIELD: EndpointSpec(
        "bc-custom-content", "custom_fields", "customField", "customFields"
    ),
    EntityKind.CUSTOM_ENTRY: EndpointSpec(
        "bc-custom-content",
        "custom_entries",
        "customEntry",
        "customEntries",
        scope_param="custom_table_id",
        scope_required=True,
    ),
    EntityKind.CUSTOM_LINK: EndpointSpec(
        "bc-custom-content",
        "custom_links",
        "customLink",
        "customLinks",
        scope_param="custom_table_id",
    ),
}


def endpoint_for(kind: EntityKind) -> EndpointSpec:
    """Look up the endpoint spec for an entity kind."""
    return ENDPOINTS[kind]
