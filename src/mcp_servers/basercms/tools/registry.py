"""
MCP Tool Registry

Declares every tool the server exposes: its name, description, input
model and the ToolHandlers method that serves it. TOOL_DEFINITIONS is
derived from this table in the shape MCP tools/list returns.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

from src.basercms.endpoints import EntityKind
from src.mcp_servers.basercms.tools import inputs


@dataclass(frozen=True)
class ToolSpec:
    """
    One registered tool.

    Attributes:
        name: Tool name as seen by MCP clients
        description: Human-readable description
        input_model: Pydantic model validating the arguments
        handler: Name of the ToolHandlers method serving the tool
        kind: Entity kind for the generic CRUD handlers
        needs_session: Whether the handler talks to the remote API
    """

    name: str
    description: str
    input_model: type[BaseModel]
    handler: str
    kind: EntityKind | None = None
    needs_session: bool = True

    def input_schema(self) -> dict[str, Any]:
        schema = self.input_model.model_json_schema()
        schema.pop("title", None)
        for prop in schema.get("properties", {}).values():
            prop.pop("title", None)
        schema.setdefault("properties", {})
        return schema

    def to_definition(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema(),
        }


def _crud(
    kind: EntityKind,
    label: str,
    plural: str,
    *,
    add: type[BaseModel] | None,
    edit: type[BaseModel] | None,
    list_input: type[BaseModel],
    id_input: type[BaseModel] = inputs.IdInput,
    add_handler: str = "add_entity",
    edit_handler: str = "edit_entity",
    plural_label: str | None = None,
) -> list[ToolSpec]:
    """Standard get/list/add/edit/delete tools for one entity kind."""
    prefix = "".join(part.capitalize() for part in kind.value.split("_"))
    lower = label.lower()
    specs = [
        ToolSpec(f"get{prefix}", f"Get the {lower} with the given ID.", id_input, "get_entity", kind),
        ToolSpec(f"get{plural}", f"List {plural_label or lower + 's'}.", list_input, "list_entities", kind),
        ToolSpec(
            f"delete{prefix}", f"Delete the {lower} with the given ID.", id_input, "delete_entity", kind
        ),
    ]
    if add is not None:
        specs.append(ToolSpec(f"add{prefix}", f"Add a {lower}.", add, add_handler, kind))
    if edit is not None:
        specs.append(
            ToolSpec(
                f"edit{prefix}",
                f"Edit the {lower} with the given ID. Only the fields supplied are changed.",
                edit,
                edit_handler,
                kind,
            )
        )
    return specs


TOOLS: tuple[ToolSpec, ...] = (
    # Blog
    *_crud(
        EntityKind.BLOG_POST,
        "blog post",
        "BlogPosts",
        add=inputs.AddBlogPostInput,
        edit=inputs.EditBlogPostInput,
        list_input=inputs.GetBlogPostsInput,
        add_handler="add_blog_post",
        edit_handler="edit_blog_post",
    ),
    *_crud(
        EntityKind.BLOG_CATEGORY,
        "blog category",
        "BlogCategories",
        plural_label="blog categories",
        add=inputs.AddBlogCategoryInput,
        edit=inputs.EditBlogCategoryInput,
        list_input=inputs.GetBlogCategoriesInput,
        add_handler="add_blog_category",
    ),
    *_crud(
        EntityKind.BLOG_CONTENT,
        "blog content",
        "BlogContents",
        add=inputs.AddBlogContentInput,
        edit=inputs.EditBlogContentInput,
        list_input=inputs.GetBlogContentsInput,
        add_handler="add_content",
    ),
    *_crud(
        EntityKind.BLOG_TAG,
        "blog tag",
        "BlogTags",
        add=inputs.AddBlogTagInput,
        edit=inputs.EditBlogTagInput,
        list_input=inputs.GetBlogTagsInput,
        add_handler="add_blog_tag",
        edit_handler="edit_blog_tag",
    ),
    # Custom content
    *_crud(
        EntityKind.CUSTOM_CONTENT,
        "custom content",
        "CustomContents",
        add=inputs.AddCustomContentInput,
        edit=inputs.EditCustomContentInput,
        list_input=inputs.GetCustomContentsInput,
        add_handler="add_content",
    ),
    *_crud(
        EntityKind.CUSTOM_TABLE,
        "custom table",
        "CustomTables",
        add=inputs.AddCustomTableInput,
        edit=inputs.EditCustomTableInput,
        list_input=inputs.GetCustomTablesInput,
        add_handler="add_custom_table",
        edit_handler="edit_custom_table",
    ),
    *_crud(
        EntityKind.CUSTOM_FIELD,
        "custom field",
        "CustomFields",
        add=inputs.AddCustomFieldInput,
        edit=inputs.EditCustomFieldInput,
        list_input=inputs.GetCustomFieldsInput,
        add_handler="add_custom_field",
        edit_handler="edit_custom_field",
    ),
    *_crud(
        EntityKind.CUSTOM_ENTRY,
        "custom entry",
        "CustomEntries",
        plural_label="custom entries",
        add=inputs.AddCustomEntryInput,
        edit=inputs.EditCustomEntryInput,
        list_input=inputs.GetCustomEntriesInput,
        id_input=inputs.CustomEntryIdInput,
        add_handler="add_custom_entry",
        edit_handler="edit_custom_entry",
    ),
    *_crud(
        EntityKind.CUSTOM_LINK,
        "custom link",
        "CustomLinks",
        add=inputs.AddCustomLinkInput,
        edit=inputs.EditCustomLinkInput,
        list_input=inputs.GetCustomLinksInput,
    ),
    # System
    ToolSpec(
        "serverInfo",
        "Return the server version and runtime environment.",
        inputs.NoInput,
        "server_info",
        needs_session=False,
    ),
)

TOOLS_BY_NAME: dict[str, ToolSpec] = {spec.name: spec for spec in TOOLS}

TOOL_DEFINITIONS: list[dict[str, Any]] = [spec.to_definition() for spec in TOOLS]


def get_tool(name: str) -> ToolSpec:
    """
    Look up a tool by name.

    Raises:
        ValueError: If the tool is unknown
    """
    spec = TOOLS_BY_NAME.get(name)
    if spec is None:
        raise ValueError(f"Unknown tool: {name}")
    return spec
