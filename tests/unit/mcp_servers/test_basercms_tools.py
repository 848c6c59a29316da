"""
Unit tests for the baserCMS MCP tool handlers.

Each handler runs against the in-memory FakeEntityService through an
injected session factory.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime
from unittest.mock import MagicMock

import httpx
import pytest

from src.basercms.client import BaserCMSClient
from src.basercms.config import BaserCMSConfig
from src.basercms.endpoints import EntityKind
from src.basercms.exceptions import (
    AuthenticationError,
    EntityNotFoundError,
    InvalidArgumentError,
    RemoteServiceError,
    WriteFailure,
)
from src.mcp_servers.basercms.config import BaserCMSServerConfig
from src.mcp_servers.basercms.tools import TOOL_DEFINITIONS, ToolHandlers
from src.mcp_servers.basercms.tools.registry import TOOLS_BY_NAME, get_tool

NOW = datetime(2025, 4, 1, 9, 30, 15)
NOW_TEXT = "2025-04-01 09:30:15"


@pytest.fixture
def basercms_config():
    return BaserCMSConfig(
        _env_file=None,
        email="admin@example.com",
        password="secret",
        default_blog_content_id=1,
        default_user_id=1,
    )


@pytest.fixture
def handlers(basercms_config, fake_session_factory):
    return ToolHandlers(
        BaserCMSClient(basercms_config),
        server_config=BaserCMSServerConfig(server_name="basercms-test", server_version="9.9.9"),
        session_factory=fake_session_factory,
        clock=lambda: NOW,
    )


# =============================================================================
# Tool Definitions
# =============================================================================


class TestToolDefinitions:
    """The advertised tool list."""

    def test_core_tools_present(self) -> None:
        """All blog and custom content tools are registered."""
        names = {tool["name"] for tool in TOOL_DEFINITIONS}

        expected = {
            "addBlogPost", "editBlogPost", "getBlogPost", "getBlogPosts", "deleteBlogPost",
            "addBlogCategory", "editBlogCategory", "getBlogCategory", "getBlogCategories",
            "deleteBlogCategory", "addBlogContent", "editBlogContent", "getBlogContent",
            "getBlogContents", "deleteBlogContent", "addBlogTag", "editBlogTag", "getBlogTag",
            "getBlogTags", "deleteBlogTag", "addCustomContent", "editCustomContent",
            "getCustomContent", "getCustomContents", "deleteCustomContent", "addCustomTable",
            "editCustomTable", "getCustomTable", "getCustomTables", "deleteCustomTable",
            "addCustomField", "editCustomField", "getCustomField", "getCustomFields",
            "deleteCustomField", "addCustomEntry", "editCustomEntry", "getCustomEntry",
            "getCustomEntries", "deleteCustomEntry", "addCustomLink", "editCustomLink",
            "getCustomLink", "getCustomLinks", "deleteCustomLink", "serverInfo",
        }
        assert expected <= names
        assert len(names) == len(TOOL_DEFINITIONS)

    def test_add_blog_post_schema(self) -> None:
        """addBlogPost requires title and detail only."""
        tool = next(t for t in TOOL_DEFINITIONS if t["name"] == "addBlogPost")
        schema = tool["inputSchema"]

        assert schema["type"] == "object"
        assert set(schema["required"]) == {"title", "detail"}
        assert "category" in schema["properties"]
        assert "title" not in schema["properties"]["title"]

    def test_list_description_plural(self) -> None:
        """Irregular plurals read naturally."""
        assert get_tool("getBlogCategories").description == "List blog categories."
        assert get_tool("getCustomEntries").description == "List custom entries."

    def test_unknown_tool(self) -> None:
        """Unknown tools raise ValueError."""
        with pytest.raises(ValueError, match="Unknown tool"):
            get_tool("publishEverything")

    def test_every_handler_exists(self, handlers) -> None:
        """Each registered tool maps to a ToolHandlers method."""
        for spec in TOOLS_BY_NAME.values():
            assert callable(getattr(handlers, f"_{spec.handler}"))


# =============================================================================
# Blog Posts
# =============================================================================


class TestBlogPostTools:
    """addBlogPost and editBlogPost."""

    @pytest.mark.asyncio
    async def test_add_blog_post_resolves_names(self, handlers, fake_service) -> None:
        """Names become ids and the resolution outcome is reported."""
        fake_service.seed(EntityKind.BLOG_CONTENT, {"id": 3, "title": "News"})
        fake_service.seed(
            EntityKind.BLOG_CATEGORY, {"id": 9, "name": "uncategorized", "title": "未分類"}
        )

        result = await handlers.handle_tool_call(
            "addBlogPost",
            {
                "title": "AI活用の新時代",
                "detail": "<p>本文</p>",
                "category": "未分類",
                "blog_content": "News",
            },
        )

        created = fake_service.created[0]
        assert created["kind"] == EntityKind.BLOG_POST
        assert created["payload"]["blog_category_id"] == 9
        assert created["payload"]["blog_content_id"] == 3
        assert created["payload"]["user_id"] == 1
        assert result["blog_post"]["title"] == "AI活用の新時代"
        assert result["resolutions"]["blog_category_id"] == {
            "numeric_id": 9,
            "matched": True,
            "used_default": False,
        }
        assert result["resolutions"]["user_id"]["used_default"] is True

    @pytest.mark.asyncio
    async def test_category_lookup_failure_still_creates(self, handlers, fake_service) -> None:
        """A network error during category lookup does not block the post."""
        fake_service.list_errors[EntityKind.BLOG_CATEGORY] = httpx.ConnectError("refused")

        result = await handlers.handle_tool_call(
            "addBlogPost", {"title": "Hello", "detail": "Body", "category": "News"}
        )

        assert len(fake_service.created) == 1
        payload = fake_service.created[0]["payload"]
        assert payload["blog_category_id"] is None
        assert payload["title"] == "Hello"
        assert result["resolutions"]["blog_category_id"]["used_default"] is True

    @pytest.mark.asyncio
    async def test_missing_detail_sends_nothing(self, handlers, fake_service) -> None:
        """Invalid input never reaches the remote service."""
        with pytest.raises(InvalidArgumentError) as exc_info:
            await handlers.handle_tool_call("addBlogPost", {"title": "Hello"})

        assert exc_info.value.field == "detail"
        assert fake_service.calls == []

    @pytest.mark.asyncio
    async def test_unknown_argument_rejected(self, handlers) -> None:
        """Arguments outside the schema are rejected."""
        with pytest.raises(InvalidArgumentError):
            await handlers.handle_tool_call(
                "addBlogPost", {"title": "Hello", "detail": "Body", "tags": ["x"]}
            )

    @pytest.mark.asyncio
    async def test_malformed_email_rejected(self, handlers, fake_service) -> None:
        """An author email that is not an address fails validation before any call."""
        with pytest.raises(InvalidArgumentError) as exc_info:
            await handlers.handle_tool_call(
                "addBlogPost", {"title": "Hello", "detail": "Body", "email": "not-an-email"}
            )

        assert exc_info.value.field == "email"
        assert fake_service.calls == []

    @pytest.mark.asyncio
    async def test_author_email_resolved(self, handlers, fake_service) -> None:
        """A well-formed author email is resolved to the matching user."""
        fake_service.seed(EntityKind.USER, {"id": 7, "email": "writer@example.com"})

        result = await handlers.handle_tool_call(
            "editBlogPost", {"id": 7, "email": "writer@example.com"}
        )

        assert fake_service.updated[0]["payload"]["user_id"] == 7
        assert result["resolutions"]["user_id"]["matched"] is True

    @pytest.mark.asyncio
    async def test_edit_title_only(self, handlers, fake_service) -> None:
        """Editing the title sends the title and modified, nothing else."""
        result = await handlers.handle_tool_call("editBlogPost", {"id": 7, "title": "New"})

        update = fake_service.updated[0]
        assert update["id"] == 7
        assert update["payload"] == {"title": "New", "modified": NOW_TEXT}
        assert result["blog_post"] == {"id": 7, "title": "New", "modified": NOW_TEXT}
        assert result["resolutions"] == {}

    @pytest.mark.asyncio
    async def test_write_failure(self, handlers, fake_service) -> None:
        """A rejected create surfaces as WriteFailure."""
        fake_service.write_error = RemoteServiceError("Save failed", status_code=500)

        with pytest.raises(WriteFailure) as exc_info:
            await handlers.handle_tool_call("addBlogPost", {"title": "Hello", "detail": "Body"})

        assert exc_info.value.code == "WRITE_FAILED"
        assert exc_info.value.status_code == 500
        assert "Save failed" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_authentication_error_passes_through(self, handlers, fake_service) -> None:
        """An expired token is not disguised as a write failure."""
        fake_service.write_error = AuthenticationError("expired", status_code=401)

        with pytest.raises(AuthenticationError):
            await handlers.handle_tool_call("editBlogPost", {"id": 7, "title": "New"})


# =============================================================================
# Generic CRUD
# =============================================================================


class TestGenericTools:
    """get/list/delete and plain add/edit tools."""

    @pytest.mark.asyncio
    async def test_get_existing(self, handlers, fake_service) -> None:
        """get returns the entity as stored."""
        fake_service.seed(EntityKind.BLOG_TAG, {"id": 3, "name": "python"})

        assert await handlers.handle_tool_call("getBlogTag", {"id": 3}) == {
            "id": 3,
            "name": "python",
        }

    @pytest.mark.asyncio
    async def test_get_missing(self, handlers) -> None:
        """get on an unknown id raises NOT_FOUND."""
        with pytest.raises(EntityNotFoundError) as exc_info:
            await handlers.handle_tool_call("getBlogPost", {"id": 404})

        assert exc_info.value.message == "blog post 404 not found"

    @pytest.mark.asyncio
    async def test_get_custom_entry_is_scoped(self, handlers, fake_service) -> None:
        """Custom entries are fetched within their table."""
        fake_service.seed(EntityKind.CUSTOM_ENTRY, {"id": 4, "title": "Entry"})

        await handlers.handle_tool_call("getCustomEntry", {"custom_table_id": 2, "id": 4})

        assert fake_service.calls == [("get", EntityKind.CUSTOM_ENTRY, 4, 2)]

    @pytest.mark.asyncio
    async def test_list_blog_categories_defaults_to_default_blog(
        self, handlers, fake_service
    ) -> None:
        """Categories are listed in the default blog when none is given."""
        await handlers.handle_tool_call("getBlogCategories", {})

        assert fake_service.calls == [("list", EntityKind.BLOG_CATEGORY, {}, 1)]

    @pytest.mark.asyncio
    async def test_list_custom_entries_paging(self, handlers, fake_service) -> None:
        """Custom entries default to 20 per page."""
        await handlers.handle_tool_call("getCustomEntries", {"custom_table_id": 2})

        assert fake_service.calls == [
            ("list", EntityKind.CUSTOM_ENTRY, {"limit": 20, "page": 1}, 2)
        ]

    @pytest.mark.asyncio
    async def test_list_blog_posts_filters(self, handlers, fake_service) -> None:
        """Unset filters are not sent."""
        await handlers.handle_tool_call(
            "getBlogPosts", {"blog_content_id": 3, "status": 1, "limit": 5}
        )

        assert fake_service.calls == [
            ("list", EntityKind.BLOG_POST, {"limit": 5, "status": 1}, 3)
        ]

    @pytest.mark.asyncio
    async def test_delete(self, handlers, fake_service) -> None:
        """Delete reports the id and the API response."""
        result = await handlers.handle_tool_call("deleteBlogPost", {"id": 7})

        assert result == {
            "deleted_id": 7,
            "message": "Deleted blog post 7",
            "data": {"message": "deleted"},
            "success": True,
        }

    @pytest.mark.asyncio
    async def test_delete_failure(self, handlers, fake_service) -> None:
        """A failed delete is a WriteFailure."""
        fake_service.write_error = RemoteServiceError("Locked", status_code=403)

        with pytest.raises(WriteFailure) as exc_info:
            await handlers.handle_tool_call("deleteBlogTag", {"id": 3})

        assert exc_info.value.operation == "delete"

    @pytest.mark.asyncio
    async def test_edit_sends_only_supplied_fields(self, handlers, fake_service) -> None:
        """Generic edits are partial too."""
        await handlers.handle_tool_call("editCustomLink", {"id": 5, "status": False})

        assert fake_service.updated[0]["payload"] == {"status": False, "modified": NOW_TEXT}

    @pytest.mark.asyncio
    async def test_add_custom_link(self, handlers, fake_service) -> None:
        """Plain adds fill defaults."""
        await handlers.handle_tool_call(
            "addCustomLink",
            {"name": "price", "title": "Price", "custom_table_id": 2, "custom_field_id": 11},
        )

        payload = fake_service.created[0]["payload"]
        assert payload["type"] == ""
        assert payload["display_front"] is True


# =============================================================================
# Blog Categories, Tags and Contents
# =============================================================================


class TestBlogStructureTools:
    """Category, tag and blog content creation."""

    @pytest.mark.asyncio
    async def test_add_blog_category(self, handlers, fake_service) -> None:
        """The slug is derived and the category is created in the default blog."""
        await handlers.handle_tool_call("addBlogCategory", {"title": "Release Notes"})

        created = fake_service.created[0]
        assert created["payload"]["name"] == "release_notes"
        assert created["payload"]["blog_content_id"] == 1
        assert created["scope"] == 1

    @pytest.mark.asyncio
    async def test_add_blog_tag_trims(self, handlers, fake_service) -> None:
        """Tag names are trimmed."""
        await handlers.handle_tool_call("addBlogTag", {"name": "  python  "})

        assert fake_service.created[0]["payload"] == {
            "name": "python",
            "created": NOW_TEXT,
            "modified": NOW_TEXT,
        }

    @pytest.mark.asyncio
    async def test_blank_tag_rejected(self, handlers, fake_service) -> None:
        """A tag made of whitespace is rejected."""
        with pytest.raises(InvalidArgumentError):
            await handlers.handle_tool_call("addBlogTag", {"name": "   "})

        assert fake_service.created == []

    @pytest.mark.asyncio
    async def test_edit_blog_tag(self, handlers, fake_service) -> None:
        """Tag edits send the trimmed name."""
        await handlers.handle_tool_call("editBlogTag", {"id": 3, "name": " ai "})

        assert fake_service.updated[0]["payload"] == {"name": "ai", "modified": NOW_TEXT}

    @pytest.mark.asyncio
    async def test_add_blog_content(self, handlers, fake_service) -> None:
        """Blog contents nest their placement fields."""
        await handlers.handle_tool_call("addBlogContent", {"name": "news", "title": "News"})

        payload = fake_service.created[0]["payload"]
        assert payload["content"]["name"] == "news"
        assert payload["content"]["title"] == "News"
        assert payload["template"] == "blog"


# =============================================================================
# Custom Content
# =============================================================================


class TestCustomContentTools:
    """Custom tables, fields and entries."""

    @pytest.mark.asyncio
    async def test_add_custom_table_links_fields(self, handlers, fake_service) -> None:
        """Named fields that exist are linked after the table is created."""
        fake_service.seed(
            EntityKind.CUSTOM_FIELD,
            {"id": 11, "name": "price", "title": "Price", "type": "BcCcText"},
        )

        result = await handlers.handle_tool_call(
            "addCustomTable",
            {"name": "products", "title": "Products", "custom_field_names": ["missing", "price"]},
        )

        table_id = 101
        assert fake_service.created[0]["payload"]["name"] == "products"
        update = fake_service.updated[0]
        assert update["id"] == table_id
        assert list(update["payload"]["custom_links"]) == ["new_2"]
        assert update["payload"]["custom_links"]["new_2"]["custom_field_id"] == 11
        assert result["id"] == table_id

    @pytest.mark.asyncio
    async def test_add_custom_table_without_matches(self, handlers, fake_service) -> None:
        """When no field matches, the table is returned with a warning."""
        result = await handlers.handle_tool_call(
            "addCustomTable",
            {"name": "products", "title": "Products", "custom_field_names": ["missing"]},
        )

        assert result["warning"] == "No custom fields were linked"
        assert fake_service.updated == []

    @pytest.mark.asyncio
    async def test_add_custom_table_link_failure(self, handlers, fake_service) -> None:
        """A failed linking step keeps the created table."""
        fake_service.seed(EntityKind.CUSTOM_FIELD, {"id": 11, "name": "price", "type": "BcCcText"})
        fake_service.update_error = RemoteServiceError("Save failed", status_code=500)

        result = await handlers.handle_tool_call(
            "addCustomTable",
            {"name": "products", "title": "Products", "custom_field_names": ["price"]},
        )

        assert result["id"] == 101
        assert "Save failed" in result["warning"]
        assert "new_1" in result["attempted_custom_links"]

    @pytest.mark.asyncio
    async def test_add_custom_field_joins_source(self, handlers, fake_service) -> None:
        """Choices are stored one per line."""
        await handlers.handle_tool_call(
            "addCustomField",
            {"name": "size", "title": "Size", "type": "BcCcRadio", "source": ["S", "M", "L"]},
        )

        payload = fake_service.created[0]["payload"]
        assert payload["source"] == "S\nM\nL"
        assert payload["status"] == 1

    @pytest.mark.asyncio
    async def test_add_custom_field_rejects_unknown_type(self, handlers, fake_service) -> None:
        """Field types are limited to the known set."""
        with pytest.raises(InvalidArgumentError):
            await handlers.handle_tool_call(
                "addCustomField", {"name": "x", "title": "X", "type": "Spreadsheet"}
            )

    @pytest.mark.asyncio
    async def test_add_custom_entry_with_values(self, handlers, fake_service) -> None:
        """Custom field values are merged into the entry."""
        await handlers.handle_tool_call(
            "addCustomEntry",
            {"custom_table_id": 2, "title": "Widget", "custom_fields": {"price": "100"}},
        )

        created = fake_service.created[0]
        assert created["scope"] == 2
        assert created["files"] is None
        assert created["payload"]["price"] == "100"
        assert created["payload"]["published"] == NOW_TEXT

    @pytest.mark.asyncio
    async def test_add_custom_entry_uploads_file(self, handlers, fake_service, tmp_path) -> None:
        """A local path given for a file field is uploaded."""
        image = tmp_path / "photo.png"
        image.write_bytes(b"\x89PNG")
        fake_service.seed(
            EntityKind.CUSTOM_LINK,
            {"id": 1, "name": "photo", "custom_field": {"type": "BcCcFile"}},
        )

        await handlers.handle_tool_call(
            "addCustomEntry",
            {"custom_table_id": 2, "title": "Widget", "custom_fields": {"photo": str(image)}},
        )

        created = fake_service.created[0]
        assert created["files"] == {"photo": ("photo.png", b"\x89PNG")}
        assert "photo" not in created["payload"]

    @pytest.mark.asyncio
    async def test_path_for_text_field_is_plain_value(
        self, handlers, fake_service, tmp_path
    ) -> None:
        """Paths are only uploaded for file fields."""
        notes = tmp_path / "notes.txt"
        notes.write_text("hi")
        fake_service.seed(
            EntityKind.CUSTOM_LINK,
            {"id": 1, "name": "memo", "custom_field": {"type": "BcCcText"}},
        )

        await handlers.handle_tool_call(
            "addCustomEntry",
            {"custom_table_id": 2, "title": "Widget", "custom_fields": {"memo": str(notes)}},
        )

        created = fake_service.created[0]
        assert created["files"] is None
        assert created["payload"]["memo"] == str(notes)

    @pytest.mark.asyncio
    async def test_missing_file_is_plain_value(self, handlers, fake_service, tmp_path) -> None:
        """A path that does not exist on disk is sent as text."""
        missing = str(tmp_path / "absent.png")
        fake_service.seed(
            EntityKind.CUSTOM_LINK,
            {"id": 1, "name": "photo", "custom_field": {"type": "BcCcFile"}},
        )

        await handlers.handle_tool_call(
            "addCustomEntry",
            {"custom_table_id": 2, "title": "Widget", "custom_fields": {"photo": missing}},
        )

        created = fake_service.created[0]
        assert created["files"] is None
        assert created["payload"]["photo"] == missing

    @pytest.mark.asyncio
    async def test_edit_custom_entry(self, handlers, fake_service) -> None:
        """Entry edits are scoped and partial."""
        await handlers.handle_tool_call(
            "editCustomEntry",
            {"custom_table_id": 2, "id": 4, "custom_fields": {"price": "120"}},
        )

        update = fake_service.updated[0]
        assert update["scope"] == 2
        assert update["payload"] == {"price": "120", "modified": NOW_TEXT}


# =============================================================================
# System
# =============================================================================


class TestServerInfo:
    """serverInfo runs without a session."""

    @pytest.mark.asyncio
    async def test_server_info_without_session(self, basercms_config) -> None:
        """No login happens for serverInfo."""
        factory = MagicMock(side_effect=AssertionError("session must not be opened"))
        handlers = ToolHandlers(
            BaserCMSClient(basercms_config),
            server_config=BaserCMSServerConfig(server_name="basercms-test", server_version="9.9.9"),
            session_factory=factory,
        )

        info = await handlers.handle_tool_call("serverInfo", {})

        assert info["name"] == "basercms-test"
        assert info["version"] == "9.9.9"
        assert "python" in info
        factory.assert_not_called()

    @pytest.mark.asyncio
    async def test_each_call_gets_a_fresh_session(self, basercms_config, fake_service) -> None:
        """Sessions are acquired and released per call."""
        opened = []

        @asynccontextmanager
        async def factory():
            opened.append(True)
            yield fake_service

        handlers = ToolHandlers(BaserCMSClient(basercms_config), session_factory=factory)

        await handlers.handle_tool_call("getBlogTags", {})
        await handlers.handle_tool_call("getBlogTags", {})

        assert len(opened) == 2
