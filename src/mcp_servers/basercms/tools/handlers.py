"""
MCP Tool Handlers for baserCMS

Routes validated tool calls to the baserCMS API. Each call runs inside
its own session: acquire, resolve references, write, release.

Most tools share the generic get/list/add/edit/delete handlers below.
Tools whose payloads need reference resolution or extra steps (blog
posts, categories, tags, contents, custom tables, fields and entries)
have dedicated handlers.
"""

from __future__ import annotations

import logging
import platform
import re
from collections.abc import Awaitable, Callable
from contextlib import AbstractAsyncContextManager
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any

import anyio
from pydantic import BaseModel, ValidationError

from src.basercms.assembler import RequestAssembler
from src.basercms.client import BaserCMSClient
from src.basercms.endpoints import EntityKind, endpoint_for
from src.basercms.exceptions import (
    AuthenticationError,
    EntityNotFoundError,
    InvalidArgumentError,
    RemoteServiceError,
    WriteFailure,
)
from src.basercms.protocols import EntityService
from src.basercms.resolution import (
    EntityReference,
    Found,
    ReferenceKind,
    ReferenceResolver,
    ResolvedId,
    default_policies,
)
from src.common.telemetry import get_tracer
from src.mcp_servers.basercms.config import BaserCMSServerConfig
from src.mcp_servers.basercms.tools.registry import ToolSpec, get_tool

logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)

SessionFactory = Callable[[], AbstractAsyncContextManager[EntityService]]

_FILE_EXTENSION = re.compile(r"\.[a-zA-Z0-9]+$")


# =============================================================================
# Response Models
# =============================================================================


@dataclass(frozen=True)
class DeleteResult:
    """Response for delete tools."""

    deleted_id: int
    message: str
    data: Any = None
    success: bool = True

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


@dataclass(frozen=True)
class BlogPostResult:
    """Response for addBlogPost and editBlogPost."""

    blog_post: Any
    resolutions: dict[str, ResolvedId] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "blog_post": self.blog_post,
            "resolutions": {key: value.to_dict() for key, value in self.resolutions.items()},
        }


@dataclass(frozen=True)
class RequestScope:
    """Collaborators bound to one authenticated session."""

    session: EntityService
    resolver: ReferenceResolver
    assembler: RequestAssembler


# =============================================================================
# Tool Handlers
# =============================================================================


class ToolHandlers:
    """
    Handlers for MCP tool invocations.

    Holds configuration and a session factory only; nothing from one call
    is visible to the next.
    """

    def __init__(
        self,
        client: BaserCMSClient,
        server_config: BaserCMSServerConfig | None = None,
        session_factory: SessionFactory | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """
        Initialize tool handlers.

        Args:
            client: baserCMS client providing configuration and sessions
            server_config: Server identity reported by serverInfo
            session_factory: Replaces client.session (tests pass fakes)
            clock: Source of the current time for payload timestamps
        """
        self._client = client
        self._config = client.config
        self._server_config = server_config or BaserCMSServerConfig()
        self._session_factory = session_factory or client.session
        self._clock = clock
        self._policies = default_policies(self._config)

    async def handle_tool_call(
        self,
        tool_name: str,
        arguments: dict[str, Any] | None,
    ) -> Any:
        """
        Route a tool call to the appropriate handler.

        Args:
            tool_name: Name of the tool to invoke
            arguments: Tool arguments

        Returns:
            JSON-serializable tool result

        Raises:
            ValueError: If tool name is unknown
            InvalidArgumentError: If the arguments fail validation
            WriteFailure: If a create, edit or delete call fails
            RemoteServiceError: If any other remote call fails
        """
        spec = get_tool(tool_name)

        with tracer.start_as_current_span(f"mcp.tool.{tool_name}") as span:
            span.set_attribute("mcp.tool.name", tool_name)

            params = _validate_arguments(spec, arguments or {})
            handler = getattr(self, f"_{spec.handler}")

            if not spec.needs_session:
                result = await handler(None, spec, params)
            else:
                async with self._session_factory() as session:
                    result = await handler(self._request_scope(session), spec, params)

            span.set_attribute("mcp.tool.success", True)
            return result

    def _request_scope(self, session: EntityService) -> RequestScope:
        resolver = ReferenceResolver(session, self._policies)
        return RequestScope(
            session=session,
            resolver=resolver,
            assembler=RequestAssembler(resolver, clock=self._clock),
        )

    # =========================================================================
    # Generic CRUD
    # =========================================================================

    async def _get_entity(self, scope: RequestScope, spec: ToolSpec, params: BaseModel) -> Any:
        data = params.model_dump()
        entity_id = data.pop("id")
        entity = await scope.session.get(
            spec.kind, entity_id, scope=_operation_scope(spec.kind, data)
        )
        if entity is None:
            raise EntityNotFoundError(_label(spec.kind), entity_id)
        return entity

    async def _list_entities(self, scope: RequestScope, spec: ToolSpec, params: BaseModel) -> Any:
        filters = params.model_dump(exclude_none=True)
        endpoint = endpoint_for(spec.kind)

        list_scope = filters.pop(endpoint.scope_param, None) if endpoint.scope_param else None
        if list_scope is None and endpoint.scope_in_path:
            list_scope = self._config.default_blog_content_id

        return await scope.session.list(spec.kind, filters, scope=list_scope)

    async def _delete_entity(self, scope: RequestScope, spec: ToolSpec, params: BaseModel) -> Any:
        data = params.model_dump()
        entity_id = data.pop("id")
        result = await _write(
            spec.kind,
            "delete",
            scope.session.delete(spec.kind, entity_id, scope=_operation_scope(spec.kind, data)),
        )
        return DeleteResult(
            deleted_id=entity_id,
            message=f"Deleted {_label(spec.kind)} {entity_id}",
            data=result,
        ).to_dict()

    async def _add_entity(self, scope: RequestScope, spec: ToolSpec, params: BaseModel) -> Any:
        payload = scope.assembler.build_create(spec.kind, params.model_dump(exclude_none=True))
        body = payload.to_request()
        return await _write(
            spec.kind,
            "create",
            scope.session.create(spec.kind, body, scope=_operation_scope(spec.kind, body)),
        )

    async def _edit_entity(self, scope: RequestScope, spec: ToolSpec, params: BaseModel) -> Any:
        fields = params.model_dump(exclude_unset=True)
        entity_id = fields.pop("id")
        payload = scope.assembler.build_edit(spec.kind, fields)
        return await _write(
            spec.kind,
            "edit",
            scope.session.update(spec.kind, entity_id, payload.to_request()),
        )

    # =========================================================================
    # Blog
    # =========================================================================

    async def _add_blog_post(self, scope: RequestScope, spec: ToolSpec, params: BaseModel) -> Any:
        request = await scope.assembler.blog_post_create(**params.model_dump())
        created = await _write(
            spec.kind, "create", scope.session.create(spec.kind, request.to_request())
        )
        return BlogPostResult(created, request.resolutions).to_dict()

    async def _edit_blog_post(self, scope: RequestScope, spec: ToolSpec, params: BaseModel) -> Any:
        fields = params.model_dump(exclude_unset=True)
        entity_id = fields.pop("id")
        request = await scope.assembler.blog_post_edit(fields)
        updated = await _write(
            spec.kind, "edit", scope.session.update(spec.kind, entity_id, request.to_request())
        )
        return BlogPostResult(updated, request.resolutions).to_dict()

    async def _add_blog_category(
        self, scope: RequestScope, spec: ToolSpec, params: BaseModel
    ) -> Any:
        payload = scope.assembler.blog_category_create(
            params.model_dump(exclude_none=True),
            default_blog_content_id=self._config.default_blog_content_id,
        )
        body = payload.to_request()
        return await _write(
            spec.kind,
            "create",
            scope.session.create(spec.kind, body, scope=body["blog_content_id"]),
        )

    async def _add_blog_tag(self, scope: RequestScope, spec: ToolSpec, params: BaseModel) -> Any:
        payload = scope.assembler.build_create(spec.kind, {"name": _tag_name(params.name)})
        return await _write(spec.kind, "create", scope.session.create(spec.kind, payload.to_request()))

    async def _edit_blog_tag(self, scope: RequestScope, spec: ToolSpec, params: BaseModel) -> Any:
        payload = scope.assembler.build_edit(spec.kind, {"name": _tag_name(params.name)})
        return await _write(
            spec.kind, "edit", scope.session.update(spec.kind, params.id, payload.to_request())
        )

    async def _add_content(self, scope: RequestScope, spec: ToolSpec, params: BaseModel) -> Any:
        payload = scope.assembler.content_create(spec.kind, params.model_dump(exclude_none=True))
        return await _write(spec.kind, "create", scope.session.create(spec.kind, payload.to_request()))

    # =========================================================================
    # Custom Content
    # =========================================================================

    async def _add_custom_table(
        self, scope: RequestScope, spec: ToolSpec, params: BaseModel
    ) -> Any:
        data = params.model_dump(exclude_none=True)
        field_names = data.pop("custom_field_names", None) or []

        payload = scope.assembler.build_create(spec.kind, data)
        table = await _write(spec.kind, "create", scope.session.create(spec.kind, payload.to_request()))
        if not field_names:
            return table

        # Linking is best effort; the table itself already exists.
        links = await self._custom_links(scope, field_names)
        if not links:
            return {**table, "warning": "No custom fields were linked"}

        try:
            update = scope.assembler.build_edit(spec.kind, {"custom_links": links})
            return await scope.session.update(spec.kind, table["id"], update.to_request())
        except RemoteServiceError as e:
            logger.warning(f"Linking custom fields to table {table.get('id')} failed: {e}")
            return {
                **table,
                "warning": f"Failed to link custom fields: {e.message}",
                "attempted_custom_links": links,
            }

    async def _edit_custom_table(
        self, scope: RequestScope, spec: ToolSpec, params: BaseModel
    ) -> Any:
        fields = params.model_dump(exclude_unset=True)
        entity_id = fields.pop("id")
        field_names = fields.pop("custom_field_names", None) or []

        if field_names:
            links = await self._custom_links(scope, field_names)
            if links:
                fields["custom_links"] = links

        payload = scope.assembler.build_edit(spec.kind, fields)
        return await _write(
            spec.kind, "edit", scope.session.update(spec.kind, entity_id, payload.to_request())
        )

    async def _add_custom_field(
        self, scope: RequestScope, spec: ToolSpec, params: BaseModel
    ) -> Any:
        data = params.model_dump(exclude_none=True)
        if "source" in data:
            data["source"] = _join_source(data["source"])
        payload = scope.assembler.build_create(spec.kind, data)
        return await _write(spec.kind, "create", scope.session.create(spec.kind, payload.to_request()))

    async def _edit_custom_field(
        self, scope: RequestScope, spec: ToolSpec, params: BaseModel
    ) -> Any:
        fields = params.model_dump(exclude_unset=True)
        entity_id = fields.pop("id")
        if fields.get("source") is not None:
            fields["source"] = _join_source(fields["source"])
        payload = scope.assembler.build_edit(spec.kind, fields)
        return await _write(
            spec.kind, "edit", scope.session.update(spec.kind, entity_id, payload.to_request())
        )

    async def _add_custom_entry(
        self, scope: RequestScope, spec: ToolSpec, params: BaseModel
    ) -> Any:
        data = params.model_dump(exclude_none=True)
        custom_table_id = data["custom_table_id"]
        values, files = await self._split_file_fields(
            scope, custom_table_id, data.pop("custom_fields", {})
        )

        payload = scope.assembler.build_create(spec.kind, {**data, **values})
        return await _write(
            spec.kind,
            "create",
            scope.session.create(
                spec.kind, payload.to_request(), scope=custom_table_id, files=files or None
            ),
        )

    async def _edit_custom_entry(
        self, scope: RequestScope, spec: ToolSpec, params: BaseModel
    ) -> Any:
        fields = params.model_dump(exclude_unset=True)
        entity_id = fields.pop("id")
        custom_table_id = fields.pop("custom_table_id")
        values, files = await self._split_file_fields(
            scope, custom_table_id, fields.pop("custom_fields", None) or {}
        )

        payload = scope.assembler.build_edit(spec.kind, {**fields, **values})
        return await _write(
            spec.kind,
            "edit",
            scope.session.update(
                spec.kind,
                entity_id,
                payload.to_request(),
                scope=custom_table_id,
                files=files or None,
            ),
        )

    async def _custom_links(
        self, scope: RequestScope, field_names: list[str]
    ) -> dict[str, dict[str, Any]]:
        lookups = [
            await scope.resolver.lookup(EntityReference(ReferenceKind.CUSTOM_FIELD, name))
            for name in field_names
        ]
        return scope.assembler.custom_links(lookups)

    async def _split_file_fields(
        self,
        scope: RequestScope,
        custom_table_id: int,
        custom_fields: dict[str, Any],
    ) -> tuple[dict[str, Any], dict[str, tuple[str, bytes]]]:
        """
        Separate uploads from plain values.

        A value is uploaded when it names an existing local file and the
        table's link for that field is a BcCcFile field.
        """
        values: dict[str, Any] = {}
        files: dict[str, tuple[str, bytes]] = {}

        for name, value in custom_fields.items():
            if await _looks_like_file_path(value) and await _is_file_field(
                scope.resolver, custom_table_id, name
            ):
                path = anyio.Path(value)
                files[name] = (path.name, await path.read_bytes())
                logger.debug(f"Uploading {path.name} for custom field {name}")
            else:
                values[name] = value

        return values, files

    # =========================================================================
    # System
    # =========================================================================

    async def _server_info(self, scope: None, spec: ToolSpec, params: BaseModel) -> Any:
        return {
            "name": self._server_config.server_name,
            "version": self._server_config.server_version,
            "python": platform.python_version(),
            "platform": platform.platform(),
            "environment": self._config.environment,
        }


# =============================================================================
# Helpers
# =============================================================================


def _validate_arguments(spec: ToolSpec, arguments: dict[str, Any]) -> BaseModel:
    try:
        return spec.input_model.model_validate(arguments)
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ()))
        raise InvalidArgumentError(
            f"Invalid argument {location or 'input'} for {spec.name}: {first.get('msg')}",
            field=location or None,
        ) from e


async def _write(kind: EntityKind, operation: str, call: Awaitable[Any]) -> Any:
    """Await a remote write, reporting failures as WriteFailure."""
    try:
        return await call
    except (AuthenticationError, WriteFailure):
        raise
    except RemoteServiceError as e:
        logger.warning(f"Failed to {operation} {_label(kind)}: {e}")
        raise WriteFailure(_label(kind), operation, e.message, status_code=e.status_code) from e


def _operation_scope(kind: EntityKind, data: dict[str, Any]) -> int | None:
    """Scope to send on non-list operations, for kinds that require one."""
    endpoint = endpoint_for(kind)
    if not endpoint.scope_required or not endpoint.scope_param:
        return None
    return data.get(endpoint.scope_param)


def _label(kind: EntityKind | None) -> str:
    return kind.value.replace("_", " ") if kind else "entity"


def _tag_name(name: str) -> str:
    stripped = name.strip()
    if not stripped:
        raise InvalidArgumentError("name must not be blank", field="name")
    return stripped


def _join_source(source: list[str] | str) -> str:
    """Choices are stored one per line."""
    if isinstance(source, str):
        return source
    return "\n".join(source)


async def _looks_like_file_path(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    if "/" not in value and "\\" not in value:
        return False
    if not _FILE_EXTENSION.search(value):
        return False
    return await anyio.Path(value).is_file()


async def _is_file_field(resolver: ReferenceResolver, custom_table_id: int, name: str) -> bool:
    result = await resolver.lookup(
        EntityReference(ReferenceKind.CUSTOM_LINK, name, scope=custom_table_id)
    )
    if not isinstance(result, Found):
        return False
    custom_field = result.candidate.get("custom_field") or {}
    return custom_field.get("type") == "BcCcFile"
