"""
baserCMS HTTP Client

Session-scoped access to the baserCMS admin Web API.

A BaserCMSClient holds configuration only. Each unit of work acquires its
own authenticated BaserCMSSession:

    client = BaserCMSClient(config)
    async with client.session() as session:
        posts = await session.list(EntityKind.BLOG_POST, {"limit": 10})

The session owns an httpx.AsyncClient and an access token, and both are
released when the block exits. No process-wide session is kept.
"""

from __future__ import annotations

import json
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import httpx

from src.basercms.config import BaserCMSConfig
from src.basercms.endpoints import LOGIN_PATH, EntityKind, endpoint_for
from src.basercms.exceptions import AuthenticationError, RemoteServiceError
from src.common.logging import get_sanitized_logger
from src.common.telemetry import get_tracer

logger = get_sanitized_logger(__name__)
tracer = get_tracer(__name__)


class BaserCMSSession:
    """
    Authenticated session against the baserCMS admin API.

    Implements the EntityService protocol. All calls are awaited to
    completion; nothing is retried.
    """

    def __init__(self, http: httpx.AsyncClient, access_token: str | None = None):
        """
        Initialize the session.

        Args:
            http: HTTP client whose base_url points at the admin API
            access_token: Token from a previous login, if any
        """
        self._http = http
        self._access_token = access_token

    @property
    def is_authenticated(self) -> bool:
        return self._access_token is not None

    async def login(self, email: str, password: str) -> str:
        """
        Obtain an access token.

        Raises:
            AuthenticationError: If the credentials are rejected
            RemoteServiceError: If the API cannot be reached
        """
        with tracer.start_as_current_span("basercms.login") as span:
            data = await self._request(
                "POST",
                LOGIN_PATH,
                json={"email": email, "password": password},
                authenticated=False,
            )
            token = data.get("access_token") if isinstance(data, dict) else None
            if not token:
                span.set_attribute("basercms.authenticated", False)
                raise AuthenticationError("Login response did not contain an access token")

            self._access_token = token
            span.set_attribute("basercms.authenticated", True)
            logger.debug("Logged in to baserCMS API")
            return token

    # =========================================================================
    # Entity Operations
    # =========================================================================

    async def list(
        self,
        kind: EntityKind,
        filters: dict[str, Any] | None = None,
        scope: int | None = None,
    ) -> list[dict[str, Any]]:
        """
        List entities of a kind.

        Args:
            kind: Entity kind
            filters: Query parameters understood by the index action
            scope: Parent id for scoped kinds

        Returns:
            Entities in the order the API returned them
        """
        endpoint = endpoint_for(kind)
        params = _clean_params({**(filters or {}), **endpoint.scope_query(scope)})

        with tracer.start_as_current_span("basercms.list") as span:
            span.set_attribute("basercms.entity", kind.value)
            data = await self._request("GET", endpoint.collection_path("index", scope), params=params)
            items = _unwrap(data, endpoint.plural_key)
            if not isinstance(items, list):
                items = []
            span.set_attribute("basercms.result_count", len(items))
            return items

    async def get(
        self,
        kind: EntityKind,
        entity_id: int,
        scope: int | None = None,
    ) -> dict[str, Any] | None:
        """Fetch one entity. Returns None on 404."""
        endpoint = endpoint_for(kind)

        with tracer.start_as_current_span("basercms.get") as span:
            span.set_attribute("basercms.entity", kind.value)
            span.set_attribute("basercms.id", entity_id)
            try:
                data = await self._request(
                    "GET",
                    endpoint.member_path("view", entity_id),
                    params=endpoint.scope_query(scope),
                )
            except RemoteServiceError as e:
                if e.status_code == 404:
                    span.set_attribute("basercms.found", False)
                    return None
                raise
            span.set_attribute("basercms.found", True)
            return _unwrap(data, endpoint.singular_key)

    async def create(
        self,
        kind: EntityKind,
        payload: dict[str, Any],
        scope: int | None = None,
        files: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Create an entity and return it as stored."""
        endpoint = endpoint_for(kind)

        with tracer.start_as_current_span("basercms.create") as span:
            span.set_attribute("basercms.entity", kind.value)
            data = await self._write(
                endpoint.collection_path("add", scope),
                payload,
                params=endpoint.scope_query(scope),
                files=files,
            )
            return _unwrap(data, endpoint.singular_key)

    async def update(
        self,
        kind: EntityKind,
        entity_id: int,
        payload: dict[str, Any],
        scope: int | None = None,
        files: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Send a partial update. Only the keys in ``payload`` are changed."""
        endpoint = endpoint_for(kind)

        with tracer.start_as_current_span("basercms.update") as span:
            span.set_attribute("basercms.entity", kind.value)
            span.set_attribute("basercms.id", entity_id)
            data = await self._write(
                endpoint.member_path("edit", entity_id),
                payload,
                params=endpoint.scope_query(scope),
                files=files,
            )
            return _unwrap(data, endpoint.singular_key)

    async def delete(
        self,
        kind: EntityKind,
        entity_id: int,
        scope: int | None = None,
    ) -> Any:
        endpoint = endpoint_for(kind)

        with tracer.start_as_current_span("basercms.delete") as span:
            span.set_attribute("basercms.entity", kind.value)
            span.set_attribute("basercms.id", entity_id)
            return await self._request(
                "POST",
                endpoint.member_path("delete", entity_id),
                params=endpoint.scope_query(scope),
            )

    # =========================================================================
    # HTTP
    # =========================================================================

    async def _write(
        self,
        path: str,
        payload: dict[str, Any],
        params: dict[str, Any],
        files: dict[str, Any] | None,
    ) -> Any:
        if files:
            # multipart requests carry the remaining fields as form data
            return await self._request(
                "POST", path, params=params, data=_form_fields(payload), files=files
            )
        return await self._request("POST", path, params=params, json=payload)

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        data: dict[str, Any] | None = None,
        files: dict[str, Any] | None = None,
        authenticated: bool = True,
    ) -> Any:
        headers = {"Accept": "application/json"}
        if authenticated:
            if not self._access_token:
                raise AuthenticationError("Session is not logged in")
            headers["Authorization"] = self._access_token

        try:
            response = await self._http.request(
                method,
                path,
                params=params or None,
                json=json,
                data=data,
                files=files,
                headers=headers,
            )
        except httpx.HTTPError as e:
            logger.warning(f"baserCMS API request failed: {method} {path}: {e}")
            raise RemoteServiceError(f"Could not reach baserCMS API: {e}") from e

        if response.status_code == 401:
            raise AuthenticationError(_error_message(response), status_code=401)
        if response.is_error:
            raise RemoteServiceError(
                _error_message(response), status_code=response.status_code
            )

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise RemoteServiceError(
                f"baserCMS API returned a non-JSON body for {path}",
                status_code=response.status_code,
            ) from e


class BaserCMSClient:
    """
    Factory for authenticated sessions.

    Holds no connection state between sessions.
    """

    def __init__(
        self,
        config: BaserCMSConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the client.

        Args:
            config: Connection settings. If None, loads from environment.
            transport: Optional httpx transport (tests pass httpx.MockTransport)
        """
        self._config = config or BaserCMSConfig()
        self._transport = transport

    @property
    def config(self) -> BaserCMSConfig:
        return self._config

    @asynccontextmanager
    async def session(self) -> AsyncIterator[BaserCMSSession]:
        """
        Acquire an authenticated session for one unit of work.

        Raises:
            MissingConfigError: If credentials are not configured
            AuthenticationError: If login fails
        """
        email, password = self._config.require_credentials()

        async with httpx.AsyncClient(
            base_url=self._config.api_base_url,
            timeout=httpx.Timeout(self._config.timeout_seconds),
            transport=self._transport,
        ) as http:
            session = BaserCMSSession(http)
            await session.login(email, password)
            yield session


# =============================================================================
# Helpers
# =============================================================================


def _unwrap(data: Any, key: str) -> Any:
    """Return ``data[key]`` when the API wrapped the result, else ``data``."""
    if isinstance(data, dict) and key in data:
        return data[key]
    return data


def _clean_params(params: dict[str, Any]) -> dict[str, Any]:
    """Drop None values and encode booleans the way the API expects."""
    cleaned: dict[str, Any] = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            value = int(value)
        cleaned[key] = value
    return cleaned


def _form_fields(payload: dict[str, Any]) -> dict[str, Any]:
    """Flatten a payload into multipart form values. Nested values are sent as JSON."""
    fields: dict[str, Any] = {}
    for key, value in payload.items():
        if value is None:
            fields[key] = ""
        elif isinstance(value, bool):
            fields[key] = "1" if value else "0"
        elif isinstance(value, (dict, list, tuple)):
            fields[key] = json.dumps(value, ensure_ascii=False)
        else:
            fields[key] = value
    return fields


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        message = body.get("message")
        errors = body.get("errors")
        if message and errors:
            return f"{message} {errors}"
        if message:
            return str(message)
        if errors:
            return str(errors)
    return f"HTTP {response.status_code} from baserCMS API"
