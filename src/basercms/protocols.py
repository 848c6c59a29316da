"""
Remote Entity Service Protocol

Defines the interface the resolver and the tool handlers consume.
BaserCMSSession implements it over HTTP; tests substitute fakes.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from src.basercms.endpoints import EntityKind

Entity = dict[str, Any]


@runtime_checkable
class EntityService(Protocol):
    """
    Protocol for an authenticated session against the remote entity service.

    All operations may raise RemoteServiceError (AuthenticationError when
    the token is rejected).
    """

    async def list(
        self,
        kind: EntityKind,
        filters: dict[str, Any] | None = None,
        scope: int | None = None,
    ) -> list[Entity]:
        """
        List entities of a kind.

        Args:
            kind: Entity kind to list
            filters: Server-side filters (e.g. {"title": "News"})
            scope: Parent identifier for scoped kinds

        Returns:
            Candidate entities in server order
        """
        ...

    async def get(
        self,
        kind: EntityKind,
        entity_id: int,
        scope: int | None = None,
    ) -> Entity | None:
        """Fetch one entity, or None when it does not exist."""
        ...

    async def create(
        self,
        kind: EntityKind,
        payload: dict[str, Any],
        scope: int | None = None,
        files: dict[str, Any] | None = None,
    ) -> Entity:
        """Create an entity and return it as stored."""
        ...

    async def update(
        self,
        kind: EntityKind,
        entity_id: int,
        payload: dict[str, Any],
        scope: int | None = None,
        files: dict[str, Any] | None = None,
    ) -> Entity:
        """Apply a partial update and return the stored entity."""
        ...

    async def delete(
        self,
        kind: EntityKind,
        entity_id: int,
        scope: int | None = None,
    ) -> Any:
        """Delete an entity and return the service's response body."""
        ...
