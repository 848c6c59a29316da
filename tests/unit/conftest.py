"""
Pytest configuration for unit tests.

Disables telemetry and provides an in-memory stand-in for the baserCMS API.
"""

from __future__ import annotations

import os
from contextlib import asynccontextmanager
from typing import Any

import pytest


def pytest_configure(config):
    """Configure telemetry for unit tests."""
    # Disable telemetry for unit tests to avoid OTEL SDK conflicts with mocks
    # This ensures get_tracer() returns NoOpTracer instead of real tracer
    os.environ["BASERCMS_TELEMETRY_ENABLED"] = "false"


class FakeEntityService:
    """
    In-memory EntityService.

    ``list`` ignores filters and returns the seeded entities in order, so
    exact matching is left to the code under test. Every call is recorded.
    """

    def __init__(self) -> None:
        self.entities: dict[Any, list[dict[str, Any]]] = {}
        self.list_errors: dict[Any, Exception] = {}
        self.write_error: Exception | None = None
        self.update_error: Exception | None = None
        self.calls: list[tuple[Any, ...]] = []
        self.created: list[dict[str, Any]] = []
        self.updated: list[dict[str, Any]] = []
        self.deleted: list[dict[str, Any]] = []

    def seed(self, kind: Any, *entities: dict[str, Any]) -> None:
        self.entities.setdefault(kind, []).extend(entities)

    def list_calls(self, kind: Any) -> list[tuple[Any, ...]]:
        return [call for call in self.calls if call[0] == "list" and call[1] == kind]

    async def list(self, kind, filters=None, scope=None):
        self.calls.append(("list", kind, dict(filters or {}), scope))
        if kind in self.list_errors:
            raise self.list_errors[kind]
        return list(self.entities.get(kind, []))

    async def get(self, kind, entity_id, scope=None):
        self.calls.append(("get", kind, entity_id, scope))
        for entity in self.entities.get(kind, []):
            if entity.get("id") == entity_id:
                return entity
        return None

    async def create(self, kind, payload, scope=None, files=None):
        self.calls.append(("create", kind, scope))
        if self.write_error is not None:
            raise self.write_error
        self.created.append({"kind": kind, "payload": payload, "scope": scope, "files": files})
        return {"id": 100 + len(self.created), **payload}

    async def update(self, kind, entity_id, payload, scope=None, files=None):
        self.calls.append(("update", kind, entity_id, scope))
        if self.update_error is not None:
            raise self.update_error
        if self.write_error is not None:
            raise self.write_error
        self.updated.append(
            {"kind": kind, "id": entity_id, "payload": payload, "scope": scope, "files": files}
        )
        return {"id": entity_id, **payload}

    async def delete(self, kind, entity_id, scope=None):
        self.calls.append(("delete", kind, entity_id, scope))
        if self.write_error is not None:
            raise self.write_error
        self.deleted.append({"kind": kind, "id": entity_id, "scope": scope})
        return {"message": "deleted"}


@pytest.fixture
def fake_service() -> FakeEntityService:
    """Empty in-memory baserCMS."""
    return FakeEntityService()


@pytest.fixture
def fake_session_factory(fake_service):
    """Session factory yielding the shared fake service."""

    @asynccontextmanager
    async def factory():
        yield fake_service

    return factory
