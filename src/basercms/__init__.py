"""
baserCMS Web API access.

Session-scoped HTTP client, reference resolution and request assembly
for the baserCMS admin API.
"""

from src.basercms.assembler import AssembledRequest, RequestAssembler
from src.basercms.client import BaserCMSClient, BaserCMSSession
from src.basercms.config import BaserCMSConfig
from src.basercms.endpoints import EntityKind
from src.basercms.exceptions import (
    AuthenticationError,
    BaserCMSError,
    EntityNotFoundError,
    InvalidArgumentError,
    MissingConfigError,
    RemoteServiceError,
    WriteFailure,
)
from src.basercms.protocols import EntityService

__all__ = [
    "AssembledRequest",
    "AuthenticationError",
    "BaserCMSClient",
    "BaserCMSConfig",
    "BaserCMSError",
    "BaserCMSSession",
    "EntityKind",
    "EntityNotFoundError",
    "EntityService",
    "InvalidArgumentError",
    "MissingConfigError",
    "RemoteServiceError",
    "RequestAssembler",
    "WriteFailure",
]
