"""
Reference resolution for baserCMS create and edit requests.
"""

from src.basercms.resolution.models import (
    EntityReference,
    Found,
    LookupResult,
    NotFound,
    ReferenceKind,
    ResolutionPolicy,
    ResolvedId,
)
from src.basercms.resolution.resolver import ReferenceResolver, default_policies

__all__ = [
    "EntityReference",
    "Found",
    "LookupResult",
    "NotFound",
    "ReferenceKind",
    "ReferenceResolver",
    "ResolutionPolicy",
    "ResolvedId",
    "default_policies",
]
