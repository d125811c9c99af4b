"""Shared run-scoped services."""

from flowguard.services.artifact_cache import (
    ArtifactCache,
    CacheMiss,
    ComputeFailed,
    NotFound,
)

__all__ = ["ArtifactCache", "CacheMiss", "ComputeFailed", "NotFound"]
