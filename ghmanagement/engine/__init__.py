"""Resource engine port and adapters.

:class:`RecordingEngine` is always importable. :class:`PulumiEngine` imports
the Pulumi SDKs and is loaded from :mod:`ghmanagement.engine.pulumi_engine`
only by the Pulumi program.
"""

from __future__ import annotations

from .protocol import ClientIdentity, ResourceEngine, ResourceHandle, ResourceKind
from .recording import Declaration, RecordingEngine
from .specs import (
    BranchProtectionSpec,
    RepositoryFileSpec,
    RepositorySpec,
    ReviewRequirementSpec,
    StatusCheckRequirementSpec,
)

__all__ = [
    "BranchProtectionSpec",
    "ClientIdentity",
    "Declaration",
    "RecordingEngine",
    "RepositoryFileSpec",
    "RepositorySpec",
    "ResourceEngine",
    "ResourceHandle",
    "ResourceKind",
    "ReviewRequirementSpec",
    "StatusCheckRequirementSpec",
]
