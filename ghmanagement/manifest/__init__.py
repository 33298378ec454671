"""Repository manifest model, loader, and schema export.

Load the manifests for a team::

    >>> from ghmanagement.manifest import load_manifests
    >>> repositories = load_manifests(["examples/platform-repositories.yaml"])
    >>> sorted(repositories)
    ['platform-api', 'platform-docs']

Export the JSON Schema used by editors::

    >>> from ghmanagement.manifest import build_manifest_schema
    >>> schema = build_manifest_schema()
"""

from __future__ import annotations

from .errors import DuplicateKeyError, ManifestError
from .loader import load_manifest, load_manifests
from .models import (
    TEAM_PERMISSIONS,
    VISIBILITIES,
    BranchProtectionRule,
    CodeownerApprover,
    CodeownerConfig,
    PullRequestReviewPolicy,
    RepositoryConfig,
    StatusCheckPolicy,
    TeamOptions,
)
from .naming import normalise_fields, to_snake_case
from .schema import SCHEMA_ID, build_manifest_schema, write_manifest_schema
from .validation import validate_manifest, validate_resource_names

__all__ = [
    "SCHEMA_ID",
    "TEAM_PERMISSIONS",
    "VISIBILITIES",
    "BranchProtectionRule",
    "CodeownerApprover",
    "CodeownerConfig",
    "DuplicateKeyError",
    "ManifestError",
    "PullRequestReviewPolicy",
    "RepositoryConfig",
    "StatusCheckPolicy",
    "TeamOptions",
    "build_manifest_schema",
    "load_manifest",
    "load_manifests",
    "normalise_fields",
    "to_snake_case",
    "validate_manifest",
    "validate_resource_names",
    "write_manifest_schema",
]
