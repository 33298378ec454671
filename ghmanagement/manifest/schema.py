"""JSON Schema generation for repository manifests."""

from __future__ import annotations

import json
import typing as typ
from pathlib import Path  # noqa: TC003

import msgspec

from .models import RepositoryConfig

SCHEMA_ID = "https://ghmanagement.example/schemas/repositories.json"


def build_manifest_schema() -> dict[str, typ.Any]:
    """Build the JSON Schema describing a manifest file.

    The document is a mapping of repository name to ``RepositoryConfig``.
    Field descriptions and constraints come from the model annotations.
    """
    schema = msgspec.json.schema(dict[str, RepositoryConfig])
    schema["$id"] = SCHEMA_ID
    schema["title"] = "Repository manifest"
    return schema


def write_manifest_schema(path: Path) -> Path:
    """Write the manifest schema to ``path``, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(build_manifest_schema(), indent=2), encoding="utf-8")
    return path
