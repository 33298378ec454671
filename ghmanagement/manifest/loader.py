"""YAML loaders for repository manifest files."""

from __future__ import annotations

import collections.abc as cabc
from pathlib import Path

import msgspec
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from ghmanagement.logging import get_logger, log_info

from .errors import DuplicateKeyError, ManifestError
from .models import RepositoryConfig
from .naming import normalise_manifest
from .validation import validate_manifest, validate_resource_names

YAML_VERSION = (1, 2)

logger = get_logger(__name__)


def load_manifest(path: Path | str) -> dict[str, RepositoryConfig]:
    """Parse and validate a single manifest file.

    Parameters
    ----------
    path : Path | str
        YAML file mapping repository names to repository configs.

    Returns
    -------
    dict[str, RepositoryConfig]
        Repository configs keyed by repository name, in file order.

    Raises
    ------
    ManifestError
        If the file cannot be read, is not valid YAML, is empty, or does not
        decode into repository configs.

    """
    path_obj = Path(path)
    yaml = _yaml()

    try:
        loaded = yaml.load(path_obj.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, YAMLError) as exc:
        raise ManifestError.for_path(path_obj, [f"failed to read YAML: {exc}"]) from exc

    if loaded is None:
        raise ManifestError.for_path(path_obj, ["manifest file is empty"])

    if not isinstance(loaded, cabc.Mapping):
        raise ManifestError.for_path(
            path_obj,
            ["manifest must be a mapping of repository name to configuration"],
        )

    try:
        manifest = msgspec.convert(
            normalise_manifest(loaded), type=dict[str, RepositoryConfig]
        )
    except msgspec.ValidationError as exc:
        raise ManifestError.for_path(
            path_obj, [f"schema validation failed: {exc}"]
        ) from exc

    try:
        return validate_manifest(manifest)
    except ManifestError as exc:
        raise ManifestError.for_path(path_obj, exc.issues) from exc


def load_manifests(paths: cabc.Iterable[Path | str]) -> dict[str, RepositoryConfig]:
    """Load several manifests and merge them into one mapping.

    Files are merged in the order given. A repository declared by more than
    one file is an error rather than a silent override.

    Raises
    ------
    DuplicateKeyError
        If two files declare the same repository name.
    ManifestError
        If any file fails to load, or two repositories would declare a
        resource under the same name.

    """
    merged: dict[str, RepositoryConfig] = {}
    origins: dict[str, Path] = {}

    for path in paths:
        path_obj = Path(path)
        manifest = load_manifest(path_obj)
        log_info(
            logger, "Loaded %d repositories from %s", len(manifest), path_obj
        )
        for name, config in manifest.items():
            if name in merged:
                raise DuplicateKeyError(name, origins[name], path_obj)
            merged[name] = config
            origins[name] = path_obj

    return validate_resource_names(merged)


def _yaml() -> YAML:
    yaml = YAML(typ="safe")
    yaml.version = YAML_VERSION
    yaml.allow_duplicate_keys = False
    return yaml
