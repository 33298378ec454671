"""Field naming convention for manifest documents.

Manifest fields are lower-case and underscore-separated (``has_issues``,
``require_pull_request_reviews``). Writers coming from other tools often use
``hasIssues``, ``HasIssues`` or ``has-issues``; all of them normalise to the
same model field. Keys that carry data rather than field names (repository
names and team slugs) are never rewritten.

Logical resource names join the repository name and a team slug or branch
pattern with a dash, so two repositories can produce the same name (``a-b``
with team ``c`` and ``a`` with team ``b-c``). Such collisions are rejected when
manifests are merged.
"""

from __future__ import annotations

import re
import typing as typ

_WORD_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")
_SEPARATORS = re.compile(r"[\s\-.]+")

# Fields whose mapping keys are data, not field names.
DATA_KEYED_FIELDS = frozenset({"teams"})

# Collection fields; an explicit null means "use the default".
COLLECTION_FIELDS = frozenset(
    {
        "topics",
        "teams",
        "branch_protection",
        "approvers",
        "contexts",
        "dismissal_restrictions",
        "pull_request_bypassers",
    }
)


def to_snake_case(name: str) -> str:
    """Convert an identifier to lower-case, underscore-separated form.

    Examples
    --------
    >>> to_snake_case("RequirePullRequestReviews")
    'require_pull_request_reviews'
    >>> to_snake_case("githubOrg")
    'github_org'
    >>> to_snake_case("has-issues")
    'has_issues'

    """
    spaced = _WORD_BOUNDARY.sub("_", name.strip())
    return _SEPARATORS.sub("_", spaced).lower()


def normalise_fields(value: object) -> object:
    """Rewrite struct field names throughout a decoded YAML value.

    Mappings have their keys normalised, except the mapping held by a field
    in :data:`DATA_KEYED_FIELDS`, whose keys are kept verbatim. A collection
    field written with no value (``topics:``) is dropped so its default
    applies.
    """
    if isinstance(value, dict):
        result: dict[object, object] = {}
        for key, item in value.items():
            field = to_snake_case(key) if isinstance(key, str) else key
            if item is None and field in COLLECTION_FIELDS:
                continue
            if field in DATA_KEYED_FIELDS and isinstance(item, dict):
                result[field] = dict(item)
            else:
                result[field] = normalise_fields(item)
        return result
    if isinstance(value, list):
        return [normalise_fields(item) for item in value]
    return value


def normalise_manifest(document: typ.Mapping[object, object]) -> dict[object, object]:
    """Normalise every repository config in a top-level manifest mapping.

    Top-level keys are repository names and are preserved. A repository with
    no body decodes as an all-defaults config.
    """
    return {
        name: {} if config is None else normalise_fields(config)
        for name, config in document.items()
    }


def team_binding_name(repository: str, slug: str) -> str:
    """Return the logical name of a team's binding to ``repository``."""
    return f"{repository}-{slug}"


def branch_protection_name(repository: str, pattern: str) -> str:
    """Return the logical name of a branch protection rule on ``repository``."""
    return f"{repository}-{pattern}"
