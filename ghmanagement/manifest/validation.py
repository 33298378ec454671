"""Structural validation for decoded repository manifests."""

from __future__ import annotations

import re
import typing as typ

from .errors import ManifestError
from .models import VISIBILITIES
from .naming import branch_protection_name, team_binding_name

if typ.TYPE_CHECKING:
    from .models import BranchProtectionRule, RepositoryConfig

REPOSITORY_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_.-]{1,100}$")


def validate_manifest(
    manifest: dict[str, RepositoryConfig],
) -> dict[str, RepositoryConfig]:
    """Validate every repository in ``manifest``, returning it unchanged.

    All issues are collected before raising, so one run reports every problem
    in the file.

    Raises
    ------
    ManifestError
        If any repository config is structurally invalid.

    """
    issues: list[str] = []
    for name, config in manifest.items():
        _validate_repository(name, config, issues)

    if issues:
        raise ManifestError(issues)
    return manifest


def _validate_repository(
    name: str, config: RepositoryConfig, issues: list[str]
) -> None:
    if not REPOSITORY_NAME_PATTERN.match(name) or name in {".", ".."}:
        issues.append(
            f"repository name '{name}' must contain only letters, digits, dots, "
            "underscores, or dashes"
        )

    if config.visibility.lower() not in VISIBILITIES:
        issues.append(
            f"repository {name} visibility '{config.visibility}' must be one of "
            f"{', '.join(VISIBILITIES)}"
        )

    if not config.default_branch.strip():
        issues.append(f"repository {name} default_branch must not be empty")

    for slug in config.teams:
        if not slug.strip():
            issues.append(f"repository {name} has a team with an empty slug")

    _validate_branch_protection(
        name, config.default_branch, config.branch_protection, issues
    )


def _validate_branch_protection(
    name: str,
    default_branch: str,
    rules: list[BranchProtectionRule],
    issues: list[str],
) -> None:
    seen: set[str] = set()
    for rule in rules:
        pattern = rule.pattern if rule.pattern is not None else default_branch
        if not pattern.strip():
            issues.append(
                f"repository {name} has a branch protection rule with an empty "
                "pattern"
            )
            continue
        if pattern in seen:
            issues.append(
                f"repository {name} declares branch protection for '{pattern}' "
                "more than once"
            )
        seen.add(pattern)


def validate_resource_names(
    manifest: dict[str, RepositoryConfig],
) -> dict[str, RepositoryConfig]:
    """Reject merged manifests whose repositories derive the same resource name.

    Team bindings and branch protection rules are named from the repository
    name plus a slug or pattern, so distinct repositories can collide.

    Raises
    ------
    ManifestError
        If two repositories would declare a resource with the same name.

    """
    issues: list[str] = []
    bindings: dict[str, str] = {}
    protections: dict[str, str] = {}
    for name, config in manifest.items():
        for slug in config.teams:
            _claim(
                bindings, team_binding_name(name, slug), name, "team binding", issues
            )
        patterns = [
            rule.pattern if rule.pattern is not None else config.default_branch
            for rule in config.branch_protection
        ] or [config.default_branch]
        for pattern in patterns:
            _claim(
                protections,
                branch_protection_name(name, pattern),
                name,
                "branch protection",
                issues,
            )

    if issues:
        raise ManifestError(issues)
    return manifest


def _claim(
    owners: dict[str, str],
    resource: str,
    repository: str,
    kind: str,
    issues: list[str],
) -> None:
    owner = owners.setdefault(resource, repository)
    if owner != repository:
        issues.append(
            f"repositories '{owner}' and '{repository}' both declare {kind} "
            f"'{resource}'"
        )
