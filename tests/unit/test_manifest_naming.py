"""Tests for manifest field name normalisation."""
# ruff: noqa: D103

from __future__ import annotations

import pytest

from ghmanagement.manifest.naming import (
    branch_protection_name,
    normalise_fields,
    normalise_manifest,
    team_binding_name,
    to_snake_case,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("has_issues", "has_issues"),
        ("hasIssues", "has_issues"),
        ("HasIssues", "has_issues"),
        ("has-issues", "has_issues"),
        ("HAS_ISSUES", "has_issues"),
        ("RequirePullRequestReviews", "require_pull_request_reviews"),
        ("homepageURL", "homepage_url"),
        ("githubOrg", "github_org"),
    ],
)
def test_to_snake_case(raw: str, expected: str) -> None:
    assert to_snake_case(raw) == expected, f"{raw!r} should become {expected!r}"


def test_normalise_fields_recurses_into_lists_and_mappings() -> None:
    document = {
        "BranchProtection": [
            {
                "Pattern": "main",
                "RequirePullRequestReviews": {"DismissStaleReviews": True},
            }
        ],
        "Codeowner": {"Approvers": [{"Approver": "web", "Pattern": "*.ts"}]},
    }

    assert normalise_fields(document) == {
        "branch_protection": [
            {
                "pattern": "main",
                "require_pull_request_reviews": {"dismiss_stale_reviews": True},
            }
        ],
        "codeowner": {"approvers": [{"approver": "web", "pattern": "*.ts"}]},
    }


def test_team_slugs_are_kept_verbatim() -> None:
    document = {"Teams": {"Platform-Core": "push", "webTeam": "pull"}}

    assert normalise_fields(document) == {
        "teams": {"Platform-Core": "push", "webTeam": "pull"}
    }, "team slugs are data and must not be rewritten"


def test_values_are_never_rewritten() -> None:
    document = {"Description": "Has-Issues", "DefaultBranch": "Main"}

    assert normalise_fields(document) == {
        "description": "Has-Issues",
        "default_branch": "Main",
    }


def test_normalise_manifest_preserves_repository_names() -> None:
    document = {"MyRepo": {"HasWiki": True}, "other-repo": {}}

    assert normalise_manifest(document) == {
        "MyRepo": {"has_wiki": True},
        "other-repo": {},
    }


def test_null_collections_are_dropped() -> None:
    document = {
        "Teams": None,
        "Topics": None,
        "BranchProtection": None,
        "Description": None,
    }

    assert normalise_fields(document) == {"description": None}, (
        "empty collections take their defaults, other nulls are kept"
    )


def test_repository_without_body_becomes_empty_mapping() -> None:
    assert normalise_manifest({"tooling": None}) == {"tooling": {}}


def test_resource_names_join_repository_and_suffix() -> None:
    assert team_binding_name("svc", "platform") == "svc-platform"
    assert branch_protection_name("svc", "release/*") == "svc-release/*"
