"""Tests for the in-memory recording engine."""
# ruff: noqa: D103

from __future__ import annotations

import asyncio

import msgspec
import pytest

from ghmanagement.engine import (
    BranchProtectionSpec,
    ClientIdentity,
    Declaration,
    RecordingEngine,
    RepositoryFileSpec,
    RepositorySpec,
    ResourceEngine,
    ResourceKind,
)
from ghmanagement.errors import ProviderError


def _repository_spec(name: str = "svc") -> RepositorySpec:
    return RepositorySpec(
        name=name,
        visibility="private",
        has_issues=False,
        has_projects=False,
        has_wiki=False,
        is_template=False,
        allow_merge_commit=True,
        allow_squash_merge=True,
        allow_rebase_merge=True,
        allow_auto_merge=False,
        delete_branch_on_merge=True,
        has_downloads=False,
        auto_init=True,
        archived=False,
        archive_on_destroy=False,
        vulnerability_alerts=False,
    )


def test_recording_engine_satisfies_protocol() -> None:
    assert isinstance(RecordingEngine(), ResourceEngine)


def test_declarations_keep_order_and_dependencies() -> None:
    engine = RecordingEngine()

    repository = engine.declare_repository(_repository_spec())
    branch = engine.declare_default_branch("svc-default", repository, "main")
    engine.declare_repository_file(
        "svc-CODEOWNER",
        repository,
        branch,
        RepositoryFileSpec(
            file="CODEOWNERS",
            content="* @acme/platform\n",
            commit_message="Default approvals",
            commit_author="Automated",
            commit_email="bot@example.com",
        ),
        ignore_changes=("content",),
    )

    assert [(item.kind, item.name) for item in engine.declarations] == [
        (ResourceKind.REPOSITORY, "svc"),
        (ResourceKind.DEFAULT_BRANCH, "svc-default"),
        (ResourceKind.REPOSITORY_FILE, "svc-CODEOWNER"),
    ]
    record = engine.get(ResourceKind.REPOSITORY_FILE, "svc-CODEOWNER")
    assert record.depends_on == ["repository:svc", "default_branch:svc-default"]
    assert record.ignore_changes == ["content"]
    assert record.properties["branch"] == "main"
    assert record.properties["repository"] == "svc"


def test_declarations_property_returns_a_copy() -> None:
    engine = RecordingEngine()
    engine.declare_repository(_repository_spec())

    engine.declarations.clear()

    assert len(engine.declarations) == 1


def test_duplicate_name_within_kind_is_rejected() -> None:
    engine = RecordingEngine()
    repository = engine.declare_repository(_repository_spec())

    with pytest.raises(ProviderError) as excinfo:
        engine.declare_repository(_repository_spec())

    assert excinfo.value.resource == "svc"
    # The same name under another kind is fine.
    engine.declare_default_branch("svc", repository, "main")


def test_get_unknown_declaration_raises_key_error() -> None:
    with pytest.raises(KeyError):
        RecordingEngine().get(ResourceKind.REPOSITORY, "missing")


def test_team_lookup_synthesises_ids_by_default() -> None:
    engine = RecordingEngine()

    handle = engine.lookup_team("platform")

    assert handle.kind is ResourceKind.TEAM
    assert handle.name == "platform"
    assert engine.team_lookups == ["platform"]
    assert engine.declarations == [], "lookups are not declarations"


def test_team_lookup_uses_directory_when_given() -> None:
    engine = RecordingEngine(teams={"platform": "101"})
    repository = engine.declare_repository(_repository_spec())
    team = engine.lookup_team("platform")

    engine.declare_team_access("svc-platform", repository, team, "maintain")

    binding = engine.get(ResourceKind.TEAM_REPOSITORY, "svc-platform")
    assert binding.properties == {
        "repository": "svc",
        "team_id": "101",
        "permission": "maintain",
    }
    with pytest.raises(ProviderError, match="Team not found: web"):
        engine.lookup_team("web")


def test_client_identity_is_reported_and_counted() -> None:
    identity = ClientIdentity(tenant_id="t", client_id="c", object_id="o")
    engine = RecordingEngine(identity=identity)

    assert asyncio.run(engine.client_identity()) == identity
    assert engine.identity_requests == 1


def test_branch_protection_records_repository_id() -> None:
    engine = RecordingEngine()
    repository = engine.declare_repository(_repository_spec())

    engine.declare_branch_protection(
        "svc-main",
        repository,
        BranchProtectionSpec(pattern="main", push_allowances=["/acme/deployers"]),
    )

    record = engine.get(ResourceKind.BRANCH_PROTECTION, "svc-main")
    assert record.properties["repository_id"] == "svc"
    assert record.properties["push_allowances"] == ["/acme/deployers"]


def test_encode_plan_round_trips_declarations() -> None:
    engine = RecordingEngine()
    engine.declare_repository(_repository_spec())

    plan = msgspec.json.decode(engine.encode_plan(), type=list[Declaration])

    assert plan == engine.declarations
