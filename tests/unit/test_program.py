"""Tests for run orchestration."""
# ruff: noqa: D103

from __future__ import annotations

import asyncio
import typing as typ

import pytest

from ghmanagement.engine import RecordingEngine, ResourceKind
from ghmanagement.errors import ConfigurationError
from ghmanagement.manifest import DuplicateKeyError, ManifestError
from ghmanagement.program import run_reconciliation, run_sync

if typ.TYPE_CHECKING:
    from pathlib import Path

    from tests.conftest import SettingsFactory, WriteManifestFn


async def _answer() -> int:
    await asyncio.sleep(0)
    return 42


def test_run_sync_without_running_loop() -> None:
    assert run_sync(_answer()) == 42


@pytest.mark.asyncio
async def test_run_sync_inside_running_loop() -> None:
    assert run_sync(_answer()) == 42, "coroutine should run on a worker loop"


def test_run_reconciliation_declares_example_manifest(
    example_manifest_path: Path, make_settings: SettingsFactory
) -> None:
    engine = RecordingEngine()

    names = run_reconciliation(make_settings(example_manifest_path), engine)

    assert names == ["platform-api", "platform-docs"]
    assert engine.identity_requests == 1
    assert engine.group_lookups == ["github-actions-service-principals"]
    assert engine.team_lookups == ["platform", "security"]

    api = engine.get(ResourceKind.REPOSITORY, "platform-api").properties
    assert api["visibility"] == "private"
    assert api["topics"] == ["api", "python", "platform"]
    docs = engine.get(ResourceKind.REPOSITORY, "platform-docs").properties
    assert docs["visibility"] == "public"
    assert docs["topics"] == ["platform"]

    codeowners = engine.get(ResourceKind.REPOSITORY_FILE, "platform-api-CODEOWNER")
    assert codeowners.properties["content"] == (
        "# backend\n*.py\t@acme/platform\n# workflows\n/.github/\t@acme/security\n"
    )
    protections = [
        item.name for item in engine.declarations_of(ResourceKind.BRANCH_PROTECTION)
    ]
    assert protections == [
        "platform-api-main",
        "platform-api-release/*",
        "platform-docs-main",
    ]


def test_run_reconciliation_merges_several_manifests(
    write_manifest: WriteManifestFn, make_settings: SettingsFactory
) -> None:
    first = write_manifest("a.yaml", "alpha:\n  teams: {web: push}\n")
    second = write_manifest("b.yaml", "beta:\n  teams: {web: pull}\n")
    engine = RecordingEngine()

    names = run_reconciliation(make_settings(first, second, team_slug="web"), engine)

    assert names == ["alpha", "beta"]
    assert engine.team_lookups == ["web"]


def test_manifest_errors_stop_before_any_lookup(
    write_manifest: WriteManifestFn, make_settings: SettingsFactory
) -> None:
    path = write_manifest("bad.yaml", "alpha:\n  visibility: secret\n")
    engine = RecordingEngine()

    with pytest.raises(ManifestError):
        run_reconciliation(make_settings(path), engine)

    assert engine.group_lookups == []
    assert engine.declarations == []


def test_duplicate_repository_across_files_is_rejected(
    write_manifest: WriteManifestFn, make_settings: SettingsFactory
) -> None:
    first = write_manifest("a.yaml", "alpha:\n  teams: {web: push}\n")
    second = write_manifest("b.yaml", "alpha:\n  teams: {web: pull}\n")

    with pytest.raises(DuplicateKeyError):
        run_reconciliation(make_settings(first, second), RecordingEngine())


def test_repository_without_teams_stops_the_run(
    write_manifest: WriteManifestFn, make_settings: SettingsFactory
) -> None:
    path = write_manifest(
        "repos.yaml",
        """
        alpha:
          teams: {web: push}
        beta:
          description: no teams here
        gamma:
          teams: {web: push}
        """,
    )
    engine = RecordingEngine()

    with pytest.raises(ConfigurationError, match="'beta'"):
        run_reconciliation(make_settings(path), engine)

    declared = {item.name for item in engine.declarations_of(ResourceKind.REPOSITORY)}
    assert declared == {"alpha"}, "repositories after the failure are not declared"


def test_null_teams_reach_the_team_check(
    write_manifest: WriteManifestFn, make_settings: SettingsFactory
) -> None:
    path = write_manifest(
        "repos.yaml",
        """
        alpha:
          teams:
          topics:
          branch_protection:
        """,
    )
    engine = RecordingEngine()

    with pytest.raises(ConfigurationError, match="at least one team access"):
        run_reconciliation(make_settings(path), engine)

    assert engine.declarations_of(ResourceKind.REPOSITORY) == []


def test_failed_repository_is_logged_with_its_error(
    write_manifest: WriteManifestFn,
    make_settings: SettingsFactory,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    logged: list[tuple[str, BaseException]] = []
    monkeypatch.setattr(
        "ghmanagement.program.log_exception",
        lambda _logger, message, exc: logged.append((message, exc)),
    )
    path = write_manifest("repos.yaml", "beta:\n  description: no teams\n")

    with pytest.raises(ConfigurationError) as excinfo:
        run_reconciliation(make_settings(path), RecordingEngine())

    assert logged == [("Reconciliation of repository beta failed", excinfo.value)]
