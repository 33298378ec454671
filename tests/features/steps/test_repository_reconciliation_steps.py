"""Behavioural tests for reconciling team manifests."""
# ruff: noqa: D103

from __future__ import annotations

import textwrap
import typing as typ
from pathlib import Path

import pytest
from pytest_bdd import given, parsers, scenario, then, when

from ghmanagement.engine import RecordingEngine, ResourceKind
from ghmanagement.errors import ConfigurationError
from ghmanagement.program import run_reconciliation
from ghmanagement.settings import RunSettings

_FEATURE = "../repository_reconciliation.feature"


class StepContext(typ.TypedDict, total=False):
    """State shared between BDD steps in this module."""

    manifest_path: Path
    engine: RecordingEngine
    repositories: list[str]
    error: ConfigurationError


@scenario(
    _FEATURE,
    "Example manifest declares repositories, code owners, and protections",
)
def test_example_manifest_reconciliation() -> None:
    """Behavioural regression for the example manifest."""


@scenario(_FEATURE, "Repository without branch protection gets the default rule")
def test_default_branch_protection() -> None:
    """Unprotected repositories receive the default rule."""


@scenario(_FEATURE, "Repository without teams is rejected")
def test_repository_without_teams() -> None:
    """Repositories must grant at least one team access."""


@pytest.fixture
def context() -> StepContext:
    return {}


def _write(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "repositories.yaml"
    path.write_text(textwrap.dedent(content), encoding="utf-8")
    return path


@given(parsers.parse('the manifest example at "{path}"'))
def manifest_example(context: StepContext, repo_root: Path, path: str) -> None:
    manifest_path = repo_root / path
    assert manifest_path.exists(), f"Expected manifest example at {path} to exist"
    context["manifest_path"] = manifest_path


@given(parsers.parse('a manifest declaring repository "{name}" with team "{team}"'))
def manifest_with_team(
    context: StepContext, tmp_path: Path, name: str, team: str
) -> None:
    context["manifest_path"] = _write(
        tmp_path,
        f"""
        {name}:
          teams:
            {team}: push
        """,
    )


@given(parsers.parse('a manifest declaring repository "{name}" without teams'))
def manifest_without_teams(context: StepContext, tmp_path: Path, name: str) -> None:
    context["manifest_path"] = _write(
        tmp_path,
        f"""
        {name}:
          description: nobody owns this
        """,
    )


@when(
    parsers.parse(
        "the platform team's repositories are reconciled for \"{organization}\""
    )
)
def reconcile(context: StepContext, organization: str) -> None:
    engine = RecordingEngine()
    settings = RunSettings(
        team_slug="platform",
        repository_files=(str(context["manifest_path"]),),
        organization=organization,
        tenant_id="tenant",
        subscription_id="subscription",
    )
    context["engine"] = engine
    try:
        context["repositories"] = run_reconciliation(settings, engine)
    except ConfigurationError as exc:
        context["error"] = exc


@then(parsers.parse('repository "{name}" is declared as "{visibility}"'))
def repository_visibility(context: StepContext, name: str, visibility: str) -> None:
    record = context["engine"].get(ResourceKind.REPOSITORY, name)
    assert record.properties["visibility"] == visibility


@then(
    parsers.parse(
        'the CODEOWNERS file for "{name}" assigns "{pattern}" to "{owner}"'
    )
)
def codeowners_entry(
    context: StepContext, name: str, pattern: str, owner: str
) -> None:
    record = context["engine"].get(ResourceKind.REPOSITORY_FILE, f"{name}-CODEOWNER")
    assert f"{pattern}\t{owner}\n" in record.properties["content"]


@then("each team is looked up once")
def teams_looked_up_once(context: StepContext) -> None:
    lookups = context["engine"].team_lookups
    assert len(lookups) == len(set(lookups)), f"repeated lookups: {lookups}"


@then(
    parsers.parse(
        'branch protection "{name}" requires {count:d} code owner approvals'
    )
)
def default_protection(context: StepContext, name: str, count: int) -> None:
    record = context["engine"].get(ResourceKind.BRANCH_PROTECTION, name)
    reviews = record.properties["required_pull_request_reviews"]
    assert reviews["require_code_owner_reviews"] is True
    assert reviews["required_approving_review_count"] == count


@then(parsers.parse('reconciliation fails mentioning "{name}"'))
def reconciliation_fails(context: StepContext, name: str) -> None:
    assert "error" in context, "Expected reconciliation to fail"
    assert name in str(context["error"])


@then("no resources are declared")
def nothing_declared(context: StepContext) -> None:
    assert context["engine"].declarations == []
