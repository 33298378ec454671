"""Shared fixtures for unit and feature tests."""

from __future__ import annotations

import asyncio
import textwrap
import typing as typ
from pathlib import Path

import pytest

from ghmanagement.context import GlobalContext
from ghmanagement.engine import RecordingEngine
from ghmanagement.reconciler import RepositoryReconciler
from ghmanagement.settings import RunSettings

TEST_TENANT_ID = "11111111-2222-3333-4444-555555555555"
TEST_SUBSCRIPTION_ID = "66666666-7777-8888-9999-000000000000"


class WriteManifestFn(typ.Protocol):
    """Callable fixture writing a manifest file."""

    def __call__(self, name: str, content: str) -> Path:
        """Write ``content`` (dedented) to ``name`` and return the path."""
        ...


class SettingsFactory(typ.Protocol):
    """Callable fixture building run settings."""

    def __call__(self, *manifests: Path, team_slug: str = "platform") -> RunSettings:
        """Return settings for ``manifests``."""
        ...


def _find_repo_root(start: Path) -> Path:
    for parent in (start, *start.parents):
        if (parent / "pyproject.toml").exists():
            return parent
    raise RuntimeError


@pytest.fixture(scope="session")
def repo_root() -> Path:
    """Return the repository root directory."""
    return _find_repo_root(Path(__file__).resolve())


@pytest.fixture(scope="session")
def example_manifest_path(repo_root: Path) -> Path:
    """Return the path to the example platform manifest."""
    return repo_root / "examples" / "platform-repositories.yaml"


@pytest.fixture
def write_manifest(tmp_path: Path) -> WriteManifestFn:
    """Return a factory writing manifest files under ``tmp_path``."""

    def _write(name: str, content: str) -> Path:
        path = tmp_path / name
        path.write_text(textwrap.dedent(content), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def make_settings() -> SettingsFactory:
    """Return a factory for run settings against the ``acme`` organisation."""

    def _make(*manifests: Path, team_slug: str = "platform") -> RunSettings:
        return RunSettings(
            team_slug=team_slug,
            repository_files=tuple(str(path) for path in manifests),
            organization="acme",
            tenant_id=TEST_TENANT_ID,
            subscription_id=TEST_SUBSCRIPTION_ID,
        )

    return _make


@pytest.fixture
def settings(make_settings: SettingsFactory) -> RunSettings:
    """Return run settings without manifests."""
    return make_settings()


@pytest.fixture
def engine() -> RecordingEngine:
    """Return an empty recording engine."""
    return RecordingEngine()


@pytest.fixture
def context(settings: RunSettings, engine: RecordingEngine) -> GlobalContext:
    """Return an initialised global context bound to ``engine``."""
    global_context = GlobalContext(settings, engine)
    asyncio.run(global_context.initialize())
    return global_context


@pytest.fixture
def reconciler(
    context: GlobalContext, engine: RecordingEngine, settings: RunSettings
) -> RepositoryReconciler:
    """Return a reconciler bound to the recording engine."""
    return RepositoryReconciler(context, engine, settings)

