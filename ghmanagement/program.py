"""Run orchestration and the Pulumi program entry point.

``run()`` is what the Pulumi project executes (see the root ``__main__.py``).
``run_reconciliation`` holds the engine-independent flow and is shared with
the dry-run planner in :mod:`ghmanagement.cli`.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import typing as typ

from ghmanagement.context import GlobalContext
from ghmanagement.errors import GitHubManagementError
from ghmanagement.logging import (
    configure_logging_from_env,
    get_logger,
    log_exception,
    log_info,
)
from ghmanagement.manifest import load_manifests
from ghmanagement.reconciler import RepositoryReconciler

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from ghmanagement.engine import ResourceEngine
    from ghmanagement.settings import RunSettings

logger = get_logger(__name__)

_T = typ.TypeVar("_T")


def run_sync(awaitable: cabc.Coroutine[typ.Any, typ.Any, _T]) -> _T:
    """Drive ``awaitable`` to completion from synchronous code.

    Pulumi executes programs inside its own running event loop, where
    ``asyncio.run`` is not allowed; in that case the coroutine runs on a
    worker thread with a fresh loop.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(awaitable)

    with concurrent.futures.ThreadPoolExecutor(max_workers=1) as executor:
        return executor.submit(asyncio.run, awaitable).result()


def run_reconciliation(settings: RunSettings, engine: ResourceEngine) -> list[str]:
    """Load the team's manifests and declare every repository.

    Parameters
    ----------
    settings
        Run settings naming the team, manifests, and organisation.
    engine
        Engine receiving lookups and declarations.

    Returns
    -------
    list[str]
        Names of the reconciled repositories, in manifest order.

    Raises
    ------
    ManifestError
        If any manifest fails to load; nothing is declared.
    ConfigurationError
        If a repository breaks a configuration invariant. The run stops at
        that repository.

    """
    team_options = settings.team_options
    repositories = load_manifests(team_options.repository_files)

    context = GlobalContext(settings, engine)
    run_sync(context.initialize())

    reconciler = RepositoryReconciler(context, engine, settings)
    for name, config in repositories.items():
        config.apply_defaults(team_options)
        try:
            reconciler.reconcile(name, config)
        except GitHubManagementError as exc:
            log_exception(logger, f"Reconciliation of repository {name} failed", exc)
            raise

    log_info(
        logger,
        "Declared %d repositories for team %s",
        len(repositories),
        team_options.team_slug,
    )
    return list(repositories)


def run() -> None:
    """Pulumi program: reconcile from stack configuration."""
    import pulumi

    from ghmanagement.engine.pulumi_engine import PulumiEngine
    from ghmanagement.settings import RunSettings

    configure_logging_from_env()
    settings = RunSettings.from_config(pulumi.Config())
    names = run_reconciliation(settings, PulumiEngine(settings))
    pulumi.export("repositories", names)
