"""Run-wide context shared by every repository reconciliation.

The context holds the organisation and tenant, the identity the run executes
as, and a cache of resolved team handles. One context is built per run and
passed to the reconciler explicitly.
"""

from __future__ import annotations

import threading
import typing as typ

from ghmanagement.errors import ConfigurationError, ContextNotInitializedError
from ghmanagement.logging import get_logger, log_debug, log_info
from ghmanagement.settings import ConfigKeys

if typ.TYPE_CHECKING:
    from ghmanagement.engine import ClientIdentity, ResourceEngine, ResourceHandle
    from ghmanagement.settings import RunSettings

logger = get_logger(__name__)


class GlobalContext:
    """Organisation identity and memoised team lookups for one run.

    Parameters
    ----------
    settings
        Run settings; organisation, tenant id, and subscription id must be
        non-blank.
    engine
        Engine used for team, group, and identity lookups.

    Raises
    ------
    ConfigurationError
        If a required identity setting is blank.

    """

    def __init__(self, settings: RunSettings, engine: ResourceEngine) -> None:
        """Validate identity settings and look up the service principals group."""
        for key, value in (
            (ConfigKeys.GITHUB_ORGANIZATION, settings.organization),
            (ConfigKeys.TENANT_ID, settings.tenant_id),
            (ConfigKeys.SUBSCRIPTION_ID, settings.subscription_id),
        ):
            if not value or not value.strip():
                raise ConfigurationError.missing_setting(key)

        self._settings = settings
        self._engine = engine
        self._teams: dict[str, ResourceHandle] = {}
        self._team_locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()
        self._client_identity: ClientIdentity | None = None
        self._service_principals_group = engine.lookup_group(
            settings.service_principals_group
        )

        log_info(logger, "GitHub organization %s", settings.organization)

    @property
    def organization(self) -> str:
        """Return the GitHub organisation name."""
        return self._settings.organization

    @property
    def tenant_id(self) -> str:
        """Return the Azure AD tenant id for service principals."""
        return self._settings.tenant_id

    @property
    def subscription_id(self) -> str:
        """Return the Azure subscription id for service principal resources."""
        return self._settings.subscription_id

    @property
    def initialized(self) -> bool:
        """Return whether :meth:`initialize` has completed."""
        return self._client_identity is not None

    @property
    def client_identity(self) -> ClientIdentity:
        """Return the identity resolved by :meth:`initialize`."""
        if self._client_identity is None:
            raise ContextNotInitializedError
        return self._client_identity

    @property
    def service_principals_group(self) -> ResourceHandle:
        """Return the group that service principals are added to."""
        return self._service_principals_group

    def require_initialized(self) -> None:
        """Raise unless :meth:`initialize` has completed."""
        if not self.initialized:
            raise ContextNotInitializedError

    async def initialize(self) -> None:
        """Resolve the identity the run executes as.

        Safe to call more than once; later calls return immediately.
        """
        if self.initialized:
            return
        identity = await self._engine.client_identity()
        self._client_identity = identity
        log_info(
            logger,
            "Running as client %s in tenant %s",
            identity.client_id,
            identity.tenant_id,
        )

    def resolve_team(self, slug: str) -> ResourceHandle:
        """Return the handle for team ``slug``, looking it up at most once.

        Concurrent first resolutions of the same slug are serialised on a
        per-slug lock, so only one lookup reaches the engine.
        """
        cached = self._teams.get(slug)
        if cached is not None:
            return cached

        with self._locks_guard:
            lock = self._team_locks.setdefault(slug, threading.Lock())

        with lock:
            cached = self._teams.get(slug)
            if cached is not None:
                return cached
            log_debug(logger, "Looking up team %s", slug)
            handle = self._engine.lookup_team(slug)
            self._teams[slug] = handle
            return handle

    @property
    def resolved_teams(self) -> tuple[str, ...]:
        """Return the slugs resolved so far, in resolution order."""
        return tuple(self._teams)
