"""ResourceEngine protocol shared by the Pulumi and recording adapters."""

from __future__ import annotations

import dataclasses
import enum
import typing as typ

if typ.TYPE_CHECKING:
    from .specs import BranchProtectionSpec, RepositoryFileSpec, RepositorySpec


class ResourceKind(enum.StrEnum):
    """Kinds of resources the reconciler declares or looks up."""

    REPOSITORY = "repository"
    DEFAULT_BRANCH = "default_branch"
    REPOSITORY_FILE = "repository_file"
    TEAM = "team"
    TEAM_REPOSITORY = "team_repository"
    BRANCH_PROTECTION = "branch_protection"
    GROUP = "group"


@dataclasses.dataclass(frozen=True, slots=True)
class ResourceHandle:
    """Opaque reference to a declared or looked-up resource.

    ``resource`` is whatever the engine uses internally: a Pulumi resource for
    :class:`PulumiEngine`, a recorded declaration for :class:`RecordingEngine`.
    Passing a handle into a later declaration makes that declaration depend on
    the referenced resource.
    """

    kind: ResourceKind
    name: str
    resource: object = dataclasses.field(compare=False, repr=False)


@dataclasses.dataclass(frozen=True, slots=True)
class ClientIdentity:
    """Identity of the principal running the reconciliation."""

    tenant_id: str
    client_id: str
    object_id: str


@typ.runtime_checkable
class ResourceEngine(typ.Protocol):
    """Declares resources into an external infrastructure-as-code engine.

    The engine owns diffing, ordering, and applying; implementations only
    register what should exist. Dependencies are expressed by passing the
    handles returned from earlier declarations.

    Examples
    --------
    >>> from ghmanagement.engine import RecordingEngine, ResourceEngine
    >>> engine: ResourceEngine = RecordingEngine()
    >>> isinstance(engine, ResourceEngine)
    True

    """

    def lookup_team(self, slug: str) -> ResourceHandle:
        """Look up an existing organisation team by slug."""
        ...

    def lookup_group(self, display_name: str) -> ResourceHandle:
        """Look up an existing Azure AD group by display name."""
        ...

    async def client_identity(self) -> ClientIdentity:
        """Resolve the identity of the principal the engine runs as."""
        ...

    def declare_repository(self, spec: RepositorySpec) -> ResourceHandle:
        """Declare a repository named ``spec.name``."""
        ...

    def declare_default_branch(
        self, name: str, repository: ResourceHandle, branch: str
    ) -> ResourceHandle:
        """Declare ``branch`` as the default branch of ``repository``."""
        ...

    def declare_repository_file(
        self,
        name: str,
        repository: ResourceHandle,
        branch: ResourceHandle,
        spec: RepositoryFileSpec,
        *,
        ignore_changes: typ.Sequence[str] = (),
    ) -> ResourceHandle:
        """Declare a file committed to ``branch`` of ``repository``.

        Fields named in ``ignore_changes`` are written on creation and never
        compared again.
        """
        ...

    def declare_team_access(
        self,
        name: str,
        repository: ResourceHandle,
        team: ResourceHandle,
        permission: str,
    ) -> ResourceHandle:
        """Grant ``team`` the ``permission`` role on ``repository``."""
        ...

    def declare_branch_protection(
        self, name: str, repository: ResourceHandle, spec: BranchProtectionSpec
    ) -> ResourceHandle:
        """Declare a branch protection rule on ``repository``."""
        ...
