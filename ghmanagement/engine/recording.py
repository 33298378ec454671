"""In-memory engine that records declarations instead of applying them."""

from __future__ import annotations

import threading
import typing as typ

import msgspec

from ghmanagement.errors import ProviderError

from .protocol import ClientIdentity, ResourceHandle, ResourceKind

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .specs import BranchProtectionSpec, RepositoryFileSpec, RepositorySpec


class Declaration(msgspec.Struct, kw_only=True):
    """One recorded resource declaration or lookup.

    Attributes
    ----------
    kind
        Resource kind, see :class:`ResourceKind`.
    name
        Logical resource name, unique per kind.
    properties
        Declared arguments as plain builtins.
    depends_on
        ``kind:name`` references of the resources this one was bound to.
    ignore_changes
        Properties written on creation and never compared afterwards.

    """

    kind: str
    name: str
    properties: dict[str, typ.Any] = msgspec.field(default_factory=dict)
    depends_on: list[str] = msgspec.field(default_factory=list)
    ignore_changes: list[str] = msgspec.field(default_factory=list)


class RecordingEngine:
    """Deterministic ResourceEngine for dry-run plans and tests.

    Declarations are kept in order. Names must be unique per kind, matching the
    engine's own uniqueness rule for logical resource names.

    Parameters
    ----------
    teams
        Optional directory of team slug to team id. When given, unknown slugs
        fail with :class:`ProviderError`; otherwise ids are synthesised.
    identity
        Identity reported by :meth:`client_identity`.

    Examples
    --------
    >>> from ghmanagement.engine import RecordingEngine
    >>> engine = RecordingEngine(teams={"platform": "101"})
    >>> engine.lookup_team("platform").name
    'platform'

    """

    def __init__(
        self,
        *,
        teams: cabc.Mapping[str, str] | None = None,
        identity: ClientIdentity | None = None,
    ) -> None:
        """Initialise empty declaration and lookup logs."""
        self._teams = dict(teams) if teams is not None else None
        self._identity = identity or ClientIdentity(
            tenant_id="00000000-0000-0000-0000-000000000000",
            client_id="recording-client",
            object_id="recording-object",
        )
        self._declarations: list[Declaration] = []
        self._names: set[tuple[str, str]] = set()
        self._lock = threading.Lock()
        self.team_lookups: list[str] = []
        self.group_lookups: list[str] = []
        self.identity_requests = 0

    @property
    def declarations(self) -> list[Declaration]:
        """Return a copy of the recorded declarations, in order."""
        with self._lock:
            return list(self._declarations)

    def declarations_of(self, kind: ResourceKind) -> list[Declaration]:
        """Return recorded declarations of one kind, in order."""
        return [item for item in self.declarations if item.kind == kind]

    def get(self, kind: ResourceKind, name: str) -> Declaration:
        """Return the declaration of ``kind`` named ``name``.

        Raises
        ------
        KeyError
            If nothing of that kind and name was declared.

        """
        for item in self.declarations:
            if item.kind == kind and item.name == name:
                return item
        raise KeyError(f"{kind}:{name}")

    def encode_plan(self) -> bytes:
        """Return the recorded declarations encoded as JSON."""
        return msgspec.json.encode(self.declarations)

    def lookup_team(self, slug: str) -> ResourceHandle:
        """Record a team lookup and return its handle."""
        with self._lock:
            self.team_lookups.append(slug)
        if self._teams is None:
            team_id = f"team-{slug}"
        elif slug in self._teams:
            team_id = self._teams[slug]
        else:
            raise ProviderError.team_not_found(slug)
        record = Declaration(
            kind=ResourceKind.TEAM, name=slug, properties={"id": team_id}
        )
        return ResourceHandle(ResourceKind.TEAM, slug, record)

    def lookup_group(self, display_name: str) -> ResourceHandle:
        """Record a group lookup and return its handle."""
        with self._lock:
            self.group_lookups.append(display_name)
        record = Declaration(
            kind=ResourceKind.GROUP,
            name=display_name,
            properties={"display_name": display_name},
        )
        return ResourceHandle(ResourceKind.GROUP, display_name, record)

    async def client_identity(self) -> ClientIdentity:
        """Return the configured identity."""
        self.identity_requests += 1
        return self._identity

    def declare_repository(self, spec: RepositorySpec) -> ResourceHandle:
        """Record a repository declaration."""
        return self._record(
            ResourceKind.REPOSITORY, spec.name, msgspec.to_builtins(spec)
        )

    def declare_default_branch(
        self, name: str, repository: ResourceHandle, branch: str
    ) -> ResourceHandle:
        """Record a default branch declaration."""
        return self._record(
            ResourceKind.DEFAULT_BRANCH,
            name,
            {"repository": repository.name, "branch": branch},
            depends_on=(repository,),
        )

    def declare_repository_file(
        self,
        name: str,
        repository: ResourceHandle,
        branch: ResourceHandle,
        spec: RepositoryFileSpec,
        *,
        ignore_changes: typ.Sequence[str] = (),
    ) -> ResourceHandle:
        """Record a repository file declaration."""
        properties = msgspec.to_builtins(spec)
        properties["repository"] = repository.name
        properties["branch"] = _branch_of(branch)
        return self._record(
            ResourceKind.REPOSITORY_FILE,
            name,
            properties,
            depends_on=(repository, branch),
            ignore_changes=ignore_changes,
        )

    def declare_team_access(
        self,
        name: str,
        repository: ResourceHandle,
        team: ResourceHandle,
        permission: str,
    ) -> ResourceHandle:
        """Record a team repository binding."""
        team_record = typ.cast("Declaration", team.resource)
        return self._record(
            ResourceKind.TEAM_REPOSITORY,
            name,
            {
                "repository": repository.name,
                "team_id": team_record.properties["id"],
                "permission": permission,
            },
            depends_on=(repository, team),
        )

    def declare_branch_protection(
        self, name: str, repository: ResourceHandle, spec: BranchProtectionSpec
    ) -> ResourceHandle:
        """Record a branch protection declaration."""
        properties = msgspec.to_builtins(spec)
        properties["repository_id"] = repository.name
        return self._record(
            ResourceKind.BRANCH_PROTECTION,
            name,
            properties,
            depends_on=(repository,),
        )

    def _record(
        self,
        kind: ResourceKind,
        name: str,
        properties: dict[str, typ.Any],
        *,
        depends_on: tuple[ResourceHandle, ...] = (),
        ignore_changes: typ.Sequence[str] = (),
    ) -> ResourceHandle:
        declaration = Declaration(
            kind=kind,
            name=name,
            properties=properties,
            depends_on=[f"{handle.kind}:{handle.name}" for handle in depends_on],
            ignore_changes=list(ignore_changes),
        )
        with self._lock:
            if (kind, name) in self._names:
                raise ProviderError.duplicate_resource(kind, name)
            self._names.add((kind, name))
            self._declarations.append(declaration)
        return ResourceHandle(kind, name, declaration)


def _branch_of(handle: ResourceHandle) -> str:
    record = typ.cast("Declaration", handle.resource)
    return record.properties["branch"]
