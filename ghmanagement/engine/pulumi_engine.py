"""ResourceEngine adapter declaring resources through Pulumi."""

from __future__ import annotations

import typing as typ

import pulumi
import pulumi_azuread as azuread
import pulumi_github as github

from .protocol import ClientIdentity, ResourceHandle, ResourceKind

if typ.TYPE_CHECKING:
    from ghmanagement.settings import RunSettings

    from .specs import BranchProtectionSpec, RepositoryFileSpec, RepositorySpec

# Engine property names for the camel-cased ``ignore_changes`` paths.
_ENGINE_PROPERTY_NAMES = {
    "content": "content",
    "commit_author": "commitAuthor",
    "commit_message": "commitMessage",
    "commit_email": "commitEmail",
}


class PulumiEngine:
    """Declare GitHub resources with ``pulumi_github``.

    Team and group lookups read existing resources into the stack; nothing is
    created or applied here, Pulumi diffs and applies the declared graph after
    the program returns.

    Parameters
    ----------
    settings
        Run settings. When a GitHub token is configured an explicit provider
        is created for the organisation; otherwise the default provider
        configuration applies.

    """

    def __init__(self, settings: RunSettings) -> None:
        """Create the GitHub provider when a token is configured."""
        self._provider: github.Provider | None = None
        if settings.github_token:
            self._provider = github.Provider(
                "github",
                owner=settings.organization,
                token=pulumi.Output.secret(settings.github_token),
            )

    def _resource_options(
        self, *, ignore_changes: list[str] | None = None
    ) -> pulumi.ResourceOptions:
        return pulumi.ResourceOptions(
            provider=self._provider, ignore_changes=ignore_changes
        )

    def lookup_team(self, slug: str) -> ResourceHandle:
        """Read the organisation team ``slug`` into the stack."""
        result = github.get_team_output(
            slug=slug, opts=pulumi.InvokeOptions(provider=self._provider)
        )
        team = github.Team.get(slug, result.id, opts=self._resource_options())
        return ResourceHandle(ResourceKind.TEAM, slug, team)

    def lookup_group(self, display_name: str) -> ResourceHandle:
        """Read the Azure AD group named ``display_name`` into the stack."""
        result = azuread.get_group_output(display_name=display_name)
        group = azuread.Group.get(display_name.replace("-", "_"), result.id)
        return ResourceHandle(ResourceKind.GROUP, display_name, group)

    async def client_identity(self) -> ClientIdentity:
        """Return the Azure AD identity Pulumi authenticates as."""
        config = azuread.get_client_config()
        return ClientIdentity(
            tenant_id=config.tenant_id,
            client_id=config.client_id,
            object_id=config.object_id,
        )

    def declare_repository(self, spec: RepositorySpec) -> ResourceHandle:
        """Declare a ``github.Repository``."""
        repository = github.Repository(
            spec.name,
            name=spec.name,
            description=spec.description,
            visibility=spec.visibility,
            has_issues=spec.has_issues,
            has_projects=spec.has_projects,
            has_wiki=spec.has_wiki,
            is_template=spec.is_template,
            allow_merge_commit=spec.allow_merge_commit,
            allow_squash_merge=spec.allow_squash_merge,
            allow_rebase_merge=spec.allow_rebase_merge,
            allow_auto_merge=spec.allow_auto_merge,
            delete_branch_on_merge=spec.delete_branch_on_merge,
            has_downloads=spec.has_downloads,
            auto_init=spec.auto_init,
            archived=spec.archived,
            archive_on_destroy=spec.archive_on_destroy,
            vulnerability_alerts=spec.vulnerability_alerts,
            homepage_url=spec.homepage_url,
            topics=spec.topics,
            opts=self._resource_options(),
        )
        return ResourceHandle(ResourceKind.REPOSITORY, spec.name, repository)

    def declare_default_branch(
        self, name: str, repository: ResourceHandle, branch: str
    ) -> ResourceHandle:
        """Declare a ``github.BranchDefault`` bound to the repository."""
        repo = typ.cast("github.Repository", repository.resource)
        default_branch = github.BranchDefault(
            name,
            repository=repo.name,
            branch=branch,
            opts=self._resource_options(),
        )
        return ResourceHandle(ResourceKind.DEFAULT_BRANCH, name, default_branch)

    def declare_repository_file(
        self,
        name: str,
        repository: ResourceHandle,
        branch: ResourceHandle,
        spec: RepositoryFileSpec,
        *,
        ignore_changes: typ.Sequence[str] = (),
    ) -> ResourceHandle:
        """Declare a ``github.RepositoryFile`` on the default branch."""
        repo = typ.cast("github.Repository", repository.resource)
        default_branch = typ.cast("github.BranchDefault", branch.resource)
        repository_file = github.RepositoryFile(
            name,
            repository=repo.name,
            branch=default_branch.branch,
            file=spec.file,
            content=spec.content,
            commit_message=spec.commit_message,
            commit_author=spec.commit_author,
            commit_email=spec.commit_email,
            overwrite_on_create=spec.overwrite_on_create,
            opts=self._resource_options(
                ignore_changes=[
                    _ENGINE_PROPERTY_NAMES.get(field, field)
                    for field in ignore_changes
                ]
            ),
        )
        return ResourceHandle(ResourceKind.REPOSITORY_FILE, name, repository_file)

    def declare_team_access(
        self,
        name: str,
        repository: ResourceHandle,
        team: ResourceHandle,
        permission: str,
    ) -> ResourceHandle:
        """Declare a ``github.TeamRepository`` binding."""
        repo = typ.cast("github.Repository", repository.resource)
        github_team = typ.cast("github.Team", team.resource)
        binding = github.TeamRepository(
            name,
            repository=repo.name,
            team_id=github_team.id,
            permission=permission,
            opts=self._resource_options(),
        )
        return ResourceHandle(ResourceKind.TEAM_REPOSITORY, name, binding)

    def declare_branch_protection(
        self, name: str, repository: ResourceHandle, spec: BranchProtectionSpec
    ) -> ResourceHandle:
        """Declare a ``github.BranchProtection`` with its nested requirements."""
        repo = typ.cast("github.Repository", repository.resource)
        protection = github.BranchProtection(
            name,
            repository_id=repo.id,
            pattern=spec.pattern,
            allows_deletions=spec.allows_deletions,
            allows_force_pushes=spec.allows_force_pushes,
            enforce_admins=spec.enforce_admins,
            require_conversation_resolution=spec.require_conversation_resolution,
            require_signed_commits=spec.require_signed_commits,
            required_linear_history=spec.required_linear_history,
            restrict_pushes=_restrict_pushes(spec),
            required_pull_request_reviews=_pull_request_reviews(spec),
            required_status_checks=_status_checks(spec),
            opts=self._resource_options(),
        )
        return ResourceHandle(ResourceKind.BRANCH_PROTECTION, name, protection)


def _restrict_pushes(
    spec: BranchProtectionSpec,
) -> list[github.BranchProtectionRestrictPushArgs] | None:
    # The block itself turns on push restriction.
    if not spec.push_allowances:
        return None
    return [
        github.BranchProtectionRestrictPushArgs(
            blocks_creations=spec.blocks_creations,
            push_allowances=spec.push_allowances,
        )
    ]


def _pull_request_reviews(
    spec: BranchProtectionSpec,
) -> list[github.BranchProtectionRequiredPullRequestReviewArgs] | None:
    reviews = spec.required_pull_request_reviews
    if reviews is None:
        return None
    return [
        github.BranchProtectionRequiredPullRequestReviewArgs(
            dismiss_stale_reviews=reviews.dismiss_stale_reviews,
            restrict_dismissals=reviews.restrict_dismissals,
            require_code_owner_reviews=reviews.require_code_owner_reviews,
            required_approving_review_count=reviews.required_approving_review_count,
        )
    ]


def _status_checks(
    spec: BranchProtectionSpec,
) -> list[github.BranchProtectionRequiredStatusCheckArgs] | None:
    checks = spec.required_status_checks
    if checks is None:
        return None
    return [
        github.BranchProtectionRequiredStatusCheckArgs(
            contexts=checks.contexts or None,
            strict=checks.strict,
        )
    ]
