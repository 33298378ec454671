"""Translate repository configs into resource declarations.

For each repository the reconciler declares, in dependency order:

1. the repository itself,
2. its default branch,
3. an optional generated ``CODEOWNERS`` file on that branch,
4. one team binding per entry in ``teams``,
5. one branch protection rule per configured (or defaulted) rule.

Ordering between these is carried by resource handles, so the engine is free
to apply independent resources in parallel.
"""

from __future__ import annotations

import typing as typ

from ghmanagement.engine.specs import (
    BranchProtectionSpec,
    RepositoryFileSpec,
    RepositorySpec,
    ReviewRequirementSpec,
    StatusCheckRequirementSpec,
)
from ghmanagement.errors import ConfigurationError
from ghmanagement.logging import get_logger, log_info, log_warning
from ghmanagement.manifest.models import BranchProtectionRule, PullRequestReviewPolicy
from ghmanagement.manifest.naming import branch_protection_name, team_binding_name

if typ.TYPE_CHECKING:
    from ghmanagement.context import GlobalContext
    from ghmanagement.engine import ResourceEngine, ResourceHandle
    from ghmanagement.manifest.models import CodeownerApprover, RepositoryConfig
    from ghmanagement.settings import RunSettings

logger = get_logger(__name__)

CODEOWNERS_FILE = "CODEOWNERS"
CODEOWNERS_IGNORED_FIELDS = (
    "content",
    "commit_author",
    "commit_message",
    "commit_email",
)
DEFAULT_REQUIRED_APPROVALS = 2


def normalize_visibility(visibility: str) -> str:
    """Map ``internal`` (any case) to ``private``; keep other values.

    The organisation's plan does not offer internal repositories.
    """
    if visibility.lower() == "internal":
        return "private"
    return visibility


def render_codeowners(
    organization: str, approvers: typ.Sequence[CodeownerApprover]
) -> str:
    """Render ``CODEOWNERS`` content for ``approvers`` in listed order.

    Examples
    --------
    >>> from ghmanagement.manifest import CodeownerApprover
    >>> print(render_codeowners(
    ...     "acme",
    ...     [CodeownerApprover(approver="web", pattern="*.ts", comment="frontend")],
    ... ), end="")
    # frontend
    *.ts	@acme/web

    """
    lines: list[str] = []
    for entry in approvers:
        if entry.comment is not None:
            lines.append(f"# {entry.comment}")
        lines.append(f"{entry.pattern}\t@{organization}/{entry.approver}")
    return "".join(f"{line}\n" for line in lines)


def default_branch_protection(default_branch: str) -> BranchProtectionRule:
    """Return the rule applied when a repository declares none."""
    return BranchProtectionRule(
        pattern=default_branch,
        enforce_admins=True,
        require_pull_request_reviews=PullRequestReviewPolicy(
            require_code_owner_reviews=True,
            required_approving_review_count=DEFAULT_REQUIRED_APPROVALS,
        ),
    )


class RepositoryReconciler:
    """Declares the resources for one repository at a time.

    Parameters
    ----------
    context
        Initialised run context, used for the organisation name and team
        resolution.
    engine
        Engine receiving the declarations.
    settings
        Run settings supplying ``CODEOWNERS`` commit metadata.

    """

    def __init__(
        self,
        context: GlobalContext,
        engine: ResourceEngine,
        settings: RunSettings,
    ) -> None:
        """Bind the reconciler to a run."""
        self._context = context
        self._engine = engine
        self._settings = settings

    def reconcile(self, name: str, config: RepositoryConfig) -> None:
        """Declare every resource for repository ``name``.

        ``config`` is updated in place: visibility is normalised, the default
        branch protection rule is added when none is configured, and unset
        rule patterns are resolved to the default branch.

        Raises
        ------
        ConfigurationError
            If ``config.teams`` is empty. Nothing is declared for the
            repository in that case.
        ContextNotInitializedError
            If the run context has not been initialised.

        """
        self._context.require_initialized()
        if not config.teams:
            raise ConfigurationError.missing_teams(name)

        config.visibility = normalize_visibility(config.visibility)

        repository = self._engine.declare_repository(_repository_spec(name, config))
        default_branch = self._engine.declare_default_branch(
            f"{name}-default", repository, config.default_branch
        )

        self._declare_codeowners(name, config, repository, default_branch)
        self._declare_team_access(name, config, repository)
        self._declare_branch_protection(name, config, repository)

        if config.create_app_registration:
            log_warning(
                logger,
                "Repository %s requests an app registration; service principal "
                "provisioning is not performed by this run",
                name,
            )
        log_info(logger, "Declared resources for repository %s", name)

    def _declare_codeowners(
        self,
        name: str,
        config: RepositoryConfig,
        repository: ResourceHandle,
        default_branch: ResourceHandle,
    ) -> None:
        codeowner = config.codeowner
        if codeowner is None or not codeowner.create or not codeowner.approvers:
            return

        for entry in codeowner.approvers:
            self._context.resolve_team(entry.approver)

        self._engine.declare_repository_file(
            f"{name}-CODEOWNER",
            repository,
            default_branch,
            RepositoryFileSpec(
                file=CODEOWNERS_FILE,
                content=render_codeowners(
                    self._context.organization, codeowner.approvers
                ),
                commit_message=self._settings.commit_message,
                commit_author=self._settings.commit_author,
                commit_email=self._settings.commit_email,
            ),
            ignore_changes=CODEOWNERS_IGNORED_FIELDS,
        )

    def _declare_team_access(
        self, name: str, config: RepositoryConfig, repository: ResourceHandle
    ) -> None:
        for slug, permission in config.teams.items():
            team = self._context.resolve_team(slug)
            self._engine.declare_team_access(
                team_binding_name(name, slug), repository, team, permission
            )

    def _declare_branch_protection(
        self, name: str, config: RepositoryConfig, repository: ResourceHandle
    ) -> None:
        if not config.branch_protection:
            config.branch_protection.append(
                default_branch_protection(config.default_branch)
            )

        for rule in config.branch_protection:
            if rule.pattern is None:
                rule.pattern = config.default_branch
            _warn_unforwarded(name, rule)
            self._engine.declare_branch_protection(
                branch_protection_name(name, rule.pattern),
                repository,
                _branch_protection_spec(rule),
            )


def _repository_spec(name: str, config: RepositoryConfig) -> RepositorySpec:
    return RepositorySpec(
        name=name,
        description=config.description,
        visibility=config.visibility,
        has_issues=config.has_issues,
        has_projects=config.has_projects,
        has_wiki=config.has_wiki,
        is_template=config.is_template,
        allow_merge_commit=config.allow_merge_commit,
        allow_squash_merge=config.allow_squash_merge,
        allow_rebase_merge=config.allow_rebase_merge,
        allow_auto_merge=config.allow_auto_merge,
        delete_branch_on_merge=config.delete_branch_on_merge,
        has_downloads=config.has_downloads,
        auto_init=config.auto_init,
        archived=config.archived,
        archive_on_destroy=config.archive_on_destroy,
        vulnerability_alerts=config.vulnerability_alerts,
        homepage_url=config.homepage_url,
        topics=list(dict.fromkeys(config.topics)),
    )


def _branch_protection_spec(rule: BranchProtectionRule) -> BranchProtectionSpec:
    # The caller resolves unset patterns before building the spec.
    pattern = typ.cast("str", rule.pattern)
    reviews = rule.require_pull_request_reviews
    checks = rule.require_status_checks
    return BranchProtectionSpec(
        pattern=pattern,
        allows_deletions=rule.allows_deletions,
        allows_force_pushes=rule.allows_force_pushes,
        # Only meaningful alongside a push restriction.
        blocks_creations=rule.blocks_creations if rule.push_restriction else None,
        enforce_admins=rule.enforce_admins,
        require_conversation_resolution=rule.require_conversation_resolution,
        require_signed_commits=rule.require_signed_commits,
        required_linear_history=rule.required_linear_history,
        push_allowances=[rule.push_restriction] if rule.push_restriction else [],
        required_pull_request_reviews=None
        if reviews is None
        else ReviewRequirementSpec(
            dismiss_stale_reviews=reviews.dismiss_stale_reviews,
            restrict_dismissals=reviews.restrict_dismissals,
            require_code_owner_reviews=reviews.require_code_owner_reviews,
            required_approving_review_count=reviews.required_approving_review_count,
        ),
        required_status_checks=None
        if checks is None
        else StatusCheckRequirementSpec(
            contexts=list(checks.contexts), strict=checks.strict
        ),
    )


def _warn_unforwarded(name: str, rule: BranchProtectionRule) -> None:
    unforwarded: list[str] = []
    if rule.blocks_creations is not None and not rule.push_restriction:
        # The provider nests it under the push restriction block.
        unforwarded.append("blocks_creations")
    reviews = rule.require_pull_request_reviews
    if reviews is not None:
        # Not supported by the GitHub provider.
        if reviews.dismissal_restrictions:
            unforwarded.append("dismissal_restrictions")
        if reviews.pull_request_bypassers:
            unforwarded.append("pull_request_bypassers")
    for field in unforwarded:
        log_warning(
            logger,
            "Repository %s branch protection %s: %s is not applied",
            name,
            rule.pattern,
            field,
        )
