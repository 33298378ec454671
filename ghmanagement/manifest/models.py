"""Typed repository manifest structures.

Field documentation and constraints live in ``msgspec.Meta`` annotations so
the decoder enforces them and :mod:`ghmanagement.manifest.schema` publishes
them without a second description of the model.
"""

from __future__ import annotations

import dataclasses
import typing as typ

import msgspec

VISIBILITIES: tuple[str, ...] = ("public", "private", "internal")
TEAM_PERMISSIONS: tuple[str, ...] = ("pull", "triage", "push", "maintain", "admin")
MAX_APPROVING_REVIEWS = 6


def _doc(text: str, **extra: typ.Any) -> msgspec.Meta:  # noqa: ANN401
    return msgspec.Meta(description=text, **extra)


TeamPermission = typ.Annotated[
    str,
    msgspec.Meta(
        min_length=1,
        description=(
            "One of pull, triage, push, maintain, admin or the name of an "
            "existing custom repository role."
        ),
        extra_json_schema={
            "anyOf": [
                {"title": "Access", "enum": list(TEAM_PERMISSIONS)},
                {"type": "string"},
            ]
        },
    ),
]

ApprovingReviewCount = typ.Annotated[
    int,
    msgspec.Meta(
        ge=0,
        le=MAX_APPROVING_REVIEWS,
        description=(
            "Require x number of approvals to satisfy branch protection "
            "requirements. Must be a number between 0-6."
        ),
    ),
]


class PullRequestReviewPolicy(msgspec.Struct, kw_only=True):
    """Review requirements attached to a branch protection rule.

    ``dismissal_restrictions`` and ``pull_request_bypassers`` are accepted in
    manifests but the GitHub provider cannot receive them, so they are never
    declared.
    """

    dismiss_stale_reviews: typ.Annotated[
        bool | None,
        _doc("Dismiss approved reviews automatically when a new commit is pushed."),
    ] = None
    restrict_dismissals: typ.Annotated[
        bool | None, _doc("Restrict pull request review dismissals.")
    ] = None
    require_code_owner_reviews: typ.Annotated[
        bool | None,
        _doc(
            "Require an approved review in pull requests including files with "
            "a designated code owner."
        ),
    ] = None
    required_approving_review_count: ApprovingReviewCount | None = None
    dismissal_restrictions: typ.Annotated[
        list[str],
        _doc("Actors allowed to dismiss reviews. Not supported by the provider."),
    ] = msgspec.field(default_factory=list)
    pull_request_bypassers: typ.Annotated[
        list[str],
        _doc(
            "Actors allowed to bypass pull request requirements. Not supported "
            "by the provider."
        ),
    ] = msgspec.field(default_factory=list)


class StatusCheckPolicy(msgspec.Struct, kw_only=True):
    """Required status checks for a protected branch."""

    contexts: typ.Annotated[
        list[str],
        _doc("Status checks that must pass before merging into this branch."),
    ] = msgspec.field(default_factory=list)
    strict: typ.Annotated[
        bool | None, _doc("Require branches to be up to date before merging.")
    ] = None


class BranchProtectionRule(msgspec.Struct, kw_only=True):
    """Protection rule for branches matching ``pattern``.

    Attributes
    ----------
    pattern
        Branch name pattern. Resolved to the repository's default branch when
        omitted.
    push_restriction
        Actor permitted to push to matching branches.
    require_pull_request_reviews
        Optional review policy declared alongside the rule.
    require_status_checks
        Optional status check policy declared alongside the rule.

    """

    pattern: typ.Annotated[
        str | None,
        _doc("Identifies the protection rule pattern, e.g. develop."),
    ] = None
    allows_deletions: typ.Annotated[
        bool | None, _doc("Set to true to allow the branch to be deleted.")
    ] = None
    allows_force_pushes: typ.Annotated[
        bool | None, _doc("Set to true to allow force pushes on the branch.")
    ] = None
    blocks_creations: typ.Annotated[
        bool | None, _doc("Set to true to block creating the branch.")
    ] = None
    enforce_admins: typ.Annotated[
        bool | None,
        _doc("Set to true to enforce status checks for repository administrators."),
    ] = None
    require_conversation_resolution: typ.Annotated[
        bool | None,
        _doc("Require all conversations to be resolved before merging."),
    ] = None
    require_signed_commits: typ.Annotated[
        bool | None, _doc("Require all commits to be signed.")
    ] = None
    required_linear_history: typ.Annotated[
        bool | None,
        _doc("Prevent merge commits from being pushed to matching branches."),
    ] = None
    push_restriction: typ.Annotated[
        str | None, _doc("Actor ID that may push to the branch.")
    ] = None
    require_pull_request_reviews: PullRequestReviewPolicy | None = None
    require_status_checks: StatusCheckPolicy | None = None


class CodeownerApprover(msgspec.Struct, kw_only=True):
    """One CODEOWNERS entry assigning ``pattern`` to a team."""

    approver: typ.Annotated[str, _doc("Slug of the approving team.", min_length=1)]
    pattern: typ.Annotated[
        str,
        _doc("File globbing pattern matching the approved files.", min_length=1),
    ]
    comment: typ.Annotated[
        str | None, _doc("Comment written above the entry.")
    ] = None
    priority: typ.Annotated[
        float | None, _doc("Sort hint. Entries are written in listed order.")
    ] = None


class CodeownerConfig(msgspec.Struct, kw_only=True):
    """Generated CODEOWNERS file settings."""

    create: typ.Annotated[
        bool, _doc("Whether the CODEOWNERS file is created automatically.")
    ] = True
    approvers: typ.Annotated[
        list[CodeownerApprover], _doc("Code owner entries in file order.")
    ] = msgspec.field(default_factory=list)


class RepositoryConfig(msgspec.Struct, kw_only=True):
    """Desired state for one repository, keyed by name in a manifest."""

    description: typ.Annotated[
        str | None, _doc("A description of the repository.")
    ] = None
    visibility: typ.Annotated[
        str,
        _doc(
            "Can be public, private or internal. Internal is reconciled as "
            "private."
        ),
    ] = "internal"
    has_issues: typ.Annotated[
        bool, _doc("Enable GitHub Issues on the repository.")
    ] = False
    has_projects: typ.Annotated[
        bool,
        _doc(
            "Enable GitHub Projects on the repository. Fails when the "
            "organisation has disabled repository projects."
        ),
    ] = False
    has_wiki: typ.Annotated[bool, _doc("Enable the GitHub Wiki.")] = False
    is_template: typ.Annotated[
        bool, _doc("Mark the repository as a template repository.")
    ] = False
    allow_merge_commit: typ.Annotated[
        bool, _doc("Set to false to disable merge commits.")
    ] = True
    allow_squash_merge: typ.Annotated[
        bool, _doc("Set to false to disable squash merges.")
    ] = True
    allow_rebase_merge: typ.Annotated[
        bool, _doc("Set to false to disable rebase merges.")
    ] = True
    allow_auto_merge: typ.Annotated[
        bool, _doc("Allow auto-merging pull requests.")
    ] = False
    delete_branch_on_merge: typ.Annotated[
        bool, _doc("Delete the head branch after a pull request is merged.")
    ] = True
    has_downloads: typ.Annotated[
        bool, _doc("Enable the deprecated downloads feature.")
    ] = False
    auto_init: typ.Annotated[
        bool, _doc("Produce an initial commit in the repository.")
    ] = True
    archived: typ.Annotated[
        bool,
        _doc("Archive the repository. The API does not support unarchiving."),
    ] = False
    archive_on_destroy: typ.Annotated[
        bool, _doc("Archive the repository instead of deleting it on destroy.")
    ] = False
    vulnerability_alerts: typ.Annotated[
        bool,
        _doc(
            "Enable security alerts for vulnerable dependencies. Requires "
            "alerts to be enabled at the owner level."
        ),
    ] = False
    default_branch: typ.Annotated[
        str, _doc("The default branch for the repository.")
    ] = "main"
    homepage_url: typ.Annotated[
        str | None, _doc("URL of a page describing the project.")
    ] = None
    topics: typ.Annotated[
        list[str], _doc("Topics of the repository. The owning team is added.")
    ] = msgspec.field(default_factory=list)
    teams: typ.Annotated[
        dict[str, TeamPermission],
        _doc("Team slug to repository permission. At least one entry is required."),
    ] = msgspec.field(default_factory=dict)
    create_app_registration: typ.Annotated[
        bool,
        _doc(
            "Request a service principal and storage container for "
            "repositories that deploy infrastructure to Azure."
        ),
    ] = False
    disable_default_write: typ.Annotated[
        bool,
        _doc(
            "Suppress the default organisation-wide write access team. Only "
            "disable where write access needs to be more refined."
        ),
    ] = False
    branch_protection: typ.Annotated[
        list[BranchProtectionRule],
        _doc(
            "Branch protection rules. When empty, the default branch is "
            "protected with admin enforcement and two code owner approvals."
        ),
    ] = msgspec.field(default_factory=list)
    codeowner: CodeownerConfig | None = None

    def apply_defaults(self, team_options: TeamOptions) -> None:
        """Add the owning team's slug to ``topics`` if it is missing."""
        self.topics = list(dict.fromkeys([*self.topics, team_options.team_slug]))


@dataclasses.dataclass(frozen=True, slots=True)
class TeamOptions:
    """Run-level inputs for the team whose repositories are reconciled.

    Attributes
    ----------
    team_slug
        Slug of the owning team, which also names its Azure AD group.
    repository_files
        Manifest files describing the team's repositories.

    """

    team_slug: str
    repository_files: tuple[str, ...] = ()


type Manifest = dict[str, RepositoryConfig]
