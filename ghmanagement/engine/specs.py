"""Engine-neutral arguments for declared resources.

The reconciler builds these from repository configs; each engine adapter
translates them into its own resource arguments.
"""

from __future__ import annotations

import msgspec


class RepositorySpec(msgspec.Struct, kw_only=True):
    """Arguments for a repository resource."""

    name: str
    description: str | None = None
    visibility: str
    has_issues: bool
    has_projects: bool
    has_wiki: bool
    is_template: bool
    allow_merge_commit: bool
    allow_squash_merge: bool
    allow_rebase_merge: bool
    allow_auto_merge: bool
    delete_branch_on_merge: bool
    has_downloads: bool
    auto_init: bool
    archived: bool
    archive_on_destroy: bool
    vulnerability_alerts: bool
    homepage_url: str | None = None
    topics: list[str] = msgspec.field(default_factory=list)


class RepositoryFileSpec(msgspec.Struct, kw_only=True):
    """Arguments for a file committed to a repository branch."""

    file: str
    content: str
    commit_message: str
    commit_author: str
    commit_email: str
    overwrite_on_create: bool = True


class ReviewRequirementSpec(msgspec.Struct, kw_only=True):
    """Nested pull request review requirement of a branch protection."""

    dismiss_stale_reviews: bool | None = None
    restrict_dismissals: bool | None = None
    require_code_owner_reviews: bool | None = None
    required_approving_review_count: int | None = None


class StatusCheckRequirementSpec(msgspec.Struct, kw_only=True):
    """Nested required status check of a branch protection."""

    contexts: list[str] = msgspec.field(default_factory=list)
    strict: bool | None = None


class BranchProtectionSpec(msgspec.Struct, kw_only=True):
    """Arguments for a branch protection resource."""

    pattern: str
    allows_deletions: bool | None = None
    allows_force_pushes: bool | None = None
    blocks_creations: bool | None = None
    enforce_admins: bool | None = None
    require_conversation_resolution: bool | None = None
    require_signed_commits: bool | None = None
    required_linear_history: bool | None = None
    push_allowances: list[str] = msgspec.field(default_factory=list)
    required_pull_request_reviews: ReviewRequirementSpec | None = None
    required_status_checks: StatusCheckRequirementSpec | None = None
