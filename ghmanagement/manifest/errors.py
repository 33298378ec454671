"""Errors raised while loading repository manifests."""

from __future__ import annotations

from pathlib import Path  # noqa: TC003

from ghmanagement.errors import GitHubManagementError


class ManifestError(GitHubManagementError, ValueError):
    """Raised when a manifest cannot be read, parsed, or validated."""

    def __init__(self, issues: list[str]) -> None:
        """Keep individual issues while joining them into the message."""
        super().__init__("\n".join(issues))
        self.issues = issues

    @classmethod
    def for_path(cls, path: Path, issues: list[str]) -> ManifestError:
        """Return an error whose issues are prefixed with the manifest path."""
        return cls([f"{path}: {issue}" for issue in issues])


class DuplicateKeyError(ManifestError):
    """Raised when two manifest files declare the same repository."""

    def __init__(self, repository: str, first: Path, second: Path) -> None:
        """Record the repository name and the files that both declare it."""
        self.repository = repository
        self.first = first
        self.second = second
        super().__init__(
            [
                f"duplicate repository '{repository}' declared in {first} "
                f"and {second}"
            ]
        )
