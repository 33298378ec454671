"""Errors raised while reconciling repositories."""

from __future__ import annotations


class GitHubManagementError(Exception):
    """Base class for all reconciliation errors."""


class ConfigurationError(GitHubManagementError):
    """Raised when run settings or a repository config break an invariant."""

    @classmethod
    def missing_setting(cls, key: str) -> ConfigurationError:
        """Return an error for a required run setting that is absent."""
        return cls(f"Missing required configuration value '{key}'")

    @classmethod
    def missing_teams(cls, repository: str) -> ConfigurationError:
        """Return an error for a repository without any team access."""
        return cls(
            f"Repository '{repository}' must have at least one team access defined"
        )


class ContextNotInitializedError(ConfigurationError):
    """Raised when reconciliation starts before the global context is ready."""

    def __init__(self) -> None:
        """Initialise with a fixed message."""
        super().__init__(
            "GlobalContext.initialize() must complete before reconciliation"
        )


class ProviderError(GitHubManagementError):
    """Raised when the resource engine rejects a lookup or declaration."""

    def __init__(self, message: str, *, resource: str | None = None) -> None:
        """Initialise with a message and the offending resource name."""
        self.resource = resource
        super().__init__(message)

    @classmethod
    def duplicate_resource(cls, kind: str, name: str) -> ProviderError:
        """Return an error for a resource declared twice under one name."""
        return cls(f"Duplicate {kind} resource '{name}'", resource=name)

    @classmethod
    def team_not_found(cls, slug: str) -> ProviderError:
        """Return an error for a team slug the organisation does not have."""
        return cls(f"Team not found: {slug}", resource=slug)
