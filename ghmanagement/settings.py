"""Run settings read from Pulumi stack configuration or the environment."""

from __future__ import annotations

import dataclasses
import os
import typing as typ

from ghmanagement.errors import ConfigurationError
from ghmanagement.manifest.models import TeamOptions
from ghmanagement.manifest.naming import to_snake_case

ENV_PREFIX = "GHM_"
DEFAULT_SERVICE_PRINCIPALS_GROUP = "github-actions-service-principals"
DEFAULT_COMMIT_AUTHOR = "Automated"
DEFAULT_COMMIT_EMAIL = "github-automation@users.noreply.github.com"
DEFAULT_COMMIT_MESSAGE = "Default approvals"


class ConfigKeys:
    """Configuration keys understood by the program."""

    TEAM_SLUG = "team_slug"
    REPOS_PATH = "repos_path"
    TENANT_ID = "repo_app_tenant_id"
    RESOURCE_GROUP_NAME = "resource_group_name"
    GITHUB_ORGANIZATION = "githubOrg"
    GITHUB_TOKEN = "githubToken"  # noqa: S105 - configuration key, not a secret
    SUBSCRIPTION_ID = "management_subscription_id"
    STORAGE_ACCOUNT_NAME = "storage_account_name"
    SERVICE_PRINCIPALS_GROUP = "service_principals_group"
    COMMIT_AUTHOR = "codeowners_commit_author"
    COMMIT_EMAIL = "codeowners_commit_email"
    COMMIT_MESSAGE = "codeowners_commit_message"


class ConfigSource(typ.Protocol):
    """Anything that can look up a configuration value by key.

    ``pulumi.Config`` satisfies this protocol.
    """

    def get(self, key: str) -> str | None: ...


class EnvironmentConfig:
    """Configuration source backed by ``GHM_``-prefixed environment variables.

    Keys are converted to upper snake case, so ``githubOrg`` is read from
    ``GHM_GITHUB_ORG``.
    """

    def __init__(self, environ: typ.Mapping[str, str] | None = None) -> None:
        """Read from ``environ``, defaulting to the process environment."""
        self._environ = os.environ if environ is None else environ

    @staticmethod
    def variable_name(key: str) -> str:
        """Return the environment variable holding ``key``."""
        return f"{ENV_PREFIX}{to_snake_case(key).upper()}"

    def get(self, key: str) -> str | None:
        """Return the value for ``key`` or ``None`` when unset."""
        return self._environ.get(self.variable_name(key))


class LayeredConfig:
    """Explicit values laid over a fallback configuration source.

    ``None`` overrides are ignored, so optional command-line flags fall through
    to the fallback.
    """

    def __init__(
        self, overrides: typ.Mapping[str, str | None], fallback: ConfigSource
    ) -> None:
        """Store the overrides and the source consulted for other keys."""
        self._overrides = {
            key: value for key, value in overrides.items() if value is not None
        }
        self._fallback = fallback

    def get(self, key: str) -> str | None:
        """Return the override for ``key`` or the fallback's value."""
        if key in self._overrides:
            return self._overrides[key]
        return self._fallback.get(key)


@dataclasses.dataclass(frozen=True, slots=True)
class RunSettings:
    """Settings for one reconciliation run.

    Attributes
    ----------
    team_slug
        Slug of the team owning the manifests.
    repository_files
        Manifest file paths, in merge order.
    organization
        GitHub organisation that owns the repositories.
    tenant_id
        Azure AD tenant used for service principals.
    subscription_id
        Azure subscription used for service principal resources.

    """

    team_slug: str
    repository_files: tuple[str, ...]
    organization: str
    tenant_id: str
    subscription_id: str
    resource_group_name: str | None = None
    storage_account_name: str | None = None
    github_token: str | None = dataclasses.field(default=None, repr=False)
    service_principals_group: str = DEFAULT_SERVICE_PRINCIPALS_GROUP
    commit_author: str = DEFAULT_COMMIT_AUTHOR
    commit_email: str = DEFAULT_COMMIT_EMAIL
    commit_message: str = DEFAULT_COMMIT_MESSAGE

    @property
    def team_options(self) -> TeamOptions:
        """Return the team-level options derived from these settings."""
        return TeamOptions(
            team_slug=self.team_slug, repository_files=self.repository_files
        )

    @classmethod
    def from_config(cls, source: ConfigSource) -> RunSettings:
        """Build settings from a configuration source.

        Raises
        ------
        ConfigurationError
            If a required key is missing or blank.

        """
        repos_path = _require(source, ConfigKeys.REPOS_PATH)
        repository_files = tuple(
            part.strip() for part in repos_path.split(",") if part.strip()
        )
        if not repository_files:
            raise ConfigurationError.missing_setting(ConfigKeys.REPOS_PATH)

        return cls(
            team_slug=_require(source, ConfigKeys.TEAM_SLUG),
            repository_files=repository_files,
            organization=_require(source, ConfigKeys.GITHUB_ORGANIZATION),
            tenant_id=_require(source, ConfigKeys.TENANT_ID),
            subscription_id=_require(source, ConfigKeys.SUBSCRIPTION_ID),
            resource_group_name=_optional(source, ConfigKeys.RESOURCE_GROUP_NAME),
            storage_account_name=_optional(source, ConfigKeys.STORAGE_ACCOUNT_NAME),
            github_token=_optional(source, ConfigKeys.GITHUB_TOKEN),
            service_principals_group=_optional(
                source, ConfigKeys.SERVICE_PRINCIPALS_GROUP
            )
            or DEFAULT_SERVICE_PRINCIPALS_GROUP,
            commit_author=_optional(source, ConfigKeys.COMMIT_AUTHOR)
            or DEFAULT_COMMIT_AUTHOR,
            commit_email=_optional(source, ConfigKeys.COMMIT_EMAIL)
            or DEFAULT_COMMIT_EMAIL,
            commit_message=_optional(source, ConfigKeys.COMMIT_MESSAGE)
            or DEFAULT_COMMIT_MESSAGE,
        )


def _optional(source: ConfigSource, key: str) -> str | None:
    value = source.get(key)
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def _require(source: ConfigSource, key: str) -> str:
    value = _optional(source, key)
    if value is None:
        raise ConfigurationError.missing_setting(key)
    return value
