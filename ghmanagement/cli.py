"""Command-line helpers for manifest validation, schema export, and dry runs."""

from __future__ import annotations

import argparse
from pathlib import Path

import msgspec

from ghmanagement.engine import RecordingEngine
from ghmanagement.errors import ConfigurationError, ProviderError
from ghmanagement.manifest import ManifestError, load_manifests, write_manifest_schema
from ghmanagement.program import run_reconciliation
from ghmanagement.settings import (
    ConfigKeys,
    ConfigSource,
    EnvironmentConfig,
    LayeredConfig,
    RunSettings,
)

_PLACEHOLDER_ID = "00000000-0000-0000-0000-000000000000"


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "manifests", type=Path, nargs="+", help="YAML manifests to validate"
    )
    parser.add_argument(
        "--schema-out",
        type=Path,
        default=None,
        help="Optional path to write the generated JSON Schema",
    )
    parser.add_argument(
        "--json-out",
        type=Path,
        default=None,
        help="Optional path to write the merged, validated manifest as JSON",
    )
    parser.add_argument(
        "--plan-out",
        type=Path,
        default=None,
        help="Optional path to write the resources a run would declare",
    )
    parser.add_argument(
        "--organization", default=None, help="GitHub organisation for --plan-out"
    )
    parser.add_argument(
        "--team-slug", default=None, help="Owning team slug for --plan-out"
    )
    parser.add_argument(
        "--from-env",
        action="store_true",
        help=(
            "Read --plan-out settings not given on the command line from "
            "GHM_-prefixed environment variables"
        ),
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Validate manifests and optionally export schema, JSON, and a plan.

    Parameters
    ----------
    argv : list[str] | None, optional
        Command-line arguments. ``None`` defaults to ``sys.argv``.

    Returns
    -------
    int
        Exit code: 0 on success, 1 when validation or planning fails.

    """
    parser = _parser()
    args = parser.parse_args(argv)
    manifests: list[Path] = args.manifests

    if (
        args.plan_out
        and not args.from_env
        and not (args.organization and args.team_slug)
    ):
        parser.error(
            "--plan-out requires --organization and --team-slug or --from-env"
        )

    try:
        repositories = load_manifests(manifests)
    except ManifestError as exc:
        print("Manifest validation failed:")
        for issue in exc.issues:
            print(f"  - {issue}")
        return 1

    if args.schema_out:
        write_manifest_schema(args.schema_out)

    if args.json_out:
        args.json_out.parent.mkdir(parents=True, exist_ok=True)
        args.json_out.write_bytes(msgspec.json.encode(repositories))

    print(
        f"{len(manifests)} manifest(s) valid "
        f"({len(repositories)} repositories)"
    )

    if args.plan_out:
        return _write_plan(args, manifests)
    return 0


def _plan_config(args: argparse.Namespace, manifests: list[Path]) -> ConfigSource:
    overrides: dict[str, str | None] = {
        ConfigKeys.REPOS_PATH: ",".join(str(path) for path in manifests),
        ConfigKeys.GITHUB_ORGANIZATION: args.organization,
        ConfigKeys.TEAM_SLUG: args.team_slug,
    }
    if args.from_env:
        return LayeredConfig(overrides, EnvironmentConfig())
    overrides[ConfigKeys.TENANT_ID] = _PLACEHOLDER_ID
    overrides[ConfigKeys.SUBSCRIPTION_ID] = _PLACEHOLDER_ID
    return LayeredConfig(overrides, EnvironmentConfig({}))


def _write_plan(args: argparse.Namespace, manifests: list[Path]) -> int:
    engine = RecordingEngine()
    try:
        settings = RunSettings.from_config(_plan_config(args, manifests))
        run_reconciliation(settings, engine)
    except (ConfigurationError, ProviderError) as exc:
        print(f"Planning failed: {exc}")
        return 1

    args.plan_out.parent.mkdir(parents=True, exist_ok=True)
    args.plan_out.write_bytes(engine.encode_plan())
    print(f"plan with {len(engine.declarations)} resources written to {args.plan_out}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
