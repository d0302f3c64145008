"""Command-line entry point for the shipkit pipeline modules.

Credentials are never passed as arguments. The bucket and GitHub modules
read them from the environment variables named in Settings
(SHIPKIT_BUCKET_ENDPOINT_ENV and friends).
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from shipkit.artifacts.checksum import metadata_for_tree, sha256_base64, write_checksums
from shipkit.artifacts.flatten import flatten_directory
from shipkit.core.config import Settings, get_settings
from shipkit.core.errors import CommandFailedError, ConfigurationError, ShipkitError, describe
from shipkit.core.logging import configure_structlog
from shipkit.core.secrets import Secret
from shipkit.lint.golangci import Golangcilint, LintConfig
from shipkit.release.api import GitHubApiReleaseTransport
from shipkit.release.ghrelease import GhCliReleaseTransport, GitHubRelease, ReleaseConfig
from shipkit.upload.bucket import BucketConfig, BucketUploader
from shipkit.upload.metadata import FileMetadata, FilePathMetadata

logger = logging.getLogger(__name__)


def _bucket_uploader(settings: Settings) -> BucketUploader:
    return BucketUploader(
        BucketConfig(
            endpoint=Secret.from_env(settings.bucket_endpoint_env),
            bucket=Secret.from_env(settings.bucket_name_env),
            access_key_id=Secret.from_env(settings.bucket_access_key_id_env),
            secret_access_key=Secret.from_env(settings.bucket_secret_access_key_env),
        )
    )


def _load_metadata(args: argparse.Namespace) -> list[FilePathMetadata]:
    """Collect per-file metadata from --metadata and/or --checksums."""
    if args.content_type and not args.checksums:
        raise ConfigurationError("--content-type requires --checksums")
    entries: list[FilePathMetadata] = []
    if args.checksums:
        entries += metadata_for_tree(Path(args.artifacts), content_type=args.content_type)
    if args.metadata:
        try:
            raw = json.loads(Path(args.metadata).read_text(encoding="utf-8"))
            # Explicit entries come last so they override computed ones.
            entries += [FilePathMetadata.from_dict(item) for item in raw]
        except (OSError, ValueError, KeyError, TypeError) as exc:
            raise ConfigurationError(f"invalid metadata file {args.metadata}: {exc}") from exc
    return entries


def cmd_flatten(args: argparse.Namespace, settings: Settings) -> None:
    flatten_directory(Path(args.source), Path(args.destination), strict=args.strict)


def cmd_checksum(args: argparse.Namespace, settings: Settings) -> None:
    for path in write_checksums(Path(args.root)):
        print(path)


def cmd_upload_tree(args: argparse.Namespace, settings: Settings) -> None:
    _bucket_uploader(settings).upload_tree(Path(args.artifacts), args.prefix, _load_metadata(args))


def cmd_upload_latest(args: argparse.Namespace, settings: Settings) -> None:
    _bucket_uploader(settings).upload_latest(Path(args.artifacts), args.version, _load_metadata(args))


def cmd_upload_nightly(args: argparse.Namespace, settings: Settings) -> None:
    _bucket_uploader(settings).upload_nightly(Path(args.artifacts), _load_metadata(args))


def cmd_upload_file(args: argparse.Namespace, settings: Settings) -> None:
    metadata: Optional[FileMetadata] = None
    # A missing file is reported by upload_file as a ListingError
    if (args.content_type or args.checksum) and Path(args.file).is_file():
        metadata = FileMetadata(
            content_type=args.content_type,
            checksum_sha256=sha256_base64(Path(args.file)) if args.checksum else None,
        )
    _bucket_uploader(settings).upload_file(Path(args.file), args.prefix, metadata)


def cmd_release(args: argparse.Namespace, settings: Settings) -> None:
    config = ReleaseConfig(
        token=Secret.from_env(settings.github_token_env),
        repo=args.repo,
        assets=Path(args.assets),
        tag=args.tag,
        flatten=args.flatten,
    )
    transport = GitHubApiReleaseTransport() if args.transport == "api" else GhCliReleaseTransport()
    for name in GitHubRelease(config, transport=transport).upload():
        print(name)


def _lint_config(args: argparse.Namespace) -> LintConfig:
    return LintConfig(
        source=Path(args.source),
        config_file=Path(args.config) if args.config else None,
        env_vars=tuple(args.env),
        base_image=args.base_image,
    )


def cmd_lint(args: argparse.Namespace, settings: Settings) -> None:
    output = Path(args.output) if args.output else None
    print(Golangcilint(_lint_config(args)).lint(output))


def cmd_lint_check(args: argparse.Namespace, settings: Settings) -> None:
    sys.stdout.write(Golangcilint(_lint_config(args)).check())


def _add_metadata_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("artifacts", help="Directory of artifacts to upload.")
    parser.add_argument(
        "--metadata",
        help='JSON file: [{"path": ..., "content_type": ..., "checksum_sha256": ...}].',
    )
    parser.add_argument(
        "--checksums",
        action="store_true",
        help="Compute a SHA-256 checksum header for every file.",
    )
    parser.add_argument(
        "--content-type",
        help="Content type for every file; only valid together with --checksums.",
    )


def _add_lint_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("source", help="Go source directory.")
    parser.add_argument("--config", help="golangci-lint config replacing the default.")
    parser.add_argument(
        "--env",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Environment variable for the lint container (repeatable).",
    )
    parser.add_argument("--base-image", help="Image with golangci-lint on PATH.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="shipkit", description="CI/CD artifact pipeline modules")
    subparsers = parser.add_subparsers(dest="command", required=True)

    p = subparsers.add_parser("flatten", help="Flatten <os>/<arch>/<file> into <file>-<os>-<arch>")
    p.add_argument("source")
    p.add_argument("destination")
    p.add_argument("--strict", action="store_true", help="Fail on unexpected depth or collisions.")
    p.set_defaults(func=cmd_flatten)

    p = subparsers.add_parser("checksum", help="Write .sha256 files next to every artifact")
    p.add_argument("root")
    p.set_defaults(func=cmd_checksum)

    p = subparsers.add_parser("upload-tree", help="Upload a directory under a prefix")
    _add_metadata_args(p)
    p.add_argument("--prefix", default="", help="Bucket key prefix (default: bucket root).")
    p.set_defaults(func=cmd_upload_tree)

    p = subparsers.add_parser("upload-latest", help="Upload under <version>/ and latest/")
    _add_metadata_args(p)
    p.add_argument("--version", required=True)
    p.set_defaults(func=cmd_upload_latest)

    p = subparsers.add_parser("upload-nightly", help="Upload under nightly/")
    _add_metadata_args(p)
    p.set_defaults(func=cmd_upload_nightly)

    p = subparsers.add_parser("upload-file", help="Upload a single file")
    p.add_argument("file")
    p.add_argument("--prefix", default="")
    p.add_argument("--content-type")
    p.add_argument("--checksum", action="store_true", help="Send a SHA-256 checksum header.")
    p.set_defaults(func=cmd_upload_file)

    p = subparsers.add_parser("release", help="Upload assets to a GitHub release")
    p.add_argument("assets")
    p.add_argument("--repo", required=True, help="owner/repo")
    p.add_argument("--tag", required=True)
    p.add_argument("--flatten", action="store_true")
    p.add_argument("--transport", choices=("cli", "api"), default="cli")
    p.set_defaults(func=cmd_release)

    p = subparsers.add_parser("lint", help="Run golangci-lint --fix on a copy of the source")
    _add_lint_args(p)
    p.add_argument("--output", help="Directory for the fixed copy (default: a temp dir).")
    p.set_defaults(func=cmd_lint)

    p = subparsers.add_parser("lint-check", help="Run golangci-lint without fixes")
    _add_lint_args(p)
    p.set_defaults(func=cmd_lint_check)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = get_settings()
    configure_structlog(debug=settings.debug, level=settings.log_level)

    try:
        args.func(args, settings)
    except ShipkitError as exc:
        logger.error(describe(exc, args.command))
        if isinstance(exc, CommandFailedError):
            logger.error("Failed step: %s", json.dumps(exc.step_result.to_dict()))
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
