"""CLI entry point: turn a job digest JSON file into a GitHub issue."""

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path

from src.core.config import Settings
from src.core.schemas import IssueResult, ValidationResult
from src.digest.formatter import format_issue
from src.digest.parser import parse_digest
from src.digest.service import JobDigestService, build_labels, validate_digest
from src.issues.github import GitHubIssueClient


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Create a GitHub issue from a job-search digest",
    )
    parser.add_argument(
        "digest",
        nargs="?",
        help="Path to the digest JSON file, or '-' to read stdin",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Optional settings YAML file (environment variables override it)",
    )
    parser.add_argument(
        "--validate-only",
        action="store_true",
        help="Validate the digest and print its summary, then exit",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the rendered issue instead of creating it",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )
    return parser.parse_args(argv)


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def read_digest(source: str) -> str:
    """Read digest text from a file path or '-' for stdin."""
    if source == "-":
        return sys.stdin.read()
    path = Path(source)
    if not path.exists():
        msg = f"Digest file not found: {path}"
        raise FileNotFoundError(msg)
    return path.read_text(encoding="utf-8")


def print_validation(result: ValidationResult) -> None:
    if result.summary is None:
        return
    s = result.summary
    print("Digest validation passed")
    print(f"  Jobs: {s.total_jobs} ({s.new_jobs} new)")
    print(f"  Sources: {', '.join(s.sources)}")
    print(f"  Avg match score: {s.avg_match_score}")


def dry_run(digest_json: str) -> None:
    """Print the issue that would be created."""
    digest = parse_digest(digest_json)
    content = format_issue(digest)
    print(f"[DRY RUN] Title: {content.title}")
    print(f"[DRY RUN] Labels: {', '.join(build_labels(digest.summary))}")
    print()
    print(content.body)


def write_action_outputs(result: IssueResult, output_path: str | None) -> None:
    """Append issue outputs to the GitHub Actions output file, if any."""
    if not output_path:
        return
    with open(output_path, "a", encoding="utf-8") as fh:
        fh.write(f"issue-number={result.number}\n")
        fh.write(f"issue-url={result.url}\n")


async def run(settings: Settings, digest_json: str) -> IssueResult:
    client = GitHubIssueClient.from_config(settings.github)
    service = JobDigestService(client)

    print(f"Target repo: {settings.github.owner}/{settings.github.repo}")
    return await service.create_digest_issue(digest_json)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)

    try:
        settings = Settings.load(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)

    setup_logging(args.verbose or settings.debug_logging)

    if not args.digest:
        print("Error: a digest file (or '-' for stdin) is required", file=sys.stderr)
        sys.exit(1)

    try:
        digest_json = read_digest(args.digest)
    except OSError as e:
        print(f"Error: could not read digest: {e}", file=sys.stderr)
        sys.exit(1)

    # Validate first so a bad digest never reaches the API
    validation = validate_digest(digest_json)
    if not validation.valid:
        print(f"Error: {validation.error}", file=sys.stderr)
        sys.exit(1)
    print_validation(validation)

    if args.validate_only:
        return

    if args.dry_run:
        dry_run(digest_json)
        return

    if not settings.github.token:
        print("Error: GITHUB_TOKEN environment variable is required", file=sys.stderr)
        sys.exit(1)

    try:
        result = asyncio.run(run(settings, digest_json))
    except Exception as e:
        print(f"Error creating digest issue: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"Issue #{result.number} created: {result.url}")
    write_action_outputs(result, os.environ.get("GITHUB_OUTPUT"))


if __name__ == "__main__":
    main()
