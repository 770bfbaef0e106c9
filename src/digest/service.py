"""Digest service: wires parser, formatter, labels, and the issue client.

Data flow for create_digest_issue:
  1. Parse + validate the raw digest
  2. Summary stats (logging only)
  3. Format title and body
  4. Labels from summary counts
  5. Issue client call (the only await)

Errors from steps 1 and 5 are logged and re-raised unchanged.
"""

import logging

from src.core.schemas import (
    CreateIssueParams,
    IssueResult,
    JobSummary,
    ValidationResult,
)
from src.digest.formatter import format_issue
from src.digest.parser import parse_digest, summarize
from src.issues.base import DigestLogger, IssueClient

logger = logging.getLogger(__name__)

BASE_LABELS = ("job-digest", "automated")


def build_labels(summary: JobSummary) -> list[str]:
    """Labels for a digest issue, derived from the run counters."""
    labels = [*BASE_LABELS, f"jobs-{summary.total_jobs_found}"]
    if summary.new_jobs > 0:
        labels.append("new-jobs")
    if summary.total_jobs_found == 0:
        labels.append("no-results")
    return labels


def validate_digest(raw_digest: str) -> ValidationResult:
    """Parse and summarize only. Never raises and never logs."""
    try:
        stats = summarize(parse_digest(raw_digest))
    except Exception as e:
        return ValidationResult(valid=False, error=str(e) or "Unknown validation error")
    return ValidationResult(valid=True, summary=stats)


class JobDigestService:
    """Turns digest JSON into a tracker issue through an injected client.

    Stateless between calls; one instance may serve concurrent digests.
    """

    def __init__(self, client: IssueClient, log: DigestLogger | None = None) -> None:
        self._client = client
        self._log = log if log is not None else logger

    async def create_digest_issue(self, raw_digest: str) -> IssueResult:
        """Create an issue from raw digest JSON.

        Raises:
            DigestFormatError: If the digest is invalid.
            Exception: Whatever the issue client raises, unchanged.
        """
        try:
            self._log.info("Starting digest issue creation...")
            self._log.debug(f"Digest data length: {len(raw_digest)} characters")

            digest = parse_digest(raw_digest)
            stats = summarize(digest)
            self._log.info(
                f"Processed digest: {stats.total_jobs} jobs ({stats.new_jobs} new) "
                f"from {', '.join(stats.sources)}"
            )

            content = format_issue(digest)
            self._log.debug(f"Issue title: {content.title}")
            self._log.debug(f"Issue body length: {len(content.body)} characters")

            issue = await self._client.create_issue(
                CreateIssueParams(
                    title=content.title,
                    body=content.body,
                    labels=build_labels(digest.summary),
                )
            )
        except Exception as e:
            self._log.error(f"Failed to create digest issue: {e}")
            raise

        self._log.info(f"✅ Created issue #{issue.number}: {issue.url}")
        self._log.info(
            f"📊 Summary: {stats.total_jobs} jobs, avg match score: {stats.avg_match_score}"
        )
        return issue

    async def validate_digest(self, raw_digest: str) -> ValidationResult:
        """Validate without touching the issue client. Never raises."""
        return validate_digest(raw_digest)
