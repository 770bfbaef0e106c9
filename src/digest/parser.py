"""Digest validation: raw JSON text -> DigestResult.

Check order (first violation wins, so error reports are deterministic):
  1. JSON syntax
  2. summary object, then total_jobs_found, new_jobs, sources_queried
  3. jobs array, then each job's required fields and match_score range
  4. metadata object, then generated_at
  5. Strict model validation of everything else

All-or-nothing: a single bad listing rejects the whole digest.
"""

import json
import math
from typing import Any

from pydantic import ValidationError

from src.core.schemas import DigestResult, SummaryStats

# Order matters: it decides which field is reported first.
REQUIRED_JOB_FIELDS = ("id", "title", "company", "url", "description", "source", "posted_date")


class DigestFormatError(ValueError):
    """Raised when digest text does not match the expected schema."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Invalid digest data: {reason}")


def _is_number(value: Any) -> bool:
    # bool is an int subclass but never a count or a score
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and value != ""


def _reject_constant(name: str) -> float:
    msg = f"Unsupported JSON constant {name}"
    raise ValueError(msg)


def _load_json(raw: str) -> Any:
    try:
        return json.loads(raw, parse_constant=_reject_constant)
    except (TypeError, ValueError) as e:
        raise DigestFormatError(str(e)) from e


def _check_summary(data: dict[str, Any]) -> None:
    summary = data.get("summary")
    if not isinstance(summary, dict):
        raise DigestFormatError("Missing or invalid summary object")
    if not _is_number(summary.get("total_jobs_found")):
        raise DigestFormatError("Missing or invalid total_jobs_found in summary")
    if not _is_number(summary.get("new_jobs")):
        raise DigestFormatError("Missing or invalid new_jobs in summary")
    if not isinstance(summary.get("sources_queried"), list):
        raise DigestFormatError("Missing or invalid sources_queried array in summary")


def _check_job(index: int, job: Any) -> None:
    context = f"Job at index {index}"
    if not isinstance(job, dict):
        raise DigestFormatError(f"{context}: expected an object")

    for field in REQUIRED_JOB_FIELDS:
        if not _is_non_empty_str(job.get(field)):
            raise DigestFormatError(f"{context}: missing or invalid {field} field")

    if "match_score" in job:
        score = job["match_score"]
        if not _is_number(score) or not 0 <= score <= 1:
            raise DigestFormatError(f"{context}: match_score must be a number between 0 and 1")


def _check_jobs(data: dict[str, Any]) -> None:
    jobs = data.get("jobs")
    if not isinstance(jobs, list):
        raise DigestFormatError("Jobs data must be an array")
    for index, job in enumerate(jobs):
        _check_job(index, job)


def _check_metadata(data: dict[str, Any]) -> None:
    metadata = data.get("metadata")
    if not isinstance(metadata, dict):
        raise DigestFormatError("Missing or invalid metadata object")
    if not _is_non_empty_str(metadata.get("generated_at")):
        raise DigestFormatError("Missing or invalid generated_at in metadata")


def _describe_validation_error(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first["loc"])
    return f"{location}: {first['msg']}" if location else first["msg"]


def parse_digest(raw: str) -> DigestResult:
    """Parse and validate digest JSON text.

    Args:
        raw: Serialized digest produced by the job-search library.

    Returns:
        The validated DigestResult. Values are passed through unchanged.

    Raises:
        DigestFormatError: On invalid JSON or the first schema violation.
    """
    data = _load_json(raw)
    if not isinstance(data, dict):
        raise DigestFormatError("Digest must be a JSON object")

    _check_summary(data)
    _check_jobs(data)
    _check_metadata(data)

    try:
        return DigestResult.model_validate(data)
    except ValidationError as e:
        raise DigestFormatError(_describe_validation_error(e)) from e


def summarize(digest: DigestResult) -> SummaryStats:
    """Compute summary statistics for logging and validation reports."""
    scores = [job.match_score for job in digest.jobs if job.match_score is not None]
    avg = sum(scores) / len(scores) if scores else 0.0

    return SummaryStats(
        total_jobs=digest.summary.total_jobs_found,
        new_jobs=digest.summary.new_jobs,
        sources=list(digest.summary.sources_queried),
        avg_match_score=math.floor(avg * 100 + 0.5) / 100,
    )


get_summary_stats = summarize
