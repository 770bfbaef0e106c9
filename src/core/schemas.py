"""Core data models for the job digest pipeline.

Every model is frozen and strict: values are never coerced, and optional
fields stay ``None`` when the payload does not carry them.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class _DigestModel(BaseModel):
    """Base for wire-shaped models. Unknown keys are kept as extras."""

    model_config = ConfigDict(frozen=True, strict=True, extra="allow")


class SearchQuery(_DigestModel):
    """The search that produced a digest. Carried through, never checked."""

    keywords: str | None = None
    location: str | None = None
    job_title: str | None = None
    company: str | None = None
    date_range: str | None = None
    additional_filters: dict[str, Any] | None = None


class JobSummary(_DigestModel):
    """Run-level counters reported by the job-search library."""

    total_jobs_found: int | float
    new_jobs: int | float
    updated_jobs: int | float = 0
    duplicates_removed: int | float = 0
    processing_time_seconds: float = 0.0
    sources_queried: list[str]
    date_range_processed: str | None = None
    filters_applied: dict[str, Any] | None = None

    @field_validator("total_jobs_found", "new_jobs", "updated_jobs", "duplicates_removed")
    @classmethod
    def whole_counts_as_int(cls, v: int | float) -> int | float:
        # Producers may write whole counts as 2.0
        return int(v) if isinstance(v, float) and v.is_integer() else v


class JobListing(_DigestModel):
    """A single job posting."""

    id: str
    title: str
    company: str
    description: str
    url: str
    source: str
    posted_date: str
    location: str | None = None
    salary: str | None = None
    requirements: str | None = None
    benefits: str | None = None
    application_deadline: str | None = None
    job_type: str | None = None
    experience_level: str | None = None
    remote_option: bool | None = None
    tags: list[str] | None = None
    match_score: float | None = Field(default=None, ge=0.0, le=1.0)
    match_reasons: list[str] | None = None


class ProcessingMetadata(_DigestModel):
    generated_at: str
    version: str | None = None
    config_snapshot: dict[str, Any] | None = None
    errors: list[str] | None = None
    warnings: list[str] | None = None


class DigestResult(_DigestModel):
    """One job-search run: the unit of work turned into one issue."""

    query: SearchQuery | None = None
    summary: JobSummary
    jobs: list[JobListing]
    metadata: ProcessingMetadata

    def to_json(self) -> str:
        """Serialize back to the wire shape.

        Fields the payload never set are omitted; explicit nulls and unknown
        keys are written back as they came in.
        """
        return self.model_dump_json(exclude_unset=True)


class IssueContent(BaseModel):
    """Rendered issue text."""

    model_config = ConfigDict(frozen=True)

    title: str
    body: str


class SummaryStats(BaseModel):
    """Derived statistics used for logging and validation reports.

    Serializes with camelCase keys (``totalJobs``, ``avgMatchScore``...).
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    total_jobs: int
    new_jobs: int
    sources: list[str] = Field(default_factory=list)
    avg_match_score: float = 0.0


class CreateIssueParams(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    body: str
    labels: list[str] = Field(default_factory=list)


class IssueResult(BaseModel):
    """Identifier of a created issue."""

    model_config = ConfigDict(frozen=True)

    number: int
    url: str


class ValidationResult(BaseModel):
    """Outcome of a validation-only run. Exactly one of summary/error is set."""

    model_config = ConfigDict(frozen=True)

    valid: bool
    summary: SummaryStats | None = None
    error: str | None = None
