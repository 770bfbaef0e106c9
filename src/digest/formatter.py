"""Markdown rendering of a validated digest into GitHub issue content.

Body sections, in order:
  1. Header with the generation timestamp
  2. Summary statistics
  3. Either the empty-results advice (and stop) or the sorted listings
  4. Next steps
  5. Collapsible system-information footer

The only impure input is the clock, injected via ``now`` for relative dates.
"""

import math
from datetime import datetime, timezone
from urllib.parse import quote

from src.core.schemas import (
    DigestResult,
    IssueContent,
    JobListing,
    JobSummary,
    ProcessingMetadata,
)

DESCRIPTION_MAX_CHARS = 300
REQUIREMENTS_MAX_CHARS = 200
INVALID_DATE = "Invalid Date"
SEARCH_URL = "https://www.google.com/search?q="
LISTING_SEPARATOR = "\n---\n\n"

# Characters left unescaped in search queries (same set as encodeURIComponent).
_QUERY_SAFE = "-_.!~*'()"

_EMPTY_RESULTS_SECTION = (
    "## 🔍 No Jobs Found\n\n"
    "No jobs matched your current search criteria today. Consider:\n\n"
    "- 🔄 **Broadening search keywords** - try related terms or technologies\n"
    "- 📍 **Expanding location preferences** - include remote or nearby cities\n"
    "- 💰 **Adjusting salary expectations** - consider a wider range\n"
    "- 📅 **Checking search date range** - extend to include older postings\n\n"
    "The system will continue monitoring and notify you when new opportunities are found.\n\n"
)

_MATCH_SCORE_TIP = (
    "💡 **Tip:** Jobs with higher match scores (🎯) align better with your preferences.\n\n"
)


def format_issue(digest: DigestResult, *, now: datetime | None = None) -> IssueContent:
    """Render a digest into an issue title and Markdown body.

    Args:
        digest: A validated digest.
        now: Reference instant for "Today"/"Yesterday" phrases. Defaults to
            the current UTC time.
    """
    summary = digest.summary
    title = format_title(summary.total_jobs_found, summary.new_jobs)
    body = _format_body(digest, _as_utc(now) if now is not None else datetime.now(timezone.utc))
    return IssueContent(title=title, body=body)


def format_title(total_jobs: int, new_jobs: int) -> str:
    if total_jobs == 0:
        return "📭 No New Job Opportunities Today"
    if total_jobs == 1:
        return "🎯 1 New Job Opportunity"
    new_text = f" ({new_jobs} new)" if new_jobs > 0 else ""
    return f"🎯 {total_jobs} Job Opportunities{new_text}"


def _format_body(digest: DigestResult, now: datetime) -> str:
    parts = [
        f"# Job Search Results - {format_timestamp(digest.metadata.generated_at)}\n\n",
        _format_summary_section(digest.summary),
    ]

    if not digest.jobs:
        parts.append(_EMPTY_RESULTS_SECTION)
        return "".join(parts)

    parts.append(_format_listings_section(digest.jobs, now))
    parts.append(_format_next_steps_section(len(digest.jobs)))
    parts.append(_format_footer(digest.metadata))
    return "".join(parts)


def _format_summary_section(summary: JobSummary) -> str:
    section = "## 📊 Summary\n\n"
    section += f"- **Total Jobs:** {summary.total_jobs_found}"
    if summary.new_jobs > 0:
        section += f" ({summary.new_jobs} new since last run)"

    section += f"\n- **Sources:** {', '.join(summary.sources_queried)}"
    section += f"\n- **Processing Time:** {summary.processing_time_seconds:.2f}s"

    if summary.duplicates_removed > 0:
        section += f"\n- **Duplicates Removed:** {summary.duplicates_removed}"

    return section + "\n\n"


def sort_listings(jobs: list[JobListing]) -> list[JobListing]:
    """Order listings by match score desc, then posted date desc.

    A missing score counts as 0. Listings with unparseable dates go after
    dated ones on a score tie and otherwise keep their input order.
    """

    def key(job: JobListing) -> tuple[float, int, float]:
        score = job.match_score if job.match_score is not None else 0.0
        posted = parse_timestamp(job.posted_date)
        if posted is None:
            return (-score, 1, 0.0)
        return (-score, 0, -posted.timestamp())

    return sorted(jobs, key=key)


def _format_listings_section(jobs: list[JobListing], now: datetime) -> str:
    listings = [
        format_listing(job, index, now) for index, job in enumerate(sort_listings(jobs), start=1)
    ]
    return "## 💼 Job Opportunities\n\n" + LISTING_SEPARATOR.join(listings) + "\n\n"


def format_listing(job: JobListing, index: int, now: datetime) -> str:
    """Render one listing: heading, badges, text, posted date, actions."""
    listing = f"### {index}. {job.title} at **{job.company}**\n\n"

    badges = _badges(job)
    if badges:
        listing += " • ".join(badges) + "\n\n"

    listing += truncate_text(job.description, DESCRIPTION_MAX_CHARS) + "\n\n"

    if job.requirements:
        requirements = truncate_text(job.requirements, REQUIREMENTS_MAX_CHARS)
        listing += f"**Requirements:** {requirements}\n\n"

    if job.match_reasons:
        listing += f"**✨ Why this matches:** {', '.join(job.match_reasons)}\n\n"

    listing += f"**Posted:** {format_posted_date(job.posted_date, now)}\n\n"
    listing += _format_actions(job)
    return listing


def _badges(job: JobListing) -> list[str]:
    badges: list[str] = []
    if job.location:
        badges.append(f"📍 {job.location}")
    if job.salary:
        badges.append(f"💰 {job.salary}")
    if job.job_type:
        badges.append(f"⏰ {job.job_type}")
    if job.experience_level:
        badges.append(f"👨‍💼 {job.experience_level}")
    if job.remote_option:
        badges.append("🏠 Remote Available")
    # A score of exactly 0 is treated like no score.
    if job.match_score:
        badges.append(f"🎯 {_percent(job.match_score)}% match")
    return badges


def _percent(score: float) -> int:
    # Round half up, so 0.125 -> 13
    return math.floor(score * 100 + 0.5)


def _format_actions(job: JobListing) -> str:
    company_query = _search_url(f"{job.company} company review salary culture")
    role_query = _search_url(f"{job.title} {job.company} interview questions")
    return (
        "**🚀 Actions:**\n"
        f"- [**Apply Now**]({job.url}) 📝\n"
        f"- [Research Company]({company_query}) 🔍\n"
        f"- [Interview Prep]({role_query}) 🎯\n"
    )


def _search_url(query: str) -> str:
    return SEARCH_URL + quote(query, safe=_QUERY_SAFE)


def _format_next_steps_section(job_count: int) -> str:
    section = "## 🎯 Next Steps\n\n"
    if job_count == 1:
        section += 'Ready to apply? Click the "Apply Now" button above to get started!\n\n'
    else:
        section += (
            f"Found {job_count} opportunities! Here's how to proceed:\n\n"
            "1. **Review** each job listing above\n"
            "2. **Research** companies that interest you\n"
            '3. **Click "Apply Now"** to start the application process\n'
            "4. **Prepare** for interviews using the interview prep links\n\n"
        )
    return section + _MATCH_SCORE_TIP


def _format_footer(metadata: ProcessingMetadata) -> str:
    footer = "---\n\n<details>\n<summary>🤖 System Information</summary>\n\n"
    footer += f"- **Generated:** {metadata.generated_at}\n"

    if metadata.version:
        footer += f"- **Version:** {metadata.version}\n"
    if metadata.warnings:
        footer += f"- **Warnings:** {len(metadata.warnings)}\n"
    if metadata.errors:
        footer += f"- **Errors:** {len(metadata.errors)}\n"

    footer += "\n*This digest was generated automatically by the Job Search Automation system.*\n"
    return footer + "</details>"


def truncate_text(text: str, max_length: int) -> str:
    """Shorten text to max_length plus an ellipsis, preferring a word break.

    The cut backs off to the last space only when that space lies beyond
    80% of max_length; otherwise the text is cut mid-word.
    """
    if len(text) <= max_length:
        return text

    truncated = text[:max_length]
    last_space = truncated.rfind(" ")
    if last_space > max_length * 0.8:
        return truncated[:last_space] + "..."
    return truncated + "..."


def parse_timestamp(value: str) -> datetime | None:
    """Parse an ISO-8601 date or datetime. Naive values are taken as UTC.

    Returns None when the value cannot be parsed.
    """
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    return _as_utc(parsed)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def format_timestamp(value: str) -> str:
    """Long US form, e.g. 'Thursday, July 31, 2025 at 09:00 AM'."""
    parsed = parse_timestamp(value)
    if parsed is None:
        return INVALID_DATE
    return f"{parsed:%A}, {parsed:%B} {parsed.day}, {parsed.year} at {parsed:%I:%M %p}"


def format_posted_date(value: str, now: datetime) -> str:
    """Relative phrase for the last week, short absolute date otherwise.

    Dates after ``now`` also get the absolute form, never a negative
    "N days ago".
    """
    posted = parse_timestamp(value)
    if posted is None:
        return INVALID_DATE

    days = math.floor((_as_utc(now) - posted).total_seconds() / 86400)
    if days == 0:
        return "Today"
    if days == 1:
        return "Yesterday"
    if 1 < days < 7:
        return f"{days} days ago"
    return f"{posted:%b} {posted.day}, {posted.year}"
