"""
Saved-search job matcher.

Filters open postings against a saved search. Every criterion that is set
must hold for a posting to match; criteria left empty impose nothing.
Results are ordered featured first, then newest first.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Optional

from jobboard_ats.data.models import JobPosting, SavedSearch
from jobboard_ats.data.repositories import JobRepository
from jobboard_ats.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class JobMatch:
    """A posting that satisfied a saved search, with the reasons it did."""

    job: JobPosting
    match_reasons: list[str] = field(default_factory=list)

    def to_alert_item(self, base_url: str) -> dict[str, Any]:
        """Fields a job-alert message lists for the posting."""
        job = self.job
        return {
            "id": str(job.id),
            "title": job.title,
            "company": job.company,
            "location": job.location,
            "country": job.country,
            "type": job.type,
            "featured": job.featured,
            "created_at": job.created_at,
            "url": f"{base_url}/jobs/{job.id}",
            "match_reasons": list(self.match_reasons),
        }


def _contains(haystack: Optional[str], needle: str) -> bool:
    return bool(haystack) and needle in haystack.lower()


def match_job(job: JobPosting, search: SavedSearch) -> Optional[JobMatch]:
    """
    Check one posting against a saved search.

    Returns:
        The match with its reasons, or None if any set criterion fails
    """
    reasons: list[str] = []

    if search.keyword:
        keyword = search.keyword.lower()
        in_title = _contains(job.title, keyword)
        in_description = _contains(job.description, keyword)
        in_company = _contains(job.company, keyword)
        if not (in_title or in_description or in_company):
            return None
        if in_title:
            reasons.append(f'Title contains "{search.keyword}"')
        if in_company:
            reasons.append(f'Company contains "{search.keyword}"')

    if search.location:
        if not _contains(job.location, search.location.lower()):
            return None
        reasons.append(f"Location: {job.location}")

    if search.country:
        if not job.country or job.country.upper() != search.country.upper():
            return None
        reasons.append(f"Country: {job.country}")

    # Classification criteria are exact, case-sensitive list membership
    if search.category:
        if search.category not in job.occupational_areas:
            return None
        reasons.append(f"Category: {search.category}")

    if search.sport:
        if search.sport not in job.sports:
            return None
        reasons.append(f"Sport: {search.sport}")

    if search.language:
        if search.language not in job.languages:
            return None
        reasons.append(f"Language: {search.language}")

    return JobMatch(job=job, match_reasons=reasons)


def find_matches(
    search: SavedSearch,
    jobs: Iterable[JobPosting],
    since: Optional[datetime] = None,
) -> list[JobMatch]:
    """
    Match postings against a saved search.

    Args:
        search: The saved search whose criteria apply
        jobs: Candidate postings
        since: Only postings created on or after this time

    Returns:
        Matches, featured postings first, then by descending creation time
    """
    matches = []
    for job in jobs:
        if not job.is_published:
            continue
        if since is not None and job.created_at < since:
            continue
        match = match_job(job, search)
        if match is not None:
            matches.append(match)

    matches.sort(key=lambda m: m.job.created_at, reverse=True)
    matches.sort(key=lambda m: not m.job.featured)
    return matches


class JobMatcher:
    """Runs find_matches over the open postings in storage."""

    def __init__(self, job_repository: JobRepository):
        self._jobs = job_repository

    def find_matches(
        self, search: SavedSearch, since: Optional[datetime] = None
    ) -> list[JobMatch]:
        jobs = self._jobs.list_open(since=since)
        matches = find_matches(search, jobs, since=since)
        logger.debug(f"Saved search {search.id}: {len(matches)} of {len(jobs)} open jobs match")
        return matches
