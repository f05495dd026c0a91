"""Saved-search matching and the periodic job-alert runner."""

from jobboard_ats.core.matching.job_alerts import JobAlertRunner, JobAlertSummary, alert_since
from jobboard_ats.core.matching.job_matcher import JobMatch, JobMatcher, find_matches, match_job

__all__ = [
    "JobAlertRunner",
    "JobAlertSummary",
    "JobMatch",
    "JobMatcher",
    "alert_since",
    "find_matches",
    "match_job",
]
