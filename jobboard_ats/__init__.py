"""
Jobboard ATS - applicant tracking core of a job-board platform.

Models the relationship between a candidate and a job posting or recruiter
as a finite-state record, keeps recruiter-private fields away from job
seekers, records administrative deletions in an audit trail and matches
saved searches against open job postings.
"""

__app_name__ = "Jobboard ATS"
__version__ = "0.1.0"
