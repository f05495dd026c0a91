"""
Database repositories for the Jobboard ATS.

This module provides repository classes for all database collections,
implementing the repository pattern for clean data access.
"""

# Base repository
from .base import BaseRepository, MutableRepository, translate_storage_errors

# Entity repositories
from .application_repository import ApplicationRepository
from .audit_repository import AuditRepository
from .company_repository import CompanyRepository
from .cv_repository import CVRepository
from .job_repository import JobRepository
from .saved_search_repository import SavedSearchRepository
from .user_repository import UserRepository

__all__ = [
    # Base
    "BaseRepository",
    "MutableRepository",
    "translate_storage_errors",
    # Entities
    "ApplicationRepository",
    "AuditRepository",
    "CompanyRepository",
    "CVRepository",
    "JobRepository",
    "SavedSearchRepository",
    "UserRepository",
]
