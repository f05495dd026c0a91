"""
Pydantic data models and schemas for the Jobboard ATS.

This module provides all data models used throughout the application,
including database documents, embedded models, and input schemas.
"""

# Base models
from .base import BaseDocument, EmbeddedModel, PyObjectId

# Interaction records
from .application import (
    Application,
    ApplicationUpdate,
    ApplyRequest,
    ArchiveRequest,
    ContactRequest,
)

# Collaborator entities
from .company import Company
from .cv import CV
from .job import JobPosting, JobUpdate
from .saved_search import SavedSearch
from .user import User

# Audit models
from .audit import (
    ActorInfo,
    AuditChanges,
    AuditLog,
    AuditLogCreate,
    AuditLogQuery,
)

__all__ = [
    # Base
    "BaseDocument",
    "EmbeddedModel",
    "PyObjectId",
    # Interaction records
    "Application",
    "ApplicationUpdate",
    "ApplyRequest",
    "ArchiveRequest",
    "ContactRequest",
    # Collaborator entities
    "Company",
    "CV",
    "JobPosting",
    "JobUpdate",
    "SavedSearch",
    "User",
    # Audit
    "ActorInfo",
    "AuditChanges",
    "AuditLog",
    "AuditLogCreate",
    "AuditLogQuery",
]
