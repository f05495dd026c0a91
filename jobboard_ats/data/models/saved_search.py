"""
Saved search data model.

A saved search is owned and edited by its user; the matcher and the
job-alert runner only read it (the runner also stamps last_sent).
"""

from datetime import datetime
from typing import Optional

from pydantic import field_validator

from jobboard_ats.utils.constants import AlertFrequency

from .base import BaseDocument, PyObjectId


class SavedSearch(BaseDocument):
    """Persisted filter specification used for periodic job alerts."""

    user_id: PyObjectId
    name: Optional[str] = None

    # Filter criteria; None or empty imposes no constraint
    keyword: Optional[str] = None
    location: Optional[str] = None
    country: Optional[str] = None
    category: Optional[str] = None  # matched against occupational_areas
    sport: Optional[str] = None
    language: Optional[str] = None

    frequency: AlertFrequency = AlertFrequency.DAILY
    active: bool = True
    last_sent: Optional[datetime] = None

    @field_validator("name", "keyword", "location", "country", "category", "sport", "language")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        """Trim criteria and treat blank strings as unset."""
        if v is None:
            return None
        v = v.strip()
        return v or None

    class Settings:
        """MongoDB collection settings."""

        name = "saved_searches"
