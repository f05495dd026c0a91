"""
Job posting data models.

Only the fields the tracking core reads are modelled; job CRUD itself is
owned by a separate collaborator.
"""

from typing import Any, Optional

from pydantic import Field, field_validator

from jobboard_ats.utils.constants import JobType

from .base import BaseDocument, EmbeddedModel, PyObjectId


class JobPosting(BaseDocument):
    """A job posting as stored in the jobs collection."""

    title: str
    description: str = ""
    company: str = ""  # Denormalized company name
    company_id: Optional[PyObjectId] = None
    location: str = ""
    country: Optional[str] = None  # ISO 3166-1 alpha-2, stored uppercase
    salary: Optional[str] = None
    type: Optional[JobType] = None

    # Multi-value classification fields
    languages: list[str] = Field(default_factory=list)
    qualifications: list[str] = Field(default_factory=list)
    sports: list[str] = Field(default_factory=list)
    occupational_areas: list[str] = Field(default_factory=list)

    # Visibility; an absent published flag counts as published
    published: Optional[bool] = None
    featured: bool = False

    recruiter: Optional[PyObjectId] = None

    @field_validator("country")
    @classmethod
    def normalize_country(cls, v: Optional[str]) -> Optional[str]:
        """Store country codes trimmed and uppercase."""
        if v is None:
            return None
        v = v.strip().upper()
        return v or None

    @field_validator("languages", "qualifications", "sports", "occupational_areas", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return [] if v is None else v

    @property
    def is_published(self) -> bool:
        """Unpublishing is opt-in: only an explicit False hides a posting."""
        return self.published is not False

    class Settings:
        """MongoDB collection settings."""

        name = "jobs"


class JobUpdate(EmbeddedModel):
    """Schema for an administrative job update; unset fields are left alone."""

    title: Optional[str] = None
    description: Optional[str] = None
    company: Optional[str] = None
    location: Optional[str] = None
    country: Optional[str] = None
    salary: Optional[str] = None
    type: Optional[JobType] = None
    languages: Optional[list[str]] = Field(default=None, max_length=3)
    qualifications: Optional[list[str]] = None
    sports: Optional[list[str]] = None
    occupational_areas: Optional[list[str]] = None
    published: Optional[bool] = None
    featured: Optional[bool] = None

    @field_validator("country")
    @classmethod
    def normalize_country(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip().upper() or None
