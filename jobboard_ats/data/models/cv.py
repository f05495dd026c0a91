"""CV (candidate profile) data model."""

from typing import Optional

from pydantic import Field

from .base import BaseDocument, PyObjectId


class CV(BaseDocument):
    """A job seeker's CV; its existence makes the candidate discoverable."""

    job_seeker: PyObjectId
    full_name: str = ""
    summary: Optional[str] = None
    experience_and_skill: list[str] = Field(default_factory=list)
    languages: list[str] = Field(default_factory=list)
    looking_for_work_in_areas: list[str] = Field(default_factory=list)
    professional_certifications: list[str] = Field(default_factory=list)
    published: Optional[bool] = None

    def summary_view(self) -> dict:
        """Field-limited view shown to recruiters next to an application."""
        return {
            "id": str(self.id) if self.id else None,
            "full_name": self.full_name,
            "summary": self.summary,
            "experience_and_skill": list(self.experience_and_skill),
            "languages": list(self.languages),
            "looking_for_work_in_areas": list(self.looking_for_work_in_areas),
            "professional_certifications": list(self.professional_certifications),
        }

    class Settings:
        """MongoDB collection settings."""

        name = "cvs"
