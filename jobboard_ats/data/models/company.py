"""Company data model."""

from typing import Optional

from .base import BaseDocument, PyObjectId


class Company(BaseDocument):
    """A recruiter's company profile."""

    name: str
    description: Optional[str] = None
    address: Optional[str] = None
    website: Optional[str] = None
    logo: Optional[str] = None
    owner: Optional[PyObjectId] = None

    class Settings:
        """MongoDB collection settings."""

        name = "companies"
