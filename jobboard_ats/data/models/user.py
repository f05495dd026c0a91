"""
User account data model.

Credentials are deliberately not modelled: password hashes stored on the
document are dropped on load and can never end up in a snapshot.
"""

from typing import Optional

from jobboard_ats.utils.constants import UserRole

from .base import BaseDocument


class User(BaseDocument):
    """A platform account: job seeker, recruiter or admin."""

    email: str
    name: str
    role: UserRole

    # Recruiter feature flag for private notes; unset means enabled
    notes_enabled: Optional[bool] = None

    @property
    def has_notes_enabled(self) -> bool:
        return self.notes_enabled is not False

    class Settings:
        """MongoDB collection settings."""

        name = "users"
