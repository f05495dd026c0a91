"""User repository."""

from jobboard_ats.data.models.user import User
from jobboard_ats.utils.constants import USERS_COLLECTION

from .base import MutableRepository


class UserRepository(MutableRepository[User]):
    """Repository for user account operations."""

    @property
    def collection_name(self) -> str:
        return USERS_COLLECTION

    @property
    def model_class(self) -> type[User]:
        return User
