"""Company repository."""

from jobboard_ats.data.models.company import Company
from jobboard_ats.utils.constants import COMPANIES_COLLECTION

from .base import MutableRepository


class CompanyRepository(MutableRepository[Company]):
    """Repository for company document operations."""

    @property
    def collection_name(self) -> str:
        return COMPANIES_COLLECTION

    @property
    def model_class(self) -> type[Company]:
        return Company
