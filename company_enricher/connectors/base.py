"""Abstract base class for company stores."""

from abc import ABC, abstractmethod
from typing import Any

from company_enricher.models import ENRICHABLE_FIELDS, CompanyInput, ExtractedFields


class CompanyStore(ABC):
    """Where companies come from and where enriched fields go back to."""

    name: str = "base"

    @abstractmethod
    def load_companies(self) -> list[CompanyInput]:
        """
        Load every company to enrich.

        Returns:
            Companies with whatever fields the store already holds
        """
        pass

    @abstractmethod
    def update_company(self, company_id: Any, fields: ExtractedFields) -> bool:
        """
        Apply enriched fields to a stored company.

        Args:
            company_id: Store-specific identifier from load_companies()
            fields: Field map produced by the merge step

        Returns:
            True if the update was applied
        """
        pass

    @staticmethod
    def existing_fields(record: dict[str, Any]) -> dict[str, Any]:
        """Pick the enrichable, non-empty values out of a raw record."""
        return {
            field: record[field]
            for field in ENRICHABLE_FIELDS
            if record.get(field) not in (None, "")
        }
