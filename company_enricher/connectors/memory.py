"""In-memory company store for testing and previews."""

from typing import Any, Optional

from company_enricher.models import CompanyInput, ExtractedFields
from .base import CompanyStore


class InMemoryStore(CompanyStore):
    """List-backed store that records every update it receives."""

    name = "memory"

    def __init__(self, companies: Optional[list[CompanyInput]] = None):
        self.companies = list(companies or [])
        self.updates: dict[Any, ExtractedFields] = {}

    def load_companies(self) -> list[CompanyInput]:
        return list(self.companies)

    def update_company(self, company_id: Any, fields: ExtractedFields) -> bool:
        for i, company in enumerate(self.companies):
            if company.id != company_id:
                continue
            self.companies[i] = company.model_copy(
                update={"existing_fields": {**company.existing_fields, **fields}}
            )
            self.updates[company_id] = dict(fields)
            return True
        return False
