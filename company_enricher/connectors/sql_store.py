"""SQLAlchemy-backed company store."""

import logging
from datetime import datetime
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError

from company_enricher.models import ENRICHABLE_FIELDS, CompanyInput, ExtractedFields
from company_enricher.models.database import DBCompany, init_db
from .base import CompanyStore

logger = logging.getLogger(__name__)


class SqlCompanyStore(CompanyStore):
    """Companies stored in the ``company_db`` table."""

    name = "db"

    def __init__(self, db_url: Optional[str] = None):
        self.SessionLocal = init_db(db_url)

    def load_companies(self) -> list[CompanyInput]:
        session = self.SessionLocal()
        try:
            rows = session.query(DBCompany).order_by(DBCompany.name).all()
            return [
                CompanyInput(
                    id=row.id,
                    name=row.name,
                    existing_fields=self.existing_fields(
                        {field: getattr(row, field) for field in ENRICHABLE_FIELDS}
                    ),
                )
                for row in rows
            ]
        finally:
            session.close()

    def update_company(self, company_id: Any, fields: ExtractedFields) -> bool:
        """Write fields and stamp the enrichment bookkeeping columns."""
        session = self.SessionLocal()
        try:
            company = session.get(DBCompany, company_id)
            if company is None:
                logger.warning(f"Company {company_id} not found in database")
                return False

            for field, value in fields.items():
                if field in ENRICHABLE_FIELDS:
                    setattr(company, field, value)

            company.enrichment_status = "completed"
            company.enrichment_date = datetime.utcnow()
            company.set_fields_added(list(fields.keys()))

            session.commit()
            return True

        except SQLAlchemyError as e:
            session.rollback()
            logger.warning(f"Database update failed for company {company_id}: {e}")
            return False

        finally:
            session.close()

    def add_company(self, name: str, **fields: Any) -> int:
        """Insert a company and return its id."""
        session = self.SessionLocal()
        try:
            company = DBCompany(name=name, **fields)
            session.add(company)
            session.commit()
            return company.id
        finally:
            session.close()

    def get_company(self, company_id: Any) -> Optional[DBCompany]:
        session = self.SessionLocal()
        try:
            return session.get(DBCompany, company_id)
        finally:
            session.close()
