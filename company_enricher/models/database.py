"""SQLAlchemy database models and setup."""

import json
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    Text,
    Index,
    create_engine,
)
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from company_enricher.config import settings

Base = declarative_base()


class DBCompany(Base):
    """Stored company record."""

    __tablename__ = "company_db"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(500), nullable=False)

    # Enrichable fields
    description = Column(Text)
    company_logo = Column(String(1000))
    wikipedia_url = Column(String(1000))
    website = Column(String(1000))
    year_founded = Column(Integer)
    headquarters = Column(String(500))
    industry = Column(String(500))
    type = Column(String(100))
    ceo_name = Column(String(255))
    ceo_title = Column(String(255))
    revenue = Column(String(255))
    employees = Column(String(100))
    mission = Column(Text)

    # Enrichment bookkeeping
    enrichment_status = Column(String(50))
    enrichment_date = Column(DateTime)
    enrichment_fields_added = Column(Text)  # JSON array

    __table_args__ = (Index("idx_company_name", "name"),)

    def get_fields_added(self) -> list[str]:
        return json.loads(self.enrichment_fields_added) if self.enrichment_fields_added else []

    def set_fields_added(self, fields: list[str]):
        self.enrichment_fields_added = json.dumps(fields)


class DBEnrichmentRun(Base):
    """Batch enrichment run tracking."""

    __tablename__ = "enrichment_runs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    run_id = Column(String(36), unique=True, nullable=False, index=True)
    status = Column(String(50), default="pending")  # pending, running, completed, failed
    update_db = Column(Integer, default=0)
    started_at = Column(DateTime, default=datetime.utcnow)
    completed_at = Column(DateTime)
    total = Column(Integer, default=0)
    found = Column(Integer, default=0)
    updated = Column(Integer, default=0)
    error_message = Column(Text)


# Database initialization
def init_db(db_url: Optional[str] = None) -> sessionmaker:
    """Initialize database and return session maker."""
    url = db_url or settings.database_url
    engine = create_engine(url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)


def get_session(db_url: Optional[str] = None) -> Session:
    """Get a new database session."""
    SessionLocal = init_db(db_url)
    return SessionLocal()
