"""Connectors: the article search source and the company stores."""

from .base import CompanyStore
from .wikipedia import CandidateSearcher
from .sql_store import SqlCompanyStore
from .csv_store import CsvCompanyStore
from .memory import InMemoryStore

__all__ = [
    "CompanyStore",
    "CandidateSearcher",
    "SqlCompanyStore",
    "CsvCompanyStore",
    "InMemoryStore",
]
