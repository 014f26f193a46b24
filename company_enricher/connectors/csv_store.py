"""CSV file company store."""

import csv
import logging
from pathlib import Path
from typing import Any, Optional

from company_enricher.models import CompanyInput, ExtractedFields
from .base import CompanyStore

logger = logging.getLogger(__name__)


class CsvCompanyStore(CompanyStore):
    """Companies read from a CSV file with a ``name`` column.

    Updates are applied to the rows in memory; ``save()`` writes them out.
    Rows are keyed by their ``id`` column, or by row number when there is none.
    """

    name = "csv"

    def __init__(self, path: Path):
        self.path = Path(path)
        self.fieldnames: list[str] = []
        self.rows: list[dict[str, Any]] = []
        self._by_id: dict[str, dict[str, Any]] = {}
        self._read()

    def _read(self):
        with open(self.path, "r", newline="", encoding="utf-8-sig") as f:
            reader = csv.DictReader(f)
            self.fieldnames = list(reader.fieldnames or [])
            self.rows = list(reader)

        for i, row in enumerate(self.rows, 1):
            self._by_id[self._row_id(row, i)] = row

        logger.debug(f"Read {len(self.rows)} rows from {self.path}")

    @staticmethod
    def _row_id(row: dict[str, Any], index: int) -> str:
        return (row.get("id") or "").strip() or str(index)

    def load_companies(self) -> list[CompanyInput]:
        companies = []
        for i, row in enumerate(self.rows, 1):
            name = (row.get("name") or "").strip()
            if not name:
                continue
            companies.append(CompanyInput(
                id=self._row_id(row, i),
                name=name,
                existing_fields=self.existing_fields(row),
            ))
        return companies

    def update_company(self, company_id: Any, fields: ExtractedFields) -> bool:
        row = self._by_id.get(str(company_id))
        if row is None:
            logger.warning(f"Company {company_id} not found in {self.path}")
            return False

        for field, value in fields.items():
            if field not in self.fieldnames:
                self.fieldnames.append(field)
            row[field] = value
        return True

    def save(self, path: Optional[Path] = None) -> Path:
        """Write all rows, including applied updates, to ``path``."""
        output_path = Path(path) if path else self.path
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=self.fieldnames, extrasaction="ignore")
            writer.writeheader()
            writer.writerows(self.rows)

        logger.info(f"Saved {len(self.rows)} companies to {output_path}")
        return output_path
