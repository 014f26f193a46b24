"""Gap-filling merge of extracted fields into an existing company record."""

import logging
from typing import Any, Optional

from company_enricher.models import (
    ENRICHABLE_FIELDS,
    EnrichmentRules,
    ExtractedFields,
    PageSummary,
)

logger = logging.getLogger(__name__)


class FieldMerger:
    """Combine extractor output with a stored record without overwriting it.

    A field is only ever filled when the stored value is missing, empty, or
    a recognizable placeholder. Infobox values beat text-derived values,
    which beat summary-derived values.
    """

    def __init__(self, rules: Optional[EnrichmentRules] = None):
        self.rules = rules or EnrichmentRules()

    def is_unset(self, field: str, value: Any) -> bool:
        """True if a stored value does not really hold data."""
        if value is None:
            return True

        if field == "year_founded":
            try:
                return int(value) == 0
            except (TypeError, ValueError):
                return not str(value).strip()

        if not isinstance(value, str):
            return False

        text = value.strip()
        if not text:
            return True

        lowered = text.lower()
        if any(marker in lowered for marker in self.rules.placeholder_markers):
            return True
        if field == "company_logo" and any(
            marker in lowered for marker in self.rules.logo_placeholder_markers
        ):
            return True
        if text in self.rules.generic_values.get(field, []):
            return True

        # Truncated executive names such as "the Under"
        if field == "ceo_name" and (len(text) < 5 or lowered.startswith("the ")):
            return True

        return False

    @staticmethod
    def from_summary(summary: Optional[PageSummary]) -> ExtractedFields:
        """Fields that come straight from the article summary."""
        if summary is None:
            return {}

        fields: ExtractedFields = {}
        if summary.description:
            fields["description"] = summary.description.strip()
        if summary.image_url:
            fields["company_logo"] = summary.image_url
        if summary.canonical_url:
            fields["wikipedia_url"] = summary.canonical_url
        return fields

    def merge(
        self,
        infobox_fields: ExtractedFields,
        text_fields: ExtractedFields,
        existing: dict[str, Any],
        summary_fields: Optional[ExtractedFields] = None,
    ) -> ExtractedFields:
        """Return only the fields worth writing to the stored record."""
        combined: ExtractedFields = {}
        for source in (summary_fields or {}, text_fields, infobox_fields):
            for field, value in source.items():
                if value is None or value == "":
                    continue
                combined[field] = value

        merged: ExtractedFields = {}
        for field, value in combined.items():
            if field not in ENRICHABLE_FIELDS:
                continue
            current = existing.get(field)
            if not self.is_unset(field, current):
                logger.debug(f"   Skipping {field} (already set)")
                continue
            if current is not None and self._same_value(current, value):
                # Generic values written by an earlier run stay as they are
                logger.debug(f"   Skipping {field} (unchanged)")
                continue
            merged[field] = value.strip() if isinstance(value, str) else value

        # A title only belongs to the executive it was extracted with
        if "ceo_title" in merged and "ceo_name" not in merged:
            if not self._same_value(existing.get("ceo_name"), combined.get("ceo_name")):
                logger.debug("   Skipping ceo_title (belongs to a different executive)")
                merged.pop("ceo_title")

        return merged

    @staticmethod
    def _same_value(a: Any, b: Any) -> bool:
        if a is None or b is None:
            return False
        return str(a).strip().lower() == str(b).strip().lower()
