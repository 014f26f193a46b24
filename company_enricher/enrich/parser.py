"""Rule-based field extraction from article prose."""

import logging
import re
from datetime import datetime
from typing import Any, Optional

from company_enricher.models import EnrichmentRules, ExtractedFields
from .infobox import clean_name, normalize_website
from .merger import FieldMerger

logger = logging.getLogger(__name__)

# Capitalized word sequence; applied case-sensitively after a case-insensitive anchor
NAME = r"([A-Z][a-z]+(?:[ \t]+(?:[A-Z]\.|[A-Z][a-zA-Z'-]*[a-z]))*)"
URL_TOKEN = r"([^\s<>,\"'\]]+)"
PLACE = r"([^,.]+(?:,\s*[^,.]+)*)"


class TextFieldExtractor:
    """Fill remaining gaps from the description and article extract.

    Each field has an ordered pattern list; the first pattern that yields
    a valid value wins.
    """

    WEBSITE_PATTERNS = [
        re.compile(r"website[:\s=]+" + URL_TOKEN, re.I),
        re.compile(r"official website[:\s=]+" + URL_TOKEN, re.I),
        re.compile(r"homepage[:\s=]+" + URL_TOKEN, re.I),
        re.compile(r"portal[:\s=]+" + URL_TOKEN, re.I),
        re.compile(r"(https?://(?:www\.)?[^\s<>,\"']*\.(?:gov|com|org|edu|net)[^\s<>,\"']*)", re.I),
        re.compile(r"\|\s*website\s*=\s*([^\s<>|\"']+)", re.I),
        re.compile(r"\|\s*url\s*=\s*([^\s<>|\"']+)", re.I),
    ]

    YEAR_PATTERNS = [
        re.compile(r"\bfounded\b(?:\s+(?:in|on))?[^.]{0,25}?\b(\d{4})\b", re.I),
        re.compile(r"\bestablished\b(?:\s+(?:in|on))?[^.]{0,25}?\b(\d{4})\b", re.I),
        re.compile(r"\bformed\b(?:\s+(?:in|on))?[^.]{0,25}?\b(\d{4})\b", re.I),
        re.compile(r"\bsince[:\s]+(\d{4})\b", re.I),
        re.compile(r"\bcreated\b(?:\s+(?:in|on))?[^.]{0,25}?\b(\d{4})\b", re.I),
        re.compile(r"\|\s*(?:formed|founded|established)\s*=\s*(\d{4})", re.I),
    ]

    HEADQUARTERS_PATTERNS = [
        re.compile(r"headquartered in[:\s]+" + PLACE, re.I),
        re.compile(r"headquarters (?:is |are )?(?:in|at)[:\s]+" + PLACE, re.I),
        re.compile(r"based in[:\s]+" + PLACE, re.I),
        re.compile(r"located in[:\s]+" + PLACE, re.I),
        re.compile(r"\|\s*headquarters\s*=\s*([^|]+)", re.I),
    ]

    # (pattern, title); the anchor is case-insensitive, the name is not
    EXECUTIVE_PATTERNS = [
        (re.compile(r"(?i:agency executive)[:\s,]+" + NAME), "Under Secretary"),
        (re.compile(r"(?i:under secretary)[:\s,]+" + NAME), "Under Secretary"),
        (re.compile(r"(?i:\bdirector)[:\s,]+" + NAME), "Director"),
        (re.compile(r"(?i:\badministrator)[:\s,]+" + NAME), "Administrator"),
        (re.compile(r"(?i:\bsecretary)[:\s,]+" + NAME), "Secretary"),
        (re.compile(r"(?i:\bled by)[:\s]+" + NAME), "CEO"),
        (re.compile(r"(?i:\bheaded by)[:\s]+" + NAME), "CEO"),
        (re.compile(r"\|\s*(?i:agency_executive)\s*=\s*" + NAME), "Under Secretary"),
        (re.compile(r"\|\s*(?i:director)\s*=\s*" + NAME), "Director"),
    ]

    MISSION_KEYWORDS = [
        "mission", "purpose", "goal", "objective", "aim", "vision", "responsible for",
    ]

    def __init__(self, rules: Optional[EnrichmentRules] = None):
        self.rules = rules or EnrichmentRules()
        self.merger = FieldMerger(self.rules)

    def extract(
        self,
        text: str,
        description: str = "",
        company_name: str = "",
        core_name: str = "",
        resolved: Optional[ExtractedFields] = None,
        existing: Optional[dict[str, Any]] = None,
    ) -> ExtractedFields:
        """Extract fields that neither the infobox nor the stored record provide.

        Args:
            text: Description and article extract, concatenated
            description: Summary description, used for mission sentences
            company_name: Name used for known-website lookups
            core_name: Suffix-stripped name, also used for lookups
            resolved: Fields already taken from the infobox
            existing: The stored company record
        """
        resolved = resolved or {}
        existing = existing or {}
        result: ExtractedFields = {}

        def wanted(field: str) -> bool:
            return field not in resolved and self.merger.is_unset(field, existing.get(field))

        if wanted("website"):
            website = self.rules.known_website(company_name, core_name) or self.extract_website(text)
            if website:
                result["website"] = website

        if wanted("year_founded"):
            year = self.extract_year(text)
            if year:
                result["year_founded"] = year

        if wanted("headquarters"):
            headquarters = self.extract_headquarters(text)
            if headquarters:
                result["headquarters"] = headquarters

        if wanted("ceo_name"):
            executive = self.extract_executive(text)
            if executive:
                result["ceo_name"], result["ceo_title"] = executive

        if wanted("mission"):
            mission = self.extract_mission(description or text)
            if mission:
                result["mission"] = mission

        if result:
            logger.debug(f"   Text extraction found: {', '.join(result)}")
        return result

    def extract_website(self, text: str) -> Optional[str]:
        for pattern in self.WEBSITE_PATTERNS:
            match = pattern.search(text)
            if not match:
                continue

            candidate = match.group(1).rstrip(".,;)]").lstrip("[")
            if not re.match(r"https?://", candidate, re.I) and not re.match(
                r"^(?:www\.)?[a-zA-Z0-9-]+\.[a-zA-Z]{2,}", candidate
            ):
                continue

            url = normalize_website(candidate)
            if url:
                return url
        return None

    def extract_year(self, text: str) -> Optional[int]:
        current_year = datetime.now().year
        for pattern in self.YEAR_PATTERNS:
            match = pattern.search(text)
            if match:
                year = int(match.group(1))
                if 1600 <= year <= current_year:
                    return year
        return None

    def extract_headquarters(self, text: str) -> Optional[str]:
        for pattern in self.HEADQUARTERS_PATTERNS:
            match = pattern.search(text)
            if not match:
                continue

            headquarters = match.group(1).strip()
            headquarters = re.sub(r"^the\s+", "", headquarters, flags=re.I)
            headquarters = re.sub(r"[<>\[\]]", "", headquarters).strip()
            if 5 < len(headquarters) < 100:
                return headquarters
        return None

    def extract_executive(self, text: str) -> Optional[tuple[str, str]]:
        for pattern, title in self.EXECUTIVE_PATTERNS:
            match = pattern.search(text)
            if not match:
                continue

            name = clean_name(match.group(1))
            if len(name) > 4 and " " in name:
                return name, title
        return None

    def extract_mission(self, description: str) -> Optional[str]:
        sentences = re.split(r"(?<=[.!?])\s+", description.strip())
        for sentence in sentences:
            lowered = sentence.lower()
            if not any(keyword in lowered for keyword in self.MISSION_KEYWORDS):
                continue

            mission = sentence if sentence.endswith(".") else sentence + "."
            mission = re.sub(r"^(The|Its|Their)\s+", "", mission, flags=re.I).strip()
            if 10 < len(mission) < 300:
                return mission
        return None
