"""Structured field extraction from an article's infobox table."""

import logging
import re
from datetime import datetime
from typing import Optional
from urllib.parse import urlparse

from bs4 import BeautifulSoup, Tag

from company_enricher.models import EnrichmentRules, ExtractedFields

logger = logging.getLogger(__name__)

# Executive names: capitalized words, allowing initials and Mc/Mac-style names
NAME_PATTERN = re.compile(r"[A-Z][a-z]+(?:[ \t]+(?:[A-Z]\.|[A-Z][a-zA-Z'-]*[a-z]))*")

# Encyclopedia-owned hosts, never a company website
OWN_DOMAINS = ("wikipedia.org", "wikimedia.org", "wikidata.org", "wiktionary.org")


def normalize_website(url: str) -> Optional[str]:
    """Turn protocol-relative or bare-domain links into https URLs."""
    url = (url or "").strip().rstrip(".,;)]")
    if not url:
        return None

    if url.startswith("//"):
        url = "https:" + url
    elif not re.match(r"https?://", url, re.I):
        url = "https://" + url

    host = urlparse(url).netloc.lower()
    if "." not in host:
        return None
    if any(host == d or host.endswith("." + d) for d in OWN_DOMAINS):
        return None

    return url


def clean_name(name: str) -> str:
    name = name.strip()
    # Keep a trailing initial ("John D."), drop sentence punctuation otherwise
    if name.endswith(".") and not re.search(r"\b[A-Z]\.$", name):
        name = name[:-1]
    return name


def infer_executive_title(label: str, context: str) -> str:
    """Infer the executive's title from the row label and value text."""
    label = label.lower()
    context = context.lower()
    text = f"{label} {context}"

    if "agency executive" in label or "under secretary" in text:
        return "Under Secretary"
    if "director" in text:
        return "Director"
    if "administrator" in text:
        return "Administrator"
    if "secretary" in text:
        return "Secretary"
    if "chairman" in context and "ceo" in context:
        return "Chairman & CEO"
    if "chairman" in context:
        return "Chairman"
    return "CEO"


def parse_year(text: str) -> Optional[int]:
    """First four-digit year in ``text`` within [1600, current year]."""
    current_year = datetime.now().year
    for match in re.finditer(r"\b(\d{4})\b", text):
        year = int(match.group(1))
        if 1600 <= year <= current_year:
            return year
    return None


class InfoboxParser:
    """Extract a flat field map from the infobox of rendered article markup.

    Missing or malformed infoboxes yield an empty map; this parser never
    raises on bad markup.
    """

    INFOBOX_CLASS = "infobox"

    # Uploaded media assets only, not interface icons
    UPLOAD_IMAGE_PATTERN = re.compile(r"upload\.wikimedia\.org[^\s\"']*\.(?:png|jpe?g|svg)", re.I)
    URL_PATTERN = re.compile(r"https?://[^\s<>'\"]+", re.I)
    NUMBER_PATTERN = re.compile(r"\d[\d,]*")
    FOOTNOTE_PATTERN = re.compile(r"\[\s*(?:\d+|[a-z]|note \d+|citation needed)\s*\]", re.I)

    # Company type category -> keywords, checked in order
    TYPE_CATEGORIES = [
        ("Company - Public", ["public"]),
        ("Company - Private", ["private"]),
        ("Government Agency", ["government", "agency"]),
    ]

    EMPTY_VALUES = {"-", "–", "—"}

    def __init__(self, rules: Optional[EnrichmentRules] = None):
        self.rules = rules or EnrichmentRules()
        self.label_map = self.rules.label_map()

    def parse(self, html: Optional[str]) -> ExtractedFields:
        """Parse rendered markup into an enrichable field map."""
        if not html:
            return {}

        try:
            soup = BeautifulSoup(html, "lxml")
            table = soup.find("table", class_=self.INFOBOX_CLASS)
            if table is None:
                logger.debug("   No infobox found")
                return {}
            return self.parse_table(table)

        except Exception as e:
            logger.warning(f"Failed to parse infobox: {e}")
            return {}

    def parse_table(self, table: Tag) -> ExtractedFields:
        fields: ExtractedFields = {}
        budget = None

        logo = self._extract_logo(table)
        if logo:
            fields["company_logo"] = logo

        website = self._extract_website(table)
        if website:
            fields["website"] = website

        for label, value in self._iter_rows(table):
            handler = self.label_map.get(label)
            if handler is None:
                continue

            logger.debug(f"   Infobox: {label} = {value}")

            if handler == "budget":
                budget = budget or value
                continue

            handle = getattr(self, f"_handle_{handler}", None)
            if handle is None:
                logger.debug(f"   No handler for infobox field '{handler}'")
                continue
            handle(label, value, fields)

        if budget and "revenue" not in fields:
            fields["revenue"] = budget

        logger.debug(f"   Parsed {len(fields)} fields from infobox")
        return fields

    def _iter_rows(self, table: Tag):
        """Yield (label, value) pairs for label/value rows with content."""
        for row in table.find_all("tr"):
            header = row.find("th")
            data = row.find("td")
            if header is None or data is None:
                continue

            label = self.clean_text(header.get_text(" ")).lower()
            value = self.clean_text(data.get_text(" "))
            if not label or not value or value in self.EMPTY_VALUES:
                continue

            yield label, value

    def clean_text(self, text: str) -> str:
        text = self.FOOTNOTE_PATTERN.sub("", text)
        text = re.sub(r"\s+", " ", text)
        text = re.sub(r"\(\s+", "(", text)
        text = re.sub(r"\s+([),.;:])", r"\1", text)
        return text.strip()

    def _extract_logo(self, table: Tag) -> Optional[str]:
        for container in table.select(".infobox-image"):
            for img in container.find_all("img"):
                url = self._upload_url(img)
                if url:
                    return url

        for img in table.find_all("img"):
            url = self._upload_url(img)
            if url:
                return url

        return None

    def _upload_url(self, img: Tag) -> Optional[str]:
        src = img.get("src") or ""
        if not self.UPLOAD_IMAGE_PATTERN.search(src):
            return None
        return "https:" + src if src.startswith("//") else src

    def _extract_website(self, table: Tag) -> Optional[str]:
        for container in table.select(".url"):
            link = container if container.name == "a" else container.find("a", href=True)
            if link is None or not link.get("href"):
                continue
            url = normalize_website(link["href"])
            if url:
                return url
        return None

    # Row handlers: (label, value, fields); the first row feeding a field wins

    def _handle_website(self, label: str, value: str, fields: ExtractedFields):
        if "website" in fields:
            return
        match = self.URL_PATTERN.search(value)
        if match:
            url = normalize_website(match.group(0))
        elif "." in value and " " not in value:
            url = normalize_website(value)
        else:
            url = None
        if url:
            fields["website"] = url

    def _handle_year_founded(self, label: str, value: str, fields: ExtractedFields):
        if "year_founded" in fields:
            return
        year = parse_year(value)
        if year:
            fields["year_founded"] = year

    def _handle_headquarters(self, label: str, value: str, fields: ExtractedFields):
        fields.setdefault("headquarters", value)

    def _handle_industry(self, label: str, value: str, fields: ExtractedFields):
        fields.setdefault("industry", value)

    def _handle_type(self, label: str, value: str, fields: ExtractedFields):
        if "type" in fields:
            return
        lowered = value.lower()
        for category, keywords in self.TYPE_CATEGORIES:
            if any(keyword in lowered for keyword in keywords):
                fields["type"] = category
                return

    def _handle_executive(self, label: str, value: str, fields: ExtractedFields):
        if "ceo_name" in fields:
            return
        match = NAME_PATTERN.search(value)
        if not match:
            return

        # Title keywords usually sit in a parenthetical right after the name
        context = value
        close = value.find(")", match.end())
        if value[match.end():].lstrip().startswith("(") and close != -1:
            context = value[match.start():close + 1]

        fields["ceo_name"] = clean_name(match.group(0))
        fields["ceo_title"] = infer_executive_title(label, context)

    def _handle_revenue(self, label: str, value: str, fields: ExtractedFields):
        fields.setdefault("revenue", value)

    def _handle_employees(self, label: str, value: str, fields: ExtractedFields):
        if "employees" in fields:
            return
        match = self.NUMBER_PATTERN.search(value)
        if match:
            fields["employees"] = match.group(0).rstrip(",")
