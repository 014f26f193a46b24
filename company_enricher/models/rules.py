"""Matching and extraction tables, loadable from JSON."""

import json
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field


class ScoringWeights(BaseModel):
    """Points awarded per match signal, and the confidence cutoffs."""

    name_in_title: float = 50
    business_keyword: float = 15
    exact_title: float = 100
    title_variation: float = 90
    title_starts: float = 70
    company_suffix: float = 80
    industry_keyword: float = 2

    reject_off_topic: float = -200
    reject_no_relevance: float = -100

    accept_threshold: float = Field(default=40, description="Scores at or below are never matches")
    medium_threshold: float = 60
    high_threshold: float = 90


class EnrichmentRules(BaseModel):
    """All data tables used to resolve and extract company facts."""

    # Company key (lower-cased name or core name) -> preferred exact titles
    disambiguation: dict[str, list[str]] = Field(default_factory=lambda: {
        "adobe": ["Adobe Inc.", "Adobe Systems"],
        "amazon": ["Amazon (company)", "Amazon.com"],
        "amazon web services": ["Amazon Web Services"],
        "aws": ["Amazon Web Services"],
        "apple": ["Apple Inc."],
        "microsoft": ["Microsoft"],
        "google": ["Google", "Alphabet Inc."],
        "meta": ["Meta Platforms"],
        "facebook": ["Meta Platforms", "Facebook"],
        "oracle": ["Oracle Corporation"],
        "ibm": ["IBM"],
        "cisco": ["Cisco"],
        "intel": ["Intel"],
        "nvidia": ["Nvidia"],
        "capgemini": ["Capgemini"],
        "tetra tech": ["Tetra Tech"],
    })

    # Company key -> canonical website, for names too short to pattern-match
    known_websites: dict[str, str] = Field(default_factory=lambda: {
        "amazon web services": "https://aws.amazon.com",
        "aws": "https://aws.amazon.com",
        "tetra tech": "https://www.tetratech.com",
        "capgemini": "https://www.capgemini.com",
        "evidence action": "https://www.evidenceaction.org",
        "customs and border protection": "https://www.cbp.gov",
        "cbp": "https://www.cbp.gov",
        "bureau of industry and security": "https://www.bis.doc.gov",
        "bis": "https://www.bis.doc.gov",
    })

    # Infobox handler -> row labels (lower case) that feed it
    label_synonyms: dict[str, list[str]] = Field(default_factory=lambda: {
        "website": ["website", "web site", "url"],
        "year_founded": ["founded", "formed", "established", "creation"],
        "headquarters": ["headquarters", "hq", "location"],
        "industry": ["industry", "industries"],
        "type": ["company type", "type"],
        "executive": [
            "key people", "agency executive", "agency executives", "ceo",
            "chief executive officer", "director", "administrator",
            "secretary", "under secretary",
        ],
        "revenue": ["revenue", "annual revenue"],
        "employees": ["number of employees", "employees", "workforce"],
        "budget": ["annual budget", "budget"],
    })

    # Off-topic terms that disqualify a candidate outright
    reject_terms: list[str] = Field(default_factory=lambda: [
        "nudity", "sexuality", "pornography", "adult content",
        "protein", "gene", "species", "algorithm", "theorem", "equation",
        "mountain", "river", "city", "county", "movie", "film", "book",
        "song", "album", "band", "game", "sport", "tournament", "league",
        "character", "fictional", "mythology", "legend", "plant", "animal",
        "chemical", "element", "compound", "disease", "virus", "bacteria",
        "weapon", "drug", "medicine",
    ])

    # Snippet phrases that signal an organization article
    business_keywords: list[str] = Field(default_factory=lambda: [
        "is a company", "is a corporation", "is an american company",
        "multinational corporation", "technology company", "consulting firm",
        "software company", "founded", "headquarters", "ceo", "publicly traded",
        "fortune 500", "nasdaq", "nyse", "provides services",
        "is an organization", "professional organization", "medical organization",
        "educational organization", "non-profit", "nonprofit",
    ])

    industry_keywords: list[str] = Field(default_factory=lambda: [
        "technology", "consulting", "software", "contractor", "services",
        "solutions", "systems", "engineering", "defense", "government",
        "medical", "healthcare", "education", "research", "professional",
    ])

    # "<name> (company)" style disambiguated titles
    title_qualifiers: list[str] = Field(default_factory=lambda: [
        "(company)", "(organization)", "(association)",
    ])

    # "<name> Inc." style titles
    company_suffixes: list[str] = Field(default_factory=lambda: [
        "inc.", "inc", "llc", "corp", "corporation", "ltd", "limited",
        "systems", "technologies", "solutions", "consulting", "services",
        "group", "association", "college", "organization", "society",
    ])

    # Substrings marking a stored value as not really set
    placeholder_markers: list[str] = Field(default_factory=lambda: ["example.com"])
    logo_placeholder_markers: list[str] = Field(default_factory=lambda: ["clearbit.com"])
    generic_values: dict[str, list[str]] = Field(default_factory=lambda: {
        "headquarters": ["Washington DC", "Washington, District of Columbia"],
    })

    weights: ScoringWeights = Field(default_factory=ScoringWeights)

    def preferred_titles(self, *keys: str) -> list[str]:
        """Return the disambiguation titles for the first key that has any."""
        for key in keys:
            titles = self.disambiguation.get(key.lower().strip())
            if titles:
                return titles
        return []

    def known_website(self, *keys: str) -> Optional[str]:
        for key in keys:
            website = self.known_websites.get(key.lower().strip())
            if website:
                return website
        return None

    def label_map(self) -> dict[str, str]:
        """Invert label_synonyms into label -> handler."""
        mapping = {}
        for handler, labels in self.label_synonyms.items():
            for label in labels:
                mapping.setdefault(label.lower().strip(), handler)
        return mapping


def load_rules(path: Optional[Path] = None) -> EnrichmentRules:
    """Load rules from a JSON file, merging it over the built-in defaults.

    Mapping-valued entries (disambiguation, known_websites, label_synonyms,
    generic_values, weights) are merged key by key; list-valued entries are
    replaced wholesale.
    """
    defaults = EnrichmentRules()
    if path is None:
        return defaults

    with open(path, "r", encoding="utf-8") as f:
        overrides = json.load(f)

    merged = defaults.model_dump()
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = {**merged[key], **value}
        else:
            merged[key] = value

    return EnrichmentRules(**merged)
