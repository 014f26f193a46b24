"""Data models for the company enrichment pipeline."""

from .company import (
    ENRICHABLE_FIELDS,
    ArticleData,
    CompanyInput,
    Confidence,
    EnrichmentReport,
    EnrichmentResult,
    ExtractedFields,
    NormalizedName,
    PageSummary,
    ScoredCandidate,
    SearchCandidate,
)
from .rules import EnrichmentRules, ScoringWeights, load_rules

__all__ = [
    "ENRICHABLE_FIELDS",
    "ArticleData",
    "CompanyInput",
    "Confidence",
    "EnrichmentReport",
    "EnrichmentResult",
    "ExtractedFields",
    "NormalizedName",
    "PageSummary",
    "ScoredCandidate",
    "SearchCandidate",
    "EnrichmentRules",
    "ScoringWeights",
    "load_rules",
]
