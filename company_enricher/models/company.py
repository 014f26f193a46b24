"""Company, candidate and result models."""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


# Field names the pipeline knows how to fill
ENRICHABLE_FIELDS = (
    "description",
    "company_logo",
    "wikipedia_url",
    "website",
    "year_founded",
    "headquarters",
    "industry",
    "type",
    "ceo_name",
    "ceo_title",
    "revenue",
    "employees",
    "mission",
)

# A map of enrichable field name -> value
ExtractedFields = dict[str, Any]


class Confidence(str, Enum):
    """Confidence tier assigned to a scored candidate."""

    HIGH = "high"
    HIGH_DISAMBIGUATED = "high-disambiguated"
    MEDIUM = "medium"
    LOW = "low"


class CompanyInput(BaseModel):
    """A company record handed to the pipeline by a store."""

    id: Any = Field(description="Store-specific identifier")
    name: str = Field(description="Company name as stored")
    existing_fields: dict[str, Any] = Field(
        default_factory=dict,
        description="Whatever the store already holds for this company",
    )

    model_config = {"frozen": True}


class NormalizedName(BaseModel):
    """A company name with its suffix-stripped core name."""

    original: str
    core_name: str
    removed_suffixes: list[str] = Field(default_factory=list)


class SearchCandidate(BaseModel):
    """A raw search hit."""

    title: str
    page_id: int = 0
    snippet: str = ""


class ScoredCandidate(SearchCandidate):
    """A search hit with its match score."""

    score: float = 0.0
    reasons: list[str] = Field(default_factory=list)
    confidence: Confidence = Confidence.LOW


class PageSummary(BaseModel):
    """Structured summary of an article."""

    title: str = ""
    description: Optional[str] = Field(default=None, description="Plain-text extract")
    thumbnail_url: Optional[str] = None
    original_image_url: Optional[str] = None
    canonical_url: Optional[str] = None

    @property
    def image_url(self) -> Optional[str]:
        return self.original_image_url or self.thumbnail_url


class ArticleData(BaseModel):
    """Everything fetched for a resolved article."""

    summary: PageSummary
    raw_html: Optional[str] = Field(
        default=None,
        description="Rendered article markup; None when the content fetch failed",
    )
    extract: str = Field(default="", description="Plain-text lead section of the article")


class EnrichmentResult(BaseModel):
    """Terminal outcome of enriching one company."""

    company_id: Any = None
    company_name: str = ""
    found: bool = False
    fields: ExtractedFields = Field(default_factory=dict)
    reason: Optional[str] = Field(default=None, description="Why nothing was found (not an error)")
    error: Optional[str] = Field(default=None, description="Failure message, if any")
    match: Optional[ScoredCandidate] = None
    wikipedia_url: Optional[str] = None
    database_updated: Optional[bool] = None

    @property
    def fields_added(self) -> list[str]:
        return list(self.fields.keys())


class EnrichmentReport(BaseModel):
    """Summary counts for a batch run."""

    total: int = 0
    found: int = 0
    not_found: int = 0
    errors: int = 0
    updated: int = 0
    results: list[EnrichmentResult] = Field(default_factory=list)

    @classmethod
    def from_results(cls, results: list[EnrichmentResult]) -> "EnrichmentReport":
        return cls(
            total=len(results),
            found=sum(1 for r in results if r.found),
            not_found=sum(1 for r in results if not r.found),
            errors=sum(1 for r in results if r.error),
            updated=sum(1 for r in results if r.database_updated),
            results=results,
        )
