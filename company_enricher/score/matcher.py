"""Candidate scoring for company-to-article resolution."""

import html
import logging
import re
from typing import Optional

from company_enricher.models import (
    Confidence,
    EnrichmentRules,
    NormalizedName,
    ScoredCandidate,
    SearchCandidate,
)

logger = logging.getLogger(__name__)

TAG_PATTERN = re.compile(r"<[^>]+>")


class MatchScorer:
    """Pick the search candidate that most plausibly is the company's article.

    Resolution happens in two steps. A disambiguation table first maps
    well-known ambiguous names straight to their article titles. Every other
    candidate is scored on its own from title and snippet signals, and the
    best one is kept only if it clears the medium-confidence bar.

    Reject terms match whole words with an optional plural "s", so a
    "(film)" or "bands" hit rejects the candidate while "Filmmaking" or
    "Broadband" does not.
    """

    def __init__(self, rules: Optional[EnrichmentRules] = None):
        self.rules = rules or EnrichmentRules()
        self.weights = self.rules.weights
        self._reject_patterns = [
            re.compile(r"\b" + re.escape(term.lower()) + r"s?\b")
            for term in self.rules.reject_terms
        ]

    def find_best_match(
        self,
        candidates: list[SearchCandidate],
        company_name: str,
        normalized: NormalizedName,
    ) -> Optional[ScoredCandidate]:
        """Return the best confident candidate, or None."""
        if not candidates:
            return None

        disambiguated = self._disambiguate(candidates, company_name, normalized)
        if disambiguated:
            logger.info(f"   Disambiguated match: '{disambiguated.title}'")
            return disambiguated

        scored = [self.score(c, company_name, normalized) for c in candidates]
        for candidate in scored:
            logger.debug(
                f"   Candidate '{candidate.title}' score={candidate.score} "
                f"reasons={', '.join(candidate.reasons)}"
            )

        best = self.select(scored)
        if best:
            logger.info(
                f"   Best match: '{best.title}' (score: {best.score}, "
                f"reasons: {', '.join(best.reasons)})"
            )
        return best

    def score(
        self,
        candidate: SearchCandidate,
        company_name: str,
        normalized: NormalizedName,
    ) -> ScoredCandidate:
        """Score one candidate independently of the others."""
        w = self.weights
        company = company_name.lower().strip()
        core_name = normalized.core_name.lower().strip()
        names = [n for n in dict.fromkeys([company, core_name]) if n]
        title = candidate.title.lower().strip()
        snippet = self.clean_snippet(candidate.snippet).lower()

        if self._has_reject_term(title) or self._has_reject_term(snippet):
            return self._scored(candidate, w.reject_off_topic, ["rejected-off-topic"])

        name_in_title = any(name in title for name in names)
        business_matches = sum(1 for kw in self.rules.business_keywords if kw in snippet)

        if not name_in_title and not business_matches:
            return self._scored(candidate, w.reject_no_relevance, ["rejected-no-relevance"])

        score = 0.0
        reasons = []

        if name_in_title:
            score += w.name_in_title
            reasons.append("name-in-title")

        if business_matches:
            score += business_matches * w.business_keyword
            reasons.append(f"business-context:{business_matches}")

        if title in names:
            score += w.exact_title
            reasons.append("exact-title")

        variations = {
            f"{name} {qualifier}" for name in names for qualifier in self.rules.title_qualifiers
        }
        if title in variations:
            score += w.title_variation
            reasons.append("title-variation")

        if any(title.startswith(name + " ") for name in names):
            score += w.title_starts
            reasons.append("title-starts")

        suffixed = {f"{name} {suffix}" for name in names for suffix in self.rules.company_suffixes}
        if title in suffixed:
            score += w.company_suffix
            reasons.append("company-suffix")

        industry_matches = sum(
            1 for term in self.rules.industry_keywords if term in title or term in snippet
        )
        if industry_matches:
            score += industry_matches * w.industry_keyword
            reasons.append(f"industry:{industry_matches}")

        return self._scored(candidate, score, reasons)

    def select(self, scored: list[ScoredCandidate]) -> Optional[ScoredCandidate]:
        """Pick the highest viable score; earlier candidates win ties."""
        viable = [c for c in scored if c.score > self.weights.accept_threshold]
        if not viable:
            return None

        # sorted() is stable, so input order breaks ties
        best = sorted(viable, key=lambda c: c.score, reverse=True)[0]
        confidence = self.classify(best.score)
        if confidence == Confidence.LOW:
            logger.debug(f"   Rejected low-confidence best match '{best.title}' ({best.score})")
            return None

        return best.model_copy(update={"confidence": confidence})

    def classify(self, score: float) -> Confidence:
        if score >= self.weights.high_threshold:
            return Confidence.HIGH
        if score >= self.weights.medium_threshold:
            return Confidence.MEDIUM
        return Confidence.LOW

    def _disambiguate(
        self,
        candidates: list[SearchCandidate],
        company_name: str,
        normalized: NormalizedName,
    ) -> Optional[ScoredCandidate]:
        preferred = self.rules.preferred_titles(company_name, normalized.core_name)
        for preferred_title in preferred:
            for candidate in candidates:
                if candidate.title.lower() == preferred_title.lower():
                    return ScoredCandidate(
                        **self._cleaned(candidate),
                        score=self.weights.high_threshold,
                        reasons=["disambiguation-table"],
                        confidence=Confidence.HIGH_DISAMBIGUATED,
                    )
        return None

    def _has_reject_term(self, text: str) -> bool:
        return any(pattern.search(text) for pattern in self._reject_patterns)

    @staticmethod
    def clean_snippet(snippet: str) -> str:
        """Drop search highlight markup from a snippet."""
        return html.unescape(TAG_PATTERN.sub("", snippet or ""))

    @classmethod
    def _cleaned(cls, candidate: SearchCandidate) -> dict:
        return {**candidate.model_dump(), "snippet": cls.clean_snippet(candidate.snippet)}

    @classmethod
    def _scored(cls, candidate: SearchCandidate, score: float, reasons: list[str]) -> ScoredCandidate:
        return ScoredCandidate(**cls._cleaned(candidate), score=score, reasons=reasons)
