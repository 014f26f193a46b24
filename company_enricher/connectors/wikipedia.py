"""Wikipedia search connector."""

import asyncio
import logging
from typing import Optional

from company_enricher.config import settings
from company_enricher.crawler import HttpRetryClient
from company_enricher.enrich.normalizer import NameNormalizer
from company_enricher.models import NormalizedName, ScoredCandidate, SearchCandidate
from company_enricher.score import MatchScorer

logger = logging.getLogger(__name__)


class CandidateSearcher:
    """Resolve a company name to a Wikipedia article title."""

    name = "wikipedia"

    # Appended to the literal name, in priority order
    DESCRIPTOR_TEMPLATES = [
        "{name} company",
        "{core} company",
        "{name} corporation",
        "{core}",
        "{name} organization",
        "{name} association",
    ]

    def __init__(
        self,
        client: HttpRetryClient,
        scorer: Optional[MatchScorer] = None,
        normalizer: Optional[NameNormalizer] = None,
        search_api_url: Optional[str] = None,
        results_per_query: Optional[int] = None,
        pause_ms: Optional[int] = None,
        strategy: Optional[str] = None,
    ):
        self.client = client
        self.scorer = scorer or MatchScorer()
        self.normalizer = normalizer or NameNormalizer()
        self.search_api_url = search_api_url or settings.search_api_url
        self.results_per_query = results_per_query or settings.search_limit
        self.pause_ms = settings.search_pause_ms if pause_ms is None else pause_ms
        self.strategy = strategy or settings.search_strategy

    def generate_queries(self, normalized: NormalizedName) -> list[str]:
        """Build search terms, most specific first, without duplicates."""
        name = normalized.original
        core = normalized.core_name
        queries = [f'"{name}"', f'"{core}"']
        queries.extend(t.format(name=name, core=core) for t in self.DESCRIPTOR_TEMPLATES)
        return [q for q in dict.fromkeys(queries) if q.strip('" ')]

    async def search(self, company_name: str) -> Optional[ScoredCandidate]:
        """Return the confident best candidate for ``company_name``, or None."""
        normalized = self.normalizer.normalize(company_name)
        if not normalized.original:
            return None

        if self.strategy == "best":
            return await self._search_best(normalized)
        return await self._search_first(normalized)

    async def _search_first(self, normalized: NormalizedName) -> Optional[ScoredCandidate]:
        """Stop at the first search term that yields a confident match."""
        for query in self.generate_queries(normalized):
            candidates = await self.query(query)
            if candidates:
                match = self.scorer.find_best_match(
                    candidates, normalized.original, normalized
                )
                if match:
                    logger.info(
                        f"   Confident match for {query}: '{match.title}' ({match.confidence.value})"
                    )
                    return match

            await self._pause()

        logger.info(f"   No confident Wikipedia match for '{normalized.original}'")
        return None

    async def _search_best(self, normalized: NormalizedName) -> Optional[ScoredCandidate]:
        """Pool every term's candidates and score them together."""
        pooled: dict[str, SearchCandidate] = {}
        for query in self.generate_queries(normalized):
            for candidate in await self.query(query):
                pooled.setdefault(candidate.title, candidate)
            await self._pause()

        return self.scorer.find_best_match(
            list(pooled.values()), normalized.original, normalized
        )

    async def query(self, term: str) -> list[SearchCandidate]:
        """Run one search query."""
        params = {
            "action": "query",
            "format": "json",
            "list": "search",
            "srsearch": term,
            "srlimit": str(self.results_per_query),
        }
        data = await self.client.get_json(self.search_api_url, params=params)
        if not data:
            return []

        results = (data.get("query") or {}).get("search") or []
        candidates = []
        for result in results:
            title = result.get("title")
            if not title:
                continue
            candidates.append(SearchCandidate(
                title=title,
                page_id=result.get("pageid") or 0,
                snippet=result.get("snippet") or "",
            ))

        logger.debug(f"   Search {term}: {len(candidates)} results")
        return candidates

    async def _pause(self):
        if self.pause_ms > 0:
            await asyncio.sleep(self.pause_ms / 1000.0)
