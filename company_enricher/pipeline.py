"""Batch orchestration: search, fetch, extract and merge for each company."""

import asyncio
import logging
from typing import Any, Optional

from company_enricher.config import settings
from company_enricher.connectors.base import CompanyStore
from company_enricher.connectors.wikipedia import CandidateSearcher
from company_enricher.crawler import HttpRetryClient, PageFetcher
from company_enricher.enrich.infobox import InfoboxParser
from company_enricher.enrich.merger import FieldMerger
from company_enricher.enrich.normalizer import NameNormalizer
from company_enricher.enrich.parser import TextFieldExtractor
from company_enricher.models import (
    ArticleData,
    CompanyInput,
    EnrichmentReport,
    EnrichmentResult,
    EnrichmentRules,
    ExtractedFields,
    load_rules,
)
from company_enricher.score import MatchScorer

logger = logging.getLogger(__name__)

NO_MATCH_REASON = "No Wikipedia page found"


class EnrichmentOrchestrator:
    """Drive companies through search, fetch, extraction and merge.

    A failure while enriching one company is recorded on that company's
    result and never stops the batch.
    """

    def __init__(
        self,
        client: Optional[HttpRetryClient] = None,
        rules: Optional[EnrichmentRules] = None,
        request_delay_ms: Optional[int] = None,
        concurrency: Optional[int] = None,
        search_strategy: Optional[str] = None,
    ):
        self.rules = rules or load_rules(settings.rules_path)
        self.client = client or HttpRetryClient()
        self.request_delay_ms = (
            settings.request_delay_ms if request_delay_ms is None else request_delay_ms
        )
        self.concurrency = max(1, concurrency or settings.concurrency)

        self.normalizer = NameNormalizer()
        self.scorer = MatchScorer(self.rules)
        self.searcher = CandidateSearcher(
            self.client,
            scorer=self.scorer,
            normalizer=self.normalizer,
            strategy=search_strategy,
        )
        self.fetcher = PageFetcher(self.client)
        self.infobox_parser = InfoboxParser(self.rules)
        self.text_extractor = TextFieldExtractor(self.rules)
        self.merger = FieldMerger(self.rules)

    async def __aenter__(self) -> "EnrichmentOrchestrator":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()

    async def aclose(self):
        await self.client.aclose()

    async def enrich_company(self, company: CompanyInput) -> EnrichmentResult:
        """Enrich a single company; never raises."""
        result = EnrichmentResult(company_id=company.id, company_name=company.name)

        try:
            match = await self.searcher.search(company.name)
            if match is None:
                result.reason = NO_MATCH_REASON
                return result

            result.match = match
            article = await self.fetcher.fetch(match.title)

            result.found = True
            result.wikipedia_url = article.summary.canonical_url
            result.fields = self.extract_fields(company, article)

            if result.fields:
                logger.info(f"   Fields to add: {', '.join(result.fields_added)}")
            else:
                logger.info("   No new fields to add")

        except Exception as e:
            logger.warning(f"   Failed to enrich {company.name}: {e}")
            result.found = False
            result.error = str(e) or type(e).__name__

        return result

    async def enrich_name(
        self,
        name: str,
        existing_fields: Optional[dict[str, Any]] = None,
    ) -> EnrichmentResult:
        """Preview enrichment for a company that is not in any store."""
        return await self.enrich_company(
            CompanyInput(id=None, name=name, existing_fields=existing_fields or {})
        )

    def extract_fields(self, company: CompanyInput, article: ArticleData) -> ExtractedFields:
        """Run both extractors over a fetched article and merge the results."""
        existing = company.existing_fields
        normalized = self.normalizer.normalize(company.name)

        infobox_fields = self.infobox_parser.parse(article.raw_html)

        description = article.summary.description or ""
        text = "\n".join(part for part in (description, article.extract) if part)
        text_fields = self.text_extractor.extract(
            text,
            description=description,
            company_name=company.name,
            core_name=normalized.core_name,
            resolved=infobox_fields,
            existing=existing,
        )

        return self.merger.merge(
            infobox_fields,
            text_fields,
            existing,
            summary_fields=self.merger.from_summary(article.summary),
        )

    async def enrich_all(self, companies: list[CompanyInput]) -> list[EnrichmentResult]:
        """Enrich every company; results come back in input order."""
        total = len(companies)
        if self.concurrency <= 1:
            results = []
            for i, company in enumerate(companies, 1):
                logger.info(f"Enriching {i}/{total}: {company.name}")
                results.append(await self.enrich_company(company))
                if i < total:
                    await self._delay()
            return results

        # Per-host pacing in the client still applies across workers
        semaphore = asyncio.Semaphore(self.concurrency)

        async def worker(i: int, company: CompanyInput) -> EnrichmentResult:
            async with semaphore:
                logger.info(f"Enriching {i}/{total}: {company.name}")
                return await self.enrich_company(company)

        return list(await asyncio.gather(
            *(worker(i, company) for i, company in enumerate(companies, 1))
        ))

    async def run(
        self,
        store: CompanyStore,
        update: bool = False,
        limit: Optional[int] = None,
    ) -> EnrichmentReport:
        """Enrich a store's companies, writing back only in update mode."""
        companies = store.load_companies()
        if limit:
            companies = companies[:limit]
        logger.info(f"Loaded {len(companies)} companies from {store.name} store")

        results = await self.enrich_all(companies)

        if update:
            for result in results:
                if not result.found or not result.fields:
                    continue
                result.database_updated = store.update_company(result.company_id, result.fields)
                if result.database_updated:
                    logger.info(f"Updated {result.company_name}: {', '.join(result.fields_added)}")
                else:
                    logger.warning(f"Failed to update {result.company_name}")

        report = EnrichmentReport.from_results(results)
        logger.info(
            f"Enrichment complete: {report.found} found, {report.not_found} not found, "
            f"{report.updated} updated"
        )
        return report

    async def _delay(self):
        if self.request_delay_ms > 0:
            await asyncio.sleep(self.request_delay_ms / 1000.0)
