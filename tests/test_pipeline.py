"""Tests for the enrichment orchestrator, end to end against a fake Wikipedia."""

import asyncio

import httpx

from company_enricher.connectors import InMemoryStore
from company_enricher.crawler import HttpRetryClient
from company_enricher.models import CompanyInput, Confidence
from company_enricher.pipeline import NO_MATCH_REASON, EnrichmentOrchestrator


def make_company(id: int = 1, name: str = "Acme Corp", **existing) -> CompanyInput:
    """Create a company input with defaults."""
    return CompanyInput(id=id, name=name, existing_fields=existing)


def make_orchestrator(client: HttpRetryClient, **kwargs) -> EnrichmentOrchestrator:
    return EnrichmentOrchestrator(client=client, request_delay_ms=0, **kwargs)


def run(coro):
    return asyncio.run(coro)


class TestEnrichCompany:
    """Tests for enriching a single company."""

    def test_acme_end_to_end(self, wiki_client):
        async def go():
            async with make_orchestrator(wiki_client) as orchestrator:
                return await orchestrator.enrich_company(
                    make_company(website="https://acme.com", year_founded=None)
                )

        result = run(go())

        assert result.found
        assert result.match.title == "Acme (company)"
        assert result.match.confidence == Confidence.HIGH
        assert result.wikipedia_url == "https://en.wikipedia.org/wiki/Acme_(company)"
        assert result.fields["year_founded"] == 1975
        assert result.fields["headquarters"] == "Dayton, Ohio, U.S."
        assert result.fields["ceo_name"] == "Wile Coyote"
        assert result.fields["ceo_title"] == "CEO"
        assert result.fields["type"] == "Company - Private"
        assert result.fields["employees"] == "1,200"
        assert result.fields["mission"] == "mission is to deliver anvils to every desert."
        assert result.fields["company_logo"].endswith("Acme_logo.svg")
        assert "website" not in result.fields

    def test_no_match_is_not_an_error(self, wiki_client):
        async def go():
            async with make_orchestrator(wiki_client) as orchestrator:
                return await orchestrator.enrich_company(make_company(name="Nobody Inc"))

        result = run(go())
        assert not result.found
        assert result.reason == NO_MATCH_REASON
        assert result.error is None
        assert result.fields == {}

    def test_summary_unavailable_recorded_as_error(self, wiki_client):
        async def go():
            async with make_orchestrator(wiki_client) as orchestrator:
                return await orchestrator.enrich_company(make_company(name="Ghost Corp"))

        result = run(go())
        assert not result.found
        assert "Ghost Systems" in result.error

    def test_search_failure_recorded_as_error(self, wiki_client):
        async def go():
            async with make_orchestrator(wiki_client) as orchestrator:
                return await orchestrator.enrich_company(make_company(name="Broken Widgets"))

        result = run(go())
        assert not result.found
        assert "503" in result.error

    def test_missing_article_content_degrades_to_text(self, wiki_client):
        async def go():
            async with make_orchestrator(wiki_client) as orchestrator:
                return await orchestrator.enrich_name("Amazon")

        result = run(go())
        assert result.found
        assert result.match.title == "Amazon (company)"
        assert result.match.confidence == Confidence.HIGH_DISAMBIGUATED
        assert set(result.fields) == {"description", "wikipedia_url"}

    def test_already_enriched_company_adds_nothing(self, wiki_client):
        async def go():
            async with make_orchestrator(wiki_client) as orchestrator:
                first = await orchestrator.enrich_company(make_company())
                second = await orchestrator.enrich_company(
                    make_company(**first.fields)
                )
                return first, second

        first, second = run(go())
        assert first.fields
        assert second.found
        assert second.fields == {}

    def test_best_strategy(self, wiki_client):
        async def go():
            async with make_orchestrator(wiki_client, search_strategy="best") as orchestrator:
                return await orchestrator.enrich_company(make_company())

        result = run(go())
        assert result.match.title == "Acme (company)"


class TestBatch:
    """Tests for batch runs over a store."""

    def make_store(self) -> InMemoryStore:
        return InMemoryStore([
            make_company(1, "Acme Corp", website="https://acme.com"),
            make_company(2, "Broken Widgets"),
            make_company(3, "Nobody Inc"),
            make_company(4, "Amazon"),
        ])

    def test_failures_do_not_stop_batch(self, wiki_client):
        async def go():
            async with make_orchestrator(wiki_client) as orchestrator:
                return await orchestrator.run(self.make_store())

        report = run(go())
        assert [r.company_name for r in report.results] == [
            "Acme Corp", "Broken Widgets", "Nobody Inc", "Amazon",
        ]
        assert report.total == 4
        assert report.found == 2
        assert report.not_found == 2
        assert report.errors == 1

    def test_preview_does_not_write(self, wiki_client):
        store = self.make_store()

        async def go():
            async with make_orchestrator(wiki_client) as orchestrator:
                return await orchestrator.run(store, update=False)

        report = run(go())
        assert store.updates == {}
        assert report.updated == 0
        assert all(r.database_updated is None for r in report.results)
        assert report.results[0].fields["year_founded"] == 1975

    def test_update_writes_found_companies(self, wiki_client):
        store = self.make_store()

        async def go():
            async with make_orchestrator(wiki_client) as orchestrator:
                return await orchestrator.run(store, update=True)

        report = run(go())
        assert set(store.updates) == {1, 4}
        assert store.updates[1]["year_founded"] == 1975
        assert store.companies[0].existing_fields["website"] == "https://acme.com"
        assert report.updated == 2
        assert report.results[1].database_updated is None

    def test_limit(self, wiki_client):
        async def go():
            async with make_orchestrator(wiki_client) as orchestrator:
                return await orchestrator.run(self.make_store(), limit=1)

        assert run(go()).total == 1

    def test_concurrent_results_keep_input_order(self, fake_wikipedia):
        client = HttpRetryClient(
            max_retries=0,
            backoff_ms=0,
            min_interval_ms=0,
            transport=httpx.MockTransport(fake_wikipedia),
        )

        async def go():
            async with make_orchestrator(client, concurrency=3) as orchestrator:
                return await orchestrator.run(self.make_store())

        report = run(go())
        assert [r.company_id for r in report.results] == [1, 2, 3, 4]
        assert report.found == 2
