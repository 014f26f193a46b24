"""Shared fixtures: a fake Wikipedia and zeroed delays."""

from urllib.parse import unquote

import httpx
import pytest

from company_enricher.config import settings
from company_enricher.crawler import HttpRetryClient


ACME_HTML = """
<html><body><div class="mw-parser-output">
<table class="infobox vcard"><tbody>
<tr><td class="infobox-image"><img src="//upload.wikimedia.org/wikipedia/en/1/1a/Acme_logo.svg"/></td></tr>
<tr><th>Type</th><td>Private company</td></tr>
<tr><th>Headquarters</th><td>Dayton, Ohio, U.S.</td></tr>
<tr><th>Key people</th><td>Wile Coyote (CEO)</td></tr>
<tr><th>Number of employees</th><td>1,200 (2024)<sup>[3]</sup></td></tr>
<tr><th>Website</th><td><span class="url"><a href="https://www.acme.com/">acme.com</a></span></td></tr>
</tbody></table>
<p>Acme Corporation is an American technology company, founded 1975.</p>
<p>Its mission is to deliver anvils to every desert.</p>
<h2>History</h2>
<p>Acme was established in 1920 as a foundry.</p>
</div></body></html>
"""

# Search results keyed by a lower-case substring of the search term
SEARCH_RESULTS = {
    "acme": [
        {"title": "Acme (company)", "pageid": 101,
         "snippet": "Acme is a <span class=\"searchmatch\">technology company</span>, founded 1975"},
    ],
    "ghost": [
        {"title": "Ghost Systems", "pageid": 102, "snippet": "Ghost Systems is a software company"},
    ],
    "amazon": [
        {"title": "Amazon (river)", "pageid": 201, "snippet": "The Amazon River in South America"},
        {"title": "Amazon (company)", "pageid": 202, "snippet": "American multinational technology company"},
    ],
}

SUMMARIES = {
    "Acme (company)": {
        "title": "Acme (company)",
        "extract": "Acme Corporation is an American technology company, founded 1975. "
                   "Its mission is to deliver anvils to every desert.",
        "thumbnail": {"source": "https://upload.wikimedia.org/thumb/Acme.png"},
        "content_urls": {"desktop": {"page": "https://en.wikipedia.org/wiki/Acme_(company)"}},
    },
    "Amazon (company)": {
        "title": "Amazon (company)",
        "extract": "Amazon.com, Inc. is an American multinational technology company.",
        "content_urls": {"desktop": {"page": "https://en.wikipedia.org/wiki/Amazon_(company)"}},
    },
}

ARTICLES = {
    "Acme (company)": ACME_HTML,
}


def wikipedia_handler(failing_terms: tuple[str, ...] = ("broken",)):
    """Build a mock-transport handler that serves the fixtures above."""
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        path = request.url.path

        if path.endswith("/w/api.php"):
            term = request.url.params.get("srsearch", "").lower()
            if any(failing in term for failing in failing_terms):
                return httpx.Response(503)
            results = []
            for key, hits in SEARCH_RESULTS.items():
                if key in term:
                    results = hits
                    break
            return httpx.Response(200, json={"query": {"search": results}})

        if "/page/summary/" in path:
            title = unquote(path.rsplit("/", 1)[-1]).replace("_", " ")
            if title not in SUMMARIES:
                return httpx.Response(404, json={"type": "not_found"})
            return httpx.Response(200, json=SUMMARIES[title])

        if path.startswith("/wiki/"):
            title = unquote(path[len("/wiki/"):]).replace("_", " ")
            if title not in ARTICLES:
                return httpx.Response(404, text="Not found")
            return httpx.Response(200, text=ARTICLES[title])

        return httpx.Response(404)

    handler.requests = requests
    return handler


def make_client(handler=None, max_retries: int = 1) -> HttpRetryClient:
    """Create a client on the fake Wikipedia with no pacing or backoff."""
    return HttpRetryClient(
        user_agent="TestBot/1.0",
        max_retries=max_retries,
        backoff_ms=0,
        min_interval_ms=0,
        transport=httpx.MockTransport(handler or wikipedia_handler()),
    )


@pytest.fixture(autouse=True)
def no_delays(monkeypatch):
    monkeypatch.setattr(settings, "request_delay_ms", 0)
    monkeypatch.setattr(settings, "search_pause_ms", 0)
    monkeypatch.setattr(settings, "backoff_ms", 0)
    monkeypatch.setattr(settings, "max_retries", 1)


@pytest.fixture
def fake_wikipedia():
    return wikipedia_handler()


@pytest.fixture
def wiki_client(fake_wikipedia):
    return make_client(fake_wikipedia)
