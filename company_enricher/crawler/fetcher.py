"""Summary and article content retrieval for resolved titles."""

import logging
from typing import Optional
from urllib.parse import quote

from company_enricher.config import settings
from company_enricher.errors import RequestFailedError, SummaryUnavailableError
from company_enricher.models import ArticleData, PageSummary
from .client import HttpRetryClient
from .extractor import ArticleTextExtractor

logger = logging.getLogger(__name__)


class PageFetcher:
    """Fetch the summary and rendered content of an article."""

    def __init__(
        self,
        client: HttpRetryClient,
        rest_api_url: Optional[str] = None,
        article_base_url: Optional[str] = None,
    ):
        self.client = client
        self.rest_api_url = (rest_api_url or settings.rest_api_url).rstrip("/")
        self.article_base_url = (article_base_url or settings.article_base_url).rstrip("/")
        self.extractor = ArticleTextExtractor()

    async def fetch(self, title: str) -> ArticleData:
        """Fetch everything needed to extract fields for ``title``.

        Raises SummaryUnavailableError when the summary cannot be had; a
        failed content fetch only leaves ``raw_html`` empty.
        """
        summary = await self.get_summary(title)
        if summary is None:
            raise SummaryUnavailableError(title)

        raw_html = await self.get_article_html(title)

        return ArticleData(
            summary=summary,
            raw_html=raw_html,
            extract=self.extractor.extract_lead(raw_html),
        )

    async def get_summary(self, title: str) -> Optional[PageSummary]:
        """Fetch the structured summary; None when the service has none."""
        url = f"{self.rest_api_url}/page/summary/{self._encode_title(title)}"
        try:
            data = await self.client.get_json(url)
        except RequestFailedError as e:
            logger.warning(f"Summary fetch failed for '{title}': {e}")
            return None

        if not data:
            return None

        return PageSummary(
            title=data.get("title") or title,
            description=data.get("extract") or None,
            thumbnail_url=(data.get("thumbnail") or {}).get("source"),
            original_image_url=(data.get("originalimage") or {}).get("source"),
            canonical_url=((data.get("content_urls") or {}).get("desktop") or {}).get("page"),
        )

    async def get_article_html(self, title: str) -> Optional[str]:
        """Fetch rendered article markup; None on any failure."""
        url = f"{self.article_base_url}/{self._encode_title(title)}"
        try:
            response = await self.client.get(url, accept="text/html")
        except RequestFailedError as e:
            logger.warning(f"Article fetch failed for '{title}': {e}")
            return None

        if not response.is_success:
            logger.warning(f"Article fetch for '{title}' returned HTTP {response.status_code}")
            return None

        return response.text

    @staticmethod
    def _encode_title(title: str) -> str:
        return quote(title.replace(" ", "_"), safe="")
