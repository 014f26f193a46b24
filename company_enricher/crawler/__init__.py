"""Network components for fetching article data."""

from .client import HttpRetryClient
from .fetcher import PageFetcher
from .extractor import ArticleTextExtractor

__all__ = ["HttpRetryClient", "PageFetcher", "ArticleTextExtractor"]
