"""Plain-text extraction from rendered article markup."""

import logging
import re
from typing import Optional

from bs4 import BeautifulSoup, Comment, Tag

logger = logging.getLogger(__name__)


class ArticleTextExtractor:
    """Extract the lead section of an article as clean text."""

    # Tags to remove entirely
    REMOVE_TAGS = [
        "script", "style", "noscript", "iframe", "svg",
        "table", "figure", "sup", "nav", "footer", "header", "aside",
    ]

    # Containers that hold the article body
    CONTENT_SELECTORS = ["div.mw-parser-output", "div#mw-content-text", "main", "article"]

    # Footnote markers such as [1] or [citation needed]
    FOOTNOTE_PATTERN = re.compile(r"\[(?:\d+|[a-z]|citation needed|note \d+)\]", re.I)

    def extract_lead(self, html: Optional[str], max_paragraphs: int = 5) -> str:
        """Return the paragraphs before the first section heading."""
        if not html:
            return ""

        try:
            soup = BeautifulSoup(html, "lxml")

            # Remove comments
            for comment in soup.find_all(string=lambda t: isinstance(t, Comment)):
                comment.extract()

            content = self._find_content(soup)

            for tag in self.REMOVE_TAGS:
                for element in content.find_all(tag):
                    element.decompose()

            paragraphs = []
            for element in content.find_all(["p", "h2"]):
                if element.name == "h2":
                    if paragraphs:
                        break
                    continue
                text = self.clean_text(element.get_text(" "))
                if text:
                    paragraphs.append(text)
                if len(paragraphs) >= max_paragraphs:
                    break

            return " ".join(paragraphs)

        except Exception as e:
            logger.warning(f"Failed to extract article text: {e}")
            return ""

    def _find_content(self, soup: BeautifulSoup) -> Tag:
        for selector in self.CONTENT_SELECTORS:
            element = soup.select_one(selector)
            if element:
                return element
        return soup.find("body") or soup

    def clean_text(self, text: str) -> str:
        """Collapse whitespace and drop footnote markers."""
        text = self.FOOTNOTE_PATTERN.sub("", text)
        text = re.sub(r"\s+", " ", text)
        text = re.sub(r"\s+([,.;:])", r"\1", text)
        return text.strip()
