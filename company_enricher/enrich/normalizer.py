"""Company name normalization."""

import re

from company_enricher.models import NormalizedName


class NameNormalizer:
    """Strip qualifiers and corporate suffixes to get a core company name."""

    # Applied in order; each strips one trailing element
    SUFFIX_PATTERNS = [
        re.compile(r"\s*\([^)]+\)\s*$"),
        re.compile(r"\s+(Inc\.?|LLC|Corp\.?|Corporation|Ltd\.?|Limited|Co\.?|Company)$", re.I),
        re.compile(r"\s+(Systems|Technologies|Solutions|Services|Group|Associates)$", re.I),
    ]

    def normalize(self, name: str) -> NormalizedName:
        original = (name or "").strip()
        core_name = original
        removed = []

        for pattern in self.SUFFIX_PATTERNS:
            match = pattern.search(core_name)
            if match:
                removed.append(match.group(0).strip())
                core_name = pattern.sub("", core_name).strip()

        # A name made only of a suffix keeps its original form
        if not core_name:
            core_name = original

        return NormalizedName(original=original, core_name=core_name, removed_suffixes=removed)
