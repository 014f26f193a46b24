"""Tests for company name normalization."""

import pytest

from company_enricher.enrich.normalizer import NameNormalizer


class TestNameNormalizer:
    """Tests for suffix stripping."""

    def test_strip_legal_suffix(self):
        result = NameNormalizer().normalize("Acme Corp")
        assert result.original == "Acme Corp"
        assert result.core_name == "Acme"
        assert result.removed_suffixes == ["Corp"]

    def test_strip_legal_suffix_with_period(self):
        assert NameNormalizer().normalize("Globex Inc.").core_name == "Globex"

    def test_strip_parenthetical(self):
        assert NameNormalizer().normalize("Initech (USA)").core_name == "Initech"

    def test_strip_business_unit_suffix(self):
        assert NameNormalizer().normalize("Tetra Tech Solutions").core_name == "Tetra Tech"

    def test_strip_suffixes_in_order(self):
        result = NameNormalizer().normalize("Booz Allen Group LLC (Virginia)")
        # Business-unit suffix is checked after the legal suffix, so both go
        assert result.core_name == "Booz Allen"
        assert result.removed_suffixes == ["(Virginia)", "LLC", "Group"]

    def test_suffix_is_case_insensitive(self):
        assert NameNormalizer().normalize("Umbrella CORPORATION").core_name == "Umbrella"

    def test_name_without_suffix_unchanged(self):
        result = NameNormalizer().normalize("Capgemini")
        assert result.core_name == "Capgemini"
        assert result.removed_suffixes == []

    def test_suffix_only_name_keeps_original(self):
        assert NameNormalizer().normalize("Company").core_name == "Company"

    def test_suffix_inside_word_not_stripped(self):
        assert NameNormalizer().normalize("Incorporated Widgets").core_name == "Incorporated Widgets"

    def test_whitespace_trimmed(self):
        assert NameNormalizer().normalize("  Acme Corp  ").core_name == "Acme"

    @pytest.mark.parametrize("name", [
        "Acme Corp",
        "Globex Inc.",
        "Initech (USA)",
        "Tetra Tech Solutions",
        "Umbrella Corporation",
        "Booz Allen Group LLC (Virginia)",
        "Evidence Action",
        "Stark Industries Ltd",
    ])
    def test_normalization_idempotent(self, name):
        normalizer = NameNormalizer()
        core = normalizer.normalize(name).core_name
        assert normalizer.normalize(core).core_name == core
