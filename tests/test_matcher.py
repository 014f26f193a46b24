"""Tests for candidate scoring and selection."""

import pytest

from company_enricher.enrich.normalizer import NameNormalizer
from company_enricher.models import (
    Confidence,
    EnrichmentRules,
    ScoredCandidate,
    SearchCandidate,
)
from company_enricher.score.matcher import MatchScorer


def make_candidate(title: str = "Acme (company)", snippet: str = "", **kwargs) -> SearchCandidate:
    """Create a search candidate with defaults."""
    return SearchCandidate(title=title, snippet=snippet, **kwargs)


def make_scored(score: float, title: str = "Candidate") -> ScoredCandidate:
    return ScoredCandidate(title=title, score=score)


def score_for(candidate: SearchCandidate, name: str = "Acme Corp") -> float:
    scorer = MatchScorer()
    return scorer.score(candidate, name, NameNormalizer().normalize(name)).score


class TestScoring:
    """Tests for individual candidate scores."""

    def test_end_to_end_acme_scores_high(self):
        scorer = MatchScorer()
        normalized = NameNormalizer().normalize("Acme Corp")
        candidate = make_candidate(
            "Acme (company)",
            "Acme is a <span class=\"searchmatch\">technology company</span>, founded 1975",
        )

        result = scorer.find_best_match([candidate], "Acme Corp", normalized)

        assert result is not None
        assert result.title == "Acme (company)"
        assert result.confidence == Confidence.HIGH
        assert "title-variation" in result.reasons
        assert "name-in-title" in result.reasons
        assert any(r.startswith("business-context") for r in result.reasons)

    def test_exact_title_scores_above_partial(self):
        exact = score_for(make_candidate("Acme", "a software company"))
        partial = score_for(make_candidate("Acme Rockets", "a software company"))
        assert exact > partial

    def test_company_suffix_title(self):
        scorer = MatchScorer()
        normalized = NameNormalizer().normalize("Initech")
        result = scorer.score(make_candidate("Initech Inc."), "Initech", normalized)
        assert "company-suffix" in result.reasons
        assert "title-starts" in result.reasons

    @pytest.mark.parametrize("snippet", [
        "",
        "a consulting firm",
        "Acme makes anvils",
        "a technology company based in Ohio",
    ])
    def test_business_keyword_never_decreases_score(self, snippet):
        base = score_for(make_candidate("Acme Anvils", snippet))
        boosted = score_for(make_candidate("Acme Anvils", snippet + " publicly traded"))
        assert boosted >= base

    @pytest.mark.parametrize("title,snippet", [
        ("Acme (company)", "a technology company, founded 1975, nyse"),
        ("Acme", "Acme is a corporation with headquarters in Ohio"),
        ("Acme Corp", "software company"),
    ])
    def test_reject_term_forces_negative_score(self, title, snippet):
        assert score_for(make_candidate(title, snippet + " and a film")) <= -100

    def test_reject_term_in_title(self):
        assert score_for(make_candidate("Acme (band)", "a technology company")) <= -100

    def test_reject_term_matches_whole_words_only(self):
        # "broadband" contains "band" but is not a reject term
        score = score_for(make_candidate("Acme Broadband", "a technology company"))
        assert score > 0

    def test_reject_term_prefix_of_longer_word(self):
        assert score_for(make_candidate("Acme Filmmaking", "a technology company")) > 0
        assert score_for(make_candidate("Acme (film)", "a technology company")) <= -100

    def test_scored_candidate_snippet_cleaned(self):
        candidate = make_candidate("Acme Corp", "<span class=\"searchmatch\">Acme</span> &amp; Co company")
        scorer = MatchScorer()
        scored = scorer.score(candidate, "Acme Corp", NameNormalizer().normalize("Acme Corp"))
        assert scored.snippet == "Acme & Co company"

    def test_disambiguated_snippet_cleaned(self):
        candidates = [make_candidate("Amazon (company)", "<b>Amazon</b> is a company")]
        best = MatchScorer().find_best_match(candidates, "Amazon", NameNormalizer().normalize("Amazon"))
        assert best.confidence == Confidence.HIGH_DISAMBIGUATED
        assert best.snippet == "Amazon is a company"

    def test_no_relevance_rejected(self):
        score = score_for(make_candidate("Unrelated Topic", "nothing here"))
        assert score == -100

    def test_snippet_markup_stripped(self):
        assert MatchScorer.clean_snippet("<span>Acme</span> &amp; Co") == "Acme & Co"


class TestSelection:
    """Tests for confidence tiers and the acceptance cutoff."""

    @pytest.mark.parametrize("score,expected", [
        (90, Confidence.HIGH),
        (89, Confidence.MEDIUM),
        (60, Confidence.MEDIUM),
        (59, Confidence.LOW),
        (41, Confidence.LOW),
        (40, Confidence.LOW),
    ])
    def test_classify(self, score, expected):
        assert MatchScorer().classify(score) == expected

    @pytest.mark.parametrize("score,accepted", [
        (90, True),
        (89, True),
        (60, True),
        (59, False),
        (41, False),
        (40, False),
    ])
    def test_select_cutoff(self, score, accepted):
        result = MatchScorer().select([make_scored(score)])
        assert (result is not None) == accepted

    def test_select_sets_confidence(self):
        result = MatchScorer().select([make_scored(89)])
        assert result.confidence == Confidence.MEDIUM

    def test_select_highest_score(self):
        result = MatchScorer().select([make_scored(70, "A"), make_scored(150, "B")])
        assert result.title == "B"

    def test_select_ties_keep_input_order(self):
        result = MatchScorer().select([make_scored(120, "First"), make_scored(120, "Second")])
        assert result.title == "First"

    def test_select_empty(self):
        assert MatchScorer().select([]) is None

    def test_custom_thresholds(self):
        rules = EnrichmentRules(weights={"high_threshold": 200, "medium_threshold": 100})
        scorer = MatchScorer(rules)
        assert scorer.classify(150) == Confidence.MEDIUM
        assert scorer.select([make_scored(90)]) is None


class TestDisambiguation:
    """Tests for the preferred-title table."""

    def test_amazon_resolves_to_company(self):
        scorer = MatchScorer()
        candidates = [
            make_candidate("Amazon (river)", "The Amazon River in South America"),
            make_candidate("Amazon rainforest", "a moist broadleaf forest"),
            make_candidate("Amazon (company)", "an American multinational technology company"),
        ]
        result = scorer.find_best_match(candidates, "Amazon", NameNormalizer().normalize("Amazon"))

        assert result.title == "Amazon (company)"
        assert result.confidence == Confidence.HIGH_DISAMBIGUATED
        assert result.reasons == ["disambiguation-table"]

    def test_disambiguation_uses_core_name(self):
        scorer = MatchScorer()
        candidates = [make_candidate("Apple"), make_candidate("Apple Inc.")]
        result = scorer.find_best_match(candidates, "Apple Corp", NameNormalizer().normalize("Apple Corp"))
        assert result.title == "Apple Inc."

    def test_disambiguation_from_rules(self):
        rules = EnrichmentRules(disambiguation={"mercury": ["Mercury Systems"]})
        scorer = MatchScorer(rules)
        candidates = [make_candidate("Mercury (planet)"), make_candidate("Mercury Systems")]
        result = scorer.find_best_match(candidates, "Mercury", NameNormalizer().normalize("Mercury"))
        assert result.title == "Mercury Systems"

    def test_falls_back_to_scoring(self):
        scorer = MatchScorer()
        candidates = [make_candidate("Amazon (river)", "a river")]
        result = scorer.find_best_match(candidates, "Amazon", NameNormalizer().normalize("Amazon"))
        assert result is None
