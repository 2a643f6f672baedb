"""
Unit Tests for the Halal Classifier

Every keyword in the versioned tables is enumerated so a change to the
tables shows up as a test change.
"""

import pytest
from knowledge import keywords
from models.analysis import HalalStatus
from rules.halal import classify_halal


# =============================================================================
# KEYWORD TABLES
# =============================================================================

class TestKeywordEffects:

    @pytest.mark.parametrize("term", keywords.HALAL_DISQUALIFYING)
    def test_disqualifying_term_is_haram(self, term):
        result = classify_halal(["water", term])

        assert result.status == HalalStatus.HARAM
        assert term in result.matched_terms
        assert term in result.explanation

    @pytest.mark.parametrize("term", keywords.HALAL_QUALIFYING)
    def test_qualifying_term_is_halal(self, term):
        result = classify_halal(["chicken", "salt"], front_text=f"Spicy Wings - {term}")
        assert result.status == HalalStatus.HALAL

    @pytest.mark.parametrize("term", keywords.HALAL_UNCERTAIN)
    def test_uncertain_term_is_unclear(self, term):
        result = classify_halal(["sugar", term])

        assert result.status == HalalStatus.UNCLEAR
        assert result.confidence == pytest.approx(0.4)
        assert term in result.matched_terms


# =============================================================================
# POLICY
# =============================================================================

class TestHalalPolicy:

    def test_haram_takes_precedence_over_halal(self):
        result = classify_halal(["halal certified beef", "pork gelatin"])

        assert result.status == HalalStatus.HARAM
        assert "pork" in result.matched_terms

    def test_no_ingredients_is_unknown(self):
        result = classify_halal([])

        assert result.status == HalalStatus.UNKNOWN
        assert result.confidence == 0.0

    def test_certification_on_front_without_ingredients(self):
        result = classify_halal([], front_text="Certified Halal")
        assert result.status == HalalStatus.HALAL

    def test_plain_ingredients_are_unclear(self):
        result = classify_halal(["sugar", "salt", "rice"])

        assert result.status == HalalStatus.UNCLEAR
        assert result.confidence == pytest.approx(0.3)
        assert result.matched_terms == []

    def test_whole_word_matching(self):
        assert classify_halal(["swine gelatin"]).matched_terms == ["swine"]
        assert classify_halal(["blood orange juice"]).status == HalalStatus.UNCLEAR
        assert classify_halal(["hamburger bun"]).status == HalalStatus.UNCLEAR


class TestHalalConfidence:

    def test_confidence_grows_with_matches(self):
        one = classify_halal(["pork"])
        two = classify_halal(["pork", "bacon"])

        assert one.confidence == pytest.approx(0.7)
        assert two.confidence == pytest.approx(0.8)

    def test_confidence_is_capped(self):
        result = classify_halal(["pork", "bacon", "ham", "lard", "wine", "beer"])
        assert result.confidence == pytest.approx(0.95)

    def test_halal_confidence(self):
        result = classify_halal(["rice"], front_text="halal")
        assert result.confidence == pytest.approx(0.6)


# =============================================================================
# NEGATIONS AND COMPOUNDS
# =============================================================================

class TestAbsenceClaims:

    def test_certified_pack_with_no_pork_no_alcohol(self):
        result = classify_halal(["chicken", "salt", "spices"], front_text="HALAL\nNo Pork - No Alcohol")

        assert result.status == HalalStatus.HALAL
        assert "pork" not in result.matched_terms

    @pytest.mark.parametrize("front_text", [
        "No pork",
        "Alcohol-free",
        "alcohol free",
        "Free from pork and lard",
        "0% alcohol",
        "Made without alcohol",
        "Zero alcohol",
    ])
    def test_absence_claim_is_not_haram(self, front_text):
        result = classify_halal(["water", "sugar"], front_text=front_text)
        assert result.status == HalalStatus.UNCLEAR

    @pytest.mark.parametrize("compound", keywords.HALAL_BENIGN_COMPOUNDS)
    def test_benign_compound_is_not_haram(self, compound):
        result = classify_halal([compound, "cocoa butter"])

        assert result.status == HalalStatus.UNCLEAR
        assert result.matched_terms == []

    def test_absence_claim_does_not_hide_other_terms(self):
        result = classify_halal(["sugar alcohol", "pork gelatin"], front_text="No alcohol")
        assert result.matched_terms == ["pork"]

    @pytest.mark.parametrize("text", ["contains 1.0% alcohol", "10% alcohol", "free-range pork"])
    def test_quantities_and_free_range_still_count(self, text):
        assert classify_halal([text]).status == HalalStatus.HARAM

    def test_gelatin_free_is_not_unclear_source(self):
        result = classify_halal(["sugar", "gelatin-free gummy base"])

        assert result.status == HalalStatus.UNCLEAR
        assert result.confidence == pytest.approx(0.3)
