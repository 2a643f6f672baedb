"""
Unit Tests for the Health Scorer
"""

import itertools

import pytest
from models.nutrition import NutritionFacts
from rules.scoring import BASELINE, SCORE_RULES, categorize, score_from_parsed


def labels(result):
    return [e.label for e in result.explanations]


# =============================================================================
# RULES
# =============================================================================

class TestScoreRules:

    def test_no_data_scores_baseline(self):
        result = score_from_parsed([], None)

        assert result.value == BASELINE
        assert result.baseline == BASELINE
        assert result.explanations == []

    def test_sugar_palm_oil_salt_scenario(self):
        result = score_from_parsed(
            ["sugar", "palm oil", "salt"],
            NutritionFacts(sodium_mg=900, sugar_g=20),
        )

        assert labels(result) == [
            "Added sugar",
            "High sugar",
            "High sodium",
            "Ultra-processed ingredients",
            "Short ingredient list",
        ]
        assert result.value == 25
        assert result.category == "poor"

    def test_added_sugar_from_nutrition_only(self):
        result = score_from_parsed([], NutritionFacts(added_sugar_g=6))
        assert labels(result) == ["Added sugar"]
        assert result.value == BASELINE - 15

    def test_zero_added_sugar_does_not_penalize(self):
        result = score_from_parsed([], NutritionFacts(added_sugar_g=0))
        assert result.explanations == []

    def test_positive_rules(self):
        result = score_from_parsed(
            ["whole grain oats", "water"],
            NutritionFacts(fiber_g=5, protein_g=12),
        )

        assert labels(result) == ["Fiber", "Protein", "Short ingredient list"]
        assert result.value == BASELINE + 20
        assert all(e.direction == "up" for e in result.explanations)

    def test_calorie_density_uses_derived_value(self):
        result = score_from_parsed([], NutritionFacts(calories=250, serving_size_g=50))

        assert labels(result) == ["Calorie dense"]
        assert "500" in result.explanations[0].reason

    def test_trans_fat_and_dye(self):
        result = score_from_parsed(
            ["partially hydrogenated oil", "red 40", "sugar", "salt", "water", "milk"],
            None,
        )
        assert "Trans fat" in labels(result)
        assert "Artificial color" in labels(result)
        assert "Short ingredient list" not in labels(result)

    def test_low_glossary_coverage(self):
        result = score_from_parsed(["zorbex", "quinoa puffs", "salt"], None)
        assert "Unfamiliar ingredients" in labels(result)

    def test_coverage_needs_three_ingredients(self):
        result = score_from_parsed(["zorbex", "quinoa puffs"], None)
        assert "Unfamiliar ingredients" not in labels(result)


# =============================================================================
# MISSING DATA
# =============================================================================

class TestMissingData:

    def test_missing_nutrients_are_skipped(self):
        result = score_from_parsed(["water"], NutritionFacts(calories=100))
        # Only the ingredient-list rule has data
        assert labels(result) == ["Short ingredient list"]

    def test_missing_ingredients_skip_ingredient_rules(self):
        result = score_from_parsed([], NutritionFacts(sodium_mg=100, sugar_g=2))
        assert result.explanations == []
        assert result.value == BASELINE


# =============================================================================
# BOUNDS AND CONSISTENCY
# =============================================================================

class TestScoreBounds:

    def test_clamped_at_zero_with_bounds_entry(self):
        result = score_from_parsed(
            [
                "sugar", "partially hydrogenated oil", "red 40",
                "zorbex", "quinoa puffs", "blarg", "xyloz", "frob", "snark",
                "glorp", "wibble", "flurb",
            ],
            NutritionFacts(sugar_g=40, sodium_mg=2000, calories=500, serving_size_g=100),
        )

        assert result.value == 0
        assert result.category == "poor"
        assert result.explanations[-1].label == "Score bounds"
        assert sum(e.points for e in result.explanations) == result.value - result.baseline

    @pytest.mark.parametrize("ingredients,nutrition", [
        ([], None),
        (["sugar"], NutritionFacts(fiber_g=10)),
        (["oats"], NutritionFacts(protein_g=30, fiber_g=9)),
        (["sugar", "salt", "palm oil"], NutritionFacts(sodium_mg=3000, sugar_g=90)),
    ])
    def test_value_in_range_and_deltas_sum(self, ingredients, nutrition):
        result = score_from_parsed(ingredients, nutrition)

        assert 0 <= result.value <= 100
        assert sum(e.points for e in result.explanations) == result.value - result.baseline

    def test_categories(self):
        assert categorize(100) == "excellent"
        assert categorize(80) == "excellent"
        assert categorize(79) == "good"
        assert categorize(60) == "good"
        assert categorize(40) == "fair"
        assert categorize(39) == "poor"
        assert categorize(0) == "poor"


class TestOrderIndependence:

    def test_rule_order_does_not_change_value(self):
        ingredients = ["sugar", "palm oil", "salt", "red 40"]
        nutrition = NutritionFacts(sodium_mg=700, fiber_g=4, protein_g=11)
        expected = score_from_parsed(ingredients, nutrition).value

        for order in itertools.islice(itertools.permutations(SCORE_RULES), 50):
            assert score_from_parsed(ingredients, nutrition, rules=order).value == expected

    def test_explanations_follow_canonical_order(self):
        result = score_from_parsed(
            ["sugar", "palm oil"],
            NutritionFacts(sodium_mg=700, fiber_g=4),
        )
        canonical = [r.label for r in SCORE_RULES]
        positions = [canonical.index(label) for label in labels(result)]
        assert positions == sorted(positions)
