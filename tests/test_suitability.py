"""
Unit Tests for the Suitability Evaluator
"""

import pytest
from models.analysis import HalalStatus, Verdict
from models.nutrition import NutritionFacts
from models.user import ConditionType, DietaryPreference, MedicalCondition
from rules.suitability import NO_CONFLICTS, evaluate_suitability


def condition(kind, notes=None):
    return MedicalCondition(type=kind, notes=notes)


# =============================================================================
# DIETARY PREFERENCE
# =============================================================================

class TestDietaryPreference:

    def test_halal_preference_with_haram(self):
        result = evaluate_suitability(["pork gelatin"], None, HalalStatus.HARAM, DietaryPreference.HALAL)

        assert result.verdict == Verdict.NOT_RECOMMENDED
        assert result.reasons == ["Halal preference: ingredients indicate haram."]

    def test_halal_preference_with_unclear(self):
        result = evaluate_suitability(["sugar"], None, HalalStatus.UNCLEAR, DietaryPreference.HALAL)
        assert result.reasons == ["Halal preference: sourcing is unclear."]

    def test_halal_status_ignored_without_preference(self):
        result = evaluate_suitability(["pork"], None, HalalStatus.HARAM)

        assert result.verdict == Verdict.GOOD
        assert result.reasons == [NO_CONFLICTS]

    def test_vegetarian_names_the_term(self):
        result = evaluate_suitability(
            ["rice", "chicken breast"], None, HalalStatus.UNCLEAR, DietaryPreference.VEGETARIAN,
        )
        assert result.reasons == ["Vegetarian preference: contains meat or fish (chicken)."]

    def test_vegan_catches_dairy(self):
        result = evaluate_suitability(["oats", "whole milk"], None, HalalStatus.UNCLEAR, DietaryPreference.VEGAN)

        assert result.verdict == Verdict.NOT_RECOMMENDED
        assert "(milk)" in result.reasons[0]


# =============================================================================
# MEDICAL CONDITIONS
# =============================================================================

class TestConditions:

    @pytest.mark.parametrize("kind,nutrition,expected", [
        (ConditionType.DIABETES, NutritionFacts(sugar_g=12), "Diabetes: sugar/carbs are high."),
        (ConditionType.DIABETES, NutritionFacts(carbs_g=45), "Diabetes: sugar/carbs are high."),
        (ConditionType.HYPERTENSION, NutritionFacts(sodium_mg=650), "Hypertension: sodium is high."),
        (ConditionType.HEART_DISEASE, NutritionFacts(sodium_mg=450), "Heart condition: sodium is high."),
    ])
    def test_nutrient_conditions(self, kind, nutrition, expected):
        result = evaluate_suitability(["oats"], nutrition, HalalStatus.UNCLEAR, conditions=[condition(kind)])
        assert result.reasons == [expected]

    def test_thresholds_are_exclusive(self):
        nutrition = NutritionFacts(sugar_g=10, carbs_g=30, sodium_mg=400)
        result = evaluate_suitability(
            ["oats"], nutrition, HalalStatus.UNCLEAR,
            conditions=[condition(ConditionType.DIABETES), condition(ConditionType.HEART_DISEASE)],
        )
        assert result.verdict == Verdict.GOOD

    def test_missing_nutrients_never_trigger(self):
        result = evaluate_suitability(
            ["oats"], None, HalalStatus.UNCLEAR,
            conditions=[condition(ConditionType.DIABETES), condition(ConditionType.HYPERTENSION)],
        )
        assert result.verdict == Verdict.GOOD

    def test_ingredient_conditions(self):
        result = evaluate_suitability(
            ["pork sausage", "wheat bread"], None, HalalStatus.UNCLEAR,
            conditions=[condition(ConditionType.HIGH_CHOLESTEROL), condition(ConditionType.CELIAC)],
        )
        assert result.reasons == [
            "High cholesterol: contains high-fat ingredients (sausage).",
            "Celiac: likely contains gluten (wheat).",
        ]

    def test_allergy_notes_are_split(self):
        allergy = condition(ConditionType.ALLERGY, "shellfish; Peanut, sesame")
        result = evaluate_suitability(["roasted peanuts", "salt"], None, HalalStatus.UNCLEAR, conditions=[allergy])

        assert result.reasons == ["Allergy: ingredient matches your allergy list (peanut)."]

    def test_allergy_without_notes(self):
        result = evaluate_suitability(
            ["peanuts"], None, HalalStatus.UNCLEAR, conditions=[condition(ConditionType.ALLERGY)],
        )
        assert result.verdict == Verdict.GOOD

    def test_informational_conditions(self):
        result = evaluate_suitability(
            ["salt"], NutritionFacts(sodium_mg=2000), HalalStatus.UNCLEAR,
            conditions=[condition(ConditionType.KIDNEY_DISEASE), condition(ConditionType.OTHER, "gout")],
        )
        assert result.verdict == Verdict.GOOD


# =============================================================================
# ACCUMULATION
# =============================================================================

class TestAccumulation:

    def test_all_checks_run_and_accumulate(self):
        result = evaluate_suitability(
            ["pork gelatin", "sugar"],
            NutritionFacts(sugar_g=20, sodium_mg=700),
            HalalStatus.HARAM,
            DietaryPreference.HALAL,
            [condition(ConditionType.DIABETES), condition(ConditionType.HYPERTENSION)],
        )

        assert result.verdict == Verdict.NOT_RECOMMENDED
        assert result.reasons == [
            "Halal preference: ingredients indicate haram.",
            "Diabetes: sugar/carbs are high.",
            "Hypertension: sodium is high.",
        ]

    def test_repeated_condition_reported_once(self):
        result = evaluate_suitability(
            ["oats"], NutritionFacts(sodium_mg=700), HalalStatus.UNCLEAR,
            conditions=[condition(ConditionType.HYPERTENSION), condition(ConditionType.HYPERTENSION)],
        )
        assert result.reasons == ["Hypertension: sodium is high."]

    def test_empty_ingredients_is_no_conflict(self):
        result = evaluate_suitability(
            [], None, HalalStatus.UNKNOWN, DietaryPreference.VEGAN,
            [condition(ConditionType.CELIAC)],
        )

        assert result.verdict == Verdict.GOOD
        assert result.reasons == [NO_CONFLICTS]
