"""
Suitability Evaluator

Combines dietary preference, halal status and medical conditions into one
verdict. All checks run (no short-circuit) and their reasons accumulate;
any reason makes the product not recommended.

Missing nutrients never trigger a rule. An empty ingredient list means
"no conflicts found", not unknown.
"""

import re
from typing import List, Optional, Sequence

from knowledge import keywords
from knowledge.matching import first_substring_match
from models.analysis import HalalStatus, SuitabilityResult, Verdict
from models.nutrition import NutritionFacts
from models.user import ConditionType, DietaryPreference, MedicalCondition


# Medical thresholds (per serving)
DIABETES_SUGAR_G = 10.0
DIABETES_CARBS_G = 30.0
HYPERTENSION_SODIUM_MG = 500.0
HEART_SODIUM_MG = 400.0

NO_CONFLICTS = "No major conflicts found."


def _above(nutrition: Optional[NutritionFacts], field_name: str, limit: float) -> bool:
    if nutrition is None:
        return False
    value = getattr(nutrition, field_name)
    return value is not None and value > limit


def _with_term(message: str, match) -> str:
    return f"{message} ({match[0]})" if match else message


def _dietary_reasons(
    ingredients: Sequence[str],
    halal_status: HalalStatus,
    preference: DietaryPreference,
) -> List[str]:
    reasons = []

    if preference == DietaryPreference.HALAL:
        if halal_status == HalalStatus.HARAM:
            reasons.append("Halal preference: ingredients indicate haram.")
        elif halal_status == HalalStatus.UNCLEAR:
            reasons.append("Halal preference: sourcing is unclear.")

    if preference == DietaryPreference.VEGETARIAN:
        match = first_substring_match(ingredients, keywords.MEAT_OR_FISH)
        if match:
            reasons.append(_with_term("Vegetarian preference: contains meat or fish", match) + ".")

    if preference == DietaryPreference.VEGAN:
        match = first_substring_match(ingredients, keywords.ANIMAL_PRODUCTS)
        if match:
            reasons.append(_with_term("Vegan preference: contains animal-based ingredients", match) + ".")

    return reasons


def _allergy_terms(notes: Optional[str]) -> List[str]:
    return [t.strip().lower() for t in re.split(r"[,;]", notes or "") if t.strip()]


def _condition_reasons(
    ingredients: Sequence[str],
    nutrition: Optional[NutritionFacts],
    condition: MedicalCondition,
) -> List[str]:
    kind = condition.type

    if kind == ConditionType.DIABETES:
        if _above(nutrition, "sugar_g", DIABETES_SUGAR_G) or _above(nutrition, "carbs_g", DIABETES_CARBS_G):
            return ["Diabetes: sugar/carbs are high."]

    elif kind == ConditionType.HYPERTENSION:
        if _above(nutrition, "sodium_mg", HYPERTENSION_SODIUM_MG):
            return ["Hypertension: sodium is high."]

    elif kind == ConditionType.HEART_DISEASE:
        if _above(nutrition, "sodium_mg", HEART_SODIUM_MG):
            return ["Heart condition: sodium is high."]

    elif kind == ConditionType.HIGH_CHOLESTEROL:
        match = first_substring_match(ingredients, keywords.HIGH_FAT)
        if match:
            return [_with_term("High cholesterol: contains high-fat ingredients", match) + "."]

    elif kind == ConditionType.CELIAC:
        match = first_substring_match(ingredients, keywords.GLUTEN_SOURCES)
        if match:
            return [_with_term("Celiac: likely contains gluten", match) + "."]

    elif kind == ConditionType.ALLERGY:
        match = first_substring_match(ingredients, _allergy_terms(condition.notes))
        if match:
            return [_with_term("Allergy: ingredient matches your allergy list", match) + "."]

    # kidney_disease and other are informational only
    return []


def evaluate_suitability(
    ingredients: Sequence[str],
    nutrition: Optional[NutritionFacts],
    halal_status: HalalStatus,
    dietary_preference: DietaryPreference = DietaryPreference.NONE,
    conditions: Sequence[MedicalCondition] = (),
) -> SuitabilityResult:
    """
    Evaluate whether a product suits a user's diet and conditions.

    Returns:
        SuitabilityResult; not_recommended iff at least one reason was found
    """
    tokens = [i for i in ingredients if i]

    reasons = _dietary_reasons(tokens, halal_status, dietary_preference)
    for condition in conditions:
        for reason in _condition_reasons(tokens, nutrition, condition):
            if reason not in reasons:
                reasons.append(reason)

    if reasons:
        return SuitabilityResult(verdict=Verdict.NOT_RECOMMENDED, reasons=reasons)
    return SuitabilityResult(verdict=Verdict.GOOD, reasons=[NO_CONFLICTS])
