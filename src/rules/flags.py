"""
Personalized Flag Evaluator

Evaluates the fixed set of personal rules into pass / warn / fail / unknown.
A flag whose threshold or nutrient is missing is UNKNOWN, never a silent pass.
Each explanation names the value or keyword that decided it.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from knowledge import keywords
from knowledge.matching import find_keyword_matches
from models.analysis import FlagStatus, HalalClassification, HalalStatus, PersonalizedFlag
from models.nutrition import NutritionFacts
from models.user import UserPreferences


# Confidence per outcome type
UNKNOWN_CONFIDENCE = 0.0
NUMERIC_CONFIDENCE = 0.85
KEYWORD_CONFIDENCE = {
    FlagStatus.FAIL: 0.9,
    FlagStatus.WARN: 0.6,
    FlagStatus.PASS: 0.7,
}

_HALAL_TO_FLAG = {
    HalalStatus.HALAL: FlagStatus.PASS,
    HalalStatus.HARAM: FlagStatus.FAIL,
    HalalStatus.UNCLEAR: FlagStatus.WARN,
    HalalStatus.UNKNOWN: FlagStatus.UNKNOWN,
}


def _unknown(name: str, explanation: str) -> PersonalizedFlag:
    return PersonalizedFlag(name, FlagStatus.UNKNOWN, UNKNOWN_CONFIDENCE, explanation)


def _fmt(value: float) -> str:
    return f"{value:g}"


# =============================================================================
# NUMERIC FLAGS
# =============================================================================

@dataclass(frozen=True)
class NumericFlag:
    """
    Compares one nutrient against one user threshold.

    ceiling=True:  value <= threshold passes, otherwise fails
    ceiling=False: value >= threshold passes, otherwise warns (targets)
    """
    name: str
    label: str
    unit: str
    threshold: Callable[[UserPreferences], Optional[float]]
    value: Callable[[NutritionFacts], Optional[float]]
    ceiling: bool = True

    def evaluate(self, nutrition: Optional[NutritionFacts], prefs: Optional[UserPreferences]) -> PersonalizedFlag:
        limit = self.threshold(prefs) if prefs is not None else None
        if limit is None:
            return _unknown(self.name, f"No {self.label} threshold set.")

        value = self.value(nutrition) if nutrition is not None else None
        if value is None:
            return _unknown(self.name, f"{self.label.capitalize()} not found on the label.")

        shown = f"{_fmt(value)} {self.unit}".strip()
        bound = f"{_fmt(limit)} {self.unit}".strip()
        if self.ceiling:
            if value <= limit:
                return PersonalizedFlag(self.name, FlagStatus.PASS, NUMERIC_CONFIDENCE,
                                        f"{self.label.capitalize()} {shown} is within your limit of {bound}.")
            return PersonalizedFlag(self.name, FlagStatus.FAIL, NUMERIC_CONFIDENCE,
                                    f"{self.label.capitalize()} {shown} exceeds your limit of {bound}.")

        if value >= limit:
            return PersonalizedFlag(self.name, FlagStatus.PASS, NUMERIC_CONFIDENCE,
                                    f"{self.label.capitalize()} {shown} meets your target of {bound}.")
        return PersonalizedFlag(self.name, FlagStatus.WARN, NUMERIC_CONFIDENCE,
                                f"{self.label.capitalize()} {shown} is below your target of {bound}.")


def _calories(nutrition: NutritionFacts) -> Optional[float]:
    # Per serving when printed, otherwise per 100 g
    if nutrition.calories is not None:
        return nutrition.calories
    return nutrition.calories_per_100g


NUMERIC_FLAGS = (
    NumericFlag("low_sodium", "sodium", "mg",
                lambda p: p.low_sodium_mg_limit, lambda n: n.sodium_mg),
    NumericFlag("low_sugar", "sugar", "g",
                lambda p: p.low_sugar_g_limit, lambda n: n.sugar_g),
    NumericFlag("low_carb", "carbohydrates", "g",
                lambda p: p.low_carb_g_limit, lambda n: n.carbs_g),
    NumericFlag("low_calorie", "calories", "kcal",
                lambda p: p.low_calorie_limit, _calories),
    NumericFlag("high_protein", "protein", "g",
                lambda p: p.high_protein_g_target, lambda n: n.protein_g, ceiling=False),
)


# =============================================================================
# KEYWORD FLAGS
# =============================================================================

def _keyword_flag(
    name: str,
    ingredients: Sequence[str],
    disqualifying: Sequence[str],
    ambiguous: Sequence[str],
    fail_text: Callable[[str, str], str],
    warn_text: Callable[[str, str], str],
    pass_text: str,
) -> PersonalizedFlag:
    """Shared keyword scan: fail on disqualifying, warn on ambiguous, else pass."""
    if not ingredients:
        return _unknown(name, "No ingredients to check.")

    hits = find_keyword_matches(ingredients, disqualifying, ignore_plant_based=True)
    if hits:
        keyword, ingredient = hits[0]
        return PersonalizedFlag(name, FlagStatus.FAIL, KEYWORD_CONFIDENCE[FlagStatus.FAIL],
                                fail_text(keyword, ingredient))

    hits = find_keyword_matches(ingredients, ambiguous, ignore_plant_based=True)
    if hits:
        keyword, ingredient = hits[0]
        return PersonalizedFlag(name, FlagStatus.WARN, KEYWORD_CONFIDENCE[FlagStatus.WARN],
                                warn_text(keyword, ingredient))

    return PersonalizedFlag(name, FlagStatus.PASS, KEYWORD_CONFIDENCE[FlagStatus.PASS], pass_text)


def _diet_flag(name: str, ingredients: Sequence[str], disqualifying, ambiguous) -> PersonalizedFlag:
    diet = name.capitalize()
    return _keyword_flag(
        name, ingredients, disqualifying, ambiguous,
        fail_text=lambda kw, ing: f"Contains {kw} ({ing}); not {name}.",
        warn_text=lambda kw, ing: f"{ing} may be animal-derived; check the source.",
        pass_text=f"{diet}: no animal-derived ingredients found.",
    )


def _allergen_keywords(prefs: Optional[UserPreferences]) -> Tuple[Tuple[str, ...], dict]:
    if prefs is not None and prefs.allergens:
        declared = tuple(a.strip().lower() for a in prefs.allergens if a and a.strip())
        return declared, {a: a for a in declared}
    return tuple(keywords.COMMON_ALLERGENS.keys()), dict(keywords.COMMON_ALLERGENS)


def _allergen_flag(ingredients: Sequence[str], prefs: Optional[UserPreferences]) -> PersonalizedFlag:
    allergen_keywords, groups = _allergen_keywords(prefs)
    return _keyword_flag(
        "allergens", ingredients, allergen_keywords, (),
        fail_text=lambda kw, ing: f"Contains {groups.get(kw, kw)} ({ing}).",
        warn_text=lambda kw, ing: f"May contain {groups.get(kw, kw)} ({ing}).",
        pass_text="No listed allergens found in the ingredients.",
    )


def _stomach_flag(ingredients: Sequence[str], prefs: Optional[UserPreferences]) -> PersonalizedFlag:
    if prefs is None or not prefs.sensitive_stomach:
        return _unknown("sensitive_stomach", "Sensitive-stomach check not enabled.")
    if not ingredients:
        return _unknown("sensitive_stomach", "No ingredients to check.")

    hits = find_keyword_matches(ingredients, keywords.STOMACH_IRRITANTS)
    if hits:
        keyword, ingredient = hits[0]
        return PersonalizedFlag("sensitive_stomach", FlagStatus.WARN,
                                KEYWORD_CONFIDENCE[FlagStatus.WARN],
                                f"Contains {keyword} ({ingredient}), a common digestive irritant.")
    return PersonalizedFlag("sensitive_stomach", FlagStatus.PASS,
                            KEYWORD_CONFIDENCE[FlagStatus.PASS],
                            "No common digestive irritants found.")


def _halal_flag(halal: HalalClassification) -> PersonalizedFlag:
    return PersonalizedFlag("halal", _HALAL_TO_FLAG[halal.status], halal.confidence, halal.explanation)


# =============================================================================
# PUBLIC API
# =============================================================================

def evaluate_flags(
    ingredients: Sequence[str],
    nutrition: Optional[NutritionFacts],
    prefs: Optional[UserPreferences],
    halal: HalalClassification,
) -> List[PersonalizedFlag]:
    """
    Evaluate every personalized flag in fixed order:
    halal, vegetarian, vegan, low_sodium, low_sugar, low_carb,
    low_calorie, high_protein, sensitive_stomach, allergens.

    The diet flags do not depend on prefs; only the thresholds, the
    sensitive_stomach switch and the declared allergens do.
    """
    tokens = [i for i in ingredients if i]

    flags = [
        _halal_flag(halal),
        _diet_flag("vegetarian", tokens,
                   keywords.VEGETARIAN_DISQUALIFYING, keywords.VEGETARIAN_AMBIGUOUS),
        _diet_flag("vegan", tokens,
                   keywords.VEGAN_DISQUALIFYING, keywords.VEGAN_AMBIGUOUS),
    ]
    flags.extend(flag.evaluate(nutrition, prefs) for flag in NUMERIC_FLAGS)
    flags.append(_stomach_flag(tokens, prefs))
    flags.append(_allergen_flag(tokens, prefs))
    return flags
