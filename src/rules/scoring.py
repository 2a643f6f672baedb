"""
Health Scorer

Computes a 0-100 health-quality score as baseline + itemized deltas.

DESIGN PRINCIPLES:
1. Rules live in one ordered table (ScoreRule)
2. A rule whose data is missing is skipped: no delta, no explanation
3. Rules never read each other's outcome, so the value is order-independent
4. Explanations are reported in table order for reproducibility
"""

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from knowledge.glossary import find_glossary_match
from models.analysis import ScoreExplanation, ScoreResult
from models.nutrition import NutritionFacts


BASELINE = 70

# (minimum value, category), checked top-down
CATEGORY_THRESHOLDS = (
    (80, "excellent"),
    (60, "good"),
    (40, "fair"),
    (0, "poor"),
)

# Nutrient thresholds
HIGH_SUGAR_G = 15.0
HIGH_SODIUM_MG = 600.0
CALORIE_DENSE_PER_100G = 400.0
FIBER_PRESENT_G = 3.0
PROTEIN_RICH_G = 10.0
SHORT_LIST_MAX = 5
COVERAGE_MIN_INGREDIENTS = 3
COVERAGE_MIN_RATIO = 0.5


@dataclass(frozen=True)
class ScoreInput:
    """Everything a rule may look at."""
    ingredients: Sequence[str]
    nutrition: Optional[NutritionFacts]

    def nutrient(self, name: str) -> Optional[float]:
        if self.nutrition is None:
            return None
        return getattr(self.nutrition, name)

    def has_tag(self, tag: str) -> bool:
        for ingredient in self.ingredients:
            entry = find_glossary_match(ingredient)
            if entry is not None and entry.has_tag(tag):
                return True
        return False

    def tagged(self, tag: str) -> List[str]:
        found = []
        for ingredient in self.ingredients:
            entry = find_glossary_match(ingredient)
            if entry is not None and entry.has_tag(tag):
                found.append(ingredient)
        return found


@dataclass(frozen=True)
class ScoreRule:
    """
    One declarative scoring rule.

    requires: True when the rule has the data it needs
    applies:  True when the delta should be applied
    reason:   builds the explanation text
    """
    key: str
    label: str
    points: int
    requires: Callable[[ScoreInput], bool]
    applies: Callable[[ScoreInput], bool]
    reason: Callable[[ScoreInput], str]


def _has_ingredients(data: ScoreInput) -> bool:
    return len(data.ingredients) > 0


def _needs(nutrient: str) -> Callable[[ScoreInput], bool]:
    return lambda data: data.nutrient(nutrient) is not None


def _per_100g(data: ScoreInput) -> Optional[float]:
    if data.nutrition is None:
        return None
    return data.nutrition.with_derived_calories_per_100g().calories_per_100g


def _glossary_coverage(data: ScoreInput) -> float:
    matched = sum(1 for i in data.ingredients if find_glossary_match(i) is not None)
    return matched / len(data.ingredients)


def _added_sugar_applies(data: ScoreInput) -> bool:
    added = data.nutrient("added_sugar_g")
    return data.has_tag("added_sugar") or (added is not None and added > 0)


def _added_sugar_reason(data: ScoreInput) -> str:
    tagged = data.tagged("added_sugar")
    if tagged:
        return f"Contains added sugar ({', '.join(tagged)})."
    return f"Label lists {data.nutrient('added_sugar_g'):g} g added sugar."


# =============================================================================
# RULE TABLE (canonical order)
# =============================================================================

SCORE_RULES = (
    ScoreRule(
        key="added_sugar",
        label="Added sugar",
        points=-15,
        requires=lambda d: _has_ingredients(d) or d.nutrient("added_sugar_g") is not None,
        applies=_added_sugar_applies,
        reason=_added_sugar_reason,
    ),
    ScoreRule(
        key="high_sugar",
        label="High sugar",
        points=-10,
        requires=_needs("sugar_g"),
        applies=lambda d: d.nutrient("sugar_g") > HIGH_SUGAR_G,
        reason=lambda d: f"{d.nutrient('sugar_g'):g} g sugar is above {HIGH_SUGAR_G:g} g.",
    ),
    ScoreRule(
        key="high_sodium",
        label="High sodium",
        points=-15,
        requires=_needs("sodium_mg"),
        applies=lambda d: d.nutrient("sodium_mg") > HIGH_SODIUM_MG,
        reason=lambda d: f"{d.nutrient('sodium_mg'):g} mg sodium is above {HIGH_SODIUM_MG:g} mg.",
    ),
    ScoreRule(
        key="trans_fat",
        label="Trans fat",
        points=-15,
        requires=_has_ingredients,
        applies=lambda d: d.has_tag("trans_fat"),
        reason=lambda d: f"Contains a trans-fat source ({', '.join(d.tagged('trans_fat'))}).",
    ),
    ScoreRule(
        key="ultra_processed",
        label="Ultra-processed ingredients",
        points=-10,
        requires=_has_ingredients,
        applies=lambda d: d.has_tag("ultra_processed"),
        reason=lambda d: f"Includes ultra-processed ingredients ({', '.join(d.tagged('ultra_processed'))}).",
    ),
    ScoreRule(
        key="artificial_dye",
        label="Artificial color",
        points=-5,
        requires=_has_ingredients,
        applies=lambda d: d.has_tag("dye"),
        reason=lambda d: f"Contains added coloring ({', '.join(d.tagged('dye'))}).",
    ),
    ScoreRule(
        key="calorie_dense",
        label="Calorie dense",
        points=-5,
        requires=lambda d: _per_100g(d) is not None,
        applies=lambda d: _per_100g(d) > CALORIE_DENSE_PER_100G,
        reason=lambda d: f"{_per_100g(d):g} kcal per 100 g is above {CALORIE_DENSE_PER_100G:g}.",
    ),
    ScoreRule(
        key="fiber_present",
        label="Fiber",
        points=10,
        requires=_needs("fiber_g"),
        applies=lambda d: d.nutrient("fiber_g") >= FIBER_PRESENT_G,
        reason=lambda d: f"Provides {d.nutrient('fiber_g'):g} g fiber.",
    ),
    ScoreRule(
        key="protein_rich",
        label="Protein",
        points=5,
        requires=_needs("protein_g"),
        applies=lambda d: d.nutrient("protein_g") >= PROTEIN_RICH_G,
        reason=lambda d: f"Provides {d.nutrient('protein_g'):g} g protein.",
    ),
    ScoreRule(
        key="short_ingredient_list",
        label="Short ingredient list",
        points=5,
        requires=_has_ingredients,
        applies=lambda d: len(d.ingredients) <= SHORT_LIST_MAX,
        reason=lambda d: f"Only {len(d.ingredients)} ingredient(s).",
    ),
    ScoreRule(
        key="low_glossary_coverage",
        label="Unfamiliar ingredients",
        points=-5,
        requires=lambda d: len(d.ingredients) >= COVERAGE_MIN_INGREDIENTS,
        applies=lambda d: _glossary_coverage(d) < COVERAGE_MIN_RATIO,
        reason=lambda d: (
            f"Only {round(_glossary_coverage(d) * 100)}% of ingredients "
            "could be explained; the score is less certain."
        ),
    ),
)


def categorize(value: int) -> str:
    """Fixed-threshold bucket over the clamped score."""
    for minimum, category in CATEGORY_THRESHOLDS:
        if value >= minimum:
            return category
    return "poor"


def score_from_parsed(
    ingredients: Sequence[str],
    nutrition: Optional[NutritionFacts],
    rules: Sequence[ScoreRule] = SCORE_RULES,
) -> ScoreResult:
    """
    Score a product.

    Args:
        ingredients: Normalized ingredient tokens (may be empty)
        nutrition: Parsed nutrition facts (may be None)
        rules: Rule table, canonical order by default

    Returns:
        ScoreResult whose explanation points sum to value - baseline
    """
    data = ScoreInput(ingredients=tuple(i for i in ingredients if i), nutrition=nutrition)
    explanations: List[ScoreExplanation] = []

    for rule in rules:
        if not rule.requires(data):
            continue
        if not rule.applies(data):
            continue
        explanations.append(ScoreExplanation(
            label=rule.label,
            direction="up" if rule.points > 0 else "down",
            points=rule.points,
            reason=rule.reason(data),
        ))

    raw = BASELINE + sum(e.points for e in explanations)
    value = max(0, min(100, raw))

    # Keep the itemized deltas consistent with the clamped value
    if value != raw:
        correction = value - raw
        explanations.append(ScoreExplanation(
            label="Score bounds",
            direction="up" if correction > 0 else "down",
            points=correction,
            reason="Score is limited to the 0-100 range.",
        ))

    return ScoreResult(
        value=value,
        category=categorize(value),
        baseline=BASELINE,
        explanations=explanations,
    )
