"""
Analysis Orchestrator

Composes the pure pipeline for one product:

    ParsedData -> ingredient breakdown (glossary)
               -> calories per 50 g
               -> halal classifier
               -> scorer
               -> flag evaluator (given the halal result)
               -> suitability (when a health profile is given)
               -> AnalysisResult

No I/O and no shared state: identical inputs give identical output.
"""

from typing import List, Optional

from knowledge.glossary import CAUTION_TAGS, GlossaryEntry, find_glossary_match
from models.analysis import (
    AnalysisResult,
    IngredientBreakdown,
    IngredientStatus,
    SuitabilityResult,
    Verdict,
)
from models.extraction import OCRExtraction, ParsedData
from models.nutrition import calculate_calories_per_50g
from models.user import HealthProfile, UserPreferences
from rules.flags import evaluate_flags
from rules.halal import classify_halal
from rules.scoring import score_from_parsed
from rules.suitability import evaluate_suitability


DISCLAIMER = "Educational, not medical advice."

# Generic record for ingredients the glossary does not know
UNMATCHED_PLAIN_ENGLISH = "Common ingredient with limited detail."
UNMATCHED_WHY_USED = "Provides flavor, texture, or structure."
UNMATCHED_WHO_MIGHT_CARE = "People tracking ingredients for personal preferences."
UNMATCHED_NOTE = "No exact match in the ingredient knowledge base."
UNCERTAIN_SOURCE_NOTE = "Sourcing can vary by manufacturer."


def _status_for(entry: GlossaryEntry) -> IngredientStatus:
    if CAUTION_TAGS.intersection(entry.tags):
        return IngredientStatus.CAUTION
    if entry.has_tag("whole_food"):
        return IngredientStatus.GOOD
    return IngredientStatus.NEUTRAL


def build_ingredient_breakdown(ingredients: List[str]) -> List[IngredientBreakdown]:
    """Explain every ingredient in plain language, in label order."""
    breakdown = []
    for name in ingredients:
        entry = find_glossary_match(name)
        if entry is None:
            breakdown.append(IngredientBreakdown(
                name=name,
                status=IngredientStatus.NEUTRAL,
                plain_english=UNMATCHED_PLAIN_ENGLISH,
                why_used=UNMATCHED_WHY_USED,
                who_might_care=UNMATCHED_WHO_MIGHT_CARE,
                uncertainty_note=UNMATCHED_NOTE,
            ))
            continue

        breakdown.append(IngredientBreakdown(
            name=name,
            status=_status_for(entry),
            plain_english=entry.plain_english,
            why_used=entry.purpose,
            who_might_care=entry.who_might_care,
            uncertainty_note=UNCERTAIN_SOURCE_NOTE if entry.has_tag("uncertain_source") else None,
        ))
    return breakdown


def analyze_from_parsed(
    parsed: ParsedData,
    prefs: Optional[UserPreferences] = None,
    extracted_text: Optional[OCRExtraction] = None,
    profile: Optional[HealthProfile] = None,
) -> AnalysisResult:
    """
    Run the full explainable analysis on already-parsed label data.

    Args:
        parsed: Structured label data (from OCR or the vision model)
        prefs: Personal thresholds for the flags; flags needing them are unknown when absent
        extracted_text: Raw OCR text echoed back to the caller
        profile: Dietary preference and conditions; suitability is unknown without it

    Returns:
        AnalysisResult ready for to_dict()
    """
    ingredients = [i for i in parsed.ingredients if i]
    nutrition = parsed.nutrition.with_derived_calories_per_100g() if parsed.nutrition else None

    front_text = extracted_text.front_text if extracted_text else None
    halal = classify_halal(ingredients, front_text)
    score = score_from_parsed(ingredients, nutrition)
    flags = evaluate_flags(ingredients, nutrition, prefs, halal)

    if profile is not None:
        suitability = evaluate_suitability(
            ingredients,
            nutrition,
            halal.status,
            profile.dietary_preference,
            profile.conditions,
        )
    else:
        suitability = SuitabilityResult(verdict=Verdict.UNKNOWN, reasons=[])

    return AnalysisResult(
        product_name=parsed.product_name,
        calories_per_50g=calculate_calories_per_50g(nutrition),
        nutrition_highlights=nutrition,
        score=score,
        halal=halal,
        personalized_flags=flags,
        ingredient_breakdown=build_ingredient_breakdown(ingredients),
        suitability=suitability,
        extracted_text=extracted_text or OCRExtraction(),
        confidences=parsed.confidences,
        disclaimer=DISCLAIMER,
    )
