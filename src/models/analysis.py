"""
Analysis Result Models

Explainable outputs of the pipeline: ingredient breakdown, halal status,
health score, personalized flags, suitability and the assembled response.
"""

from dataclasses import dataclass, field
from typing import List, Optional
from enum import Enum

from .extraction import OCRExtraction, ParsedConfidences
from .nutrition import NutritionFacts


class IngredientStatus(Enum):
    GOOD = "good"
    NEUTRAL = "neutral"
    CAUTION = "caution"


class HalalStatus(Enum):
    """
    Halal verdict.
    UNKNOWN only when there is no ingredient data at all.
    """
    HALAL = "halal"
    HARAM = "haram"
    UNCLEAR = "unclear"
    UNKNOWN = "unknown"


class FlagStatus(Enum):
    PASS = "pass"
    WARN = "warn"
    FAIL = "fail"
    UNKNOWN = "unknown"


class Verdict(Enum):
    GOOD = "good"
    NOT_RECOMMENDED = "not_recommended"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class IngredientBreakdown:
    """Plain-language explanation of one ingredient."""
    name: str
    status: IngredientStatus
    plain_english: str
    why_used: str
    who_might_care: str
    uncertainty_note: Optional[str] = None

    def to_dict(self) -> dict:
        data = {
            "name": self.name,
            "status": self.status.value,
            "plainEnglish": self.plain_english,
            "whyUsed": self.why_used,
            "whoMightCare": self.who_might_care,
        }
        if self.uncertainty_note:
            data["uncertaintyNote"] = self.uncertainty_note
        return data


@dataclass(frozen=True)
class HalalClassification:
    status: HalalStatus
    confidence: float
    explanation: str
    matched_terms: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "confidence": self.confidence,
            "explanation": self.explanation,
            "matchedTerms": list(self.matched_terms),
        }


@dataclass(frozen=True)
class ScoreExplanation:
    """
    One applied score delta.
    direction is "up" or "down"; points carries the sign.
    """
    label: str
    direction: str
    points: int
    reason: str

    def to_dict(self) -> dict:
        return {
            "label": self.label,
            "direction": self.direction,
            "points": self.points,
            "reason": self.reason,
        }


@dataclass(frozen=True)
class ScoreResult:
    value: int
    category: str
    baseline: int
    explanations: List[ScoreExplanation] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "value": self.value,
            "category": self.category,
            "baseline": self.baseline,
            "explanations": [e.to_dict() for e in self.explanations],
        }


@dataclass(frozen=True)
class PersonalizedFlag:
    name: str
    status: FlagStatus
    confidence: float
    explanation: str

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "status": self.status.value,
            "confidence": self.confidence,
            "explanation": self.explanation,
        }


@dataclass(frozen=True)
class SuitabilityResult:
    verdict: Verdict
    reasons: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"verdict": self.verdict.value, "reasons": list(self.reasons)}


@dataclass(frozen=True)
class AnalysisResult:
    """
    Complete response for one scanned product.
    to_dict() is the public contract consumed by web and mobile clients.
    """
    product_name: Optional[str]
    calories_per_50g: Optional[int]
    nutrition_highlights: Optional[NutritionFacts]
    score: ScoreResult
    halal: HalalClassification
    personalized_flags: List[PersonalizedFlag]
    ingredient_breakdown: List[IngredientBreakdown]
    suitability: SuitabilityResult
    extracted_text: OCRExtraction
    confidences: ParsedConfidences
    disclaimer: str

    def to_dict(self) -> dict:
        return {
            "productName": self.product_name,
            "caloriesPer50g": self.calories_per_50g,
            "nutritionHighlights": (
                self.nutrition_highlights.to_dict() if self.nutrition_highlights else None
            ),
            "score": self.score.to_dict(),
            "halal": self.halal.to_dict(),
            "personalizedFlags": [f.to_dict() for f in self.personalized_flags],
            "ingredientBreakdown": [b.to_dict() for b in self.ingredient_breakdown],
            "suitability": self.suitability.to_dict(),
            "parsing": {
                "extractedText": self.extracted_text.to_dict(),
                "confidences": self.confidences.to_dict(),
            },
            "disclaimer": self.disclaimer,
        }
