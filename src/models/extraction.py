"""
Extraction Models

Raw OCR text for a scan and the structured record parsed from it.
"""

from dataclasses import dataclass, field, replace
from typing import List, Optional

from .nutrition import NutritionFacts

# Lowest ingredients confidence reported alongside a non-empty ingredient list
MIN_INGREDIENTS_CONFIDENCE = 0.05


@dataclass(frozen=True)
class OCRExtraction:
    """
    Free text read from the three label images.
    Any block may be empty. Immutable once produced for a scan.
    """
    ingredients_text: str = ""
    nutrition_text: str = ""
    front_text: str = ""

    def to_dict(self) -> dict:
        return {
            "ingredientsText": self.ingredients_text,
            "nutritionText": self.nutrition_text,
            "frontText": self.front_text,
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "OCRExtraction":
        data = data or {}
        return cls(
            ingredients_text=data.get("ingredientsText") or "",
            nutrition_text=data.get("nutritionText") or "",
            front_text=data.get("frontText") or "",
        )


@dataclass(frozen=True)
class ParsedConfidences:
    """Trust in each parsed field group, 0.0 to 1.0."""
    ingredients: float = 0.0
    nutrition: float = 0.0
    name: float = 0.0

    def to_dict(self) -> dict:
        return {
            "ingredientsConfidence": self.ingredients,
            "nutritionConfidence": self.nutrition,
            "nameConfidence": self.name,
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "ParsedConfidences":
        data = data or {}
        return cls(
            ingredients=float(data.get("ingredientsConfidence") or 0.0),
            nutrition=float(data.get("nutritionConfidence") or 0.0),
            name=float(data.get("nameConfidence") or 0.0),
        )


@dataclass(frozen=True)
class ParsedData:
    """
    Structured candidate record for one product.

    Invariant: a non-empty ingredient list always comes with an
    ingredients confidence above zero.
    """
    product_name: Optional[str] = None
    ingredients: List[str] = field(default_factory=list)
    nutrition: Optional[NutritionFacts] = None
    confidences: ParsedConfidences = field(default_factory=ParsedConfidences)

    def is_empty(self) -> bool:
        """True when nothing at all was extracted."""
        return not self.product_name and not self.ingredients and self.nutrition is None

    def to_dict(self) -> dict:
        return {
            "productName": self.product_name,
            "ingredients": list(self.ingredients),
            "nutrition": self.nutrition.to_dict() if self.nutrition else None,
            "confidences": self.confidences.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ParsedData":
        ingredients = [str(item) for item in data.get("ingredients") or [] if str(item).strip()]
        confidences = ParsedConfidences.from_dict(data.get("confidences"))
        if ingredients and confidences.ingredients < MIN_INGREDIENTS_CONFIDENCE:
            confidences = replace(confidences, ingredients=MIN_INGREDIENTS_CONFIDENCE)
        return cls(
            product_name=data.get("productName"),
            ingredients=ingredients,
            nutrition=NutritionFacts.from_dict(data.get("nutrition")),
            confidences=confidences,
        )
