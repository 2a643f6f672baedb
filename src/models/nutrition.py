"""
Nutrition Data Models

Nutrition facts as read from a package label (or estimated by the vision model).
Every value is optional: None means "unknown", never zero.
"""

from dataclasses import dataclass, fields, replace
from typing import Optional


@dataclass(frozen=True)
class NutritionFacts:
    """
    Nutrition values from a label panel.
    Values are per serving unless the field name says otherwise.
    """
    calories: Optional[float] = None
    serving_size_g: Optional[float] = None
    calories_per_100g: Optional[float] = None
    protein_g: Optional[float] = None
    carbs_g: Optional[float] = None
    sugar_g: Optional[float] = None
    added_sugar_g: Optional[float] = None
    sodium_mg: Optional[float] = None
    fiber_g: Optional[float] = None

    # Public JSON keys (stable contract with the presentation layers)
    WIRE_KEYS = {
        "calories": "calories",
        "serving_size_g": "servingSizeG",
        "calories_per_100g": "caloriesPer100g",
        "protein_g": "protein_g",
        "carbs_g": "carbs_g",
        "sugar_g": "sugar_g",
        "added_sugar_g": "addedSugar_g",
        "sodium_mg": "sodium_mg",
        "fiber_g": "fiber_g",
    }

    def populated_count(self) -> int:
        """Number of fields with a known value."""
        return sum(1 for f in fields(self) if getattr(self, f.name) is not None)

    def is_empty(self) -> bool:
        return self.populated_count() == 0

    def with_derived_calories_per_100g(self) -> "NutritionFacts":
        """
        Fill calories_per_100g from calories and serving size.

        Only fills an unknown value; an already-known value is kept as is,
        so calling this twice gives the same result.
        """
        if self.calories_per_100g is not None:
            return self
        if self.calories is None or not self.serving_size_g or self.serving_size_g <= 0:
            return self
        per_100g = round(self.calories / self.serving_size_g * 100, 1)
        return replace(self, calories_per_100g=per_100g)

    def to_dict(self) -> dict:
        """Convert to the public JSON shape (unknown values are null)."""
        return {
            wire: getattr(self, name)
            for name, wire in self.WIRE_KEYS.items()
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional["NutritionFacts"]:
        """
        Build from a dict using either wire keys or field names.
        Returns None when nothing usable is present.
        """
        if not data:
            return None

        values = {}
        for name, wire in cls.WIRE_KEYS.items():
            raw = data.get(wire, data.get(name))
            if raw is None:
                continue
            try:
                values[name] = float(raw)
            except (TypeError, ValueError):
                continue

        if not values:
            return None
        return cls(**values)


def calculate_calories_per_50g(nutrition: Optional[NutritionFacts]) -> Optional[int]:
    """Half of calories per 100g, rounded. None when it cannot be derived."""
    if nutrition is None:
        return None
    per_100g = nutrition.with_derived_calories_per_100g().calories_per_100g
    if per_100g is None:
        return None
    return round(per_100g / 2)
