"""
OCR Error Handler Module

Handles common OCR noise in label text and validates extracted values.
"""

import re
from dataclasses import fields, replace
from typing import List, Tuple

from models.nutrition import NutritionFacts


class OCRErrorHandler:
    """
    Cleans OCR text and validates extracted nutrition values.

    Common OCR mistakes inside numbers:
    - 0 ↔ O, o
    - 1 ↔ l, I, |
    - 5 ↔ S
    """

    # Character substitution map for letters read inside numbers
    CHAR_CORRECTIONS = {
        "O": "0",
        "o": "0",
        "Q": "0",
        "l": "1",
        "I": "1",
        "|": "1",
        "S": "5",
    }

    # Plausible ranges per serving (or per 100g); anything outside is OCR noise
    VALID_RANGES = {
        "calories": (0, 2000),
        "serving_size_g": (1, 2000),
        "calories_per_100g": (0, 900),
        "protein_g": (0, 100),
        "carbs_g": (0, 200),
        "sugar_g": (0, 100),
        "added_sugar_g": (0, 100),
        "sodium_mg": (0, 10000),
        "fiber_g": (0, 60),
    }

    @classmethod
    def clean_numeric_text(cls, text: str) -> str:
        """
        Fix character recognition errors in text that should be numeric.
        """
        return "".join(cls.CHAR_CORRECTIONS.get(char, char) for char in text)

    @classmethod
    def preprocess_ocr_text(cls, raw_text: str) -> str:
        """
        Preprocess nutrition-panel text before parsing.

        Steps:
        1. Normalize whitespace
        2. Fix letters misread inside numbers
        3. Normalize separators and units
        """
        text = raw_text or ""

        # Normalize whitespace
        text = re.sub(r"\s+", " ", text)

        # Letters misread inside numbers: "1O g" -> "10 g", "l2g" -> "12g"
        text = re.sub(
            r"(?<![A-Za-z])[0-9OoQlI|S][0-9OoQlI|S.,]*(?=\s*(?:g|mg|kcal|cal|%)\b)",
            lambda m: cls.clean_numeric_text(m.group(0)),
            text,
        )

        # Thousand separators, then decimal commas ("2,5 g")
        text = re.sub(r"(?<![\d.,])([1-9]\d{0,2}),(\d{3})(?!\d)", r"\1\2", text)
        text = re.sub(r"(\d),(\d{1,2})(?!\d)", r"\1.\2", text)

        # Standardize units
        text = re.sub(r"milligrams?", "mg", text, flags=re.IGNORECASE)
        text = re.sub(r"kilocalories?", "kcal", text, flags=re.IGNORECASE)
        text = re.sub(r"(\d)\s*grams?\b", r"\1 g", text, flags=re.IGNORECASE)

        return text.strip()

    @classmethod
    def validate_nutrition(cls, nutrition: NutritionFacts) -> Tuple[bool, List[str]]:
        """
        Validate extracted nutrition values are plausible.

        Returns:
            (is_valid, list_of_errors)
        """
        errors = []

        for field_name, (min_val, max_val) in cls.VALID_RANGES.items():
            value = getattr(nutrition, field_name)
            if value is None:
                continue
            if value < min_val:
                errors.append(f"{field_name} is below {min_val} ({value}), likely OCR error")
            elif value > max_val:
                errors.append(f"{field_name} exceeds maximum ({value} > {max_val})")

        if cls._added_sugar_exceeds_total(nutrition):
            errors.append("Added sugar exceeds total sugar - likely OCR error")

        return len(errors) == 0, errors

    @staticmethod
    def _added_sugar_exceeds_total(nutrition: NutritionFacts) -> bool:
        # Added sugar is part of total sugar; allow for label rounding
        return (nutrition.added_sugar_g is not None and
                nutrition.sugar_g is not None and
                nutrition.added_sugar_g > nutrition.sugar_g + 0.5)

    @classmethod
    def drop_implausible(cls, nutrition: NutritionFacts) -> NutritionFacts:
        """
        Replace out-of-range values with None, and added sugar with None
        when it exceeds total sugar.
        Values are never clamped: a wrong number is worse than an unknown one.
        """
        cleared = {}
        for f in fields(nutrition):
            value = getattr(nutrition, f.name)
            bounds = cls.VALID_RANGES.get(f.name)
            if value is None or bounds is None:
                continue
            if not bounds[0] <= value <= bounds[1]:
                cleared[f.name] = None
        checked = replace(nutrition, **cleared) if cleared else nutrition
        if cls._added_sugar_exceeds_total(checked):
            checked = replace(checked, added_sugar_g=None)
        return checked
