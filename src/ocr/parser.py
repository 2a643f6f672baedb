"""
Label Extraction Parser

Regex-based extraction of a structured product record from the three OCR
text blocks of a package (ingredients panel, nutrition panel, front of pack).
Handles US and EU label formats and tolerates OCR noise.

Never raises on malformed input: unmatched text yields empty/unknown fields
with low confidence.
"""

import logging
import re
from typing import List, Optional

from models.extraction import ParsedConfidences, ParsedData
from models.nutrition import NutritionFacts
from .error_handler import OCRErrorHandler

logger = logging.getLogger("ExtractionParser")


# Confidence bounds: partial extraction is never reported as near-certain
MAX_CONFIDENCE = 0.95
EMPTY_CONFIDENCE = 0.05

# Nutrition fields a complete panel normally shows
CORE_NUTRITION_FIELDS = 6

_NUM = r"(\d+(?:\.\d+)?)"


class ExtractionParser:
    """
    Turns OCR text blocks into ParsedData.

    Usage:
        parser = ExtractionParser()
        parsed = parser.parse(ingredients_text, nutrition_text, front_text, ocr_confidence=0.8)
    """

    # Regex patterns for each nutrient, tried in order.
    # Units are optional: OCR often drops them.
    PATTERNS = {
        "calories_per_100g": [
            rf"per\s*100\s*g.{{0,60}}?{_NUM}\s*kcal",
            rf"{_NUM}\s*kcal\s*(?:/|per)\s*100\s*g",
        ],
        "calories": [
            rf"calories[:\s]*{_NUM}",
            rf"energy.{{0,30}}?{_NUM}\s*kcal",
            rf"{_NUM}\s*kcal",
            rf"kcal[:\s]*{_NUM}",
        ],
        "serving_size_g": [
            rf"serving\s+size[^0-9]{{0,30}}{_NUM}\s*g\b",
            rf"serving\s+size[^()]{{0,20}}\(\s*{_NUM}\s*g\b",
            rf"per\s+serving[^0-9]{{0,10}}\(?{_NUM}\s*g\b",
            rf"portion[^0-9]{{0,10}}{_NUM}\s*g\b",
        ],
        "protein_g": [
            rf"proteins?[:\s]*{_NUM}\s*g?",
        ],
        "carbs_g": [
            rf"total\s+carbohydrates?[:\s]*{_NUM}",
            rf"carbohydrates?[:\s]*{_NUM}",
            rf"carbs?[:\s]*{_NUM}",
        ],
        "added_sugar_g": [
            rf"includes?\s*{_NUM}\s*g?\s*added\s+sugars?",
            rf"added\s+sugars?[:\s]*{_NUM}",
        ],
        "sugar_g": [
            rf"total\s+sugars?[:\s]*{_NUM}",
            rf"of\s+which\s+sugars?[:\s]*{_NUM}",
            rf"(?<!added\s)sugars?[:\s]*{_NUM}",
        ],
        "fiber_g": [
            rf"dietary\s+fib(?:er|re)[:\s]*{_NUM}",
            rf"fib(?:er|re)[:\s]*{_NUM}",
        ],
    }

    SODIUM_PATTERNS = [
        rf"sodium[:\s]*{_NUM}\s*(mg|g)?",
        rf"\bna[:\s]+{_NUM}\s*(mg|g)?",
    ]

    SALT_PATTERNS = [
        rf"salt[:\s]*{_NUM}\s*g?",
    ]

    # Ingredient list delimiters: commas, semicolons, bullets, pipes
    INGREDIENT_DELIMITERS = r"[,;•·*|]"

    INGREDIENTS_HEADER = re.compile(r"^\s*ingredi[ea]nts?\s*[:\-]?\s*", re.IGNORECASE)

    # Words that mean a front-of-pack line is not the product name
    NON_NAME_WORDS = {
        "nutrition", "calories", "fat", "protein", "carb", "serving",
        "amount", "daily", "value", "ingredients", "net wt", "net weight",
    }

    def parse(
        self,
        ingredients_text: Optional[str],
        nutrition_text: Optional[str],
        front_text: Optional[str] = None,
        ocr_confidence: Optional[float] = None,
    ) -> ParsedData:
        """
        Parse the three text blocks.

        Args:
            ingredients_text: OCR text of the ingredients panel
            nutrition_text: OCR text of the nutrition panel
            front_text: OCR text of the front of pack
            ocr_confidence: Upstream OCR confidence (0-1), if known

        Returns:
            ParsedData with a confidence per field group
        """
        factor = self._ocr_factor(ocr_confidence)

        ingredients, had_header = self.parse_ingredients(ingredients_text or "")
        nutrition = self.parse_nutrition(nutrition_text or "")
        product_name = self.extract_product_name(front_text or "")

        if ingredients:
            base = min(0.9, 0.35 + 0.1 * len(ingredients)) + (0.05 if had_header else 0.0)
            ingredients_conf = self._cap(base * factor)
        else:
            ingredients_conf = EMPTY_CONFIDENCE

        if nutrition is not None:
            found = nutrition.populated_count()
            fraction = min(1.0, found / CORE_NUTRITION_FIELDS)
            nutrition_conf = self._cap(0.9 * fraction * factor)
        else:
            nutrition_conf = EMPTY_CONFIDENCE

        if product_name:
            name_conf = self._cap((0.7 if len(product_name) <= 40 else 0.5) * factor)
        else:
            name_conf = EMPTY_CONFIDENCE

        return ParsedData(
            product_name=product_name,
            ingredients=ingredients,
            nutrition=nutrition,
            confidences=ParsedConfidences(
                ingredients=ingredients_conf,
                nutrition=nutrition_conf,
                name=name_conf,
            ),
        )

    # =========================================================================
    # INGREDIENTS
    # =========================================================================

    def parse_ingredients(self, text: str) -> "tuple[List[str], bool]":
        """
        Split an ingredients panel into normalized tokens.

        Returns:
            (ingredients, had_header) where had_header tells whether an
            "Ingredients:" heading was found.
        """
        if not text or not text.strip():
            return [], False

        # Join wrapped lines
        text = re.sub(r"[\r\n]+", " ", text)

        had_header = bool(self.INGREDIENTS_HEADER.search(text))
        text = self.INGREDIENTS_HEADER.sub("", text, count=1)

        # Percentages and bracket characters (contents are kept)
        text = re.sub(r"\d+(?:[.,]\d+)?\s*%", " ", text)
        text = re.sub(r"[()\[\]{}]", " ", text)

        ingredients: List[str] = []
        for raw in re.split(self.INGREDIENT_DELIMITERS, text):
            token = self.normalize_ingredient(raw)
            if len(token) < 2 or token.replace(" ", "").isdigit():
                continue
            if token not in ingredients:
                ingredients.append(token)

        return ingredients, had_header

    @staticmethod
    def normalize_ingredient(raw: str) -> str:
        """Lowercase, strip punctuation, collapse whitespace."""
        token = (raw or "").lower()
        token = re.sub(r"[^\w\s\-']", " ", token)
        token = token.replace("_", " ")
        token = re.sub(r"\s+", " ", token)
        return token.strip(" -'.")

    # =========================================================================
    # NUTRITION
    # =========================================================================

    def parse_nutrition(self, text: str) -> Optional[NutritionFacts]:
        """
        Extract nutrient values from nutrition-panel text.
        Returns None when no value could be read.
        """
        if not text or not text.strip():
            return None

        cleaned = OCRErrorHandler.preprocess_ocr_text(text).lower()
        values = {}

        for field_name in self.PATTERNS:
            value = self._extract_value(cleaned, self.PATTERNS[field_name])
            if value is not None:
                values[field_name] = value

        sodium = self._extract_sodium(cleaned)
        if sodium is not None:
            values["sodium_mg"] = sodium

        if not values:
            return None

        nutrition = NutritionFacts(**values)
        ok, errors = OCRErrorHandler.validate_nutrition(nutrition)
        if not ok:
            logger.info("Discarding implausible nutrition values: %s", "; ".join(errors))
            nutrition = OCRErrorHandler.drop_implausible(nutrition)
        if nutrition.is_empty():
            return None
        return nutrition

    def _extract_value(self, text: str, patterns: List[str]) -> Optional[float]:
        """Extract the first numeric value matched by any pattern."""
        for pattern in patterns:
            match = re.search(pattern, text, re.IGNORECASE)
            if match:
                try:
                    value = float(match.group(1))
                except (ValueError, IndexError):
                    continue
                if value >= 0:
                    return value
        return None

    def _extract_sodium(self, text: str) -> Optional[float]:
        """Sodium in mg; falls back to salt (g) * 400 when sodium is not printed."""
        for pattern in self.SODIUM_PATTERNS:
            match = re.search(pattern, text, re.IGNORECASE)
            if match:
                value = float(match.group(1))
                if match.group(2) == "g":
                    value *= 1000
                return value

        salt = self._extract_value(text, self.SALT_PATTERNS)
        if salt is not None:
            return round(salt * 400, 1)
        return None

    # =========================================================================
    # PRODUCT NAME
    # =========================================================================

    def extract_product_name(self, text: str) -> Optional[str]:
        """
        Extract the product name from front-of-pack text.
        Usually the first prominent line.
        """
        if not text:
            return None

        for line in text.strip().splitlines()[:5]:
            candidate = re.sub(r"[®™©]", "", line).strip(" \t-:|")
            candidate = re.sub(r"\s+", " ", candidate)
            lowered = candidate.lower()
            # Skip empty or short lines
            if len(candidate) < 3 or not re.search(r"[a-z]", lowered):
                continue
            # Skip lines with nutrition keywords
            if any(word in lowered for word in self.NON_NAME_WORDS):
                continue
            return candidate

        return None

    # =========================================================================
    # CONFIDENCE
    # =========================================================================

    @staticmethod
    def _ocr_factor(ocr_confidence: Optional[float]) -> float:
        if ocr_confidence is None:
            return 1.0
        clamped = max(0.0, min(1.0, ocr_confidence))
        return 0.5 + 0.5 * clamped

    @staticmethod
    def _cap(value: float) -> float:
        return round(max(EMPTY_CONFIDENCE, min(MAX_CONFIDENCE, value)), 3)


_default_parser = ExtractionParser()


def parse_extraction(
    ingredients_text: Optional[str],
    nutrition_text: Optional[str],
    front_text: Optional[str] = None,
    ocr_confidence: Optional[float] = None,
) -> ParsedData:
    """Parse label text with the shared stateless parser."""
    return _default_parser.parse(ingredients_text, nutrition_text, front_text, ocr_confidence)
