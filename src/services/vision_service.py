"""
Vision Model Service (Ollama)

Estimates product name, ingredients and nutrition from a photo that has
no readable label. Used only as the fallback when OCR is not trustworthy.

The model is asked for a JSON object; the reply is validated with pydantic
before anything downstream sees it.
"""

import base64
import json
import logging
from dataclasses import dataclass, field
from typing import List, Optional

import requests
from pydantic import BaseModel, Field, ValidationError

from config import get_settings
from models.nutrition import NutritionFacts
from .errors import ExtractionQualityError

logger = logging.getLogger("VisionService")

DEFAULT_VISION_CONFIDENCE = 0.4

VISION_PROMPT = " ".join([
    "You are analyzing a food photo without a label.",
    "Return JSON only.",
    "Always provide a best-guess productName with a specific dish name (e.g., crispy chicken burger).",
    "Prefix with 'Likely' if uncertain.",
    "If you cannot infer a field, return null.",
    "For ingredients, list the most likely ingredients in plain English.",
    "For nutrition, estimate per 100g if possible (calories, protein_g, carbs_g, sugar_g, sodium_mg).",
    "Include a confidence value from 0 to 1.",
])


class VisionNutrition(BaseModel):
    calories: Optional[float] = None
    servingSizeG: Optional[float] = None
    caloriesPer100g: Optional[float] = None
    protein_g: Optional[float] = None
    carbs_g: Optional[float] = None
    sugar_g: Optional[float] = None
    addedSugar_g: Optional[float] = None
    sodium_mg: Optional[float] = None
    fiber_g: Optional[float] = None


class VisionPayload(BaseModel):
    """Shape of the JSON object the model must return."""
    productName: Optional[str] = None
    ingredients: List[str] = Field(default_factory=list)
    nutrition: Optional[VisionNutrition] = None
    confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    notes: Optional[str] = None


@dataclass
class VisionEstimate:
    """Validated vision-model output."""
    product_name: Optional[str]
    ingredients: List[str] = field(default_factory=list)
    nutrition: Optional[NutritionFacts] = None
    confidence: float = DEFAULT_VISION_CONFIDENCE
    notes: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: VisionPayload) -> "VisionEstimate":
        ingredients = [item.strip() for item in payload.ingredients if item and item.strip()]
        nutrition = None
        if payload.nutrition is not None:
            nutrition = NutritionFacts.from_dict(payload.nutrition.model_dump(exclude_none=True))
        return cls(
            product_name=payload.productName,
            ingredients=ingredients,
            nutrition=nutrition,
            confidence=(
                payload.confidence if payload.confidence is not None else DEFAULT_VISION_CONFIDENCE
            ),
            notes=payload.notes,
        )


def parse_vision_reply(content: str) -> VisionEstimate:
    """
    Validate the model's reply text.

    Raises:
        ExtractionQualityError: when the reply is empty, not JSON, or off-schema
    """
    if not content or not content.strip():
        raise ExtractionQualityError("Vision AI did not return usable data.")

    text = content.strip()
    # Some models wrap JSON in markdown fences
    if text.startswith("```"):
        text = text.strip("`")
        if text.lower().startswith("json"):
            text = text[4:]

    try:
        payload = VisionPayload.model_validate(json.loads(text))
    except (json.JSONDecodeError, ValidationError, TypeError) as e:
        logger.warning("Vision reply rejected: %s", e)
        raise ExtractionQualityError("Vision AI did not return usable data.")

    return VisionEstimate.from_payload(payload)


class VisionService:
    """
    Ollama vision client.

    Usage:
        service = VisionService(model="llava")
        estimate = service.estimate(image_bytes, "image/jpeg")

    Network failures and timeouts propagate as requests exceptions; the
    extraction orchestrator decides whether to retry.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
    ):
        settings = get_settings()
        self.base_url = (base_url or settings.ollama_base_url).rstrip("/")
        self.model = model if model is not None else settings.ollama_vision_model
        self.timeout_seconds = timeout_seconds or settings.vision_timeout_seconds

    @property
    def is_configured(self) -> bool:
        return bool(self.model)

    def estimate(self, image_bytes: bytes, mime_type: Optional[str] = None) -> VisionEstimate:
        """
        Ask the vision model for a best-guess estimate of the pictured food.

        Args:
            image_bytes: Raw image data (front of pack / plated food)
            mime_type: Upload content type, informational only

        Returns:
            VisionEstimate
        """
        if not self.is_configured:
            raise ExtractionQualityError(
                "Vision AI is not configured. Upload a label or set OLLAMA_VISION_MODEL."
            )

        logger.info("Requesting vision estimate from %s (%s, %s)",
                    self.model, mime_type or "image/jpeg", f"{len(image_bytes)} bytes")

        response = requests.post(
            f"{self.base_url}/api/chat",
            json={
                "model": self.model,
                "messages": [
                    {
                        "role": "user",
                        "content": VISION_PROMPT,
                        "images": [base64.b64encode(image_bytes).decode("ascii")],
                    }
                ],
                "format": "json",
                "stream": False,
                "options": {"num_predict": 300},
            },
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()

        try:
            content = response.json().get("message", {}).get("content", "")
        except ValueError:
            content = ""
        return parse_vision_reply(content)


# Global instance
_vision_service: Optional[VisionService] = None


def get_vision_service() -> VisionService:
    """Get or create the global vision service instance."""
    global _vision_service
    if _vision_service is None:
        _vision_service = VisionService()
    return _vision_service
