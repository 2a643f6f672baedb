"""
Extraction Orchestrator

Serving-layer boundary between raw label photos and the pure pipeline.
Decides whether OCR output can be trusted or the front image must go to
the vision model instead.

State machine:

    EXTRACTING -> EVALUATING_CONFIDENCE -> ACCEPTED -------------> DONE
                                        -> ESCALATING_TO_VISION -> DONE
    (any state) -> FAILED

Each OCR / vision call carries its own timeout and is retried once before
surfacing as UpstreamUnavailableError.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, TypeVar

from PIL import UnidentifiedImageError

from models.extraction import OCRExtraction, ParsedConfidences, ParsedData
from ocr.parser import parse_extraction
from ocr.service import LabelOCRService, OCRResult
from intelligence.dish_namer import guess_dish_name
from monitoring.monitoring_service import MonitoringService
from .errors import ExtractionQualityError, UpstreamUnavailableError
from .vision_service import VisionEstimate, VisionService

logger = logging.getLogger("ExtractionOrchestrator")

T = TypeVar("T")

# Below this OCR confidence the label text is not trusted
IMAGE_CONFIDENCE_MIN = 0.45

# Attempts per upstream call (first try + one retry)
MAX_ATTEMPTS = 2

VISION_PLACEHOLDER = "AI Vision estimate (no label detected)."
UNCLEAR_IMAGE_MESSAGE = "Image is not clear. Upload again."


class ExtractionState(Enum):
    EXTRACTING = "extracting"
    EVALUATING_CONFIDENCE = "evaluating_confidence"
    ACCEPTED = "accepted"
    ESCALATING_TO_VISION = "escalating_to_vision"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class LabelImage:
    data: bytes
    mime_type: str = "image/jpeg"


@dataclass(frozen=True)
class LabelImages:
    """Uploaded photos tagged by label block. At least one is required."""
    ingredients: Optional[LabelImage] = None
    nutrition: Optional[LabelImage] = None
    front: Optional[LabelImage] = None

    def present(self) -> Dict[str, LabelImage]:
        blocks = {
            "ingredients": self.ingredients,
            "nutrition": self.nutrition,
            "front": self.front,
        }
        return {name: image for name, image in blocks.items() if image is not None}

    def is_empty(self) -> bool:
        return not self.present()


@dataclass
class ExtractionOutcome:
    """Result of one extraction run."""
    extracted: OCRExtraction
    parsed: ParsedData
    ocr_confidence: float
    source: str  # "ocr" or "vision"
    states: List[ExtractionState] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "extractedText": self.extracted.to_dict(),
            "parsed": self.parsed.to_dict(),
            "confidences": self.parsed.confidences.to_dict(),
        }


# =============================================================================
# VISION RESHAPING
# =============================================================================

def build_vision_parsed(estimate: VisionEstimate) -> ParsedData:
    """
    Reshape a vision estimate into ParsedData so downstream components do
    not care where the data came from.
    """
    ingredients = [item.strip() for item in estimate.ingredients if item and item.strip()]
    nutrition = estimate.nutrition if estimate.nutrition and not estimate.nutrition.is_empty() else None
    name = guess_dish_name(estimate.product_name, ingredients)
    confidence = estimate.confidence

    nutrition_fields = nutrition.populated_count() if nutrition else 0
    return ParsedData(
        product_name=name,
        ingredients=ingredients,
        nutrition=nutrition,
        confidences=ParsedConfidences(
            ingredients=min(0.9, confidence) if ingredients else 0.2,
            nutrition=(
                min(0.9, confidence * min(1.0, nutrition_fields / 6)) if nutrition_fields else 0.2
            ),
            name=min(0.85, confidence) if name else 0.2,
        ),
    )


def build_vision_extraction(parsed: ParsedData) -> OCRExtraction:
    """Synthetic extraction text marking the data as a vision estimate."""
    return OCRExtraction(
        ingredients_text=VISION_PLACEHOLDER,
        nutrition_text=VISION_PLACEHOLDER,
        front_text=parsed.product_name or VISION_PLACEHOLDER,
    )


# =============================================================================
# ORCHESTRATOR
# =============================================================================

class ExtractionOrchestrator:
    """
    Runs OCR, judges the result, and falls back to the vision model.

    Usage:
        orchestrator = ExtractionOrchestrator(ocr_service, vision_service)
        outcome = orchestrator.run(LabelImages(front=LabelImage(data)))
    """

    def __init__(
        self,
        ocr_service: LabelOCRService,
        vision_service: VisionService,
        monitoring: Optional[MonitoringService] = None,
        confidence_min: float = IMAGE_CONFIDENCE_MIN,
    ):
        self.ocr_service = ocr_service
        self.vision_service = vision_service
        self.monitoring = monitoring
        self.confidence_min = confidence_min

    def run(self, images: LabelImages, user_id: Optional[str] = None) -> ExtractionOutcome:
        """
        Extract structured label data from the uploaded images.

        Raises:
            ValueError: no image given
            ExtractionQualityError: output unusable and no front image to escalate
            UpstreamUnavailableError: OCR / vision failed twice
        """
        present = images.present()
        if not present:
            raise ValueError("At least one label image is required.")

        states = [ExtractionState.EXTRACTING]
        try:
            extracted, confidence = self._read_labels(images)
            parsed = parse_extraction(
                extracted.ingredients_text,
                extracted.nutrition_text,
                extracted.front_text,
                ocr_confidence=confidence,
            )

            states.append(ExtractionState.EVALUATING_CONFIDENCE)
            untrusted = confidence < self.confidence_min or parsed.is_empty()

            if not untrusted:
                states.extend([ExtractionState.ACCEPTED, ExtractionState.DONE])
                logger.info("OCR accepted (confidence %.2f)", confidence)
                return ExtractionOutcome(extracted, parsed, confidence, "ocr", states)

            if images.front is None:
                self._log_rejected(confidence, parsed, user_id)
                raise ExtractionQualityError(UNCLEAR_IMAGE_MESSAGE)

            states.append(ExtractionState.ESCALATING_TO_VISION)
            logger.info("Escalating to vision (confidence %.2f, empty=%s)",
                        confidence, parsed.is_empty())
            if self.monitoring:
                self.monitoring.log_vision_fallback(confidence, parsed.is_empty(), user_id=user_id)

            front = images.front
            estimate = self._call_with_retry(
                "vision", lambda: self.vision_service.estimate(front.data, front.mime_type)
            )
            vision_parsed = build_vision_parsed(estimate)
            states.append(ExtractionState.DONE)
            return ExtractionOutcome(
                build_vision_extraction(vision_parsed), vision_parsed, confidence, "vision", states
            )
        except Exception:
            states.append(ExtractionState.FAILED)
            logger.debug("Extraction failed after states %s", [s.value for s in states])
            raise

    def _read_labels(self, images: LabelImages):
        """OCR every present image; returns (OCRExtraction, confidence)."""
        present = images.present()
        blocks = {name: image.data for name, image in present.items()}
        results: Dict[str, OCRResult] = self._call_with_retry(
            "ocr", lambda: self.ocr_service.read_many(blocks)
        )

        if images.ingredients is None and images.nutrition is None:
            # Front only: its text feeds all three blocks
            front = results["front"]
            text = front.raw_text or ""
            return OCRExtraction(text, text, text), front.confidence

        confidence = max(result.confidence for result in results.values())

        def text_of(block: str) -> str:
            result = results.get(block)
            return (result.raw_text or "") if result else ""

        return (
            OCRExtraction(text_of("ingredients"), text_of("nutrition"), text_of("front")),
            confidence,
        )

    def _call_with_retry(self, what: str, call: Callable[[], T]) -> T:
        last_error: Optional[BaseException] = None
        for attempt in range(1, MAX_ATTEMPTS + 1):
            try:
                return call()
            except ExtractionQualityError:
                raise
            except UnidentifiedImageError:
                raise ExtractionQualityError("Image could not be read. Upload again.")
            except Exception as e:
                last_error = e
                logger.warning("%s call failed (attempt %d/%d): %s", what, attempt, MAX_ATTEMPTS, e)
                if what == "ocr" and self.monitoring:
                    self.monitoring.log_ocr_failure(str(e), attempt=attempt)

        raise UpstreamUnavailableError() from last_error

    def _log_rejected(self, confidence: float, parsed: ParsedData, user_id: Optional[str]) -> None:
        logger.info("Extraction rejected (confidence %.2f, empty=%s)", confidence, parsed.is_empty())
        if self.monitoring:
            self.monitoring.log_extraction_rejected(confidence, parsed.is_empty(), user_id=user_id)
