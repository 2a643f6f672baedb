"""
Unit Tests for the Extraction Orchestrator

OCR and the vision model are replaced with in-memory fakes; monitoring
writes to a temporary directory.
"""

import pytest
from PIL import UnidentifiedImageError

from models.nutrition import NutritionFacts
from monitoring.monitoring_service import MonitoringService
from ocr.service import OCRResult
from services.errors import ExtractionQualityError, UpstreamUnavailableError
from services.extraction_service import (
    VISION_PLACEHOLDER,
    ExtractionOrchestrator,
    ExtractionState,
    LabelImage,
    LabelImages,
    build_vision_parsed,
)
from services.vision_service import VisionEstimate


# =============================================================================
# FAKES
# =============================================================================

class FakeOCRService:
    """Returns canned OCRResults per block; can fail the first N calls."""

    def __init__(self, results, failures=0, error=None):
        self.results = results
        self.failures = failures
        self.error = error or RuntimeError("engine crashed")
        self.calls = 0

    def read_many(self, blocks):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return {block: self.results[block] for block in blocks}


class FakeVisionService:

    def __init__(self, estimate=None, failures=0, error=None):
        self.estimate_result = estimate
        self.failures = failures
        self.error = error or ConnectionError("vision down")
        self.calls = 0

    def estimate(self, image_bytes, mime_type=None):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return self.estimate_result


IMAGE = LabelImage(b"fake-bytes", "image/jpeg")

CLEAR_LABEL = {
    "ingredients": OCRResult("Ingredients: Oats, Sugar, Salt", 0.9),
    "nutrition": OCRResult("Calories 150\nProtein 4g\nSodium 120mg", 0.85),
    "front": OCRResult("Oat Crunch", 0.8),
}

BLURRY_LABEL = {
    "ingredients": OCRResult("0a%s #", 0.2),
    "nutrition": OCRResult("", 0.1),
    "front": OCRResult("", 0.3),
}


@pytest.fixture
def monitoring(tmp_path):
    return MonitoringService(log_dir=str(tmp_path))


@pytest.fixture
def burger_estimate():
    return VisionEstimate(
        product_name="Likely crispy chicken burger",
        ingredients=["bun", "fried chicken", "lettuce"],
        nutrition=NutritionFacts(calories=250, protein_g=12, carbs_g=30),
        confidence=0.6,
    )


def orchestrator(ocr, vision=None, monitoring=None):
    return ExtractionOrchestrator(ocr, vision or FakeVisionService(), monitoring=monitoring)


# =============================================================================
# ACCEPT / ESCALATE / REJECT
# =============================================================================

class TestExtractionFlow:

    def test_trusted_ocr_is_accepted(self):
        outcome = orchestrator(FakeOCRService(CLEAR_LABEL)).run(
            LabelImages(ingredients=IMAGE, nutrition=IMAGE, front=IMAGE)
        )

        assert outcome.source == "ocr"
        assert outcome.ocr_confidence == pytest.approx(0.9)
        assert outcome.parsed.ingredients == ["oats", "sugar", "salt"]
        assert outcome.parsed.nutrition.calories == 150
        assert outcome.extracted.front_text == "Oat Crunch"
        assert outcome.states == [
            ExtractionState.EXTRACTING,
            ExtractionState.EVALUATING_CONFIDENCE,
            ExtractionState.ACCEPTED,
            ExtractionState.DONE,
        ]

    def test_low_confidence_escalates_to_vision(self, burger_estimate, monitoring):
        vision = FakeVisionService(burger_estimate)
        outcome = orchestrator(FakeOCRService(BLURRY_LABEL), vision, monitoring).run(
            LabelImages(ingredients=IMAGE, nutrition=IMAGE, front=IMAGE), user_id="u1",
        )

        assert outcome.source == "vision"
        assert vision.calls == 1
        assert outcome.parsed.product_name == "Likely crispy chicken burger"
        assert outcome.extracted.ingredients_text == VISION_PLACEHOLDER
        assert outcome.extracted.front_text == "Likely crispy chicken burger"
        assert ExtractionState.ESCALATING_TO_VISION in outcome.states

        events = monitoring.get_recent_events(event_type=MonitoringService.EVENT_VISION_FALLBACK)
        assert len(events) == 1
        assert events[0]["metadata"]["user_id"] == "u1"

    def test_untrusted_without_front_image_is_rejected(self, monitoring):
        vision = FakeVisionService()
        with pytest.raises(ExtractionQualityError) as exc:
            orchestrator(FakeOCRService(BLURRY_LABEL), vision, monitoring).run(
                LabelImages(ingredients=IMAGE, nutrition=IMAGE)
            )

        assert exc.value.user_message == "Image is not clear. Upload again."
        assert exc.value.status_code == 422
        assert vision.calls == 0
        assert monitoring.get_recent_events(event_type=MonitoringService.EVENT_EXTRACTION_REJECTED)

    def test_empty_parse_is_untrusted_even_with_high_confidence(self):
        results = {"nutrition": OCRResult("!!!", 0.95)}
        with pytest.raises(ExtractionQualityError):
            orchestrator(FakeOCRService(results)).run(LabelImages(nutrition=IMAGE))

    def test_front_only_text_feeds_every_block(self):
        results = {"front": OCRResult("Crackers\nCalories 120\nProtein 3g", 0.8)}
        outcome = orchestrator(FakeOCRService(results)).run(LabelImages(front=IMAGE))

        extracted = outcome.extracted
        assert extracted.ingredients_text == extracted.nutrition_text == extracted.front_text
        assert outcome.source == "ocr"
        assert outcome.parsed.nutrition.calories == 120

    def test_no_images(self):
        with pytest.raises(ValueError):
            orchestrator(FakeOCRService({})).run(LabelImages())

    def test_to_dict_shape(self):
        outcome = orchestrator(FakeOCRService(CLEAR_LABEL)).run(
            LabelImages(ingredients=IMAGE, nutrition=IMAGE)
        )
        data = outcome.to_dict()

        assert set(data) == {"extractedText", "parsed", "confidences"}
        assert data["extractedText"]["frontText"] == ""
        assert data["confidences"] == data["parsed"]["confidences"]


# =============================================================================
# RETRIES
# =============================================================================

class TestRetries:
    """Each upstream call is retried once, then surfaces as unavailable."""

    def test_ocr_recovers_on_retry(self, monitoring):
        ocr = FakeOCRService(CLEAR_LABEL, failures=1)
        outcome = orchestrator(ocr, monitoring=monitoring).run(
            LabelImages(ingredients=IMAGE, nutrition=IMAGE)
        )

        assert ocr.calls == 2
        assert outcome.source == "ocr"
        failures = monitoring.get_recent_events(event_type=MonitoringService.EVENT_OCR_FAILURE)
        assert [e["metadata"]["attempt"] for e in failures] == [1]

    def test_ocr_failing_twice_is_unavailable(self, monitoring):
        ocr = FakeOCRService(CLEAR_LABEL, failures=2, error=TimeoutError("OCR timed out"))
        with pytest.raises(UpstreamUnavailableError) as exc:
            orchestrator(ocr, monitoring=monitoring).run(LabelImages(ingredients=IMAGE))

        assert ocr.calls == 2
        assert exc.value.status_code == 503
        assert len(monitoring.get_recent_events(event_type=MonitoringService.EVENT_OCR_FAILURE)) == 2

    def test_unreadable_image_is_not_retried(self):
        ocr = FakeOCRService(CLEAR_LABEL, failures=2, error=UnidentifiedImageError("bad"))
        with pytest.raises(ExtractionQualityError):
            orchestrator(ocr).run(LabelImages(ingredients=IMAGE))
        assert ocr.calls == 1

    def test_vision_failing_twice_is_unavailable(self, burger_estimate):
        vision = FakeVisionService(burger_estimate, failures=2)
        with pytest.raises(UpstreamUnavailableError):
            orchestrator(FakeOCRService(BLURRY_LABEL), vision).run(LabelImages(front=IMAGE))
        assert vision.calls == 2

    def test_vision_quality_error_is_not_retried(self):
        vision = FakeVisionService(failures=5, error=ExtractionQualityError("Vision AI did not return usable data."))
        with pytest.raises(ExtractionQualityError):
            orchestrator(FakeOCRService(BLURRY_LABEL), vision).run(LabelImages(front=IMAGE))
        assert vision.calls == 1


# =============================================================================
# VISION RESHAPING
# =============================================================================

class TestBuildVisionParsed:

    def test_confidences_follow_estimate(self, burger_estimate):
        parsed = build_vision_parsed(burger_estimate)

        assert parsed.confidences.ingredients == pytest.approx(0.6)
        assert parsed.confidences.nutrition == pytest.approx(0.3)
        assert parsed.confidences.name == pytest.approx(0.6)

    def test_generic_name_is_replaced(self):
        estimate = VisionEstimate(product_name="food", ingredients=["basmati rice", "chicken"], confidence=0.95)
        parsed = build_vision_parsed(estimate)

        assert parsed.product_name == "Likely chicken and rice dish"
        assert parsed.confidences.ingredients == pytest.approx(0.9)
        assert parsed.confidences.name == pytest.approx(0.85)

    def test_empty_estimate(self):
        parsed = build_vision_parsed(VisionEstimate(product_name=None, nutrition=NutritionFacts()))

        assert parsed.product_name is None
        assert parsed.nutrition is None
        assert parsed.confidences.ingredients == pytest.approx(0.2)
        assert parsed.confidences.nutrition == pytest.approx(0.2)
        assert parsed.confidences.name == pytest.approx(0.2)
