"""
Unit Tests for the Label OCR Service

Engines are faked; the Tesseract backend is exercised with
pytesseract.image_to_data patched so no binary is needed.
"""

import io
import threading

import pytest
from PIL import Image, UnidentifiedImageError

import ocr.service as ocr_service
from ocr.service import LabelOCRService, OCREngine, OCRResult, TesseractOCREngine


class EchoEngine(OCREngine):
    """Returns the image bytes as text."""

    def read(self, image_bytes):
        return OCRResult(raw_text=image_bytes.decode(), confidence=0.8)


class BlockingEngine(OCREngine):
    """Blocks until released, to simulate a hung engine."""

    def __init__(self):
        self.release = threading.Event()

    def read(self, image_bytes):
        self.release.wait(5)
        return OCRResult(raw_text="late", confidence=0.9)


class SelectiveHangEngine(OCREngine):
    """Hangs on b"hang" until released; reads anything else at once."""

    def __init__(self):
        self.release = threading.Event()

    def read(self, image_bytes):
        if image_bytes == b"hang":
            self.release.wait(5)
        return OCRResult(raw_text=image_bytes.decode(), confidence=0.9)


class FailingEngine(OCREngine):

    def read(self, image_bytes):
        if image_bytes == b"bad":
            raise ValueError("cannot decode")
        return OCRResult(raw_text="ok", confidence=0.7)


def png_bytes():
    buffer = io.BytesIO()
    Image.new("RGB", (20, 10), "white").save(buffer, format="PNG")
    return buffer.getvalue()


# =============================================================================
# LABEL OCR SERVICE
# =============================================================================

class TestLabelOCRService:

    def test_read_many_keeps_block_names(self):
        service = LabelOCRService(EchoEngine())

        results = service.read_many({"ingredients": b"sugar, salt", "front": b"Crackers"})

        assert results["ingredients"].raw_text == "sugar, salt"
        assert results["front"].raw_text == "Crackers"
        service.shutdown()

    def test_single_read_timeout(self):
        engine = BlockingEngine()
        service = LabelOCRService(engine, timeout_seconds=0.05)

        with pytest.raises(TimeoutError):
            service.read(b"img")

        engine.release.set()
        service.shutdown()

    def test_read_many_timeout(self):
        engine = BlockingEngine()
        service = LabelOCRService(engine, timeout_seconds=0.05)

        with pytest.raises(TimeoutError, match="nutrition"):
            service.read_many({"nutrition": b"img"})

        engine.release.set()
        service.shutdown()

    def test_hung_calls_do_not_starve_later_reads(self):
        engine = SelectiveHangEngine()
        service = LabelOCRService(engine, timeout_seconds=0.05, max_workers=2)

        for _ in range(6):
            with pytest.raises(TimeoutError):
                service.read(b"hang")

        assert service.read(b"good").raw_text == "good"
        assert service.read_many({"front": b"front"})["front"].raw_text == "front"

        engine.release.set()
        service.shutdown()

    def test_read_many_timeout_replaces_pool(self):
        engine = SelectiveHangEngine()
        service = LabelOCRService(engine, timeout_seconds=0.05, max_workers=1)
        stale = service.executor

        with pytest.raises(TimeoutError):
            service.read_many({"nutrition": b"hang"})

        assert service.executor is not stale
        assert service.read(b"ok").raw_text == "ok"

        engine.release.set()
        service.shutdown()

    def test_read_many_raises_engine_error(self):
        service = LabelOCRService(FailingEngine())

        with pytest.raises(ValueError, match="cannot decode"):
            service.read_many({"front": b"good", "nutrition": b"bad"})
        service.shutdown()

    def test_result_to_dict_rounds_confidence(self):
        assert OCRResult("text", 0.87654).to_dict() == {
            "raw_text": "text",
            "confidence": 0.877,
            "language": "en",
        }


# =============================================================================
# TESSERACT ENGINE
# =============================================================================

class TestTesseractOCREngine:

    def test_lines_and_mean_confidence(self, monkeypatch):
        data = {
            "text": ["Calories", "200", "", "Sodium", "5mg"],
            "conf": ["90", "70", "-1", "-1", "80"],
            "block_num": [1, 1, 1, 1, 1],
            "par_num": [1, 1, 1, 1, 1],
            "line_num": [1, 1, 1, 2, 2],
        }
        monkeypatch.setattr(ocr_service.pytesseract, "image_to_data", lambda *a, **kw: data)

        result = TesseractOCREngine().read(png_bytes())

        assert result.raw_text == "Calories 200\nSodium 5mg"
        assert result.confidence == pytest.approx(0.8)

    def test_no_words_means_zero_confidence(self, monkeypatch):
        data = {"text": [""], "conf": ["-1"], "block_num": [1], "par_num": [1], "line_num": [1]}
        monkeypatch.setattr(ocr_service.pytesseract, "image_to_data", lambda *a, **kw: data)

        result = TesseractOCREngine().read(png_bytes())

        assert result.raw_text == ""
        assert result.confidence == 0.0

    def test_rejects_non_image_bytes(self):
        with pytest.raises(UnidentifiedImageError):
            TesseractOCREngine().read(b"not an image")

    def test_timeout_is_passed_to_tesseract(self, monkeypatch):
        seen = {}

        def fake_image_to_data(image, **kwargs):
            seen.update(kwargs)
            return {"text": [], "conf": [], "block_num": [], "par_num": [], "line_num": []}

        monkeypatch.setattr(ocr_service.pytesseract, "image_to_data", fake_image_to_data)

        TesseractOCREngine(timeout_seconds=7).read(png_bytes())

        assert seen["timeout"] == 7

    def test_tesseract_timeout_surfaces_as_runtime_error(self, monkeypatch):
        def killed(image, **kwargs):
            raise RuntimeError("Tesseract process timeout")

        monkeypatch.setattr(ocr_service.pytesseract, "image_to_data", killed)

        with pytest.raises(RuntimeError, match="timeout"):
            TesseractOCREngine(timeout_seconds=1).read(png_bytes())
