"""
Label OCR Service

Runs OCR on the label photos of a package (ingredients panel, nutrition
panel, front of pack) and returns raw text plus a confidence per image.

Each image is read on a shared worker pool with its own timeout; a hung
engine call surfaces as TimeoutError instead of blocking the request.
"""

import io
import logging
import threading
from abc import ABC, abstractmethod
from concurrent.futures import Future, ThreadPoolExecutor, TimeoutError as FutureTimeout
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import pytesseract
from PIL import Image, ImageOps

logger = logging.getLogger("LabelOCR")


@dataclass
class OCRResult:
    """Raw OCR output from the OCR engine."""
    raw_text: str
    confidence: float  # 0.0 to 1.0
    language: str = "en"

    def to_dict(self) -> dict:
        return {
            "raw_text": self.raw_text,
            "confidence": round(self.confidence, 3),
            "language": self.language,
        }


class OCREngine(ABC):
    """Black-box text producer: image bytes in, text + confidence out."""

    @abstractmethod
    def read(self, image_bytes: bytes) -> OCRResult:
        ...


class TesseractOCREngine(OCREngine):
    """
    OCR backend over pytesseract.

    Confidence is the mean of Tesseract's per-word confidences, scaled
    to 0-1. Words Tesseract could not score (-1) are ignored.

    timeout_seconds is handed to pytesseract, which kills a hung tesseract
    process and raises RuntimeError; 0 disables the limit.
    """

    # Assume a uniform block of text (label panels)
    DEFAULT_CONFIG = "--psm 6"

    def __init__(
        self,
        tesseract_cmd: Optional[str] = None,
        config: str = DEFAULT_CONFIG,
        timeout_seconds: float = 0,
    ):
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
        self.config = config
        self.timeout_seconds = timeout_seconds

    def read(self, image_bytes: bytes) -> OCRResult:
        image = self._load_image(image_bytes)
        data = pytesseract.image_to_data(
            image,
            config=self.config,
            output_type=pytesseract.Output.DICT,
            timeout=self.timeout_seconds,
        )

        lines: Dict[tuple, list] = {}
        confidences = []
        for i, word in enumerate(data.get("text", [])):
            word = (word or "").strip()
            if not word:
                continue
            key = (data["block_num"][i], data["par_num"][i], data["line_num"][i])
            lines.setdefault(key, []).append(word)
            try:
                conf = float(data["conf"][i])
            except (TypeError, ValueError):
                continue
            if conf >= 0:
                confidences.append(conf)

        text = "\n".join(" ".join(words) for _, words in sorted(lines.items()))
        confidence = (sum(confidences) / len(confidences) / 100.0) if confidences else 0.0
        return OCRResult(raw_text=text, confidence=max(0.0, min(1.0, confidence)))

    @staticmethod
    def _load_image(image_bytes: bytes) -> Image.Image:
        image = Image.open(io.BytesIO(image_bytes))
        # Phone photos carry rotation in EXIF
        image = ImageOps.exif_transpose(image)
        return image.convert("L")


class LabelOCRService:
    """
    Reads several label images concurrently.

    A worker stuck in a hung engine call cannot be interrupted, so after a
    timeout the pool is replaced; stuck workers finish (or die with their
    subprocess) on the abandoned pool while new calls get fresh workers.

    Usage:
        service = LabelOCRService(TesseractOCREngine(timeout_seconds=20), timeout_seconds=20)
        results = service.read_many({"ingredients": img1, "front": img2})
    """

    def __init__(
        self,
        engine: OCREngine,
        timeout_seconds: float = 20.0,
        max_workers: int = 6,
    ):
        self.engine = engine
        self.timeout_seconds = timeout_seconds
        self.max_workers = max_workers
        self._lock = threading.Lock()
        self.executor = self._new_executor()

    def _new_executor(self) -> ThreadPoolExecutor:
        return ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="ocr")

    def _submit(self, image_bytes: bytes) -> Tuple[ThreadPoolExecutor, Future]:
        with self._lock:
            return self.executor, self.executor.submit(self.engine.read, image_bytes)

    def _replace_executor(self, stale: ThreadPoolExecutor) -> None:
        with self._lock:
            if self.executor is not stale:
                return
            self.executor = self._new_executor()
        stale.shutdown(wait=False)
        logger.warning("Replaced OCR worker pool after a timed-out call")

    def read(self, image_bytes: bytes) -> OCRResult:
        """Read one image; raises TimeoutError when the engine hangs."""
        pool, future = self._submit(image_bytes)
        try:
            return future.result(timeout=self.timeout_seconds)
        except FutureTimeout:
            future.cancel()
            self._replace_executor(pool)
            logger.warning("OCR call exceeded %.1fs", self.timeout_seconds)
            raise TimeoutError(f"OCR timed out after {self.timeout_seconds}s")

    def read_many(self, images: Dict[str, bytes]) -> Dict[str, OCRResult]:
        """
        Read every image concurrently.

        Each future is awaited with its own timeout. The first failure is
        raised after all futures were collected or cancelled.
        """
        submitted = {block: self._submit(data) for block, data in images.items()}
        futures = {block: future for block, (_, future) in submitted.items()}
        pools = {id(pool): pool for pool, _ in submitted.values()}
        results: Dict[str, OCRResult] = {}
        error: Optional[BaseException] = None
        timed_out = False

        for block, future in futures.items():
            try:
                results[block] = future.result(timeout=self.timeout_seconds)
            except FutureTimeout:
                future.cancel()
                timed_out = True
                logger.warning("OCR timed out on %s image", block)
                error = error or TimeoutError(f"OCR timed out on {block} image")
            except Exception as e:
                logger.warning("OCR failed on %s image: %s", block, e)
                error = error or e

        if timed_out:
            for pool in pools.values():
                self._replace_executor(pool)
        if error is not None:
            raise error
        return results

    def shutdown(self) -> None:
        with self._lock:
            self.executor.shutdown(wait=False, cancel_futures=True)
