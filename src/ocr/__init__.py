# OCR Package for Label Extraction
from .service import OCRResult, OCREngine, TesseractOCREngine, LabelOCRService
from .parser import ExtractionParser, parse_extraction
from .error_handler import OCRErrorHandler

__all__ = [
    "OCRResult",
    "OCREngine",
    "TesseractOCREngine",
    "LabelOCRService",
    "ExtractionParser",
    "parse_extraction",
    "OCRErrorHandler",
]
