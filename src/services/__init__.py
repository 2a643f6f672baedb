# Services Package - serving-layer boundary (OCR, vision, accounts)
from .errors import (
    LabelAnalysisError,
    ExtractionQualityError,
    UpstreamUnavailableError,
    PreferencesValidationError,
)
from .vision_service import VisionService, VisionEstimate, get_vision_service
from .extraction_service import (
    ExtractionOrchestrator,
    ExtractionOutcome,
    ExtractionState,
    LabelImage,
    LabelImages,
    IMAGE_CONFIDENCE_MIN,
)
from .account_store import AccountStore, InMemoryAccountStore, DEMO_USER_ID

__all__ = [
    "LabelAnalysisError",
    "ExtractionQualityError",
    "UpstreamUnavailableError",
    "PreferencesValidationError",
    "VisionService",
    "VisionEstimate",
    "get_vision_service",
    "ExtractionOrchestrator",
    "ExtractionOutcome",
    "ExtractionState",
    "LabelImage",
    "LabelImages",
    "IMAGE_CONFIDENCE_MIN",
    "AccountStore",
    "InMemoryAccountStore",
    "DEMO_USER_ID",
]
