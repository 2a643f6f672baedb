"""
Typed errors raised at the serving boundary.

The pure pipeline never raises for missing or ambiguous data; these cover
genuinely exceptional conditions and map onto HTTP status codes.
"""


class LabelAnalysisError(Exception):
    """Base class. `user_message` is safe to show to the caller."""

    status_code = 500
    default_message = "Server error"

    def __init__(self, user_message: str = None):
        self.user_message = user_message or self.default_message
        super().__init__(self.user_message)


class ExtractionQualityError(LabelAnalysisError):
    """OCR / vision output too sparse or low-confidence to analyze."""

    status_code = 422
    default_message = "Image is not clear. Upload again."


class UpstreamUnavailableError(LabelAnalysisError):
    """OCR engine or vision model failed or timed out after a retry."""

    status_code = 503
    default_message = "Could not read the image right now. Please try again."


class PreferencesValidationError(LabelAnalysisError):
    """Malformed caller-supplied preferences or conditions."""

    status_code = 400
    default_message = "Invalid userPrefs JSON"
