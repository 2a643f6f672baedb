"""
FastAPI Application for food label analysis

Provides REST API endpoints for:
- Label extraction (OCR with vision fallback)
- Full analysis from label photos
- Analysis of already-parsed label data
"""

# Load configuration FIRST (reads .env before other imports need it)
from config import get_settings

from fastapi import FastAPI, HTTPException, UploadFile, File, Form, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from typing import Optional, List, Dict, Tuple
import json
import logging
import os
import sys

# Add src to path
sys.path.insert(0, os.path.dirname(__file__))

from analysis.orchestrator import analyze_from_parsed
from models.extraction import OCRExtraction, ParsedData
from models.user import (
    ConditionType,
    DietaryPreference,
    HealthProfile,
    MedicalCondition,
    UserPreferences,
)
from monitoring.monitoring_service import MonitoringService
from ocr.service import LabelOCRService, TesseractOCREngine
from services.account_store import AccountStore, InMemoryAccountStore
from services.errors import LabelAnalysisError, PreferencesValidationError
from services.extraction_service import ExtractionOrchestrator, LabelImage, LabelImages
from services.vision_service import get_vision_service


settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("LabelAPI")


# =============================================================================
# APP SETUP
# =============================================================================

app = FastAPI(
    title="What's In My Food API",
    description="Explainable analysis of packaged food labels",
    version="1.0.0",
)

# CORS for web and mobile clients
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# SERVICES
# =============================================================================

monitoring_service = MonitoringService(log_dir=settings.monitoring_log_dir)
ocr_service = LabelOCRService(
    TesseractOCREngine(
        tesseract_cmd=settings.tesseract_cmd,
        timeout_seconds=settings.ocr_timeout_seconds,
    ),
    timeout_seconds=settings.ocr_timeout_seconds,
)
extraction_orchestrator = ExtractionOrchestrator(
    ocr_service,
    get_vision_service(),
    monitoring=monitoring_service,
)
account_store: AccountStore = InMemoryAccountStore.with_demo_user()


# =============================================================================
# REQUEST MODELS
# =============================================================================

class UserPrefsInput(BaseModel):
    """Caller-supplied preferences; bypasses stored preferences."""
    model_config = ConfigDict(extra="ignore")

    userId: Optional[str] = None
    halalCheckEnabled: bool = False
    lowSodiumMgLimit: Optional[float] = None
    lowSugarGlimit: Optional[float] = None
    lowCarbGlimit: Optional[float] = None
    lowCalorieLimit: Optional[float] = None
    highProteinGtarget: Optional[float] = None
    vegetarian: Optional[bool] = None
    vegan: Optional[bool] = None
    sensitiveStomach: Optional[bool] = None
    allergens: List[str] = []

    def to_preferences(self) -> UserPreferences:
        return UserPreferences(
            user_id=self.userId,
            halal_check_enabled=self.halalCheckEnabled,
            low_sodium_mg_limit=self.lowSodiumMgLimit,
            low_sugar_g_limit=self.lowSugarGlimit,
            low_carb_g_limit=self.lowCarbGlimit,
            low_calorie_limit=self.lowCalorieLimit,
            high_protein_g_target=self.highProteinGtarget,
            vegetarian=self.vegetarian,
            vegan=self.vegan,
            sensitive_stomach=self.sensitiveStomach,
            allergens=[a for a in self.allergens if a and a.strip()],
        )


class MedicalConditionInput(BaseModel):
    type: ConditionType
    notes: Optional[str] = None


class ParsedInput(BaseModel):
    productName: Optional[str] = None
    ingredients: List[str] = []
    nutrition: Optional[Dict[str, Optional[float]]] = None
    confidences: Optional[Dict[str, float]] = None


class AnalyzeRequest(BaseModel):
    parsed: ParsedInput
    userPrefs: Optional[UserPrefsInput] = None
    userId: Optional[str] = None
    dietaryPreference: Optional[DietaryPreference] = None
    conditions: List[MedicalConditionInput] = []
    extractedText: Optional[Dict[str, Optional[str]]] = None


# =============================================================================
# ERROR HANDLING
# =============================================================================

@app.exception_handler(LabelAnalysisError)
async def label_error_handler(request: Request, exc: LabelAnalysisError):
    if exc.status_code >= 500:
        monitoring_service.log_api_error(request.url.path, str(exc), exc.status_code)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.user_message})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.info("Rejected request on %s: %s", request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"error": "Invalid request"})


@app.exception_handler(Exception)
async def server_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s", request.url.path)
    monitoring_service.log_api_error(request.url.path, repr(exc), 500)
    return JSONResponse(status_code=500, content={"error": "Server error"})


# =============================================================================
# HELPERS
# =============================================================================

async def _read_image(upload: Optional[UploadFile]) -> Optional[LabelImage]:
    """Read one optional upload, enforcing type and size limits."""
    if upload is None or not upload.filename:
        return None

    if upload.content_type and not upload.content_type.startswith("image/"):
        raise HTTPException(status_code=400, detail="Only image files are allowed")

    content = await upload.read()
    if len(content) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"Image too large (max {settings.max_upload_mb:g}MB)",
        )
    if not content:
        return None

    return LabelImage(data=content, mime_type=upload.content_type or "image/jpeg")


async def _collect_images(
    ingredients: Optional[UploadFile],
    nutrition: Optional[UploadFile],
    front: Optional[UploadFile],
) -> LabelImages:
    images = LabelImages(
        ingredients=await _read_image(ingredients),
        nutrition=await _read_image(nutrition),
        front=await _read_image(front),
    )
    if images.is_empty():
        raise HTTPException(status_code=400, detail="At least one label image is required.")
    return images


def _parse_user_prefs(raw: Optional[str]) -> Optional[UserPreferences]:
    """Validate the userPrefs form field (a JSON string)."""
    if raw is None or not raw.strip():
        return None
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        raise PreferencesValidationError("Invalid userPrefs JSON")
    if not isinstance(data, dict):
        raise PreferencesValidationError("Invalid userPrefs JSON")
    try:
        return UserPrefsInput.model_validate(data).to_preferences()
    except ValidationError:
        raise PreferencesValidationError("Invalid userPrefs values")


def _load_account(user_id: Optional[str]) -> Tuple[Optional[UserPreferences], Optional[HealthProfile]]:
    """Stored preferences and profile; store failures degrade to no data."""
    if not user_id:
        return None, None
    try:
        return account_store.get_preferences(user_id), account_store.get_profile(user_id)
    except Exception as e:
        logger.warning("Account store unavailable, skipping stored data for %s: %s", user_id, e)
        return None, None


# =============================================================================
# ROUTES
# =============================================================================

@app.get("/health")
async def health_check():
    """Liveness probe."""
    return {"status": "ok"}


@app.post("/extract")
async def extract_label(
    ingredientsImage: Optional[UploadFile] = File(None),
    nutritionImage: Optional[UploadFile] = File(None),
    frontImage: Optional[UploadFile] = File(None),
):
    """
    Read the label photos and return the parsed record.

    Returns:
        {extractedText, parsed, confidences}
    """
    images = await _collect_images(ingredientsImage, nutritionImage, frontImage)
    outcome = await run_in_threadpool(extraction_orchestrator.run, images)
    logger.info("Extraction finished via %s", outcome.source)
    return outcome.to_dict()


@app.post("/analyze-from-images")
async def analyze_from_images(
    ingredientsImage: Optional[UploadFile] = File(None),
    nutritionImage: Optional[UploadFile] = File(None),
    frontImage: Optional[UploadFile] = File(None),
    userPrefs: Optional[str] = Form(None),
    userId: Optional[str] = Form(None),
):
    """
    Full analysis from label photos.

    Flow:
    1. Validate uploads and userPrefs
    2. OCR (vision fallback on low confidence)
    3. Load stored preferences / profile for userId
    4. Run the explainable analysis
    """
    images = await _collect_images(ingredientsImage, nutritionImage, frontImage)
    caller_prefs = _parse_user_prefs(userPrefs)

    outcome = await run_in_threadpool(extraction_orchestrator.run, images, userId)

    stored_prefs, stored_profile = _load_account(userId)
    prefs = caller_prefs or stored_prefs
    profile = stored_profile or HealthProfile()

    result = analyze_from_parsed(outcome.parsed, prefs, outcome.extracted, profile)
    return result.to_dict()


@app.post("/analyze")
async def analyze(request: AnalyzeRequest):
    """
    Analyze already-parsed label data (no OCR).
    Suitability is reported only when a dietary preference, conditions,
    or a stored profile is available.
    """
    parsed = ParsedData.from_dict(request.parsed.model_dump())
    stored_prefs, stored_profile = _load_account(request.userId)

    prefs = request.userPrefs.to_preferences() if request.userPrefs else stored_prefs

    if request.dietaryPreference is not None or request.conditions:
        profile = HealthProfile(
            dietary_preference=request.dietaryPreference or DietaryPreference.NONE,
            conditions=[MedicalCondition(c.type, c.notes) for c in request.conditions],
        )
    else:
        profile = stored_profile

    extracted = OCRExtraction.from_dict(request.extractedText) if request.extractedText else None
    return analyze_from_parsed(parsed, prefs, extracted, profile).to_dict()


# =============================================================================
# RUN
# =============================================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
