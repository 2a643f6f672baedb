# Models Package
from .nutrition import NutritionFacts, calculate_calories_per_50g
from .extraction import OCRExtraction, ParsedConfidences, ParsedData
from .user import (
    ConditionType,
    DietaryPreference,
    MedicalCondition,
    UserPreferences,
    HealthProfile,
)
from .analysis import (
    IngredientStatus,
    HalalStatus,
    FlagStatus,
    Verdict,
    IngredientBreakdown,
    HalalClassification,
    ScoreExplanation,
    ScoreResult,
    PersonalizedFlag,
    SuitabilityResult,
    AnalysisResult,
)

__all__ = [
    # Label data
    "NutritionFacts", "calculate_calories_per_50g",
    "OCRExtraction", "ParsedConfidences", "ParsedData",
    # User
    "ConditionType", "DietaryPreference", "MedicalCondition",
    "UserPreferences", "HealthProfile",
    # Results
    "IngredientStatus", "HalalStatus", "FlagStatus", "Verdict",
    "IngredientBreakdown", "HalalClassification", "ScoreExplanation",
    "ScoreResult", "PersonalizedFlag", "SuitabilityResult", "AnalysisResult",
]
