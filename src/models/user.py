"""
User Preference Models

Defines dietary preferences, medical conditions and personal thresholds.
This data drives the flag evaluator and the suitability rules.
"""

from dataclasses import dataclass, field
from typing import List, Optional
from enum import Enum


class ConditionType(Enum):
    """
    Supported medical conditions.
    Each condition maps to one fixed suitability rule (some are informational only).
    """
    DIABETES = "diabetes"
    HYPERTENSION = "hypertension"
    HEART_DISEASE = "heart_disease"
    HIGH_CHOLESTEROL = "high_cholesterol"
    CELIAC = "celiac"
    ALLERGY = "allergy"
    KIDNEY_DISEASE = "kidney_disease"
    OTHER = "other"


class DietaryPreference(Enum):
    """Diet the user follows."""
    HALAL = "halal"
    VEGETARIAN = "vegetarian"
    VEGAN = "vegan"
    NONE = "none"


@dataclass(frozen=True)
class MedicalCondition:
    """
    A condition from the user's profile.
    Notes are free text; for allergy they are the allergen list (comma or semicolon separated).
    """
    type: ConditionType
    notes: Optional[str] = None

    def to_dict(self) -> dict:
        return {"type": self.type.value, "notes": self.notes}

    @classmethod
    def from_dict(cls, data: dict) -> "MedicalCondition":
        return cls(type=ConditionType(data["type"]), notes=data.get("notes"))


@dataclass(frozen=True)
class UserPreferences:
    """
    Personal thresholds and diet switches.

    A missing threshold means "not set": the matching flag reports unknown
    instead of passing.

    Only sensitive_stomach gates its flag. halal_check_enabled, vegetarian
    and vegan are account settings kept for the client; the halal,
    vegetarian and vegan flags are always evaluated, and dietary
    suitability comes from HealthProfile.dietary_preference.
    """
    user_id: Optional[str] = None
    halal_check_enabled: bool = False

    # Numeric thresholds
    low_sodium_mg_limit: Optional[float] = None
    low_sugar_g_limit: Optional[float] = None
    low_carb_g_limit: Optional[float] = None
    low_calorie_limit: Optional[float] = None
    high_protein_g_target: Optional[float] = None

    # Diet switches
    vegetarian: Optional[bool] = None
    vegan: Optional[bool] = None
    sensitive_stomach: Optional[bool] = None

    # User-declared allergen keywords (empty = use the common allergen list)
    allergens: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "userId": self.user_id,
            "halalCheckEnabled": self.halal_check_enabled,
            "lowSodiumMgLimit": self.low_sodium_mg_limit,
            "lowSugarGlimit": self.low_sugar_g_limit,
            "lowCarbGlimit": self.low_carb_g_limit,
            "lowCalorieLimit": self.low_calorie_limit,
            "highProteinGtarget": self.high_protein_g_target,
            "vegetarian": self.vegetarian,
            "vegan": self.vegan,
            "sensitiveStomach": self.sensitive_stomach,
            "allergens": list(self.allergens),
        }


@dataclass(frozen=True)
class HealthProfile:
    """
    Account-store view of a user used by the suitability rules.
    """
    dietary_preference: DietaryPreference = DietaryPreference.NONE
    conditions: List[MedicalCondition] = field(default_factory=list)

    def has_condition(self, condition: ConditionType) -> bool:
        """Check if the profile lists a specific condition."""
        return any(c.type == condition for c in self.conditions)
