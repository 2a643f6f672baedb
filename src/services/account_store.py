"""
Account Store

Read-side view of user accounts consumed by the analysis endpoints:
stored preferences plus the dietary preference / medical conditions.
Account and auth storage live elsewhere; this module only defines the
interface and an in-memory implementation for development and tests.
"""

import threading
from abc import ABC, abstractmethod
from typing import Dict, Optional

from models.user import (
    ConditionType,
    DietaryPreference,
    HealthProfile,
    MedicalCondition,
    UserPreferences,
)

DEMO_USER_ID = "demo-user-1"


class AccountStore(ABC):
    """Lookup of stored data by user id. Returns None for unknown users."""

    @abstractmethod
    def get_preferences(self, user_id: str) -> Optional[UserPreferences]:
        ...

    @abstractmethod
    def get_profile(self, user_id: str) -> Optional[HealthProfile]:
        ...


class InMemoryAccountStore(AccountStore):
    """
    Dict-backed store, safe for concurrent readers and writers.

    Usage:
        store = InMemoryAccountStore.with_demo_user()
        prefs = store.get_preferences("demo-user-1")
    """

    def __init__(self):
        self._preferences: Dict[str, UserPreferences] = {}
        self._profiles: Dict[str, HealthProfile] = {}
        self._lock = threading.Lock()

    @classmethod
    def with_demo_user(cls) -> "InMemoryAccountStore":
        store = cls()
        store.save(
            DEMO_USER_ID,
            UserPreferences(
                user_id=DEMO_USER_ID,
                halal_check_enabled=True,
                low_sodium_mg_limit=200,
                low_sugar_g_limit=10,
                low_carb_g_limit=30,
                low_calorie_limit=200,
                high_protein_g_target=10,
                vegetarian=False,
                vegan=False,
                sensitive_stomach=True,
            ),
            HealthProfile(dietary_preference=DietaryPreference.HALAL),
        )
        return store

    def save(
        self,
        user_id: str,
        preferences: Optional[UserPreferences] = None,
        profile: Optional[HealthProfile] = None,
    ) -> None:
        with self._lock:
            if preferences is not None:
                self._preferences[user_id] = preferences
            if profile is not None:
                self._profiles[user_id] = profile

    def add_condition(self, user_id: str, condition_type: ConditionType, notes: Optional[str] = None) -> HealthProfile:
        """Append a medical condition to a user's profile (creating it if needed)."""
        with self._lock:
            profile = self._profiles.get(user_id, HealthProfile())
            updated = HealthProfile(
                dietary_preference=profile.dietary_preference,
                conditions=list(profile.conditions) + [MedicalCondition(condition_type, notes)],
            )
            self._profiles[user_id] = updated
            return updated

    def get_preferences(self, user_id: str) -> Optional[UserPreferences]:
        with self._lock:
            return self._preferences.get(user_id)

    def get_profile(self, user_id: str) -> Optional[HealthProfile]:
        with self._lock:
            return self._profiles.get(user_id)
