# Rules Package - deterministic, explainable classifiers
from .halal import classify_halal
from .scoring import BASELINE, SCORE_RULES, ScoreRule, score_from_parsed, categorize
from .flags import evaluate_flags, NUMERIC_FLAGS
from .suitability import evaluate_suitability

__all__ = [
    "classify_halal",
    "BASELINE",
    "SCORE_RULES",
    "ScoreRule",
    "score_from_parsed",
    "categorize",
    "evaluate_flags",
    "NUMERIC_FLAGS",
    "evaluate_suitability",
]
