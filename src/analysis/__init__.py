# Analysis Package - composes the pure pipeline
from .orchestrator import analyze_from_parsed, build_ingredient_breakdown, DISCLAIMER

__all__ = [
    "analyze_from_parsed",
    "build_ingredient_breakdown",
    "DISCLAIMER",
]
