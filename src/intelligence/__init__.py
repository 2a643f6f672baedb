# Intelligence Package - heuristic naming
from .dish_namer import guess_dish_name, is_generic_name, detect_groups

__all__ = [
    "guess_dish_name",
    "is_generic_name",
    "detect_groups",
]
