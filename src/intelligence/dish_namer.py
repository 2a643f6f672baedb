"""
Dish-Name Inferencer

Best-effort product naming for vision estimates and unlabeled food.
A usable given name always wins; otherwise the first matching ingredient
heuristic supplies a "Likely ..." label. This is heuristic naming, not
image classification.
"""

from typing import Optional, Sequence, Set

from knowledge.keywords import DISH_HEURISTICS, DISH_INGREDIENT_GROUPS, GENERIC_DISH_NAMES


def is_generic_name(name: Optional[str]) -> bool:
    """True for missing names and names on the generic blocklist."""
    cleaned = (name or "").strip().lower()
    return not cleaned or cleaned in GENERIC_DISH_NAMES


def detect_groups(ingredients: Sequence[str]) -> Set[str]:
    """Ingredient groups present, by substring match on any ingredient."""
    text = " ".join(i.lower() for i in ingredients if i)
    return {
        group
        for group, terms in DISH_INGREDIENT_GROUPS.items()
        if any(term in text for term in terms)
    }


def guess_dish_name(product_name: Optional[str], ingredients: Sequence[str]) -> Optional[str]:
    """
    Return the given name when usable, else the first heuristic label.

    Examples:
        guess_dish_name("Tomato Soup", [])                     -> "Tomato Soup"
        guess_dish_name("food", ["basmati rice", "chicken"])   -> "Likely chicken and rice dish"
        guess_dish_name(None, ["water"])                       -> None
    """
    if not is_generic_name(product_name):
        return product_name.strip()

    present = detect_groups(ingredients or [])
    for label, requirements in DISH_HEURISTICS:
        if all(any(group in present for group in options) for options in requirements):
            return label

    return None
