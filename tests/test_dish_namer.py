"""
Unit Tests for the Dish-Name Inferencer
"""

import pytest
from intelligence.dish_namer import detect_groups, guess_dish_name, is_generic_name


class TestGenericNames:

    @pytest.mark.parametrize("name", [None, "", "  ", "Food", "likely sandwich", "BURGER", "meal"])
    def test_generic(self, name):
        assert is_generic_name(name)

    def test_specific(self):
        assert not is_generic_name("Chicken Tikka Wrap")


class TestGuessDishName:
    """Heuristics are checked in a fixed order; the first match wins."""

    def test_usable_name_wins(self):
        assert guess_dish_name("  Tomato Soup ", ["rice", "chicken"]) == "Tomato Soup"

    @pytest.mark.parametrize("ingredients,expected", [
        (["basmati rice", "chicken", "yogurt"], "Likely chicken biryani"),
        (["rice", "chicken thigh", "cardamom"], "Likely chicken biryani"),
        (["sesame bun", "beef sausage"], "Likely sesame sausage sandwich"),
        (["white bread", "tomato", "lettuce"], "Likely sausage sandwich"),
        (["bread", "sesame seeds"], "Likely sesame bread sandwich"),
        (["rice", "chicken"], "Likely chicken and rice dish"),
        (["brown rice", "peas"], "Likely rice-based dish"),
        (["grilled chicken", "salad"], "Likely chicken dish"),
    ])
    def test_heuristics(self, ingredients, expected):
        assert guess_dish_name("food", ingredients) == expected

    def test_no_match(self):
        assert guess_dish_name(None, ["water", "salt"]) is None
        assert guess_dish_name("sandwich", []) is None

    def test_detect_groups(self):
        assert detect_groups(["Basmati Rice", "pickled jalapenos"]) == {"rice", "pickle"}
