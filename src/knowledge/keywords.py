"""
Keyword Tables

Versioned keyword lists used by the halal classifier, the flag evaluator,
the suitability rules and the dish-name heuristics. Kept as data so each
keyword's effect can be enumerated in tests.
"""

from types import MappingProxyType

KEYWORDS_VERSION = "2026.1"


# =============================================================================
# HALAL
# =============================================================================

# Pork, alcohol and non-halal slaughter markers (any match => haram)
HALAL_DISQUALIFYING = (
    "pork",
    "porcine",
    "swine",
    "bacon",
    "ham",
    "lard",
    "pancetta",
    "prosciutto",
    "pepperoni",
    "alcohol",
    "wine",
    "beer",
    "rum",
    "brandy",
    "liqueur",
    "non-halal",
    "non halal",
    "not halal",
    "blood plasma",
)

# Compounds that contain a disqualifying word but are not derived from it
HALAL_BENIGN_COMPOUNDS = (
    "sugar alcohol",
    "cetyl alcohol",
    "cetearyl alcohol",
    "stearyl alcohol",
    "benzyl alcohol",
    "non-alcoholic",
    "non alcoholic",
)

# Explicit certification markers
HALAL_QUALIFYING = (
    "certified halal",
    "halal certified",
    "halal",
)

# Ingredients whose source decides the verdict but is rarely printed
HALAL_UNCERTAIN = (
    "gelatin",
    "gelatine",
    "rennet",
    "enzymes",
    "mono- and diglycerides",
    "mono and diglycerides",
    "e471",
    "glycerin",
    "natural flavor",
    "natural flavour",
    "shortening",
    "l-cysteine",
)


# =============================================================================
# DIET FLAGS
# =============================================================================

VEGETARIAN_DISQUALIFYING = (
    "chicken", "beef", "pork", "fish", "meat", "lamb", "mutton", "turkey",
    "bacon", "ham", "sausage", "salami", "pepperoni", "anchovy", "tuna",
    "shrimp", "prawn", "gelatin", "gelatine", "lard", "tallow", "carmine",
)
VEGETARIAN_AMBIGUOUS = (
    "rennet", "enzymes", "natural flavor", "natural flavour",
)

VEGAN_DISQUALIFYING = VEGETARIAN_DISQUALIFYING + (
    "egg", "milk", "cheese", "butter", "yogurt", "yoghurt", "cream", "whey",
    "casein", "ghee", "honey", "lactose",
)
VEGAN_AMBIGUOUS = VEGETARIAN_AMBIGUOUS + (
    "mono- and diglycerides", "mono and diglycerides", "e471", "glycerin",
    "vitamin d3", "lecithin",
)

# Keyword -> allergen group named in explanations
COMMON_ALLERGENS = MappingProxyType({
    "peanut": "peanuts",
    "groundnut": "peanuts",
    "almond": "tree nuts",
    "walnut": "tree nuts",
    "cashew": "tree nuts",
    "hazelnut": "tree nuts",
    "pistachio": "tree nuts",
    "pecan": "tree nuts",
    "milk": "milk",
    "whey": "milk",
    "casein": "milk",
    "cheese": "milk",
    "butter": "milk",
    "cream": "milk",
    "lactose": "milk",
    "egg": "egg",
    "wheat": "wheat/gluten",
    "gluten": "wheat/gluten",
    "barley": "wheat/gluten",
    "rye": "wheat/gluten",
    "soy": "soy",
    "soya": "soy",
    "fish": "fish",
    "anchovy": "fish",
    "shrimp": "shellfish",
    "prawn": "shellfish",
    "crab": "shellfish",
    "lobster": "shellfish",
    "sesame": "sesame",
    "mustard": "mustard",
    "sulphite": "sulphites",
    "sulfite": "sulphites",
})

# Common digestive irritants for the sensitive-stomach flag
STOMACH_IRRITANTS = (
    "chili", "chilli", "jalapeno", "capsaicin", "cayenne", "hot sauce",
    "garlic", "onion", "sorbitol", "maltitol", "xylitol", "mannitol",
    "inulin", "chicory root", "caffeine", "carbonated",
)


# =============================================================================
# SUITABILITY RULES
# =============================================================================

MEAT_OR_FISH = ("chicken", "beef", "pork", "fish", "meat")

ANIMAL_PRODUCTS = MEAT_OR_FISH + (
    "egg", "milk", "cheese", "butter", "yogurt",
)

HIGH_FAT = ("sausage", "salami", "lard", "butter")

GLUTEN_SOURCES = ("wheat", "bread", "barley", "gluten")


# =============================================================================
# DISH NAMES
# =============================================================================

GENERIC_DISH_NAMES = frozenset([
    "sandwich",
    "likely sandwich",
    "burger",
    "likely burger",
    "meal",
    "dish",
    "food",
    "likely food",
])

# Ingredient groups used by the dish heuristics (any keyword in the group counts)
DISH_INGREDIENT_GROUPS = MappingProxyType({
    "rice": ("rice", "basmati"),
    "chicken": ("chicken",),
    "yogurt": ("yogurt",),
    "spice": ("spice", "cardamom"),
    "bread": ("bread", "bun"),
    "sesame": ("sesame",),
    "sausage": ("sausage", "salami"),
    "pickle": ("pickle", "jalape"),
    "tomato": ("tomato",),
})

# Ordered (label, required groups); each requirement is a tuple of
# alternatives, at least one of which must be present.
DISH_HEURISTICS = (
    ("Likely chicken biryani", (("rice",), ("chicken",), ("yogurt", "spice"))),
    ("Likely sesame sausage sandwich", (("bread",), ("sausage", "pickle", "tomato"), ("sesame",))),
    ("Likely sausage sandwich", (("bread",), ("sausage", "pickle", "tomato"))),
    ("Likely sesame bread sandwich", (("bread",), ("sesame",))),
    ("Likely chicken and rice dish", (("rice",), ("chicken",))),
    ("Likely rice-based dish", (("rice",),)),
    ("Likely chicken dish", (("chicken",),)),
)
