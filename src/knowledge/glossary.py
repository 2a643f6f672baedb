"""
Ingredient Glossary

Small curated lookup from ingredient names to plain-language descriptions
and classification tags. Not a nutrition database: unmatched ingredients are
reported as unknown detail, never guessed.
"""

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Optional, Tuple


# Tags that make an ingredient a "caution" item in the breakdown
CAUTION_TAGS = frozenset([
    "added_sugar",
    "high_sodium",
    "dye",
    "ultra_processed",
    "trans_fat",
])


@dataclass(frozen=True)
class GlossaryEntry:
    """Descriptive record for one ingredient."""
    name: str
    plain_english: str
    purpose: str
    who_might_care: str
    tags: Tuple[str, ...] = ()
    aliases: Tuple[str, ...] = ()

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags


_ENTRIES = (
    # Sweeteners
    GlossaryEntry(
        "sugar", "Refined sugar from cane or beet.", "Sweetness, browning and texture.",
        "People limiting added sugar or managing blood glucose.",
        ("added_sugar",), ("cane sugar", "sucrose", "beet sugar", "brown sugar"),
    ),
    GlossaryEntry(
        "glucose syrup", "Syrup made by breaking down starch into glucose.",
        "Sweetness and softness; stops sugar crystallising.",
        "People limiting added sugar or managing blood glucose.",
        ("added_sugar", "ultra_processed"), ("glucose", "corn syrup", "dextrose"),
    ),
    GlossaryEntry(
        "high fructose corn syrup", "Corn syrup processed to raise its fructose content.",
        "Cheap sweetener that keeps products moist.",
        "People limiting added sugar.",
        ("added_sugar", "ultra_processed"), ("hfcs", "glucose-fructose syrup"),
    ),
    GlossaryEntry(
        "honey", "Sweet syrup made by bees.", "Sweetness and flavor.",
        "Vegans and people limiting added sugar.",
        ("added_sugar",),
    ),
    GlossaryEntry(
        "maltodextrin", "Starch broken into short sugar chains.",
        "Bulking agent and thickener.", "People managing blood glucose.",
        ("ultra_processed",),
    ),
    GlossaryEntry(
        "aspartame", "Artificial high-intensity sweetener.", "Sweetness without calories.",
        "People with phenylketonuria (PKU).",
        ("ultra_processed",), ("e951",),
    ),
    GlossaryEntry(
        "sorbitol", "Sugar alcohol.", "Sweetness and moisture with fewer calories.",
        "People with sensitive digestion; large amounts can cause bloating.",
        (), ("e420",),
    ),

    # Salt
    GlossaryEntry(
        "salt", "Sodium chloride.", "Flavor and preservation.",
        "People watching sodium or blood pressure.",
        ("high_sodium",), ("sea salt", "sodium chloride"),
    ),
    GlossaryEntry(
        "monosodium glutamate", "Sodium salt of glutamic acid.", "Savory (umami) flavor boost.",
        "People watching sodium or sensitive to MSG.",
        ("high_sodium",), ("msg", "e621", "flavour enhancer", "flavor enhancer"),
    ),
    GlossaryEntry(
        "sodium nitrite", "Curing salt.", "Keeps cured meat pink and prevents bacterial growth.",
        "People limiting processed meat or sodium.",
        ("high_sodium", "ultra_processed"), ("e250",),
    ),

    # Fats
    GlossaryEntry(
        "palm oil", "Vegetable oil from the fruit of the oil palm.",
        "Cheap fat that stays solid at room temperature.",
        "People limiting saturated fat or concerned about deforestation.",
        ("ultra_processed",), ("palm fat", "palm kernel oil"),
    ),
    GlossaryEntry(
        "partially hydrogenated oil", "Oil hardened by adding hydrogen; a source of trans fat.",
        "Longer shelf life and firmer texture.", "Anyone concerned about heart health.",
        ("trans_fat", "ultra_processed"),
        ("hydrogenated vegetable oil", "hydrogenated oil", "vegetable shortening"),
    ),
    GlossaryEntry(
        "sunflower oil", "Oil pressed from sunflower seeds.", "Cooking fat and texture.",
        "Generally well tolerated.",
    ),
    GlossaryEntry(
        "olive oil", "Oil pressed from olives.", "Flavor and cooking fat.",
        "Generally well tolerated.",
        ("whole_food",), ("extra virgin olive oil",),
    ),
    GlossaryEntry(
        "butter", "Dairy fat churned from cream.", "Flavor and richness.",
        "Vegans, people avoiding dairy, or limiting saturated fat.",
    ),
    GlossaryEntry(
        "lard", "Rendered pork fat.", "Flakiness and flavor.",
        "Muslims, Jews, vegetarians and vegans.",
    ),

    # Additives
    GlossaryEntry(
        "gelatin", "Protein made from animal skin or bones.", "Gelling and chewiness.",
        "Vegetarians, vegans, and people who need halal or kosher sourcing.",
        ("uncertain_source",), ("gelatine",),
    ),
    GlossaryEntry(
        "mono- and diglycerides", "Emulsifiers made from plant or animal fats.",
        "Keep oil and water mixed; soften texture.",
        "People who need to know the fat source (halal, vegan).",
        ("ultra_processed", "uncertain_source"),
        ("mono and diglycerides", "e471", "mono- and diglycerides of fatty acids"),
    ),
    GlossaryEntry(
        "soy lecithin", "Emulsifier extracted from soybeans.", "Keeps ingredients blended.",
        "People with soy allergy.",
        (), ("lecithin", "e322", "soya lecithin"),
    ),
    GlossaryEntry(
        "natural flavor", "Flavoring derived from plant or animal sources.", "Taste.",
        "People who need to know the exact source (vegan, halal, allergies).",
        ("uncertain_source",), ("natural flavour", "natural flavors", "natural flavourings"),
    ),
    GlossaryEntry(
        "artificial flavor", "Lab-made flavoring compounds.", "Taste.",
        "People avoiding highly processed foods.",
        ("ultra_processed",), ("artificial flavour", "flavouring", "flavoring"),
    ),
    GlossaryEntry(
        "red 40", "Synthetic red dye (Allura Red).", "Color.",
        "Parents of children sensitive to artificial colors.",
        ("dye",), ("allura red", "e129", "red 40 lake"),
    ),
    GlossaryEntry(
        "yellow 5", "Synthetic yellow dye (Tartrazine).", "Color.",
        "People sensitive to artificial colors.",
        ("dye",), ("tartrazine", "e102"),
    ),
    GlossaryEntry(
        "caramel color", "Coloring made by heating sugars.", "Brown color.",
        "People avoiding processed additives.",
        ("dye",), ("caramel colour", "e150d", "e150a"),
    ),
    GlossaryEntry(
        "carmine", "Red color made from crushed insects.", "Color.",
        "Vegetarians, vegans and people with carmine allergy.",
        ("dye",), ("cochineal", "e120"),
    ),
    GlossaryEntry(
        "sodium benzoate", "Preservative.", "Prevents mold and yeast growth.",
        "People avoiding preservatives.",
        ("ultra_processed",), ("e211",),
    ),
    GlossaryEntry(
        "xanthan gum", "Thickener made by fermenting sugar.", "Thickens and stabilizes.",
        "Generally well tolerated.",
        (), ("e415",),
    ),
    GlossaryEntry(
        "citric acid", "Acid found in citrus fruit, usually made by fermentation.",
        "Tartness and preservation.", "Generally well tolerated.",
        (), ("e330",),
    ),

    # Whole foods
    GlossaryEntry(
        "wheat flour", "Flour milled from wheat.", "Structure and bulk.",
        "People with celiac disease or wheat allergy.",
        (), ("enriched wheat flour", "refined wheat flour", "wheat"),
    ),
    GlossaryEntry(
        "whole grain oats", "Whole oat kernels.", "Fiber and texture.",
        "People with celiac disease should check for gluten-free labeling.",
        ("whole_food",), ("oats", "rolled oats", "oat flakes"),
    ),
    GlossaryEntry(
        "milk", "Dairy milk or milk solids.", "Creaminess and protein.",
        "People with milk allergy, lactose intolerance, or vegans.",
        (), ("skimmed milk powder", "milk powder", "whole milk", "milk solids"),
    ),
    GlossaryEntry(
        "egg", "Chicken egg.", "Binding, structure and richness.",
        "People with egg allergy and vegans.",
        (), ("eggs", "egg white", "egg yolk", "whole egg"),
    ),
    GlossaryEntry(
        "peanuts", "Legume commonly treated as a nut.", "Flavor, protein and crunch.",
        "People with peanut allergy.",
        ("whole_food",), ("peanut", "groundnuts"),
    ),
    GlossaryEntry(
        "tomato", "Tomato fruit, paste or puree.", "Flavor and color.",
        "Generally well tolerated.",
        ("whole_food",), ("tomatoes", "tomato paste", "tomato puree"),
    ),
    GlossaryEntry(
        "chickpeas", "Legume rich in protein and fiber.", "Body and protein.",
        "Generally well tolerated.",
        ("whole_food",), ("chickpea", "garbanzo beans"),
    ),
    GlossaryEntry(
        "water", "Water.", "Moisture and texture.", "Nobody in particular.",
    ),
    GlossaryEntry(
        "cocoa", "Powder or mass from roasted cocoa beans.", "Chocolate flavor.",
        "People limiting caffeine.",
        (), ("cocoa powder", "cocoa mass", "cocoa solids"),
    ),
)


def _normalize(name: str) -> str:
    return re.sub(r"\s+", " ", (name or "").strip().lower())


def _build_index(entries) -> MappingProxyType:
    index = {}
    for entry in entries:
        for key in (entry.name,) + entry.aliases:
            index[_normalize(key)] = entry
    return MappingProxyType(index)


# Read-only after import
GLOSSARY = _build_index(_ENTRIES)

# Longest keys first so "palm kernel oil" wins over "palm oil"
_KEYS_BY_LENGTH = tuple(sorted(GLOSSARY.keys(), key=len, reverse=True))


def find_glossary_match(ingredient: str) -> Optional[GlossaryEntry]:
    """
    Look up an ingredient.

    Tries an exact name/alias match first, then the longest glossary key
    that appears as whole words inside the ingredient
    (e.g. "pork gelatin" -> gelatin).
    """
    normalized = _normalize(ingredient)
    if not normalized:
        return None

    entry = GLOSSARY.get(normalized)
    if entry is not None:
        return entry

    for key in _KEYS_BY_LENGTH:
        if re.search(rf"(?<![\w-]){re.escape(key)}(?![\w-])", normalized):
            return GLOSSARY[key]

    return None


def all_entries() -> Tuple[GlossaryEntry, ...]:
    return _ENTRIES
