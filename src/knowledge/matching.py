"""
Keyword matching helpers shared by the classifiers.
"""

import re
from functools import lru_cache
from typing import Iterable, List, Optional, Tuple

# Plant-based phrases that contain an animal keyword
PLANT_BASED_PHRASES = (
    "peanut butter",
    "cocoa butter",
    "shea butter",
    "nut butter",
    "coconut milk",
    "coconut cream",
    "almond milk",
    "oat milk",
    "soy milk",
    "soya milk",
    "rice milk",
    "cream of tartar",
)


# "no pork", "free from pork and lard", "0% alcohol", "alcohol-free"
_NEGATED_PHRASE = re.compile(
    r"(?:\b(?:no|zero|without|free\s+(?:from|of))\s+|(?<![\d.])0\s*%\s*)"
    r"(?:added\s+)?[a-z-]+(?:\s*(?:,|/|&|\band\b|\bor\b)\s*[a-z-]+)*"
    r"|\b[a-z]+(?:\s*-\s*|\s+)free\b(?!\s*-?\s*range)"
)


@lru_cache(maxsize=512)
def _keyword_pattern(keyword: str) -> "re.Pattern":
    # Whole-word match, tolerant of a plural suffix
    return re.compile(rf"(?<![a-z]){re.escape(keyword)}(?:s|es)?(?![a-z])")


def has_keyword(text: str, keyword: str) -> bool:
    """True if keyword appears in text as a whole word (plural allowed)."""
    return bool(_keyword_pattern(keyword.lower()).search((text or "").lower()))


def strip_phrases(text: str, phrases: Iterable[str]) -> str:
    lowered = (text or "").lower()
    for phrase in phrases:
        lowered = lowered.replace(phrase, " ")
    return lowered


def strip_plant_based_phrases(text: str) -> str:
    return strip_phrases(text, PLANT_BASED_PHRASES)


def strip_negated_phrases(text: str) -> str:
    """Remove claims of absence ("no pork", "alcohol-free") from label text."""
    return _NEGATED_PHRASE.sub(" ", (text or "").lower())


def find_keyword_matches(
    texts: Iterable[str],
    keywords: Iterable[str],
    ignore_plant_based: bool = False,
    ignore_negated: bool = False,
    exempt_phrases: Iterable[str] = (),
) -> List[Tuple[str, str]]:
    """
    Return (keyword, text) pairs for every keyword found.

    Texts are scanned in order; each keyword is reported once, with the
    first text it was found in.

    Args:
        ignore_plant_based: Skip phrases like "peanut butter"
        ignore_negated: Skip claims of absence like "no pork"
        exempt_phrases: Compounds that never count as a match
    """
    exempt_phrases = tuple(exempt_phrases)
    matches: List[Tuple[str, str]] = []
    seen = set()
    for text in texts:
        haystack = strip_plant_based_phrases(text) if ignore_plant_based else (text or "").lower()
        if exempt_phrases:
            haystack = strip_phrases(haystack, exempt_phrases)
        if ignore_negated:
            haystack = strip_negated_phrases(haystack)
        for keyword in keywords:
            if keyword in seen:
                continue
            if has_keyword(haystack, keyword):
                seen.add(keyword)
                matches.append((keyword, text))
    return matches


def first_substring_match(items: Iterable[str], terms: Iterable[str]) -> Optional[Tuple[str, str]]:
    """First (term, item) where term is a plain substring of item."""
    terms = tuple(terms)
    for item in items:
        lowered = (item or "").lower()
        for term in terms:
            if term and term in lowered:
                return term, item
    return None
