"""
Halal Classifier

Keyword scan of ingredient tokens (and optionally the front-of-pack text).

Policy, in priority order:
1. Any disqualifying term  -> haram (names the terms; "no pork" and
                              "sugar alcohol" do not count)
2. Any certification term  -> halal
3. No ingredient data      -> unknown
4. Otherwise               -> unclear
"""

from typing import List, Optional, Sequence

from knowledge import keywords
from knowledge.matching import find_keyword_matches
from models.analysis import HalalClassification, HalalStatus

MAX_CONFIDENCE = 0.95


def _scaled(base: float, matches: int) -> float:
    """Confidence grows by 0.1 per corroborating match, capped below 1."""
    return round(min(MAX_CONFIDENCE, base + 0.1 * (matches - 1)), 2)


def classify_halal(
    ingredients: Sequence[str],
    front_text: Optional[str] = None,
) -> HalalClassification:
    """
    Classify a product's halal status.

    Args:
        ingredients: Normalized ingredient tokens
        front_text: Front-of-pack text; certification logos often only appear there

    Returns:
        HalalClassification with status, confidence and matched terms
    """
    texts: List[str] = [i for i in ingredients if i]
    if front_text and front_text.strip():
        texts.append(front_text)

    haram_terms = [
        kw for kw, _ in find_keyword_matches(
            texts, keywords.HALAL_DISQUALIFYING,
            ignore_negated=True, exempt_phrases=keywords.HALAL_BENIGN_COMPOUNDS,
        )
    ]
    if haram_terms:
        return HalalClassification(
            status=HalalStatus.HARAM,
            confidence=_scaled(0.7, len(haram_terms)),
            explanation=f"Contains non-halal ingredient(s): {', '.join(haram_terms)}.",
            matched_terms=haram_terms,
        )

    halal_terms = [kw for kw, _ in find_keyword_matches(texts, keywords.HALAL_QUALIFYING)]
    if halal_terms:
        return HalalClassification(
            status=HalalStatus.HALAL,
            confidence=_scaled(0.6, len(halal_terms)),
            explanation="Label carries a halal certification marker.",
            matched_terms=halal_terms,
        )

    if not any(i for i in ingredients):
        return HalalClassification(
            status=HalalStatus.UNKNOWN,
            confidence=0.0,
            explanation="No ingredient data to check.",
        )

    uncertain = [
        kw for kw, _ in find_keyword_matches(texts, keywords.HALAL_UNCERTAIN, ignore_negated=True)
    ]
    if uncertain:
        return HalalClassification(
            status=HalalStatus.UNCLEAR,
            confidence=0.4,
            explanation=(
                f"Source of {', '.join(uncertain)} is not stated; "
                "halal status cannot be confirmed."
            ),
            matched_terms=uncertain,
        )

    return HalalClassification(
        status=HalalStatus.UNCLEAR,
        confidence=0.3,
        explanation="No haram ingredients found, but no halal certification either.",
    )
