# Knowledge Package - static lookup tables (read-only)
from .glossary import GlossaryEntry, GLOSSARY, CAUTION_TAGS, find_glossary_match
from .matching import has_keyword, find_keyword_matches
from . import keywords

__all__ = [
    "GlossaryEntry",
    "GLOSSARY",
    "CAUTION_TAGS",
    "find_glossary_match",
    "has_keyword",
    "find_keyword_matches",
    "keywords",
]
