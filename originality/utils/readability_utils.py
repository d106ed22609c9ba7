import math
import re

from originality.schemas.report_schemas import Readability
from originality.utils.lexical_utils import segment_sentences

_VOWEL_GROUPS = re.compile(r"[aeiouy]+", re.IGNORECASE)

# (upper bound, level), checked in order
_LEVELS = [
    (10, "Very Difficult"),
    (30, "Difficult"),
    (50, "Fairly Difficult"),
    (60, "Standard"),
]


def count_syllables(text: str) -> int:
    # vowel groups approximate syllables
    return len(_VOWEL_GROUPS.findall(text))


def readability_level(score: float) -> str:
    for bound, level in _LEVELS:
        if score < bound:
            return level
    return "Very Easy"


def calculate_readability(text: str) -> Readability:
    """Simplified Flesch reading ease."""
    sentences = segment_sentences(text)
    words = text.split()
    if not sentences or not words:
        return Readability(score=0, level="Unknown")

    words_per_sentence = len(words) / len(sentences)
    syllables_per_word = count_syllables(text) / len(words)
    score = 206.835 - 1.015 * words_per_sentence - 84.6 * syllables_per_word
    return Readability(score=math.floor(score + 0.5), level=readability_level(score))
