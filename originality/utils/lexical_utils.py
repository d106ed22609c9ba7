import math
import re
from collections import Counter
from functools import lru_cache
from typing import List, Sequence

from nltk.tokenize import RegexpTokenizer
from nltk.util import ngrams
from rapidfuzz.distance import Levenshtein

from originality.config import (
    LEXICAL_OVERLAP_WEIGHT,
    DISTRIBUTIONAL_WEIGHT,
    CHARACTER_ORDER_WEIGHT,
    SIMILARITY_CACHE_SIZE,
    MIN_SENTENCE_LENGTH,
    KEY_PHRASE_MIN_WORDS,
    MAX_SEARCH_PHRASES,
)
from originality.schemas.report_schemas import TextFragment

# letters and digits only; underscore is a separator
_word_tokenizer = RegexpTokenizer(r"[^\W_]+")
_SENTENCE_TERMINATORS = re.compile(r"[.!?]+")


def _ensure_text(*values) -> None:
    for v in values:
        if not isinstance(v, str):
            raise TypeError(f"expected str, got {type(v).__name__}")


def tokenize(fragment: str) -> List[str]:
    """Lowercase word tokens with all non-alphanumeric characters removed."""
    _ensure_text(fragment)
    return _word_tokenizer.tokenize(fragment.lower())


def jaccard_similarity(a: str, b: str) -> float:
    set_a, set_b = set(tokenize(a)), set(tokenize(b))
    if not set_a and not set_b:
        return 0.0
    return len(set_a & set_b) / len(set_a | set_b)


def cosine_similarity(a: str, b: str) -> float:
    tf_a, tf_b = Counter(tokenize(a)), Counter(tokenize(b))
    vocab = set(tf_a) | set(tf_b)
    dot = sum(tf_a[t] * tf_b[t] for t in vocab)
    mag_a = sum(c * c for c in tf_a.values())
    mag_b = sum(c * c for c in tf_b.values())
    if mag_a == 0 or mag_b == 0:
        return 0.0
    return min(1.0, dot / math.sqrt(mag_a * mag_b))


def normalized_edit_similarity(a: str, b: str) -> float:
    _ensure_text(a, b)
    max_len = max(len(a), len(b))
    if max_len == 0:
        return 1.0
    return 1.0 - Levenshtein.distance(a, b) / max_len


def combined_similarity(a: str, b: str) -> float:
    """
    Weighted blend of lexical overlap (jaccard), distributional (cosine) and
    character-order (edit distance) similarity, in [0, 1].
    """
    _ensure_text(a, b)
    if b < a:
        a, b = b, a
    return _combined_similarity(a, b)


@lru_cache(maxsize=SIMILARITY_CACHE_SIZE)
def _combined_similarity(a: str, b: str) -> float:
    score = (
        LEXICAL_OVERLAP_WEIGHT * jaccard_similarity(a, b)
        + DISTRIBUTIONAL_WEIGHT * cosine_similarity(a, b)
        + CHARACTER_ORDER_WEIGHT * normalized_edit_similarity(a, b)
    )
    return max(0.0, min(1.0, score))


def dice_coefficient(a: str, b: str) -> float:
    """Sørensen–Dice over character bigrams, whitespace ignored."""
    _ensure_text(a, b)
    a = re.sub(r"\s+", "", a)
    b = re.sub(r"\s+", "", b)
    if a == b:
        return 1.0
    if len(a) < 2 or len(b) < 2:
        return 0.0
    bigrams_a = Counter(ngrams(a, 2))
    bigrams_b = Counter(ngrams(b, 2))
    shared = sum((bigrams_a & bigrams_b).values())
    return 2.0 * shared / (len(a) + len(b) - 2)


def text_similarity(a: str, b: str) -> float:
    """Whole-document similarity used for batch comparison."""
    methods = [
        cosine_similarity(a, b),
        jaccard_similarity(a, b),
        dice_coefficient(a, b),
    ]
    return sum(methods) / len(methods)


def segment_sentences(text: str, min_sentence_length: int = MIN_SENTENCE_LENGTH) -> List[TextFragment]:
    """
    Split on runs of '.', '!' or '?', trim, and keep fragments strictly longer
    than min_sentence_length characters.
    """
    _ensure_text(text)
    parts = (p.strip() for p in _SENTENCE_TERMINATORS.split(text))
    kept = [p for p in parts if len(p) > min_sentence_length]
    return [TextFragment(content=p, position=i) for i, p in enumerate(kept)]


def extract_key_phrases(sentences: Sequence[TextFragment], limit: int = MAX_SEARCH_PHRASES) -> List[str]:
    """Longest sentences with enough words to be worth a web search."""
    candidates = [s.content for s in sentences if len(s.content.split()) >= KEY_PHRASE_MIN_WORDS]
    candidates.sort(key=len, reverse=True)
    return candidates[:limit]
