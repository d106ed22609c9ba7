"""
Document-level originality analysis.

Sentences are compared only against strictly earlier sentences (and, when
enabled, against web snippets for key phrases), so every per-sentence score is
fixed by a single left-to-right scan of the document.
"""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, wait
from functools import partial
from typing import Dict, List, Optional, Sequence, Tuple, Union

from pydantic import ValidationError as PydanticValidationError

from originality.config import (
    HIGH_SIMILARITY_THRESHOLD,
    MEDIUM_SIMILARITY_THRESHOLD,
    PLAGIARISM_THRESHOLD,
    HIGH_BAND,
    MODERATE_BAND,
    LOW_BAND,
    LENGTH_FACTOR_DIVISOR,
    PARALLEL_MIN_SENTENCES,
    SEARCH_TIMEOUT,
    MIN_BATCH_DOCUMENTS,
    MIN_TEXT_LENGTH,
    MAX_TEXT_LENGTH,
)
from originality.errors import (
    OriginalityError,
    ValidationError,
    ExternalLookupFailure,
    InternalComputationError,
)
from originality.schemas.check_schemas import AnalysisOptions
from originality.schemas.report_schemas import (
    AnalysisReport,
    DetailedReport,
    DocumentComparison,
    MatchSource,
    SentenceAnalysis,
    TextFragment,
)
from originality.schemas.sources_schemas import SearchResult
from originality.utils.lexical_utils import (
    combined_similarity,
    extract_key_phrases,
    segment_sentences,
    text_similarity,
)
from originality.utils.readability_utils import calculate_readability
from originality.utils.web_utils import SearchPhrase

logger = logging.getLogger("analysis")

_POLL_INTERVAL = 0.05


def _percent(x: float) -> float:
    return round(float(x) * 100.0, 2)


def categorize(similarity: float) -> str:
    """Band a percentage similarity into low / medium / high."""
    if similarity >= HIGH_SIMILARITY_THRESHOLD:
        return "high"
    if similarity >= MEDIUM_SIMILARITY_THRESHOLD:
        return "medium"
    return "low"


# ---- Internal analysis ----

def _best_earlier_match(sentences: Sequence[TextFragment], i: int) -> Tuple[float, Optional[int]]:
    best, best_j = 0.0, None
    current = sentences[i].content
    for j in range(i):
        sim = combined_similarity(current, sentences[j].content)
        if sim > best:
            best, best_j = sim, j
    return best, best_j


def analyze_internal(sentences: Sequence[TextFragment],
                     threshold: float = PLAGIARISM_THRESHOLD,
                     max_workers: int = 1) -> List[SentenceAnalysis]:
    """Max similarity of each sentence against every earlier sentence."""
    n = len(sentences)
    match = partial(_best_earlier_match, sentences)
    if max_workers > 1 and n >= PARALLEL_MIN_SENTENCES:
        logger.debug(f"Scanning {n} sentences with {max_workers} workers")
        with ThreadPoolExecutor(max_workers=max_workers) as ex:
            matches = list(ex.map(match, range(n)))
    else:
        matches = [match(i) for i in range(n)]

    flag_at = _percent(threshold)
    analyses = []
    for frag, (best, best_j) in zip(sentences, matches):
        pct = _percent(best)
        source = None
        if best_j is not None:
            source = MatchSource(
                type="internal",
                similarity=pct,
                position=best_j,
                sentence=sentences[best_j].content,
            )
        analyses.append(SentenceAnalysis(
            sentence=frag.content,
            position=frag.position,
            similarity=pct,
            category=categorize(pct),
            isFlagged=pct >= flag_at,
            source=source,
        ))
    return analyses


# ---- External analysis ----

def analyze_against_external(analyses: Sequence[SentenceAnalysis],
                             snippets: Sequence[SearchResult],
                             threshold: float = PLAGIARISM_THRESHOLD) -> List[SentenceAnalysis]:
    """
    Fold web-snippet similarity into each sentence's maximum. The source
    switches to the web result only when it beats the internal match and
    reaches the plagiarism threshold.
    """
    if not snippets:
        return list(analyses)

    flag_at = _percent(threshold)
    out = []
    for a in analyses:
        best, best_res = 0.0, None
        for res in snippets:
            sim = combined_similarity(a.sentence, res.snippet)
            if sim > best:
                best, best_res = sim, res
        ext_pct = _percent(best)

        similarity = max(a.similarity, ext_pct)
        source = a.source
        if best_res is not None and ext_pct > a.similarity and ext_pct >= flag_at:
            source = MatchSource(
                type="web",
                similarity=ext_pct,
                originSnippet=best_res.snippet,
                url=best_res.url,
                title=best_res.title,
            )
        out.append(SentenceAnalysis(
            sentence=a.sentence,
            position=a.position,
            similarity=similarity,
            category=categorize(similarity),
            isFlagged=similarity >= flag_at,
            source=source,
        ))
    return out


def _search_one(search_phrase: SearchPhrase, phrase: str) -> List[SearchResult]:
    try:
        found = search_phrase(phrase) or []
        return [r if isinstance(r, SearchResult) else SearchResult(**r) for r in found]
    except Exception as e:
        raise ExternalLookupFailure(f"search failed for '{phrase[:60]}': {e}", phrase=phrase) from e


def lookup_external(phrases: Sequence[str],
                    search_phrase: SearchPhrase,
                    timeout: float = SEARCH_TIMEOUT,
                    cancel_event: Optional[threading.Event] = None) -> Optional[List[SearchResult]]:
    """
    One search per phrase, run concurrently and bounded by `timeout`.

    Returns None when the lookup should be skipped entirely: timeout,
    cancellation, or every phrase failing. Individual failures are logged and
    dropped; nothing is retried.
    """
    if not phrases:
        return []

    ex = ThreadPoolExecutor(max_workers=len(phrases))
    futures = {ex.submit(_search_one, search_phrase, p): p for p in phrases}
    deadline = time.monotonic() + timeout
    try:
        pending = set(futures)
        while pending:
            if cancel_event is not None and cancel_event.is_set():
                logger.warning("External lookup cancelled; using internal analysis only")
                return None
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                logger.warning(f"External lookup timed out after {timeout}s; using internal analysis only")
                return None
            _, pending = wait(pending, timeout=min(remaining, _POLL_INTERVAL))
    finally:
        ex.shutdown(wait=False, cancel_futures=True)

    results: List[SearchResult] = []
    seen = set()
    failures = 0
    for fut in futures:
        try:
            found = fut.result()
        except ExternalLookupFailure as e:
            failures += 1
            logger.warning(str(e))
            continue
        for r in found:
            key = (r.url, r.snippet)
            if key not in seen:
                seen.add(key)
                results.append(r)

    if failures == len(futures):
        logger.warning("All external lookups failed; using internal analysis only")
        return None
    logger.info(f"External lookup returned {len(results)} snippets for {len(phrases)} phrases")
    return results


# ---- Aggregation ----

def aggregate_score(analyses: Sequence[SentenceAnalysis], length_factor_cap: Optional[float] = None) -> float:
    if not analyses:
        return 0.0
    score = sum(a.similarity for a in analyses) / len(analyses)
    if length_factor_cap is not None:
        score *= min(len(analyses) / LENGTH_FACTOR_DIVISOR, length_factor_cap)
    return round(max(0.0, min(100.0, score)), 2)


def generate_suggestions(score: float, flagged_count: int) -> List[str]:
    if score >= HIGH_BAND:
        suggestions = [
            "⚠️ High plagiarism detected. Consider rewriting large portions.",
            "📚 Cite your sources properly.",
            "🔄 Paraphrase more effectively.",
        ]
    elif score >= MODERATE_BAND:
        suggestions = [
            "⚠️ Moderate plagiarism detected. Review flagged sentences.",
            "📝 Use more original content.",
            "🔍 Add proper citations where needed.",
        ]
    elif score >= LOW_BAND:
        suggestions = [
            "✅ Minor similarities detected. Consider rewording some phrases.",
            "📖 Ensure proper quotation marks for direct quotes.",
        ]
    else:
        suggestions = [
            "✅ Excellent! Content appears to be mostly original.",
            "📝 Keep up the good work!",
        ]

    if flagged_count > 0:
        suggestions.append(f"📌 {flagged_count} sentences need review.")
    return suggestions


# ---- Report ----

def _resolve_options(options: Union[AnalysisOptions, Dict, None]) -> AnalysisOptions:
    if options is None:
        return AnalysisOptions()
    if isinstance(options, AnalysisOptions):
        return options
    try:
        return AnalysisOptions(**options)
    except (PydanticValidationError, TypeError) as e:
        raise ValidationError(f"Invalid options: {e}", field="options", value=options) from e


def text_limits(options: AnalysisOptions) -> Tuple[int, int]:
    """Effective (min, max) text length; caller options may only narrow the configured range."""
    min_len = max(options.minTextLength, MIN_TEXT_LENGTH)
    max_len = min(options.maxTextLength, MAX_TEXT_LENGTH)
    return min_len, max_len


def validate_text(text, options: AnalysisOptions) -> str:
    """Reject missing, too-short or too-long text. Empty text is allowed."""
    if text is None:
        raise ValidationError("Text is required", field="text")
    if not isinstance(text, str):
        raise ValidationError("Text must be a string", field="text", value=type(text).__name__)
    min_len, max_len = text_limits(options)
    if len(text) > max_len:
        raise ValidationError(
            f"Text too long. Maximum {max_len:,} characters allowed",
            field="text",
            value=len(text),
        )
    stripped = text.strip()
    if stripped and len(stripped) < min_len:
        raise ValidationError(
            f"Text must be at least {min_len} characters",
            field="text",
            value=len(stripped),
        )
    return text


def _web_sources(analyses: Sequence[SentenceAnalysis]) -> List[str]:
    urls = []
    for a in analyses:
        if a.source is not None and a.source.type == "web" and a.source.url not in urls:
            urls.append(a.source.url)
    return urls


def _result_urls(snippets: Sequence[SearchResult]) -> List[str]:
    urls = []
    for r in snippets:
        if r.url and r.url not in urls:
            urls.append(r.url)
    return urls


def build_report(text: str,
                 options: Union[AnalysisOptions, Dict, None] = None,
                 search_phrase: Optional[SearchPhrase] = None,
                 cancel_event: Optional[threading.Event] = None) -> AnalysisReport:
    """
    Segment, score and summarize `text`.

    Raises ValidationError for rejected input and InternalComputationError for
    unexpected failures. External lookup problems never escape: the report is
    then built from internal analysis alone.
    """
    options = _resolve_options(options)
    validate_text(text, options)

    try:
        sentences = segment_sentences(text, options.minSentenceLength)
        analyses = analyze_internal(sentences, options.plagiarismThreshold, options.maxWorkers)

        external_checked = False
        searched_urls: List[str] = []
        if options.checkExternal and sentences:
            if search_phrase is None:
                logger.info("External check requested but no search provider configured")
            else:
                phrases = extract_key_phrases(sentences, options.maxSearchPhrases)
                snippets = lookup_external(phrases, search_phrase, options.searchTimeout, cancel_event)
                if snippets is not None:
                    analyses = analyze_against_external(analyses, snippets, options.plagiarismThreshold)
                    searched_urls = _result_urls(snippets)
                    external_checked = True

        score = aggregate_score(analyses, options.lengthFactorCap)
        readability = calculate_readability(text)
    except OriginalityError:
        raise
    except Exception as e:
        logger.exception("Analysis failed")
        raise InternalComputationError(f"Analysis failed: {e}") from e

    flagged = [a for a in analyses if a.isFlagged]
    logger.info(
        f"Analyzed {len(analyses)} sentences: score={score}, flagged={len(flagged)}, "
        f"external={external_checked}"
    )
    return AnalysisReport(
        overallPlagiarism=score,
        textLength=len(text),
        wordCount=len(text.split()),
        sentenceCount=len(analyses),
        detailedReport=DetailedReport(
            sentenceAnalysis=analyses,
            flaggedSentences=flagged,
            sources=_web_sources(analyses),
            searchResults=searched_urls,
        ),
        suggestions=generate_suggestions(score, len(flagged)),
        readability=readability,
        externalChecked=external_checked,
    )


# ---- Batch comparison ----

def compare_documents(documents: Sequence[str], threshold: float = PLAGIARISM_THRESHOLD) -> List[DocumentComparison]:
    """Pairwise whole-document similarity for every unordered pair."""
    if documents is None or len(documents) < MIN_BATCH_DOCUMENTS:
        raise ValidationError(f"At least {MIN_BATCH_DOCUMENTS} documents are required", field="documents")
    for idx, doc in enumerate(documents, start=1):
        if not isinstance(doc, str) or not doc.strip():
            raise ValidationError(f"Document {idx} must be non-empty text", field="documents", value=idx)

    results = []
    for i in range(len(documents)):
        for j in range(i + 1, len(documents)):
            sim = text_similarity(documents[i], documents[j])
            results.append(DocumentComparison(
                doc1=i + 1,
                doc2=j + 1,
                similarity=_percent(sim),
                status="SUSPICIOUS" if sim > threshold else "OK",
            ))
    return results
