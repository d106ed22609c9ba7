import threading
import time
from typing import Any

import pytest

from originality.errors import InternalComputationError, ValidationError
from originality.schemas.report_schemas import SentenceAnalysis, TextFragment
from originality.schemas.sources_schemas import SearchResult
from originality.utils import analysis_utils
from originality.utils.analysis_utils import (
    aggregate_score,
    analyze_internal,
    build_report,
    categorize,
    compare_documents,
    generate_suggestions,
    lookup_external,
)

ORIGINAL_SUGGESTIONS = [
    "✅ Excellent! Content appears to be mostly original.",
    "📝 Keep up the good work!",
]

REPEATED_SENTENCE = (
    "The quick brown fox jumps over the lazy dog while the farmer "
    "watches from the old wooden fence nearby today."
)

UNRELATED_SENTENCES = [
    "Volcanoes erupt molten rock.",
    "Penguins waddle across icy shores.",
    "Jazz musicians improvise melodies nightly.",
    "Bakers knead dough before sunrise.",
    "Satellites orbit distant planets silently.",
    "Gardeners prune roses every spring.",
    "Engineers design sturdy suspension bridges.",
    "Children fly colorful kites outdoors.",
    "Chess grandmasters calculate deep variations.",
    "Rivers carve canyons over millennia.",
]


def _analysis(position: int, similarity: float) -> SentenceAnalysis:
    return SentenceAnalysis(
        sentence=f"sentence {position}",
        position=position,
        similarity=similarity,
        category=categorize(similarity),
    )


def test_repeated_sentence_flags_high() -> None:
    report = build_report("The cat sat. The cat sat. The dog ran.")
    first, repeat, other = report.detailedReport.sentenceAnalysis

    assert report.sentenceCount == 3
    assert first.similarity == 0.0
    assert first.source is None
    assert repeat.similarity == pytest.approx(100.0)
    assert repeat.category == "high"
    assert repeat.isFlagged
    assert repeat.source.type == "internal"
    assert repeat.source.position == 0
    # shares "the" and some characters with the earlier sentences: about 32.24 under the 0.4/0.4/0.2 blend
    assert other.category == "low"
    assert other.similarity == pytest.approx(32.24, abs=0.5)
    assert report.detailedReport.flaggedSentences == [repeat]
    assert report.suggestions[-1] == "📌 1 sentences need review."


def test_short_sentences_filtered_to_empty_report() -> None:
    report = build_report("Hi there friend.", {"minSentenceLength": 20})

    assert report.sentenceCount == 0
    assert report.overallPlagiarism == 0
    assert report.suggestions == ORIGINAL_SUGGESTIONS
    assert report.detailedReport.sentenceAnalysis == []


@pytest.mark.parametrize("text", ["", "   \n\t "])
def test_empty_text_gives_empty_report(text: str) -> None:
    report = build_report(text)

    assert report.sentenceCount == 0
    assert report.overallPlagiarism == 0
    assert report.suggestions == ORIGINAL_SUGGESTIONS
    assert report.readability.level == "Unknown"


def test_unrelated_sentences_score_near_zero() -> None:
    report = build_report(" ".join(UNRELATED_SENTENCES))

    assert report.sentenceCount == 10
    assert report.overallPlagiarism < 20
    assert report.detailedReport.flaggedSentences == []
    assert all(a.category == "low" for a in report.detailedReport.sentenceAnalysis)


def test_same_long_sentence_four_times() -> None:
    report = build_report(" ".join([REPEATED_SENTENCE] * 4))
    analyses = report.detailedReport.sentenceAnalysis

    assert report.sentenceCount == 4
    assert report.overallPlagiarism >= 70
    assert sum(1 for a in analyses if a.category == "high") >= 3
    assert len(report.detailedReport.flaggedSentences) == 3


def test_build_report_is_deterministic() -> None:
    text = " ".join(UNRELATED_SENTENCES[:4] + [REPEATED_SENTENCE, REPEATED_SENTENCE])
    assert build_report(text).model_dump() == build_report(text).model_dump()


def test_matches_only_reference_earlier_sentences() -> None:
    report = build_report("Alpha beta gamma. Alpha beta gamma delta. Alpha beta gamma.")
    analyses = report.detailedReport.sentenceAnalysis

    assert analyses[0].source is None
    for a in analyses[1:]:
        assert a.source.position < a.position


def test_report_counts_and_serialization() -> None:
    text = "The cat sat. The cat sat. The dog ran."
    dumped = build_report(text).model_dump()

    assert dumped["textLength"] == len(text)
    assert dumped["wordCount"] == 9
    assert set(dumped["detailedReport"]) == {"sentenceAnalysis", "flaggedSentences", "sources", "searchResults"}
    assert 0 <= dumped["overallPlagiarism"] <= 100


def test_parallel_scan_matches_serial() -> None:
    sentences = [
        TextFragment(content=f"Sentence number {i} talks about topic {i % 7}", position=i)
        for i in range(60)
    ]
    serial = analyze_internal(sentences, max_workers=1)
    parallel = analyze_internal(sentences, max_workers=4)
    assert serial == parallel


# ---- External checks ----

def test_external_snippet_becomes_web_source() -> None:
    text = (
        "Photosynthesis converts sunlight into chemical energy inside plant cells. "
        "My cat enjoys sleeping all afternoon."
    )
    calls = []

    def fake_search(phrase: str) -> list[dict[str, Any]]:
        calls.append(phrase)
        return [
            {
                "title": "Bio",
                "url": "https://example.org/bio",
                "snippet": "Photosynthesis converts sunlight into chemical energy inside plant cells",
            },
            {
                "title": "Garden",
                "url": "https://example.org/garden",
                "snippet": "Tomatoes need plenty of water during hot summers",
            },
        ]

    report = build_report(text, {"checkExternal": True}, search_phrase=fake_search)
    first, second = report.detailedReport.sentenceAnalysis

    assert len(calls) == 2
    assert report.externalChecked
    assert first.similarity == pytest.approx(100.0)
    assert first.source.type == "web"
    assert first.source.url == "https://example.org/bio"
    assert first.source.originSnippet.startswith("Photosynthesis")
    assert second.source.type == "internal"
    assert report.detailedReport.sources == ["https://example.org/bio"]
    assert report.detailedReport.searchResults == ["https://example.org/bio", "https://example.org/garden"]


def test_failing_search_degrades_to_internal() -> None:
    def broken_search(phrase: str) -> list:
        raise ConnectionError("search engine unreachable")

    text = " ".join([REPEATED_SENTENCE] * 4)
    report = build_report(text, {"checkExternal": True}, search_phrase=broken_search)

    assert not report.externalChecked
    assert report.detailedReport.sources == []
    assert report.model_dump() == build_report(text).model_dump()


def test_external_check_without_provider_is_skipped() -> None:
    report = build_report(REPEATED_SENTENCE, {"checkExternal": True})
    assert not report.externalChecked


def test_slow_search_times_out() -> None:
    release = threading.Event()

    def slow_search(phrase: str) -> list:
        release.wait(5)
        return []

    t0 = time.monotonic()
    try:
        report = build_report(
            REPEATED_SENTENCE,
            {"checkExternal": True, "searchTimeout": 0.2},
            search_phrase=slow_search,
        )
    finally:
        release.set()

    assert time.monotonic() - t0 < 3
    assert not report.externalChecked
    assert report.detailedReport.sources == []


def test_cancelled_lookup_returns_none() -> None:
    cancel = threading.Event()
    cancel.set()
    release = threading.Event()

    def slow_search(phrase: str) -> list:
        release.wait(5)
        return []

    try:
        assert lookup_external(["some phrase"], slow_search, timeout=5, cancel_event=cancel) is None
    finally:
        release.set()


def test_partial_lookup_failure_keeps_other_results() -> None:
    def flaky_search(phrase: str) -> list[SearchResult]:
        if phrase == "bad":
            raise RuntimeError("boom")
        return [SearchResult(title="T", url="https://example.org", snippet="text", searchPhrase=phrase)]

    results = lookup_external(["bad", "good"], flaky_search, timeout=2)
    assert [r.url for r in results] == ["https://example.org"]


def test_lookup_without_phrases_is_empty() -> None:
    assert lookup_external([], lambda p: [], timeout=1) == []


# ---- Validation and failures ----

@pytest.mark.parametrize("text", [None, 123, "short", "x" * 10001])
def test_invalid_text_rejected(text: Any) -> None:
    with pytest.raises(ValidationError):
        build_report(text)


def test_options_cannot_loosen_text_limits() -> None:
    loose = {"maxTextLength": 10 ** 7, "minTextLength": 0}

    with pytest.raises(ValidationError) as exc:
        build_report("x" * 10001, loose)
    assert "10,000" in exc.value.message

    with pytest.raises(ValidationError):
        build_report("short", loose)


def test_options_can_tighten_text_limits() -> None:
    with pytest.raises(ValidationError) as exc:
        build_report("A perfectly fine sentence.", {"maxTextLength": 20})
    assert "20" in exc.value.message

    with pytest.raises(ValidationError):
        build_report("A fine sentence.", {"minTextLength": 50})


def test_worker_count_is_bounded() -> None:
    with pytest.raises(ValidationError) as exc:
        build_report("A perfectly fine sentence.", {"maxWorkers": 10_000})
    assert exc.value.field == "options"


def test_invalid_options_rejected() -> None:
    with pytest.raises(ValidationError) as exc:
        build_report("A perfectly fine sentence.", {"plagiarismThreshold": 2})
    assert exc.value.field == "options"


def test_unexpected_failure_is_internal_error(monkeypatch: pytest.MonkeyPatch) -> None:
    def explode(a: str, b: str) -> float:
        raise RuntimeError("boom")

    monkeypatch.setattr(analysis_utils, "combined_similarity", explode)
    with pytest.raises(InternalComputationError):
        build_report("First sentence here. Second sentence here.")


# ---- Scoring helpers ----

def test_categorize_thresholds() -> None:
    assert categorize(70) == "high"
    assert categorize(69.99) == "medium"
    assert categorize(40) == "medium"
    assert categorize(39.99) == "low"


def test_aggregate_score() -> None:
    analyses = [_analysis(0, 50.0), _analysis(1, 50.0)]

    assert aggregate_score([]) == 0.0
    assert aggregate_score(analyses) == 50.0
    assert aggregate_score(analyses, length_factor_cap=1.0) == 10.0
    assert aggregate_score([_analysis(0, 100.0)] * 30, length_factor_cap=2.0) == 100.0


def test_generate_suggestions_bands() -> None:
    assert generate_suggestions(85, 0)[0].startswith("⚠️ High")
    assert generate_suggestions(50, 0)[0].startswith("⚠️ Moderate")
    assert generate_suggestions(20, 0)[0].startswith("✅ Minor")
    assert generate_suggestions(19.99, 0) == ORIGINAL_SUGGESTIONS

    with_flags = generate_suggestions(19.99, 2)
    assert with_flags[:-1] == ORIGINAL_SUGGESTIONS
    assert with_flags[-1] == "📌 2 sentences need review."


# ---- Batch comparison ----

def test_compare_documents() -> None:
    results = compare_documents(["same text here", "same text here", "totally different words"])

    assert [(r.doc1, r.doc2) for r in results] == [(1, 2), (1, 3), (2, 3)]
    assert results[0].similarity == pytest.approx(100.0)
    assert results[0].status == "SUSPICIOUS"
    assert results[1].status == "OK"


def test_compare_documents_needs_two() -> None:
    with pytest.raises(ValidationError):
        compare_documents(["only one"])
