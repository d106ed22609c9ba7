from pydantic import BaseModel, ConfigDict, Field
from typing import List, Literal, Optional


class TextFragment(BaseModel):
    model_config = ConfigDict(frozen=True)

    content: str
    position: int


class MatchSource(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["internal", "web"]
    similarity: float                    # percent (0–100)
    position: Optional[int] = None       # internal: earlier sentence index
    sentence: Optional[str] = None       # internal: earlier sentence text
    originSnippet: Optional[str] = None  # web
    url: Optional[str] = None            # web
    title: Optional[str] = None          # web


class SentenceAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True)

    sentence: str
    position: int
    similarity: float                    # percent (0–100)
    category: Literal["low", "medium", "high"]
    isFlagged: bool = False
    source: Optional[MatchSource] = None


class DetailedReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    sentenceAnalysis: List[SentenceAnalysis] = Field(default_factory=list)
    flaggedSentences: List[SentenceAnalysis] = Field(default_factory=list)
    sources: List[str] = Field(default_factory=list)        # web URLs attached to sentences
    searchResults: List[str] = Field(default_factory=list)  # every URL the lookup returned


class Readability(BaseModel):
    model_config = ConfigDict(frozen=True)

    score: int
    level: str


class AnalysisReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    overallPlagiarism: float             # percent (0–100)
    textLength: int
    wordCount: int
    sentenceCount: int
    detailedReport: DetailedReport
    suggestions: List[str]
    readability: Readability
    externalChecked: bool = False


class DocumentComparison(BaseModel):
    model_config = ConfigDict(frozen=True)

    doc1: int                            # 1-based
    doc2: int
    similarity: float                    # percent (0–100)
    status: Literal["SUSPICIOUS", "OK"]
