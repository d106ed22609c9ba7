from pydantic import BaseModel, Field
from typing import List, Optional

from originality.config import (
    MIN_SENTENCE_LENGTH,
    PLAGIARISM_THRESHOLD,
    MIN_TEXT_LENGTH,
    MAX_TEXT_LENGTH,
    SEARCH_TIMEOUT,
    MAX_SEARCH_PHRASES,
    MAX_SEARCH_PHRASES_CAP,
    MAX_WORKERS,
    MAX_WORKERS_CAP,
)


class AnalysisOptions(BaseModel):
    minSentenceLength: int = Field(default=MIN_SENTENCE_LENGTH, ge=0)
    checkExternal: bool = False
    plagiarismThreshold: float = Field(default=PLAGIARISM_THRESHOLD, gt=0.0, le=1.0)
    # text limits can only tighten MIN_TEXT_LENGTH / MAX_TEXT_LENGTH (see validate_text)
    minTextLength: int = Field(default=MIN_TEXT_LENGTH, ge=0)
    maxTextLength: int = Field(default=MAX_TEXT_LENGTH, ge=1)
    lengthFactorCap: Optional[float] = Field(default=None, gt=0.0)
    searchTimeout: float = Field(default=SEARCH_TIMEOUT, gt=0.0)
    maxSearchPhrases: int = Field(default=MAX_SEARCH_PHRASES, ge=1, le=MAX_SEARCH_PHRASES_CAP)
    maxWorkers: int = Field(default=MAX_WORKERS, ge=1, le=MAX_WORKERS_CAP)


class CheckRequest(BaseModel):
    text: Optional[str] = None
    options: AnalysisOptions = Field(default_factory=AnalysisOptions)


class BatchCheckRequest(BaseModel):
    documents: List[str]
    plagiarismThreshold: float = Field(default=PLAGIARISM_THRESHOLD, gt=0.0, le=1.0)
