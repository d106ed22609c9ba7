import logging
import time
import uuid
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from originality.config import MAX_BATCH_DOCUMENTS
from originality.errors import ValidationError, InternalComputationError
from originality.schemas.check_schemas import CheckRequest, BatchCheckRequest
from originality.utils.analysis_utils import build_report, compare_documents
from originality.utils.web_utils import SearchPhrase, get_search_function

router = APIRouter(prefix="/api", tags=["check"])
logger = logging.getLogger("check")

_STARTED_AT = time.monotonic()


def get_search_phrase() -> Optional[SearchPhrase]:
    return get_search_function()


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.post("/check")
def check_plagiarism(
    request: CheckRequest,
    search_phrase: Optional[SearchPhrase] = Depends(get_search_phrase),
):
    request_id = str(uuid.uuid4())
    t0 = time.perf_counter()
    try:
        report = build_report(request.text, request.options, search_phrase=search_phrase)
    except ValidationError as e:
        logger.info(f"[{request_id}] rejected: {e.message}")
        raise HTTPException(status_code=400, detail=e.message)
    except InternalComputationError as e:
        logger.error(f"[{request_id}] failed: {e.message}")
        raise HTTPException(status_code=500, detail="Failed to check plagiarism")

    elapsed_ms = int((time.perf_counter() - t0) * 1000)
    return {
        "success": True,
        "requestId": request_id,
        "timestamp": _timestamp(),
        "processingTime": f"{elapsed_ms}ms",
        **report.model_dump(),
    }


@router.post("/check-batch")
def check_multiple_documents(request: BatchCheckRequest):
    if len(request.documents) > MAX_BATCH_DOCUMENTS:
        raise HTTPException(status_code=400, detail=f"At most {MAX_BATCH_DOCUMENTS} documents allowed")
    try:
        comparisons = compare_documents(request.documents, request.plagiarismThreshold)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)

    return {
        "success": True,
        "timestamp": _timestamp(),
        "documentCount": len(request.documents),
        "comparisons": [c.model_dump() for c in comparisons],
    }


@router.get("/health")
async def health():
    return {
        "status": "healthy",
        "timestamp": _timestamp(),
        "uptime": round(time.monotonic() - _STARTED_AT, 3),
        "features": ["plagiarism-check", "batch-comparison"],
    }
