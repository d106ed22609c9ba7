import logging
from typing import Callable, List, Optional

import requests
from bs4 import BeautifulSoup
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from originality.config import (
    API_KEY,
    SEARCH_ENGINE_ID,
    GOOGLE_SEARCH_URL,
    DUCKDUCKGO_SEARCH_URL,
    REQUEST_TIMEOUT,
    RESULTS_PER_PHRASE,
    SEARCH_PROVIDER,
)
from originality.schemas.sources_schemas import SearchResult

logger = logging.getLogger("scraper")

SearchPhrase = Callable[[str], List[SearchResult]]


# ---- Session ----
def _make_session() -> requests.Session:
    s = requests.Session()
    # one attempt per lookup; the analyzer falls back instead of retrying
    retries = Retry(total=0, raise_on_status=False)
    s.mount("https://", HTTPAdapter(max_retries=retries, pool_connections=10, pool_maxsize=10))
    s.mount("http://", HTTPAdapter(max_retries=retries, pool_connections=10, pool_maxsize=10))
    s.headers.update({
        "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.5",
    })
    return s

_SESSION = _make_session()


def _normalize_whitespace(s: str) -> str:
    return " ".join(s.split())


# ---- Google Custom Search ----
def google_search(phrase: str, num_results: int = RESULTS_PER_PHRASE,
                  http_get: Optional[Callable] = None) -> List[SearchResult]:
    if not API_KEY or not SEARCH_ENGINE_ID:
        logger.warning("Missing API_KEY or SEARCH_ENGINE_ID; skipping google search")
        return []

    get = http_get or _SESSION.get
    params = {"key": API_KEY, "cx": SEARCH_ENGINE_ID, "q": phrase, "num": num_results}
    try:
        r = get(GOOGLE_SEARCH_URL, params=params, timeout=REQUEST_TIMEOUT)
        r.raise_for_status()
        items = r.json().get("items", []) or []
    except Exception as e:
        logger.warning(f"google_search failed: {e}")
        return []

    out = []
    for it in items[:num_results]:
        url, snippet = it.get("link"), it.get("snippet", "")
        if url and snippet:
            out.append(SearchResult(
                title=it.get("title", ""),
                url=url,
                snippet=_normalize_whitespace(snippet),
                searchPhrase=phrase,
            ))
    logger.info(f"google_search: got {len(out)} items for '{phrase[:60]}'")
    return out


# ---- DuckDuckGo HTML results ----
def parse_duckduckgo_results(html: str, phrase: str, num_results: int = RESULTS_PER_PHRASE) -> List[SearchResult]:
    soup = BeautifulSoup(html, "html.parser")
    out = []
    for body in soup.select(".result__body")[:num_results]:
        title = body.select_one(".result__title")
        url = body.select_one(".result__url")
        snippet = body.select_one(".result__snippet")
        if not (title and url and snippet):
            continue
        title_text = _normalize_whitespace(title.get_text(" ", strip=True))
        url_text = url.get_text(strip=True)
        snippet_text = _normalize_whitespace(snippet.get_text(" ", strip=True))
        if title_text and url_text and snippet_text:
            out.append(SearchResult(title=title_text, url=url_text, snippet=snippet_text, searchPhrase=phrase))
    return out


def duckduckgo_search(phrase: str, num_results: int = RESULTS_PER_PHRASE,
                      http_get: Optional[Callable] = None) -> List[SearchResult]:
    get = http_get or _SESSION.get
    try:
        r = get(DUCKDUCKGO_SEARCH_URL, params={"q": phrase}, timeout=REQUEST_TIMEOUT)
        r.raise_for_status()
        results = parse_duckduckgo_results(r.text, phrase, num_results)
    except Exception as e:
        logger.warning(f"duckduckgo_search failed: {e}")
        return []
    logger.info(f"duckduckgo_search: got {len(results)} items for '{phrase[:60]}'")
    return results


def get_search_function(provider: str = SEARCH_PROVIDER) -> Optional[SearchPhrase]:
    """Search collaborator for the configured provider, or None when disabled."""
    providers = {
        "google": google_search,
        "duckduckgo": duckduckgo_search,
    }
    provider = (provider or "none").lower()
    if provider == "none":
        return None
    if provider not in providers:
        logger.warning(f"Unknown SEARCH_PROVIDER '{provider}'; web checks disabled")
        return None
    return providers[provider]
