import os
from dotenv import load_dotenv

load_dotenv()

# ───── Similarity weights ─────
LEXICAL_OVERLAP_WEIGHT = 0.4   # jaccard
DISTRIBUTIONAL_WEIGHT = 0.4    # cosine
CHARACTER_ORDER_WEIGHT = 0.2   # normalized edit distance
SIMILARITY_CACHE_SIZE = int(os.getenv("SIMILARITY_CACHE_SIZE", "4096"))

# ───── Thresholds (percent unless noted) ─────
HIGH_SIMILARITY_THRESHOLD = 70
MEDIUM_SIMILARITY_THRESHOLD = 40
PLAGIARISM_THRESHOLD = 0.70    # fraction

# ───── Suggestion bands (percent) ─────
HIGH_BAND = 80
MODERATE_BAND = 50
LOW_BAND = 20

# ───── Text limits ─────
MIN_TEXT_LENGTH = int(os.getenv("MIN_TEXT_LENGTH", "10"))
MAX_TEXT_LENGTH = int(os.getenv("MAX_TEXT_LENGTH", "10000"))
MIN_SENTENCE_LENGTH = int(os.getenv("MIN_SENTENCE_LENGTH", "0"))
KEY_PHRASE_MIN_WORDS = 5
LENGTH_FACTOR_DIVISOR = 10

# ───── Web search ─────
SEARCH_PROVIDER = os.getenv("SEARCH_PROVIDER", "none")  # google | duckduckgo | none
API_KEY = os.getenv("API_KEY", "")
SEARCH_ENGINE_ID = os.getenv("SEARCH_ENGINE_ID", "")
GOOGLE_SEARCH_URL = "https://www.googleapis.com/customsearch/v1"
DUCKDUCKGO_SEARCH_URL = "https://html.duckduckgo.com/html/"
SEARCH_TIMEOUT = float(os.getenv("SEARCH_TIMEOUT", "8"))
REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "6"))
MAX_SEARCH_PHRASES = 3
MAX_SEARCH_PHRASES_CAP = 5
RESULTS_PER_PHRASE = 5

# ───── Workers ─────
MAX_WORKERS = int(os.getenv("MAX_WORKERS", "1"))
MAX_WORKERS_CAP = 8
PARALLEL_MIN_SENTENCES = 50

# ───── Batch comparison ─────
MIN_BATCH_DOCUMENTS = 2
MAX_BATCH_DOCUMENTS = 10

# ───── Server ─────
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*").split(",")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", "")
