"""
Centralized constants for Vibe Writer.
All magic numbers of the pipeline live here.
"""

# ===========================================
# PROVIDERS
# ===========================================
PROVIDER_MAX_TOKENS = 4096            # upstream max_tokens for vendors that require it
PROVIDER_MAX_RETRIES = 0              # failures are surfaced, never retried

# ===========================================
# FRAMING (event stream)
# ===========================================
SSE_DATA_PREFIX = "data: "
SSE_DONE_SENTINEL = "[DONE]"
SSE_ERROR_SENTINEL = "[ERROR]"
SSE_GENERIC_ERROR = "Stream processing failed"

# ===========================================
# LAYOUT NORMALIZER
# ===========================================
HEADING_SHORT_MAX_CHARS = 28          # short headings are left as-is
HEADING_HARD_STOP_RANGE = (10, 42)    # 1st choice: sentence end
HEADING_SOFT_STOP_RANGE = (10, 34)    # 2nd choice: comma / colon / semicolon
HEADING_WIDE_HARD_STOP_RANGE = (8, 60)
HEADING_WIDE_SOFT_STOP_RANGE = (8, 48)
HEADING_FALLBACK_MIN_CHARS = 45       # bodies this long get a blind cut
HEADING_FALLBACK_CUT = 22

PARAGRAPH_MIN_SPLIT_CHARS = 90        # shorter paragraphs are never split
PARAGRAPH_GROUP_MAX_CHARS = 110
PARAGRAPH_GROUP_MAX_SENTENCES = 2
LAYOUT_MAX_PASSES = 100               # safety cap; passes stop once the output is stable

HARD_STOPS = "。！？!?"
SOFT_STOPS = "，,:：；;"

# ===========================================
# SOURCE FETCHING
# ===========================================
SOURCE_MIN_CHARS = 10                 # shorter extraction counts as failure
SOURCE_CONTENT_SELECTOR_MIN_CHARS = 100
FETCH_TIMEOUT_SECONDS = 20
FETCH_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
UPLOAD_EXTENSIONS = ['.txt', '.md', '.markdown']
MAX_UPLOAD_SIZE_MB = 5

# ===========================================
# API / SERVER
# ===========================================
STREAM_TIMEOUT_SECONDS = 300.0
DEFAULT_SERVER_URL = 'http://127.0.0.1:8000'
CREDENTIALS_FILE = 'data/credentials.json'

# ===========================================
# WRITING DEFAULTS
# ===========================================
DEFAULT_WORD_COUNT = '2000-4000'

# ===========================================
# LOGGING
# ===========================================
LOG_LEVEL = 'INFO'
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_FILE = 'logs/vibe_writer.log'
LOG_MAX_SIZE_MB = 10
LOG_BACKUP_COUNT = 5
