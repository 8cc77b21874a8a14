# ===== CONFIGURATION & CONSTANTS =====
import os

# --- General Settings ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
DATABASE_PATH = os.getenv("DATABASE_PATH", "data/analyzer.db")

# --- Web Scraping & API Headers ---
COMMON_HEADERS = {
    'User-Agent': 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/126.0.0.0 Safari/537.36',
    'Accept-Language': 'en-US,en;q=0.9',
    'Accept': 'text/html,application/json;q=0.9,*/*;q=0.8',
    'Connection': 'keep-alive'
}
JSON_HEADERS = {**COMMON_HEADERS, 'Accept': 'application/json', 'Content-Type': 'application/json'}

# --- Fetch Adapter (CORS-stripping relay) ---
RELAY_URL_TEMPLATE = os.getenv("RELAY_URL_TEMPLATE", "https://api.allorigins.win/raw?url={url}")
FETCH_MAX_ATTEMPTS = 3
FETCH_RETRY_DELAY = 1.0  # seconds, doubled after every failed attempt
FETCH_TIMEOUT = 15.0  # seconds per attempt

# --- Enrichment Service (search + LLM) ---
ENRICHMENT_API_URL = os.getenv("ENRICHMENT_API_URL", "")
ENRICHMENT_API_KEY = os.getenv("ENRICHMENT_API_KEY")
ENRICHMENT_TIMEOUT = 30.0

# --- Webhook Delivery ---
WEBHOOK_URL = os.getenv("WEBHOOK_URL", "")
WEBHOOK_MAX_ATTEMPTS = 3
WEBHOOK_RETRY_DELAY = 1.0
WEBHOOK_TIMEOUT = 10.0
MAX_DELIVERY_ATTEMPTS = 5  # queued entries at or above this are abandoned

# --- Persisted State Keys ---
QUEUE_KEY = "webhook_queue"
RESULT_CACHE_KEY = "evergreen_analysis_results"

# --- Report ---
SITE_NAME = "The Aesop Agency"
SCHEDULE_URL = os.getenv("SCHEDULE_URL", "https://calendly.com/chrisley-aesopco/30min")
REPORT_REVEAL_DELAY = float(os.getenv("REPORT_REVEAL_DELAY", "15"))
MAX_REPORT_OPPORTUNITIES = 3

# --- Metadata Constraints ---
UNKNOWN_TITLE = "Unknown Game"
TITLE_MIN_LENGTH = 2
TITLE_MAX_LENGTH = 200
PRICE_WARNING_MAX = 1000
MAX_GENRES = 3

# --- Store Family Detection ---
# Checked in this order; the first family with a matching substring wins.
STORE_FAMILY_PATTERNS = [
    ("steam", ["steampowered.com", "steamcommunity.com"]),
    ("mobile", ["apps.apple.com", "play.google.com"]),
    ("indie", ["itch.io"]),
]

# --- Enrichment Site Scope ---
# Store domain fragment -> search scope hint sent with each enrichment query
SITE_SCOPE_MAP = [
    ("steampowered.com", "site:steampowered.com OR site:wikipedia.org"),
    ("steamcommunity.com", "site:steampowered.com OR site:wikipedia.org"),
    ("playstation.com", "site:playstation.com OR site:wikipedia.org"),
    ("xbox.com", "site:xbox.com OR site:wikipedia.org"),
    ("nintendo.com", "site:nintendo.com OR site:wikipedia.org"),
    ("epicgames.com", "site:epicgames.com OR site:wikipedia.org"),
    ("gog.com", "site:gog.com OR site:wikipedia.org"),
    ("itch.io", "site:itch.io OR site:wikipedia.org"),
]
DEFAULT_SITE_SCOPE = "site:wikipedia.org"

# --- Game Classification Keywords ---
MULTIPLAYER_KEYWORDS = ["multiplayer", "multi-player", "online co-op", "pvp", "mmo"]  # matched as whole words
