# ===== IMPORTS & DEPENDENCIES =====
import re
import logging
from urllib.parse import urlparse

from game_analyzer.config import STORE_FAMILY_PATTERNS, SITE_SCOPE_MAP, DEFAULT_SITE_SCOPE

# ===== CONFIGURATION & CONSTANTS =====
logger = logging.getLogger(__name__)

# Suffixes storefronts append to page titles (order matters: more specific first)
STORE_TITLE_SUFFIXES = [
    r'\s*-\s*Apps on Google Play\s*$',
    r'\s*on the App Store\s*$',
    r'\s*on Steam\s*$',
    r'\s*by [^|]+?\s*-\s*itch\.io\s*$',
    r'\s*-\s*itch\.io\s*$',
    r'^\s*Save \d+% on\s+',
    r'^\s*Pre-purchase\s+',
]

# ===== UTILITY FUNCTIONS =====

def detect_store_family(url: str) -> str:
    """
    Maps a store URL to its storefront family: 'steam', 'mobile', 'indie', or 'web'.
    Families are checked in fixed priority by substring match; 'web' is the fallback.
    """
    lowered = (url or '').lower()
    for family, keywords in STORE_FAMILY_PATTERNS:
        if any(keyword in lowered for keyword in keywords):
            logger.debug(f"[StoreDetector] '{family}' family detected for URL: {url}")
            return family
    logger.debug(f"[StoreDetector] No store family matched '{url}'. Using 'web'.")
    return 'web'


def site_scope_for(store_url: str) -> str:
    """Returns the search scope hint used to constrain enrichment queries."""
    host = (urlparse(store_url or '').hostname or '').lower()
    for domain, scope in SITE_SCOPE_MAP:
        if host == domain or host.endswith('.' + domain):
            return scope
    return DEFAULT_SITE_SCOPE


def clean_store_title(raw_title: str) -> str:
    """
    Removes storefront decorations from a page title
    (e.g. 'Hades on Steam' -> 'Hades', 'Celeste by Maddy Makes Games - itch.io' -> 'Celeste').
    """
    if not raw_title:
        return ""

    cleaned = re.sub(r'\s+', ' ', raw_title).strip()
    for pattern in STORE_TITLE_SUFFIXES:
        cleaned = re.sub(pattern, '', cleaned, flags=re.IGNORECASE).strip()

    # Fallback to the original title if cleaning removed everything
    return cleaned or raw_title.strip()

