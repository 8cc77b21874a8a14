# ===== IMPORTS & DEPENDENCIES =====
import logging
from typing import Optional

from game_analyzer.config import UNKNOWN_TITLE
from game_analyzer.models.game import ScrapedData, GameMetadata, EnrichmentPatch, Price, FREE, UNKNOWN_PRICE

# ===== CONFIGURATION & CONSTANTS =====
logger = logging.getLogger(__name__)

# Enrichment wins for these whenever it supplies a value; markup is only the fallback.
# Store pages misreport them (e.g. a paid game showing a "Free" promotion badge).
ENRICHMENT_PRIORITY_FIELDS = (
    'price',
    'developer',
    'publisher',
    'platforms',
    'reviewCount',
    'reviewScore',
    'peakPlayers',
    'copiesSold',
    'currentPlayers',
    'estimatedOwners',
    'estimatedRevenue',
    'salesMilestone',
)

PROVISIONAL_ARCHETYPE = 'premium_singleplayer'


# ===== CORE BUSINESS LOGIC =====
def normalize_price(raw: Optional[str]) -> Price:
    """'free'/'unknown'/missing -> 'free'; numeric strings -> float."""
    if raw is None or raw in (FREE, UNKNOWN_PRICE):
        return FREE
    try:
        return float(raw)
    except (TypeError, ValueError):
        logger.warning(f"⚠️ [MergeResolver] Unparseable scraped price '{raw}'. Treating as free.")
        return FREE


def build_game_metadata(data: ScrapedData) -> GameMetadata:
    """
    Turns a pattern-extracted draft into a complete GameMetadata with defaults for every
    missing field. The archetype is provisional until the classifier runs.
    """
    metadata: GameMetadata = {
        'title': data.get('title') or UNKNOWN_TITLE,
        'platform': data.get('platform') or 'web',
        'platforms': [],
        'price': normalize_price(data.get('price')),
        'genre': list(data.get('genre') or []),
        'releaseState': data.get('releaseState') or 'live',
        'isMultiplayer': bool(data.get('isMultiplayer', False)),
        'reviewScore': data.get('reviewScore'),
        'reviewCount': data.get('reviewCount'),
        'description': data.get('description'),
        'lastUpdateDate': data.get('lastUpdate'),
        'imageUrl': data.get('imageUrl'),
        'archetype': PROVISIONAL_ARCHETYPE,
    }
    return metadata


def merge_metadata(draft: GameMetadata, patch: EnrichmentPatch) -> GameMetadata:
    """
    Combines the markup draft and the enrichment patch into a new record.

    For ENRICHMENT_PRIORITY_FIELDS the patch value wins whenever it is present and not None;
    every other field keeps the draft value. Neither input is mutated.
    """
    merged: GameMetadata = dict(draft)
    overridden = []
    for field in ENRICHMENT_PRIORITY_FIELDS:
        value = patch.get(field)
        if value is not None:
            if draft.get(field) is not None and draft.get(field) != value:
                overridden.append(field)
            merged[field] = value

    if overridden:
        logger.info(f"[MergeResolver] Enrichment overrode scraped values for: {', '.join(overridden)}")
    return merged
