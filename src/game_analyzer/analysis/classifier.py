# ===== IMPORTS & DEPENDENCIES =====
from game_analyzer.models.game import GameMetadata, FREE

# ===== CONFIGURATION & CONSTANTS =====
MULTIPLAYER_PREMIUM_THRESHOLD = 30
SINGLEPLAYER_PREMIUM_THRESHOLD = 40

ARCHETYPE_LABELS = {
    'premium_singleplayer': "Premium Single-Player",
    'f2p_mobile': "Free-to-Play Mobile",
    'live_service': "Live-Service Game",
    'early_stage': "Early Stage / Pre-Launch",
    'aa_premium': "Premium AA/AAA",
}

# archetype -> (strong, moderate) score thresholds
SCORE_THRESHOLDS = {
    'premium_singleplayer': (70, 50),
    'f2p_mobile': (75, 55),
    'live_service': (75, 55),
    'early_stage': (70, 50),
    'aa_premium': (80, 60),
}


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


# ===== CORE BUSINESS LOGIC =====
def classify_game(metadata: GameMetadata) -> str:
    """
    Maps a record onto a business archetype. Only releaseState, platform, price and
    isMultiplayer are read; the first matching branch wins.
    """
    release_state = metadata.get('releaseState')
    platform = metadata.get('platform')
    price = metadata.get('price')
    is_multiplayer = bool(metadata.get('isMultiplayer'))

    if release_state in ('upcoming', 'early_access'):
        return 'early_stage'

    if platform == 'mobile':
        return 'f2p_mobile'

    if price == FREE and is_multiplayer:
        return 'live_service'

    # Kept separate from the branch above: free + single-player lands on f2p_mobile
    if price == FREE:
        return 'live_service' if is_multiplayer else 'f2p_mobile'

    if is_multiplayer and _is_number(price):
        return 'aa_premium' if price >= MULTIPLAYER_PREMIUM_THRESHOLD else 'live_service'

    if _is_number(price):
        return 'aa_premium' if price >= SINGLEPLAYER_PREMIUM_THRESHOLD else 'premium_singleplayer'

    return 'premium_singleplayer'


def archetype_label(archetype: str) -> str:
    return ARCHETYPE_LABELS[archetype]


def score_interpretation(score: int, archetype: str) -> str:
    strong, moderate = SCORE_THRESHOLDS[archetype]
    if score >= strong:
        return "Strong foundation"
    if score >= moderate:
        return "Solid base with optimization opportunities"
    return "Significant revenue optimization opportunities"
