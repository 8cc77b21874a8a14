# ===== IMPORTS & DEPENDENCIES =====
import logging
from dataclasses import dataclass, field
from typing import List

from game_analyzer.config import UNKNOWN_TITLE, TITLE_MIN_LENGTH, TITLE_MAX_LENGTH, PRICE_WARNING_MAX
from game_analyzer.models.game import GameMetadata, PLATFORMS, ARCHETYPES, RELEASE_STATES, FREE

# ===== CONFIGURATION & CONSTANTS =====
logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """Outcome of validating a merged record. Errors block the pipeline, warnings do not."""

    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


# ===== CORE BUSINESS LOGIC =====
def validate_game_metadata(metadata: GameMetadata) -> ValidationResult:
    """Checks a merged record. Never raises; every problem is reported in the result."""
    result = ValidationResult()

    title = metadata.get('title')
    if not isinstance(title, str) or not title.strip() or title == UNKNOWN_TITLE:
        result.errors.append("Game title could not be extracted")
    elif len(title) < TITLE_MIN_LENGTH:
        result.errors.append("Game title is too short")
    elif len(title) > TITLE_MAX_LENGTH:
        result.errors.append("Game title is unusually long")

    if metadata.get('platform') not in PLATFORMS:
        result.errors.append("Invalid platform detected")

    price = metadata.get('price')
    if price != FREE and not _is_number(price):
        result.errors.append("Price format is invalid")
    elif _is_number(price) and not 0 <= price <= PRICE_WARNING_MAX:
        result.warnings.append("Unusual price detected")

    if metadata.get('archetype') not in ARCHETYPES:
        result.errors.append("Invalid game archetype")

    if metadata.get('releaseState') not in RELEASE_STATES:
        result.warnings.append("Unusual release state detected")

    if result.errors:
        logger.debug(f"[Validator] Rejected '{title}': {result.errors}")
    return result
