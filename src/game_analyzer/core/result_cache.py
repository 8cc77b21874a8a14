# ===== IMPORTS & DEPENDENCIES =====
import json
import logging
from datetime import datetime, timezone
from typing import Optional, Dict, Any

from game_analyzer.core.database import Database
from game_analyzer.models.game import GameReport, LeadData
from game_analyzer.config import RESULT_CACHE_KEY

# ===== CONFIGURATION & CONSTANTS =====
logger = logging.getLogger(__name__)

# ===== CORE BUSINESS LOGIC =====
class ResultCache:
    """Keeps the most recently computed report (and its lead) under one fixed key."""

    def __init__(self, db: Database, key: str = RESULT_CACHE_KEY):
        self.db = db
        self.key = key

    def save(self, report: GameReport, lead: Optional[LeadData] = None) -> None:
        stored = {
            "result": report,
            "lead": lead,
            "savedAt": datetime.now(timezone.utc).isoformat(),
        }
        self.db.set_item(self.key, json.dumps(stored, ensure_ascii=False))
        logger.info(f"💾 [{self.__class__.__name__}] Saved report for '{report['gameContext'].get('title')}'.")

    def load(self) -> Optional[Dict[str, Any]]:
        """Returns {'result', 'lead', 'savedAt'} or None if nothing usable is stored."""
        stored = self.db.get_item(self.key)
        if not stored:
            return None
        try:
            data = json.loads(stored)
        except json.JSONDecodeError:
            logger.warning(f"⚠️ [{self.__class__.__name__}] Cached result is not valid JSON. Ignoring it.")
            return None
        return data if isinstance(data, dict) and 'result' in data else None

    def clear(self) -> None:
        self.db.remove_item(self.key)
