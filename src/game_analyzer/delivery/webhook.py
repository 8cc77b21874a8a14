# ===== IMPORTS & DEPENDENCIES =====
import logging
import aiohttp
from typing import Dict, Any

from game_analyzer.core.base_client import BaseWebClient
from game_analyzer.core.errors import FetchFailure, DeliveryFailure
from game_analyzer.models.game import GameReport, LeadData
from game_analyzer.config import WEBHOOK_URL, WEBHOOK_TIMEOUT

# ===== CONFIGURATION & CONSTANTS =====
logger = logging.getLogger(__name__)


# ===== UTILITY FUNCTIONS =====
def build_webhook_payload(report: GameReport, lead: LeadData) -> Dict[str, Any]:
    """Lead contact fields plus a normalized summary of the analysis."""
    opportunities = report.get('opportunities', [])
    return {
        "lead": {key: lead[key] for key in ('name', 'email', 'company') if lead.get(key)},
        "analysis": {
            "gameTitle": report.get('gameContext', {}).get('title'),
            "overallScore": report.get('overallScore'),
            "archetype": report.get('archetype'),
            "opportunities": [
                {"category": o['category'], "relevance": o['relevance']} for o in opportunities
            ],
            "lowestCategories": [o['category'] for o in opportunities if o['relevance'] == 'critical'],
            "gameUrl": report.get('gameUrl'),
            "timestamp": report.get('timestamp'),
        },
    }


# ===== CORE BUSINESS LOGIC =====
class WebhookClient(BaseWebClient):
    """Posts lead notifications to the configured webhook. One attempt per call."""

    def __init__(self, session: aiohttp.ClientSession, url: str = WEBHOOK_URL):
        super().__init__(session=session, request_timeout=WEBHOOK_TIMEOUT)
        self.url = url

    @property
    def enabled(self) -> bool:
        return bool(self.url)

    async def send(self, payload: Dict[str, Any]) -> None:
        """Raises DeliveryFailure unless the webhook answers with a 2xx status."""
        try:
            status, _ = await self._post_json(self.url, payload)
        except FetchFailure as e:
            raise DeliveryFailure(self.url, cause=e.cause) from e

        if not 200 <= status < 300:
            logger.warning(f"⚠️ [{self.__class__.__name__}] Webhook answered HTTP {status}.")
            raise DeliveryFailure(self.url, status=status)
        logger.info(f"✅ [{self.__class__.__name__}] Webhook accepted payload (HTTP {status}).")
