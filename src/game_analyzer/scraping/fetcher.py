# ===== IMPORTS & DEPENDENCIES =====
import logging
import aiohttp
from urllib.parse import quote

from game_analyzer.core.base_client import BaseWebClient
from game_analyzer.config import RELAY_URL_TEMPLATE, FETCH_TIMEOUT

# ===== CONFIGURATION & CONSTANTS =====
logger = logging.getLogger(__name__)

# ===== CORE BUSINESS LOGIC =====
class PageFetcher(BaseWebClient):
    """Retrieves raw store page markup through a relay that strips cross-origin restrictions."""

    def __init__(self, session: aiohttp.ClientSession, relay_template: str = RELAY_URL_TEMPLATE):
        super().__init__(session=session, request_timeout=FETCH_TIMEOUT)
        self.relay_template = relay_template

    def relay_url(self, url: str) -> str:
        """Wraps the target URL in the relay endpoint."""
        return self.relay_template.format(url=quote(url, safe=''))

    async def fetch(self, url: str) -> str:
        """
        Returns the raw page text for `url`.
        Raises FetchFailure carrying the HTTP status or the network error.
        """
        html = await self._get_text(self.relay_url(url))
        logger.info(f"✅ [{self.__class__.__name__}] Received {len(html)} characters for {url}")
        return html
