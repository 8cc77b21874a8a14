# ===== IMPORTS & DEPENDENCIES =====
import logging
import asyncio
import aiohttp
from typing import Optional, Any, Dict, Tuple

from game_analyzer.config import COMMON_HEADERS, JSON_HEADERS
from game_analyzer.core.errors import FetchFailure

# ===== CONFIGURATION & CONSTANTS =====
logger = logging.getLogger(__name__)

# ===== CORE BUSINESS LOGIC =====
class BaseWebClient:
    """
    A base class for web clients sharing one aiohttp session.
    Retries are not handled here; callers wrap requests with `retry_with_backoff`.
    """

    def __init__(self, session: aiohttp.ClientSession, request_timeout: float = 25.0):
        self._session = session
        self._timeout = aiohttp.ClientTimeout(total=request_timeout)
        logger.debug(f"[{self.__class__.__name__}] Initialized with request timeout: {request_timeout}s")

    async def _get_text(self, url: str, headers: Optional[Dict[str, str]] = None) -> str:
        """
        GETs `url` and returns the body as text.
        Raises FetchFailure with the HTTP status on non-2xx, or with the network error as cause.
        """
        logger.info(f"➡️ [{self.__class__.__name__}] Fetching from network: {url}")
        try:
            async with self._session.get(url, headers=headers or COMMON_HEADERS, timeout=self._timeout) as response:
                if not 200 <= response.status < 300:
                    logger.warning(f"⚠️ [{self.__class__.__name__}] HTTP error on {url}: Status {response.status}")
                    raise FetchFailure(url, status=response.status)
                return await response.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning(f"⚠️ [{self.__class__.__name__}] Network error on {url}: {type(e).__name__}")
            raise FetchFailure(url, cause=e) from e

    async def _post_json(
        self,
        url: str,
        payload: Dict[str, Any],
        headers: Optional[Dict[str, str]] = None
    ) -> Tuple[int, str]:
        """
        POSTs `payload` as JSON and returns (status, body text) without judging the status.
        Network errors are raised as FetchFailure.
        """
        logger.info(f"➡️ [{self.__class__.__name__}] Posting to: {url}")
        try:
            async with self._session.post(url, json=payload, headers=headers or JSON_HEADERS, timeout=self._timeout) as response:
                body = await response.text()
                return response.status, body
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning(f"⚠️ [{self.__class__.__name__}] Network error posting to {url}: {type(e).__name__}")
            raise FetchFailure(url, cause=e) from e
