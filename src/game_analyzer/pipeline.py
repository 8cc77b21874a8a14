# ===== IMPORTS & DEPENDENCIES =====
import asyncio
import logging
import sqlite3
import aiohttp
from dataclasses import dataclass, field
from typing import Optional, List, Callable, Awaitable

# --- Configuration ---
from game_analyzer.config import (
    DATABASE_PATH, UNKNOWN_TITLE,
    FETCH_MAX_ATTEMPTS, FETCH_RETRY_DELAY, FETCH_TIMEOUT,
    WEBHOOK_MAX_ATTEMPTS, WEBHOOK_RETRY_DELAY, WEBHOOK_TIMEOUT,
)

# --- Core Components ---
from game_analyzer.core.database import Database
from game_analyzer.core.errors import AnalysisFailed, FetchFailure, ValidationFailure, DeliveryFailure
from game_analyzer.core.retry import retry_with_backoff

# --- Data Models ---
from game_analyzer.models.game import GameMetadata, GameReport, LeadData, EnrichmentResult

# --- Pipeline Stages ---
from game_analyzer.scraping.fetcher import PageFetcher
from game_analyzer.scraping.extractor import extract_metadata
from game_analyzer.enrichment.search_enricher import SearchEnricher
from game_analyzer.analysis.merge import build_game_metadata, merge_metadata
from game_analyzer.analysis.validator import validate_game_metadata
from game_analyzer.analysis.classifier import classify_game
from game_analyzer.analysis.opportunities import generate_report

# --- Delivery ---
from game_analyzer.delivery.webhook import WebhookClient, build_webhook_payload
from game_analyzer.delivery.queue import DeliveryQueue, SqliteDeliveryStore

# ===== CONFIGURATION & CONSTANTS =====
logger = logging.getLogger(__name__)

_delivery_queue: Optional[DeliveryQueue] = None


def get_delivery_queue() -> DeliveryQueue:
    """The process-wide persisted delivery queue, created on first access."""
    global _delivery_queue
    if _delivery_queue is None:
        _delivery_queue = DeliveryQueue(SqliteDeliveryStore(Database(DATABASE_PATH)))
    return _delivery_queue


@dataclass
class AnalysisOutcome:
    """Value form of `analyze`: either a metadata record or the reason it failed."""

    ok: bool
    metadata: Optional[GameMetadata] = None
    reason: Optional[str] = None
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    grounded: bool = False
    sources: List[str] = field(default_factory=list)


# ===== CORE BUSINESS LOGIC / PIPELINE =====
class GameAnalysisPipeline:
    """
    Orchestrates fetch -> extraction -> enrichment -> merge -> validation -> classification
    for one store URL, and best-effort webhook delivery of finished reports.
    Each stage consumes only the completed output of the stage before it.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        queue: Optional[DeliveryQueue] = None,
        fetcher: Optional[PageFetcher] = None,
        enricher: Optional[SearchEnricher] = None,
        webhook: Optional[WebhookClient] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.session = session
        self.fetcher = fetcher or PageFetcher(session)
        self.enricher = enricher or SearchEnricher(session)
        self.webhook = webhook or WebhookClient(session)
        self._queue = queue
        self._sleep = sleep
        self.last_enrichment: Optional[EnrichmentResult] = None

    @property
    def queue(self) -> DeliveryQueue:
        if self._queue is None:
            self._queue = get_delivery_queue()
        return self._queue

    async def _fetch_page(self, url: str) -> str:
        """Fetches the store page with bounded retries."""
        def on_retry(attempt: int, error: BaseException) -> None:
            logger.info(f"[{self.__class__.__name__}] Scraping attempt {attempt} failed: {error}")

        try:
            return await retry_with_backoff(
                lambda: self.fetcher.fetch(url),
                max_attempts=FETCH_MAX_ATTEMPTS,
                delay=FETCH_RETRY_DELAY,
                timeout=FETCH_TIMEOUT,
                on_retry=on_retry,
                sleep=self._sleep,
            )
        except FetchFailure:
            raise
        except asyncio.TimeoutError as e:
            raise FetchFailure(url, cause=e) from e

    async def _enrich(self, draft: GameMetadata, url: str) -> EnrichmentResult:
        if draft['title'] == UNKNOWN_TITLE:
            logger.info(f"[{self.__class__.__name__}] No title extracted from {url}. Skipping enrichment.")
            return {"patch": {}, "grounded": False, "sources": []}
        return await self.enricher.enrich(draft['title'], url)

    async def analyze(self, url: str) -> GameMetadata:
        """
        Returns a validated GameMetadata with its archetype assigned.
        Raises AnalysisFailed ('fetch_failed' or 'validation_failed'); the caller should
        then offer manual entry.
        """
        logger.info(f"🚀 [{self.__class__.__name__}] Analyzing {url}")
        try:
            html = await self._fetch_page(url)
        except FetchFailure as e:
            logger.error(f"❌ [{self.__class__.__name__}] Could not fetch {url}: {e}")
            raise AnalysisFailed('fetch_failed', e) from e

        draft = build_game_metadata(extract_metadata(html, url))
        enrichment = await self._enrich(draft, url)
        self.last_enrichment = enrichment
        merged = merge_metadata(draft, enrichment['patch'])

        validation = validate_game_metadata(merged)
        if not validation.is_valid:
            logger.error(f"❌ [{self.__class__.__name__}] Metadata validation failed: {validation.errors}")
            failure = ValidationFailure(validation)
            raise AnalysisFailed('validation_failed', failure) from failure
        if validation.warnings:
            logger.warning(f"⚠️ [{self.__class__.__name__}] Metadata warnings: {validation.warnings}")

        merged['archetype'] = classify_game(merged)
        logger.info(f"✅ [{self.__class__.__name__}] '{merged['title']}' classified as {merged['archetype']}.")
        return merged

    async def analyze_outcome(self, url: str) -> AnalysisOutcome:
        """Same as `analyze`, but reports failure as a value instead of raising."""
        self.last_enrichment = None
        try:
            metadata = await self.analyze(url)
        except AnalysisFailed as e:
            errors = e.cause.errors if isinstance(e.cause, ValidationFailure) else [str(e.cause)]
            return AnalysisOutcome(ok=False, reason=e.reason, errors=errors)

        enrichment = self.last_enrichment or {"grounded": False, "sources": []}
        return AnalysisOutcome(
            ok=True,
            metadata=metadata,
            warnings=validate_game_metadata(metadata).warnings,
            grounded=enrichment['grounded'],
            sources=list(enrichment['sources']),
        )

    def build_report(self, metadata: GameMetadata, url: str) -> GameReport:
        return generate_report(metadata, url)

    async def _send_with_retry(self, payload: dict) -> None:
        def on_retry(attempt: int, error: BaseException) -> None:
            logger.info(f"[{self.__class__.__name__}] Webhook attempt {attempt} failed: {error}")

        await retry_with_backoff(
            lambda: self.webhook.send(payload),
            max_attempts=WEBHOOK_MAX_ATTEMPTS,
            delay=WEBHOOK_RETRY_DELAY,
            timeout=WEBHOOK_TIMEOUT,
            on_retry=on_retry,
            sleep=self._sleep,
        )

    async def deliver(self, report: GameReport, lead: LeadData) -> bool:
        """
        Sends the lead notification. Returns True on confirmed delivery. When retries are
        exhausted the payload is queued for a later drain and False is returned; delivery
        problems are never raised to the caller.
        """
        if not self.webhook.enabled:
            logger.warning(f"[{self.__class__.__name__}] WEBHOOK_URL not set. Skipping delivery.")
            return False

        payload = build_webhook_payload(report, lead)
        try:
            await self._send_with_retry(payload)
            return True
        except (DeliveryFailure, asyncio.TimeoutError) as e:
            logger.warning(f"⚠️ [{self.__class__.__name__}] Delivery failed ({e}). Queuing for later.")

        try:
            self.queue.enqueue(payload, lead)
        except (sqlite3.Error, OSError) as e:
            logger.error(f"❌ [{self.__class__.__name__}] Could not queue the failed delivery: {e}")
        return False

    async def drain_queue(self) -> int:
        """
        One retry pass over queued deliveries (run at session start). Entries at the
        attempt ceiling are skipped. Returns the number delivered.
        """
        if not self.webhook.enabled:
            return 0

        delivered = 0
        try:
            for entry in self.queue.retryable():
                self.queue.mark_attempted(entry['id'])
                try:
                    await self._send_with_retry(entry['payload'])
                except (DeliveryFailure, asyncio.TimeoutError) as e:
                    logger.warning(f"⚠️ [{self.__class__.__name__}] Queued delivery {entry['id']} failed again: {e}")
                    continue
                self.queue.remove(entry['id'])
                delivered += 1
        except (sqlite3.Error, OSError) as e:
            logger.error(f"❌ [{self.__class__.__name__}] Delivery queue unavailable, stopping drain: {e}")

        if delivered:
            logger.info(f"✅ [{self.__class__.__name__}] Delivered {delivered} queued notifications.")
        return delivered

    async def run(self, url: str, lead: Optional[LeadData] = None, reveal_delay: float = 0) -> GameReport:
        """Drains the queue, analyzes the URL, paces the reveal, and delivers the report if a lead is given."""
        await self.drain_queue()
        metadata = await self.analyze(url)
        report = self.build_report(metadata, url)
        if reveal_delay > 0:
            await self._sleep(reveal_delay)
        if lead:
            await self.deliver(report, lead)
        return report
