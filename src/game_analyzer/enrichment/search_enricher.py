# ===== IMPORTS & DEPENDENCIES =====
import re
import json
import math
import logging
import aiohttp
from typing import Optional, Dict, Any, List, Tuple

from game_analyzer.core.base_client import BaseWebClient
from game_analyzer.core.errors import FetchFailure, ParseFailure
from game_analyzer.models.game import EnrichmentPatch, EnrichmentResult, FREE
from game_analyzer.config import ENRICHMENT_API_URL, ENRICHMENT_API_KEY, ENRICHMENT_TIMEOUT, JSON_HEADERS
from game_analyzer.utils.store_detector import site_scope_for, clean_store_title

# ===== CONFIGURATION & CONSTANTS =====
logger = logging.getLogger(__name__)

SOURCES_SCHEMA = [{"title": "string", "url": "string"}]

# Scoped queries issued one after another. `{title}` and `{scope}` are filled per game;
# a query without `{scope}` in its scope template is sent unscoped.
ENRICHMENT_QUERIES = [
    {
        "name": "identity",
        "query": '"{title}" developer publisher',
        "scope": "{scope}",
        "schema": {"developer": "string or null", "publisher": "string or null", "sources": SOURCES_SCHEMA},
    },
    {
        "name": "platforms",
        "query": '"{title}" platforms Windows Mac Linux PlayStation Xbox Nintendo Switch Steam Deck',
        "scope": None,
        "schema": {"platforms": ["array of strings"], "sources": SOURCES_SCHEMA},
    },
    {
        "name": "price",
        "query": '"{title}" price USD',
        "scope": "{scope}",
        "schema": {"priceUSD": "number or null", "currency": "string or null", "sources": SOURCES_SCHEMA},
    },
    {
        "name": "reviews",
        "query": '"{title}" reviews rating score',
        "scope": "site:steampowered.com OR site:metacritic.com",
        "schema": {"reviewCount": "number or null", "reviewScore": "number or null", "sources": SOURCES_SCHEMA},
    },
    {
        "name": "players",
        "query": '"{title}" "copies sold" OR "players peak"',
        "scope": "site:steamdb.info OR {scope}",
        "schema": {
            "salesCopies": "number or null",
            "playerPeak": "number or null",
            "currentPlayers": "number or null",
            "estimatedOwners": "string or null",
            "estimatedRevenue": "string or null",
            "salesMilestone": "string or null",
            "sources": SOURCES_SCHEMA,
        },
    },
]

# Response field -> (patch field, expected kind)
FIELD_MAP = {
    "developer": ("developer", "str"),
    "publisher": ("publisher", "str"),
    "platforms": ("platforms", "str_list"),
    "reviewCount": ("reviewCount", "count"),
    "reviewScore": ("reviewScore", "score"),
    "salesCopies": ("copiesSold", "count"),
    "playerPeak": ("peakPlayers", "count"),
    "currentPlayers": ("currentPlayers", "count"),
    "estimatedOwners": ("estimatedOwners", "str"),
    "estimatedRevenue": ("estimatedRevenue", "str"),
    "salesMilestone": ("salesMilestone", "str"),
}


# ===== PARSING HELPERS =====
def _is_number(value: Any) -> bool:
    """Finite int or float; bools and the NaN/Infinity literals json.loads accepts are rejected."""
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _coerce(value: Any, kind: str) -> Optional[Any]:
    """Returns the value in the expected shape, or None when it does not fit."""
    if kind == "str":
        return value.strip() if isinstance(value, str) and value.strip() else None
    if kind == "str_list":
        if not isinstance(value, list):
            return None
        items = [item.strip() for item in value if isinstance(item, str) and item.strip()]
        return items or None
    if kind == "count":
        return int(value) if _is_number(value) and value >= 0 else None
    if kind == "score":
        return round(value) if _is_number(value) and 0 <= value <= 100 else None
    return None


def parse_service_response(text: str) -> Tuple[Dict[str, Any], List[str], bool]:
    """
    Parses one enrichment response into (fields, citations, grounded).

    Accepts either an envelope `{"data": {...}, "citations": [...], "grounded": bool}`
    or a bare JSON object of fields with an optional `sources` list. Code fences are
    stripped first. Raises ParseFailure for anything that is not a JSON object.
    """
    cleaned = re.sub(r'```(?:json)?', '', text or '').strip()
    try:
        body = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise ParseFailure(f"Response is not valid JSON: {e.msg}", raw=cleaned) from e
    if not isinstance(body, dict):
        raise ParseFailure(f"Expected a JSON object, got {type(body).__name__}", raw=cleaned)

    if isinstance(body.get("data"), dict):
        fields = body["data"]
        raw_citations = body.get("citations")
        citations = list(raw_citations) if isinstance(raw_citations, list) else []
    else:
        fields = body
        citations = []

    sources = fields.get("sources")
    for source in sources if isinstance(sources, list) else []:
        if isinstance(source, dict) and isinstance(source.get("url"), str):
            citations.append(source["url"])
    citations = [c for c in citations if isinstance(c, str) and c]

    # Without an explicit flag, any cited source counts as grounding
    grounded = bool(body["grounded"]) if "grounded" in body else bool(citations)
    return fields, citations, grounded


def fields_to_patch(fields: Dict[str, Any]) -> EnrichmentPatch:
    """Maps service fields to a metadata patch, dropping values of the wrong type."""
    patch: EnrichmentPatch = {}
    for source_key, (target_key, kind) in FIELD_MAP.items():
        if source_key in fields and fields[source_key] is not None:
            value = _coerce(fields[source_key], kind)
            if value is not None:
                patch[target_key] = value
            else:
                logger.debug(f"[SearchEnricher] Dropped '{source_key}' with unexpected value: {fields[source_key]!r}")

    price = fields.get("priceUSD")
    currency = fields.get("currency") or fields.get("priceLabel")
    if _is_number(price) and price >= 0:
        patch["price"] = FREE if price == 0 else float(price)
    elif isinstance(currency, str) and currency.strip().lower() == FREE:
        patch["price"] = FREE
    return patch


# ===== CORE BUSINESS LOGIC =====
class SearchEnricher(BaseWebClient):
    """
    Enriches a game with fields that store markup reports unreliably (developer, publisher,
    platforms, price, reviews, sales and player counts) by asking an external search + LLM
    service a series of scoped questions.

    Enrichment is best-effort: an unreachable service, a non-2xx answer, or a response that
    does not parse as the expected object contributes an empty patch for that query.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        api_url: str = ENRICHMENT_API_URL,
        api_key: Optional[str] = ENRICHMENT_API_KEY
    ):
        super().__init__(session=session, request_timeout=ENRICHMENT_TIMEOUT)
        self.api_url = api_url
        self.api_key = api_key

    def _headers(self) -> Dict[str, str]:
        if not self.api_key:
            return JSON_HEADERS
        return {**JSON_HEADERS, 'Authorization': f"Bearer {self.api_key}"}

    def build_request(self, entry: Dict[str, Any], title: str, scope: str) -> Dict[str, Any]:
        return {
            "query": entry["query"].format(title=title),
            "schema": entry["schema"],
            "siteScope": entry["scope"].format(scope=scope) if entry["scope"] else None,
        }

    async def _run_query(self, entry: Dict[str, Any], title: str, scope: str) -> Tuple[EnrichmentPatch, List[str], bool]:
        request = self.build_request(entry, title, scope)
        try:
            status, text = await self._post_json(self.api_url, request, headers=self._headers())
        except FetchFailure as e:
            logger.warning(f"⚠️ [{self.__class__.__name__}] '{entry['name']}' query failed: {e}")
            return {}, [], False

        if not 200 <= status < 300:
            logger.warning(f"⚠️ [{self.__class__.__name__}] '{entry['name']}' query returned HTTP {status}. Using empty patch.")
            return {}, [], False

        try:
            fields, citations, grounded = parse_service_response(text)
        except ParseFailure as e:
            logger.warning(f"⚠️ [{self.__class__.__name__}] '{entry['name']}' response could not be parsed ({e}). Using empty patch.")
            return {}, [], False

        patch = fields_to_patch(fields)
        logger.debug(f"[{self.__class__.__name__}] '{entry['name']}' answered {sorted(patch)} (grounded={grounded})")
        return patch, citations, grounded

    async def enrich(self, title: str, store_url: str) -> EnrichmentResult:
        """
        Returns an EnrichmentResult whose patch holds every field any query answered,
        plus whether any answer was grounded in retrieved sources and the de-duplicated
        source list in first-seen order.
        """
        result: EnrichmentResult = {"patch": {}, "grounded": False, "sources": []}
        if not self.api_url:
            logger.info(f"[{self.__class__.__name__}] ENRICHMENT_API_URL not set. Skipping enrichment for '{title}'.")
            return result

        query_title = clean_store_title(title)
        scope = site_scope_for(store_url)
        logger.info(f"➡️ [{self.__class__.__name__}] Enriching '{query_title}' with scope '{scope}'")

        for entry in ENRICHMENT_QUERIES:
            patch, citations, grounded = await self._run_query(entry, query_title, scope)
            for key, value in patch.items():
                result["patch"].setdefault(key, value)
            result["grounded"] = result["grounded"] or grounded
            for citation in citations:
                if citation not in result["sources"]:
                    result["sources"].append(citation)

        logger.info(f"✅ [{self.__class__.__name__}] Enriched '{query_title}' with {len(result['patch'])} fields from {len(result['sources'])} sources.")
        return result
