"""Shared fixtures: a scripted aiohttp session stand-in and sample store pages."""

from typing import Any, Dict, List, Optional

import pytest

from game_analyzer.delivery.queue import DeliveryQueue, InMemoryDeliveryStore


class FakeResponse:
    """Minimal aiohttp response usable as an async context manager."""

    def __init__(self, status: int = 200, body: str = "") -> None:
        self.status = status
        self.body = body

    async def text(self) -> str:
        return self.body

    async def __aenter__(self) -> "FakeResponse":
        return self

    async def __aexit__(self, *exc_info: Any) -> bool:
        return False


class FakeSession:
    """
    Replays scripted responses for GET and POST calls and records every request.

    Each script is consumed in order; the last item is repeated once the script
    runs out. An exception instance in a script is raised instead of answering.
    """

    def __init__(
        self,
        get: Optional[List[Any]] = None,
        post: Optional[List[Any]] = None,
    ) -> None:
        self.get_responses = list(get or [])
        self.post_responses = list(post or [])
        self.requests: List[Dict[str, Any]] = []

    @staticmethod
    def _next(script: List[Any]) -> FakeResponse:
        if not script:
            raise AssertionError("No scripted response left")
        item = script.pop(0) if len(script) > 1 else script[0]
        if isinstance(item, BaseException):
            raise item
        return item

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        self.requests.append({"method": "GET", "url": url, **kwargs})
        return self._next(self.get_responses)

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        self.requests.append({"method": "POST", "url": url, **kwargs})
        return self._next(self.post_responses)

    def count(self, method: str) -> int:
        return sum(1 for request in self.requests if request["method"] == method)


class RecordedSleep:
    """Async sleep replacement that only records the requested delays."""

    def __init__(self) -> None:
        self.calls: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def recorded_sleep() -> RecordedSleep:
    return RecordedSleep()


@pytest.fixture
def memory_queue() -> DeliveryQueue:
    return DeliveryQueue(InMemoryDeliveryStore())


def find_entry(queue: DeliveryQueue, entry_id: str) -> Optional[Dict[str, Any]]:
    """The listed queue entry with the given id, or None."""
    return next((entry for entry in queue.list_pending() if entry['id'] == entry_id), None)


STEAM_URL = "https://store.steampowered.com/app/367520/Hollow_Knight/"
STEAM_F2P_URL = "https://store.steampowered.com/app/570/Dota_2/"
APP_STORE_URL = "https://apps.apple.com/us/app/monument-valley/id728293409"
PLAY_STORE_URL = "https://play.google.com/store/apps/details?id=com.supercell.clashroyale"
ITCH_URL = "https://maddymakesgames.itch.io/celeste-classic"
WEB_URL = "https://example.com/my-game"

STEAM_PAID_HTML = """
<html><head>
<title>Hollow Knight on Steam</title>
<meta property="og:title" content="Hollow Knight on Steam">
<meta property="og:description" content="Forge your own path in Hollow Knight!">
<meta property="og:image" content="https://cdn.example.com/hollow_knight.jpg">
</head><body>
<div class="game_purchase_price price" data-price-final="1499">$14.99</div>
<a href="https://store.steampowered.com/tags/en/Metroidvania/" class="app_tag">Metroidvania</a>
<a href="https://store.steampowered.com/tags/en/Souls-like/" class="app_tag">Souls-like</a>
<a href="https://store.steampowered.com/tags/en/2D/" class="app_tag">2D</a>
<a href="https://store.steampowered.com/tags/en/Difficult/" class="app_tag">Difficult</a>
<a class="app_tag add_button">+</a>
<span class="responsive_reviewdesc">97% of the 245,112 user reviews for this game are positive.</span>
<div class="release_date"><div class="subtitle">Release Date:</div><div class="date">Feb 24, 2017</div></div>
<div class="game_area_details_specs">Single-player</div>
</body></html>
"""

STEAM_F2P_HTML = """
<html><head><title>Dota 2 on Steam</title></head><body>
<div class="game_purchase_price price">Free to Play</div>
<a href="https://store.steampowered.com/tags/en/MOBA/">MOBA</a>
<a href="https://store.steampowered.com/tags/en/Strategy/">Strategy</a>
<div class="game_area_details_specs">Online PvP</div>
<div class="game_area_details_specs">Multi-player</div>
</body></html>
"""

APP_STORE_HTML = """
<html><head>
<meta property="og:title" content="Monument Valley on the App Store">
<script type="application/ld+json">
{"@type": "SoftwareApplication", "name": "Monument Valley", "applicationCategory": "Games",
 "offers": {"price": 3.99, "priceCurrency": "USD"},
 "aggregateRating": {"ratingValue": 4.5, "reviewCount": 120000}}
</script>
</head><body><p>Released: March 4, 2014</p></body></html>
"""

PLAY_STORE_HTML = """
<html><head><title>Clash Royale - Apps on Google Play</title></head><body>
<span itemprop="genre">Strategy</span>
<button>Install</button><span>Free</span>
<p>Real-time PvP battles with players around the world.</p>
<div>Released on Mar 2, 2016</div>
</body></html>
"""

ITCH_HTML = """
<html><head><title>Celeste Classic by Maddy Makes Games - itch.io</title></head><body>
<span class="price_value">$4.99</span>
<table>
<tr><td>Genre</td><td><a href="https://itch.io/games/genre-platformer">Platformer</a></td></tr>
<tr><td>Tags</td><td><a href="https://itch.io/games/tag-pixel-art">Pixel Art</a>, <a href="https://itch.io/games/tag-retro">Retro</a></td></tr>
<tr><td>Published</td><td><abbr title="10 October 2023 @ 12:00 UTC">Oct 10, 2023</abbr></td></tr>
</table>
</body></html>
"""

ITCH_DEVELOPMENT_HTML = """
<html><head><title>Tiny Dungeon by someone - itch.io</title></head><body>
<tr><td>Status</td><td><a href="https://itch.io/games/in-development">In development</a></td></tr>
<a href="https://itch.io/games/tag-roguelike">Roguelike</a>
<a class="button">Download Now</a>
</body></html>
"""

WEB_HTML = """
<html><head><title>My Game</title>
<meta name="description" content="A multiplayer game about boats."></head>
<body><p>Buy now for $19.99</p></body></html>
"""
