# ===== IMPORTS & DEPENDENCIES =====
import re
import json
import logging
from typing import Any, Callable, Dict, List, Optional, Sequence
from bs4 import BeautifulSoup

from game_analyzer.config import MAX_GENRES, MULTIPLAYER_KEYWORDS
from game_analyzer.models.game import ScrapedData, FREE, UNKNOWN_PRICE
from game_analyzer.utils.store_detector import detect_store_family, clean_store_title

# ===== CONFIGURATION & CONSTANTS =====
logger = logging.getLogger(__name__)

DATE_TEXT = r'([A-Za-z]+\s+\d{1,2},\s+\d{4})'
PRICE_TEXT = r'(\d+(?:\.\d{1,2})?)'


# ===== PAGE WRAPPER =====
class StorePage:
    """Raw markup plus a lazily parsed soup shared by every rule evaluated on one page."""

    def __init__(self, html: str, url: str):
        self.html = html or ""
        self.url = url or ""
        self._soup: Optional[BeautifulSoup] = None

    @property
    def soup(self) -> BeautifulSoup:
        if self._soup is None:
            self._soup = BeautifulSoup(self.html, 'lxml')
        return self._soup


Rule = Callable[[StorePage], Optional[Any]]


# ===== RULE BUILDERS =====
def _to_int(value: str) -> Optional[int]:
    digits = re.sub(r'[^\d]', '', value or '')
    return int(digits) if digits else None


def _to_float(value: str) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def regex_rule(pattern: str, flags: int = re.IGNORECASE, convert: Callable[[str], Any] = str.strip) -> Rule:
    """Builds a rule returning `convert(group 1)` of the first match, or None."""
    compiled = re.compile(pattern, flags)

    def rule(page: StorePage) -> Optional[Any]:
        match = compiled.search(page.html)
        if not match:
            return None
        return convert(match.group(1))
    return rule


def regex_all_rule(pattern: str, flags: int = re.IGNORECASE) -> Rule:
    """Builds a rule returning every group-1 capture (stripped, de-duplicated), or None if there are none."""
    compiled = re.compile(pattern, flags)

    def rule(page: StorePage) -> Optional[List[str]]:
        values = []
        for match in compiled.finditer(page.html):
            value = re.sub(r'\s+', ' ', match.group(1)).strip()
            if value and value not in values:
                values.append(value)
        return values or None
    return rule


def signal_rule(pattern: str, value: Any, flags: int = re.IGNORECASE) -> Rule:
    """Builds a rule returning the constant `value` when `pattern` occurs anywhere on the page."""
    compiled = re.compile(pattern, flags)

    def rule(page: StorePage) -> Optional[Any]:
        return value if compiled.search(page.html) else None
    return rule


def meta_rule(*selectors: str) -> Rule:
    """Builds a rule reading the `content` attribute of the first matching meta tag."""
    def rule(page: StorePage) -> Optional[str]:
        for selector in selectors:
            tag = page.soup.select_one(selector)
            if tag and tag.get('content') and tag['content'].strip():
                return tag['content'].strip()
        return None
    return rule


def select_text_rule(selector: str) -> Rule:
    """Builds a rule returning the texts of all elements matching a CSS selector."""
    def rule(page: StorePage) -> Optional[List[str]]:
        values = []
        for tag in page.soup.select(selector):
            text = tag.get_text(strip=True)
            if text and text != '+' and text not in values:
                values.append(text)
        return values or None
    return rule


def constant_rule(value: Any) -> Rule:
    return lambda page: value


def _title_tag(page: StorePage) -> Optional[str]:
    tag = page.soup.find('title')
    if tag and tag.get_text(strip=True):
        return tag.get_text(strip=True)
    return None


MULTIPLAYER_PATTERN = re.compile(r'\b(?:' + '|'.join(re.escape(k) for k in MULTIPLAYER_KEYWORDS) + r')\b', re.IGNORECASE)


def _multiplayer(page: StorePage) -> bool:
    return bool(MULTIPLAYER_PATTERN.search(page.html))


def _price_from_cents(value: str) -> Optional[str]:
    cents = _to_int(value)
    if cents is None:
        return None
    return FREE if cents == 0 else f"{cents / 100:.2f}"


def _rating_out_of_five(value: str) -> Optional[int]:
    rating = _to_float(value)
    if rating is None or not 0 <= rating <= 5:
        return None
    return round(rating / 5 * 100)


def _json_ld_price(page: StorePage) -> Optional[str]:
    """Reads offers.price from JSON-LD blocks; 0 means free."""
    for script in page.soup.find_all('script', type='application/ld+json'):
        try:
            data = json.loads(script.string or '')
        except json.JSONDecodeError:
            continue
        offers = data.get('offers') if isinstance(data, dict) else None
        if isinstance(offers, list):
            offers = offers[0] if offers else None
        if isinstance(offers, dict) and offers.get('price') is not None:
            price = _to_float(str(offers['price']))
            if price is not None:
                return FREE if price == 0 else str(price)
    return None


# ===== FIELD RULES =====
# Each field maps to rules evaluated in order; the first non-None result wins.
COMMON_RULES: Dict[str, Sequence[Rule]] = {
    'title': [
        meta_rule("meta[property='og:title']", "meta[name='twitter:title']"),
        _title_tag,
    ],
    'description': [
        meta_rule("meta[property='og:description']", "meta[name='description']"),
    ],
    'imageUrl': [
        meta_rule("meta[property='og:image']", "meta[name='twitter:image']"),
    ],
}

STEAM_RULES: Dict[str, Sequence[Rule]] = {
    'price': [
        signal_rule(r'Free\s+to\s+Play', FREE),
        regex_rule(r'data-price-final="(\d+)"', convert=_price_from_cents),
        regex_rule(r'class="game_purchase_price price"[^>]*>\s*\$' + PRICE_TEXT),
        regex_rule(r'\$' + PRICE_TEXT),
        constant_rule(UNKNOWN_PRICE),
    ],
    'genre': [
        select_text_rule('a.app_tag'),
        regex_all_rule(r'<a[^>]*href="[^"]*tags[^"]*"[^>]*>([^<]+)</a>'),
        regex_all_rule(r'<a[^>]*href="[^"]*/genre/[^"]*"[^>]*>([^<]+)</a>'),
    ],
    'reviewScore': [
        regex_rule(r'(\d{1,3})% of the [\d,]+ user reviews[^<]*?positive', convert=_to_int),
        regex_rule(r'(\d{1,3})% of [^<]* positive', convert=_to_int),
    ],
    'reviewCount': [
        regex_rule(r'% of the ([\d,]+) user reviews', convert=_to_int),
        regex_rule(r'itemprop="reviewCount"\s+content="(\d+)"', convert=_to_int),
    ],
    'isMultiplayer': [_multiplayer],
    'releaseState': [
        signal_rule(r'Early Access', 'early_access', flags=0),
        signal_rule(r'Coming Soon|Upcoming', 'upcoming', flags=0),
        constant_rule('live'),
    ],
    'lastUpdate': [
        regex_rule(r'Release Date[:\s]*' + DATE_TEXT),
        regex_rule(r'<div class="release_date">.*?<div class="date">([^<]+)</div>', flags=re.IGNORECASE | re.DOTALL),
        regex_rule(r'<meta itemprop="datePublished" content="([^"]+)"'),
        regex_rule(r'"datePublished":\s*"([^"]+)"', flags=0),
    ],
}

MOBILE_RULES: Dict[str, Sequence[Rule]] = {
    'price': [
        _json_ld_price,
        signal_rule(r'\bFree\b', FREE, flags=0),
        regex_rule(r'\$' + PRICE_TEXT),
        constant_rule(UNKNOWN_PRICE),
    ],
    'genre': [
        regex_all_rule(r'"applicationCategory":\s*"([^"]+)"', flags=0),
        regex_all_rule(r'"genre":\s*"([^"]+)"', flags=0),
        regex_all_rule(r'itemprop="genre"[^>]*>([^<]+)<'),
        regex_rule(r'genre[^>]*>([^<]+)<', convert=lambda v: [v.strip()] if v.strip() else None),
    ],
    'reviewScore': [
        regex_rule(r'"ratingValue":\s*"?(\d+(?:\.\d+)?)', flags=0, convert=_rating_out_of_five),
    ],
    'reviewCount': [
        regex_rule(r'"ratingCount":\s*"?(\d+)', flags=0, convert=_to_int),
        regex_rule(r'"reviewCount":\s*"?(\d+)', flags=0, convert=_to_int),
    ],
    'isMultiplayer': [_multiplayer],
    'releaseState': [constant_rule('live')],
}

APP_STORE_DATE_RULES: Sequence[Rule] = [
    regex_rule(r'Released[:\s]+' + DATE_TEXT),
    regex_rule(r'"datePublished":\s*"([^"]+)"'),
    regex_rule(r'Release Date[:\s]*' + DATE_TEXT),
]

PLAY_STORE_DATE_RULES: Sequence[Rule] = [
    regex_rule(r'Released on\s+' + DATE_TEXT),
    regex_rule(r'"datePublished":\s*"([^"]+)"'),
]

INDIE_RULES: Dict[str, Sequence[Rule]] = {
    'price': [
        regex_rule(r'class="price_value"[^>]*>\s*\$' + PRICE_TEXT),
        signal_rule(r'Name your own price|Download Now|\bFree\b', FREE, flags=0),
        regex_rule(r'\$' + PRICE_TEXT),
        constant_rule(FREE),
    ],
    'genre': [
        regex_all_rule(r'<a[^>]*href="[^"]*/games/genre-[^"]*"[^>]*>([^<]+)</a>'),
        regex_all_rule(r'<a[^>]*href="[^"]*/games/tag-[^"]*"[^>]*>([^<]+)</a>'),
    ],
    'isMultiplayer': [_multiplayer],
    'releaseState': [
        signal_rule(r'>\s*(?:In development|Prototype)\s*<', 'early_access'),
        constant_rule('live'),
    ],
    'lastUpdate': [
        regex_rule(r'Published[:\s]+' + DATE_TEXT),
        regex_rule(r'<abbr[^>]*title="([^"]+)"[^>]*>\d+\s+(?:days?|months?|years?)\s+ago</abbr>'),
        regex_rule(r'Published</td>\s*<td>\s*<abbr[^>]*title="([^"]+)"'),
    ],
}

WEB_RULES: Dict[str, Sequence[Rule]] = {
    'price': [constant_rule(FREE)],
    'isMultiplayer': [constant_rule(False)],
    'releaseState': [constant_rule('live')],
}

FAMILY_RULES: Dict[str, Dict[str, Sequence[Rule]]] = {
    'steam': STEAM_RULES,
    'mobile': MOBILE_RULES,
    'indie': INDIE_RULES,
    'web': WEB_RULES,
}


# ===== CORE BUSINESS LOGIC =====
def apply_rules(rules: Sequence[Rule], page: StorePage) -> Optional[Any]:
    """Evaluates rules in order and returns the first non-None result."""
    for rule in rules:
        value = rule(page)
        if value is not None:
            return value
    return None


def _rules_for(family: str, url: str) -> Dict[str, Sequence[Rule]]:
    rules = dict(FAMILY_RULES[family])
    if family == 'mobile':
        rules['lastUpdate'] = APP_STORE_DATE_RULES if 'apps.apple.com' in url else PLAY_STORE_DATE_RULES
    return rules


def extract_metadata(html: str, url: str) -> ScrapedData:
    """
    Parses a store page into a ScrapedData draft.

    The storefront family is picked from the URL (steam, mobile, indie, then web fallback)
    and each field is filled by the first matching rule for that family. A field whose
    rules all miss is left out of the draft.
    """
    page = StorePage(html, url)
    family = detect_store_family(url)
    data: ScrapedData = {'platform': family}

    rules = {**COMMON_RULES, **_rules_for(family, page.url)}
    for field, field_rules in rules.items():
        value = apply_rules(field_rules, page)
        if value is None:
            logger.debug(f"[PatternExtractor] No rule matched '{field}' for {url}")
            continue
        data[field] = value

    if data.get('title'):
        data['title'] = clean_store_title(data['title'])
    if 'genre' in data:
        data['genre'] = data['genre'][:MAX_GENRES]
    if 'reviewScore' in data and not 0 <= data['reviewScore'] <= 100:
        del data['reviewScore']

    logger.info(f"✅ [PatternExtractor] Extracted {len(data)} fields from {family} page: {url}")
    return data
