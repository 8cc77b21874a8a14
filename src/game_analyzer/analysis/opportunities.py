# ===== IMPORTS & DEPENDENCIES =====
import logging
from datetime import datetime, timezone
from typing import List, Callable, Dict

from game_analyzer.config import SCHEDULE_URL, SITE_NAME, MAX_REPORT_OPPORTUNITIES
from game_analyzer.models.game import GameMetadata, GameReport, Opportunity, FREE
from game_analyzer.analysis.classifier import classify_game, archetype_label, score_interpretation

# ===== CONFIGURATION & CONSTANTS =====
logger = logging.getLogger(__name__)

RELEVANCE_ORDER = {'critical': 0, 'high': 1, 'medium': 2}

# archetype -> penalty per opportunity of each relevance
PENALTY_WEIGHTS = {
    'premium_singleplayer': {'critical': 20, 'high': 12, 'medium': 8},
    'f2p_mobile': {'critical': 25, 'high': 15, 'medium': 8},
    'live_service': {'critical': 25, 'high': 15, 'medium': 10},
    'early_stage': {'critical': 20, 'high': 12, 'medium': 8},
    'aa_premium': {'critical': 18, 'high': 12, 'medium': 8},
}


def _opportunity(category: str, diagnosis: str, first: str, second: str, relevance: str) -> Opportunity:
    return Opportunity(category=category, diagnosis=diagnosis, actions=[first, second], relevance=relevance)


# ===== OPPORTUNITY RULES =====
def _premium_singleplayer(metadata: GameMetadata) -> List[Opportunity]:
    found = []
    price = metadata.get('price')
    if price != FREE and isinstance(price, (int, float)) and price < 10:
        found.append(_opportunity(
            "Pricing Strategy",
            "Price point may be undervaluing your game compared to market expectations",
            "Research comparable titles in your genre to establish market-rate pricing",
            "Test a launch discount strategy (15-20% off) to build early momentum while targeting higher base price",
            'high'))

    review_score = metadata.get('reviewScore')
    if review_score and review_score < 75:
        found.append(_opportunity(
            "User Experience",
            "Review score indicates friction in core experience or expectations mismatch",
            "Analyze negative reviews to identify top 3 recurring complaints",
            "Add optional tutorial or difficulty settings to reduce early-game frustration",
            'critical'))

    found.append(_opportunity(
        "Launch Optimization",
        "Premium single-player games benefit from strong launch momentum and word-of-mouth",
        "Add a free demo to improve wishlist-to-purchase conversion by 20-30%",
        "Prepare 3-5 key creator outreach messages with game keys for launch week",
        'high'))
    return found


def _f2p_mobile(metadata: GameMetadata) -> List[Opportunity]:
    return [
        _opportunity(
            "Monetization Structure",
            "F2P mobile games need clear IAP value hierarchy to maximize conversion",
            "Add a 'Best Value' visual badge to your mid-tier IAP pack to anchor player perception",
            "Test a $0.99 starter pack within first 3 minutes of gameplay to convert early engagement",
            'critical'),
        _opportunity(
            "Retention Systems",
            "Mobile games live or die on daily active user retention and habit formation",
            "Implement a 7-day login calendar with escalating rewards to build daily habit",
            "Add a comeback reward triggered 24 hours after last session to recover lapsed players",
            'critical'),
        _opportunity(
            "Recurring Revenue",
            "Subscription models increase lifetime value 3-5x for engaged mobile players",
            "Design a VIP subscription ($4.99-$9.99/month) with exclusive cosmetics and convenience bonuses",
            "Offer first-time subscribers a 3-day free trial to reduce friction",
            'high'),
    ]


def _live_service(metadata: GameMetadata) -> List[Opportunity]:
    found = [
        _opportunity(
            "Content Rhythm",
            "Live service games require consistent content updates to maintain player engagement",
            "Publish a 6-week content roadmap visible in-game and on social channels",
            "Establish a weekly mini-event and bi-weekly major update schedule to create reliable touchpoints",
            'critical'),
        _opportunity(
            "Community Management",
            "Active communities drive word-of-mouth growth and improve retention by 25-40%",
            "Create a Discord server with auto-roles for verified players and clear channel structure",
            "Post one gameplay clip or community highlight per week to feed social channels",
            'high'),
    ]
    if metadata.get('price') == FREE:
        found.append(_opportunity(
            "Battle Pass Design",
            "Free live-service games need battle pass or season systems for recurring revenue",
            "Design a 60-day battle pass with 50 tiers priced at $9.99 with cosmetic rewards",
            "Offer a free track with 20% of rewards to showcase value to non-payers",
            'high'))
    return found


def _early_stage(metadata: GameMetadata) -> List[Opportunity]:
    found = [_opportunity(
        "Audience Building",
        "Pre-launch games must build an email list and community before launch day",
        "Add email capture to your game's website with a launch-day notification promise",
        "Create a Discord server now and seed it with alpha/beta testers for day-one momentum",
        'critical')]

    if metadata.get('releaseState') == 'early_access':
        found.append(_opportunity(
            "Early Access Strategy",
            "Early Access games need clear roadmap communication to set expectations",
            "Publish a public roadmap showing planned features and estimated timelines",
            "Establish a bi-weekly devlog cadence to build transparency and trust",
            'critical'))
    else:
        found.append(_opportunity(
            "Pre-Launch Demo",
            "Pre-launch demos increase wishlist conversion and provide valuable feedback",
            "Submit a polished 30-60 minute demo to Steam Next Fest or equivalent event",
            "Add clear 'Wishlist Now' CTAs at demo completion to capture engaged players",
            'high'))

    found.append(_opportunity(
        "Launch Timing",
        "Launch windows heavily impact first-week visibility and sales momentum",
        "Avoid major AAA releases and holidays - target January, March, or September windows",
        "Prepare 10+ game keys for creator outreach starting 2 weeks before launch",
        'medium'))
    return found


def _aa_premium(metadata: GameMetadata) -> List[Opportunity]:
    return [
        _opportunity(
            "Post-Launch Revenue",
            "Premium AA/AAA titles benefit from planned DLC and season pass strategies",
            "Design a Year 1 content roadmap with 2-3 major DLC drops priced at $15-$25 each",
            "Offer a season pass pre-order at 15-20% discount to secure early commitment",
            'high'),
        _opportunity(
            "Community Engagement",
            "AAA games require active community management for sustained player base",
            "Establish official forums or Discord with dedicated community managers",
            "Run monthly community events or challenges with in-game rewards",
            'medium'),
    ]


OPPORTUNITY_RULES: Dict[str, Callable[[GameMetadata], List[Opportunity]]] = {
    'premium_singleplayer': _premium_singleplayer,
    'f2p_mobile': _f2p_mobile,
    'live_service': _live_service,
    'early_stage': _early_stage,
    'aa_premium': _aa_premium,
}


# ===== CORE BUSINESS LOGIC =====
def detect_opportunities(metadata: GameMetadata, archetype: str) -> List[Opportunity]:
    """All opportunities for the archetype, most relevant first (stable within a level)."""
    found = OPPORTUNITY_RULES[archetype](metadata)
    return sorted(found, key=lambda o: RELEVANCE_ORDER[o['relevance']])


def calculate_score(opportunities: List[Opportunity], archetype: str) -> int:
    weights = PENALTY_WEIGHTS[archetype]
    penalty = sum(weights[o['relevance']] for o in opportunities)
    return max(0, min(100, 100 - penalty))


def generate_report(metadata: GameMetadata, game_url: str) -> GameReport:
    """
    Builds the opportunity report for a validated record. The archetype is recomputed here
    so the opportunities always match the final merged data.
    """
    archetype = classify_game(metadata)
    context: GameMetadata = {**metadata, 'archetype': archetype}

    opportunities = detect_opportunities(context, archetype)
    score = calculate_score(opportunities, archetype)
    logger.info(f"✅ [ReportGenerator] '{context.get('title')}' scored {score}/100 as {archetype} with {len(opportunities)} opportunities.")

    return GameReport(
        gameContext=context,
        archetype=archetype,
        archetypeLabel=archetype_label(archetype),
        overallScore=score,
        interpretation=score_interpretation(score, archetype),
        opportunities=opportunities[:MAX_REPORT_OPPORTUNITIES],
        callToAction={'label': f"Book a free revenue review with {SITE_NAME}", 'url': SCHEDULE_URL},
        gameUrl=game_url,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
