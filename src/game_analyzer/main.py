# ===== IMPORTS & DEPENDENCIES =====
import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

import aiohttp

# --- Configuration ---
from game_analyzer.config import LOG_LEVEL, DATABASE_PATH, REPORT_REVEAL_DELAY

# --- Core Components ---
from game_analyzer.core.database import Database
from game_analyzer.core.errors import AnalysisFailed
from game_analyzer.core.result_cache import ResultCache
from game_analyzer.delivery.queue import DeliveryQueue, SqliteDeliveryStore
from game_analyzer.models.game import GameReport, LeadData
from game_analyzer.pipeline import GameAnalysisPipeline

# ===== CONFIGURATION & CONSTANTS =====
logging.basicConfig(
    level=LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logger = logging.getLogger(__name__)


# ===== PRESENTATION =====
def format_report(report: GameReport) -> str:
    """Plain-text rendering of a report for the terminal."""
    game = report['gameContext']
    price = game.get('price')
    lines = [
        f"{game.get('title')} ({game.get('platform')}, {'Free' if price == 'free' else f'${price}'})",
        f"Archetype: {report['archetypeLabel']}",
        f"Revenue health: {report['overallScore']}/100 - {report['interpretation']}",
        "",
    ]
    for index, opportunity in enumerate(report['opportunities'], start=1):
        lines.append(f"{index}. [{opportunity['relevance'].upper()}] {opportunity['category']}")
        lines.append(f"   {opportunity['diagnosis']}")
        for action in opportunity['actions']:
            lines.append(f"   - {action}")
    lines.append("")
    lines.append(f"{report['callToAction']['label']}: {report['callToAction']['url']}")
    return "\n".join(lines)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Analyze a game's store page for revenue opportunities.")
    parser.add_argument("url", help="Store page URL (Steam, App Store, Google Play, itch.io, or any web page)")
    parser.add_argument("--name", help="Lead name")
    parser.add_argument("--email", help="Lead email; required for webhook delivery")
    parser.add_argument("--company", help="Lead company")
    parser.add_argument("--no-deliver", action="store_true", help="Do not send the lead notification")
    parser.add_argument("--no-delay", action="store_true", help="Skip the pacing delay before the report")
    parser.add_argument("--json", action="store_true", help="Print the report as JSON")
    return parser.parse_args(argv)


# ===== INITIALIZATION & STARTUP =====
async def main(argv: Optional[List[str]] = None) -> int:
    """Initializes and runs the analysis pipeline for one URL."""
    args = parse_args(argv)
    db = Database(DATABASE_PATH)
    cache = ResultCache(db)
    queue = DeliveryQueue(SqliteDeliveryStore(db))

    lead: Optional[LeadData] = None
    if args.email and not args.no_deliver:
        lead = {key: value for key, value in (('name', args.name), ('email', args.email), ('company', args.company)) if value}

    async with aiohttp.ClientSession() as session:
        pipeline = GameAnalysisPipeline(session, queue=queue)
        try:
            report = await pipeline.run(
                args.url,
                lead=lead,
                reveal_delay=0 if args.no_delay else REPORT_REVEAL_DELAY,
            )
        except AnalysisFailed as e:
            logger.error(f"❌ Automatic analysis failed ({e.reason}): {e.cause}")
            print("Could not analyze this URL automatically. Please enter the game details manually.", file=sys.stderr)
            return 1

    cache.save(report, lead)
    print(json.dumps(report, indent=2, ensure_ascii=False) if args.json else format_report(report))
    return 0


def run() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
