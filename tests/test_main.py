"""Tests for the command line entry point."""

import json

import pytest

from game_analyzer import main as cli
from game_analyzer.analysis.opportunities import generate_report
from game_analyzer.core.database import Database
from game_analyzer.core.errors import AnalysisFailed, FetchFailure
from game_analyzer.core.result_cache import ResultCache

URL = "https://store.steampowered.com/app/1145360/Hades/"


def sample_report():
    return generate_report({
        'title': "Hades",
        'platform': 'steam',
        'platforms': [],
        'price': 9.99,
        'genre': [],
        'releaseState': 'live',
        'isMultiplayer': False,
        'reviewScore': 60,
        'archetype': 'premium_singleplayer',
    }, URL)


class FakePipeline:
    """Stands in for GameAnalysisPipeline and records how it was run."""

    outcome = None
    runs = []

    def __init__(self, session, queue=None) -> None:
        self.queue = queue

    async def run(self, url, lead=None, reveal_delay=0):
        FakePipeline.runs.append({"url": url, "lead": lead, "reveal_delay": reveal_delay})
        if isinstance(FakePipeline.outcome, Exception):
            raise FakePipeline.outcome
        return FakePipeline.outcome


@pytest.fixture
def db_path(tmp_path, monkeypatch) -> str:
    path = str(tmp_path / "analyzer.db")
    monkeypatch.setattr(cli, "DATABASE_PATH", path)
    monkeypatch.setattr(cli, "GameAnalysisPipeline", FakePipeline)
    FakePipeline.runs = []
    return path


class TestFormatReport:
    """Tests for the terminal rendering."""

    def test_lists_opportunities(self) -> None:
        """Test that the header, ranked opportunities and call to action are shown."""
        text = cli.format_report(sample_report())

        assert text.startswith("Hades (steam, $9.99)")
        assert "Archetype: Premium Single-Player" in text
        assert "1. [CRITICAL] User Experience" in text
        assert text.rstrip().endswith(sample_report()['callToAction']['url'])


class TestMain:
    """Tests for main."""

    @pytest.mark.asyncio
    async def test_success_caches_report(self, db_path, capsys) -> None:
        """Test that a finished analysis is printed and cached."""
        FakePipeline.outcome = sample_report()

        code = await cli.main([URL, "--no-delay", "--email", "sam@example.com", "--name", "Sam"])

        assert code == 0
        assert FakePipeline.runs == [{
            "url": URL,
            "lead": {"name": "Sam", "email": "sam@example.com"},
            "reveal_delay": 0,
        }]
        assert ResultCache(Database(db_path)).load()['result']['archetype'] == 'premium_singleplayer'
        assert "Premium Single-Player" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_json_output(self, db_path, capsys) -> None:
        """Test the JSON rendering."""
        FakePipeline.outcome = sample_report()

        await cli.main([URL, "--no-delay", "--json"])

        assert json.loads(capsys.readouterr().out)['gameUrl'] == URL

    @pytest.mark.asyncio
    async def test_no_deliver_drops_lead(self, db_path) -> None:
        """Test that --no-deliver runs without a lead."""
        FakePipeline.outcome = sample_report()

        await cli.main([URL, "--no-delay", "--email", "sam@example.com", "--no-deliver"])

        assert FakePipeline.runs[0]["lead"] is None

    @pytest.mark.asyncio
    async def test_failure_offers_manual_entry(self, db_path, capsys) -> None:
        """Test that a failed analysis exits non-zero and caches nothing."""
        FakePipeline.outcome = AnalysisFailed('fetch_failed', FetchFailure(URL, status=503))

        code = await cli.main([URL, "--no-delay"])

        assert code == 1
        assert "manually" in capsys.readouterr().err
        assert ResultCache(Database(db_path)).load() is None
