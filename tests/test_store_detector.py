"""Tests for store family detection and title cleanup."""

import pytest

from game_analyzer.utils.store_detector import clean_store_title, detect_store_family, site_scope_for


class TestDetectStoreFamily:
    """Tests for detect_store_family."""

    @pytest.mark.parametrize("url,family", [
        ("https://store.steampowered.com/app/570/Dota_2/", 'steam'),
        ("https://steamcommunity.com/app/570", 'steam'),
        ("https://apps.apple.com/us/app/monument-valley/id728293409", 'mobile'),
        ("https://play.google.com/store/apps/details?id=com.supercell.clashroyale", 'mobile'),
        ("https://maddymakesgames.itch.io/celeste-classic", 'indie'),
        ("https://www.example.com/game", 'web'),
        ("", 'web'),
    ])
    def test_families(self, url, family) -> None:
        """Test that each storefront maps to its family and unknown hosts fall back to web."""
        assert detect_store_family(url) == family

    def test_case_insensitive(self) -> None:
        """Test that host matching ignores case."""
        assert detect_store_family("HTTPS://STORE.STEAMPOWERED.COM/app/1") == 'steam'


class TestSiteScope:
    """Tests for site_scope_for."""

    def test_known_store(self) -> None:
        """Test that store URLs scope searches to the store and Wikipedia."""
        assert site_scope_for("https://store.steampowered.com/app/1") == "site:steampowered.com OR site:wikipedia.org"
        assert site_scope_for("https://someone.itch.io/game") == "site:itch.io OR site:wikipedia.org"

    def test_matches_domains_not_substrings(self) -> None:
        """Test that hosts merely containing a store keyword get the default scope."""
        assert site_scope_for("https://www.twitch.tv/directory/game/Hades") == "site:wikipedia.org"
        assert site_scope_for("https://www.epicurious.com/recipes") == "site:wikipedia.org"
        assert site_scope_for("https://example.com/?ref=store.steampowered.com") == "site:wikipedia.org"
        assert site_scope_for("https://steamcommunity.com/app/570") == "site:steampowered.com OR site:wikipedia.org"

    def test_unknown_store(self) -> None:
        """Test the default scope for unrecognized URLs."""
        assert site_scope_for("https://apps.apple.com/us/app/x/id1") == "site:wikipedia.org"


class TestCleanStoreTitle:
    """Tests for clean_store_title."""

    @pytest.mark.parametrize("raw,clean", [
        ("Hades on Steam", "Hades"),
        ("Save 50% on Hades on Steam", "Hades"),
        ("Pre-purchase Hades II on Steam", "Hades II"),
        ("Clash Royale - Apps on Google Play", "Clash Royale"),
        ("Monument Valley on the App Store", "Monument Valley"),
        ("Celeste Classic by Maddy Makes Games - itch.io", "Celeste Classic"),
        ("Some Jam Game - itch.io", "Some Jam Game"),
        ("  Plain   Title  ", "Plain Title"),
    ])
    def test_strips_store_decorations(self, raw, clean) -> None:
        """Test removal of storefront prefixes and suffixes."""
        assert clean_store_title(raw) == clean

    def test_keeps_original_when_everything_is_stripped(self) -> None:
        """Test the fallback to the raw title."""
        assert clean_store_title(" on Steam") == "on Steam"

    def test_empty(self) -> None:
        """Test that empty input stays empty."""
        assert clean_store_title("") == ""
