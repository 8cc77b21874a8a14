"""Tests for archetype classification."""

import pytest

from game_analyzer.analysis.classifier import (
    archetype_label,
    classify_game,
    score_interpretation,
)


def game(release_state='live', platform='steam', price=19.99, multiplayer=False):
    return {
        'title': "Some Game",
        'releaseState': release_state,
        'platform': platform,
        'price': price,
        'isMultiplayer': multiplayer,
    }


class TestClassifyGame:
    """Tests for classify_game."""

    @pytest.mark.parametrize("metadata,archetype", [
        (game(platform='mobile', price=5), 'f2p_mobile'),
        (game(price=45), 'aa_premium'),
        (game(release_state='early_access', price="free", multiplayer=True), 'early_stage'),
    ])
    def test_reference_examples(self, metadata, archetype) -> None:
        """Test the documented reference classifications."""
        assert classify_game(metadata) == archetype

    @pytest.mark.parametrize("metadata,archetype", [
        # release state comes first
        (game(release_state='upcoming', platform='mobile', price=60), 'early_stage'),
        (game(release_state='early_access'), 'early_stage'),
        # mobile before price
        (game(platform='mobile', price="free", multiplayer=True), 'f2p_mobile'),
        # free
        (game(price="free", multiplayer=True), 'live_service'),
        (game(price="free", multiplayer=False), 'f2p_mobile'),
        (game(platform='web', price="free"), 'f2p_mobile'),
        # paid multiplayer splits at 30
        (game(price=29.99, multiplayer=True), 'live_service'),
        (game(price=30, multiplayer=True), 'aa_premium'),
        # paid single-player splits at 40
        (game(price=39.99), 'premium_singleplayer'),
        (game(price=40), 'aa_premium'),
        (game(platform='indie', price=4.99), 'premium_singleplayer'),
        # no usable price
        (game(price="unknown"), 'premium_singleplayer'),
    ])
    def test_decision_table(self, metadata, archetype) -> None:
        """Test every branch of the decision table."""
        assert classify_game(metadata) == archetype

    def test_deterministic(self) -> None:
        """Test that the same input always maps to the same archetype."""
        metadata = game(price=35, multiplayer=True)
        assert {classify_game(metadata) for _ in range(10)} == {'aa_premium'}

    def test_ignores_other_fields(self) -> None:
        """Test that fields outside the decision inputs have no effect."""
        plain = game(price=12)
        decorated = {**plain, 'title': "Other", 'genre': ["MMO"], 'reviewScore': 10, 'developer': "X"}
        assert classify_game(plain) == classify_game(decorated)


class TestLabels:
    """Tests for labels and score interpretation."""

    def test_archetype_label(self) -> None:
        """Test human-readable archetype names."""
        assert archetype_label('aa_premium') == "Premium AA/AAA"
        assert archetype_label('f2p_mobile') == "Free-to-Play Mobile"

    @pytest.mark.parametrize("score,archetype,text", [
        (80, 'aa_premium', "Strong foundation"),
        (79, 'aa_premium', "Solid base with optimization opportunities"),
        (59, 'aa_premium', "Significant revenue optimization opportunities"),
        (70, 'premium_singleplayer', "Strong foundation"),
        (50, 'early_stage', "Solid base with optimization opportunities"),
        (54, 'live_service', "Significant revenue optimization opportunities"),
    ])
    def test_score_interpretation(self, score, archetype, text) -> None:
        """Test archetype-specific score bands."""
        assert score_interpretation(score, archetype) == text
