"""Tests for the webhook payload and client."""

import aiohttp
import pytest

from conftest import FakeResponse, FakeSession
from game_analyzer.core.errors import DeliveryFailure
from game_analyzer.delivery.webhook import WebhookClient, build_webhook_payload

HOOK_URL = "https://hooks.example.com/lead"


def sample_report():
    return {
        'gameContext': {'title': "Dota 2"},
        'archetype': 'live_service',
        'overallScore': 45,
        'opportunities': [
            {'category': "Content Rhythm", 'diagnosis': "d", 'actions': ["a", "b"], 'relevance': 'critical'},
            {'category': "Community Management", 'diagnosis': "d", 'actions': ["a", "b"], 'relevance': 'high'},
        ],
        'gameUrl': "https://store.steampowered.com/app/570/",
        'timestamp': "2024-01-01T00:00:00+00:00",
    }


class TestBuildWebhookPayload:
    """Tests for build_webhook_payload."""

    def test_summary(self) -> None:
        """Test the normalized analysis summary."""
        payload = build_webhook_payload(sample_report(), {"name": "Sam", "email": "sam@example.com"})

        assert payload["lead"] == {"name": "Sam", "email": "sam@example.com"}
        assert payload["analysis"] == {
            "gameTitle": "Dota 2",
            "overallScore": 45,
            "archetype": 'live_service',
            "opportunities": [
                {"category": "Content Rhythm", "relevance": 'critical'},
                {"category": "Community Management", "relevance": 'high'},
            ],
            "lowestCategories": ["Content Rhythm"],
            "gameUrl": "https://store.steampowered.com/app/570/",
            "timestamp": "2024-01-01T00:00:00+00:00",
        }

    def test_empty_lead_fields_are_dropped(self) -> None:
        """Test that blank contact fields are not sent."""
        payload = build_webhook_payload(sample_report(), {"name": "", "email": "sam@example.com"})
        assert payload["lead"] == {"email": "sam@example.com"}


class TestWebhookClient:
    """Tests for WebhookClient.send."""

    @pytest.mark.asyncio
    async def test_success(self) -> None:
        """Test that a 2xx answer is a delivery."""
        session = FakeSession(post=[FakeResponse(204)])
        await WebhookClient(session, url=HOOK_URL).send({"x": 1})

        assert session.requests[0]["url"] == HOOK_URL
        assert session.requests[0]["json"] == {"x": 1}

    @pytest.mark.asyncio
    async def test_http_error(self) -> None:
        """Test that a non-2xx answer raises with the status."""
        session = FakeSession(post=[FakeResponse(502, "bad gateway")])

        with pytest.raises(DeliveryFailure) as excinfo:
            await WebhookClient(session, url=HOOK_URL).send({"x": 1})

        assert excinfo.value.status == 502

    @pytest.mark.asyncio
    async def test_network_error(self) -> None:
        """Test that a network failure raises with the cause."""
        session = FakeSession(post=[aiohttp.ClientConnectionError("refused")])

        with pytest.raises(DeliveryFailure) as excinfo:
            await WebhookClient(session, url=HOOK_URL).send({"x": 1})

        assert isinstance(excinfo.value.cause, aiohttp.ClientConnectionError)

    def test_enabled(self) -> None:
        """Test that an empty URL disables delivery."""
        assert WebhookClient(FakeSession(), url=HOOK_URL).enabled
        assert not WebhookClient(FakeSession(), url="").enabled
