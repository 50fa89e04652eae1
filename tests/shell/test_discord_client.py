"""Tests for the Discord REST client.

Uses the `responses` library to mock HTTP requests.
"""

import json

import pytest
import requests
import responses

from quake_notifier.core.errors import (
    ChannelSendFailed,
    ChannelUnreachable,
    DirectNotificationFailed,
)
from quake_notifier.shell.discord_client import DISCORD_API_BASE, DiscordClient


CHANNEL_URL = f"{DISCORD_API_BASE}/channels/100"
MESSAGES_URL = f"{DISCORD_API_BASE}/channels/100/messages"
DM_OPEN_URL = f"{DISCORD_API_BASE}/users/@me/channels"
DM_MESSAGES_URL = f"{DISCORD_API_BASE}/channels/900/messages"

PAYLOAD = {"embeds": [{"title": "Earthquake"}]}


@pytest.fixture
def client():
    return DiscordClient(bot_token="test-token")


class TestGetTextChannel:
    """Tests for DiscordClient.get_text_channel()."""

    @responses.activate
    def test_resolves_text_channel(self, client):
        responses.add(
            responses.GET,
            CHANNEL_URL,
            json={"id": "100", "guild_id": "guild1", "type": 0},
            status=200,
        )

        channel = client.get_text_channel("guild1", "100")

        assert channel.id == "100"
        assert channel.guild_id == "guild1"
        assert channel.is_text_based is True

    @responses.activate
    def test_uses_bot_authorization(self, client):
        responses.add(
            responses.GET,
            CHANNEL_URL,
            json={"id": "100", "guild_id": "guild1", "type": 5},
            status=200,
        )

        client.get_text_channel("guild1", "100")

        assert responses.calls[0].request.headers["Authorization"] == "Bot test-token"

    @responses.activate
    def test_other_guild_is_unreachable(self, client):
        """A channel owned by another tenant is never used."""
        responses.add(
            responses.GET,
            CHANNEL_URL,
            json={"id": "100", "guild_id": "guild2", "type": 0},
            status=200,
        )

        with pytest.raises(ChannelUnreachable):
            client.get_text_channel("guild1", "100")

    @responses.activate
    def test_category_is_unreachable(self, client):
        """Categories (type 4) cannot receive messages."""
        responses.add(
            responses.GET,
            CHANNEL_URL,
            json={"id": "100", "guild_id": "guild1", "type": 4},
            status=200,
        )

        with pytest.raises(ChannelUnreachable):
            client.get_text_channel("guild1", "100")

    @responses.activate
    def test_missing_channel_is_unreachable(self, client):
        responses.add(responses.GET, CHANNEL_URL, json={"message": "Unknown Channel"}, status=404)

        with pytest.raises(ChannelUnreachable, match="Not found"):
            client.get_text_channel("guild1", "100")

    @responses.activate
    def test_network_error_is_unreachable(self, client):
        responses.add(responses.GET, CHANNEL_URL, body=requests.ConnectionError("down"))

        with pytest.raises(ChannelUnreachable):
            client.get_text_channel("guild1", "100")


class TestSendMessage:
    """Tests for DiscordClient.send_message()."""

    @responses.activate
    def test_returns_message_id(self, client):
        responses.add(responses.POST, MESSAGES_URL, json={"id": "555"}, status=200)

        assert client.send_message("100", PAYLOAD) == "555"
        assert json.loads(responses.calls[0].request.body) == PAYLOAD

    @responses.activate
    def test_forbidden_raises(self, client):
        responses.add(responses.POST, MESSAGES_URL, json={"message": "Missing Access"}, status=403)

        with pytest.raises(ChannelSendFailed, match="Missing access"):
            client.send_message("100", PAYLOAD)

    @responses.activate
    def test_rate_limited_raises(self, client):
        responses.add(responses.POST, MESSAGES_URL, json={"retry_after": 1.5}, status=429)

        with pytest.raises(ChannelSendFailed, match="Rate limited"):
            client.send_message("100", PAYLOAD)

    @responses.activate
    def test_timeout_raises(self, client):
        responses.add(responses.POST, MESSAGES_URL, body=requests.Timeout("slow"))

        with pytest.raises(ChannelSendFailed):
            client.send_message("100", PAYLOAD)


class TestSendDirectMessage:
    """Tests for DiscordClient.send_direct_message()."""

    @responses.activate
    def test_opens_dm_and_posts(self, client):
        responses.add(responses.POST, DM_OPEN_URL, json={"id": "900", "type": 1}, status=200)
        responses.add(responses.POST, DM_MESSAGES_URL, json={"id": "777"}, status=200)

        assert client.send_direct_message("42", PAYLOAD) == "777"
        assert json.loads(responses.calls[0].request.body) == {"recipient_id": "42"}
        assert json.loads(responses.calls[1].request.body) == PAYLOAD

    @responses.activate
    def test_cannot_open_dm(self, client):
        responses.add(responses.POST, DM_OPEN_URL, json={"message": "Unknown User"}, status=400)

        with pytest.raises(DirectNotificationFailed):
            client.send_direct_message("42", PAYLOAD)

    @responses.activate
    def test_dms_disabled(self, client):
        """Users who block DMs make the send fail."""
        responses.add(responses.POST, DM_OPEN_URL, json={"id": "900"}, status=200)
        responses.add(
            responses.POST,
            DM_MESSAGES_URL,
            json={"message": "Cannot send messages to this user", "code": 50007},
            status=403,
        )

        with pytest.raises(DirectNotificationFailed):
            client.send_direct_message("42", PAYLOAD)


class TestUnreadableBodies:
    """Accepted requests with bodies that are not the expected JSON."""

    @responses.activate
    def test_sent_message_without_json(self, client):
        """An accepted message counts as sent even without a readable ID."""
        responses.add(responses.POST, MESSAGES_URL, body="<html>ok</html>", status=200)

        assert client.send_message("100", PAYLOAD) == ""

    @responses.activate
    def test_direct_message_without_json(self, client):
        responses.add(responses.POST, DM_OPEN_URL, json={"id": "900"}, status=200)
        responses.add(responses.POST, DM_MESSAGES_URL, body="<html>ok</html>", status=200)

        assert client.send_direct_message("42", PAYLOAD) == ""

    @responses.activate
    def test_dm_channel_without_json(self, client):
        responses.add(responses.POST, DM_OPEN_URL, body="<html>ok</html>", status=200)

        with pytest.raises(DirectNotificationFailed):
            client.send_direct_message("42", PAYLOAD)

    @responses.activate
    def test_channel_lookup_with_list_body(self, client):
        responses.add(responses.GET, CHANNEL_URL, json=["unexpected"], status=200)

        with pytest.raises(ChannelUnreachable):
            client.get_text_channel("guild1", "100")
