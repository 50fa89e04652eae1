"""Discord REST Client - Imperative Shell.

This module handles HTTP communication with the Discord API: resolving the
broadcast channel, posting alerts, and sending direct messages.
All I/O is contained here; message formatting is in the core module.
"""

import logging
from dataclasses import dataclass
from typing import Any

import requests

from quake_notifier.core.errors import (
    ChannelSendFailed,
    ChannelUnreachable,
    DirectNotificationFailed,
)


logger = logging.getLogger(__name__)


DISCORD_API_BASE = "https://discord.com/api/v10"

# Default timeout for API requests (seconds)
DEFAULT_TIMEOUT = 10

# Channel types that accept text messages: guild text, voice, announcement,
# announcement/public/private threads, stage
TEXT_CHANNEL_TYPES = frozenset({0, 2, 5, 10, 11, 12, 13})


@dataclass(frozen=True)
class DiscordChannel:
    """A resolved Discord channel.

    Attributes:
        id: Channel ID
        guild_id: Guild the channel belongs to (None for DMs)
        channel_type: Discord channel type number
    """
    id: str
    guild_id: str | None
    channel_type: int

    @property
    def is_text_based(self) -> bool:
        """Returns True if the channel can receive messages."""
        return self.channel_type in TEXT_CHANNEL_TYPES


class DiscordClient:
    """Client for the Discord REST API using a bot token.

    This is part of the imperative shell - it handles HTTP I/O.
    """

    def __init__(
        self,
        bot_token: str,
        base_url: str = DISCORD_API_BASE,
        timeout: int = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize Discord client.

        Args:
            bot_token: Bot token for the Authorization header
            base_url: Discord API base URL
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._headers = {
            "Authorization": f"Bot {bot_token}",
            "Content-Type": "application/json",
        }

    def _request(
        self,
        method: str,
        path: str,
        payload: dict[str, Any] | None = None,
    ) -> requests.Response:
        return requests.request(
            method,
            f"{self.base_url}{path}",
            json=payload,
            headers=self._headers,
            timeout=self.timeout,
        )

    @staticmethod
    def _describe_failure(response: requests.Response) -> str:
        if response.status_code == 429:
            return "Rate limited by Discord"
        if response.status_code in (401, 403):
            return f"Missing access ({response.status_code})"
        if response.status_code == 404:
            return "Not found"
        return f"Discord returned {response.status_code}: {response.text}"

    @staticmethod
    def _message_id(response: requests.Response) -> str:
        """Read the created message ID; an accepted message without one yields ""."""
        try:
            return str(response.json()["id"])
        except (KeyError, TypeError, ValueError):
            logger.warning("Discord accepted a message but returned no message ID")
            return ""

    def get_text_channel(self, tenant_id: str, channel_id: str) -> DiscordChannel:
        """Resolve a tenant's broadcast channel.

        This method performs HTTP I/O.

        Args:
            tenant_id: Guild the channel must belong to
            channel_id: Configured channel ID

        Returns:
            The resolved channel

        Raises:
            ChannelUnreachable: If the channel cannot be fetched, belongs to
                another guild, or cannot receive text
        """
        try:
            response = self._request("GET", f"/channels/{channel_id}")
        except requests.RequestException as e:
            raise ChannelUnreachable(f"Channel {channel_id} lookup failed: {e}") from e

        if response.status_code != 200:
            raise ChannelUnreachable(
                f"Channel {channel_id} lookup failed: {self._describe_failure(response)}"
            )

        try:
            data = response.json()
            channel = DiscordChannel(
                id=str(data["id"]),
                guild_id=str(data["guild_id"]) if data.get("guild_id") else None,
                channel_type=int(data["type"]),
            )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise ChannelUnreachable(f"Channel {channel_id} lookup returned invalid data") from e

        if channel.guild_id != tenant_id:
            raise ChannelUnreachable(f"Channel {channel_id} does not belong to tenant {tenant_id}")

        if not channel.is_text_based:
            raise ChannelUnreachable(
                f"Channel {channel_id} is not text-based (type {channel.channel_type})"
            )

        return channel

    def send_message(self, channel_id: str, payload: dict[str, Any]) -> str:
        """Post a message to a channel.

        This method performs HTTP I/O.

        Args:
            channel_id: Target channel
            payload: Create-message payload (from formatter)

        Returns:
            ID of the created message

        Raises:
            ChannelSendFailed: If Discord did not accept the message
        """
        logger.info("Sending message to Discord channel %s", channel_id)

        try:
            response = self._request("POST", f"/channels/{channel_id}/messages", payload)
        except requests.Timeout as e:
            raise ChannelSendFailed("Request timed out") from e
        except requests.RequestException as e:
            raise ChannelSendFailed(str(e)) from e

        if response.status_code not in (200, 201):
            error_text = self._describe_failure(response)
            logger.warning("Discord rejected message to %s: %s", channel_id, error_text)
            raise ChannelSendFailed(error_text)

        return self._message_id(response)

    def send_direct_message(self, user_id: str, payload: dict[str, Any]) -> str:
        """Send a direct message to a user.

        This method performs HTTP I/O: opens (or reuses) the DM channel, then
        posts into it.

        Args:
            user_id: Recipient user
            payload: Create-message payload (from formatter)

        Returns:
            ID of the created message

        Raises:
            DirectNotificationFailed: If the DM channel cannot be opened or the
                message is rejected (e.g. the user disabled DMs)
        """
        try:
            response = self._request("POST", "/users/@me/channels", {"recipient_id": user_id})
            if response.status_code not in (200, 201):
                raise DirectNotificationFailed(
                    f"Cannot open DM with {user_id}: {self._describe_failure(response)}"
                )
            dm_channel_id = str(response.json()["id"])

            response = self._request("POST", f"/channels/{dm_channel_id}/messages", payload)
        except requests.RequestException as e:
            raise DirectNotificationFailed(f"DM to {user_id} failed: {e}") from e
        except (KeyError, TypeError, ValueError) as e:
            raise DirectNotificationFailed(f"Cannot open DM with {user_id}: invalid response") from e

        if response.status_code not in (200, 201):
            raise DirectNotificationFailed(
                f"DM to {user_id} rejected: {self._describe_failure(response)}"
            )

        return self._message_id(response)
