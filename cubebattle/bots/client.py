"""Bot round trip: one POST per player per tick."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Protocol

import aiohttp

from ..constants import DEFAULT_BOT_TIMEOUT_S
from ..errors import BotNetworkError, BotTimeout

if TYPE_CHECKING:
    from ..config import PlayerSetup

logger = logging.getLogger("cubebattle.bots")


class BotClient(Protocol):
    async def get_directions(self, player: PlayerSetup, request: dict[str, Any]) -> Any:
        """Return the bot's raw decoded payload or raise BotClientError."""
        ...


class HttpBotClient:
    """Polls bots over HTTP with a per-request timeout.

    The session is created lazily and shared by every request of the game so
    concurrent polls reuse connections.
    """

    def __init__(self, timeout_s: float = DEFAULT_BOT_TIMEOUT_S) -> None:
        self.timeout_s = timeout_s
        self._session: aiohttp.ClientSession | None = None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout_s))
        return self._session

    async def get_directions(self, player: PlayerSetup, request: dict[str, Any]) -> Any:
        session = await self._get_session()
        try:
            async with session.post(player.url, json=request) as resp:
                if resp.status >= 400:
                    raise BotNetworkError(f"Bot {player.name} answered HTTP {resp.status}")
                return await resp.json(content_type=None)
        except asyncio.TimeoutError as e:
            raise BotTimeout(f"Bot {player.name} did not answer within {self.timeout_s}s") from e
        except aiohttp.ClientError as e:
            raise BotNetworkError(f"Bot {player.name} unreachable: {e}") from e
        except ValueError as e:
            # Body was not JSON
            raise BotNetworkError(f"Bot {player.name} sent an undecodable body: {e}") from e

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None
