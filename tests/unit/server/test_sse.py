"""Tests for SSE fan-out and the game table that feeds it."""

import asyncio
import json
import time

import pytest

from cubebattle.config import GameConfig, GameSetup, PlayerSetup
from cubebattle.errors import GameTableFull
from cubebattle.server.config import settings
from cubebattle.server.games import GameManager, status_name
from cubebattle.server.sse import SSEManager, sse_event_generator


def test_broadcast_respects_game_filter():
    async def _go():
        manager = SSEManager()
        follows_a = await manager.register("a")
        follows_all = await manager.register()
        follows_b = await manager.register("b")

        assert await manager.broadcast("next_tick", "{}", game_id="a") == 2
        assert follows_a.queue.qsize() == 1
        assert follows_all.queue.qsize() == 1
        assert follows_b.queue.empty()

        # Untagged events reach everyone
        assert await manager.broadcast("ping", "{}") == 3

    asyncio.run(_go())


def test_full_client_is_dropped_without_waiting(monkeypatch):
    monkeypatch.setattr(settings, "SSE_QUEUE_SIZE", 2)

    async def _go():
        manager = SSEManager()
        stalled = await manager.register()
        reader = await manager.register()

        started = time.monotonic()
        counts = []
        for _ in range(3):
            counts.append(await manager.broadcast("next_tick", "{}"))
            reader.queue.get_nowait()
        elapsed = time.monotonic() - started

        assert counts == [2, 2, 1]
        assert stalled.is_cancelled
        assert manager.client_count == 1
        assert elapsed < 0.5

    asyncio.run(_go())


def test_event_generator_formats_and_unregisters():
    async def _go():
        manager = SSEManager()
        client = await manager.register("g")
        await manager.broadcast("game_started", '{"id": "g"}', game_id="g")

        stream = sse_event_generator(client, manager)
        chunk = await stream.__anext__()
        assert chunk == 'id: 1\nevent: game_started\ndata: {"id": "g"}\n\n'

        client.cancel()
        rest = [c async for c in stream]
        assert rest == []
        assert manager.client_count == 0

    asyncio.run(_go())


def test_shutdown_disconnects_everyone():
    async def _go():
        manager = SSEManager()
        clients = [await manager.register() for _ in range(3)]
        await manager.shutdown()
        assert manager.client_count == 0
        assert all(c.is_cancelled for c in clients)

    asyncio.run(_go())


def _config(max_ticks=2):
    return GameConfig(
        setup=GameSetup(edge_length=3, max_num_of_ticks=max_ticks, tick_delay_s=0.0, num_of_tasks_per_tick=1),
        players=(PlayerSetup("A", "http://bots/A"), PlayerSetup("B", "http://bots/B")),
    )


class TestGameManager:
    def test_game_events_reach_followers(self, scripted_bot):
        async def _go():
            events = SSEManager()
            manager = GameManager(bot_client_factory=scripted_bot, events=events, max_games=4)
            follower = await events.register()
            engine = manager.start(_config())
            await manager.get(engine.game_id).task

            received = []
            while not follower.queue.empty():
                _, event_type, data = follower.queue.get_nowait()
                received.append((event_type, json.loads(data)))

            assert received[0] == ("game_started", {"game_id": engine.game_id, "type": "game_started", "id": engine.game_id})
            assert received[-1][0] == "game_ended"
            assert all(payload["game_id"] == engine.game_id for _, payload in received)
            assert status_name(manager.get(engine.game_id)) == "ENDED"
            assert manager.scoreboard.games_recorded == 1

        asyncio.run(_go())

    def test_finished_games_are_evicted(self, scripted_bot):
        async def _go():
            manager = GameManager(bot_client_factory=scripted_bot, events=SSEManager(), max_games=1)
            first = manager.start(_config())
            await manager.get(first.game_id).task
            second = manager.start(_config())
            assert [e.engine.game_id for e in manager.entries()] == [second.game_id]
            await manager.shutdown()

        asyncio.run(_go())

    def test_running_games_are_never_evicted(self, scripted_bot):
        async def _go():
            manager = GameManager(bot_client_factory=scripted_bot, events=SSEManager(), max_games=1)
            running = manager.start(_config(max_ticks=1000))
            with pytest.raises(GameTableFull):
                manager.start(_config())
            await manager.shutdown()
            assert status_name(manager.get(running.game_id)) == "CANCELLED"

        asyncio.run(_go())

    def test_crashing_game_is_marked_failed(self, scripted_bot):
        async def _go():
            bots = scripted_bot({"A": [RuntimeError("bot client bug")]})
            manager = GameManager(bot_client_factory=lambda: bots, events=SSEManager())
            engine = manager.start(_config())
            entry = manager.get(engine.game_id)
            await entry.task
            assert entry.error == "bot client bug"
            assert status_name(entry) == "FAILED"
            assert manager.scoreboard.games_recorded == 0

        asyncio.run(_go())
