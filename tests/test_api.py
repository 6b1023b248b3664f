"""REST API endpoint tests."""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from grid_snake.match import MatchConfig
from grid_snake.server.app import create_app
from grid_snake.server.match_registry import MatchRegistry

BASE = "http://test"


@pytest.fixture()
def registry():
    return MatchRegistry(MatchConfig(width=12, height=10, num_bots=2, seed=0))


@pytest.fixture()
def app(registry):
    application = create_app()
    application.state.match_registry = registry
    return application


@pytest.fixture()
async def client(app, registry):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url=BASE) as c:
        yield c
    await registry.cleanup()


class TestJoinOrCreate:
    @pytest.mark.asyncio
    async def test_creates_a_match_when_none_open(self, client):
        resp = await client.post("/matches")
        assert resp.status_code == 200
        match_ids = resp.json()["match_ids"]
        assert len(match_ids) == 1

    @pytest.mark.asyncio
    async def test_reuses_open_match(self, client):
        first = (await client.post("/matches")).json()["match_ids"]
        second = (await client.post("/matches")).json()["match_ids"]
        assert first == second


class TestListAndGet:
    @pytest.mark.asyncio
    async def test_list_empty(self, client):
        resp = await client.get("/matches")
        assert resp.status_code == 200
        assert resp.json() == []

    @pytest.mark.asyncio
    async def test_list_summary(self, client):
        [match_id] = (await client.post("/matches")).json()["match_ids"]
        [summary] = (await client.get("/matches")).json()
        assert summary["match_id"] == match_id
        assert summary["phase"] == "waiting"
        assert summary["label"] == {"open": True, "snake": True}
        assert summary["player_count"] == 0
        assert summary["max_players"] == 2
        assert summary["snake_count"] == 2

    @pytest.mark.asyncio
    async def test_get_match_includes_snapshot(self, client):
        [match_id] = (await client.post("/matches")).json()["match_ids"]
        resp = await client.get(f"/matches/{match_id}")
        assert resp.status_code == 200
        state = resp.json()["state"]
        assert state["width"] == 12
        assert state["height"] == 10
        assert state["has_food"] is True
        assert len(state["snakes"]) == 2

    @pytest.mark.asyncio
    async def test_get_unknown_match(self, client):
        resp = await client.get("/matches/nonexistent")
        assert resp.status_code == 404


class TestSignals:
    @pytest.mark.asyncio
    async def test_kill_one_match(self, client):
        [match_id] = (await client.post("/matches")).json()["match_ids"]
        resp = await client.post(f"/matches/{match_id}/signal", json={"data": "kill"})
        assert resp.status_code == 200
        assert resp.json() == {
            "match_id": match_id, "result": "killing match due to signal",
        }
        detail = (await client.get(f"/matches/{match_id}")).json()
        assert detail["phase"] == "terminated"
        assert (await client.get("/matches")).json() == []

        # A fresh match is created once nothing is open.
        [new_id] = (await client.post("/matches")).json()["match_ids"]
        assert new_id != match_id

    @pytest.mark.asyncio
    async def test_unknown_signal_keeps_match(self, client):
        [match_id] = (await client.post("/matches")).json()["match_ids"]
        resp = await client.post(f"/matches/{match_id}/signal", json={"data": "pause"})
        assert resp.json()["result"] == ""
        assert (await client.get(f"/matches/{match_id}")).json()["phase"] == "waiting"

    @pytest.mark.asyncio
    async def test_signal_unknown_match(self, client):
        resp = await client.post("/matches/nope/signal", json={"data": "kill"})
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_signal_requires_data(self, client):
        [match_id] = (await client.post("/matches")).json()["match_ids"]
        resp = await client.post(f"/matches/{match_id}/signal", json={"data": ""})
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_kill_all(self, client):
        await client.post("/matches")
        resp = await client.post("/matches/kill")
        assert resp.status_code == 200
        assert resp.json() == {"killed": 1}
        assert (await client.post("/matches/kill")).json() == {"killed": 0}
