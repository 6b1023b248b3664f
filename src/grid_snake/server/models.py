"""Pydantic models for API request/response schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field

from grid_snake.match import MatchPhase
from grid_snake.protocol import MatchLabel


class MatchIdsResponse(BaseModel):
    """Response for POST /matches: open match ids, or a freshly created one."""

    match_ids: list[str]


class MatchSummary(BaseModel):
    """Compact match info for list endpoints."""

    match_id: str
    phase: MatchPhase
    label: MatchLabel
    player_count: int
    max_players: int
    snake_count: int
    tick: int
    tick_rate: int


class SignalRequest(BaseModel):
    """Request body for POST /matches/{match_id}/signal."""

    data: str = Field(min_length=1, max_length=64)


class SignalResponse(BaseModel):
    match_id: str
    result: str


class KillResponse(BaseModel):
    """Response for POST /matches/kill."""

    killed: int
