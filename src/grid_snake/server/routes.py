"""REST API route handlers for the match directory."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request

from grid_snake.server.models import (
    KillResponse,
    MatchIdsResponse,
    MatchSummary,
    SignalRequest,
    SignalResponse,
)

router = APIRouter(prefix="/matches", tags=["matches"])


def _get_registry(request: Request):
    return request.app.state.match_registry


@router.post("", status_code=200)
async def join_or_create(request: Request) -> MatchIdsResponse:
    """Return open matches, creating one if none is open."""
    return MatchIdsResponse(match_ids=_get_registry(request).join_or_create())


@router.get("")
async def list_matches(request: Request, open_only: bool = True) -> list[MatchSummary]:
    """List snake matches, by default only those accepting players."""
    return [i.summary() for i in _get_registry(request).list_matches(open_only)]


@router.post("/kill")
async def kill_matches(request: Request) -> KillResponse:
    """Signal every live snake match to terminate."""
    return KillResponse(killed=await _get_registry(request).kill_all())


@router.get("/{match_id}")
async def get_match(match_id: str, request: Request) -> dict:
    """Get match metadata plus the current snapshot."""
    instance = _get_registry(request).get_match(match_id)
    if instance is None:
        raise HTTPException(status_code=404, detail="Match not found.")
    result = instance.summary().model_dump(mode="json")
    result["state"] = instance.match.get_state()
    return result


@router.post("/{match_id}/signal")
async def signal_match(
    match_id: str, body: SignalRequest, request: Request,
) -> SignalResponse:
    """Deliver an out-of-band signal such as ``kill``."""
    try:
        result = await _get_registry(request).signal(match_id, body.data)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Match not found.") from exc
    return SignalResponse(match_id=match_id, result=result)
