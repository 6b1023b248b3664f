"""In-memory match registry, event serialization, and async tick loops."""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from starlette.websockets import WebSocketState

from grid_snake.broadcast import RecordingDispatcher
from grid_snake.errors import ContractViolation
from grid_snake.match import KILL_SIGNAL, Match, MatchConfig
from grid_snake.protocol import InputMessage
from grid_snake.server.models import MatchSummary

logger = logging.getLogger(__name__)

_MAX_FINISHED_MATCHES = 100
_LIST_LIMIT = 10


def encode_frame(op_code: int, data: str) -> str:
    """Wrap an already JSON-encoded payload in the ``{"op", "data"}`` envelope."""
    return '{"op":%d,"data":%s}' % (op_code, data)


@dataclass
class MatchInstance:
    """A match plus everything the host needs to drive it."""

    match_id: str
    match: Match
    dispatcher: RecordingDispatcher
    pending: list[InputMessage] = field(default_factory=list)
    created_at: float = field(default_factory=time.monotonic)
    finished_at: float | None = None
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    _task: asyncio.Task | None = field(default=None, repr=False)

    def summary(self) -> MatchSummary:
        match = self.match
        return MatchSummary(
            match_id=self.match_id,
            phase=match.phase,
            label=match.label,
            player_count=match.human_count,
            max_players=match.config.max_players,
            snake_count=len(match.game.snakes),
            tick=match.tick_count,
            tick_rate=match.config.tick_rate,
        )


class MatchRegistry:
    """Creates, lists, signals and drives every match on this host.

    Each match gets its own lock: joins, leaves, ticks and signals for one
    match never overlap, while different matches share nothing.
    """

    def __init__(
        self,
        config: MatchConfig | None = None,
        max_finished_matches: int = _MAX_FINISHED_MATCHES,
        list_limit: int = _LIST_LIMIT,
    ) -> None:
        if max_finished_matches < 0:
            raise ValueError("max_finished_matches must be >= 0.")
        self.config = config or MatchConfig()
        self._matches: dict[str, MatchInstance] = {}
        self._max_finished_matches = max_finished_matches
        self._list_limit = list_limit

    # --- directory --------------------------------------------------------

    def create_match(self) -> MatchInstance:
        """Create a match and start its tick loop on the running event loop."""
        match_id = uuid.uuid4().hex[:12]
        dispatcher = RecordingDispatcher()
        instance = MatchInstance(
            match_id=match_id,
            match=Match(dispatcher, self.config, match_id=match_id),
            dispatcher=dispatcher,
        )
        self._matches[match_id] = instance
        instance._task = asyncio.create_task(self._tick_loop(instance))
        logger.info("Match %s created.", match_id)
        return instance

    def get_match(self, match_id: str) -> MatchInstance | None:
        return self._matches.get(match_id)

    def list_matches(self, open_only: bool = True) -> list[MatchInstance]:
        """Return snake matches, by default only those open for joining."""
        results: list[MatchInstance] = []
        for instance in self._matches.values():
            label = instance.match.label
            if not label.snake or (open_only and not label.open):
                continue
            results.append(instance)
            if len(results) >= self._list_limit:
                break
        return results

    def join_or_create(self) -> list[str]:
        """Ids of open matches, creating a new one when none is open."""
        match_ids = [i.match_id for i in self.list_matches()]
        if not match_ids:
            match_ids.append(self.create_match().match_id)
        return match_ids

    async def signal(self, match_id: str, data: str) -> str:
        """Deliver an out-of-band signal to one match."""
        instance = self._matches.get(match_id)
        if instance is None:
            raise KeyError(f"Match {match_id} not found.")
        async with instance.lock:
            result = instance.match.signal(data)
            await self._flush(instance)
        if instance.match.terminated:
            if instance._task and not instance._task.done():
                instance._task.cancel()
            await self._finish(instance)
        return result

    async def kill_all(self) -> int:
        """Send the kill signal to every live snake match."""
        targets = [
            i.match_id for i in self._matches.values()
            if i.match.label.snake and not i.match.terminated
        ]
        for match_id in targets:
            await self.signal(match_id, KILL_SIGNAL)
        logger.info("Killed %d matches.", len(targets))
        return len(targets)

    # --- presence ---------------------------------------------------------

    async def join_attempt(
        self, instance: MatchInstance, identifier: str,
    ) -> tuple[bool, str]:
        async with instance.lock:
            return instance.match.join_attempt(identifier)

    async def confirm_join(
        self, instance: MatchInstance, identifier: str, session: Any,
    ) -> bool:
        """Finish a join reserved by :meth:`join_attempt`."""
        async with instance.lock:
            match = instance.match
            if match.terminated:
                match.abort_join(identifier)
                return False
            self._run(instance, match.join, identifier, session)
            await self._flush(instance)
            return not match.terminated

    async def abort_join(self, instance: MatchInstance, identifier: str) -> None:
        """Release a reserved seat whose connection never completed."""
        async with instance.lock:
            instance.match.abort_join(identifier)

    async def leave(self, instance: MatchInstance, identifier: str) -> None:
        """Remove a player and drop any input they still had queued."""
        async with instance.lock:
            instance.pending = [m for m in instance.pending if m.sender != identifier]
            match = instance.match
            if match.terminated or identifier not in match.directory:
                return
            self._run(instance, match.leave, identifier)
            await self._flush(instance)

    def enqueue(
        self, instance: MatchInstance, identifier: str, op_code: int, data: str,
    ) -> bool:
        """Queue one client message for the next tick."""
        match = instance.match
        if match.terminated or identifier not in match.directory:
            return False
        instance.pending.append(InputMessage(identifier, op_code, data))
        return True

    # --- driving ----------------------------------------------------------

    def _run(self, instance: MatchInstance, event: Callable[..., Any], *args: Any) -> Any:
        """Apply one event, turning a broken invariant into termination."""
        try:
            return event(*args)
        except ContractViolation:
            logger.exception("Contract violation in match %s.", instance.match_id)
            instance.match.terminate("contract violation")
            return None

    async def _tick_loop(self, instance: MatchInstance) -> None:
        """Tick the match at its fixed rate until it terminates."""
        match = instance.match
        interval = match.config.tick_interval
        try:
            while not match.terminated:
                await asyncio.sleep(interval)
                async with instance.lock:
                    messages, instance.pending = instance.pending, []
                    self._run(instance, match.tick, messages)
                    await self._flush(instance)
        except asyncio.CancelledError:
            logger.info("Tick loop cancelled for match %s.", instance.match_id)
        except Exception:
            logger.exception("Tick loop error in match %s.", instance.match_id)
            match.terminate("tick loop error")
        finally:
            if match.terminated:
                await self._finish(instance)

    async def _finish(self, instance: MatchInstance) -> None:
        """Release a terminated match exactly once."""
        if instance.finished_at is not None:
            return
        instance.finished_at = time.monotonic()
        await self._close_connections(instance)
        self._prune_finished_matches()

    async def _flush(self, instance: MatchInstance) -> None:
        """Deliver everything the match emitted, in emission order."""
        for out in instance.dispatcher.drain():
            frame = encode_frame(out.op_code, out.data)
            for ws in out.recipients:
                try:
                    if ws.client_state == WebSocketState.CONNECTED:
                        await ws.send_text(frame)
                except Exception:
                    logger.warning(
                        "Failed sending op %d in match %s.",
                        out.op_code, instance.match_id,
                    )

    async def _close_connections(self, instance: MatchInstance) -> None:
        """Close any live player sockets for a finished match."""
        for ws in instance.match.directory.sessions():
            try:
                if ws.client_state == WebSocketState.CONNECTED:
                    await ws.close(code=1000, reason="Match finished.")
            except Exception:
                logger.warning(
                    "Failed closing player socket in match %s.", instance.match_id,
                )

    def _prune_finished_matches(self) -> None:
        """Bound retained finished matches to avoid unbounded registry growth."""
        finished = [i for i in self._matches.values() if i.match.terminated]
        overflow = len(finished) - self._max_finished_matches
        if overflow <= 0:
            return

        finished.sort(
            key=lambda i: i.finished_at if i.finished_at is not None else i.created_at,
        )
        for stale in finished[:overflow]:
            self._matches.pop(stale.match_id, None)
        logger.info(
            "Pruned %d finished matches (retaining up to %d).",
            overflow,
            self._max_finished_matches,
        )

    async def cleanup(self) -> None:
        """Cancel all running tick loops."""
        tasks = [
            i._task for i in self._matches.values()
            if i._task and not i._task.done()
        ]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        logger.info("MatchRegistry cleanup complete.")
