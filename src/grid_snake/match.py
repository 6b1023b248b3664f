"""Match lifecycle state machine driving the grid simulation on a fixed tick."""

from __future__ import annotations

import copy
import enum
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

import numpy as np
from pydantic import ValidationError

from grid_snake.broadcast import Dispatcher, Emitter
from grid_snake.errors import ContractViolation
from grid_snake.game import SnakeGame
from grid_snake.protocol import InputMessage, MatchLabel, MoveBody, OpCode
from grid_snake.roster import EntityDirectory, addressed_to
from grid_snake.snake import Direction

logger = logging.getLogger(__name__)

KILL_SIGNAL = "kill"


class MatchPhase(str, enum.Enum):
    """Lifecycle states for a match."""

    INITIALIZING = "initializing"
    WAITING = "waiting"
    PLAYING = "playing"
    TERMINATED = "terminated"


@dataclass(frozen=True)
class MatchConfig:
    """Configuration for a single match."""

    width: int = 30
    height: int = 20
    num_bots: int = 2
    tick_rate: int = 3
    max_players: int = 2
    seed: int | None = None

    def __post_init__(self) -> None:
        if self.width < 2 or self.height < 2:
            raise ValueError("width and height must each be at least 2.")
        if self.num_bots < 0:
            raise ValueError("num_bots must be >= 0.")
        if not 1 <= self.tick_rate <= 60:
            raise ValueError("tick_rate must be between 1 and 60.")
        if self.max_players < 1:
            raise ValueError("max_players must be at least 1.")
        # Each snake needs two cells, plus one for food.
        if 2 * (self.num_bots + self.max_players) + 1 > self.width * self.height:
            raise ValueError(
                "board too small for num_bots and max_players; increase "
                "width/height or reduce the number of snakes."
            )

    @property
    def tick_interval(self) -> float:
        """Seconds between two ticks."""
        return 1.0 / self.tick_rate


class Match:
    """Authoritative state for one match.

    The host must serialize calls: at most one of :meth:`join_attempt`,
    :meth:`join`, :meth:`leave`, :meth:`tick` or :meth:`signal` runs at a
    time. All output leaves through the dispatcher as value copies.
    """

    def __init__(
        self,
        dispatcher: Dispatcher,
        config: MatchConfig | None = None,
        match_id: str = "",
    ) -> None:
        cfg = config or MatchConfig()
        self.config = cfg
        self.match_id = match_id
        self.phase = MatchPhase.INITIALIZING
        self.tick_count = 0
        self.reserved: set[str] = set()
        self.directory = EntityDirectory()
        self.emitter = Emitter(dispatcher)

        self.game = SnakeGame.new(
            cfg.width, cfg.height, num_bots=cfg.num_bots,
            rng=np.random.default_rng(cfg.seed),
        )
        self.phase = MatchPhase.WAITING
        logger.info(
            "Match %s initialized (%dx%d, bots=%d).",
            match_id or "-", cfg.width, cfg.height, cfg.num_bots,
        )

    # --- lifecycle --------------------------------------------------------

    @property
    def playing(self) -> bool:
        return self.phase == MatchPhase.PLAYING

    @property
    def terminated(self) -> bool:
        return self.phase == MatchPhase.TERMINATED

    @property
    def joins_in_progress(self) -> int:
        """Seats reserved by :meth:`join_attempt` but not yet joined."""
        return len(self.reserved)

    @property
    def human_count(self) -> int:
        return len(self.directory)

    @property
    def label(self) -> MatchLabel:
        full = self.human_count + self.joins_in_progress >= self.config.max_players
        return MatchLabel(open=not self.terminated and not full, snake=True)

    def join_attempt(self, identifier: str) -> tuple[bool, str]:
        """Reserve a seat for *identifier*; returns ``(accepted, reason)``."""
        if self.terminated:
            return False, "match is over"
        if not identifier:
            return False, "identifier must not be empty"
        if identifier in self.directory or identifier in self.reserved:
            return False, "already joined"
        if self.human_count + self.joins_in_progress >= self.config.max_players:
            return False, "match is full"
        self.reserved.add(identifier)
        return True, ""

    def abort_join(self, identifier: str) -> None:
        """Release a seat reserved by :meth:`join_attempt` that never arrived."""
        self.reserved.discard(identifier)

    def join(self, identifier: str, session: Any) -> int:
        """Finalize a join: register the session and give it a snake."""
        self.reserved.discard(identifier)
        if identifier in self.directory:
            raise ContractViolation(f"{identifier!r} already has a snake")
        self.directory.register(identifier, session)
        index = self.game.add_snake(identifier)
        self.phase = MatchPhase.PLAYING
        logger.info(
            "Player %s joined match %s as snake %d.",
            identifier, self.match_id or "-", index,
        )
        return index

    def leave(self, identifier: str) -> None:
        """Drop a player, tell the others, and end the match if no humans remain."""
        self.directory.unregister(identifier)
        self.emitter.feedback(f"player {identifier} left!", self.directory.sessions())
        self.game.remove_snake(self.game.index_of(identifier))
        self.emitter.update(self.get_state(), self.directory.sessions())
        logger.info("Player %s left match %s.", identifier, self.match_id or "-")

        if self.human_count == 0:
            self.terminate("no players remain")

    def signal(self, data: str) -> str:
        """Handle an out-of-band signal; ``"kill"`` ends the match."""
        if data == KILL_SIGNAL:
            self.terminate("killed by signal")
            return "killing match due to signal"
        logger.warning("Ignoring unknown signal %r for match %s.", data, self.match_id or "-")
        return ""

    def terminate(self, reason: str) -> None:
        """Move to TERMINATED exactly once."""
        if self.terminated:
            return
        self.phase = MatchPhase.TERMINATED
        logger.info(
            "Match %s terminated at tick %d: %s.",
            self.match_id or "-", self.tick_count, reason,
        )

    # --- tick -------------------------------------------------------------

    def tick(self, messages: Iterable[InputMessage] = ()) -> None:
        """Run one fixed-interval step with the inputs queued since the last."""
        self.tick_count += 1
        if not self.playing:
            return

        stuck = self._advance()
        if stuck is not None:
            text = f"Player {stuck} lost!"
            logger.info("Match %s: %s", self.match_id or "-", text)
            self.emitter.feedback(text, self.directory.sessions())
            self.terminate(f"{stuck} got stuck")

        self.emitter.update(self.get_state(), self.directory.sessions())

        if not self.playing:
            return

        self._steer_bots()

        for message in messages:
            self._handle_input(message)
            if not self.playing:
                break

    def _advance(self) -> str | None:
        """Move every snake once, or none at all.

        Returns the display name of the first snake that cannot move.
        """
        game = self.game
        for index, snake in enumerate(game.snakes):
            if not game.validate_direction(snake, snake.direction.value):
                return game.display_name(index)

        # Earlier moves in the same tick can take a cell a later snake
        # is heading for, so moves are staged and committed together.
        staged = copy.deepcopy(game)
        for index, snake in enumerate(staged.snakes):
            if not staged.validate_direction(snake, snake.direction.value):
                return staged.display_name(index)
            staged.move(snake)

        self.game = staged
        return None

    def _steer_bots(self) -> None:
        game = self.game
        for index, snake in enumerate(game.snakes):
            if not game.is_bot(index):
                continue
            options = game.get_valid_directions(snake)
            if options:
                snake.direction = options[int(game.rng.integers(len(options)))]

    def _handle_input(self, message: InputMessage) -> None:
        sender = message.sender
        snake = self.game.snakes[self.game.index_of(sender)]
        recipients = addressed_to(self.directory, sender)

        if message.op_code != OpCode.MOVE:
            text = f"unsupported opcode received: ({message.op_code})"
            logger.warning("%s from %s.", text, sender)
            self.emitter.feedback(text, recipients)
            return

        try:
            vector = MoveBody.model_validate_json(message.data).vector()
        except ValidationError:
            logger.warning("Malformed move body from %s.", sender)
            self.emitter.feedback("invalid direction received", recipients)
            return

        if not self.game.validate_direction(snake, vector):
            logger.warning("Illegal direction %s from %s.", vector, sender)
            self.emitter.feedback("invalid direction received", recipients)
            return

        snake.direction = Direction(vector)

    def get_state(self) -> dict:
        """Return the full, serializable match snapshot."""
        return {
            "tick": self.tick_count,
            "phase": self.phase.value,
            **self.game.to_dict(),
        }
