"""Wire-level op codes and message bodies exchanged with the transport."""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict


class OpCode(enum.IntEnum):
    """Message kinds. Outbound codes start at 100, inbound at 200."""

    UPDATE = 100
    FEEDBACK = 101

    MOVE = 200


class MoveBody(BaseModel):
    """Payload of a MOVE message: the requested direction vector."""

    model_config = ConfigDict(strict=True, extra="forbid")

    x: int
    y: int

    def vector(self) -> tuple[int, int]:
        return (self.x, self.y)


@dataclass(frozen=True)
class InputMessage:
    """One client message queued for the next tick."""

    sender: str
    op_code: int
    data: str | bytes = b""


class MatchLabel(BaseModel):
    """Discovery flags a match advertises to the match directory."""

    open: bool = True
    snake: bool = True

    def to_json(self) -> str:
        """Render the flags as integers, e.g. ``{"open":1,"snake":1}``."""
        return json.dumps(
            {"open": int(self.open), "snake": int(self.snake)},
            separators=(",", ":"),
        )
