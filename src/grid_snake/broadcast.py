"""Serializes snapshots and feedback and hands them to the transport."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Protocol

from grid_snake.protocol import OpCode

logger = logging.getLogger(__name__)


class Dispatcher(Protocol):
    """Transport side of outbound delivery."""

    def broadcast_message(
        self, op_code: int, data: str, recipients: list[Any],
    ) -> None: ...


@dataclass(frozen=True)
class Outbound:
    """A message waiting to be delivered."""

    op_code: int
    data: str
    recipients: tuple[Any, ...]


class RecordingDispatcher:
    """Collects outbound messages until the host drains them."""

    def __init__(self) -> None:
        self.outbox: list[Outbound] = []

    def broadcast_message(
        self, op_code: int, data: str, recipients: list[Any],
    ) -> None:
        self.outbox.append(Outbound(op_code, data, tuple(recipients)))

    def drain(self) -> list[Outbound]:
        pending, self.outbox = self.outbox, []
        return pending


class Emitter:
    """Encodes UPDATE and FEEDBACK messages for explicit recipient lists.

    Recipients are always explicit; an empty list reaches nobody.
    """

    def __init__(self, dispatcher: Dispatcher) -> None:
        self.dispatcher = dispatcher

    def update(self, state: dict, recipients: list[Any]) -> bool:
        return self._send(OpCode.UPDATE, state, recipients)

    def feedback(self, text: str, recipients: list[Any]) -> bool:
        return self._send(OpCode.FEEDBACK, text, recipients)

    def _send(self, op_code: OpCode, body: Any, recipients: list[Any]) -> bool:
        try:
            data = json.dumps(body, separators=(",", ":"))
        except (TypeError, ValueError):
            logger.warning(
                "Dropping %s message: body is not serializable.", op_code.name,
            )
            return False
        self.dispatcher.broadcast_message(int(op_code), data, list(recipients))
        return True
