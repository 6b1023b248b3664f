"""Entity directory: which human identifiers are live in a match."""

from __future__ import annotations

from typing import Any, Protocol

from grid_snake.errors import ContractViolation


class IdentityDirectory(Protocol):
    """Maps a stable player identifier to a live session handle."""

    def resolve(self, identifier: str) -> Any | None: ...


def addressed_to(directory: IdentityDirectory, identifier: str) -> list[Any]:
    """Recipients for a private message: the session alone, or nobody."""
    session = directory.resolve(identifier)
    return [] if session is None else [session]


class EntityDirectory:
    """Identifier to session handle map for the humans in one match.

    Bots never appear here; a snake whose identifier is empty is a bot.
    Snake indices are not cached: resolve them through
    :meth:`grid_snake.game.SnakeGame.index_of` whenever they are needed.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, Any] = {}

    def register(self, identifier: str, session: Any) -> None:
        self._sessions[identifier] = session

    def unregister(self, identifier: str) -> Any:
        try:
            return self._sessions.pop(identifier)
        except KeyError:
            raise ContractViolation(f"unknown identifier {identifier!r}") from None

    def resolve(self, identifier: str) -> Any | None:
        return self._sessions.get(identifier)

    def sessions(self) -> list[Any]:
        """All current recipients."""
        return list(self._sessions.values())

    def just(self, identifier: str) -> list[Any]:
        """The sender alone, or nobody if they are already gone."""
        return addressed_to(self, identifier)

    def all_but(self, identifier: str) -> list[Any]:
        return [s for ident, s in self._sessions.items() if ident != identifier]

    @property
    def identifiers(self) -> list[str]:
        return list(self._sessions)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
