"""Sequential naming and id allocation owned by one construction session."""

from __future__ import annotations

import logging
import string
from dataclasses import dataclass

logger = logging.getLogger(__name__)

_POINT_LETTERS = string.ascii_uppercase


@dataclass(frozen=True)
class NameCounters:
    points: int = 0
    lines: int = 0
    circles: int = 0


class NameGenerator:
    """Hands out ``A``..``Z`` then ``P27``, ``P28``... for points, ``l<n>`` and ``c<n>``."""

    def __init__(self) -> None:
        self._point_counter = 0
        self._line_counter = 0
        self._circle_counter = 0

    def point_name(self) -> str:
        if self._point_counter < len(_POINT_LETTERS):
            name = _POINT_LETTERS[self._point_counter]
            self._point_counter += 1
            return name
        self._point_counter += 1
        return f"P{self._point_counter}"

    def line_name(self) -> str:
        self._line_counter += 1
        return f"l{self._line_counter}"

    def circle_name(self) -> str:
        self._circle_counter += 1
        return f"c{self._circle_counter}"

    def state(self) -> NameCounters:
        return NameCounters(self._point_counter, self._line_counter, self._circle_counter)

    def restore(self, state: NameCounters) -> None:
        self._point_counter = state.points
        self._line_counter = state.lines
        self._circle_counter = state.circles

    def reset(self) -> None:
        self.restore(NameCounters())


@dataclass(frozen=True)
class SessionState:
    next_id: int
    next_param_index: int
    names: NameCounters


class SessionContext:
    """Explicitly owned id, parameter-index and name counters.

    Each engine holds its own context, so independent sessions never share
    numbering.
    """

    def __init__(self) -> None:
        self.names = NameGenerator()
        self._next_id = 1
        self._next_param_index = 1

    def next_id(self) -> int:
        value = self._next_id
        self._next_id += 1
        return value

    def next_param_index(self) -> int:
        value = self._next_param_index
        self._next_param_index += 1
        return value

    def state(self) -> SessionState:
        return SessionState(self._next_id, self._next_param_index, self.names.state())

    def restore(self, state: SessionState) -> None:
        self._next_id = state.next_id
        self._next_param_index = state.next_param_index
        self.names.restore(state.names)

    def reset(self) -> None:
        logger.debug("Resetting session counters (next id was %d)", self._next_id)
        self._next_id = 1
        self._next_param_index = 1
        self.names.reset()


__all__ = ["NameCounters", "NameGenerator", "SessionContext", "SessionState"]
