from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict


class Action(Enum):
    INCREMENT = "+"
    DECREMENT = "-"
    MOVE_FORWARD = ">"
    MOVE_BACKWARD = "<"
    OUTPUT = "."
    INPUT = ","
    LOOP_OPEN = "["
    LOOP_CLOSE = "]"

    @property
    def symbol(self) -> str:
        return self.value


class Selector(Enum):
    A = "A"
    B = "B"

    @property
    def symbol(self) -> str:
        return self.value


ACTION_CHARS: Dict[str, Action] = {action.symbol: action for action in Action}
SELECTOR_CHARS: Dict[str, Selector] = {selector.symbol: selector for selector in Selector}
LOOP_ACTIONS = frozenset({Action.LOOP_OPEN, Action.LOOP_CLOSE})


@dataclass(frozen=True)
class Instruction:
    action: Action
    selector: Selector
    jump: int = 0  # distance to the matching bracket; brackets only

    @property
    def is_loop(self) -> bool:
        return self.action in LOOP_ACTIONS

    @property
    def pair(self) -> str:
        return self.action.symbol + self.selector.symbol

    def __str__(self):
        if self.action is Action.LOOP_OPEN:
            return f"{self.pair} ->{self.jump}"
        if self.action is Action.LOOP_CLOSE:
            return f"{self.pair} <-{self.jump}"
        return self.pair


__all__ = [
    "Action",
    "Selector",
    "Instruction",
    "ACTION_CHARS",
    "SELECTOR_CHARS",
    "LOOP_ACTIONS",
]
