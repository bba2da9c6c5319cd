from __future__ import annotations

from typing import Tuple

from .bytecode import Action, Selector
from .machine import Machine
from .tokenizer import decode_pair, match_brackets


class DirectInterpreter(Machine):
    """Runs a canonical stream without compiling it first.

    Matching brackets are found at run time by counting nesting levels,
    which makes every taken jump linear in the loop body. The stream is
    checked for balanced brackets before anything runs.
    """

    def __init__(self, stream: str, **kwargs):
        match_brackets(stream)
        super().__init__(**kwargs)
        self.stream = stream

    @property
    def program_length(self) -> int:
        return len(self.stream) // 2

    def current(self) -> Tuple[Action, Selector]:
        return decode_pair(self.stream, self.pc)

    def describe(self, index: int) -> str:
        return self.stream[2 * index:2 * index + 2]

    def clone(self) -> "DirectInterpreter":
        return DirectInterpreter(self.stream, **self._collaborators())

    def _find_partner(self, direction: int) -> int:
        level = 1
        pos = self.pc
        while level:
            pos += direction
            ch = self.stream[2 * pos]
            if ch == Action.LOOP_OPEN.symbol:
                level += direction
            elif ch == Action.LOOP_CLOSE.symbol:
                level -= direction
        return pos

    def _op_LOOP_OPEN(self, selector: Selector):
        if self.tape.read(selector) == 0:
            self.pc = self._find_partner(1)
            return "jump"

    def _op_LOOP_CLOSE(self, selector: Selector):
        if self.tape.read(selector) != 0:
            self.pc = self._find_partner(-1)
            return "jump"


__all__ = ["DirectInterpreter"]
