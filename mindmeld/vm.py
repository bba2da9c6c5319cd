from __future__ import annotations

from typing import Iterable, Tuple

from .bytecode import Action, Instruction, Selector
from .machine import Machine


class TapeVM(Machine):
    """Runs a tokenized instruction sequence.

    Loop brackets carry the distance to their partner, so a taken jump is a
    single addition. The jump lands on the partner bracket itself, which is
    then executed on the next step with its own selector.
    """

    def __init__(self, instructions: Iterable[Instruction], **kwargs):
        super().__init__(**kwargs)
        self.instructions: Tuple[Instruction, ...] = tuple(instructions)

    @property
    def program_length(self) -> int:
        return len(self.instructions)

    def current(self) -> Tuple[Action, Selector]:
        inst = self.instructions[self.pc]
        return inst.action, inst.selector

    def describe(self, index: int) -> str:
        return str(self.instructions[index])

    def clone(self) -> "TapeVM":
        return TapeVM(self.instructions, **self._collaborators())

    def _op_LOOP_OPEN(self, selector: Selector):
        if self.tape.read(selector) == 0:
            self.pc += self.instructions[self.pc].jump
            return "jump"

    def _op_LOOP_CLOSE(self, selector: Selector):
        if self.tape.read(selector) != 0:
            self.pc -= self.instructions[self.pc].jump
            return "jump"


__all__ = ["TapeVM"]
