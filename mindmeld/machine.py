from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional, Tuple

from .bytecode import Action, Selector
from .errors import MindMeldRuntimeError, TapeBoundsError
from .events import MachineSnapshot, TraceFrame, format_trace_frame

DEFAULT_TAPE_LENGTH = 30000

InputSource = Callable[[], str]
OutputSink = Callable[[str], None]


class Tape:
    """One shared byte tape addressed by two independent cursors."""

    def __init__(self, length: int = DEFAULT_TAPE_LENGTH):
        if length <= 0:
            raise ValueError(f"tape length must be positive, got {length}")
        self.cells = bytearray(length)
        self.cursors: Dict[Selector, int] = {Selector.A: 0, Selector.B: 0}

    def __len__(self) -> int:
        return len(self.cells)

    def read(self, selector: Selector) -> int:
        return self.cells[self.cursors[selector]]

    def write(self, selector: Selector, value: int) -> None:
        self.cells[self.cursors[selector]] = value % 256

    def increment(self, selector: Selector) -> None:
        self.write(selector, self.read(selector) + 1)

    def decrement(self, selector: Selector) -> None:
        self.write(selector, self.read(selector) - 1)

    def move(self, selector: Selector, delta: int) -> None:
        target = self.cursors[selector] + delta
        if not 0 <= target < len(self.cells):
            raise TapeBoundsError(
                f"cursor {selector.symbol} moved to {target}, outside tape [0, {len(self.cells)})"
            )
        self.cursors[selector] = target

    def window(self, start: int, size: int) -> Tuple[int, List[int]]:
        """Return ``(start, cells)`` for ``size`` cells, shifted to stay on the tape."""
        size = min(size, len(self.cells))
        start = max(0, min(start, len(self.cells) - size))
        return start, list(self.cells[start:start + size])


def _end_of_input() -> str:
    return ""


class Machine(ABC):
    """Shared step loop for both execution strategies.

    Subclasses supply the program (``program_length``, ``current``,
    ``describe``, ``clone``) and the two loop handlers; everything that touches
    the tape or the I/O collaborators lives here.
    """

    def __init__(
        self,
        *,
        tape_length: int = DEFAULT_TAPE_LENGTH,
        input_source: Optional[InputSource] = None,
        output_sink: Optional[OutputSink] = None,
    ):
        self.tape = Tape(tape_length)
        self.pc = 0
        self.steps = 0
        self.input_source = input_source or _end_of_input
        self.output_sink = output_sink
        self._output: List[str] = []
        self._handlers = {
            Action.INCREMENT: self._op_INCREMENT,
            Action.DECREMENT: self._op_DECREMENT,
            Action.MOVE_FORWARD: self._op_MOVE_FORWARD,
            Action.MOVE_BACKWARD: self._op_MOVE_BACKWARD,
            Action.OUTPUT: self._op_OUTPUT,
            Action.INPUT: self._op_INPUT,
            Action.LOOP_OPEN: self._op_LOOP_OPEN,
            Action.LOOP_CLOSE: self._op_LOOP_CLOSE,
        }

    # ---------------------------- program hooks ---------------------------- #
    @property
    @abstractmethod
    def program_length(self) -> int:
        pass

    @abstractmethod
    def current(self) -> Tuple[Action, Selector]:
        pass

    @abstractmethod
    def describe(self, index: int) -> str:
        pass

    @abstractmethod
    def clone(self) -> "Machine":
        """Return a fresh machine for the same program and collaborators."""
        pass

    @abstractmethod
    def _op_LOOP_OPEN(self, selector: Selector):
        pass

    @abstractmethod
    def _op_LOOP_CLOSE(self, selector: Selector):
        pass

    # ------------------------------ public API ----------------------------- #
    @property
    def output(self) -> str:
        return "".join(self._output)

    @property
    def halted(self) -> bool:
        return self.pc >= self.program_length

    def step(self):
        """Executes a single instruction."""
        if self.halted:
            return "halt"
        action, selector = self.current()
        try:
            control = self._handlers[action](selector)
        except MindMeldRuntimeError as exc:
            if exc.frame is None:
                exc.frame = self.trace_frame()
            raise
        self.steps += 1
        if control == "jump":
            return None  # PC is already updated
        self.pc += 1
        return None

    def run(self, debug: bool = False) -> str:
        while not self.halted:
            if debug:
                print(format_trace_frame(self.trace_frame()))
            self.step()
        return self.output

    def trace_frame(self) -> TraceFrame:
        cursors = self.tape.cursors
        return TraceFrame(
            pc=self.pc,
            instruction=self.describe(self.pc) if not self.halted else "<end>",
            cursor_a=cursors[Selector.A],
            cursor_b=cursors[Selector.B],
            cell_a=self.tape.read(Selector.A),
            cell_b=self.tape.read(Selector.B),
        )

    def snapshot(self, window: int = 16) -> MachineSnapshot:
        low = min(self.tape.cursors.values())
        start, cells = self.tape.window(low - window // 4, window)
        return MachineSnapshot(
            pc=self.pc,
            steps=self.steps,
            cursors=dict(self.tape.cursors),
            window_start=start,
            window=cells,
            output=self.output,
        )

    def _collaborators(self) -> dict:
        return dict(
            tape_length=len(self.tape),
            input_source=self.input_source,
            output_sink=self.output_sink,
        )

    # ------------------------------ handlers ------------------------------ #
    def _emit(self, selector: Selector) -> None:
        ch = chr(self.tape.read(selector))
        self._output.append(ch)
        if self.output_sink is not None:
            self.output_sink(ch)

    def _op_INCREMENT(self, selector: Selector):
        self.tape.increment(selector)

    def _op_DECREMENT(self, selector: Selector):
        self.tape.decrement(selector)

    def _op_MOVE_FORWARD(self, selector: Selector):
        self.tape.move(selector, 1)

    def _op_MOVE_BACKWARD(self, selector: Selector):
        self.tape.move(selector, -1)

    def _op_OUTPUT(self, selector: Selector):
        self._emit(selector)

    def _op_INPUT(self, selector: Selector):
        ch = self.input_source()
        if not ch:
            self.tape.write(selector, 0)
            return
        self.tape.write(selector, ord(ch[0]))
        self._emit(selector)


__all__ = ["Tape", "Machine", "DEFAULT_TAPE_LENGTH", "InputSource", "OutputSink"]
