from __future__ import annotations

import curses
from dataclasses import dataclass
from typing import List, Optional

from .bytecode import Selector
from .errors import MindMeldRuntimeError
from .machine import Machine

TAPE_WINDOW = 16


@dataclass
class _MachineState:
    machine: Machine
    halted: bool = False
    error: Optional[str] = None


class TapeVisualizer:
    """Curses-based step-through view of a running machine.

    Controls:
      - SPACE / p : toggle auto-run
      - n / →     : single-step
      - r         : reset the machine
      - q         : quit

    Designed for environments without pygame but with a terminal. Programs
    that read input see end-of-input, since the keyboard drives the UI.
    """

    def __init__(self, machine: Machine, max_steps: Optional[int] = None):
        self._initial = machine.clone()
        self.state = _MachineState(machine=machine, halted=machine.halted)
        self.max_steps = max_steps
        self.auto_run = False
        self.message = "Press SPACE to run/pause, n to step, q to quit."

    # ---------------------------- public API ----------------------------- #
    def run(self) -> None:  # pragma: no cover - interactive utility
        curses.wrapper(self._main)

    # --------------------------- internal helpers ------------------------ #
    def _main(self, stdscr: "curses._CursesWindow") -> None:  # pragma: no cover - interactive
        curses.curs_set(0)
        stdscr.nodelay(False)
        while True:
            self._draw(stdscr)
            stdscr.timeout(120 if (self.auto_run and not self.state.halted) else -1)
            key = stdscr.getch()
            if key == -1:
                if self.auto_run and not self.state.halted:
                    self._advance(auto=True)
                continue

            if key in (ord("q"), ord("Q")):
                break
            if key in (ord(" "), ord("p"), ord("P")):
                if self.state.halted:
                    self.message = "Program halted. Press r to reset or q to quit."
                else:
                    self.auto_run = not self.auto_run
                    self.message = "Running..." if self.auto_run else "Paused."
                continue
            if key in (ord("n"), curses.KEY_RIGHT):
                self._advance(auto=False)
                continue
            if key in (ord("r"), ord("R")):
                self._reset()
                continue
            self.message = f"Unhandled key: {key}."

    def _advance(self, auto: bool) -> None:
        if self.state.halted:
            self.auto_run = False
            return
        machine = self.state.machine
        if self.max_steps is not None and machine.steps >= self.max_steps:
            self.auto_run = False
            self.message = "Reached max steps; press r to reset or q to quit."
            return

        try:
            machine.step()
        except MindMeldRuntimeError as exc:
            self.state.halted = True
            self.state.error = str(exc)
            self.auto_run = False
            self.message = f"Runtime error: {exc}. Press r to reset or q to quit."
            return

        if machine.halted:
            self.state.halted = True
            self.auto_run = False
            self.message = "Halted. Press r to reset or q to quit."
        elif auto:
            self.message = "Running..."

    def _reset(self) -> None:
        self.state = _MachineState(machine=self._initial.clone())
        self.state.halted = self.state.machine.halted
        self.auto_run = False
        self.message = "Reset. Press SPACE to run or n to step."

    def tape_lines(self, selector: Selector, size: int = TAPE_WINDOW) -> List[str]:
        """Render the cells around one cursor as an index row and a value row."""
        tape = self.state.machine.tape
        cursor = tape.cursors[selector]
        start, cells = tape.window(cursor - size // 2, size)
        index_row = []
        value_row = []
        for offset, value in enumerate(cells):
            index = start + offset
            mark = selector.symbol if index == cursor else " "
            index_row.append(f"{index:>5}")
            value_row.append(f"{mark}{value:>4}")
        return [" ".join(index_row), " ".join(value_row)]

    def _draw(self, stdscr: "curses._CursesWindow") -> None:  # pragma: no cover - interactive
        stdscr.erase()
        height, width = stdscr.getmaxyx()
        machine = self.state.machine
        self._write(stdscr, 0, 0, "MindMeld (SPACE: run/pause, n: step, r: reset, q: quit)")

        inst_view_height = min(10, max(1, height - 16))
        length = machine.program_length
        pc_index = min(machine.pc, max(0, length - 1))
        start = max(0, pc_index - inst_view_height // 2)
        end = min(length, start + inst_view_height)
        row = 2
        if length:
            for idx in range(start, end):
                is_cursor = idx == machine.pc
                prefix = "→" if is_cursor else " "
                attr = curses.A_REVERSE if is_cursor else curses.A_NORMAL
                self._write(stdscr, row, 0, f"{prefix}{idx:04d} {machine.describe(idx)}", attr)
                row += 1
        else:
            self._write(stdscr, row, 0, "<no instructions>")
            row += 1

        row += 1
        self._write(
            stdscr,
            row,
            0,
            f"Step: {machine.steps} | PC: {machine.pc} | Auto: {self.auto_run} | Halted: {self.state.halted}",
        )

        for selector in Selector:
            row += 2
            self._write(stdscr, row, 0, f"Cursor {selector.symbol} @ {machine.tape.cursors[selector]}:")
            for line in self.tape_lines(selector):
                row += 1
                self._write(stdscr, row, 2, line)

        row += 2
        self._write(stdscr, row, 0, "Output:")
        self._write(stdscr, row + 1, 2, repr(machine.output) if machine.output else "<empty>")

        self._write(stdscr, height - 2, 0, self.message[: width - 1])
        stdscr.refresh()

    def _write(self, stdscr: "curses._CursesWindow", y: int, x: int, text: str, attr: int = curses.A_NORMAL) -> None:
        height, width = stdscr.getmaxyx()
        if 0 <= y < height:
            try:
                stdscr.addnstr(y, x, text, max(0, width - x - 1), attr)
            except curses.error:
                pass


__all__ = ["TapeVisualizer"]
