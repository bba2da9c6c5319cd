from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .bytecode import Selector


@dataclass(frozen=True)
class TraceFrame:
    """Where the machine was when an instruction ran (or failed)."""

    pc: int
    instruction: str
    cursor_a: int
    cursor_b: int
    cell_a: int
    cell_b: int


@dataclass(frozen=True)
class MachineSnapshot:
    pc: int
    steps: int
    cursors: dict
    window_start: int
    window: Sequence[int]
    output: str

    def cursor(self, selector: Selector) -> int:
        return self.cursors[selector]


def format_trace_frame(frame: TraceFrame) -> str:
    return (
        f"[PC={frame.pc}] EXEC: {frame.instruction}  "
        f"A@{frame.cursor_a}={frame.cell_a}  B@{frame.cursor_b}={frame.cell_b}"
    )


__all__ = ["TraceFrame", "MachineSnapshot", "format_trace_frame"]
