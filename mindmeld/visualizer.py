import datetime
import json
import pathlib
from typing import Any, Dict, List, Optional

import pygame

from .bytecode import Selector
from .errors import MindMeldRuntimeError
from .machine import Machine

WIDTH, HEIGHT = 1100, 560
CELL = 44
TAPE_CELLS = 22
ROW = 22
BG = (245, 245, 240)
INK = (20, 20, 20)
DIM = (110, 110, 110)
CURSOR_COLORS = {Selector.A: (235, 120, 90), Selector.B: (80, 130, 230)}
PC_BAND = (205, 240, 205)


class TapeVisualizer:
    """pygame view of one tape strip with both cursors marked on it.

    Keys: SPACE steps, P toggles auto-run, R resets, L exports the trace log,
    Q quits.
    """

    def __init__(self, machine: Machine):
        self.machine = machine
        self._initial = machine.clone()
        pygame.init()
        self.screen = pygame.display.set_mode((WIDTH, HEIGHT))
        pygame.display.set_caption("MindMeld")
        self.font = pygame.font.SysFont("monospace", 16)
        self.clock = pygame.time.Clock()
        self.running = True
        self.paused = True
        self.message = "SPACE step | P run/pause | R reset | L export | Q quit"
        self.trace_log: List[Dict[str, Any]] = []

    # ------------------------------ drawing ------------------------------ #
    def _text(self, text: str, pos, color=INK, background=None):
        self.screen.blit(self.font.render(text, True, color, background), pos)

    def _draw_tape(self, top: int) -> None:
        tape = self.machine.tape
        centre = sum(tape.cursors.values()) // 2
        start, cells = tape.window(centre - TAPE_CELLS // 2, TAPE_CELLS)
        for offset, value in enumerate(cells):
            index = start + offset
            rect = pygame.Rect(20 + offset * (CELL + 4), top, CELL, CELL)
            pygame.draw.rect(self.screen, (255, 255, 255), rect)
            pygame.draw.rect(self.screen, DIM, rect, 1)
            self._text(str(value), (rect.x + 6, rect.y + 12))
            self._text(str(index), (rect.x + 4, rect.bottom + 4), color=DIM)
            for row, selector in enumerate(Selector):
                if tape.cursors[selector] == index:
                    marker_y = top - ROW * (2 - row)
                    self._text(selector.symbol, (rect.x + 16, marker_y), color=CURSOR_COLORS[selector])

    def _draw_program(self, top: int) -> None:
        machine = self.machine
        rows = (HEIGHT - top - 3 * ROW) // ROW
        first = max(0, min(machine.pc - rows // 2, machine.program_length - rows))
        for row, index in enumerate(range(first, min(machine.program_length, first + rows))):
            background = PC_BAND if index == machine.pc else None
            self._text(f"{index:04d}  {machine.describe(index)}", (20, top + row * ROW), background=background)

    def _draw(self) -> None:
        self.screen.fill(BG)
        self._draw_tape(top=60)
        self._draw_program(top=170)
        self._text(f"output: {self.machine.output!r}", (420, 170))
        state = "paused" if self.paused else "running"
        self._text(
            f"{state} | step {self.machine.steps} | pc {self.machine.pc} | {self.message}",
            (20, HEIGHT - ROW - 10),
            color=DIM,
        )
        pygame.display.flip()

    # ------------------------------ control ------------------------------ #
    def _handle_events(self) -> None:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_q:
                    self.running = False
                elif event.key == pygame.K_SPACE:
                    self.paused = True
                    self._step_once()
                elif event.key == pygame.K_p:
                    self.paused = not self.paused
                elif event.key == pygame.K_r:
                    self._reset_machine()
                elif event.key == pygame.K_l:
                    self._export_trace()

    def run(self) -> None:
        while self.running:
            self._handle_events()
            if not self.paused and self._step_once():
                self.paused = True
            self._draw()
            self.clock.tick(30)
        pygame.quit()

    def _step_once(self) -> bool:
        """Run one instruction and log it; returns True once the program stops."""
        machine = self.machine
        if machine.halted:
            self.message = "Program already complete."
            return True
        frame = machine.trace_frame()
        entry: Dict[str, Any] = {"step": machine.steps, "pc": frame.pc, "instruction": frame.instruction}
        try:
            machine.step()
        except MindMeldRuntimeError as exc:
            entry["error"] = str(exc)
            self.trace_log.append(entry)
            self.message = f"Runtime error: {exc}"
            machine.pc = machine.program_length
            return True
        entry.update(
            cursor_a=machine.tape.cursors[Selector.A],
            cursor_b=machine.tape.cursors[Selector.B],
            output=machine.output,
        )
        self.trace_log.append(entry)
        if machine.halted:
            self.message = "Execution halted."
            return True
        return False

    def _export_trace(self) -> Optional[pathlib.Path]:
        if not self.trace_log:
            self.message = "Trace log is empty; nothing exported."
            return None
        stamp = datetime.datetime.now().strftime("%Y%m%d_%H%M%S")
        path = pathlib.Path(f"mindmeld_trace_{stamp}.jsonl")
        lines = [json.dumps(entry) for entry in self.trace_log]
        try:
            path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        except OSError as exc:
            self.message = f"Failed to export trace: {exc}"
            return None
        self.message = f"Trace exported to {path}"
        return path

    def _reset_machine(self) -> None:
        self.machine = self._initial.clone()
        self.paused = True
        self.trace_log.clear()
        self.message = "Machine reset."


__all__ = ["TapeVisualizer"]
