from __future__ import annotations

from dataclasses import replace
from typing import List, Tuple

from .bytecode import ACTION_CHARS, SELECTOR_CHARS, Action, Instruction, Selector
from .errors import MalformedProgramError


def _check_even(stream: str) -> None:
    if len(stream) % 2:
        raise ValueError(f"canonical stream must have even length, got {len(stream)}")


def decode_pair(stream: str, position: int) -> Tuple[Action, Selector]:
    """Decode the pair at instruction ``position`` of a canonical stream."""
    action_char = stream[2 * position]
    selector_char = stream[2 * position + 1]
    action = ACTION_CHARS.get(action_char)
    if action is None:
        raise MalformedProgramError(f"unrecognized action {action_char!r}", position)
    selector = SELECTOR_CHARS.get(selector_char)
    if selector is None:
        raise MalformedProgramError(f"unrecognized selector {selector_char!r}", position)
    return action, selector


class Tokenizer:
    """Compile a canonical stream into instructions with resolved loop jumps."""

    def __init__(self, stream: str):
        _check_even(stream)
        self.stream = stream
        self.instructions: List[Instruction] = []
        self.open_loops: List[int] = []

    def tokenize(self) -> Tuple[Instruction, ...]:
        for position in range(len(self.stream) // 2):
            action, selector = decode_pair(self.stream, position)
            self.instructions.append(Instruction(action, selector))
            if action is Action.LOOP_OPEN:
                self.open_loops.append(position)
            elif action is Action.LOOP_CLOSE:
                self._close_loop(position)
        if self.open_loops:
            raise MalformedProgramError("unmatched loop open '['", self.open_loops[-1])
        return tuple(self.instructions)

    def _close_loop(self, position: int) -> None:
        if not self.open_loops:
            raise MalformedProgramError("unmatched loop close ']'", position)
        start = self.open_loops.pop()
        jump = position - start
        self.instructions[start] = replace(self.instructions[start], jump=jump)
        self.instructions[position] = replace(self.instructions[position], jump=jump)


def tokenize(stream: str) -> Tuple[Instruction, ...]:
    return Tokenizer(stream).tokenize()


def match_brackets(stream: str) -> None:
    """Validate a canonical stream without building instructions.

    Raises the same errors :func:`tokenize` would for the same stream.
    """
    _check_even(stream)
    depth: List[int] = []
    for position in range(len(stream) // 2):
        action, _ = decode_pair(stream, position)
        if action is Action.LOOP_OPEN:
            depth.append(position)
        elif action is Action.LOOP_CLOSE:
            if not depth:
                raise MalformedProgramError("unmatched loop close ']'", position)
            depth.pop()
    if depth:
        raise MalformedProgramError("unmatched loop open '['", depth[-1])


__all__ = ["Tokenizer", "tokenize", "match_brackets", "decode_pair"]
