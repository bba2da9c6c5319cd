from __future__ import annotations

from typing import Optional

from .events import TraceFrame, format_trace_frame


class MindMeldError(Exception):
    """Base class for every error the interpreter reports."""


class SourceAccessError(MindMeldError):
    """The program source could not be read."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"cannot read {path!r}: {reason}")
        self.path = path
        self.reason = reason


class MalformedProgramError(MindMeldError):
    """Raised before execution when the instruction stream is not runnable."""

    def __init__(self, message: str, position: Optional[int] = None):
        if position is not None:
            message = f"{message} (instruction {position})"
        super().__init__(message)
        self.position = position


class MindMeldRuntimeError(MindMeldError):
    """Runtime error with the machine state at the failing instruction attached."""

    def __init__(self, message: str, frame: Optional[TraceFrame] = None):
        super().__init__(message)
        self.frame = frame

    def describe(self) -> str:
        if self.frame is None:
            return str(self)
        return f"{self}\n  at {format_trace_frame(self.frame)}"


class TapeBoundsError(MindMeldRuntimeError):
    """A cursor was moved outside the memory tape."""


__all__ = [
    "MindMeldError",
    "SourceAccessError",
    "MalformedProgramError",
    "MindMeldRuntimeError",
    "TapeBoundsError",
]
