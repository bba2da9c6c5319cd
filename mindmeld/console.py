from __future__ import annotations

import sys
from typing import Optional, TextIO

try:  # pragma: no cover - platform specific
    import termios
    import tty
except ImportError:  # pragma: no cover - Windows
    termios = None  # type: ignore
    tty = None  # type: ignore


def _read_raw_posix(stream: TextIO) -> str:
    fd = stream.fileno()
    saved = termios.tcgetattr(fd)
    try:
        tty.setcbreak(fd)
        return stream.read(1)
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, saved)


def getch(stream: Optional[TextIO] = None) -> str:
    """Block for one character without echoing it.

    A newline comes back as ``\\r``, matching what a raw terminal sends for
    the Enter key. Returns ``""`` at end of input.
    """
    stream = stream or sys.stdin
    if not stream.isatty():
        ch = stream.read(1)
    elif termios is not None:
        ch = _read_raw_posix(stream)
    else:  # pragma: no cover - Windows
        import msvcrt

        ch = msvcrt.getwch()
    return "\r" if ch == "\n" else ch


class StreamInput:
    """Input source reading one character at a time from a text stream."""

    def __init__(self, stream: TextIO):
        self.stream = stream

    def __call__(self) -> str:
        return self.stream.read(1)


class StreamOutput:
    """Output sink writing each character to a text stream as it is produced."""

    def __init__(self, stream: TextIO):
        self.stream = stream

    def __call__(self, ch: str) -> None:
        self.stream.write(ch)
        self.stream.flush()


def pause(prompt: str = "Press any key to continue...") -> None:
    print(prompt, flush=True)
    getch()


__all__ = ["getch", "pause", "StreamInput", "StreamOutput"]
