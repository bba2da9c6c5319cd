from __future__ import annotations

from enum import Enum
from typing import List, Union

from .bytecode import ACTION_CHARS, SELECTOR_CHARS, Selector

ALPHABET = frozenset(ACTION_CHARS) | frozenset(SELECTOR_CHARS)


class SanitizerMode(Enum):
    DEFAULT = "default"
    CARRY_FORWARD = "carry-forward"


class Sanitizer:
    """Reduce raw source text to a canonical stream of action/selector pairs.

    Everything outside the eight action characters and the two selector
    characters is discarded before pairing, so an action and its selector may
    be separated by whitespace or comments in the source.

    ``DEFAULT`` keeps only actions whose selector follows them; a selector
    that does not follow an action is dropped. ``CARRY_FORWARD`` pairs every
    action with the last selector seen before it (``A`` before any selector
    appears); selectors only change that carried value.
    """

    def __init__(self, source: Union[str, bytes], mode: SanitizerMode = SanitizerMode.DEFAULT):
        if isinstance(source, (bytes, bytearray)):
            source = bytes(source).decode("latin-1")
        self.chars = [ch for ch in source if ch in ALPHABET]
        self.mode = mode

    def sanitize(self) -> str:
        if self.mode is SanitizerMode.CARRY_FORWARD:
            pairs = self._carry_forward()
        else:
            pairs = self._adjacent_pairs()
        return "".join(pairs)

    # ------------------------------- internals ---------------------------- #
    def _selector_after(self, index: int) -> str | None:
        nxt = index + 1
        if nxt < len(self.chars) and self.chars[nxt] in SELECTOR_CHARS:
            return self.chars[nxt]
        return None

    def _adjacent_pairs(self) -> List[str]:
        pairs: List[str] = []
        i = 0
        while i < len(self.chars):
            ch = self.chars[i]
            selector = self._selector_after(i) if ch in ACTION_CHARS else None
            if selector is None:
                i += 1
                continue
            pairs.append(ch + selector)
            i += 2
        return pairs

    def _carry_forward(self) -> List[str]:
        pairs: List[str] = []
        carried = Selector.A.symbol
        for ch in self.chars:
            if ch in SELECTOR_CHARS:
                carried = ch
            else:
                pairs.append(ch + carried)
        return pairs


def sanitize(source: Union[str, bytes], mode: SanitizerMode = SanitizerMode.DEFAULT) -> str:
    return Sanitizer(source, mode).sanitize()


__all__ = ["Sanitizer", "SanitizerMode", "sanitize", "ALPHABET"]
