"""Decode raw terminal bytes into key events."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple


class Key(Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    HOME = "home"
    END = "end"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"
    DELETE = "delete"
    F1 = "f1"
    F2 = "f2"
    ENTER = "enter"
    SPACE = "space"
    TAB = "tab"
    BACKSPACE = "backspace"
    ESCAPE = "escape"
    CHARACTER = "character"
    INTERRUPT = "interrupt"


@dataclass(frozen=True)
class KeyEvent:
    key: Key
    char: str = ''

    @classmethod
    def character(cls, char: str) -> "KeyEvent":
        return cls(Key.CHARACTER, char)


ESC = 27

SINGLE_BYTE_KEYS: Dict[int, Key] = {
    13: Key.ENTER,
    10: Key.ENTER,
    32: Key.SPACE,
    9: Key.TAB,
    127: Key.BACKSPACE,
    8: Key.BACKSPACE,
    27: Key.ESCAPE,
    3: Key.INTERRUPT,
}

# Escape sequences without the leading ESC byte
ESCAPE_SEQUENCES: Dict[Tuple[int, ...], Key] = {
    (91, 65): Key.UP,
    (91, 66): Key.DOWN,
    (91, 67): Key.RIGHT,
    (91, 68): Key.LEFT,
    (91, 72): Key.HOME,
    (91, 70): Key.END,
    (91, 49, 126): Key.HOME,
    (91, 52, 126): Key.END,
    (91, 51, 126): Key.DELETE,
    (91, 53, 126): Key.PAGE_UP,
    (91, 54, 126): Key.PAGE_DOWN,
    (79, 80): Key.F1,
    (79, 81): Key.F2,
}


def decode(data: bytes) -> Optional[KeyEvent]:
    """Translate one read's worth of bytes into a KeyEvent.

    Returns None when nothing was read or the byte is an ignored control
    character. Unknown escape sequences collapse to ESCAPE.
    """
    if not data:
        return None

    first = data[0]
    if first == ESC and len(data) > 1:
        key = ESCAPE_SEQUENCES.get(tuple(data[1:]))
        return KeyEvent(key or Key.ESCAPE)

    if first in SINGLE_BYTE_KEYS:
        return KeyEvent(SINGLE_BYTE_KEYS[first])
    if 33 <= first <= 126:
        return KeyEvent.character(chr(first))
    return None


def is_char(event: Optional[KeyEvent], *chars: str) -> bool:
    """True when event is a CHARACTER matching any of chars (case-insensitive)."""
    if event is None or event.key is not Key.CHARACTER:
        return False
    return event.char.lower() in {c.lower() for c in chars}
