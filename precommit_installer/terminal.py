"""POSIX raw-mode terminal session."""

from __future__ import annotations

import os
import signal
import sys
import threading
from typing import Any, Callable, Dict, List, Optional

from . import logger
from .keys import KeyEvent, decode

try:
    import termios

    TERMIOS_AVAILABLE = True
except ImportError:
    termios = None  # type: ignore
    TERMIOS_AVAILABLE = False

HIDE_CURSOR = "\x1b[?25l"
SHOW_CURSOR = "\x1b[?25h"
READ_SIZE = 8

# c_cc indices are only meaningful when termios imports
IFLAG, OFLAG, CFLAG, LFLAG, ISPEED, OSPEED, CC = range(7)


class PosixTerminal:
    """Thin wrapper around a tty file descriptor."""

    def __init__(self, fd: Optional[int] = None, out: Any = None):
        self.fd = sys.stdin.fileno() if fd is None else fd
        self.out = out or sys.stdout

    def isatty(self) -> bool:
        return os.isatty(self.fd)

    def get_attributes(self) -> List[Any]:
        return termios.tcgetattr(self.fd)

    def set_attributes(self, attrs: List[Any]) -> None:
        termios.tcsetattr(self.fd, termios.TCSAFLUSH, attrs)

    def read(self, size: int = READ_SIZE) -> bytes:
        # VMIN=0/VTIME=1 makes this return b'' after ~100ms without input
        return os.read(self.fd, size)

    def write(self, text: str) -> None:
        self.out.write(text)
        self.out.flush()


def make_raw_attributes(attrs: List[Any]) -> List[Any]:
    """Return a raw-mode copy of ``attrs`` with a 100 ms read timeout."""
    raw = list(attrs)
    raw[CC] = list(attrs[CC])
    raw[IFLAG] &= ~(termios.BRKINT | termios.ICRNL | termios.INPCK | termios.ISTRIP | termios.IXON)
    raw[CFLAG] |= termios.CS8
    raw[LFLAG] &= ~(termios.ECHO | termios.ICANON | termios.IEXTEN | termios.ISIG)
    raw[CC][termios.VMIN] = 0
    raw[CC][termios.VTIME] = 1
    return raw


_owner_lock = threading.Lock()
_active_session: Optional["RawModeSession"] = None


class RawModeSession:
    """Context manager that keeps the terminal in raw mode.

    Nested ``with`` blocks on the same session are no-ops; only the
    outermost exit restores the saved attributes. A second session cannot
    be entered while another one owns the terminal.
    """

    HANDLED_SIGNALS = ("SIGTERM", "SIGHUP")

    def __init__(self, terminal: Optional[PosixTerminal] = None):
        self.terminal = terminal or PosixTerminal()
        self.original: Optional[List[Any]] = None
        self.depth = 0
        self._previous_handlers: Dict[int, Any] = {}

    @property
    def active(self) -> bool:
        return self.depth > 0

    def __enter__(self) -> "RawModeSession":
        global _active_session
        with _owner_lock:
            if _active_session is not None and _active_session is not self:
                raise RuntimeError("another raw terminal session is already active")
            if self.depth == 0:
                self.original = self.terminal.get_attributes()
                self.terminal.set_attributes(make_raw_attributes(self.original))
                try:
                    self.terminal.write(HIDE_CURSOR)
                    self._install_signal_handlers()
                except BaseException:
                    self.terminal.set_attributes(self.original)
                    self._restore_signal_handlers()
                    raise
                _active_session = self
                logger.debug("Entered raw terminal mode")
            self.depth += 1
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        global _active_session
        with _owner_lock:
            if self.depth == 0:
                return
            self.depth -= 1
            if self.depth == 0:
                try:
                    self._restore()
                finally:
                    _active_session = None
                    self._restore_signal_handlers()

    def _restore(self) -> None:
        if self.original is not None:
            self.terminal.set_attributes(self.original)
        self.terminal.write(SHOW_CURSOR)
        logger.debug("Restored terminal attributes")

    def _install_signal_handlers(self) -> None:
        if threading.current_thread() is not threading.main_thread():
            return
        for name in self.HANDLED_SIGNALS:
            signum = getattr(signal, name, None)
            if signum is None:
                continue
            # Leave signals the parent chose to ignore (e.g. nohup) alone
            if signal.getsignal(signum) is signal.SIG_IGN:
                continue
            self._previous_handlers[signum] = signal.signal(signum, self._make_handler(signum))

    def _restore_signal_handlers(self) -> None:
        for signum, handler in self._previous_handlers.items():
            signal.signal(signum, handler)
        self._previous_handlers.clear()

    def _make_handler(self, signum: int) -> Callable[[int, Any], None]:
        def _handler(received: int, frame: Any) -> None:
            self._restore()
            previous = self._previous_handlers.get(signum)
            if callable(previous):
                previous(received, frame)
                return
            raise SystemExit(128 + received)

        return _handler

    def read_key(self) -> Optional[KeyEvent]:
        """Read once (bounded by the VTIME timeout) and decode."""
        return decode(self.terminal.read(READ_SIZE))


def raw_mode_supported(stream: Any = None) -> bool:
    stream = stream or sys.stdin
    if not TERMIOS_AVAILABLE:
        return False
    try:
        return stream.isatty()
    except (AttributeError, ValueError):
        return False
