import os
import signal
import time

import pytest

termios = pytest.importorskip("termios")

from precommit_installer.keys import Key, KeyEvent
from precommit_installer.terminal import (
    HIDE_CURSOR,
    SHOW_CURSOR,
    RawModeSession,
    make_raw_attributes,
)


class FakeTerminal:
    def __init__(self, reads=()):
        cc = [0] * 32
        self.original = [
            termios.ICRNL | termios.IXON,
            termios.OPOST,
            0,
            termios.ICANON | termios.ECHO | termios.ISIG,
            38400,
            38400,
            cc,
        ]
        self.current = self.original
        self.applied = []
        self.written = []
        self.reads = list(reads)

    def isatty(self):
        return True

    def get_attributes(self):
        return self.current

    def set_attributes(self, attrs):
        self.applied.append(attrs)
        self.current = attrs

    def read(self, size=8):
        return self.reads.pop(0) if self.reads else b""

    def write(self, text):
        self.written.append(text)


def test_make_raw_attributes_clears_canonical_mode_without_mutating_input():
    term = FakeTerminal()
    raw = make_raw_attributes(term.original)
    assert raw[3] & termios.ICANON == 0
    assert raw[3] & termios.ECHO == 0
    assert raw[3] & termios.ISIG == 0
    assert raw[0] & termios.ICRNL == 0
    assert raw[2] & termios.CS8 == termios.CS8
    assert raw[6][termios.VMIN] == 0
    assert raw[6][termios.VTIME] == 1
    # output processing stays on so rich renders normally
    assert raw[1] & termios.OPOST
    assert term.original[3] & termios.ICANON
    assert term.original[6][termios.VTIME] == 0


def test_session_restores_terminal_on_normal_exit():
    term = FakeTerminal()
    with RawModeSession(term) as session:
        assert session.active
        assert term.current is not term.original
        assert term.written == [HIDE_CURSOR]
    assert term.current is term.original
    assert term.written[-1] == SHOW_CURSOR


def test_session_restores_terminal_on_exception():
    term = FakeTerminal()
    with pytest.raises(ValueError):
        with RawModeSession(term):
            raise ValueError("boom")
    assert term.current is term.original
    assert term.written[-1] == SHOW_CURSOR


def test_session_restores_terminal_on_keyboard_interrupt():
    term = FakeTerminal()
    with pytest.raises(KeyboardInterrupt):
        with RawModeSession(term):
            raise KeyboardInterrupt
    assert term.current is term.original


def test_nested_acquisition_is_reentrant():
    term = FakeTerminal()
    session = RawModeSession(term)
    with session:
        with session:
            assert session.depth == 2
            assert session.original is term.original
        # inner exit does not restore
        assert term.current is not term.original
        assert len(term.applied) == 1
    assert term.current is term.original
    assert len(term.applied) == 2


def test_second_session_is_rejected_while_one_is_active():
    first = RawModeSession(FakeTerminal())
    second = RawModeSession(FakeTerminal())
    with first:
        with pytest.raises(RuntimeError):
            with second:
                pass
    with second:
        assert second.active


def test_signal_handlers_are_reinstated():
    before = signal.getsignal(signal.SIGTERM)
    with RawModeSession(FakeTerminal()):
        assert signal.getsignal(signal.SIGTERM) is not before
    assert signal.getsignal(signal.SIGTERM) == before


def test_read_key_decodes_one_read():
    term = FakeTerminal(reads=[b"\x1b[B", b""])
    with RawModeSession(term) as session:
        assert session.read_key() == KeyEvent(Key.DOWN)
        assert session.read_key() is None


def test_sigterm_restores_terminal_and_exits():
    before = signal.signal(signal.SIGTERM, signal.SIG_DFL)
    term = FakeTerminal()
    try:
        with pytest.raises(SystemExit) as exc_info:
            with RawModeSession(term):
                os.kill(os.getpid(), signal.SIGTERM)
                # handler runs at the next bytecode boundary
                for _ in range(100):
                    time.sleep(0.01)
        assert exc_info.value.code == 128 + signal.SIGTERM
        assert term.current is term.original
        assert SHOW_CURSOR in term.written
        assert signal.getsignal(signal.SIGTERM) == signal.SIG_DFL
    finally:
        signal.signal(signal.SIGTERM, before)


def test_ignored_signals_stay_ignored():
    before = signal.signal(signal.SIGHUP, signal.SIG_IGN)
    try:
        with RawModeSession(FakeTerminal()) as session:
            assert signal.getsignal(signal.SIGHUP) is signal.SIG_IGN
            os.kill(os.getpid(), signal.SIGHUP)
            assert session.active
        assert signal.getsignal(signal.SIGHUP) is signal.SIG_IGN
    finally:
        signal.signal(signal.SIGHUP, before)


class BrokenWriteTerminal(FakeTerminal):
    def write(self, text):
        if text == HIDE_CURSOR:
            raise OSError("stdout closed")
        super().write(text)


def test_failed_enter_restores_attributes():
    term = BrokenWriteTerminal()
    before = signal.getsignal(signal.SIGTERM)
    with pytest.raises(OSError):
        with RawModeSession(term):
            pass
    assert term.current is term.original
    assert signal.getsignal(signal.SIGTERM) == before
    # the terminal is not left owned by the failed session
    with RawModeSession(FakeTerminal()) as session:
        assert session.active
