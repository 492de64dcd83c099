"""Keyboard-driven single/multi-select menus rendered with rich."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, FrozenSet, Iterable, List, Optional, Sequence, Set

from rich.console import Group
from rich.panel import Panel
from rich.text import Text

from . import logger
from .keys import Key, KeyEvent

EMPTY_MESSAGE = "Nothing available in this section."


class MenuState(Enum):
    RENDERING = "rendering"
    AWAITING_INPUT = "awaiting_input"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class MenuEntry:
    """One row. Entries without a key are section headers."""

    label: str
    key: Optional[str] = None
    description: str = ''
    details: str = ''

    @property
    def selectable(self) -> bool:
        return self.key is not None

    @classmethod
    def header(cls, label: str, description: str = '') -> "MenuEntry":
        return cls(label=label, key=None, description=description)


@dataclass(frozen=True)
class MenuResult:
    state: MenuState
    selection: FrozenSet[str] = frozenset()
    choice: Optional[str] = None

    @property
    def confirmed(self) -> bool:
        return self.state is MenuState.CONFIRMED


def render_menu(
    title: str,
    entries: Sequence[MenuEntry],
    cursor: int,
    selection: Iterable[str],
    multi_select: bool = True,
    status: Optional[str] = None,
    subtitle: str = '',
    empty_message: str = EMPTY_MESSAGE,
) -> Panel:
    """Build the renderable for a menu frame."""
    chosen = set(selection)
    rows: List[Any] = []
    if subtitle:
        rows.append(Text(subtitle, style="dim"))
        rows.append(Text(""))

    if not any(entry.selectable for entry in entries):
        rows.append(Text(empty_message, style="yellow"))
        rows.append(Text(""))
        rows.append(Text("ENTER/ESC Back", style="dim"))
        return Panel(Group(*rows), title=title, border_style="cyan")

    for index, entry in enumerate(entries):
        if not entry.selectable:
            if index:
                rows.append(Text(""))
            header = Text(entry.label, style="bold magenta")
            if entry.description:
                header.append(f"  {entry.description}", style="dim")
            rows.append(header)
            continue

        active = index == cursor
        if multi_select:
            marker = "[x]" if entry.key in chosen else "[ ]"
        else:
            marker = "(•)" if active else "( )"
        line = Text.assemble(
            ("> " if active else "  ", "bold cyan"),
            (f"{marker} ", "green" if marker in ("[x]", "(•)") else "dim"),
            (entry.label, "bold" if active else ""),
        )
        rows.append(line)
        if active:
            if entry.description:
                rows.append(Text(f"      {entry.description}", style="cyan"))
            if entry.details:
                rows.append(Text(f"      {entry.details}", style="dim"))

    rows.append(Text(""))
    if multi_select:
        hint = "↑↓ Navigate   SPACE Toggle   ENTER Confirm   ESC/B Back"
    else:
        hint = "↑↓ Navigate   1-9 Jump   ENTER Select   ESC/B Back"
    rows.append(Text(hint, style="dim"))
    if status:
        rows.append(Text.from_markup(status))
    return Panel(Group(*rows), title=title, border_style="cyan")


class Menu:
    """Cursor/selection state machine for a list of entries.

    The seed selection is copied; CANCELLED leaves the caller's set as it
    was, CONFIRMED hands back the working copy in the result.
    """

    def __init__(
        self,
        title: str,
        entries: Sequence[MenuEntry],
        selected: Iterable[str] = (),
        multi_select: bool = True,
        subtitle: str = '',
        empty_message: str = EMPTY_MESSAGE,
        status: Optional[str] = None,
    ):
        self.title = title
        self.entries = list(entries)
        self.multi_select = multi_select
        self.subtitle = subtitle
        self.empty_message = empty_message
        self.status = status
        self.selection: Set[str] = set(selected)
        self.state = MenuState.RENDERING
        self.choice: Optional[str] = None
        self._selectable = [i for i, e in enumerate(self.entries) if e.selectable]
        self.cursor = self._selectable[0] if self._selectable else 0

    @property
    def is_empty(self) -> bool:
        return not self._selectable

    @property
    def current(self) -> Optional[MenuEntry]:
        if self.is_empty:
            return None
        return self.entries[self.cursor]

    @property
    def finished(self) -> bool:
        return self.state in (MenuState.CONFIRMED, MenuState.CANCELLED)

    @property
    def result(self) -> MenuResult:
        if self.state is MenuState.CONFIRMED:
            return MenuResult(self.state, frozenset(self.selection), self.choice)
        return MenuResult(MenuState.CANCELLED)

    def move(self, step: int) -> bool:
        if self.is_empty:
            return False
        pos = self._selectable.index(self.cursor)
        target = max(0, min(len(self._selectable) - 1, pos + step))
        if self._selectable[target] == self.cursor:
            return False
        self.cursor = self._selectable[target]
        return True

    def jump_to(self, index: int) -> bool:
        if index not in self._selectable or index == self.cursor:
            return False
        self.cursor = index
        return True

    def toggle(self) -> bool:
        entry = self.current
        if entry is None or not self.multi_select:
            return False
        if entry.key in self.selection:
            self.selection.discard(entry.key)
        else:
            self.selection.add(entry.key)
        return True

    def handle_key(self, event: Optional[KeyEvent]) -> MenuState:
        """Apply one key event and return the resulting state."""
        if event is None or self.finished:
            return self.state
        key = event.key
        if key is Key.INTERRUPT:
            raise KeyboardInterrupt

        if self.is_empty:
            if key in (Key.ENTER, Key.ESCAPE):
                self.state = MenuState.CANCELLED
            return self.state

        changed = False
        if key is Key.UP:
            changed = self.move(-1)
        elif key is Key.DOWN:
            changed = self.move(1)
        elif key in (Key.HOME, Key.PAGE_UP):
            changed = self.jump_to(self._selectable[0])
        elif key in (Key.END, Key.PAGE_DOWN):
            changed = self.jump_to(self._selectable[-1])
        elif key is Key.SPACE:
            changed = self.toggle()
        elif key is Key.ENTER:
            if not self.multi_select:
                self.choice = self.entries[self.cursor].key
            self.state = MenuState.CONFIRMED
            return self.state
        elif key is Key.ESCAPE:
            self.state = MenuState.CANCELLED
            return self.state
        elif key is Key.CHARACTER:
            if event.char in ("b", "B"):
                self.state = MenuState.CANCELLED
                return self.state
            if event.char.isdigit():
                changed = self.jump_to(int(event.char) - 1)

        if changed:
            self.state = MenuState.RENDERING
        return self.state

    def render(self) -> Panel:
        return render_menu(
            self.title,
            self.entries,
            self.cursor,
            self.selection,
            multi_select=self.multi_select,
            status=self.status,
            subtitle=self.subtitle,
            empty_message=self.empty_message,
        )

    def run(self, session: Any, console: Any) -> MenuResult:
        """Drive the menu until confirmed or cancelled."""
        while not self.finished:
            if self.state is MenuState.RENDERING:
                console.clear()
                console.print(self.render())
                self.state = MenuState.AWAITING_INPUT
            self.handle_key(session.read_key())
        logger.debug("Menu %r finished: %s", self.title, self.state.value)
        return self.result
