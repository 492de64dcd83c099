"""Screen-level navigation for the interactive installer."""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, List, Optional

from rich.console import Group
from rich.panel import Panel
from rich.text import Text

from . import console as default_console
from . import logger
from .catalog import Catalog
from .errors import InstallerError
from .keys import Key, KeyEvent, is_char
from .manager import HookInstaller
from .menu import Menu, MenuEntry, MenuResult
from .model import InstallReport, Selection

EMPTY_INSTALL_WARNING = "Please select at least one template, hook, or script before installation."
EXIT_QUESTION = "Are you sure you want to exit without installing?"


class Screen(Enum):
    MAIN = "main"
    TEMPLATES_MENU = "templates"
    HOOKS_MENU = "hooks"
    SCRIPTS_MENU = "scripts"
    CONFIRMATION = "confirmation"
    INSTALLING = "installing"
    EXIT = "exit"


MAIN_CHOICES = {
    'templates': Screen.TEMPLATES_MENU,
    'hooks': Screen.HOOKS_MENU,
    'scripts': Screen.SCRIPTS_MENU,
    'install': Screen.CONFIRMATION,
    'exit': Screen.EXIT,
}


class InstallerUI:
    """Drives the menus and hands the final selection to the installer."""

    def __init__(
        self,
        catalog: Catalog,
        installer: HookInstaller,
        session: Any,
        console: Any = None,
        selection: Optional[Selection] = None,
    ):
        self.catalog = catalog
        self.installer = installer
        self.session = session
        self.console = console or default_console
        self.selection = selection or Selection()
        self.screen = Screen.MAIN
        self.status: Optional[str] = None
        self.exit_code = 0
        self.report: Optional[InstallReport] = None

    # -- menu construction ---------------------------------------------

    def main_entries(self) -> List[MenuEntry]:
        sel = self.selection
        return [
            MenuEntry(f"Configure Templates (selected: {len(sel.templates)})", key='templates',
                      description="Add hook templates to your configuration"),
            MenuEntry(f"Configure Hooks (selected: {len(sel.hooks)})", key='hooks',
                      description="Choose individual pre-commit hooks"),
            MenuEntry(f"Configure Scripts (selected: {len(sel.scripts)})", key='scripts',
                      description="Copy helper scripts into ./scripts"),
            MenuEntry("Install Selected Items", key='install',
                      description="Review and install everything selected"),
            MenuEntry("Exit", key='exit'),
        ]

    def hook_entries(self) -> List[MenuEntry]:
        entries: List[MenuEntry] = []
        for group in self.catalog.hook_groups:
            entries.append(MenuEntry.header(group.name, group.description))
            for hook in group.hooks:
                entries.append(MenuEntry(hook.id, key=hook.id, description=hook.description, details=hook.details))
        return entries

    def template_entries(self) -> List[MenuEntry]:
        return [
            MenuEntry(
                f"{t.name} ({t.directory})",
                key=t.directory,
                description=t.description,
                details='' if t.body is not None else "No template file found",
            )
            for t in self.catalog.templates
        ]

    def script_entries(self) -> List[MenuEntry]:
        return [MenuEntry(s.filename, key=s.filename, description=s.description) for s in self.catalog.scripts]

    def build_main_menu(self) -> Menu:
        menu = Menu(
            "Pre-commit Hooks Installer",
            self.main_entries(),
            multi_select=False,
            subtitle="Select templates, hooks and scripts, then install them into this repository.",
            status=self.status,
        )
        self.status = None
        return menu

    def build_category_menu(self, screen: Screen) -> Menu:
        if screen is Screen.HOOKS_MENU:
            return Menu("Configure Hooks", self.hook_entries(), selected=self.selection.hooks,
                        empty_message="No hooks available.")
        if screen is Screen.TEMPLATES_MENU:
            return Menu("Configure Templates", self.template_entries(), selected=self.selection.templates,
                        empty_message="No templates available.")
        if screen is Screen.SCRIPTS_MENU:
            return Menu("Configure Scripts", self.script_entries(), selected=self.selection.scripts,
                        empty_message="No scripts available.")
        raise ValueError(f"not a category screen: {screen}")

    # -- transitions ---------------------------------------------------

    def apply_category_result(self, screen: Screen, result: MenuResult) -> None:
        """Replace the stored set on confirm; keep it untouched on cancel."""
        if result.confirmed:
            chosen = set(result.selection)
            if screen is Screen.HOOKS_MENU:
                self.selection.hooks = chosen
            elif screen is Screen.TEMPLATES_MENU:
                self.selection.templates = chosen
            elif screen is Screen.SCRIPTS_MENU:
                self.selection.scripts = chosen
            logger.debug("%s selection now %s", screen.value, sorted(chosen))
        self.screen = Screen.MAIN

    def handle_main_result(self, result: MenuResult) -> Screen:
        choice = result.choice if result.confirmed else 'exit'
        target = MAIN_CHOICES.get(choice or 'exit', Screen.MAIN)
        if target is Screen.CONFIRMATION and self.selection.is_empty:
            self.status = f"[yellow]! {EMPTY_INSTALL_WARNING}[/yellow]"
            target = Screen.MAIN
        elif target is Screen.EXIT and not self.selection.is_empty:
            if not self.ask_yes_no(EXIT_QUESTION):
                target = Screen.MAIN
        self.screen = target
        return target

    def handle_confirmation_key(self, event: Optional[KeyEvent]) -> Optional[Screen]:
        if event is not None and event.key is Key.INTERRUPT:
            raise KeyboardInterrupt
        if is_char(event, '1'):
            return Screen.INSTALLING
        if is_char(event, '2'):
            return Screen.MAIN
        if is_char(event, '3'):
            return Screen.EXIT
        return None

    # -- input helpers -------------------------------------------------

    def read_until(self, accept: Callable[[Optional[KeyEvent]], Any]) -> Any:
        while True:
            event = self.session.read_key()
            if event is not None and event.key is Key.INTERRUPT:
                raise KeyboardInterrupt
            outcome = accept(event)
            if outcome is not None:
                return outcome

    def ask_yes_no(self, message: str) -> bool:
        self.console.print(f"\n[yellow]{message}[/yellow] [dim](y/n)[/dim]")

        def _accept(event: Optional[KeyEvent]) -> Optional[bool]:
            if is_char(event, 'y'):
                return True
            if is_char(event, 'n') or (event is not None and event.key is Key.ESCAPE):
                return False
            return None

        return self.read_until(_accept)

    def wait_for_enter(self) -> None:
        self.console.print("\n[dim]Press Enter to continue...[/dim]")
        self.read_until(lambda e: True if e is not None and e.key is Key.ENTER else None)

    # -- screens -------------------------------------------------------

    def confirmation_panel(self) -> Panel:
        rows: List[Any] = []
        sel = self.selection
        scripts = self.installer.scripts_for(sel)

        rows.append(Text("Selected Hooks:", style="bold yellow"))
        if not sel.hooks:
            rows.append(Text("  No hooks selected", style="dim"))
        for group in self.catalog.hook_groups:
            chosen = sorted((h for h in group.hooks if h.id in sel.hooks), key=lambda h: h.id)
            if not chosen:
                continue
            rows.append(Text(f"  {group.name}", style="blue"))
            for hook in chosen:
                rows.append(Text.assemble(f"    • {hook.id} ", (f"({hook.description})", "yellow")))
        unknown = sorted(h for h in sel.hooks if self.catalog.hook(h) is None)
        for hook_id in unknown:
            rows.append(Text(f"    • {hook_id}"))

        rows.append(Text(""))
        rows.append(Text("Selected Templates:", style="bold yellow"))
        if not sel.templates:
            rows.append(Text("  No templates selected", style="dim"))
        for key in sel.sorted_templates():
            rows.append(Text(f"  • {key}"))

        rows.append(Text(""))
        rows.append(Text("Scripts (will be installed):", style="bold yellow"))
        if not scripts:
            rows.append(Text("  No scripts required", style="dim"))
        for name in scripts:
            script = self.catalog.script(name)
            if script is not None and script.description:
                rows.append(Text.assemble(f"  • {name} ", (f"({script.description})", "yellow")))
            else:
                rows.append(Text(f"  • {name}"))

        rows.append(Text(""))
        rows.append(Text(f"Ready to install: {sel.total} item(s)", style="bold blue"))
        rows.append(Text.from_markup(
            "[cyan]1[/cyan] Proceed with installation   "
            "[cyan]2[/cyan] Return to main menu   "
            "[cyan]3[/cyan] Cancel"
        ))
        return Panel(Group(*rows), title="Review Selections", border_style="blue")

    def _print_step(self, step: str, message: str) -> None:
        self.console.print(f"[green]✓[/green] [bold]{step}[/bold]: {message}")

    def run_installation(self) -> None:
        self.console.clear()
        self.console.print("[bold blue]Installing...[/bold blue]\n")
        self.report = InstallReport()
        try:
            self.installer.install(self.selection.copy(), report=self.report, on_step=self._print_step)
        except InstallerError as exc:
            self.exit_code = 1
            self.console.print(f"\n[red]✗ Installation failed:[/red] {exc}")
        else:
            self.exit_code = 0
            self.console.print("\n[bold green]✨ Installation completed successfully![/bold green]")
            self.console.print(
                "\nTo verify the installation, run:\n"
                "  [cyan]pre-commit run --all-files[/cyan]\n\n"
                f"Configuration: {self.installer.config_path}\n"
                f"Scripts: {self.installer.scripts_dir}/\n"
                "Make sure to commit these changes to your repository."
            )
        self.wait_for_enter()
        self.screen = Screen.EXIT

    def step(self) -> Screen:
        """Run the current screen once and move to the next one."""
        screen = self.screen
        if screen is Screen.MAIN:
            self.handle_main_result(self.build_main_menu().run(self.session, self.console))
        elif screen in (Screen.HOOKS_MENU, Screen.TEMPLATES_MENU, Screen.SCRIPTS_MENU):
            menu = self.build_category_menu(screen)
            self.apply_category_result(screen, menu.run(self.session, self.console))
        elif screen is Screen.CONFIRMATION:
            self.console.clear()
            self.console.print(self.confirmation_panel())
            self.screen = self.read_until(self.handle_confirmation_key)
        elif screen is Screen.INSTALLING:
            self.run_installation()
        return self.screen

    def run(self) -> int:
        with self.session:
            while self.screen is not Screen.EXIT:
                self.step()
        return self.exit_code
