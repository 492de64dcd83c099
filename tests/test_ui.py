import io
import unittest
from pathlib import Path

from rich.console import Console

from precommit_installer.catalog import Catalog
from precommit_installer.errors import HookInstallationError
from precommit_installer.keys import Key, KeyEvent
from precommit_installer.model import InstallReport, ScriptDefinition, Selection, TemplateDefinition
from precommit_installer.ui import EMPTY_INSTALL_WARNING, InstallerUI, Screen

ENTER = KeyEvent(Key.ENTER)
ESC = KeyEvent(Key.ESCAPE)
SPACE = KeyEvent(Key.SPACE)
DOWN = KeyEvent(Key.DOWN)


def char(c):
    return KeyEvent(Key.CHARACTER, c)


class FakeSession:
    def __init__(self, events=()):
        self.events = list(events)
        self.entered = 0

    def feed(self, *events):
        self.events.extend(events)

    def read_key(self):
        if not self.events:
            raise RuntimeError("ran out of scripted keys")
        return self.events.pop(0)

    def __enter__(self):
        self.entered += 1
        return self

    def __exit__(self, *exc):
        return False


class FakeInstaller:
    config_path = Path(".pre-commit-config.yaml")
    scripts_dir = Path("scripts")

    def __init__(self, fail=False):
        self.fail = fail
        self.installed = []

    def scripts_for(self, selection):
        return selection.sorted_scripts()

    def install(self, selection, report=None, on_step=None):
        self.installed.append(selection)
        report = report if report is not None else InstallReport()
        if self.fail:
            exc = HookInstallationError("pre-commit", "exit code 1: boom")
            report.error = exc
            raise exc
        if on_step:
            on_step("config", "Config updated")
        report.completed.append("config")
        return report


def make_catalog():
    return Catalog(
        hook_groups=Catalog.builtin().hook_groups,
        templates=[TemplateDefinition("swift-lint", "Swift Lint", "Lint", "- repo: local\n")],
        scripts=[ScriptDefinition("lint.sh", "Lint script")],
    )


def make_ui(events=(), fail=False, selection=None):
    console = Console(file=io.StringIO(), width=100, color_system=None)
    session = FakeSession(events)
    installer = FakeInstaller(fail=fail)
    ui = InstallerUI(make_catalog(), installer, session, console=console, selection=selection)
    return ui, session, installer, console


class CategoryMenuTests(unittest.TestCase):
    def test_confirm_replaces_stored_set(self):
        ui, session, _, _ = make_ui([SPACE, DOWN, SPACE, ENTER], selection=Selection.of(hooks=["swiftlint"]))
        ui.screen = Screen.HOOKS_MENU
        ui.step()
        self.assertEqual(ui.selection.hooks, {"check-yaml", "check-json", "swiftlint"})
        self.assertIs(ui.screen, Screen.MAIN)

    def test_cancel_keeps_stored_set(self):
        ui, _, _, _ = make_ui([SPACE, ESC], selection=Selection.of(templates=["swift-lint"]))
        ui.screen = Screen.TEMPLATES_MENU
        ui.step()
        self.assertEqual(ui.selection.templates, {"swift-lint"})
        self.assertIs(ui.screen, Screen.MAIN)

    def test_scripts_menu_is_flat(self):
        ui, _, _, _ = make_ui([SPACE, ENTER])
        ui.screen = Screen.SCRIPTS_MENU
        ui.step()
        self.assertEqual(ui.selection.scripts, {"lint.sh"})

    def test_hook_menu_has_group_headers(self):
        ui, _, _, _ = make_ui()
        entries = ui.hook_entries()
        headers = [e.label for e in entries if not e.selectable]
        self.assertEqual(headers, ["File Formatting", "Code Quality", "Swift Specific", "iOS Specific"])


class MainMenuTests(unittest.TestCase):
    def test_main_menu_labels_show_counts(self):
        ui, _, _, _ = make_ui(selection=Selection.of(hooks=["check-yaml", "swiftlint"]))
        labels = [e.label for e in ui.main_entries()]
        self.assertEqual(labels, [
            "Configure Templates (selected: 0)",
            "Configure Hooks (selected: 2)",
            "Configure Scripts (selected: 0)",
            "Install Selected Items",
            "Exit",
        ])

    def test_install_with_nothing_selected_warns_and_stays(self):
        ui, session, installer, console = make_ui([char("4"), ENTER])
        ui.step()
        self.assertIs(ui.screen, Screen.MAIN)
        self.assertIn(EMPTY_INSTALL_WARNING, ui.status)
        session.feed(char("5"), ENTER)
        ui.step()
        self.assertIn(EMPTY_INSTALL_WARNING, console.file.getvalue())
        self.assertIsNone(ui.status)
        self.assertEqual(installer.installed, [])

    def test_exit_with_selection_asks_for_confirmation(self):
        ui, session, _, _ = make_ui([char("5"), ENTER, char("n")], selection=Selection.of(scripts=["lint.sh"]))
        ui.step()
        self.assertIs(ui.screen, Screen.MAIN)
        session.feed(ESC, char("x"), char("Y"))
        ui.step()
        self.assertIs(ui.screen, Screen.EXIT)

    def test_exit_without_selection_is_immediate(self):
        ui, session, _, _ = make_ui([char("5"), ENTER])
        self.assertEqual(ui.run(), 0)
        self.assertEqual(session.entered, 1)

    def test_escape_on_main_exits(self):
        ui, _, _, _ = make_ui([ESC])
        self.assertEqual(ui.run(), 0)


class ConfirmationTests(unittest.TestCase):
    def test_only_digits_one_to_three_are_accepted(self):
        ui, _, _, _ = make_ui([char("x"), ENTER, char("4"), char("2")], selection=Selection.of(hooks=["check-yaml"]))
        ui.screen = Screen.CONFIRMATION
        ui.step()
        self.assertIs(ui.screen, Screen.MAIN)

    def test_cancel_exits(self):
        ui, _, installer, _ = make_ui([char("3")], selection=Selection.of(hooks=["check-yaml"]))
        ui.screen = Screen.CONFIRMATION
        ui.step()
        self.assertIs(ui.screen, Screen.EXIT)
        self.assertEqual(installer.installed, [])

    def test_review_lists_grouped_selections(self):
        ui, _, _, console = make_ui(
            [char("2")],
            selection=Selection.of(hooks=["swiftlint", "check-yaml"], templates=["swift-lint"], scripts=["lint.sh"]),
        )
        ui.screen = Screen.CONFIRMATION
        ui.step()
        output = console.file.getvalue()
        self.assertIn("File Formatting", output)
        self.assertIn("• check-yaml (Checks YAML files for parseable syntax)", output)
        self.assertIn("• swift-lint", output)
        self.assertIn("• lint.sh (Lint script)", output)
        self.assertIn("Ready to install: 4 item(s)", output)
        self.assertLess(output.index("check-yaml"), output.index("swiftlint"))


def test_full_flow_installs_selection():
    events = [
        char("2"), ENTER,          # main -> hooks
        SPACE, ENTER,              # select check-yaml
        char("4"), ENTER,          # install
        char("1"),                 # proceed
        ENTER,                     # press enter to continue
    ]
    ui, _, installer, console = make_ui(events)
    assert ui.run() == 0
    assert len(installer.installed) == 1
    assert installer.installed[0].hooks == {"check-yaml"}
    # installer gets a snapshot, not the live selection
    assert installer.installed[0] is not ui.selection
    assert "config: Config updated" in console.file.getvalue()
    assert "Installation completed successfully" in console.file.getvalue()


def test_failed_install_returns_exit_code_one():
    ui, _, installer, console = make_ui([char("1"), ENTER], fail=True, selection=Selection.of(hooks=["check-yaml"]))
    ui.screen = Screen.CONFIRMATION
    assert ui.run() == 1
    assert "Installation failed" in console.file.getvalue()
    assert "boom" in console.file.getvalue()
    assert ui.report.error is not None


def test_ctrl_c_propagates_as_keyboard_interrupt():
    ui, _, _, _ = make_ui([KeyEvent(Key.INTERRUPT)])
    try:
        ui.run()
    except KeyboardInterrupt:
        pass
    else:  # pragma: no cover
        raise AssertionError("expected KeyboardInterrupt")


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
