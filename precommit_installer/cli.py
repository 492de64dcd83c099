"""Command-line interface for the pre-commit hooks installer."""

from __future__ import annotations

import argparse
import sys
from typing import Any, Dict, Iterable, Optional

from . import configure_logging, console, logger
from .catalog import Catalog
from .config import load_settings
from .errors import InstallerError, MissingDependencyError
from .manager import HookInstaller, install_hint
from .model import Selection
from .terminal import raw_mode_supported


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Pick pre-commit hooks, templates and scripts and install them into this repository"
    )
    parser.add_argument(
        "--non-interactive",
        action="store_true",
        help="Install the default hook selection without showing menus",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging verbosity (DEBUG, INFO, WARNING, ERROR)",
    )
    parser.add_argument(
        "--config",
        metavar="PATH",
        help="Path to the pre-commit config file (default: .pre-commit-config.yaml)",
    )
    parser.add_argument(
        "--source",
        metavar="DIR",
        help="Use a local checkout of the hook catalog instead of downloading it",
    )
    parser.add_argument(
        "--archive-url",
        metavar="URL",
        help="Download the hook catalog from this tar.gz URL",
    )
    parser.add_argument(
        "--settings",
        metavar="PATH",
        help="Settings JSON file (default: ~/.pre-commit-installer.json)",
    )
    return parser


def parse_args(argv: Optional[Iterable[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def resolve_interactive(non_interactive: bool) -> bool:
    if non_interactive:
        return False
    if not raw_mode_supported():
        console.print("[yellow]No interactive terminal detected. Falling back to --non-interactive.[/yellow]")
        return False
    return True


def default_selection(settings: Dict[str, Any], catalog: Catalog) -> Selection:
    hooks = []
    for hook_id in settings['default_hooks']:
        if catalog.hook(hook_id) is None:
            logger.warning("Default hook %r is not in the catalog", hook_id)
            continue
        hooks.append(hook_id)
    return Selection.of(hooks=hooks)


def run_non_interactive(installer: HookInstaller, selection: Selection) -> int:
    console.print(f"[cyan]Installing default hooks: {', '.join(selection.sorted_hooks()) or 'none'}[/cyan]")
    installer.install(
        selection,
        on_step=lambda step, message: console.print(f"[green]✓[/green] [bold]{step}[/bold]: {message}"),
    )
    console.print("[bold green]✨ Installation completed successfully![/bold green]")
    return 0


def main(argv: Optional[Iterable[str]] = None) -> None:
    args = parse_args(argv)
    configure_logging("DEBUG" if args.verbose else args.log_level)

    settings = load_settings(args.settings)
    if args.archive_url:
        settings['archive_url'] = args.archive_url

    installer = HookInstaller(settings=settings, config_path=args.config, source_dir=args.source)
    code = 0
    try:
        installer.verify_dependencies()
        catalog = installer.load_catalog()
        if resolve_interactive(args.non_interactive):
            from .terminal import RawModeSession
            from .ui import InstallerUI

            code = InstallerUI(catalog, installer, RawModeSession()).run()
        else:
            code = run_non_interactive(installer, default_selection(settings, catalog))
    except KeyboardInterrupt:
        console.print("\n\n[yellow]Installer terminated by user[/yellow]\n")
        code = 130
    except MissingDependencyError as exc:
        console.print(f"[red]✗ {exc}[/red]")
        hint = install_hint(exc.tools)
        if hint:
            console.print(f"[yellow]Try: {hint}[/yellow]")
        code = 1
    except InstallerError as exc:
        console.print(f"\n[red]✗ {exc}[/red]\n")
        code = 1
    finally:
        installer.cleanup()

    if code:
        raise SystemExit(code)


if __name__ == "__main__":  # pragma: no cover
    main(sys.argv[1:])
