"""User settings loaded from ~/.pre-commit-installer.json."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

from precommit_installer_lib.storage import load_json

from . import console, logger
from .constants import (
    ARCHIVE_URL,
    CONFIG_FILE,
    DEFAULT_HOOKS,
    HOOK_TYPES,
    REQUIRED_COMMANDS,
    SCRIPTS_DIR,
)

SETTINGS_FILE = Path.home() / ".pre-commit-installer.json"

DEFAULT_SETTINGS: Dict[str, Any] = {
    'archive_url': ARCHIVE_URL,
    'config_file': CONFIG_FILE,
    'scripts_dir': SCRIPTS_DIR,
    'hook_types': list(HOOK_TYPES),
    'install_hook_envs': True,
    'required_commands': list(REQUIRED_COMMANDS),
    'default_hooks': list(DEFAULT_HOOKS),
    'download_timeout': 30,
    'command_timeout': 300,
}

LIST_KEYS = ('hook_types', 'required_commands', 'default_hooks')


def load_settings(path: Optional[Path] = None) -> Dict[str, Any]:
    """Return defaults overlaid with the user's settings file, if any."""
    settings_file = Path(path) if path else SETTINGS_FILE
    settings = dict(DEFAULT_SETTINGS)
    if not settings_file.exists():
        return settings

    data = load_json(settings_file)
    if not isinstance(data, dict):
        console.print(f"[yellow]Ignoring unreadable settings file {settings_file}[/yellow]")
        return settings

    unknown = sorted(set(data) - set(DEFAULT_SETTINGS))
    if unknown:
        logger.warning("Unknown settings ignored: %s", ", ".join(unknown))
    merged = {**settings, **{k: v for k, v in data.items() if k in DEFAULT_SETTINGS}}
    for key in LIST_KEYS:
        if not isinstance(merged[key], list):
            logger.warning("Setting %r must be a list; using default", key)
            merged[key] = list(DEFAULT_SETTINGS[key])
    logger.debug("Loaded settings from %s", settings_file)
    return merged
