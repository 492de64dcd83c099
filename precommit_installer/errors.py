"""Installer error taxonomy."""

from __future__ import annotations

from typing import Iterable


class InstallerError(Exception):
    """Base class for failures surfaced to the user."""


class MissingDependencyError(InstallerError):
    def __init__(self, tools: Iterable[str]):
        self.tools = list(tools)
        super().__init__(
            f"Missing dependencies: {', '.join(self.tools)}. Please install them and try again."
        )


class DownloadError(InstallerError):
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Failed to download repository archive: {reason}")


class ExtractionError(InstallerError):
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Failed to extract repository archive: {reason}")


class HookInstallationError(InstallerError):
    def __init__(self, hook_type: str, reason: str):
        self.hook_type = hook_type
        self.reason = reason
        super().__init__(f"Failed to install '{hook_type}' hook: {reason}")


class ConfigIOError(InstallerError):
    def __init__(self, path: str, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Cannot update {self.path}: {reason}")


class ScriptSetupError(InstallerError):
    def __init__(self, script: str, reason: str):
        self.script = script
        self.reason = reason
        super().__init__(f"Failed to install script {script}: {reason}")


class TemplateNotFoundError(InstallerError):
    """A selected template directory has no template file (non-fatal)."""

    def __init__(self, directory: str):
        self.directory = directory
        super().__init__(f"Template file not found for '{directory}'")
