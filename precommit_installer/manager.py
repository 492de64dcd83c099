"""Installer operations: dependency checks, catalog download, install sequence."""

from __future__ import annotations

import os
import shutil
import subprocess
import tempfile
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

import requests
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
    TransferSpeedColumn,
)

from precommit_installer_lib.archive import download, extract

from . import console, logger
from .catalog import Catalog
from .config import DEFAULT_SETTINGS
from .errors import (
    DownloadError,
    ExtractionError,
    HookInstallationError,
    InstallerError,
    MissingDependencyError,
    ScriptSetupError,
)
from .merge import ConfigMergeEngine
from .model import CommandResult, InstallReport, MergeResult, Selection

StepCallback = Callable[[str, str], None]

STEP_DEPENDENCIES = "dependencies"
STEP_SCRIPTS = "scripts"
STEP_CONFIG = "config"
STEP_HOOK_TYPES = "hook types"


def install_hint(tools: Sequence[str]) -> Optional[str]:
    """Suggest a package-manager command for the missing tools."""
    if not tools:
        return None
    names = " ".join(tools)
    if shutil.which("brew"):
        return f"brew install {names}"
    if shutil.which("apt-get"):
        return f"sudo apt-get install {names}"
    return None


class HookInstaller:
    """Runs the installation steps against the current project directory."""

    def __init__(
        self,
        catalog: Optional[Catalog] = None,
        settings: Optional[Dict[str, Any]] = None,
        project_dir: Optional[Path] = None,
        config_path: Optional[Path] = None,
        source_dir: Optional[Path] = None,
    ):
        self.settings = {**DEFAULT_SETTINGS, **(settings or {})}
        self.project_dir = Path(project_dir) if project_dir else Path.cwd()
        config_file = Path(config_path) if config_path else Path(self.settings['config_file'])
        self.config_path = config_file if config_file.is_absolute() else self.project_dir / config_file
        self.scripts_dir = self.project_dir / self.settings['scripts_dir']
        self.source_dir = Path(source_dir) if source_dir else None
        self._temp_dir: Optional[Path] = None
        self.catalog = catalog or Catalog.builtin()

    @property
    def engine(self) -> ConfigMergeEngine:
        return ConfigMergeEngine(self.catalog, scripts_dir=self.settings['scripts_dir'])

    # -- collaborators -------------------------------------------------

    def run_command(
        self,
        name: str,
        args: Iterable[str] = (),
        timeout: Optional[float] = None,
    ) -> CommandResult:
        cmd = [name, *args]
        logger.debug("Running %s", " ".join(cmd))
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=timeout or self.settings['command_timeout'],
                cwd=str(self.project_dir),
            )
        except FileNotFoundError as exc:
            return CommandResult(127, str(exc))
        except subprocess.TimeoutExpired:
            return CommandResult(124, f"{name} timed out")
        output = ((result.stdout or '') + (result.stderr or '')).strip()
        return CommandResult(result.returncode, output)

    @staticmethod
    def copy_executable(src: Path, dst: Path) -> None:
        dst = Path(dst)
        dst.parent.mkdir(parents=True, exist_ok=True)
        if dst.exists():
            dst.unlink()
        shutil.copyfile(src, dst)
        os.chmod(dst, 0o755)

    def download_and_extract(self, url: str) -> Path:
        """Fetch the catalog archive into a temp dir and unpack it."""
        self._temp_dir = Path(tempfile.mkdtemp(prefix="pre-commit-configs-"))
        archive_path = self._temp_dir / "archive.tar.gz"
        target = self._temp_dir / "source"
        logger.info("Downloading %s", url)

        try:
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                BarColumn(),
                DownloadColumn(),
                TransferSpeedColumn(),
                TimeElapsedColumn(),
                console=console,
                transient=True,
            ) as progress:
                task = progress.add_task("[cyan]Downloading hook catalog...", total=None)

                def _on_chunk(done: int, total: Optional[int]) -> None:
                    progress.update(task, completed=done, total=total)

                with ThreadPoolExecutor(max_workers=1) as executor:
                    future = executor.submit(
                        download, url, archive_path, _on_chunk, self.settings['download_timeout']
                    )
                    future.result()
        except (requests.RequestException, OSError) as exc:
            raise DownloadError(str(exc)) from exc

        code, output = extract(archive_path, target)
        if code != 0:
            raise ExtractionError(f"tar exited with {code}: {output or 'no output'}")
        console.print("[green]✓ Downloaded hook catalog[/green]")
        return target

    # -- steps ---------------------------------------------------------

    def verify_dependencies(self) -> None:
        missing = [cmd for cmd in self.settings['required_commands'] if not shutil.which(cmd)]
        if missing:
            raise MissingDependencyError(missing)
        logger.debug("All required commands present")

    def prepare_source(self) -> Path:
        if self.source_dir is not None:
            if not self.source_dir.is_dir():
                raise DownloadError(f"source directory {self.source_dir} does not exist")
            return self.source_dir
        self.source_dir = self.download_and_extract(self.settings['archive_url'])
        return self.source_dir

    def load_catalog(self) -> Catalog:
        self.catalog = Catalog.from_source(self.prepare_source())
        return self.catalog

    def scripts_for(self, selection: Selection) -> List[str]:
        wanted = set(selection.scripts) | set(self.catalog.required_scripts(selection.hooks))
        return sorted(wanted)

    def _script_source(self, filename: str) -> Optional[Path]:
        script = self.catalog.script(filename)
        if script is not None and script.path is not None:
            return script.path
        if self.source_dir is not None:
            return self.source_dir / self.settings['scripts_dir'] / filename
        return None

    def setup_scripts(self, filenames: Iterable[str]) -> List[str]:
        """Copy scripts into the project; returns the ones installed."""
        installed = []
        for filename in filenames:
            src = self._script_source(filename)
            if src is None or not src.is_file():
                console.print(f"[yellow]! Script not found, skipping: {filename}[/yellow]")
                logger.warning("Script source missing for %s", filename)
                continue
            try:
                self.copy_executable(src, self.scripts_dir / filename)
            except OSError as exc:
                raise ScriptSetupError(filename, str(exc)) from exc
            installed.append(filename)
            logger.info("Installed script %s", filename)
        return installed

    def update_config(self, selection: Selection) -> MergeResult:
        return self.engine.apply(
            self.config_path,
            selection.sorted_hooks(),
            selection.sorted_templates(),
        )

    def install_hook_types(self, hook_types: Optional[Iterable[str]] = None) -> None:
        types = list(hook_types if hook_types is not None else self.settings['hook_types'])
        for hook_type in types:
            args = ['install', '-t', hook_type]
            if self.settings['install_hook_envs']:
                args.append('--install-hooks')
            result = self.run_command('pre-commit', args)
            if not result.ok:
                reason = f"exit code {result.returncode}: {result.output or 'no output'}"
                raise HookInstallationError(hook_type, reason)
            logger.info("Installed %s hook", hook_type)

    def install(
        self,
        selection: Selection,
        report: Optional[InstallReport] = None,
        on_step: Optional[StepCallback] = None,
    ) -> InstallReport:
        """Run every step in order; the first failure stops the rest.

        Completed steps are not rolled back. The error is stored on the
        report and re-raised.
        """
        report = report if report is not None else InstallReport()

        def emit(step: str, message: str) -> None:
            if on_step:
                on_step(step, message)
            logger.info("%s: %s", step, message)

        try:
            self.verify_dependencies()
            report.completed.append(STEP_DEPENDENCIES)
            emit(STEP_DEPENDENCIES, "All dependencies available")

            scripts = self.scripts_for(selection)
            if scripts:
                report.scripts_installed = self.setup_scripts(scripts)
                report.completed.append(STEP_SCRIPTS)
                emit(STEP_SCRIPTS, f"Installed {len(report.scripts_installed)} script(s)")
            else:
                report.skipped.append(STEP_SCRIPTS)
                emit(STEP_SCRIPTS, "No scripts to install")

            if selection.hooks or selection.templates:
                report.merge = self.update_config(selection)
                report.completed.append(STEP_CONFIG)
                state = "updated" if report.merge.changed else "already up to date"
                emit(STEP_CONFIG, f"{self.config_path.name} {state}")
            else:
                report.skipped.append(STEP_CONFIG)
                emit(STEP_CONFIG, "No hooks or templates selected")

            self.install_hook_types()
            report.completed.append(STEP_HOOK_TYPES)
            emit(STEP_HOOK_TYPES, "pre-commit hooks installed")
        except InstallerError as exc:
            report.error = exc
            logger.error("Installation aborted: %s", exc)
            raise
        return report

    def cleanup(self) -> None:
        if self._temp_dir is not None:
            shutil.rmtree(self._temp_dir, ignore_errors=True)
            logger.debug("Removed %s", self._temp_dir)
            self._temp_dir = None
