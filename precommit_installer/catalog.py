"""Immutable catalog of hooks, templates and helper scripts."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from . import logger
from .constants import (
    HOOK_GROUPS,
    SCRIPTS_DIR,
    TEMPLATE_FILE,
    TEMPLATES_DIR,
    first_comment,
    local_script_for,
    template_display_name,
)
from .model import (
    HookDefinition,
    HookGroup,
    LocalHookScript,
    ScriptDefinition,
    TemplateDefinition,
)


def builtin_hook_groups() -> Tuple[HookGroup, ...]:
    groups = []
    for group in HOOK_GROUPS:
        hooks = tuple(HookDefinition.from_dict(h, category=group['name']) for h in group['hooks'])
        groups.append(HookGroup(name=group['name'], description=group['description'], hooks=hooks))
    return tuple(groups)


def discover_templates(source: Path) -> Tuple[TemplateDefinition, ...]:
    """Scan ``<source>/hooks-templates/*`` for template directories."""
    root = Path(source) / TEMPLATES_DIR
    if not root.is_dir():
        logger.info("No templates directory at %s", root)
        return ()
    found: List[TemplateDefinition] = []
    for entry in sorted(root.iterdir(), key=lambda p: p.name):
        if not entry.is_dir():
            continue
        template_file = entry / TEMPLATE_FILE
        body: Optional[str] = None
        description = ''
        if template_file.is_file():
            try:
                body = template_file.read_text(encoding='utf-8')
            except OSError as exc:
                logger.warning("Could not read %s: %s", template_file, exc)
            else:
                description = first_comment(body) or ''
        found.append(
            TemplateDefinition(
                directory=entry.name,
                name=template_display_name(entry.name),
                description=description,
                body=body,
            )
        )
    return tuple(found)


def discover_scripts(source: Path) -> Tuple[ScriptDefinition, ...]:
    root = Path(source) / SCRIPTS_DIR
    if not root.is_dir():
        logger.info("No scripts directory at %s", root)
        return ()
    found: List[ScriptDefinition] = []
    for path in sorted(root.glob('*.sh'), key=lambda p: p.name):
        try:
            description = first_comment(path.read_text(encoding='utf-8')) or ''
        except OSError as exc:
            logger.warning("Could not read %s: %s", path, exc)
            description = ''
        found.append(ScriptDefinition(filename=path.name, description=description, path=path))
    return tuple(found)


class Catalog:
    """Read-only view over hook groups, templates and scripts."""

    def __init__(
        self,
        hook_groups: Iterable[HookGroup] = (),
        templates: Iterable[TemplateDefinition] = (),
        scripts: Iterable[ScriptDefinition] = (),
        source: Optional[Path] = None,
    ):
        self._hook_groups: Tuple[HookGroup, ...] = tuple(hook_groups)
        self._templates: Tuple[TemplateDefinition, ...] = tuple(templates)
        self._scripts: Tuple[ScriptDefinition, ...] = tuple(scripts)
        self.source = source
        self._hooks: Dict[str, HookDefinition] = {}
        for group in self._hook_groups:
            for hook in group.hooks:
                self._hooks.setdefault(hook.id, hook)
        self._templates_by_key = {t.directory: t for t in self._templates}
        self._scripts_by_key = {s.filename: s for s in self._scripts}

    @classmethod
    def builtin(cls) -> "Catalog":
        return cls(hook_groups=builtin_hook_groups())

    @classmethod
    def from_source(cls, directory: Path) -> "Catalog":
        directory = Path(directory)
        catalog = cls(
            hook_groups=builtin_hook_groups(),
            templates=discover_templates(directory),
            scripts=discover_scripts(directory),
            source=directory,
        )
        logger.info(
            "Loaded catalog from %s: %d hooks, %d templates, %d scripts",
            directory,
            len(catalog.hooks),
            len(catalog.templates),
            len(catalog.scripts),
        )
        return catalog

    @property
    def hook_groups(self) -> Tuple[HookGroup, ...]:
        return self._hook_groups

    @property
    def hooks(self) -> Tuple[HookDefinition, ...]:
        return tuple(self._hooks.values())

    @property
    def templates(self) -> Tuple[TemplateDefinition, ...]:
        return self._templates

    @property
    def scripts(self) -> Tuple[ScriptDefinition, ...]:
        return self._scripts

    def hook(self, hook_id: str) -> Optional[HookDefinition]:
        return self._hooks.get(hook_id)

    def template(self, key: str) -> Optional[TemplateDefinition]:
        return self._templates_by_key.get(key)

    def script(self, filename: str) -> Optional[ScriptDefinition]:
        return self._scripts_by_key.get(filename)

    def local_script(self, hook_id: str) -> LocalHookScript:
        mapping = local_script_for(hook_id)
        return LocalHookScript(entry=mapping['entry'], files=mapping['files'])

    def required_scripts(self, hook_ids: Iterable[str]) -> List[str]:
        """Script filenames the selected local hooks point at."""
        needed = set()
        for hook_id in hook_ids:
            hook = self.hook(hook_id)
            if hook is not None and hook.is_local:
                needed.add(self.local_script(hook_id).entry)
        return sorted(needed)
