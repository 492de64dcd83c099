"""Core data models for hooks, templates, scripts and results."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from .constants import LOCAL_REPO


@dataclass(frozen=True)
class HookDefinition:
    """A catalog hook: remote repo + rev + id, or a local script hook."""

    id: str
    repo: str
    rev: str = ''
    description: str = ''
    details: str = ''
    category: str = ''

    @property
    def is_local(self) -> bool:
        return self.repo == LOCAL_REPO

    @classmethod
    def from_dict(cls, data: Dict[str, Any], category: str = '') -> "HookDefinition":
        repo = str(data.get('repo') or '').strip()
        return cls(
            id=str(data.get('id') or '').strip(),
            repo=repo,
            rev='' if repo == LOCAL_REPO else str(data.get('rev') or '').strip(),
            description=str(data.get('description') or '').strip(),
            details=str(data.get('details') or '').strip(),
            category=category,
        )


@dataclass(frozen=True)
class HookGroup:
    name: str
    description: str
    hooks: Tuple[HookDefinition, ...] = ()


@dataclass(frozen=True)
class TemplateDefinition:
    """A raw YAML fragment keyed by its directory name.

    ``body`` is the verbatim template file text, or None when the
    directory has no template file.
    """

    directory: str
    name: str
    description: str = ''
    body: Optional[str] = None


@dataclass(frozen=True)
class ScriptDefinition:
    filename: str
    description: str = ''
    path: Optional[Path] = None


@dataclass(frozen=True)
class LocalHookScript:
    entry: str
    files: str = ''


@dataclass
class Selection:
    """The three pending selection sets held by the navigation controller."""

    hooks: Set[str] = field(default_factory=set)
    templates: Set[str] = field(default_factory=set)
    scripts: Set[str] = field(default_factory=set)

    @property
    def is_empty(self) -> bool:
        return not (self.hooks or self.templates or self.scripts)

    @property
    def total(self) -> int:
        return len(self.hooks) + len(self.templates) + len(self.scripts)

    def sorted_hooks(self) -> List[str]:
        return sorted(self.hooks)

    def sorted_templates(self) -> List[str]:
        return sorted(self.templates)

    def sorted_scripts(self) -> List[str]:
        return sorted(self.scripts)

    def copy(self) -> "Selection":
        return Selection(set(self.hooks), set(self.templates), set(self.scripts))

    @classmethod
    def of(
        cls,
        hooks: Iterable[str] = (),
        templates: Iterable[str] = (),
        scripts: Iterable[str] = (),
    ) -> "Selection":
        return cls(set(hooks), set(templates), set(scripts))


@dataclass(frozen=True)
class CommandResult:
    returncode: int
    output: str = ''

    @property
    def ok(self) -> bool:
        return self.returncode == 0


@dataclass(frozen=True)
class MergeResult:
    content: str
    hook_ids: Tuple[str, ...] = ()
    applied_templates: Tuple[str, ...] = ()
    skipped_templates: Tuple[str, ...] = ()
    changed: bool = True


@dataclass
class InstallReport:
    completed: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    error: Optional[Exception] = None
    merge: Optional[MergeResult] = None
    scripts_installed: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None
