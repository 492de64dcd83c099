"""Line-oriented merge of the managed block in .pre-commit-config.yaml.

The managed block sits between BEGIN_MARKER and END_MARKER. Each merge
throws away every complete block and writes one freshly generated block
where the first one used to be, so running the installer twice with the
same selection leaves the file unchanged and deselected hooks disappear.
Lines outside the block are never touched.
"""

from __future__ import annotations

import re
import textwrap
from itertools import groupby
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from precommit_installer_lib.storage import atomic_write_text, read_text

from . import logger
from .catalog import Catalog
from .constants import (
    BEGIN_MARKER,
    DEFAULT_CONFIG,
    END_MARKER,
    LEGACY_MARKER,
    SCRIPTS_DIR,
)
from .errors import ConfigIOError, TemplateNotFoundError
from .model import HookDefinition, MergeResult

DEFAULT_INDENT = '  '
REPOS_LINE = re.compile(r'^repos:\s*(#.*)?$')


def detect_newline(text: str) -> str:
    return '\r\n' if '\r\n' in text else '\n'


def split_lines(text: str, newline: str) -> Tuple[List[str], bool]:
    """Split on ``newline`` only; returns (lines, had_trailing_newline)."""
    if not text:
        return [], False
    lines = text.split(newline)
    trailing = text.endswith(newline)
    if trailing:
        lines.pop()
    return lines, trailing


def find_spans(lines: Sequence[str]) -> List[Tuple[int, int]]:
    """Pair every END marker with the nearest unpaired BEGIN before it."""
    spans: List[Tuple[int, int]] = []
    open_begins: List[int] = []
    for index, line in enumerate(lines):
        stripped = line.strip()
        if stripped == BEGIN_MARKER:
            open_begins.append(index)
        elif stripped == END_MARKER and open_begins:
            spans.append((open_begins.pop(), index))
    return sorted(spans)


def leading_whitespace(line: str) -> str:
    return line[: len(line) - len(line.lstrip())]


def find_repos_line(lines: Sequence[str]) -> Optional[int]:
    for index, line in enumerate(lines):
        if REPOS_LINE.match(line):
            return index
    return None


def yaml_quote(value: str) -> str:
    return '"' + value.replace('\\', '\\\\').replace('"', '\\"') + '"'


class ConfigMergeEngine:
    """Regenerates the managed hooks/templates block inside a config file."""

    def __init__(self, catalog: Catalog, scripts_dir: str = SCRIPTS_DIR):
        self.catalog = catalog
        self.scripts_dir = scripts_dir.rstrip('/')

    def detect_indent(self, lines: Sequence[str], spans: Sequence[Tuple[int, int]]) -> str:
        if spans:
            return leading_whitespace(lines[spans[0][0]])
        repos = find_repos_line(lines)
        if repos is not None:
            for line in lines[repos + 1:]:
                stripped = line.strip()
                if not stripped or stripped.startswith('#'):
                    continue
                if stripped.startswith('- '):
                    return leading_whitespace(line)
                break
        return DEFAULT_INDENT

    def _resolve_hooks(self, hook_ids: Iterable[str]) -> List[HookDefinition]:
        hooks = []
        for hook_id in sorted(set(hook_ids)):
            hook = self.catalog.hook(hook_id)
            if hook is None:
                logger.warning("Unknown hook id %r skipped", hook_id)
                continue
            hooks.append(hook)
        return hooks

    def _remote_lines(self, hooks: Sequence[HookDefinition], indent: str) -> List[str]:
        lines: List[str] = []
        remote = sorted((h for h in hooks if not h.is_local), key=lambda h: (h.repo, h.rev, h.id))
        for (repo, rev), group in groupby(remote, key=lambda h: (h.repo, h.rev)):
            lines.append(f'{indent}- repo: {repo}')
            lines.append(f'{indent}  rev: {rev}')
            lines.append(f'{indent}  hooks:')
            for hook in group:
                lines.append(f'{indent}    - id: {hook.id}')
        return lines

    def _local_lines(self, hooks: Sequence[HookDefinition], indent: str) -> List[str]:
        local = [h for h in hooks if h.is_local]
        if not local:
            return []
        lines = [f'{indent}- repo: local', f'{indent}  hooks:']
        for hook in local:
            script = self.catalog.local_script(hook.id)
            lines.append(f'{indent}    - id: {hook.id}')
            lines.append(f'{indent}      name: {yaml_quote(hook.description or hook.id)}')
            lines.append(f'{indent}      entry: {self.scripts_dir}/{script.entry}')
            lines.append(f'{indent}      language: script')
            if script.files:
                lines.append(f"{indent}      files: '{script.files}'")
            lines.append(f'{indent}      stages: [pre-commit]')
        return lines

    def _template_lines(
        self, template_keys: Iterable[str], indent: str
    ) -> Tuple[List[str], List[str], List[str]]:
        lines: List[str] = []
        applied: List[str] = []
        skipped: List[str] = []
        for key in template_keys:
            template = self.catalog.template(key)
            if template is None or template.body is None:
                logger.warning("%s", TemplateNotFoundError(key))
                skipped.append(key)
                continue
            body = textwrap.dedent(template.body.replace('\r\n', '\n')).strip('\n')
            lines.append('')
            lines.append(f'{indent}# Template: {key}')
            for raw in body.split('\n'):
                # A marker inside a template would split the block on the next run
                if raw.strip() in (BEGIN_MARKER, END_MARKER):
                    logger.warning("Dropped managed-block marker from template %r", key)
                    continue
                lines.append(f'{indent}{raw.rstrip()}' if raw.strip() else '')
            applied.append(key)
        return lines, applied, skipped

    def render_block(
        self, hook_ids: Iterable[str], template_keys: Iterable[str], indent: str = DEFAULT_INDENT
    ) -> Tuple[List[str], Tuple[str, ...], Tuple[str, ...], Tuple[str, ...]]:
        """Build the marker-delimited block as a list of lines."""
        hooks = self._resolve_hooks(hook_ids)
        template_lines, applied, skipped = self._template_lines(template_keys, indent)
        block = [f'{indent}{BEGIN_MARKER}']
        block.extend(self._remote_lines(hooks, indent))
        block.extend(self._local_lines(hooks, indent))
        block.extend(template_lines)
        block.append(f'{indent}{END_MARKER}')
        return block, tuple(h.id for h in hooks), tuple(applied), tuple(skipped)

    def merge(
        self,
        existing: Optional[str],
        hook_ids: Iterable[str],
        template_keys: Iterable[str] = (),
    ) -> MergeResult:
        """Return the new document text; does not touch the filesystem."""
        original = existing
        if existing is None:
            existing = DEFAULT_CONFIG
        newline = detect_newline(existing)
        lines, trailing = split_lines(existing, newline)

        spans = find_spans(lines)
        indent = self.detect_indent(lines, spans)
        block, emitted, applied, skipped = self.render_block(hook_ids, template_keys, indent)

        if spans:
            covered = set()
            for begin, end in spans:
                covered.update(range(begin, end + 1))
            insert_at = spans[0][0]
            head = [line for i, line in enumerate(lines[:insert_at]) if i not in covered]
            tail = [line for i, line in enumerate(lines) if i >= insert_at and i not in covered]
            new_lines = head + block + tail
        else:
            new_lines = self._insert_without_span(lines, block)
            if new_lines[-len(block):] == block:
                trailing = True

        content = newline.join(new_lines)
        if trailing and new_lines:
            content += newline
        return MergeResult(
            content=content,
            hook_ids=emitted,
            applied_templates=applied,
            skipped_templates=skipped,
            changed=content != original,
        )

    def _insert_without_span(self, lines: List[str], block: List[str]) -> List[str]:
        legacy = next((i for i, line in enumerate(lines) if line.strip() == LEGACY_MARKER), None)
        if legacy is not None:
            logger.warning("Found legacy installer marker; inserting managed block after it")
            return lines[: legacy + 1] + block + lines[legacy + 1:]

        repos = find_repos_line(lines)
        if repos is not None:
            position = repos + 1
            while position < len(lines):
                stripped = lines[position].strip()
                if stripped and not stripped.startswith('#'):
                    break
                position += 1
            # Keep trailing blank lines below the block
            while position > repos + 1 and not lines[position - 1].strip():
                position -= 1
            return lines[:position] + block + lines[position:]

        logger.info("No top-level 'repos:' key found; appending one")
        return list(lines) + ['repos:'] + block

    def apply(
        self,
        path: Path,
        hook_ids: Iterable[str],
        template_keys: Iterable[str] = (),
    ) -> MergeResult:
        """Merge into ``path`` and write it back atomically when changed."""
        path = Path(path)
        try:
            existing = read_text(path)
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigIOError(str(path), f"read failed: {exc}") from exc

        result = self.merge(existing, hook_ids, template_keys)
        if not result.changed:
            logger.info("%s already up to date", path)
            return result
        try:
            atomic_write_text(path, result.content)
        except OSError as exc:
            raise ConfigIOError(str(path), f"write failed: {exc}") from exc
        logger.info(
            "Updated %s with %d hooks and %d templates",
            path,
            len(result.hook_ids),
            len(result.applied_templates),
        )
        return result
