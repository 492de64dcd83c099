"""Static catalog data, markers and default config text."""

from __future__ import annotations

from typing import Dict, List, Optional

CONFIG_FILE = '.pre-commit-config.yaml'
SCRIPTS_DIR = 'scripts'
TEMPLATES_DIR = 'hooks-templates'
TEMPLATE_FILE = 'template.yaml'

REPO_URL = 'https://github.com/brunogama/pre-commit-configs'
BRANCH = 'main'
ARCHIVE_URL = f'{REPO_URL}/archive/refs/heads/{BRANCH}.tar.gz'

LOCAL_REPO = 'local'

BEGIN_MARKER = '# --- BEGIN MANAGED TEMPLATES ---'
END_MARKER = '# --- END MANAGED TEMPLATES ---'
LEGACY_MARKER = '# --- Managed by pre-commit-configs installer ---'

STANDARD_HEADER = (
    "# See https://pre-commit.com/ for more information\n"
    "# See https://pre-commit.com/hooks.html for more hooks\n"
    "# This file is managed by the pre-commit-configs installer.\n"
)

STANDARD_DEFAULTS = (
    "# Default configurations (optional)\n"
    "default_stages: [pre-commit] # Sensible default\n"
    "default_install_hook_types: [pre-commit, pre-push, commit-msg]\n"
    "# default_language_version:\n"
    "#   python: python3.9\n"
)

DEFAULT_CONFIG = (
    STANDARD_HEADER
    + "\n"
    + STANDARD_DEFAULTS
    + "\n"
    + "repos:\n"
    + "  # Add hooks here using the installer or manually\n"
)

REQUIRED_COMMANDS = ['git', 'pre-commit', 'tar']
HOOK_TYPES = ['pre-commit', 'pre-push']

PRE_COMMIT_HOOKS = 'https://github.com/pre-commit/pre-commit-hooks'

HOOK_GROUPS: List[Dict] = [
    {
        'name': 'File Formatting',
        'description': 'Hooks for maintaining consistent file formatting',
        'hooks': [
            {
                'id': 'check-yaml',
                'repo': PRE_COMMIT_HOOKS,
                'rev': 'v4.5.0',
                'description': 'Checks YAML files for parseable syntax',
                'details': 'Ensures all your YAML files are syntactically correct',
            },
            {
                'id': 'check-json',
                'repo': PRE_COMMIT_HOOKS,
                'rev': 'v4.5.0',
                'description': 'Checks JSON files for parseable syntax',
                'details': 'Validates JSON files and ensures they are well-formed',
            },
            {
                'id': 'pretty-format-json',
                'repo': PRE_COMMIT_HOOKS,
                'rev': 'v4.5.0',
                'description': 'Formats JSON files',
                'details': 'Automatically formats JSON files with consistent indentation and spacing',
            },
        ],
    },
    {
        'name': 'Code Quality',
        'description': 'Hooks for maintaining code quality and standards',
        'hooks': [
            {
                'id': 'trailing-whitespace',
                'repo': PRE_COMMIT_HOOKS,
                'rev': 'v4.5.0',
                'description': 'Removes trailing whitespace',
                'details': 'Trims trailing whitespace from all lines in files',
            },
            {
                'id': 'end-of-file-fixer',
                'repo': PRE_COMMIT_HOOKS,
                'rev': 'v4.5.0',
                'description': 'Ensures files end with a newline',
                'details': 'Makes sure all text files end with exactly one newline',
            },
            {
                'id': 'check-merge-conflict',
                'repo': PRE_COMMIT_HOOKS,
                'rev': 'v4.5.0',
                'description': 'Checks for merge conflict markers',
                'details': 'Prevents committing files with git merge conflict markers',
            },
        ],
    },
    {
        'name': 'Swift Specific',
        'description': 'Hooks specifically for Swift development',
        'hooks': [
            {
                'id': 'swiftlint',
                'repo': 'https://github.com/realm/SwiftLint',
                'rev': '0.54.0',
                'description': 'Swift style and conventions linter',
                'details': 'Enforces Swift style and conventions defined in your .swiftlint.yml',
            },
            {
                'id': 'swiftformat',
                'repo': 'https://github.com/nicklockwood/SwiftFormat',
                'rev': '0.53.5',
                'description': 'Swift code formatter',
                'details': 'Automatically formats Swift code according to a consistent style',
            },
        ],
    },
    {
        'name': 'iOS Specific',
        'description': 'Hooks for iOS development workflow',
        'hooks': [
            {
                'id': 'accessibility-check',
                'repo': LOCAL_REPO,
                'rev': '',
                'description': 'Checks for accessibility implementation',
                'details': 'Ensures UI elements have proper accessibility labels and hints',
            },
            {
                'id': 'xcode-project-check',
                'repo': LOCAL_REPO,
                'rev': '',
                'description': 'Validates Xcode project settings',
                'details': 'Checks for common issues in Xcode project configuration',
            },
            {
                'id': 'unused-assets-check',
                'repo': LOCAL_REPO,
                'rev': '',
                'description': 'Finds unused assets',
                'details': "Identifies images and other assets that aren't referenced in code",
            },
        ],
    },
]

# Local hook id -> (script filename in SCRIPTS_DIR, files pattern)
LOCAL_HOOK_SCRIPTS: Dict[str, Dict[str, str]] = {
    'accessibility-check': {'entry': 'accessibility-check.sh', 'files': r'\.swift$'},
    'xcode-project-check': {'entry': 'check-xcode-dangling-refs.sh', 'files': r'\.pbxproj$'},
    'unused-assets-check': {'entry': 'check-unused-assets.sh', 'files': r'\.(swift|storyboard|xib)$'},
}

# Used by --non-interactive
DEFAULT_HOOKS = [
    'check-merge-conflict',
    'check-yaml',
    'end-of-file-fixer',
    'trailing-whitespace',
]


def local_script_for(hook_id: str) -> Dict[str, str]:
    """Return entry/files for a local hook, defaulting to scripts/<id>.sh."""
    mapping = LOCAL_HOOK_SCRIPTS.get(hook_id)
    if mapping:
        return dict(mapping)
    return {'entry': f'{hook_id}.sh', 'files': ''}


def template_display_name(directory: str) -> str:
    return directory.replace('-', ' ').replace('_', ' ').title()


def first_comment(text: str) -> Optional[str]:
    """First `#` comment line that is not a shebang, stripped of markers."""
    for line in text.splitlines():
        stripped = line.strip()
        if stripped.startswith('#') and not stripped.startswith('#!'):
            cleaned = stripped.strip('# ').strip()
            if cleaned:
                return cleaned
    return None
