import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional


def load_json(path: Path) -> Optional[Dict[str, Any]]:
    try:
        if path.exists():
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
    except (OSError, ValueError):
        return None
    return None


def read_text(path: Path) -> Optional[str]:
    """Return file text with line endings untouched, or None if missing."""
    path = Path(path)
    if not path.exists():
        return None
    with open(path, 'r', encoding='utf-8', newline='') as f:
        return f.read()


def atomic_write_text(path: Path, text: str) -> None:
    """Write via a temp file in the same directory and rename over ``path``.

    The existing file mode is kept. Raises OSError on failure and leaves
    the original file untouched.
    """
    path = Path(path)
    directory = path.parent if str(path.parent) else Path('.')
    directory.mkdir(parents=True, exist_ok=True)
    mode = None
    if path.exists():
        mode = path.stat().st_mode & 0o7777

    fd, tmp_name = tempfile.mkstemp(prefix=f'.{path.name}.', suffix='.tmp', dir=str(directory))
    try:
        with os.fdopen(fd, 'w', encoding='utf-8', newline='') as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        if mode is not None:
            os.chmod(tmp_name, mode)
        else:
            os.chmod(tmp_name, 0o644)
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except OSError:
            pass
        raise
