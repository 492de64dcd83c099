import subprocess
from pathlib import Path
from typing import Callable, List, Optional, Tuple

import requests

ProgressCallback = Callable[[int, Optional[int]], None]

CHUNK_SIZE = 64 * 1024


def download(
    url: str,
    dest: Path,
    progress: Optional[ProgressCallback] = None,
    timeout: float = 30,
) -> Path:
    """Stream ``url`` into ``dest``.

    ``progress`` receives (bytes_done, total_or_None) after every chunk.
    Raises requests.RequestException or OSError.
    """
    dest = Path(dest)
    with requests.get(url, stream=True, timeout=timeout) as response:
        response.raise_for_status()
        try:
            total = int(response.headers.get('Content-Length') or 0) or None
        except ValueError:
            total = None
        done = 0
        with open(dest, 'wb') as f:
            for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                if not chunk:
                    continue
                f.write(chunk)
                done += len(chunk)
                if progress:
                    progress(done, total)
    return dest


def tar_command(archive: Path, dest: Path, strip_components: int = 1) -> List[str]:
    return ['tar', 'xzf', str(archive), '-C', str(dest), f'--strip-components={strip_components}']


def extract(archive: Path, dest: Path, strip_components: int = 1, timeout: float = 120) -> Tuple[int, str]:
    """Unpack a .tar.gz with the system tar; returns (returncode, output)."""
    Path(dest).mkdir(parents=True, exist_ok=True)
    cmd = tar_command(archive, dest, strip_components)
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, timeout=timeout)
    except FileNotFoundError as exc:
        return 127, str(exc)
    except subprocess.TimeoutExpired:
        return 124, f"tar timed out after {timeout:g}s"
    output = ((result.stdout or '') + (result.stderr or '')).strip()
    return result.returncode, output
