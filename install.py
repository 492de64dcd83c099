#!/usr/bin/env python3
"""Convenience launcher so users can run `python install.py`."""

from __future__ import annotations

from precommit_installer.cli import main


if __name__ == "__main__":  # pragma: no cover
    main()
