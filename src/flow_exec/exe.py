"""Executable lookup across bare / .exe / .bat variants."""

import os
from pathlib import Path

EXE_TYPES = ("", ".exe", ".bat")


def find_exe(directory: str | Path, name: str) -> Path | None:
    """Return the first executable file among name, name.exe, name.bat.

    The bare name wins over the suffixed variants. Returns None if none match.
    """
    for suffix in EXE_TYPES:
        candidate = Path(directory) / (name + suffix)
        if candidate.is_file() and os.access(candidate, os.X_OK):
            return candidate
    return None


def find_exe_for(path: str | Path) -> Path | None:
    path = Path(path)
    return find_exe(path.parent, path.name)
