"""Detect whether a module was imported from a zip archive, and where it lives."""

import zipimport
from pathlib import Path
from types import ModuleType


def _archive_loader(module: ModuleType) -> zipimport.zipimporter | None:
    loader = getattr(module, "__loader__", None)
    if isinstance(loader, zipimport.zipimporter):
        return loader
    return None


def is_running_in_archive(module: ModuleType) -> bool:
    return _archive_loader(module) is not None


def find_archive_folder(module: ModuleType) -> Path:
    """Return the directory containing the archive *module* was loaded from.

    Raises RuntimeError when the module was not imported from an archive.
    """
    loader = _archive_loader(module)
    if loader is None:
        where = getattr(module, "__file__", None) or module.__name__
        raise RuntimeError(f"Not running from an archive: '{where}'")
    return Path(loader.archive).resolve().parent
