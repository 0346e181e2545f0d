from __future__ import annotations

from typing import Optional

SEPARATOR = "/"


def normalize_separators(path: str) -> str:
    return path.replace("\\", SEPARATOR)


def join_source(directory: Optional[str], name: str) -> str:
    """Join ``name`` onto ``directory`` the way the manifest expects.

    Both parts are normalized, and an empty or missing directory leaves the
    name relative to the working directory.
    """
    name = normalize_separators(name)
    if not directory:
        return name
    return f"{normalize_separators(directory)}{SEPARATOR}{name}"
