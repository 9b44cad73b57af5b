from __future__ import annotations

from pathlib import Path


def package_root() -> Path:
    """backend/app"""
    return Path(__file__).resolve().parents[1]


def backend_root() -> Path:
    return package_root().parent


def resolve_backend_path(path_value: str) -> Path:
    """
    Resolves a file setting such as a credentials path or an env file name.
    Absolute and CWD-relative paths win, then the path is tried under backend/.
    """
    p = Path(path_value).expanduser()
    if p.is_absolute() or p.exists():
        return p.resolve()
    return (backend_root() / path_value).resolve()
