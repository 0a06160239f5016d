from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

__all__ = [
    "ensure_working_dir_structure",
    "get_data_dir",
    "get_default_settings_paths",
    "get_logs_dir",
    "resolve_schema_path",
    "resolve_working_dir",
]

_PROJECT_ROOT = Path(__file__).resolve().parent.parent


def _expand_path(value: str) -> Path:
    expanded = os.path.expandvars(os.path.expanduser(value))
    return Path(expanded).resolve()


def _ensure_writable_dir(path: Path) -> bool:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError:
        return False
    test_file = path / f".write_test_{os.getpid()}"
    try:
        with open(test_file, "w", encoding="utf-8") as handle:
            handle.write("ok")
        test_file.unlink(missing_ok=True)
        return True
    except OSError:
        try:
            if test_file.exists():
                test_file.unlink()
        except OSError:  # pragma: no cover - cleanup best effort
            pass
        return False


def ensure_working_dir_structure(working_dir: Path) -> Path:
    get_data_dir(working_dir).mkdir(parents=True, exist_ok=True)
    get_logs_dir(working_dir).mkdir(parents=True, exist_ok=True)
    return working_dir


def resolve_working_dir() -> Path:
    """Resolve the working directory, creating it if required.

    ``RESULTPAGE_HOME`` wins when it points to a writable location, else
    ``~/.resultpage`` is used.
    """

    env_home = os.environ.get("RESULTPAGE_HOME")
    if env_home:
        try:
            env_path: Optional[Path] = _expand_path(env_home)
        except (OSError, RuntimeError):
            env_path = None
        if env_path is not None and _ensure_writable_dir(env_path):
            return ensure_working_dir_structure(env_path)

    fallback = Path.home() / ".resultpage"
    fallback.mkdir(parents=True, exist_ok=True)
    return ensure_working_dir_structure(fallback)


def get_data_dir(working_dir: Path) -> Path:
    return working_dir / "data"


def get_logs_dir(working_dir: Path) -> Path:
    return working_dir / "logs"


def get_default_settings_paths(working_dir: Path) -> list[Path]:
    """Return the search order for settings.json files."""

    return [working_dir / "settings.json", _PROJECT_ROOT / "settings.json"]


def resolve_schema_path(working_dir: Path, settings: Dict[str, Any], schema_id: str) -> Optional[Path]:
    """Return the database file configured for *schema_id*, or None when unknown.

    Relative paths are resolved against the data directory.
    """

    schemas = settings.get("schemas") if isinstance(settings.get("schemas"), dict) else {}
    value = schemas.get(schema_id)
    if not isinstance(value, str) or not value.strip():
        return None
    expanded = Path(os.path.expandvars(os.path.expanduser(value.strip())))
    if not expanded.is_absolute():
        expanded = get_data_dir(working_dir) / expanded
    return expanded.resolve()
