"""Path layout and locked JSON file I/O shared by the hook and config stores."""

from __future__ import annotations

import fcntl
import json
import os
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from captain.errors import HookParseError, InvalidInputError

BODY_SUFFIX = ".json"
CONFIG_SUFFIX = ".config.json"


def normalize_name(name: str) -> str:
    """Validate a hook name and strip a trailing ``.json`` if present."""
    if not isinstance(name, str) or not name.strip():
        raise InvalidInputError("Hook name is required")
    if name.endswith(CONFIG_SUFFIX):
        raise InvalidInputError(f"'{name}' names a config file, not a hook")
    if name.endswith(BODY_SUFFIX):
        name = name[: -len(BODY_SUFFIX)]
    if "/" in name or "\\" in name or name in (".", "..") or "\x00" in name:
        raise InvalidInputError(f"Invalid hook name: {name!r}")
    return name


def is_config_file(filename: str) -> bool:
    return CONFIG_SUFFIX in filename


class HookPaths:
    """Maps hook names onto files inside the storage root."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def body(self, name: str) -> Path:
        return self.root / f"{normalize_name(name)}{BODY_SUFFIX}"

    def config(self, name: str) -> Path:
        return self.root / f"{normalize_name(name)}{CONFIG_SUFFIX}"

    def lock(self, name: str) -> Path:
        return self.root / f".{normalize_name(name)}.lock"


def read_json(path: Path) -> object:
    """Parse ``path`` as UTF-8 JSON; malformed content raises ``HookParseError``."""
    raw = path.read_bytes()
    try:
        return json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise HookParseError(path.name, str(exc)) from exc


@contextmanager
def locked(lock_path: Path) -> Iterator[None]:
    """Hold an exclusive ``fcntl`` lock on ``lock_path`` for the block."""
    lock_path.parent.mkdir(parents=True, exist_ok=True)
    with open(lock_path, "w") as lf:
        fcntl.flock(lf, fcntl.LOCK_EX)
        try:
            yield
        finally:
            fcntl.flock(lf, fcntl.LOCK_UN)


def write_json(path: Path, data: object) -> None:
    """Write ``data`` as indented JSON, replacing ``path`` atomically."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
            f.write("\n")
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
