"""Hook store for named JSON payloads kept as ``<name>.json`` files."""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import JsonValue

from captain.errors import HookNotFoundError
from captain.models import Hook
from captain.store.files import (
    BODY_SUFFIX,
    HookPaths,
    is_config_file,
    locked,
    read_json,
    write_json,
)

logger = logging.getLogger(__name__)


def shallow_merge(existing: JsonValue, partial: JsonValue) -> JsonValue:
    """Overlay the top-level keys of ``partial`` onto ``existing``.

    Nested objects are replaced, not merged. If either side is not an
    object there are no keys to merge and ``partial`` wins outright.
    """
    if isinstance(existing, dict) and isinstance(partial, dict):
        return {**existing, **partial}
    return partial


class HookStore:
    """Reads, writes and lists hook bodies in a storage root.

    Writes to the same hook are serialized with a per-name lock file.
    ``update`` holds the lock across its read-merge-write cycle.
    """

    def __init__(self, root: str | Path) -> None:
        self.paths = HookPaths(root)

    @property
    def root(self) -> Path:
        return self.paths.root

    def list(self) -> list[Hook]:
        """All hooks in the root, in filesystem order. Config files are skipped."""
        if not self.root.is_dir():
            return []
        hooks: list[Hook] = []
        for entry in self.root.iterdir():
            if not entry.is_file() or not entry.name.endswith(BODY_SUFFIX):
                continue
            if is_config_file(entry.name):
                continue
            name = entry.name[: -len(BODY_SUFFIX)]
            hooks.append(Hook(name=name, body=read_json(entry)))
        return hooks

    def exists(self, name: str) -> bool:
        return self.paths.body(name).is_file()

    def read(self, name: str) -> JsonValue:
        path = self.paths.body(name)
        if not path.is_file():
            raise HookNotFoundError(path.stem)
        return read_json(path)

    def create(self, name: str, body: JsonValue) -> None:
        """Write ``body`` as the hook's payload. An existing hook is overwritten."""
        path = self.paths.body(name)
        with locked(self.paths.lock(name)):
            if path.exists():
                logger.info("Overwriting %s", path.name)
            else:
                logger.info("Creating %s", path.name)
            write_json(path, body)

    def create_if_absent(self, name: str, body: JsonValue) -> bool:
        """Write ``body`` unless the hook already exists; True if written."""
        path = self.paths.body(name)
        with locked(self.paths.lock(name)):
            if path.exists():
                logger.debug("Keeping existing %s", path.name)
                return False
            logger.info("Creating %s", path.name)
            write_json(path, body)
        return True

    def update(self, name: str, partial: JsonValue) -> JsonValue:
        """Shallow-merge ``partial`` over the stored body and return the result."""
        path = self.paths.body(name)
        with locked(self.paths.lock(name)):
            existing = self.read(name)
            updated = shallow_merge(existing, partial)
            logger.info("Updating %s", path.name)
            write_json(path, updated)
        return updated
