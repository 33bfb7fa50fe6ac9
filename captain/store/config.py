"""Config store for optional per-hook delivery settings in ``<name>.config.json``."""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import ValidationError

from captain.errors import HookParseError
from captain.models import HookConfig
from captain.store.files import HookPaths, locked, read_json, write_json

logger = logging.getLogger(__name__)


class ConfigStore:
    """Reads and merges hook configs.

    Merging is field-level: a supplied ``headers`` or ``query`` map replaces
    the stored one in full, it is never merged key by key.
    """

    def __init__(self, root: str | Path) -> None:
        self.paths = HookPaths(root)

    def read(self, name: str) -> HookConfig | None:
        path = self.paths.config(name)
        if not path.is_file():
            return None
        raw = read_json(path)
        if not isinstance(raw, dict):
            raise HookParseError(path.name, "config must be a JSON object")
        try:
            return HookConfig.model_validate(raw)
        except ValidationError as exc:
            raise HookParseError(path.name, str(exc)) from exc

    def write(self, name: str, config: HookConfig) -> HookConfig | None:
        """Create or shallow-merge the config; returns what was stored.

        Nothing is written, and ``None`` is returned, when ``config`` supplies
        no fields and there is no config file yet.
        """
        path = self.paths.config(name)
        supplied = config.supplied()
        with locked(self.paths.lock(name)):
            if not path.is_file():
                if not supplied:
                    logger.debug("No config fields for %s, skipping", path.name)
                    return None
                logger.info("Config specified, creating %s", path.name)
                write_json(path, supplied)
                return HookConfig.model_validate(supplied)

            existing = read_json(path)
            if not isinstance(existing, dict):
                raise HookParseError(path.name, "config must be a JSON object")
            merged = {**existing, **supplied}
            logger.info("Config specified, updating %s", path.name)
            write_json(path, merged)
        try:
            return HookConfig.model_validate(merged)
        except ValidationError as exc:
            raise HookParseError(path.name, str(exc)) from exc
