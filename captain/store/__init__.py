"""File-backed storage for hooks and their delivery configs.

Each hook lives in ``<name>.json`` inside a storage root, with optional
delivery settings in ``<name>.config.json`` beside it.
"""

from captain.store.config import ConfigStore
from captain.store.files import BODY_SUFFIX, CONFIG_SUFFIX, HookPaths, normalize_name
from captain.store.hooks import HookStore, shallow_merge

__all__ = [
    "BODY_SUFFIX",
    "CONFIG_SUFFIX",
    "ConfigStore",
    "HookPaths",
    "HookStore",
    "normalize_name",
    "shallow_merge",
]
