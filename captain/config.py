"""Runtime settings, passed explicitly into the service and app factories."""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_HOOKS_DIR = "hooks"
DEFAULT_PORT = 2033


@dataclass(frozen=True)
class Settings:
    hooks_dir: str = DEFAULT_HOOKS_DIR
    timeout: float = 30.0
    activity_log: str | None = None

    @classmethod
    def from_env(cls) -> Settings:
        """Read settings from ``CAPTAIN_*`` environment variables."""
        return cls(
            hooks_dir=os.environ.get("CAPTAIN_HOOKS_DIR", DEFAULT_HOOKS_DIR),
            timeout=float(os.environ.get("CAPTAIN_TIMEOUT", "30")),
            activity_log=os.environ.get("CAPTAIN_ACTIVITY_LOG") or None,
        )
