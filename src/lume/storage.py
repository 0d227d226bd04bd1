"""Small persistent key/value state shared between lume runs."""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class StateStore(Protocol):
    """Durable string key/value storage."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


def get_state_home() -> Path:
    """Get the lume state directory.

    Priority:
    1. $LUME_STATE_HOME if set
    2. $XDG_STATE_HOME/lume if XDG_STATE_HOME is set
    3. ~/.local/state/lume (default)
    """
    if lume_state_home := os.environ.get("LUME_STATE_HOME"):
        return Path(lume_state_home)

    if xdg_state_home := os.environ.get("XDG_STATE_HOME"):
        return Path(xdg_state_home) / "lume"

    return Path.home() / ".local" / "state" / "lume"


class JsonFileStore:
    """State store backed by a single JSON object file.

    The file is read on every access so that separate processes see each
    other's writes. There is no locking; the last writer wins.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    @classmethod
    def default(cls) -> "JsonFileStore":
        """Store in the user's lume state directory."""
        return cls(get_state_home() / "state.json")

    def _read(self) -> dict[str, str]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable state file %s: %s", self.path, e)
            return {}

        if not isinstance(data, dict):
            logger.warning("Ignoring malformed state file %s", self.path)
            return {}
        return data

    def get(self, key: str) -> str | None:
        value = self._read().get(key)
        return None if value is None else str(value)

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value

        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".state-")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp, self.path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise
