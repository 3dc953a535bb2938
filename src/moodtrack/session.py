"""Persisted login session: the signed-in user's email in a small JSON file."""

import json
from pathlib import Path

import structlog

logger = structlog.get_logger()

CURRENT_USER_KEY = "current_user_email"


class SessionStore:
    """Key-value file for lightweight session state.

    Not a credential store; it only remembers which user is signed in.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _load(self) -> dict[str, str]:
        try:
            if self.path.exists():
                data = json.loads(self.path.read_text(encoding="utf-8"))
                if isinstance(data, dict):
                    return data
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Could not read session file", path=str(self.path), error=str(e))
        return {}

    def _save(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    @property
    def current_user_email(self) -> str | None:
        return self._load().get(CURRENT_USER_KEY)

    def set_current_user(self, email: str) -> None:
        data = self._load()
        data[CURRENT_USER_KEY] = email
        self._save(data)

    def clear(self) -> None:
        data = self._load()
        if data.pop(CURRENT_USER_KEY, None) is not None:
            self._save(data)
