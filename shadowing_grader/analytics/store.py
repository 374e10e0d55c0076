"""JSON persistence for the session log."""

import json
import logging
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from ..errors import SessionStoreError
from .models import LearningSession

logger = logging.getLogger(__name__)


class SessionLog(BaseModel):
    """On-disk container for learning sessions."""

    schema_version: str = "1.0.0"
    sessions: list[LearningSession] = Field(default_factory=list)


class SessionStore:
    """Explicit load/save of a session log file.

    A missing file loads as an empty log.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> list[LearningSession]:
        """Read all sessions, oldest first.

        Raises:
            SessionStoreError: If the file exists but cannot be parsed.
        """
        if not self.path.exists():
            return []
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
            # A bare list of sessions is accepted too
            if isinstance(data, list):
                data = {"sessions": data}
            log = SessionLog.model_validate(data)
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            raise SessionStoreError(f"Cannot load sessions from {self.path}: {e}") from e

        logger.info("Loaded %d sessions from %s", len(log.sessions), self.path)
        return sorted(log.sessions, key=lambda s: s.timestamp)

    def save(self, sessions: list[LearningSession]) -> None:
        """Write the whole log, replacing the file."""
        log = SessionLog(sessions=list(sessions))
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(log.model_dump_json(indent=2), encoding="utf-8")
        except OSError as e:
            raise SessionStoreError(f"Cannot write sessions to {self.path}: {e}") from e
        logger.info("Saved %d sessions to %s", len(sessions), self.path)

    def append(self, session: LearningSession) -> list[LearningSession]:
        """Append one session to the stored log and return the new log."""
        sessions = self.load()
        sessions.append(session)
        self.save(sessions)
        return sessions
