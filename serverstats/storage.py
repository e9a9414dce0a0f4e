import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from .audit import audit_log
from .errors import PersistenceFailure
from .models import PersistedState, ServerSnapshot, StatsChannelConfig


class StatsStore:
    """
    Keeps the stats channel state in a single pretty-printed JSON file.
    Failures never propagate: load falls back to an empty state and save/reset
    leave the in-memory state authoritative until the next successful write.
    """

    def __init__(self, path: str = "stats.json"):
        self.path = Path(path)
        self.state = PersistedState()

    def load(self) -> PersistedState:
        try:
            document = self._read()
        except PersistenceFailure as e:
            logging.error(f"Error loading stats data: {e}")
            audit_log(f"Error loading stats data from {self.path}: {e.reason}")
            self.state = PersistedState()
            return self.state

        self.state = _parse_document(document)
        logging.info(
            f"Loaded stats data for {len(self.state.configured_guild_ids())} configured guild(s)."
        )
        return self.state

    def save(self, state: Optional[PersistedState] = None):
        if state is not None:
            self.state = state
        try:
            self._write(self.state.to_document())
        except PersistenceFailure as e:
            logging.error(f"Error saving stats data: {e}")
            audit_log(f"Error saving stats data to {self.path}: {e.reason}")

    def reset(self):
        """Overwrite the file with empty maps. The in-memory state is left alone."""
        try:
            self._write({"statsChannels": {}, "serverStats": {}})
        except PersistenceFailure as e:
            logging.error(f"Error resetting stats data file: {e}")
            audit_log(f"Error resetting stats data file {self.path}: {e.reason}")

    def _read(self) -> Dict[str, Any]:
        try:
            raw = self.path.read_text(encoding="utf-8")
            document = json.loads(raw)
        except (OSError, ValueError) as e:
            raise PersistenceFailure(str(self.path), e) from e
        if not isinstance(document, dict):
            raise PersistenceFailure(
                str(self.path), ValueError("top-level JSON value is not an object")
            )
        return document

    def _write(self, document: Dict[str, Any]):
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            if self.path.parent != Path("."):
                self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(
                json.dumps(document, indent=2, ensure_ascii=False), encoding="utf-8"
            )
            tmp.replace(self.path)
        except (OSError, TypeError, ValueError) as e:
            raise PersistenceFailure(str(self.path), e) from e


def _parse_document(document: Dict[str, Any]) -> PersistedState:
    state = PersistedState()
    channels = document.get("statsChannels")
    snapshots = document.get("serverStats")
    if not isinstance(channels, dict):
        channels = {}
    if not isinstance(snapshots, dict):
        snapshots = {}

    for key, value in channels.items():
        try:
            config = StatsChannelConfig.from_dict(value)
            state.record_for(int(key)).config = config
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logging.warning(f"Skipping malformed statsChannels entry {key!r}: {e}")

    for key, value in snapshots.items():
        try:
            snapshot = ServerSnapshot.from_dict(value)
            state.record_for(int(key)).snapshot = snapshot
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logging.warning(f"Skipping malformed serverStats entry {key!r}: {e}")

    return state
