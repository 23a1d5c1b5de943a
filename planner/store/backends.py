import json
import logging
import os
import sqlite3
from typing import Dict, Optional

log = logging.getLogger("store")

DDL = """
CREATE TABLE IF NOT EXISTS kv(
  key TEXT PRIMARY KEY, value TEXT
);
"""


class MemoryBackend:
    """Process-local key/value store. Nothing survives a restart."""

    def __init__(self):
        self.data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str):
        self.data[key] = value


class JsonFileBackend:
    """All keys live in one JSON object on disk."""

    def __init__(self, path: str):
        self.path = path
        self.data: Dict[str, str] = {}
        if os.path.exists(path):
            try:
                with open(path, "r", encoding="utf-8") as f:
                    loaded = json.load(f)
                if isinstance(loaded, dict):
                    self.data = loaded
                else:
                    log.warning(f"{path} does not hold a JSON object; ignoring it.")
            except (OSError, ValueError) as e:
                log.warning(f"Could not read {path} ({e}); starting empty.")

    def get(self, key: str) -> Optional[str]:
        value = self.data.get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str):
        self.data[key] = value
        tmp = self.path + ".tmp"
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(self.data, f)
        os.replace(tmp, self.path)


class SqliteBackend:
    def __init__(self, path: str):
        self.path = path
        with self._connect() as conn:
            conn.executescript(DDL)

    def _connect(self) -> sqlite3.Connection:
        # New connection per call
        conn = sqlite3.connect(self.path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def get(self, key: str) -> Optional[str]:
        with self._connect() as conn:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        return row["value"] if row else None

    def set(self, key: str, value: str):
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO kv(key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, value),
            )
            conn.commit()


BACKENDS = {
    "memory": lambda path: MemoryBackend(),
    "json": JsonFileBackend,
    "sqlite": SqliteBackend,
}


def backend_from_config(cfg: dict):
    storage = cfg.get("storage", {}) or {}
    name = str(storage.get("backend", "json")).lower()
    if name not in BACKENDS:
        raise ValueError(f"Unsupported storage backend: {name}")
    path = storage.get("path", ".milestones.sqlite" if name == "sqlite" else ".milestones.json")
    log.info(f"Using {name} storage at {path}" if name != "memory" else "Using in-memory storage")
    return BACKENDS[name](path)
