# store.py
from __future__ import annotations

import json
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List

from pydantic import ValidationError

from .errors import ConfigError
from .model import Pipeline
from .settings import HISTORY_LIMIT, STORE_DIR

# ---------------------------------------------------------------------
# Layout under the store root:
#   configs.json   named snapshots   [{name, config, date}, ...]
#   history.json   recent snapshots  [{id, name, platform, jobCount,
#                                      createdAt, lastModified, config}, ...]
#                  newest first, capped at `history_limit`
# ---------------------------------------------------------------------

CONFIGS_FILE = "configs.json"
HISTORY_FILE = "history.json"


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class LocalStore:
    """
    Durable storage for named Pipeline snapshots, one JSON document per concern.

    The core never touches this; the CLI and other callers hand it Pipelines
    and get Pipelines back.
    """

    def __init__(self, root: str | Path = STORE_DIR, *, history_limit: int = HISTORY_LIMIT):
        self.root = Path(root).expanduser()
        self.history_limit = history_limit

    # ---- raw documents ----

    def _read(self, filename: str) -> List[Dict[str, Any]]:
        path = self.root / filename
        if not path.exists():
            return []
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(
                kind="parse",
                message="could not parse configuration",
                details={"file": str(path), "reason": str(e)},
            ) from e
        if not isinstance(data, list):
            raise ConfigError(
                kind="parse",
                message="could not parse configuration",
                details={"file": str(path), "reason": "expected a list of entries"},
            )
        return data

    def _write(self, filename: str, entries: List[Dict[str, Any]]) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        path = self.root / filename
        tmp = path.with_suffix(".tmp")
        tmp.write_text(json.dumps(entries, indent=2, ensure_ascii=False), encoding="utf-8")
        tmp.replace(path)

    # ---- named configs ----

    def save(self, name: str, pipeline: Pipeline) -> None:
        """Save under `name`, overwriting an existing entry of the same name."""
        name = (name or "").strip()
        if not name:
            raise ConfigError(kind="name", message="Please enter a configuration name")

        entry = {"name": name, "config": pipeline.to_dict(), "date": now_iso()}
        entries = self._read(CONFIGS_FILE)
        for i, existing in enumerate(entries):
            if existing.get("name") == name:
                entries[i] = entry
                break
        else:
            entries.append(entry)
        self._write(CONFIGS_FILE, entries)

    def load(self, name: str) -> Pipeline:
        for entry in self._read(CONFIGS_FILE):
            if entry.get("name") == name:
                return _to_pipeline(entry.get("config"), name)
        raise ConfigError(kind="missing", message=f"No saved configuration named {name!r}")

    def list(self) -> List[str]:
        return [str(e.get("name")) for e in self._read(CONFIGS_FILE)]

    def delete(self, name: str) -> None:
        entries = self._read(CONFIGS_FILE)
        kept = [e for e in entries if e.get("name") != name]
        if len(kept) == len(entries):
            raise ConfigError(kind="missing", message=f"No saved configuration named {name!r}")
        self._write(CONFIGS_FILE, kept)

    # ---- history ----

    def record_history(self, name: str, pipeline: Pipeline) -> Dict[str, Any]:
        stamp = now_iso()
        entry = {
            "id": uuid.uuid4().hex,
            "name": name,
            "platform": pipeline.platform,
            "jobCount": len(pipeline.jobs),
            "createdAt": stamp,
            "lastModified": stamp,
            "config": pipeline.to_dict(),
        }
        entries = [entry] + self._read(HISTORY_FILE)[: max(self.history_limit - 1, 0)]
        self._write(HISTORY_FILE, entries)
        return entry

    def history(self) -> List[Dict[str, Any]]:
        return self._read(HISTORY_FILE)

    def load_history(self, entry_id: str) -> Pipeline:
        for entry in self._read(HISTORY_FILE):
            if entry.get("id") == entry_id:
                return _to_pipeline(entry.get("config"), entry.get("name", entry_id))
        raise ConfigError(kind="missing", message=f"No history entry {entry_id!r}")

    def delete_history(self, entry_id: str) -> None:
        entries = self._read(HISTORY_FILE)
        self._write(HISTORY_FILE, [e for e in entries if e.get("id") != entry_id])


def _to_pipeline(config: Any, name: str) -> Pipeline:
    if not isinstance(config, dict):
        raise ConfigError(
            kind="parse",
            message="could not parse configuration",
            details={"name": name, "reason": "config is not an object"},
        )
    try:
        return Pipeline.from_dict(config)
    except ValidationError as e:
        raise ConfigError(
            kind="parse",
            message="could not parse configuration",
            details={"name": name, "reason": str(e.errors()[0]["msg"]) if e.errors() else str(e)},
        ) from e
