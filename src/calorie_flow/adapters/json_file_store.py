"""Local JSON file storage for tracker state."""

import json
import os
from dataclasses import dataclass
from pathlib import Path

from calorie_flow.services.tracker import KeyValueStore


@dataclass
class JsonFileStore(KeyValueStore):
    """Stores each key as `<root>/<key>.json`."""

    root: Path

    async def get(self, key: str) -> object | None:
        """Return the decoded file contents for a key, if the file exists."""
        path = self._path_for(key)
        if not path.exists():
            return None
        return json.loads(path.read_text(encoding="utf-8"))

    async def set(self, key: str, value: object) -> None:
        """Write the value atomically, replacing any previous file."""
        self.root.mkdir(parents=True, exist_ok=True)
        path = self._path_for(key)
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(
            json.dumps(value, ensure_ascii=False, indent=2), encoding="utf-8"
        )
        os.replace(tmp_path, path)

    def _path_for(self, key: str) -> Path:
        if not key or "/" in key or "\\" in key or key.startswith("."):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.root / f"{key}.json"
