import json
import os
from typing import Dict, Optional
from ...domain.ports import MarkerStorePort


class JsonMarkerStore(MarkerStorePort):
    """Small persistent key/value file for flags such as the last cleanup run."""

    def __init__(self, data_dir: str) -> None:
        self.path = os.path.abspath(os.path.join(data_dir, "markers.json"))

    def _load(self) -> Dict[str, str]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, json.JSONDecodeError) as e:
            print(f"[markers] Ignoring unreadable {self.path}: {e}")
            return {}
        return {str(k): str(v) for k, v in raw.items()} if isinstance(raw, dict) else {}

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        os.makedirs(os.path.dirname(self.path), exist_ok=True)
        tmp = self.path + ".tmp"
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        os.replace(tmp, self.path)
