"""跨工作階段保存的使用者偏好（簡單 key-value 檔案）。"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

from ..utils.logger import get_logger
from .defaults import DEFAULT_THRESHOLD, MAX_THRESHOLD

THRESHOLD_KEY = "similarity.threshold"


def default_preferences_path() -> Path:
    return Path.home() / ".pdf-catalog" / "preferences.json"


def _valid_threshold(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= MAX_THRESHOLD


class Preferences:
    """扁平 JSON key-value 儲存；讀取失敗時回到預設值。"""

    def __init__(self, path: Optional[Path] = None, logger=None) -> None:
        self.path = path or default_preferences_path()
        self.logger = logger or get_logger(self.__class__.__name__)
        self._values = self._load()

    def _load(self) -> dict[str, Any]:
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as exc:
            self.logger.warning(f"無法讀取偏好設定: {self.path} ({exc})")
            return {}
        if not isinstance(data, dict):
            return {}
        return data

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def set(self, key: str, value: Any) -> bool:
        self._values[key] = value
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("w", encoding="utf-8") as handle:
                json.dump(self._values, handle, ensure_ascii=False, indent=2)
        except OSError as exc:
            self.logger.warning(f"無法寫入偏好設定: {self.path} ({exc})")
            return False
        return True

    def get_threshold(self) -> int:
        value = self.get(THRESHOLD_KEY, DEFAULT_THRESHOLD)
        if not _valid_threshold(value):
            return DEFAULT_THRESHOLD
        return value

    def set_threshold(self, value: int) -> bool:
        if not _valid_threshold(value):
            raise ValueError(f"threshold 必須是 0 到 {MAX_THRESHOLD} 的整數: {value!r}")
        return self.set(THRESHOLD_KEY, value)
