"""設定管理器。

設定分三層合併，後者覆寫前者：內建預設值、使用者設定檔、執行期覆寫。
鍵一律使用點號路徑，例如 ``"thumbnail.concurrency"``。
"""

from __future__ import annotations

import copy
import json
from functools import reduce
from pathlib import Path
from typing import Any, Mapping, Optional

from . import defaults
from .schema import validate_config

LAYERS = ("defaults", "user", "runtime")
_MISSING = object()


def _deep_merge(base: dict[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _lookup(tree: Mapping[str, Any], dotted_key: str, default: Any = None) -> Any:
    node: Any = tree
    for part in dotted_key.split("."):
        if not isinstance(node, Mapping) or part not in node:
            return default
        node = node[part]
    return node


def _assign(tree: dict[str, Any], dotted_key: str, value: Any) -> None:
    *parents, leaf = dotted_key.split(".")
    node = tree
    for part in parents:
        child = node.get(part)
        if not isinstance(child, dict):
            child = node[part] = {}
        node = child
    node[leaf] = value


def _discard(tree: dict[str, Any], dotted_key: str) -> bool:
    *parents, leaf = dotted_key.split(".")
    node: Any = tree
    for part in parents:
        node = node.get(part) if isinstance(node, dict) else None
        if node is None:
            return False
    if not isinstance(node, dict) or leaf not in node:
        return False
    del node[leaf]
    return True


def _changed_from(base: Mapping[str, Any], current: Mapping[str, Any]) -> dict[str, Any]:
    """只保留與預設值不同的設定，寫回檔案時使用。"""
    changed: dict[str, Any] = {}
    for key, value in current.items():
        reference = base.get(key, _MISSING)
        if isinstance(value, Mapping) and isinstance(reference, Mapping):
            nested = _changed_from(reference, value)
            if nested:
                changed[key] = nested
        elif value != reference:
            changed[key] = copy.deepcopy(value)
    return changed


def _read_config_file(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        data = json.load(handle)
    if not isinstance(data, dict):
        raise ValueError(f"設定檔必須是 JSON 物件: {path}")
    return data


class ConfigManager:
    """三層設定管理：預設、使用者、執行期。"""

    def __init__(
        self,
        user_config_path: Optional[Path] = None,
        overrides: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.user_config_path = user_config_path
        user_layer: dict[str, Any] = {}
        if user_config_path is not None and user_config_path.exists():
            user_layer = _read_config_file(user_config_path)
        self._layers: dict[str, dict[str, Any]] = {
            "defaults": copy.deepcopy(defaults.DEFAULT_CONFIG),
            "user": user_layer,
            "runtime": {},
        }
        for key, value in (overrides or {}).items():
            _assign(self._layers["runtime"], key, value)
        self._rebuild()

    def _rebuild(self) -> None:
        self._config = reduce(_deep_merge, (self._layers[name] for name in LAYERS), {})

    def get(self, key: str, default: Any = None) -> Any:
        return _lookup(self._config, key, default)

    def set(self, key: str, value: Any) -> None:
        _assign(self._layers["runtime"], key, value)
        self._rebuild()

    def reset(self, key: str) -> bool:
        """移除執行期覆寫，回到使用者設定或預設值。"""
        removed = _discard(self._layers["runtime"], key)
        if removed:
            self._rebuild()
        return removed

    def source_of(self, key: str) -> Optional[str]:
        for name in reversed(LAYERS):
            if _lookup(self._layers[name], key, _MISSING) is not _MISSING:
                return name
        return None

    def section(self, name: str) -> dict[str, Any]:
        value = self.get(name, {})
        return copy.deepcopy(value) if isinstance(value, dict) else {}

    def validate_config(self) -> list[str]:
        return validate_config(self._config)

    def to_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self._config)

    def save_user_config(self, path: Optional[Path] = None) -> Path:
        target = path or self.user_config_path
        if target is None:
            raise ValueError("未指定設定檔路徑")
        target.parent.mkdir(parents=True, exist_ok=True)
        payload = _changed_from(self._layers["defaults"], self._config)
        with target.open("w", encoding="utf-8") as handle:
            json.dump(payload, handle, ensure_ascii=False, indent=2)
        return target
