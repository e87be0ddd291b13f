"""Size-bounded on-disk cache of fingerprints and thumbnails.

One JSON file per cache key. The key is ``path|modified_at|size_bytes`` so a
document is considered unchanged while those three attributes are. Recency
is the record file's mtime: a read touches the file, and eviction removes
the oldest files first once the directory exceeds its byte budget. A single
record larger than the budget is kept.
"""

from __future__ import annotations

import base64
import binascii
import json
import os
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from ..models import DocumentMeta
from ..utils.logger import get_logger

DEFAULT_CACHE_DIR_NAME = "pdf-catalog-cache"
DEFAULT_MAX_BYTES = 100 * 1024 * 1024
RECORD_SUFFIX = ".json"

FINGERPRINT_FIELD = "fingerprint"
THUMBNAIL_FIELD = "thumbnail"


@dataclass
class CacheFile:
    path: Path
    size: int
    mtime_ns: int


def make_cache_key(meta: DocumentMeta) -> str:
    return f"{meta.path}|{meta.modified_at}|{meta.size_bytes}"


def encode_key(key: str) -> str:
    encoded = base64.urlsafe_b64encode(key.encode("utf-8")).decode("ascii")
    return encoded.rstrip("=") + RECORD_SUFFIX


def decode_key(filename: str) -> Optional[str]:
    stem = filename[: -len(RECORD_SUFFIX)] if filename.endswith(RECORD_SUFFIX) else filename
    padding = "=" * (-len(stem) % 4)
    try:
        return base64.urlsafe_b64decode(stem + padding).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return None


def default_cache_dir(dir_name: str = DEFAULT_CACHE_DIR_NAME) -> Path:
    return Path(tempfile.gettempdir()) / dir_name


class FingerprintCache:
    def __init__(
        self,
        cache_dir: Optional[Path] = None,
        max_bytes: int = DEFAULT_MAX_BYTES,
        logger=None,
    ) -> None:
        self.cache_dir = cache_dir or default_cache_dir()
        self.max_bytes = max_bytes
        self.logger = logger or get_logger(self.__class__.__name__)

    @classmethod
    def from_config(cls, config, logger=None) -> "FingerprintCache":
        dir_name = config.get("cache.dir_name", DEFAULT_CACHE_DIR_NAME)
        max_bytes = int(config.get("cache.max_bytes", DEFAULT_MAX_BYTES))
        return cls(default_cache_dir(dir_name), max_bytes, logger)

    def _ensure_dir(self) -> Path:
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        return self.cache_dir

    def record_path(self, key: str) -> Path:
        return self.cache_dir / encode_key(key)

    def get(self, key: str) -> Optional[dict[str, Any]]:
        path = self.record_path(key)
        try:
            with path.open("r", encoding="utf-8") as handle:
                record = json.load(handle)
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as exc:
            self.logger.debug(f"快取讀取失敗: {path.name} ({exc})")
            return None
        if not isinstance(record, dict):
            return None
        try:
            os.utime(path)
        except OSError as exc:
            self.logger.debug(f"無法更新快取時間: {path.name} ({exc})")
        return record

    def set_merged(self, key: str, partial: dict[str, Any]) -> bool:
        merged = dict(self.get(key) or {})
        merged.update(partial or {})
        path = self.record_path(key)
        try:
            self._ensure_dir()
            with path.open("w", encoding="utf-8") as handle:
                json.dump(merged, handle, ensure_ascii=False)
        except (OSError, TypeError, ValueError) as exc:
            self.logger.warning(f"快取寫入失敗: {path.name} ({exc})")
            return False
        self.enforce_limit()
        return True

    def list_files(self) -> list[CacheFile]:
        files: list[CacheFile] = []
        try:
            entries = list(os.scandir(self.cache_dir))
        except OSError:
            return files
        for entry in entries:
            try:
                if not entry.is_file():
                    continue
                stat = entry.stat()
            except OSError:
                continue
            files.append(CacheFile(path=Path(entry.path), size=stat.st_size, mtime_ns=stat.st_mtime_ns))
        return files

    def total_size(self) -> int:
        return sum(item.size for item in self.list_files())

    def enforce_limit(self) -> int:
        files = self.list_files()
        total = sum(item.size for item in files)
        if total <= self.max_bytes:
            return 0

        # the most recently touched record is never evicted
        ordered = sorted(files, key=lambda cache_file: cache_file.mtime_ns)
        removed = 0
        for item in ordered[:-1]:
            try:
                item.path.unlink()
            except FileNotFoundError:
                pass
            except OSError as exc:
                self.logger.warning(f"無法刪除快取檔案: {item.path.name} ({exc})")
                continue
            total -= item.size
            removed += 1
            if total <= self.max_bytes:
                break

        if removed:
            self.logger.info(f"快取超過上限，已移除 {removed} 筆最舊的紀錄")
        return removed

    def clear(self) -> bool:
        try:
            shutil.rmtree(self.cache_dir)
        except FileNotFoundError:
            pass
        except OSError as exc:
            self.logger.warning(f"無法清除快取目錄: {self.cache_dir} ({exc})")
        try:
            self._ensure_dir()
            return not any(self.cache_dir.iterdir())
        except OSError as exc:
            self.logger.warning(f"無法重建快取目錄: {self.cache_dir} ({exc})")
            return False

    def get_fingerprint(self, meta: DocumentMeta) -> Optional[int]:
        record = self.get(make_cache_key(meta))
        if not record or FINGERPRINT_FIELD not in record:
            return None
        try:
            value = int(str(record[FINGERPRINT_FIELD]))
        except ValueError:
            return None
        if value < 0:
            return None
        return value

    def set_fingerprint(self, meta: DocumentMeta, value: int) -> bool:
        return self.set_merged(make_cache_key(meta), {FINGERPRINT_FIELD: str(value)})

    def get_thumbnail(self, meta: DocumentMeta) -> Optional[str]:
        record = self.get(make_cache_key(meta))
        if not record:
            return None
        thumbnail = record.get(THUMBNAIL_FIELD)
        return thumbnail if isinstance(thumbnail, str) and thumbnail else None

    def set_thumbnail(self, meta: DocumentMeta, data_url: str) -> bool:
        return self.set_merged(make_cache_key(meta), {THUMBNAIL_FIELD: data_url})
