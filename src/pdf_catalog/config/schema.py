"""設定檔驗證邏輯。"""

from __future__ import annotations

from typing import Any


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def validate_config(config: dict[str, Any]) -> list[str]:
    errors: list[str] = []

    def add_error(path: str, message: str) -> None:
        errors.append(f"{path}: {message}")

    if "similarity" in config:
        add_error("similarity", "分群門檻由偏好設定保存，設定檔中不可指定")

    cache = config.get("cache", {})
    dir_name = cache.get("dir_name")
    max_bytes = cache.get("max_bytes")
    if not isinstance(dir_name, str) or not dir_name.strip():
        add_error("cache.dir_name", "必須是非空字串")
    elif "/" in dir_name or "\\" in dir_name:
        add_error("cache.dir_name", "不可包含路徑分隔符號")
    if not _is_positive_int(max_bytes):
        add_error("cache.max_bytes", "必須是正整數")

    scan = config.get("scan", {})
    extension = scan.get("extension")
    if not isinstance(extension, str) or not extension.startswith("."):
        add_error("scan.extension", "必須是以 . 開頭的副檔名")

    hashing = config.get("hashing", {})
    if not _is_positive_int(hashing.get("batch_size")):
        add_error("hashing.batch_size", "必須是正整數")
    raster_size = hashing.get("raster_size")
    if not _is_positive_int(raster_size):
        add_error("hashing.raster_size", "必須是正整數")
    elif raster_size < 32:
        add_error("hashing.raster_size", "不可小於 32")

    thumbnail = config.get("thumbnail", {})
    if not _is_positive_int(thumbnail.get("concurrency")):
        add_error("thumbnail.concurrency", "必須是正整數")
    if not _is_positive_int(thumbnail.get("max_width")):
        add_error("thumbnail.max_width", "必須是正整數")
    if not _is_positive_int(thumbnail.get("max_height")):
        add_error("thumbnail.max_height", "必須是正整數")
    jpeg_quality = thumbnail.get("jpeg_quality")
    if not isinstance(jpeg_quality, int) or not (1 <= jpeg_quality <= 95):
        add_error("thumbnail.jpeg_quality", "必須介於 1 到 95")

    return errors
