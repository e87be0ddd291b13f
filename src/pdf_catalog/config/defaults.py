"""預設設定值。

分群門檻屬於使用者偏好，保存在 Preferences，不放在設定檔。
"""

DEFAULT_THRESHOLD = 8
MAX_THRESHOLD = 64

DEFAULT_CONFIG = {
    "cache": {
        "dir_name": "pdf-catalog-cache",
        "max_bytes": 100 * 1024 * 1024,
    },
    "scan": {
        "extension": ".pdf",
    },
    "hashing": {
        "batch_size": 12,
        "raster_size": 64,
    },
    "thumbnail": {
        "concurrency": 4,
        "max_width": 180,
        "max_height": 240,
        "jpeg_quality": 70,
    },
}
