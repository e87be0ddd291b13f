"""資料夾掃描得到的文件 metadata。"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class DocumentMeta:
    path: Path
    modified_at: float
    size_bytes: int

    @classmethod
    def from_path(cls, path: Path) -> "DocumentMeta":
        stat = path.stat()
        return cls(
            path=path,
            modified_at=stat.st_mtime_ns / 1_000_000,
            size_bytes=stat.st_size,
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "path": str(self.path),
            "modified_at": self.modified_at,
            "size_bytes": self.size_bytes,
        }
