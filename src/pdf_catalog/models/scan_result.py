"""單次資料夾掃描的結果。"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from .error_record import ProcessError
from .hash_entry import HashEntry
from .page_layout import PageLayout


@dataclass
class ScanResult:
    op_id: int
    directory: Path
    entries: List[HashEntry]
    groups: List[List[HashEntry]]
    threshold: int
    thumbnails: dict[Path, str] = field(default_factory=dict)
    layouts: dict[Path, PageLayout] = field(default_factory=dict)
    errors: List[ProcessError] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        return {
            "op_id": self.op_id,
            "directory": str(self.directory),
            "threshold": self.threshold,
            "groups": [[entry.to_dict() for entry in group] for group in self.groups],
            "thumbnail_count": len(self.thumbnails),
            "layouts": {str(path): layout.to_dict() for path, layout in self.layouts.items()},
            "errors": [error.to_dict() for error in self.errors],
        }
