"""錯誤收集工具。"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from ..models.error_record import ErrorLevel, ProcessError

FINGERPRINT_FAILED = "W-FINGERPRINT"
THUMBNAIL_FAILED = "W-THUMBNAIL"
CACHE_CLEAR_FAILED = "W-CACHE-CLEAR"
TRASH_FAILED = "W-TRASH"


@dataclass
class ErrorHandler:
    """集中收集掃描過程中可復原的問題，不往外拋出。"""

    errors: List[ProcessError] = field(default_factory=list)

    def add(self, error: ProcessError) -> None:
        self.errors.append(error)

    def add_info(self, code: str, message: str, file_path: Optional[Path] = None) -> None:
        self.add(_make(code, ErrorLevel.INFO, message, file_path))

    def add_warning(self, code: str, message: str, file_path: Optional[Path] = None) -> None:
        self.add(_make(code, ErrorLevel.RECOVERABLE, message, file_path))

    def add_fatal(self, code: str, message: str, file_path: Optional[Path] = None) -> None:
        self.add(_make(code, ErrorLevel.FATAL, message, file_path))

    def get_by_level(self, level: ErrorLevel) -> List[ProcessError]:
        return [error for error in self.errors if error.level == level]

    def get_by_code(self, code: str) -> List[ProcessError]:
        return [error for error in self.errors if error.code == code]

    def to_dicts(self) -> List[dict[str, object]]:
        return [error.to_dict() for error in self.errors]


def _make(code: str, level: ErrorLevel, message: str, file_path: Optional[Path]) -> ProcessError:
    return ProcessError(
        code=code,
        level=level,
        message=message,
        file_path=str(file_path) if file_path is not None else None,
    )
