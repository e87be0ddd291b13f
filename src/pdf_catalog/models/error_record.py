"""掃描過程中的問題記錄。"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from pathlib import Path
from typing import Optional


class ErrorLevel(str, Enum):
    INFO = "I"
    RECOVERABLE = "W"
    FATAL = "E"


@dataclass(frozen=True)
class ProcessError:
    """一筆問題；``file_path`` 指向出問題的文件，與整個資料夾相關時為 None。"""

    code: str
    level: ErrorLevel
    message: str
    file_path: Optional[str] = None

    @property
    def document_name(self) -> Optional[str]:
        return Path(self.file_path).name if self.file_path else None

    @property
    def is_fatal(self) -> bool:
        return self.level is ErrorLevel.FATAL

    def format(self) -> str:
        suffix = f" ({self.file_path})" if self.file_path else ""
        return f"[{self.level.value}] {self.code}: {self.message}{suffix}"

    def to_dict(self) -> dict[str, object]:
        record = asdict(self)
        record["level"] = self.level.value
        return record
