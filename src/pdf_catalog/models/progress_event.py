"""批次處理進度事件模型。"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class ProgressEventType(str, Enum):
    PHASE_START = "PHASE_START"
    FILE_DONE = "FILE_DONE"
    PHASE_END = "PHASE_END"


@dataclass
class ProgressEvent:
    event_type: ProgressEventType
    phase_name: str
    op_id: int
    processed: int = 0
    total: int = 0
    file_path: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def fraction(self) -> float:
        if self.total <= 0:
            return 1.0
        return min(1.0, self.processed / self.total)
