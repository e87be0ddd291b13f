"""可協作取消工具。"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Optional


class CancelledError(Exception):
    """表示作業已被較新的掃描取代。"""


class CancellationToken:
    def __init__(self) -> None:
        self._event = threading.Event()

    def set(self) -> None:
        self._event.set()

    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self.is_cancelled():
            raise CancelledError("作業已取消")


@dataclass
class ScanOperation:
    """一次資料夾掃描；op_id 單調遞增，並擁有自己的取消 token。"""

    op_id: int
    token: CancellationToken = field(default_factory=CancellationToken)

    @property
    def cancelled(self) -> bool:
        return self.token.is_cancelled()


class OperationTracker:
    """發出掃描作業；開始新作業時取消前一個作業。"""

    def __init__(self) -> None:
        self._last_id = 0
        self._current: Optional[ScanOperation] = None

    @property
    def current(self) -> Optional[ScanOperation]:
        return self._current

    def begin(self) -> ScanOperation:
        if self._current is not None:
            self._current.token.set()
        self._last_id += 1
        self._current = ScanOperation(op_id=self._last_id)
        return self._current

    def is_current(self, operation: ScanOperation) -> bool:
        return (
            self._current is not None
            and operation.op_id == self._current.op_id
            and not operation.cancelled
        )
