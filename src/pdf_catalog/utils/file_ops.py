"""作業系統層的檔案操作：丟到垃圾桶、在檔案總管顯示、以預設程式開啟。"""

from __future__ import annotations

import os
import subprocess
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional

from send2trash import send2trash

from .logger import get_logger


@dataclass
class OperationResult:
    path: Path
    success: bool
    error_message: Optional[str] = None
    elapsed_time: float = 0.0


@dataclass
class TrashResult:
    results: List[OperationResult] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(item.success for item in self.results)

    @property
    def failed(self) -> List[OperationResult]:
        return [item for item in self.results if not item.success]


def trash_files(paths: Iterable[Path], logger=None) -> TrashResult:
    op_logger = logger or get_logger("FileOps")
    result = TrashResult()
    for path in paths:
        start_time = time.time()
        try:
            send2trash(str(path))
        except Exception as exc:
            op_logger.warning(f"無法移到垃圾桶: {path} ({exc})")
            result.results.append(
                OperationResult(
                    path=Path(path),
                    success=False,
                    error_message=str(exc),
                    elapsed_time=time.time() - start_time,
                )
            )
            continue
        result.results.append(
            OperationResult(path=Path(path), success=True, elapsed_time=time.time() - start_time)
        )
    return result


def _launch(command: list[str]) -> None:
    subprocess.Popen(command, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)


def reveal_in_folder(paths: Iterable[Path], logger=None) -> bool:
    """盡力而為：個別路徑失敗不影響其他路徑。"""
    op_logger = logger or get_logger("FileOps")
    for path in paths:
        try:
            if sys.platform == "win32":
                _launch(["explorer", f"/select,{path}"])
            elif sys.platform == "darwin":
                _launch(["open", "-R", str(path)])
            else:
                _launch(["xdg-open", str(Path(path).parent)])
        except OSError as exc:
            op_logger.warning(f"無法在檔案總管顯示: {path} ({exc})")
    return True


def open_path(path: Path, logger=None) -> bool:
    op_logger = logger or get_logger("FileOps")
    try:
        if sys.platform == "win32":
            os.startfile(str(path))  # type: ignore[attr-defined]
        elif sys.platform == "darwin":
            _launch(["open", str(path)])
        else:
            _launch(["xdg-open", str(path)])
    except OSError as exc:
        op_logger.warning(f"無法開啟檔案: {path} ({exc})")
        return False
    return True
