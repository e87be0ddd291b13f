"""工具模組。"""

from . import file_ops, rasterizer
from .cancel import CancelledError, CancellationToken, OperationTracker, ScanOperation

__all__ = [
    "file_ops",
    "rasterizer",
    "CancelledError",
    "CancellationToken",
    "OperationTracker",
    "ScanOperation",
]
