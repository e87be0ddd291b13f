"""資料模型模組。"""

from .document_meta import DocumentMeta
from .error_record import ErrorLevel, ProcessError
from .hash_entry import FingerprintResult, HashEntry
from .page_layout import PageLayout
from .progress_event import ProgressEvent, ProgressEventType
from .scan_result import ScanResult

__all__ = [
    "DocumentMeta",
    "ErrorLevel",
    "FingerprintResult",
    "HashEntry",
    "PageLayout",
    "ProcessError",
    "ProgressEvent",
    "ProgressEventType",
    "ScanResult",
]
