"""資料夾文件列舉與 metadata 收集。"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from ..config import ConfigManager
from ..models import DocumentMeta
from ..utils.logger import get_logger


class DocumentScanner:
    def __init__(self, config: Optional[ConfigManager] = None, logger=None) -> None:
        self.config = config or ConfigManager()
        self.logger = logger or get_logger(self.__class__.__name__)

    @property
    def extension(self) -> str:
        return str(self.config.get("scan.extension", ".pdf")).lower()

    def list_documents(self, directory: Path, extension: Optional[str] = None) -> list[DocumentMeta]:
        """列出資料夾第一層符合副檔名的檔案；不遞迴子資料夾。"""
        suffix = (extension or self.extension).lower()
        results: list[DocumentMeta] = []
        try:
            entries = sorted(os.scandir(directory), key=lambda entry: entry.name)
        except OSError as exc:
            self.logger.warning(f"無法讀取資料夾: {directory} ({exc})")
            return results

        for entry in entries:
            if not entry.name.lower().endswith(suffix):
                continue
            try:
                if not entry.is_file():
                    continue
                meta = DocumentMeta.from_path(Path(entry.path))
            except OSError as exc:
                self.logger.warning(f"無法讀取檔案資訊: {entry.path} ({exc})")
                continue
            results.append(meta)
        return results
