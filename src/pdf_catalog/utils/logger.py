"""日誌工具。"""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path
from typing import Optional

LOG_FILE_NAME = "pdf-catalog.log"


def default_log_path() -> Path:
    return Path(tempfile.gettempdir()) / LOG_FILE_NAME


def get_logger(name: str, log_file: Optional[Path] = None) -> logging.Logger:
    logger = logging.getLogger(f"pdf_catalog.{name}")
    if logger.handlers:
        return logger

    logger.setLevel(logging.INFO)

    formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    try:
        file_handler = logging.FileHandler(log_file or default_log_path(), encoding="utf-8")
    except OSError:
        file_handler = None
    if file_handler is not None:
        file_handler.setLevel(logging.WARNING)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(logging.INFO)
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    return logger
