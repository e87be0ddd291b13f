"""PDF 首頁點陣化工具。

所有方法在文件無法開啟時都回傳保守的預設值，不會往外拋出例外。
"""

from __future__ import annotations

import base64
import io
import math
from pathlib import Path
from typing import Optional, Protocol

import fitz
from PIL import Image

from .logger import get_logger

DEFAULT_HEIGHT_OVER_WIDTH = math.sqrt(2)
DEFAULT_PAGE_COUNT = 1


class Rasterizer(Protocol):
    def render(self, path: Path, size: int = 64) -> Optional[Image.Image]:
        ...

    def render_thumbnail(self, path: Path, max_width: int, max_height: int) -> Optional[str]:
        ...

    def first_page_height_over_width_ratio(self, path: Path) -> float:
        ...

    def page_count(self, path: Path) -> int:
        ...


def encode_data_url(image: Image.Image, quality: int = 70) -> str:
    """優先以 JPEG 編碼以減少快取大小，失敗時改用 PNG。"""
    buffer = io.BytesIO()
    try:
        image.convert("RGB").save(buffer, "JPEG", quality=quality)
        mime = "image/jpeg"
    except (OSError, ValueError):
        buffer = io.BytesIO()
        image.save(buffer, "PNG")
        mime = "image/png"
    payload = base64.b64encode(buffer.getvalue()).decode("ascii")
    return f"data:{mime};base64,{payload}"


def decode_data_url(data_url: str) -> Optional[Image.Image]:
    try:
        header, payload = data_url.split(",", 1)
        if not header.startswith("data:") or ";base64" not in header:
            return None
        image = Image.open(io.BytesIO(base64.b64decode(payload)))
        image.load()
        return image
    except (ValueError, OSError):
        return None


class PdfRasterizer:
    """以 PyMuPDF 點陣化 PDF 首頁。"""

    def __init__(self, jpeg_quality: int = 70, logger=None) -> None:
        self.jpeg_quality = jpeg_quality
        self.logger = logger or get_logger(self.__class__.__name__)
        self._ratio_cache: dict[Path, float] = {}
        self._page_count_cache: dict[Path, int] = {}

    def _render_first_page(self, path: Path, max_width: float, max_height: float) -> Image.Image:
        with fitz.open(path) as document:
            if document.page_count < 1:
                raise ValueError(f"文件沒有任何頁面: {path}")
            page = document.load_page(0)
            rect = page.rect
            if rect.width <= 0 or rect.height <= 0:
                raise ValueError(f"頁面尺寸無效: {path}")
            scale = min(max_width / rect.width, max_height / rect.height)
            pixmap = page.get_pixmap(
                matrix=fitz.Matrix(scale, scale),
                colorspace=fitz.csRGB,
                alpha=False,
            )
            return Image.frombytes("RGB", (pixmap.width, pixmap.height), pixmap.samples)

    def render(self, path: Path, size: int = 64) -> Optional[Image.Image]:
        try:
            return self._render_first_page(path, size, size)
        except Exception as exc:
            self.logger.warning(f"無法點陣化文件: {path} ({exc})")
            return None

    def render_thumbnail(self, path: Path, max_width: int, max_height: int) -> Optional[str]:
        try:
            image = self._render_first_page(path, max_width, max_height)
        except Exception as exc:
            self.logger.warning(f"無法產生縮圖: {path} ({exc})")
            return None
        return encode_data_url(image, self.jpeg_quality)

    def first_page_height_over_width_ratio(self, path: Path) -> float:
        if path in self._ratio_cache:
            return self._ratio_cache[path]
        try:
            with fitz.open(path) as document:
                rect = document.load_page(0).rect
                ratio = rect.height / rect.width
        except Exception as exc:
            self.logger.warning(f"無法讀取頁面比例: {path} ({exc})")
            ratio = DEFAULT_HEIGHT_OVER_WIDTH
        if not math.isfinite(ratio) or ratio <= 0:
            ratio = DEFAULT_HEIGHT_OVER_WIDTH
        self._ratio_cache[path] = ratio
        return ratio

    def page_count(self, path: Path) -> int:
        if path in self._page_count_cache:
            return self._page_count_cache[path]
        try:
            with fitz.open(path) as document:
                count = document.page_count
        except Exception as exc:
            self.logger.warning(f"無法讀取頁數: {path} ({exc})")
            count = DEFAULT_PAGE_COUNT
        if count < 1:
            count = DEFAULT_PAGE_COUNT
        self._page_count_cache[path] = count
        return count
