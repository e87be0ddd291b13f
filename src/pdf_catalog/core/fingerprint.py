"""Perceptual fingerprint of a document's first page.

The primary method is a DCT-based perceptual hash over a 32x32 grayscale
grid; when it cannot produce a non-zero value an 8x8 average hash is used
instead. ``0`` is the sentinel for "unknown", so callers that need to tell
a failure apart from a genuine all-zero hash should use
:meth:`FingerprintComputer.compute_result`.
"""

from __future__ import annotations

import math
from pathlib import Path
from typing import Optional

import imagehash
import numpy as np
from PIL import Image

from ..models import FingerprintResult
from ..utils.logger import get_logger
from ..utils.rasterizer import Rasterizer

DCT_SIZE = 32
BLOCK_SIZE = 8
AVERAGE_SIZE = 8
FINGERPRINT_BITS = 64
FINGERPRINT_MASK = (1 << FINGERPRINT_BITS) - 1


def _cosine_table(size: int) -> np.ndarray:
    u = np.arange(size).reshape(-1, 1)
    x = np.arange(size).reshape(1, -1)
    return np.cos(((2 * x + 1) * u * math.pi) / (2 * size))


_COS_TABLE = _cosine_table(DCT_SIZE)
_ALPHA = np.where(np.arange(DCT_SIZE) == 0, math.sqrt(0.5), 1.0)


def grayscale_grid(raster: Image.Image, size: int) -> np.ndarray:
    """Resize with a smoothing filter and average the three channels."""
    if raster.width < 1 or raster.height < 1:
        raise ValueError("raster is empty")
    rgb = raster.convert("RGB").resize((size, size), Image.Resampling.BILINEAR)
    pixels = np.asarray(rgb, dtype=np.float64)
    return pixels.mean(axis=2)


def dct_2d(grid: np.ndarray) -> np.ndarray:
    """Separable DCT-II: rows first, then columns."""
    rows = (grid @ _COS_TABLE.T) * _ALPHA
    return (_COS_TABLE @ rows) * _ALPHA.reshape(-1, 1)


def _bits_to_int(image_hash: imagehash.ImageHash) -> int:
    value = 0
    for bit in image_hash.hash.flatten():
        value = (value << 1) | int(bool(bit))
    return value & FINGERPRINT_MASK


def to_image_hash(value: int) -> imagehash.ImageHash:
    """Expand a fingerprint into an 8x8 ImageHash (most significant bit first)."""
    bits = [(value >> shift) & 1 for shift in range(FINGERPRINT_BITS - 1, -1, -1)]
    return imagehash.ImageHash(np.array(bits, dtype=bool).reshape(BLOCK_SIZE, BLOCK_SIZE))


def perceptual_hash(raster: Image.Image) -> int:
    grid = grayscale_grid(raster, DCT_SIZE)
    coefficients = dct_2d(grid)[:BLOCK_SIZE, :BLOCK_SIZE].flatten()[1:]
    median = np.sort(coefficients)[len(coefficients) // 2]
    return _bits_to_int(imagehash.ImageHash(coefficients > median))


def average_hash(raster: Image.Image) -> int:
    grid = grayscale_grid(raster, AVERAGE_SIZE)
    return _bits_to_int(imagehash.ImageHash(grid >= grid.mean()))


class FingerprintComputer:
    def __init__(self, logger=None) -> None:
        self.logger = logger or get_logger(self.__class__.__name__)

    def compute(self, raster: Optional[Image.Image]) -> int:
        return self.compute_result(raster).value

    def compute_result(self, raster: Optional[Image.Image]) -> FingerprintResult:
        if raster is None:
            return FingerprintResult.invalid()
        try:
            value = perceptual_hash(raster)
        except Exception as exc:
            self.logger.debug(f"pHash 計算失敗，改用 aHash ({exc})")
            value = 0
        if value != 0:
            return FingerprintResult(value=value, valid=True)
        try:
            value = average_hash(raster)
        except Exception as exc:
            self.logger.warning(f"無法計算指紋 ({exc})")
            return FingerprintResult.invalid()
        return FingerprintResult(value=value, valid=value != 0)

    def fingerprint_document(
        self, path: Path, rasterizer: Rasterizer, raster_size: int = 64
    ) -> FingerprintResult:
        try:
            raster = rasterizer.render(path, raster_size)
        except Exception as exc:
            self.logger.warning(f"無法點陣化文件: {path} ({exc})")
            return FingerprintResult.invalid()
        if raster is None:
            return FingerprintResult.invalid()
        return self.compute_result(raster)
