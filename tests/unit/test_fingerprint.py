import math
from pathlib import Path

import numpy as np
from PIL import Image, ImageDraw

from pdf_catalog.core import FingerprintComputer, average_hash, perceptual_hash, to_image_hash
from pdf_catalog.core.fingerprint import _bits_to_int, dct_2d
from pdf_catalog.core.similarity import hamming_distance


def _page_image(size=(120, 170), box=(10, 10, 60, 80)) -> Image.Image:
    image = Image.new("RGB", size, color=(255, 255, 255))
    draw = ImageDraw.Draw(image)
    draw.rectangle(box, fill=(0, 0, 0))
    draw.ellipse((70, 100, 110, 160), fill=(80, 80, 80))
    return image


def test_perceptual_hash_is_deterministic() -> None:
    computer = FingerprintComputer()
    image = _page_image()

    assert computer.compute(image) == computer.compute(image.copy())
    assert computer.compute(image) != 0


def test_perceptual_hash_uses_at_most_63_bits() -> None:
    value = perceptual_hash(_page_image())
    assert 0 < value < 2**63


def test_small_noise_keeps_fingerprint_close() -> None:
    image = _page_image()
    pixels = np.asarray(image, dtype=np.int16)
    noise = np.random.RandomState(7).randint(-2, 3, size=pixels.shape)
    noisy = Image.fromarray(np.clip(pixels + noise, 0, 255).astype(np.uint8), "RGB")

    assert hamming_distance(perceptual_hash(image), perceptual_hash(noisy)) <= 10


def test_different_layouts_differ() -> None:
    first = perceptual_hash(_page_image(box=(10, 10, 60, 80)))
    second = perceptual_hash(_page_image(box=(60, 90, 115, 165)))
    assert first != second


def test_grayscale_mode_matches_rgb() -> None:
    image = _page_image().convert("L")
    assert perceptual_hash(image) == perceptual_hash(image.convert("RGB"))


def test_dct_matches_direct_formula() -> None:
    grid = np.random.RandomState(3).rand(32, 32) * 255
    coefficients = dct_2d(grid)

    def alpha(k: int) -> float:
        return math.sqrt(0.5) if k == 0 else 1.0

    for v, u in [(0, 0), (0, 1), (3, 5), (7, 7)]:
        expected = alpha(u) * alpha(v) * sum(
            grid[y, x]
            * math.cos((2 * x + 1) * u * math.pi / 64)
            * math.cos((2 * y + 1) * v * math.pi / 64)
            for y in range(32)
            for x in range(32)
        )
        assert math.isclose(coefficients[v, u], expected, rel_tol=1e-9, abs_tol=1e-6)


def test_average_hash_bit_order() -> None:
    image = Image.new("RGB", (64, 64), color=(0, 0, 0))
    ImageDraw.Draw(image).rectangle((32, 0, 63, 63), fill=(255, 255, 255))

    assert average_hash(image) == 0x0F0F0F0F0F0F0F0F


def test_missing_raster_yields_sentinel() -> None:
    computer = FingerprintComputer()

    assert computer.compute(None) == 0
    result = computer.compute_result(None)
    assert result.value == 0
    assert result.valid is False


def test_empty_raster_yields_sentinel() -> None:
    computer = FingerprintComputer()
    assert computer.compute(Image.new("RGB", (0, 0))) == 0


def test_image_hash_round_trip() -> None:
    value = perceptual_hash(_page_image())
    image_hash = to_image_hash(value)

    assert image_hash.hash.shape == (8, 8)
    assert _bits_to_int(image_hash) == value
    assert int(str(image_hash), 16) == value


class _RaisingRasterizer:
    def render(self, path: Path, size: int = 64):
        raise RuntimeError("renderer crashed")


class _StaticRasterizer:
    def __init__(self, image: Image.Image) -> None:
        self.image = image
        self.sizes: list[int] = []

    def render(self, path: Path, size: int = 64):
        self.sizes.append(size)
        return self.image


def test_fingerprint_document_never_raises() -> None:
    result = FingerprintComputer().fingerprint_document(Path("x.pdf"), _RaisingRasterizer())
    assert result.valid is False
    assert result.value == 0


def test_fingerprint_document_uses_raster_size() -> None:
    rasterizer = _StaticRasterizer(_page_image())
    result = FingerprintComputer().fingerprint_document(Path("x.pdf"), rasterizer, raster_size=96)

    assert rasterizer.sizes == [96]
    assert result.valid is True
    assert result.value == perceptual_hash(_page_image())
