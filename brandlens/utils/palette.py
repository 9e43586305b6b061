"""Pixel sampling and color quantization for rendered pages and images."""

from dataclasses import dataclass

import numpy as np
from PIL import Image

from .color_utils import rgb_to_hex

MIN_OPAQUE_ALPHA = 128


@dataclass(frozen=True)
class QuantizedColor:
    """A quantization bin and the number of sampled pixels that fell into it."""

    r: int
    g: int
    b: int
    count: int

    @property
    def hex(self) -> str:
        return rgb_to_hex(self.r, self.g, self.b)

    @property
    def luminance(self) -> float:
        return 0.299 * self.r + 0.587 * self.g + 0.114 * self.b


def to_rgba_array(image: Image.Image) -> np.ndarray:
    """Return the image as an (N, 4) uint8 array of RGBA pixels."""
    return np.asarray(image.convert("RGBA"), dtype=np.uint8).reshape(-1, 4)


def sample_pixels(image: Image.Image, sample_size: int) -> np.ndarray:
    """Take every n-th pixel so that roughly ``sample_size`` pixels remain."""
    pixels = to_rgba_array(image)
    step = max(1, len(pixels) // max(sample_size, 1))
    return pixels[::step]


def quantize(pixels: np.ndarray, step: int) -> list[QuantizedColor]:
    """Bin opaque pixels to multiples of ``step`` and count them.

    Channels are rounded half-up, so a bin can exceed 255 before it is
    turned into hex. Result is ordered by descending count, ties in order
    of first appearance.
    """
    if len(pixels) == 0:
        return []
    opaque = pixels[pixels[:, 3] >= MIN_OPAQUE_ALPHA][:, :3]
    if len(opaque) == 0:
        return []

    binned = (np.floor(opaque.astype(np.float64) / step + 0.5) * step).astype(np.int64)
    colors, first_seen, counts = np.unique(
        binned, axis=0, return_index=True, return_counts=True
    )
    order = np.argsort(first_seen, kind="stable")
    bins = [
        QuantizedColor(
            r=int(colors[i][0]),
            g=int(colors[i][1]),
            b=int(colors[i][2]),
            count=int(counts[i]),
        )
        for i in order
    ]
    return sorted(bins, key=lambda c: c.count, reverse=True)
