"""Raster storage and file output."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

import imageio
import numpy as np
import PIL.Image


def _pil_format_name(ext: str) -> str:
    upper = ext.upper().lstrip(".")
    if upper == "JPG":
        return "JPEG"
    if upper == "TIF":
        return "TIFF"
    return upper


def resolve_format(path, image_format: str | None = None) -> str:
    """Pillow format name for ``path``, from ``image_format`` or else the file suffix."""

    if image_format is None:
        image_format = Path(path).suffix or "png"
    extensions = PIL.Image.registered_extensions()
    suffix = "." + image_format.lower().lstrip(".")
    name = extensions.get(suffix, _pil_format_name(image_format))
    # Some registered formats can only be read.
    if name in PIL.Image.SAVE:
        return name
    raise ValueError(f"Unknown image format '{image_format}' for {path}.")


class RasterImage:
    """An 8-bit RGB raster addressed by ``(x, y)`` pixel coordinates."""

    def __init__(self, width: int, height: int) -> None:
        if width < 1 or height < 1:
            raise ValueError(f"raster size must be positive, got {width}x{height}.")
        self._pixels = np.zeros((height, width, 3), dtype=np.uint8)

    @classmethod
    def from_array(cls, array: np.ndarray) -> "RasterImage":
        array = np.asarray(array)
        if array.ndim != 3 or array.shape[2] != 3:
            raise ValueError(f"expected an (height, width, 3) array, got shape {array.shape}.")
        image = cls(array.shape[1], array.shape[0])
        image._pixels[...] = array.astype(np.uint8, copy=False)
        return image

    @property
    def width(self) -> int:
        return self._pixels.shape[1]

    @property
    def height(self) -> int:
        return self._pixels.shape[0]

    @property
    def array(self) -> np.ndarray:
        return self._pixels

    def put_pixel(self, x: int, y: int, rgb: tuple[int, int, int]) -> None:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) lies outside a {self.width}x{self.height} raster.")
        self._pixels[y, x] = rgb

    def get_pixel(self, x: int, y: int) -> tuple[int, int, int]:
        return tuple(int(v) for v in self._pixels[y, x])

    def to_pil(self) -> PIL.Image.Image:
        return PIL.Image.fromarray(self._pixels)

    def save(self, path, image_format: str | None = None) -> Path:
        """Write the raster with Pillow; the format defaults to the file suffix."""

        output_path = Path(path).expanduser()
        pil_format = resolve_format(output_path, image_format)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        self.to_pil().save(str(output_path), format=pil_format)
        return output_path


def write_gif(path, frames: Iterable[np.ndarray], duration: float = 0.1) -> Path:
    """Write ``frames`` as a looping GIF."""

    output_path = Path(path).expanduser()
    output_path.parent.mkdir(parents=True, exist_ok=True)
    writer = imageio.get_writer(str(output_path), mode='I', duration=duration, loop=0)
    try:
        for frame in frames:
            writer.append_data(frame)
    finally:
        writer.close()
    return output_path
