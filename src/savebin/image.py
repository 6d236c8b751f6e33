# SPDX-FileCopyrightText: 2025 Frederic Ruget <fred@atlant.is> (GitHub: @douzebis)
#
# SPDX-License-Identifier: MIT

"""
Banner and icon encoding.

The console displays 16-bit RGB5A3 textures laid out in 4x4 pixel tiles.
Source images are binary PPM (P6) files of a fixed size.
"""

from __future__ import annotations

import numpy as np
from PIL import Image

from savebin.auxiliaries import ImageError

TILE = 4


def encode_pixels(rgb: bytes, width: int, height: int) -> bytes:
    """
    Encode raster RGB888 pixels into tiled, big-endian RGB5A3.

    Each pixel keeps the top 5 bits of every channel and sets the opaque
    bit. Pixel (x, y) lands at index
    (x % 4) + 4 * (y % 4) + 16 * (x // 4) + 4 * width * (y // 4).
    """
    if len(rgb) != width * height * 3:
        raise ValueError(
            f'Expected {width * height * 3} bytes of RGB data, got {len(rgb)}')
    pixels = np.frombuffer(rgb, dtype=np.uint8).reshape(height, width, 3)
    pixels = pixels.astype(np.uint16)
    packed = (0x8000
              | ((pixels[..., 0] & 0xf8) << 7)
              | ((pixels[..., 1] & 0xf8) << 2)
              | ((pixels[..., 2] & 0xf8) >> 3))
    # (tile_row, row_in_tile, tile_col, col_in_tile) -> tile-major order
    tiled = packed.reshape(height // TILE, TILE, width // TILE, TILE)
    tiled = tiled.transpose(0, 2, 1, 3)
    return tiled.astype('>u2').tobytes()


def decode_tiled(data: bytes, width: int, height: int) -> bytes:
    """
    Inverse of `encode_pixels`: tiled RGB5A3 back to raster RGB888.

    The low three bits of every channel come back as zero.
    """
    packed = np.frombuffer(data, dtype='>u2').astype(np.uint16)
    packed = packed.reshape(height // TILE, width // TILE, TILE, TILE)
    packed = packed.transpose(0, 2, 1, 3).reshape(height, width)
    red = (packed >> 7) & 0xf8
    green = (packed >> 2) & 0xf8
    blue = (packed << 3) & 0xf8
    return np.stack([red, green, blue], axis=-1).astype(np.uint8).tobytes()


def read_image(path: str, width: int, height: int) -> bytes:
    """
    Read a binary PPM of exactly `width` x `height` and encode it.

    Only raw P6 files with a maximum channel value of 255 are accepted.
    Pillow also opens plain-text P3 files and rescales other maximum
    values; both are refused.

    Raises:
        ImageError: If the file is missing, not an 8-bit binary RGB PPM,
            or of the wrong size
    """
    try:
        with Image.open(path) as image:
            if image.format != 'PPM' or image.mode != 'RGB':
                raise ImageError(f'Bad ppm {path}: not a binary RGB image')
            # P3 decodes with ppm_plain, maxval other than 255 with ppm
            if [tile[0] for tile in image.tile] != ['raw']:
                raise ImageError(
                    f'Bad ppm {path}: expected P6 with maximum value 255')
            if image.size != (width, height):
                raise ImageError(
                    f'Wrong size ppm {path}: {image.size[0]}x{image.size[1]}'
                    f' (expected {width}x{height})')
            rgb = image.tobytes()
    except OSError as e:
        raise ImageError(f'Cannot read ppm {path}: {e}') from e
    return encode_pixels(rgb, width, height)
