# SPDX-FileCopyrightText: 2025 Frederic Ruget <fred@atlant.is> (GitHub: @douzebis)
#
# SPDX-License-Identifier: MIT

"""
Shared fixtures: an emulated key store and a save directory factory.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / 'src'))

from savebin.constants import (
    BANNER_FILE,
    BANNER_HEIGHT,
    BANNER_WIDTH,
    ICON_FILE,
    ICON_FRAME_FILE,
    ICON_HEIGHT,
    ICON_WIDTH,
    MD5_BLANKER,
    NG_ID,
    NG_KEY_ID,
    NG_MAC,
    NG_PRIV,
    NG_SIG,
    SD_IV,
    SD_KEY,
    TITLE_FILE,
)
from savebin.keystore import EmulatedKeyStore

SD_KEY_VALUE = bytes(range(16))
SD_IV_VALUE = bytes(range(16, 32))
MD5_BLANKER_VALUE = bytes.fromhex('0e65379affd6c1c8b7c1e6c1f9a6fd2b')
NG_ID_VALUE = 0x04123456
NG_KEY_ID_VALUE = 0x0000000b
NG_MAC_VALUE = bytes.fromhex('0017ab123456')
# Leading zero byte keeps the scalar below the sect233r1 group order
NG_PRIV_VALUE = b'\x00' + bytes(range(1, 30))
NG_SIG_VALUE = b'\xab' * 60
TITLE_ID = '0001000052534245'


def make_rgb(width: int, height: int, seed: int = 0) -> bytes:
    return bytes(
        (x * 7 + y * 13 + c * 85 + seed) % 256
        for y in range(height)
        for x in range(width)
        for c in range(3)
    )


def write_ppm(path: Path, width: int, height: int, seed: int = 0) -> None:
    path.write_bytes(
        b'P6\n%d %d\n255\n' % (width, height) + make_rgb(width, height, seed))


@pytest.fixture
def keystore() -> EmulatedKeyStore:
    ks = EmulatedKeyStore()
    ks.add_key(SD_KEY[0], SD_KEY[1], SD_KEY_VALUE)
    ks.add_key(SD_IV[0], SD_IV[1], SD_IV_VALUE)
    ks.add_key(MD5_BLANKER[0], MD5_BLANKER[1], MD5_BLANKER_VALUE)
    ks.add_key(NG_ID[0], NG_ID[1], NG_ID_VALUE.to_bytes(4, 'big'))
    ks.add_key(NG_KEY_ID[0], NG_KEY_ID[1], NG_KEY_ID_VALUE.to_bytes(4, 'big'))
    ks.add_key(NG_MAC[0], NG_MAC[1], NG_MAC_VALUE)
    ks.add_key(NG_PRIV[0], NG_PRIV[1], NG_PRIV_VALUE)
    ks.add_key(NG_SIG[0], NG_SIG[1], NG_SIG_VALUE)
    return ks


@pytest.fixture
def make_source(tmp_path):
    """
    Factory creating a save directory with the reserved inputs.

    `files` maps relative paths to contents; a None content makes a
    directory. `icons` is 'static', a frame count, or 0 for none.
    """

    def _make(
            files: dict[str, bytes | None] | None = None,
            icons: str | int = 'static',
            name: str = 'save',
        ) -> Path:
        root = tmp_path / name
        root.mkdir()
        (root / TITLE_FILE).write_bytes(
            'Test Save'.encode('utf-16-be').ljust(0x80, b'\x00'))
        write_ppm(root / BANNER_FILE, BANNER_WIDTH, BANNER_HEIGHT)
        if icons == 'static':
            write_ppm(root / ICON_FILE, ICON_WIDTH, ICON_HEIGHT, seed=1)
        else:
            for index in range(icons):
                write_ppm(root / ICON_FRAME_FILE.format(index),
                          ICON_WIDTH, ICON_HEIGHT, seed=index)
        for path, content in (files or {}).items():
            target = root / path
            if content is None:
                target.mkdir(parents=True)
            else:
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_bytes(content)
        return root

    return _make
