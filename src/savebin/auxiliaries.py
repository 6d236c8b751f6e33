# SPDX-FileCopyrightText: 2025 Frederic Ruget <fred@atlant.is> (GitHub: @douzebis)
#
# SPDX-License-Identifier: MIT

from __future__ import annotations

import re
from enum import IntEnum

import click


class ExitCode(IntEnum):
    """Process exit status, one per failure site."""
    # 1 and 2 are click's generic and usage errors
    KEY_STORE = 3
    TITLE_ID = 4
    SOURCE_DIR = 5
    OUTPUT_OPEN = 6
    TITLE_READ = 7
    IMAGE = 8
    HEADER_WRITE = 9
    ENUMERATE = 10
    STAT = 11
    PATH_TOO_LONG = 12
    TOO_MANY_ENTRIES = 13
    BACKUP_WRITE = 14
    ENTRY_WRITE = 15
    ENTRY_READ = 16
    SIGN_READ = 17
    TRAILER_WRITE = 18


class BuildError(click.ClickException):
    """
    Fatal error while building a container.

    Click reports the message and exits with `exit_code`. A partially
    written output file is left in place; callers must discard it.
    """

    def __init__(self, message: str, exit_code: ExitCode):
        super().__init__(message)
        self.exit_code = int(exit_code)


class KeyStoreError(BuildError):
    def __init__(self, message: str):
        super().__init__(message, ExitCode.KEY_STORE)


class InputError(BuildError):
    pass


class ImageError(BuildError):
    def __init__(self, message: str):
        super().__init__(message, ExitCode.IMAGE)


class ManifestError(BuildError):
    pass


class ContainerIOError(BuildError):
    pass


class IntegrityError(BuildError):
    def __init__(self, message: str):
        super().__init__(message, ExitCode.SIGN_READ)


def round_up(value: int, alignment: int) -> int:
    return (value + alignment - 1) // alignment * alignment


def parse_title_id(value: str) -> int:
    """
    Parse a container identifier given as exactly 16 hex digits.

    Raises:
        InputError: If the string is not 16 hex digits
    """
    if not re.fullmatch(r'[0-9a-fA-F]{16}', value):
        raise InputError(
            f'Not a correct title id: {value!r} (expected 16 hex digits)',
            ExitCode.TITLE_ID,
        )
    return int(value, 16)


def encode_name(name: str, size: int) -> bytes:
    """Encode an ASCII name for a NUL-padded field, keeping one NUL."""
    raw = name.encode('ascii')
    if len(raw) >= size:
        raise ValueError(f'Name too long for {size}-byte field: {name!r}')
    return raw


def decode_name(raw: bytes) -> str:
    return raw.split(b'\x00', 1)[0].decode('ascii')
