# SPDX-FileCopyrightText: 2025 Frederic Ruget <fred@atlant.is> (GitHub: @douzebis)
#
# SPDX-License-Identifier: MIT

"""
Enumerate a save directory into the ordered list of container entries.
"""

from __future__ import annotations

import os
import stat
from dataclasses import dataclass

from savebin.auxiliaries import ExitCode, ManifestError
from savebin.constants import (
    ENTRY_SIZE,
    ENTRY_TYPE_DIR,
    ENTRY_TYPE_FILE,
    MAX_ENTRY_COUNT,
    MAX_PATH_LEN,
    RESERVED_PREFIX,
)
from savebin.records import Entry


def perm_from_mode(mode: int) -> int:
    """
    Pack the read/write bits of owner, group and other, 2 bits each.

    Owner lands in the top bits; write is 2, read is 1, execute is dropped.
    """
    perm = 0
    for tier in range(3):
        shift = 3 * tier
        perm <<= 2
        if mode & (0o200 >> shift):
            perm |= 2
        if mode & (0o400 >> shift):
            perm |= 1
    return perm


def perm_from_path(path: str) -> int:
    try:
        return perm_from_mode(os.stat(path).st_mode)
    except OSError as e:
        raise ManifestError(f'stat {path}: {e.strerror}', ExitCode.STAT) from e


# === DIRECTORY ENTRY ==========================================================

@dataclass(frozen=True)
class DirectoryEntry:
    """A file or directory found under the source root."""
    path: str
    is_dir: bool
    size: int
    perm: int

    def to_entry(self) -> Entry:
        return Entry(
            path=self.path,
            size=self.size,
            perm=self.perm,
            entry_type=ENTRY_TYPE_DIR if self.is_dir else ENTRY_TYPE_FILE,
        )


def scan_directory(root: str) -> list[DirectoryEntry]:
    """
    Walk `root` depth-first, in filesystem order.

    Each directory is recorded before its children. Names starting with
    the reserved prefix are skipped at every level.

    Raises:
        ManifestError: On enumeration or stat failure, on a path longer
            than the entry name field, or past the entry cap
    """
    found: list[DirectoryEntry] = []

    def walk(relative: str) -> None:
        directory = os.path.join(root, relative) if relative else root
        try:
            iterator = os.scandir(directory)
        except OSError as e:
            raise ManifestError(
                f'opendir {directory}: {e.strerror}', ExitCode.ENUMERATE) from e

        with iterator:
            for dir_entry in iterator:
                if dir_entry.name.startswith(RESERVED_PREFIX):
                    continue
                path = (f'{relative}/{dir_entry.name}' if relative
                        else dir_entry.name)
                if len(os.fsencode(path)) > MAX_PATH_LEN:
                    raise ManifestError(
                        f'Path too long: {path}', ExitCode.PATH_TOO_LONG)

                try:
                    st = os.stat(dir_entry.path)
                except OSError as e:
                    raise ManifestError(
                        f'stat {path}: {e.strerror}', ExitCode.STAT) from e
                is_dir = stat.S_ISDIR(st.st_mode)
                if not is_dir and not stat.S_ISREG(st.st_mode):
                    raise ManifestError(
                        f'Not a regular file or a directory: {path}',
                        ExitCode.STAT)

                if len(found) >= MAX_ENTRY_COUNT:
                    raise ManifestError(
                        f'Too many files: more than {MAX_ENTRY_COUNT}',
                        ExitCode.TOO_MANY_ENTRIES)
                found.append(DirectoryEntry(
                    path=path,
                    is_dir=is_dir,
                    size=0 if is_dir else st.st_size,
                    perm=perm_from_mode(st.st_mode),
                ))

                if is_dir:
                    walk(path)

    walk('')
    return found


# === MANIFEST =================================================================

class Manifest:
    """Entries of a container, in their canonical write order."""

    def __init__(self, entries: list[Entry]):
        if len(entries) > MAX_ENTRY_COUNT:
            raise ManifestError(
                f'Too many files: {len(entries)} > {MAX_ENTRY_COUNT}',
                ExitCode.TOO_MANY_ENTRIES)
        # strcmp order on the encoded path
        self.entries: list[Entry] = sorted(
            entries, key=lambda entry: os.fsencode(entry.path))

    @property
    def entry_count(self) -> int:
        return len(self.entries)

    @property
    def files_size(self) -> int:
        """Size of all entry headers and padded payloads."""
        return sum(ENTRY_SIZE + entry.padded_size for entry in self.entries)

    def dict(self) -> dict:
        return {
            'entry_count': self.entry_count,
            'files_size': self.files_size,
            'entries': [entry.dict() for entry in self.entries],
        }


def build_manifest(root: str) -> Manifest:
    return Manifest([found.to_entry() for found in scan_directory(root)])
