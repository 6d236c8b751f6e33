# SPDX-FileCopyrightText: 2025 Frederic Ruget <fred@atlant.is> (GitHub: @douzebis)
#
# SPDX-License-Identifier: MIT

from __future__ import annotations

import os
import sys
from typing import BinaryIO

from savebin.auxiliaries import (
    ContainerIOError,
    ExitCode,
    ImageError,
    InputError,
)
from savebin.constants import (
    BANNER_FILE,
    BANNER_HEIGHT,
    BANNER_WIDTH,
    ICON_FILE,
    ICON_FRAME_FILE,
    ICON_HEIGHT,
    ICON_WIDTH,
    MAX_ICON_COUNT,
    TITLE_FILE,
    TITLE_S,
)
from savebin.context import ICON_MODES, BuildContext
from savebin.crypto import Crypto
from savebin.image import read_image
from savebin.manifest import perm_from_path
from savebin.records import BackupDescriptor, HeaderBlock


def write_exactly(
        stream: BinaryIO,
        data: bytes,
        what: str,
        exit_code: ExitCode,
    ) -> None:
    try:
        written = stream.write(data)
    except OSError as e:
        raise ContainerIOError(f'write {what}: {e.strerror}', exit_code) from e
    if written != len(data):
        raise ContainerIOError(
            f'write {what}: short write ({written} of {len(data)} bytes)',
            exit_code)


def select_icons(source_dir: str, icon_mode: str) -> list[str]:
    """
    Return the icon files to embed, in frame order.

    - auto: the single default icon if present, else the numbered frames
    - static: the single default icon, which must exist
    - animated: numbered frames from 0 up to the first gap, at least one
    """
    if icon_mode not in ICON_MODES:
        raise ValueError(f'Unknown icon mode: {icon_mode}')

    default = os.path.join(source_dir, ICON_FILE)
    frames = []
    for index in range(MAX_ICON_COUNT):
        frame = os.path.join(source_dir, ICON_FRAME_FILE.format(index))
        if not os.path.isfile(frame):
            break
        frames.append(frame)

    if icon_mode == 'static':
        if not os.path.isfile(default):
            raise ImageError(f'Missing icon {default}')
        return [default]
    if icon_mode == 'animated':
        if not frames:
            raise ImageError(
                f'Missing icon {os.path.join(source_dir, ICON_FRAME_FILE.format(0))}')
        return frames
    if os.path.isfile(default):
        return [default]
    return frames


def read_title(source_dir: str) -> bytes:
    path = os.path.join(source_dir, TITLE_FILE)
    try:
        with open(path, 'rb') as f:
            title = f.read(TITLE_S)
    except OSError as e:
        raise InputError(
            f'error opening {path}: {e.strerror}', ExitCode.TITLE_READ) from e
    if len(title) != TITLE_S:
        raise InputError(
            f'error reading {path}: {len(title)} of {TITLE_S} bytes',
            ExitCode.TITLE_READ)
    return title


# === CONTAINER WRITER =========================================================

class ContainerWriter:

    def __init__(self, ctx: BuildContext):
        self.ctx = ctx


    # --- CONTAINER_WRITER BUILD_HEADER ----------------------------------------

    def build_header(self) -> bytes:
        '''
        Assemble, digest and encrypt the header block.

        The MD5 is computed with the blanker in the digest field, then
        stored there, then the whole block is AES-CBC encrypted.
        '''
        ctx = self.ctx
        keys = ctx.keys
        header = HeaderBlock(
            title_id=ctx.title_id,
            perm=perm_from_path(ctx.source_dir),
            title=read_title(ctx.source_dir),
            banner=read_image(
                os.path.join(ctx.source_dir, BANNER_FILE),
                BANNER_WIDTH, BANNER_HEIGHT),
            icons=[
                read_image(path, ICON_WIDTH, ICON_HEIGHT)
                for path in select_icons(ctx.source_dir, ctx.icon_mode)
            ],
            md5=keys.md5_blanker,
        )
        header.md5 = Crypto.md5(header.serialize())

        if ctx.debug:
            print(f'[DEBUG] header: {header.dict()}', file=sys.stderr)

        return Crypto.aes_cbc_encrypt(keys.sd_key, keys.sd_iv, header.serialize())


    # --- CONTAINER_WRITER WRITE_HEADER ----------------------------------------

    def write_header(self, encrypted_header: bytes) -> None:
        assert self.ctx.output is not None
        write_exactly(self.ctx.output, encrypted_header, 'header',
                      ExitCode.HEADER_WRITE)


    # --- CONTAINER_WRITER WRITE_BACKUP_DESCRIPTOR -----------------------------

    def write_backup_descriptor(self) -> None:
        ctx = self.ctx
        assert ctx.output is not None and ctx.manifest is not None
        descriptor = BackupDescriptor(
            ng_id=ctx.keys.ng_id,
            entry_count=ctx.manifest.entry_count,
            files_size=ctx.manifest.files_size,
            title_id=ctx.title_id,
            mac=ctx.keys.ng_mac,
        )
        write_exactly(ctx.output, descriptor.serialize(), 'Bk header',
                      ExitCode.BACKUP_WRITE)


    # --- CONTAINER_WRITER WRITE_ENTRIES ---------------------------------------

    def write_entries(self) -> None:
        '''
        Write each entry header, followed by the encrypted payload for files.
        '''
        ctx = self.ctx
        assert ctx.output is not None and ctx.manifest is not None

        for index, entry in enumerate(ctx.manifest.entries):
            if ctx.verbose:
                print(f'file: size={entry.size:08x} perm={entry.perm:02x}'
                      f' attr={entry.attr:02x} type={entry.entry_type:02x}'
                      f' name={entry.path}', file=sys.stderr)

            write_exactly(ctx.output, entry.serialize(),
                          f'file header {index}', ExitCode.ENTRY_WRITE)
            if entry.is_dir:
                continue

            path = os.path.join(ctx.source_dir, entry.path)
            try:
                with open(path, 'rb') as f:
                    data = f.read(entry.size)
            except OSError as e:
                raise ContainerIOError(
                    f'read {path}: {e.strerror}', ExitCode.ENTRY_READ) from e
            if len(data) != entry.size:
                raise ContainerIOError(
                    f'read {path}: short read ({len(data)} of {entry.size} bytes)',
                    ExitCode.ENTRY_READ)

            data += b'\x00' * (entry.padded_size - entry.size)
            write_exactly(
                ctx.output,
                Crypto.aes_cbc_encrypt(ctx.keys.sd_key, entry.iv, data),
                f'file {index}',
                ExitCode.ENTRY_WRITE,
            )
