# SPDX-FileCopyrightText: 2025 Frederic Ruget <fred@atlant.is> (GitHub: @douzebis)
#
# SPDX-License-Identifier: MIT

"""
Encode/decode tests for each container record, independent of the pipeline.
"""

from __future__ import annotations

import pytest

from savebin.constants import (
    BACKUP_SIZE,
    BANNER_S,
    CERT_SIZE,
    ENTRY_SIZE,
    ENTRY_TYPE_DIR,
    ENTRY_TYPE_FILE,
    HEADER_SIZE,
    ICON_S,
    TRAILER_SIZE,
)
from savebin.records import (
    BackupDescriptor,
    Certificate,
    Entry,
    HeaderBlock,
    TrailerSignature,
)


def make_header(icon_count: int) -> HeaderBlock:
    return HeaderBlock(
        title_id=0x0001000052534245,
        perm=0x35,
        title=b'T' * 0x80,
        banner=bytes(range(256)) * (BANNER_S // 256),
        icons=[bytes([i]) * ICON_S for i in range(icon_count)],
        md5=bytes(range(16)),
    )


@pytest.mark.parametrize('icon_count', [0, 1, 8])
def test_header_block(icon_count: int) -> None:
    header = make_header(icon_count)
    raw = header.serialize()

    assert len(raw) == HEADER_SIZE
    assert raw[0x00:0x08] == bytes.fromhex('0001000052534245')
    assert int.from_bytes(raw[0x08:0x0c], 'big') == 0x60a0 + 0x1200 * icon_count
    assert raw[0x0c] == 0x35
    assert raw[0x0e:0x1e] == bytes(range(16))
    assert raw[0x20:0x24] == b'WIBN'
    assert raw[0x40:0xc0] == b'T' * 0x80
    assert raw[0xc0:0xc0 + BANNER_S] == header.banner
    # Unused icon slots stay zero
    assert raw[0x60c0 + ICON_S * icon_count:] == (
        b'\x00' * ICON_S * (8 - icon_count))

    assert HeaderBlock.from_serialization(raw) == header


def test_header_block_single_icon_size() -> None:
    raw = make_header(1).serialize()
    assert int.from_bytes(raw[0x08:0x0c], 'big') == 0x72a0


def test_header_block_rejects_bad_input() -> None:
    header = make_header(1)
    header.title = b'short'
    with pytest.raises(ValueError):
        header.serialize()

    raw = bytearray(make_header(1).serialize())
    raw[0x20:0x24] = b'XXXX'
    with pytest.raises(ValueError):
        HeaderBlock.from_serialization(bytes(raw))


def test_entry() -> None:
    entry = Entry(path='dir/note.txt', size=2, perm=0x35,
                  entry_type=ENTRY_TYPE_FILE)
    raw = entry.serialize()

    assert len(raw) == ENTRY_SIZE
    assert raw[0x00:0x04] == bytes.fromhex('03adf17e')
    assert raw[0x04:0x08] == (2).to_bytes(4, 'big')
    assert raw[0x08] == 0x35
    assert raw[0x09] == 0
    assert raw[0x0a] == 1
    assert raw[0x0b:0x0b + 13] == b'dir/note.txt\x00'
    assert raw[0x50:0x60] == b'\x00' * 16
    assert raw[0x60:] == b'\x00' * 32

    assert Entry.from_serialization(raw) == entry
    assert entry.padded_size == 0x40


def test_directory_entry() -> None:
    entry = Entry(path='dir', size=0, perm=0x3f, entry_type=ENTRY_TYPE_DIR)
    raw = entry.serialize()

    assert raw[0x0a] == 2
    assert entry.padded_size == 0
    assert Entry.from_serialization(raw) == entry


def test_entry_path_limit() -> None:
    Entry(path='p' * 52, size=0, perm=0, entry_type=ENTRY_TYPE_FILE).serialize()
    with pytest.raises(ValueError):
        Entry(path='p' * 53, size=0, perm=0,
              entry_type=ENTRY_TYPE_FILE).serialize()


def test_backup_descriptor() -> None:
    descriptor = BackupDescriptor(
        ng_id=0x04123456,
        entry_count=3,
        files_size=0x200,
        title_id=0x0001000052534245,
        mac=bytes.fromhex('0017ab123456'),
    )
    raw = descriptor.serialize()

    assert len(raw) == BACKUP_SIZE
    assert raw[0x00:0x04] == bytes.fromhex('00000070')
    assert raw[0x04:0x08] == bytes.fromhex('426b0001')
    assert raw[0x08:0x0c] == bytes.fromhex('04123456')
    assert raw[0x0c:0x10] == (3).to_bytes(4, 'big')
    assert raw[0x10:0x14] == (0x200).to_bytes(4, 'big')
    assert raw[0x1c:0x20] == (0x200 + 0x3c0).to_bytes(4, 'big')
    assert raw[0x60:0x68] == bytes.fromhex('0001000052534245')
    assert raw[0x68:0x6e] == bytes.fromhex('0017ab123456')
    assert raw[0x14:0x1c] == b'\x00' * 8
    assert raw[0x20:0x60] == b'\x00' * 64

    assert BackupDescriptor.from_serialization(raw) == descriptor


def test_certificate() -> None:
    cert = Certificate(
        issuer='Root-CA00000001-MS00000002',
        name='NG04123456',
        key_id=0x0b,
        public_key=bytes(range(60)),
        signature=b'\xab' * 60,
    )
    raw = cert.serialize()

    assert len(raw) == CERT_SIZE
    assert raw[0x000:0x004] == bytes.fromhex('00010002')
    assert raw[0x004:0x040] == b'\xab' * 60
    assert raw[0x080:0x09a] == b'Root-CA00000001-MS00000002'
    assert raw[0x0c0:0x0c4] == bytes.fromhex('00000002')
    assert raw[0x0c4:0x0ce] == b'NG04123456'
    assert raw[0x104:0x108] == bytes.fromhex('0000000b')
    assert raw[0x108:0x144] == bytes(range(60))
    assert cert.signed_region() == raw[0x80:]

    assert Certificate.from_serialization(raw) == cert


def test_trailer_signature() -> None:
    trailer = TrailerSignature(signature=bytes(range(60)))
    raw = trailer.serialize()

    assert len(raw) == TRAILER_SIZE
    assert raw[60:] == b'/Sii'
    assert TrailerSignature.from_serialization(raw) == trailer
