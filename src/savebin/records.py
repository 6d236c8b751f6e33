# SPDX-FileCopyrightText: 2025 Frederic Ruget <fred@atlant.is> (GitHub: @douzebis)
#
# SPDX-License-Identifier: MIT

"""
Fixed-layout records of the save container.

Every record serializes through the struct schema declared next to its
offsets in `savebin.constants`, and parses back with `from_serialization`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from savebin.auxiliaries import decode_name, encode_name, round_up
from savebin.constants import (
    BACKUP_EXTRA_SIZE,
    BACKUP_HEADER_LEN,
    BACKUP_MAGIC,
    BACKUP_SIZE,
    BACKUP_STRUCT,
    BANNER_O,
    BANNER_S,
    BANNER_SIZE_BASE,
    CERT_KEY_TYPE_ECC,
    CERT_NAME_S,
    CERT_SIG_TYPE,
    CERT_SIGNED_O,
    CERT_SIZE,
    CERT_STRUCT,
    ECC_PUB_S,
    ENTRY_MAGIC,
    ENTRY_NAME_S,
    ENTRY_SIZE,
    ENTRY_STRUCT,
    ENTRY_TYPE_DIR,
    ENTRY_TYPE_FILE,
    HEADER_MAGIC,
    HEADER_SIZE,
    HEADER_STRUCT,
    ICON_O,
    ICON_S,
    MAX_ICON_COUNT,
    MAX_PATH_LEN,
    MD5_S,
    PAYLOAD_ALIGNMENT,
    SIG_S,
    TITLE_S,
    TRAILER_MAGIC,
    TRAILER_SIZE,
    TRAILER_STRUCT,
    ZERO_IV,
)


def _check_size(kind: str, data: bytes, size: int) -> None:
    if len(data) != size:
        raise ValueError(f'{kind} must be {size} bytes, got {len(data)}')


# === HEADER BLOCK =============================================================

@dataclass
class HeaderBlock:
    title_id: int
    perm: int
    title: bytes
    banner: bytes
    icons: list[bytes] = field(default_factory=list)
    md5: bytes = b'\x00' * MD5_S

    @property
    def banner_size(self) -> int:
        return BANNER_SIZE_BASE + ICON_S * len(self.icons)

    def serialize(self) -> bytes:
        _check_size('Title', self.title, TITLE_S)
        _check_size('MD5', self.md5, MD5_S)
        _check_size('Banner', self.banner, BANNER_S)
        if len(self.icons) > MAX_ICON_COUNT:
            raise ValueError(f'Too many icons: {len(self.icons)}')
        for icon in self.icons:
            _check_size('Icon', icon, ICON_S)

        out = HEADER_STRUCT.pack(
            self.title_id,
            self.banner_size,
            self.perm,
            self.md5,
            HEADER_MAGIC,
            self.title,
        )
        out += self.banner
        out += b''.join(self.icons)
        out += b'\x00' * (ICON_S * (MAX_ICON_COUNT - len(self.icons)))
        assert len(out) == HEADER_SIZE
        return out

    @classmethod
    def from_serialization(cls, data: bytes) -> HeaderBlock:
        """Parse a decrypted header block."""
        _check_size('Header block', data, HEADER_SIZE)
        (title_id, banner_size, perm, md5, magic,
         title) = HEADER_STRUCT.unpack_from(data)
        if magic != HEADER_MAGIC:
            raise ValueError(f'Header has bad magic: {magic!r}')
        icon_count, rest = divmod(banner_size - BANNER_SIZE_BASE, ICON_S)
        if rest or not 0 <= icon_count <= MAX_ICON_COUNT:
            raise ValueError(f'Header has bad banner size: {banner_size:#x}')
        icons = [
            data[ICON_O + ICON_S * i:ICON_O + ICON_S * (i + 1)]
            for i in range(icon_count)
        ]
        return cls(
            title_id=title_id,
            perm=perm,
            title=title,
            banner=data[BANNER_O:BANNER_O + BANNER_S],
            icons=icons,
            md5=md5,
        )

    def dict(self) -> dict:
        return {
            'title_id': f'{self.title_id:016x}',
            'banner_size': f'{self.banner_size:#x}',
            'icon_count': len(self.icons),
            'perm': f'{self.perm:#04x}',
            'md5': self.md5.hex(),
        }


# === ENTRY ====================================================================

@dataclass
class Entry:
    path: str
    size: int
    perm: int
    entry_type: int
    attr: int = 0
    iv: bytes = ZERO_IV

    @property
    def is_dir(self) -> bool:
        return self.entry_type == ENTRY_TYPE_DIR

    @property
    def padded_size(self) -> int:
        """Bytes of payload following the entry header."""
        if self.is_dir:
            return 0
        return round_up(self.size, PAYLOAD_ALIGNMENT)

    def serialize(self) -> bytes:
        name = os.fsencode(self.path)
        if len(name) > MAX_PATH_LEN:
            raise ValueError(f'Path too long: {self.path}')
        assert len(name) < ENTRY_NAME_S
        assert self.entry_type in (ENTRY_TYPE_FILE, ENTRY_TYPE_DIR)
        _check_size('IV', self.iv, len(ZERO_IV))
        return ENTRY_STRUCT.pack(
            ENTRY_MAGIC,
            self.size,
            self.perm,
            self.attr,
            self.entry_type,
            name,
            self.iv,
        )

    @classmethod
    def from_serialization(cls, data: bytes) -> Entry:
        _check_size('Entry', data, ENTRY_SIZE)
        (magic, size, perm, attr, entry_type, name,
         iv) = ENTRY_STRUCT.unpack(data)
        if magic != ENTRY_MAGIC:
            raise ValueError(f'Entry has bad magic: {magic:#010x}')
        if entry_type not in (ENTRY_TYPE_FILE, ENTRY_TYPE_DIR):
            raise ValueError(f'Entry has bad type: {entry_type}')
        return cls(
            path=os.fsdecode(name.split(b'\x00', 1)[0]),
            size=size,
            perm=perm,
            entry_type=entry_type,
            attr=attr,
            iv=iv,
        )

    def dict(self) -> dict:
        return {
            'path': self.path,
            'type': 'dir' if self.is_dir else 'file',
            'size': self.size,
            'perm': f'{self.perm:#04x}',
        }


# === BACKUP DESCRIPTOR ========================================================

@dataclass
class BackupDescriptor:
    ng_id: int
    entry_count: int
    files_size: int
    title_id: int
    mac: bytes

    @property
    def total_size(self) -> int:
        return self.files_size + BACKUP_EXTRA_SIZE

    def serialize(self) -> bytes:
        _check_size('MAC', self.mac, 6)
        return BACKUP_STRUCT.pack(
            BACKUP_HEADER_LEN,
            BACKUP_MAGIC,
            self.ng_id,
            self.entry_count,
            self.files_size,
            self.total_size,
            self.title_id,
            self.mac,
        )

    @classmethod
    def from_serialization(cls, data: bytes) -> BackupDescriptor:
        _check_size('Backup descriptor', data, BACKUP_SIZE)
        (header_len, magic, ng_id, entry_count, files_size, total_size,
         title_id, mac) = BACKUP_STRUCT.unpack(data)
        if header_len != BACKUP_HEADER_LEN or magic != BACKUP_MAGIC:
            raise ValueError(
                f'Backup descriptor has bad tags: {header_len:#x} {magic:#x}')
        out = cls(
            ng_id=ng_id,
            entry_count=entry_count,
            files_size=files_size,
            title_id=title_id,
            mac=mac,
        )
        if out.total_size != total_size:
            raise ValueError(f'Backup descriptor has bad total size: {total_size:#x}')
        return out


# === CERTIFICATE ==============================================================

@dataclass
class Certificate:
    issuer: str
    name: str
    key_id: int
    public_key: bytes
    signature: bytes

    def serialize(self) -> bytes:
        _check_size('Signature', self.signature, SIG_S)
        _check_size('Public key', self.public_key, ECC_PUB_S)
        return CERT_STRUCT.pack(
            CERT_SIG_TYPE,
            self.signature,
            encode_name(self.issuer, CERT_NAME_S),
            CERT_KEY_TYPE_ECC,
            encode_name(self.name, CERT_NAME_S),
            self.key_id,
            self.public_key,
        )

    def signed_region(self) -> bytes:
        """The bytes covered by this certificate's signature."""
        return self.serialize()[CERT_SIGNED_O:]

    @classmethod
    def from_serialization(cls, data: bytes) -> Certificate:
        _check_size('Certificate', data, CERT_SIZE)
        (sig_type, signature, issuer, key_type, name, key_id,
         public_key) = CERT_STRUCT.unpack(data)
        if sig_type != CERT_SIG_TYPE or key_type != CERT_KEY_TYPE_ECC:
            raise ValueError(
                f'Certificate has bad types: {sig_type:#x} {key_type:#x}')
        return cls(
            issuer=decode_name(issuer),
            name=decode_name(name),
            key_id=key_id,
            public_key=public_key,
            signature=signature,
        )


# === TRAILER SIGNATURE ========================================================

@dataclass
class TrailerSignature:
    signature: bytes

    def serialize(self) -> bytes:
        _check_size('Signature', self.signature, SIG_S)
        return TRAILER_STRUCT.pack(self.signature, TRAILER_MAGIC)

    @classmethod
    def from_serialization(cls, data: bytes) -> TrailerSignature:
        _check_size('Trailer', data, TRAILER_SIZE)
        signature, magic = TRAILER_STRUCT.unpack(data)
        if magic != TRAILER_MAGIC:
            raise ValueError(f'Trailer has bad magic: {magic:#010x}')
        return cls(signature=signature)
