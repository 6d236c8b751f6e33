# SPDX-FileCopyrightText: 2025 Frederic Ruget <fred@atlant.is> (GitHub: @douzebis)
#
# SPDX-License-Identifier: MIT

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass

from savebin.auxiliaries import KeyStoreError
from savebin.constants import (
    MD5_BLANKER,
    NG_ID,
    NG_KEY_ID,
    NG_MAC,
    NG_PRIV,
    NG_SIG,
    SD_IV,
    SD_KEY,
)
from savebin.crypto import Crypto


class KeyStoreInterface(ABC):
    """
    Abstract interface for key material lookup.

    Concrete implementations:
    - FileKeyStore: one file per key under <root>/<category>/<name>
    - EmulatedKeyStore: In-memory keys for testing
    """

    @abstractmethod
    def read_key(self, category: str, name: str) -> bytes:
        """
        Return the raw bytes of a key.

        Parameters:
        - category: 'shared' (device-wide) or 'private' (device identity).
        - name: Key name, e.g. 'sd-key'.

        Raises:
        - KeyStoreError: If the key is absent or unreadable.
        """
        pass

    def get_key(self, category: str, name: str, length: int) -> bytes:
        """
        Return a key, checking that it is exactly `length` bytes long.
        """
        data = self.read_key(category, name)
        if len(data) != length:
            raise KeyStoreError(
                f'Key {category}/{name} has bad length: {len(data)}'
                f' (expected {length})')
        return data


class FileKeyStore(KeyStoreInterface):
    """Keys stored as raw files under a root directory."""

    def __init__(self, root: str):
        self.root = os.path.expanduser(root)

    def read_key(self, category: str, name: str) -> bytes:
        path = os.path.join(self.root, category, name)
        try:
            with open(path, 'rb') as f:
                return f.read()
        except OSError as e:
            raise KeyStoreError(f'Cannot read key {path}: {e.strerror}') from e


class EmulatedKeyStore(KeyStoreInterface):
    """
    In-memory key store for testing.

    Keys are registered with `add_key` and looked up by (category, name).
    """

    def __init__(self):
        self.keys: dict[tuple[str, str], bytes] = {}

    def add_key(self, category: str, name: str, data: bytes) -> None:
        self.keys[(category, name)] = bytes(data)

    def read_key(self, category: str, name: str) -> bytes:
        try:
            return self.keys[(category, name)]
        except KeyError as e:
            raise KeyStoreError(f'Missing key {category}/{name}') from e


# === DEVICE KEYS ==============================================================

@dataclass(frozen=True)
class DeviceKeys:
    """All key material needed for one build."""
    sd_key: bytes
    sd_iv: bytes
    md5_blanker: bytes
    ng_id: int
    ng_key_id: int
    ng_mac: bytes
    ng_priv: bytes
    ng_sig: bytes

    @classmethod
    def load(cls, keystore: KeyStoreInterface) -> DeviceKeys:
        """
        Read every key a build needs.

        Raises:
            KeyStoreError: If a key is missing, has a bad length, or NG-priv
                is not a valid sect233r1 scalar
        """
        keys = cls(
            sd_key=keystore.get_key(*SD_KEY),
            sd_iv=keystore.get_key(*SD_IV),
            md5_blanker=keystore.get_key(*MD5_BLANKER),
            ng_id=int.from_bytes(keystore.get_key(*NG_ID), byteorder='big'),
            ng_key_id=int.from_bytes(
                keystore.get_key(*NG_KEY_ID), byteorder='big'),
            ng_mac=keystore.get_key(*NG_MAC),
            ng_priv=keystore.get_key(*NG_PRIV),
            ng_sig=keystore.get_key(*NG_SIG),
        )
        try:
            Crypto.private_key(keys.ng_priv)
        except ValueError as e:
            raise KeyStoreError(f'Bad key private/NG-priv: {e}') from e
        return keys
