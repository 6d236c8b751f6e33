# SPDX-FileCopyrightText: 2025 Frederic Ruget <fred@atlant.is> (GitHub: @douzebis)
#
# SPDX-License-Identifier: MIT

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.backends import default_backend
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import (
    Prehashed,
    decode_dss_signature,
    encode_dss_signature,
)
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from savebin.constants import ECC_COORD_S

# Console ECC keys live on the 233-bit binary curve
CURVE = ec.SECT233R1()
CURVE_ORDER = 0x1000000000000000000000000000013e974e72f8a6922031d2603cfe0d7


# === CRYPTO ===================================================================

class Crypto:

    # --- CRYPTO AES_CBC_ENCRYPT -----------------------------------------------

    @classmethod
    def aes_cbc_encrypt(
            cls,
            key: bytes,
            iv: bytes,
            data: bytes,
        ) -> bytes:
        '''
        AES-128-CBC without padding; `data` must be a multiple of 16 bytes.
        '''
        cipher = Cipher(
            algorithms.AES(key), modes.CBC(iv), backend=default_backend()
        )
        encryptor = cipher.encryptor()
        return encryptor.update(data) + encryptor.finalize()


    # --- CRYPTO AES_CBC_DECRYPT -----------------------------------------------

    @classmethod
    def aes_cbc_decrypt(
            cls,
            key: bytes,
            iv: bytes,
            data: bytes,
        ) -> bytes:
        cipher = Cipher(
            algorithms.AES(key), modes.CBC(iv), backend=default_backend()
        )
        decryptor = cipher.decryptor()
        return decryptor.update(data) + decryptor.finalize()


    # --- CRYPTO MD5 / SHA1 ----------------------------------------------------

    @classmethod
    def md5(cls, data: bytes) -> bytes:
        digest = hashes.Hash(hashes.MD5(), backend=default_backend())
        digest.update(data)
        return digest.finalize()

    @classmethod
    def sha1(cls, data: bytes) -> bytes:
        digest = hashes.Hash(hashes.SHA1(), backend=default_backend())
        digest.update(data)
        return digest.finalize()


    # --- CRYPTO PRIVATE_KEY ---------------------------------------------------

    @classmethod
    def private_key(cls, raw: bytes) -> ec.EllipticCurvePrivateKey:
        '''
        Load a raw big-endian private scalar (30 bytes) as a sect233r1 key.

        Raises:
            ValueError: If the scalar is zero or not below the group order
        '''
        value = int.from_bytes(raw, byteorder='big')
        if not 0 < value < CURVE_ORDER:
            raise ValueError('Private key is out of range for sect233r1')
        return ec.derive_private_key(value, CURVE, default_backend())


    # --- CRYPTO PRIV_TO_PUB ---------------------------------------------------

    @classmethod
    def priv_to_pub(cls, raw: bytes) -> bytes:
        '''
        Derive the raw public key (x || y, 30 bytes each) for a private key.
        '''
        numbers = cls.private_key(raw).public_key().public_numbers()
        return (numbers.x.to_bytes(ECC_COORD_S, byteorder='big')
                + numbers.y.to_bytes(ECC_COORD_S, byteorder='big'))


    # --- CRYPTO PUBLIC_KEY ----------------------------------------------------

    @classmethod
    def public_key(cls, raw: bytes) -> ec.EllipticCurvePublicKey:
        x = int.from_bytes(raw[:ECC_COORD_S], byteorder='big')
        y = int.from_bytes(raw[ECC_COORD_S:], byteorder='big')
        return ec.EllipticCurvePublicNumbers(x, y, CURVE).public_key(
            default_backend())


    # --- CRYPTO SIGN ----------------------------------------------------------

    @classmethod
    def sign(
            cls,
            raw_private_key: bytes,
            sha1_hash: bytes,
        ) -> bytes:
        '''
        ECDSA-sign a precomputed SHA-1 hash.

        Nonces are derived per RFC 6979 so that signing the same hash with
        the same key always yields the same signature.

        Returns:
            r || s, 30 bytes each
        '''
        key = cls.private_key(raw_private_key)
        der = key.sign(
            sha1_hash,
            ec.ECDSA(Prehashed(hashes.SHA1()), deterministic_signing=True),
        )
        r, s = decode_dss_signature(der)
        return (r.to_bytes(ECC_COORD_S, byteorder='big')
                + s.to_bytes(ECC_COORD_S, byteorder='big'))


    # --- CRYPTO VERIFY --------------------------------------------------------

    @classmethod
    def verify(
            cls,
            raw_public_key: bytes,
            sha1_hash: bytes,
            signature: bytes,
        ) -> bool:
        r = int.from_bytes(signature[:ECC_COORD_S], byteorder='big')
        s = int.from_bytes(signature[ECC_COORD_S:], byteorder='big')
        try:
            cls.public_key(raw_public_key).verify(
                encode_dss_signature(r, s),
                sha1_hash,
                ec.ECDSA(Prehashed(hashes.SHA1())),
            )
        except InvalidSignature:
            return False
        return True
