# SPDX-FileCopyrightText: 2025 Frederic Ruget <fred@atlant.is> (GitHub: @douzebis)
#
# SPDX-License-Identifier: MIT

"""
Trailer of a save container: content signature plus certificate chain.

Root (not signed here) -> device (NG) certificate -> application (AP)
certificate -> signature over the backup descriptor and entries.
"""

from __future__ import annotations

import os
import sys
from dataclasses import replace

from savebin.auxiliaries import ExitCode, IntegrityError
from savebin.constants import (
    APP_ISSUER,
    APP_KEY_ID,
    APP_NAME,
    APP_PRIVATE_KEY,
    BACKUP_SIZE,
    DEVICE_NAME,
    DRAFT_SIG_BYTE,
    HEADER_SIZE,
    ROOT_ISSUER,
    SIG_S,
)
from savebin.context import BuildContext
from savebin.crypto import Crypto
from savebin.records import Certificate, TrailerSignature
from savebin.writer import write_exactly


class SignatureChain:

    def __init__(self, ctx: BuildContext):
        self.ctx = ctx


    # --- SIGNATURE_CHAIN PAYLOAD_HASH -----------------------------------------

    def payload_hash(self) -> bytes:
        '''
        Read back the backup descriptor and all entries from the output and
        return SHA1(SHA1(region)).
        '''
        ctx = self.ctx
        assert ctx.output is not None and ctx.manifest is not None
        size = ctx.manifest.files_size + BACKUP_SIZE
        try:
            ctx.output.seek(HEADER_SIZE, os.SEEK_SET)
            region = ctx.output.read(size)
        except OSError as e:
            raise IntegrityError(
                f'read data for sig check: {e.strerror}') from e
        if len(region) != size:
            raise IntegrityError(
                f'read data for sig check: {len(region)} of {size} bytes')

        digest = Crypto.sha1(Crypto.sha1(region))
        if ctx.debug:
            print(f'[DEBUG] payload hash: {digest.hex()}', file=sys.stderr)
        return digest


    # --- SIGNATURE_CHAIN DEVICE_CERTIFICATE -----------------------------------

    def device_certificate(self) -> Certificate:
        '''
        The device certificate comes pre-signed by the root; only its public
        key is derived here.
        '''
        keys = self.ctx.keys
        return Certificate(
            issuer=ROOT_ISSUER,
            name=DEVICE_NAME.format(keys.ng_id),
            key_id=keys.ng_key_id,
            public_key=Crypto.priv_to_pub(keys.ng_priv),
            signature=keys.ng_sig,
        )


    # --- SIGNATURE_CHAIN APPLICATION_CERTIFICATE ------------------------------

    def draft_application_certificate(self) -> Certificate:
        return Certificate(
            issuer=APP_ISSUER.format(self.ctx.keys.ng_id),
            name=APP_NAME,
            key_id=APP_KEY_ID,
            public_key=Crypto.priv_to_pub(APP_PRIVATE_KEY),
            signature=bytes([DRAFT_SIG_BYTE]) * SIG_S,
        )

    def application_certificate(self) -> Certificate:
        '''
        Sign the draft's issuer/subject/key range with the device key, then
        finalize the certificate with that signature.
        '''
        draft = self.draft_application_certificate()
        digest = Crypto.sha1(draft.signed_region())
        return replace(
            draft, signature=Crypto.sign(self.ctx.keys.ng_priv, digest))


    # --- SIGNATURE_CHAIN TRAILER ----------------------------------------------

    def trailer(self) -> TrailerSignature:
        return TrailerSignature(
            signature=Crypto.sign(APP_PRIVATE_KEY, self.payload_hash()))


    # --- SIGNATURE_CHAIN APPEND -----------------------------------------------

    def append(self) -> None:
        ctx = self.ctx
        assert ctx.output is not None
        data = (self.trailer().serialize()
                + self.device_certificate().serialize()
                + self.application_certificate().serialize())
        try:
            ctx.output.seek(0, os.SEEK_END)
        except OSError as e:
            raise IntegrityError(f'seek to end: {e.strerror}') from e
        write_exactly(ctx.output, data, 'sig and certs', ExitCode.TRAILER_WRITE)
