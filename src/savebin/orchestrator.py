# SPDX-FileCopyrightText: 2025 Frederic Ruget <fred@atlant.is> (GitHub: @douzebis)
#
# SPDX-License-Identifier: MIT

"""
Orchestrator module for save container builds.

This module contains the build pipeline, separated from the CLI commands.
It provides a clean interface for both CLI and testing.
"""

from __future__ import annotations

import os
import sys

from savebin.auxiliaries import (
    BuildError,
    ContainerIOError,
    ExitCode,
    parse_title_id,
)
from savebin.context import BuildContext
from savebin.keystore import DeviceKeys, KeyStoreInterface
from savebin.manifest import Manifest, build_manifest
from savebin.signature import SignatureChain
from savebin.writer import ContainerWriter


def check_source_dir(source_dir: str) -> None:
    if not os.path.isdir(source_dir):
        raise BuildError(
            f'Not a directory: {source_dir}', ExitCode.SOURCE_DIR)


def list_manifest(source_dir: str) -> Manifest:
    """
    Build the manifest of a save directory without touching key material.
    """
    check_source_dir(source_dir)
    return build_manifest(source_dir)


def build_container(
    keystore: KeyStoreInterface,
    source_dir: str,
    title_id: str,
    output_path: str,
    icon_mode: str = 'auto',
    verbose: bool = False,
    debug: bool = False,
) -> BuildContext:
    """
    Build a signed save container from a source directory.

    Args:
        keystore: Source of the shared and device keys
        source_dir: Directory holding the save files and reserved inputs
        title_id: Container identifier as 16 hex digits
        output_path: Container file to create
        icon_mode: 'auto', 'static' or 'animated'
        verbose: Print one line per entry to stderr
        debug: Print intermediate values to stderr

    Returns:
        The finished build context (output closed)

    Raises:
        BuildError: On any failure. The output file, if already created,
            is left in place and must be discarded by the caller.
    """
    keys = DeviceKeys.load(keystore)
    ctx = BuildContext(
        keys=keys,
        source_dir=source_dir,
        title_id=parse_title_id(title_id),
        output_path=output_path,
        icon_mode=icon_mode,
        verbose=verbose,
        debug=debug,
    )
    check_source_dir(source_dir)

    # Everything that validates input runs before the output exists
    ctx.manifest = build_manifest(source_dir)
    writer = ContainerWriter(ctx)
    encrypted_header = writer.build_header()

    try:
        output = open(output_path, 'w+b')
    except OSError as e:
        raise ContainerIOError(
            f'open {output_path}: {e.strerror}', ExitCode.OUTPUT_OPEN) from e

    with output:
        ctx.output = output
        writer.write_header(encrypted_header)
        writer.write_backup_descriptor()
        writer.write_entries()
        SignatureChain(ctx).append()
    ctx.output = None

    if verbose:
        print(f'Wrote {output_path}: {ctx.manifest.entry_count} entries,'
              f' {os.path.getsize(output_path)} bytes', file=sys.stderr)
    return ctx
