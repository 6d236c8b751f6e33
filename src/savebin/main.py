#!/usr/bin/env python

# SPDX-FileCopyrightText: 2025 Frederic Ruget <fred@atlant.is> (GitHub: @douzebis)
#
# SPDX-License-Identifier: MIT

import os

import click

from savebin.cli_build import cli_build
from savebin.cli_manifest import cli_manifest
from savebin.constants import DEFAULT_KEYS_DIR, KEYS_ENV_VAR
from savebin.keystore import FileKeyStore


# === Main CLI =================================================================


@click.group(
    help='''
        Build signed save-data containers (data.bin) for the console's save
        manager.

        A source directory holds the save files plus reserved inputs whose
        names start with ###:

        \b
          ###title###         128-byte title description
          ###banner###.ppm    192x64 banner (binary PPM)
          ###icon###.ppm      48x48 icon, or
          ###icon0###.ppm ... ###icon7###.ppm  animated icon frames

        Key material is read from KEYS/shared/{sd-key,sd-iv,md5-blanker} and
        KEYS/private/{NG-id,NG-key-id,NG-mac,NG-priv,NG-sig}.

        Any failure stops the build with a distinct exit status. A partially
        written output file is left in place and should be discarded.
    '''
)
@click.option(
    '-k', '--keys',
    type=click.Path(file_okay=False),
    default=None,
    help=f'Key store root directory. Defaults to ${KEYS_ENV_VAR}, '
         f'then {DEFAULT_KEYS_DIR}.'
)
@click.option(
    '-v', '--verbose',
    is_flag=True,
    default=False,
    help='Print one line per entry while writing.'
)
@click.option(
    '--debug',
    is_flag=True,
    default=False,
    hidden=True,
    help='Enable debug instrumentation (hidden flag for troubleshooting)'
)
@click.pass_context
def cli(
    ctx,
    keys: str | None,
    verbose: bool,
    debug: bool,
) -> None:
    """CLI tool for building save containers."""

    if keys is None:
        keys = os.environ.get(KEYS_ENV_VAR, DEFAULT_KEYS_DIR)

    ctx.ensure_object(dict)  # Ensure ctx.obj is a dict
    ctx.obj.setdefault('keystore', FileKeyStore(keys))
    ctx.obj['verbose'] = verbose
    ctx.obj['debug'] = debug

cli.add_command(cli_build)
cli.add_command(cli_manifest)


if __name__ == "__main__":
    cli()
