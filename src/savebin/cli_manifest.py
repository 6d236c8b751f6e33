# SPDX-FileCopyrightText: 2025 Frederic Ruget <fred@atlant.is> (GitHub: @douzebis)
#
# SPDX-License-Identifier: MIT

import click
import yaml

from savebin import orchestrator


# === MANIFEST =================================================================

@click.command(
    'manifest',
    help='''
        Show the entries that a build of SRCDIR would pack, in container
        order, along with the entry count and the files size recorded in the
        backup descriptor.

        Reserved ### inputs are not listed. No key material is needed.
    ''',
)
@click.argument(
    'srcdir',
    type=click.Path(exists=True, file_okay=False),
)
def cli_manifest(srcdir: str) -> None:
    """Dumps the manifest of a save directory."""

    manifest = orchestrator.list_manifest(srcdir)
    print(f"{yaml.dump(manifest.dict(), indent=2, sort_keys=False)}", end='')
