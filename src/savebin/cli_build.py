# SPDX-FileCopyrightText: 2025 Frederic Ruget <fred@atlant.is> (GitHub: @douzebis)
#
# SPDX-License-Identifier: MIT

import sys

import click

from savebin import orchestrator
from savebin.context import ICON_MODES


# === BUILD ====================================================================


@click.command(
    'build',
    help='''
        Build a save container from SRCDIR.

        TITLE_ID is the 16-hex-digit title identifier (e.g. 00010000524d4745).
        The container is written to OUTPUT.
    ''',
)
@click.option(
    '-i', '--icon-mode',
    type=click.Choice(ICON_MODES),
    default='auto',
    show_default=True,
    help='Icon selection: "static" uses ###icon###.ppm, "animated" uses'
         ' ###icon0###.ppm onwards, "auto" prefers the static icon.',
)
@click.argument(
    'srcdir',
    type=click.Path(exists=True, file_okay=False),
)
@click.argument(
    'title_id',
    type=str,
)
@click.argument(
    'output',
    type=click.Path(dir_okay=False),
)
@click.pass_context
def cli_build(
        ctx,
        icon_mode: str,
        srcdir: str,
        title_id: str,
        output: str,
    ) -> None:
    ''''''

    keystore = ctx.obj['keystore']
    verbose: bool = ctx.obj.get('verbose', False)
    debug: bool = ctx.obj.get('debug', False)

    if debug:
        print( '[DEBUG] cli_build received:', file=sys.stderr)
        print(f'[DEBUG]   srcdir: {srcdir}', file=sys.stderr)
        print(f'[DEBUG]   title_id: {title_id}', file=sys.stderr)
        print(f'[DEBUG]   icon_mode: {icon_mode}', file=sys.stderr)

    # BuildError carries its own exit status
    orchestrator.build_container(
        keystore=keystore,
        source_dir=srcdir,
        title_id=title_id,
        output_path=output,
        icon_mode=icon_mode,
        verbose=verbose,
        debug=debug,
    )
