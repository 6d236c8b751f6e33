# SPDX-FileCopyrightText: 2025 Frederic Ruget <fred@atlant.is> (GitHub: @douzebis)
#
# SPDX-License-Identifier: MIT

from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO

from savebin.keystore import DeviceKeys
from savebin.manifest import Manifest

ICON_MODES = ('auto', 'static', 'animated')


@dataclass
class BuildContext:
    """
    State of one container build, passed through every pipeline stage.

    `manifest` is filled by the manifest stage and `output` while the
    container file is open; both stay None before that.
    """
    keys: DeviceKeys
    source_dir: str
    title_id: int
    output_path: str
    icon_mode: str = 'auto'
    verbose: bool = False
    debug: bool = False
    manifest: Manifest | None = None
    output: BinaryIO | None = None
