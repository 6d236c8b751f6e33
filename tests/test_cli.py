# SPDX-FileCopyrightText: 2025 Frederic Ruget <fred@atlant.is> (GitHub: @douzebis)
#
# SPDX-License-Identifier: MIT

"""
Command-line tests through click's CliRunner.
"""

from __future__ import annotations

import yaml
from click.testing import CliRunner

from conftest import (
    MD5_BLANKER_VALUE,
    NG_ID_VALUE,
    NG_KEY_ID_VALUE,
    NG_MAC_VALUE,
    NG_PRIV_VALUE,
    NG_SIG_VALUE,
    SD_IV_VALUE,
    SD_KEY_VALUE,
    TITLE_ID,
)
from savebin.auxiliaries import ExitCode
from savebin.main import cli


def write_key_dir(root) -> None:
    for category, name, value in [
        ('shared', 'sd-key', SD_KEY_VALUE),
        ('shared', 'sd-iv', SD_IV_VALUE),
        ('shared', 'md5-blanker', MD5_BLANKER_VALUE),
        ('private', 'NG-id', NG_ID_VALUE.to_bytes(4, 'big')),
        ('private', 'NG-key-id', NG_KEY_ID_VALUE.to_bytes(4, 'big')),
        ('private', 'NG-mac', NG_MAC_VALUE),
        ('private', 'NG-priv', NG_PRIV_VALUE),
        ('private', 'NG-sig', NG_SIG_VALUE),
    ]:
        (root / category).mkdir(parents=True, exist_ok=True)
        (root / category / name).write_bytes(value)


def test_build_with_key_dir(make_source, tmp_path) -> None:
    keys = tmp_path / 'keys'
    write_key_dir(keys)
    source = make_source({'note.txt': b'hi'})
    output = tmp_path / 'data.bin'

    result = CliRunner().invoke(
        cli, ['--keys', str(keys), 'build', str(source), TITLE_ID, str(output)])

    assert result.exit_code == 0, result.output
    assert output.stat().st_size == 61632 + 128 + 192 + 64 + 384 + 384


def test_build_keys_from_environment(make_source, tmp_path) -> None:
    keys = tmp_path / 'keys'
    write_key_dir(keys)
    source = make_source({'note.txt': b'hi'})
    output = tmp_path / 'data.bin'

    result = CliRunner().invoke(
        cli, ['-v', 'build', str(source), TITLE_ID, str(output)],
        env={'SAVEBIN_KEYS': str(keys)})

    assert result.exit_code == 0, result.output
    assert output.exists()


def test_build_exit_codes(keystore, make_source, tmp_path) -> None:
    source = make_source({'note.txt': b'hi'})
    output = tmp_path / 'data.bin'
    runner = CliRunner()

    result = runner.invoke(
        cli, ['build', str(source), 'xyz', str(output)],
        obj={'keystore': keystore})
    assert result.exit_code == ExitCode.TITLE_ID
    assert 'Not a correct title id' in result.output

    result = runner.invoke(
        cli, ['--keys', str(tmp_path / 'nokeys'),
              'build', str(source), TITLE_ID, str(output)])
    assert result.exit_code == ExitCode.KEY_STORE

    result = runner.invoke(
        cli, ['build', '-i', 'animated', str(source), TITLE_ID, str(output)],
        obj={'keystore': keystore})
    assert result.exit_code == ExitCode.IMAGE


def test_manifest_command(make_source) -> None:
    source = make_source({'b.txt': b'12345', 'a': None, 'a/c': b''})

    result = CliRunner().invoke(cli, ['manifest', str(source)])

    assert result.exit_code == 0, result.output
    out = yaml.safe_load(result.output)
    assert out['entry_count'] == 3
    assert out['files_size'] == 3 * 128 + 64
    assert [entry['path'] for entry in out['entries']] == ['a', 'a/c', 'b.txt']
    assert out['entries'][0]['type'] == 'dir'
    assert out['entries'][2]['size'] == 5
