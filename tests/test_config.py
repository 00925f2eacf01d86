import dataclasses
from pathlib import Path

import pytest

from rustbundle.config import ToolchainConfig, config_from_env, load_config, root_from_env
from rustbundle.errors import ConfigError


def test_defaults_are_pinned() -> None:
    config = ToolchainConfig()

    assert config.version == '1.92.0'
    assert config.binary_name == 'rustc'
    assert 'linux-x64' in config.platforms


def test_config_is_immutable() -> None:
    config = ToolchainConfig()

    with pytest.raises(dataclasses.FrozenInstanceError):
        config.version = '1.0.0'
    with pytest.raises(TypeError):
        config.platforms['plan9-x64'] = 'x86_64-unknown-plan9'


def test_load_config_overlays_defaults(tmp_path: Path) -> None:
    path = tmp_path / 'rustbundle.toml'
    path.write_text(
        'version = "1.80.1"\n'
        'cross_targets = ["wasm32-unknown-unknown"]\n'
        'strict = true\n'
        '[platforms]\n'
        'linux-x64 = "x86_64-unknown-linux-musl"\n',
        encoding='utf-8',
    )

    config = load_config(path)

    assert config.version == '1.80.1'
    assert config.cross_targets == ('wasm32-unknown-unknown',)
    assert config.strict is True
    assert dict(config.platforms) == {'linux-x64': 'x86_64-unknown-linux-musl'}
    assert config.dist_root == 'https://static.rust-lang.org/dist'


def test_load_config_rejects_unknown_keys(tmp_path: Path) -> None:
    path = tmp_path / 'rustbundle.toml'
    path.write_text('verison = "1.80.1"\n', encoding='utf-8')

    with pytest.raises(ConfigError) as excinfo:
        load_config(path)

    assert 'verison' in str(excinfo.value)


def test_load_config_rejects_invalid_toml(tmp_path: Path) -> None:
    path = tmp_path / 'rustbundle.toml'
    path.write_text('version = \n', encoding='utf-8')

    with pytest.raises(ConfigError):
        load_config(path)


def test_load_config_rejects_bad_chunk_size(tmp_path: Path) -> None:
    path = tmp_path / 'rustbundle.toml'
    path.write_text('chunk_size = 0\n', encoding='utf-8')

    with pytest.raises(ConfigError):
        load_config(path)


def test_config_from_env(tmp_path: Path) -> None:
    path = tmp_path / 'rustbundle.toml'
    path.write_text('keep_scratch = true\n', encoding='utf-8')

    assert config_from_env({}) == ToolchainConfig()
    assert config_from_env({'RUSTBUNDLE_CONFIG': str(path)}).keep_scratch is True


def test_root_from_env(tmp_path: Path) -> None:
    assert root_from_env({'RUSTBUNDLE_ROOT': str(tmp_path)}) == tmp_path
    assert root_from_env({}) == Path.cwd()


def test_cross_targets_string_is_rejected(tmp_path: Path) -> None:
    path = tmp_path / 'rustbundle.toml'
    path.write_text('cross_targets = "wasm32-unknown-unknown"\n', encoding='utf-8')

    with pytest.raises(ConfigError) as excinfo:
        load_config(path)

    assert 'cross_targets' in str(excinfo.value)
    with pytest.raises(ConfigError):
        ToolchainConfig(cross_targets='wasm32-unknown-unknown')


@pytest.mark.parametrize(
    'line',
    [
        'version = 1.92\n',
        'dist_root = ["https://mirror.test"]\n',
        'binary_name = 7\n',
        'strict = "yes"\n',
        'chunk_size = "1MB"\n',
        'platforms = { linux-x64 = 1 }\n',
    ],
)
def test_mistyped_values_are_rejected(tmp_path: Path, line: str) -> None:
    path = tmp_path / 'rustbundle.toml'
    path.write_text(line, encoding='utf-8')

    with pytest.raises(ConfigError):
        load_config(path)
