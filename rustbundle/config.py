import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

import toml

from rustbundle.errors import ConfigError

DIST_ROOT = 'https://static.rust-lang.org/dist'
RUST_VERSION = '1.92.0'
BINARY_NAME = 'rustc'
CHUNK_SIZE = 1024 * 1024

CONFIG_ENV = 'RUSTBUNDLE_CONFIG'
ROOT_ENV = 'RUSTBUNDLE_ROOT'

# platform key (`<os>-<arch>`) -> host target triple
PLATFORMS = {
    'darwin-arm64': 'aarch64-apple-darwin',
    'darwin-x64': 'x86_64-apple-darwin',
    'linux-x64': 'x86_64-unknown-linux-gnu',
    'linux-arm64': 'aarch64-unknown-linux-gnu',
}

ANDROID_TARGETS = (
    'aarch64-linux-android',
    'armv7-linux-androideabi',
    'i686-linux-android',
    'x86_64-linux-android',
)


@dataclass(frozen=True)
class ToolchainConfig:
    version: str = RUST_VERSION
    dist_root: str = DIST_ROOT
    binary_name: str = BINARY_NAME
    platforms: Mapping[str, str] = field(default_factory=lambda: dict(PLATFORMS))
    cross_targets: Tuple[str, ...] = ANDROID_TARGETS
    # Cross std archives are only fetched on hosts running this OS.
    cross_host_os: str = 'linux'
    chunk_size: int = CHUNK_SIZE
    keep_scratch: bool = False
    strict: bool = False

    def __post_init__(self):
        if isinstance(self.cross_targets, str):
            raise ConfigError('cross_targets must be a sequence of triples, not a string')
        object.__setattr__(self, 'platforms', MappingProxyType(dict(self.platforms)))
        object.__setattr__(self, 'cross_targets', tuple(self.cross_targets))
        if self.chunk_size <= 0:
            raise ConfigError(f'chunk_size must be positive, got {self.chunk_size}')


STRING_KEYS = ('version', 'dist_root', 'binary_name', 'cross_host_os')


def _check_types(doc: dict, path: Path):
    def fail(message):
        raise ConfigError(message, context={'path': path})

    for key in STRING_KEYS:
        if key in doc and not isinstance(doc[key], str):
            fail(f'`{key}` must be a string')
    platforms = doc.get('platforms', {})
    if not isinstance(platforms, dict) or not all(isinstance(v, str) for v in platforms.values()):
        fail('`platforms` must be a table of strings')
    targets = doc.get('cross_targets', [])
    if not isinstance(targets, list) or not all(isinstance(t, str) for t in targets):
        fail('`cross_targets` must be a list of strings')
    for key in ('keep_scratch', 'strict'):
        if key in doc and not isinstance(doc[key], bool):
            fail(f'`{key}` must be a boolean')
    # bool is an int subclass
    if 'chunk_size' in doc and (isinstance(doc['chunk_size'], bool) or not isinstance(doc['chunk_size'], int)):
        fail('`chunk_size` must be an integer')


def load_config(path, base: Optional[ToolchainConfig] = None) -> ToolchainConfig:
    """Overlay the keys of a TOML file onto `base` (defaults when omitted)."""
    path = Path(path)
    try:
        doc = toml.load(str(path))
    except (OSError, toml.TomlDecodeError) as e:
        raise ConfigError(f'Cannot read config: {e}', context={'path': path}) from e

    known = {f.name for f in fields(ToolchainConfig)}
    unknown = sorted(set(doc) - known)
    if unknown:
        raise ConfigError(f'Unknown config keys: {", ".join(unknown)}', context={'path': path})
    _check_types(doc, path)
    try:
        return replace(base or ToolchainConfig(), **doc)
    except TypeError as e:
        raise ConfigError(f'Invalid config: {e}', context={'path': path}) from e


def config_from_env(environ: Mapping[str, str] = os.environ) -> ToolchainConfig:
    path = environ.get(CONFIG_ENV)
    if path:
        return load_config(path)
    return ToolchainConfig()


def root_from_env(environ: Mapping[str, str] = os.environ) -> Path:
    return Path(environ.get(ROOT_ENV) or Path.cwd())
