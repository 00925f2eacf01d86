from rustbundle.config import ToolchainConfig, config_from_env, load_config
from rustbundle.errors import (
    AssembleError,
    ConfigError,
    EmptyDownload,
    ExtractError,
    FetchError,
    HttpError,
    ToolchainError,
    UnsupportedPlatform,
    WriteError,
)
from rustbundle.installer import InstallResult, Layout, install, main
from rustbundle.platforms import ArchiveKind, ArchiveSpec, Resolution, Resolver, host_platform_key

__version__ = '0.1.0'

__all__ = [
    'ArchiveKind',
    'ArchiveSpec',
    'AssembleError',
    'ConfigError',
    'EmptyDownload',
    'ExtractError',
    'FetchError',
    'HttpError',
    'InstallResult',
    'Layout',
    'Resolution',
    'Resolver',
    'ToolchainConfig',
    'ToolchainError',
    'UnsupportedPlatform',
    'WriteError',
    'config_from_env',
    'host_platform_key',
    'install',
    'load_config',
    'main',
]
