import enum
import platform
import sys
from dataclasses import dataclass
from typing import Optional, Tuple

from rustbundle.config import ToolchainConfig
from rustbundle.errors import UnsupportedPlatform

ARCHIVE_SUFFIX = '.tar.xz'

ARCH_ALIASES = {
    'x86_64': 'x64',
    'amd64': 'x64',
    'aarch64': 'arm64',
    'arm64': 'arm64',
    'i386': 'ia32',
    'i686': 'ia32',
}


def host_platform_key(sys_platform: Optional[str] = None, machine: Optional[str] = None) -> str:
    sys_platform = sys_platform or sys.platform
    machine = (machine or platform.machine()).lower()
    if sys_platform.startswith('linux'):
        sys_platform = 'linux'
    return f'{sys_platform}-{ARCH_ALIASES.get(machine, machine)}'


class ArchiveKind(enum.Enum):
    PRIMARY = 'primary'
    SUPPLEMENTARY = 'supplementary'


@dataclass(frozen=True)
class ArchiveSpec:
    url: str
    kind: ArchiveKind
    triple: str

    @property
    def filename(self) -> str:
        return self.url.rsplit('/', 1)[-1]

    @property
    def name(self) -> str:
        filename = self.filename
        if filename.endswith(ARCHIVE_SUFFIX):
            filename = filename[:-len(ARCHIVE_SUFFIX)]
        return filename


@dataclass(frozen=True)
class Resolution:
    platform_key: str
    host_triple: str
    primary: ArchiveSpec
    supplementary: Tuple[ArchiveSpec, ...]

    @property
    def archives(self) -> Tuple[ArchiveSpec, ...]:
        return (self.primary,) + self.supplementary

    @property
    def targets(self) -> Tuple[str, ...]:
        return tuple(spec.triple for spec in self.supplementary)


class Resolver:
    def __init__(self, config: ToolchainConfig):
        self.config = config

    def target_triple(self, platform_key: str) -> str:
        triple = self.config.platforms.get(platform_key, '')
        if not triple:
            raise UnsupportedPlatform(platform_key)
        return triple

    def resolve(self, platform_key: str) -> Resolution:
        triple = self.target_triple(platform_key)
        cfg = self.config
        primary = ArchiveSpec(
            url=f'{cfg.dist_root}/rust-{cfg.version}-{triple}{ARCHIVE_SUFFIX}',
            kind=ArchiveKind.PRIMARY,
            triple=triple,
        )

        supplementary = []
        host_os = platform_key.split('-', 1)[0]
        if host_os == cfg.cross_host_os:
            for target in cfg.cross_targets:
                if target == triple:
                    continue
                supplementary.append(ArchiveSpec(
                    url=f'{cfg.dist_root}/rust-std-{cfg.version}-{target}{ARCHIVE_SUFFIX}',
                    kind=ArchiveKind.SUPPLEMENTARY,
                    triple=target,
                ))
        return Resolution(platform_key, triple, primary, tuple(supplementary))
