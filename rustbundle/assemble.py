"""Merge extracted component trees into one relocatable toolchain.

The rust dist archives ship one directory per component (`rustc`, `cargo`,
`rust-std-<triple>`, ...). Only the parts a standalone toolchain needs are
copied into the canonical layout::

    bin/                       rustc, cargo, rustdoc...
    lib/                       librustc_driver and friends
    lib/rustlib/<triple>/      one per installed std

The tree is built next to the install directory and swapped in at the end so
that the install directory never mixes two runs.
"""

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from rustbundle.errors import AssembleError

log = logging.getLogger(__name__)

COMPILER = 'rustc'
PACKAGE_MANAGER = 'cargo'


def std_component(triple: str) -> str:
    return f'rust-std-{triple}'


@dataclass(frozen=True)
class AssemblyReport:
    install_dir: Path
    host_triple: str
    targets: Tuple[str, ...]
    missing: Tuple[str, ...]

    @property
    def complete(self) -> bool:
        return not self.missing


def find_component(staging_root: Path, name: str) -> Path:
    """Locate a component directly under `staging_root` or one archive directory down."""
    direct = staging_root / name
    if direct.is_dir() or not staging_root.is_dir():
        return direct
    for archive_dir in sorted(staging_root.iterdir()):
        candidate = archive_dir / name
        if archive_dir.is_dir() and candidate.is_dir():
            return candidate
    return direct


def _copy_dir(src: Path, dst: Path, missing: List[str]) -> bool:
    if not src.is_dir():
        log.warning('Source not found: %s', src)
        missing.append(str(src))
        return False
    shutil.copytree(src, dst, symlinks=True, dirs_exist_ok=True)
    return True


def _remove_tree(path: Path):
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    elif path.exists() or path.is_symlink():
        path.unlink()


def replace_dir(src: Path, dst: Path):
    """Move `src` to `dst`, discarding the previous `dst` only once `src` is in place."""
    old = dst.with_name(dst.name + '.old')
    _remove_tree(old)
    if dst.exists() or dst.is_symlink():
        dst.rename(old)
    src.rename(dst)
    _remove_tree(old)


def assemble(staging_root, host_triple: str, install_dir, *, targets: Iterable[str] = (),
             work_dir=None, strict: bool = False) -> AssemblyReport:
    staging_root, install_dir = Path(staging_root), Path(install_dir)
    work_dir = Path(work_dir) if work_dir else install_dir.with_name(install_dir.name + '.tmp')
    bin_dir, lib_dir = work_dir / 'bin', work_dir / 'lib'
    rustlib_dir = lib_dir / 'rustlib'
    missing: List[str] = []

    log.info('Assembling toolchain in %s', work_dir)
    _remove_tree(work_dir)
    bin_dir.mkdir(parents=True)
    lib_dir.mkdir()

    compiler = find_component(staging_root, COMPILER)
    _copy_dir(compiler / 'bin', bin_dir, missing)
    _copy_dir(compiler / 'lib', lib_dir, missing)

    # cargo lands next to rustc; on a name clash the later copy wins.
    _copy_dir(find_component(staging_root, PACKAGE_MANAGER) / 'bin', bin_dir, missing)

    host_std = find_component(staging_root, std_component(host_triple))
    _copy_dir(host_std / 'lib' / 'rustlib', rustlib_dir, missing)

    installed = []
    if (rustlib_dir / host_triple).is_dir():
        installed.append(host_triple)
    for triple in targets:
        if triple == host_triple:
            continue
        std = find_component(staging_root, std_component(triple))
        if _copy_dir(std / 'lib' / 'rustlib' / triple, rustlib_dir / triple, missing):
            installed.append(triple)

    if missing and strict:
        _remove_tree(work_dir)
        raise AssembleError(
            f'{len(missing)} toolchain component(s) missing',
            context={'missing': ', '.join(missing)},
        )

    replace_dir(work_dir, install_dir)
    if missing:
        log.warning('Toolchain assembled with %d missing component(s)', len(missing))
    else:
        log.info('Toolchain assembled at %s', install_dir)
    return AssemblyReport(install_dir, host_triple, tuple(installed), tuple(missing))
