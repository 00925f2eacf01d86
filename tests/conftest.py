"""Shared fixtures: fake rust dist archives and staging trees."""

import io
import tarfile
from pathlib import Path

import pytest

HOST = 'x86_64-unknown-linux-gnu'
MTIME = 1_700_000_000


def write_tree(root: Path, files: dict):
    for rel, content in files.items():
        data, mode = content if isinstance(content, tuple) else (content, 0o644)
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        path.chmod(mode)


def write_archive(path: Path, wrapper: str, files: dict) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with tarfile.open(path, 'w:xz') as tar:
        for rel, content in sorted(files.items()):
            data, mode = content if isinstance(content, tuple) else (content, 0o644)
            info = tarfile.TarInfo(f'{wrapper}/{rel}')
            info.size = len(data)
            info.mode = mode
            info.mtime = MTIME
            tar.addfile(info, io.BytesIO(data))
    return path


def rust_files(host: str = HOST) -> dict:
    # rustc deliberately not executable, like some upstream archives.
    return {
        'install.sh': (b'#!/bin/sh\n', 0o755),
        'rustc/bin/rustc': (b'rustc-binary', 0o644),
        'rustc/bin/rustdoc': (b'rustdoc-binary', 0o755),
        'rustc/lib/librustc_driver.so': b'driver',
        'cargo/bin/cargo': (b'cargo-binary', 0o755),
        f'rust-std-{host}/lib/rustlib/{host}/lib/libstd.rlib': b'std-' + host.encode(),
    }


def std_files(triple: str) -> dict:
    return {
        'install.sh': (b'#!/bin/sh\n', 0o755),
        f'rust-std-{triple}/lib/rustlib/{triple}/lib/libstd.rlib': b'std-' + triple.encode(),
    }


@pytest.fixture
def staging(tmp_path: Path) -> Path:
    """Extracted primary archive, laid out the way the installer stages it."""
    root = tmp_path / 'extract'
    write_tree(root / f'rust-1.92.0-{HOST}', rust_files())
    return root
