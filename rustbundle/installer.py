import logging
import shutil
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from rustbundle.assemble import assemble
from rustbundle.config import ToolchainConfig, config_from_env, root_from_env
from rustbundle.errors import ToolchainError
from rustbundle.extract import extract
from rustbundle.fetch import ConsoleProgress, fetch
from rustbundle.log import configure_logging
from rustbundle.platforms import ArchiveKind, Resolver, host_platform_key

log = logging.getLogger(__name__)

EXECUTABLE_MODE = 0o755


@dataclass(frozen=True)
class Layout:
    """Scratch and install directories, all siblings under `root`."""

    root: Path

    @property
    def download_dir(self) -> Path:
        return self.root / 'download'

    @property
    def extract_dir(self) -> Path:
        return self.root / 'extract'

    @property
    def install_dir(self) -> Path:
        return self.root / 'dist'

    @property
    def work_dir(self) -> Path:
        return self.root / 'dist.tmp'


@dataclass(frozen=True)
class InstallResult:
    install_dir: Path
    host_triple: str
    targets: Tuple[str, ...]
    executable: Optional[Path]
    missing: Tuple[str, ...]

    @property
    def complete(self) -> bool:
        return not self.missing and self.executable is not None


@contextmanager
def _step(name: str, cleanup: Optional[Path] = None):
    log.debug('Entering step %s', name)
    try:
        yield
    except (ToolchainError, OSError) as e:
        if cleanup is not None and cleanup.is_file():
            cleanup.unlink()
        if isinstance(e, ToolchainError):
            if e.step is None:
                e.step = name
            raise
        err = ToolchainError(str(e), context={'path': e.filename})
        err.step = name
        raise err from e


def _reset_dir(path: Path):
    if path.exists():
        shutil.rmtree(path)
    path.mkdir(parents=True)


def _mark_executable(path: Path) -> Optional[Path]:
    if not path.is_file():
        log.warning('Expected executable not found: %s', path)
        return None
    # Some dist archives ship the binary without exec bits.
    path.chmod(EXECUTABLE_MODE)
    return path


def install(config: Optional[ToolchainConfig] = None, *, platform_key: Optional[str] = None,
            root=None, on_progress=None, fetcher=None, extractor=None) -> InstallResult:
    config = config or ToolchainConfig()
    fetcher = fetcher or fetch
    extractor = extractor or extract
    platform_key = platform_key or host_platform_key()
    layout = Layout(Path(root) if root is not None else Path.cwd())

    # Nothing touches the disk before the platform is known to be supported.
    with _step('resolve-platform'):
        resolution = Resolver(config).resolve(platform_key)
    log.info('Installing rust %s for %s (%s)', config.version, platform_key, resolution.host_triple)

    with _step('prepare'):
        _reset_dir(layout.download_dir)
        _reset_dir(layout.extract_dir)

    for spec in resolution.archives:
        role = 'primary' if spec.kind is ArchiveKind.PRIMARY else 'supplementary'
        archive = layout.download_dir / spec.filename
        with _step(f'fetch-{role}', cleanup=archive):
            try:
                fetcher(spec.url, archive, on_progress=on_progress, chunk_size=config.chunk_size)
            finally:
                finish = getattr(on_progress, 'finish', None)
                if finish is not None:
                    finish()
        with _step(f'extract-{role}', cleanup=archive):
            extractor(archive, layout.extract_dir / spec.name)
            archive.unlink()

    with _step('assemble'):
        report = assemble(
            layout.extract_dir,
            resolution.host_triple,
            layout.install_dir,
            targets=resolution.targets,
            work_dir=layout.work_dir,
            strict=config.strict,
        )

    with _step('verify'):
        executable = _mark_executable(layout.install_dir / 'bin' / config.binary_name)

    if not config.keep_scratch:
        with _step('cleanup'):
            shutil.rmtree(layout.download_dir)
            shutil.rmtree(layout.extract_dir)

    return InstallResult(
        install_dir=layout.install_dir,
        host_triple=resolution.host_triple,
        targets=report.targets,
        executable=executable,
        missing=report.missing,
    )


def main() -> int:
    configure_logging()
    try:
        config = config_from_env()
        result = install(config, root=root_from_env(), on_progress=ConsoleProgress())
    except ToolchainError as e:
        where = f' at {e.step}' if e.step else ''
        log.error('Installation failed%s: %s', where, e)
        return 1

    if result.complete:
        log.info('Success! Rust toolchain ready at: %s', result.install_dir)
    else:
        log.warning('Rust toolchain installed at %s, but incomplete (missing: %s)',
                    result.install_dir, ', '.join(result.missing) or config.binary_name)
    return 0


def main_exit():
    raise SystemExit(main())
