import logging
import subprocess
from pathlib import Path

from rustbundle.errors import ExtractError

log = logging.getLogger(__name__)


def extract(archive, dest, *, tar: str = 'tar') -> Path:
    """Unpack `archive` into `dest`, dropping the archive's top-level folder.

    `dest` is not cleared first; a failed run leaves whatever tar managed to
    write.
    """
    archive, dest = Path(archive), Path(dest)
    dest.mkdir(parents=True, exist_ok=True)
    cmd = [tar, '-xf', str(archive), '--strip-components=1', '-C', str(dest)]
    log.info('Extracting %s into %s', archive.name, dest)
    try:
        proc = subprocess.run(cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE, text=True)
    except OSError as e:
        raise ExtractError(f'Cannot run {tar}: {e}', archive=archive) from e
    if proc.returncode != 0:
        stderr = proc.stderr.strip()
        raise ExtractError(
            f'Tar extraction failed: {stderr}' if stderr else 'Tar extraction failed.',
            archive=archive,
            returncode=proc.returncode,
        )
    return dest
