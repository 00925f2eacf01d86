import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import requests

from rustbundle.config import CHUNK_SIZE
from rustbundle.errors import EmptyDownload, FetchError, HttpError, WriteError

log = logging.getLogger(__name__)

MB = 1024 * 1024


@dataclass(frozen=True)
class Progress:
    received: int
    # None when the server sent no Content-Length.
    total: Optional[int] = None

    @property
    def percent(self) -> Optional[float]:
        if not self.total:
            return None
        return self.received * 100 / self.total


ProgressCallback = Callable[[Progress], None]


def print_progress(progress: Progress, stream=None):
    stream = stream or sys.stdout
    if progress.percent is not None:
        line = f'{progress.percent:.1f}% [{progress.received / MB:.2f}MB / {progress.total / MB:.2f}MB]'
    else:
        line = f'Received: {progress.received / MB:.2f} MB'
    print(f'\r   > {line}', end='', file=stream, flush=True)


def _content_length(resp) -> Optional[int]:
    try:
        total = int(resp.headers.get('content-length', ''))
    except ValueError:
        return None
    return total if total > 0 else None


def _remove(path: Path):
    if path.is_file() or path.is_symlink():
        path.unlink()


def fetch(url: str, dest, *, on_progress: Optional[ProgressCallback] = None,
          chunk_size: int = CHUNK_SIZE, session=None) -> Path:
    """Stream `url` into `dest`, replacing whatever was there.

    The body is written chunk by chunk and never held in memory. On any
    failure nothing is left at `dest`. On success the file is flushed,
    synced and closed.
    """
    dest = Path(dest)
    try:
        dest.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise WriteError(url, dest, e) from e
    http = session or requests

    log.info('Fetching %s', url)
    try:
        resp = http.get(url, stream=True)
    except requests.exceptions.RequestException as e:
        _remove(dest)
        raise FetchError(f'Request failed: {e}', url=url) from e

    with resp:
        if not resp.ok:
            _remove(dest)
            raise HttpError(url, resp.status_code, resp.reason)

        total = _content_length(resp)
        received = 0
        try:
            with open(dest, 'wb') as f:
                for chunk in resp.iter_content(chunk_size):
                    if not chunk:
                        continue
                    f.write(chunk)
                    received += len(chunk)
                    if on_progress is not None:
                        on_progress(Progress(received, total))
                f.flush()
                os.fsync(f.fileno())
        # RequestException subclasses OSError, so it must be matched first.
        except requests.exceptions.RequestException as e:
            _remove(dest)
            raise FetchError(f'Connection broken: {e}', url=url) from e
        except OSError as e:
            _remove(dest)
            raise WriteError(url, dest, e) from e

    if received == 0:
        _remove(dest)
        raise EmptyDownload(url)
    log.info('Downloaded %.2f MB to %s', received / MB, dest)
    return dest


class ConsoleProgress:
    """Single overwritten status line per download."""

    def __init__(self, stream=None):
        self.stream = stream
        self.active = False

    def __call__(self, progress: Progress):
        print_progress(progress, self.stream)
        self.active = True

    def finish(self):
        if self.active:
            print(file=self.stream or sys.stdout)
            self.active = False
