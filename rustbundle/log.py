import logging
import os
import sys

LEVEL_ENV = 'RUSTBUNDLE_LOG_LEVEL'
FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'

_configured = False


def _resolve_level(level):
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).upper())
    return value if isinstance(value, int) else None


def configure_logging(level=None):
    """Attach one stderr handler to the root logger; later calls only adjust the level.

    An unknown level name falls back to INFO with a warning.
    """
    global _configured
    if level is None:
        level = os.environ.get(LEVEL_ENV, 'INFO')
    resolved = _resolve_level(level)
    root = logging.getLogger()
    root.setLevel(resolved if resolved is not None else logging.INFO)
    if not _configured:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(FORMAT, datefmt='%Y-%m-%dT%H:%M:%S%z'))
        root.addHandler(handler)
        _configured = True
    if resolved is None:
        logging.getLogger(__name__).warning('Unknown log level %r, using INFO', level)
