"""Failures raised while installing a toolchain.

Every error keeps a ``context`` mapping (url, path, status...) for the
diagnostic line, and a ``step`` naming the installer state it escaped from.
"""

from typing import Mapping, Optional


class ToolchainError(Exception):
    def __init__(self, message: str, *, context: Optional[Mapping[str, object]] = None):
        super().__init__(message)
        self.context = dict(context or {})
        self.step: Optional[str] = None

    def __str__(self) -> str:
        parts = [super().__str__()]
        for k, v in self.context.items():
            if v is not None and v != '':
                parts.append(f'{k}={v}')
        return ' '.join(parts)


class ConfigError(ToolchainError):
    pass


class UnsupportedPlatform(ToolchainError):
    def __init__(self, platform_key: str):
        super().__init__(f'Unsupported platform: {platform_key}')
        self.platform_key = platform_key


class FetchError(ToolchainError):
    def __init__(self, message: str, *, url: str, **context):
        super().__init__(message, context={'url': url, **context})
        self.url = url


class HttpError(FetchError):
    def __init__(self, url: str, status: int, reason: str):
        super().__init__(f'HTTP {status}: {reason}', url=url)
        self.status = status
        self.reason = reason


class EmptyDownload(FetchError):
    def __init__(self, url: str):
        super().__init__('Server returned an empty body', url=url)


class WriteError(FetchError):
    def __init__(self, url: str, path, cause: OSError):
        super().__init__(f'Cannot write archive: {cause}', url=url, path=path)
        self.path = path


class ExtractError(ToolchainError):
    def __init__(self, message: str, *, archive, returncode: Optional[int] = None):
        super().__init__(message, context={'archive': archive, 'returncode': returncode})
        self.archive = archive
        self.returncode = returncode


class AssembleError(ToolchainError):
    pass
