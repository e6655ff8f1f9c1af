"""Error types for tinytemple.

Every stage of the pipeline raises its own error kind so callers can tell a
broken config apart from a broken template or a full disk. All of them carry
the path of the file involved.
"""

from __future__ import annotations

from pathlib import Path


class TinyTempleError(Exception):
    """Base class for all tinytemple errors.

    Attributes:
        path: File or directory the error relates to, if known.
        message: Human-readable error message.
    """

    def __init__(self, message: str, path: Path | None = None):
        self.path = path
        self.message = message
        super().__init__(f"{path}: {message}" if path is not None else message)


class ConfigError(TinyTempleError):
    """The configuration file is missing, unreadable or malformed."""


class ScanError(TinyTempleError):
    """The source directory could not be listed."""


class RenderError(TinyTempleError):
    """A template could not be rendered.

    Attributes:
        variable: Dotted variable path that failed to resolve, if any.
        line: Line in the template where the problem was found, if known.
    """

    def __init__(
        self,
        message: str,
        path: Path | None = None,
        variable: str | None = None,
        line: int | None = None,
    ):
        self.variable = variable
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message, path)


class WriteError(TinyTempleError):
    """Writing or copying into the output directory failed."""
