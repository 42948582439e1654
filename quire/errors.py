"""Exceptions raised by Quire.

Library code raises these; the CLI turns them into readable messages
and a non-zero exit status.
"""

from __future__ import annotations

from pathlib import Path


class QuireError(Exception):
    """Base class for all Quire errors."""


class ConfigError(QuireError):
    """Invalid quire.yaml contents."""


class FrontMatterError(QuireError):
    """Front matter block is present but cannot be used.

    Attributes:
        message: Human-readable description of the problem.
        line: 1-based line number inside the file, when known.
    """

    def __init__(self, message: str, line: int | None = None):
        self.message = message
        self.line = line
        where = f" (line {line})" if line is not None else ""
        super().__init__(f"{message}{where}")


class PostError(QuireError):
    """Error while loading or rendering a post, with file context.

    Attributes:
        source_path: Path to the post that caused the error.
        message: Human-readable error message.
        original_error: The original exception that was caught.
    """

    def __init__(
        self,
        source_path: Path,
        message: str,
        original_error: Exception | None = None,
    ):
        self.source_path = source_path
        self.message = message
        self.original_error = original_error
        super().__init__(f"{source_path}: {message}")


class ScaffoldError(QuireError):
    """A new post could not be created."""
