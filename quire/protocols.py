"""Protocol definitions for Quire.

These protocols describe the seams between the loader, the renderers
and the linter, so alternative implementations (and test doubles) can
be swapped in.
"""

from __future__ import annotations

from abc import abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .lint import LintIssue, PostSource
    from .renderers import Heading


@runtime_checkable
class ContentRenderer(Protocol):
    """Protocol for rendering a post body to HTML."""

    @abstractmethod
    def can_render(self, path: Path) -> bool:
        """Check if this renderer can handle the given file."""
        ...

    @abstractmethod
    def render(self, content: str) -> tuple[str, list[Heading]]:
        """Render content to HTML.

        Args:
            content: Source content to render.

        Returns:
            Tuple of (rendered HTML, list of headings for TOC).
        """
        ...

    @property
    @abstractmethod
    def source_type(self) -> str:
        """Return the source type identifier (e.g., 'markdown')."""
        ...


@runtime_checkable
class MetadataExtractor(Protocol):
    """Protocol for extracting one kind of metadata from a post body."""

    @abstractmethod
    def extract(self, content: str, path: Path) -> dict[str, Any]:
        """Extract metadata from content.

        Args:
            content: Source content.
            path: Path to the source file.

        Returns:
            Dictionary of extracted metadata.
        """
        ...


@runtime_checkable
class ContentLoader(Protocol):
    """Protocol for discovering post files."""

    @abstractmethod
    def iter_files(self, include_drafts: bool = False) -> list[Path]:
        """Return the paths of all post files."""
        ...


@runtime_checkable
class LintRule(Protocol):
    """Protocol for a single content check.

    Rules receive the already-split source of one post and return the
    issues they find; they never raise for content problems.
    """

    code: str

    @abstractmethod
    def check(self, source: PostSource, config: dict[str, Any]) -> list[LintIssue]:
        """Check one post.

        Args:
            source: The parsed post file.
            config: Project configuration.

        Returns:
            Issues found, possibly empty.
        """
        ...
