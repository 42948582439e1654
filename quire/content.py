"""Content processing for Quire.

This module loads post files, extracts their metadata, renders their
Markdown bodies, and creates Post objects.

Key classes:
- Post: Dataclass representing a blog post with all its metadata.
- FileContentLoader: Discovers post files in a content directory.
- PostBuilder: Builds a Post from a single file.
- ContentProcessor: Facade that loads every post in a directory.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from .errors import FrontMatterError, PostError
from .extractors import (
    CompositeMetadataExtractor,
    default_metadata_extractor,
    ensure_aware,
    parse_timestamp,
)
from .renderers import Heading, RendererRegistry, default_renderer_registry
from .utils import is_draft_name, is_markdown, slugify

logger = logging.getLogger(__name__)


@dataclass
class Post:
    """Represents a blog post with all its metadata and content.

    Attributes:
        title: Human-readable title of the post.
        date: Publication timestamp (always timezone-aware).
        draft: Whether the post is unpublished.
        body: Raw Markdown body without the front matter.
        content: Rendered HTML content.
        slug: URL-friendly slug.
        path: Path to the source file.
        filename: Name of the source file.
        description: Short description, from front matter or first paragraph.
        tags: Tags listed in the front matter.
    """

    title: str
    date: datetime
    draft: bool
    body: str
    content: str
    slug: str
    path: Path
    filename: str
    description: str = ""
    tags: list[str] = field(default_factory=list)
    frontmatter: dict[str, Any] = field(default_factory=dict)
    toc: list[Heading] = field(default_factory=list)


class FileContentLoader:
    """Loads post files from a directory.

    Only handles file discovery: Markdown files anywhere below the
    content directory, skipping folders whose name starts with ``_`` or
    ``.``. Files are returned in sorted order.

    Attributes:
        content_dir: Directory containing posts.
    """

    def __init__(self, content_dir: Path):
        self.content_dir = content_dir

    def iter_files(self, include_drafts: bool = False) -> list[Path]:
        """Iterate over all post files.

        Args:
            include_drafts: Whether to include files named ``_*.md``.

        Returns:
            List of paths to post files.
        """
        files: list[Path] = []
        for path in sorted(self.content_dir.rglob("*")):
            if path.is_dir():
                continue
            rel = path.relative_to(self.content_dir)
            if any(part.startswith(("_", ".")) for part in rel.parts[:-1]):
                continue
            if is_draft_name(rel) and not include_drafts:
                continue
            if is_markdown(path):
                files.append(path)
        logger.debug("found %d post files in %s", len(files), self.content_dir)
        return files


class PostBuilder:
    """Builds Post objects from source files.

    Front matter values win over the fallbacks computed by the metadata
    extractors (first heading, filename date, file mtime).

    Attributes:
        renderer_registry: Registry of content renderers.
        metadata_extractor: Composite metadata extractor.
    """

    def __init__(
        self,
        renderer_registry: RendererRegistry | None = None,
        metadata_extractor: CompositeMetadataExtractor | None = None,
    ):
        self.renderer_registry = renderer_registry or default_renderer_registry
        self.metadata_extractor = metadata_extractor or default_metadata_extractor

    def build(self, path: Path) -> Post:
        """Build a Post object from a source file.

        Args:
            path: Path to the source file.

        Returns:
            Post object.

        Raises:
            PostError: If the front matter is malformed, holds values of the
                wrong type, or the body cannot be rendered.
        """
        logger.debug("loading %s", path)
        try:
            raw = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise PostError(path, f"Cannot read file: {exc}", exc) from exc
        try:
            metadata = self.metadata_extractor.extract(raw, path)
        except FrontMatterError as exc:
            raise PostError(path, f"Front matter error: {exc}", exc) from exc
        frontmatter: dict[str, Any] = metadata.get("frontmatter", {})
        body: str = metadata.get("body", raw)

        renderer = self.renderer_registry.get_renderer(path)
        if renderer is None:
            raise PostError(path, f"No renderer for {path.suffix} files")
        try:
            content, toc = renderer.render(body)
        except Exception as exc:
            raise PostError(path, f"Render error: {type(exc).__name__}: {exc}", exc) from exc

        return Post(
            title=self._title(path, frontmatter, metadata),
            date=self._date(path, frontmatter, metadata),
            draft=self._draft(path, frontmatter),
            body=body,
            content=content,
            slug=slugify(path.stem),
            path=path,
            filename=path.name,
            description=self._description(frontmatter, metadata),
            tags=self._tags(path, frontmatter),
            frontmatter=frontmatter,
            toc=toc,
        )

    def _title(
        self, path: Path, frontmatter: dict[str, Any], metadata: dict[str, Any]
    ) -> str:
        if "title" not in frontmatter:
            return metadata["title"]
        title = frontmatter["title"]
        if not isinstance(title, str):
            raise PostError(path, f"title must be a string, got {type(title).__name__}")
        return title

    def _date(
        self, path: Path, frontmatter: dict[str, Any], metadata: dict[str, Any]
    ) -> datetime:
        if "date" not in frontmatter:
            return metadata["date"]
        try:
            return ensure_aware(parse_timestamp(frontmatter["date"]))
        except ValueError as exc:
            raise PostError(path, f"Invalid date: {exc}", exc) from exc

    def _draft(self, path: Path, frontmatter: dict[str, Any]) -> bool:
        draft = frontmatter.get("draft", False)
        if not isinstance(draft, bool):
            raise PostError(path, f"draft must be true or false, got {draft!r}")
        return draft or is_draft_name(path)

    def _description(self, frontmatter: dict[str, Any], metadata: dict[str, Any]) -> str:
        description = frontmatter.get("description")
        if isinstance(description, str) and description.strip():
            return description.strip()
        return metadata.get("description", "")

    def _tags(self, path: Path, frontmatter: dict[str, Any]) -> list[str]:
        tags = frontmatter.get("tags") or []
        if isinstance(tags, str):
            return [tags]
        if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
            raise PostError(path, "tags must be a list of strings")
        return list(tags)


class ContentProcessor:
    """Facade for loading every post in a content directory.

    Attributes:
        content_dir: Directory containing posts.
    """

    def __init__(
        self,
        content_dir: Path,
        content_loader: FileContentLoader | None = None,
        post_builder: PostBuilder | None = None,
    ):
        self.content_dir = content_dir
        self._content_loader = content_loader or FileContentLoader(content_dir)
        self._post_builder = post_builder or PostBuilder()

    def load(self, include_drafts: bool = False) -> list[Post]:
        """Load all post files and create Post objects.

        Args:
            include_drafts: Whether to include posts marked as drafts, either
                by front matter or by a leading underscore in the filename.

        Returns:
            List of Post objects.

        Raises:
            PostError: For the first post that cannot be loaded.
        """
        if not self.content_dir.is_dir():
            raise FileNotFoundError(f"Expected content directory at {self.content_dir}")
        posts: list[Post] = []
        for path in self._content_loader.iter_files(include_drafts):
            post = self._post_builder.build(path)
            if post.draft and not include_drafts:
                logger.debug("skipping draft %s", path)
                continue
            posts.append(post)
        return posts

    def load_file(self, path: Path) -> Post:
        """Load a single post file, whether or not it is a draft."""
        return self._post_builder.build(path)
