"""Metadata extractors for Quire.

This module parses the YAML front matter of a post and derives the
fallback metadata used when a key is absent. Each extractor handles a
single type of metadata.

Key objects:
- parse_frontmatter: Strict front matter parser (raises FrontMatterError).
- extract_frontmatter: Lenient variant that never raises.
- parse_timestamp: Turn a YAML/ISO-8601 value into a datetime.
- TitleExtractor, DateExtractor, DescriptionExtractor: Body/filename fallbacks.
- CompositeMetadataExtractor: Runs the extractors and merges their results.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any

import yaml

from .errors import FrontMatterError
from .utils import extract_date_from_name, first_paragraph, titleize

FRONTMATTER_OPEN_RE = re.compile(r"\A---[ \t]*\r?\n")
FRONTMATTER_RE = re.compile(
    r"\A---[ \t]*\r?\n(.*?)(?:\r?\n)?^---[ \t]*(?:\r?\n|\Z)",
    re.DOTALL | re.MULTILINE,
)


def has_frontmatter(text: str) -> bool:
    """Return True if the text opens with a ``---`` line."""
    return FRONTMATTER_OPEN_RE.match(text) is not None


def parse_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Split a document into its front matter mapping and body.

    Args:
        text: Raw file content.

    Returns:
        Tuple of (front matter dict, remaining content). Documents without
        a front matter block yield an empty dict and the text unchanged.

    Raises:
        FrontMatterError: If the block is unclosed, is not valid YAML, or
            does not contain a mapping.
    """
    if not has_frontmatter(text):
        return {}, text
    match = FRONTMATTER_RE.match(text)
    if not match:
        raise FrontMatterError("front matter block is not closed with '---'", line=1)
    try:
        data = yaml.safe_load(match.group(1))
    except yaml.YAMLError as exc:
        line = None
        mark = getattr(exc, "problem_mark", None)
        if mark is not None:
            # +1 for 1-based numbering, +1 for the opening '---' line
            line = mark.line + 2
        problem = getattr(exc, "problem", None) or str(exc)
        raise FrontMatterError(f"invalid YAML: {problem}", line=line) from exc
    except ValueError as exc:
        # PyYAML raises ValueError for timestamps that are not real dates
        raise FrontMatterError(f"invalid YAML: {exc}") from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise FrontMatterError(
            f"front matter must be a mapping, got {type(data).__name__}", line=2
        )
    return data, text[match.end() :]


def extract_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Extract YAML frontmatter from content, ignoring parse failures.

    Args:
        text: Raw file content.

    Returns:
        Tuple of (frontmatter dict, remaining content).
    """
    try:
        return parse_frontmatter(text)
    except FrontMatterError:
        return {}, text


def parse_timestamp(value: Any) -> datetime:
    """Convert a front matter ``date`` value to a datetime.

    PyYAML already turns unquoted timestamps into ``datetime``/``date``
    objects; quoted values arrive as strings and are parsed as ISO-8601.

    Raises:
        ValueError: If the value is not a recognizable timestamp.
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            raise ValueError(f"not an ISO-8601 timestamp: {value!r}") from None
    raise ValueError(f"expected a timestamp, got {type(value).__name__}")


def has_offset(value: datetime) -> bool:
    """Return True if the datetime carries an explicit UTC offset."""
    return value.tzinfo is not None and value.utcoffset() is not None


def ensure_aware(value: datetime) -> datetime:
    """Attach UTC to naive datetimes so all post dates compare."""
    if has_offset(value):
        return value
    return value.replace(tzinfo=timezone.utc)


class TitleExtractor:
    """Extracts title from content or filename.

    Looks for a level-1 heading (# Title) in the body,
    falling back to titleizing the filename.
    """

    def extract(self, content: str, path: Path) -> dict[str, Any]:
        in_fence = False
        for line in content.splitlines():
            stripped = line.strip()
            if stripped.startswith(("```", "~~~")):
                in_fence = not in_fence
                continue
            if not in_fence and stripped.startswith("# "):
                return {"title": stripped[2:].strip()}
        return {"title": titleize(path.name)}


class DateExtractor:
    """Extracts date from filename or file metadata.

    Looks for YYYY-MM-DD prefix in filename, falling back
    to file modification time. Both are returned in UTC.
    """

    def extract(self, content: str, path: Path) -> dict[str, Any]:
        found = extract_date_from_name(path.stem)
        if found is None:
            return {"date": datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)}
        return {"date": found.replace(tzinfo=timezone.utc)}


class DescriptionExtractor:
    """Extracts a short description from the first prose paragraph."""

    def extract(self, content: str, path: Path) -> dict[str, Any]:
        return {"description": first_paragraph(content)}


class CompositeMetadataExtractor:
    """Combines multiple metadata extractors.

    The front matter is split off first; the remaining extractors run on
    the body only and their results are merged in order, so later
    extractors override earlier ones. The merged dict always carries the
    ``frontmatter`` and ``body`` keys.
    """

    def __init__(self, extractors: list | None = None):
        """Initialize with a list of extractors.

        Args:
            extractors: List of MetadataExtractor implementations.
                       If None, uses default extractors.
        """
        if extractors is None:
            self._extractors = [
                TitleExtractor(),
                DateExtractor(),
                DescriptionExtractor(),
            ]
        else:
            self._extractors = list(extractors)

    def add_extractor(self, extractor) -> None:
        self._extractors.append(extractor)

    def extract(self, content: str, path: Path) -> dict[str, Any]:
        """Extract all metadata from content.

        Raises:
            FrontMatterError: If the front matter block is malformed.
        """
        frontmatter, body = parse_frontmatter(content)
        result: dict[str, Any] = {"frontmatter": frontmatter, "body": body}
        for extractor in self._extractors:
            result.update(extractor.extract(body, path))
        return result


# Default composite extractor instance
default_metadata_extractor = CompositeMetadataExtractor()
