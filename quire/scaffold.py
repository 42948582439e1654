"""Creation of new post files.

New posts get a ``YYYY-MM-DD-<slug>.md`` filename and a front matter
block that already passes ``quire lint``.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

import yaml

from .errors import ScaffoldError
from .utils import is_markdown, slugify

logger = logging.getLogger(__name__)


def existing_slugs(folder: Path) -> dict[str, Path]:
    """Map the slug of every post already in a folder to its file."""
    slugs: dict[str, Path] = {}
    if folder.exists():
        for f in sorted(folder.iterdir()):
            if f.is_file() and is_markdown(f):
                slugs[slugify(f.stem)] = f
    return slugs


def render_frontmatter(title: str, date: datetime, draft: bool) -> str:
    """Serialize the front matter block for a new post.

    The date is written unquoted in ISO-8601 with its UTC offset so YAML
    loaders read it back as a timestamp.
    """
    title_yaml = yaml.safe_dump(
        {"title": title},
        allow_unicode=True,
        default_flow_style=False,
        width=float("inf"),
    ).strip()
    lines = [
        "---",
        title_yaml,
        f"date: {date.isoformat(timespec='seconds')}",
        f"draft: {'true' if draft else 'false'}",
        "---",
    ]
    return "\n".join(lines) + "\n"


def new_post(
    content_dir: Path,
    title: str,
    draft: bool = True,
    now: datetime | None = None,
) -> Path:
    """Create a new post file.

    Args:
        content_dir: Folder to create the post in (created if missing).
        title: Post title.
        draft: Value of the ``draft`` key.
        now: Timestamp to use; defaults to the current local time.

    Returns:
        Path of the created file.

    Raises:
        ScaffoldError: If the title is empty or the file or slug already exists.
    """
    title = title.strip()
    if not title:
        raise ScaffoldError("Title cannot be empty")
    stamp = now or datetime.now().astimezone()
    if stamp.tzinfo is None:
        stamp = stamp.astimezone()
    slug = slugify(title)
    target = content_dir / f"{stamp.strftime('%Y-%m-%d')}-{slug}.md"

    if target.exists():
        raise ScaffoldError(f"File already exists: {target}")
    taken = existing_slugs(content_dir)
    if slug in taken:
        raise ScaffoldError(f"A post with slug '{slug}' already exists: {taken[slug].name}")

    content_dir.mkdir(parents=True, exist_ok=True)
    content = render_frontmatter(title, stamp, draft) + f"\n# {title}\n\n"
    target.write_text(content, encoding="utf-8")
    logger.debug("created %s", target)
    return target
