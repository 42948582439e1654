from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence

from .content import Post


class PostCollection(Sequence[Post]):
    """Lightweight helper for working with lists of Posts in templates and code."""

    def __init__(self, posts: Iterable[Post]):
        self._posts = list(posts)

    def __iter__(self) -> Iterator[Post]:
        return iter(self._posts)

    def __len__(self) -> int:
        return len(self._posts)

    def __getitem__(self, item):
        return self._posts[item]

    def with_tag(self, tag: str) -> PostCollection:
        return PostCollection(p for p in self._posts if tag in p.tags)

    def drafts(self) -> PostCollection:
        return PostCollection(p for p in self._posts if p.draft)

    def published(self) -> PostCollection:
        return PostCollection(p for p in self._posts if not p.draft)

    def sorted(self, reverse: bool = True) -> PostCollection:
        """Sort posts by date, then by filename.

        Args:
            reverse: If True (default), newest first. If False, oldest first.

        Returns:
            A new PostCollection with sorted posts.
        """
        return PostCollection(
            sorted(self._posts, key=lambda p: (p.date, p.filename.lower()), reverse=reverse)
        )

    def latest(self, count: int = 5) -> PostCollection:
        return PostCollection(self.sorted()[:count])

    def by_year(self) -> dict[int, PostCollection]:
        """Group posts by publication year, newest year and post first."""
        years: dict[int, list[Post]] = {}
        for post in self.sorted():
            years.setdefault(post.date.year, []).append(post)
        return {year: PostCollection(posts) for year, posts in years.items()}

    def tags(self) -> dict[str, PostCollection]:
        """Map each tag to the posts carrying it, tags sorted alphabetically."""
        index: dict[str, list[Post]] = {}
        for post in self._posts:
            for tag in post.tags:
                index.setdefault(tag, []).append(post)
        return {tag: PostCollection(index[tag]) for tag in sorted(index)}

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"PostCollection({len(self._posts)} posts)"
