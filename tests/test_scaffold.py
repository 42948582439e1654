from datetime import datetime, timedelta, timezone

import pytest

from quire.errors import ScaffoldError
from quire.extractors import parse_frontmatter
from quire.lint import Linter
from quire.scaffold import new_post, render_frontmatter

PLUS_ONE = timezone(timedelta(hours=1))


def test_new_post_writes_lint_clean_file(tmp_path):
    now = datetime(2024, 3, 1, 9, 30, 15, 123, tzinfo=PLUS_ONE)
    path = new_post(tmp_path / "posts", "ZIO Layers: a tour", now=now)
    assert path.name == "2024-03-01-zio-layers-a-tour.md"

    text = path.read_text(encoding="utf-8")
    assert "date: 2024-03-01T09:30:15+01:00\n" in text
    assert "draft: true\n" in text
    assert text.rstrip().endswith("# ZIO Layers: a tour")

    frontmatter, _ = parse_frontmatter(text)
    assert frontmatter["title"] == "ZIO Layers: a tour"
    assert frontmatter["date"] == now.replace(microsecond=0)
    assert Linter().lint_file(path) == []


def test_new_post_published_flag(tmp_path):
    now = datetime(2024, 3, 1, tzinfo=timezone.utc)
    path = new_post(tmp_path, "Hello", draft=False, now=now)
    assert "draft: false\n" in path.read_text(encoding="utf-8")


def test_new_post_refuses_duplicates(tmp_path):
    first = datetime(2024, 3, 1, tzinfo=timezone.utc)
    new_post(tmp_path, "Git tips", now=first)
    with pytest.raises(ScaffoldError, match="already exists"):
        new_post(tmp_path, "Git tips", now=first)
    with pytest.raises(ScaffoldError, match="slug 'git-tips'"):
        new_post(tmp_path, "Git Tips!", now=first + timedelta(days=3))


def test_new_post_requires_title(tmp_path):
    with pytest.raises(ScaffoldError):
        new_post(tmp_path, "   ")


def test_long_title_stays_on_one_line():
    now = datetime(2024, 3, 1, tzinfo=timezone.utc)
    title = " ".join(["Scala"] * 250) + ": a retrospective"
    text = render_frontmatter(title, now, draft=True)
    title_lines = [line for line in text.splitlines() if line.startswith("title:")]
    assert len(title_lines) == 1
    assert text.splitlines()[2].startswith("date: ")
    frontmatter, _ = parse_frontmatter(text)
    assert frontmatter["title"] == title
