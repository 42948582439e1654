from datetime import date, datetime, timedelta, timezone
from pathlib import Path

import pytest

from quire.errors import FrontMatterError
from quire.extractors import (
    CompositeMetadataExtractor,
    TitleExtractor,
    extract_frontmatter,
    has_offset,
    parse_frontmatter,
    parse_timestamp,
)


def test_parse_frontmatter_splits_body():
    text = "---\ntitle: Hello\ndraft: false\n---\n# Hello\n"
    data, body = parse_frontmatter(text)
    assert data == {"title": "Hello", "draft": False}
    assert body == "# Hello\n"


def test_parse_frontmatter_edge_cases():
    assert parse_frontmatter("no block here") == ({}, "no block here")
    assert parse_frontmatter("---\n---\nbody") == ({}, "body")
    assert parse_frontmatter("---\ntitle: End\n---") == ({"title": "End"}, "")
    data, body = parse_frontmatter("---\r\ntitle: Windows\r\n---\r\nbody")
    assert data == {"title": "Windows"}
    assert body == "body"


def test_parse_frontmatter_errors():
    with pytest.raises(FrontMatterError, match="not closed"):
        parse_frontmatter("---\ntitle: x\n")
    with pytest.raises(FrontMatterError, match="mapping"):
        parse_frontmatter("---\n- a\n- b\n---\n")
    with pytest.raises(FrontMatterError) as excinfo:
        parse_frontmatter("---\ntitle: ok\ntitle: a: b\n---\n")
    assert excinfo.value.line == 3
    with pytest.raises(FrontMatterError, match="invalid YAML"):
        parse_frontmatter("---\ndate: 2024-13-01\n---\n")


def test_extract_frontmatter_is_lenient():
    text = "---\n- a\n---\nbody"
    assert extract_frontmatter(text) == ({}, text)
    impossible = "---\ndate: 2024-02-30\n---\nbody"
    assert extract_frontmatter(impossible) == ({}, impossible)


def test_parse_timestamp_variants():
    plus_two = timezone(timedelta(hours=2))
    aware = datetime(2023, 5, 1, 10, 0, tzinfo=plus_two)
    assert parse_timestamp(aware) is aware
    assert parse_timestamp(date(2023, 5, 1)) == datetime(2023, 5, 1)
    assert parse_timestamp("2023-05-01T10:00:00+02:00") == aware
    assert parse_timestamp("2023-05-01 08:00:00Z") == datetime(
        2023, 5, 1, 8, 0, tzinfo=timezone.utc
    )
    with pytest.raises(ValueError):
        parse_timestamp("last tuesday")
    with pytest.raises(ValueError):
        parse_timestamp(None)


def test_has_offset():
    assert has_offset(datetime(2023, 1, 1, tzinfo=timezone.utc))
    assert not has_offset(datetime(2023, 1, 1))


def test_title_extractor_ignores_code_fences():
    body = "```bash\n# not a title\n```\n\n# Real Title\n"
    assert TitleExtractor().extract(body, Path("x.md")) == {"title": "Real Title"}
    assert TitleExtractor().extract("text", Path("2024-01-01-my-post.md")) == {
        "title": "My Post"
    }


def test_composite_runs_extractors_on_body(tmp_path):
    class Constant:
        def extract(self, content, path):
            return {"seen": content}

    path = tmp_path / "2024-01-02-post.md"
    path.write_text("", encoding="utf-8")
    composite = CompositeMetadataExtractor()
    composite.add_extractor(Constant())
    result = composite.extract("---\ntitle: T\n---\n# Heading\n\nFirst para.\n", path)
    assert result["frontmatter"] == {"title": "T"}
    assert result["seen"] == "# Heading\n\nFirst para.\n"
    assert result["title"] == "Heading"
    assert result["description"] == "First para."
    assert result["date"] == datetime(2024, 1, 2, tzinfo=timezone.utc)
