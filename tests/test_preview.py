from datetime import datetime, timezone

import pytest

from quire.content import Post, PostBuilder
from quire.errors import PostError
from quire.preview import PreviewRenderer, render_toc
from quire.renderers import Heading


def make_post(tmp_path, **overrides):
    fields = dict(
        title="ZIO & Scala",
        date=datetime(2023, 5, 1, 10, 0, tzinfo=timezone.utc),
        draft=False,
        body="Hi",
        content="<p>Hi</p>",
        slug="zio-scala",
        path=tmp_path / "zio-scala.md",
        filename="zio-scala.md",
    )
    fields.update(overrides)
    return Post(**fields)


def test_render_toc_nests_levels():
    headings = [Heading("a", "A", 2), Heading("b", "B", 3), Heading("c", "C & D", 2)]
    assert str(render_toc(headings)) == (
        '<ul><li><a href="#a">A</a><ul><li><a href="#b">B</a></li></ul></li>'
        '<li><a href="#c">C &amp; D</a></li></ul>'
    )
    assert str(render_toc([])) == ""


def test_default_layout_renders_post(tmp_path):
    source = tmp_path / "2023-05-01-layers.md"
    source.write_text(
        "---\ntitle: Layers\ndate: 2023-05-01T10:00:00+02:00\ndraft: true\n"
        "tags: [zio]\n---\n\n## Setup\n\n```scala\nval x = 1\n```\n",
        encoding="utf-8",
    )
    post = PostBuilder().build(source)
    html = PreviewRenderer().render_post(post)
    assert "<title>Layers</title>" in html
    assert '<p class="draft">Draft</p>' in html
    assert '<a href="#setup">Setup</a>' in html
    assert '<h2 id="setup">Setup</h2>' in html
    assert ".highlight" in html
    assert 'datetime="2023-05-01T10:00:00+02:00"' in html
    assert "zio" in html


def test_default_layout_escapes_title(tmp_path):
    html = PreviewRenderer().render_post(make_post(tmp_path))
    assert "<title>ZIO &amp; Scala</title>" in html
    assert "<p>Hi</p>" in html


def test_custom_layout(tmp_path):
    layout = tmp_path / "layout.html"
    layout.write_text("{{ post.title }}|{{ post_content }}|{{ frontmatter.extra }}", encoding="utf-8")
    post = make_post(tmp_path, frontmatter={"extra": "x"})
    assert PreviewRenderer(layout).render_post(post) == "ZIO &amp; Scala|<p>Hi</p>|x"


def test_layout_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        PreviewRenderer(tmp_path / "missing.html")

    broken = tmp_path / "broken.html"
    broken.write_text("{% if %}", encoding="utf-8")
    with pytest.raises(PostError) as excinfo:
        PreviewRenderer(broken).render_post(make_post(tmp_path))
    assert "Template syntax error" in excinfo.value.message
