"""Preview rendering for Quire.

Places a post's rendered HTML into a page template with Jinja2, so a
writer can open the result in a browser before the post is published
by the site generator.

Key objects:
- render_toc: Nested table of contents from the post headings.
- PreviewRenderer: Renders a Post into a full HTML document.
"""

from __future__ import annotations

import logging
from pathlib import Path

from jinja2 import (
    DictLoader,
    Environment,
    FileSystemLoader,
    TemplateError,
    TemplateSyntaxError,
    select_autoescape,
)
from markupsafe import Markup

from .content import Post
from .errors import PostError
from .html_utils import escape_html
from .renderers import Heading, pygments_css

logger = logging.getLogger(__name__)

__all__ = ["DEFAULT_LAYOUT", "PreviewRenderer", "render_toc"]

DEFAULT_LAYOUT = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{{ post.title }}</title>
<style>
body { max-width: 46rem; margin: 2rem auto; padding: 0 1rem; font-family: sans-serif; line-height: 1.6; }
.draft { background: #fde68a; padding: 0.25rem 0.5rem; }
{{ pygments_css }}
</style>
</head>
<body>
<article>
<header>
{% if post.draft %}<p class="draft">Draft</p>{% endif %}
<h1>{{ post.title }}</h1>
<time datetime="{{ post.date.isoformat() }}">{{ post.date.strftime("%Y-%m-%d %H:%M %z") }}</time>
{% if post.tags %}<p class="tags">{{ post.tags | join(", ") }}</p>{% endif %}
</header>
{% if toc %}<nav class="toc">{{ toc }}</nav>{% endif %}
{{ post_content }}
</article>
</body>
</html>
"""


def render_toc(headings: list[Heading]) -> Markup:
    """Render a list of headings as nested HTML lists.

    Args:
        headings: List of Heading objects in document order.

    Returns:
        Markup-safe HTML string of the nested TOC, or empty Markup if no headings.
    """
    if not headings:
        return Markup("")

    html_parts: list[str] = []
    level_stack: list[int] = []

    for heading in headings:
        level = heading.level

        # Close nested lists if going to a shallower level
        while level_stack and level_stack[-1] > level:
            level_stack.pop()
            html_parts.append("</li></ul>")

        if level_stack and level_stack[-1] == level:
            html_parts.append("</li>")
        else:
            html_parts.append("<ul>")
            level_stack.append(level)

        html_parts.append(
            f'<li><a href="#{escape_html(heading.id)}">{escape_html(heading.text)}</a>'
        )

    while level_stack:
        level_stack.pop()
        html_parts.append("</li></ul>")

    return Markup("".join(html_parts))


class PreviewRenderer:
    """Renders posts into complete HTML pages.

    Attributes:
        layout_path: Optional user template replacing DEFAULT_LAYOUT.
        env: Jinja2 environment.
    """

    def __init__(self, layout_path: Path | None = None, style: str = "default"):
        self.layout_path = layout_path
        self.style = style
        if layout_path is not None:
            if not layout_path.is_file():
                raise FileNotFoundError(f"Layout not found: {layout_path}")
            loader = FileSystemLoader(str(layout_path.parent))
            self._template_name = layout_path.name
        else:
            loader = DictLoader({"post.html": DEFAULT_LAYOUT})
            self._template_name = "post.html"
        self.env = Environment(
            loader=loader,
            autoescape=select_autoescape(["html", "xml", "jinja"]),
        )

    def render_post(self, post: Post) -> str:
        """Render a post with the layout.

        Args:
            post: Post to render.

        Returns:
            Rendered HTML document.

        Raises:
            PostError: If the layout cannot be loaded or rendered.
        """
        context = {
            "post": post,
            "frontmatter": post.frontmatter,
            "post_content": Markup(post.content),
            "toc": render_toc(post.toc),
            "pygments_css": Markup(pygments_css(self.style)),
        }
        try:
            template = self.env.get_template(self._template_name)
            rendered = template.render(**context)
        except TemplateSyntaxError as exc:
            raise PostError(
                post.path,
                f"Template syntax error on line {exc.lineno}: {exc.message}",
                exc,
            ) from exc
        except TemplateError as exc:
            raise PostError(post.path, f"{type(exc).__name__}: {exc}", exc) from exc
        logger.debug("rendered preview for %s", post.path)
        return rendered
