"""HTML utility functions for Quire.

Small helpers for escaping, tag stripping and checking that rendered
post bodies are well-formed.

Functions:
    escape_html: Escape special HTML characters in a string.
    strip_tags: Remove tags from an HTML fragment.
    find_unbalanced_tags: Report unclosed or stray tags in an HTML fragment.
"""

from __future__ import annotations

import re
from html.parser import HTMLParser

_TAG_RE = re.compile(r"<[^>]+>")

VOID_ELEMENTS = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
    }
)

# Elements whose end tag HTML allows to be omitted.
OPTIONAL_END = frozenset(
    {"p", "li", "dt", "dd", "tr", "td", "th", "thead", "tbody", "tfoot", "option"}
)


def escape_html(text: str) -> str:
    """Escape special HTML characters in a string.

    Examples:
        >>> escape_html('<script>alert("XSS")</script>')
        '&lt;script&gt;alert(&quot;XSS&quot;)&lt;/script&gt;'
    """
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


def strip_tags(html: str) -> str:
    """Remove HTML tags, keeping the text between them."""
    return _TAG_RE.sub("", html)


class _BalanceChecker(HTMLParser):
    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.stack: list[tuple[str, int]] = []
        self.problems: list[str] = []

    def handle_starttag(self, tag, attrs):
        if tag not in VOID_ELEMENTS:
            self.stack.append((tag, self.getpos()[0]))

    def handle_endtag(self, tag):
        if tag in VOID_ELEMENTS:
            return
        open_tags = [name for name, _ in self.stack]
        if tag not in open_tags:
            self.problems.append(f"line {self.getpos()[0]}: stray </{tag}>")
            return
        while self.stack:
            name, line = self.stack.pop()
            if name == tag:
                break
            if name not in OPTIONAL_END:
                self.problems.append(f"line {line}: <{name}> closed by </{tag}>")

    def close(self):
        super().close()
        for name, line in self.stack:
            if name not in OPTIONAL_END:
                self.problems.append(f"line {line}: <{name}> is never closed")
        self.stack.clear()


def find_unbalanced_tags(html: str) -> list[str]:
    """Check that every non-void element in an HTML fragment is closed.

    Args:
        html: HTML fragment.

    Returns:
        List of problem descriptions; empty when the fragment is well-formed.
    """
    checker = _BalanceChecker()
    checker.feed(html)
    checker.close()
    return checker.problems
