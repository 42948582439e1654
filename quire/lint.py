"""Content checks for Quire.

The linter reads post files, splits off their front matter, and runs a
list of small rules over each one. Content problems never raise; each
one becomes a LintIssue in the returned LintReport.

Key classes:
- PostSource: One post file split into front matter and body.
- LintIssue / LintReport: Results.
- Linter: Runs the rule set over files and directories.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .config import DEFAULT_CONFIG
from .content import FileContentLoader
from .errors import FrontMatterError
from .extractors import (
    FRONTMATTER_RE,
    has_frontmatter,
    has_offset,
    parse_frontmatter,
    parse_timestamp,
)
from .html_utils import find_unbalanced_tags
from .renderers import MarkdownRenderer

logger = logging.getLogger(__name__)

ERROR = "error"
WARNING = "warning"

RECOGNIZED_KEYS = frozenset({"title", "date", "draft", "tags", "description"})


@dataclass
class LintIssue:
    """A single problem found in a post file.

    Attributes:
        path: File the issue belongs to.
        rule: Stable rule code, e.g. ``date-offset``.
        message: Human-readable description.
        severity: ``error`` or ``warning``.
        line: 1-based line number, when known.
    """

    path: Path
    rule: str
    message: str
    severity: str = ERROR
    line: int | None = None

    def format(self, root: Path | None = None) -> str:
        shown = self.path
        if root is not None:
            try:
                shown = self.path.relative_to(root)
            except ValueError:
                pass
        location = f"{shown}:{self.line}" if self.line is not None else str(shown)
        return f"{location}: {self.severity} [{self.rule}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": str(self.path),
            "rule": self.rule,
            "message": self.message,
            "severity": self.severity,
            "line": self.line,
        }


@dataclass
class LintReport:
    """Issues collected over a set of files."""

    issues: list[LintIssue] = field(default_factory=list)
    files_checked: int = 0

    @property
    def errors(self) -> list[LintIssue]:
        return [i for i in self.issues if i.severity == ERROR]

    @property
    def warnings(self) -> list[LintIssue]:
        return [i for i in self.issues if i.severity == WARNING]

    @property
    def ok(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict[str, Any]:
        return {
            "files_checked": self.files_checked,
            "errors": len(self.errors),
            "warnings": len(self.warnings),
            "issues": [issue.to_dict() for issue in self.issues],
        }


@dataclass
class PostSource:
    """A post file split into its parts.

    ``frontmatter`` is None when the block is missing or unusable; in the
    latter case ``frontmatter_error`` says why.
    """

    path: Path
    text: str
    has_block: bool
    frontmatter: dict[str, Any] | None
    body: str
    frontmatter_error: FrontMatterError | None = None

    @classmethod
    def from_text(cls, path: Path, text: str) -> PostSource:
        if not has_frontmatter(text):
            return cls(path=path, text=text, has_block=False, frontmatter=None, body=text)
        try:
            frontmatter, body = parse_frontmatter(text)
        except FrontMatterError as exc:
            match = FRONTMATTER_RE.match(text)
            body = text[match.end() :] if match else text
            return cls(
                path=path,
                text=text,
                has_block=True,
                frontmatter=None,
                body=body,
                frontmatter_error=exc,
            )
        return cls(path=path, text=text, has_block=True, frontmatter=frontmatter, body=body)


class FrontmatterPresentRule:
    code = "frontmatter-missing"

    def check(self, source: PostSource, config: dict[str, Any]) -> list[LintIssue]:
        if source.has_block:
            return []
        message = "file does not start with a '---' front matter block"
        return [LintIssue(source.path, self.code, message, line=1)]


class FrontmatterValidRule:
    code = "frontmatter-invalid"

    def check(self, source: PostSource, config: dict[str, Any]) -> list[LintIssue]:
        error = source.frontmatter_error
        if error is None:
            return []
        return [LintIssue(source.path, self.code, error.message, line=error.line)]


class _KeyRule:
    """Base for rules that inspect parsed front matter keys."""

    code = ""

    def check(self, source: PostSource, config: dict[str, Any]) -> list[LintIssue]:
        if source.frontmatter is None:
            return []
        return self.check_keys(source, source.frontmatter, config)

    def check_keys(
        self, source: PostSource, frontmatter: dict[str, Any], config: dict[str, Any]
    ) -> list[LintIssue]:
        raise NotImplementedError

    def issue(self, source: PostSource, message: str, severity: str = ERROR) -> LintIssue:
        return LintIssue(source.path, self.code, message, severity=severity)


class RequiredKeysRule(_KeyRule):
    code = "required-key"

    def check_keys(self, source, frontmatter, config):
        return [
            self.issue(source, f"missing required key '{key}'")
            for key in config.get("required_keys", [])
            if key not in frontmatter
        ]


class TitleTypeRule(_KeyRule):
    code = "title-type"

    def check_keys(self, source, frontmatter, config):
        if "title" not in frontmatter:
            return []
        title = frontmatter["title"]
        if not isinstance(title, str):
            return [self.issue(source, f"title must be a string, got {type(title).__name__}")]
        if not title.strip():
            return [self.issue(source, "title is empty")]
        return []


class DateFormatRule(_KeyRule):
    code = "date-format"

    def check_keys(self, source, frontmatter, config):
        if "date" not in frontmatter:
            return []
        try:
            parse_timestamp(frontmatter["date"])
        except ValueError as exc:
            return [self.issue(source, f"date is not a valid timestamp: {exc}")]
        return []


class DateOffsetRule(_KeyRule):
    code = "date-offset"

    def check_keys(self, source, frontmatter, config):
        if "date" not in frontmatter or not config.get("require_offset", True):
            return []
        try:
            value = parse_timestamp(frontmatter["date"])
        except ValueError:
            # reported by date-format
            return []
        if has_offset(value):
            return []
        return [self.issue(source, f"date {frontmatter['date']!s} has no explicit UTC offset")]


class DraftTypeRule(_KeyRule):
    code = "draft-type"

    def check_keys(self, source, frontmatter, config):
        if "draft" not in frontmatter or isinstance(frontmatter["draft"], bool):
            return []
        value = frontmatter["draft"]
        return [self.issue(source, f"draft must be true or false, got {value!r}")]


class TagsTypeRule(_KeyRule):
    code = "tags-type"

    def check_keys(self, source, frontmatter, config):
        if "tags" not in frontmatter:
            return []
        tags = frontmatter["tags"]
        if isinstance(tags, list) and all(isinstance(t, str) for t in tags):
            return []
        return [self.issue(source, "tags must be a list of strings")]


class UnknownKeyRule(_KeyRule):
    code = "unknown-key"

    def check_keys(self, source, frontmatter, config):
        if not config.get("strict", False):
            return []
        known = RECOGNIZED_KEYS | set(config.get("required_keys", []))
        return [
            self.issue(source, f"unrecognized key '{key}'", severity=WARNING)
            for key in frontmatter
            if key not in known
        ]


class BodyRenderRule:
    code = "body-render"

    def __init__(self, renderer: MarkdownRenderer | None = None):
        self.renderer = renderer or MarkdownRenderer()

    def check(self, source: PostSource, config: dict[str, Any]) -> list[LintIssue]:
        try:
            html, _ = self.renderer.render(source.body)
        except Exception as exc:
            return [
                LintIssue(
                    source.path,
                    self.code,
                    f"body failed to render: {type(exc).__name__}: {exc}",
                )
            ]
        return [
            LintIssue(source.path, self.code, f"rendered HTML is not well-formed: {problem}")
            for problem in find_unbalanced_tags(html)
        ]


def default_rules() -> list:
    """Return a fresh list of the built-in rules in reporting order."""
    return [
        FrontmatterPresentRule(),
        FrontmatterValidRule(),
        RequiredKeysRule(),
        TitleTypeRule(),
        DateFormatRule(),
        DateOffsetRule(),
        DraftTypeRule(),
        TagsTypeRule(),
        UnknownKeyRule(),
        BodyRenderRule(),
    ]


class Linter:
    """Runs lint rules over post files.

    Attributes:
        config: Project configuration (see quire.config).
        rules: Rules run, in order, for every file.
    """

    def __init__(self, config: dict[str, Any] | None = None, rules: list | None = None):
        self.config = {**DEFAULT_CONFIG, **(config or {})}
        self.rules = default_rules() if rules is None else list(rules)

    def lint_text(self, path: Path, text: str) -> list[LintIssue]:
        source = PostSource.from_text(path, text)
        issues: list[LintIssue] = []
        for rule in self.rules:
            found = rule.check(source, self.config)
            if found:
                logger.debug("%s: %s reported %d issue(s)", path, rule.code, len(found))
            issues.extend(found)
        return issues

    def lint_file(self, path: Path) -> list[LintIssue]:
        """Lint a single post file.

        Unreadable files are reported as ``read-error`` issues.
        """
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            return [LintIssue(path, "read-error", f"cannot read file: {exc}")]
        return self.lint_text(path, text)

    def lint_paths(self, paths: Iterable[Path]) -> LintReport:
        """Lint files and directories.

        Directories are searched for post files, drafts included.

        Args:
            paths: Files and/or directories.

        Returns:
            LintReport covering every file checked.
        """
        report = LintReport()
        for path in paths:
            if path.is_dir():
                files = FileContentLoader(path).iter_files(include_drafts=True)
            else:
                files = [path]
            for file in files:
                report.issues.extend(self.lint_file(file))
                report.files_checked += 1
        return report
