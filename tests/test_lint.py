from pathlib import Path

from quire.lint import Linter, LintIssue, LintReport, PostSource, default_rules
from quire.protocols import LintRule

VALID = """---
title: Git workflows for small teams
date: 2023-04-02T09:15:00+01:00
draft: false
tags: [git]
---

# Git workflows for small teams

Use short-lived branches.[^1]

| Branch | Lifetime |
|--------|----------|
| feature | days |

```bash
git switch -c feature/x
```

[^1]: Mostly.
"""


def write(tmp_path: Path, name: str, text: str) -> Path:
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


def codes(issues):
    return [issue.rule for issue in issues]


def test_valid_post_has_no_issues(tmp_path):
    path = write(tmp_path, "valid.md", VALID)
    assert Linter().lint_file(path) == []


def test_missing_front_matter_skips_key_rules(tmp_path):
    path = write(tmp_path, "bare.md", "# Just a body\n")
    issues = Linter().lint_file(path)
    assert codes(issues) == ["frontmatter-missing"]
    assert issues[0].line == 1


def test_invalid_front_matter(tmp_path):
    unclosed = write(tmp_path, "unclosed.md", "---\ntitle: x\n")
    assert codes(Linter().lint_file(unclosed)) == ["frontmatter-invalid"]

    broken = write(tmp_path, "broken.md", "---\ntitle: a: b\n---\n<div>\n")
    issues = Linter().lint_file(broken)
    assert codes(issues) == ["frontmatter-invalid", "body-render"]
    assert issues[0].line == 2

    listed = write(tmp_path, "list.md", "---\n- a\n---\nBody\n")
    issues = Linter().lint_file(listed)
    assert codes(issues) == ["frontmatter-invalid"]
    assert "mapping" in issues[0].message


def test_impossible_date_is_invalid_front_matter(tmp_path):
    text = "---\ntitle: x\ndate: 2024-02-30\ndraft: false\n---\nBody\n"
    path = write(tmp_path, "leap.md", text)
    issues = Linter().lint_file(path)
    assert codes(issues) == ["frontmatter-invalid"]
    assert issues[0].message.startswith("invalid YAML")


def test_required_keys(tmp_path):
    path = write(tmp_path, "partial.md", "---\ntitle: Partial\n---\nBody\n")
    issues = Linter().lint_file(path)
    assert [i.message for i in issues] == [
        "missing required key 'date'",
        "missing required key 'draft'",
    ]
    relaxed = Linter({"required_keys": ["title"]})
    assert relaxed.lint_file(path) == []


def test_date_rules(tmp_path):
    naive = write(
        tmp_path,
        "naive.md",
        "---\ntitle: T\ndate: 2023-05-01 10:00:00\ndraft: false\n---\nBody\n",
    )
    assert codes(Linter().lint_file(naive)) == ["date-offset"]
    assert Linter({"require_offset": False}).lint_file(naive) == []

    date_only = write(
        tmp_path, "day.md", "---\ntitle: T\ndate: 2023-05-01\ndraft: false\n---\nBody\n"
    )
    assert codes(Linter().lint_file(date_only)) == ["date-offset"]

    quoted = write(
        tmp_path,
        "quoted.md",
        '---\ntitle: T\ndate: "2023-05-01T10:00:00-05:00"\ndraft: false\n---\nBody\n',
    )
    assert Linter().lint_file(quoted) == []

    garbage = write(
        tmp_path, "garbage.md", "---\ntitle: T\ndate: soon\ndraft: false\n---\nBody\n"
    )
    assert codes(Linter().lint_file(garbage)) == ["date-format"]


def test_type_rules(tmp_path):
    path = write(
        tmp_path,
        "types.md",
        "---\ntitle: 42\ndate: 2023-05-01T10:00:00Z\ndraft: maybe\ntags: git\n---\nBody\n",
    )
    assert codes(Linter().lint_file(path)) == ["title-type", "draft-type", "tags-type"]

    empty_title = write(
        tmp_path,
        "empty.md",
        '---\ntitle: " "\ndate: 2023-05-01T10:00:00Z\ndraft: true\n---\nBody\n',
    )
    issues = Linter().lint_file(empty_title)
    assert [i.message for i in issues] == ["title is empty"]


def test_unknown_keys_only_warn_in_strict_mode(tmp_path):
    path = write(tmp_path, "extra.md", VALID.replace("draft: false", "draft: false\nauthor: me"))
    assert Linter().lint_file(path) == []
    issues = Linter({"strict": True}).lint_file(path)
    assert codes(issues) == ["unknown-key"]
    assert issues[0].severity == "warning"


def test_body_render_reports_unbalanced_html(tmp_path):
    path = write(
        tmp_path,
        "html.md",
        "---\ntitle: T\ndate: 2023-05-01T10:00:00Z\ndraft: false\n---\n\n<div class=\"note\">\nopen\n",
    )
    issues = Linter().lint_file(path)
    assert codes(issues) == ["body-render"]
    assert "<div> is never closed" in issues[0].message


def test_body_render_reports_renderer_failure(tmp_path):
    class Exploding:
        def render(self, content):
            raise RuntimeError("boom")

    from quire.lint import BodyRenderRule

    path = write(tmp_path, "valid.md", VALID)
    issues = Linter(rules=[BodyRenderRule(Exploding())]).lint_file(path)
    assert codes(issues) == ["body-render"]
    assert "RuntimeError: boom" in issues[0].message


def test_unreadable_file(tmp_path):
    path = tmp_path / "binary.md"
    path.write_bytes(b"\xff\xfe\x00")
    assert codes(Linter().lint_file(path)) == ["read-error"]


def test_lint_paths_walks_directories_including_drafts(tmp_path):
    posts = tmp_path / "posts"
    posts.mkdir()
    write(posts, "good.md", VALID)
    write(posts, "_draft.md", "no front matter\n")
    (posts / "_layouts").mkdir()
    write(posts / "_layouts", "ignored.md", "no front matter\n")

    report = Linter().lint_paths([posts])
    assert isinstance(report, LintReport)
    assert report.files_checked == 2
    assert not report.ok
    assert [i.path.name for i in report.errors] == ["_draft.md"]
    assert report.to_dict()["errors"] == 1


def test_issue_formatting(tmp_path):
    issue = LintIssue(tmp_path / "posts" / "a.md", "date-offset", "no offset", line=3)
    assert issue.format(tmp_path) == "posts/a.md:3: error [date-offset] no offset"
    assert issue.to_dict()["line"] == 3


def test_rules_satisfy_protocol():
    assert all(isinstance(rule, LintRule) for rule in default_rules())
    source = PostSource.from_text(Path("x.md"), VALID)
    assert source.frontmatter["title"] == "Git workflows for small teams"
