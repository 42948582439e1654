"""Command-line interface for Quire.

This module defines the CLI commands using the Click framework.

Commands:
- lint: Check posts against the front matter and rendering rules.
- list: Show posts, newest first.
- render: Render one post to a standalone HTML preview.
- new: Create a new post with valid front matter.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import click
import questionary

from . import __version__
from .collections import PostCollection
from .config import content_dir, load_config
from .content import ContentProcessor
from .errors import ConfigError, PostError, ScaffoldError
from .lint import Linter
from .preview import PreviewRenderer
from .scaffold import new_post


class Project:
    """Resolved project root and configuration shared by all commands."""

    def __init__(self, root: Path, config: dict):
        self.root = root
        self.config = config

    @property
    def content_dir(self) -> Path:
        return content_dir(self.root, self.config)


pass_project = click.make_pass_decorator(Project)


@click.group()
@click.version_option(version=__version__, prog_name="quire")
@click.option("-v", "--verbose", is_flag=True, help="Log debug output to stderr")
@click.option(
    "--content-dir",
    "content_dir_opt",
    type=str,
    required=False,
    help="Posts directory (overrides quire.yaml content_dir)",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, content_dir_opt: str | None):
    """Quire: lint, list, preview and create Markdown blog posts."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    root = Path.cwd()
    try:
        config = load_config(root)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from None
    if content_dir_opt:
        config["content_dir"] = content_dir_opt
    ctx.obj = Project(root, config)


@cli.command()
@click.argument("paths", nargs=-1, type=click.Path(exists=True, path_type=Path))
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    show_default=True,
)
@click.option("--strict", is_flag=True, help="Also warn about unrecognized keys")
@pass_project
def lint(project: Project, paths: tuple[Path, ...], output_format: str, strict: bool):
    """Check post files. Exits with status 1 when errors are found."""
    config = dict(project.config)
    if strict:
        config["strict"] = True
    targets = list(paths) or [project.content_dir]
    for target in targets:
        if not target.exists():
            raise click.ClickException(f"No such file or directory: {target}")

    report = Linter(config).lint_paths(targets)

    if output_format == "json":
        click.echo(json.dumps(report.to_dict(), indent=2))
    else:
        for issue in report.issues:
            color = "red" if issue.severity == "error" else "yellow"
            click.echo(click.style(issue.format(project.root), fg=color))
        summary = (
            f"Checked {report.files_checked} files: "
            f"{len(report.errors)} errors, {len(report.warnings)} warnings"
        )
        click.echo(click.style(summary, fg="green" if report.ok else "red", bold=True))
    if not report.ok:
        raise SystemExit(1)


@cli.command(name="list")
@click.option("--drafts", is_flag=True, help="Include draft posts")
@click.option("--json", "as_json", is_flag=True, help="Print posts as JSON")
@pass_project
def list_posts(project: Project, drafts: bool, as_json: bool):
    """List posts, newest first."""
    posts = PostCollection(_load(project, include_drafts=drafts)).sorted()
    if as_json:
        payload = [
            {
                "title": post.title,
                "date": post.date.isoformat(),
                "draft": post.draft,
                "slug": post.slug,
                "path": str(_relative(project, post.path)),
                "tags": post.tags,
            }
            for post in posts
        ]
        click.echo(json.dumps(payload, indent=2))
        return
    for post in posts:
        marker = click.style(" [draft]", fg="yellow") if post.draft else ""
        click.echo(f"{post.date.strftime('%Y-%m-%d')}  {post.title}{marker}")
    click.echo(f"{len(posts)} posts")


@cli.command()
@click.argument("post_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the HTML here instead of stdout",
)
@click.option(
    "--layout",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Jinja2 page template (overrides quire.yaml layout)",
)
@pass_project
def render(project: Project, post_path: Path, output: Path | None, layout: Path | None):
    """Render a post to a standalone HTML preview."""
    layout_path = layout or _configured_layout(project)
    try:
        post = ContentProcessor(project.content_dir).load_file(post_path)
        html = PreviewRenderer(layout_path).render_post(post)
    except PostError as exc:
        _report_post_error(project, exc)
        raise SystemExit(1) from None
    except FileNotFoundError as exc:
        raise click.ClickException(str(exc)) from None
    if output is None:
        click.echo(html)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(html, encoding="utf-8")
    click.echo(f"Wrote {output}", err=True)


@cli.command()
@click.argument("title", required=False)
@click.option("--publish", is_flag=True, help="Create with draft: false")
@pass_project
def new(project: Project, title: str | None, publish: bool):
    """Create a new post file."""
    if title is None:
        title = questionary.text(
            "Post title:",
            validate=lambda x: len(x.strip()) > 0 or "Title cannot be empty",
            style=_questionary_style(),
        ).ask()
        if title is None:
            raise click.Abort()
    try:
        path = new_post(project.content_dir, title, draft=not publish)
    except ScaffoldError as exc:
        raise click.ClickException(str(exc)) from None
    click.echo(f"Created {_relative(project, path)}")


def _load(project: Project, include_drafts: bool):
    try:
        return ContentProcessor(project.content_dir).load(include_drafts=include_drafts)
    except PostError as exc:
        _report_post_error(project, exc)
        raise SystemExit(1) from None
    except FileNotFoundError as exc:
        raise click.ClickException(str(exc)) from None


def _configured_layout(project: Project) -> Path | None:
    layout = project.config.get("layout")
    return project.root / layout if layout else None


def _relative(project: Project, path: Path) -> Path:
    try:
        return path.relative_to(project.root)
    except ValueError:
        return path


def _report_post_error(project: Project, exc: PostError) -> None:
    click.echo(click.style("Failed:", fg="red", bold=True), err=True)
    click.echo(click.style(f"  File: {_relative(project, exc.source_path)}", fg="yellow"), err=True)
    click.echo(click.style(f"  Error: {exc.message}", fg="white"), err=True)


def _questionary_style():
    """Return consistent questionary style."""
    return questionary.Style(
        [
            ("qmark", "fg:cyan bold"),
            ("question", "bold"),
            ("answer", "fg:cyan"),
        ]
    )


def main():
    """Entry point for the CLI application."""
    cli()
