"""CLI command implementations"""

from pathlib import Path
from typing import Annotated, Optional

import typer

from mdsite.config import Settings, load_config
from mdsite.core.assemble import missing_keys
from mdsite.core.frontmatter import dump_frontmatter
from mdsite.core.pipeline import build_site, discover_files, load_document
from mdsite.core.render import render_markdown
from mdsite.errors import MdsiteError


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling."""
    try:
        return load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))


def _load(path: str):
    """Load a single document or exit with its error."""
    try:
        return load_document(Path(path))
    except MdsiteError as e:
        _fail(str(e))


def build_cmd(
    path: Annotated[Optional[str], typer.Argument(help="File or directory to build (default: content_dir)")] = None,
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    templates: Annotated[Optional[str], typer.Option("--template-dir", help="Directory overriding built-in templates")] = None,
    parser: Annotated[Optional[str], typer.Option("--parser-config", help="MarkdownIt preset name")] = None,
    drafts: Annotated[Optional[bool], typer.Option("--drafts/--no-drafts", help="Include draft: true documents")] = None,
    ):
    """Render every publishable document into HTML pages plus an index listing."""
    settings = _settings(overrides={
        "output_dir": out, "template_dir": templates,
        "parser_config": parser, "include_drafts": drafts,
    })
    source = Path(path or settings.content_dir)
    if not source.exists():
        _fail(f"Path not found: {source}")

    output_dir = Path(settings.output_dir)
    try:
        report = build_site(source, output_dir, settings)
    except MdsiteError as e:
        _fail("Build failed", e)

    for src, page in report.built:
        typer.echo(f"  {src} -> {page}")
    for src in report.drafts:
        typer.echo(f"  draft: {src}")
    for src, err in report.failures:
        typer.echo(f"  failed: {err}", err=True)
    typer.echo(
        f"Build complete - "
        f"{len(report.built)} built, "
        f"{len(report.drafts)} drafts skipped, "
        f"{len(report.failures)} failed"
    )
    if not report.ok:
        raise typer.Exit(1)


def render_cmd(
    path: Annotated[str, typer.Argument(help="Markdown file to render")],
    parser: Annotated[Optional[str], typer.Option("--parser-config", help="MarkdownIt preset name")] = None,
    ):
    """Print the rendered HTML body of a single document."""
    settings = _settings(overrides={"parser_config": parser})
    doc = _load(path)
    typer.echo(render_markdown(doc.body, settings.parser_config), nl=False)


def check_cmd(
    path: Annotated[Optional[str], typer.Argument(help="File or directory to check (default: content_dir)")] = None,
    ):
    """Validate front-matter and required keys without writing output."""
    settings = _settings()
    source = Path(path or settings.content_dir)
    if not source.exists():
        _fail(f"Path not found: {source}")

    files = discover_files(source)
    errors = 0
    for p in files:
        try:
            doc = load_document(p)
        except MdsiteError as e:
            typer.echo(f"  error: {e}", err=True)
            errors += 1
            continue
        missing = missing_keys(doc.metadata, settings.required_keys)
        if missing:
            typer.echo(f"  error: {p}: Missing required metadata: {', '.join(missing)}", err=True)
            errors += 1
        else:
            typer.echo(f"  ok{' (draft)' if doc.draft else ''}: {p}")

    typer.echo(f"Checked {len(files)} document(s), {errors} with errors")
    if errors:
        raise typer.Exit(1)


def meta_cmd(
    path: Annotated[str, typer.Argument(help="Markdown file to read")],
    ):
    """Print a document's front-matter, re-serialized as YAML."""
    doc = _load(path)
    typer.echo(dump_frontmatter(dict(doc.metadata)), nl=False)
