"""CLI command implementations"""

from datetime import date
from pathlib import Path
from typing import Annotated, Optional

import typer

from mdsite.config import Settings, load_config
from mdsite.core.errors import BuildError
from mdsite.core.frontmatter import dump_front_matter
from mdsite.core.metadata import Metadata
from mdsite.core.parse import parse_dir
from mdsite.core.pipeline import render_single, run_build
from mdsite.log import configure_logging


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None, verbose: bool = False) -> Settings:
    """Load config with standard CLI error handling, then set up logging."""
    try:
        settings = load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))
    configure_logging("DEBUG" if verbose else settings.log_level)
    return settings


def _echo_errors(errors: list[BuildError]) -> None:
    """Print one line per skipped document to stderr."""
    for e in errors:
        typer.echo(f"  skipped [{e.kind}] {e}", err=True)


def build_cmd(
    content: Annotated[Optional[str], typer.Option("--content-dir", help="Source directory")] = None,
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    layouts: Annotated[Optional[str], typer.Option("--layouts-dir", help="Layout template directory")] = None,
    drafts: Annotated[Optional[bool], typer.Option("--drafts/--no-drafts", help="Render draft pages (never listed)")] = None,
    workers: Annotated[Optional[int], typer.Option("--workers", help="Documents rendered in parallel")] = None,
    clean: Annotated[Optional[bool], typer.Option("--clean/--no-clean", help="Remove output dir first")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
    ):
    """Parse every document, render pages and listings, and write the site."""
    settings = _settings(overrides={
        "content_dir": content, "output_dir": out, "layouts_dir": layouts,
        "build_drafts": drafts, "workers": workers, "clean": clean,
    }, verbose=verbose)

    try:
        report = run_build(settings)
    except RuntimeError as e:
        _fail(str(e))
    except OSError as e:
        _fail("Build failed", e)

    for page in report.pages:
        typer.echo(f"  {page.url}")
    typer.echo(
        f"Build complete - "
        f"{len(report.pages)} page(s) written to {settings.output_dir}/, "
        f"{report.drafts} draft(s), "
        f"{len(report.errors)} skipped"
    )
    if not report.ok:
        _echo_errors(report.errors)
        raise typer.Exit(1)


def render_cmd(
    path: Annotated[Path, typer.Argument(help="Document to render (drafts included)")],
    layouts: Annotated[Optional[str], typer.Option("--layouts-dir", help="Layout template directory")] = None,
    ):
    """Render a single document to stdout for preview."""
    settings = _settings(overrides={"layouts_dir": layouts})
    try:
        page = render_single(path, settings)
    except BuildError as e:
        _fail(f"Cannot render {path}", e)
    typer.echo(page.html)


def _parse(content: Optional[str]):
    settings = _settings(overrides={"content_dir": content})
    root = Path(settings.content_dir)
    if not root.exists():
        _fail(f"Content directory not found: {root}")
    return parse_dir(root)


def list_cmd(
    content: Annotated[Optional[str], typer.Option("--content-dir", help="Source directory")] = None,
    drafts: Annotated[bool, typer.Option("--drafts", help="Include drafts")] = False,
    ):
    """Print documents in listing order: newest first, ties by path."""
    site, errors = _parse(content)
    docs = site.listing(include_drafts=drafts)
    if not docs:
        typer.echo("No documents found.")
    for doc in docs:
        when = doc.date.isoformat() if doc.date else "-"
        flag = " (draft)" if doc.draft else ""
        typer.echo(f"{when}  {doc.path}  {doc.title}{flag}")
    if errors:
        _echo_errors(errors)
        raise typer.Exit(1)


def tags_cmd(
    content: Annotated[Optional[str], typer.Option("--content-dir", help="Source directory")] = None,
    ):
    """Print each tag with the number of listed documents carrying it."""
    site, errors = _parse(content)
    for tag, docs in site.tags().items():
        typer.echo(f"{tag}\t{len(docs)}")
    if errors:
        _echo_errors(errors)
        raise typer.Exit(1)


def check_cmd(
    content: Annotated[Optional[str], typer.Option("--content-dir", help="Source directory")] = None,
    ):
    """Parse every document without rendering; exit 1 on any error."""
    site, errors = _parse(content)
    typer.echo(f"Checked {len(site.documents) + len(errors)} document(s), {len(errors)} error(s)")
    if errors:
        _echo_errors(errors)
        raise typer.Exit(1)


def new_cmd(
    path: Annotated[str, typer.Argument(help="File to create, relative to the content directory")],
    title: Annotated[Optional[str], typer.Option("--title", help="Document title")] = None,
    draft: Annotated[bool, typer.Option("--draft/--no-draft", help="Mark as draft")] = True,
    fmt: Annotated[str, typer.Option("--format", help="Front matter format: toml or yaml")] = "toml",
    content: Annotated[Optional[str], typer.Option("--content-dir", help="Source directory")] = None,
    ):
    """Create a new document with a front-matter block dated today."""
    if fmt not in ("toml", "yaml"):
        _fail(f"Unknown front matter format: {fmt}")
    settings = _settings(overrides={"content_dir": content})
    dest = Path(settings.content_dir) / path
    if dest.exists():
        _fail(f"{dest} already exists")

    metadata = Metadata.from_native({
        "title": title or Path(path).stem.replace("-", " ").title(),
        "date": date.today(),
        "draft": draft,
        "tags": [],
    })
    dest.parent.mkdir(parents=True, exist_ok=True)
    dest.write_text(dump_front_matter(metadata, fmt) + "\n", encoding="utf-8")
    typer.echo(f"Created {dest}")
