"""Build orchestration: parse -> render -> write, with per-document error isolation"""

import logging
import shutil
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional

from jinja2 import Environment

from mdsite.config import Settings
from mdsite.core.errors import BuildError, ConfigError
from mdsite.core.layouts import make_environment
from mdsite.core.markup import render_markup
from mdsite.core.models import BuildReport, Document, Page, Site
from mdsite.core.parse import parse_dir, parse_file
from mdsite.core.render import render_document, render_listings, write_page


logger = logging.getLogger(__name__)

# generated listing pages live under these URLs
RESERVED_PREFIXES = ('/tags/', '/archive/')


def claim_urls(docs: list[Document]) -> dict[str, ConfigError]:
    """Map path -> error for documents whose URL is reserved or already taken; first path wins."""
    owners: dict[str, str] = {}
    rejected: dict[str, ConfigError] = {}
    for doc in sorted(docs, key=lambda d: d.path):
        url = doc.url
        if url.startswith(RESERVED_PREFIXES):
            rejected[doc.path] = ConfigError(doc.path, f"output URL {url} is reserved for generated listings")
        elif url in owners:
            rejected[doc.path] = ConfigError(doc.path, f"output URL {url} is already used by {owners[url]}")
        else:
            owners[url] = doc.path
    return rejected


def _render_one(
    doc: Document,
    site: Site,
    env: Environment,
    settings: Settings,
    ) -> tuple[Document, Optional[Page], Optional[str], Optional[BuildError]]:
    """Render a single document; returns (doc, page, summary, error)."""
    try:
        markup = render_markup(doc.body, doc.metadata.summary, settings.parser_config)
        page = render_document(doc, site, env, settings, markup=markup)
    except BuildError as e:
        return doc, None, None, e
    return doc, page, markup.summary, None


def _render_pass(docs: list[Document], site: Site, env: Environment, settings: Settings) -> list:
    if settings.workers > 1:
        with ThreadPoolExecutor(max_workers=settings.workers) as pool:
            return list(pool.map(lambda d: _render_one(d, site, env, settings), docs))
    return [_render_one(d, site, env, settings) for d in docs]


def render_documents(
    site: Site,
    targets: list[Document],
    env: Environment,
    settings: Settings,
    failed: dict[str, BuildError] = None,
    ) -> tuple[Site, list, dict[str, BuildError]]:
    """Render targets until no new failures appear, so prev/next links only reach written pages.

    Returns (site without failed documents, successful results, path -> error).
    """
    failed = dict(failed or {})
    while True:
        listed = Site(documents=tuple(d for d in site.documents if d.path not in failed))
        results = _render_pass([d for d in targets if d.path not in failed], listed, env, settings)
        new = {doc.path: error for doc, _, _, error in results if error is not None}
        if not new:
            return listed, results, failed
        for error in new.values():
            logger.warning("Skipping %s", error)
        failed.update(new)


def run_build(settings: Settings) -> BuildReport:
    """Build the whole site described by settings. Never raises for per-document failures."""
    content_dir = Path(settings.content_dir)
    output_dir = Path(settings.output_dir)
    if not content_dir.exists():
        raise RuntimeError(f"Content directory not found: {content_dir}")

    site, errors = parse_dir(content_dir)
    report = BuildReport(errors=list(errors))
    report.drafts = sum(1 for d in site.documents if d.draft)
    env = make_environment(settings.layouts_dir)

    targets = [d for d in site.documents if settings.build_drafts or not d.draft]
    rejected = claim_urls(targets)
    for error in rejected.values():
        logger.warning("Skipping %s", error)

    listed, results, failed = render_documents(site, targets, env, settings, rejected)
    report.errors.extend(failed[path] for path in sorted(failed))

    summaries: dict[str, str] = {}
    for doc, page, summary, _ in results:
        report.pages.append(page)
        summaries[doc.path] = summary

    try:
        report.pages.extend(render_listings(listed, env, settings, summaries))
    except BuildError as e:
        logger.warning("Skipping listings: %s", e)
        report.errors.append(e)

    if settings.clean and output_dir.exists():
        shutil.rmtree(output_dir)
    for page in report.pages:
        write_page(page, output_dir)

    logger.info(
        "Built %d page(s) into %s; %d draft(s), %d error(s)",
        len(report.pages), output_dir, report.drafts, len(report.errors),
    )
    return report


def render_single(path: Path, settings: Settings) -> Page:
    """Render one document for preview, drafts included. Raises BuildError."""
    content_dir = Path(settings.content_dir)
    site, _ = parse_dir(content_dir) if content_dir.is_dir() else (Site(), [])
    doc = parse_file(path, content_dir if content_dir.is_dir() else None)
    return render_document(doc, site, make_environment(settings.layouts_dir), settings)
