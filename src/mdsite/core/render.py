"""Page rendering: documents through their layout, plus home, tag, and archive listings"""

import logging
from pathlib import Path
from typing import Optional

from jinja2 import Environment

from mdsite.config import Settings
from mdsite.core.errors import ConfigError
from mdsite.core.layouts import resolve_layout
from mdsite.core.markup import RenderedMarkup, render_markup
from mdsite.core.models import Document, Page, Site, tag_url
from mdsite.core.utils.slug import slugify


logger = logging.getLogger(__name__)


def abs_url(base_url: str, url: str) -> str:
    return base_url.rstrip('/') + url


def _site_context(settings: Settings) -> dict:
    return {"title": settings.site_title, "base_url": settings.base_url}


def _entry(doc: Document, settings: Settings, summary: str = '') -> dict:
    """Compact view of a document for listings and prev/next links."""
    return {
        "title": doc.title,
        "url": abs_url(settings.base_url, doc.url),
        "date": doc.date,
        "tags": doc.tags,
        "summary": summary,
        "path": doc.path,
    }


def _neighbours(doc: Document, site: Site, settings: Settings) -> tuple[Optional[dict], Optional[dict]]:
    """(newer, older) neighbours in listing order; drafts have none."""
    listing = site.listing()
    paths = [d.path for d in listing]
    if doc.path not in paths:
        return None, None
    i = paths.index(doc.path)
    newer = _entry(listing[i - 1], settings) if i > 0 else None
    older = _entry(listing[i + 1], settings) if i + 1 < len(listing) else None
    return newer, older


def _render(env: Environment, layout: str, path: str, context: dict) -> str:
    template = resolve_layout(env, layout, path)
    try:
        return template.render(**context)
    except Exception as e:
        # template expressions can raise any Python error, not only TemplateError
        raise ConfigError(path, f"layout '{layout}' failed to render: {e}") from e


def render_document(
    doc: Document,
    site: Site,
    env: Environment,
    settings: Settings,
    markup: RenderedMarkup = None,
    ) -> Page:
    """Render one document through its layout (metadata layout, else the default)."""
    layout = doc.metadata.layout or settings.default_layout
    markup = markup or render_markup(doc.body, doc.metadata.summary, settings.parser_config)
    newer, older = _neighbours(doc, site, settings)
    page = {
        "title": doc.title,
        "date": doc.date,
        "draft": doc.draft,
        "path": doc.path,
        "url": abs_url(settings.base_url, doc.url),
        "tags": [{"name": t, "url": abs_url(settings.base_url, tag_url(t))} for t in doc.tags],
        "content": markup.html,
        "toc": markup.toc,
        "summary": markup.summary,
        "word_count": markup.word_count,
        "reading_time": markup.reading_time,
        "prev": newer,
        "next": older,
    }
    html = _render(env, layout, doc.path, {
        "page": page, "meta": doc.metadata.native(), "site": _site_context(settings),
    })
    logger.debug("Rendered %s with layout %s", doc.path, layout)
    return Page(url=doc.url, html=html, layout=layout, document=doc)


def _summary(doc: Document, summaries: dict[str, str], settings: Settings) -> str:
    if doc.path in summaries:
        return summaries[doc.path]
    return render_markup(doc.body, doc.metadata.summary, settings.parser_config).summary


def _listing_page(env, settings, layout: str, url: str, context: dict) -> Page:
    html = _render(env, layout, url, {"site": _site_context(settings), **context})
    return Page(url=url, html=html, layout=layout)


def render_listings(
    site: Site,
    env: Environment,
    settings: Settings,
    summaries: dict[str, str] = None,
    ) -> list[Page]:
    """Home listing, tag index, per-tag pages, and per-year archives; drafts never appear."""
    summaries = summaries or {}

    def entries(docs: list[Document]) -> list[dict]:
        return [_entry(d, settings, _summary(d, summaries, settings)) for d in docs]

    pages = [_listing_page(env, settings, settings.list_layout, '/', {
        "title": settings.site_title, "pages": entries(site.listing()),
    })]

    tags = site.tags()
    if tags:
        pages.append(_listing_page(env, settings, settings.list_layout, '/tags/', {
            "title": "Tags",
            "pages": [
                {"title": tag, "url": abs_url(settings.base_url, tag_url(tag)), "date": None,
                 "tags": [], "summary": f"{len(docs)} page(s)", "path": None}
                for tag, docs in tags.items()
            ],
        }))
    claimed: dict[str, str] = {}
    for tag, docs in tags.items():
        url = tag_url(tag)
        if url in claimed:
            logger.warning("Tag %r shares %s with tag %r; keeping the first", tag, url, claimed[url])
            continue
        claimed[url] = tag
        pages.append(_listing_page(env, settings, settings.taxonomy_layout, url, {
            "title": tag, "tag": tag, "tag_slug": slugify(tag), "pages": entries(docs),
        }))

    for year, docs in site.archive().items():
        pages.append(_listing_page(env, settings, settings.list_layout, f"/archive/{year}/", {
            "title": str(year), "year": year, "pages": entries(docs),
        }))
    return pages


def write_page(page: Page, output_dir: Path) -> Path:
    """Write page.html under output_dir at its pretty-URL location."""
    dest = output_dir / Path(page.output_path)
    dest.parent.mkdir(parents=True, exist_ok=True)
    dest.write_text(page.html, encoding='utf-8')
    logger.debug("Wrote %s", dest)
    return dest
