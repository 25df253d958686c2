"""Markdown body rendering with markdown-it, plus derived TOC, summary, and word count"""

from dataclasses import dataclass, field
from functools import lru_cache
from math import ceil
from typing import Optional

from markdown_it import MarkdownIt

from mdsite.core.utils.slug import slugify


MORE_MARKER = '<!--more-->'
WORDS_PER_MINUTE = 200


@dataclass(frozen=True)
class Heading:
    level:  int
    text:   str
    anchor: str


@dataclass(frozen=True)
class RenderedMarkup:
    html:       str
    toc:        list[Heading] = field(default_factory=list)
    summary:    str = ''
    word_count: int = 0

    @property
    def reading_time(self) -> int:
        """Whole minutes, at least one."""
        return max(1, ceil(self.word_count / WORDS_PER_MINUTE))


@lru_cache(maxsize=None)
def make_parser(preset: str = 'gfm-like') -> MarkdownIt:
    """Build a MarkdownIt instance for the given preset name."""
    return MarkdownIt(preset, options_update={"linkify": False})


def heading_level(token) -> int | None:
    """Return the heading level (1-6) for a heading_open token, else None."""
    if token.type == 'heading_open' and token.tag and token.tag[0] == 'h' and token.tag[1:].isdigit():
        return int(token.tag[1:])
    return None


def _inline_text(token) -> str:
    """Plain text of an inline token, markup stripped."""
    if not token.children:
        return token.content
    return ''.join(c.content for c in token.children if c.type in ('text', 'code_inline'))


def _unique_anchor(text: str, seen: set[str]) -> str:
    base = slugify(text) or 'section'
    anchor, n = base, 0
    while anchor in seen:
        n += 1
        anchor = f"{base}-{n}"
    seen.add(anchor)
    return anchor


def _add_anchors(tokens: list) -> list[Heading]:
    """Set an id on every heading_open token; returns the collected headings."""
    headings = []
    seen: set[str] = set()
    for i, tok in enumerate(tokens):
        level = heading_level(tok)
        if level is None:
            continue
        text = _inline_text(tokens[i + 1]).strip()
        anchor = _unique_anchor(text, seen)
        tok.attrSet('id', anchor)
        headings.append(Heading(level=level, text=text, anchor=anchor))
    return headings


def _first_paragraph(tokens: list) -> str:
    for i, tok in enumerate(tokens):
        if tok.type == 'paragraph_open' and i + 1 < len(tokens):
            text = _inline_text(tokens[i + 1]).strip()
            if text:
                return text
    return ''


def _plain_text(tokens: list) -> str:
    return ' '.join(_inline_text(t) for t in tokens if t.type == 'inline').strip()


def _word_count(tokens: list) -> int:
    return sum(len(_inline_text(t).split()) for t in tokens if t.type == 'inline')


def render_markup(body: str, summary: Optional[str] = None, preset: str = 'gfm-like') -> RenderedMarkup:
    """Render body to HTML; summary is explicit, else text before <!--more-->, else first paragraph."""
    md = make_parser(preset)
    tokens = md.parse(body)
    toc = _add_anchors(tokens)
    html = md.renderer.render(tokens, md.options, {})

    if summary is None:
        if MORE_MARKER in body:
            summary = _plain_text(md.parse(body.split(MORE_MARKER, 1)[0]))
        else:
            summary = _first_paragraph(tokens)

    return RenderedMarkup(html=html, toc=toc, summary=summary, word_count=_word_count(tokens))
