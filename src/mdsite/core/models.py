"""Documents, the immutable Site collection, and rendered Page artifacts"""

from dataclasses import dataclass, field
from datetime import date
from pathlib import Path, PurePosixPath
from typing import Optional

from mdsite.core.errors import BuildError
from mdsite.core.metadata import Metadata, date_sort_key
from mdsite.core.utils.slug import slugify


@dataclass(frozen=True)
class Document:
    """A parsed source file; identified by its content-relative POSIX path."""
    path:      str
    metadata:  Metadata
    body:      str            # marked-up text after the front-matter block
    slug:      str
    format:    str = 'none'   # front-matter format: toml, yaml or none
    body_line: int = 1
    source:    Optional[Path] = None

    @property
    def title(self) -> str:
        return self.metadata.title or self.slug

    @property
    def date(self) -> Optional[date]:
        return self.metadata.date

    @property
    def tags(self) -> list[str]:
        return self.metadata.tags

    @property
    def draft(self) -> bool:
        return self.metadata.draft

    @property
    def section(self) -> PurePosixPath:
        """Output directory relative to the site root (bundles drop their own folder)."""
        parent = PurePosixPath(self.path).parent
        if PurePosixPath(self.path).stem == 'index' and parent != PurePosixPath('.'):
            parent = parent.parent
        return parent

    @property
    def url(self) -> str:
        parts = [p for p in self.section.parts if p != '.']
        return '/' + '/'.join(parts + [self.slug]) + '/'


def sort_listing(docs) -> list[Document]:
    """Date descending, ties by path ascending; undated documents go last."""
    by_path = sorted(docs, key=lambda d: d.path)
    dated = [d for d in by_path if d.date is not None]
    undated = [d for d in by_path if d.date is None]
    # stable sort keeps path order among equal dates
    dated.sort(key=lambda d: date_sort_key(d.date), reverse=True)
    return dated + undated


@dataclass(frozen=True)
class Site:
    """Every successfully parsed Document of one build, passed explicitly to the renderer."""
    documents: tuple[Document, ...] = ()

    def get(self, path: str) -> Optional[Document]:
        return next((d for d in self.documents if d.path == path), None)

    def listing(self, include_drafts: bool = False) -> list[Document]:
        docs = [d for d in self.documents if include_drafts or not d.draft]
        return sort_listing(docs)

    def tags(self) -> dict[str, list[Document]]:
        """Tag -> listed documents, keyed in tag-name order."""
        index: dict[str, list[Document]] = {}
        for doc in self.listing():
            for tag in dict.fromkeys(doc.tags):
                index.setdefault(tag, []).append(doc)
        return dict(sorted(index.items()))

    def archive(self) -> dict[int, list[Document]]:
        """Year -> listed dated documents, newest year first."""
        years: dict[int, list[Document]] = {}
        for doc in self.listing():
            if doc.date is not None:
                years.setdefault(doc.date.year, []).append(doc)
        return dict(sorted(years.items(), reverse=True))


def tag_url(tag: str) -> str:
    return f"/tags/{slugify(tag) or 'tag'}/"


@dataclass(frozen=True)
class Page:
    """A rendered output artifact; listing pages carry no document."""
    url:      str
    html:     str
    layout:   str
    document: Optional[Document] = None

    @property
    def output_path(self) -> PurePosixPath:
        return PurePosixPath(self.url.strip('/')) / 'index.html'


@dataclass
class BuildReport:
    pages:  list[Page] = field(default_factory=list)
    errors: list[BuildError] = field(default_factory=list)
    drafts: int = 0

    @property
    def ok(self) -> bool:
        return not self.errors
