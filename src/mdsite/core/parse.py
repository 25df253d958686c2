"""File discovery and per-file Document parsing"""

import logging
from pathlib import Path

from mdsite.core.errors import BuildError, SourceReadError
from mdsite.core.frontmatter import parse_front_matter
from mdsite.core.models import Document, Site
from mdsite.core.utils.slug import slugify


logger = logging.getLogger(__name__)

MD_EXTENSIONS = {'.md', '.markdown'}


def discover_files(path: Path) -> list[Path]:
    """Return sorted markdown files under path, or [path] if a single file."""
    if path.is_file():
        return [path] if path.suffix in MD_EXTENSIONS else []
    return sorted(
        p for p in path.rglob('*')
        if p.is_file() and p.suffix in MD_EXTENSIONS and not p.name.startswith('.')
    )


def _relative(path: Path, root: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.name


def _default_slug(rel: str) -> str:
    p = Path(rel)
    if p.stem == 'index' and p.parent != Path('.'):
        return slugify(p.parent.name)
    return slugify(p.stem)


def parse_text(text: str, rel_path: str, source: Path = None) -> Document:
    """Build a Document from raw file text. Raises ParseError."""
    parsed = parse_front_matter(text, rel_path)
    slug = slugify(parsed.metadata.slug) if parsed.metadata.slug else _default_slug(rel_path)
    return Document(
        path=rel_path,
        metadata=parsed.metadata,
        body=parsed.body,
        slug=slug or 'untitled',
        format=parsed.format,
        body_line=parsed.body_line,
        source=source,
    )


def parse_file(path: Path, root: Path = None) -> Document:
    """Read and parse a single file. Raises SourceReadError or ParseError."""
    rel = _relative(path, root) if root is not None else path.name
    try:
        raw = path.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        raise SourceReadError(rel, f"cannot read source: {e}") from e
    return parse_text(raw, rel, source=path)


def parse_dir(root: Path) -> tuple[Site, list[BuildError]]:
    """Parse every file under root; failing files are reported and skipped."""
    base = root if root.is_dir() else root.parent
    docs: list[Document] = []
    errors: list[BuildError] = []
    for p in discover_files(root):
        try:
            docs.append(parse_file(p, base))
        except BuildError as e:
            logger.warning("Skipping %s", e)
            errors.append(e)
    logger.info("Parsed %d document(s), %d error(s)", len(docs), len(errors))
    return Site(documents=tuple(docs)), errors
