"""Front-matter block detection, parsing, and re-serialization

A block opens on the very first line with ``+++`` (TOML) or ``---`` (YAML)
and closes on the next line holding the same delimiter.
"""

import re
import tomllib
from dataclasses import dataclass
from datetime import time
from pathlib import Path
from typing import Any, Optional

import tomli_w
import yaml

from mdsite.core.errors import ParseError
from mdsite.core.metadata import Metadata, check_field, to_meta_value


DELIMITERS = {'+++': 'toml', '---': 'yaml'}
TOML_LINE_RE = re.compile(r'at line (\d+)')


@dataclass(frozen=True)
class FrontMatterSplit:
    format: str         # 'toml', 'yaml' or 'none'
    block: str          # text between the delimiter lines
    body: str
    body_line: int      # 1-based file line where body starts


@dataclass(frozen=True)
class ParsedFrontMatter:
    metadata: Metadata
    body: str
    format: str
    body_line: int


def split_front_matter(text: str, path: Path | str = '<string>') -> FrontMatterSplit:
    """Separate a leading delimited block from the body; no block yields format 'none'."""
    text = text.removeprefix('\ufeff')
    lines = text.splitlines(keepends=True)
    fmt = DELIMITERS.get(lines[0].rstrip()) if lines else None
    if fmt is None:
        return FrontMatterSplit('none', '', text, 1)

    opener = lines[0].rstrip()
    for i in range(1, len(lines)):
        if lines[i].rstrip() == opener:
            return FrontMatterSplit(fmt, ''.join(lines[1:i]), ''.join(lines[i + 1:]), i + 2)
    raise ParseError(path, f"unterminated {fmt} front matter (missing closing '{opener}')", line=1)


def _load_toml(block: str, path) -> dict[str, Any]:
    try:
        return tomllib.loads(block)
    except tomllib.TOMLDecodeError as e:
        m = TOML_LINE_RE.search(str(e))
        # block line 1 is file line 2
        line = int(m.group(1)) + 1 if m else None
        raise ParseError(path, f"invalid TOML front matter: {e}", line=line) from e


def _load_yaml(block: str, path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(block)
    except yaml.YAMLError as e:
        mark = getattr(e, 'problem_mark', None)
        line = mark.line + 2 if mark is not None else None
        raise ParseError(path, f"invalid YAML front matter: {e}", line=line) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ParseError(path, f"YAML front matter must be a mapping, got {type(data).__name__}", line=2)
    return data


def _field_line(block: str, key: str) -> Optional[int]:
    """File line of the assignment for key, if it can be found."""
    pattern = re.compile(rf'^\s*["\']?{re.escape(str(key))}["\']?\s*[=:]')
    for i, line in enumerate(block.splitlines(), start=2):
        if pattern.match(line):
            return i
    return None


def parse_front_matter(text: str, path: Path | str = '<string>') -> ParsedFrontMatter:
    """Parse the leading block into typed Metadata; body is returned untouched."""
    split = split_front_matter(text, path)
    if split.format == 'none':
        return ParsedFrontMatter(Metadata(), split.body, 'none', split.body_line)

    data = _load_toml(split.block, path) if split.format == 'toml' else _load_yaml(split.block, path)

    fields = {}
    for key, raw in data.items():
        if raw is None:
            continue
        try:
            fields[str(key)] = check_field(str(key), to_meta_value(raw))
        except (TypeError, ValueError) as e:
            raise ParseError(path, str(e), line=_field_line(split.block, key)) from e
    return ParsedFrontMatter(Metadata(fields), split.body, split.format, split.body_line)


def _yaml_ready(value: Any) -> Any:
    """YAML has no time-of-day type; local times are written as ISO strings."""
    if isinstance(value, time):
        return value.isoformat()
    if isinstance(value, list):
        return [_yaml_ready(v) for v in value]
    if isinstance(value, dict):
        return {k: _yaml_ready(v) for k, v in value.items()}
    return value


def dump_front_matter(metadata: Metadata, fmt: str = 'toml') -> str:
    """Serialize metadata as a delimited block that parses back to an equal Metadata."""
    data = metadata.native()
    if fmt == 'toml':
        return f"+++\n{tomli_w.dumps(data)}+++\n"
    if fmt == 'yaml':
        header = yaml.safe_dump(_yaml_ready(data), default_flow_style=False, allow_unicode=True, sort_keys=False) if data else ''
        return f"---\n{header}---\n"
    raise ValueError(f"unknown front matter format: {fmt}")
