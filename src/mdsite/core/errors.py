"""Per-document build errors; none of them abort the whole batch"""

from pathlib import Path
from typing import Optional


class BuildError(Exception):
    """Base class: a failure tied to a single source document."""
    kind = "error"

    def __init__(self, path: Path | str, message: str):
        self.path = str(path)
        self.message = message
        super().__init__(f"{self.path}: {message}")


class ParseError(BuildError):
    """Malformed metadata block (unterminated, invalid syntax, wrong field type)."""
    kind = "parse"

    def __init__(self, path: Path | str, message: str, line: Optional[int] = None):
        self.line = line
        where = f"line {line}: " if line is not None else ""
        super().__init__(path, f"{where}{message}")


class ConfigError(BuildError):
    """Reference to a layout that does not exist."""
    kind = "config"


class SourceReadError(BuildError):
    """Source file could not be read or decoded."""
    kind = "io"
