"""Shared fixtures for core unit tests"""

import pytest

from mdsite.config import Settings
from mdsite.core.layouts import make_environment
from mdsite.core.metadata import Metadata
from mdsite.core.models import Document


ABOUT_MD = """\
+++
title = "About Me"
layout = "about-alternative"
+++

Security researcher.

## Experience

- Auditing
- Fuzzing
- Teaching
"""

POST_MD = """\
+++
title = "Fuzzing Solana programs"
date = 2026-02-18
draft = false
tags = ["solana", "fuzzer"]
+++

Getting started with a fuzzer.

```rust
fn main() {}
```
"""


def _make_doc(path: str, **fields) -> Document:
    """Build a Document directly, bypassing the filesystem."""
    body = fields.pop("body", "Body text.\n")
    stem = path.rsplit("/", 1)[-1].rsplit(".", 1)[0]
    return Document(path=path, metadata=Metadata.from_native(fields), body=body, slug=stem)


@pytest.fixture(name="make_doc")
def make_doc_fixture():
    return _make_doc


@pytest.fixture(name="settings")
def settings_fixture(tmp_path):
    return Settings(layouts_dir=str(tmp_path / "layouts"))


@pytest.fixture(name="env")
def env_fixture(tmp_path):
    layouts = tmp_path / "layouts"
    layouts.mkdir(exist_ok=True)
    (layouts / "about-alternative.html").write_text(
        '<title>{{ page.title }}</title>\n<div class="about">{{ page.content | safe }}</div>\n'
    )
    return make_environment(layouts)


@pytest.fixture(name="about_md")
def about_md_fixture():
    return ABOUT_MD


@pytest.fixture(name="post_md")
def post_md_fixture():
    return POST_MD
