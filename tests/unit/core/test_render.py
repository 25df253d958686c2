"""Unit tests for core/render.py"""

from datetime import date

import pytest

from mdsite.core.errors import ConfigError
from mdsite.core.models import Page, Site
from mdsite.core.parse import parse_text
from mdsite.core.render import abs_url, render_document, render_listings, write_page


def test_about_page_uses_named_layout(about_md, env, settings):
    """The about page renders through about-alternative with its heading and three-item list."""
    doc = parse_text(about_md, "about.md")
    page = render_document(doc, Site((doc,)), env, settings)
    assert page.layout == "about-alternative"
    assert "<title>About Me</title>" in page.html
    assert '<div class="about">' in page.html
    assert '<h2 id="experience">Experience</h2>' in page.html
    assert page.html.count("<li>") == 3


def test_post_code_block_and_tags(post_md, env, settings):
    """A post keeps its rust block verbatim in a code region and links its tags."""
    doc = parse_text(post_md, "posts/fuzz.md")
    page = render_document(doc, Site((doc,)), env, settings)
    assert page.layout == "default"
    assert '<pre><code class="language-rust">fn main() {}\n</code></pre>' in page.html
    assert 'href="/tags/solana/"' in page.html
    assert 'href="/tags/fuzzer/"' in page.html
    assert '<time datetime="2026-02-18">' in page.html
    assert page.url == "/posts/fuzz/"


def test_missing_block_uses_default_layout(env, settings):
    """No metadata: empty metadata, default layout, title from the slug."""
    doc = parse_text("Plain text.\n", "plain.md")
    page = render_document(doc, Site((doc,)), env, settings)
    assert page.layout == "default"
    assert "<h1>plain</h1>" in page.html
    assert "<p>Plain text.</p>" in page.html


def test_undefined_layout_raises(env, settings):
    """A layout that does not exist is a ConfigError for that document."""
    doc = parse_text('+++\nlayout = "nope"\n+++\nBody\n', "a.md")
    with pytest.raises(ConfigError) as exc:
        render_document(doc, Site((doc,)), env, settings)
    assert exc.value.path == "a.md"


def test_draft_renders_directly(env, settings):
    """Drafts still render when asked for individually."""
    doc = parse_text('+++\ntitle = "WIP"\ndraft = true\n+++\nSoon.\n', "wip.md")
    page = render_document(doc, Site((doc,)), env, settings)
    assert "<h1>WIP</h1>" in page.html


def test_metadata_exposed_to_layout(tmp_path, settings):
    """Unknown fields reach templates through `meta`; neighbours through page.prev/next."""
    from mdsite.core.layouts import make_environment
    layouts = tmp_path / "custom"
    layouts.mkdir()
    (layouts / "default.html").write_text(
        "{{ meta.author }}|{{ page.prev.title if page.prev else '' }}|{{ page.next.title if page.next else '' }}"
    )
    older = parse_text('+++\ntitle = "Old"\ndate = 2026-01-01\n+++\n', "old.md")
    newer = parse_text('+++\ntitle = "New"\ndate = 2026-03-01\n+++\n', "new.md")
    mid = parse_text('+++\ntitle = "Mid"\nauthor = "R"\ndate = 2026-02-01\n+++\n', "mid.md")
    page = render_document(mid, Site((older, newer, mid)), make_environment(layouts), settings)
    assert page.html == "R|New|Old"


def test_listings_exclude_drafts_and_order(env, settings, make_doc):
    """The home listing is newest first and never contains drafts."""
    site = Site((
        make_doc("posts/a.md", title="Alpha", date=date(2026, 1, 1), tags=["solana"]),
        make_doc("posts/b.md", title="Beta", date=date(2026, 2, 1), tags=["solana", "fuzzer"]),
        make_doc("posts/c.md", title="Hidden Draft", date=date(2026, 3, 1), tags=["solana"], draft=True),
    ))
    pages = {p.url: p for p in render_listings(site, env, settings)}
    assert set(pages) == {"/", "/tags/", "/tags/solana/", "/tags/fuzzer/", "/archive/2026/"}
    home = pages["/"].html
    assert "Hidden Draft" not in home
    assert home.index("Beta") < home.index("Alpha")
    assert "Hidden Draft" not in pages["/tags/solana/"].html
    assert 'href="/posts/b/"' in pages["/tags/fuzzer/"].html
    assert 'href="/posts/a/"' not in pages["/tags/fuzzer/"].html


def test_listings_without_tags(env, settings, make_doc):
    """No tags means no tag pages; undated documents produce no archive."""
    pages = render_listings(Site((make_doc("a.md"),)), env, settings)
    assert [p.url for p in pages] == ["/"]


def test_abs_url():
    assert abs_url("/", "/posts/a/") == "/posts/a/"
    assert abs_url("https://example.com/blog/", "/posts/a/") == "https://example.com/blog/posts/a/"


def test_write_page(tmp_path):
    """write_page creates parent directories and writes index.html."""
    dest = write_page(Page(url="/posts/a/", html="<p>x</p>", layout="default"), tmp_path / "out")
    assert dest == tmp_path / "out" / "posts" / "a" / "index.html"
    assert dest.read_text() == "<p>x</p>"


def test_tags_sharing_a_slug_keep_first_page(env, settings, make_doc, caplog):
    """Two tags that slugify alike produce one tag page and a warning."""
    site = Site((
        make_doc("a.md", title="Alpha", tags=["Rust"]),
        make_doc("b.md", title="Beta", tags=["rust"]),
    ))
    with caplog.at_level("WARNING", logger="mdsite"):
        pages = render_listings(site, env, settings)
    tag_pages = [p for p in pages if p.url == "/tags/rust/"]
    assert len(tag_pages) == 1
    assert "Alpha" in tag_pages[0].html
    assert "shares /tags/rust/" in caplog.text


def test_layout_python_error_is_config_error(tmp_path, settings):
    """A plain Python error raised inside a layout is reported as a ConfigError."""
    from mdsite.core.layouts import make_environment
    layouts = tmp_path / "custom"
    layouts.mkdir()
    (layouts / "bad.html").write_text("{{ meta.n + 1 }}")
    doc = parse_text('+++\nlayout = "bad"\nn = "text"\n+++\n', "a.md")
    with pytest.raises(ConfigError, match="failed to render"):
        render_document(doc, Site((doc,)), make_environment(layouts), settings)
