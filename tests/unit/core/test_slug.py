"""Unit tests for core/utils/slug.py"""

import pytest

from mdsite.core.utils.slug import slugify


@pytest.mark.parametrize("text,expected", [
    ("Hello World", "hello-world"),
    ("my_file_name", "my-file-name"),
    ("  leading and trailing  ", "leading-and-trailing"),
    ("multiple---hyphens", "multiple-hyphens"),
    ("Special! Ch@rs#", "special-chrs"),
    ("Café Crème", "cafe-creme"),
    ("", ""),
])
def test_slugify_basic(text, expected):
    """slugify converts text to a lowercase hyphenated ASCII slug."""
    assert slugify(text) == expected
