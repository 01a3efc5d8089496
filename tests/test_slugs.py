import re

import pytest

from affiflow.services.slugs import detect_platform, is_valid_slug, slugify, with_suffix


@pytest.mark.parametrize(
    'text, expected',
    [
        ('My Store', 'my-store'),
        ('  Hello,   World!  ', 'hello-world'),
        ('snake_case_title', 'snake-case-title'),
        ('--Already-Slugged--', 'already-slugged'),
        ('Đồ gia dụng', 'gia-dng'),
        ('!!!', ''),
    ],
)
def test_slugify(text, expected):
    assert slugify(text) == expected


@pytest.mark.parametrize(
    'slug, valid',
    [
        ('odecor', True),
        ('my-store-2', True),
        ('ab', False),
        ('a' * 51, False),
        ('a' * 50, True),
        ('Upper', False),
        ('double--dash', False),
        ('-leading', False),
        ('trailing-', False),
        ('', False),
    ],
)
def test_is_valid_slug(slug, valid):
    assert is_valid_slug(slug) is valid


def test_with_suffix_appends_lowercase_token():
    slug = with_suffix('odecor')
    assert re.fullmatch(r'odecor-[a-z0-9]{6}', slug)
    assert is_valid_slug(slug)


@pytest.mark.parametrize(
    'url, platform',
    [
        ('https://shopee.vn/product/123', 'shopee'),
        ('https://s.lazada.vn/abc', 'lazada'),
        ('https://tiki.vn/p/1', 'tiki'),
        ('https://www.amazon.com/dp/B0', 'amazon'),
        ('https://sendo.vn/x', 'sendo'),
        ('https://example.com/deal', 'other'),
    ],
)
def test_detect_platform(url, platform):
    assert detect_platform(url) == platform
