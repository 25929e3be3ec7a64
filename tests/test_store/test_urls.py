"""Tests for capture URL normalization and validation."""

import pytest

from mollymemo.store.urls import is_valid_capture_url, normalize_url


def test_strips_utm_params():
    url = "https://example.com/post?utm_source=twitter&utm_medium=social&id=5"
    assert normalize_url(url) == "https://example.com/post?id=5"


def test_keeps_content_params():
    assert normalize_url("https://example.com/watch?v=abc") == "https://example.com/watch?v=abc"


def test_drops_fragment():
    assert normalize_url("https://example.com/post#comments") == "https://example.com/post"


def test_lowercases_host():
    assert normalize_url("https://EXAMPLE.com/Post") == "https://example.com/Post"


def test_same_url_variants_normalize_equal():
    a = normalize_url("https://example.com/post?utm_campaign=x")
    b = normalize_url("  https://example.com/post  ")
    assert a == b


@pytest.mark.parametrize(
    "url", ["https://example.com", "http://x.com/a/status/1", "https://github.com/acme/tool"]
)
def test_valid_capture_urls(url: str):
    assert is_valid_capture_url(url)


@pytest.mark.parametrize("url", ["", "not a url", "ftp://example.com/file", "/relative/path"])
def test_invalid_capture_urls(url: str):
    assert not is_valid_capture_url(url)
