"""Tests for source kind detection and repository URL parsing."""

import pytest

from mollymemo.extraction.router import detect_source_kind, parse_repo_url
from mollymemo.models.item import SourceKind


def test_tiktok_video_url():
    assert detect_source_kind("https://www.tiktok.com/@user/video/123") == SourceKind.SHORT_VIDEO


def test_tiktok_short_link_subdomains():
    assert detect_source_kind("https://vm.tiktok.com/ZMabc/") == SourceKind.SHORT_VIDEO
    assert detect_source_kind("https://vt.tiktok.com/ZSxyz/") == SourceKind.SHORT_VIDEO


def test_x_url():
    assert detect_source_kind("https://x.com/user/status/1") == SourceKind.SOCIAL_POST


def test_twitter_url():
    assert detect_source_kind("https://twitter.com/user/status/1") == SourceKind.SOCIAL_POST


def test_twitter_mobile_subdomain():
    assert detect_source_kind("https://mobile.twitter.com/u/status/1") == SourceKind.SOCIAL_POST


def test_github_url():
    assert detect_source_kind("https://github.com/acme/tool") == SourceKind.CODE_REPO


def test_github_www_url():
    assert detect_source_kind("https://www.github.com/acme/tool") == SourceKind.CODE_REPO


def test_github_subdomain_is_article():
    """Only github.com itself is a repository host."""
    assert detect_source_kind("https://gist.github.com/acme/abc") == SourceKind.ARTICLE


def test_lookalike_hosts_are_articles():
    assert detect_source_kind("https://nottiktok.com/x") == SourceKind.ARTICLE
    assert detect_source_kind("https://box.com/x") == SourceKind.ARTICLE


def test_generic_url_is_article():
    assert detect_source_kind("https://example.com/blog/post") == SourceKind.ARTICLE


@pytest.mark.parametrize("url", ["", "not a url", "http://[invalid", "://", "mailto:a@b.c"])
def test_unparseable_input_is_article(url: str):
    """Detection is total: garbage never raises."""
    assert detect_source_kind(url) == SourceKind.ARTICLE


def test_detection_is_case_insensitive_on_host():
    assert detect_source_kind("https://GitHub.com/acme/tool") == SourceKind.CODE_REPO


def test_detection_is_deterministic():
    url = "https://x.com/user/status/42"
    assert {detect_source_kind(url) for _ in range(5)} == {SourceKind.SOCIAL_POST}


# --- parse_repo_url ---


def test_parse_repo_url_basic():
    assert parse_repo_url("https://github.com/acme/tool") == ("acme", "tool")


def test_parse_repo_url_trailing_slash_and_subpath():
    assert parse_repo_url("https://github.com/acme/tool/") == ("acme", "tool")
    assert parse_repo_url("https://github.com/acme/tool/tree/main/src") == ("acme", "tool")


def test_parse_repo_url_strips_git_suffix():
    assert parse_repo_url("https://github.com/acme/tool.git") == ("acme", "tool")


def test_parse_repo_url_owner_only():
    assert parse_repo_url("https://github.com/acme") is None


def test_parse_repo_url_other_host():
    assert parse_repo_url("https://gitlab.com/acme/tool") is None
