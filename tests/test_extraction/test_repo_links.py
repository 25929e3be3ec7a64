"""Tests for explicit repository reference scanning."""

from mollymemo.extraction.repo_links import find_repo_urls, merge_repo_urls


def test_trailing_punctuation_yields_single_canonical_url():
    text = "Try github.com/acme/tool. Also github.com/acme/tool, it is great"
    assert find_repo_urls(text) == ["https://github.com/acme/tool"]


def test_scheme_and_www_are_normalized():
    text = "see http://www.github.com/acme/tool and https://github.com/other/lib"
    assert find_repo_urls(text) == [
        "https://github.com/acme/tool",
        "https://github.com/other/lib",
    ]


def test_git_suffix_and_subpaths_dropped():
    text = "clone https://github.com/acme/tool.git or read github.com/acme/tool/blob/main/README.md"
    assert find_repo_urls(text) == ["https://github.com/acme/tool"]


def test_case_insensitive_dedupe_keeps_first_seen():
    text = "github.com/Acme/Tool then github.com/acme/tool"
    assert find_repo_urls(text) == ["https://github.com/Acme/Tool"]


def test_wrapped_in_parentheses_and_markdown():
    text = "([repo](https://github.com/acme/tool))"
    assert find_repo_urls(text) == ["https://github.com/acme/tool"]


def test_no_references():
    assert find_repo_urls("nothing to see here") == []
    assert find_repo_urls(None) == []
    assert find_repo_urls("") == []


def test_merge_repo_urls_dedupes_across_groups():
    merged = merge_repo_urls(
        ["https://github.com/acme/tool"],
        ["https://github.com/ACME/tool/", "https://github.com/b/c"],
    )
    assert merged == ["https://github.com/acme/tool", "https://github.com/b/c"]
