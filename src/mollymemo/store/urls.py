"""URL normalization for capture and duplicate detection.

Strips utm_* tracking parameters, then applies protocol/trailing-slash
normalization via url-normalize. The normalized form is what the store
persists as the item's source URL.
"""

from urllib.parse import parse_qs, urlencode, urlparse, urlunparse

from url_normalize import url_normalize


def normalize_url(raw_url: str) -> str:
    """Normalize a captured URL.

    utm_* params are stripped by hand; url-normalize's filter_params=True
    would remove every query param, including ones that identify content.
    """
    parsed = urlparse(raw_url.strip())
    params = parse_qs(parsed.query, keep_blank_values=True)
    filtered = {k: v for k, v in params.items() if not k.startswith("utm_")}
    cleaned = urlunparse(parsed._replace(query=urlencode(filtered, doseq=True), fragment=""))
    return url_normalize(cleaned)


def is_valid_capture_url(raw_url: str) -> bool:
    """Accept absolute http(s) URLs with a host."""
    try:
        parsed = urlparse(raw_url.strip())
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)
