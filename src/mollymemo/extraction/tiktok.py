"""Short-video extraction: playback URL unfurl, two-tier transcription, repo discovery.

Transcription tries by-reference ingestion first (ElevenLabs fetches the
signed playback URL itself) and only downloads and uploads the video when
that does not produce a transcript.
"""

import logging
from functools import lru_cache

import httpx

from mollymemo.config import get_settings
from mollymemo.errors import ConfigurationError
from mollymemo.extraction.repo_links import find_repo_urls, merge_repo_urls
from mollymemo.http import USER_AGENT, fetch_bytes, json_object, send_request
from mollymemo.llm.repos import extract_repos_from_text
from mollymemo.models.content import RepoExtraction, ShortVideoResult

logger = logging.getLogger(__name__)

TIKWM_API = "https://www.tikwm.com/api/"
ELEVENLABS_STT_API = "https://api.elevenlabs.io/v1/speech-to-text"
STT_MODEL = "scribe_v1"
MAX_VIDEO_BYTES = 50 * 1024 * 1024  # 50MB

# Preference order for playable URLs in the unfurl response
_PLAY_FIELDS = ("play", "hdplay", "wmplay")


def _timeout() -> httpx.Timeout:
    return httpx.Timeout(get_settings().http_timeout_seconds)


def _require_api_key() -> str:
    api_key = get_settings().elevenlabs_api_key
    if not api_key:
        raise ConfigurationError("ELEVENLABS_API_KEY not configured")
    return api_key


@lru_cache
def _log_configuration_error(message: str) -> None:
    """Log each distinct configuration error once per process."""
    logger.error("Short-video extraction unavailable: %s", message)


def _transcript_text(response: httpx.Response) -> str | None:
    text = (json_object(response) or {}).get("text")
    return text if isinstance(text, str) and text else None


async def resolve_play_url(page_url: str) -> str | None:
    """Ask the unfurl service for a directly fetchable playback URL."""
    try:
        async with httpx.AsyncClient(timeout=_timeout()) as client:
            response = await send_request(client, "POST", TIKWM_API, data={"url": page_url})
    except Exception as exc:
        logger.warning("Unfurl request failed for %s: %s", page_url, exc)
        return None

    if not response.is_success:
        logger.warning("Unfurl service returned %d for %s", response.status_code, page_url)
        return None

    data = (json_object(response) or {}).get("data")
    if isinstance(data, dict):
        for field in _PLAY_FIELDS:
            if data.get(field):
                return data[field]

    logger.warning("No playable URL in unfurl response for %s", page_url)
    return None


async def transcribe_by_reference(video_url: str, api_key: str) -> str | None:
    """Tier 1: pass the remote URL to the speech-to-text service."""
    try:
        async with httpx.AsyncClient(timeout=_timeout()) as client:
            response = await send_request(
                client,
                "POST",
                ELEVENLABS_STT_API,
                headers={"xi-api-key": api_key},
                data={"model_id": STT_MODEL, "cloud_storage_url": video_url},
            )
    except Exception as exc:
        logger.info("By-reference transcription failed: %s", exc)
        return None

    if not response.is_success:
        logger.info(
            "By-reference transcription returned %d: %s",
            response.status_code,
            response.text[:200],
        )
        return None

    transcript = _transcript_text(response)
    if transcript is None:
        logger.info("By-reference transcription returned no transcript")
    return transcript


async def transcribe_by_upload(video_url: str, api_key: str) -> str | None:
    """Tier 2: download the video (capped at MAX_VIDEO_BYTES) and upload it."""
    try:
        async with httpx.AsyncClient(timeout=_timeout(), follow_redirects=True) as client:
            video_bytes = await fetch_bytes(
                client, video_url, MAX_VIDEO_BYTES, headers={"User-Agent": USER_AGENT}
            )
            if video_bytes is None:
                logger.error("Video download failed or exceeded %d bytes", MAX_VIDEO_BYTES)
                return None

            response = await send_request(
                client,
                "POST",
                ELEVENLABS_STT_API,
                headers={"xi-api-key": api_key},
                data={"model_id": STT_MODEL},
                files={"file": ("video.mp4", video_bytes, "video/mp4")},
            )
    except Exception as exc:
        logger.error("Upload transcription failed: %s", exc)
        return None

    if not response.is_success:
        logger.error(
            "Upload transcription returned %d: %s",
            response.status_code,
            response.text[:200],
        )
        return None
    return _transcript_text(response)


async def transcribe(video_url: str, api_key: str) -> tuple[str, str] | None:
    """Run both transcription tiers in order. Returns (transcript, method) or None."""
    transcript = await transcribe_by_reference(video_url, api_key)
    if transcript:
        return transcript, "reference"

    logger.info("Falling back to download-and-upload transcription")
    transcript = await transcribe_by_upload(video_url, api_key)
    if transcript:
        return transcript, "upload"
    return None


async def extract_tiktok(url: str) -> ShortVideoResult | None:
    """Extract a transcript and repository references from a short video.

    Returns None when the speech-to-text key is missing, no playback URL is
    available, or both transcription tiers fail. A failing repo sub-pipeline
    does not fail the extraction; the transcript is kept with no repos.
    """
    try:
        api_key = _require_api_key()
    except ConfigurationError as exc:
        _log_configuration_error(str(exc))
        return None

    video_url = await resolve_play_url(url)
    if not video_url:
        return None

    transcribed = await transcribe(video_url, api_key)
    if transcribed is None:
        logger.error("Transcription failed for %s", url)
        return None
    transcript, method = transcribed

    repo_urls = find_repo_urls(transcript)
    if repo_urls:
        return ShortVideoResult(
            transcript=transcript, repo_urls=repo_urls, transcription_method=method
        )

    try:
        extraction = await extract_repos_from_text(transcript, url=url)
    except Exception:
        logger.warning("Repo extraction failed for %s, keeping transcript", url, exc_info=True)
        extraction = RepoExtraction()

    return ShortVideoResult(
        transcript=transcript,
        repo_urls=merge_repo_urls(extraction.urls),
        repo_extraction_cost=extraction.cost_usd,
        transcription_method=method,
        repo_extraction_ran=True,
    )
