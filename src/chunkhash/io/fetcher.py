"""Stream remote sources through a writer."""

from __future__ import annotations

import logging
from collections.abc import Mapping

import requests

from chunkhash.writer import HashingWriter

logger = logging.getLogger(__name__)

DEFAULT_HEADERS: Mapping[str, str] = {
    "User-Agent": "chunkhash",
    "Accept": "*/*",
}


def is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def stream_url(
    url: str,
    writer: HashingWriter,
    *,
    timeout_seconds: float | None = None,
    chunk_size: int = 64 * 1024,
    headers: Mapping[str, str] | None = None,
) -> int:
    """Download `url` into `writer` chunk by chunk; return the bytes streamed.

    Nothing is retried: a partially streamed body cannot be replayed into the
    same writer.
    """

    merged_headers = dict(DEFAULT_HEADERS)
    if headers:
        merged_headers.update(headers)

    logger.debug("Streaming %s", url)
    with requests.get(url, stream=True, timeout=timeout_seconds, headers=merged_headers) as response:
        if response.status_code == 404:
            raise FileNotFoundError(f"Source not found at {url}")
        response.raise_for_status()

        streamed = 0
        for chunk in response.iter_content(chunk_size=chunk_size):
            if chunk:
                streamed += writer.write(chunk)
    return streamed


__all__ = ["is_url", "stream_url"]
