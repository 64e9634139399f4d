# services/crawler.py

import logging
from typing import Optional
from urllib.parse import urlparse

import requests

from app.config import settings

logger = logging.getLogger(__name__)

ALLOWED_SCHEMES = ("http", "https")

CHUNK_SIZE = 64 * 1024


class PageTooLargeError(Exception):
    """取得したページが max_fetch_bytes を超えた。"""


def fetch_html(
    url: str,
    timeout: Optional[float] = None,
    max_bytes: Optional[int] = None,
) -> str:
    """
    公開済みページなどを解析するための単純な GET。
    並列もリトライも入れていない。HTTP エラーはそのまま例外にする。

    - http / https 以外の URL は ValueError
    - 本文はストリームで読み、max_bytes を超えたら PageTooLargeError
    """
    scheme = urlparse(url).scheme.lower()
    if scheme not in ALLOWED_SCHEMES:
        raise ValueError(f"Unsupported URL scheme: {scheme or '(none)'}")

    limit = max_bytes if max_bytes is not None else settings.max_fetch_bytes
    headers = {
        "User-Agent": settings.user_agent,
    }

    with requests.get(
        url,
        headers=headers,
        timeout=timeout if timeout is not None else settings.fetch_timeout,
        stream=True,
    ) as resp:
        resp.raise_for_status()

        body = bytearray()
        for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
            body.extend(chunk)
            if len(body) > limit:
                logger.warning("[crawler] body exceeds %d bytes url=%s", limit, url)
                raise PageTooLargeError(f"Page is larger than {limit} bytes")

        encoding = resp.encoding or "utf-8"

    logger.debug("[crawler] fetched url=%s bytes=%d", url, len(body))
    try:
        return body.decode(encoding, errors="replace")
    except LookupError:
        # Content-Type に未知の charset が書かれていた
        return body.decode("utf-8", errors="replace")
