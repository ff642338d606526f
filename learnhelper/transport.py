"""
HTTP plumbing shared by the clients.

Both helpers send one request, check the status code and translate the HTTP
library's exceptions into NetworkError (the original exception is chained).
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

import httpx
import requests

from learnhelper.errors import NetworkError

logger = logging.getLogger(__name__)


def build_async_client(user_agent: str) -> httpx.AsyncClient:
    # No default timeout: only the reply deletion sets one.
    return httpx.AsyncClient(
        headers={"User-Agent": user_agent},
        follow_redirects=True,
        timeout=None,
    )


def build_session(user_agent: str) -> requests.Session:
    session = requests.Session()
    session.headers["User-Agent"] = user_agent
    return session


async def send(client: httpx.AsyncClient, method: str, url: str, **kwargs: Any) -> httpx.Response:
    logger.debug("%s %s", method, url)
    try:
        resp = await client.request(method, url, **kwargs)
        resp.raise_for_status()
    except httpx.HTTPError as exc:
        raise NetworkError(f"{method} {url}: {exc}") from exc
    return resp


def send_blocking(session: requests.Session, method: str, url: str, **kwargs: Any) -> requests.Response:
    logger.debug("%s %s", method, url)
    try:
        resp = session.request(method, url, **kwargs)
        resp.raise_for_status()
    except requests.RequestException as exc:
        raise NetworkError(f"{method} {url}: {exc}") from exc
    return resp


def upload_part(file: Optional[Tuple[str, bytes]]) -> Dict[str, Tuple[Optional[str], Any]]:
    """
    The 'fileupload' multipart field.

    (filename, content) when a file is given, otherwise the text 'undefined',
    which is what the portal's own form sends.
    """
    if file is None:
        return {"fileupload": (None, b"undefined")}
    filename, content = file
    return {"fileupload": (filename, content)}
