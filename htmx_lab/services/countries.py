from __future__ import annotations
import logging
from typing import List
from urllib.parse import quote

import httpx

logger = logging.getLogger(__name__)

async def search_countries(text: str, base_url: str, client: httpx.AsyncClient | None = None, timeout: float = 10.0) -> List[str]:
    """
    Return common country names matching ``text``.
    The upstream answers 404 when nothing matches; that is an empty result, not an error.
    """
    text = (text or "").strip()
    if not text:
        return []
    url = f"{base_url}/{quote(text)}"
    owns_client = client is None
    client = client or httpx.AsyncClient(follow_redirects=True, timeout=timeout)
    try:
        r = await client.get(url)
        if r.status_code == 404:
            return []
        r.raise_for_status()
        data = r.json()
    finally:
        if owns_client:
            await client.aclose()
    names = []
    for country in data if isinstance(data, list) else []:
        name = ((country or {}).get("name") or {}).get("common")
        if name:
            names.append(name)
    logger.debug("search %r -> %d result(s)", text, len(names))
    return sorted(names)
