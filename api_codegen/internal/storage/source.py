import logging
from typing import Optional

import httpx

from ...errors import FileSystemError, SourceError
from ..types.models import File
from .filesystem import FileSystem

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30.0


def is_url(src: str) -> bool:
    return src.startswith(("http://", "https://"))


async def fetch_source(
    url: str, transport: Optional[httpx.AsyncBaseTransport] = None
) -> File:
    """Загрузка спецификации по HTTP"""
    try:
        async with httpx.AsyncClient(
            transport=transport, timeout=REQUEST_TIMEOUT, follow_redirects=True
        ) as client:
            response = await client.get(url)
            response.raise_for_status()
    except httpx.HTTPError as e:
        raise SourceError(f"Failed to download {url}: {e}", path=url) from e

    return File(path=url, content=response.text)


async def read_source(
    src: str,
    fs: FileSystem,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> File:
    """Чтение спецификации из файла или по ссылке"""
    if is_url(src):
        return await fetch_source(src, transport)

    if not await fs.exists(src):
        raise SourceError(f"Source file {src} does not exist", path=src)

    try:
        content = await fs.read(src)
    except FileSystemError as e:
        raise SourceError(f"Failed to read source {src}: {e.message}", path=src) from e

    return File(path=src, content=content)
