"""
Асинхронный адаптер файловой системы.

Блокирующие вызовы выполняются в `asyncio.to_thread`, любые `OSError`
оборачиваются в `FileSystemError` с путем, на котором произошел сбой.
"""

import asyncio
import glob
import logging
import os
from typing import List

from ...errors import FileSystemError

logger = logging.getLogger(__name__)


def _read(path: str) -> str:
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def _write(path: str, content: str) -> None:
    with open(path, "w", encoding="utf-8") as f:
        f.write(content)


class FileSystem:
    """Операции с файлами, используемые генератором"""

    async def exists(self, path: str) -> bool:
        return await asyncio.to_thread(os.path.exists, path)

    async def read(self, path: str) -> str:
        try:
            return await asyncio.to_thread(_read, path)
        except OSError as e:
            raise FileSystemError(f"Failed to read {path}: {e}", path=path) from e

    async def write(self, path: str, content: str) -> None:
        try:
            await asyncio.to_thread(_write, path, content)
        except OSError as e:
            raise FileSystemError(f"Failed to write {path}: {e}", path=path) from e

    async def make_directory(self, path: str) -> None:
        try:
            await asyncio.to_thread(os.makedirs, path, exist_ok=True)
        except OSError as e:
            raise FileSystemError(
                f"Failed to create directory {path}: {e}", path=path
            ) from e

    async def get_filenames(self, pattern: str) -> List[str]:
        return sorted(await asyncio.to_thread(glob.glob, pattern))

    async def clean(self, pattern: str) -> List[str]:
        """Удаление файлов по шаблону, возвращает удаленные пути"""
        removed = []

        for path in await self.get_filenames(pattern):
            if not await asyncio.to_thread(os.path.isfile, path):
                continue

            try:
                await asyncio.to_thread(os.remove, path)
            except OSError as e:
                raise FileSystemError(f"Failed to remove {path}: {e}", path=path) from e

            logger.info(f"Removed file {path}")
            removed.append(path)

        return removed
