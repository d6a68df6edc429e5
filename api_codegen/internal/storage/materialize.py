"""
Запись сгенерированных файлов на диск.

Существующий файл без флага перезаписи не трогается: вместо записи
в лог выводится unified diff между текущим и новым содержимым.
"""

import difflib
import logging
import os
from typing import List

from ..types.models import File, FileAction, FileOutcome
from .filesystem import FileSystem

logger = logging.getLogger(__name__)


def unified_diff(path: str, current: str, generated: str) -> str:
    return "".join(
        difflib.unified_diff(
            current.splitlines(keepends=True),
            generated.splitlines(keepends=True),
            fromfile=f"{path} (current)",
            tofile=f"{path} (generated)",
        )
    )


async def write_file(
    fs: FileSystem, file: File, dst: str, overwrite: bool = False
) -> FileOutcome:
    path = os.path.join(dst, file.path)

    if not await fs.exists(path):
        logger.info(f"Writing file {path}")
        await fs.write(path, file.content)
        return FileOutcome(path=path, action=FileAction.WRITTEN)

    if file.overwrite or overwrite:
        logger.info(f"Overwriting file {path}")
        await fs.write(path, file.content)
        return FileOutcome(path=path, action=FileAction.OVERWRITTEN)

    diff = unified_diff(path, await fs.read(path), file.content)
    if not diff:
        logger.info(f"File {path} is up to date")
        return FileOutcome(path=path, action=FileAction.UNCHANGED)

    logger.info(
        f"File {path} already exists, skipping creation, following is the patch\n{diff}"
    )
    return FileOutcome(path=path, action=FileAction.DIFFED, diff=diff)


async def write_files(
    fs: FileSystem, files: List[File], dst: str, overwrite: bool = False
) -> List[FileOutcome]:
    """Последовательная запись файлов в директорию назначения"""
    await fs.make_directory(dst)

    outcomes = []
    for file in files:
        outcomes.append(await write_file(fs, file, dst, overwrite))

    return outcomes
