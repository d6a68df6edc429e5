"""
Главный модуль генератора: чтение, разбор, печать и запись файлов
"""

import asyncio
import glob
import logging
import os
from typing import Any, Dict, List, Optional

import httpx

from .config import ApiCodegenConfig
from .errors import ConfigError
from .internal.generator import GENERATED_FILES, PRINTERS, Printer
from .internal.parser import PARSERS, Parser
from .internal.storage import FileSystem, read_source, write_files
from .internal.types.models import File, FileOutcome

logger = logging.getLogger(__name__)


def create_parser(config: ApiCodegenConfig, fs: FileSystem) -> Parser:
    parser_class = PARSERS.get(config.parser)
    if parser_class is None:
        raise ConfigError(f"Unknown parser: {config.parser}")
    return parser_class(fs, config)


def create_printer(config: ApiCodegenConfig) -> Printer:
    printer_class = PRINTERS.get(config.printer)
    if printer_class is None:
        raise ConfigError(f"Unknown printer: {config.printer}")
    return printer_class(name=config.name)


def generate_files(document: Dict[str, Any], config: ApiCodegenConfig) -> List[File]:
    """Файлы клиента для валидного документа, без побочных эффектов"""
    return create_printer(config).print(document)


class ApiCodegen:
    """Генерация клиента по конфигурации"""

    def __init__(
        self,
        config: ApiCodegenConfig,
        fs: Optional[FileSystem] = None,
        parser: Optional[Parser] = None,
        printer: Optional[Printer] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config.assemble()
        self.fs = fs or FileSystem()
        self.parser = parser or create_parser(self.config, self.fs)
        self.printer = printer or create_printer(self.config)
        self.transport = transport

    async def clean(self) -> List[str]:
        """Удаление ранее сгенерированных файлов из директории назначения"""
        removed = []
        for name in GENERATED_FILES:
            pattern = os.path.join(glob.escape(self.config.dst), name)
            removed.extend(await self.fs.clean(pattern))
        return removed

    async def run(self, clean: bool = False) -> List[FileOutcome]:
        if clean:
            await self.clean()

        logger.info("Started reading source")
        source = await read_source(self.config.src, self.fs, self.transport)
        logger.info("Finished reading source")

        logger.info("Started parsing")
        document = await self.parser.parse(source)
        logger.info("Finished parsing")

        logger.info("Started printing")
        files = self.printer.print(document)
        logger.info("Finished printing")

        logger.info("Started writing files")
        outcomes = await write_files(
            self.fs, files, self.config.dst, self.config.overwrite
        )
        logger.info("Finished writing files")

        return outcomes


def generate_client(
    config: ApiCodegenConfig, clean: bool = False
) -> List[FileOutcome]:
    """Создание API клиента по конфигурации"""
    return asyncio.run(ApiCodegen(config).run(clean=clean))
