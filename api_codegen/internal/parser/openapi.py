import json
import logging
from typing import Any, Dict

from pydantic import ValidationError

from ...errors import SourceError, SourceValidationError
from ..storage.filesystem import FileSystem
from ..types.models import File
from ..types.openapi import format_errors, validate_document

logger = logging.getLogger(__name__)

PARSE_ERRORS_LOG = "parse-errors.log"


def load_json(source: File) -> Any:
    try:
        return json.loads(source.content)
    except json.JSONDecodeError as e:
        raise SourceError(f"Error parsing {source.path} {e}", path=source.path) from e


class OpenApiParser:
    """Парсер OpenAPI 3.0.2 спецификации"""

    def __init__(self, fs: FileSystem, config=None):
        self.fs = fs
        self.config = config

    async def parse(self, source: File) -> Dict[str, Any]:
        logger.info("Parser: OpenApi 3.0.2")
        return await self.validate(load_json(source), source.path)

    async def validate(self, raw: Any, src: str) -> Dict[str, Any]:
        """Проверка грамматики, при ошибке отчет пишется в parse-errors.log"""
        try:
            document = validate_document(raw)
        except ValidationError as e:
            await self.fs.write(PARSE_ERRORS_LOG, format_errors(e))
            raise SourceValidationError(
                f"Source validation failed. See errors in {PARSE_ERRORS_LOG}",
                path=src,
            ) from e

        logger.info(f"Validated source: {src}")
        return document
