from typing import Any, Dict, Protocol

from ..types.models import File
from .openapi import OpenApiParser
from .swagger import SwaggerConverter, SwaggerParser


class Parser(Protocol):
    async def parse(self, source: File) -> Dict[str, Any]: ...


PARSERS = {
    "openapi": OpenApiParser,
    "swagger": SwaggerParser,
}

__all__ = ["Parser", "PARSERS", "OpenApiParser", "SwaggerConverter", "SwaggerParser"]
