"""
Грамматика OpenAPI 3.0.2 для проверки исходного документа.

Модели допускают расширения (`x-*` и прочие поля), проверяются только
обязательные поля и формы значений, которые использует генератор.
"""

import re
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

OPENAPI_VERSION_PATTERN = re.compile(r"^3\.\d+\.\d+$")
RESPONSE_KEY_PATTERN = re.compile(r"^(default|[1-5](\d\d|XX))$")


class _Node(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class Reference(_Node):
    ref: str = Field(alias="$ref")


class Schema(_Node):
    type: Optional[
        Literal["string", "number", "integer", "boolean", "object", "array"]
    ] = None
    format: Optional[str] = None
    description: Optional[str] = None
    enum: Optional[List[Any]] = None
    required: Optional[List[str]] = None
    properties: Optional[Dict[str, Union[Reference, "Schema"]]] = None
    additionalProperties: Optional[Union[bool, Reference, "Schema"]] = None
    items: Optional[Union[Reference, "Schema"]] = None
    allOf: Optional[List[Union[Reference, "Schema"]]] = None
    oneOf: Optional[List[Union[Reference, "Schema"]]] = None
    anyOf: Optional[List[Union[Reference, "Schema"]]] = None
    not_: Optional[Union[Reference, "Schema"]] = Field(default=None, alias="not")
    nullable: Optional[bool] = None


class MediaType(_Node):
    schema_: Optional[Union[Reference, Schema]] = Field(default=None, alias="schema")


class Parameter(_Node):
    name: str
    in_: Literal["query", "header", "path", "cookie"] = Field(alias="in")
    description: Optional[str] = None
    required: Optional[bool] = None
    schema_: Optional[Union[Reference, Schema]] = Field(default=None, alias="schema")
    content: Optional[Dict[str, MediaType]] = None


class RequestBody(_Node):
    description: Optional[str] = None
    content: Dict[str, MediaType]
    required: Optional[bool] = None


class Response(_Node):
    description: str
    content: Optional[Dict[str, MediaType]] = None


class Operation(_Node):
    operationId: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    tags: Optional[List[str]] = None
    parameters: Optional[List[Union[Reference, Parameter]]] = None
    requestBody: Optional[Union[Reference, RequestBody]] = None
    responses: Dict[str, Union[Reference, Response]]

    @field_validator("responses")
    def responses_check(cls, value):
        for key in value:
            if not RESPONSE_KEY_PATTERN.match(key):
                raise ValueError(f"Invalid response key: {key}")
        return value


class PathItem(_Node):
    summary: Optional[str] = None
    description: Optional[str] = None
    parameters: Optional[List[Union[Reference, Parameter]]] = None
    get: Optional[Operation] = None
    put: Optional[Operation] = None
    post: Optional[Operation] = None
    delete: Optional[Operation] = None
    options: Optional[Operation] = None
    head: Optional[Operation] = None
    patch: Optional[Operation] = None
    trace: Optional[Operation] = None


class Components(_Node):
    schemas: Optional[Dict[str, Union[Reference, Schema]]] = None
    responses: Optional[Dict[str, Union[Reference, Response]]] = None
    parameters: Optional[Dict[str, Union[Reference, Parameter]]] = None
    requestBodies: Optional[Dict[str, Union[Reference, RequestBody]]] = None
    securitySchemes: Optional[Dict[str, Any]] = None


class Info(_Node):
    title: str
    version: str
    description: Optional[str] = None


class Server(_Node):
    url: str
    description: Optional[str] = None


class OpenAPIObject(_Node):
    openapi: str
    info: Info
    servers: Optional[List[Server]] = None
    paths: Dict[str, PathItem]
    components: Optional[Components] = None

    @field_validator("openapi")
    def openapi_check(cls, value):
        if not OPENAPI_VERSION_PATTERN.match(value):
            raise ValueError(f"Unsupported OpenAPI version: {value}")
        return value

    @field_validator("paths")
    def paths_check(cls, value):
        for key in value:
            if not key.startswith("/"):
                raise ValueError(f"Path must start with '/': {key}")
        return value


Schema.model_rebuild()


def validate_document(raw: Any) -> Dict[str, Any]:
    """Проверка документа, возвращает исходный dict"""
    OpenAPIObject.model_validate(raw)
    return raw


def format_errors(error: ValidationError) -> str:
    """Читаемый отчет по всем ошибкам валидации"""
    lines = [f"{error.error_count()} validation errors"]

    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "<root>"
        lines.append(f"{location}: {item['msg']}")

    return "\n".join(lines) + "\n"
