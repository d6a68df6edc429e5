import logging
from collections.abc import Mapping
from typing import Any, Dict, List, Optional

import jsonref

from ..types.models import (
    Operation,
    Primitive,
    Property,
    StructuralObject,
    TypeExpression,
    UnknownValue,
)
from ..types.schema_resolver import SchemaNameResolver, parse_ref
from ..utils.naming import operation_name
from .type_builder import MODELS_ALIAS, TypeExpressionBuilder, reference_of

logger = logging.getLogger(__name__)

HTTP_VERBS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")

# Диапазон 200..298 включительно
SUCCESS_CODES = range(200, 299)

JSON_MEDIA_TYPE = "application/json"
ANY_MEDIA_TYPE = "*/*"


def _offline_loader(uri: str, **kwargs):
    raise ValueError(f"Remote references are not supported: {uri}")


def _dereference(node: Any) -> Any:
    """Разыменование прокси jsonref (parameters, requestBodies, responses)"""
    if type(node) is not jsonref.JsonRef:
        return node

    try:
        return node.__subject__
    except jsonref.JsonRefError as e:
        logger.debug(f"Skipping unresolvable reference {node.__reference__}: {e}")
        return None


class OperationExtractor:
    """Извлечение операций из Paths документа"""

    def __init__(self, document: Dict[str, Any], names: SchemaNameResolver):
        # Ссылки на компоненты заменяются ленивыми прокси,
        # ссылки на схемы при этом остаются распознаваемыми
        self.document = jsonref.replace_refs(document, loader=_offline_loader)
        self.builder = TypeExpressionBuilder(names, module=MODELS_ALIAS)
        self._used_names = set()

    def extract(self) -> List[Operation]:
        operations = []

        for path_key, path_item in (self.document.get("paths") or {}).items():
            path_item = _dereference(path_item)
            if not isinstance(path_item, Mapping):
                continue

            path_parameters = list(path_item.get("parameters") or [])

            for verb in HTTP_VERBS:
                spec = path_item.get(verb)
                if not isinstance(spec, Mapping):
                    continue

                parameters = path_parameters + list(spec.get("parameters") or [])
                operations.append(
                    self._build_operation(path_key, verb, spec, parameters)
                )

        return operations

    def _build_operation(
        self, path_key: str, method: str, spec: Mapping, parameters: List[Any]
    ) -> Operation:
        parameters = [
            p for p in map(_dereference, parameters) if isinstance(p, Mapping)
        ]

        return Operation(
            name=self._unique_name(
                operation_name(spec.get("operationId") or "", method, path_key)
            ),
            method=method,
            path_key=path_key,
            path_params=self._build_parameters(parameters, "path"),
            query_params=self._build_parameters(parameters, "query"),
            request_body=self._build_request_body(spec.get("requestBody")),
            response=self._build_response(spec.get("responses") or {}),
            description=spec.get("description") or spec.get("summary"),
        )

    def _unique_name(self, name: str) -> str:
        """Детерминированное разрешение коллизий имен операций"""
        candidate = name
        counter = 2

        while candidate in self._used_names:
            candidate = f"{name}_{counter}"
            counter += 1

        if candidate != name:
            logger.warning(
                f"Operation name {name} is already used, renamed to {candidate}"
            )

        self._used_names.add(candidate)
        return candidate

    def _build_parameters(
        self, parameters: List[Mapping], location: str
    ) -> Optional[TypeExpression]:
        selected = [p for p in parameters if p.get("in") == location]
        if not selected:
            return None

        return StructuralObject(
            properties=[
                Property(
                    name=param["name"],
                    type=(
                        self.builder.build(param["schema"])
                        if param.get("schema") is not None
                        else Primitive(name="string")
                    ),
                    optional=not param.get("required", False),
                    description=param.get("description"),
                )
                for param in selected
            ]
        )

    def _build_request_body(self, request_body: Any) -> Optional[TypeExpression]:
        if request_body is None:
            return None

        ref = reference_of(request_body)
        if ref is not None and parse_ref(ref):
            return self.builder.build(request_body)

        request_body = _dereference(request_body)
        if not isinstance(request_body, Mapping):
            return None

        media = (request_body.get("content") or {}).get(JSON_MEDIA_TYPE)
        if not isinstance(media, Mapping) or media.get("schema") is None:
            return None

        return self.builder.build(media["schema"])

    def _build_response(self, responses: Mapping) -> TypeExpression:
        schema = self._find_success_schema(responses)
        if schema is None:
            return UnknownValue()

        return self.builder.build(schema)

    @staticmethod
    def _find_success_schema(responses: Mapping) -> Any:
        """Схема первого успешного ответа, иначе default"""
        response = None

        for code in SUCCESS_CODES:
            response = responses.get(str(code))
            if response is not None:
                break
        else:
            response = responses.get("default")

        response = _dereference(response)
        if not isinstance(response, Mapping):
            return None

        content = response.get("content") or {}
        media = content.get(JSON_MEDIA_TYPE) or content.get(ANY_MEDIA_TYPE)
        if not isinstance(media, Mapping):
            return None

        return media.get("schema")
