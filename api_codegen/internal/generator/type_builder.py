"""
Построение TypeExpression из узлов JSON Schema
"""

from collections.abc import Mapping
from typing import Any, Optional

import jsonref

from ..types.models import (
    ArrayType,
    KeyOfEnum,
    NamedReference,
    Primitive,
    Property,
    RecordType,
    SingletonLiteral,
    StructuralObject,
    TypeExpression,
    UnknownArray,
    UnknownRecord,
    UnknownValue,
)
from ..types.schema_resolver import SchemaNameResolver, parse_ref

# Алиас модуля моделей в файле контроллеров
MODELS_ALIAS = "m"


def reference_of(node: Any) -> Optional[str]:
    """Строка `$ref` узла без разыменования (dict или прокси jsonref)"""
    if type(node) is jsonref.JsonRef:
        return node.__reference__.get("$ref")

    if isinstance(node, Mapping) and isinstance(node.get("$ref"), str):
        return node["$ref"]

    return None


def _is_schema(node: Any) -> bool:
    return reference_of(node) is not None or isinstance(node, Mapping)


class TypeExpressionBuilder:
    """Рекурсивный разбор схемы в TypeExpression.

    Без `names` любая ссылка правильной формы становится NamedReference.
    С `names` ссылки на незарегистрированные схемы деградируют до
    UnknownValue, а имена берутся очищенными из реестра.
    С `module` все ссылки печатаются через алиас модуля.
    """

    def __init__(
        self,
        names: Optional[SchemaNameResolver] = None,
        module: Optional[str] = None,
    ):
        self.names = names
        self.module = module

    def build(self, schema: Any) -> TypeExpression:
        ref = reference_of(schema)
        if ref is not None:
            return self._build_reference(ref)

        if not isinstance(schema, Mapping):
            return UnknownValue()

        schema_type = schema.get("type")

        if schema_type == "string":
            return self._build_string(schema)

        if schema_type in ("number", "integer"):
            return Primitive(name="number")

        if schema_type == "boolean":
            return Primitive(name="boolean")

        if schema_type == "object":
            return self._build_object(schema)

        if schema_type == "array":
            items = schema.get("items")
            if _is_schema(items):
                return ArrayType(items=self.build(items))
            return UnknownArray()

        return UnknownValue()

    def _build_reference(self, ref: str) -> TypeExpression:
        name = parse_ref(ref)
        if not name:
            return UnknownValue()

        if self.names is not None:
            clean_name = self.names.resolve_schema_name(name)
            if clean_name is None:
                return UnknownValue()
            name = clean_name

        return NamedReference(name=name, dependencies={name}, module=self.module)

    @staticmethod
    def _build_string(schema: Mapping) -> TypeExpression:
        enum = schema.get("enum")

        if isinstance(enum, list) and len(enum) > 1:
            return KeyOfEnum(values=list(enum))

        if isinstance(enum, list) and len(enum) == 1:
            return SingletonLiteral(value=enum[0])

        return Primitive(name="string")

    def _build_object(self, schema: Mapping) -> TypeExpression:
        properties = schema.get("properties")

        if isinstance(properties, Mapping):
            required = schema.get("required") or []
            return StructuralObject(
                properties=[
                    Property(
                        name=key,
                        type=self.build(value),
                        optional=key not in required,
                        description=_description_of(value),
                    )
                    for key, value in properties.items()
                ]
            )

        additional = schema.get("additionalProperties")
        if additional is not None and _is_schema(additional):
            return RecordType(key=Primitive(name="string"), value=self.build(additional))

        return UnknownRecord()


def _description_of(node: Any) -> Optional[str]:
    if reference_of(node) is not None or not isinstance(node, Mapping):
        return None

    description = node.get("description")
    return description if isinstance(description, str) else None
