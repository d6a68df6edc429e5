import re
from typing import Dict, Iterable, Optional, Set

from ..utils.naming import clean_identifier

SCHEMA_REF_PATTERN = re.compile(r"^#/components/schemas/([^/]+)$")

CODEC_SUFFIX = "Codec"

# Публичные имена utilities.py, реэкспортируемые из __init__.py
UTILITY_NAMES = (
    "SendRequestError",
    "ApiRequest",
    "aiohttp_request",
    "RequestFunction",
    "ApiConfig",
    "path_mapper",
    "query_mapper",
    "controller_factory",
    "requestless_controller_factory",
    "Action",
    "AsyncActionCreators",
    "ActionCreatorFactory",
    "action_creator_factory",
    "AsyncState",
    "Reducer",
    "async_reducers_factory",
    "Effect",
    "effects",
    "requestless_effects",
)

# Имена, занятые импортами сгенерированных модулей
RESERVED_NAMES = (
    "Any",
    "Dict",
    "List",
    "Literal",
    "NotRequired",
    "TypedDict",
    "TypeAliasType",
    "TypeAdapter",
    "actions",
    "controllers",
    "models",
    "utilities",
    "m",
    "u",
    "cs",
    "action_creator",
) + UTILITY_NAMES


def parse_ref(ref: str) -> str:
    """
    Имя схемы из ссылки `#/components/schemas/<Name>`, иначе пустая строка.

    Examples:
        >>> parse_ref("#/components/schemas/Pet")
        'Pet'
        >>> parse_ref("#/definitions/Pet")
        ''
    """
    if not isinstance(ref, str):
        return ""

    match = SCHEMA_REF_PATTERN.match(ref)
    if not match:
        return ""

    # JSON Pointer экранирование
    return match.group(1).replace("~1", "/").replace("~0", "~")


def codec_name(name: str) -> str:
    return f"{name}{CODEC_SUFFIX}"


class SchemaNameResolver:
    """Резолвер имен схем и сгенерированных идентификаторов.

    Каждое выданное имя уникально в рамках запуска и резервирует
    имя своего валидатора (`<Name>Codec`).
    """

    def __init__(self, reserved: Iterable[str] = RESERVED_NAMES):
        self._schema_registry: Dict[str, str] = {}
        self._taken: Set[str] = set(reserved)

    def register_schema(self, original_name: str) -> str:
        """Регистрация схемы с чистым именем"""
        if original_name in self._schema_registry:
            return self._schema_registry[original_name]

        clean_name = self.claim(original_name)
        self._schema_registry[original_name] = clean_name
        return clean_name

    def resolve_schema_name(self, original_name: str) -> Optional[str]:
        """Чистое имя зарегистрированной схемы или None"""
        return self._schema_registry.get(original_name)

    def claim(self, name: str) -> str:
        """Выдача свободного идентификатора на основе `name`"""
        base = clean_identifier(name)
        candidate = base
        counter = 2

        while candidate in self._taken or codec_name(candidate) in self._taken:
            candidate = f"{base}_{counter}"
            counter += 1

        self._taken.add(candidate)
        self._taken.add(codec_name(candidate))
        return candidate
