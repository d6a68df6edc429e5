from enum import Enum
from typing import Any, FrozenSet, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict


class _Value(BaseModel):
    model_config = ConfigDict(frozen=True)


class Primitive(_Value):
    kind: Literal["primitive"] = "primitive"
    name: Literal["string", "number", "boolean"]


class UnknownValue(_Value):
    kind: Literal["unknown"] = "unknown"


class UnknownRecord(_Value):
    kind: Literal["unknown_record"] = "unknown_record"


class UnknownArray(_Value):
    kind: Literal["unknown_array"] = "unknown_array"


class ArrayType(_Value):
    kind: Literal["array"] = "array"
    items: "TypeExpression"


class RecordType(_Value):
    kind: Literal["record"] = "record"
    key: "TypeExpression"
    value: "TypeExpression"


class Property(_Value):
    name: str
    type: "TypeExpression"
    optional: bool = False
    description: Optional[str] = None


class StructuralObject(_Value):
    """Объект со свойствами в порядке исходного документа"""

    kind: Literal["object"] = "object"
    properties: List[Property] = []


class KeyOfEnum(_Value):
    kind: Literal["keyof"] = "keyof"
    values: List[Any]


class SingletonLiteral(_Value):
    kind: Literal["literal"] = "literal"
    value: Any


class NamedReference(_Value):
    """Ссылка на декларацию по имени.

    `module` - алиас модуля, через который ссылка печатается
    (например `m` для моделей в файле контроллеров).
    """

    kind: Literal["reference"] = "reference"
    name: str
    dependencies: FrozenSet[str]
    module: Optional[str] = None

    def qualified_name(self) -> str:
        return f"{self.module}.{self.name}" if self.module else self.name


TypeExpression = Union[
    Primitive,
    UnknownValue,
    UnknownRecord,
    UnknownArray,
    ArrayType,
    RecordType,
    StructuralObject,
    KeyOfEnum,
    SingletonLiteral,
    NamedReference,
]

ArrayType.model_rebuild()
RecordType.model_rebuild()
Property.model_rebuild()
StructuralObject.model_rebuild()


def dependencies_of(expression: TypeExpression) -> FrozenSet[str]:
    """Объединение зависимостей всех NamedReference внутри выражения"""
    found = set()
    pending = [expression]

    while pending:
        current = pending.pop()

        if isinstance(current, NamedReference):
            found.update(current.dependencies)
        elif isinstance(current, ArrayType):
            pending.append(current.items)
        elif isinstance(current, RecordType):
            pending.extend([current.key, current.value])
        elif isinstance(current, StructuralObject):
            pending.extend(prop.type for prop in current.properties)

    return frozenset(found)


HttpMethod = Literal["get", "put", "post", "delete", "options", "head", "patch", "trace"]


class Operation(BaseModel):
    name: str
    method: HttpMethod
    path_key: str

    path_params: Optional[TypeExpression] = None
    query_params: Optional[TypeExpression] = None
    request_body: Optional[TypeExpression] = None
    response: TypeExpression = UnknownValue()

    description: Optional[str] = None

    # Заполняются при сборке деклараций
    request_name: Optional[str] = None
    response_name: Optional[str] = None
    controller_name: Optional[str] = None


class Declaration(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    reference: TypeExpression
    dependencies: FrozenSet[str] = frozenset()
    origin: Literal["schema", "operation"] = "schema"
    description: Optional[str] = None


class File(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str
    content: str
    overwrite: bool = False


class FileAction(str, Enum):
    WRITTEN = "written"
    OVERWRITTEN = "overwritten"
    DIFFED = "diffed"
    UNCHANGED = "unchanged"


class FileOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str
    action: FileAction
    diff: str = ""
