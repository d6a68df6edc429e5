"""
Печать библиотеки деклараций в исходный код клиента на Python
"""

import json
import keyword
import logging
from typing import Any, Dict, List, Optional, Protocol, Set, Tuple

from ..types.models import (
    ArrayType,
    Declaration,
    File,
    KeyOfEnum,
    NamedReference,
    Operation,
    Primitive,
    RecordType,
    SingletonLiteral,
    StructuralObject,
    TypeExpression,
    UnknownArray,
    UnknownRecord,
    UnknownValue,
)
from ..types.schema_resolver import SchemaNameResolver, codec_name
from ..utils.naming import constant_case, pascal_case
from .declarations import DeclarationAssembler, Library
from .formatter import format_source
from .templates import templates

logger = logging.getLogger(__name__)

MODELS_FILE = "models.py"
INDEX_FILE = "__init__.py"
CONTROLLERS_FILE = "controllers.py"
ACTIONS_FILE = "actions.py"
UTILITIES_FILE = "utilities.py"

GENERATED_FILES = (
    MODELS_FILE,
    INDEX_FILE,
    CONTROLLERS_FILE,
    ACTIONS_FILE,
    UTILITIES_FILE,
)

UNKNOWN_API = "UNKNOWN_API"

PRIMITIVES = {"string": "str", "number": "float", "boolean": "bool"}

_LITERAL_TYPES = (str, int, float, bool)

_TYPING_NAMES = frozenset({"Any", "Dict", "List"})
_TYPING_EXTENSIONS_NAMES = frozenset(
    {"Literal", "NotRequired", "TypedDict", "TypeAliasType"}
)


class Printer(Protocol):
    def print(self, document: Dict[str, Any]) -> List[File]: ...


def _comment(text: str) -> List[str]:
    return [f"# {line}".rstrip() for line in text.strip().splitlines()]


def _docstring(text: str) -> str:
    text = text.strip().replace("\\", "\\\\").replace('"""', '\\"\\"\\"')
    if text.endswith('"'):
        text += " "
    return f'"""{text}"""'


def _indent(lines: List[str]) -> List[str]:
    return [f"    {line}" if line else line for line in lines]


def _is_field_identifier(key: str) -> bool:
    return key.isidentifier() and not keyword.iskeyword(key) and not key.startswith("__")


class _StaticPrinter:
    """Статические фасеты деклараций одного файла.

    Вложенные объекты выносятся в отдельные TypedDict, которые
    печатаются перед родителем.
    """

    def __init__(self, names: SchemaNameResolver):
        self.names = names
        self.printed: Set[str] = set()
        self.used: Set[str] = set()

    def imports(self, codecs: bool) -> str:
        """Импорты для напечатанных деклараций"""
        lines = []

        typing_names = sorted(self.used & _TYPING_NAMES)
        if typing_names:
            lines.append(templates.typing_import.format(names=", ".join(typing_names)))

        if codecs:
            lines.append(templates.codec_import)

        extension_names = sorted(self.used & _TYPING_EXTENSIONS_NAMES)
        if extension_names:
            lines.append(
                templates.typing_extensions_import.format(names=", ".join(extension_names))
            )

        return "\n".join(lines)

    def declaration(self, declaration: Declaration) -> List[str]:
        hoisted: List[str] = []

        if isinstance(declaration.reference, StructuralObject):
            block = self._typed_dict(
                declaration.name,
                declaration.reference,
                declaration.description,
                hoisted,
            )
        else:
            block = self._alias(declaration, hoisted)

        self.printed.add(declaration.name)
        return hoisted + [block]

    def _alias(self, declaration: Declaration, hoisted: List[str]) -> str:
        reference = declaration.reference

        if self._forward_references(reference):
            # рекурсивный алиас
            self.used.add("TypeAliasType")
            expression = self.expression(reference, declaration.name, hoisted)
            expression = f"TypeAliasType({json.dumps(declaration.name)}, {expression})"
        elif isinstance(reference, NamedReference):
            expression = reference.qualified_name()
        else:
            expression = self.expression(reference, declaration.name, hoisted)

        lines = _comment(declaration.description) if declaration.description else []
        lines.append(f"{declaration.name} = {expression}")
        return "\n".join(lines)

    def _forward_references(self, expression: TypeExpression) -> Set[str]:
        """Ссылки этого модуля на еще не напечатанные декларации"""
        found = set()
        pending = [expression]

        while pending:
            current = pending.pop()

            if isinstance(current, NamedReference):
                if not current.module and current.name not in self.printed:
                    found.add(current.name)
            elif isinstance(current, ArrayType):
                pending.append(current.items)
            elif isinstance(current, RecordType):
                pending.extend([current.key, current.value])
            elif isinstance(current, StructuralObject):
                pending.extend(prop.type for prop in current.properties)

        return found

    def _literal(self, values: List[Any]) -> str:
        printable = [
            repr(value)
            for value in values
            if value is None or isinstance(value, _LITERAL_TYPES)
        ]
        if not printable:
            return "str"

        self.used.add("Literal")
        return f"Literal[{', '.join(printable)}]"

    def expression(
        self, expression: TypeExpression, context: str, hoisted: List[str]
    ) -> str:
        if isinstance(expression, Primitive):
            return PRIMITIVES[expression.name]

        if isinstance(expression, UnknownRecord):
            self.used.update({"Dict", "Any"})
            return "Dict[str, Any]"

        if isinstance(expression, UnknownArray):
            self.used.update({"List", "Any"})
            return "List[Any]"

        if isinstance(expression, ArrayType):
            items = self.expression(expression.items, f"{context}Item", hoisted)
            self.used.add("List")
            return f"List[{items}]"

        if isinstance(expression, RecordType):
            key = self.expression(expression.key, f"{context}Key", hoisted)
            value = self.expression(expression.value, f"{context}Value", hoisted)
            self.used.add("Dict")
            return f"Dict[{key}, {value}]"

        if isinstance(expression, KeyOfEnum):
            return self._literal(expression.values)

        if isinstance(expression, SingletonLiteral):
            return self._literal([expression.value])

        if isinstance(expression, NamedReference):
            if expression.module:
                return expression.qualified_name()
            return json.dumps(expression.name)

        if isinstance(expression, StructuralObject):
            name = self.names.claim(context)
            hoisted.append(self._typed_dict(name, expression, None, hoisted))
            return name

        # UnknownValue и все прочее
        self.used.add("Any")
        return "Any"

    def _typed_dict(
        self,
        name: str,
        obj: StructuralObject,
        description: Optional[str],
        hoisted: List[str],
    ) -> str:
        fields = []
        for prop in obj.properties:
            annotation = self.expression(
                prop.type, f"{name}{pascal_case(prop.name)}", hoisted
            )
            if prop.optional:
                self.used.add("NotRequired")
                annotation = f"NotRequired[{annotation}]"
            fields.append((prop, annotation))

        self.used.add("TypedDict")
        if all(_is_field_identifier(prop.name) for prop, _ in fields):
            return self._class_syntax(name, fields, description)

        return self._functional_syntax(name, fields, description)

    @staticmethod
    def _class_syntax(name: str, fields, description: Optional[str]) -> str:
        body = []
        if description:
            body.extend([_docstring(description), ""])

        for prop, annotation in fields:
            if prop.description:
                body.extend(_comment(prop.description))
            body.append(f"{prop.name}: {annotation}")

        if not fields and not description:
            body.append("pass")

        return "\n".join([f"class {name}(TypedDict):"] + _indent(body))

    @staticmethod
    def _functional_syntax(name: str, fields, description: Optional[str]) -> str:
        lines = _comment(description) if description else []
        lines.append(f"{name} = TypedDict(")
        lines.append(f"    {json.dumps(name)},")
        lines.append("    {")

        for prop, annotation in fields:
            if prop.description:
                lines.extend(_indent(_indent(_comment(prop.description))))
            lines.append(f"        {json.dumps(prop.name)}: {annotation},")

        lines.append("    },")
        lines.append(")")
        return "\n".join(lines)


class PythonPrinter:
    """Генерация пакета клиента: модели, контроллеры, действия"""

    def __init__(self, name: Optional[str] = None):
        self.name = name

    def print(self, document: Dict[str, Any]) -> List[File]:
        library = DeclarationAssembler(document).assemble()

        files = [
            (MODELS_FILE, self.print_models(library)),
            (INDEX_FILE, templates.index),
            (CONTROLLERS_FILE, self.print_controllers(library)),
            (ACTIONS_FILE, self.print_actions(library)),
            (UTILITIES_FILE, templates.utilities),
        ]

        return [
            File(path=path, content=format_source(content, path))
            for path, content in files
        ]

    def print_models(self, library: Library) -> str:
        imports, blocks = self._print_declarations(
            library.schema_declarations, library.names
        )
        return self._join([imports] + blocks)

    def print_controllers(self, library: Library) -> str:
        imports, blocks = self._print_declarations(
            library.operation_declarations, library.names
        )
        header = "\n\n".join(
            part for part in (imports, templates.controllers_header) if part
        )
        blocks.extend(self._print_controller(op) for op in library.operations)
        return self._join([header] + blocks)

    def print_actions(self, library: Library) -> str:
        blocks = [
            templates.actions_header,
            templates.action_creator.format(
                name=constant_case(self.name or "") or UNKNOWN_API
            ),
        ]

        # __init__.py реэкспортирует actions вместе с моделями
        names = library.names
        types = SchemaNameResolver(reserved=())
        for operation in library.operations:
            action = names.claim(f"async_{operation.name}")
            blocks.append(
                templates.action.format(
                    action=action,
                    type=types.claim(constant_case(operation.name)),
                    reducers=names.claim(f"{action}_reducers"),
                    effects=names.claim(f"{action}_effects"),
                    effects_factory=(
                        "effects" if operation.request_name else "requestless_effects"
                    ),
                    controller=operation.controller_name,
                )
            )

        return self._join(blocks)

    @staticmethod
    def _print_declarations(
        declarations: List[Declaration], names: SchemaNameResolver
    ) -> Tuple[str, List[str]]:
        static = _StaticPrinter(names)

        blocks = []
        for declaration in declarations:
            blocks.extend(static.declaration(declaration))

        codecs = [
            f"{codec_name(declaration.name)} = TypeAdapter({declaration.name})"
            for declaration in declarations
        ]
        if codecs:
            blocks.append("\n".join(codecs))

        return static.imports(codecs=bool(codecs)), blocks

    @staticmethod
    def _print_controller(operation: Operation) -> str:
        header = operation.name
        if operation.description:
            header = f"{operation.name}: {operation.description}"

        lines = _comment(header)
        lines.append(
            templates.controller.format(
                controller=operation.controller_name,
                factory=(
                    "controller_factory"
                    if operation.request_name
                    else "requestless_controller_factory"
                ),
                codec=codec_name(operation.response_name),
                method=operation.method,
                path=json.dumps(operation.path_key),
            )
        )
        return "\n".join(lines)

    @staticmethod
    def _join(blocks: List[str]) -> str:
        return "\n\n\n".join(block.strip("\n") for block in blocks if block) + "\n"
