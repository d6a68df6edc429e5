"""
Сборка деклараций и их упорядочивание для печати
"""

import heapq
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Dict, List

from ..types.models import (
    Declaration,
    Operation,
    Property,
    StructuralObject,
    dependencies_of,
)
from ..types.schema_resolver import SchemaNameResolver
from .operations import OperationExtractor
from .type_builder import TypeExpressionBuilder

logger = logging.getLogger(__name__)


@dataclass
class Library:
    """Результат сборки: отсортированные декларации, операции и таблица имен"""

    declarations: List[Declaration]
    operations: List[Operation]
    names: SchemaNameResolver

    @property
    def schema_declarations(self) -> List[Declaration]:
        return [d for d in self.declarations if d.origin == "schema"]

    @property
    def operation_declarations(self) -> List[Declaration]:
        return [d for d in self.declarations if d.origin == "operation"]


def _strongly_connected(graph: List[List[int]]) -> List[List[int]]:
    """Компоненты сильной связности (Тарьян) без рекурсии"""
    index: Dict[int, int] = {}
    lowlink: Dict[int, int] = {}
    on_stack = set()
    stack: List[int] = []
    components: List[List[int]] = []
    counter = 0

    for root in range(len(graph)):
        if root in index:
            continue

        index[root] = lowlink[root] = counter
        counter += 1
        stack.append(root)
        on_stack.add(root)
        work = [(root, iter(graph[root]))]

        while work:
            node, edges = work[-1]

            for child in edges:
                if child not in index:
                    index[child] = lowlink[child] = counter
                    counter += 1
                    stack.append(child)
                    on_stack.add(child)
                    work.append((child, iter(graph[child])))
                    break

                if child in on_stack:
                    lowlink[node] = min(lowlink[node], index[child])
            else:
                work.pop()
                if work:
                    parent = work[-1][0]
                    lowlink[parent] = min(lowlink[parent], lowlink[node])

                if lowlink[node] == index[node]:
                    component = []
                    while True:
                        member = stack.pop()
                        on_stack.discard(member)
                        component.append(member)
                        if member == node:
                            break
                    components.append(sorted(component))

    return components


def sort_declarations(declarations: List[Declaration]) -> List[Declaration]:
    """
    Порядок печати, в котором зависимости идут раньше зависимых.

    Циклы схлопываются в компоненты, внутри компоненты сохраняется
    исходный порядок. Среди готовых к печати компонент первой идет
    та, что раньше встречается в исходном списке.
    """
    positions: Dict[str, int] = {}
    for position, declaration in enumerate(declarations):
        positions.setdefault(declaration.name, position)

    graph = [
        sorted(
            {
                positions[dependency]
                for dependency in declaration.dependencies
                if dependency in positions and positions[dependency] != position
            }
        )
        for position, declaration in enumerate(declarations)
    ]

    components = _strongly_connected(graph)
    component_of = {}
    for component_id, component in enumerate(components):
        for member in component:
            component_of[member] = component_id

    pending = [0] * len(components)
    dependents: List[List[int]] = [[] for _ in components]

    for component_id, component in enumerate(components):
        required = {
            component_of[dependency]
            for member in component
            for dependency in graph[member]
        }
        required.discard(component_id)
        pending[component_id] = len(required)
        for dependency in required:
            dependents[dependency].append(component_id)

    ready = [
        (component[0], component_id)
        for component_id, component in enumerate(components)
        if pending[component_id] == 0
    ]
    heapq.heapify(ready)

    ordered = []
    while ready:
        _, component_id = heapq.heappop(ready)
        ordered.extend(declarations[member] for member in components[component_id])

        for dependent in dependents[component_id]:
            pending[dependent] -= 1
            if pending[dependent] == 0:
                heapq.heappush(ready, (components[dependent][0], dependent))

    return ordered


class DeclarationAssembler:
    """Сборка библиотеки деклараций из валидного документа"""

    def __init__(self, document: Dict[str, Any]):
        self.document = document

    def assemble(self) -> Library:
        names = SchemaNameResolver()

        schemas = (self.document.get("components") or {}).get("schemas") or {}
        for key in schemas:
            names.register_schema(key)

        declarations = self._schema_declarations(schemas, names)

        operations = OperationExtractor(self.document, names).extract()
        operations = [self._bind_operation(op, names) for op in operations]
        for operation in operations:
            declarations.extend(self._operation_declarations(operation))

        logger.debug(
            f"Assembled {len(declarations)} declarations for {len(operations)} operations"
        )

        return Library(
            declarations=sort_declarations(declarations),
            operations=operations,
            names=names,
        )

    @staticmethod
    def _schema_declarations(
        schemas: Mapping, names: SchemaNameResolver
    ) -> List[Declaration]:
        builder = TypeExpressionBuilder(names)
        declarations = []

        for key, schema in schemas.items():
            reference = builder.build(schema)
            description = schema.get("description") if isinstance(schema, Mapping) else None

            declarations.append(
                Declaration(
                    name=names.resolve_schema_name(key),
                    reference=reference,
                    dependencies=dependencies_of(reference),
                    origin="schema",
                    description=description if isinstance(description, str) else None,
                )
            )

        return declarations

    @staticmethod
    def _bind_operation(operation: Operation, names: SchemaNameResolver) -> Operation:
        """Выдача имен декларациям запроса, ответа и контроллера"""
        has_request = any(
            part is not None
            for part in (
                operation.path_params,
                operation.query_params,
                operation.request_body,
            )
        )

        return operation.model_copy(
            update={
                "request_name": (
                    names.claim(f"{operation.name}Request") if has_request else None
                ),
                "response_name": names.claim(f"{operation.name}Response"),
                "controller_name": names.claim(f"{operation.name}Controller"),
            }
        )

    @staticmethod
    def _operation_declarations(operation: Operation) -> List[Declaration]:
        declarations = []

        if operation.request_name:
            parts = [
                ("path", operation.path_params),
                ("query", operation.query_params),
                ("body", operation.request_body),
            ]
            request = StructuralObject(
                properties=[
                    Property(name=name, type=part)
                    for name, part in parts
                    if part is not None
                ]
            )
            declarations.append(
                Declaration(
                    name=operation.request_name,
                    reference=request,
                    dependencies=dependencies_of(request),
                    origin="operation",
                )
            )

        declarations.append(
            Declaration(
                name=operation.response_name,
                reference=operation.response,
                dependencies=dependencies_of(operation.response),
                origin="operation",
            )
        )

        return declarations
