"""
Интеграционные тесты для генератора
"""

import json
import os

import pytest
from pydantic import ValidationError

from api_codegen import ApiCodegen, ApiCodegenConfig, generate_client
from api_codegen.internal.types.models import FileAction
from documents import json_response, make_document

PET = {
    "type": "object",
    "required": ["id"],
    "properties": {"id": {"type": "string"}, "name": {"type": "string"}},
}


def write_spec(directory, document):
    path = directory / "spec.json"
    path.write_text(json.dumps(document))
    return str(path)


def generate(tmp_path, document, package="client", **options):
    config = ApiCodegenConfig(
        src=write_spec(tmp_path, document), dst=str(tmp_path / package), **options
    )
    return generate_client(config)


def read(tmp_path, name):
    return (tmp_path / "client" / name).read_text()


class TestIntegration:
    """Интеграционные тесты"""

    def test_path_parameter_operation(self, tmp_path):
        """Операция без operationId с параметром пути"""
        document = make_document(
            paths={
                "/pets/{id}": {
                    "get": {
                        "parameters": [
                            {
                                "name": "id",
                                "in": "path",
                                "required": True,
                                "schema": {"type": "string"},
                            }
                        ],
                        "responses": {
                            "200": json_response({"$ref": "#/components/schemas/Pet"})
                        },
                    }
                }
            },
            schemas={"Pet": PET},
        )

        generate(tmp_path, document)
        controllers = read(tmp_path, "controllers.py")

        assert "class get_pets_idRequestPath(TypedDict):\n    id: str\n" in controllers
        assert "    path: get_pets_idRequestPath\n" in controllers
        assert "get_pets_idResponse = m.Pet" in controllers
        assert "get_pets_idController = u.controller_factory(" in controllers
        assert '"/pets/{id}"' in controllers
        assert "async_get_pets_id = action_creator.async_(\"GET_PETS_ID\")" in read(
            tmp_path, "actions.py"
        )

    def test_default_response(self, tmp_path):
        """Без успешного ответа используется default"""
        document = make_document(
            paths={
                "/tags": {
                    "get": {
                        "operationId": "listTags",
                        "responses": {
                            "404": {"description": "Not found"},
                            "default": json_response(
                                {"type": "array", "items": {"type": "string"}}
                            ),
                        },
                    }
                }
            }
        )

        generate(tmp_path, document)

        assert "listTagsResponse = List[str]" in read(tmp_path, "controllers.py")

    def test_enums(self, tmp_path):
        document = make_document(
            schemas={
                "Single": {"type": "string", "enum": ["one"]},
                "Triple": {"type": "string", "enum": ["c", "a", "b"]},
            }
        )

        generate(tmp_path, document)
        models = read(tmp_path, "models.py")

        assert 'Single = Literal["one"]' in models
        assert 'Triple = Literal["c", "a", "b"]' in models

    def test_cyclic_schemas(self, tmp_path, import_package):
        """Взаимно рекурсивные схемы печатаются и импортируются"""
        document = make_document(
            schemas={
                "Node": {
                    "type": "object",
                    "properties": {
                        "children": {
                            "type": "array",
                            "items": {"$ref": "#/components/schemas/Node"},
                        },
                        "owner": {"$ref": "#/components/schemas/Tree"},
                    },
                },
                "Tree": {
                    "type": "object",
                    "properties": {"root": {"$ref": "#/components/schemas/Node"}},
                },
            }
        )

        generate(tmp_path, document, package="tree_client")
        client = import_package(tmp_path / "tree_client")

        tree = {"root": {"children": [{"owner": {}}]}}
        assert client.models.TreeCodec.validate_python(tree) == tree
        with pytest.raises(ValidationError):
            client.models.NodeCodec.validate_python({"children": [1]})

    def test_recursive_array(self, tmp_path, import_package):
        """Самоссылающийся массив импортируется и валидирует вложенность"""
        document = make_document(
            schemas={
                "Nested": {
                    "type": "array",
                    "items": {"$ref": "#/components/schemas/Nested"},
                }
            }
        )

        generate(tmp_path, document, package="nested_client")
        client = import_package(tmp_path / "nested_client")

        assert client.models.NestedCodec.validate_python([[], [[]]]) == [[], [[]]]
        with pytest.raises(ValidationError):
            client.models.NestedCodec.validate_python([[1]])

    def test_alias_cycles(self, tmp_path, import_package):
        document = make_document(
            schemas={
                "Forest": {"$ref": "#/components/schemas/Trees"},
                "Trees": {
                    "type": "array",
                    "items": {"$ref": "#/components/schemas/Forest"},
                },
                "Children": {
                    "type": "array",
                    "items": {"$ref": "#/components/schemas/Leaf"},
                },
                "Leaf": {
                    "type": "object",
                    "properties": {
                        "children": {"$ref": "#/components/schemas/Children"}
                    },
                },
            }
        )

        generate(tmp_path, document, package="forest_client")
        client = import_package(tmp_path / "forest_client")

        assert client.models.ForestCodec.validate_python([[[]]]) == [[[]]]
        assert client.models.TreesCodec.validate_python([]) == []
        leaf = {"children": [{"children": []}]}
        assert client.models.LeafCodec.validate_python(leaf) == leaf
        with pytest.raises(ValidationError):
            client.models.ForestCodec.validate_python(["tree"])


class TestRegeneration:
    """Повторная генерация в существующую директорию"""

    @pytest.mark.asyncio
    async def test_second_run_is_unchanged(self, petstore, tmp_path):
        config = ApiCodegenConfig(
            src=write_spec(tmp_path, petstore), dst=str(tmp_path / "client")
        )

        await ApiCodegen(config).run()
        outcomes = await ApiCodegen(config).run()

        assert [o.action for o in outcomes] == [FileAction.UNCHANGED] * 5
        assert all(o.diff == "" for o in outcomes)

    @pytest.mark.asyncio
    async def test_modified_file_is_diffed(self, petstore, tmp_path):
        """Измененный файл не перезаписывается, пока его не удалить"""
        config = ApiCodegenConfig(
            src=write_spec(tmp_path, petstore), dst=str(tmp_path / "client")
        )
        controllers = tmp_path / "client" / "controllers.py"

        await ApiCodegen(config).run()
        controllers.write_text("# edited by hand\n")

        outcomes = {os.path.basename(o.path): o for o in await ApiCodegen(config).run()}

        assert outcomes["controllers.py"].action == FileAction.DIFFED
        assert outcomes["controllers.py"].diff
        assert controllers.read_text() == "# edited by hand\n"
        assert outcomes["models.py"].action == FileAction.UNCHANGED

        controllers.unlink()
        outcomes = {os.path.basename(o.path): o for o in await ApiCodegen(config).run()}

        assert outcomes["controllers.py"].action == FileAction.WRITTEN
        assert outcomes["controllers.py"].diff == ""
        assert "getPetController" in controllers.read_text()

    def test_overwrite(self, petstore, tmp_path):
        generate(tmp_path, petstore)
        (tmp_path / "client" / "models.py").write_text("")

        outcomes = generate(tmp_path, petstore, overwrite=True)

        assert [o.action for o in outcomes] == [FileAction.OVERWRITTEN] * 5
        assert "class Pet(TypedDict):" in read(tmp_path, "models.py")
