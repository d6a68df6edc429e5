"""
Тесты парсеров OpenAPI и Swagger
"""

import json

import pytest

from api_codegen.errors import ConversionError, SourceError, SourceValidationError
from api_codegen.internal.parser import PARSERS, OpenApiParser, SwaggerConverter, SwaggerParser
from api_codegen.internal.storage.filesystem import FileSystem
from api_codegen.internal.types.models import File
from api_codegen.internal.types.openapi import validate_document


def source(document, path="spec.json"):
    return File(path=path, content=json.dumps(document))


class TestValidateDocument:
    """Тесты грамматики OpenAPI"""

    def test_valid_document(self, petstore):
        assert validate_document(petstore) is petstore

    def test_extensions_are_allowed(self, petstore):
        petstore["x-custom"] = {"a": 1}
        petstore["paths"]["/pets"]["get"]["x-internal"] = True

        validate_document(petstore)

    @pytest.mark.parametrize(
        "mutate",
        [
            lambda d: d.pop("info"),
            lambda d: d.update(openapi="2.0"),
            lambda d: d["paths"]["/health"]["get"].pop("responses"),
            lambda d: d["paths"]["/health"]["get"]["responses"].update({"600": {"description": "?"}}),
            lambda d: d["paths"]["/health"]["get"]["responses"]["204"].pop("description"),
            lambda d: d["paths"]["/pets/{id}"]["get"]["parameters"][0].update({"in": "body"}),
        ],
    )
    def test_invalid_documents(self, petstore, mutate):
        from pydantic import ValidationError

        mutate(petstore)
        with pytest.raises(ValidationError):
            validate_document(petstore)


class TestOpenApiParser:
    """Тесты парсера OpenAPI 3.0.2"""

    @pytest.mark.asyncio
    async def test_parse(self, petstore):
        document = await OpenApiParser(FileSystem()).parse(source(petstore))
        assert document == petstore

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        with pytest.raises(SourceError) as exc_info:
            await OpenApiParser(FileSystem()).parse(File(path="spec.json", content="{"))

        assert "Error parsing spec.json" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_validation_log(self, petstore, tmp_path, monkeypatch):
        """Ошибки валидации пишутся в parse-errors.log"""
        monkeypatch.chdir(tmp_path)
        petstore.pop("info")

        with pytest.raises(SourceValidationError) as exc_info:
            await OpenApiParser(FileSystem()).parse(source(petstore))

        assert str(exc_info.value) == (
            "Source validation failed. See errors in parse-errors.log"
        )
        report = (tmp_path / "parse-errors.log").read_text()
        assert "info" in report

    def test_registry(self):
        assert PARSERS["openapi"] is OpenApiParser
        assert PARSERS["swagger"] is SwaggerParser


class TestSwaggerConverter:
    """Тесты преобразования Swagger 2.0"""

    @pytest.mark.asyncio
    async def test_structure(self, swagger):
        result = await SwaggerConverter().convert(swagger)

        assert result["openapi"] == "3.0.2"
        assert result["servers"] == [{"url": "https://api.example.com/v1"}]
        assert set(result["components"]["schemas"]) == {"Pet"}
        assert result["components"]["securitySchemes"]["basicAuth"] == {
            "type": "http",
            "scheme": "basic",
        }

    @pytest.mark.asyncio
    async def test_body_parameter(self, swagger):
        result = await SwaggerConverter().convert(swagger)
        operation = result["paths"]["/pets"]["post"]

        assert "parameters" not in operation
        assert operation["requestBody"] == {
            "content": {
                "application/json": {"schema": {"$ref": "#/components/schemas/Pet"}}
            },
            "required": True,
        }
        assert operation["responses"]["201"] == {"$ref": "#/components/responses/Created"}

    @pytest.mark.asyncio
    async def test_references_are_rewritten(self, swagger):
        result = await SwaggerConverter().convert(swagger)
        operation = result["paths"]["/pets"]["get"]

        assert operation["parameters"] == [{"$ref": "#/components/parameters/limit"}]
        assert result["components"]["parameters"]["limit"] == {
            "name": "limit",
            "in": "query",
            "schema": {"type": "integer", "format": "int32"},
        }
        schema = operation["responses"]["200"]["content"]["application/json"]["schema"]
        assert schema["items"] == {"$ref": "#/components/schemas/Pet"}

    @pytest.mark.asyncio
    async def test_form_data(self, swagger):
        result = await SwaggerConverter().convert(swagger)
        operation = result["paths"]["/pets/{id}/photo"]["post"]

        assert operation["parameters"][0]["schema"] == {"type": "string"}
        content = operation["requestBody"]["content"]
        assert list(content) == ["multipart/form-data"]
        assert content["multipart/form-data"]["schema"]["properties"]["file"] == {
            "type": "string",
            "format": "binary",
        }

    @pytest.mark.asyncio
    async def test_nullable(self, swagger):
        result = await SwaggerConverter().convert(swagger)
        nickname = result["components"]["schemas"]["Pet"]["properties"]["nickname"]

        assert nickname == {"type": "string", "nullable": True}

    @pytest.mark.asyncio
    async def test_source_is_not_modified(self, swagger):
        before = json.dumps(swagger, sort_keys=True)
        await SwaggerConverter().convert(swagger)
        assert json.dumps(swagger, sort_keys=True) == before

    @pytest.mark.asyncio
    async def test_not_swagger(self, petstore):
        with pytest.raises(ConversionError) as exc_info:
            await SwaggerConverter().convert(petstore)

        assert str(exc_info.value) == "Failed to convert Swagger 2.0 to OpenApi 3.0.2"

    @pytest.mark.asyncio
    async def test_malformed_swagger(self, swagger):
        swagger["paths"]["/pets"]["get"]["parameters"] = "oops"

        with pytest.raises(ConversionError):
            await SwaggerConverter().convert(swagger)


class TestSwaggerParser:
    """Тесты парсера Swagger 2.0"""

    @pytest.mark.asyncio
    async def test_parse_is_validated(self, swagger):
        document = await SwaggerParser(FileSystem()).parse(source(swagger))

        validate_document(document)
        assert document["info"]["title"] == "Legacy"

    @pytest.mark.asyncio
    async def test_converted_document_generates_operations(self, swagger):
        from api_codegen.internal.generator.declarations import DeclarationAssembler

        document = await SwaggerParser(FileSystem()).parse(source(swagger))
        library = DeclarationAssembler(document).assemble()

        by_name = {op.name: op for op in library.operations}
        assert by_name["createPet"].request_body.name == "Pet"
        assert by_name["createPet"].response.name == "Pet"
        assert by_name["listPets"].query_params.properties[0].name == "limit"
