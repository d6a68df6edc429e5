"""
Тесты для генератора API клиентов
"""

import json
import logging
import os

import httpx
import pytest

from api_codegen import ApiCodegen, ApiCodegenConfig, generate_files
from api_codegen.errors import ConfigError, SourceError
from api_codegen.generator import create_parser, create_printer
from api_codegen.internal.generator import PythonPrinter
from api_codegen.internal.parser import OpenApiParser, SwaggerParser
from api_codegen.internal.storage.filesystem import FileSystem
from api_codegen.internal.types.models import FileAction


def write_spec(directory, document, name="spec.json"):
    path = directory / name
    path.write_text(json.dumps(document))
    return str(path)


class TestFactories:
    """Тесты выбора парсера и принтера по конфигурации"""

    def test_default_parser(self):
        parser = create_parser(ApiCodegenConfig(), FileSystem())
        assert isinstance(parser, OpenApiParser)
        assert not isinstance(parser, SwaggerParser)

    def test_swagger_parser(self):
        parser = create_parser(ApiCodegenConfig(parser="swagger"), FileSystem())
        assert isinstance(parser, SwaggerParser)

    def test_printer_receives_name(self):
        printer = create_printer(ApiCodegenConfig(name="petstore"))

        assert isinstance(printer, PythonPrinter)
        assert printer.name == "petstore"

    def test_unknown_parser(self):
        config = ApiCodegenConfig(src="spec.json", dst="client", parser="yaml")

        with pytest.raises(ConfigError) as exc_info:
            ApiCodegen(config)

        assert str(exc_info.value) == "Unknown parser: yaml"

    def test_unknown_printer(self):
        config = ApiCodegenConfig(src="spec.json", dst="client", printer="typescript")

        with pytest.raises(ConfigError):
            ApiCodegen(config)

    def test_config_is_checked(self):
        with pytest.raises(ConfigError):
            ApiCodegen(ApiCodegenConfig(dst="client"))


class TestGenerateFiles:
    """Тесты генерации без записи на диск"""

    def test_pure_generation(self, petstore, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        files = generate_files(petstore, ApiCodegenConfig(name="petstore"))

        assert [file.path for file in files] == [
            "models.py",
            "__init__.py",
            "controllers.py",
            "actions.py",
            "utilities.py",
        ]
        assert os.listdir(tmp_path) == []

    def test_same_input_same_output(self, petstore):
        config = ApiCodegenConfig()
        assert generate_files(petstore, config) == generate_files(petstore, config)


class TestApiCodegen:
    """Тесты конвейера генерации"""

    @pytest.mark.asyncio
    async def test_run_writes_files(self, petstore, tmp_path):
        src = write_spec(tmp_path, petstore)
        dst = str(tmp_path / "client")

        outcomes = await ApiCodegen(ApiCodegenConfig(src=src, dst=dst)).run()

        assert [o.action for o in outcomes] == [FileAction.WRITTEN] * 5
        assert sorted(os.listdir(dst)) == [
            "__init__.py",
            "actions.py",
            "controllers.py",
            "models.py",
            "utilities.py",
        ]

    @pytest.mark.asyncio
    async def test_stage_logging(self, petstore, tmp_path, caplog):
        src = write_spec(tmp_path, petstore)
        config = ApiCodegenConfig(src=src, dst=str(tmp_path / "client"))

        with caplog.at_level(logging.INFO):
            await ApiCodegen(config).run()

        stages = [
            "Started reading source",
            "Finished reading source",
            "Started parsing",
            "Finished parsing",
            "Started printing",
            "Finished printing",
            "Started writing files",
            "Finished writing files",
        ]
        messages = [record.getMessage() for record in caplog.records]
        positions = [messages.index(stage) for stage in stages]
        assert positions == sorted(positions)

    @pytest.mark.asyncio
    async def test_missing_source(self, tmp_path):
        src = str(tmp_path / "missing.json")
        config = ApiCodegenConfig(src=src, dst=str(tmp_path / "client"))

        with pytest.raises(SourceError) as exc_info:
            await ApiCodegen(config).run()

        assert str(exc_info.value) == f"Source file {src} does not exist"
        assert not os.path.exists(tmp_path / "client")

    @pytest.mark.asyncio
    async def test_http_source(self, petstore, tmp_path):
        requested = []

        def handler(request):
            requested.append(str(request.url))
            return httpx.Response(200, json=petstore)

        config = ApiCodegenConfig(
            src="https://api.test/openapi.json", dst=str(tmp_path / "client")
        )
        outcomes = await ApiCodegen(
            config, transport=httpx.MockTransport(handler)
        ).run()

        assert requested == ["https://api.test/openapi.json"]
        assert len(outcomes) == 5

    @pytest.mark.asyncio
    async def test_http_error(self, tmp_path):
        def handler(request):
            return httpx.Response(404)

        config = ApiCodegenConfig(
            src="https://api.test/openapi.json", dst=str(tmp_path / "client")
        )

        with pytest.raises(SourceError) as exc_info:
            await ApiCodegen(config, transport=httpx.MockTransport(handler)).run()

        assert exc_info.value.path == "https://api.test/openapi.json"

    @pytest.mark.asyncio
    async def test_clean(self, petstore, tmp_path):
        """Очистка удаляет только сгенерированные файлы"""
        dst = tmp_path / "client"
        dst.mkdir()
        (dst / "models.py").write_text("stale = True\n")
        (dst / "custom.py").write_text("keep = True\n")
        config = ApiCodegenConfig(src=write_spec(tmp_path, petstore), dst=str(dst))

        removed = await ApiCodegen(config).clean()

        assert removed == [str(dst / "models.py")]
        assert os.listdir(dst) == ["custom.py"]

    @pytest.mark.asyncio
    async def test_run_with_clean(self, petstore, tmp_path):
        dst = tmp_path / "client"
        dst.mkdir()
        (dst / "models.py").write_text("stale = True\n")
        config = ApiCodegenConfig(src=write_spec(tmp_path, petstore), dst=str(dst))

        outcomes = await ApiCodegen(config).run(clean=True)

        assert outcomes[0].action == FileAction.WRITTEN
        assert "stale" not in (dst / "models.py").read_text()

    @pytest.mark.asyncio
    async def test_swagger_source(self, swagger, tmp_path):
        src = write_spec(tmp_path, swagger, "swagger.json")
        dst = tmp_path / "client"
        config = ApiCodegenConfig(src=src, dst=str(dst), parser="swagger")

        await ApiCodegen(config).run()

        controllers = (dst / "controllers.py").read_text()
        assert "createPetController = u.controller_factory(" in controllers
        assert "class Pet(TypedDict):" in (dst / "models.py").read_text()
