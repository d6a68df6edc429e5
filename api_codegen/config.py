"""
Конфигурация генератора API клиента
"""

import logging
import os
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict, Optional

import toml

from .errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILE = "openapi.toml"
PYPROJECT_FILE = "pyproject.toml"
TOOL_SECTION = "api-codegen"


def _load_toml(path: str) -> Dict[str, Any]:
    if not os.path.exists(path):
        return {}

    try:
        return toml.load(path)
    except (OSError, toml.TomlDecodeError) as e:
        raise ConfigError(f"Failed to read config {path}: {e}", path=path) from e


def _pyproject_values(path: str) -> Dict[str, Any]:
    """Значения из [tool.api-codegen] и имя из [project]"""
    data = _load_toml(path)

    values = dict(data.get("tool", {}).get(TOOL_SECTION) or {})
    project_name = data.get("project", {}).get("name")
    if project_name and "name" not in values:
        values["name"] = project_name

    return values


@dataclass(frozen=True)
class ApiCodegenConfig:
    """Конфигурация генератора клиента"""

    src: Optional[str] = None
    dst: Optional[str] = None
    overwrite: bool = False
    name: Optional[str] = None
    parser: str = "openapi"
    printer: str = "python"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ApiCodegenConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            logger.warning(f"Ignoring unknown config keys: {', '.join(sorted(unknown))}")

        return cls(**{key: value for key, value in data.items() if key in known})

    @classmethod
    def from_file(
        cls, config_path: str = CONFIG_FILE, search_dir: Optional[str] = None
    ) -> Optional["ApiCodegenConfig"]:
        """Загрузка конфигурации из openapi.toml"""
        # Если указана директория для поиска, ищем конфиг там
        if search_dir and os.path.isdir(search_dir):
            config_in_dir = os.path.join(search_dir, CONFIG_FILE)
            if os.path.exists(config_in_dir):
                config_path = config_in_dir

        if not os.path.exists(config_path):
            return None

        return cls.from_dict(_load_toml(config_path))

    @classmethod
    def from_pyproject(
        cls, pyproject_path: str = PYPROJECT_FILE
    ) -> Optional["ApiCodegenConfig"]:
        """Загрузка конфигурации из pyproject.toml"""
        values = _pyproject_values(pyproject_path)
        if not values:
            return None

        return cls.from_dict(values)

    def save_to_file(self, config_path: str = CONFIG_FILE) -> None:
        """Сохранение конфигурации в файл"""
        config_data = {key: value for key, value in asdict(self).items() if value is not None}

        try:
            with open(config_path, "w") as f:
                toml.dump(config_data, f)
        except OSError as e:
            raise ConfigError(f"Failed to write config {config_path}: {e}", path=config_path) from e

    def merge_with_args(self, args) -> "ApiCodegenConfig":
        """Объединение с аргументами командной строки"""
        return replace(
            self,
            src=args.src or self.src,
            dst=args.dst or self.dst,
            name=args.name or self.name,
            parser="swagger" if args.swagger else self.parser,
            overwrite=bool(args.overwrite or self.overwrite),
        )

    def assemble(self) -> "ApiCodegenConfig":
        """Проверка обязательных параметров"""
        if not self.src:
            raise ConfigError("Source path is required.")

        if not self.dst:
            raise ConfigError("Destination path is required.")

        logger.info(f"Source file: {self.src}")
        logger.info(f"Destination: {self.dst}")
        logger.info(f"Overwrite files: {self.overwrite}")
        return self


def load_config(search_dir: Optional[str] = None) -> ApiCodegenConfig:
    """Сборка конфигурации: pyproject.toml, затем openapi.toml"""
    base_dir = search_dir or os.getcwd()

    values = _pyproject_values(os.path.join(base_dir, PYPROJECT_FILE))
    values.update(_load_toml(os.path.join(base_dir, CONFIG_FILE)))

    return ApiCodegenConfig.from_dict(values)
