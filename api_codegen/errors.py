"""
Исключения генератора
"""

from typing import Optional


class CodegenError(Exception):
    """Базовая ошибка генерации, прерывающая запуск"""

    def __init__(self, message: str, path: Optional[str] = None):
        self.message = message
        self.path = path
        super().__init__(message)


class ConfigError(CodegenError):
    """Некорректная или неполная конфигурация"""


class SourceError(CodegenError):
    """Исходная спецификация отсутствует или не читается"""


class SourceValidationError(CodegenError):
    """Спецификация не прошла проверку грамматики OpenAPI"""


class ConversionError(CodegenError):
    """Не удалось преобразовать Swagger 2.0 в OpenAPI 3.0.2"""


class FileSystemError(CodegenError):
    """Ошибка чтения или записи файла"""


class FormatError(CodegenError):
    """Форматтер не смог обработать сгенерированный файл"""
