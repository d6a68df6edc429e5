from .config import ApiCodegenConfig, load_config
from .errors import (
    CodegenError,
    ConfigError,
    ConversionError,
    FileSystemError,
    FormatError,
    SourceError,
    SourceValidationError,
)
from .generator import ApiCodegen, generate_client, generate_files

__all__ = [
    "ApiCodegen",
    "ApiCodegenConfig",
    "CodegenError",
    "ConfigError",
    "ConversionError",
    "FileSystemError",
    "FormatError",
    "SourceError",
    "SourceValidationError",
    "generate_client",
    "generate_files",
    "load_config",
]
