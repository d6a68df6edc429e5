"""Утилиты для генератора"""

from .naming import (
    clean_identifier,
    constant_case,
    operation_name,
    pascal_case,
    sanitize_name,
    snake_case,
)

__all__ = [
    "clean_identifier",
    "constant_case",
    "operation_name",
    "pascal_case",
    "sanitize_name",
    "snake_case",
]
