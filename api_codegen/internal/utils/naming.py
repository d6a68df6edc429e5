"""Утилиты для работы с именами идентификаторов"""

import keyword
import re

_NOT_IDENTIFIER = re.compile(r"[^0-9a-zA-Z_]+")


def sanitize_name(name: str) -> str:
    """
    Заменяет каждую последовательность символов вне [A-Za-z0-9_] на "_".

    Examples:
        >>> sanitize_name("find-pets.by/id")
        'find_pets_by_id'
        >>> sanitize_name("/pets/{id}")
        '_pets_id_'
    """
    return _NOT_IDENTIFIER.sub("_", name)


def clean_identifier(name: str, fallback: str = "Model") -> str:
    """
    Превращает произвольную строку в допустимый идентификатор Python.

    Examples:
        >>> clean_identifier("pet-list")
        'pet_list'
        >>> clean_identifier("2fa")
        '_2fa'
        >>> clean_identifier("class")
        'class_'
    """
    name = sanitize_name(name)

    if not name:
        return fallback

    if name[0].isdigit():
        name = f"_{name}"

    if keyword.iskeyword(name):
        name = f"{name}_"

    return name


def operation_name(operation_id: str, method: str, path_key: str) -> str:
    """
    Имя операции: очищенный operationId или `<verb>_<path>`.

    Examples:
        >>> operation_name("", "get", "/pets/{id}")
        'get_pets_id'
        >>> operation_name("find pets", "get", "/pets")
        'find_pets'
    """
    if operation_id:
        return sanitize_name(operation_id)

    return f"{method}_{sanitize_name(path_key).strip('_')}"


def snake_case(name: str) -> str:
    name = name.replace("-", "_")

    # HTTPValidationError -> http_validation_error
    s1 = re.sub("(.)([A-Z][a-z]+)", r"\1_\2", name)
    s2 = re.sub("([a-z0-9])([A-Z])", r"\1_\2", s1)
    s3 = re.sub("([A-Z]+)([A-Z][a-z])", r"\1_\2", s2)
    s4 = re.sub("_+", "_", s3)
    return s4.lower()


def pascal_case(name: str) -> str:
    """PascalCase из произвольной строки"""
    if not name:
        return ""

    parts = []
    for part in _NOT_IDENTIFIER.sub("_", name).split("_"):
        if not part:
            continue

        # аббревиатуры оставляем как есть
        if part.isupper() and len(part) <= 4:
            parts.append(part)
        elif part.lower() == "id":
            parts.append("ID")
        else:
            parts.append(part[0].upper() + part[1:])

    return "".join(parts)


def constant_case(name: str) -> str:
    """
    Examples:
        >>> constant_case("getPetById")
        'GET_PET_BY_ID'
    """
    return snake_case(sanitize_name(name)).strip("_").upper()
