import argparse
import logging
import os
import sys
from collections import Counter
from typing import List, Optional

from api_codegen.config import CONFIG_FILE, ApiCodegenConfig, load_config
from api_codegen.errors import CodegenError
from api_codegen.generator import generate_client
from api_codegen.internal.types.models import FileAction, FileOutcome


def confirm_choice(message: str) -> bool:
    """Запрос подтверждения у пользователя"""
    while True:
        choice = input(f"{message} (y/n): ").lower().strip()
        if choice in ["y", "yes", "да", ""]:
            return True
        elif choice in ["n", "no", "нет"]:
            return False
        print("Введите y/n")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="api-codegen", description="Генерация Python клиента из OpenAPI"
    )
    parser.add_argument("--src", type=str, help="Путь или URL к спецификации")
    parser.add_argument("--dst", type=str, help="Директория для генерации клиента")
    parser.add_argument("--name", type=str, help="Имя проекта для типов действий")
    parser.add_argument(
        "--swagger", action="store_true", help="Исходная спецификация в Swagger 2.0"
    )
    parser.add_argument(
        "--overwrite", action="store_true", help="Перезаписывать существующие файлы"
    )
    parser.add_argument(
        "--clean", action="store_true", help="Удалить ранее сгенерированные файлы"
    )
    parser.add_argument(
        "--init-config", action="store_true", help="Создать конфиг файл openapi.toml"
    )
    parser.add_argument(
        "--force", action="store_true", help="Выполнять без подтверждения"
    )
    parser.add_argument("--verbose", action="store_true", help="Подробный лог")
    return parser


def _init_config(args) -> None:
    config = ApiCodegenConfig().merge_with_args(args)

    if os.path.exists(CONFIG_FILE) and not args.force:
        if not confirm_choice(f"Файл {CONFIG_FILE} уже существует. Перезаписать?"):
            print("↩️ Конфиг не изменен")
            return

    config.save_to_file()
    print(f"✅ Создан конфиг файл {CONFIG_FILE}")


def _print_summary(outcomes: List[FileOutcome], dst: str) -> None:
    counts = Counter(outcome.action for outcome in outcomes)

    print(f"💾 Записано файлов: {counts[FileAction.WRITTEN]}")
    if counts[FileAction.OVERWRITTEN]:
        print(f"♻️ Перезаписано файлов: {counts[FileAction.OVERWRITTEN]}")
    if counts[FileAction.UNCHANGED]:
        print(f"🟰 Без изменений: {counts[FileAction.UNCHANGED]}")
    if counts[FileAction.DIFFED]:
        print(
            f"⚠️ Пропущено файлов с изменениями: {counts[FileAction.DIFFED]} "
            "(используйте --overwrite)"
        )

    print("✅ Генерация завершена успешно!")
    print(f"📦 Клиент создан в: {os.path.abspath(dst)}")


def generate(argv: Optional[List[str]] = None):
    """Универсальная команда генерации клиента"""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.init_config:
            _init_config(args)
            return

        config = load_config().merge_with_args(args)

        print(f"🚀 Генерация клиента из {config.src}")
        outcomes = generate_client(config, clean=args.clean)
        _print_summary(outcomes, config.dst)

    except CodegenError as e:
        print(f"❌ Ошибка генерации: {e}")
        sys.exit(1)


if __name__ == "__main__":
    generate()
