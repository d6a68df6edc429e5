import copy
import importlib
import os
import sys

import pytest

from documents import PETSTORE, SWAGGER


@pytest.fixture
def petstore():
    return copy.deepcopy(PETSTORE)


@pytest.fixture
def swagger():
    return copy.deepcopy(SWAGGER)


@pytest.fixture
def import_package(monkeypatch):
    """Импорт сгенерированного пакета из директории"""
    imported = []

    def load(directory):
        parent, name = os.path.split(str(directory))
        monkeypatch.syspath_prepend(parent)
        imported.append(name)
        return importlib.import_module(name)

    yield load

    for name in imported:
        for module in list(sys.modules):
            if module == name or module.startswith(f"{name}."):
                del sys.modules[module]
