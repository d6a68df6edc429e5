class Templates:
    """Шаблоны для генерации файлов"""

    # Импорты типов собираются из имен, которые реально напечатаны
    typing_import = "from typing import {names}"
    typing_extensions_import = "from typing_extensions import {names}"
    codec_import = "from pydantic import TypeAdapter"

    controllers_header = """from . import models as m
from . import utilities as u"""

    actions_header = """from . import controllers as cs
from . import utilities as u
"""

    action_creator = 'action_creator = u.action_creator_factory("{name}")'

    action = """{action} = action_creator.async_("{type}")
{reducers} = u.async_reducers_factory({action})
{effects} = u.{effects_factory}({action}, cs.{controller})"""

    controller = '{controller} = u.{factory}({codec}, "{method}", {path})'

    index = """from . import actions, controllers, models, utilities
from .actions import *
from .controllers import *
from .models import *
from .utilities import *
"""

    utilities = """import logging
from dataclasses import dataclass, replace
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple
from urllib.parse import quote, urlencode

import aiohttp
from pydantic import TypeAdapter, ValidationError

__all__ = [
    "SendRequestError",
    "ApiRequest",
    "aiohttp_request",
    "RequestFunction",
    "ApiConfig",
    "path_mapper",
    "query_mapper",
    "controller_factory",
    "requestless_controller_factory",
    "Action",
    "AsyncActionCreators",
    "ActionCreatorFactory",
    "action_creator_factory",
    "AsyncState",
    "Reducer",
    "async_reducers_factory",
    "Effect",
    "effects",
    "requestless_effects",
]

logger = logging.getLogger(__name__)


class SendRequestError(Exception):
    def __init__(self, message, path, status_code, response_data=None):
        self.message = message
        self.path = path
        self.status_code = status_code
        self.response_data = response_data
        super().__init__(f"[{status_code}] {path}: {message}")


@dataclass(frozen=True)
class ApiRequest:
    method: str
    url: str
    body: Any = None


async def aiohttp_request(request: ApiRequest) -> Any:
    \"\"\"Отправка запроса через aiohttp\"\"\"
    async with aiohttp.ClientSession() as session:
        async with session.request(
            request.method.upper(), request.url, json=request.body
        ) as response:
            if response.content_type == "application/json":
                data = await response.json()
            else:
                data = await response.text() or None

            if response.status >= 400:
                raise SendRequestError(
                    response.reason, request.url, response.status, data
                )

            return data


RequestFunction = Callable[[ApiRequest], Awaitable[Any]]


@dataclass(frozen=True)
class ApiConfig:
    server: str
    request: RequestFunction = aiohttp_request


def path_mapper(path: str, properties: Optional[Dict[str, Any]] = None) -> str:
    for key, value in (properties or {}).items():
        path = path.replace("{" + key + "}", quote(str(value), safe=""))
    return path


def query_mapper(query: Optional[Dict[str, Any]] = None) -> str:
    if not query:
        return ""
    return "?" + urlencode(query, doseq=True, quote_via=quote)


def controller_factory(codec: TypeAdapter, method: str, path: str):
    \"\"\"Контроллер операции, принимающей path/query/body\"\"\"

    def factory(config: ApiConfig):
        async def controller(request: Dict[str, Any]):
            url = (
                config.server
                + path_mapper(path, request.get("path"))
                + query_mapper(request.get("query"))
            )
            logger.debug(f"{method.upper()} {url}")
            response = await config.request(
                ApiRequest(method=method, url=url, body=request.get("body"))
            )
            return codec.validate_python(response)

        return controller

    return factory


def requestless_controller_factory(codec: TypeAdapter, method: str, path: str):
    \"\"\"Контроллер операции без параметров\"\"\"

    def factory(config: ApiConfig):
        async def controller(request: Any = None):
            url = config.server + path
            logger.debug(f"{method.upper()} {url}")
            response = await config.request(ApiRequest(method=method, url=url))
            return codec.validate_python(response)

        return controller

    return factory


@dataclass(frozen=True)
class Action:
    type: str
    payload: Any = None
    error: bool = False


@dataclass(frozen=True)
class AsyncActionCreators:
    type: str

    @property
    def started_type(self) -> str:
        return f"{self.type}_STARTED"

    @property
    def done_type(self) -> str:
        return f"{self.type}_DONE"

    @property
    def failed_type(self) -> str:
        return f"{self.type}_FAILED"

    def started(self, params: Any = None) -> Action:
        return Action(self.started_type, {"params": params})

    def done(self, params: Any, result: Any) -> Action:
        return Action(self.done_type, {"params": params, "result": result})

    def failed(self, params: Any, error: Exception) -> Action:
        return Action(self.failed_type, {"params": params, "error": error}, True)


@dataclass(frozen=True)
class ActionCreatorFactory:
    prefix: str

    def async_(self, type_: str) -> AsyncActionCreators:
        return AsyncActionCreators(f"{self.prefix}/{type_}")


def action_creator_factory(prefix: str) -> ActionCreatorFactory:
    return ActionCreatorFactory(prefix)


@dataclass(frozen=True)
class AsyncState:
    pending: bool = False
    params: Any = None
    result: Any = None
    error: Optional[Exception] = None


Reducer = Callable[[AsyncState, Action], AsyncState]


def async_reducers_factory(action: AsyncActionCreators) -> Tuple[AsyncState, Reducer]:
    \"\"\"Начальное состояние и редьюсер для асинхронного действия\"\"\"
    initial = AsyncState()

    def reducer(state: AsyncState, incoming: Action) -> AsyncState:
        payload = incoming.payload or {}

        if incoming.type == action.started_type:
            return replace(state, pending=True, params=payload.get("params"), error=None)

        if incoming.type == action.done_type:
            return replace(state, pending=False, result=payload.get("result"))

        if incoming.type == action.failed_type:
            return replace(state, pending=False, error=payload.get("error"))

        return state

    return initial, reducer


Effect = Callable[[Action, ApiConfig], Awaitable[Optional[Action]]]


def effects(action: AsyncActionCreators, controller_factory) -> Effect:
    \"\"\"На STARTED выполняет запрос и возвращает DONE или FAILED\"\"\"

    async def effect(incoming: Action, config: ApiConfig) -> Optional[Action]:
        if incoming.type != action.started_type:
            return None

        params = (incoming.payload or {}).get("params")
        try:
            result = await controller_factory(config)(params)
        except (SendRequestError, ValidationError, aiohttp.ClientError) as e:
            logger.debug(f"{action.type} failed: {e}")
            return action.failed(params, e)

        return action.done(params, result)

    return effect


def requestless_effects(action: AsyncActionCreators, controller_factory) -> Effect:
    async def effect(incoming: Action, config: ApiConfig) -> Optional[Action]:
        if incoming.type != action.started_type:
            return None

        try:
            result = await controller_factory(config)()
        except (SendRequestError, ValidationError, aiohttp.ClientError) as e:
            logger.debug(f"{action.type} failed: {e}")
            return action.failed(None, e)

        return action.done(None, result)

    return effect
"""


templates = Templates()
