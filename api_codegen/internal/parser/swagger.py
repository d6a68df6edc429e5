"""
Парсер Swagger 2.0: документ преобразуется в OpenAPI 3.0.2
и проверяется той же грамматикой, что и OpenAPI.
"""

import copy
import logging
from typing import Any, Dict, List, Optional, Tuple

from ...errors import ConversionError
from ..types.models import File
from .openapi import OpenApiParser, load_json

logger = logging.getLogger(__name__)

CONVERSION_FAILED = "Failed to convert Swagger 2.0 to OpenApi 3.0.2"

TARGET_VERSION = "3.0.2"

DEFAULT_MEDIA_TYPE = "application/json"
FORM_MEDIA_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")

HTTP_VERBS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")

# Поля параметра, которые в OpenAPI 3 переезжают в schema
PARAMETER_SCHEMA_KEYS = (
    "type",
    "format",
    "items",
    "enum",
    "default",
    "maximum",
    "exclusiveMaximum",
    "minimum",
    "exclusiveMinimum",
    "maxLength",
    "minLength",
    "pattern",
    "maxItems",
    "minItems",
    "uniqueItems",
    "multipleOf",
)

OAUTH2_FLOWS = {
    "implicit": "implicit",
    "password": "password",
    "application": "clientCredentials",
    "accessCode": "authorizationCode",
}

REF_PREFIXES = (
    ("#/definitions/", "#/components/schemas/"),
    ("#/responses/", "#/components/responses/"),
)


class SwaggerConverter:
    """Преобразование Swagger 2.0 в OpenAPI 3.0.2"""

    def __init__(self):
        self._body_parameters = set()

    async def convert(self, raw: Any) -> Dict[str, Any]:
        if not isinstance(raw, dict) or raw.get("swagger") != "2.0":
            raise ConversionError(CONVERSION_FAILED)

        try:
            return self._convert(copy.deepcopy(raw))
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.debug(f"Conversion error: {e}")
            raise ConversionError(CONVERSION_FAILED) from e

    def _convert(self, spec: Dict[str, Any]) -> Dict[str, Any]:
        shared_parameters = spec.get("parameters") or {}
        self._body_parameters = {
            name
            for name, param in shared_parameters.items()
            if param.get("in") in ("body", "formData")
        }

        consumes = spec.get("consumes") or [DEFAULT_MEDIA_TYPE]
        produces = spec.get("produces") or [DEFAULT_MEDIA_TYPE]

        result = {
            "openapi": TARGET_VERSION,
            "info": spec.get("info") or {"title": "", "version": ""},
        }

        servers = self._servers(spec)
        if servers:
            result["servers"] = servers

        for key in ("security", "tags", "externalDocs"):
            if key in spec:
                result[key] = spec[key]
        result.update({k: v for k, v in spec.items() if k.startswith("x-")})

        result["paths"] = {
            path: self._path_item(item, consumes, produces)
            for path, item in (spec.get("paths") or {}).items()
        }

        components = self._components(spec, shared_parameters, consumes, produces)
        if components:
            result["components"] = components

        return self._rewrite_refs(result)

    @staticmethod
    def _servers(spec: Dict[str, Any]) -> List[Dict[str, str]]:
        host = spec.get("host")
        base_path = spec.get("basePath") or ""

        if not host:
            return [{"url": base_path}] if base_path else []

        schemes = spec.get("schemes")
        if not schemes:
            return [{"url": f"//{host}{base_path}"}]

        return [{"url": f"{scheme}://{host}{base_path}"} for scheme in schemes]

    def _components(
        self,
        spec: Dict[str, Any],
        shared_parameters: Dict[str, Any],
        consumes: List[str],
        produces: List[str],
    ) -> Dict[str, Any]:
        components = {}

        definitions = spec.get("definitions") or {}
        if definitions:
            components["schemas"] = {
                name: self._schema(schema) for name, schema in definitions.items()
            }

        parameters = {}
        request_bodies = {}
        for name, param in shared_parameters.items():
            if name in self._body_parameters:
                request_bodies[name] = self._request_body([param], consumes)
            else:
                parameters[name] = self._parameter(param)

        if parameters:
            components["parameters"] = parameters
        if request_bodies:
            components["requestBodies"] = request_bodies

        responses = spec.get("responses") or {}
        if responses:
            components["responses"] = {
                name: self._response(response, produces)
                for name, response in responses.items()
            }

        security = spec.get("securityDefinitions") or {}
        if security:
            components["securitySchemes"] = {
                name: self._security_scheme(scheme) for name, scheme in security.items()
            }

        return components

    def _path_item(
        self, item: Dict[str, Any], consumes: List[str], produces: List[str]
    ) -> Dict[str, Any]:
        if "$ref" in item:
            return dict(item)

        parameters, body = self._split_parameters(item.get("parameters") or [])

        result = {
            key: value
            for key, value in item.items()
            if key not in HTTP_VERBS and key != "parameters"
        }
        if parameters:
            result["parameters"] = parameters

        for verb in HTTP_VERBS:
            if verb in item:
                result[verb] = self._operation(item[verb], body, consumes, produces)

        return result

    def _operation(
        self,
        operation: Dict[str, Any],
        inherited_body: List[Dict[str, Any]],
        consumes: List[str],
        produces: List[str],
    ) -> Dict[str, Any]:
        consumes = operation.get("consumes") or consumes
        produces = operation.get("produces") or produces

        result = {
            key: value
            for key, value in operation.items()
            if key not in ("parameters", "responses", "consumes", "produces", "schemes")
        }

        parameters, body = self._split_parameters(operation.get("parameters") or [])
        body = inherited_body + body

        if parameters:
            result["parameters"] = parameters

        request_body = self._operation_body(body, consumes)
        if request_body is not None:
            result["requestBody"] = request_body

        result["responses"] = {
            str(code): self._response(response, produces)
            for code, response in (operation.get("responses") or {}).items()
        }

        return result

    def _operation_body(
        self, body: List[Dict[str, Any]], consumes: List[str]
    ) -> Optional[Dict[str, Any]]:
        if not body:
            return None

        # Ссылка на общий body-параметр становится ссылкой на requestBodies
        for param in body:
            if "$ref" in param:
                name = param["$ref"].split("/")[-1]
                return {"$ref": f"#/components/requestBodies/{name}"}

        return self._request_body(body, consumes)

    def _split_parameters(
        self, parameters: List[Dict[str, Any]]
    ) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
        regular = []
        body = []

        for param in parameters:
            ref = param.get("$ref")
            if isinstance(ref, str) and ref.startswith("#/parameters/"):
                if ref.split("/")[-1] in self._body_parameters:
                    body.append(param)
                else:
                    regular.append(param)
            elif param.get("in") in ("body", "formData"):
                body.append(param)
            else:
                regular.append(self._parameter(param))

        return regular, body

    def _parameter(self, param: Dict[str, Any]) -> Dict[str, Any]:
        if "$ref" in param:
            return dict(param)

        result = {
            key: value
            for key, value in param.items()
            if key not in PARAMETER_SCHEMA_KEYS
            and key not in ("collectionFormat", "allowEmptyValue")
        }

        schema = {key: param[key] for key in PARAMETER_SCHEMA_KEYS if key in param}
        if schema:
            result["schema"] = self._schema(schema)

        if param.get("collectionFormat") == "multi":
            result["style"] = "form"
            result["explode"] = True
        elif param.get("collectionFormat") == "csv" and param.get("in") == "query":
            result["style"] = "form"
            result["explode"] = False

        if param.get("allowEmptyValue") and param.get("in") == "query":
            result["allowEmptyValue"] = True

        return result

    def _request_body(
        self, params: List[Dict[str, Any]], consumes: List[str]
    ) -> Dict[str, Any]:
        body = next((p for p in params if p.get("in") == "body"), None)

        if body is not None:
            schema = self._schema(body.get("schema") or {})
            media_types = [m for m in consumes if m not in FORM_MEDIA_TYPES]
            result = {
                "content": {
                    media: {"schema": schema} for media in media_types or [DEFAULT_MEDIA_TYPE]
                }
            }
            if body.get("description"):
                result["description"] = body["description"]
            if body.get("required"):
                result["required"] = True
            return result

        properties = {}
        required = []
        has_file = False
        for param in params:
            schema = {key: param[key] for key in PARAMETER_SCHEMA_KEYS if key in param}
            if param.get("description"):
                schema["description"] = param["description"]
            has_file = has_file or schema.get("type") == "file"
            properties[param["name"]] = self._schema(schema)
            if param.get("required"):
                required.append(param["name"])

        schema = {"type": "object", "properties": properties}
        if required:
            schema["required"] = required

        media_types = [m for m in consumes if m in FORM_MEDIA_TYPES]
        if not media_types:
            media_types = [FORM_MEDIA_TYPES[1] if has_file else FORM_MEDIA_TYPES[0]]

        return {"content": {media: {"schema": schema} for media in media_types}}

    def _response(self, response: Dict[str, Any], produces: List[str]) -> Dict[str, Any]:
        if "$ref" in response:
            return dict(response)

        result = {"description": response.get("description") or ""}

        if "schema" in response:
            schema = self._schema(response["schema"])
            result["content"] = {media: {"schema": schema} for media in produces}

        headers = response.get("headers") or {}
        if headers:
            result["headers"] = {
                name: self._header(header) for name, header in headers.items()
            }

        return result

    def _header(self, header: Dict[str, Any]) -> Dict[str, Any]:
        result = {}
        if header.get("description"):
            result["description"] = header["description"]

        schema = {key: header[key] for key in PARAMETER_SCHEMA_KEYS if key in header}
        if schema:
            result["schema"] = self._schema(schema)

        return result

    def _schema(self, schema: Any) -> Any:
        if not isinstance(schema, dict):
            return schema

        result = {}
        for key, value in schema.items():
            if key == "x-nullable":
                result["nullable"] = value
            elif key == "discriminator" and isinstance(value, str):
                result[key] = {"propertyName": value}
            elif key in ("items", "additionalProperties", "not"):
                result[key] = self._schema(value)
            elif key == "properties" and isinstance(value, dict):
                result[key] = {name: self._schema(v) for name, v in value.items()}
            elif key in ("allOf", "anyOf", "oneOf") and isinstance(value, list):
                result[key] = [self._schema(v) for v in value]
            else:
                result[key] = value

        if result.get("type") == "file":
            result["type"] = "string"
            result["format"] = "binary"

        return result

    @staticmethod
    def _security_scheme(scheme: Dict[str, Any]) -> Dict[str, Any]:
        kind = scheme.get("type")
        description = (
            {"description": scheme["description"]} if scheme.get("description") else {}
        )

        if kind == "basic":
            return {"type": "http", "scheme": "basic", **description}

        if kind == "apiKey":
            return {
                "type": "apiKey",
                "name": scheme.get("name"),
                "in": scheme.get("in"),
                **description,
            }

        if kind == "oauth2":
            flow = {"scopes": scheme.get("scopes") or {}}
            for key in ("authorizationUrl", "tokenUrl"):
                if key in scheme:
                    flow[key] = scheme[key]
            return {
                "type": "oauth2",
                "flows": {OAUTH2_FLOWS.get(scheme.get("flow"), "implicit"): flow},
                **description,
            }

        return dict(scheme)

    def _rewrite_refs(self, node: Any) -> Any:
        if isinstance(node, list):
            return [self._rewrite_refs(item) for item in node]

        if not isinstance(node, dict):
            return node

        result = {}
        for key, value in node.items():
            if key == "$ref" and isinstance(value, str):
                result[key] = self._rewrite_ref(value)
            else:
                result[key] = self._rewrite_refs(value)

        return result

    def _rewrite_ref(self, ref: str) -> str:
        for old, new in REF_PREFIXES:
            if ref.startswith(old):
                return new + ref[len(old):]

        if ref.startswith("#/parameters/"):
            name = ref[len("#/parameters/"):]
            if name in self._body_parameters:
                return f"#/components/requestBodies/{name}"
            return f"#/components/parameters/{name}"

        return ref


class SwaggerParser(OpenApiParser):
    """Парсер Swagger 2.0 спецификации"""

    async def parse(self, source: File) -> Dict[str, Any]:
        logger.info("Parser: Swagger 2.0")
        raw = load_json(source)

        logger.info("Converting Swagger 2.0 to OpenApi 3.0.2")
        document = await SwaggerConverter().convert(raw)

        return await self.validate(document, source.path)
