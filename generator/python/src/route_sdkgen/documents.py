from __future__ import annotations

import json
import logging
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

from jsonschema import Draft202012Validator
from ruamel.yaml.error import YAMLError

from .config import load_yaml
from .errors import RouteDocumentError
from .routes import Route

logger = logging.getLogger(__name__)

_SCHEMA_FILE = "route-document.schema.json"


@lru_cache(maxsize=1)
def load_schema() -> dict[str, Any]:
    text = resources.files("route_sdkgen").joinpath("schemas", _SCHEMA_FILE).read_text(encoding="utf-8")
    return json.loads(text)


def _json_path(err: object) -> str:
    path = getattr(err, "absolute_path", None)
    if not path:
        return "$"
    out = "$"
    for part in path:
        if isinstance(part, int):
            out += f"[{part}]"
        else:
            out += f".{part}"
    return out


def validate_document(document: Any) -> list[str]:
    validator = Draft202012Validator(load_schema())
    errors = sorted(validator.iter_errors(document), key=lambda e: [str(p) for p in e.absolute_path])
    return [f"{_json_path(e)}: {e.message}" for e in errors]


def parse_routes(document: Any, *, source: str = "<document>") -> list[Route]:
    errors = validate_document(document)
    if errors:
        raise RouteDocumentError(source, errors)
    routes = [Route.from_dict(item) for item in document["routes"]]
    logger.debug("Loaded %d route(s) from %s", len(routes), source)
    return routes


def load_routes(path: Path) -> list[Route]:
    if not path.exists():
        raise RouteDocumentError(str(path), ["file not found"])
    try:
        document = load_yaml(path)
    except YAMLError as exc:
        raise RouteDocumentError(str(path), [str(exc)]) from exc
    return parse_routes(document, source=str(path))
