from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from .metadata import JsDocTag, Metadata


class ParamCategory(str, Enum):
    PATH = "path"
    QUERY = "query"
    BODY = "body"
    HEADER = "header"


@dataclass(frozen=True, slots=True)
class TypeTuple:
    name: str
    metadata: Metadata | None = None

    @property
    def void(self) -> bool:
        return self.name == "void"

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "TypeTuple":
        metadata = data.get("metadata")
        return TypeTuple(
            name=data["name"],
            metadata=Metadata.from_dict(metadata) if isinstance(metadata, dict) else None,
        )


@dataclass(frozen=True, slots=True)
class RouteParameter:
    name: str
    category: ParamCategory
    type: TypeTuple
    field: str | None = None
    encrypted: bool = False

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "RouteParameter":
        return RouteParameter(
            name=data["name"],
            category=ParamCategory(data["category"]),
            type=TypeTuple.from_dict(data["type"]),
            field=data.get("field"),
            encrypted=bool(data.get("encrypted", False)),
        )


@dataclass(frozen=True, slots=True)
class Route:
    name: str
    method: str
    path: str
    accessors: tuple[str, ...]
    output: TypeTuple
    parameters: tuple[RouteParameter, ...] = ()
    imports: tuple[tuple[str, tuple[str, ...]], ...] = ()
    encrypted: bool = False
    status: int | None = None
    content_type: str | None = None
    symbol: str | None = None
    description: str | None = None
    tags: tuple[JsDocTag, ...] = ()

    def parameters_of(self, category: ParamCategory) -> list[RouteParameter]:
        return [p for p in self.parameters if p.category is category]

    @property
    def body(self) -> RouteParameter | None:
        return next(iter(self.parameters_of(ParamCategory.BODY)), None)

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "Route":
        return Route(
            name=data["name"],
            method=str(data["method"]).upper(),
            path=data["path"],
            accessors=tuple(data["accessors"]),
            output=TypeTuple.from_dict(data.get("output") or {"name": "void"}),
            parameters=tuple(RouteParameter.from_dict(x) for x in data.get("parameters") or []),
            imports=tuple((str(file), tuple(instances)) for file, instances in data.get("imports") or []),
            encrypted=bool(data.get("encrypted", False)),
            status=data.get("status"),
            content_type=data.get("content_type"),
            symbol=data.get("symbol"),
            description=data.get("description"),
            tags=tuple(JsDocTag.from_dict(x) for x in data.get("tags") or []),
        )
