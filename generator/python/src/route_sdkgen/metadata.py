from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

LiteralValue = Union[bool, int, float, str]

_ANONYMOUS_OBJECT_NAMES = ("__type", "__object")


def literal_text(value: LiteralValue) -> str:
    """Stringify a literal constant the way it reads inside a string pattern."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


@dataclass(frozen=True, slots=True)
class JsDocTag:
    name: str
    text: str | None = None

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "JsDocTag":
        text = data.get("text")
        if isinstance(text, list):
            text = "".join(str(part.get("text", "")) if isinstance(part, dict) else str(part) for part in text)
        return JsDocTag(name=data["name"], text=text)


@dataclass(frozen=True, slots=True)
class TypeTag:
    name: str
    kind: str
    value: LiteralValue

    @property
    def instance(self) -> str:
        return self.name.split("<", 1)[0]

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "TypeTag":
        name = data["name"]
        return TypeTag(
            name=name,
            kind=data.get("kind", name.split("<", 1)[0].lower()),
            value=data["value"],
        )


TagMatrix = tuple[tuple[TypeTag, ...], ...]


def _tag_matrix(data: Any) -> TagMatrix:
    if not data:
        return ()
    return tuple(tuple(TypeTag.from_dict(tag) for tag in row) for row in data)


def _jsdoc_tags(data: Any) -> tuple[JsDocTag, ...]:
    if not data:
        return ()
    return tuple(JsDocTag.from_dict(tag) for tag in data)


@dataclass(frozen=True, slots=True)
class Constant:
    type: str
    values: tuple[LiteralValue, ...]

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "Constant":
        kind = data["type"]
        values = list(data["values"])
        if kind == "bigint":
            values = [int(value) for value in values]
        return Constant(type=kind, values=tuple(values))


@dataclass(frozen=True, slots=True)
class Atomic:
    type: str
    tags: TagMatrix = ()

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "Atomic":
        return Atomic(type=data["type"], tags=_tag_matrix(data.get("tags")))


@dataclass(frozen=True, slots=True)
class ArrayType:
    value: "Metadata"
    tags: TagMatrix = ()
    name: str | None = None

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "ArrayType":
        return ArrayType(
            value=Metadata.from_dict(data["value"]),
            tags=_tag_matrix(data.get("tags")),
            name=data.get("name"),
        )


@dataclass(frozen=True, slots=True)
class TupleType:
    elements: tuple["Metadata", ...]
    name: str | None = None

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "TupleType":
        return TupleType(
            elements=tuple(Metadata.from_dict(x) for x in data.get("elements") or []),
            name=data.get("name"),
        )


@dataclass(frozen=True, slots=True)
class Property:
    key: "Metadata"
    value: "Metadata"
    description: str | None = None
    jsdoc_tags: tuple[JsDocTag, ...] = ()

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "Property":
        return Property(
            key=Metadata.from_dict(data["key"]),
            value=Metadata.from_dict(data["value"]),
            description=data.get("description"),
            jsdoc_tags=_jsdoc_tags(data.get("jsdoc_tags")),
        )


@dataclass(frozen=True, slots=True)
class ObjectType:
    properties: tuple[Property, ...] = ()
    name: str | None = None
    description: str | None = None
    jsdoc_tags: tuple[JsDocTag, ...] = ()

    @property
    def anonymous(self) -> bool:
        if self.name is None:
            return True
        return any(self.name == prefix or self.name.startswith(prefix + ".") for prefix in _ANONYMOUS_OBJECT_NAMES)

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "ObjectType":
        return ObjectType(
            properties=tuple(Property.from_dict(x) for x in data.get("properties") or []),
            name=data.get("name"),
            description=data.get("description"),
            jsdoc_tags=_jsdoc_tags(data.get("jsdoc_tags")),
        )


@dataclass(frozen=True, slots=True)
class Alias:
    name: str

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "Alias":
        return Alias(name=data["name"])


@dataclass(frozen=True, slots=True)
class Escaped:
    original: "Metadata"
    returns: "Metadata"

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "Escaped":
        return Escaped(
            original=Metadata.from_dict(data["original"]),
            returns=Metadata.from_dict(data["returns"]),
        )


@dataclass(frozen=True, slots=True)
class Metadata:
    """One node of the type-shape tree.

    Every slot may be populated at the same time: a node that is both
    ``nullable`` and carries an atomic describes ``null | <atomic>``.
    ``required`` is false for members that may be absent; ``optional`` and
    ``rest`` only matter for tuple elements.
    """

    any: bool = False
    required: bool = True
    optional: bool = False
    nullable: bool = False
    escaped: Escaped | None = None
    constants: tuple[Constant, ...] = ()
    templates: tuple[tuple["Metadata", ...], ...] = ()
    atomics: tuple[Atomic, ...] = ()
    tuples: tuple[TupleType, ...] = ()
    arrays: tuple[ArrayType, ...] = ()
    objects: tuple[ObjectType, ...] = ()
    aliases: tuple[Alias, ...] = ()
    natives: tuple[str, ...] = ()
    rest: "Metadata | None" = None

    def is_required(self) -> bool:
        return self.required

    def size(self) -> int:
        return (
            int(self.any)
            + int(self.escaped is not None)
            + sum(len(constant.values) for constant in self.constants)
            + len(self.templates)
            + len(self.atomics)
            + len(self.tuples)
            + len(self.arrays)
            + len(self.objects)
            + len(self.aliases)
            + len(self.natives)
            + int(self.rest is not None)
        )

    def is_sole_literal(self) -> bool:
        return (
            self.required
            and not self.nullable
            and self.size() == 1
            and len(self.constants) == 1
            and len(self.constants[0].values) == 1
        )

    def sole_literal(self) -> LiteralValue:
        return self.constants[0].values[0]

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "Metadata":
        escaped = data.get("escaped")
        rest = data.get("rest")
        return Metadata(
            any=bool(data.get("any", False)),
            required=bool(data.get("required", True)),
            optional=bool(data.get("optional", False)),
            nullable=bool(data.get("nullable", False)),
            escaped=Escaped.from_dict(escaped) if isinstance(escaped, dict) else None,
            constants=tuple(Constant.from_dict(x) for x in data.get("constants") or []),
            templates=tuple(
                tuple(Metadata.from_dict(elem) for elem in template) for template in data.get("templates") or []
            ),
            atomics=tuple(Atomic.from_dict(x) for x in data.get("atomics") or []),
            tuples=tuple(TupleType.from_dict(x) for x in data.get("tuples") or []),
            arrays=tuple(ArrayType.from_dict(x) for x in data.get("arrays") or []),
            objects=tuple(ObjectType.from_dict(x) for x in data.get("objects") or []),
            aliases=tuple(Alias.from_dict(x) for x in data.get("aliases") or []),
            natives=tuple(str(x) for x in data.get("natives") or []),
            rest=Metadata.from_dict(rest) if isinstance(rest, dict) else None,
        )
