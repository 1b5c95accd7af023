from __future__ import annotations

import json
import math
import re
from dataclasses import dataclass
from typing import Iterable, Sequence

from .config import GeneratorConfig, type_root
from .importer import ImportLedger
from .metadata import (
    ArrayType,
    Atomic,
    Escaped,
    JsDocTag,
    LiteralValue,
    Metadata,
    ObjectType,
    Property,
    TagMatrix,
    TupleType,
    TypeTag,
    literal_text,
)

_IDENT_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")
_RESERVED = frozenset(
    """
    break case catch class const continue debugger default delete do else enum export extends
    false finally for function if import in instanceof new null return super switch this throw
    true try typeof var void while with implements interface let package private protected
    public static yield await
    """.split()
)
_ATOMIC_KEYWORDS = {
    "boolean": "boolean",
    "bigint": "bigint",
    "number": "number",
    "integer": "number",
    "float": "number",
    "string": "string",
}
_GLOBAL_TYPES = frozenset(
    """
    any unknown never undefined object string number boolean bigint symbol
    Array ReadonlyArray Record Partial Required Readonly Pick Omit Exclude Extract
    NonNullable Date Map Set Promise
    """.split()
)
_REFERENCE_RE = re.compile(r"(?<![A-Za-z0-9_$.])[A-Za-z_$][A-Za-z0-9_$]*(?:\.[A-Za-z_$][A-Za-z0-9_$]*)*")
_STRING_RE = re.compile(r"\"(?:[^\"\\]|\\.)*\"|'(?:[^'\\]|\\.)*'")
_DATE_TIME_TAG = TypeTag(name="Format", kind="format", value="date-time")


@dataclass(frozen=True, slots=True)
class _Node:
    text: str
    kind: str = "plain"


def _grouped(node: _Node) -> str:
    if node.kind in ("union", "intersection"):
        return f"({node.text})"
    return node.text


def _union(nodes: Sequence[_Node]) -> _Node:
    if not nodes:
        return _Node("never")
    if len(nodes) == 1:
        return nodes[0]
    return _Node(" | ".join(_grouped(node) for node in nodes), "union")


def _intersection(nodes: Sequence[_Node]) -> _Node:
    if len(nodes) == 1:
        return nodes[0]
    return _Node(" & ".join(_grouped(node) for node in nodes), "intersection")


def indent(text: str, prefix: str = "  ") -> str:
    return "\n".join(line if not line else prefix + line for line in text.split("\n"))


def _number(value: int | float) -> str:
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
        return repr(value)
    return str(value)


def write_literal(value: LiteralValue, kind: str | None = None) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if kind == "bigint":
        number = int(value)
        return f"-{-number}n" if number < 0 else f"{number}n"
    if isinstance(value, (int, float)):
        return _number(value)
    return json.dumps(value, ensure_ascii=False)


def property_key(name: str) -> str:
    if _IDENT_RE.match(name) and name not in _RESERVED:
        return name
    return json.dumps(name, ensure_ascii=False)


def write_comment(atomics: Sequence[Atomic], description: str | None, tags: Sequence[JsDocTag]) -> str:
    """Join a description and its JSDoc tags, dropping tags already expressed as type tags."""
    lines: list[str] = []
    if description:
        lines.extend(description.split("\n"))

    filtered = list(tags)
    if atomics and filtered:
        kinds = {tag.kind for atomic in atomics for row in atomic.tags for tag in row}
        filtered = [tag for tag in filtered if tag.name not in kinds]

    if description and filtered:
        lines.append("")
    for tag in filtered:
        lines.append(f"@{tag.name} {tag.text}" if tag.text else f"@{tag.name}")
    return "\n".join(lines)


def jsdoc_block(comment: str) -> str:
    if not comment:
        return ""
    body = [f" * {line}" if line else " *" for line in comment.split("\n")]
    return "\n".join(["/**", *body, " */"])


class TypeWriter:
    """Renders type-shape trees into TypeScript type text.

    Every tag validator and alias touched while rendering is registered on the
    ledger of the file being written.
    """

    def __init__(self, config: GeneratorConfig, importer: ImportLedger) -> None:
        self.config = config
        self.importer = importer

    def write(self, meta: Metadata, parent_escaped: bool = False) -> str:
        return self._write(meta, parent_escaped).text

    def _write(self, meta: Metadata, parent_escaped: bool = False) -> _Node:
        union: list[_Node] = []

        if meta.any:
            union.append(_Node("any"))
        if meta.nullable:
            union.append(_Node("null"))
        if not meta.is_required():
            union.append(_Node("undefined"))
        if not parent_escaped and meta.escaped is not None:
            union.append(self._write_escaped(meta.escaped))

        for constant in meta.constants:
            for value in constant.values:
                union.append(_Node(write_literal(value, constant.type)))
        for template in meta.templates:
            union.append(self._write_template(template))
        for atomic in meta.atomics:
            union.append(self._write_atomic(atomic))

        for tuple_type in meta.tuples:
            union.append(self._write_tuple(tuple_type))
        for array in meta.arrays:
            union.append(self._write_array(array))
        for obj in meta.objects:
            if obj.anonymous:
                union.append(self._write_object(obj))
            else:
                union.append(self._write_alias(obj.name or ""))
        for alias in meta.aliases:
            union.append(self._write_alias(alias.name))

        return _union(union)

    def _write_escaped(self, escaped: Escaped) -> _Node:
        original = escaped.original
        if original.size() == 1 and original.natives == ("Date",):
            return _intersection([_Node("string"), self._write_tag(_DATE_TIME_TAG)])
        return self._write(escaped.returns, True)

    def _write_template(self, segments: Sequence[Metadata]) -> _Node:
        head = ""
        index = 0
        while index < len(segments) and segments[index].is_sole_literal():
            head += literal_text(segments[index].sole_literal())
            index += 1

        spans: list[list[str]] = []
        for elem in segments[index:]:
            if elem.is_sole_literal():
                spans[-1][1] += literal_text(elem.sole_literal())
            else:
                spans.append([self.write(elem), ""])

        body = _escape_template(head) + "".join(f"${{{node}}}{_escape_template(tail)}" for node, tail in spans)
        return _Node(f"`{body}`")

    def _write_atomic(self, atomic: Atomic) -> _Node:
        return self._write_tag_matrix(_Node(_ATOMIC_KEYWORDS[atomic.type]), atomic.tags)

    def _write_array(self, array: ArrayType) -> _Node:
        element = self._write(array.value)
        return self._write_tag_matrix(_Node(f"{_grouped(element)}[]"), array.tags)

    def _write_tuple(self, tuple_type: TupleType) -> _Node:
        elements: list[str] = []
        for elem in tuple_type.elements:
            if elem.rest is not None:
                elements.append(f"...{_grouped(self._write(elem.rest))}[]")
            elif elem.optional:
                elements.append(f"{_grouped(self._write(elem))}?")
            else:
                elements.append(self.write(elem))
        return _Node(f"[{', '.join(elements)}]")

    def _write_object(self, obj: ObjectType) -> _Node:
        regular = [p for p in obj.properties if p.key.is_sole_literal()]
        dynamic = [p for p in obj.properties if not p.key.is_sole_literal()]
        if regular and dynamic:
            node = _intersection([self._write_regular(regular), *(self._write_dynamic(p) for p in dynamic)])
        elif dynamic:
            node = _intersection([self._write_dynamic(p) for p in dynamic])
        else:
            node = self._write_regular(regular)

        comment = jsdoc_block(write_comment([], obj.description, obj.jsdoc_tags))
        if comment:
            return _Node(f"{comment}\n{node.text}", node.kind)
        return node

    def _write_regular(self, properties: Iterable[Property]) -> _Node:
        members: list[str] = []
        for prop in properties:
            key = property_key(literal_text(prop.key.sole_literal()))
            question = "" if prop.value.is_required() else "?"
            member = f"{key}{question}: {self.write(prop.value)};"
            members.append(self._describe(member, prop))
        return _literal_type(members)

    def _write_dynamic(self, prop: Property) -> _Node:
        member = f"[key: {self.write(prop.key)}]: {self.write(prop.value)};"
        return _literal_type([self._describe(member, prop)])

    def _describe(self, member: str, prop: Property) -> str:
        comment = jsdoc_block(write_comment(prop.value.atomics, prop.description, prop.jsdoc_tags))
        return f"{comment}\n{member}" if comment else member

    def _write_alias(self, name: str) -> _Node:
        root = type_root(name)
        self._import_alias(root)
        # type arguments, e.g. IPage<IBbsArticle.ISummary>
        arguments = _STRING_RE.sub("", name.strip()[len(root) :])
        for reference in _REFERENCE_RE.findall(arguments):
            top = reference.split(".", 1)[0]
            if top not in _GLOBAL_TYPES and top not in _RESERVED:
                self._import_alias(top)
        return _Node(name)

    def _import_alias(self, root: str) -> None:
        file = self.config.alias_file(root)
        if not self.importer.is_own(file):
            self.importer.internal(file, root, type_only=True)

    def _write_tag_matrix(self, base: _Node, matrix: TagMatrix) -> _Node:
        rows = [row for row in matrix if row]
        if not rows:
            return base
        if len(rows) == 1:
            return _intersection([base, *(self._write_tag(tag) for tag in rows[0])])
        alternatives = [
            self._write_tag(row[0]) if len(row) == 1 else _intersection([self._write_tag(tag) for tag in row])
            for row in rows
        ]
        return _intersection([base, _union(alternatives)])

    def _write_tag(self, tag: TypeTag) -> _Node:
        instance = self.importer.external(self.config.tag_library(tag.instance), tag.instance, type_only=True)
        return _Node(f"{instance}<{write_literal(tag.value)}>")


def _literal_type(members: Sequence[str]) -> _Node:
    if not members:
        return _Node("{}")
    body = "\n".join(indent(member) for member in members)
    return _Node(f"{{\n{body}\n}}")


def _escape_template(text: str) -> str:
    return text.replace("\\", "\\\\").replace("`", "\\`").replace("${", "\\${")
