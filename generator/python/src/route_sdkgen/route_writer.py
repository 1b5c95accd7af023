from __future__ import annotations

import json
import re

from .config import GeneratorConfig
from .importer import ImportLedger
from .routes import ParamCategory, Route, RouteParameter, TypeTuple
from .type_writer import TypeWriter, indent, jsdoc_block, write_comment

SIGNATURE = "@sdkgen Generated by route-sdkgen"

_PATH_PARAM_RE = re.compile(r":([A-Za-z_$][A-Za-z0-9_$]*)")
_RANDOM_SOURCE = (
    '"object" === typeof connection.simulate && null !== connection.simulate\n'
    "  ? connection.simulate\n"
    "  : undefined"
)


def _hang(text: str, prefix: str = "  ") -> str:
    first, _, rest = text.partition("\n")
    if not rest:
        return first
    return first + "\n" + indent(rest, prefix)


def _arguments(values: list[str]) -> str:
    return "\n".join(indent(f"{value},") for value in values)


def _call(callee: str, values: list[str]) -> str:
    if not values:
        return f"{callee}()"
    return f"{callee}(\n{_arguments(values)}\n)"


def _object(entries: list[str]) -> str:
    if not entries:
        return "{}"
    return "{\n" + _arguments(entries) + "\n}"


def _signature(params: list[str]) -> str:
    if not params:
        return "()"
    if len(params) == 1 and "\n" not in params[0]:
        return f"({params[0]})"
    return f"(\n{_arguments(params)}\n)"


class RouteWriter:
    """Writes the callable stub and companion namespace of one route."""

    def __init__(self, config: GeneratorConfig, importer: ImportLedger) -> None:
        self.config = config
        self.importer = importer
        self.types = TypeWriter(config, importer)

    def write(self, route: Route) -> str:
        return "\n".join([self.write_function(route), self.write_namespace(route)])

    # ------------------------------------------------------------------
    # FUNCTION
    # ------------------------------------------------------------------
    def write_function(self, route: Route) -> str:
        connection = self._connection_type()
        params = [f"connection: {connection}"]
        params.extend(f"{p.name}: {self._parameter_type(route, p)}" for p in route.parameters)

        fetch = self._fetch_call(route)
        if self.config.simulate:
            simulate = _call(f"{route.name}.simulate", ["connection", *(p.name for p in route.parameters)])
            expression = "!!connection.simulate\n" + indent(f"? {_hang(simulate)}\n: {_hang(fetch)}")
        else:
            expression = fetch

        lines = [
            jsdoc_block(self._function_comment(route)),
            f"export async function {route.name}{_signature(params)}: Promise<{self._return_type(route)}> {{",
            indent(f"return {expression};"),
            "}",
        ]
        return "\n".join(lines)

    def _function_comment(self, route: Route) -> str:
        comment = write_comment([], route.description, route.tags)
        lines = [comment, ""] if comment else []
        if route.symbol:
            lines.append(f"@controller {route.symbol}")
        lines.append(f"@path {route.method} {route.path}")
        lines.append(SIGNATURE)
        return "\n".join(lines)

    def _fetch_call(self, route: Route) -> str:
        fetcher = "EncryptedFetcher" if route.encrypted else "PlainFetcher"
        self.importer.external(f"{self.config.fetcher}/lib/{fetcher}", fetcher, type_only=False)
        method = "propagate" if self.config.propagate else "fetch"

        path_args = ", ".join(p.name for p in self._path_arguments(route))
        options = _object(
            [
                f"...{route.name}.METADATA",
                f"template: {route.name}.METADATA.path",
                f"path: {route.name}.path({path_args})",
            ]
        )
        values = [self._connection_expression(route), options]
        body = route.body
        if body is not None:
            values.append(body.name)
        return _call(f"{fetcher}.{method}", values)

    def _connection_expression(self, route: Route) -> str:
        headers = route.parameters_of(ParamCategory.HEADER)
        content_type = self._request_content_type(route)
        if not headers and content_type is None:
            return "connection"

        entries = ["...connection.headers"]
        for header in headers:
            if header.field:
                entries.append(f"{json.dumps(header.field)}: {header.name}")
            else:
                entries.append(f"...{header.name}")
        if content_type is not None:
            entries.append(f'"Content-Type": {json.dumps(content_type)}')
        return _object(["...connection", f"headers: {_object(entries)}"])

    # ------------------------------------------------------------------
    # NAMESPACE
    # ------------------------------------------------------------------
    def write_namespace(self, route: Route) -> str:
        members: list[str] = []
        types: list[str] = []
        body = route.body
        if body is not None:
            types.append(f"export type Input = {self._input_type(body)};")
        output = self._output_type(route)
        if output is not None:
            types.append(f"export type Output = {output};")
        if types:
            members.append("\n".join(types))

        members.append(f"export const METADATA = {self._metadata(route)} as const;")
        members.append(self._path_function(route))
        if self.config.simulate:
            random = self._random_function(route)
            if random is not None:
                members.append(random)
            members.append(self._simulate_function(route))

        inner = "\n\n".join(indent(member) for member in members)
        return f"export namespace {route.name} {{\n{inner}\n}}"

    def _metadata(self, route: Route) -> str:
        content_type = self._request_content_type(route)
        body = route.body
        if content_type is None:
            request = "null"
        else:
            encrypted = route.encrypted or (body is not None and body.encrypted)
            request = _object([f"type: {json.dumps(content_type)}", f"encrypted: {json.dumps(encrypted)}"])
        response = _object(
            [
                f"type: {json.dumps(self._response_content_type(route))}",
                f"encrypted: {json.dumps(route.encrypted)}",
            ]
        )
        return _object(
            [
                f"method: {json.dumps(route.method)}",
                f"path: {json.dumps(route.path)}",
                f"request: {request}",
                f"response: {response}",
                f"status: {json.dumps(route.status)}",
            ]
        )

    def _path_function(self, route: Route) -> str:
        params = [f"{p.name}: {self._parameter_type(route, p)}" for p in self._path_arguments(route)]
        location = self._location(route)
        queries = route.parameters_of(ParamCategory.QUERY)
        if not queries:
            return f"export const path = {_signature(params)} => {location};"

        if len(queries) == 1 and not queries[0].field:
            source = f"{queries[0].name} as any"
        else:
            source = _object([f"{json.dumps(q.field)}: {q.name}" if q.field else f"...{q.name}" for q in queries])
            source = f"{source} as any"
        lines = [
            "const variables: URLSearchParams = new URLSearchParams();",
            f"for (const [key, value] of Object.entries({source}))",
            "  if (undefined === value) continue;",
            "  else if (Array.isArray(value))",
            "    value.forEach((elem: any) => variables.append(key, String(elem)));",
            "  else variables.append(key, String(value));",
            f"const location: string = {location};",
            "return 0 === variables.size",
            "  ? location",
            "  : `${location}?${variables.toString()}`;",
        ]
        return f"export const path = {_signature(params)} => {{\n{indent(chr(10).join(lines))}\n}};"

    def _location(self, route: Route) -> str:
        fields = {p.field or p.name: p.name for p in route.parameters_of(ParamCategory.PATH)}

        def substitute(match: re.Match[str]) -> str:
            name = fields.get(match.group(1))
            if name is None:
                return match.group(0)
            return f'${{encodeURIComponent({name} ?? "null")}}'

        template = route.path.replace("\\", "\\\\").replace("`", "\\`").replace("${", "\\${")
        return f"`{_PATH_PARAM_RE.sub(substitute, template)}`"

    def _random_function(self, route: Route) -> str | None:
        if route.output.void:
            return None
        target = self._declared(route.output) if self.config.propagate else "Output"
        signature = _signature(["g?: Partial<typia.IRandomGenerator>"])
        return f"export const random = {signature}: {target} =>\n" + indent(f"typia.random<{target}>(g);")

    def _simulate_function(self, route: Route) -> str:
        self.importer.external("typia", "typia", type_only=False, default=True)
        params = [f"connection: {self._connection_type()}"]
        params.extend(f"{p.name}: {self._parameter_type(route, p)}" for p in route.parameters)

        lines: list[str] = []
        if route.parameters:
            path_args = ", ".join(p.name for p in self._path_arguments(route))
            content_type = self._request_content_type(route) or "application/json"
            assertion = _call(
                "NestiaSimulator.assert",
                [
                    _object(
                        [
                            "method: METADATA.method",
                            "host: connection.host",
                            f"path: path({path_args})",
                            f"contentType: {json.dumps(content_type)}",
                        ]
                    )
                ],
            )
            lines.append(f"const assert = {assertion};")
            for p in route.parameters:
                if p.category is ParamCategory.PATH:
                    lines.append(f"assert.param({json.dumps(p.field or p.name)})(() => typia.assert({p.name}));")
                elif p.category is ParamCategory.QUERY:
                    lines.append(f"assert.query(() => typia.assert({p.name}));")
                elif p.category is ParamCategory.HEADER:
                    lines.append(f"assert.headers(() => typia.assert({p.name}));")
                else:
                    lines.append(f"assert.body(() => typia.assert({p.name}));")

        random = "undefined" if route.output.void else _call("random", [_RANDOM_SOURCE])
        if self.config.propagate:
            status = self._propagation_status(route)
            content_type = json.dumps(self._response_content_type(route))
            result = _object(
                [
                    "success: true",
                    f"status: {status}",
                    "headers: " + _object([f"\"Content-Type\": {content_type}"]),
                    f"data: {random}",
                ]
            )
            lines.append(f"return {result};")
            returns = "Output"
        elif route.output.void:
            returns = "void"
        else:
            lines.append(f"return {random};")
            returns = "Output"

        if not lines:
            return f"export const simulate = {_signature(params)}: {returns} => {{}};"
        body = indent("\n".join(lines))
        return f"export const simulate = {_signature(params)}: {returns} => {{\n{body}\n}};"

    # ------------------------------------------------------------------
    # TYPES
    # ------------------------------------------------------------------
    def _connection_type(self) -> str:
        return self.importer.external(self.config.fetcher, "IConnection", type_only=True)

    def _path_arguments(self, route: Route) -> list[RouteParameter]:
        return [p for p in route.parameters if p.category in (ParamCategory.PATH, ParamCategory.QUERY)]

    def _declared(self, type_tuple: TypeTuple, *, inline: bool = False) -> str:
        if type_tuple.metadata is not None and (inline or self.config.clone):
            return self.types.write(type_tuple.metadata)
        return type_tuple.name

    def _parameter_type(self, route: Route, param: RouteParameter) -> str:
        if param.category is ParamCategory.BODY:
            return f"{route.name}.Input"
        return self._declared(param.type, inline=param.category is ParamCategory.PATH)

    def _input_type(self, body: RouteParameter) -> str:
        declared = self._declared(body.type)
        if not self.config.primitive:
            return declared
        wrapper = self.importer.external(self.config.fetcher, "Resolved", type_only=True)
        return f"{wrapper}<{declared}>"

    def _output_type(self, route: Route) -> str | None:
        if self.config.propagate:
            wrapper = self.importer.external(self.config.fetcher, "IPropagation", type_only=True)
            declared = self._declared(route.output)
            entry = indent(f"{self._propagation_status(route)}: {declared};")
            return f"{wrapper}<{{\n{entry}\n}}>"
        if route.output.void:
            return None
        declared = self._declared(route.output)
        if not self.config.primitive:
            return declared
        wrapper = self.importer.external(self.config.fetcher, "Primitive", type_only=True)
        return f"{wrapper}<{declared}>"

    def _return_type(self, route: Route) -> str:
        if route.output.void and not self.config.propagate:
            return "void"
        return f"{route.name}.Output"

    def _propagation_status(self, route: Route) -> int:
        if route.status is not None:
            return route.status
        return 201 if route.method == "POST" else 200

    def _request_content_type(self, route: Route) -> str | None:
        body = route.body
        if body is None:
            return None
        if route.content_type:
            return route.content_type
        return "text/plain" if route.encrypted or body.encrypted else "application/json"

    def _response_content_type(self, route: Route) -> str:
        return "text/plain" if route.encrypted else "application/json"
