from __future__ import annotations

import dataclasses
import posixpath
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Sequence

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .errors import ConfigError, TypeNameError

_BOOL_OPTIONS = ("simulate", "clone", "propagate", "primitive")
_STR_OPTIONS = ("output", "structures", "fetcher", "tags_library")
_TYPE_ROOT_RE = re.compile(r"[A-Za-z_$][A-Za-z0-9_$]*")


def _to_builtin(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {str(k): _to_builtin(v) for k, v in value.items()}
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return [_to_builtin(v) for v in value]
    return value


def load_yaml(path: Path) -> Any:
    yaml = YAML(typ="safe")
    with path.open("r", encoding="utf-8") as file:
        data = yaml.load(file)
    return _to_builtin(data)


def type_root(name: str) -> str:
    """Leading identifier of a type reference: ``IPage`` for ``IPage<IBbsArticle.ISummary>``."""
    match = _TYPE_ROOT_RE.match(name.strip())
    if match is None:
        raise TypeNameError(name)
    return match.group(0)


@dataclass(frozen=True, slots=True)
class GeneratorConfig:
    output: str
    simulate: bool = False
    clone: bool = False
    propagate: bool = False
    primitive: bool = True
    structures: str = "structures"
    alias_files: dict[str, str] = field(default_factory=dict)
    fetcher: str = "@nestia/fetcher"
    tags_library: str = "typia/lib/tags"

    @property
    def functional_dir(self) -> str:
        return posixpath.join(self.output, "functional")

    @property
    def simulator_file(self) -> str:
        return posixpath.join(self.output, "utils", "NestiaSimulator.ts")

    def alias_file(self, name: str) -> str:
        top = type_root(name)
        explicit = self.alias_files.get(top)
        if explicit is not None:
            return explicit
        return posixpath.join(self.output, self.structures, f"{top}.ts")

    def tag_library(self, instance: str) -> str:
        return f"{self.tags_library}/{instance}"

    def with_overrides(self, **values: Any) -> "GeneratorConfig":
        changes = {key: value for key, value in values.items() if value is not None}
        if not changes:
            return self
        return GeneratorConfig.from_dict({**self.to_dict(), **changes})

    def to_dict(self) -> dict[str, Any]:
        return dataclasses.asdict(self)

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "GeneratorConfig":
        known = {f.name for f in dataclasses.fields(GeneratorConfig)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown config option(s): {', '.join(unknown)}")
        if not isinstance(data.get("output"), str) or not data["output"].strip():
            raise ConfigError("Config option 'output' must be a non-empty string")
        for key in _BOOL_OPTIONS:
            if key in data and not isinstance(data[key], bool):
                raise ConfigError(f"Config option '{key}' must be a boolean")
        for key in _STR_OPTIONS:
            if key in data and not isinstance(data[key], str):
                raise ConfigError(f"Config option '{key}' must be a string")
        alias_files = data.get("alias_files") or {}
        if not isinstance(alias_files, Mapping) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in alias_files.items()
        ):
            raise ConfigError("Config option 'alias_files' must map alias names to file paths")
        values = {key: data[key] for key in known if key in data}
        values["output"] = posixpath.normpath(str(data["output"]).replace("\\", "/"))
        values["alias_files"] = dict(alias_files)
        return GeneratorConfig(**values)

    @staticmethod
    def from_file(path: Path) -> "GeneratorConfig":
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")
        try:
            data = load_yaml(path)
        except YAMLError as exc:
            raise ConfigError(f"Unable to parse config file {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError(f"Config file must contain a mapping: {path}")
        return GeneratorConfig.from_dict(data)
