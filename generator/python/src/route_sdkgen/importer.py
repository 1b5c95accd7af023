from __future__ import annotations

import logging
import posixpath
import re
from dataclasses import dataclass, field
from types import TracebackType

from .errors import ImportCollisionError, LedgerClosedError

logger = logging.getLogger(__name__)

_SCRIPT_EXT_RE = re.compile(r"\.(d\.ts|ts|tsx|js|mjs)$")


def strip_extension(path: str) -> str:
    return _SCRIPT_EXT_RE.sub("", posixpath.normpath(path.replace("\\", "/")))


@dataclass
class _Bucket:
    default: str | None = None
    default_type: bool = True
    instances: dict[str, bool] = field(default_factory=dict)

    def add(self, instance: str, *, type_only: bool, default: bool) -> None:
        if default:
            self.default = instance
            self.default_type = self.default_type and type_only
            return
        self.instances[instance] = self.instances.get(instance, True) and type_only

    def statements(self, source: str) -> list[str]:
        lines: list[str] = []
        if self.default is not None:
            keyword = "import type" if self.default_type else "import"
            lines.append(f'{keyword} {self.default} from "{source}";')
        values = sorted(name for name, type_only in self.instances.items() if not type_only)
        types = sorted(name for name, type_only in self.instances.items() if type_only)
        if values:
            lines.append(f'import {{ {", ".join(values)} }} from "{source}";')
        if types:
            lines.append(f'import type {{ {", ".join(types)} }} from "{source}";')
        return lines


class ImportLedger:
    """Imports required by one output file.

    Registrations are idempotent. Two different sources providing the same
    bare name to one file raise :class:`ImportCollisionError`, as do two
    different default imports of one library. :meth:`to_script` may run at
    most once. Leaving the ``with`` block closes the ledger without rendering
    anything, so a file whose body raised, or that has no routes, gets no
    import block.
    """

    def __init__(self, file: str) -> None:
        self.file = posixpath.normpath(file.replace("\\", "/"))
        self._external: dict[str, _Bucket] = {}
        self._internal: dict[str, _Bucket] = {}
        self._owners: dict[str, str] = {}
        self._closed = False

    def __enter__(self) -> "ImportLedger":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    def empty(self) -> bool:
        return not self._external and not self._internal

    def is_own(self, path: str) -> bool:
        return strip_extension(path) == strip_extension(self.file)

    def internal(self, file: str, instance: str, *, type_only: bool = True) -> str:
        target = strip_extension(file)
        self._claim(instance, f"internal:{target}")
        self._internal.setdefault(target, _Bucket()).add(instance, type_only=type_only, default=False)
        return instance

    def external(self, library: str, instance: str, *, type_only: bool = True, default: bool = False) -> str:
        self._claim(instance, f"external:{library}")
        bucket = self._external.setdefault(library, _Bucket())
        if default and bucket.default not in (None, instance):
            raise ImportCollisionError(self.file, f"default of {library}", bucket.default, instance)
        bucket.add(instance, type_only=type_only, default=default)
        return instance

    def to_script(self) -> str:
        if self._closed:
            raise LedgerClosedError(self.file)
        self._closed = True

        directory = posixpath.dirname(self.file) or "."
        external: list[str] = []
        for library in sorted(self._external):
            external.extend(self._external[library].statements(library))

        relative: dict[str, _Bucket] = {}
        for target, bucket in self._internal.items():
            location = posixpath.relpath(target, directory)
            if not location.startswith("."):
                location = f"./{location}"
            relative[location] = bucket
        internal: list[str] = []
        for location in sorted(relative):
            internal.extend(relative[location].statements(location))

        if external and internal:
            return "\n".join([*external, "", *internal])
        return "\n".join(external or internal)

    def _claim(self, instance: str, source: str) -> None:
        if self._closed:
            raise LedgerClosedError(self.file)
        owner = self._owners.setdefault(instance, source)
        if owner != source:
            raise ImportCollisionError(self.file, instance, owner.split(":", 1)[1], source.split(":", 1)[1])
        logger.debug("%s: %s <- %s", self.file, instance, source)
