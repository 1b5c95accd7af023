from __future__ import annotations

import logging
import posixpath
from pathlib import Path

from .bundle import SIMULATOR_SOURCE
from .config import GeneratorConfig
from .directory import RouteDirectory
from .importer import ImportLedger
from .route_writer import SIGNATURE, RouteWriter

logger = logging.getLogger(__name__)

INDEX_FILE = "index.ts"
_RULE = "//" + "=" * 64


def _needs_simulator(config: GeneratorConfig, directory: RouteDirectory) -> bool:
    return config.simulate and any(route.parameters for route in directory.routes)


class FileEmitter:
    """Writes one module file per directory node, children before parents."""

    def __init__(self, config: GeneratorConfig) -> None:
        self.config = config

    def emit(self, root: RouteDirectory) -> list[Path]:
        written: list[Path] = []
        self._iterate(root, self.config.functional_dir, written)

        if any(_needs_simulator(self.config, directory) for directory in root.walk()):
            source = SIMULATOR_SOURCE.replace("@nestia/fetcher", self.config.fetcher)
            written.append(self._write(self.config.simulator_file, source))

        logger.info("Generated %d file(s) under %s", len(written), self.config.output)
        return written

    def render(self, directory: RouteDirectory, out_dir: str) -> str:
        content: list[str] = [f'export * as {key} from "./{key}";' for key in directory.children]
        if content and directory.routes:
            content.append("")

        with ImportLedger(posixpath.join(out_dir, INDEX_FILE)) as importer:
            if _needs_simulator(self.config, directory):
                importer.internal(self.config.simulator_file, "NestiaSimulator", type_only=False)

            writer = RouteWriter(self.config, importer)
            for i, route in enumerate(directory.routes):
                if not self.config.clone:
                    for file, instances in route.imports:
                        for instance in instances:
                            importer.internal(file, instance, type_only=True)
                content.append(writer.write(route))
                if i != len(directory.routes) - 1:
                    content.append("")

            if directory.routes:
                content = [importer.to_script(), "", *content]

        header = [
            "/**",
            " * @packageDocumentation",
            f" * @module {directory.module}",
            f" * {SIGNATURE}",
            " */",
            _RULE,
        ]
        return "\n".join([*header, *content]) + "\n"

    def _iterate(self, directory: RouteDirectory, out_dir: str, written: list[Path]) -> None:
        Path(out_dir).mkdir(parents=True, exist_ok=True)
        for key, child in directory.children.items():
            self._iterate(child, posixpath.join(out_dir, key), written)
        written.append(self._write(posixpath.join(out_dir, INDEX_FILE), self.render(directory, out_dir)))

    def _write(self, file: str, text: str) -> Path:
        path = Path(file)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        logger.debug("Wrote %s", path)
        return path
