from __future__ import annotations

from collections import Counter
from pathlib import Path
from typing import Any, Iterable

from .config import GeneratorConfig
from .directory import build_directory
from .file_writer import FileEmitter
from .routes import Route


def generate(routes: Iterable[Route], config: GeneratorConfig) -> list[Path]:
    """
    Generate the functional SDK tree for `routes` under `config.output`.

    Returns the written files, children before their parent module. Files
    already written stay on disk if a later file fails.
    """

    root = build_directory(routes)
    return FileEmitter(config).emit(root)


def summarize(routes: Iterable[Route]) -> dict[str, Any]:
    """
    Count routes, generated modules and HTTP methods without writing anything.
    """

    route_list = list(routes)
    root = build_directory(route_list)
    methods = Counter(route.method for route in route_list)
    return {
        "routes": len(route_list),
        "modules": sum(1 for _ in root.walk()),
        "methods": dict(sorted(methods.items())),
    }
