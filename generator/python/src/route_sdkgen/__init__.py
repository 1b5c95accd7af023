from __future__ import annotations

__all__ = [
    "__version__",
    "ConfigError",
    "GeneratorConfig",
    "ImportCollisionError",
    "ImportLedger",
    "Metadata",
    "Route",
    "RouteDirectory",
    "RouteDocumentError",
    "SdkGenError",
    "TypeNameError",
    "TypeWriter",
    "build_directory",
    "generate",
    "load_routes",
]

__version__ = "0.3.0"

from .errors import ConfigError, ImportCollisionError, RouteDocumentError, SdkGenError, TypeNameError  # noqa: E402
from .config import GeneratorConfig  # noqa: E402
from .metadata import Metadata  # noqa: E402
from .routes import Route  # noqa: E402
from .importer import ImportLedger  # noqa: E402
from .type_writer import TypeWriter  # noqa: E402
from .directory import RouteDirectory, build_directory  # noqa: E402
from .documents import load_routes  # noqa: E402
from .api import generate  # noqa: E402
