from __future__ import annotations

from typing import Iterable, Iterator

from .routes import Route

ROOT_NAME = "functional"


class RouteDirectory:
    """One module of the generated tree.

    Children are owned by their parent; ``parent`` is only a back-reference used
    to compute the module name.
    """

    __slots__ = ("parent", "name", "children", "routes")

    def __init__(self, parent: RouteDirectory | None, name: str) -> None:
        self.parent = parent
        self.name = name
        self.children: dict[str, RouteDirectory] = {}
        self.routes: list[Route] = []

    @property
    def module(self) -> str:
        if self.parent is None:
            return f"api.{self.name}"
        return f"{self.parent.module}.{self.name}"

    def take(self, key: str) -> RouteDirectory:
        child = self.children.get(key)
        if child is None:
            child = RouteDirectory(self, key)
            self.children[key] = child
        return child

    def emplace(self, route: Route) -> RouteDirectory:
        directory = self
        for key in route.accessors[:-1]:
            directory = directory.take(key)
        directory.routes.append(route)
        return directory

    def walk(self) -> Iterator[RouteDirectory]:
        """Yield every directory, children before their parent."""
        for child in self.children.values():
            yield from child.walk()
        yield self

    def __repr__(self) -> str:
        return f"RouteDirectory({self.module!r}, children={list(self.children)!r}, routes={len(self.routes)})"


def build_directory(routes: Iterable[Route], *, name: str = ROOT_NAME) -> RouteDirectory:
    root = RouteDirectory(None, name)
    for route in routes:
        root.emplace(route)
    return root
