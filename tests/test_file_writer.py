import sys
import tempfile
import unittest
from pathlib import Path
from typing import Any

SRC_ROOT = Path(__file__).resolve().parents[1] / "generator" / "python" / "src"
sys.path.insert(0, str(SRC_ROOT))

from route_sdkgen.api import generate  # noqa: E402
from route_sdkgen.config import GeneratorConfig  # noqa: E402
from route_sdkgen.directory import build_directory  # noqa: E402
from route_sdkgen.errors import ImportCollisionError  # noqa: E402
from route_sdkgen.file_writer import FileEmitter  # noqa: E402
from route_sdkgen.routes import Route  # noqa: E402

HEADER = "/**\n * @packageDocumentation\n * @module {module}\n * @sdkgen Generated by route-sdkgen\n */\n//" + "=" * 64


def _route(*accessors: str, **data: Any) -> Route:
    return Route.from_dict(
        {
            "name": accessors[-1],
            "method": "get",
            "path": "/" + "/".join(accessors),
            "accessors": list(accessors),
            **data,
        }
    )


def _tree() -> list[Route]:
    return [_route("a", "b", "x"), _route("a", "b", "y"), _route("a", "c", "z")]


class TestFileEmitter(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.output = Path(self._tmp.name) / "api"
        self.config = GeneratorConfig(output=self.output.as_posix())

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def read(self, *parts: str) -> str:
        return self.output.joinpath("functional", *parts, "index.ts").read_text(encoding="utf-8")

    def test_one_file_per_directory_children_first(self) -> None:
        written = FileEmitter(self.config).emit(build_directory(_tree()))
        functional = self.output / "functional"
        self.assertEqual(
            written,
            [
                functional / "a" / "b" / "index.ts",
                functional / "a" / "c" / "index.ts",
                functional / "a" / "index.ts",
                functional / "index.ts",
            ],
        )
        self.assertTrue(all(path.is_file() for path in written))

    def test_reexport_only_modules(self) -> None:
        generate(_tree(), self.config)
        self.assertEqual(
            self.read(),
            HEADER.format(module="api.functional") + '\nexport * as a from "./a";\n',
        )
        self.assertEqual(
            self.read("a"),
            HEADER.format(module="api.functional.a")
            + '\nexport * as b from "./b";\nexport * as c from "./c";\n',
        )

    def test_route_module_layout(self) -> None:
        generate(_tree(), self.config)
        text = self.read("a", "b")
        self.assertTrue(text.startswith(HEADER.format(module="api.functional.a.b") + "\nimport type { IConnection }"))
        self.assertIn('import { PlainFetcher } from "@nestia/fetcher/lib/PlainFetcher";\n\n/**\n', text)
        self.assertLess(text.index("export async function x("), text.index("export async function y("))
        self.assertIn("}\n\n/**\n", text)
        self.assertTrue(text.endswith("}\n"))
        self.assertNotIn("export * as", text)

    def test_directory_with_children_and_routes(self) -> None:
        generate([*_tree(), _route("a", "w")], self.config)
        text = self.read("a")
        self.assertIn(
            'import { PlainFetcher } from "@nestia/fetcher/lib/PlainFetcher";\n\n'
            'export * as b from "./b";\nexport * as c from "./c";\n\n/**\n',
            text,
        )
        self.assertIn("export async function w(", text)

    def test_route_imports_are_registered(self) -> None:
        structures = (self.output / "structures" / "IPage.ts").as_posix()
        routes = [_route("bbs", "index", output={"name": "IPage"}, imports=[[structures, ["IPage"]]])]
        generate(routes, self.config)
        self.assertIn('\n\nimport type { IPage } from "../../structures/IPage";\n', self.read("bbs"))

    def test_clone_skips_route_imports(self) -> None:
        structures = (self.output / "structures" / "IPage.ts").as_posix()
        routes = [_route("bbs", "index", output={"name": "IPage"}, imports=[[structures, ["IPage"]]])]
        generate(routes, self.config.with_overrides(clone=True))
        self.assertNotIn("structures/IPage", self.read("bbs"))

    def test_colliding_route_imports_fail(self) -> None:
        first = (self.output / "structures" / "IPage.ts").as_posix()
        second = (self.output / "legacy" / "IPage.ts").as_posix()
        routes = [
            _route("bbs", "index", imports=[[first, ["IPage"]]]),
            _route("bbs", "search", imports=[[second, ["IPage"]]]),
        ]
        with self.assertRaises(ImportCollisionError):
            generate(routes, self.config)

    def test_simulator_written_when_needed(self) -> None:
        routes = [
            _route(
                "bbs",
                "at",
                path="/bbs/:id",
                parameters=[{"name": "id", "category": "path", "type": {"name": "string"}}],
            ),
            _route("health"),
        ]
        written = generate(routes, self.config.with_overrides(simulate=True, fetcher="@acme/fetcher"))
        simulator = self.output / "utils" / "NestiaSimulator.ts"
        self.assertEqual(written[-1], simulator)
        source = simulator.read_text(encoding="utf-8")
        self.assertIn('import { HttpError } from "@acme/fetcher";', source)
        self.assertIn("export namespace NestiaSimulator", source)
        self.assertIn('import { NestiaSimulator } from "../../utils/NestiaSimulator";', self.read("bbs"))
        self.assertNotIn("NestiaSimulator", self.read())

    def test_simulator_not_written_without_parameters(self) -> None:
        generate([_route("health")], self.config.with_overrides(simulate=True))
        self.assertFalse((self.output / "utils").exists())

    def test_output_is_deterministic(self) -> None:
        routes = [*_tree(), _route("a", "w", parameters=[{"name": "q", "category": "query", "type": {"name": "IQuery"}}])]
        generate(routes, self.config)
        first = {p: p.read_bytes() for p in self.output.rglob("*.ts")}
        generate(routes, self.config)
        second = {p: p.read_bytes() for p in self.output.rglob("*.ts")}
        self.assertEqual(first, second)


if __name__ == "__main__":
    unittest.main()
