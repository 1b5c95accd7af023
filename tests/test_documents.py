import json
import sys
import tempfile
import unittest
from pathlib import Path

SRC_ROOT = Path(__file__).resolve().parents[1] / "generator" / "python" / "src"
sys.path.insert(0, str(SRC_ROOT))

from route_sdkgen.documents import load_routes, load_schema, parse_routes, validate_document  # noqa: E402
from route_sdkgen.errors import RouteDocumentError  # noqa: E402
from route_sdkgen.routes import ParamCategory  # noqa: E402

ROUTES_YAML = """\
routes:
  - name: at
    method: get
    path: /bbs/:section/articles/:id
    accessors: [bbs, articles, at]
    symbol: BbsArticlesController.at
    parameters:
      - name: section
        category: path
        type:
          name: string
          metadata:
            atomics: [{type: string}]
      - name: id
        category: path
        type:
          name: string
          metadata:
            atomics:
              - type: string
                tags: [[{name: 'Format<"uuid">', kind: format, value: uuid}]]
    output:
      name: IBbsArticle
    imports:
      - [src/api/structures/IBbsArticle.ts, [IBbsArticle]]
"""


class TestRouteDocuments(unittest.TestCase):
    def test_schema_is_bundled(self) -> None:
        schema = load_schema()
        self.assertEqual(schema["$schema"], "https://json-schema.org/draft/2020-12/schema")
        self.assertIn("metadata", schema["$defs"])

    def test_parse_minimal_route(self) -> None:
        routes = parse_routes({"routes": [{"name": "get", "method": "GET", "path": "/health", "accessors": ["health", "get"]}]})
        self.assertEqual(len(routes), 1)
        self.assertEqual(routes[0].method, "GET")
        self.assertTrue(routes[0].output.void)
        self.assertEqual(routes[0].parameters, ())

    def test_invalid_document_reports_json_paths(self) -> None:
        document = {
            "routes": [
                {
                    "name": "at",
                    "method": "GET",
                    "path": "/bbs",
                    "accessors": ["bbs", "at"],
                    "parameters": [{"name": "id", "category": "cookie", "type": {"name": "string"}}],
                }
            ]
        }
        errors = validate_document(document)
        self.assertEqual(len(errors), 1)
        self.assertTrue(errors[0].startswith("$.routes[0].parameters[0].category: "))

        with self.assertRaises(RouteDocumentError) as ctx:
            parse_routes(document, source="routes.yaml")
        self.assertEqual(ctx.exception.source, "routes.yaml")
        self.assertIn("Invalid route document: routes.yaml", str(ctx.exception))

    def test_missing_routes_key(self) -> None:
        self.assertEqual(validate_document({}), ["$: 'routes' is a required property"])

    def test_load_yaml_document(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "routes.yaml"
            path.write_text(ROUTES_YAML, encoding="utf-8")
            routes = load_routes(path)

        route = routes[0]
        self.assertEqual(route.accessors, ("bbs", "articles", "at"))
        self.assertEqual([p.category for p in route.parameters], [ParamCategory.PATH, ParamCategory.PATH])
        tag = route.parameters[1].type.metadata.atomics[0].tags[0][0]
        self.assertEqual(tag.instance, "Format")
        self.assertEqual(tag.value, "uuid")
        self.assertEqual(route.imports, (("src/api/structures/IBbsArticle.ts", ("IBbsArticle",)),))

    def test_load_json_document(self) -> None:
        document = {"routes": [{"name": "index", "method": "PATCH", "path": "/bbs", "accessors": ["bbs", "index"]}]}
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "routes.json"
            path.write_text(json.dumps(document), encoding="utf-8")
            routes = load_routes(path)
        self.assertEqual(routes[0].method, "PATCH")

    def test_missing_file(self) -> None:
        with self.assertRaises(RouteDocumentError) as ctx:
            load_routes(Path("does-not-exist.yaml"))
        self.assertEqual(ctx.exception.errors, ["file not found"])

    def test_unparseable_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "routes.yaml"
            path.write_text("routes: [\n", encoding="utf-8")
            with self.assertRaises(RouteDocumentError):
                load_routes(path)


if __name__ == "__main__":
    unittest.main()
