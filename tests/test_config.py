import sys
import tempfile
import unittest
from pathlib import Path

SRC_ROOT = Path(__file__).resolve().parents[1] / "generator" / "python" / "src"
sys.path.insert(0, str(SRC_ROOT))

from route_sdkgen.config import GeneratorConfig  # noqa: E402
from route_sdkgen.errors import ConfigError  # noqa: E402


class TestGeneratorConfig(unittest.TestCase):
    def test_defaults(self) -> None:
        config = GeneratorConfig.from_dict({"output": "src/api/"})
        self.assertEqual(config.output, "src/api")
        self.assertFalse(config.simulate)
        self.assertFalse(config.clone)
        self.assertFalse(config.propagate)
        self.assertTrue(config.primitive)
        self.assertEqual(config.functional_dir, "src/api/functional")
        self.assertEqual(config.simulator_file, "src/api/utils/NestiaSimulator.ts")
        self.assertEqual(config.tag_library("Format"), "typia/lib/tags/Format")

    def test_alias_file_uses_top_level_name(self) -> None:
        config = GeneratorConfig.from_dict({"output": "out", "alias_files": {"IPage": "shared/page.ts"}})
        self.assertEqual(config.alias_file("IBbsArticle.ISummary"), "out/structures/IBbsArticle.ts")
        self.assertEqual(config.alias_file("IPage.IRequest"), "shared/page.ts")
        self.assertEqual(config.alias_file("IPage<IBbsArticle.ISummary>"), "shared/page.ts")
        self.assertEqual(config.alias_file("IShopping<T>.IOrder"), "out/structures/IShopping.ts")

    def test_unknown_option(self) -> None:
        with self.assertRaises(ConfigError) as ctx:
            GeneratorConfig.from_dict({"output": "out", "simualte": True})
        self.assertIn("simualte", str(ctx.exception))

    def test_output_is_required(self) -> None:
        with self.assertRaises(ConfigError):
            GeneratorConfig.from_dict({})
        with self.assertRaises(ConfigError):
            GeneratorConfig.from_dict({"output": "  "})

    def test_option_types_are_checked(self) -> None:
        with self.assertRaises(ConfigError):
            GeneratorConfig.from_dict({"output": "out", "simulate": "yes"})
        with self.assertRaises(ConfigError):
            GeneratorConfig.from_dict({"output": "out", "fetcher": 1})
        with self.assertRaises(ConfigError):
            GeneratorConfig.from_dict({"output": "out", "alias_files": ["IPage"]})

    def test_with_overrides_ignores_unset_values(self) -> None:
        config = GeneratorConfig.from_dict({"output": "out", "clone": True})
        updated = config.with_overrides(output=None, simulate=True, propagate=None)
        self.assertTrue(updated.simulate)
        self.assertTrue(updated.clone)
        self.assertEqual(updated.output, "out")
        self.assertIs(config.with_overrides(output=None), config)

    def test_from_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "sdkgen.yaml"
            path.write_text(
                "output: src/api\nsimulate: true\nalias_files:\n  IPage: src/api/structures/pagination.ts\n",
                encoding="utf-8",
            )
            config = GeneratorConfig.from_file(path)
        self.assertEqual(config.output, "src/api")
        self.assertTrue(config.simulate)
        self.assertEqual(config.alias_file("IPage"), "src/api/structures/pagination.ts")

    def test_from_file_errors(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            missing = Path(tmp) / "missing.yaml"
            with self.assertRaises(ConfigError):
                GeneratorConfig.from_file(missing)

            scalar = Path(tmp) / "scalar.yaml"
            scalar.write_text("just a string\n", encoding="utf-8")
            with self.assertRaises(ConfigError):
                GeneratorConfig.from_file(scalar)

            broken = Path(tmp) / "broken.yaml"
            broken.write_text("output: [unclosed\n", encoding="utf-8")
            with self.assertRaises(ConfigError):
                GeneratorConfig.from_file(broken)


if __name__ == "__main__":
    unittest.main()
