from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from route_sdkgen import __version__
from route_sdkgen.api import generate, summarize
from route_sdkgen.config import GeneratorConfig
from route_sdkgen.documents import load_routes
from route_sdkgen.errors import ConfigError, SdkGenError

DEFAULT_CONFIG = "sdkgen.yaml"


def _load_config(args: argparse.Namespace) -> GeneratorConfig:
    config_path = Path(args.config) if args.config else Path(DEFAULT_CONFIG)
    if config_path.exists():
        config = GeneratorConfig.from_file(config_path)
    elif args.config:
        raise ConfigError(f"Config file not found: {config_path}")
    elif args.output:
        config = GeneratorConfig(output=args.output)
    else:
        raise ConfigError(f"No {DEFAULT_CONFIG} found; pass --config or --output")

    return config.with_overrides(
        output=args.output,
        simulate=True if args.simulate else None,
        clone=True if args.clone else None,
        propagate=True if args.propagate else None,
    )


def _cmd_generate(args: argparse.Namespace) -> int:
    config = _load_config(args)
    routes = load_routes(Path(args.routes))
    print(f"[sdkgen] {len(routes)} route(s): {args.routes} -> {config.functional_dir}")
    written = generate(routes, config)
    print(f"[sdkgen] wrote {len(written)} file(s)")
    return 0


def _cmd_report(args: argparse.Namespace) -> int:
    summary = summarize(load_routes(Path(args.routes)))
    if args.format == "json":
        text = json.dumps(summary, indent=2) + "\n"
    else:
        lines = [
            f"Routes: {summary['routes']}",
            f"- Modules: {summary['modules']}",
        ]
        for method, count in summary["methods"].items():
            lines.append(f"- {method}: {count}")
        text = "\n".join(lines) + "\n"
    sys.stdout.write(text)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="route-sdkgen")
    parser.add_argument("--version", action="version", version=f"route-sdkgen {__version__}")
    parser.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    sub = parser.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", help="Generate SDK functions from a route document")
    gen.add_argument("--routes", required=True, help="Route document (YAML or JSON)")
    gen.add_argument("--config", type=str, help=f"Generator config file (default: ./{DEFAULT_CONFIG} if present)")
    gen.add_argument("--output", type=str, help="Output root; overrides the config file")
    gen.add_argument("--simulate", action="store_true", help="Add mock-data simulation branches")
    gen.add_argument("--clone", action="store_true", help="Inline DTO types instead of importing them")
    gen.add_argument("--propagate", action="store_true", help="Return response envelopes instead of throwing")
    gen.set_defaults(handler=_cmd_generate)

    report = sub.add_parser("report", help="Summarize a route document")
    report.add_argument("--routes", required=True, help="Route document (YAML or JSON)")
    report.add_argument("--format", default="text", choices=["text", "json"])
    report.set_defaults(handler=_cmd_report)

    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    try:
        return args.handler(args)
    except SdkGenError as exc:
        print(f"route-sdkgen: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
