"""Command line entry point."""

from __future__ import annotations

import argparse
import sys

from lazycompass import __version__
from lazycompass.shared.app.runtime import RuntimeConfig
from lazycompass.shared.core.errors import LazyCompassError, format_error


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lazycompass",
        description="Keyboard-driven terminal client for MongoDB.",
    )
    parser.add_argument("--version", action="version", version=f"lazycompass {__version__}")
    parser.add_argument(
        "--write-enabled",
        action="store_true",
        help="allow insert, edit, delete and saving specs (overrides read_only)",
    )
    parser.add_argument(
        "--allow-pipeline-writes",
        action="store_true",
        help="allow $out and $merge stages in aggregations",
    )
    parser.add_argument(
        "--allow-insecure",
        action="store_true",
        help="silence warnings for plaintext credentials and disabled TLS",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    runtime = RuntimeConfig.from_env()
    runtime.write_enabled = args.write_enabled
    runtime.allow_pipeline_writes = args.allow_pipeline_writes
    runtime.allow_insecure = args.allow_insecure

    from lazycompass.domains.shell.app.main import LazyCompassApp
    from lazycompass.shared.app.services import build_app_services

    try:
        services = build_app_services(runtime)
    except LazyCompassError as error:
        print(f"error: {format_error(error)}", file=sys.stderr)
        return 1
    LazyCompassApp(services=services).run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
