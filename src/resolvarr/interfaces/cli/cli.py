from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import structlog
import uvicorn

from resolvarr.application.use_cases import ResolveLinksUseCase
from resolvarr.domain.entities.resolution import LinkRequest
from resolvarr.infrastructure.config import AppConfig, load_config
from resolvarr.infrastructure.logging.setup import configure_logging
from resolvarr.interfaces.app import create_app
from resolvarr.interfaces.composition import build_orchestrator, create_http_client

log = structlog.get_logger(__name__)


def _add_config_flags(parser: argparse.ArgumentParser) -> None:
    # Config wiring flags (no business logic)
    parser.add_argument(
        "--config",
        default=None,
        help="Path to YAML config file.",
    )
    parser.add_argument(
        "--dotenv",
        default=None,
        help="Path to .env file.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override log level.",
    )
    parser.add_argument(
        "--log-format",
        default=None,
        choices=["json", "console"],
        help="Override log format.",
    )


def _parse_args(argv: Iterable[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="resolvarr")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API.")
    serve.add_argument(
        "--host",
        default=None,
        help="Bind host (overrides HOST env).",
    )
    serve.add_argument(
        "--port",
        default=None,
        type=int,
        help="Bind port (overrides PORT env).",
    )
    _add_config_flags(serve)

    resolve = sub.add_parser("resolve", help="Resolve URLs and print JSON records.")
    resolve.add_argument("urls", nargs="+", metavar="URL", help="Intermediate URLs.")
    resolve.add_argument(
        "--hop-budget",
        default=None,
        type=int,
        help="Override the hop budget.",
    )
    _add_config_flags(resolve)

    return parser.parse_args(argv)


def _load(args: argparse.Namespace) -> AppConfig:
    cli_overrides: dict[str, Any] = {}
    if args.log_level:
        cli_overrides["log_level"] = args.log_level
    if args.log_format:
        cli_overrides["log_format"] = args.log_format
    if getattr(args, "hop_budget", None) is not None:
        cli_overrides["resolver_hop_budget"] = args.hop_budget

    return load_config(
        config_path=Path(args.config) if args.config else None,
        dotenv_path=Path(args.dotenv) if args.dotenv else None,
        cli_overrides=cli_overrides,
    )


async def _resolve_urls(config: AppConfig, urls: list[str]) -> list[dict[str, Any]]:
    async with create_http_client(config) as client:
        use_case = ResolveLinksUseCase(
            resolver=build_orchestrator(config, client),
            max_concurrent=config.resolver.max_concurrent,
        )
        results = await use_case.execute([LinkRequest(url=u) for u in urls])
    return [r.result.to_dict() for r in results]


def start(argv: Iterable[str] | None = None) -> int:
    """
    Process entrypoint.

    Loads config exactly once, then serves the API or resolves URLs.
    """
    if argv is None:
        argv = sys.argv[1:]

    args = _parse_args(argv)
    config = _load(args)
    log_config = configure_logging(config)

    if args.command == "resolve":
        records = asyncio.run(_resolve_urls(config, args.urls))
        json.dump(records, sys.stdout, indent=2)
        sys.stdout.write("\n")
        return 0

    host = args.host or os.getenv("HOST", "0.0.0.0")
    port = int(args.port or os.getenv("PORT", "7980"))

    uvicorn.run(
        create_app(config),
        host=host,
        port=port,
        log_config=log_config,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(start())
