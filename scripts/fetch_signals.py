#!/usr/bin/env python3
"""
fetch_signals.py

Run one entrypoint against the live upstream APIs and print its output as
JSON. Handy for checking an upstream's shape without starting the API.

    python scripts/fetch_signals.py tech-feed --limit 6
    python scripts/fetch_signals.py topic-search --query rust --limit 5
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

THIS_FILE = Path(__file__).resolve()
ROOT_DIR = THIS_FILE.parents[1]

if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from pydantic import ValidationError  # noqa: E402

from app.config import settings  # noqa: E402
from app.core.logging import configure_logging, get_logger  # noqa: E402
from app.core.request_id import with_request_id  # noqa: E402
from services.entrypoints import EntrypointRegistry, UnknownEntrypoint  # noqa: E402
from services.json_fetcher import SignalsFetchError  # noqa: E402


def build_parser(keys: List[str]) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run a tech-signals entrypoint once.")
    parser.add_argument("key", choices=keys, help="Entrypoint key")
    parser.add_argument("--limit", type=int, default=None)
    parser.add_argument("--language", default=None, help="github-trending only")
    parser.add_argument("--since", default=None, choices=["daily", "weekly", "monthly"])
    parser.add_argument("--query", default=None, help="topic-search only")
    return parser


def input_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    raw: Dict[str, Any] = {}
    for name in ("limit", "language", "since", "query"):
        value = getattr(args, name)
        if value is not None:
            raw[name] = value
    return raw


async def run(registry: EntrypointRegistry, key: str, raw: Dict[str, Any]) -> Dict[str, Any]:
    return await registry.get(key).invoke(raw)


def main(argv: Optional[List[str]] = None, registry: Optional[EntrypointRegistry] = None) -> int:
    configure_logging(service_name="cli", level=settings.LOG_LEVEL, stream=sys.stderr)
    logger = get_logger(script="fetch_signals")

    registry = registry or EntrypointRegistry()
    args = build_parser(registry.keys()).parse_args(argv)
    raw = input_from_args(args)

    with with_request_id():
        try:
            result = asyncio.run(run(registry, args.key, raw))
        except UnknownEntrypoint:
            logger.error("fetch_signals_unknown_key", key=args.key)
            return 2
        except ValidationError as exc:
            logger.error("fetch_signals_invalid_input", key=args.key, errors=exc.error_count())
            print(exc, file=sys.stderr)
            return 2
        except SignalsFetchError as exc:
            logger.error("fetch_signals_upstream_failure", key=args.key, error=exc.kind, url=exc.url)
            return 1

    print(json.dumps(result["output"], indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
