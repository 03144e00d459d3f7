"""Quill capture pipeline entry point.

Usage:
    python -m quill [OPTIONS] COMMAND

Commands:
    process TEXT|-   Split, classify and extract a capture ("-" reads stdin)
    classify TEXT    Classify text and print the decision
    drain            Retry queued enhancements
    stats            Show classification method usage
"""

import argparse
import asyncio
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pymongo.errors import PyMongoError

from . import __version__
from .config import EnvironmentCredentials, QuillConfig, StaticCredentials
from .config.loader import load_config
from .llm import AnthropicTextService, MockTextService, TextService
from .network import ConnectivityMonitor, ConnectivitySignal, StaticConnectivity
from .pipeline import CapturePipeline
from .storage import MongoStorageClient

PROFILE_ENV = "QUILL_PROFILE"

logger = logging.getLogger("quill")


def setup_logging(level: str) -> None:
    """Configure logging based on config."""
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="quill",
        description="Quill - turn recognized text into typed, structured notes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  quill classify "Subject: Lunch\\nTo: a@x.com"
  echo "#todo# buy milk" | quill process -
  quill --profile dev drain
  quill stats --days 7

Environment:
  ANTHROPIC_API_KEY   Enables the AI tiers
  QUILL_PROFILE       Profile used when --config/--profile are absent
""",
    )
    parser.add_argument("--config", type=Path, metavar="PATH", help="Path to YAML config file")
    parser.add_argument(
        "--profile", choices=["dev", "prod", "test"], help="Configuration profile to use"
    )
    parser.add_argument(
        "--offline", action="store_true", help="Treat the network as unavailable"
    )
    parser.add_argument(
        "--mock-llm",
        action="store_true",
        help="Use a scripted text service whose replies always fall back to heuristics",
    )
    parser.add_argument("--version", action="version", version=f"Quill v{__version__}")

    commands = parser.add_subparsers(dest="command", required=True)

    process = commands.add_parser("process", help="Process a capture")
    process.add_argument("text", help='Capture text, or "-" to read stdin')
    process.add_argument("--enhance", action="store_true", help="Also run AI clean-up")

    classify = commands.add_parser("classify", help="Classify text")
    classify.add_argument("text")

    commands.add_parser("drain", help="Retry queued enhancements")

    stats = commands.add_parser("stats", help="Classification method usage")
    stats.add_argument("--days", type=int, default=30, help="Window in days (1-365)")

    return parser.parse_args(argv)


def _load(args: argparse.Namespace) -> QuillConfig:
    if args.config:
        return load_config(path=args.config)
    profile = args.profile or os.environ.get(PROFILE_ENV)
    return load_config(profile=profile) if profile else load_config()


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, default=str))


async def _run(args: argparse.Namespace, config: QuillConfig) -> int:
    credentials = EnvironmentCredentials()
    service: TextService | None = None
    if args.mock_llm:
        service = MockTextService()
        credentials = StaticCredentials("mock")
    elif credentials.has_credential:
        service = AnthropicTextService.from_config(config.llm, credentials.api_key)

    connectivity: ConnectivitySignal
    if args.offline:
        connectivity = StaticConnectivity(online=False)
    else:
        monitor = ConnectivityMonitor(config.connectivity)
        await monitor.refresh()
        connectivity = monitor

    storage: MongoStorageClient | None = None
    if config.storage.enabled:
        storage = MongoStorageClient.from_config(config.storage)
        storage.connect()

    try:
        pipeline = CapturePipeline(
            config=config,
            service=service,
            credentials=credentials,
            connectivity=connectivity,
            queue_repository=storage.queue if storage else None,
            classification_log=storage.classifications if storage else None,
            sink=storage.notes if storage else None,
        )
        if storage is not None:
            await pipeline.queue.recover_stale()

        if args.command == "process":
            text = sys.stdin.read() if args.text == "-" else args.text
            processed = await pipeline.process(text, enhance=args.enhance)
            _print_json([p.to_dict() for p in processed])
        elif args.command == "classify":
            record = await pipeline.classify(args.text)
            _print_json(record.to_dict())
        elif args.command == "drain":
            report = await pipeline.drain_queue()
            _print_json(
                {
                    "succeeded": report.succeeded,
                    "requeued": report.requeued,
                    "failed": report.failed,
                    "skipped": report.skipped,
                    "paused": report.paused,
                    "pending": pipeline.queue.pending_count(),
                }
            )
        elif args.command == "stats":
            stats = pipeline.analytics.stats(args.days)
            _print_json(
                {
                    "days": args.days,
                    "stats": stats.to_dict(),
                    "by_type": [b.to_dict() for b in pipeline.analytics.type_breakdown(args.days)],
                    "recommendation": pipeline.analytics.recommendation(),
                }
            )
    finally:
        if storage is not None:
            storage.disconnect()
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the Quill CLI.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    load_dotenv()
    args = parse_args(argv)

    try:
        config = _load(args)
    except FileNotFoundError as e:
        print(f"Error: Config file not found: {e}", file=sys.stderr)
        return 1

    setup_logging(config.logging.level)
    logger.debug("Quill v%s", __version__)

    try:
        return asyncio.run(_run(args, config))
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except PyMongoError as e:
        logger.error("Storage unavailable: %s", e)
        return 1
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
