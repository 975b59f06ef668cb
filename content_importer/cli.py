"""
Command line interface.

Usage:
    python -m content_importer adapters
    python -m content_importer manifest twitter_archive data/tweets.js
    python -m content_importer normalize instagram_export posts_1.json --output items.json
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Optional, Sequence

import structlog

from content_importer.adapters.file_export import FileExportAdapter
from content_importer.config.settings import get_settings
from content_importer.core.container import ImporterContainer
from content_importer.core.exceptions import ImporterError
from content_importer.core.logging_config import configure_logging

logger = structlog.get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="content_importer",
        description="Inspect and normalize social platform exports",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("adapters", help="List the available adapters")

    manifest_parser = subparsers.add_parser("manifest", help="Print manifest stats for an export file")
    manifest_parser.add_argument("adapter_id", help="Adapter id, e.g. twitter_archive")
    manifest_parser.add_argument("file", type=Path, help="Export file")
    manifest_parser.add_argument("--limit", type=int, default=None, help="Maximum number of items")
    manifest_parser.add_argument("--items", action="store_true", help="Print every manifest item")

    normalize_parser = subparsers.add_parser("normalize", help="Write normalized items as JSON")
    normalize_parser.add_argument("adapter_id", help="Adapter id, e.g. instagram_export")
    normalize_parser.add_argument("file", type=Path, help="Export file")
    normalize_parser.add_argument("--output", "-o", type=Path, default=None, help="Output file (default: stdout)")
    normalize_parser.add_argument(
        "--skip-errors",
        action="store_true",
        help="Leave out entries that fail to normalize instead of aborting",
    )

    return parser


def _file_adapter(container: ImporterContainer, adapter_id: str, path: Path) -> FileExportAdapter:
    adapter = container.registry.require(adapter_id)
    if not isinstance(adapter, FileExportAdapter):
        raise ImporterError(
            f'Adapter "{adapter_id}" does not read export files.',
            {"adapter_id": adapter_id},
        )
    if not adapter.authenticate({"file": str(path)}):
        raise ImporterError(f"Export file not found: {path}", {"adapter_id": adapter_id})
    return adapter


def cmd_adapters(container: ImporterContainer, args: argparse.Namespace) -> int:
    for adapter_id, info in container.registry.to_array().items():
        types = ", ".join(info["content_types"])
        print(f"{adapter_id:<20} {info['name']:<24} {info['auth_type']:<12} {types}")
    return 0


def cmd_manifest(container: ImporterContainer, args: argparse.Namespace) -> int:
    adapter = _file_adapter(container, args.adapter_id, args.file)
    manifest = adapter.fetch_manifest(limit=args.limit)

    output = {"source_id": manifest.source_id, "stats": manifest.get_stats()}
    if args.items:
        output["items"] = [item.to_array() for item in manifest]
    print(json.dumps(output, indent=2, default=str))
    return 0


def cmd_normalize(container: ImporterContainer, args: argparse.Namespace) -> int:
    adapter = _file_adapter(container, args.adapter_id, args.file)
    items = container.pipeline.normalize_batch(
        args.adapter_id,
        adapter.get_entries(),
        skip_errors=args.skip_errors,
    )

    payload = json.dumps([item.to_array() for item in items], indent=2, ensure_ascii=False)
    if args.output is None:
        print(payload)
    else:
        args.output.write_text(payload + "\n", encoding="utf-8")
        logger.info("normalized_items_written", path=str(args.output), items=len(items))
    return 0


COMMANDS = {
    "adapters": cmd_adapters,
    "manifest": cmd_manifest,
    "normalize": cmd_normalize,
}


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the CLI and return the process exit code."""
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(settings)

    with ImporterContainer(settings) as container:
        container.register_default_adapters()
        try:
            return COMMANDS[args.command](container, args)
        except ImporterError as e:
            logger.error("command_failed", command=args.command, error=str(e))
            print(f"error: {e}", file=sys.stderr)
            return 1
