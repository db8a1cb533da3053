"""Command line interface for normalizing and importing video lists."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from nexaverse.config.settings import load_settings
from nexaverse.domain.documents import ValidationError
from nexaverse.storage import collections as collection_store
from nexaverse.storage.mongo import get_database
from nexaverse.upload.normalizer import ParseResult, parse

LOGGER = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Nexaverse video list tools")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log parser decisions.")
    subparsers = parser.add_subparsers(dest="command")
    subparsers.required = True

    parse_parser = subparsers.add_parser("parse", help="Normalize a video list and print the result")
    parse_parser.add_argument("file", help="Text or JSON file to read, '-' for stdin.")
    parse_parser.add_argument("--json", action="store_true", help="Print the parse result as JSON.")
    parse_parser.set_defaults(func=_run_parse)

    import_parser = subparsers.add_parser("import", help="Normalize a video list and store it as a collection")
    import_parser.add_argument("file", help="Text or JSON file to read, '-' for stdin.")
    import_parser.add_argument("--owner", required=True, help="Owner id of the new collection.")
    import_parser.add_argument("--title", help="Collection title (defaults to the suggested title).")
    import_parser.add_argument("--poster", help="Collection poster URL (defaults to the suggested poster).")
    import_parser.add_argument("--single", action="store_true", help="Store every video as a single-video collection.")
    import_parser.set_defaults(func=_run_import)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    return args.func(args)


def _read_input(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def _parse_file(path: str) -> ParseResult:
    result = parse(_read_input(path))
    if not result.normalized_block:
        LOGGER.error("No valid video data found in %s", path)
    return result


def _run_parse(args: argparse.Namespace) -> int:
    result = _parse_file(args.file)
    if not result.normalized_block:
        return 1
    if args.json:
        print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
    else:
        print(result.normalized_block)
        if result.suggested_title:
            print(f"\n# Suggested title: {result.suggested_title}")
        if result.suggested_poster:
            print(f"# Suggested poster: {result.suggested_poster}")
    LOGGER.info("Formatted %s videos", result.video_count)
    return 0


def _run_import(args: argparse.Namespace) -> int:
    result = _parse_file(args.file)
    if not result.normalized_block:
        return 1

    settings = load_settings()
    database = get_database(settings)
    try:
        if args.single:
            ids = collection_store.save_single_videos(database, owner=args.owner, videos=result.normalized_block)
        else:
            ids = [
                collection_store.save_collection(
                    database,
                    owner=args.owner,
                    videos=result.normalized_block,
                    title=args.title,
                    poster=args.poster,
                    suggested_title=result.suggested_title,
                    suggested_poster=result.suggested_poster,
                )
            ]
    except ValidationError as exc:
        LOGGER.error("Import failed: %s", exc)
        return 1

    for collection_id in ids:
        print(collection_store.watch_url(settings.public_base_url, collection_id))
    return 0


if __name__ == "__main__":
    sys.exit(main())
