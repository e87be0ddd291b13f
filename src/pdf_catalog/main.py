from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional

from . import __version__
from .config import ConfigManager, Preferences
from .core import BatchOrchestrator, FingerprintCache
from .models import ProgressEvent, ProgressEventType, ScanResult
from .utils import file_ops
from .utils.error_handler import TRASH_FAILED, ErrorHandler
from .utils.rasterizer import PdfRasterizer


def main(argv: Optional[list[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    config = ConfigManager(Path(args.config) if args.config else None)
    errors = config.validate_config()
    if errors:
        for error in errors:
            print(f"設定錯誤 {error}", file=sys.stderr)
        return 2

    preferences = Preferences(Path(args.preferences) if args.preferences else None)
    handlers = {
        "scan": _run_scan,
        "threshold": _run_threshold,
        "clear-cache": _run_clear_cache,
        "trash": _run_trash,
        "reveal": _run_reveal,
        "open": _run_open,
    }
    return handlers[args.command](args, config, preferences)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pdf-catalog")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", help="Path to config file", default=None)
    parser.add_argument("--preferences", help="Path to preferences file", default=None)

    subparsers = parser.add_subparsers(dest="command")

    scan = subparsers.add_parser("scan", help="Sort and group the PDFs of a folder")
    scan.add_argument("directory", help="Folder to scan")
    scan.add_argument("--threshold", type=int, default=None, help="Hamming distance threshold")
    scan.add_argument("--no-thumbnails", action="store_true", help="Skip thumbnail rendering")

    threshold = subparsers.add_parser("threshold", help="Show or save the grouping threshold")
    threshold.add_argument("value", type=int, nargs="?", default=None)

    subparsers.add_parser("clear-cache", help="Delete every cached fingerprint and thumbnail")

    trash = subparsers.add_parser("trash", help="Move files to the trash")
    trash.add_argument("paths", nargs="+")

    reveal = subparsers.add_parser("reveal", help="Reveal files in the file browser")
    reveal.add_argument("paths", nargs="+")

    open_parser = subparsers.add_parser("open", help="Open a file with its default handler")
    open_parser.add_argument("path")

    return parser


def _build_orchestrator(config: ConfigManager, preferences: Preferences) -> BatchOrchestrator:
    cache = FingerprintCache.from_config(config)
    rasterizer = PdfRasterizer(jpeg_quality=int(config.get("thumbnail.jpeg_quality", 70)))
    return BatchOrchestrator(cache, rasterizer, config, preferences=preferences)


def _print_progress(event: ProgressEvent) -> None:
    if event.event_type == ProgressEventType.PHASE_END:
        print(f"{event.phase_name}: {event.processed}/{event.total}", file=sys.stderr)


def _print_result(result: ScanResult) -> None:
    if not result.entries:
        print("No PDFs found in this folder.")
        return
    for index, group in enumerate(result.groups):
        if index > 0:
            print("-" * 40)
        for entry in group:
            marker = "" if entry.valid else "  (fingerprint unavailable)"
            layout = result.layouts.get(entry.path)
            pages = f"  [{layout.page_count}p]" if layout is not None else ""
            print(f"{entry.fingerprint_hex}  {entry.path.name}{pages}{marker}")
    print(f"\n{len(result.entries)} documents, {len(result.groups)} groups (threshold {result.threshold})")
    for error in result.errors:
        print(error.format(), file=sys.stderr)


def _run_scan(args: argparse.Namespace, config: ConfigManager, preferences: Preferences) -> int:
    directory = Path(args.directory)
    if not directory.is_dir():
        print(f"找不到資料夾: {directory}", file=sys.stderr)
        return 1
    threshold = args.threshold
    if threshold is not None and threshold < 0:
        print("threshold 必須是非負整數", file=sys.stderr)
        return 2

    orchestrator = _build_orchestrator(config, preferences)
    result = asyncio.run(
        orchestrator.scan_folder(
            directory,
            threshold,
            with_thumbnails=not args.no_thumbnails,
            progress_callback=_print_progress,
        )
    )
    if result is None:
        return 1
    _print_result(result)
    return 0


def _run_threshold(args: argparse.Namespace, config: ConfigManager, preferences: Preferences) -> int:
    if args.value is None:
        print(preferences.get_threshold())
        return 0
    try:
        saved = preferences.set_threshold(args.value)
    except ValueError as exc:
        print(str(exc), file=sys.stderr)
        return 2
    return 0 if saved else 1


def _run_clear_cache(args: argparse.Namespace, config: ConfigManager, preferences: Preferences) -> int:
    cache = FingerprintCache.from_config(config)
    if cache.clear():
        print("Cache cleared")
        return 0
    print("Failed to clear cache", file=sys.stderr)
    return 1


def _run_trash(args: argparse.Namespace, config: ConfigManager, preferences: Preferences) -> int:
    result = file_ops.trash_files([Path(path) for path in args.paths])
    errors = ErrorHandler()
    for item in result.failed:
        errors.add_warning(TRASH_FAILED, f"無法移到垃圾桶: {item.error_message}", item.path)
    for error in errors.errors:
        print(error.format(), file=sys.stderr)
    return 0 if result.ok else 1


def _run_reveal(args: argparse.Namespace, config: ConfigManager, preferences: Preferences) -> int:
    return 0 if file_ops.reveal_in_folder([Path(path) for path in args.paths]) else 1


def _run_open(args: argparse.Namespace, config: ConfigManager, preferences: Preferences) -> int:
    return 0 if file_ops.open_path(Path(args.path)) else 1


if __name__ == "__main__":
    sys.exit(main())
