# src/main.py — v3
"""CLI entry point — tag, export, embed, show commands.

Usage:
    mediatagger tag <file-or-dir>... [options]
    mediatagger export [platform] [-o DIR]
    mediatagger embed [file...] [--sidecar] [--backup]
    mediatagger show <file>
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from mediatagger.logging.logger import get_logger, setup_logging_from_settings
from mediatagger.version import __version__

logger = get_logger("cli")


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    from pydantic import ValidationError

    from mediatagger.config.settings import ConfigurationError, load_settings

    try:
        settings = load_settings()
    except (ConfigurationError, ValidationError) as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 1

    setup_logging_from_settings(settings, verbose=args.verbose)

    try:
        return asyncio.run(args.func(args, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="mediatagger",
        description=f"mediatagger v{__version__} — SEO metadata for images and videos",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- tag ---
    p_tag = subparsers.add_parser(
        "tag", help="Generate metadata for files and directories",
    )
    p_tag.add_argument("paths", nargs="+", type=Path, help="Media files or directories")
    p_tag.add_argument(
        "--no-recursive", action="store_true",
        help="Do not descend into sub-directories",
    )
    p_tag.add_argument(
        "--interval", type=float, default=None,
        help="Seconds to wait between files (default: from settings)",
    )
    p_tag.add_argument("--provider", default=None, help="Classifier provider")
    p_tag.add_argument("--model", default=None, help="Classifier model")
    p_tag.add_argument(
        "--place-names", action="store_true", default=None,
        help="Allow place names in generated metadata",
    )
    p_tag.set_defaults(func=_cmd_tag)

    # --- export ---
    p_export = subparsers.add_parser(
        "export", help="Export stored metadata as a platform CSV",
    )
    p_export.add_argument(
        "platform", nargs="?", default=None,
        choices=["adobe_stock", "shutterstock"],
        help="Target platform (default: from settings)",
    )
    p_export.add_argument(
        "-o", "--output", type=Path, default=None,
        help="Output directory (default: from settings)",
    )
    p_export.set_defaults(func=_cmd_export)

    # --- embed ---
    p_embed = subparsers.add_parser(
        "embed", help="Write stored metadata into the media files (exiftool)",
    )
    p_embed.add_argument(
        "files", nargs="*", type=Path,
        help="Media files (default: every file in the metadata store)",
    )
    p_embed.add_argument(
        "--sidecar", action="store_true", default=None,
        help="Write an .xmp sidecar instead of modifying the file",
    )
    p_embed.add_argument(
        "--backup", action="store_true", default=None,
        help="Keep exiftool's _original backup of each modified file",
    )
    p_embed.set_defaults(func=_cmd_embed)

    # --- show ---
    p_show = subparsers.add_parser("show", help="Print stored metadata for a file")
    p_show.add_argument("file", type=Path, help="Media file")
    p_show.set_defaults(func=_cmd_show)

    return parser


async def _cmd_tag(args: argparse.Namespace, settings) -> int:
    """Run the batch processor over the given paths."""
    from mediatagger.batch.processor import BatchProcessor
    from mediatagger.batch.scanner import MediaScanner
    from mediatagger.classification.classifier import VisionClassifier
    from mediatagger.preparation.image_preparer import ImagePreparer
    from mediatagger.storage.metadata_store import JsonMetadataStore

    files = MediaScanner().collect(args.paths, recursive=not args.no_recursive)
    if not files:
        logger.error("No supported media files found")
        return 1

    run_settings = settings.processing_settings(
        provider=args.provider,
        model=args.model,
        request_interval=args.interval,
        include_place_name=args.place_names,
    )

    processor = BatchProcessor(
        preparer=ImagePreparer(
            max_dimension=settings.prepare_max_dimension,
            jpeg_quality=settings.prepare_jpeg_quality,
            max_bytes=settings.prepare_max_bytes,
        ),
        classifier=VisionClassifier(),
        max_payload_bytes=settings.prepare_max_bytes,
    )
    store = JsonMetadataStore(settings.metadata_store_path)
    processor.subscribe_to_file_complete(store.record)

    def on_file_complete(result) -> None:
        name = Path(result.file_path).name
        if result.success:
            flag = "" if result.metadata.is_complete else "  (incomplete)"
            print(f"  ✓ {name}: {result.metadata.title}{flag}")
        else:
            print(f"  ✗ {name}: {result.error}")

    def on_progress(status) -> None:
        if status.in_progress and status.processed:
            print(f"    [{status.processed}/{status.total}] {status.percent:.0f}%")

    print(f"Tagging {len(files)} file(s) with {run_settings.provider}:{run_settings.model}")
    await processor.process(
        files, run_settings,
        on_progress=on_progress,
        on_file_complete=on_file_complete,
    )

    status = processor.get_status()
    print("\nBatch complete:")
    print(f"  Files:      {status.total}")
    print(f"  Succeeded:  {status.completed}")
    print(f"  Failed:     {status.failed}")
    print(f"  Store:      {store.path}")
    return 0 if status.failed == 0 else 2


async def _cmd_export(args: argparse.Namespace, settings) -> int:
    """Write a platform CSV from the metadata store."""
    from mediatagger.export.csv_exporter import export_csv
    from mediatagger.storage.metadata_store import JsonMetadataStore

    store = JsonMetadataStore(settings.metadata_store_path)
    entries = store.items()
    if not entries:
        logger.error("Metadata store %s is empty", store.path)
        return 1

    platform = args.platform or settings.export_platform
    path = export_csv(entries, platform, args.output or settings.export_dir)
    print(f"Exported {len(entries)} file(s) to {path}")
    return 0


async def _cmd_embed(args: argparse.Namespace, settings) -> int:
    """Embed stored metadata into media files."""
    from mediatagger.core.errors import EmbedError
    from mediatagger.export.embedder import MetadataEmbedder
    from mediatagger.storage.metadata_store import JsonMetadataStore

    store = JsonMetadataStore(settings.metadata_store_path)
    if args.files:
        entries = [(str(path), store.get(path)) for path in args.files]
    else:
        entries = store.items()
    if not entries:
        logger.error("Metadata store %s is empty", store.path)
        return 1

    embedder = MetadataEmbedder(
        executable=settings.exiftool_path,
        backup=settings.embed_backup if args.backup is None else args.backup,
        sidecar=settings.embed_sidecar if args.sidecar is None else args.sidecar,
    )
    try:
        report = embedder.embed_many(entries)
    except EmbedError as exc:
        logger.error("%s", exc.reason)
        return 1

    for file_path in report.written:
        print(f"  ✓ {Path(file_path).name}")
    for file_path in report.skipped:
        print(f"  - {Path(file_path).name}: no metadata stored")
    for file_path, reason in report.failed.items():
        print(f"  ✗ {Path(file_path).name}: {reason}")

    print(
        f"\nEmbedded {len(report.written)} file(s), "
        f"skipped {len(report.skipped)}, failed {len(report.failed)}"
    )
    return 0 if report.ok else 2


async def _cmd_show(args: argparse.Namespace, settings) -> int:
    """Print stored metadata for one file."""
    from mediatagger.storage.metadata_store import JsonMetadataStore

    store = JsonMetadataStore(settings.metadata_store_path)
    metadata = store.get(args.file)
    if metadata is None:
        logger.error("No metadata stored for %s", args.file)
        return 1

    print(f"Title:       {metadata.title}")
    print(f"Description: {metadata.description}")
    print(f"Keywords:    {', '.join(metadata.keywords)}")
    if not metadata.is_complete:
        print(f"Missing:     {', '.join(metadata.missing_fields)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
