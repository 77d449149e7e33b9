#!/usr/bin/env python3
"""pngmeta - command line tool for PNG chunks and XMP metadata.

Usage:
    pngmeta inspect <image.png>
    pngmeta chunks <image.png> [--strict]
    pngmeta read <image.png>
    pngmeta write <image.png> [--title T] [--description D] [--url U]
                  [--ext prefix=namespace-url:name=value ...] [--output <path>]
    pngmeta add-text <image.png> <keyword> <text> [--lang en] [--translated K]
                     [--compress] [--output <path>]
    pngmeta verify <image.png>

Output formats (before the command):
    --format table    (default, human-readable)
    --format json     (machine-readable)
"""

import sys
import json
import logging
import argparse
from dataclasses import asdict
from pathlib import Path
from typing import Optional

from .core.config import MetadataConfig
from .core.metadata_operations import read_metadata, verify_png, write_metadata, write_text
from .formats.png import PngFile, PngFormatError, ITXT, is_critical
from .formats.xmp import XMPMetadata


def fail(message: str):
    """Print an error and exit with status 1."""
    print(f"ERROR: {message}", file=sys.stderr)
    sys.exit(1)


def load_png(path: str, verify_crc: bool = False) -> PngFile:
    """Load a PNG file. Exits on failure."""
    if not Path(path).exists():
        fail(f"File not found: {path}")
    try:
        return PngFile.read(path, verify_crc=verify_crc)
    except PngFormatError as e:
        fail(f"Failed to load {path}: {e}")


def load_config(args) -> MetadataConfig:
    return MetadataConfig.load(args.config)


def parse_extended(values: Optional[list[str]]) -> dict:
    """Parse --ext prefix=namespace-url:name=value arguments.

    The namespace URL may contain colons, so the property is taken from
    after the last one; values cannot contain ":".
    """
    extended = {}
    for raw in values or []:
        prefix, sep, rest = raw.partition("=")
        ns_url, colon, prop = rest.rpartition(":")
        name, eq, value = prop.partition("=")
        if not (sep and colon and eq and prefix and ns_url and name):
            fail(f"Bad --ext value (want prefix=namespace-url:name=value): {raw}")
        _, props = extended.setdefault(prefix, (ns_url, {}))
        props[name] = value
    return extended


def print_json(data):
    print(json.dumps(data, indent=2, default=str))


def cmd_inspect(args):
    """Show image properties and a chunk summary."""
    config = load_config(args)
    png = load_png(args.file, config.verify_crc)
    try:
        props = png.image_properties
    except PngFormatError as e:
        fail(str(e))

    if args.format == "json":
        counts = {}
        for chunk in png:
            counts[chunk.chunk_type] = counts.get(chunk.chunk_type, 0) + 1
        print_json({
            "file": args.file,
            "size": len(png.to_bytes()),
            "image": asdict(props),
            "chunk_counts": counts,
        })
        return

    print(f"Image: {args.file}")
    print(f"  {props.width}x{props.height}  bit depth {props.bit_depth}  "
          f"color type {props.color_type}  interlace {props.interlace}")
    print(png.summary())


def cmd_chunks(args):
    """List every chunk with offsets, lengths and CRC status."""
    config = load_config(args)
    png = load_png(args.file, verify_crc=args.strict or config.verify_crc)

    rows = []
    for chunk in png:
        row = {
            "offset": chunk.start_offset,
            "type": chunk.chunk_type,
            "length": chunk.data_length,
            "critical": is_critical(chunk.chunk_type),
            "crc": f"{chunk.crc:#010x}",
            "crc_ok": chunk.crc_valid(),
        }
        if chunk.chunk_type == ITXT:
            try:
                row["keyword"] = chunk.itxt_fields().keyword
            except PngFormatError as e:
                row["keyword"] = f"<malformed: {e}>"
        rows.append(row)

    if args.format == "json":
        print_json(rows)
        return

    print(f"{'OFFSET':>10}  {'TYPE':<4}  {'LENGTH':>10}  {'CRC':<10}  NOTE")
    print("─" * 60)
    for row in rows:
        note = "" if row["crc_ok"] else "BAD CRC"
        if "keyword" in row:
            note = f"{note} {row['keyword']}".strip()
        print(f"{row['offset']:>10}  {row['type']:<4}  {row['length']:>10}  "
              f"{row['crc']:<10}  {note}")


def cmd_read(args):
    """Print XMP metadata."""
    result = read_metadata(args.file, load_config(args))
    if not result.success:
        fail(result.message)
    metadata: XMPMetadata = result.data

    if args.format == "json":
        print_json(metadata.to_dict())
        return

    if metadata.is_empty() and not metadata.extended:
        print("No XMP metadata found.")
        return
    print(f"Resource URL: {metadata.resource_url}")
    print(f"Title:        {metadata.title}")
    print(f"Description:  {metadata.description}")
    for prefix, (ns_url, props) in metadata.extended.items():
        print(f"{prefix} ({ns_url}):")
        for name, value in props.items():
            print(f"  {name}: {value}")


def _report_write(args, result):
    if not result.success:
        fail(result.message)
    if args.format == "json":
        print_json({"path": result.path, "backup_path": result.backup_path,
                    "size": len(result.data)})
    else:
        print(result.message)
        if result.backup_path:
            print(f"Backup: {result.backup_path}")


def cmd_write(args):
    """Insert an XMP metadata chunk."""
    metadata = XMPMetadata(
        resource_url=args.url or "",
        title=args.title or "",
        description=args.description or "",
        extended=parse_extended(args.ext),
    )
    config = load_config(args)
    if args.no_backup:
        config.create_backup = False
    _report_write(args, write_metadata(args.file, metadata, args.output, config))


def cmd_add_text(args):
    """Insert an arbitrary iTXt chunk."""
    config = load_config(args)
    if args.no_backup:
        config.create_backup = False
    result = write_text(args.file, args.text, args.keyword,
                        language_tag=args.lang, translated_keyword=args.translated,
                        compressed=args.compress, output=args.output, config=config)
    _report_write(args, result)


def cmd_verify(args):
    """Decode the image with Pillow."""
    if not Path(args.file).exists():
        fail(f"File not found: {args.file}")
    result = verify_png(Path(args.file).read_bytes())
    if not result.success:
        fail(result.message)

    if args.format == "json":
        print_json(result.data)
        return
    info = result.data
    print(f"OK: {info['format']} {info['size'][0]}x{info['size'][1]} {info['mode']}")
    for key, value in info["text"].items():
        preview = str(value).replace("\n", " ")
        if len(preview) > 60:
            preview = preview[:57] + "..."
        print(f"  {key}: {preview}")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="pngmeta",
        description="Inspect PNG chunks and read or insert XMP/iTXt text metadata "
                    "without re-encoding the image.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--format", choices=["table", "json"],
                        default="table", help="Output format (default: table)")
    parser.add_argument("--config", help="Path to a JSON config file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    sub = parser.add_subparsers(dest="command", help="Command to run")

    # inspect
    p = sub.add_parser("inspect", help="Show image properties and chunk counts")
    p.add_argument("file", help="Path to PNG")

    # chunks
    p = sub.add_parser("chunks", help="List all chunks")
    p.add_argument("file", help="Path to PNG")
    p.add_argument("--strict", action="store_true", help="Fail on the first bad CRC")

    # read
    p = sub.add_parser("read", help="Show XMP metadata")
    p.add_argument("file", help="Path to PNG")

    # write
    p = sub.add_parser("write", help="Insert XMP metadata")
    p.add_argument("file", help="Path to PNG")
    p.add_argument("--title", help="dc:title")
    p.add_argument("--description", help="dc:description")
    p.add_argument("--url", help="Resource URL (rdf:about)")
    p.add_argument("--ext", action="append",
                   help="Extended property prefix=namespace-url:name=value (repeatable)")
    p.add_argument("--output", "-o", help="Output file path (default: overwrite)")
    p.add_argument("--no-backup", action="store_true", help="Don't write a .bak file")

    # add-text
    p = sub.add_parser("add-text", help="Insert an iTXt text chunk")
    p.add_argument("file", help="Path to PNG")
    p.add_argument("keyword", help="Chunk keyword, e.g. Comment")
    p.add_argument("text", help="Chunk text")
    p.add_argument("--lang", default="", help="Language tag, e.g. en")
    p.add_argument("--translated", default="", help="Translated keyword")
    p.add_argument("--compress", action="store_true", help="Deflate the text")
    p.add_argument("--output", "-o", help="Output file path (default: overwrite)")
    p.add_argument("--no-backup", action="store_true", help="Don't write a .bak file")

    # verify
    p = sub.add_parser("verify", help="Check the image still decodes with Pillow")
    p.add_argument("file", help="Path to PNG")

    return parser


def main(argv: Optional[list[str]] = None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        sys.exit(0)

    commands = {
        "inspect": cmd_inspect,
        "chunks": cmd_chunks,
        "read": cmd_read,
        "write": cmd_write,
        "add-text": cmd_add_text,
        "verify": cmd_verify,
    }

    cmd_func = commands.get(args.command)
    if cmd_func:
        cmd_func(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
