"""
Example: upload a file into a local catalog and print the context the
assistant would receive.

Usage:
    python3 catalog_demo.py --file /path/to/report.pdf --storage-root ./data
"""

import argparse
import logging
from pathlib import Path

from context_assistant.uploads import CatalogConfig, FileCatalog


def setup_logging(log_dir: Path = Path("./logs"), level: int = logging.INFO) -> None:
    log_dir.mkdir(exist_ok=True)

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler(log_dir / "app.log", encoding="utf-8"),
        ],
        force=True,
    )


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--file", required=True, type=Path, help="Path to the file to upload")
    parser.add_argument("--name", default=None, help="Display name (defaults to the file name)")
    parser.add_argument("--storage-root", default=Path("./data"), type=Path, help="Root holding the uploads dir")
    parser.add_argument("--conversation", default=None, help="Link enabled files to this conversation id")
    parser.add_argument("--from-path", action="store_true", help="Copy from path instead of uploading bytes")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    setup_logging(level=logging.DEBUG if args.verbose else logging.INFO)

    if not args.file.exists():
        raise FileNotFoundError(f"File not found: {args.file}")

    catalog = FileCatalog.from_config(CatalogConfig(storage_root=args.storage_root))
    name = args.name or args.file.name
    if args.from_path:
        record = catalog.upload_from_path(str(args.file), name)
    else:
        record = catalog.upload(args.file.read_bytes(), name)

    print(f"Stored {record.name} as {record.id} ({record.file_type}, {record.size} bytes)")
    print(f"Summary: {record.summary}")

    if args.conversation:
        linked = catalog.link_enabled_to_conversation(args.conversation)
        print(f"Linked {linked} file(s) to conversation {args.conversation}")

    blocks = catalog.get_optimized_context()
    print(f"Optimized context: {len(blocks)} block(s)")
    for block in blocks:
        header = block.split("\n", 1)[0]
        print(f"  {header}")


if __name__ == "__main__":
    main()
