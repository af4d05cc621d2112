import argparse
import json
import sys
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any

from app.config.settings import Settings
from app.database.connection import close_pool, init_pool, init_schema
from app.database.factory import RecordStoreFactory
from app.logging.logger import Log
from app.processor.exceptions import InvalidInputError
from app.processor.file_loader import FileLoader
from app.processor.processor import SubmissionProcessor, build_processor


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="logdedup",
        description="Redact diagnostic logs and analyze each distinct one once.",
    )
    parser.add_argument("files", nargs="*", type=Path, help="log files to submit")
    parser.add_argument(
        "--history",
        type=int,
        nargs="?",
        const=200,
        default=None,
        metavar="LIMIT",
        help="print recent submissions (default limit: 200)",
    )
    parser.add_argument(
        "--init-schema",
        action="store_true",
        help="create database tables before processing",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="number of files submitted concurrently",
    )
    return parser.parse_args(argv)


def submit_file(
    processor: SubmissionProcessor,
    loader: FileLoader,
    path: Path,
) -> tuple[dict[str, Any], bool]:
    """Submit one file. Returns the JSON payload and whether it was accepted."""
    try:
        raw_bytes = loader.load(path)
        outcome = processor.submit(raw_bytes, path.name)
    except (InvalidInputError, FileNotFoundError) as exc:
        Log.warning(f"Rejected {path}: {exc}")
        return {"file": str(path), "status": "rejected", "error": str(exc)}, False
    return {"file": str(path), **outcome.to_dict()}, True


def run(settings: Settings, args: argparse.Namespace) -> int:
    """Submit files and/or print history; return the process exit code."""
    store = RecordStoreFactory.create(settings)
    processor = build_processor(settings, store)
    loader = FileLoader(settings.max_upload_size_bytes)

    all_accepted = True
    with ThreadPoolExecutor(max_workers=max(1, args.workers)) as pool:
        results = pool.map(lambda p: submit_file(processor, loader, p), args.files)
        for payload, accepted in results:
            all_accepted = all_accepted and accepted
            print(json.dumps(payload, default=str))

    if args.history is not None:
        for entry in processor.history(args.history):
            print(json.dumps(entry.__dict__, default=str))

    return 0 if all_accepted else 1


def main(argv: list[str] | None = None) -> int:
    """Entry point: configure logging -> open store -> submit files."""
    args = parse_args(argv)
    settings = Settings()
    Log.configure(settings.log_level)

    uses_postgres = settings.record_store.lower() == "postgres"
    if uses_postgres:
        init_pool(settings)
    try:
        if args.init_schema and uses_postgres:
            init_schema()
        return run(settings, args)
    finally:
        if uses_postgres:
            close_pool()


if __name__ == "__main__":
    sys.exit(main())
