"""Command-line entrypoint for the study organizer."""

import argparse
import logging
import mimetypes
from dataclasses import replace
from pathlib import Path

from .config import STORAGE_BACKENDS, OrganizerSettings
from .errors import ConfigurationError, KeyAllocationFailed, StorageError
from .organizer import StudyOrganizer
from .storage import create_storage


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="study-organizer",
        description="Work out where study material belongs in the bucket, and put it there.",
    )
    parser.add_argument(
        "--storage",
        choices=STORAGE_BACKENDS,
        default=None,
        help="Storage backend (defaults to STUDY_STORAGE, then 'memory').",
    )
    parser.add_argument(
        "--detailed-exam-paths",
        action="store_true",
        help="File exam papers under Prelims / Exam Papers with year and school folders.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log rule matches.")

    commands = parser.add_subparsers(dest="command", required=True)

    dry_run = commands.add_parser("dry-run", help="Print target keys without writing anything.")
    dry_run.add_argument("names", nargs="+", metavar="NAME")

    upload = commands.add_parser("upload", help="Upload a local file to its target key.")
    upload.add_argument("file", type=Path)
    upload.add_argument("--name", default=None, help="Classify and store under this name instead.")
    upload.add_argument("--content-type", default=None)

    relocate = commands.add_parser("relocate", help="Move stored objects to their target keys.")
    relocate.add_argument("keys", nargs="+", metavar="KEY")
    return parser


def run_cli(args: argparse.Namespace) -> int:
    try:
        settings = OrganizerSettings.from_env()
        if args.storage:
            settings = replace(settings, storage=args.storage)
        if args.detailed_exam_paths:
            settings = replace(settings, detailed_exam_paths=True)
    except ConfigurationError as e:
        print(f"Configuration error: {e}")
        return 1

    if args.command == "dry-run":
        organizer = StudyOrganizer(settings=settings)
        for name in args.names:
            result = organizer.dry_run(name)
            print(f"{result['name']} -> {result['target_key']}")
        return 0

    try:
        organizer = StudyOrganizer(create_storage(settings), settings)
    except ConfigurationError as e:
        print(f"Configuration error: {e}")
        return 1

    try:
        if args.command == "upload":
            if not args.file.is_file():
                print(f"File not found: {args.file}")
                return 1
            content_type = (
                args.content_type
                or mimetypes.guess_type(args.file.name)[0]
                or "application/octet-stream"
            )
            result = organizer.upload(args.file.name, args.file.read_bytes(), content_type, override=args.name)
            print(f"Stored {result['key']}")
            return 0

        for key in args.keys:
            moved = organizer.relocate(key)
            if moved.moved:
                print(f"Moved {moved.source} -> {moved.target}")
            else:
                print(f"Already in place: {moved.source}")
        return 0
    except (StorageError, KeyAllocationFailed) as e:
        print(f"Storage error: {e}")
        return 2


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return run_cli(args)


if __name__ == "__main__":
    raise SystemExit(main())
