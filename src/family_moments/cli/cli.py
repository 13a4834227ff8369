import argparse
import sys
from pathlib import Path
from typing import List, Optional

from family_moments.config import STORAGE_DIR
from family_moments.errors import MomentsError
from family_moments.log import get_logger, setup_logging
from family_moments.models.moment_store import MomentStore
from family_moments.pipelines.export_pdf import MomentExporter
from family_moments.pipelines.ingest_image import ingest_photos
from family_moments.pipelines.share import write_for_sharing
from family_moments.storage.kv_store import FileKeyValueStore
from family_moments.utils import format_timestamp

log = get_logger(__name__)

EMOTION_BAR_WIDTH = 20


def emotion_bar(emotion: float, width: int = EMOTION_BAR_WIDTH) -> str:
    pos = round(min(max(emotion, 0.0), 1.0) * (width - 1))
    return "Sad [" + "".join("o" if i == pos else "-" for i in range(width)) + "] Happy"


def print_moments(moments) -> None:
    for m in moments:
        print(f"[{m.id}] {format_timestamp(m.date)}")
        print(f"    {m.description}")
        print(f"    photos: {len(m.images)}  {emotion_bar(m.emotion)} ({m.emotion:.2f})")
        print()


def parse_emotion(raw: str) -> float:
    try:
        value = float(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"emotion must be a number, got {raw!r}")
    if not 0.0 <= value <= 1.0:
        raise argparse.ArgumentTypeError("emotion must be between 0 and 1")
    return value


def open_store(args) -> MomentStore:
    return MomentStore(FileKeyValueStore(args.storage))


def cmd_add(args) -> int:
    if not args.description.strip():
        print("Description must not be empty", file=sys.stderr)
        return 2
    store = open_store(args)
    images = ingest_photos(args.photo or [])
    moment = store.add(args.description, images=images, emotion=args.emotion)
    print(f"Stored moment {moment.id} with {len(images)} photo(s)")
    return 0


def cmd_list(args) -> int:
    store = open_store(args)
    moments = store.sorted_moments()
    if not moments:
        print("No moments yet.")
        return 0
    print_moments(moments)
    return 0


def cmd_edit(args) -> int:
    store = open_store(args)
    existing = store.get(args.id)
    if existing is None:
        print(f"No moment with id {args.id}", file=sys.stderr)
        return 1

    if args.description is not None and not args.description.strip():
        print("Description must not be empty", file=sys.stderr)
        return 2

    images = None
    if args.clear_photos:
        images = []
    if args.photo:
        base = [] if args.clear_photos else list(existing.images)
        images = base + ingest_photos(args.photo)

    updated = existing.revised(description=args.description, images=images, emotion=args.emotion)
    store.update(updated)
    print(f"Updated moment {updated.id}")
    return 0


def cmd_delete(args) -> int:
    store = open_store(args)
    removed = store.delete_matching(args.ids)
    print(f"Deleted {removed} moment(s)")
    return 0


def cmd_export(args) -> int:
    store = open_store(args)
    with MomentExporter() as exporter:
        future = exporter.submit(store.sorted_moments())
        data = future.result()

    if args.out is not None:
        path = write_for_sharing(data, directory=args.out.parent, filename=args.out.name)
    else:
        path = write_for_sharing(data)
    if path is None:
        print("Failed to write PDF file", file=sys.stderr)
        return 1
    print(path.resolve())
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Family Moments journal")
    parser.add_argument(
        "--storage",
        type=Path,
        default=STORAGE_DIR,
        help="Directory holding the moments key-value slot",
    )
    parser.add_argument("--log-level", default="WARNING", help="Logging level (DEBUG, INFO, WARNING, ...)")
    sub = parser.add_subparsers(dest="cmd", required=True)

    # add
    p_add = sub.add_parser("add", help="Record a new moment")
    p_add.add_argument("description", help="What happened")
    p_add.add_argument("--emotion", type=parse_emotion, default=0.5, help="0 = sad, 1 = happy")
    p_add.add_argument("--photo", nargs="*", type=Path, help="Photo files to attach")
    p_add.set_defaults(func=cmd_add)

    # list
    p_list = sub.add_parser("list", help="Show moments, newest first")
    p_list.set_defaults(func=cmd_list)

    # edit
    p_edit = sub.add_parser("edit", help="Replace the contents of a moment")
    p_edit.add_argument("id", help="Moment id")
    p_edit.add_argument("--description")
    p_edit.add_argument("--emotion", type=parse_emotion)
    p_edit.add_argument("--photo", nargs="*", type=Path, help="Photo files to append")
    p_edit.add_argument("--clear-photos", action="store_true", dest="clear_photos")
    p_edit.set_defaults(func=cmd_edit)

    # delete
    p_delete = sub.add_parser("delete", help="Delete moments by id")
    p_delete.add_argument("ids", nargs="+", help="Moment ids")
    p_delete.set_defaults(func=cmd_delete)

    # export
    p_export = sub.add_parser("export", help="Export all moments to PDF")
    p_export.add_argument("--out", type=Path, help="Output file (default: temp dir)")
    p_export.set_defaults(func=cmd_export)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)
    try:
        return args.func(args)
    except MomentsError as e:
        log.error("command_failed", cmd=args.cmd, error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
