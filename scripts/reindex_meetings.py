"""
Re-index one or more meetings from the command line.

    python scripts/reindex_meetings.py MEETING_ID [MEETING_ID ...]
    python scripts/reindex_meetings.py --file meeting_ids.txt
    python scripts/reindex_meetings.py --delete MEETING_ID
"""

import argparse
from pathlib import Path
import sys
from typing import List, Optional

# Ensure project root is on sys.path when run as a plain script
current_dir = Path(__file__).resolve().parent
project_root = current_dir.parent

if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from shared_utils.config_loader import get_settings  # noqa: E402
from shared_utils.di_container import get_di_container  # noqa: E402
from shared_utils.logging_utils import configure_logging  # noqa: E402


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Rebuild the search index for meetings.")
    parser.add_argument("meeting_ids", nargs="*", help="Meeting ids to process")
    parser.add_argument("--file", type=Path, help="File with one meeting id per line")
    parser.add_argument(
        "--delete",
        action="store_true",
        help="Remove the meetings from the index instead of rebuilding them",
    )
    return parser


def collect_meeting_ids(args: argparse.Namespace) -> List[str]:
    ids = list(args.meeting_ids)
    if args.file:
        lines = args.file.read_text(encoding="utf-8").splitlines()
        ids.extend(line.strip() for line in lines if line.strip() and not line.startswith("#"))
    # Keep first occurrence order
    return list(dict.fromkeys(ids))


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    meeting_ids = collect_meeting_ids(args)
    if not meeting_ids:
        print("No meeting ids given.", file=sys.stderr)
        return 2

    configure_logging(get_settings().log_level)
    service = get_di_container().get_indexing_service()

    failures = 0
    for meeting_id in meeting_ids:
        try:
            if args.delete:
                removed = service.delete_meeting(meeting_id)
                print(f"{meeting_id}: removed {removed} chunks")
                continue
            report = service.reindex_meeting(meeting_id)
        except Exception as e:
            failures += 1
            print(f"{meeting_id}: FAILED ({type(e).__name__}: {e})")
            continue

        if report.skipped_reason:
            failures += 1
            print(f"{meeting_id}: skipped ({report.skipped_reason})")
        else:
            print(
                f"{meeting_id}: {report.chunks_stored} chunks stored, "
                f"{report.chunks_skipped} skipped, {report.lexical_documents} lexical documents "
                f"in {report.duration_ms:.0f} ms"
            )

    print(f"Done: {len(meeting_ids) - failures} ok, {failures} failed.")
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
