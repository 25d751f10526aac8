"""
Worker entrypoint for batch re-indexing (ECS RunTask or cron).

Invoked with environment overrides:
    MEETING_ID   — the meeting to re-index

The worker:
    1. Reads the meeting transcript through the configured provider.
    2. Runs IndexingService.reindex_meeting().
    3. Exits 0 when the meeting was indexed, 1 otherwise.

All logging is JSON (structlog).
"""

from __future__ import annotations

import os
import sys

from shared_utils.config_loader import get_settings
from shared_utils.constants import LogScope
from shared_utils.logging_utils import configure_logging, get_scoped_logger
from shared_utils.di_container import get_di_container

logger = get_scoped_logger(LogScope.WORKER)


def main() -> int:
    """Worker main — parse env vars, build deps, run the re-index."""
    meeting_id = os.environ.get("MEETING_ID", "").strip()

    if not meeting_id:
        logger.error("worker_missing_env", meeting_id=meeting_id)
        print("ERROR: MEETING_ID env var is required", file=sys.stderr)
        return 1

    configure_logging(get_settings().log_level)
    logger.info("worker_started", meeting_id=meeting_id)

    try:
        indexing_svc = get_di_container().get_indexing_service()
        report = indexing_svc.reindex_meeting(meeting_id)
    except Exception as exc:
        logger.error(
            "worker_failed",
            meeting_id=meeting_id,
            error_type=type(exc).__name__,
            error=str(exc),
        )
        return 1

    if report.skipped_reason:
        logger.error(
            "worker_skipped",
            meeting_id=meeting_id,
            reason=report.skipped_reason,
        )
        return 1

    logger.info(
        "worker_completed",
        meeting_id=meeting_id,
        chunks=report.chunks_stored,
        skipped=report.chunks_skipped,
        duration_ms=round(report.duration_ms, 1),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
