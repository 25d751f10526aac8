"""
Tests for scripts/reindex_meetings.py.
"""

from unittest.mock import MagicMock, patch

import pytest

from domain.models import IndexingReport
from scripts.reindex_meetings import build_parser, collect_meeting_ids, main
from shared_utils.error_handler import IndexingError


@pytest.fixture()
def service():
    svc = MagicMock()
    svc.reindex_meeting.side_effect = lambda meeting_id: IndexingReport(
        meeting_id=meeting_id, chunks_stored=2, lexical_documents=3
    )
    container = MagicMock()
    container.get_indexing_service.return_value = svc
    with patch("scripts.reindex_meetings.get_di_container", return_value=container), \
            patch("scripts.reindex_meetings.get_settings", return_value=MagicMock(log_level="INFO")), \
            patch("scripts.reindex_meetings.configure_logging"):
        yield svc


class TestCollectMeetingIds:
    def test_positional_and_file(self, tmp_path) -> None:
        ids_file = tmp_path / "ids.txt"
        ids_file.write_text("m-2\n# comment\n\n m-3 \nm-1\n", encoding="utf-8")
        args = build_parser().parse_args(["m-1", "m-2", "--file", str(ids_file)])
        assert collect_meeting_ids(args) == ["m-1", "m-2", "m-3"]


class TestMain:
    def test_no_ids(self, service) -> None:
        assert main([]) == 2
        service.reindex_meeting.assert_not_called()

    def test_reindex_all(self, service, capsys) -> None:
        assert main(["m-1", "m-2"]) == 0
        assert service.reindex_meeting.call_count == 2
        assert "Done: 2 ok, 0 failed." in capsys.readouterr().out

    def test_failure_counted(self, service, capsys) -> None:
        def reindex(meeting_id):
            if meeting_id == "m-2":
                raise IndexingError("quota", meeting_id=meeting_id)
            return IndexingReport(meeting_id=meeting_id, chunks_stored=1)

        service.reindex_meeting.side_effect = reindex
        assert main(["m-1", "m-2"]) == 1
        out = capsys.readouterr().out
        assert "m-2: FAILED (IndexingError" in out

    def test_skipped_counts_as_failure(self, service) -> None:
        service.reindex_meeting.side_effect = lambda meeting_id: IndexingReport(
            meeting_id=meeting_id, skipped_reason="embedding_unavailable"
        )
        assert main(["m-1"]) == 1

    def test_delete(self, service, capsys) -> None:
        service.delete_meeting.return_value = 4
        assert main(["--delete", "m-1"]) == 0
        service.delete_meeting.assert_called_once_with("m-1")
        assert "m-1: removed 4 chunks" in capsys.readouterr().out
