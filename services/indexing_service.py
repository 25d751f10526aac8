"""
Indexing service — (re)builds a meeting's semantic and lexical index entries.

Flow:  transcript → chunk → embed each chunk → atomic vector swap
       → lexical document swap → IndexingReport.

Depends only on ports and engine pieces, never on concrete adapters.
"""

from __future__ import annotations

import time
import uuid
from typing import List, Optional

from core_intelligence.engine.chunking import TranscriptChunker
from domain.models import (
    Chunk,
    IndexingReport,
    IndexStats,
    LexicalDocument,
    LexicalDocumentType,
    MeetingTranscript,
    SegmentChunk,
)
from ports.lexical_store import LexicalSearchPort
from ports.transcript_provider import TranscriptProviderPort
from ports.vector_store import VectorIndexPort
from services.embedding_client import EmbeddingClient
from shared_utils.constants import LogScope
from shared_utils.error_handler import (
    ExternalServiceError,
    IndexingError,
    NotFoundError,
    ProviderError,
    QuotaExceededError,
)
from shared_utils.logging_utils import get_scoped_logger, log_execution
from shared_utils.validation import InputValidator

logger = get_scoped_logger(LogScope.INDEXING)

_CHUNK_NAMESPACE = uuid.UUID("8f1d7c52-3b0e-4c43-9a55-6f0f3f1e9a21")


def chunk_id(meeting_id: str, index: int) -> str:
    """Stable id, so re-indexing the same transcript rewrites the same rows."""
    return str(uuid.uuid5(_CHUNK_NAMESPACE, f"{meeting_id}:{index}"))


def build_lexical_documents(transcript: MeetingTranscript) -> List[LexicalDocument]:
    """One document per searchable facet of the meeting."""
    base = {
        "meeting_id": transcript.meeting_id,
        "organization_id": transcript.organization_id,
        "meeting_title": transcript.title,
        "meeting_date": transcript.meeting_date,
    }
    mid = transcript.meeting_id
    documents = [
        LexicalDocument(
            id=f"{mid}:meeting",
            type=LexicalDocumentType.MEETING,
            title=transcript.title,
            content=transcript.title,
            **base,
        )
    ]

    full_text = transcript.full_text or " ".join(s.text for s in transcript.segments)
    if full_text.strip():
        documents.append(
            LexicalDocument(
                id=f"{mid}:transcript",
                type=LexicalDocumentType.TRANSCRIPT,
                title=transcript.title,
                content=full_text,
                **base,
            )
        )

    if transcript.summary:
        documents.append(
            LexicalDocument(
                id=f"{mid}:summary",
                type=LexicalDocumentType.SUMMARY,
                title=f"Summary: {transcript.title}",
                content=transcript.summary,
                **base,
            )
        )

    for position, item in enumerate(transcript.action_items):
        if not item.strip():
            continue
        documents.append(
            LexicalDocument(
                id=f"{mid}:action_item:{position}",
                type=LexicalDocumentType.ACTION_ITEM,
                title=item[:80],
                content=item,
                **base,
            )
        )
    return documents


class IndexingService:
    """Keeps the vector and lexical indexes in step with transcripts."""

    def __init__(
        self,
        *,
        transcript_provider: TranscriptProviderPort,
        chunker: TranscriptChunker,
        embedding_client: EmbeddingClient,
        vector_index: VectorIndexPort,
        lexical_index: LexicalSearchPort,
    ) -> None:
        self._transcripts = transcript_provider
        self._chunker = chunker
        self._embedder = embedding_client
        self._vectors = vector_index
        self._lexical = lexical_index

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @log_execution(scope=LogScope.INDEXING)
    def reindex_meeting(self, meeting_id: str, organization_id: Optional[str] = None) -> IndexingReport:
        """Replace every index entry of ``meeting_id`` from its transcript.

        A missing transcript or embedding provider leaves the existing
        index untouched. Individual chunks whose embedding fails are
        skipped; the rest are stored.

        Raises:
            IndexingError: If a quota error aborts the run or a store fails.
            NotFoundError: If the meeting belongs to another organization.
        """
        meeting_id = InputValidator.validate_identifier(meeting_id, "meeting_id")
        started = time.time()

        transcript = self._transcripts.get_transcript(meeting_id)
        if transcript is None:
            logger.warning("reindex_skipped", meeting_id=meeting_id, reason="transcript_not_found")
            return IndexingReport(
                meeting_id=meeting_id,
                skipped_reason="transcript_not_found",
                duration_ms=_elapsed_ms(started),
            )
        if organization_id is not None and transcript.organization_id != organization_id:
            raise NotFoundError("Meeting", meeting_id)

        if not self._embedder.is_available():
            logger.warning("reindex_skipped", meeting_id=meeting_id, reason="embedding_unavailable")
            return IndexingReport(
                meeting_id=meeting_id,
                skipped_reason="embedding_unavailable",
                duration_ms=_elapsed_ms(started),
            )

        pieces = self._chunk(transcript)
        logger.info("chunking_complete", meeting_id=meeting_id, chunk_count=len(pieces))

        chunks: List[Chunk] = []
        tokens_used = 0
        for index, piece in enumerate(pieces):
            try:
                embedding = self._embedder.embed(piece.text)
            except QuotaExceededError as exc:
                raise IndexingError(
                    f"Embedding quota exceeded while indexing {meeting_id}",
                    meeting_id=meeting_id,
                    context={"chunk_index": index},
                ) from exc
            except ProviderError as exc:
                logger.warning(
                    "chunk_embedding_failed",
                    meeting_id=meeting_id,
                    chunk_index=index,
                    error=exc.message,
                )
                continue
            tokens_used += embedding.tokens_used
            chunks.append(
                Chunk(
                    id=chunk_id(meeting_id, index),
                    meeting_id=meeting_id,
                    organization_id=transcript.organization_id,
                    index=index,
                    text=piece.text,
                    start_time=piece.start_time,
                    end_time=piece.end_time,
                    speakers=piece.speakers,
                    meeting_title=transcript.title,
                    embedding=embedding.vector,
                )
            )

        skipped = len(pieces) - len(chunks)
        if pieces and not chunks:
            logger.error("reindex_aborted", meeting_id=meeting_id, reason="all_embeddings_failed")
            return IndexingReport(
                meeting_id=meeting_id,
                chunks_created=len(pieces),
                chunks_skipped=skipped,
                skipped_reason="all_embeddings_failed",
                duration_ms=_elapsed_ms(started),
            )

        documents = build_lexical_documents(transcript)
        try:
            stored = self._vectors.upsert_chunks(meeting_id, chunks)
            lexical_count = self._lexical.replace_documents(meeting_id, documents)
        except ExternalServiceError as exc:
            raise IndexingError(
                f"Index store failed for {meeting_id}: {exc.message}",
                meeting_id=meeting_id,
            ) from exc

        report = IndexingReport(
            meeting_id=meeting_id,
            chunks_created=len(pieces),
            chunks_stored=stored,
            chunks_skipped=skipped,
            lexical_documents=lexical_count,
            tokens_used=tokens_used,
            duration_ms=_elapsed_ms(started),
        )
        logger.info(
            "reindex_completed",
            meeting_id=meeting_id,
            chunks=stored,
            skipped=skipped,
            lexical_documents=lexical_count,
            tokens_used=tokens_used,
            duration_ms=round(report.duration_ms, 1),
        )
        return report

    def delete_meeting(self, meeting_id: str, organization_id: Optional[str] = None) -> int:
        """Remove the meeting from both indexes; returns chunks removed.

        When ``organization_id`` is given the meeting transcript must exist
        and belong to it.
        """
        meeting_id = InputValidator.validate_identifier(meeting_id, "meeting_id")
        if organization_id is not None:
            transcript = self._transcripts.get_transcript(meeting_id)
            if transcript is None or transcript.organization_id != organization_id:
                raise NotFoundError("Meeting", meeting_id)
        removed = self._vectors.delete_meeting(meeting_id)
        self._lexical.delete_meeting(meeting_id)
        logger.info("meeting_index_deleted", meeting_id=meeting_id, chunks_removed=removed)
        return removed

    def get_stats(self, organization_id: str) -> IndexStats:
        organization_id = InputValidator.validate_identifier(organization_id, "organization_id")
        total_chunks, meetings = self._vectors.count_chunks(organization_id)
        return IndexStats(
            organization_id=organization_id,
            total_chunks=total_chunks,
            meetings_indexed=meetings,
        )

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _chunk(self, transcript: MeetingTranscript) -> List[SegmentChunk]:
        if transcript.segments:
            return self._chunker.chunk_segments(transcript.segments)
        return [SegmentChunk(text=text) for text in self._chunker.chunk_text(transcript.full_text)]


def _elapsed_ms(started: float) -> float:
    return (time.time() - started) * 1000
