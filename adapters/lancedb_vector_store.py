"""
LanceDB-backed vector index adapter.

Implements VectorIndexPort on an embedded LanceDB table. A re-index is a
single ``merge_insert`` that upserts the new generation and deletes the
meeting's rows missing from it, committed as one table version, so readers
never observe a partial mix of old and new chunks.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

import lancedb
import pyarrow as pa
import pyarrow.compute as pc

from domain.models import Chunk, RetrievalScope, ScoredChunk
from shared_utils.logging_utils import get_scoped_logger
from shared_utils.constants import LogScope
from shared_utils.error_handler import ConfigurationError, ExternalServiceError, ValidationError


logger = get_scoped_logger(LogScope.ADAPTER)

REQUIRED_COLUMNS = (
    "id",
    "meeting_id",
    "organization_id",
    "chunk_index",
    "text",
    "vector",
)


def _quote(value: str) -> str:
    """SQL string literal for a LanceDB filter expression."""
    return "'" + value.replace("'", "''") + "'"


def chunk_schema(dimension: int) -> pa.Schema:
    return pa.schema(
        [
            pa.field("id", pa.string()),
            pa.field("meeting_id", pa.string()),
            pa.field("organization_id", pa.string()),
            pa.field("meeting_title", pa.string()),
            pa.field("chunk_index", pa.int32()),
            pa.field("text", pa.string()),
            pa.field("start_time", pa.float64()),
            pa.field("end_time", pa.float64()),
            pa.field("speakers", pa.list_(pa.string())),
            pa.field("vector", pa.list_(pa.float32(), dimension)),
        ]
    )


class LanceDBVectorIndexAdapter:
    """LanceDB implementation of VectorIndexPort.

    Table rows are flat: one row per chunk, ``vector`` a fixed-size list.
    """

    def __init__(
        self,
        uri: str,
        table_name: str,
        dimension: int,
        db: Optional[Any] = None,
    ) -> None:
        self._table_name = table_name
        self._dimension = dimension
        self._db = db if db is not None else lancedb.connect(uri)
        self._table = self._open_or_create_table()

    def _open_or_create_table(self):
        if self._table_name not in self._db.table_names():
            logger.info("lancedb_table_created", table=self._table_name, dimension=self._dimension)
            return self._db.create_table(self._table_name, schema=chunk_schema(self._dimension))

        table = self._db.open_table(self._table_name)
        missing = [col for col in REQUIRED_COLUMNS if col not in table.schema.names]
        if missing:
            logger.error("lancedb_schema_mismatch", table=self._table_name, missing_columns=missing)
            raise ConfigurationError(
                "Vector table schema does not match chunk layout",
                context={"table": self._table_name, "missing_columns": missing},
            )
        logger.info("lancedb_schema_verified", table=self._table_name, columns=len(table.schema.names))
        return table

    # ------------------------------------------------------------------
    # VectorIndexPort implementation
    # ------------------------------------------------------------------

    def upsert_chunks(self, meeting_id: str, chunks: List[Chunk]) -> int:
        """Atomically replace the meeting's chunks with ``chunks``."""
        rows = [self._to_row(meeting_id, chunk) for chunk in chunks]
        # Last write per id wins, so repeated ids never duplicate
        rows = list({row["id"]: row for row in rows}.values())
        meeting_filter = f"meeting_id = {_quote(meeting_id)}"

        try:
            if not rows:
                self._table.delete(meeting_filter)
            else:
                (
                    self._table.merge_insert("id")
                    .when_matched_update_all()
                    .when_not_matched_insert_all()
                    .when_not_matched_by_source_delete(meeting_filter)
                    .execute(rows)
                )
        except Exception as exc:
            logger.error("lancedb_upsert_failed", meeting_id=meeting_id, error=str(exc))
            raise ExternalServiceError("LanceDB", f"Failed to upsert chunks: {exc}") from exc

        logger.info("lancedb_chunks_upserted", meeting_id=meeting_id, count=len(rows))
        return len(rows)

    def query_nearest(
        self,
        scope: RetrievalScope,
        vector: List[float],
        k: int,
    ) -> List[ScoredChunk]:
        """Cosine-distance search pre-filtered to the scope."""
        try:
            rows = (
                self._table.search(vector)
                .distance_type("cosine")
                .where(self._scope_filter(scope), prefilter=True)
                .limit(k)
                .to_list()
            )
        except Exception as exc:
            logger.error(
                "lancedb_search_failed",
                organization_id=scope.organization_id,
                error=str(exc),
            )
            raise ExternalServiceError("LanceDB", f"Vector search failed: {exc}") from exc

        results = [
            ScoredChunk(chunk=self._from_row(row), similarity=1.0 - float(row["_distance"]))
            for row in rows
        ]
        results.sort(key=lambda s: (-s.similarity, s.chunk.index))
        return results

    def delete_meeting(self, meeting_id: str) -> int:
        meeting_filter = f"meeting_id = {_quote(meeting_id)}"
        try:
            removed = self._table.count_rows(meeting_filter)
            self._table.delete(meeting_filter)
        except Exception as exc:
            logger.error("lancedb_delete_failed", meeting_id=meeting_id, error=str(exc))
            raise ExternalServiceError("LanceDB", f"Failed to delete chunks: {exc}") from exc
        logger.info("lancedb_chunks_deleted", meeting_id=meeting_id, deleted_count=removed)
        return removed

    def count_chunks(self, organization_id: str) -> Tuple[int, int]:
        try:
            data = self._table.to_arrow()
        except Exception as exc:
            raise ExternalServiceError("LanceDB", f"Failed to count chunks: {exc}") from exc
        owned = data.filter(pc.equal(data["organization_id"], organization_id))
        return owned.num_rows, len(pc.unique(owned["meeting_id"]))

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _scope_filter(scope: RetrievalScope) -> str:
        clauses = [f"organization_id = {_quote(scope.organization_id)}"]
        if scope.meeting_id is not None:
            clauses.append(f"meeting_id = {_quote(scope.meeting_id)}")
        elif scope.meeting_ids is not None:
            if not scope.meeting_ids:
                clauses.append("false")
            else:
                ids = ", ".join(_quote(m) for m in scope.meeting_ids)
                clauses.append(f"meeting_id IN ({ids})")
        return " AND ".join(clauses)

    def _to_row(self, meeting_id: str, chunk: Chunk) -> Dict[str, Any]:
        if chunk.meeting_id != meeting_id:
            raise ValidationError(
                "Chunk belongs to a different meeting",
                context={"meeting_id": meeting_id, "chunk_meeting_id": chunk.meeting_id},
            )
        if len(chunk.embedding) != self._dimension:
            raise ValidationError(
                "Chunk embedding has the wrong dimension",
                context={"expected": self._dimension, "actual": len(chunk.embedding)},
            )
        return {
            "id": chunk.id,
            "meeting_id": chunk.meeting_id,
            "organization_id": chunk.organization_id,
            "meeting_title": chunk.meeting_title,
            "chunk_index": chunk.index,
            "text": chunk.text,
            "start_time": chunk.start_time,
            "end_time": chunk.end_time,
            "speakers": list(chunk.speakers),
            "vector": [float(x) for x in chunk.embedding],
        }

    @staticmethod
    def _from_row(row: Dict[str, Any]) -> Chunk:
        return Chunk(
            id=row["id"],
            meeting_id=row["meeting_id"],
            organization_id=row["organization_id"],
            meeting_title=row.get("meeting_title") or "",
            index=int(row["chunk_index"]),
            text=row["text"],
            start_time=row.get("start_time"),
            end_time=row.get("end_time"),
            speakers=list(row.get("speakers") or []),
        )
