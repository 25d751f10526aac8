"""
Hybrid fusion of semantic and lexical result sets.

Entries are keyed by meeting id: a meeting found by both retrievers is
reported once, tagged ``both``, carrying the higher of the two scores.
"""

from typing import Dict, List

from domain.models import HybridResult, LexicalResult, ResultSource, ScoredChunk


def _from_semantic(result: ScoredChunk) -> HybridResult:
    chunk = result.chunk
    return HybridResult(
        key=chunk.meeting_id,
        meeting_id=chunk.meeting_id,
        meeting_title=chunk.meeting_title,
        text=chunk.text,
        score=result.similarity,
        source=ResultSource.SEMANTIC,
        chunk_index=chunk.index,
        start_time=chunk.start_time,
    )


def _from_lexical(result: LexicalResult) -> HybridResult:
    return HybridResult(
        key=result.meeting_id,
        meeting_id=result.meeting_id,
        meeting_title=result.meeting_title,
        text=result.preview,
        score=result.score,
        source=ResultSource.LEXICAL,
        lexical_type=result.type,
    )


def fuse(
    semantic_results: List[ScoredChunk],
    lexical_results: List[LexicalResult],
    limit: int,
) -> List[HybridResult]:
    """Merge, dedupe and rank both result sets, truncated to ``limit``.

    Pure: the inputs are not modified and equal inputs give equal output.
    Ties keep insertion order (semantic entries first).
    """
    fused: Dict[str, HybridResult] = {}

    for result in semantic_results:
        entry = _from_semantic(result)
        existing = fused.get(entry.key)
        if existing is None or entry.score > existing.score:
            fused[entry.key] = entry

    for result in lexical_results:
        key = result.meeting_id
        existing = fused.get(key)
        if existing is None:
            fused[key] = _from_lexical(result)
        elif existing.source == ResultSource.LEXICAL:
            if result.score > existing.score:
                fused[key] = _from_lexical(result)
        else:
            fused[key] = existing.model_copy(
                update={
                    "source": ResultSource.BOTH,
                    "score": max(existing.score, result.score),
                }
            )

    ranked = sorted(fused.values(), key=lambda r: -r.score)
    return ranked[:limit] if limit > 0 else []
