"""
FastAPI backend for the meeting RAG engine.

Endpoints:
    GET    /health                                  — Health and provider capability
    POST   /api/v1/chats                            — Create a chat session
    GET    /api/v1/chats                            — List the caller's chats
    GET    /api/v1/chats/{chat_id}                  — Chat session with its history
    DELETE /api/v1/chats/{chat_id}                  — Delete a chat and its messages
    POST   /api/v1/chats/{chat_id}/messages         — Ask a question in a chat
    POST   /api/v1/search/semantic                  — Semantic search in one meeting
    POST   /api/v1/search/cross-meeting             — Semantic search across meetings
    GET    /api/v1/search/lexical                   — Keyword search
    POST   /api/v1/search/hybrid                    — Fused semantic + keyword search
    GET    /api/v1/meetings/{meeting_id}/suggestions — Starter questions
    POST   /api/v1/meetings/{meeting_id}/reindex    — Rebuild a meeting's index
    DELETE /api/v1/meetings/{meeting_id}/index      — Drop a meeting's index
    GET    /api/v1/index/stats                      — Index size for the organization

Identity comes from the X-User-Id and X-Organization-Id headers, set by the
authenticating gateway in front of this service.
"""

from datetime import datetime
from typing import List, Optional, Tuple

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
import uvicorn

from api_service.src.schemas import (
    CreateChatRequest,
    CrossMeetingSearchRequest,
    HybridSearchRequest,
    SemanticSearchRequest,
    SendMessageRequest,
)
from domain.models import DateRange, LexicalDocumentType, ScoredChunk
from shared_utils.config_loader import get_settings
from shared_utils.logging_utils import ContextualLogger, configure_logging
from shared_utils.constants import LogScope, APIEndpoints
from shared_utils.error_handler import (
    AppException, AuthenticationError, ValidationError, handle_error
)
from shared_utils.validation import InputValidator
from shared_utils.di_container import get_di_container


# ---------------------------------------------------------------------------
# Application bootstrap
# ---------------------------------------------------------------------------

settings = get_settings()
configure_logging(settings.log_level)
logger = ContextualLogger(scope=LogScope.API)

app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description=settings.app_description,
)

limiter = Limiter(key_func=get_remote_address)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Missing providers degrade features instead of blocking startup
try:
    capability = get_di_container().describe_providers()
    logger.info(
        "api_initialized",
        environment=settings.environment,
        **capability,
    )
except Exception as e:
    logger.error("api_initialization_failed", error=str(e))
    raise


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _identity(request: Request) -> Tuple[str, str]:
    """(user_id, organization_id) from the gateway headers."""
    user_id = request.headers.get("X-User-Id")
    organization_id = request.headers.get("X-Organization-Id")
    if not user_id or not organization_id:
        raise AuthenticationError("Missing identity headers")
    return (
        InputValidator.validate_identifier(user_id, "user_id"),
        InputValidator.validate_identifier(organization_id, "organization_id"),
    )


def _date_range(start: Optional[datetime], end: Optional[datetime]) -> Optional[DateRange]:
    if start is None and end is None:
        return None
    try:
        return DateRange(start=start, end=end)
    except PydanticValidationError as e:
        raise ValidationError("Invalid date range", context={"errors": str(e)}) from e


def _parse_types(types: Optional[str]) -> Optional[List[LexicalDocumentType]]:
    if not types:
        return None
    parsed = []
    for value in (t.strip() for t in types.split(",")):
        if not value:
            continue
        try:
            parsed.append(LexicalDocumentType(value))
        except ValueError as e:
            raise ValidationError(
                f"Unknown result type: {value}",
                context={"allowed": [t.value for t in LexicalDocumentType]},
            ) from e
    return parsed or None


def _scored_chunk(result: ScoredChunk) -> dict:
    body = result.chunk.model_dump(mode="json", exclude={"embedding"})
    body["similarity"] = result.similarity
    return body


def _error_response(e: Exception, event: str) -> JSONResponse:
    if isinstance(e, AppException):
        logger.warning(event, error_code=e.error_code)
        return JSONResponse(status_code=e.http_status, content=e.to_dict())
    error_response = handle_error(e, scope=LogScope.API)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_response,
    )


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------

@app.get(APIEndpoints.HEALTH)
def health_check() -> JSONResponse:
    """Health check endpoint."""
    try:
        logger.debug("health_check_requested")
        return JSONResponse(
            content={
                "status": "healthy",
                "environment": settings.environment,
                "embed_provider": settings.embed_provider,
                **get_di_container().describe_providers(),
            }
        )
    except Exception as e:
        logger.error("health_check_failed", error=str(e))
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unhealthy", "error": str(e)},
        )


# ======================================================================
# Chats
# ======================================================================

@app.post(APIEndpoints.CHATS)
def create_chat(request: Request, body: CreateChatRequest) -> JSONResponse:
    try:
        user_id, organization_id = _identity(request)
        session = get_di_container().get_conversation_manager().create_chat(
            organization_id=organization_id,
            user_id=user_id,
            meeting_id=body.meeting_id,
            title=body.title,
        )
        return JSONResponse(
            status_code=status.HTTP_201_CREATED,
            content=session.model_dump(mode="json"),
        )
    except Exception as e:
        return _error_response(e, "create_chat_error")


@app.get(APIEndpoints.CHATS)
def list_chats(
    request: Request,
    meeting_id: Optional[str] = None,
    limit: int = 20,
) -> JSONResponse:
    try:
        user_id, organization_id = _identity(request)
        chats = get_di_container().get_conversation_manager().get_user_chats(
            user_id, organization_id, meeting_id=meeting_id, limit=limit
        )
        return JSONResponse(content=[c.model_dump(mode="json") for c in chats])
    except Exception as e:
        return _error_response(e, "list_chats_error")


@app.get(APIEndpoints.CHAT)
def get_chat(request: Request, chat_id: str) -> JSONResponse:
    try:
        user_id, _ = _identity(request)
        session, messages = get_di_container().get_conversation_manager().get_chat_history(
            chat_id, user_id
        )
        return JSONResponse(
            content={
                "chat": session.model_dump(mode="json"),
                "messages": [m.model_dump(mode="json") for m in messages],
            }
        )
    except Exception as e:
        return _error_response(e, "get_chat_error")


@app.delete(APIEndpoints.CHAT)
def delete_chat(request: Request, chat_id: str) -> JSONResponse:
    try:
        user_id, _ = _identity(request)
        get_di_container().get_conversation_manager().delete_chat(chat_id, user_id)
        return JSONResponse(content={"deleted": True, "chat_id": chat_id})
    except Exception as e:
        return _error_response(e, "delete_chat_error")


@app.post(APIEndpoints.CHAT_MESSAGES)
@limiter.limit(settings.rate_limit)
def send_message(request: Request, chat_id: str, body: SendMessageRequest) -> JSONResponse:
    """Grounded answer with citations and follow-up suggestions."""
    try:
        user_id, organization_id = _identity(request)
        response = get_di_container().get_conversation_manager().send_message(
            chat_id=chat_id,
            user_id=user_id,
            organization_id=organization_id,
            message=body.message,
            meeting_id=body.meeting_id,
        )
        return JSONResponse(content=response.model_dump(mode="json"))
    except Exception as e:
        return _error_response(e, "send_message_error")


# ======================================================================
# Search
# ======================================================================

@app.post(APIEndpoints.SEARCH_SEMANTIC)
@limiter.limit(settings.rate_limit)
def semantic_search(request: Request, body: SemanticSearchRequest) -> JSONResponse:
    try:
        _, organization_id = _identity(request)
        retriever = get_di_container().get_semantic_retriever()
        scope = InputValidator.validate_scope(organization_id, meeting_id=body.meeting_id)
        results = retriever.search_similar(body.query, scope, body.limit, body.threshold)
        return JSONResponse(content=[_scored_chunk(r) for r in results])
    except Exception as e:
        return _error_response(e, "semantic_search_error")


@app.post(APIEndpoints.SEARCH_CROSS_MEETING)
@limiter.limit(settings.rate_limit)
def cross_meeting_search(request: Request, body: CrossMeetingSearchRequest) -> JSONResponse:
    try:
        _, organization_id = _identity(request)
        results = get_di_container().get_semantic_retriever().cross_meeting_search(
            organization_id,
            body.query,
            meeting_ids=body.meeting_ids,
            limit=body.limit,
            threshold=body.threshold,
        )
        return JSONResponse(content=[_scored_chunk(r) for r in results])
    except Exception as e:
        return _error_response(e, "cross_meeting_search_error")


@app.get(APIEndpoints.SEARCH_LEXICAL)
@limiter.limit(settings.rate_limit)
def lexical_search(
    request: Request,
    q: str = "",
    types: Optional[str] = None,
    meeting_id: Optional[str] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    limit: int = 10,
) -> JSONResponse:
    """Keyword search; ``types`` is a comma-separated list of result types."""
    try:
        _, organization_id = _identity(request)
        scope = InputValidator.validate_scope(organization_id, meeting_id=meeting_id)
        results = get_di_container().get_lexical_retriever().search_text(
            q,
            scope,
            limit=limit,
            date_range=_date_range(start_date, end_date),
            types=_parse_types(types),
        )
        return JSONResponse(content=[r.model_dump(mode="json") for r in results])
    except Exception as e:
        return _error_response(e, "lexical_search_error")


@app.post(APIEndpoints.SEARCH_HYBRID)
@limiter.limit(settings.rate_limit)
def hybrid_search(request: Request, body: HybridSearchRequest) -> JSONResponse:
    try:
        _, organization_id = _identity(request)
        results = get_di_container().get_hybrid_search_service().hybrid_search(
            organization_id,
            body.query,
            limit=body.limit,
            date_range=_date_range(body.start_date, body.end_date),
            meeting_ids=body.meeting_ids,
        )
        return JSONResponse(content=[r.model_dump(mode="json") for r in results])
    except Exception as e:
        return _error_response(e, "hybrid_search_error")


# ======================================================================
# Meetings and index
# ======================================================================

@app.get(APIEndpoints.MEETING_SUGGESTIONS)
def meeting_suggestions(request: Request, meeting_id: str) -> JSONResponse:
    try:
        _, organization_id = _identity(request)
        suggestions = get_di_container().get_conversation_manager().generate_meeting_suggestions(
            organization_id, meeting_id
        )
        return JSONResponse(content={"meeting_id": meeting_id, "suggestions": suggestions})
    except Exception as e:
        return _error_response(e, "meeting_suggestions_error")


@app.post(APIEndpoints.MEETING_REINDEX)
def reindex_meeting(request: Request, meeting_id: str) -> JSONResponse:
    try:
        _, organization_id = _identity(request)
        report = get_di_container().get_indexing_service().reindex_meeting(
            meeting_id, organization_id=organization_id
        )
        return JSONResponse(content=report.model_dump(mode="json"))
    except Exception as e:
        return _error_response(e, "reindex_error")


@app.delete(APIEndpoints.MEETING_INDEX)
def delete_meeting_index(request: Request, meeting_id: str) -> JSONResponse:
    try:
        _, organization_id = _identity(request)
        removed = get_di_container().get_indexing_service().delete_meeting(
            meeting_id, organization_id=organization_id
        )
        return JSONResponse(content={"meeting_id": meeting_id, "chunks_removed": removed})
    except Exception as e:
        return _error_response(e, "delete_index_error")


@app.get(APIEndpoints.INDEX_STATS)
def index_stats(request: Request) -> JSONResponse:
    try:
        _, organization_id = _identity(request)
        stats = get_di_container().get_indexing_service().get_stats(organization_id)
        return JSONResponse(content=stats.model_dump(mode="json"))
    except Exception as e:
        return _error_response(e, "index_stats_error")


if __name__ == "__main__":
    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )
