"""
Request bodies for the HTTP API.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from shared_utils.constants import Defaults


class CreateChatRequest(BaseModel):
    meeting_id: Optional[str] = None
    title: Optional[str] = None


class SendMessageRequest(BaseModel):
    message: str
    meeting_id: Optional[str] = None


class SemanticSearchRequest(BaseModel):
    query: str
    meeting_id: str
    limit: int = Field(default=Defaults.DEFAULT_SEARCH_LIMIT, ge=1, le=Defaults.MAX_SEARCH_LIMIT)
    threshold: Optional[float] = Field(default=None, ge=-1.0, le=1.0)


class CrossMeetingSearchRequest(BaseModel):
    query: str
    meeting_ids: Optional[List[str]] = None
    limit: int = Field(default=Defaults.DEFAULT_SEARCH_LIMIT, ge=1, le=Defaults.MAX_SEARCH_LIMIT)
    threshold: Optional[float] = Field(default=None, ge=-1.0, le=1.0)


class HybridSearchRequest(BaseModel):
    query: str
    meeting_ids: Optional[List[str]] = None
    limit: int = Field(default=Defaults.DEFAULT_SEARCH_LIMIT, ge=1, le=Defaults.MAX_SEARCH_LIMIT)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
