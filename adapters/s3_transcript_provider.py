"""
S3-backed transcript provider adapter.

Implements TranscriptProviderPort using boto3. Each meeting is one JSON
document at ``{bucket}/{prefix}/{meeting_id}.json`` shaped like
MeetingTranscript.
"""

from __future__ import annotations

import json
from typing import Optional

import boto3
from botocore.exceptions import ClientError
from pydantic import ValidationError as PydanticValidationError

from domain.models import MeetingTranscript
from shared_utils.logging_utils import get_scoped_logger
from shared_utils.constants import LogScope
from shared_utils.error_handler import ExternalServiceError


logger = get_scoped_logger(LogScope.ADAPTER)

_MISSING_CODES = {"NoSuchKey", "404", "NotFound"}


class S3TranscriptProviderAdapter:
    """Amazon S3 implementation of TranscriptProviderPort."""

    def __init__(
        self,
        bucket: str,
        prefix: str = "transcripts",
        region: str = "eu-west-2",
        endpoint_url: str = "",
        s3_client: Optional[object] = None,
    ) -> None:
        self.bucket = bucket
        self.prefix = prefix.strip("/")
        client_kwargs: dict = {"region_name": region}
        if endpoint_url:
            client_kwargs["endpoint_url"] = endpoint_url
        self._s3 = s3_client or boto3.client("s3", **client_kwargs)

    def _key(self, meeting_id: str) -> str:
        if self.prefix:
            return f"{self.prefix}/{meeting_id}.json"
        return f"{meeting_id}.json"

    def get_transcript(self, meeting_id: str) -> Optional[MeetingTranscript]:
        key = self._key(meeting_id)
        try:
            response = self._s3.get_object(Bucket=self.bucket, Key=key)
            data: bytes = response["Body"].read()
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code", "")
            if code in _MISSING_CODES:
                logger.info("transcript_not_found", meeting_id=meeting_id, key=key)
                return None
            logger.error("s3_transcript_download_failed", meeting_id=meeting_id, error=str(exc))
            raise ExternalServiceError("S3", f"Failed to download transcript: {exc}") from exc

        try:
            payload = json.loads(data)
            payload.setdefault("meeting_id", meeting_id)
            transcript = MeetingTranscript(**payload)
        except (ValueError, TypeError, PydanticValidationError) as exc:
            logger.error("s3_transcript_malformed", meeting_id=meeting_id, error=str(exc))
            raise ExternalServiceError("S3", f"Malformed transcript document: {exc}") from exc

        logger.info(
            "transcript_loaded",
            meeting_id=meeting_id,
            segments=len(transcript.segments),
            size_bytes=len(data),
        )
        return transcript
