"""
DynamoDB-backed chat store adapter.

Implements ChatStorePort using boto3 on a single table:

    chat_id (partition key) | sort_key (sort key)
    ------------------------+------------------------------------
    <chat id>               | SESSION                  session row
    <chat id>               | MSG#<iso created_at>#<id> message rows

Messages sort by creation time within the partition; deleting a session
removes every row of its partition.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Dict, List, Optional

import boto3
from boto3.dynamodb.conditions import Attr, Key
from botocore.exceptions import ClientError

from domain.models import ChatMessage, ChatRole, ChatSession, ChatStatus, Citation
from shared_utils.logging_utils import get_scoped_logger
from shared_utils.constants import LogScope
from shared_utils.error_handler import ExternalServiceError, NotFoundError


logger = get_scoped_logger(LogScope.ADAPTER)

SESSION_SORT_KEY = "SESSION"
MESSAGE_PREFIX = "MSG#"


class DynamoChatStoreAdapter:
    """Amazon DynamoDB implementation of ChatStorePort."""

    def __init__(
        self,
        table_name: str,
        region: str = "eu-west-2",
        endpoint_url: Optional[str] = None,
        dynamodb_resource: Optional[object] = None,
    ) -> None:
        self._table_name = table_name
        resource_kwargs: dict = {"region_name": region}
        if endpoint_url:
            resource_kwargs["endpoint_url"] = endpoint_url
        self._dynamo = dynamodb_resource or boto3.resource(
            "dynamodb", **resource_kwargs
        )
        self._table = self._dynamo.Table(table_name)

    # ------------------------------------------------------------------
    # ChatStorePort implementation
    # ------------------------------------------------------------------

    def create_session(self, session: ChatSession) -> None:
        try:
            self._table.put_item(Item=self._session_to_item(session))
            logger.info("dynamo_chat_created", chat_id=session.id)
        except ClientError as exc:
            logger.error("dynamo_chat_create_failed", chat_id=session.id, error=str(exc))
            raise ExternalServiceError(
                "DynamoDB", f"Failed to create chat session: {exc}"
            ) from exc

    def get_session(self, chat_id: str, user_id: str) -> Optional[ChatSession]:
        try:
            response = self._table.get_item(
                Key={"chat_id": chat_id, "sort_key": SESSION_SORT_KEY}
            )
        except ClientError as exc:
            logger.error("dynamo_chat_get_failed", chat_id=chat_id, error=str(exc))
            raise ExternalServiceError(
                "DynamoDB", f"Failed to get chat session: {exc}"
            ) from exc

        item = response.get("Item")
        if item is None or item.get("user_id") != user_id:
            return None
        return self._session_from_item(item)

    def list_sessions(
        self,
        user_id: str,
        organization_id: str,
        meeting_id: Optional[str] = None,
        limit: int = 20,
    ) -> List[ChatSession]:
        """Scan with filters (acceptable at current scale; a user_id GSI replaces this later)."""
        filter_expr = (
            Attr("sort_key").eq(SESSION_SORT_KEY)
            & Attr("user_id").eq(user_id)
            & Attr("organization_id").eq(organization_id)
        )
        if meeting_id is not None:
            filter_expr = filter_expr & Attr("meeting_id").eq(meeting_id)

        try:
            scan_kwargs: Dict[str, Any] = {"FilterExpression": filter_expr}
            items: List[Dict[str, Any]] = []
            while True:
                response = self._table.scan(**scan_kwargs)
                items.extend(response.get("Items", []))
                last_key = response.get("LastEvaluatedKey")
                if last_key is None:
                    break
                scan_kwargs["ExclusiveStartKey"] = last_key
        except ClientError as exc:
            logger.error("dynamo_chat_list_failed", user_id=user_id, error=str(exc))
            raise ExternalServiceError(
                "DynamoDB", f"Failed to list chat sessions: {exc}"
            ) from exc

        sessions = [self._session_from_item(item) for item in items]
        sessions.sort(key=lambda s: s.updated_at, reverse=True)
        return sessions[:limit]

    def append_message(self, message: ChatMessage) -> None:
        # Session row first: a chat deleted elsewhere must not be recreated headless
        try:
            self._table.update_item(
                Key={"chat_id": message.chat_id, "sort_key": SESSION_SORT_KEY},
                UpdateExpression="SET #status = :s, updated_at = :t",
                ConditionExpression=Attr("chat_id").exists(),
                ExpressionAttributeNames={"#status": "status"},
                ExpressionAttributeValues={
                    ":s": ChatStatus.ACTIVE.value,
                    ":t": message.created_at.isoformat(),
                },
            )
            self._table.put_item(Item=self._message_to_item(message))
            logger.info(
                "dynamo_message_appended",
                chat_id=message.chat_id,
                role=message.role.value,
            )
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException":
                logger.warning("dynamo_message_chat_missing", chat_id=message.chat_id)
                raise NotFoundError("Chat", message.chat_id) from exc
            logger.error("dynamo_message_append_failed", chat_id=message.chat_id, error=str(exc))
            raise ExternalServiceError(
                "DynamoDB", f"Failed to append message: {exc}"
            ) from exc

    def list_messages(self, chat_id: str) -> List[ChatMessage]:
        items = self._query_partition(
            Key("chat_id").eq(chat_id) & Key("sort_key").begins_with(MESSAGE_PREFIX)
        )
        return [self._message_from_item(item) for item in items]

    def delete_session(self, chat_id: str, user_id: str) -> bool:
        if self.get_session(chat_id, user_id) is None:
            return False

        items = self._query_partition(Key("chat_id").eq(chat_id))
        try:
            with self._table.batch_writer() as batch:
                for item in items:
                    batch.delete_item(Key={"chat_id": item["chat_id"], "sort_key": item["sort_key"]})
        except ClientError as exc:
            logger.error("dynamo_chat_delete_failed", chat_id=chat_id, error=str(exc))
            raise ExternalServiceError(
                "DynamoDB", f"Failed to delete chat session: {exc}"
            ) from exc

        logger.info("dynamo_chat_deleted", chat_id=chat_id, items_deleted=len(items))
        return True

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _query_partition(self, key_condition) -> List[Dict[str, Any]]:
        query_kwargs: Dict[str, Any] = {
            "KeyConditionExpression": key_condition,
            "ScanIndexForward": True,
        }
        items: List[Dict[str, Any]] = []
        try:
            while True:
                response = self._table.query(**query_kwargs)
                items.extend(response.get("Items", []))
                last_key = response.get("LastEvaluatedKey")
                if last_key is None:
                    break
                query_kwargs["ExclusiveStartKey"] = last_key
        except ClientError as exc:
            logger.error("dynamo_chat_query_failed", error=str(exc))
            raise ExternalServiceError(
                "DynamoDB", f"Failed to query chat partition: {exc}"
            ) from exc
        return items

    @staticmethod
    def _session_to_item(session: ChatSession) -> Dict[str, Any]:
        item: Dict[str, Any] = {
            "chat_id": session.id,
            "sort_key": SESSION_SORT_KEY,
            "organization_id": session.organization_id,
            "user_id": session.user_id,
            "title": session.title,
            "status": session.status.value,
            "created_at": session.created_at.isoformat(),
            "updated_at": session.updated_at.isoformat(),
        }
        if session.meeting_id:
            item["meeting_id"] = session.meeting_id
        return item

    @staticmethod
    def _session_from_item(item: Dict[str, Any]) -> ChatSession:
        return ChatSession(
            id=item["chat_id"],
            organization_id=item["organization_id"],
            user_id=item["user_id"],
            meeting_id=item.get("meeting_id"),
            title=item.get("title", ""),
            status=ChatStatus(item.get("status", ChatStatus.CREATED.value)),
            created_at=datetime.fromisoformat(item["created_at"]),
            updated_at=datetime.fromisoformat(item["updated_at"]),
        )

    @staticmethod
    def _message_to_item(message: ChatMessage) -> Dict[str, Any]:
        # Citations hold floats, which DynamoDB only accepts as Decimal; store as JSON
        item: Dict[str, Any] = {
            "chat_id": message.chat_id,
            "sort_key": f"{MESSAGE_PREFIX}{message.created_at.isoformat()}#{message.id}",
            "message_id": message.id,
            "role": message.role.value,
            "content": message.content,
            "citations": json.dumps([c.model_dump() for c in message.citations]),
            "tokens": message.tokens,
            "latency_ms": message.latency_ms,
            "created_at": message.created_at.isoformat(),
        }
        if message.model:
            item["model"] = message.model
        return item

    @staticmethod
    def _message_from_item(item: Dict[str, Any]) -> ChatMessage:
        citations = [Citation(**c) for c in json.loads(item.get("citations") or "[]")]
        return ChatMessage(
            id=item["message_id"],
            chat_id=item["chat_id"],
            role=ChatRole(item["role"]),
            content=item.get("content", ""),
            citations=citations,
            model=item.get("model"),
            tokens=int(item.get("tokens", 0)),
            latency_ms=int(item.get("latency_ms", 0)),
            created_at=datetime.fromisoformat(item["created_at"]),
        )
