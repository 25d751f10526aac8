"""
Input validation and sanitization utilities.
Checks caller-supplied values at the service boundary before any provider call.
"""

from typing import List, Optional
import re

from pydantic import ValidationError as PydanticValidationError

from domain.models import RetrievalScope
from shared_utils.error_handler import ValidationError


_IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_\-:.]{0,127}$")


class InputValidator:
    """Utility class for input validation."""

    @staticmethod
    def validate_non_empty_string(value: str, field_name: str, max_length: Optional[int] = None) -> str:
        """Validate non-empty string.

        Args:
            value: String to validate
            field_name: Name of field for error messages
            max_length: Optional upper bound on the stripped length

        Returns:
            Validated string, stripped

        Raises:
            ValidationError: If validation fails
        """
        if not isinstance(value, str):
            raise ValidationError(f"{field_name} must be a string")

        if not value or not value.strip():
            raise ValidationError(f"{field_name} cannot be empty")

        stripped = value.strip()
        if max_length is not None and len(stripped) > max_length:
            raise ValidationError(
                f"{field_name} too long (max {max_length} characters)",
                context={"length": len(stripped)},
            )
        return stripped

    @staticmethod
    def validate_positive_int(
        value: int,
        field_name: str,
        allow_zero: bool = False,
        maximum: Optional[int] = None,
    ) -> int:
        """Validate positive integer.

        Args:
            value: Integer to validate
            field_name: Name of field for error messages
            allow_zero: Whether zero is valid
            maximum: Optional inclusive upper bound

        Returns:
            Validated integer

        Raises:
            ValidationError: If validation fails
        """
        if not isinstance(value, int) or isinstance(value, bool):
            raise ValidationError(f"{field_name} must be an integer")

        min_val = 0 if allow_zero else 1
        if value < min_val:
            raise ValidationError(f"{field_name} must be >= {min_val}")
        if maximum is not None and value > maximum:
            raise ValidationError(f"{field_name} must be <= {maximum}")

        return value

    @staticmethod
    def validate_identifier(value: str, field_name: str) -> str:
        """Validate an opaque id (meeting, chat, organization, user).

        Ids end up inside storage filter expressions, so only a
        conservative character set is accepted.
        """
        if not isinstance(value, str) or not _IDENTIFIER_PATTERN.match(value):
            raise ValidationError(f"Invalid {field_name}", context={"field": field_name})
        return value

    @staticmethod
    def validate_threshold(value: float, field_name: str = "threshold") -> float:
        """Validate a similarity threshold in [-1, 1]."""
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            raise ValidationError(f"{field_name} must be a number")
        if value < -1.0 or value > 1.0:
            raise ValidationError(f"{field_name} must be between -1 and 1")
        return float(value)

    @staticmethod
    def validate_scope(
        organization_id: str,
        meeting_id: Optional[str] = None,
        meeting_ids: Optional[List[str]] = None,
    ) -> RetrievalScope:
        """Build the tenant scope for a retrieval or generation call.

        Raises:
            ValidationError: On a missing organization, malformed ids, or
                a scope naming both one meeting and a meeting subset.
        """
        InputValidator.validate_identifier(organization_id, "organization_id")
        if meeting_id is not None:
            InputValidator.validate_identifier(meeting_id, "meeting_id")
        if meeting_ids is not None:
            meeting_ids = [InputValidator.validate_identifier(m, "meeting_id") for m in meeting_ids]
        try:
            return RetrievalScope(
                organization_id=organization_id,
                meeting_id=meeting_id,
                meeting_ids=meeting_ids,
            )
        except PydanticValidationError as e:
            raise ValidationError("Invalid retrieval scope", context={"errors": str(e)}) from e
