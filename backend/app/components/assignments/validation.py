"""Validation of batch-assignment requests."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from .errors import AssignmentValidationError
from .repository import parse_timestamp

# assignments.survey_id is String(36)
SURVEY_ID_MAX_LENGTH = 36


@dataclass(frozen=True)
class ValidatedBatchRequest:
    user_ids: List[str]
    assessment_ids: List[str]
    expires: datetime
    target_id: Optional[str] = None
    custom_fields: Optional[Dict[str, List[str]]] = None
    whitelabel: bool = False
    job_id: Optional[str] = None
    survey_id: Optional[str] = None
    reminder: bool = False
    first_reminder_date: Optional[datetime] = None
    reminder_frequency: Optional[str] = None


def _id_list(payload: Dict[str, Any], key: str) -> List[str]:
    value = payload.get(key)
    if not value or not isinstance(value, list):
        raise AssignmentValidationError(f"{key} is required and must be a non-empty array")
    ids: List[str] = []
    for item in value:
        if not isinstance(item, str) or not item.strip():
            raise AssignmentValidationError(f"{key} must contain only non-empty string ids")
        item = item.strip()
        if item not in ids:
            ids.append(item)
    return ids


def _optional_str(payload: Dict[str, Any], key: str) -> Optional[str]:
    value = payload.get(key)
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise AssignmentValidationError(f"{key} must be a string")
    return value.strip() or None


def _optional_bool(payload: Dict[str, Any], key: str) -> bool:
    value = payload.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise AssignmentValidationError(f"{key} must be a boolean")
    return value


def _custom_fields(value: Any) -> Optional[Dict[str, List[str]]]:
    if value is None:
        return None
    if not isinstance(value, dict):
        raise AssignmentValidationError("custom_fields must be an object")
    normalized: Dict[str, List[str]] = {}
    for key, items in value.items():
        if not isinstance(items, list) or not all(isinstance(i, str) for i in items):
            raise AssignmentValidationError(f"custom_fields.{key} must be an array of strings")
        normalized[str(key)] = list(items)
    return normalized or None


def validate_batch_request(payload: Any) -> ValidatedBatchRequest:
    """Check and normalize a raw batch-create body. Pure; raises AssignmentValidationError."""
    if not isinstance(payload, dict):
        raise AssignmentValidationError("Request body must be a JSON object")

    user_ids = _id_list(payload, "user_ids")
    assessment_ids = _id_list(payload, "assessment_ids")

    raw_expires = payload.get("expires")
    if not raw_expires:
        raise AssignmentValidationError("expires is required")
    expires = parse_timestamp(raw_expires)
    if expires is None:
        raise AssignmentValidationError("expires must be a valid date")

    first_reminder_date = None
    if payload.get("first_reminder_date"):
        first_reminder_date = parse_timestamp(payload["first_reminder_date"])
        if first_reminder_date is None:
            raise AssignmentValidationError("first_reminder_date must be a valid date")

    survey_id = _optional_str(payload, "survey_id")
    if survey_id is not None and len(survey_id) > SURVEY_ID_MAX_LENGTH:
        raise AssignmentValidationError(f"survey_id must be at most {SURVEY_ID_MAX_LENGTH} characters")

    reminder = _optional_bool(payload, "reminder")
    return ValidatedBatchRequest(
        user_ids=user_ids,
        assessment_ids=assessment_ids,
        expires=expires,
        target_id=_optional_str(payload, "target_id"),
        custom_fields=_custom_fields(payload.get("custom_fields")),
        whitelabel=_optional_bool(payload, "whitelabel"),
        job_id=_optional_str(payload, "job_id"),
        survey_id=survey_id,
        reminder=reminder,
        first_reminder_date=first_reminder_date,
        reminder_frequency=_optional_str(payload, "reminder_frequency") if reminder else None,
    )
