"""Parsing and validation of raw command arguments."""

from __future__ import annotations

import datetime as dt
import re

from .models import VALID_PRIORITIES, TaskValidationError

TASK_NAME_RE = re.compile(r"^\S+$")
TAG_RE = re.compile(r"^[A-Za-z0-9]+$")
LIST_NAME_RE = re.compile(r"^[A-Za-z]+$")
ID_RE = re.compile(r"^\d+$")
DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def is_id_token(token: str) -> bool:
    return bool(ID_RE.fullmatch(token))


def parse_id(token: str) -> int:
    if not is_id_token(token) or int(token) < 1:
        raise TaskValidationError(f"Invalid task id: {token}")
    return int(token)


def validate_name(token: str) -> str:
    if not TASK_NAME_RE.fullmatch(token):
        raise TaskValidationError("task name must not contain whitespace")
    return token


def validate_tag(token: str) -> str:
    if not TAG_RE.fullmatch(token):
        raise TaskValidationError(f"Invalid tag: {token} (letters and digits only)")
    return token


def validate_list_name(token: str) -> str:
    if not LIST_NAME_RE.fullmatch(token):
        raise TaskValidationError(f"Invalid list name: {token} (letters only)")
    return token


def parse_priority(token: str) -> str:
    if token not in VALID_PRIORITIES:
        raise TaskValidationError(
            f"Invalid priority: {token} (expected one of {', '.join(VALID_PRIORITIES)})"
        )
    return token


def parse_date(token: str) -> dt.date:
    if not DATE_RE.fullmatch(token):
        raise TaskValidationError(f"Invalid date: {token} (expected YYYY-MM-DD)")
    try:
        return dt.date.fromisoformat(token)
    except ValueError as exc:
        raise TaskValidationError(f"Invalid date: {token}") from exc
