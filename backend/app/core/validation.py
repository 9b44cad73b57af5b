from __future__ import annotations

import re

from app.core.config import is_valid_file_size, is_valid_file_type

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
# Server side requires at least six trailing digits/separators.
PHONE_RE = re.compile(r"^[+]?[(]?[0-9]{1,4}[)]?[-\s./0-9]{6,}$")
# Browser side is looser and checks the length separately.
CLIENT_PHONE_RE = re.compile(r"^[+]?[(]?[0-9]{1,4}[)]?[-\s./0-9]*$")
_WHITESPACE_RE = re.compile(r"\s")

MISSING_FIELDS = "Missing required fields"
INVALID_EMAIL = "Invalid email format"
INVALID_PHONE = "Invalid phone format"
CV_REQUIRED = "CV file is required"
CV_TOO_LARGE = "File size exceeds 10MB limit"
CV_INVALID_TYPE = "Invalid file type. Only PDF, DOC, DOCX allowed"
INVALID_TENANT = "Invalid tenant"


def is_valid_email(email: str | None) -> bool:
    return bool(email) and EMAIL_RE.match(email) is not None


def is_valid_phone(phone: str | None) -> bool:
    if not phone:
        return False
    return PHONE_RE.match(_WHITESPACE_RE.sub("", phone)) is not None


def validate_fields(name: str | None, email: str | None, phone: str | None) -> str | None:
    if not (name or "").strip() or not (email or "").strip() or not (phone or "").strip():
        return MISSING_FIELDS
    if not is_valid_email(email):
        return INVALID_EMAIL
    if not is_valid_phone(phone):
        return INVALID_PHONE
    return None


def validate_cv(filename: str | None, content_type: str | None, size: int | None) -> str | None:
    if not (filename or "").strip() or size is None:
        return CV_REQUIRED
    if not is_valid_file_size(size):
        return CV_TOO_LARGE
    if not is_valid_file_type(filename, content_type):
        return CV_INVALID_TYPE
    return None
