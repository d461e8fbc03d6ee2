from __future__ import annotations
"""Boundary validation helpers.

Every helper either returns the cleaned value (to enable inline usage) or
raises ValidationError, which the app renders as a 400 envelope.
"""
import re
from typing import Any, Dict, Iterable, List

from rbac_admin.constants.permissions import NAME_PATTERN, GENDERS
from rbac_admin.utils.errors import ValidationError
from rbac_admin.utils.permissions import normalize_name

_NAME_RE = re.compile(NAME_PATTERN)
_EMAIL_RE = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')

MIN_PASSWORD_LENGTH = 6


def json_body(request) -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError('JSON object body required')
    return data


def require_fields(data: Dict[str, Any], *fields: str) -> None:
    missing = [f for f in fields if data.get(f) in (None, '')]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")


def validate_entity_name(raw: Any, label: str = 'name') -> str:
    """Lowercase canonical form of a role/permission name, matching NAME_PATTERN."""
    if not isinstance(raw, str):
        raise ValidationError(f'{label} is required')
    name = normalize_name(raw)
    if not name:
        raise ValidationError(f'{label} is required')
    if not _NAME_RE.match(name):
        raise ValidationError(f'{label} may only contain lowercase letters, digits and underscores')
    return name


def validate_text(raw: Any, label: str, allow_empty: bool = True) -> str:
    """Stripped string value; None reads as empty."""
    if raw is None:
        raw = ''
    if not isinstance(raw, str):
        raise ValidationError(f'{label} must be a string')
    text = raw.strip()
    if not text and not allow_empty:
        raise ValidationError(f'{label} cannot be empty')
    return text


def validate_password(raw: Any) -> str:
    if not isinstance(raw, str) or len(raw) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f'password must be at least {MIN_PASSWORD_LENGTH} characters')
    return raw


def validate_gender(raw: Any) -> str:
    gender = normalize_name(raw) if isinstance(raw, str) else ''
    if gender not in GENDERS:
        raise ValidationError(f"gender must be one of: {', '.join(GENDERS)}")
    return gender


def validate_email(raw: Any) -> str:
    email = raw.strip().lower() if isinstance(raw, str) else ''
    if not _EMAIL_RE.match(email):
        raise ValidationError('email is invalid')
    return email


def validate_name_list(raw: Any, label: str = 'permissions') -> List[str]:
    if not isinstance(raw, list) or any(not isinstance(x, str) for x in raw):
        raise ValidationError(f'{label} must be a list of names')
    seen: List[str] = []
    for item in raw:
        name = normalize_name(item)
        if name and name not in seen:
            seen.append(name)
    return seen


def ensure_known(requested: Iterable[str], found: Iterable[str], label: str) -> None:
    missing = set(requested) - set(found)
    if missing:
        raise ValidationError(f'Unknown {label}: {sorted(missing)}')


__all__ = [
    'json_body', 'require_fields', 'validate_entity_name', 'validate_text', 'validate_password', 'validate_gender', 'validate_email',
    'validate_name_list', 'ensure_known',
]
