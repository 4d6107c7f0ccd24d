# core/sanitizers.py
"""
Input sanitization and validation for team formation.

All user-generated content should pass through these functions
before being stored or rendered.
"""
import re
from typing import Optional

import bleach


MAX_ROLES = 20
MAX_ROLE_LENGTH = 50


class ValidationError(Exception):
    """Raised when validation fails."""
    pass


def sanitize_text(text: Optional[str], max_length: Optional[int] = None, strip: bool = True) -> str:
    """
    Sanitize plain text input.

    - Strips leading/trailing whitespace
    - Removes control characters
    - Enforces maximum length
    - Returns empty string for None input
    """
    if text is None:
        return ""

    if strip:
        text = text.strip()

    # Remove control characters except newlines and tabs
    text = re.sub(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]', '', text)

    if max_length and len(text) > max_length:
        text = text[:max_length]

    return text


def strip_html(text: Optional[str], max_length: Optional[int] = None) -> str:
    """
    Remove every HTML tag; team fields are rendered as plain text.
    """
    if text is None:
        return ""

    clean = bleach.clean(text.strip(), tags=[], attributes={}, strip=True)
    return sanitize_text(clean, max_length=max_length)


def sanitize_name(name: Optional[str], max_length: int = 100) -> str:
    """
    Sanitize team names.

    - No HTML
    - Single line (no newlines)
    """
    text = strip_html(name, max_length=max_length)
    text = re.sub(r'[\r\n]+', ' ', text)
    text = re.sub(r'\s+', ' ', text)
    return text


def sanitize_bio(bio: Optional[str]) -> str:
    return strip_html(bio, max_length=5000)


def normalize_roles(value) -> list:
    """
    Roles arrive either as a JSON list or as a comma-separated string.
    Both become a list of trimmed, non-empty, single-line strings.
    """
    if value is None:
        return []

    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = value
    else:
        raise ValidationError("Roles must be a list of strings or a comma-separated string")

    roles = []
    for item in items:
        if not isinstance(item, str):
            raise ValidationError("Each role must be a string")
        role = sanitize_name(item, max_length=MAX_ROLE_LENGTH)
        if role:
            roles.append(role)

    if len(roles) > MAX_ROLES:
        raise ValidationError(f"At most {MAX_ROLES} roles can be listed")

    return roles


def validate_url(url: Optional[str], required: bool = False) -> Optional[str]:
    """
    Validate and sanitize URLs.
    """
    if not url:
        if required:
            raise ValidationError("URL is required")
        return None

    url = sanitize_text(url, max_length=2048)

    # Basic URL pattern
    pattern = r'^https?://[^\s<>"{}|\\^`\[\]]+$'
    if not re.match(pattern, url):
        raise ValidationError("Invalid URL format")

    return url
