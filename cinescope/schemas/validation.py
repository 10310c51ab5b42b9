"""Input validation for free-text search"""

from typing import Optional
import re

from cinescope.exceptions import ValidationError

MAX_QUERY_LENGTH = 200

DANGEROUS_PATTERNS = [
    r'<script[^>]*>',
    r'javascript:',
    r'on\w+\s*=',
    r'<iframe',
]


def validate_no_script(value: str) -> str:
    """Block common XSS patterns"""
    if not value:
        return value

    for pattern in DANGEROUS_PATTERNS:
        if re.search(pattern, value, re.IGNORECASE):
            raise ValueError("Invalid characters detected")

    return value


def clean_search_query(query: Optional[str]) -> str:
    """
    Strip and validate a search query.

    Raises:
        ValidationError: query is missing, blank, too long or looks like markup
    """
    if query is None or not query.strip():
        raise ValidationError("Search query is required")
    query = query.strip()
    if len(query) > MAX_QUERY_LENGTH:
        raise ValidationError(f"Search query cannot be longer than {MAX_QUERY_LENGTH} characters")
    try:
        return validate_no_script(query)
    except ValueError as e:
        raise ValidationError(str(e)) from e
