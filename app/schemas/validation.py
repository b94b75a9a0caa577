"""Input validation helpers with XSS protection"""

from pydantic import BaseModel, Field, field_validator
import re
import bleach

# Allowed HTML tags for user input
ALLOWED_TAGS = ['b', 'i', 'u', 'em', 'strong', 'p', 'br']


class SafeStringMixin:
    """Mixin for XSS-safe string validation"""

    @staticmethod
    def sanitize_html(value: str) -> str:
        """Remove dangerous HTML/JavaScript"""
        if not value:
            return value
        return bleach.clean(value, tags=ALLOWED_TAGS, strip=True)

    @staticmethod
    def validate_no_script(value: str) -> str:
        """Block common XSS patterns"""
        if not value:
            return value

        dangerous_patterns = [
            r'<script[^>]*>',
            r'javascript:',
            r'on\w+\s*=',
            r'<iframe',
        ]

        for pattern in dangerous_patterns:
            if re.search(pattern, value, re.IGNORECASE):
                raise ValueError("Invalid characters detected")

        return value


class SearchQuerySchema(BaseModel, SafeStringMixin):
    """Validated search query"""
    query: str = Field(..., min_length=1, max_length=200)

    @field_validator('query')
    @classmethod
    def clean_query(cls, v):
        v = cls.validate_no_script(v.strip())
        return cls.sanitize_html(v)


# Utility validation functions
def validate_pagination(page: int, limit: int) -> tuple[int, int]:
    """Validate pagination parameters"""
    page = max(1, min(page, 10000))
    limit = max(1, min(limit, 100))
    return page, limit


def validate_sort_field(field: str, allowed_fields: list[str]) -> str:
    """Validate sort field against whitelist"""
    if field not in allowed_fields:
        raise ValueError(f"Invalid sort field. Allowed: {', '.join(allowed_fields)}")
    return field
