"""Input validation helpers with XSS protection"""

from typing import Optional
import re
import bleach

# Allowed HTML tags for user input
ALLOWED_TAGS = ['b', 'i', 'u', 'em', 'strong', 'p', 'br']

DANGEROUS_PATTERNS = [
    r'<script[^>]*>',
    r'javascript:',
    r'on\w+\s*=',
    r'<iframe',
]


class SafeStringMixin:
    """Mixin for XSS-safe string validation"""

    @staticmethod
    def sanitize_html(value: Optional[str]) -> Optional[str]:
        """Remove dangerous HTML/JavaScript"""
        if not value:
            return value
        return bleach.clean(value, tags=ALLOWED_TAGS, strip=True)

    @staticmethod
    def strip_html(value: Optional[str]) -> Optional[str]:
        """Plain text only, for names and titles"""
        if not value:
            return value
        return bleach.clean(value, tags=[], strip=True).strip()

    @staticmethod
    def validate_no_script(value: Optional[str]) -> Optional[str]:
        """Block common XSS patterns"""
        if not value:
            return value

        for pattern in DANGEROUS_PATTERNS:
            if re.search(pattern, value, re.IGNORECASE):
                raise ValueError("Invalid characters detected")

        return value


def validate_pagination(page: int, max_page: int = 500) -> int:
    """Clamp a TMDB page number into the range TMDB serves"""
    return max(1, min(page, max_page))
