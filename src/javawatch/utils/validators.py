"""
URL Validation Utilities

Validation and normalization of the source page URL given on the command
line or through the environment.
"""

import logging
import re
from typing import Optional, Tuple
from urllib.parse import urlparse, urlunparse


class URLValidator:
    """
    Validates and normalizes source page URLs.
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)

        self.domain_pattern = re.compile(
            r'^[a-zA-Z0-9]([a-zA-Z0-9\-]{0,61}[a-zA-Z0-9])?(\.[a-zA-Z0-9]([a-zA-Z0-9\-]{0,61}[a-zA-Z0-9])?)*$'
        )

    def validate_and_normalize(self, url: str) -> Tuple[bool, str, str]:
        """
        Validate and normalize a URL.

        Args:
            url: The URL to validate and normalize

        Returns:
            Tuple of (is_valid, normalized_url, error_message)
        """
        if not url or not isinstance(url, str):
            return False, "", "URL cannot be empty"

        url = url.strip()

        try:
            parsed = urlparse(url)

            if parsed.scheme:
                if parsed.scheme.lower() not in ['http', 'https']:
                    return False, "", "URL must use HTTP or HTTPS protocol"
            else:
                parsed = urlparse('https://' + url)

            if not parsed.netloc:
                return False, "", "URL must have a valid domain"

            domain = parsed.hostname or ""
            if not self.domain_pattern.match(domain):
                return False, "", "Invalid domain format"

            return True, self._normalize_url(parsed), ""

        except ValueError as e:
            return False, "", f"URL validation error: {str(e)}"

    def _normalize_url(self, parsed_url) -> str:
        """Lower-case scheme and host, default the path to '/', drop the fragment."""
        return urlunparse((
            parsed_url.scheme.lower(),
            parsed_url.netloc.lower(),
            parsed_url.path or '/',
            parsed_url.params,
            parsed_url.query,
            ''
        ))


_validator_instance: Optional[URLValidator] = None


def get_validator() -> URLValidator:
    """Return the shared URLValidator instance."""
    global _validator_instance
    if _validator_instance is None:
        _validator_instance = URLValidator()
    return _validator_instance


def validate_url(url: str) -> Tuple[bool, str, str]:
    """
    Validate and normalize a URL.

    Returns:
        Tuple of (is_valid, normalized_url, error_message)
    """
    return get_validator().validate_and_normalize(url)
