"""Brand form input and inline validation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

NAME_REQUIRED = "Brand name is required"
URL_REQUIRED = "URL is required"
URL_INVALID = "Please enter a valid URL (e.g., https://example.com)"


def is_valid_url(url: str) -> bool:
    """Return True if *url* is an absolute URL with a scheme and a host."""
    try:
        parsed = urlparse(url)
        return bool(parsed.scheme and parsed.netloc and parsed.hostname)
    except ValueError:
        return False


@dataclass
class BrandForm:
    """The two fields submitted by the user."""

    name: str = ""
    url: str = ""

    @classmethod
    def from_mapping(cls, data) -> BrandForm:
        """Build a form from request form data (or any mapping)."""
        return cls(name=data.get("name") or "", url=data.get("url") or "")

    def validate(self) -> dict[str, str]:
        """Return a ``field -> message`` dict; empty when the form is valid."""
        errors: dict[str, str] = {}

        if not self.name.strip():
            errors["name"] = NAME_REQUIRED

        url = self.url.strip()
        if not url:
            errors["url"] = URL_REQUIRED
        elif not is_valid_url(url):
            errors["url"] = URL_INVALID

        if errors:
            logger.debug("Form rejected: %s", errors)
        return errors
