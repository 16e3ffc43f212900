"""Error taxonomy for the brand fact pipeline.

Validation errors (``InvalidInputError``, ``InvalidUrlError``) are raised
before any network call and also subclass ``ValueError``. ``ApiError`` and
``NoFactsFoundError`` are the only failures a caller sees from fact
generation. ``BrandNameExtractionError`` never leaves ``core.facts``.
"""

from __future__ import annotations


class BrandFactsError(Exception):
    """Base class for every error raised by the fact pipeline."""


class InvalidInputError(BrandFactsError, ValueError):
    """A required field is missing or blank."""


class InvalidUrlError(BrandFactsError, ValueError):
    """The URL is malformed or does not use http/https."""


class BrandNameExtractionError(BrandFactsError):
    """The brand-name inference sub-call failed."""


class NoFactsFoundError(BrandFactsError):
    """The model answered with a well-formed but empty fact list."""


class ApiError(BrandFactsError):
    """Transport, provider, or schema failure while generating facts."""
