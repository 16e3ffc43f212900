"""
Brand fact finder.

Asks Claude (with the built-in web_search tool) for a handful of unusual,
lesser-known facts about a brand and validates the structured answer.

Flow
────
1. validate_url(url)
     → fails fast with InvalidInputError / InvalidUrlError, no network call

2. resolve_brand(name, url)                        → ResolvedBrand
     → uses the given name, or asks Claude to infer it from the website;
       an inference failure is logged and the pipeline continues unnamed

3. generate_facts(brand)                           → list[Fact]
     → forced web search, temperature ~0.7, {facts: [{content, source}]}
       schema; empty list → NoFactsFoundError, anything else → ApiError
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional
from urllib.parse import urlparse

from pydantic import ValidationError

from core.errors import (
    ApiError,
    BrandNameExtractionError,
    InvalidInputError,
    InvalidUrlError,
    NoFactsFoundError,
)
from core.model import ClaudeModel, ModelRequest
from core.models import BrandName, Fact, FactList

if TYPE_CHECKING:
    from config.settings import Settings

logger = logging.getLogger(__name__)

# ── Prompts ────────────────────────────────────────────────────────────────

FACTS_SYSTEM = (
    "You are a helpful assistant that finds interesting, unusual, or "
    "lesser-known facts about brands. Verify every fact with a web search "
    "before including it, and cite where it came from."
)

BRAND_NAME_PROMPT = (
    "Visit or search for the website below and determine the name of the "
    "brand that owns it. Return only the brand name.\n\nWebsite: {url}"
)

#: Subject phrase used when the brand name is unknown.
UNNAMED_SUBJECT = "the brand that owns this website"

FACTS_PROMPT = """\
Find 5-7 interesting, unusual, or lesser-known facts about {subject} (website: {url}).
Focus on:
- Unique history or origin stories
- Unusual business practices or innovations
- Interesting company culture or values
- Notable achievements or milestones
- Surprising partnerships or collaborations
- Fun facts that most people don't know

For each fact, provide:
1. "content": the fact itself (be specific and factual)
2. "source": a link to where it can be verified, or a short context such as \
"According to company history" when no link is available"""

# ── Output schemas ─────────────────────────────────────────────────────────

_BRAND_NAME_SCHEMA: dict = {
    "type": "object",
    "properties": {
        "name": {"type": "string", "description": "The brand name."},
    },
    "required": ["name"],
    "additionalProperties": False,
}

_FACTS_SCHEMA: dict = {
    "type": "object",
    "properties": {
        "facts": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "content": {"type": "string", "description": "The fact text."},
                    "source": {
                        "type": "string",
                        "description": "Source link or citation context.",
                    },
                },
                "required": ["content", "source"],
                "additionalProperties": False,
            },
        },
    },
    "required": ["facts"],
    "additionalProperties": False,
}


# ── Validation ─────────────────────────────────────────────────────────────


def validate_url(url: Optional[str]) -> str:
    """Return the trimmed *url* if it is a usable http(s) URL.

    Raises:
        InvalidInputError: If *url* is missing or blank.
        InvalidUrlError: If *url* is malformed or not http/https.
    """
    url = (url or "").strip()
    if not url:
        raise InvalidInputError("A website URL is required.")

    try:
        parsed = urlparse(url)
        host = parsed.hostname
    except ValueError as exc:
        raise InvalidUrlError(f"Invalid URL: {url!r}") from exc

    if parsed.scheme not in ("http", "https") or not host:
        raise InvalidUrlError(f"Invalid URL: {url!r} (expected an http or https address)")
    return url


# ── Pipeline types ─────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ResolvedBrand:
    """Outcome of the brand-name stage."""

    url: str
    name: Optional[str] = None
    inferred: bool = False

    @property
    def subject(self) -> str:
        """How the fact prompt refers to the brand."""
        if self.name:
            return f"the brand called {self.name}"
        return UNNAMED_SUBJECT


def build_facts_prompt(brand: ResolvedBrand) -> str:
    """Render the fact-finding user prompt for *brand*."""
    return FACTS_PROMPT.format(subject=brand.subject, url=brand.url)


# ── Fact finder ────────────────────────────────────────────────────────────


class FactFinder:
    """Runs the validate → resolve → generate pipeline.

    Args:
        settings: Application configuration.
        model: Object with a ``generate(ModelRequest) -> dict`` method.
            Defaults to a ``ClaudeModel`` built from *settings*.
    """

    def __init__(self, settings: Settings, model: Optional[object] = None) -> None:
        self.settings = settings
        self.model = model if model is not None else ClaudeModel(settings)

    def get_brand_facts(self, name: Optional[str], url: str) -> list[Fact]:
        """Find interesting facts about the brand behind *url*.

        Args:
            name: Brand name, or ``None``/blank to infer it from the website.
            url: The brand's website (http or https).

        Returns:
            A non-empty list of validated facts.

        Raises:
            InvalidInputError: If *url* is blank.
            InvalidUrlError: If *url* is not a valid http(s) URL.
            NoFactsFoundError: If the model found nothing.
            ApiError: On any other failure while generating facts.
        """
        return self.lookup(name, url)[1]

    def lookup(self, name: Optional[str], url: str) -> tuple[ResolvedBrand, list[Fact]]:
        """Like ``get_brand_facts`` but also return the resolved brand.

        The brand carries the inferred name when *name* was not given.
        """
        url = validate_url(url)
        logger.info("Research started name=%r url=%r", name, url)

        brand = self.resolve_brand(name, url)
        return brand, self.generate_facts(brand)

    # ── Stage 1: brand name ────────────────────────────────────────────────

    def resolve_brand(self, name: Optional[str], url: str) -> ResolvedBrand:
        """Use *name* if given, otherwise try to infer it (never raises)."""
        name = (name or "").strip()
        if name:
            return ResolvedBrand(url=url, name=name)

        try:
            inferred = self.infer_brand_name(url)
        except BrandNameExtractionError as exc:
            logger.warning(
                "Cannot determine brand name for url=%r, continuing without it: %s",
                url, exc,
            )
            return ResolvedBrand(url=url)

        logger.info("Inferred brand name %r for url=%r", inferred, url)
        return ResolvedBrand(url=url, name=inferred, inferred=True)

    def infer_brand_name(self, url: str) -> str:
        """Ask the model which brand owns *url*.

        Raises:
            BrandNameExtractionError: On any failure, including a blank name.
        """
        request = ModelRequest(
            model=self.settings.brand_model,
            prompt=BRAND_NAME_PROMPT.format(url=url),
            schema=_BRAND_NAME_SCHEMA,
            max_web_searches=1,
            max_tokens=512,
        )
        try:
            data = self.model.generate(request)
            name = BrandName.model_validate(data).name.strip()
        except Exception as exc:
            raise BrandNameExtractionError(str(exc)) from exc

        if not name:
            raise BrandNameExtractionError("Model returned a blank brand name.")
        return name

    # ── Stage 2: facts ─────────────────────────────────────────────────────

    def generate_facts(self, brand: ResolvedBrand) -> list[Fact]:
        """Ask the model for facts about *brand* and validate the answer.

        Raises:
            NoFactsFoundError: If the validated list is empty.
            ApiError: On transport, provider or schema failures.
        """
        request = ModelRequest(
            model=self.settings.facts_model,
            system=FACTS_SYSTEM,
            prompt=build_facts_prompt(brand),
            schema=_FACTS_SCHEMA,
            temperature=self.settings.facts_temperature,
            force_web_search=True,
            max_web_searches=self.settings.max_web_searches,
        )

        try:
            data = self.model.generate(request)
        except Exception as exc:
            logger.exception("Error generating brand facts for url=%r", brand.url)
            raise ApiError(f"Failed to generate facts: {exc}") from exc

        try:
            facts = FactList.model_validate(data).facts
        except ValidationError as exc:
            logger.error("Malformed facts from model for url=%r: %s", brand.url, exc)
            raise ApiError("The AI service returned facts in an unexpected format.") from exc

        if not facts:
            logger.warning("No facts found in AI response for url=%r", brand.url)
            raise NoFactsFoundError(f"No facts found for {brand.name or brand.url}.")

        logger.info("Found %d facts for url=%r", len(facts), brand.url)
        return facts
