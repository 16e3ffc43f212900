"""
Pydantic models shared across the brand-facts core.
"""

from __future__ import annotations

from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class Fact(BaseModel):
    """One generated statement about a brand plus its claimed source."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    content: str = Field(min_length=1)
    source: str = Field(min_length=1)


class FactList(BaseModel):
    """Structured output requested from the fact-finding call."""

    facts: list[Fact]


class BrandName(BaseModel):
    """Structured output requested from the brand-name inference call."""

    name: str


class Brand(BaseModel):
    """The brand shown in the result header."""

    model_config = ConfigDict(frozen=True)

    name: str
    url: str


class DisplayFact(BaseModel):
    """A fact plus a render-only identifier for list output."""

    model_config = ConfigDict(frozen=True)

    id: str
    content: str
    source: str


# ── Source fragments ───────────────────────────────────────────────────────


class TextFragment(BaseModel):
    """A run of plain text inside a source string."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    value: str


class LinkFragment(BaseModel):
    """A clickable link extracted from a source string."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["link"] = "link"
    label: str
    url: str


Fragment = Union[TextFragment, LinkFragment]
