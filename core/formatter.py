"""Source text → clickable fragments.

Model output frequently embeds citations inside the free-text ``source``
field of a fact, either as markdown links (``[Wikipedia](https://...)``) or
as bare URLs. This module splits such strings into an ordered list of
``TextFragment`` / ``LinkFragment`` objects and renders them as safe HTML.

Precedence
──────────
1. Markdown links are matched first, left to right.
2. Only when the string holds no markdown link at all is it re-scanned for
   bare ``http(s)://`` URLs.

Only recognised markdown link syntax is ever dropped from the input; every
other character survives into a fragment.
"""

from __future__ import annotations

import logging
import re
from urllib.parse import urlparse

from markupsafe import Markup, escape

from core.models import Fragment, LinkFragment, TextFragment

logger = logging.getLogger(__name__)

# ── Patterns ───────────────────────────────────────────────────────────────

#: ``[label](target)``; brackets inside the label are rejected so nested or
#: unbalanced syntax passes through as text.
_MARKDOWN_LINK = re.compile(r"\[([^\[\]]+)\]\(([^)]+)\)")
#: Bare URL, terminated by whitespace or a closing bracket. Trailing sentence
#: punctuation is left outside the match.
_BARE_URL = re.compile(r"https?://[^\s)\]]+?(?=[.,;:]?(?:\s|\)|\]|$))")
#: Empty parentheses, typically left behind once link syntax is stripped.
_EMPTY_PARENS = re.compile(r"\s*\(\s*\)")

_SCHEME = re.compile(r"^https?://", re.IGNORECASE)
_WWW_PREFIX = re.compile(r"^www\.")
_HOSTNAME = re.compile(
    r"^(?:[a-z0-9](?:[a-z0-9-]*[a-z0-9])?\.)*[a-z0-9](?:[a-z0-9-]*[a-z0-9])?\.?$",
    re.IGNORECASE,
)


# ── Helpers ────────────────────────────────────────────────────────────────


def normalize_target(target: str) -> str:
    """Prepend ``https://`` to *target* unless it already has an http(s) scheme."""
    target = target.strip()
    if _SCHEME.match(target):
        return target
    return f"https://{target}"


def link_label(url: str, fallback: str) -> str:
    """Return the display label for *url*.

    The label is the URL's hostname without a leading ``www.``. When the URL
    cannot be parsed or has no valid hostname, *fallback* is returned.

    Examples:
        >>> link_label("https://www.acme.com/about", "About")
        'acme.com'
        >>> link_label("https://not a host", "Industry reports")
        'Industry reports'
    """
    try:
        host = urlparse(url).hostname
    except ValueError:
        logger.debug("Unparseable link target: %r", url)
        return fallback
    if not host or not _HOSTNAME.match(host):
        return fallback
    return _WWW_PREFIX.sub("", host)


def _split_bare_urls(text: str) -> list[Fragment]:
    """Split *text* into text/link fragments around bare http(s) URLs."""
    fragments: list[Fragment] = []
    buffer = ""
    last = 0

    for match in _BARE_URL.finditer(text):
        url = match.group(0)
        buffer += text[last:match.start()]
        last = match.end()

        label = link_label(url, "")
        if not label:
            # Unparseable: keep it as plain text
            buffer += url
            continue

        if buffer:
            fragments.append(TextFragment(value=buffer))
            buffer = ""
        fragments.append(LinkFragment(label=label, url=url))

    buffer += text[last:]
    if buffer:
        fragments.append(TextFragment(value=buffer))
    return fragments


# ── Public interface ───────────────────────────────────────────────────────


def parse_source(text: str) -> list[Fragment]:
    """Decompose a fact's source string into ordered text/link fragments.

    Args:
        text: Free-text source as returned by the model.

    Returns:
        Fragments in input order. Empty input yields an empty list.

    Examples:
        >>> parse_source("[Acme history](www.acme.com/history)")
        [LinkFragment(kind='link', label='acme.com', url='https://www.acme.com/history')]
        >>> parse_source("Industry reports")
        [TextFragment(kind='text', value='Industry reports')]
    """
    if not text:
        return []

    fragments: list[Fragment] = []
    last = 0

    for match in _MARKDOWN_LINK.finditer(text):
        label, target = match.group(1), match.group(2)
        if match.start() > last:
            fragments.append(TextFragment(value=text[last:match.start()]))

        url = normalize_target(target)
        fragments.append(LinkFragment(label=link_label(url, label), url=url))
        last = match.end()

    if not fragments:
        return _split_bare_urls(text)

    if last < len(text):
        fragments.append(TextFragment(value=text[last:]))
    return fragments


def clean_content(text: str) -> str:
    """Strip markdown link syntax from prose, then drop leftover ``()``.

    Empty parentheses are dropped whether or not a link preceded them. Text
    with nothing to strip is returned unchanged.

    Examples:
        >>> clean_content("Acquired the company. ([source](https://x.com))")
        'Acquired the company.'
        >>> clean_content("Acquired the company. ()")
        'Acquired the company.'
    """
    cleaned = _EMPTY_PARENS.sub("", _MARKDOWN_LINK.sub("", text))
    if cleaned == text:
        return text
    return cleaned.strip()


def plain_text(fragments: list[Fragment]) -> str:
    """Return the visible text of *fragments* (links replaced by their label)."""
    return "".join(
        f.label if isinstance(f, LinkFragment) else f.value for f in fragments
    )


def render_fragments(fragments: list[Fragment]) -> Markup:
    """Render *fragments* as escaped HTML.

    Links open in a new browsing context without a back-reference to this
    page.
    """
    parts: list[str] = []
    for fragment in fragments:
        if isinstance(fragment, LinkFragment):
            parts.append(
                f'<a href="{escape(fragment.url)}" target="_blank" '
                f'rel="noopener noreferrer">{escape(fragment.label)}</a>'
            )
        else:
            parts.append(str(escape(fragment.value)))
    return Markup("".join(parts))
