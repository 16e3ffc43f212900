"""Request lifecycle state for the facts display.

States
──────
Idle ──start()──▶ Loading ──succeed()──▶ Success(brand, facts)
                     │
                     └─────fail()──────▶ Failure(message)

``start()`` drops any previous brand/facts/error immediately and hands out a
ticket. ``succeed``/``fail`` with a stale ticket (a newer ``start()`` or a
``reset()`` happened since) are ignored, so a late result never overwrites
the current display.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Union

from core.models import Brand, DisplayFact, Fact

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Idle:
    """Nothing submitted yet."""


@dataclass(frozen=True)
class Loading:
    """A submission is in flight."""


@dataclass(frozen=True)
class Success:
    """The last submission produced a (possibly empty) list of facts."""

    brand: Brand
    facts: list[DisplayFact] = field(default_factory=list)


@dataclass(frozen=True)
class Failure:
    """The last submission failed; *message* is shown verbatim."""

    message: str


RequestState = Union[Idle, Loading, Success, Failure]


def with_render_ids(facts: list[Fact]) -> list[DisplayFact]:
    """Attach a ``fact-<index>-<epoch ms>`` identifier to every fact."""
    stamp = int(time.time() * 1000)
    return [
        DisplayFact(id=f"fact-{i}-{stamp}", content=f.content, source=f.source)
        for i, f in enumerate(facts)
    ]


class FactsView:
    """Holds the single active ``RequestState`` for one form."""

    def __init__(self) -> None:
        self.state: RequestState = Idle()
        self._ticket = 0

    @property
    def is_loading(self) -> bool:
        return isinstance(self.state, Loading)

    def start(self) -> int:
        """Enter ``Loading`` and return the ticket for this submission."""
        self._ticket += 1
        self.state = Loading()
        return self._ticket

    def succeed(self, ticket: int, brand: Brand, facts: list[Fact]) -> bool:
        """Show *facts* for *brand*; returns False if *ticket* is stale."""
        if not self._is_current(ticket):
            return False
        self.state = Success(brand=brand, facts=with_render_ids(facts))
        return True

    def fail(self, ticket: int, message: str) -> bool:
        """Show *message* as an error; returns False if *ticket* is stale."""
        if not self._is_current(ticket):
            return False
        self.state = Failure(message=message)
        return True

    def reset(self) -> None:
        """Return to ``Idle``; any in-flight result will be ignored."""
        self._ticket += 1
        self.state = Idle()

    def _is_current(self, ticket: int) -> bool:
        if ticket != self._ticket or not self.is_loading:
            logger.debug("Ignoring result for stale ticket %d", ticket)
            return False
        return True
