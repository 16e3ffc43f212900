"""Tests for core/state.py — display request lifecycle."""

from __future__ import annotations

import pytest

from core.models import Brand, Fact
from core.state import (
    Failure,
    FactsView,
    Idle,
    Loading,
    Success,
    with_render_ids,
)

BRAND = Brand(name="Acme", url="https://acme.example")
FACTS = [
    Fact(content="Acme sells anvils.", source="Industry reports"),
    Fact(content="Acme was founded in 1923.", source="https://acme.example/history"),
]


@pytest.fixture
def view() -> FactsView:
    return FactsView()


class TestTransitions:
    def test_starts_idle(self, view):
        assert view.state == Idle()
        assert not view.is_loading

    def test_start_enters_loading(self, view):
        view.start()
        assert view.state == Loading()
        assert view.is_loading

    def test_success(self, view):
        ticket = view.start()

        assert view.succeed(ticket, BRAND, FACTS) is True
        assert isinstance(view.state, Success)
        assert view.state.brand == BRAND
        assert [f.content for f in view.state.facts] == [f.content for f in FACTS]

    def test_failure(self, view):
        ticket = view.start()

        assert view.fail(ticket, "The AI service is down") is True
        assert view.state == Failure(message="The AI service is down")

    def test_restart_clears_previous_results(self, view):
        ticket = view.start()
        view.succeed(ticket, BRAND, FACTS)

        view.start()

        assert view.state == Loading()

    def test_reset(self, view):
        view.start()
        view.reset()
        assert view.state == Idle()


class TestStaleResults:
    def test_result_after_resubmission_ignored(self, view):
        first = view.start()
        second = view.start()

        assert view.succeed(first, BRAND, FACTS) is False
        assert view.state == Loading()

        assert view.fail(second, "boom") is True

    def test_result_after_reset_ignored(self, view):
        ticket = view.start()
        view.reset()

        assert view.fail(ticket, "boom") is False
        assert view.state == Idle()

    def test_second_result_for_same_ticket_ignored(self, view):
        ticket = view.start()
        view.succeed(ticket, BRAND, FACTS)

        assert view.fail(ticket, "late error") is False
        assert isinstance(view.state, Success)


class TestRenderIds:
    def test_ids_are_unique(self):
        facts = with_render_ids(FACTS)
        assert len({f.id for f in facts}) == len(FACTS)

    def test_id_format(self):
        facts = with_render_ids(FACTS)
        assert facts[0].id.startswith("fact-0-")
        assert facts[1].id.startswith("fact-1-")

    def test_content_preserved(self):
        [first, _] = with_render_ids(FACTS)
        assert first.content == FACTS[0].content
        assert first.source == FACTS[0].source

    def test_empty(self):
        assert with_render_ids([]) == []
