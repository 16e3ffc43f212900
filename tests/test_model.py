"""Tests for core/model.py — the Claude structured-output boundary."""

from __future__ import annotations

import json
from unittest.mock import MagicMock, patch

import pytest

from core.model import ClaudeModel, ModelRequest


# ── Fixtures ───────────────────────────────────────────────────────────────────


def make_settings(**overrides):
    """Return a minimal Settings-like object for testing."""
    settings = MagicMock()
    settings.anthropic_api_key = "test-key"
    for k, v in overrides.items():
        setattr(settings, k, v)
    return settings


def block(block_type: str, text: str = "") -> MagicMock:
    b = MagicMock()
    b.type = block_type
    b.text = text
    return b


def make_model(content: list) -> tuple[ClaudeModel, MagicMock]:
    model = ClaudeModel(make_settings())
    response = MagicMock()
    response.content = content
    client = MagicMock()
    client.messages.create.return_value = response
    model._client = client
    return model, client


SCHEMA = {"type": "object", "properties": {"name": {"type": "string"}}}


# ── Client ─────────────────────────────────────────────────────────────────────


class TestClient:
    def test_client_is_lazy(self):
        model = ClaudeModel(make_settings())
        assert model._client is None

    @patch("anthropic.Anthropic")
    def test_client_uses_settings_key(self, mock_cls):
        model = ClaudeModel(make_settings(anthropic_api_key="sk-test"))

        client = model.client

        mock_cls.assert_called_once_with(api_key="sk-test")
        assert client is mock_cls.return_value
        assert model.client is client  # cached


# ── generate ───────────────────────────────────────────────────────────────────


class TestGenerate:
    def test_returns_decoded_json(self):
        model, _ = make_model([block("text", '{"name": "Acme"}')])

        assert model.generate(ModelRequest(model="m", prompt="p", schema=SCHEMA)) == {
            "name": "Acme"
        }

    def test_uses_text_after_last_tool_block(self):
        content = [
            block("text", "Let me search for that."),
            block("server_tool_use"),
            block("web_search_tool_result"),
            block("text", '{"facts": '),
            block("text", "[]}"),
        ]
        model, _ = make_model(content)

        assert model.generate(ModelRequest(model="m", prompt="p", schema=SCHEMA)) == {
            "facts": []
        }

    def test_sends_schema_and_web_search_tool(self):
        model, client = make_model([block("text", "{}")])

        model.generate(
            ModelRequest(
                model="claude-haiku-4-5",
                prompt="Find facts",
                system="You find facts.",
                schema=SCHEMA,
                temperature=0.7,
                force_web_search=True,
                max_web_searches=4,
            )
        )

        kwargs = client.messages.create.call_args.kwargs
        assert kwargs["model"] == "claude-haiku-4-5"
        assert kwargs["system"] == "You find facts."
        assert kwargs["temperature"] == 0.7
        assert kwargs["messages"] == [{"role": "user", "content": "Find facts"}]
        assert kwargs["output_config"]["format"] == {"type": "json_schema", "schema": SCHEMA}
        assert kwargs["tools"] == [
            {"type": "web_search_20250305", "name": "web_search", "max_uses": 4}
        ]
        assert kwargs["tool_choice"] == {"type": "tool", "name": "web_search"}

    def test_tool_choice_omitted_unless_forced(self):
        model, client = make_model([block("text", "{}")])

        model.generate(ModelRequest(model="m", prompt="p", schema=SCHEMA))

        kwargs = client.messages.create.call_args.kwargs
        assert "tools" in kwargs
        assert "tool_choice" not in kwargs
        assert "temperature" not in kwargs
        assert "system" not in kwargs

    def test_web_search_can_be_disabled(self):
        model, client = make_model([block("text", "{}")])

        model.generate(ModelRequest(model="m", prompt="p", schema=SCHEMA, web_search=False))

        assert "tools" not in client.messages.create.call_args.kwargs

    def test_no_text_raises(self):
        model, _ = make_model([block("web_search_tool_result")])

        with pytest.raises(ValueError, match="no text"):
            model.generate(ModelRequest(model="m", prompt="p", schema=SCHEMA))

    def test_invalid_json_raises(self):
        model, _ = make_model([block("text", "Here are some facts!")])

        with pytest.raises(json.JSONDecodeError):
            model.generate(ModelRequest(model="m", prompt="p", schema=SCHEMA))

    def test_non_object_json_raises(self):
        model, _ = make_model([block("text", "[1, 2]")])

        with pytest.raises(ValueError, match="JSON object"):
            model.generate(ModelRequest(model="m", prompt="p", schema=SCHEMA))

    def test_api_errors_propagate(self):
        model, client = make_model([])
        client.messages.create.side_effect = RuntimeError("overloaded")

        with pytest.raises(RuntimeError, match="overloaded"):
            model.generate(ModelRequest(model="m", prompt="p", schema=SCHEMA))
