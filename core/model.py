"""Model endpoint boundary.

The fact pipeline only depends on ``generate(request) -> dict``: a prompt,
an output JSON schema and a few knobs go in, a decoded JSON object comes
out (or an exception is raised). ``ClaudeModel`` implements that contract
on top of the Anthropic Messages API with the server-side ``web_search``
tool and JSON-schema structured output.

The Anthropic client is lazy-initialised so that the class can be
instantiated in tests without requiring a live API key.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from config.settings import Settings

logger = logging.getLogger(__name__)

#: Name of Claude's server-side search tool.
WEB_SEARCH_TOOL_NAME = "web_search"
_WEB_SEARCH_TOOL = {
    "type": "web_search_20250305",
    "name": WEB_SEARCH_TOOL_NAME,
}


@dataclass
class ModelRequest:
    """Everything needed for one structured-output call."""

    model: str
    prompt: str
    schema: dict
    system: Optional[str] = None
    temperature: Optional[float] = None
    web_search: bool = True
    force_web_search: bool = False
    max_web_searches: int = 3
    max_tokens: int = 2048


def _final_text(content: list) -> str:
    """Join the text blocks that follow the last non-text block.

    With web search enabled the response interleaves ``server_tool_use`` and
    ``web_search_tool_result`` blocks with text; the structured answer is the
    trailing run of text.
    """
    parts: list[str] = []
    for block in content:
        if getattr(block, "type", None) == "text":
            parts.append(block.text)
        else:
            parts = []
    return "".join(parts).strip()


class ClaudeModel:
    """Structured-output calls against Claude, with optional web search."""

    def __init__(self, settings: Settings) -> None:
        """Initialise the model client.

        Args:
            settings: Application configuration (must have ``anthropic_api_key``).
        """
        self.settings = settings
        self._client: object = None  # Lazy-initialised anthropic.Anthropic

    @property
    def client(self) -> object:
        """Lazy-initialise and return the Anthropic SDK client."""
        if self._client is None:
            import anthropic
            self._client = anthropic.Anthropic(
                api_key=self.settings.anthropic_api_key,
            )
        return self._client

    def generate(self, request: ModelRequest) -> dict:
        """Run *request* and return the decoded JSON object.

        Args:
            request: Prompt, output schema and sampling options.

        Returns:
            The model's structured answer as a ``dict``.

        Raises:
            anthropic.APIError: On API failures.
            ValueError: If the response holds no text or the text is not a
                JSON object.
        """
        kwargs: dict = {
            "model": request.model,
            "max_tokens": request.max_tokens,
            "messages": [{"role": "user", "content": request.prompt}],
            "output_config": {
                "format": {"type": "json_schema", "schema": request.schema}
            },
        }
        if request.system:
            kwargs["system"] = request.system
        if request.temperature is not None:
            kwargs["temperature"] = request.temperature
        if request.web_search:
            kwargs["tools"] = [
                {**_WEB_SEARCH_TOOL, "max_uses": request.max_web_searches}
            ]
            if request.force_web_search:
                kwargs["tool_choice"] = {"type": "tool", "name": WEB_SEARCH_TOOL_NAME}

        logger.info(
            "Model call model=%s web_search=%s forced=%s",
            request.model, request.web_search, request.force_web_search,
        )
        response = self.client.messages.create(**kwargs)

        text = _final_text(getattr(response, "content", []) or [])
        if not text:
            raise ValueError("Model response contained no text output.")

        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError(f"Expected a JSON object, got {type(data).__name__}.")
        return data
