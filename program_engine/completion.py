"""
Completion-service client backed by the Anthropic API, plus JSON response parsing.
"""

import json
import logging
import re

import anthropic

from program_engine.errors import CompletionError, ResponseParseError

logger = logging.getLogger(__name__)

JSON_ONLY_INSTRUCTION = (
    "Respond with a single valid JSON object only. Do not wrap it in markdown "
    "and do not add any text before or after it."
)


class CompletionClient:
    """Thin wrapper around anthropic.Anthropic exposing complete(prompt, ...)."""

    def __init__(self, api_key, config, model=None, max_tokens=None, timeout=None, client=None):
        """
        Initialize the completion client.

        Args:
            api_key: Anthropic API key
            config: Full configuration dictionary
            model: Claude model to use (defaults to config value)
            max_tokens: Maximum tokens for response (defaults to config value)
            timeout: Client timeout in seconds (defaults to config value)
            client: Pre-built Anthropic client, mainly for tests
        """
        completion = config.get("completion", {}) or {}
        self.client = client or anthropic.Anthropic(
            api_key=api_key,
            timeout=timeout or completion.get("timeout", 120),
        )
        self.model = model or completion["model"]
        self.max_tokens = max_tokens or completion.get("max_tokens", 8000)
        self.default_temperature = completion.get("generation_temperature")

    def complete(self, prompt, temperature=None, max_tokens=None, json_only=True):
        """
        Send one prompt and return the completion text.

        Raises:
            CompletionError: the API call failed or returned no text.
        """
        kwargs = {
            "model": self.model,
            "max_tokens": max_tokens or self.max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }
        if temperature is None:
            temperature = self.default_temperature
        if temperature is not None:
            kwargs["temperature"] = temperature
        if json_only:
            kwargs["system"] = JSON_ONLY_INSTRUCTION

        try:
            message = self.client.messages.create(**kwargs)
        except anthropic.APIError as exc:
            raise CompletionError(f"Completion request failed: {exc}") from exc

        text = "".join(
            getattr(block, "text", "") or "" for block in (message.content or [])
        ).strip()
        if not text:
            raise CompletionError("Completion service returned an empty response.")
        return text


def strip_code_fences(text):
    text = (text or "").strip()
    if text.startswith("```"):
        text = re.sub(r"^```\w*\n?", "", text)
        text = re.sub(r"\n?```$", "", text)
        text = text.strip()
    return text


def parse_json_response(text):
    """
    Parse a completion as a JSON object, tolerating markdown code fences.

    Raises:
        ResponseParseError: the text is not a JSON object.
    """
    cleaned = strip_code_fences(text)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise ResponseParseError(f"Response is not valid JSON: {exc}", raw_text=text) from exc
    if not isinstance(data, dict):
        raise ResponseParseError(
            f"Expected a JSON object, got {type(data).__name__}.", raw_text=text
        )
    return data
