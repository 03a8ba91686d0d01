"""
PharmaTrack — LLM Provider Abstraction Layer

Provides a unified interface for the text-generation backends used by the
AI monthly report:
  - AnthropicProvider: Uses Claude API (requires ANTHROPIC_API_KEY)
  - MockProvider: Returns a canned Markdown report for testing without API keys

Each provider implements:
  - chat(messages, system_prompt) -> LLMResponse

The factory function get_provider() selects the provider from the
LLM_PROVIDER setting ("anthropic" by default).
"""

import os
import re
import logging
from dataclasses import dataclass, field
from abc import ABC, abstractmethod

logger = logging.getLogger("pharmatrack.llm")

DEFAULT_MODEL = os.environ.get("LLM_MODEL", "claude-sonnet-4-20250514")
DEFAULT_PROVIDER = os.environ.get("LLM_PROVIDER", "anthropic")


# ---------------------------------------------------------------------------
# Data classes for unified LLM interface
# ---------------------------------------------------------------------------

@dataclass
class LLMResponse:
    """Unified response from any LLM provider."""
    content: str = ""
    stop_reason: str = "end_turn"
    usage: dict = field(default_factory=dict)
    raw: dict = field(default_factory=dict)

    @property
    def is_error(self) -> bool:
        return self.stop_reason == "error"


# ---------------------------------------------------------------------------
# Abstract Base Provider
# ---------------------------------------------------------------------------

class LLMProvider(ABC):
    """Abstract base class for LLM providers."""

    @abstractmethod
    def chat(self, messages: list[dict], system_prompt: str = "") -> LLMResponse:
        """Send messages and get a response (non-streaming)."""
        ...

    @abstractmethod
    def get_name(self) -> str:
        """Return provider name for display."""
        ...


# ---------------------------------------------------------------------------
# Anthropic Provider (Claude)
# ---------------------------------------------------------------------------

class AnthropicProvider(LLMProvider):
    """
    LLM provider using Anthropic's Claude API.

    Requires ANTHROPIC_API_KEY environment variable (or an explicit api_key).
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str = DEFAULT_MODEL,
        max_tokens: int = 1024,
    ):
        try:
            import anthropic
        except ImportError:
            raise ImportError(
                "anthropic package not installed. Run: pip install anthropic"
            )

        self.api_key = api_key or os.environ.get("ANTHROPIC_API_KEY", "")
        if not self.api_key:
            raise ValueError(
                "ANTHROPIC_API_KEY not set. Set it in environment or pass api_key."
            )

        self.client = anthropic.Anthropic(api_key=self.api_key)
        self.model = model
        self.max_tokens = max_tokens

    def get_name(self) -> str:
        return f"Claude ({self.model})"

    def chat(self, messages: list[dict], system_prompt: str = "") -> LLMResponse:
        """Send a single request to Claude; transport and auth errors become error responses."""
        kwargs = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": messages,
        }
        if system_prompt:
            kwargs["system"] = system_prompt

        try:
            response = self.client.messages.create(**kwargs)
        except Exception as e:
            logger.error(f"Anthropic API error: {e}")
            return LLMResponse(
                content=f"Error calling Claude API: {e}",
                stop_reason="error",
            )

        content_text = ""
        for block in response.content:
            if block.type == "text":
                content_text += block.text

        return LLMResponse(
            content=content_text,
            stop_reason=response.stop_reason or "end_turn",
            usage={
                "input_tokens": response.usage.input_tokens,
                "output_tokens": response.usage.output_tokens,
            },
            raw={"id": response.id, "model": response.model},
        )


# ---------------------------------------------------------------------------
# Mock Provider (for testing without API key)
# ---------------------------------------------------------------------------

_PROJECT_RE = re.compile(r'project "([^"]+)"')
_MONTH_RE = re.compile(r"Month: (\d{4}-\d{2})")


class MockProvider(LLMProvider):
    """
    Mock LLM provider for testing.

    Builds a short Markdown report from the project name and months it finds
    in the prompt, so the report pipeline can be exercised end to end
    without any API key.
    """

    def get_name(self) -> str:
        return "Mock AI (testing mode)"

    def chat(self, messages: list[dict], system_prompt: str = "") -> LLMResponse:
        prompt = ""
        for msg in reversed(messages):
            if msg.get("role") == "user" and isinstance(msg.get("content"), str):
                prompt = msg["content"]
                break

        name_match = _PROJECT_RE.search(prompt)
        project_name = name_match.group(1) if name_match else "该项目"
        months = _MONTH_RE.findall(prompt)
        period = f"{months[0]} 至 {months[-1]}" if months else "近期"

        return LLMResponse(
            content=(
                f"### {project_name} 月度分析\n\n"
                f"1. **销售表现**：{period} 数据已汇总，请结合达成率关注趋势变化。\n"
                "2. **重点亮点**：各月关键活动已记录，推广节奏保持稳定。\n"
                "3. **下月建议**：巩固已覆盖医院，继续推进新增准入。\n"
            ),
            stop_reason="end_turn",
        )


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------

def get_provider(
    provider_name: str | None = None,
    api_key: str | None = None,
    model: str = DEFAULT_MODEL,
) -> LLMProvider:
    """
    Get an LLM provider instance.

    Args:
        provider_name: "anthropic", "mock", or "auto" (Anthropic when a key is
            available, otherwise mock). Defaults to the LLM_PROVIDER setting.
        api_key: Optional API key override
        model: Model name for Anthropic

    Raises:
        ValueError: unknown provider name, or "anthropic" without a key
    """
    provider_name = provider_name or DEFAULT_PROVIDER

    if provider_name == "anthropic":
        return AnthropicProvider(api_key=api_key, model=model)
    elif provider_name == "mock":
        return MockProvider()
    elif provider_name == "auto":
        key = api_key or os.environ.get("ANTHROPIC_API_KEY", "")
        if key:
            try:
                return AnthropicProvider(api_key=key, model=model)
            except ImportError as e:
                logger.warning(f"Anthropic unavailable ({e}), falling back to mock")
                return MockProvider()
        else:
            logger.info("No ANTHROPIC_API_KEY found, using mock provider")
            return MockProvider()
    else:
        raise ValueError(f"Unknown provider: {provider_name}. Use 'anthropic', 'mock', or 'auto'.")
