"""
Base LLM Provider interface
"""
import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Dict, List, Optional

from .utils import strip_markdown_fences

logger = logging.getLogger(__name__)


@dataclass
class StreamChunk:
    """Standardized chunk format across providers"""
    content: str
    finish_reason: Optional[str] = None


@dataclass
class ToolCallResponse:
    """
    Outcome of a tool-enabled chat turn.

    Exactly one of ``text`` or ``tool_name`` is meaningful: the model either
    answered in prose or asked for a tool with ``tool_input`` arguments.
    """
    text: str = ""
    tool_name: Optional[str] = None
    tool_input: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_tool_call(self) -> bool:
        return bool(self.tool_name)


class LLMProvider(ABC):
    """Abstract base class for LLM providers"""

    def __init__(self, api_key: str, model: str):
        self.api_key = api_key
        self.model = model

    @abstractmethod
    async def stream_chat(
        self,
        messages: list[dict],
        system_prompt: Optional[str] = None,
        **kwargs
    ) -> AsyncIterator[StreamChunk]:
        """
        Stream chat completion chunks

        Args:
            messages: List of message dicts with 'role' and 'content'
            system_prompt: Optional system prompt
            **kwargs: Provider-specific options (temperature, max_tokens, etc.)

        Yields:
            StreamChunk objects with incremental content
        """
        pass

    async def generate(
        self,
        messages: list[dict],
        system_prompt: Optional[str] = None,
        max_tokens: int = 1024,
        temperature: float = 0.3,
        **kwargs
    ) -> str:
        """
        Non-streaming chat completion. Returns full response text.

        Default implementation collects stream chunks. Providers may override
        with a native non-streaming call.
        """
        chunks = []
        async for chunk in self.stream_chat(
            messages,
            system_prompt=system_prompt,
            max_tokens=max_tokens,
            temperature=temperature,
            **kwargs,
        ):
            chunks.append(chunk.content)
        return ''.join(chunks)

    async def chat_with_tools(
        self,
        messages: list[dict],
        tools: List[Dict[str, Any]],
        system_prompt: Optional[str] = None,
        max_tokens: int = 1024,
        temperature: float = 0.2,
        **kwargs
    ) -> ToolCallResponse:
        """
        Let the model choose between answering and requesting one tool.

        Each tool dict follows the Anthropic format:
        {
            "name": "tool_name",
            "description": "...",
            "input_schema": { JSON Schema }
        }

        Default fallback: plain generation, where a JSON object of the form
        {"tool": "<name>", "params": {...}} is read as a tool request and
        anything else is treated as prose.
        """
        response = await self.generate(
            messages=messages,
            system_prompt=system_prompt,
            max_tokens=max_tokens,
            temperature=temperature,
            **kwargs,
        )
        try:
            parsed = json.loads(strip_markdown_fences(response))
        except (json.JSONDecodeError, ValueError, IndexError):
            return ToolCallResponse(text=response)

        if isinstance(parsed, dict) and isinstance(parsed.get('tool'), str):
            params = parsed.get('params')
            if not isinstance(params, dict):
                logger.warning("Discarding non-object tool params from fallback response")
                params = {}
            return ToolCallResponse(tool_name=parsed['tool'], tool_input=params)
        return ToolCallResponse(text=response)
