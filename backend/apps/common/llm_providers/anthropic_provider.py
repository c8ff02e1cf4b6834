"""
Anthropic (Claude) LLM Provider
"""
from typing import Any, AsyncIterator, Dict, List, Optional
from anthropic import AsyncAnthropic

from .base import LLMProvider, StreamChunk, ToolCallResponse


class AnthropicProvider(LLMProvider):
    """Anthropic Claude implementation of LLM provider"""

    def __init__(self, api_key: str, model: str = "claude-haiku-4-5"):
        super().__init__(api_key, model)
        self.client = AsyncAnthropic(api_key=api_key)

    @staticmethod
    def _system_param(system_prompt: Optional[str], use_prompt_caching: bool):
        # Ephemeral caching only pays off for substantial system prompts
        if use_prompt_caching and system_prompt and len(system_prompt) > 100:
            return [
                {
                    "type": "text",
                    "text": system_prompt,
                    "cache_control": {"type": "ephemeral"},
                }
            ]
        return system_prompt or ""

    async def stream_chat(
        self,
        messages: list[dict],
        system_prompt: Optional[str] = None,
        use_prompt_caching: bool = True,
        **kwargs
    ) -> AsyncIterator[StreamChunk]:
        """Stream chat completion from Anthropic."""
        if not messages:
            raise ValueError("At least one message is required for Anthropic API")

        max_tokens = kwargs.pop('max_tokens', 1024)

        async with self.client.messages.stream(
            model=self.model,
            messages=messages,
            system=self._system_param(system_prompt, use_prompt_caching),
            max_tokens=max_tokens,
            **kwargs
        ) as stream:
            async for text in stream.text_stream:
                yield StreamChunk(content=text)

    async def generate(
        self,
        messages: list[dict],
        system_prompt: Optional[str] = None,
        max_tokens: int = 1024,
        temperature: float = 0.3,
        use_prompt_caching: bool = True,
        **kwargs
    ) -> str:
        """Non-streaming chat completion from Anthropic."""
        if not messages:
            raise ValueError("At least one message is required")

        response = await self.client.messages.create(
            model=self.model,
            messages=messages,
            system=self._system_param(system_prompt, use_prompt_caching),
            max_tokens=max_tokens,
            temperature=temperature,
            **kwargs
        )

        return "".join(
            block.text for block in response.content
            if getattr(block, "type", None) == "text"
        )

    async def chat_with_tools(
        self,
        messages: list[dict],
        tools: List[Dict[str, Any]],
        system_prompt: Optional[str] = None,
        max_tokens: int = 1024,
        temperature: float = 0.2,
        use_prompt_caching: bool = True,
        **kwargs
    ) -> ToolCallResponse:
        """
        Native tool use with ``tool_choice={"type": "auto"}``.

        Text blocks are joined into the prose reply; the first ``tool_use``
        block, if any, wins over the prose.
        """
        if not messages:
            raise ValueError("At least one message is required")

        response = await self.client.messages.create(
            model=self.model,
            messages=messages,
            system=self._system_param(system_prompt, use_prompt_caching),
            max_tokens=max_tokens,
            temperature=temperature,
            tools=tools,
            tool_choice={"type": "auto"},
            **kwargs
        )

        texts = []
        for block in response.content:
            block_type = getattr(block, "type", None)
            if block_type == "tool_use":
                tool_input = block.input if isinstance(block.input, dict) else {}
                return ToolCallResponse(tool_name=block.name, tool_input=tool_input)
            if block_type == "text":
                texts.append(block.text)
        return ToolCallResponse(text="".join(texts))
