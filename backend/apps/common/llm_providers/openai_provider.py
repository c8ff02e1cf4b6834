"""
OpenAI LLM Provider
"""
import json
import logging
from typing import Any, AsyncIterator, Dict, List, Optional
from openai import AsyncOpenAI

from .base import LLMProvider, StreamChunk, ToolCallResponse
from .utils import to_openai_tools

logger = logging.getLogger(__name__)


class OpenAIProvider(LLMProvider):
    """OpenAI implementation of LLM provider"""

    def __init__(self, api_key: str, model: str = "gpt-4o-mini"):
        super().__init__(api_key, model)
        self.client = AsyncOpenAI(api_key=api_key)

    def _with_system(self, messages: list[dict], system_prompt: Optional[str]) -> list[dict]:
        openai_messages = []
        if system_prompt:
            openai_messages.append({"role": "system", "content": system_prompt})
        openai_messages.extend(messages)
        return openai_messages

    async def stream_chat(
        self,
        messages: list[dict],
        system_prompt: Optional[str] = None,
        **kwargs
    ) -> AsyncIterator[StreamChunk]:
        """Stream chat completion from OpenAI"""
        stream = await self.client.chat.completions.create(
            model=self.model,
            messages=self._with_system(messages, system_prompt),
            stream=True,
            **kwargs
        )

        async for chunk in stream:
            if chunk.choices and chunk.choices[0].delta.content:
                yield StreamChunk(
                    content=chunk.choices[0].delta.content,
                    finish_reason=chunk.choices[0].finish_reason
                )

    async def generate(
        self,
        messages: list[dict],
        system_prompt: Optional[str] = None,
        max_tokens: int = 1024,
        temperature: float = 0.3,
        **kwargs
    ) -> str:
        """Non-streaming chat completion from OpenAI."""
        if not messages:
            raise ValueError("At least one message is required")

        response = await self.client.chat.completions.create(
            model=self.model,
            messages=self._with_system(messages, system_prompt),
            max_tokens=max_tokens,
            temperature=temperature,
            **kwargs
        )

        if response.choices and response.choices[0].message.content:
            return response.choices[0].message.content
        return ""

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
        Function calling with ``tool_choice="auto"``.

        Only the first tool call is honoured; the orchestrator handles one
        action per turn.
        """
        if not messages:
            raise ValueError("At least one message is required")
        if not tools:
            return ToolCallResponse(
                text=await self.generate(messages, system_prompt, max_tokens, temperature, **kwargs)
            )

        response = await self.client.chat.completions.create(
            model=self.model,
            messages=self._with_system(messages, system_prompt),
            max_tokens=max_tokens,
            temperature=temperature,
            tools=to_openai_tools(tools),
            tool_choice="auto",
            **kwargs,
        )

        choice = response.choices[0] if response.choices else None
        if choice is None:
            return ToolCallResponse()

        if choice.message.tool_calls:
            call = choice.message.tool_calls[0]
            try:
                arguments = json.loads(call.function.arguments or "{}")
            except json.JSONDecodeError:
                logger.warning("Malformed tool arguments from OpenAI for %s", call.function.name)
                arguments = {}
            if not isinstance(arguments, dict):
                arguments = {}
            return ToolCallResponse(tool_name=call.function.name, tool_input=arguments)

        return ToolCallResponse(text=choice.message.content or "")
