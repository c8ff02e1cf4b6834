"""
Language capability: the opaque model behind the assistant.

Given the conversation, the technical tool catalogue and instructions, it
either replies in prose or requests a tool with raw arguments. It never
executes anything.
"""
import abc
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel, Field, ValidationError

from apps.assistant.state import Message, Role
from apps.common.llm_providers import LLMProvider, get_llm_provider

logger = logging.getLogger(__name__)


class ToolRequest(BaseModel):
    """A tool call extracted by the model"""
    tool: str = Field(min_length=1, description="Technical tool name")
    arguments: Dict[str, Any] = Field(
        default_factory=dict,
        description="Raw arguments; may be partial or malformed",
    )


@dataclass
class Decision:
    """Either a prose ``reply`` or a ``tool_request``."""
    reply: str = ""
    tool_request: Optional[ToolRequest] = None

    @property
    def is_tool_request(self) -> bool:
        return self.tool_request is not None


class LanguageCapability(abc.ABC):
    """Decides, per turn, between replying and requesting a tool."""

    @abc.abstractmethod
    async def decide(
        self,
        history: Sequence[Message],
        catalogue: List[Dict[str, Any]],
        instructions: str,
    ) -> Decision:
        ...


def to_provider_messages(history: Sequence[Message]) -> List[dict]:
    """
    Convert history to alternating chat messages.

    Consecutive same-role messages are merged; the conversation must start
    with a user turn for Anthropic.
    """
    messages: List[dict] = []
    for message in history:
        if not message.content:
            continue
        role = 'user' if message.role == Role.USER else 'assistant'
        if messages and messages[-1]['role'] == role:
            messages[-1]['content'] += "\n\n" + message.content
        else:
            messages.append({'role': role, 'content': message.content})
    while messages and messages[0]['role'] != 'user':
        messages.pop(0)
    return messages


class ProviderLanguageCapability(LanguageCapability):
    """LanguageCapability backed by an LLMProvider's tool calling."""

    def __init__(self, provider: Optional[LLMProvider] = None, model_key: Optional[str] = None):
        self._provider = provider
        self._model_key = model_key

    @property
    def provider(self) -> LLMProvider:
        if self._provider is None:
            self._provider = get_llm_provider(self._model_key)
        return self._provider

    async def decide(self, history, catalogue, instructions) -> Decision:
        response = await self.provider.chat_with_tools(
            messages=to_provider_messages(history),
            tools=catalogue,
            system_prompt=instructions,
        )

        if response.is_tool_call:
            try:
                request = ToolRequest(tool=response.tool_name, arguments=response.tool_input)
            except ValidationError:
                logger.warning(
                    "tool_request_malformed",
                    extra={'tool_name': response.tool_name},
                )
                request = ToolRequest(tool=response.tool_name or "unknown", arguments={})
            return Decision(reply=response.text, tool_request=request)

        return Decision(reply=response.text)
