"""
LLM Provider abstraction for seamless provider switching
"""
from .base import LLMProvider, StreamChunk, ToolCallResponse
from .factory import get_llm_provider
from .openai_provider import OpenAIProvider
from .anthropic_provider import AnthropicProvider
from .utils import strip_markdown_fences

__all__ = [
    'LLMProvider',
    'StreamChunk',
    'ToolCallResponse',
    'get_llm_provider',
    'OpenAIProvider',
    'AnthropicProvider',
    'strip_markdown_fences',
]
