"""
LLM Provider Factory
"""
from django.conf import settings

from .base import LLMProvider
from .openai_provider import OpenAIProvider
from .anthropic_provider import AnthropicProvider


def get_llm_provider(model_key: str = None) -> LLMProvider:
    """
    Get the appropriate LLM provider based on model key

    Args:
        model_key: Model key from settings.AI_MODELS (e.g., 'chat', 'fast')
                   If None, uses settings.AI_MODELS['chat']

    Returns:
        Initialized LLM provider instance

    Examples:
        provider = get_llm_provider('chat')
        response = await provider.chat_with_tools(messages=[...], tools=[...])
    """
    if model_key is None:
        model_key = 'chat'

    # "provider:model", e.g. "anthropic:claude-haiku-4-5"
    model_identifier = settings.AI_MODELS.get(model_key, settings.AI_MODELS['fast'])

    if ':' in model_identifier:
        provider_name, model_name = model_identifier.split(':', 1)
    else:
        provider_name = 'openai'
        model_name = model_identifier

    if provider_name == 'anthropic':
        return AnthropicProvider(api_key=settings.ANTHROPIC_API_KEY, model=model_name)
    elif provider_name == 'openai':
        return OpenAIProvider(api_key=settings.OPENAI_API_KEY, model=model_name)
    else:
        raise ValueError(f"Unknown provider: {provider_name}")
