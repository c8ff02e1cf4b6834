"""
Tests for LLM provider tool calling.

Run with: pytest apps/common/tests_llm_providers.py -v
"""
import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

from django.test import SimpleTestCase, override_settings

from apps.common.llm_providers import (
    AnthropicProvider,
    LLMProvider,
    OpenAIProvider,
    get_llm_provider,
    strip_markdown_fences,
)
from apps.common.llm_providers.utils import to_openai_tools

TOOLS = [{
    'name': 'viewAlerts',
    'description': 'View unresolved alerts.',
    'input_schema': {'type': 'object', 'properties': {}, 'required': []},
}]
MESSAGES = [{'role': 'user', 'content': 'Any alerts?'}]


class ScriptedProvider(LLMProvider):
    """Provider whose plain generation returns fixed text."""

    def __init__(self, text):
        super().__init__(api_key='', model='scripted')
        self.text = text

    async def stream_chat(self, messages, system_prompt=None, **kwargs):
        yield SimpleNamespace(content=self.text)


class UtilsTest(SimpleTestCase):

    def test_strip_markdown_fences(self):
        self.assertEqual(strip_markdown_fences('```json\n{"a": 1}\n```'), '{"a": 1}')
        self.assertEqual(strip_markdown_fences('plain'), 'plain')

    def test_to_openai_tools(self):
        converted = to_openai_tools(TOOLS)
        self.assertEqual(converted[0]['type'], 'function')
        self.assertEqual(converted[0]['function']['name'], 'viewAlerts')
        self.assertEqual(converted[0]['function']['parameters'], TOOLS[0]['input_schema'])


class FallbackToolCallingTest(SimpleTestCase):

    def test_json_tool_request(self):
        provider = ScriptedProvider('```json\n{"tool": "viewAlerts", "params": {}}\n```')
        response = asyncio.run(provider.chat_with_tools(MESSAGES, TOOLS))
        self.assertTrue(response.is_tool_call)
        self.assertEqual(response.tool_name, 'viewAlerts')

    def test_prose(self):
        response = asyncio.run(ScriptedProvider('No alerts.').chat_with_tools(MESSAGES, TOOLS))
        self.assertFalse(response.is_tool_call)
        self.assertEqual(response.text, 'No alerts.')

    def test_non_object_params_discarded(self):
        provider = ScriptedProvider('{"tool": "viewAlerts", "params": ["x"]}')
        response = asyncio.run(provider.chat_with_tools(MESSAGES, TOOLS))
        self.assertEqual(response.tool_input, {})


class OpenAIProviderTest(SimpleTestCase):

    def make_provider(self, message):
        provider = OpenAIProvider(api_key='test-key', model='gpt-4o-mini')
        provider.client = MagicMock()
        provider.client.chat.completions.create = AsyncMock(
            return_value=SimpleNamespace(choices=[SimpleNamespace(message=message)])
        )
        return provider

    def test_first_tool_call_wins(self):
        calls = [
            SimpleNamespace(function=SimpleNamespace(name='viewAlerts', arguments='{}')),
            SimpleNamespace(function=SimpleNamespace(name='other', arguments='{}')),
        ]
        provider = self.make_provider(SimpleNamespace(tool_calls=calls, content=None))
        response = asyncio.run(provider.chat_with_tools(MESSAGES, TOOLS, system_prompt='rules'))

        self.assertEqual(response.tool_name, 'viewAlerts')
        kwargs = provider.client.chat.completions.create.call_args.kwargs
        self.assertEqual(kwargs['tool_choice'], 'auto')
        self.assertEqual(kwargs['messages'][0], {'role': 'system', 'content': 'rules'})

    def test_malformed_arguments_become_empty(self):
        call = SimpleNamespace(function=SimpleNamespace(name='viewAlerts', arguments='{oops'))
        provider = self.make_provider(SimpleNamespace(tool_calls=[call], content=None))
        response = asyncio.run(provider.chat_with_tools(MESSAGES, TOOLS))
        self.assertEqual(response.tool_input, {})

    def test_prose_reply(self):
        provider = self.make_provider(SimpleNamespace(tool_calls=None, content='Hello'))
        response = asyncio.run(provider.chat_with_tools(MESSAGES, TOOLS))
        self.assertEqual(response.text, 'Hello')


class AnthropicProviderTest(SimpleTestCase):

    def make_provider(self, blocks):
        provider = AnthropicProvider(api_key='test-key', model='claude-haiku-4-5')
        provider.client = MagicMock()
        provider.client.messages.create = AsyncMock(return_value=SimpleNamespace(content=blocks))
        return provider

    def test_tool_use_block_wins_over_text(self):
        provider = self.make_provider([
            SimpleNamespace(type='text', text='Let me check.'),
            SimpleNamespace(type='tool_use', name='viewAlerts', input={}),
        ])
        response = asyncio.run(provider.chat_with_tools(MESSAGES, TOOLS, system_prompt='x' * 200))

        self.assertEqual(response.tool_name, 'viewAlerts')
        kwargs = provider.client.messages.create.call_args.kwargs
        self.assertEqual(kwargs['tool_choice'], {'type': 'auto'})
        self.assertEqual(kwargs['system'][0]['cache_control'], {'type': 'ephemeral'})

    def test_text_blocks_joined(self):
        provider = self.make_provider([
            SimpleNamespace(type='text', text='No '),
            SimpleNamespace(type='text', text='alerts.'),
        ])
        response = asyncio.run(provider.chat_with_tools(MESSAGES, TOOLS, system_prompt='short'))
        self.assertEqual(response.text, 'No alerts.')
        self.assertEqual(provider.client.messages.create.call_args.kwargs['system'], 'short')


class FactoryTest(SimpleTestCase):

    @override_settings(AI_MODELS={'chat': 'anthropic:claude-haiku-4-5', 'fast': 'openai:gpt-4o-mini'})
    def test_provider_from_model_key(self):
        provider = get_llm_provider('chat')
        self.assertIsInstance(provider, AnthropicProvider)
        self.assertEqual(provider.model, 'claude-haiku-4-5')
        self.assertIsInstance(get_llm_provider('unknown-key'), OpenAIProvider)

    @override_settings(AI_MODELS={'chat': 'mistral:large', 'fast': 'openai:gpt-4o-mini'})
    def test_unknown_provider(self):
        with self.assertRaises(ValueError):
            get_llm_provider()
