"""
Shared test fixtures and helpers for assistant tests.
"""
import asyncio
import datetime

from apps.assistant.language import Decision, LanguageCapability, ToolRequest
from apps.assistant.orchestrator import ConversationOrchestrator
from apps.assistant.session_store import SessionStore
from apps.assistant.tools.registry import ToolRegistry
from apps.assistant.tools.schemas import care_tool_definitions, register_care_tools

TODAY = datetime.date(2025, 6, 2)  # a Monday

SCENARIO_A_TEXT = (
    "Create a schedule for care worker Maria for client Tom, 9am to 5pm on "
    "15 June 2025, Weekly Checkup, Pending"
)

SCENARIO_A_EXTRACTED = {
    'careWorker_name': 'Maria',
    'client_name': 'Tom',
    'start_time': '9am',
    'end_time': '5pm',
    'date': '15 June 2025',
    'type': 'Weekly Checkup',
    'status': 'Pending',
}

SCENARIO_A_TECHNICAL = {
    'careWorker_name': 'Maria',
    'client_name': 'Tom',
    'start_time': '09:00',
    'end_time': '17:00',
    'date': '2025-06-15',
    'type': 'WEEKLY_CHECKUP',
    'status': 'PENDING',
}

TECHNICAL_TOKENS = [
    'careWorker_name', 'client_name', 'start_time', 'end_time',
    'WEEKLY_CHECKUP', 'PENDING', 'createSchedule', '2025-06-15', '09:00', '17:00',
]


class RecordingEffects:
    """
    In-memory effects for every care tool.

    Records ``(tool_name, args)`` per call. ``fail_with`` maps a tool name
    to an exception to raise; ``delay`` maps a tool name to seconds to sleep.
    """

    def __init__(self):
        self.calls = []
        self.fail_with = {}
        self.delay = {}

    def _effect_for(self, tool_name):
        async def effect(args):
            if tool_name in self.delay:
                await asyncio.sleep(self.delay[tool_name])
            self.calls.append((tool_name, dict(args)))
            if tool_name in self.fail_with:
                raise self.fail_with[tool_name]
            return {'message': f"{tool_name} done", 'items': []}
        return effect

    def overrides(self):
        return {
            tool.name: self._effect_for(tool.name)
            for tool in care_tool_definitions()
        }

    def names(self):
        return [name for name, _ in self.calls]


def make_registry(effects: RecordingEffects | None = None) -> ToolRegistry:
    """Fresh frozen registry of the care tools backed by in-memory effects."""
    effects = effects or RecordingEffects()
    registry = register_care_tools(ToolRegistry(), overrides=effects.overrides())
    registry.freeze()
    return registry


def say(text: str) -> Decision:
    return Decision(reply=text)


def call(tool: str, **arguments) -> Decision:
    return Decision(tool_request=ToolRequest(tool=tool, arguments=arguments))


class ScriptedLanguage(LanguageCapability):
    """
    Language capability returning queued decisions in order.

    Items may be a Decision, an exception instance (raised), or a callable
    ``(history, catalogue, instructions) -> Decision``.
    """

    def __init__(self, *script):
        self.script = list(script)
        self.calls = []

    def queue(self, *items):
        self.script.extend(items)

    async def decide(self, history, catalogue, instructions):
        self.calls.append({
            'history': list(history),
            'catalogue': catalogue,
            'instructions': instructions,
        })
        if not self.script:
            return say("How can I help?")
        item = self.script.pop(0)
        if isinstance(item, BaseException):
            raise item
        if callable(item):
            return item(history, catalogue, instructions)
        return item


class SlowLanguage(LanguageCapability):
    def __init__(self, seconds: float):
        self.seconds = seconds

    async def decide(self, history, catalogue, instructions):
        await asyncio.sleep(self.seconds)
        return say("too late")


def make_orchestrator(language=None, effects=None, store=None, **kwargs):
    """
    Orchestrator over fresh in-memory state.

    Returns:
        (orchestrator, effects)
    """
    effects = effects or RecordingEffects()
    orchestrator = ConversationOrchestrator(
        registry=make_registry(effects),
        store=store or SessionStore(ttl_seconds=3600, max_sessions=100),
        language=language or ScriptedLanguage(),
        today=lambda: TODAY,
        **kwargs,
    )
    return orchestrator, effects


def assert_no_technical_tokens(testcase, text, tokens=TECHNICAL_TOKENS):
    for token in tokens:
        testcase.assertNotIn(token, text, f"technical token {token!r} leaked into: {text!r}")
