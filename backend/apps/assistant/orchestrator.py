"""
Conversation Orchestrator: one chat turn from user text to reply.

Per turn, with the session held exclusively:
  1. Append the user message
  2. Drop an expired pending invocation; honour an explicit cancel, or an
     explicit yes while a confirmation is outstanding
  3. Otherwise ask the language capability to reply or request a tool
  4. Translate, validate and either prompt for details, ask for
     confirmation, or (read-only tools) execute straight away
  5. Append the assistant reply, carrying any finished invocation. Model
     prose and outcome text are scrubbed of technical vocabulary

Mutating tools only ever execute from step 2, after an explicit yes.
"""
import asyncio
import datetime
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from django.conf import settings

from apps.assistant.dispatcher import InvocationDispatcher
from apps.assistant.errors import (
    AssistantError,
    ConflictingInvocation,
    UnknownTool,
)
from apps.assistant.language import (
    Decision,
    LanguageCapability,
    ProviderLanguageCapability,
    ToolRequest,
)
from apps.assistant.prompts import get_system_instructions
from apps.assistant.renderer import ResultRenderer
from apps.assistant.session_store import Session, SessionStore, get_session_store
from apps.assistant.state import (
    InvocationState,
    Message,
    PendingInvocation,
    ToolInvocation,
)
from apps.assistant.tools.registry import ToolRegistry, get_registry
from apps.assistant.translator import ParameterTranslator
from apps.common.logging_utils import build_log_extra

logger = logging.getLogger(__name__)

APOLOGY_REPLY = "Sorry, I'm having trouble right now. Please try again in a moment."
UNKNOWN_TOOL_REPLY = (
    "Sorry, that's not something I can do here. I can help with schedules, "
    "client profiles, cover, staff messages, onboarding, care plans, alerts, "
    "leave and payroll."
)
EMPTY_REPLY = "Sorry, I didn't catch that. Could you say it another way?"


class ReplyIntent(Enum):
    CONFIRM = "confirm"
    CANCEL = "cancel"
    OTHER = "other"


_CONFIRM_PHRASES = {
    'yes', 'y', 'yes please', 'yep', 'yeah', 'confirm', 'confirmed', 'i confirm',
    'go ahead', 'yes go ahead', 'proceed', 'do it', 'ok', 'okay', 'sure',
    'correct', 'that is correct', "that's correct", 'looks good', 'please do',
}
_CANCEL_PHRASES = {
    'cancel', 'cancel it', 'cancel that', 'stop', 'abort', 'never mind',
    'nevermind', 'forget it', 'discard', 'discard it',
}
# Only a cancellation when answering a confirmation; otherwise a field value
_DECLINE_PHRASES = {
    'no', 'n', 'nope', 'no thanks', 'no thank you', "don't", 'do not',
}


def classify_reply(text: str, awaiting_confirmation: bool = True) -> ReplyIntent:
    """
    Deterministic yes/cancel detection; anything else goes to the model.

    While details are still being collected a bare "no" may be the answer
    to a yes/no field, so only explicit cancellations count.
    """
    normalized = re.sub(r"[^\w\s']", ' ', text.lower())
    normalized = re.sub(r'\s+', ' ', normalized).strip()
    if normalized in _CANCEL_PHRASES:
        return ReplyIntent.CANCEL
    if not awaiting_confirmation:
        return ReplyIntent.OTHER
    if normalized in _DECLINE_PHRASES:
        return ReplyIntent.CANCEL
    if normalized in _CONFIRM_PHRASES:
        return ReplyIntent.CONFIRM
    return ReplyIntent.OTHER


@dataclass
class TurnResult:
    """
    What a caller gets back for one message.

    Attributes:
        session_id: Session the turn ran in
        reply: User-facing assistant text
        invocation: Finished tool invocation, if one ran this turn
        pending: The pending invocation left after the turn, if any
        error: Error code when the turn ended in a refusal or failure
    """
    session_id: str
    reply: str
    invocation: Optional[ToolInvocation] = None
    pending: Optional[PendingInvocation] = None
    error: Optional[str] = None


@dataclass
class _Outcome:
    reply: str
    invocation: Optional[ToolInvocation] = None
    error: Optional[str] = None


class ConversationOrchestrator:
    """
    Drives conversations through the registry, translator and dispatcher.

    Args:
        registry: Frozen tool registry
        store: Session store
        language: Language capability deciding reply vs. tool request
        pending_ttl: Seconds an unconfirmed invocation stays valid
        execution_timeout: Seconds an effect may run
        language_timeout: Seconds the language capability may take
        history_window: Messages of history passed to the language capability
        today: Reference-date provider for relative dates
    """

    def __init__(
        self,
        registry: ToolRegistry,
        store: SessionStore,
        language: LanguageCapability,
        *,
        pending_ttl: float = 1800,
        execution_timeout: float = 30.0,
        language_timeout: float = 60.0,
        history_window: int = 20,
        today: Optional[Callable[[], datetime.date]] = None,
    ):
        self.registry = registry
        self.store = store
        self.language = language
        self.pending_ttl = pending_ttl
        self.language_timeout = language_timeout
        self.history_window = history_window
        self._today = today or datetime.date.today
        self.translator = ParameterTranslator(registry, today=self._today)
        self.dispatcher = InvocationDispatcher(registry, execution_timeout=execution_timeout)
        self.renderer = ResultRenderer(self.translator)

    async def handle_message(self, session_id: str, text: str) -> TurnResult:
        """
        Process one user message and return the assistant's reply.

        Messages for the same session are processed one at a time in arrival
        order; different sessions proceed concurrently.
        """
        text = (text or "").strip()
        if not text:
            raise ValueError("Message text cannot be empty")

        async with self.store.session(session_id) as session:
            logger.info("assistant_turn_started", extra=build_log_extra(session_id=session_id))
            session.append(Message.user(text))

            outcome = await self._turn(session, text)

            session.append(Message.assistant(outcome.reply, outcome.invocation))
            logger.info(
                "assistant_turn_completed",
                extra=build_log_extra(
                    session_id=session_id,
                    tool_name=outcome.invocation.tool_name if outcome.invocation else None,
                    error_code=outcome.error,
                    pending_state=session.pending.state.value if session.pending else None,
                ),
            )
            return TurnResult(
                session_id=session_id,
                reply=outcome.reply,
                invocation=outcome.invocation,
                pending=session.pending,
                error=outcome.error,
            )

    # ------------------------------------------------------------------
    # Turn steps
    # ------------------------------------------------------------------

    async def _turn(self, session: Session, text: str) -> _Outcome:
        notice = ""
        pending = session.pending
        if pending is not None and pending.is_expired():
            logger.info(
                "pending_invocation_expired",
                extra=build_log_extra(session_id=session.id, tool_name=pending.tool_name),
            )
            notice = self.renderer.render_expired(pending.tool_name)
            session.set_pending(None)
            pending = None

        if pending is not None:
            awaiting = pending.state == InvocationState.AWAITING_CONFIRMATION
            intent = classify_reply(text, awaiting_confirmation=awaiting)
            if intent == ReplyIntent.CANCEL:
                session.set_pending(None)
                return _Outcome(self.renderer.render_cancelled(pending.tool_name))
            if intent == ReplyIntent.CONFIRM:
                pending.confirmed = True
                return await self._execute(session, pending)

        decision = await self._decide(session)
        if decision is None:
            return _Outcome(self._with_notice(notice, APOLOGY_REPLY), error="language_unavailable")
        if not decision.is_tool_request:
            reply = self.translator.scrub(decision.reply.strip()) or EMPTY_REPLY
            return _Outcome(self._with_notice(notice, reply))

        outcome = await self._handle_tool_request(session, decision.tool_request)
        outcome.reply = self._with_notice(notice, outcome.reply)
        return outcome

    def _render_outcome(self, invocation: ToolInvocation) -> str:
        # Only free text is scrubbed; confirmations echo user values verbatim
        return self.translator.scrub(self.renderer.render_outcome(invocation))

    @staticmethod
    def _with_notice(notice: str, reply: str) -> str:
        return f"{notice}\n\n{reply}" if notice else reply

    async def _decide(self, session: Session) -> Optional[Decision]:
        history = session.messages[-self.history_window:]
        instructions = get_system_instructions(session.pending, today=self._today())
        try:
            return await asyncio.wait_for(
                self.language.decide(history, self.registry.catalogue(), instructions),
                timeout=self.language_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "language_capability_timed_out",
                extra=build_log_extra(session_id=session.id, timeout=self.language_timeout),
            )
        except Exception as e:
            # Provider errors must not break the session
            logger.exception(
                "language_capability_failed",
                extra=build_log_extra(session_id=session.id, error_type=type(e).__name__),
            )
        return None

    async def _handle_tool_request(self, session: Session, request: ToolRequest) -> _Outcome:
        tool_name = request.tool
        if tool_name not in self.registry:
            logger.warning(
                "unknown_tool_requested",
                extra=build_log_extra(session_id=session.id, tool_name=tool_name),
            )
            return _Outcome(UNKNOWN_TOOL_REPLY, error=UnknownTool(tool_name).code)

        pending = session.pending
        if pending is not None and pending.tool_name != tool_name:
            conflict = ConflictingInvocation(pending.tool_name, tool_name)
            logger.info(
                "conflicting_invocation",
                extra=build_log_extra(session_id=session.id, **conflict.details),
            )
            return _Outcome(
                self.renderer.render_conflict(pending.tool_name, tool_name),
                error=conflict.code,
            )

        coerced = self.translator.coerce_extracted(tool_name, request.arguments)

        if pending is None:
            pending = PendingInvocation(tool_name=tool_name)
            changed = True
        else:
            changed = any(
                pending.arguments.get(key) != value
                for key, value in coerced.arguments.items()
            ) or bool(coerced.unparsable)
        pending = pending.merged_with(coerced.arguments)
        for field_name in coerced.unparsable:
            pending.arguments.pop(field_name, None)

        if changed and pending.state == InvocationState.AWAITING_CONFIRMATION:
            # Edited after confirmation was requested: confirm again
            pending.move_to(InvocationState.COLLECTING)
        pending.touch(self.pending_ttl)

        if coerced.unparsable:
            pending.missing = self.dispatcher.missing_fields(tool_name, pending.arguments)
            session.set_pending(pending)
            return _Outcome(
                self.renderer.render_unparsable(tool_name, coerced.unparsable),
                error="unparsable_value",
            )

        advance = self.dispatcher.advance(pending)
        if advance.error is not None:
            session.set_pending(pending)
            return _Outcome(
                self.renderer.render_invalid(tool_name, advance.error),
                error=advance.error.code,
            )
        if advance.ready_to_execute:
            return await self._execute(session, pending)

        session.set_pending(pending)
        return _Outcome(self.renderer.render_confirmation(pending))

    async def _execute(self, session: Session, pending: PendingInvocation) -> _Outcome:
        pending.move_to(InvocationState.EXECUTING)
        task = asyncio.ensure_future(
            self.dispatcher.execute(pending.tool_name, pending.arguments)
        )
        try:
            invocation = await asyncio.shield(task)
        except asyncio.CancelledError:
            # Let the effect settle and keep its record before giving up
            invocation = await task
            session.set_pending(None)
            session.append(Message.assistant(self._render_outcome(invocation), invocation))
            logger.warning(
                "assistant_turn_cancelled",
                extra=build_log_extra(session_id=session.id, tool_name=invocation.tool_name),
            )
            raise

        session.set_pending(None)
        return _Outcome(
            self._render_outcome(invocation),
            invocation=invocation,
            error=invocation.error.code if invocation.error else None,
        )


# ---------------------------------------------------------------------------
# Process-wide orchestrator (lazy singleton)
# ---------------------------------------------------------------------------

_orchestrator: Optional[ConversationOrchestrator] = None


def get_orchestrator() -> ConversationOrchestrator:
    """Lazy singleton wired from settings.ASSISTANT."""
    global _orchestrator
    if _orchestrator is None:
        config = settings.ASSISTANT
        _orchestrator = ConversationOrchestrator(
            registry=get_registry(),
            store=get_session_store(),
            language=ProviderLanguageCapability(model_key=config['MODEL_KEY']),
            pending_ttl=config['PENDING_TTL_SECONDS'],
            execution_timeout=config['EXECUTION_TIMEOUT_SECONDS'],
            language_timeout=config['LANGUAGE_TIMEOUT_SECONDS'],
            history_window=config['HISTORY_WINDOW'],
        )
    return _orchestrator


def set_orchestrator(orchestrator: Optional[ConversationOrchestrator]) -> None:
    """Replace the process-wide orchestrator (used by tests)."""
    global _orchestrator
    _orchestrator = orchestrator
