"""
Conversation state: messages, pending invocations and invocation records.

All values held here are in technical format; the translator renders them
for people.
"""
import datetime
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from apps.assistant.errors import AssistantError, InvalidTransition


def _now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def _new_id() -> str:
    return uuid.uuid4().hex


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class InvocationState(str, Enum):
    """
    Lifecycle of a tool invocation.

    collecting -> awaiting_confirmation -> executing -> succeeded | failed
    Read-only tools skip awaiting_confirmation.
    """
    COLLECTING = "collecting"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    EXECUTING = "executing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (InvocationState.SUCCEEDED, InvocationState.FAILED)


_TRANSITIONS = {
    InvocationState.COLLECTING: {
        InvocationState.COLLECTING,
        InvocationState.AWAITING_CONFIRMATION,
        InvocationState.EXECUTING,
    },
    InvocationState.AWAITING_CONFIRMATION: {
        InvocationState.COLLECTING,
        InvocationState.AWAITING_CONFIRMATION,
        InvocationState.EXECUTING,
    },
    InvocationState.EXECUTING: {
        InvocationState.SUCCEEDED,
        InvocationState.FAILED,
    },
    InvocationState.SUCCEEDED: set(),
    InvocationState.FAILED: set(),
}


def check_transition(current: InvocationState, target: InvocationState) -> None:
    if target not in _TRANSITIONS[current]:
        raise InvalidTransition(current.value, target.value)


@dataclass(frozen=True)
class InvocationError:
    code: str
    reason: str

    @classmethod
    def from_exception(cls, exc: AssistantError) -> 'InvocationError':
        return cls(code=exc.code, reason=exc.message)


@dataclass
class ToolInvocation:
    """
    Record of one tool run. Becomes immutable once terminal.

    Attributes:
        tool_name: Registered tool name
        arguments: Final technical arguments
        state: Current lifecycle state
        result: Effect payload on success
        error: Failure code and human reason
    """
    tool_name: str
    arguments: Dict[str, Any]
    state: InvocationState = InvocationState.EXECUTING
    result: Optional[Dict[str, Any]] = None
    error: Optional[InvocationError] = None
    id: str = field(default_factory=_new_id)
    started_at: datetime.datetime = field(default_factory=_now)
    finished_at: Optional[datetime.datetime] = None

    def transition(self, target: InvocationState, *, result=None, error: Optional[InvocationError] = None):
        check_transition(self.state, target)
        self.state = target
        if target == InvocationState.SUCCEEDED:
            self.result = result or {}
        elif target == InvocationState.FAILED:
            self.error = error
        if target.is_terminal:
            self.finished_at = _now()
        return self

    @property
    def succeeded(self) -> bool:
        return self.state == InvocationState.SUCCEEDED


@dataclass
class PendingInvocation:
    """
    A tool call being assembled or awaiting confirmation.

    At most one per session. Expires ``ttl`` after its last update.
    """
    tool_name: str
    arguments: Dict[str, Any] = field(default_factory=dict)
    missing: List[str] = field(default_factory=list)
    state: InvocationState = InvocationState.COLLECTING
    confirmed: bool = False
    created_at: datetime.datetime = field(default_factory=_now)
    updated_at: datetime.datetime = field(default_factory=_now)
    expires_at: Optional[datetime.datetime] = None

    def touch(self, ttl_seconds: float) -> None:
        self.updated_at = _now()
        self.expires_at = self.updated_at + datetime.timedelta(seconds=ttl_seconds)

    def is_expired(self, now: Optional[datetime.datetime] = None) -> bool:
        if self.expires_at is None:
            return False
        return (now or _now()) >= self.expires_at

    def move_to(self, target: InvocationState) -> None:
        check_transition(self.state, target)
        self.state = target
        if target != InvocationState.AWAITING_CONFIRMATION:
            self.confirmed = False

    def merged_with(self, arguments: Dict[str, Any]) -> 'PendingInvocation':
        merged = dict(self.arguments)
        merged.update(arguments)
        return replace(self, arguments=merged)


@dataclass(frozen=True)
class MessagePart:
    """A text segment or a reference to a tool invocation."""
    kind: str  # "text" | "tool_invocation"
    text: str = ""
    invocation: Optional[ToolInvocation] = None

    @classmethod
    def of_text(cls, text: str) -> 'MessagePart':
        return cls(kind='text', text=text)

    @classmethod
    def of_invocation(cls, invocation: ToolInvocation) -> 'MessagePart':
        return cls(kind='tool_invocation', invocation=invocation)


@dataclass(frozen=True)
class Message:
    role: Role
    content: str
    parts: Tuple[MessagePart, ...] = ()
    id: str = field(default_factory=_new_id)
    created_at: datetime.datetime = field(default_factory=_now)

    @classmethod
    def user(cls, content: str) -> 'Message':
        return cls(role=Role.USER, content=content, parts=(MessagePart.of_text(content),))

    @classmethod
    def assistant(cls, content: str, invocation: Optional[ToolInvocation] = None) -> 'Message':
        parts = [MessagePart.of_text(content)]
        if invocation is not None:
            parts.append(MessagePart.of_invocation(invocation))
        return cls(role=Role.ASSISTANT, content=content, parts=tuple(parts))

    @property
    def invocations(self) -> List[ToolInvocation]:
        return [p.invocation for p in self.parts if p.invocation is not None]
