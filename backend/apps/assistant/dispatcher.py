"""
Invocation Dispatcher: validates tool arguments and runs effects.

Handles:
  - validation: required fields first, then per-field enum and type checks
  - advancing a pending invocation (collecting <-> awaiting_confirmation)
  - execution: executing -> succeeded | failed, bounded by a timeout

Confirmation policy is static per tool (ToolKind). The dispatcher never
executes a mutating tool on its own; the orchestrator calls execute() only
after the user confirmed.
"""

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

from apps.assistant.errors import (
    AssistantError,
    ExecutionFailed,
    InvalidEnumValue,
    InvalidFieldValue,
    MissingRequiredField,
    TimedOut,
)
from apps.assistant.state import (
    InvocationError,
    InvocationState,
    PendingInvocation,
    ToolInvocation,
)
from apps.assistant.tools.registry import FieldType, ToolRegistry

logger = logging.getLogger(__name__)

_EMAIL = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')
_CANONICAL_DATE = re.compile(r'^\d{4}-\d{2}-\d{2}$')
_CANONICAL_TIME = re.compile(r'^([01]\d|2[0-3]):[0-5]\d$')

GENERIC_FAILURE = "Action failed. Please try again."


@dataclass
class Advance:
    """
    Result of advancing a pending invocation.

    Exactly one of: ``error`` is set (still collecting), ``ready_to_execute``
    (read-only tool with valid arguments) or the pending invocation is now
    awaiting confirmation.
    """
    pending: PendingInvocation
    error: Optional[AssistantError] = None
    ready_to_execute: bool = False

    @property
    def awaiting_confirmation(self) -> bool:
        return self.pending.state == InvocationState.AWAITING_CONFIRMATION


class InvocationDispatcher:
    """Validates and executes tool invocations against a registry."""

    def __init__(self, registry: ToolRegistry, execution_timeout: float = 30.0):
        self.registry = registry
        self.execution_timeout = execution_timeout

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def missing_fields(self, tool_name: str, args: Dict[str, Any]) -> list:
        tool = self.registry.get(tool_name)
        return [
            name for name in tool.required_fields
            if args.get(name) is None or (isinstance(args.get(name), str) and not args[name].strip())
        ]

    def validate(self, tool_name: str, args: Dict[str, Any]) -> None:
        """
        Check technical arguments.

        Raises:
            UnknownTool: tool not registered
            MissingRequiredField: listing every missing required field
            InvalidEnumValue: value outside a field's choices
            InvalidFieldValue: value of the wrong shape for its type
        """
        tool = self.registry.get(tool_name)

        missing = self.missing_fields(tool_name, args)
        if missing:
            raise MissingRequiredField(tool_name, missing)

        for spec in tool.fields:
            value = args.get(spec.name)
            if value is None:
                continue
            if spec.type == FieldType.ENUM:
                if value not in spec.tokens:
                    raise InvalidEnumValue(tool_name, spec.name, value)
            elif spec.type == FieldType.BOOLEAN:
                if not isinstance(value, bool):
                    raise InvalidFieldValue(tool_name, spec.name, value, "expected yes or no")
            elif spec.type == FieldType.EMAIL:
                if not isinstance(value, str) or not _EMAIL.match(value):
                    raise InvalidFieldValue(tool_name, spec.name, value, "not an email address")
            elif spec.type == FieldType.DATE:
                if not isinstance(value, str) or not _CANONICAL_DATE.match(value):
                    raise InvalidFieldValue(tool_name, spec.name, value, "not a date")
            elif spec.type == FieldType.TIME:
                if not isinstance(value, str) or not _CANONICAL_TIME.match(value):
                    raise InvalidFieldValue(tool_name, spec.name, value, "not a time")
            elif not isinstance(value, str):
                raise InvalidFieldValue(tool_name, spec.name, value, "expected text")

    def advance(self, pending: PendingInvocation) -> Advance:
        """
        Validate a pending invocation and move it along its lifecycle.

        Invalid arguments leave (or put) it in collecting with ``missing``
        updated; a rejected value is removed so its field stays outstanding.
        Valid arguments move a mutating tool to awaiting_confirmation and
        flag a read-only tool as ready.
        """
        tool = self.registry.get(pending.tool_name)
        try:
            self.validate(pending.tool_name, pending.arguments)
        except (MissingRequiredField, InvalidEnumValue, InvalidFieldValue) as exc:
            if isinstance(exc, (InvalidEnumValue, InvalidFieldValue)):
                pending.arguments.pop(exc.field, None)
            pending.missing = self.missing_fields(pending.tool_name, pending.arguments)
            pending.move_to(InvocationState.COLLECTING)
            return Advance(pending=pending, error=exc)

        pending.missing = []

        if tool.requires_confirmation:
            if pending.state != InvocationState.AWAITING_CONFIRMATION:
                pending.move_to(InvocationState.AWAITING_CONFIRMATION)
            return Advance(pending=pending)
        return Advance(pending=pending, ready_to_execute=True)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def execute(self, tool_name: str, args: Dict[str, Any]) -> ToolInvocation:
        """
        Run the tool's effect.

        Always returns a terminal ToolInvocation; the effect's exceptions
        are recorded, never raised.
        """
        tool = self.registry.get(tool_name)
        invocation = ToolInvocation(tool_name=tool_name, arguments=dict(args))

        logger.info(
            "tool_execution_started",
            extra={'tool_name': tool_name, 'kind': tool.kind.value, 'invocation_id': invocation.id},
        )

        try:
            output = await asyncio.wait_for(tool.effect(dict(args)), timeout=self.execution_timeout)
        except asyncio.TimeoutError:
            logger.warning(
                "tool_execution_timed_out",
                extra={'tool_name': tool_name, 'timeout': self.execution_timeout},
            )
            return invocation.transition(
                InvocationState.FAILED,
                error=InvocationError.from_exception(TimedOut(tool_name, self.execution_timeout)),
            )
        except ValueError as e:
            # User-caused errors (validation, duplicate): safe to expose
            logger.warning("Tool action rejected: %s: %s", tool_name, e)
            return invocation.transition(
                InvocationState.FAILED,
                error=InvocationError.from_exception(ExecutionFailed(tool_name, str(e))),
            )
        except Exception as e:
            # System errors: don't leak internals
            logger.exception(
                "tool_execution_failed",
                extra={'tool_name': tool_name, 'error_type': type(e).__name__},
            )
            return invocation.transition(
                InvocationState.FAILED,
                error=InvocationError.from_exception(ExecutionFailed(tool_name, GENERIC_FAILURE)),
            )

        logger.info(
            "tool_execution_succeeded",
            extra={'tool_name': tool_name, 'invocation_id': invocation.id},
        )
        return invocation.transition(
            InvocationState.SUCCEEDED,
            result=output if isinstance(output, dict) else {'message': str(output)},
        )
