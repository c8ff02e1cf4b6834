"""
Result Renderer: user-facing text for every assistant outcome.

Built only from translator labels and tool display names, so technical
identifiers never reach the reply.
"""
from typing import Any, Dict, List

from apps.assistant.errors import (
    AssistantError,
    InvalidEnumValue,
    InvalidFieldValue,
    MissingRequiredField,
)
from apps.assistant.state import PendingInvocation, ToolInvocation
from apps.assistant.translator import ParameterTranslator


def _join(labels: List[str]) -> str:
    bold = [f"**{label}**" for label in labels]
    if len(bold) <= 1:
        return ''.join(bold)
    return f"{', '.join(bold[:-1])} and {bold[-1]}"


def _details(pairs) -> str:
    return "\n".join(f"- **{label}:** {value}" for label, value in pairs)


class ResultRenderer:
    """Turns invocation state into chat replies."""

    def __init__(self, translator: ParameterTranslator):
        self.translator = translator

    def render_missing(self, tool_name: str, fields: List[str]) -> str:
        labels = self.translator.field_labels(tool_name, fields)
        return f"For **{self.translator.display_name(tool_name)}**, I still need the {_join(labels)}."

    def render_invalid(self, tool_name: str, error: AssistantError) -> str:
        if isinstance(error, MissingRequiredField):
            return self.render_missing(tool_name, error.fields)

        label = self.translator.field_label(tool_name, error.details.get('field', ''))
        if isinstance(error, InvalidEnumValue):
            options = self.translator.choice_labels(tool_name, error.field)
            return (
                f"That isn't one of the options for **{label}**. "
                f"Please choose one of: {', '.join(options)}."
            )
        if isinstance(error, InvalidFieldValue):
            return f"That doesn't look like a valid **{label}**. Could you check it?"
        return f"Something about the **{label}** isn't right. Could you check it?"

    def render_unparsable(self, tool_name: str, unparsable: Dict[str, Any]) -> str:
        parts = [
            f'"{value}" for the **{self.translator.field_label(tool_name, name)}**'
            for name, value in unparsable.items()
        ]
        return f"I couldn't understand {' or '.join(parts)}. Could you say it another way?"

    def render_confirmation(self, pending: PendingInvocation) -> str:
        pairs = self.translator.to_user_format(pending.tool_name, pending.arguments)
        name = self.translator.display_name(pending.tool_name)
        return f"Please confirm **{name}** with these details:\n\n{_details(pairs)}\n\nShall I go ahead?"

    def render_outcome(self, invocation: ToolInvocation) -> str:
        name = self.translator.display_name(invocation.tool_name)
        if invocation.succeeded:
            result = invocation.result or {}
            message = result.get('message') or f"{name} is done."
            items = result.get('items') or []
            if items:
                message += "\n\n" + "\n".join(f"- {item}" for item in items)
            return message

        error = invocation.error
        if error is not None and error.code == "timed_out":
            return f"**{name}** is taking too long to finish, so I stopped waiting. Please check before trying again."
        reason = error.reason if error is not None else ""
        return f"I couldn't complete **{name}**. {reason}".strip()

    def render_conflict(self, pending_tool: str, requested_tool: str) -> str:
        pending = self.translator.display_name(pending_tool)
        requested = self.translator.display_name(requested_tool)
        return (
            f"I'm still working on **{pending}**. Please confirm or cancel it "
            f"before we move on to **{requested}**."
        )

    def render_cancelled(self, tool_name: str) -> str:
        return f"Okay, I've cancelled **{self.translator.display_name(tool_name)}**."

    def render_expired(self, tool_name: str) -> str:
        return (
            f"The earlier **{self.translator.display_name(tool_name)}** request expired, "
            f"so I've set it aside."
        )
