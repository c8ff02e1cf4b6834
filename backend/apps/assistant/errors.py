"""
Assistant error types.

Messages here are for logs and API clients; they may name technical
fields. Text shown in the chat is produced by the renderer from labels.
"""
from typing import Any, Iterable, Optional


class AssistantError(Exception):
    def __init__(self, code: str, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}


# --- Registry ---------------------------------------------------------------

class UnknownTool(AssistantError):
    def __init__(self, tool_name: str):
        super().__init__("unknown_tool", f"No tool named {tool_name!r}", {"tool": tool_name})
        self.tool_name = tool_name


class DuplicateTool(AssistantError):
    def __init__(self, tool_name: str):
        super().__init__("duplicate_tool", f"Tool {tool_name!r} is already registered", {"tool": tool_name})


class RegistryFrozen(AssistantError):
    def __init__(self, tool_name: str):
        super().__init__(
            "registry_frozen",
            f"Cannot register {tool_name!r}: the registry is frozen",
            {"tool": tool_name},
        )


# --- Translation ------------------------------------------------------------

class UnmappableField(AssistantError):
    def __init__(self, tool_name: str, key: str, value: Any = None):
        super().__init__(
            "unmappable_field",
            f"{key!r} does not map to a field or value of {tool_name!r}",
            {"tool": tool_name, "key": key, "value": value},
        )
        self.key = key
        self.value = value


class UnparsableValue(AssistantError):
    def __init__(self, kind: str, value: Any, field: Optional[str] = None):
        super().__init__(
            "unparsable_value",
            f"Could not read {value!r} as a {kind}",
            {"kind": kind, "value": value, "field": field},
        )
        self.kind = kind
        self.value = value
        self.field = field


# --- Validation -------------------------------------------------------------

class MissingRequiredField(AssistantError):
    def __init__(self, tool_name: str, fields: Iterable[str]):
        self.fields = list(fields)
        super().__init__(
            "missing_required_field",
            f"{tool_name!r} is missing {', '.join(self.fields)}",
            {"tool": tool_name, "fields": self.fields},
        )


class InvalidEnumValue(AssistantError):
    def __init__(self, tool_name: str, field: str, value: Any):
        super().__init__(
            "invalid_enum_value",
            f"{value!r} is not an allowed value for {field!r}",
            {"tool": tool_name, "field": field, "value": value},
        )
        self.field = field
        self.value = value


class InvalidFieldValue(AssistantError):
    def __init__(self, tool_name: str, field: str, value: Any, reason: str = ""):
        super().__init__(
            "invalid_field_value",
            f"{value!r} is not valid for {field!r}" + (f": {reason}" if reason else ""),
            {"tool": tool_name, "field": field, "value": value},
        )
        self.field = field
        self.value = value
        self.reason = reason


# --- Orchestration ----------------------------------------------------------

class ConflictingInvocation(AssistantError):
    def __init__(self, pending_tool: str, requested_tool: str):
        super().__init__(
            "conflicting_invocation",
            f"{requested_tool!r} requested while {pending_tool!r} is pending",
            {"pending": pending_tool, "requested": requested_tool},
        )
        self.pending_tool = pending_tool
        self.requested_tool = requested_tool


class ExecutionFailed(AssistantError):
    def __init__(self, tool_name: str, reason: str):
        super().__init__("execution_failed", reason, {"tool": tool_name})
        self.reason = reason


class TimedOut(AssistantError):
    def __init__(self, tool_name: str, seconds: float):
        super().__init__(
            "timed_out",
            f"{tool_name!r} did not finish within {seconds:g}s",
            {"tool": tool_name, "seconds": seconds},
        )
        self.seconds = seconds


class InvalidTransition(AssistantError):
    def __init__(self, current: str, target: str):
        super().__init__(
            "invalid_transition",
            f"Cannot move an invocation from {current} to {target}",
            {"from": current, "to": target},
        )
