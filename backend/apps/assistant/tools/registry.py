"""
Tool Registry: typed tool definitions with confirmation policy.

Each tool maps a technical name and field set to an async effect that
calls into AgencyService. The registry makes tools discoverable by the
prompt builder, the translator and the dispatcher.

Kinds:
  MUTATING: creates or sends something; held for explicit user confirmation
  READ_ONLY: lookups and reports; executed as soon as arguments are valid
"""

import logging
import re
import threading
from enum import Enum
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from apps.assistant.errors import DuplicateTool, RegistryFrozen, UnknownTool

logger = logging.getLogger(__name__)

Effect = Callable[[Dict[str, Any]], Awaitable[Dict[str, Any]]]

_MINOR_WORDS = {'and', 'of', 'to', 'for', 'in', 'or', 'the', 'a'}
_ACRONYMS = {'SMS', 'TOIL', 'GP', 'NHS', 'ID'}


def default_label(token: str) -> str:
    """
    Human label for an enum token.

    "FAMILY_AND_FRIENDS" -> "Family and Friends", "SMS" -> "SMS",
    "WEEKLY_CHECKUP" -> "Weekly Checkup".
    """
    words = [w for w in re.split(r'[_\s]+', token) if w]
    labelled = []
    for index, word in enumerate(words):
        if word.upper() in _ACRONYMS:
            labelled.append(word.upper())
        elif index > 0 and word.lower() in _MINOR_WORDS:
            labelled.append(word.lower())
        else:
            labelled.append(word.capitalize())
    return ' '.join(labelled)


class FieldType(Enum):
    """Semantic type of a tool field; drives normalization and validation."""
    STRING = "string"
    EMAIL = "email"
    DATE = "date"        # canonical YYYY-MM-DD
    TIME = "time"        # canonical HH:MM, 24-hour
    BOOLEAN = "boolean"
    ENUM = "enum"


class ToolKind(Enum):
    """Static confirmation policy of a tool."""
    MUTATING = "mutating"
    READ_ONLY = "read_only"


@dataclass(frozen=True)
class EnumChoice:
    token: str
    label: str = ""

    def __post_init__(self):
        if not self.label:
            object.__setattr__(self, 'label', default_label(self.token))


@dataclass(frozen=True)
class FieldSpec:
    """
    One argument of a tool.

    Attributes:
        name: Technical field name (e.g. "careWorker_name")
        label: User-facing label (e.g. "Care Worker")
        type: Semantic type
        required: Whether the tool cannot run without it
        choices: Allowed values for ENUM fields, in display order
        description: Hint for the language model
    """
    name: str
    label: str
    type: FieldType = FieldType.STRING
    required: bool = True
    choices: Tuple[EnumChoice, ...] = ()
    description: str = ""

    def __post_init__(self):
        choices = tuple(
            c if isinstance(c, EnumChoice) else EnumChoice(c)
            for c in self.choices
        )
        object.__setattr__(self, 'choices', choices)
        if self.type == FieldType.ENUM and not choices:
            raise ValueError(f"Enum field '{self.name}' needs at least one choice")

    @property
    def tokens(self) -> List[str]:
        return [c.token for c in self.choices]

    def choice_for_token(self, token: Any) -> Optional[EnumChoice]:
        for choice in self.choices:
            if choice.token == token:
                return choice
        return None

    def json_schema(self) -> Dict[str, Any]:
        if self.type == FieldType.BOOLEAN:
            schema: Dict[str, Any] = {'type': 'boolean'}
        else:
            schema = {'type': 'string'}
        if self.type == FieldType.ENUM:
            schema['enum'] = self.tokens
        elif self.type == FieldType.DATE:
            schema['format'] = 'date'
        elif self.type == FieldType.TIME:
            schema['pattern'] = r'^\d{2}:\d{2}$'
        elif self.type == FieldType.EMAIL:
            schema['format'] = 'email'
        if self.description:
            schema['description'] = self.description
        return schema


@dataclass(frozen=True)
class ToolDefinition:
    """
    Definition of a tool available to the assistant.

    Attributes:
        name: Unique technical identifier (e.g. "createSchedule")
        description: What the tool does, shown to the language model
        fields: Ordered field specs
        effect: Async callable receiving the technical arguments
        kind: MUTATING or READ_ONLY
        display_name: Short user-facing name (e.g. "Create Schedule")
    """
    name: str
    description: str
    fields: Tuple[FieldSpec, ...]
    effect: Effect
    kind: ToolKind = ToolKind.MUTATING
    display_name: str = ""

    def __post_init__(self):
        object.__setattr__(self, 'fields', tuple(self.fields))
        if not self.display_name:
            spaced = re.sub(r'(?<=[a-z])(?=[A-Z])', ' ', self.name).replace('_', ' ')
            object.__setattr__(self, 'display_name', spaced.title())
        names = [f.name for f in self.fields]
        if len(names) != len(set(names)):
            raise ValueError(f"Tool '{self.name}' declares a field twice")

    @property
    def requires_confirmation(self) -> bool:
        return self.kind == ToolKind.MUTATING

    @property
    def required_fields(self) -> List[str]:
        return [f.name for f in self.fields if f.required]

    def field(self, name: str) -> Optional[FieldSpec]:
        for spec in self.fields:
            if spec.name == name:
                return spec
        return None

    def input_schema(self) -> Dict[str, Any]:
        return {
            'type': 'object',
            'properties': {f.name: f.json_schema() for f in self.fields},
            'required': self.required_fields,
        }


class ToolRegistry:
    """
    Registry of available tools.

    Populated once at startup (see schemas.py and AssistantConfig.ready)
    and frozen; afterwards it is read concurrently without locking.
    """

    # Section markers the system prompt relies on
    _FORBIDDEN_MARKERS = [
        '<pending_action>', '</pending_action>',
        '<tools>', '</tools>',
        '<instructions>', '</instructions>',
    ]

    def __init__(self):
        self._tools: Dict[str, ToolDefinition] = {}
        self._frozen = False
        self._lock = threading.Lock()

    def register(self, tool: ToolDefinition) -> ToolDefinition:
        """Register a tool definition. Validates against section marker injection."""
        for marker in self._FORBIDDEN_MARKERS:
            if marker in tool.description:
                raise ValueError(
                    f"Tool '{tool.name}' description contains forbidden marker: {marker}"
                )
        with self._lock:
            if self._frozen:
                raise RegistryFrozen(tool.name)
            if tool.name in self._tools:
                raise DuplicateTool(tool.name)
            self._tools[tool.name] = tool
        logger.debug("Registered tool: %s (%s)", tool.name, tool.kind.value)
        return tool

    def get(self, name: str) -> ToolDefinition:
        tool = self._tools.get(name)
        if tool is None:
            raise UnknownTool(name)
        return tool

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def list(self) -> List[ToolDefinition]:
        """All registered tools in registration order."""
        return list(self._tools.values())

    def catalogue(self) -> List[Dict[str, Any]]:
        """
        Technical tool schemas for the language model.

        Anthropic tool format; ``to_openai_tools`` converts for OpenAI.
        """
        return [
            {
                'name': tool.name,
                'description': tool.description,
                'input_schema': tool.input_schema(),
            }
            for tool in self._tools.values()
        ]

    def freeze(self) -> None:
        with self._lock:
            self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen


# Process-wide registry, filled and frozen by AssistantConfig.ready()
default_registry = ToolRegistry()


def get_registry() -> ToolRegistry:
    return default_registry
