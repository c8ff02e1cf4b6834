"""
Parameter Translator: the boundary between technical and user vocabulary.

Technical format is what effects and the language model see: field names
such as ``careWorker_name``, enum tokens such as ``WEEKLY_CHECKUP``,
canonical ``YYYY-MM-DD`` / ``HH:MM`` values. User format is what people
read and type: "Care Worker", "Weekly Checkup", "15 June 2025", "9:00 AM".

Nothing outside this module maps between the two.
"""
import datetime
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from apps.assistant.errors import UnmappableField, UnparsableValue
from apps.assistant.normalizers import (
    humanize_date,
    humanize_time,
    normalize_boolean,
    normalize_date,
    normalize_time,
)
from apps.assistant.tools.registry import EnumChoice, FieldSpec, FieldType, ToolRegistry

logger = logging.getLogger(__name__)

UserInput = Union[Mapping[str, Any], Iterable[Tuple[str, Any]]]


def match_key(text: str) -> str:
    """Case, spacing, underscore and camelCase insensitive comparison key."""
    text = re.sub(r'(?<=[a-z])(?=[A-Z])', ' ', str(text))
    text = re.sub(r'[_\-]+', ' ', text.lower())
    return re.sub(r'\s+', ' ', text).strip()


def looks_technical(identifier: str) -> bool:
    """True for snake_case, camelCase and SHOUTING tokens."""
    return (
        '_' in identifier
        or re.search(r'[a-z][A-Z]', identifier) is not None
        or (identifier.isupper() and len(identifier) > 1)
    )


@dataclass
class CoercionResult:
    """
    Outcome of leniently translating language-model arguments.

    Attributes:
        arguments: Technical arguments that could be mapped
        unparsable: Field name -> raw value for dates/times/booleans that
            could not be read
        dropped: Keys that matched no field
    """
    arguments: Dict[str, Any] = field(default_factory=dict)
    unparsable: Dict[str, Any] = field(default_factory=dict)
    dropped: List[str] = field(default_factory=list)


class ParameterTranslator:
    """Maps tool arguments between technical and user format."""

    def __init__(self, registry: ToolRegistry, today: Optional[Callable[[], datetime.date]] = None):
        self.registry = registry
        self._today = today or datetime.date.today
        self._scrub_pattern: Optional[re.Pattern] = None
        self._scrub_map: Dict[str, str] = {}
        self._scrub_size = -1

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def _field_for_key(self, tool_name: str, key: str) -> Optional[FieldSpec]:
        wanted = match_key(key)
        for spec in self.registry.get(tool_name).fields:
            if wanted in (match_key(spec.name), match_key(spec.label)):
                return spec
        return None

    @staticmethod
    def _choice_for_value(spec: FieldSpec, value: Any) -> Optional[EnumChoice]:
        exact = spec.choice_for_token(value)
        if exact is not None:
            return exact
        wanted = match_key(value)
        for choice in spec.choices:
            if wanted in (match_key(choice.token), match_key(choice.label)):
                return choice
        return None

    def display_name(self, tool_name: str) -> str:
        return self.registry.get(tool_name).display_name

    def field_label(self, tool_name: str, field_name: str) -> str:
        spec = self.registry.get(tool_name).field(field_name)
        return spec.label if spec else field_name

    def field_labels(self, tool_name: str, field_names: Iterable[str]) -> List[str]:
        return [self.field_label(tool_name, name) for name in field_names]

    def choice_labels(self, tool_name: str, field_name: str) -> List[str]:
        spec = self.registry.get(tool_name).field(field_name)
        return [c.label for c in spec.choices] if spec else []

    def value_label(self, tool_name: str, field_name: str, value: Any) -> str:
        spec = self.registry.get(tool_name).field(field_name)
        if spec is None:
            return str(value)
        return self._user_value(spec, value)

    # ------------------------------------------------------------------
    # Technical -> user
    # ------------------------------------------------------------------

    @staticmethod
    def _user_value(spec: FieldSpec, value: Any) -> str:
        if spec.type == FieldType.BOOLEAN and isinstance(value, bool):
            return 'Yes' if value else 'No'
        if spec.type == FieldType.ENUM:
            choice = spec.choice_for_token(value)
            return choice.label if choice else str(value)
        try:
            if spec.type == FieldType.DATE:
                return humanize_date(value)
            if spec.type == FieldType.TIME:
                return humanize_time(value)
        except (TypeError, ValueError):
            pass
        return str(value)

    def to_user_format(self, tool_name: str, technical_args: Mapping[str, Any]) -> List[Tuple[str, str]]:
        """
        Render technical arguments as ``(label, value)`` pairs in field order.

        Raises:
            UnknownTool: if the tool is not registered
        """
        tool = self.registry.get(tool_name)
        return [
            (spec.label, self._user_value(spec, technical_args[spec.name]))
            for spec in tool.fields
            if technical_args.get(spec.name) is not None
        ]

    # ------------------------------------------------------------------
    # User -> technical
    # ------------------------------------------------------------------

    def _normalize(self, tool_name: str, spec: FieldSpec, value: Any, strict: bool) -> Any:
        try:
            if spec.type == FieldType.DATE:
                return normalize_date(value, today=self._today())
            if spec.type == FieldType.TIME:
                return normalize_time(value)
            if spec.type == FieldType.BOOLEAN:
                return normalize_boolean(value)
        except UnparsableValue as exc:
            exc.field = spec.name
            exc.details['field'] = spec.name
            raise

        if spec.type == FieldType.ENUM:
            choice = self._choice_for_value(spec, value)
            if choice is not None:
                return choice.token
            if strict:
                raise UnmappableField(tool_name, spec.name, value)
            # Left as given so validation reports it against the field
            return str(value).strip()

        return str(value).strip()

    def to_technical_format(self, tool_name: str, user_input: UserInput) -> Dict[str, Any]:
        """
        Translate user-format input into technical arguments.

        Keys may be labels or technical names in any case or spacing.

        Raises:
            UnknownTool: if the tool is not registered
            UnmappableField: for a key matching no field or an unknown enum label
            UnparsableValue: for a date, time or yes/no answer that cannot be read
        """
        items = user_input.items() if isinstance(user_input, Mapping) else user_input
        technical: Dict[str, Any] = {}
        for key, value in items:
            spec = self._field_for_key(tool_name, key)
            if spec is None:
                raise UnmappableField(tool_name, key, value)
            if value is None or (isinstance(value, str) and not value.strip()):
                continue
            technical[spec.name] = self._normalize(tool_name, spec, value, strict=True)
        return technical

    def coerce_extracted(self, tool_name: str, raw_args: Any) -> CoercionResult:
        """
        Leniently translate arguments extracted by the language model.

        Unknown keys are dropped, unreadable dates/times are reported per
        field, and unmatched enum values are kept for validation to flag.
        """
        result = CoercionResult()
        if not isinstance(raw_args, Mapping):
            logger.warning(
                "extracted_arguments_malformed",
                extra={'tool_name': tool_name, 'type': type(raw_args).__name__},
            )
            return result

        for key, value in raw_args.items():
            spec = self._field_for_key(tool_name, key)
            if spec is None:
                result.dropped.append(key)
                continue
            if value is None or (isinstance(value, str) and not value.strip()):
                continue
            try:
                result.arguments[spec.name] = self._normalize(tool_name, spec, value, strict=False)
            except UnparsableValue:
                result.unparsable[spec.name] = value

        if result.dropped:
            logger.info(
                "extracted_arguments_dropped",
                extra={'tool_name': tool_name, 'keys': result.dropped},
            )
        return result

    # ------------------------------------------------------------------
    # Outbound text
    # ------------------------------------------------------------------

    def _build_scrubber(self) -> None:
        replacements: Dict[str, str] = {}
        for tool in self.registry.list():
            replacements.setdefault(tool.name, tool.display_name)
            for spec in tool.fields:
                if looks_technical(spec.name):
                    replacements.setdefault(spec.name, spec.label)
                for choice in spec.choices:
                    if looks_technical(choice.token) and choice.token != choice.label:
                        replacements.setdefault(choice.token, choice.label)

        self._scrub_map = replacements
        self._scrub_size = len(self.registry)
        if replacements:
            alternatives = '|'.join(
                re.escape(token) for token in sorted(replacements, key=len, reverse=True)
            )
            self._scrub_pattern = re.compile(rf'(?<!\w)({alternatives})(?!\w)')
        else:
            self._scrub_pattern = None

    def scrub(self, text: str) -> str:
        """Replace any leaked tool names, field names or enum tokens with labels."""
        if not text:
            return text
        if self._scrub_size != len(self.registry):
            self._build_scrubber()
        if self._scrub_pattern is None:
            return text
        return self._scrub_pattern.sub(lambda m: self._scrub_map[m.group(1)], text)
