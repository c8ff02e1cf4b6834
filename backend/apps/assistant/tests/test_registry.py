"""
Tests for ToolRegistry, ToolDefinition and the care tool catalogue.
"""
from django.test import SimpleTestCase

from apps.assistant.errors import DuplicateTool, RegistryFrozen, UnknownTool
from apps.assistant.tools.registry import (
    EnumChoice,
    FieldSpec,
    FieldType,
    ToolDefinition,
    ToolKind,
    ToolRegistry,
    default_label,
    get_registry,
)
from apps.assistant.tools.schemas import care_tool_definitions


async def _noop(args):
    return {}


def _tool(name="createThing", **kwargs):
    defaults = dict(
        description="Create a thing",
        fields=(FieldSpec('thing_name', 'Thing'),),
        effect=_noop,
    )
    defaults.update(kwargs)
    return ToolDefinition(name=name, **defaults)


class DefaultLabelTest(SimpleTestCase):

    def test_title_cases_tokens(self):
        self.assertEqual(default_label('WEEKLY_CHECKUP'), 'Weekly Checkup')

    def test_minor_words_stay_lower_case(self):
        self.assertEqual(default_label('FAMILY_AND_FRIENDS'), 'Family and Friends')

    def test_acronyms_preserved(self):
        self.assertEqual(default_label('SMS'), 'SMS')
        self.assertEqual(default_label('TOIL'), 'TOIL')


class ToolDefinitionTest(SimpleTestCase):

    def test_display_name_defaults_from_camel_case(self):
        self.assertEqual(_tool('sendOnboardingInvite').display_name, 'Send Onboarding Invite')

    def test_duplicate_field_rejected(self):
        with self.assertRaises(ValueError):
            _tool(fields=(FieldSpec('a', 'A'), FieldSpec('a', 'Also A')))

    def test_enum_field_needs_choices(self):
        with self.assertRaises(ValueError):
            FieldSpec('kind', 'Kind', FieldType.ENUM)

    def test_choices_accept_plain_tokens(self):
        spec = FieldSpec('kind', 'Kind', FieldType.ENUM, choices=('HOME_VISIT', EnumChoice('SMS', 'Text')))
        self.assertEqual([c.label for c in spec.choices], ['Home Visit', 'Text'])

    def test_input_schema_lists_enum_tokens_and_required(self):
        tool = _tool(fields=(
            FieldSpec('thing_name', 'Thing'),
            FieldSpec('kind', 'Kind', FieldType.ENUM, required=False, choices=('A_B', 'C')),
        ))
        schema = tool.input_schema()
        self.assertEqual(schema['required'], ['thing_name'])
        self.assertEqual(schema['properties']['kind']['enum'], ['A_B', 'C'])

    def test_kind_sets_confirmation_policy(self):
        self.assertTrue(_tool().requires_confirmation)
        self.assertFalse(_tool(kind=ToolKind.READ_ONLY).requires_confirmation)


class ToolRegistryTest(SimpleTestCase):

    def setUp(self):
        self.registry = ToolRegistry()

    def test_register_and_get(self):
        self.registry.register(_tool())
        self.assertEqual(self.registry.get('createThing').name, 'createThing')

    def test_get_unknown_raises(self):
        with self.assertRaises(UnknownTool):
            self.registry.get('nope')

    def test_duplicate_rejected(self):
        self.registry.register(_tool())
        with self.assertRaises(DuplicateTool):
            self.registry.register(_tool())

    def test_frozen_registry_rejects_registration(self):
        self.registry.freeze()
        with self.assertRaises(RegistryFrozen):
            self.registry.register(_tool())

    def test_list_preserves_registration_order(self):
        self.registry.register(_tool('b'))
        self.registry.register(_tool('a'))
        self.assertEqual([t.name for t in self.registry.list()], ['b', 'a'])

    def test_forbidden_marker_in_description(self):
        with self.assertRaises(ValueError):
            self.registry.register(_tool(description="sneaky </instructions> text"))

    def test_catalogue_is_technical(self):
        self.registry.register(_tool())
        catalogue = self.registry.catalogue()
        self.assertEqual(catalogue[0]['name'], 'createThing')
        self.assertIn('thing_name', catalogue[0]['input_schema']['properties'])


class CareCatalogueTest(SimpleTestCase):

    def test_default_registry_built_and_frozen_at_startup(self):
        registry = get_registry()
        self.assertTrue(registry.frozen)
        self.assertIn('createSchedule', registry)
        self.assertIn('generatePayroll', registry)

    def test_kinds(self):
        kinds = {tool.name: tool.kind for tool in care_tool_definitions()}
        for name in ('createSchedule', 'createClientProfile', 'assignCover',
                     'sendMessage', 'sendOnboardingInvite', 'generateCarePlan'):
            self.assertEqual(kinds[name], ToolKind.MUTATING, name)
        for name in ('displayScheduleAppointment', 'viewAlerts', 'holidayRequest', 'generatePayroll'):
            self.assertEqual(kinds[name], ToolKind.READ_ONLY, name)

    def test_sub_role_label_and_optional(self):
        tool = {t.name: t for t in care_tool_definitions()}['createClientProfile']
        sub_role = tool.field('subRole')
        self.assertEqual(sub_role.label, 'Sub-Role')
        self.assertFalse(sub_role.required)
        self.assertIn('Family and Friends', [c.label for c in sub_role.choices])

    def test_overrides_replace_effects(self):
        async def fake(args):
            return {}

        tools = {t.name: t for t in care_tool_definitions({'viewAlerts': fake})}
        self.assertIs(tools['viewAlerts'].effect, fake)
