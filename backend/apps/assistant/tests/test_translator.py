"""
Tests for ParameterTranslator: technical <-> user format, coercion and scrubbing.
"""
from django.test import SimpleTestCase

from apps.assistant.errors import UnknownTool, UnmappableField, UnparsableValue
from apps.assistant.tools.registry import FieldType
from apps.assistant.translator import ParameterTranslator, looks_technical, match_key

from .helpers import (
    SCENARIO_A_EXTRACTED,
    SCENARIO_A_TECHNICAL,
    TODAY,
    make_registry,
)

SAMPLE_VALUES = {
    FieldType.STRING: 'Jo Bloggs',
    FieldType.EMAIL: 'jo@example.com',
    FieldType.DATE: '2025-12-01',
    FieldType.TIME: '14:30',
}


def sample_arguments(tool, choice_index=-1, flag=True):
    """One valid technical argument set covering every field of ``tool``."""
    args = {}
    for spec in tool.fields:
        if spec.type == FieldType.ENUM:
            args[spec.name] = spec.tokens[choice_index % len(spec.tokens)]
        elif spec.type == FieldType.BOOLEAN:
            args[spec.name] = flag
        else:
            args[spec.name] = SAMPLE_VALUES[spec.type]
    return args


class MatchKeyTest(SimpleTestCase):

    def test_case_spacing_and_camel_case_insensitive(self):
        self.assertEqual(match_key('careWorker_name'), 'care worker name')
        self.assertEqual(match_key('Date of Birth'), match_key('dateOfBirth'))
        self.assertEqual(match_key('Sub-Role'), match_key('subRole'))

    def test_looks_technical(self):
        self.assertTrue(looks_technical('client_name'))
        self.assertTrue(looks_technical('fullName'))
        self.assertTrue(looks_technical('URGENT'))
        self.assertFalse(looks_technical('date'))
        self.assertFalse(looks_technical('Care Worker'))


class ParameterTranslatorTest(SimpleTestCase):

    def setUp(self):
        self.translator = ParameterTranslator(make_registry(), today=lambda: TODAY)

    # ─── Technical -> user ───

    def test_user_format_uses_labels_in_field_order(self):
        pairs = self.translator.to_user_format('createSchedule', SCENARIO_A_TECHNICAL)
        self.assertEqual(pairs, [
            ('Care Worker', 'Maria'),
            ('Client', 'Tom'),
            ('Start Time', '9:00 AM'),
            ('End Time', '5:00 PM'),
            ('Date', '15 June 2025'),
            ('Visit Type', 'Weekly Checkup'),
            ('Status', 'Pending'),
        ])

    def test_user_format_skips_absent_fields(self):
        pairs = self.translator.to_user_format('createClientProfile', {'fullName': 'Ann Lee'})
        self.assertEqual(pairs, [('Full Name', 'Ann Lee')])

    def test_booleans_render_as_yes_no(self):
        pairs = dict(self.translator.to_user_format('sendOnboardingInvite', {'include_training': False}))
        self.assertEqual(pairs['Include Training'], 'No')

    def test_unknown_tool(self):
        with self.assertRaises(UnknownTool):
            self.translator.to_user_format('nope', {})

    def test_lookups(self):
        self.assertEqual(self.translator.display_name('displayScheduleAppointment'), 'Show Schedule')
        self.assertEqual(self.translator.field_label('createClientProfile', 'subRole'), 'Sub-Role')
        self.assertEqual(self.translator.value_label('generatePayroll', 'month', 'JUNE'), 'June')
        self.assertEqual(
            self.translator.choice_labels('sendMessage', 'priority'),
            ['Low', 'Normal', 'High', 'Urgent'],
        )

    # ─── User -> technical ───

    def test_round_trip_is_lossless(self):
        cases = [
            ('createSchedule', SCENARIO_A_TECHNICAL),
            ('createClientProfile', {
                'fullName': 'Ann Lee', 'email': 'ann@example.com', 'dateOfBirth': '1950-02-28',
                'role': 'FAMILY', 'subRole': 'FAMILY_AND_FRIENDS',
            }),
            ('sendOnboardingInvite', {
                'name': 'Sam', 'email': 'sam@example.com', 'include_training': True,
                'role': 'CARE_WORKER', 'subRole': 'LIVE_IN_CAREGIVER',
            }),
            ('generatePayroll', {'month': 'MAY', 'year': '2025'}),
            ('holidayRequest', {'week': '2025-06-09', 'eventType': 'TOIL'}),
        ]
        for tool_name, technical in cases:
            with self.subTest(tool=tool_name):
                user = self.translator.to_user_format(tool_name, technical)
                self.assertEqual(self.translator.to_technical_format(tool_name, user), technical)

    def test_round_trip_covers_every_registered_tool(self):
        tools = self.translator.registry.list()
        self.assertEqual(len(tools), 10)
        for tool in tools:
            for technical in (sample_arguments(tool, 0, False), sample_arguments(tool, -1, True)):
                with self.subTest(tool=tool.name, arguments=technical):
                    user = self.translator.to_user_format(tool.name, technical)
                    self.assertEqual(len(user), len(technical))
                    self.assertEqual(self.translator.to_technical_format(tool.name, user), technical)

    def test_labels_and_names_in_any_case(self):
        technical = self.translator.to_technical_format('createSchedule', {
            'care worker': 'Maria',
            'VISIT TYPE': 'home visit',
            'Start_Time': 'half past 14',
        })
        self.assertEqual(technical, {
            'careWorker_name': 'Maria',
            'type': 'HOME_VISIT',
            'start_time': '14:30',
        })

    def test_blank_values_are_ignored(self):
        technical = self.translator.to_technical_format('sendMessage', {'Message': '  ', 'Channel': 'Email'})
        self.assertEqual(technical, {'channel': 'EMAIL'})

    def test_unknown_key_rejected(self):
        with self.assertRaises(UnmappableField) as ctx:
            self.translator.to_technical_format('sendMessage', {'Colour': 'red'})
        self.assertEqual(ctx.exception.key, 'Colour')

    def test_unknown_enum_label_rejected(self):
        with self.assertRaises(UnmappableField):
            self.translator.to_technical_format('sendMessage', {'Priority': 'Urgentish'})

    def test_unreadable_date_names_the_field(self):
        with self.assertRaises(UnparsableValue) as ctx:
            self.translator.to_technical_format('createSchedule', {'Date': 'someday'})
        self.assertEqual(ctx.exception.field, 'date')

    # ─── Lenient coercion of extracted arguments ───

    def test_coerce_scenario_arguments(self):
        result = self.translator.coerce_extracted('createSchedule', SCENARIO_A_EXTRACTED)
        self.assertEqual(result.arguments, SCENARIO_A_TECHNICAL)
        self.assertEqual(result.unparsable, {})
        self.assertEqual(result.dropped, [])

    def test_coerce_keeps_unknown_enum_for_validation(self):
        result = self.translator.coerce_extracted('sendMessage', {'priority': 'Urgentish'})
        self.assertEqual(result.arguments, {'priority': 'Urgentish'})

    def test_coerce_reports_unreadable_and_drops_unknown(self):
        result = self.translator.coerce_extracted('createSchedule', {
            'date': 'whenever',
            'colour': 'blue',
            'client_name': 'Tom',
        })
        self.assertEqual(result.arguments, {'client_name': 'Tom'})
        self.assertEqual(result.unparsable, {'date': 'whenever'})
        self.assertEqual(result.dropped, ['colour'])

    def test_coerce_tolerates_non_mapping_arguments(self):
        result = self.translator.coerce_extracted('createSchedule', ['Maria'])
        self.assertEqual(result.arguments, {})

    # ─── Scrubbing ───

    def test_scrub_replaces_leaked_identifiers(self):
        text = "I'll run createSchedule with careWorker_name set and type WEEKLY_CHECKUP."
        self.assertEqual(
            self.translator.scrub(text),
            "I'll run Create Schedule with Care Worker set and type Weekly Checkup.",
        )

    def test_scrub_leaves_ordinary_words_alone(self):
        text = "Maria's visit on the date you gave is PENDINGS review"
        self.assertEqual(self.translator.scrub(text), text)
