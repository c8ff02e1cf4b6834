"""
Tests for the care tool effects against the agency database.

Effects are async; they are driven with async_to_sync so that their
sync_to_async database calls share the test transaction.
"""
import datetime

from asgiref.sync import async_to_sync
from django.test import TestCase

from apps.agency.models import CoverAssignment, LeaveRequest, OnboardingInvite, Schedule
from apps.assistant.tools import effects

from .helpers import SCENARIO_A_TECHNICAL


class MutatingEffectsTest(TestCase):

    def test_create_schedule(self):
        result = async_to_sync(effects.create_schedule)(SCENARIO_A_TECHNICAL)

        schedule = Schedule.objects.get()
        self.assertEqual(result['schedule_id'], str(schedule.id))
        self.assertEqual(schedule.start_time, datetime.time(9, 0))
        self.assertEqual(schedule.schedule_type, 'WEEKLY_CHECKUP')
        self.assertEqual(
            result['message'],
            "Scheduled Maria with Tom on 15 June 2025, 9:00 AM to 5:00 PM.",
        )

    def test_double_booking_is_a_value_error(self):
        async_to_sync(effects.create_schedule)(SCENARIO_A_TECHNICAL)
        with self.assertRaises(ValueError):
            async_to_sync(effects.create_schedule)(dict(SCENARIO_A_TECHNICAL, client_name='Ann'))

    def test_assign_cover(self):
        result = async_to_sync(effects.assign_cover)({
            'client_name': 'Tom', 'date': '2025-06-15', 'time': '14:30', 'careWorker_name': 'Ravi',
        })
        self.assertEqual(CoverAssignment.objects.get().care_worker_name, 'Ravi')
        self.assertIn("2:30 PM", result['message'])

    def test_onboarding_invite_without_sub_role(self):
        result = async_to_sync(effects.send_onboarding_invite)({
            'name': 'Sam', 'email': 'sam@example.com', 'include_training': True, 'role': 'CARE_WORKER',
        })
        invite = OnboardingInvite.objects.get()
        self.assertEqual(invite.sub_role, '')
        self.assertTrue(invite.include_training)
        self.assertIn('with training materials', result['message'])

    def test_send_message(self):
        result = async_to_sync(effects.send_message)({
            'message': 'Staff meeting at 3pm', 'channel': 'SMS', 'priority': 'HIGH',
        })
        self.assertIn('by text message', result['message'])


class ReadOnlyEffectsTest(TestCase):

    def test_display_schedule_lists_visits(self):
        Schedule.objects.create(
            care_worker_name='Maria', client_name='Tom', date=datetime.date.today(),
            start_time=datetime.time(9), end_time=datetime.time(10),
            schedule_type='HOME_VISIT', status='CONFIRMED',
        )
        result = async_to_sync(effects.display_schedule)({'name': 'Maria'})
        self.assertEqual(len(result['items']), 1)
        self.assertIn('Home Visit', result['items'][0])
        self.assertNotIn('HOME_VISIT', result['items'][0])

    def test_display_schedule_empty(self):
        result = async_to_sync(effects.display_schedule)({'name': 'Nobody'})
        self.assertEqual(result['items'], [])

    def test_view_alerts_empty(self):
        result = async_to_sync(effects.view_alerts)({})
        self.assertEqual(result['message'], "There are no unresolved alerts.")

    def test_holiday_requests_marks_unapproved(self):
        LeaveRequest.objects.create(
            staff_name='Maria', event_type='ANNUAL_LEAVE',
            start_date=datetime.date(2025, 6, 9), end_date=datetime.date(2025, 6, 11),
        )
        result = async_to_sync(effects.holiday_requests)({'week': '2025-06-09', 'eventType': 'ANNUAL_LEAVE'})
        self.assertIn('the week of 9 June 2025', result['message'])
        self.assertIn('(awaiting approval)', result['items'][0])

    def test_generate_payroll(self):
        Schedule.objects.create(
            care_worker_name='Maria', client_name='Tom', date=datetime.date(2025, 6, 3),
            start_time=datetime.time(9), end_time=datetime.time(11, 30), status='COMPLETED',
        )
        result = async_to_sync(effects.generate_payroll)({'month': 'JUNE', 'year': '2025'})
        self.assertEqual(result['message'], "Payroll for June 2025: 2.5 hours in total.")
        self.assertEqual(result['items'], ["Maria: 2.5 hours over 1 visit"])

    def test_generate_payroll_rejects_bad_year(self):
        with self.assertRaises(ValueError):
            async_to_sync(effects.generate_payroll)({'month': 'JUNE', 'year': 'twenty'})
