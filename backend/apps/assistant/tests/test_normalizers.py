"""
Tests for time, date and yes/no normalization.
"""
import datetime

from django.test import SimpleTestCase

from apps.assistant.errors import UnparsableValue
from apps.assistant.normalizers import (
    humanize_date,
    humanize_time,
    normalize_boolean,
    normalize_date,
    normalize_time,
)

from .helpers import TODAY


class NormalizeTimeTest(SimpleTestCase):

    def test_spoken_and_written_times(self):
        cases = {
            '9am': '09:00',
            '9 AM': '09:00',
            '9 a.m.': '09:00',
            '5pm': '17:00',
            '2:30 pm': '14:30',
            '17:00': '17:00',
            '7.15pm': '19:15',
            "9 o'clock": '09:00',
            'noon': '12:00',
            'midnight': '00:00',
            '12am': '00:00',
            '12pm': '12:00',
            'quarter past 5pm': '17:15',
            'quarter to 5pm': '16:45',
            'half past 14': '14:30',
        }
        for raw, expected in cases.items():
            with self.subTest(raw=raw):
                self.assertEqual(normalize_time(raw), expected)

    def test_bare_hour_is_24_hour_clock(self):
        self.assertEqual(normalize_time('9'), '09:00')
        self.assertEqual(normalize_time('21'), '21:00')

    def test_time_objects_pass_through(self):
        self.assertEqual(normalize_time(datetime.time(8, 5)), '08:05')

    def test_rejects_unreadable_times(self):
        for raw in ('soon', '13pm', '25:00', '9:75', '', 'after lunch'):
            with self.subTest(raw=raw):
                with self.assertRaises(UnparsableValue) as ctx:
                    normalize_time(raw)
                self.assertEqual(ctx.exception.kind, 'time')


class NormalizeDateTest(SimpleTestCase):
    """Relative phrases are resolved against Monday 2 June 2025."""

    def test_absolute_dates(self):
        cases = {
            '15 June 2025': '2025-06-15',
            '15th of June 2025': '2025-06-15',
            'June 15, 2025': '2025-06-15',
            '2025-06-15': '2025-06-15',
            '15/06/2025': '2025-06-15',
            '15/6/25': '2025-06-15',
            'on the 1st of July 2025': '2025-07-01',
        }
        for raw, expected in cases.items():
            with self.subTest(raw=raw):
                self.assertEqual(normalize_date(raw, today=TODAY), expected)

    def test_missing_year_uses_current_year(self):
        self.assertEqual(normalize_date('Dec 15', today=TODAY), '2025-12-15')
        self.assertEqual(normalize_date('3 March', today=TODAY), '2025-03-03')

    def test_relative_days(self):
        self.assertEqual(normalize_date('today', today=TODAY), '2025-06-02')
        self.assertEqual(normalize_date('Tomorrow', today=TODAY), '2025-06-03')
        self.assertEqual(normalize_date('yesterday', today=TODAY), '2025-06-01')
        self.assertEqual(normalize_date('the day after tomorrow', today=TODAY), '2025-06-04')

    def test_weekdays_mean_the_next_such_day(self):
        self.assertEqual(normalize_date('Friday', today=TODAY), '2025-06-06')
        self.assertEqual(normalize_date('next Friday', today=TODAY), '2025-06-06')
        self.assertEqual(normalize_date('Monday', today=TODAY), '2025-06-09')
        self.assertEqual(normalize_date('this Monday', today=TODAY), '2025-06-02')

    def test_date_objects_pass_through(self):
        self.assertEqual(normalize_date(datetime.date(2025, 1, 9)), '2025-01-09')

    def test_rejects_unreadable_dates(self):
        for raw in ('someday', '31 February 2025', '2025-13-01', 'next month', ''):
            with self.subTest(raw=raw):
                with self.assertRaises(UnparsableValue):
                    normalize_date(raw, today=TODAY)


class NormalizeBooleanTest(SimpleTestCase):

    def test_yes_and_no_words(self):
        self.assertTrue(normalize_boolean('Yes'))
        self.assertTrue(normalize_boolean('include'))
        self.assertFalse(normalize_boolean('no.'))
        self.assertFalse(normalize_boolean(False))

    def test_rejects_anything_else(self):
        with self.assertRaises(UnparsableValue):
            normalize_boolean('maybe')
        with self.assertRaises(UnparsableValue):
            normalize_boolean(3)


class HumanizeTest(SimpleTestCase):

    def test_humanize_date(self):
        self.assertEqual(humanize_date('2025-06-15'), '15 June 2025')

    def test_humanize_time(self):
        self.assertEqual(humanize_time('17:00'), '5:00 PM')
        self.assertEqual(humanize_time('09:05'), '9:05 AM')
        self.assertEqual(humanize_time('00:30'), '12:30 AM')
        self.assertEqual(humanize_time('12:00'), '12:00 PM')

    def test_humanized_values_normalize_back(self):
        for canonical in ('00:00', '09:30', '12:00', '23:59'):
            with self.subTest(canonical=canonical):
                self.assertEqual(normalize_time(humanize_time(canonical)), canonical)
        self.assertEqual(normalize_date(humanize_date('2024-02-29'), today=TODAY), '2024-02-29')
