"""
Normalization of conversational times, dates and yes/no answers.

Canonical forms are ``HH:MM`` (24-hour) and ``YYYY-MM-DD``. The
``humanize_*`` functions produce the phrases shown to users; each
phrase normalizes back to the same canonical value.
"""
import datetime
import re
from typing import Optional, Union

from apps.assistant.errors import UnparsableValue

_MONTHS = {
    'january': 1, 'jan': 1,
    'february': 2, 'feb': 2,
    'march': 3, 'mar': 3,
    'april': 4, 'apr': 4,
    'may': 5,
    'june': 6, 'jun': 6,
    'july': 7, 'jul': 7,
    'august': 8, 'aug': 8,
    'september': 9, 'sept': 9, 'sep': 9,
    'october': 10, 'oct': 10,
    'november': 11, 'nov': 11,
    'december': 12, 'dec': 12,
}

_WEEKDAYS = {
    'monday': 0, 'mon': 0,
    'tuesday': 1, 'tue': 1, 'tues': 1,
    'wednesday': 2, 'wed': 2,
    'thursday': 3, 'thu': 3, 'thurs': 3,
    'friday': 4, 'fri': 4,
    'saturday': 5, 'sat': 5,
    'sunday': 6, 'sun': 6,
}

_TRUE_WORDS = {'yes', 'y', 'true', '1', 'on', 'include', 'included', 'sure', 'yeah', 'yep'}
_FALSE_WORDS = {'no', 'n', 'false', '0', 'off', 'exclude', 'excluded', 'none', 'nope'}

_CLOCK = re.compile(r'^(\d{1,2})(?:[:.](\d{2}))?(?::\d{2})?\s*(am|pm)?$')
_PHRASE = re.compile(r'^(half past|quarter past|quarter to)\s+(\d{1,2})\s*(am|pm)?$')
_ISO_DATE = re.compile(r'^(\d{4})-(\d{1,2})-(\d{1,2})$')
_NUMERIC_DATE = re.compile(r'^(\d{1,2})[/.-](\d{1,2})[/.-](\d{2}|\d{4})$')
_DAY_MONTH = re.compile(r'^(\d{1,2})\s+([a-z]+)(?:\s+(\d{4}))?$')
_MONTH_DAY = re.compile(r'^([a-z]+)\s+(\d{1,2})(?:\s+(\d{4}))?$')
_WEEKDAY = re.compile(r'^(?:(next|this|coming)\s+)?([a-z]+)$')


def _apply_meridiem(hour: int, meridiem: Optional[str], raw) -> int:
    if meridiem is None:
        return hour
    if not 1 <= hour <= 12:
        raise UnparsableValue('time', raw)
    if meridiem == 'am':
        return 0 if hour == 12 else hour
    return hour if hour == 12 else hour + 12


def normalize_time(value: Union[str, datetime.time]) -> str:
    """
    Normalize a spoken or written time to ``HH:MM``.

    Accepts "9am", "2:30 pm", "17:00", "9 o'clock", "noon", "midnight",
    "half past 3", "quarter past 5pm" and "quarter to 5". Hours given
    without am/pm are read as 24-hour clock hours.

    Raises:
        UnparsableValue: if the value is not a recognizable time
    """
    if isinstance(value, datetime.time):
        return f"{value.hour:02d}:{value.minute:02d}"
    if not isinstance(value, str):
        raise UnparsableValue('time', value)

    text = value.strip().lower()
    text = re.sub(r'(?<=[\d\s])([ap])\.?\s?m\.?(?=\s|$)', r'\1m', text)
    text = re.sub(r"\s*o'?\s*clock", '', text)
    text = re.sub(r'\s+', ' ', text).strip()

    if text in ('noon', 'midday', '12 noon', 'twelve noon'):
        return '12:00'
    if text in ('midnight', '12 midnight'):
        return '00:00'

    phrase = _PHRASE.match(text)
    if phrase:
        kind, hour, meridiem = phrase.group(1), int(phrase.group(2)), phrase.group(3)
        hour = _apply_meridiem(hour, meridiem, value)
        if not 0 <= hour <= 23:
            raise UnparsableValue('time', value)
        if kind == 'half past':
            minute = 30
        elif kind == 'quarter past':
            minute = 15
        else:
            hour, minute = (hour - 1) % 24, 45
        return f"{hour:02d}:{minute:02d}"

    clock = _CLOCK.match(text)
    if not clock:
        raise UnparsableValue('time', value)
    hour = int(clock.group(1))
    minute = int(clock.group(2) or 0)
    hour = _apply_meridiem(hour, clock.group(3), value)
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise UnparsableValue('time', value)
    return f"{hour:02d}:{minute:02d}"


def _build_date(year: int, month: int, day: int, raw) -> str:
    try:
        return datetime.date(year, month, day).isoformat()
    except ValueError:
        raise UnparsableValue('date', raw)


def normalize_date(value: Union[str, datetime.date], today: Optional[datetime.date] = None) -> str:
    """
    Normalize a spoken or written date to ``YYYY-MM-DD``.

    Accepts ISO dates, "15 June 2025", "15th of June 2025", "June 15, 2025",
    day-first "15/06/2025", "Dec 15" (current year), "today", "tomorrow",
    and weekdays such as "Friday" or "next Friday" (the next such day after
    today).

    Args:
        value: The user's phrase
        today: Reference date for relative phrases (defaults to today)

    Raises:
        UnparsableValue: if the value is not a recognizable date
    """
    if isinstance(value, datetime.datetime):
        return value.date().isoformat()
    if isinstance(value, datetime.date):
        return value.isoformat()
    if not isinstance(value, str):
        raise UnparsableValue('date', value)

    today = today or datetime.date.today()
    text = value.strip().lower().replace(',', ' ')
    text = re.sub(r'\b(\d{1,2})(st|nd|rd|th)\b', r'\1', text)
    text = re.sub(r'^(?:on\s+)?(?:the\s+)?', '', text)
    text = re.sub(r'\s+of\s+', ' ', text)
    text = re.sub(r'\s+', ' ', text).strip()

    if text == 'today':
        return today.isoformat()
    if text == 'tomorrow':
        return (today + datetime.timedelta(days=1)).isoformat()
    if text == 'yesterday':
        return (today - datetime.timedelta(days=1)).isoformat()
    if text == 'day after tomorrow':
        return (today + datetime.timedelta(days=2)).isoformat()

    match = _ISO_DATE.match(text)
    if match:
        year, month, day = (int(g) for g in match.groups())
        return _build_date(year, month, day, value)

    match = _NUMERIC_DATE.match(text)
    if match:
        day, month, year = (int(g) for g in match.groups())
        if year < 100:
            year += 2000
        return _build_date(year, month, day, value)

    match = _DAY_MONTH.match(text)
    if match and match.group(2) in _MONTHS:
        year = int(match.group(3)) if match.group(3) else today.year
        return _build_date(year, _MONTHS[match.group(2)], int(match.group(1)), value)

    match = _MONTH_DAY.match(text)
    if match and match.group(1) in _MONTHS:
        year = int(match.group(3)) if match.group(3) else today.year
        return _build_date(year, _MONTHS[match.group(1)], int(match.group(2)), value)

    match = _WEEKDAY.match(text)
    if match and match.group(2) in _WEEKDAYS:
        days_ahead = (_WEEKDAYS[match.group(2)] - today.weekday()) % 7
        if days_ahead == 0 and match.group(1) != 'this':
            days_ahead = 7
        return (today + datetime.timedelta(days=days_ahead)).isoformat()

    raise UnparsableValue('date', value)


def normalize_boolean(value: Union[str, bool]) -> bool:
    """Read a yes/no answer; raises UnparsableValue otherwise."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        text = value.strip().lower().rstrip('.!')
        if text in _TRUE_WORDS:
            return True
        if text in _FALSE_WORDS:
            return False
    raise UnparsableValue('yes or no answer', value)


def humanize_date(canonical: str) -> str:
    """'2025-06-15' -> '15 June 2025'"""
    parsed = datetime.date.fromisoformat(canonical)
    return f"{parsed.day} {parsed:%B} {parsed.year}"


def humanize_time(canonical: str) -> str:
    """'17:00' -> '5:00 PM'"""
    hour, minute = (int(part) for part in canonical.split(':'))
    meridiem = 'AM' if hour < 12 else 'PM'
    display_hour = hour % 12 or 12
    return f"{display_hour}:{minute:02d} {meridiem}"
