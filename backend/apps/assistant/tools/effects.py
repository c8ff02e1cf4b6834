"""
Tool effects: dispatch validated technical arguments to AgencyService.

Every effect is ``async (args: dict) -> dict``. The returned dict carries a
human ``message`` and, for lookups, ``items`` (one line per record).
ValueError messages are shown to the user as-is; anything else is reported
as a generic failure by the dispatcher.
"""

import calendar
import datetime
import logging
from typing import Any, Dict

from asgiref.sync import sync_to_async

logger = logging.getLogger(__name__)


def _date(value: str) -> datetime.date:
    return datetime.date.fromisoformat(value)


def _time(value: str) -> datetime.time:
    return datetime.time.fromisoformat(value)


def _fmt_date(value: datetime.date) -> str:
    return f"{value.day} {value:%B} {value.year}"


def _fmt_time(value: datetime.time) -> str:
    return value.strftime('%I:%M %p').lstrip('0')


# ---------------------------------------------------------------------------
# Mutating
# ---------------------------------------------------------------------------

async def create_schedule(args: Dict[str, Any]) -> Dict[str, Any]:
    """Dispatch createSchedule to AgencyService."""
    from apps.agency.services import AgencyService

    schedule = await sync_to_async(AgencyService.create_schedule)(
        care_worker_name=args['careWorker_name'],
        client_name=args['client_name'],
        date=_date(args['date']),
        start_time=_time(args['start_time']),
        end_time=_time(args['end_time']),
        schedule_type=args['type'],
        status=args['status'],
    )
    return {
        'schedule_id': str(schedule.id),
        'message': (
            f"Scheduled {schedule.care_worker_name} with {schedule.client_name} on "
            f"{_fmt_date(schedule.date)}, {_fmt_time(schedule.start_time)} to "
            f"{_fmt_time(schedule.end_time)}."
        ),
    }


async def create_client_profile(args: Dict[str, Any]) -> Dict[str, Any]:
    """Dispatch createClientProfile to AgencyService."""
    from apps.agency.services import AgencyService

    profile = await sync_to_async(AgencyService.create_client_profile)(
        full_name=args['fullName'],
        email=args['email'],
        date_of_birth=_date(args['dateOfBirth']),
        role=args['role'],
        sub_role=args.get('subRole', ''),
    )
    return {
        'profile_id': str(profile.id),
        'message': f"Created a profile for {profile.full_name}.",
    }


async def assign_cover(args: Dict[str, Any]) -> Dict[str, Any]:
    """Dispatch assignCover to AgencyService."""
    from apps.agency.services import AgencyService

    cover = await sync_to_async(AgencyService.assign_cover)(
        client_name=args['client_name'],
        care_worker_name=args['careWorker_name'],
        date=_date(args['date']),
        time=_time(args['time']),
    )
    return {
        'cover_id': str(cover.id),
        'message': (
            f"{cover.care_worker_name} will cover {cover.client_name}'s visit on "
            f"{_fmt_date(cover.date)} at {_fmt_time(cover.time)}."
        ),
    }


async def send_message(args: Dict[str, Any]) -> Dict[str, Any]:
    """Dispatch sendMessage to AgencyService."""
    from apps.agency.services import AgencyService

    broadcast = await sync_to_async(AgencyService.send_broadcast)(
        message=args['message'],
        channel=args['channel'],
        priority=args['priority'],
    )
    via = 'text message' if broadcast.channel == 'SMS' else 'email'
    return {
        'broadcast_id': str(broadcast.id),
        'message': f"Your message is on its way to all care workers by {via}.",
    }


async def send_onboarding_invite(args: Dict[str, Any]) -> Dict[str, Any]:
    """Dispatch sendOnboardingInvite to AgencyService."""
    from apps.agency.services import AgencyService

    invite = await sync_to_async(AgencyService.send_onboarding_invite)(
        name=args['name'],
        email=args['email'],
        role=args['role'],
        include_training=args['include_training'],
        sub_role=args.get('subRole', ''),
    )
    training = " with training materials" if invite.include_training else ""
    return {
        'invite_id': str(invite.id),
        'message': f"Sent an onboarding invite to {invite.name} at {invite.email}{training}.",
    }


async def generate_care_plan(args: Dict[str, Any]) -> Dict[str, Any]:
    """Dispatch generateCarePlan to AgencyService."""
    from apps.agency.services import AgencyService

    draft = await sync_to_async(AgencyService.draft_care_plan)(
        client_name=args['client_name'],
        care_type=args['care_type'],
        condition=args['condition'],
        priority=args['priority'],
    )
    return {
        'care_plan_id': str(draft.id),
        'message': f"Drafted a care plan for {draft.client_name}. It is ready for review.",
    }


# ---------------------------------------------------------------------------
# Read-only
# ---------------------------------------------------------------------------

async def display_schedule(args: Dict[str, Any]) -> Dict[str, Any]:
    """Upcoming visits for a care worker or client."""
    from apps.agency.services import AgencyService

    name = args['name']
    schedules = await sync_to_async(AgencyService.schedules_for)(name)
    if not schedules:
        return {'message': f"There are no upcoming visits for {name}.", 'items': []}
    return {
        'message': f"Upcoming visits for {name}:",
        'items': [
            f"{_fmt_date(s.date)}, {_fmt_time(s.start_time)} to {_fmt_time(s.end_time)}: "
            f"{s.care_worker_name} with {s.client_name} ({s.get_schedule_type_display()}, "
            f"{s.get_status_display()})"
            for s in schedules
        ],
    }


async def view_alerts(args: Dict[str, Any]) -> Dict[str, Any]:
    """Unresolved alerts, newest first."""
    from apps.agency.services import AgencyService

    alerts = await sync_to_async(AgencyService.open_alerts)()
    if not alerts:
        return {'message': "There are no unresolved alerts.", 'items': []}
    return {
        'message': f"There are {len(alerts)} unresolved alerts:",
        'items': [f"{a.title} ({a.get_severity_display()})" for a in alerts],
    }


async def holiday_requests(args: Dict[str, Any]) -> Dict[str, Any]:
    """Leave entries for the week starting on the given date."""
    from apps.agency.services import AgencyService

    week_start = _date(args['week'])
    entries = await sync_to_async(AgencyService.leave_for_week)(
        week_start, args.get('eventType'),
    )
    week = f"the week of {_fmt_date(week_start)}"
    if not entries:
        return {'message': f"No leave is booked for {week}.", 'items': []}
    return {
        'message': f"Leave booked for {week}:",
        'items': [
            f"{e.staff_name}: {_fmt_date(e.start_date)} to {_fmt_date(e.end_date)}"
            f"{'' if e.approved else ' (awaiting approval)'}"
            for e in entries
        ],
    }


async def generate_payroll(args: Dict[str, Any]) -> Dict[str, Any]:
    """Hours per care worker for a month."""
    from apps.agency.services import AgencyService

    month = list(calendar.month_name).index(args['month'].capitalize())
    year_text = str(args['year']).strip()
    if not year_text.isdigit() or len(year_text) != 4:
        raise ValueError("The year should be four digits, like 2025.")

    summary = await sync_to_async(AgencyService.payroll_summary)(month, int(year_text))
    if not summary['rows']:
        return {
            'message': f"No confirmed or completed visits in {summary['period']}.",
            'items': [],
        }
    return {
        'message': (
            f"Payroll for {summary['period']}: {summary['total_hours']:g} hours in total."
        ),
        'items': [
            f"{row['care_worker_name']}: {row['hours']:g} hours over {row['visits']} "
            f"visit{'' if row['visits'] == 1 else 's'}"
            for row in summary['rows']
        ],
    }
