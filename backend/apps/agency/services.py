"""
Agency service - synchronous record operations behind assistant actions.

Every method takes already-validated Python values (dates, times, enum
tokens). Callers on the async side wrap these with ``sync_to_async``.
"""
import calendar
import datetime
import logging
from collections import defaultdict
from typing import List, Optional

from django.db import transaction
from django.db.models import Q

from .models import (
    Alert,
    CarePlanDraft,
    ClientProfile,
    CoverAssignment,
    LeaveRequest,
    OnboardingInvite,
    Schedule,
    StaffBroadcast,
)

logger = logging.getLogger(__name__)


def _minutes_between(start: datetime.time, end: datetime.time) -> int:
    start_minutes = start.hour * 60 + start.minute
    end_minutes = end.hour * 60 + end.minute
    if end_minutes <= start_minutes:
        # Overnight visit
        end_minutes += 24 * 60
    return end_minutes - start_minutes


def _visit_window(anchor: datetime.date, date: datetime.date, start: datetime.time, end: datetime.time):
    """Visit as a (start, end) range of minutes counted from midnight on ``anchor``."""
    offset = (date - anchor).days * 24 * 60 + start.hour * 60 + start.minute
    return offset, offset + _minutes_between(start, end)


class AgencyService:
    """
    Service for agency records
    """

    @staticmethod
    @transaction.atomic
    def create_schedule(
        care_worker_name: str,
        client_name: str,
        date: datetime.date,
        start_time: datetime.time,
        end_time: datetime.time,
        schedule_type: str,
        status: str,
    ) -> Schedule:
        """
        Create a visit, refusing double-booking of the care worker.

        Raises:
            ValueError: if the care worker already has an overlapping visit
        """
        if start_time == end_time:
            raise ValueError("The start and end time must be different.")

        # Overnight visits run into the next day, so neighbouring days count too
        start, end = _visit_window(date, date, start_time, end_time)
        nearby = Schedule.objects.filter(
            care_worker_name__iexact=care_worker_name,
            date__range=(date - datetime.timedelta(days=1), date + datetime.timedelta(days=1)),
        ).exclude(status='CANCELED')
        clash = any(
            other_start < end and start < other_end
            for other_start, other_end in (
                _visit_window(date, s.date, s.start_time, s.end_time) for s in nearby
            )
        )
        if clash:
            raise ValueError(
                f"{care_worker_name} already has a visit that overlaps that time on {date:%d %B %Y}."
            )

        schedule = Schedule.objects.create(
            care_worker_name=care_worker_name,
            client_name=client_name,
            date=date,
            start_time=start_time,
            end_time=end_time,
            schedule_type=schedule_type,
            status=status,
        )
        logger.info(
            "schedule_created",
            extra={'schedule_id': str(schedule.id), 'date': str(date)},
        )
        return schedule

    @staticmethod
    def create_client_profile(
        full_name: str,
        email: str,
        date_of_birth: datetime.date,
        role: str,
        sub_role: str = '',
    ) -> ClientProfile:
        if date_of_birth > datetime.date.today():
            raise ValueError("The date of birth cannot be in the future.")
        if ClientProfile.objects.filter(email__iexact=email).exists():
            raise ValueError(f"A profile with the email {email} already exists.")

        return ClientProfile.objects.create(
            full_name=full_name,
            email=email,
            date_of_birth=date_of_birth,
            role=role,
            sub_role=sub_role or '',
        )

    @staticmethod
    def assign_cover(
        client_name: str,
        care_worker_name: str,
        date: datetime.date,
        time: datetime.time,
    ) -> CoverAssignment:
        return CoverAssignment.objects.create(
            client_name=client_name,
            care_worker_name=care_worker_name,
            date=date,
            time=time,
        )

    @staticmethod
    def send_broadcast(message: str, channel: str, priority: str) -> StaffBroadcast:
        """
        Record a staff broadcast. Delivery is handed off to the messaging
        gateway, which reads unsent broadcasts from this table.
        """
        if not message.strip():
            raise ValueError("The message cannot be empty.")
        if channel == 'SMS' and len(message) > 459:
            raise ValueError("SMS messages are limited to 459 characters (three segments).")
        return StaffBroadcast.objects.create(
            message=message,
            channel=channel,
            priority=priority,
        )

    @staticmethod
    def send_onboarding_invite(
        name: str,
        email: str,
        role: str,
        include_training: bool,
        sub_role: str = '',
    ) -> OnboardingInvite:
        return OnboardingInvite.objects.create(
            name=name,
            email=email,
            role=role,
            sub_role=sub_role or '',
            include_training=include_training,
        )

    @staticmethod
    def draft_care_plan(
        client_name: str,
        care_type: str,
        condition: str,
        priority: str,
    ) -> CarePlanDraft:
        summary = (
            f"{care_type} plan for {client_name} addressing {condition}. "
            f"Review priority: {priority.lower()}."
        )
        return CarePlanDraft.objects.create(
            client_name=client_name,
            care_type=care_type,
            condition=condition,
            priority=priority,
            summary=summary,
        )

    @staticmethod
    def schedules_for(name: str, on_or_after: Optional[datetime.date] = None) -> List[Schedule]:
        """Upcoming visits where ``name`` is the care worker or the client."""
        on_or_after = on_or_after or datetime.date.today()
        return list(
            Schedule.objects.filter(
                Q(care_worker_name__icontains=name) | Q(client_name__icontains=name),
                date__gte=on_or_after,
            ).exclude(status='CANCELED')[:20]
        )

    @staticmethod
    def open_alerts() -> List[Alert]:
        return list(Alert.objects.filter(resolved=False)[:50])

    @staticmethod
    def leave_for_week(week_start: datetime.date, event_type: Optional[str] = None) -> List[LeaveRequest]:
        """Leave entries overlapping the seven days from ``week_start``."""
        week_end = week_start + datetime.timedelta(days=6)
        queryset = LeaveRequest.objects.filter(
            start_date__lte=week_end,
            end_date__gte=week_start,
        )
        if event_type:
            queryset = queryset.filter(event_type=event_type)
        return list(queryset)

    @staticmethod
    def payroll_summary(month: int, year: int) -> dict:
        """
        Aggregate completed and confirmed visit hours per care worker.

        Returns:
            Dict with the period and a list of ``{care_worker_name, visits,
            hours}`` rows sorted by name
        """
        if not 1 <= month <= 12:
            raise ValueError("Month must be between 1 and 12.")
        if not 2000 <= year <= 2100:
            raise ValueError(f"{year} is not a payroll year we can report on.")

        last_day = calendar.monthrange(year, month)[1]
        schedules = Schedule.objects.filter(
            date__gte=datetime.date(year, month, 1),
            date__lte=datetime.date(year, month, last_day),
            status__in=['CONFIRMED', 'COMPLETED'],
        )

        minutes = defaultdict(int)
        visits = defaultdict(int)
        for schedule in schedules:
            minutes[schedule.care_worker_name] += _minutes_between(
                schedule.start_time, schedule.end_time
            )
            visits[schedule.care_worker_name] += 1

        rows = [
            {
                'care_worker_name': name,
                'visits': visits[name],
                'hours': round(minutes[name] / 60, 2),
            }
            for name in sorted(minutes)
        ]
        return {
            'period': f"{calendar.month_name[month]} {year}",
            'rows': rows,
            'total_hours': round(sum(minutes.values()) / 60, 2),
        }
