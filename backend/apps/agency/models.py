"""
Agency models - the records that assistant actions create and read.

Names are stored as free text: the assistant is given people's names in
conversation, not identifiers, and the directory of staff and clients is
owned elsewhere.
"""
from django.db import models

from apps.common.models import BaseRecord


class ScheduleType(models.TextChoices):
    WEEKLY_CHECKUP = 'WEEKLY_CHECKUP', 'Weekly Checkup'
    APPOINTMENT = 'APPOINTMENT', 'Appointment'
    HOME_VISIT = 'HOME_VISIT', 'Home Visit'
    CHECKUP = 'CHECKUP', 'Checkup'
    EMERGENCY = 'EMERGENCY', 'Emergency'
    ROUTINE = 'ROUTINE', 'Routine'
    OTHER = 'OTHER', 'Other'


class ScheduleStatus(models.TextChoices):
    PENDING = 'PENDING', 'Pending'
    CONFIRMED = 'CONFIRMED', 'Confirmed'
    COMPLETED = 'COMPLETED', 'Completed'
    CANCELED = 'CANCELED', 'Canceled'


class Schedule(BaseRecord):
    """A visit by a care worker to a client"""
    care_worker_name = models.CharField(max_length=200, db_index=True)
    client_name = models.CharField(max_length=200, db_index=True)
    date = models.DateField()
    start_time = models.TimeField()
    end_time = models.TimeField()
    schedule_type = models.CharField(
        max_length=20,
        choices=ScheduleType.choices,
        default=ScheduleType.ROUTINE,
    )
    status = models.CharField(
        max_length=20,
        choices=ScheduleStatus.choices,
        default=ScheduleStatus.PENDING,
    )

    class Meta:
        ordering = ['date', 'start_time']

    def __str__(self):
        return f"{self.care_worker_name} -> {self.client_name} on {self.date}"


class ClientProfile(BaseRecord):
    """A client or family member account"""
    full_name = models.CharField(max_length=200)
    email = models.EmailField()
    date_of_birth = models.DateField()
    role = models.CharField(
        max_length=20,
        choices=[('CLIENT', 'Client'), ('FAMILY', 'Family')],
    )
    sub_role = models.CharField(max_length=40, blank=True, default='')

    def __str__(self):
        return self.full_name


class CoverAssignment(BaseRecord):
    """A care worker covering a client's visit"""
    client_name = models.CharField(max_length=200)
    care_worker_name = models.CharField(max_length=200)
    date = models.DateField()
    time = models.TimeField()


class StaffBroadcast(BaseRecord):
    """A message sent to staff over SMS or email"""
    message = models.TextField()
    channel = models.CharField(
        max_length=10,
        choices=[('SMS', 'SMS'), ('EMAIL', 'Email')],
    )
    priority = models.CharField(
        max_length=10,
        choices=[
            ('LOW', 'Low'),
            ('NORMAL', 'Normal'),
            ('HIGH', 'High'),
            ('URGENT', 'Urgent'),
        ],
        default='NORMAL',
    )


class OnboardingInvite(BaseRecord):
    """An invitation for a new staff member to join the agency"""
    name = models.CharField(max_length=200)
    email = models.EmailField()
    role = models.CharField(
        max_length=20,
        choices=[('CARE_WORKER', 'Care Worker'), ('OFFICE_STAFF', 'Office Staff')],
    )
    sub_role = models.CharField(max_length=40, blank=True, default='')
    include_training = models.BooleanField(default=False)


class CarePlanDraft(BaseRecord):
    """A drafted care plan awaiting clinical review"""
    client_name = models.CharField(max_length=200)
    care_type = models.CharField(max_length=200)
    condition = models.CharField(max_length=500)
    priority = models.CharField(
        max_length=10,
        choices=[('LOW', 'Low'), ('MEDIUM', 'Medium'), ('HIGH', 'High')],
    )
    summary = models.TextField(blank=True, default='')


class Alert(BaseRecord):
    """An operational alert (missed visit, late check-in, incident)"""
    title = models.CharField(max_length=200)
    detail = models.TextField(blank=True, default='')
    severity = models.CharField(
        max_length=10,
        choices=[('LOW', 'Low'), ('MEDIUM', 'Medium'), ('HIGH', 'High')],
        default='MEDIUM',
    )
    resolved = models.BooleanField(default=False)

    class Meta:
        ordering = ['-created_at']


class LeaveRequest(BaseRecord):
    """A staff leave or holiday entry"""
    staff_name = models.CharField(max_length=200)
    event_type = models.CharField(max_length=30)
    start_date = models.DateField()
    end_date = models.DateField()
    approved = models.BooleanField(default=False)

    class Meta:
        ordering = ['start_date']
