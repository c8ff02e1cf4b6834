"""
Care-agency tool definitions.

Registered into the process-wide registry by AssistantConfig.ready().
Tests build their own registries from these helpers with fake effects.
"""

import calendar

from . import effects
from .registry import EnumChoice, FieldSpec, FieldType, ToolDefinition, ToolKind, ToolRegistry

SCHEDULE_TYPES = ('WEEKLY_CHECKUP', 'APPOINTMENT', 'HOME_VISIT', 'CHECKUP', 'EMERGENCY', 'ROUTINE', 'OTHER')
SCHEDULE_STATUSES = ('PENDING', 'CONFIRMED', 'COMPLETED', 'CANCELED')
CLIENT_ROLES = ('CLIENT', 'FAMILY')
CLIENT_SUB_ROLES = ('SERVICE_USER', 'FAMILY_AND_FRIENDS', 'OTHER')
MESSAGE_CHANNELS = (EnumChoice('SMS', 'SMS'), EnumChoice('EMAIL', 'Email'))
MESSAGE_PRIORITIES = ('LOW', 'NORMAL', 'HIGH', 'URGENT')
STAFF_ROLES = ('CARE_WORKER', 'OFFICE_STAFF')
STAFF_SUB_ROLES = (
    'CAREGIVER', 'SENIOR_CAREGIVER', 'JUNIOR_CAREGIVER', 'TRAINEE_CAREGIVER',
    'LIVE_IN_CAREGIVER', 'PART_TIME_CAREGIVER', 'SPECIALIZED_CAREGIVER',
    'NURSING_ASSISTANT', 'OTHER',
)
CARE_PLAN_PRIORITIES = ('LOW', 'MEDIUM', 'HIGH')
LEAVE_TYPES = (
    'ANNUAL_LEAVE', 'SICK_LEAVE', 'PUBLIC_HOLIDAY', 'UNPAID_LEAVE',
    'MATERNITY_LEAVE', 'PATERNITY_LEAVE', 'BEREAVEMENT_LEAVE',
    'EMERGENCY_LEAVE', 'MEDICAL_APPOINTMENT', 'TOIL', 'OTHER',
)
MONTHS = tuple(name.upper() for name in calendar.month_name if name)


def _enum(name, label, choices, required=True, description=""):
    return FieldSpec(
        name=name,
        label=label,
        type=FieldType.ENUM,
        required=required,
        choices=tuple(choices),
        description=description,
    )


def care_tool_definitions(overrides=None):
    """
    Build the care-agency tool definitions.

    Args:
        overrides: Optional dict of tool name -> effect, used by tests to
                   swap real effects for in-memory ones

    Returns:
        List of ToolDefinition in catalogue order
    """
    overrides = overrides or {}

    def effect(name, default):
        return overrides.get(name, default)

    return [
        ToolDefinition(
            name='createSchedule',
            display_name='Create Schedule',
            description='Create a new schedule entry (a visit by a care worker to a client).',
            kind=ToolKind.MUTATING,
            effect=effect('createSchedule', effects.create_schedule),
            fields=(
                FieldSpec('careWorker_name', 'Care Worker', description='The name of the care worker'),
                FieldSpec('client_name', 'Client', description='The name of the client'),
                FieldSpec('start_time', 'Start Time', FieldType.TIME, description='Start time, 24-hour HH:MM'),
                FieldSpec('end_time', 'End Time', FieldType.TIME, description='End time, 24-hour HH:MM'),
                FieldSpec('date', 'Date', FieldType.DATE, description='Date of the visit, YYYY-MM-DD'),
                _enum('type', 'Visit Type', SCHEDULE_TYPES, description='The type of schedule'),
                _enum('status', 'Status', SCHEDULE_STATUSES, description='The status of the schedule'),
            ),
        ),
        ToolDefinition(
            name='createClientProfile',
            display_name='Create Client Profile',
            description='Create a new client or family member profile.',
            kind=ToolKind.MUTATING,
            effect=effect('createClientProfile', effects.create_client_profile),
            fields=(
                FieldSpec('fullName', 'Full Name', description='The full name of the client'),
                FieldSpec('email', 'Email', FieldType.EMAIL, description='The email of the client'),
                FieldSpec('dateOfBirth', 'Date of Birth', FieldType.DATE, description='Date of birth, YYYY-MM-DD'),
                _enum('role', 'Role', CLIENT_ROLES, description='The role of the user'),
                _enum('subRole', 'Sub-Role', CLIENT_SUB_ROLES, required=False,
                      description='The sub-role of the user'),
            ),
        ),
        ToolDefinition(
            name='assignCover',
            display_name='Assign Cover',
            description='Assign a care worker to cover a cancelled visit.',
            kind=ToolKind.MUTATING,
            effect=effect('assignCover', effects.assign_cover),
            fields=(
                FieldSpec('client_name', 'Client', description='The name of the client'),
                FieldSpec('date', 'Date', FieldType.DATE, description='Date of the visit, YYYY-MM-DD'),
                FieldSpec('time', 'Time', FieldType.TIME, description='Time of the visit, 24-hour HH:MM'),
                FieldSpec('careWorker_name', 'Care Worker', description='The name of the care worker to assign'),
            ),
        ),
        ToolDefinition(
            name='sendMessage',
            display_name='Send Message',
            description='Send a message to all care workers.',
            kind=ToolKind.MUTATING,
            effect=effect('sendMessage', effects.send_message),
            fields=(
                FieldSpec('message', 'Message', description='The message to send'),
                _enum('channel', 'Channel', MESSAGE_CHANNELS, description='The channel to send the message through'),
                _enum('priority', 'Priority', MESSAGE_PRIORITIES, description='The priority of the message'),
            ),
        ),
        ToolDefinition(
            name='sendOnboardingInvite',
            display_name='Send Onboarding Invite',
            description='Send an onboarding invite to a new carer or office staff member.',
            kind=ToolKind.MUTATING,
            effect=effect('sendOnboardingInvite', effects.send_onboarding_invite),
            fields=(
                FieldSpec('name', 'Name', description='The name of the new starter'),
                FieldSpec('email', 'Email', FieldType.EMAIL, description='The email of the new starter'),
                FieldSpec('include_training', 'Include Training', FieldType.BOOLEAN,
                          description='Whether to include training materials'),
                _enum('role', 'Role', STAFF_ROLES, description='The role of the new starter'),
                _enum('subRole', 'Sub-Role', STAFF_SUB_ROLES, required=False,
                      description='The sub-role of the new starter'),
            ),
        ),
        ToolDefinition(
            name='generateCarePlan',
            display_name='Generate Care Plan',
            description='Generate a care plan draft for a client.',
            kind=ToolKind.MUTATING,
            effect=effect('generateCarePlan', effects.generate_care_plan),
            fields=(
                FieldSpec('client_name', 'Client', description='The name of the client'),
                FieldSpec('care_type', 'Care Type', description='The type of care required'),
                FieldSpec('condition', 'Condition', description='The medical condition of the client'),
                _enum('priority', 'Priority', CARE_PLAN_PRIORITIES,
                      description='The priority level of the care plan'),
            ),
        ),
        ToolDefinition(
            name='displayScheduleAppointment',
            display_name='Show Schedule',
            description='Show upcoming visits for a care worker or client.',
            kind=ToolKind.READ_ONLY,
            effect=effect('displayScheduleAppointment', effects.display_schedule),
            fields=(
                FieldSpec('name', 'Name', description='The care worker or client name'),
            ),
        ),
        ToolDefinition(
            name='viewAlerts',
            display_name='View Alerts',
            description='View unresolved alerts.',
            kind=ToolKind.READ_ONLY,
            effect=effect('viewAlerts', effects.view_alerts),
            fields=(),
        ),
        ToolDefinition(
            name='holidayRequest',
            display_name='Holiday Requests',
            description='View holiday and leave requests for a week.',
            kind=ToolKind.READ_ONLY,
            effect=effect('holidayRequest', effects.holiday_requests),
            fields=(
                FieldSpec('week', 'Week Commencing', FieldType.DATE,
                          description='First day of the week to check, YYYY-MM-DD'),
                _enum('eventType', 'Leave Type', LEAVE_TYPES, description='The type of leave event'),
            ),
        ),
        ToolDefinition(
            name='generatePayroll',
            display_name='Generate Payroll',
            description='Generate a payroll summary of care worker hours for a month.',
            kind=ToolKind.READ_ONLY,
            effect=effect('generatePayroll', effects.generate_payroll),
            fields=(
                _enum('month', 'Month', MONTHS, description='The month to generate payroll for'),
                FieldSpec('year', 'Year', description='The four digit year, e.g. 2025'),
            ),
        ),
    ]


def register_care_tools(registry: ToolRegistry, overrides=None) -> ToolRegistry:
    for tool in care_tool_definitions(overrides):
        registry.register(tool)
    return registry
