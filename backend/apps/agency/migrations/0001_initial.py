"""
Initial agency record store.
"""
import uuid
from django.db import migrations, models


def _base_fields():
    return [
        ('id', models.UUIDField(
            default=uuid.uuid4, editable=False,
            primary_key=True, serialize=False,
        )),
        ('created_at', models.DateTimeField(auto_now_add=True)),
        ('updated_at', models.DateTimeField(auto_now=True)),
    ]


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Schedule',
            fields=_base_fields() + [
                ('care_worker_name', models.CharField(db_index=True, max_length=200)),
                ('client_name', models.CharField(db_index=True, max_length=200)),
                ('date', models.DateField()),
                ('start_time', models.TimeField()),
                ('end_time', models.TimeField()),
                ('schedule_type', models.CharField(
                    choices=[
                        ('WEEKLY_CHECKUP', 'Weekly Checkup'),
                        ('APPOINTMENT', 'Appointment'),
                        ('HOME_VISIT', 'Home Visit'),
                        ('CHECKUP', 'Checkup'),
                        ('EMERGENCY', 'Emergency'),
                        ('ROUTINE', 'Routine'),
                        ('OTHER', 'Other'),
                    ],
                    default='ROUTINE', max_length=20,
                )),
                ('status', models.CharField(
                    choices=[
                        ('PENDING', 'Pending'),
                        ('CONFIRMED', 'Confirmed'),
                        ('COMPLETED', 'Completed'),
                        ('CANCELED', 'Canceled'),
                    ],
                    default='PENDING', max_length=20,
                )),
            ],
            options={'ordering': ['date', 'start_time']},
        ),
        migrations.CreateModel(
            name='ClientProfile',
            fields=_base_fields() + [
                ('full_name', models.CharField(max_length=200)),
                ('email', models.EmailField(max_length=254)),
                ('date_of_birth', models.DateField()),
                ('role', models.CharField(
                    choices=[('CLIENT', 'Client'), ('FAMILY', 'Family')],
                    max_length=20,
                )),
                ('sub_role', models.CharField(blank=True, default='', max_length=40)),
            ],
            options={'abstract': False},
        ),
        migrations.CreateModel(
            name='CoverAssignment',
            fields=_base_fields() + [
                ('client_name', models.CharField(max_length=200)),
                ('care_worker_name', models.CharField(max_length=200)),
                ('date', models.DateField()),
                ('time', models.TimeField()),
            ],
            options={'abstract': False},
        ),
        migrations.CreateModel(
            name='StaffBroadcast',
            fields=_base_fields() + [
                ('message', models.TextField()),
                ('channel', models.CharField(
                    choices=[('SMS', 'SMS'), ('EMAIL', 'Email')],
                    max_length=10,
                )),
                ('priority', models.CharField(
                    choices=[
                        ('LOW', 'Low'),
                        ('NORMAL', 'Normal'),
                        ('HIGH', 'High'),
                        ('URGENT', 'Urgent'),
                    ],
                    default='NORMAL', max_length=10,
                )),
            ],
            options={'abstract': False},
        ),
        migrations.CreateModel(
            name='OnboardingInvite',
            fields=_base_fields() + [
                ('name', models.CharField(max_length=200)),
                ('email', models.EmailField(max_length=254)),
                ('role', models.CharField(
                    choices=[('CARE_WORKER', 'Care Worker'), ('OFFICE_STAFF', 'Office Staff')],
                    max_length=20,
                )),
                ('sub_role', models.CharField(blank=True, default='', max_length=40)),
                ('include_training', models.BooleanField(default=False)),
            ],
            options={'abstract': False},
        ),
        migrations.CreateModel(
            name='CarePlanDraft',
            fields=_base_fields() + [
                ('client_name', models.CharField(max_length=200)),
                ('care_type', models.CharField(max_length=200)),
                ('condition', models.CharField(max_length=500)),
                ('priority', models.CharField(
                    choices=[('LOW', 'Low'), ('MEDIUM', 'Medium'), ('HIGH', 'High')],
                    max_length=10,
                )),
                ('summary', models.TextField(blank=True, default='')),
            ],
            options={'abstract': False},
        ),
        migrations.CreateModel(
            name='Alert',
            fields=_base_fields() + [
                ('title', models.CharField(max_length=200)),
                ('detail', models.TextField(blank=True, default='')),
                ('severity', models.CharField(
                    choices=[('LOW', 'Low'), ('MEDIUM', 'Medium'), ('HIGH', 'High')],
                    default='MEDIUM', max_length=10,
                )),
                ('resolved', models.BooleanField(default=False)),
            ],
            options={'ordering': ['-created_at']},
        ),
        migrations.CreateModel(
            name='LeaveRequest',
            fields=_base_fields() + [
                ('staff_name', models.CharField(max_length=200)),
                ('event_type', models.CharField(max_length=30)),
                ('start_date', models.DateField()),
                ('end_date', models.DateField()),
                ('approved', models.BooleanField(default=False)),
            ],
            options={'ordering': ['start_date']},
        ),
    ]
