"""
Agency app configuration
"""

from django.apps import AppConfig


class AgencyConfig(AppConfig):
    """Configuration for the agency record store"""
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.agency'
    verbose_name = 'Agency'
