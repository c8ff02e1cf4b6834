"""
Test settings: in-memory SQLite, no debug toolbar, auth off.

Usage:
    pytest                      (pyproject.toml points at this module)
    DJANGO_SETTINGS_MODULE=config.settings.test pytest backend/apps/assistant -v
"""
import copy

from .development import *  # noqa: F401,F403

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

# Disable debug toolbar in tests (avoids middleware issues)
INSTALLED_APPS = [
    app for app in INSTALLED_APPS
    if app != 'debug_toolbar'
]
MIDDLEWARE = [
    mw for mw in MIDDLEWARE
    if mw != 'debug_toolbar.middleware.DebugToolbarMiddleware'
]

ASSISTANT = copy.deepcopy(ASSISTANT)
ASSISTANT['REQUIRE_AUTH'] = False
ASSISTANT['EXECUTION_TIMEOUT_SECONDS'] = 2.0
ASSISTANT['LANGUAGE_TIMEOUT_SECONDS'] = 2.0

LOGGING = copy.deepcopy(LOGGING)
LOGGING['loggers']['apps']['level'] = 'WARNING'
