"""
WSGI config for the care assistant.

WARNING: under WSGI every async view runs in its own event loop.
    Use ASGI (config.asgi) for production and development.

    Start with: uvicorn config.asgi:application --reload
"""
import os
from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.development')

application = get_wsgi_application()
