"""
ASGI config for the care assistant.

    Start with: uvicorn config.asgi:application --reload
"""
import os
from django.core.asgi import get_asgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.development')

application = get_asgi_application()
