"""
URL Configuration for the care assistant
"""
from django.urls import path, include
from django.conf import settings

urlpatterns = [
    # Conversational assistant
    path('api/assistant/', include('apps.assistant.urls')),
]

# Debug toolbar (only in development)
if settings.DEBUG and 'debug_toolbar' in settings.INSTALLED_APPS:
    try:
        import debug_toolbar
        urlpatterns = [
            path('__debug__/', include(debug_toolbar.urls)),
        ] + urlpatterns
    except ImportError:
        pass  # debug_toolbar not installed
