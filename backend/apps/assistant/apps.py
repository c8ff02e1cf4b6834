"""
Assistant app configuration
"""
import logging

from django.apps import AppConfig

logger = logging.getLogger(__name__)


class AssistantConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.assistant'
    verbose_name = 'Assistant'

    def ready(self):
        # Build the tool catalogue once; it is read-only afterwards
        from apps.assistant.tools.registry import default_registry
        from apps.assistant.tools.schemas import register_care_tools

        if not default_registry.frozen:
            register_care_tools(default_registry)
            default_registry.freeze()
            logger.debug("Assistant tool registry ready: %d tools", len(default_registry))
