"""
Configuração da aplicação Django 'laudos'.
"""

from django.apps import AppConfig


class LaudosConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "laudos"
    verbose_name = "Laudos"

    def ready(self):
        from . import signals  # noqa: F401
