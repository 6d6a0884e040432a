"""
Configuração da aplicação Django 'auditoria'.
"""

from django.apps import AppConfig


class AuditoriaConfig(AppConfig):
    """Trilha de auditoria das ações administrativas e de autenticação."""
    default_auto_field = "django.db.models.BigAutoField"
    name = "auditoria"
    verbose_name = "Auditoria"
