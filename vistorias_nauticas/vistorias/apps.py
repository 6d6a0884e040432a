"""
Configuração da aplicação Django 'vistorias'.

O método ready() registra os sinais que removem arquivos do armazenamento.
"""

from django.apps import AppConfig


class VistoriasConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "vistorias"
    verbose_name = "Vistorias"

    def ready(self):
        # Registra sinais definidos no módulo signals.py
        from . import signals  # noqa: F401
