"""
Configuração do aplicativo Django para o app de usuários.
"""

from django.apps import AppConfig


class UsuariosConfig(AppConfig):
    """
    AppConfig para o app 'usuarios' (perfis, níveis de acesso e autenticação da API).
    """
    default_auto_field = "django.db.models.BigAutoField"
    name = "usuarios"
    verbose_name = "Usuários"
