"""
Permissões da API por nível de acesso.
"""

from rest_framework.permissions import SAFE_METHODS, BasePermission, IsAuthenticated

from .models import NivelAcesso


def perfil_de(user):
    """Retorna o ``Usuario`` ligado ao User do Django, ou None."""
    if user is None or not user.is_authenticated:
        return None
    return getattr(user, 'profile', None)


def is_administrador(user):
    perfil = perfil_de(user)
    if perfil is not None:
        return perfil.nivel_acesso.nome == NivelAcesso.ADMINISTRADOR
    return bool(user is not None and user.is_authenticated and user.is_superuser)


class SenhaAtualizada(BasePermission):
    """Bloqueia quem ainda precisa trocar a senha provisória."""
    message = 'Você deve atualizar sua senha antes de continuar.'
    code = 'PASSWORD_UPDATE_REQUIRED'

    def has_permission(self, request, view):
        perfil = perfil_de(request.user)
        return perfil is None or not perfil.deve_atualizar_senha


class IsAdministrador(BasePermission):
    message = 'Acesso restrito a administradores.'

    def has_permission(self, request, view):
        return is_administrador(request.user)


class IsVistoriador(BasePermission):
    """Administradores e vistoriadores."""
    message = 'Acesso restrito a vistoriadores.'

    def has_permission(self, request, view):
        if is_administrador(request.user):
            return True
        perfil = perfil_de(request.user)
        return perfil is not None and perfil.nivel_acesso.nome == NivelAcesso.VISTORIADOR


PERMISSOES_AUTENTICADO = [IsAuthenticated, SenhaAtualizada]
PERMISSOES_ADMIN = [IsAuthenticated, SenhaAtualizada, IsAdministrador]
PERMISSOES_VISTORIADOR = [IsAuthenticated, SenhaAtualizada, IsVistoriador]


class EscritaAdminMixin:
    """Leitura para vistoriadores e administradores; escrita só para administradores."""

    def get_permissions(self):
        if self.request.method in SAFE_METHODS:
            return [p() for p in PERMISSOES_VISTORIADOR]
        return [p() for p in PERMISSOES_ADMIN]
