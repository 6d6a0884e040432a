"""
Helpers de criação e manutenção de usuários.
"""

import logging

from django.contrib.auth import get_user_model
from django.db import transaction
from rest_framework.authtoken.models import Token

from .models import NivelAcesso, Usuario

logger = logging.getLogger(__name__)


def nivel_padrao():
    nivel, _ = NivelAcesso.objects.get_or_create(nome=NivelAcesso.VISTORIADOR)
    return nivel


@transaction.atomic
def criar_usuario(nome, email, senha, nivel_acesso=None, deve_atualizar_senha=False, ativo=True):
    """Cria o User do Django e o perfil ``Usuario`` ligados entre si."""
    email = email.strip().lower()
    UserModel = get_user_model()
    user = UserModel.objects.create_user(username=email, email=email, password=senha, is_active=ativo)
    usuario = Usuario.objects.create(
        user=user,
        nome=nome,
        email=email,
        nivel_acesso=nivel_acesso or nivel_padrao(),
        ativo=ativo,
        deve_atualizar_senha=deve_atualizar_senha,
    )
    logger.info('Usuário criado: %s (%s)', email, usuario.nivel_acesso.nome)
    return usuario


def email_em_uso(email, exceto=None):
    email = (email or '').strip().lower()
    qs = Usuario.objects.filter(email__iexact=email)
    if exceto is not None:
        qs = qs.exclude(pk=exceto.pk)
    users = get_user_model().objects.filter(username__iexact=email)
    if exceto is not None:
        users = users.exclude(pk=exceto.user_id)
    return qs.exists() or users.exists()


def definir_senha(usuario, senha, deve_atualizar_senha):
    """Troca a senha e revoga os tokens emitidos para o usuário."""
    user = usuario.user
    user.set_password(senha)
    user.save(update_fields=['password'])
    usuario.deve_atualizar_senha = deve_atualizar_senha
    usuario.save(update_fields=['deve_atualizar_senha', 'updated_at'])
    revogar_tokens(usuario)


def revogar_tokens(usuario):
    Token.objects.filter(user=usuario.user).delete()
