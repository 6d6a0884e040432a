"""
Helpers de auditoria.

- registrar_auditoria(...): grava um AuditoriaLog sem nunca propagar falhas.
- snapshot(instance): estado de um model em dict JSON-serializável.
- sanitizar(dados): remove chaves sensíveis (senhas, tokens) recursivamente.
"""

import json
import logging

from django.core.serializers.json import DjangoJSONEncoder
from django.db import transaction
from django.db.models.fields.files import FieldFile

logger = logging.getLogger(__name__)

CHAVES_SENSIVEIS = {'senha', 'senha_hash', 'password', 'token', 'nova_senha', 'senha_atual'}


def sanitizar(dados):
    if isinstance(dados, dict):
        return {k: sanitizar(v) for k, v in dados.items() if str(k).lower() not in CHAVES_SENSIVEIS}
    if isinstance(dados, (list, tuple)):
        return [sanitizar(v) for v in dados]
    return dados


def snapshot(instance, exclude=()):
    """Converte os campos concretos de ``instance`` em dict (FKs viram ids)."""
    if instance is None:
        return None
    dados = {}
    for field in instance._meta.concrete_fields:
        if field.name in exclude:
            continue
        valor = field.value_from_object(instance)
        if isinstance(valor, FieldFile):
            valor = valor.name or None
        dados[field.name] = valor
    return sanitizar(json.loads(json.dumps(dados, cls=DjangoJSONEncoder)))


def ip_da_requisicao(request):
    if request is None:
        return None
    xff = request.META.get('HTTP_X_FORWARDED_FOR')
    if xff:
        return xff.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR')


def perfil_da_requisicao(request):
    user = getattr(request, 'user', None)
    if user is None or not user.is_authenticated:
        return None
    return getattr(user, 'profile', None)


def registrar_auditoria(request=None, usuario=None, acao=None, entidade=None, entidade_id=None,
                        dados_anteriores=None, dados_novos=None, nivel_critico=False, detalhes=None):
    """Cria um registro em AuditoriaLog de forma segura (import tardio para evitar ciclos).

    Parâmetros:
    - request: HttpRequest/Request opcional (IP, user agent e usuário logado)
    - usuario: instância de usuarios.Usuario; se omitido, vem de request.user.profile
    - acao: LOGIN, LOGIN_FALHOU, CREATE, UPDATE, DELETE, ...
    - entidade/entidade_id: tipo e id do objeto afetado
    - dados_anteriores/dados_novos: snapshots (chaves sensíveis são removidas)
    - nivel_critico: marca a ação como crítica
    """
    if not acao or not entidade:
        return None

    try:
        from .models import AuditoriaLog

        if usuario is None:
            usuario = perfil_da_requisicao(request)

        user_agent = request.META.get('HTTP_USER_AGENT') if request is not None else None
        # savepoint: uma falha aqui não invalida a transação de quem chamou
        with transaction.atomic():
            return AuditoriaLog.objects.create(
                usuario=usuario,
                usuario_email=getattr(usuario, 'email', None),
                usuario_nome=getattr(usuario, 'nome', None),
                acao=str(acao),
                entidade=str(entidade),
                entidade_id=str(entidade_id) if entidade_id is not None else None,
                dados_anteriores=sanitizar(dados_anteriores),
                dados_novos=sanitizar(dados_novos),
                ip_address=ip_da_requisicao(request),
                user_agent=user_agent,
                nivel_critico=bool(nivel_critico),
                detalhes=detalhes,
            )
    except Exception:
        # não propagar erros de auditoria para a aplicação
        logger.exception('Falha ao gravar AuditoriaLog (%s %s)', acao, entidade)
    return None
