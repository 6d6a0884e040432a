"""
Tratamento centralizado de erros da API.

Todas as respostas de erro seguem o formato ``{"error": <mensagem>}``, com
``details`` (erros por campo) e ``code`` (código de máquina) quando existirem.
"""

import logging

from django.conf import settings
from django.core.exceptions import ObjectDoesNotExist, ValidationError as DjangoValidationError
from django.db import IntegrityError
from rest_framework import status
from rest_framework.exceptions import APIException, NotFound, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class ErroAPI(APIException):
    """APIException que aceita dados extras no corpo da resposta (``extra``)."""

    def __init__(self, detail=None, code=None, extra=None):
        super().__init__(detail, code)
        self.extra = extra or {}


class RegraNegocioError(ErroAPI):
    """Regra de negócio não satisfeita (ex.: checklist de fotos incompleto)."""
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_detail = 'Operação não permitida pelas regras de negócio.'
    default_code = 'regra_negocio'


class ConflitoError(ErroAPI):
    """Conflito com o estado atual do recurso (duplicidade, transição inválida)."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Conflito com o estado atual do recurso.'
    default_code = 'conflito'


def _converter(exc):
    """Traduz exceções do Django/ORM/armazenamento para exceções da API."""
    from vistorias.storage import ArmazenamentoError, ArmazenamentoNaoEncontrado

    if isinstance(exc, DjangoValidationError):
        if hasattr(exc, 'error_dict'):
            return ValidationError(detail=exc.message_dict)
        return ValidationError(detail=exc.messages)
    if isinstance(exc, ObjectDoesNotExist):
        return NotFound('Registro não encontrado.')
    if isinstance(exc, IntegrityError):
        return ConflitoError('Registro duplicado ou em conflito com dados existentes.')
    if isinstance(exc, ArmazenamentoNaoEncontrado):
        return NotFound('Arquivo não encontrado no armazenamento.')
    if isinstance(exc, ArmazenamentoError):
        logger.error('Falha no armazenamento de arquivos: %s', exc)
        return APIException('Falha ao acessar o armazenamento de arquivos.')
    return exc


def _primeira_mensagem(detail):
    if isinstance(detail, dict):
        for valor in detail.values():
            mensagem = _primeira_mensagem(valor)
            if mensagem:
                return mensagem
        return None
    if isinstance(detail, list):
        return _primeira_mensagem(detail[0]) if detail else None
    return str(detail)


def _codigo(detail):
    code = getattr(detail, 'code', None)
    if code and code not in ('invalid', 'error'):
        return code
    return None


def api_exception_handler(exc, context):
    """Exception handler do DRF registrado em ``REST_FRAMEWORK['EXCEPTION_HANDLER']``."""
    exc = _converter(exc)
    response = exception_handler(exc, context)

    if response is None:
        view = context.get('view')
        logger.exception('Erro não tratado em %s', view.__class__.__name__ if view else '?', exc_info=exc)
        body = {'error': 'Erro interno do servidor.'}
        if settings.DEBUG:
            body['details'] = str(exc)
        return Response(body, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    if isinstance(exc, ValidationError):
        body = {'error': _primeira_mensagem(exc.detail) or 'Dados inválidos.', 'details': exc.detail}
    else:
        detail = getattr(exc, 'detail', None)
        if isinstance(detail, dict):
            body = {'error': str(detail.get('error') or detail.get('detail') or 'Erro na requisição.')}
            body.update({k: v for k, v in detail.items() if k not in ('error', 'detail')})
        else:
            body = {'error': str(detail) if detail is not None else 'Erro na requisição.'}
            code = _codigo(detail)
            if code:
                body['code'] = code
        body.update(getattr(exc, 'extra', None) or {})

    response.data = body
    return response
