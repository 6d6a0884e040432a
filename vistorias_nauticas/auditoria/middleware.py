"""
Middleware que registra na auditoria as requisições da API bloqueadas por permissão.
"""

import logging

from .utils import registrar_auditoria

logger = logging.getLogger(__name__)


class AuditoriaMiddleware:
    """
    Registra respostas 403 sob ``/api/`` como ``ACESSO_NEGADO`` (nível crítico).

    Nunca interrompe a requisição por falha de auditoria.
    """
    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        response = self.get_response(request)

        if response.status_code == 403 and request.path.startswith('/api/'):
            try:
                registrar_auditoria(
                    request=request,
                    acao='ACESSO_NEGADO',
                    entidade='Rota',
                    dados_novos={'metodo': request.method, 'rota': request.path},
                    nivel_critico=True,
                    detalhes=f'{request.method} {request.path} bloqueado',
                )
            except Exception:
                logger.exception('Falha ao auditar acesso negado em %s', request.path)

        return response
