"""
API de consulta da auditoria (somente administradores).

- GET /api/auditoria/ : logs filtrados e paginados
- GET /api/auditoria/estatisticas : agregados para o painel
"""

from datetime import datetime, time

from django.db.models import Count
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import APIView

from usuarios.permissions import PERMISSOES_ADMIN
from .models import AuditoriaLog
from .serializers import AuditoriaLogSerializer

LIMITE_PADRAO = 20
LIMITE_MAXIMO = 100


def _data(valor, fim_do_dia=False):
    """Aceita 'AAAA-MM-DD' ou datetime ISO; datas simples cobrem o dia inteiro."""
    try:
        # a data simples vem antes: parse_datetime também aceita 'AAAA-MM-DD' (meia-noite)
        d = parse_date(valor)
        dt = datetime.combine(d, time.max if fim_do_dia else time.min) if d else parse_datetime(valor)
    except ValueError:
        dt = None
    if dt is None:
        raise ValidationError(f'Data inválida: {valor}')
    if timezone.is_naive(dt):
        dt = timezone.make_aware(dt)
    return dt


def _inteiro(valor, padrao, nome):
    if valor in (None, ''):
        return padrao
    try:
        return int(valor)
    except (TypeError, ValueError):
        raise ValidationError(f'Parâmetro {nome} deve ser numérico.')


def filtrar_logs(params, qs=None):
    qs = AuditoriaLog.objects.all() if qs is None else qs

    if params.get('acao'):
        qs = qs.filter(acao=params['acao'])
    if params.get('entidade'):
        qs = qs.filter(entidade=params['entidade'])
    if params.get('usuario_id'):
        qs = qs.filter(usuario_id=_inteiro(params['usuario_id'], None, 'usuario_id'))
    nivel = params.get('nivel_critico')
    if nivel not in (None, ''):
        qs = qs.filter(nivel_critico=nivel.lower() in ('1', 'true', 'sim'))
    if params.get('data_inicio'):
        qs = qs.filter(created_at__gte=_data(params['data_inicio']))
    if params.get('data_fim'):
        qs = qs.filter(created_at__lte=_data(params['data_fim'], fim_do_dia=True))
    return qs


class AuditoriaLogListAPIView(APIView):
    """Lista logs com filtros (?acao=&entidade=&nivel_critico=&usuario_id=&data_inicio=&data_fim=)
    e paginação (?page=&limit=)."""
    permission_classes = PERMISSOES_ADMIN

    def get(self, request):
        qs = filtrar_logs(request.query_params).select_related('usuario')

        page = max(_inteiro(request.query_params.get('page'), 1, 'page'), 1)
        limit = _inteiro(request.query_params.get('limit'), LIMITE_PADRAO, 'limit')
        limit = min(max(limit, 1), LIMITE_MAXIMO)

        total = qs.count()
        inicio = (page - 1) * limit
        logs = qs[inicio:inicio + limit]

        return Response({
            'logs': AuditoriaLogSerializer(logs, many=True).data,
            'pagination': {
                'total': total,
                'page': page,
                'limit': limit,
                'total_pages': (total + limit - 1) // limit,
            },
        })


class AuditoriaEstatisticasAPIView(APIView):
    permission_classes = PERMISSOES_ADMIN

    def get(self, request):
        qs = filtrar_logs({k: request.query_params.get(k) for k in ('data_inicio', 'data_fim')})

        acoes_por_tipo = {
            linha['acao']: linha['total']
            for linha in qs.values('acao').annotate(total=Count('id')).order_by('-total', 'acao')
        }
        usuarios_mais_ativos = [
            {'usuario_id': linha['usuario_id'], 'email': linha['usuario_email'],
             'nome': linha['usuario_nome'], 'total': linha['total']}
            for linha in qs.exclude(usuario__isnull=True)
                           .values('usuario_id', 'usuario_email', 'usuario_nome')
                           .annotate(total=Count('id'))
                           .order_by('-total', 'usuario_email')[:5]
        ]

        return Response({
            'total_acoes': qs.count(),
            'acoes_por_tipo': acoes_por_tipo,
            'acoes_criticas': qs.filter(nivel_critico=True).count(),
            'usuarios_mais_ativos': usuarios_mais_ativos,
            'logins_falhados': qs.filter(acao='LOGIN_FALHOU').count(),
            'operacoes_bloqueadas': qs.filter(acao='ACESSO_NEGADO').count(),
        })
