"""
Indicadores do painel administrativo.

Os períodos são meses do calendário no fuso de ``TIME_ZONE``; concluída
significa ``data_conclusao`` dentro do mês, qualquer que seja o status atual.
"""

from datetime import datetime
from decimal import Decimal

from django.db.models import Count, Sum
from django.utils import timezone

from usuarios.models import NivelAcesso, Usuario
from .models import Embarcacao, StatusVistoria, Vistoria

MESES_HISTORICO = 6

NOMES_MESES = [
    'janeiro', 'fevereiro', 'março', 'abril', 'maio', 'junho',
    'julho', 'agosto', 'setembro', 'outubro', 'novembro', 'dezembro',
]


def _mes_anterior(ano, mes):
    return (ano - 1, 12) if mes == 1 else (ano, mes - 1)


def _mes_seguinte(ano, mes):
    return (ano + 1, 1) if mes == 12 else (ano, mes + 1)


def _intervalo(ano, mes):
    """[início, fim) do mês como datetimes com fuso."""
    inicio = timezone.make_aware(datetime(ano, mes, 1))
    fim = timezone.make_aware(datetime(*_mes_seguinte(ano, mes), 1))
    return inicio, fim


def _soma(qs, campo):
    return qs.aggregate(total=Sum(campo))['total'] or Decimal('0')


def _percentual(atual, anterior):
    if anterior > 0:
        return round(float((atual - anterior) / anterior * 100), 1)
    return 100.0 if atual > 0 else 0.0


def resumo_do_mes(ano, mes):
    inicio, fim = _intervalo(ano, mes)
    criadas = Vistoria.objects.filter(created_at__gte=inicio, created_at__lt=fim)
    concluidas = Vistoria.objects.filter(data_conclusao__gte=inicio, data_conclusao__lt=fim)

    receita = _soma(concluidas, 'valor_vistoria')
    despesa = _soma(concluidas, 'valor_vistoriador')
    return {
        'mes': mes,
        'ano': ano,
        'nome_mes': f'{NOMES_MESES[mes - 1]} de {ano}',
        'vistorias': {
            'total': criadas.count(),
            'concluidas': concluidas.count(),
        },
        'financeiro': {
            'receita': receita,
            'despesa': despesa,
            'lucro': receita - despesa,
        },
    }


def concluidas_por_mes(ano, mes, quantidade=MESES_HISTORICO):
    """Vistorias concluídas nos últimos ``quantidade`` meses, do mais antigo ao atual."""
    meses = [(ano, mes)]
    for _ in range(quantidade - 1):
        meses.insert(0, _mes_anterior(*meses[0]))

    resultado = []
    for a, m in meses:
        inicio, fim = _intervalo(a, m)
        resultado.append({
            'mes': f'{a:04d}-{m:02d}',
            'total': Vistoria.objects.filter(data_conclusao__gte=inicio, data_conclusao__lt=fim).count(),
        })
    return resultado


def ranking_vistoriadores(ano, mes, limite=5):
    inicio, fim = _intervalo(ano, mes)
    linhas = (
        Vistoria.objects
        .filter(data_conclusao__gte=inicio, data_conclusao__lt=fim, vistoriador__isnull=False)
        .values('vistoriador_id', 'vistoriador__nome', 'vistoriador__email')
        .annotate(total_vistorias=Count('id'), total_ganho=Sum('valor_vistoriador'))
        .order_by('-total_vistorias', 'vistoriador__nome')[:limite]
    )
    return [
        {
            'id': linha['vistoriador_id'],
            'nome': linha['vistoriador__nome'],
            'email': linha['vistoriador__email'],
            'total_vistorias': linha['total_vistorias'],
            'total_ganho': linha['total_ganho'] or Decimal('0'),
        }
        for linha in linhas
    ]


def estatisticas_dashboard(agora=None):
    hoje = timezone.localtime(agora or timezone.now())
    ano, mes = hoje.year, hoje.month

    atual = resumo_do_mes(ano, mes)
    anterior = resumo_do_mes(*_mes_anterior(ano, mes))

    por_status = dict(
        Vistoria.objects.values_list('status__nome').annotate(total=Count('id')).order_by()
    )
    vistorias_por_status = [
        {'status': nome, 'quantidade': por_status.get(nome, 0)}
        for nome in StatusVistoria.objects.order_by('pk').values_list('nome', flat=True)
    ]

    comparacao = {}
    for chave, a, b in (
        ('vistorias', atual['vistorias']['total'], anterior['vistorias']['total']),
        ('receita', atual['financeiro']['receita'], anterior['financeiro']['receita']),
        ('lucro', atual['financeiro']['lucro'], anterior['financeiro']['lucro']),
    ):
        comparacao[chave] = {'variacao': a - b, 'percentual': _percentual(a, b)}

    return {
        'mes_atual': atual,
        'mes_anterior': anterior,
        'comparacao': comparacao,
        'vistorias_por_status': vistorias_por_status,
        'concluidas_por_mes': concluidas_por_mes(ano, mes),
        'ranking_vistoriadores': ranking_vistoriadores(ano, mes),
        'totais_gerais': {
            'total_vistorias': Vistoria.objects.count(),
            'total_embarcacoes': Embarcacao.objects.count(),
            'total_vistoriadores': Usuario.objects.filter(nivel_acesso__nome=NivelAcesso.VISTORIADOR).count(),
        },
    }
