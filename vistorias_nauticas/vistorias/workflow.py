"""
Fluxo de status da vistoria e situação do checklist de fotos.

    PENDENTE ──► EM_ANDAMENTO ──► CONCLUIDA ──► APROVADA
        │             │               │
        └─► CANCELADA ◄┘               └──► REPROVADA ──► EM_ANDAMENTO

Vistoriadores só iniciam, concluem e retomam vistorias reprovadas; as
demais transições são do administrador.
"""

import logging

from django.utils import timezone
from rest_framework.exceptions import PermissionDenied, ValidationError

from vistorias_nauticas.exceptions import ConflitoError, RegraNegocioError
from .models import StatusVistoria, TipoFotoChecklist

logger = logging.getLogger(__name__)

S = StatusVistoria

TRANSICOES = {
    S.PENDENTE: {S.EM_ANDAMENTO, S.CANCELADA},
    S.EM_ANDAMENTO: {S.CONCLUIDA, S.CANCELADA},
    S.CONCLUIDA: {S.APROVADA, S.REPROVADA},
    S.REPROVADA: {S.EM_ANDAMENTO},
    S.APROVADA: set(),
    S.CANCELADA: set(),
}

TRANSICOES_VISTORIADOR = {
    (S.PENDENTE, S.EM_ANDAMENTO),
    (S.EM_ANDAMENTO, S.CONCLUIDA),
    (S.REPROVADA, S.EM_ANDAMENTO),
}

STATUS_FINAIS = {S.APROVADA, S.CANCELADA}


def checklist_status(vistoria):
    """Situação de cada tipo de foto e o resumo dos obrigatórios."""
    fotos = {}
    for foto in vistoria.fotos.all():
        fotos.setdefault(foto.tipo_foto_id, foto)

    itens = []
    for tipo in TipoFotoChecklist.objects.all():
        foto = fotos.get(tipo.pk)
        itens.append({
            'tipo_id': tipo.pk,
            'codigo': tipo.codigo,
            'nome_exibicao': tipo.nome_exibicao,
            'descricao': tipo.descricao,
            'obrigatorio': tipo.obrigatorio,
            'foto_tirada': foto is not None,
            'foto_id': foto.pk if foto else None,
        })

    obrigatorios = [i for i in itens if i['obrigatorio']]
    tiradas = sum(1 for i in obrigatorios if i['foto_tirada'])
    total = len(obrigatorios)
    return {
        'checklist': itens,
        'resumo': {
            'total_obrigatorios': total,
            'fotos_obrigatorias_tiradas': tiradas,
            'checklist_completo': tiradas == total,
            'progresso': round(tiradas * 100 / total) if total else 100,
        },
    }


def alterar_status(vistoria, novo_status, usuario, administrador=False):
    """Aplica a transição ``status atual -> novo_status`` e grava as datas do fluxo.

    Levanta ValidationError (status desconhecido), ConflitoError (transição
    inválida), PermissionDenied (transição reservada ao administrador) ou
    RegraNegocioError (conclusão com checklist incompleto).
    """
    novo_status = (novo_status or '').upper()
    if novo_status not in StatusVistoria.NOMES:
        raise ValidationError({'status': [f'Status inválido: {novo_status or "(vazio)"}.']})

    atual = vistoria.status.nome
    if novo_status == atual:
        raise ConflitoError(f'A vistoria já está com status {atual}.')
    if novo_status not in TRANSICOES.get(atual, set()):
        raise ConflitoError(f'Transição de {atual} para {novo_status} não permitida.')
    if not administrador and (atual, novo_status) not in TRANSICOES_VISTORIADOR:
        raise PermissionDenied('Apenas administradores podem realizar esta alteração de status.')

    if novo_status == S.CONCLUIDA:
        resumo = checklist_status(vistoria)['resumo']
        if not resumo['checklist_completo']:
            raise RegraNegocioError('Checklist de fotos obrigatórias incompleto.', extra={'resumo': resumo})

    agora = timezone.now()
    if novo_status == S.EM_ANDAMENTO and vistoria.data_inicio is None:
        vistoria.data_inicio = agora
    elif novo_status == S.CONCLUIDA:
        vistoria.data_conclusao = agora
    elif novo_status == S.APROVADA:
        vistoria.data_aprovacao = agora
        vistoria.aprovado_por = usuario
    elif novo_status == S.REPROVADA:
        vistoria.data_aprovacao = None
        vistoria.aprovado_por = None

    vistoria.status = StatusVistoria.obter(novo_status)
    vistoria.save()
    logger.info('Vistoria #%s: %s -> %s', vistoria.pk, atual, novo_status)
    return vistoria
