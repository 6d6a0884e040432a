"""
Pré-preenchimento dos dados do laudo e numeração.

Ordem de prioridade de cada campo:

1. valor enviado na requisição (ou já gravado no laudo, na atualização);
2. ``dados_rascunho`` salvo pelo vistoriador durante a vistoria;
3. dados da vistoria, da embarcação, do local, do vistoriador e da
   configuração padrão.

Os campos JSON (equipamentos e checklists) são mesclados item a item na
mesma ordem.
"""

import logging
import string

from django.core.exceptions import ValidationError as DjangoValidationError
from django.utils import timezone

from .generator import normalizar_resposta
from .layout import CAMPOS_EQUIPAMENTOS, CHAVES_CHECKLIST
from .models import EMPRESA_PADRAO, VERSAO_PADRAO, Laudo

logger = logging.getLogger(__name__)

CAMPOS_CONTROLE = {'id', 'vistoria', 'numero_laudo', 'url_pdf', 'data_geracao', 'created_at', 'updated_at'}

CAMPOS_JSON = {
    'equipamentos': CAMPOS_EQUIPAMENTOS,
    **CHAVES_CHECKLIST,
}

CAMPOS_LAUDO = [
    f.name for f in Laudo._meta.concrete_fields
    if f.name not in CAMPOS_CONTROLE and f.name not in CAMPOS_JSON
]


# -----------------------------
# Numeração
# -----------------------------
def _sufixo(indice):
    """0 -> A, 25 -> Z, 26 -> AA, 27 -> AB..."""
    letras = ''
    indice += 1
    while indice:
        indice, resto = divmod(indice - 1, 26)
        letras = string.ascii_uppercase[resto] + letras
    return letras


def gerar_numero_laudo(data=None):
    """Próximo número livre do dia: AAMMDD + letra sequencial (250314A, 250314B...)."""
    data = data or timezone.localdate()
    prefixo = data.strftime('%y%m%d')
    existentes = set(
        Laudo.objects.filter(numero_laudo__startswith=prefixo).values_list('numero_laudo', flat=True)
    )
    indice = 0
    while f'{prefixo}{_sufixo(indice)}' in existentes:
        indice += 1
    return f'{prefixo}{_sufixo(indice)}'


# -----------------------------
# Pré-preenchimento
# -----------------------------
def endereco_local(local):
    if local is None:
        return None
    endereco = local.endereco_completo()
    if local.cep:
        endereco = f'{endereco}, CEP: {local.cep}' if endereco else f'CEP: {local.cep}'
    if local.nome_local:
        endereco = f'{local.nome_local} - {endereco}' if endereco else local.nome_local
    return endereco or None


def dados_da_vistoria(vistoria, configuracao=None):
    embarcacao = vistoria.embarcacao
    quando = vistoria.data_conclusao or vistoria.data_inicio
    endereco = endereco_local(vistoria.local)
    return {
        'nome_embarcacao': embarcacao.nome,
        'proprietario': embarcacao.proprietario_nome,
        'cpf_cnpj': embarcacao.proprietario_cpf,
        'responsavel': vistoria.contato_acompanhante_nome,
        'data_inspecao': timezone.localdate(quando) if quando else None,
        'local_vistoria': endereco,
        'local_guarda': endereco,
        'responsavel_inspecao': vistoria.vistoriador.nome if vistoria.vistoriador else None,
        'inscricao_capitania': embarcacao.nr_inscricao_barco,
        'tipo_embarcacao': embarcacao.get_tipo_embarcacao_display(),
        'ano_fabricacao': embarcacao.ano_fabricacao,
        'valor_risco': vistoria.valor_embarcacao or embarcacao.valor_embarcacao,
        'empresa_prestadora': (configuracao.empresa_prestadora if configuracao else None) or EMPRESA_PADRAO,
        'nome_empresa': configuracao.nome_empresa if configuracao else None,
        'nota_rodape': configuracao.nota_rodape if configuracao else None,
        'versao': VERSAO_PADRAO,
    }


def _preenchido(valor):
    return valor is not None and valor != '' and valor != {}


def _rascunho(vistoria):
    """Campos válidos do rascunho do vistoriador; valores inválidos são ignorados."""
    rascunho = vistoria.dados_rascunho if isinstance(vistoria.dados_rascunho, dict) else {}
    validos = {}
    for campo in CAMPOS_LAUDO:
        valor = rascunho.get(campo)
        if not _preenchido(valor):
            continue
        try:
            validos[campo] = Laudo._meta.get_field(campo).clean(valor, None)
        except DjangoValidationError:
            logger.info('Rascunho da vistoria #%s: valor inválido para %s ignorado', vistoria.pk, campo)
    for campo, chaves in CAMPOS_JSON.items():
        valor = rascunho.get(campo)
        if not isinstance(valor, dict):
            continue
        itens = {k: v for k, v in valor.items() if k in chaves}
        if campo in CHAVES_CHECKLIST:
            itens = {k: normalizar_resposta(v) for k, v in itens.items()}
            itens = {k: v for k, v in itens.items() if v is not None}
        validos[campo] = itens
    return validos


def preencher_dados_laudo(vistoria, dados=None, configuracao=None):
    """Monta os valores do laudo completando ``dados`` com rascunho e vistoria."""
    dados = dados or {}
    fontes = [dados, _rascunho(vistoria), dados_da_vistoria(vistoria, configuracao)]

    resultado = {}
    for campo in CAMPOS_LAUDO:
        for fonte in fontes:
            valor = fonte.get(campo)
            if _preenchido(valor):
                resultado[campo] = valor
                break
        else:
            resultado[campo] = None

    for campo in CAMPOS_JSON:
        mesclado = {}
        # menor prioridade primeiro
        for fonte in reversed(fontes):
            mesclado.update(fonte.get(campo) or {})
        resultado[campo] = mesclado

    if not resultado.get('versao'):
        resultado['versao'] = VERSAO_PADRAO
    return resultado


def dados_atuais(laudo, novos=None):
    """Valores gravados no laudo sobrepostos por ``novos`` (JSON mesclado item a item)."""
    valores = {campo: getattr(laudo, campo) for campo in CAMPOS_LAUDO}
    valores.update({campo: dict(getattr(laudo, campo) or {}) for campo in CAMPOS_JSON})
    for campo, valor in (novos or {}).items():
        if campo in CAMPOS_JSON:
            valores[campo].update(valor or {})
        else:
            valores[campo] = valor
    return valores
