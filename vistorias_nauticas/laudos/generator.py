"""
GERADOR DO LAUDO EM PDF
=======================
Desenha o relatório de inspeção de risco com reportlab, em coordenadas fixas
(A4, margens de 50pt). O cursor ``y`` é medido a partir do topo da página e
convertido para o sistema do reportlab (origem no canto inferior) ao desenhar.

Estrutura do documento:
- Cabeçalho com versão, título, tipo de embarcação, número do laudo, empresa e logo
- Seções numeradas com linhas rótulo (x=50) / valor (x=250)
- Checklists com as caixas Sim / Não / Não possui
- Registro fotográfico em grade 2x2
- Página de assinatura
- Rodapé (nota e número da página) em todas as páginas
"""

import io
import logging
from decimal import Decimal, InvalidOperation

from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfgen import canvas

from vistorias.storage import ArmazenamentoError, get_armazenamento
from .layout import RESPOSTAS_CHECKLIST, SECOES_CHECKLIST, secoes_para
from .models import VERSAO_PADRAO

logger = logging.getLogger(__name__)

# =========================================================================
# MEDIDAS DA PÁGINA
# =========================================================================

MARGEM = 50
X_VALOR = 250
X_CHECKLIST = 70
PASSO_LINHA = 18
ALTURA_LINHA_EXTRA = 12
# a partir deste ponto a próxima seção começa em nova página
LIMITE_SECAO = 600
# espaço reservado ao rodapé
MARGEM_RODAPE = 70
FOTO_LARGURA, FOTO_ALTURA = 200, 150
FOTOS_POR_PAGINA = 4
VAZIO = '---'

ALIASES_RESPOSTA = {
    'sim': 'Sim',
    'nao': 'Não',
    'não': 'Não',
    'nao_possui': 'Não possui',
    'nao possui': 'Não possui',
    'não possui': 'Não possui',
}


# =========================================================================
# FORMATAÇÃO DE VALORES
# =========================================================================

def formatar_moeda(valor):
    """Decimal('1234.5') -> 'R$ 1.234,50'"""
    try:
        valor = Decimal(str(valor))
    except (InvalidOperation, ValueError):
        return str(valor)
    texto = f'{valor:,.2f}'.replace(',', '_').replace('.', ',').replace('_', '.')
    return f'R$ {texto}'


def formatar_valor(campo, valor):
    if valor is None or valor == '':
        return VAZIO
    if campo == 'valor_risco':
        return formatar_moeda(valor)
    if isinstance(valor, bool):
        return 'Sim' if valor else 'Não'
    if hasattr(valor, 'strftime'):
        return valor.strftime('%d/%m/%Y')
    return str(valor)


def normalizar_resposta(resposta):
    """Converte a resposta do checklist para uma das opções impressas (ou None)."""
    if resposta is True:
        return 'Sim'
    if resposta is False:
        return 'Não'
    return ALIASES_RESPOSTA.get(str(resposta or '').strip().lower())


# =========================================================================
# DOCUMENTO
# =========================================================================

class LaudoPDF:
    def __init__(self, laudo, fotos, armazenamento, logo_path=None):
        self.laudo = laudo
        self.fotos = list(fotos)
        self.armazenamento = armazenamento
        self.logo_path = logo_path

        jet_ski = laudo.is_jet_ski
        self.veiculo = 'moto aquática' if jet_ski else 'embarcação'
        self.secoes = secoes_para(jet_ski)

        self.largura, self.altura = A4
        self.buffer = io.BytesIO()
        self.c = canvas.Canvas(self.buffer, pagesize=A4)
        self.c.setTitle(f'Laudo {laudo.numero_laudo}')
        self.c.setAuthor(laudo.empresa_prestadora or '')
        self.pagina = 1
        self.y = MARGEM

    # ---------------------------------------------------------------------
    # Primitivas
    # ---------------------------------------------------------------------

    def _texto(self, x, y, texto, fonte='Helvetica', tamanho=10):
        self.c.setFont(fonte, tamanho)
        self.c.drawString(x, self.altura - y - tamanho, texto)

    def _centralizado(self, y, texto, fonte='Helvetica', tamanho=10, x=None):
        self.c.setFont(fonte, tamanho)
        self.c.drawCentredString(self.largura / 2 if x is None else x, self.altura - y - tamanho, texto)

    def _formatar(self, texto):
        return texto.replace('{veiculo}', self.veiculo).replace('{VEICULO}', self.veiculo.upper())

    def _rodape(self):
        if self.laudo.nota_rodape:
            linhas = simpleSplit(self.laudo.nota_rodape, 'Helvetica-Oblique', 8, self.largura - 2 * MARGEM)
            self.c.setFont('Helvetica-Oblique', 8)
            for i, linha in enumerate(linhas[:2]):
                self.c.drawCentredString(self.largura / 2, 48 - i * 10, linha)
        self.c.setFont('Helvetica', 8)
        self.c.drawCentredString(self.largura / 2, 22, f'Página {self.pagina}')

    def _nova_pagina(self):
        self._rodape()
        self.c.showPage()
        self.pagina += 1
        self.y = MARGEM

    def _garantir_espaco(self, altura):
        if self.y + altura > self.altura - MARGEM_RODAPE:
            self._nova_pagina()

    # ---------------------------------------------------------------------
    # Cabeçalho e seções
    # ---------------------------------------------------------------------

    def _cabecalho(self):
        laudo = self.laudo
        self._texto(MARGEM, 50, f'Versão: {laudo.versao or VERSAO_PADRAO}')
        self._centralizado(80, 'RELATÓRIO DE INSPEÇÃO DE RISCO', 'Helvetica-Bold', 16)
        self._centralizado(100, self.veiculo.upper(), 'Helvetica-Bold', 14)
        self._texto(MARGEM, 120, f'Laudo: {laudo.numero_laudo}')
        if laudo.nome_empresa:
            self._centralizado(140, laudo.nome_empresa, 'Helvetica-Bold', 12)
        if self.logo_path:
            self._logo()
        self.y = 180

    def _logo(self):
        try:
            self.c.drawImage(
                ImageReader(self.logo_path),
                self.largura - MARGEM - 100, self.altura - MARGEM - 50,
                width=100, height=50, preserveAspectRatio=True, anchor='ne', mask='auto',
            )
        except (OSError, ValueError) as exc:
            logger.warning('Logo da empresa não pôde ser desenhado (%s): %s', self.logo_path, exc)

    def _titulo_secao(self, titulo):
        self._garantir_espaco(20 + PASSO_LINHA)
        self._texto(MARGEM, self.y, titulo, 'Helvetica-Bold', 12)
        self.y += 20

    def _campo(self, rotulo, valor):
        linhas_rotulo = simpleSplit(rotulo, 'Helvetica-Bold', 10, X_VALOR - MARGEM - 10)
        linhas_valor = simpleSplit(valor, 'Helvetica', 10, self.largura - MARGEM - X_VALOR) or [VAZIO]
        altura = PASSO_LINHA + (max(len(linhas_rotulo), len(linhas_valor)) - 1) * ALTURA_LINHA_EXTRA
        self._garantir_espaco(altura)
        for i, linha in enumerate(linhas_rotulo):
            self._texto(MARGEM, self.y + i * ALTURA_LINHA_EXTRA, linha, 'Helvetica-Bold')
        for i, linha in enumerate(linhas_valor):
            self._texto(X_VALOR, self.y + i * ALTURA_LINHA_EXTRA, linha)
        self.y += altura

    def _valor(self, secao, campo):
        if secao.get('equipamentos'):
            return (self.laudo.equipamentos or {}).get(campo)
        return getattr(self.laudo, campo, None)

    def _secao(self, secao, numero=None):
        if self.y > LIMITE_SECAO:
            self._nova_pagina()
        titulo = self._formatar(secao['titulo'])
        self._titulo_secao(f'{numero}. {titulo}' if numero else titulo)

        for item, (rotulo, campo, *opcional) in enumerate(secao['campos'], 1):
            valor = self._valor(secao, campo)
            if opcional and (valor is None or valor == ''):
                continue
            prefixo = f'{numero}.{item}. ' if numero else ''
            self._campo(f'{prefixo}{self._formatar(rotulo)}:', formatar_valor(campo, valor))
        self.y += 20

    # ---------------------------------------------------------------------
    # Checklists
    # ---------------------------------------------------------------------

    def _checkbox(self, pergunta, resposta):
        linhas = simpleSplit(pergunta, 'Helvetica', 10, 450)
        altura = len(linhas) * ALTURA_LINHA_EXTRA + 23
        self._garantir_espaco(altura)
        for i, linha in enumerate(linhas):
            self._texto(X_CHECKLIST, self.y + i * ALTURA_LINHA_EXTRA, linha)

        marcada = normalizar_resposta(resposta)
        y_caixa = self.y + len(linhas) * ALTURA_LINHA_EXTRA + 3
        x = X_CHECKLIST
        for opcao in RESPOSTAS_CHECKLIST:
            self.c.rect(x, self.altura - y_caixa - 8, 8, 8)
            if opcao == marcada:
                self._texto(x + 1.5, y_caixa - 1.5, 'X', 'Helvetica-Bold', 9)
            self._texto(x + 12, y_caixa - 1, opcao, tamanho=9)
            x += 80
        self.y += altura

    def _checklists(self, numero_inicial):
        if self.y > LIMITE_SECAO:
            self._nova_pagina()
        self._garantir_espaco(60)
        titulo = 'RELAÇÃO DE ITENS A SEREM VERIFICADOS'
        self._texto(MARGEM, self.y, titulo, 'Helvetica-Bold', 12)
        largura_titulo = self.c.stringWidth(titulo, 'Helvetica-Bold', 12)
        self.c.line(MARGEM, self.altura - self.y - 14, MARGEM + largura_titulo, self.altura - self.y - 14)
        self.y += 30

        for numero, secao in enumerate(SECOES_CHECKLIST, numero_inicial):
            if self.y > LIMITE_SECAO:
                self._nova_pagina()
            self._titulo_secao(f'{numero}. {secao["titulo"]}')
            respostas = getattr(self.laudo, secao['checklist']) or {}
            for item, (pergunta, chave) in enumerate(secao['campos'], 1):
                if chave in respostas:
                    self._checkbox(f'{numero}.{item}. {pergunta}', respostas[chave])
            self.y += 20

    # ---------------------------------------------------------------------
    # Registro fotográfico e assinatura
    # ---------------------------------------------------------------------

    def _carregar_foto(self, foto):
        try:
            imagem = ImageReader(io.BytesIO(self.armazenamento.ler(foto.url_arquivo)))
            imagem.getSize()
        except (ArmazenamentoError, OSError, ValueError) as exc:
            logger.warning('Foto #%s ignorada no laudo %s: %s', foto.pk, self.laudo.numero_laudo, exc)
            return None
        return imagem

    def _fotos(self):
        imagens = []
        for foto in self.fotos:
            imagem = self._carregar_foto(foto)
            if imagem is not None:
                imagens.append((foto, imagem))

        for i, (foto, imagem) in enumerate(imagens):
            posicao = i % FOTOS_POR_PAGINA
            if posicao == 0:
                self._nova_pagina()
                self._centralizado(self.y, 'REGISTRO FOTOGRÁFICO', 'Helvetica-Bold', 14)
                self.y += 30

            x = MARGEM + (posicao % 2) * 250
            y = self.y + (posicao // 2) * 200
            self.c.drawImage(
                imagem, x, self.altura - y - FOTO_ALTURA,
                width=FOTO_LARGURA, height=FOTO_ALTURA, preserveAspectRatio=True, anchor='c',
            )
            legenda = foto.tipo_foto.nome_exibicao if foto.tipo_foto_id else f'Foto {i + 1}'
            self._centralizado(y + FOTO_ALTURA + 5, legenda, 'Helvetica', 8, x=x + FOTO_LARGURA / 2)
            if foto.observacao:
                linhas = simpleSplit(foto.observacao, 'Helvetica-Oblique', 7, FOTO_LARGURA)
                for j, linha in enumerate(linhas[:2]):
                    self._centralizado(y + FOTO_ALTURA + 17 + j * 9, linha, 'Helvetica-Oblique', 7,
                                       x=x + FOTO_LARGURA / 2)

    def _assinatura(self):
        self._nova_pagina()
        self._texto(MARGEM, self.y, 'ASSINATURA', 'Helvetica-Bold', 12)
        self.y += 40
        self._texto(MARGEM, self.y, '_' * 60)
        self.y += 20
        if self.laudo.responsavel_inspecao:
            self._texto(MARGEM, self.y, self.laudo.responsavel_inspecao, 'Helvetica-Bold')
            self.y += 14
        self._texto(MARGEM, self.y, 'Responsável pela Inspeção')
        if self.laudo.empresa_prestadora:
            self.y += 14
            self._texto(MARGEM, self.y, self.laudo.empresa_prestadora)
        self.y += 40
        self._texto(MARGEM, self.y, '_' * 60)
        self.y += 20
        self._texto(MARGEM, self.y, 'Data: ___/___/_____')

    # ---------------------------------------------------------------------
    # Montagem
    # ---------------------------------------------------------------------

    def gerar(self):
        self._cabecalho()
        numero = 0
        for secao in self.secoes:
            if secao.get('numerada', True):
                numero += 1
                self._secao(secao, numero)
            else:
                self._secao(secao)
        self._checklists(numero + 1)
        self._fotos()
        self._assinatura()
        self._rodape()
        self.c.save()
        logger.info('PDF do laudo %s gerado (%d páginas)', self.laudo.numero_laudo, self.pagina)
        return self.buffer.getvalue()


def gerar_pdf_laudo(laudo, fotos=None, armazenamento=None, logo_path=None):
    """
    GERA O PDF DE UM LAUDO
    ======================

    Parâmetros:
    - laudo: instância de Laudo (com vistoria e embarcação)
    - fotos: fotos a incluir; por padrão, todas as fotos da vistoria
    - armazenamento: origem das fotos; por padrão, o configurado em UPLOAD_STRATEGY
    - logo_path: caminho do logo da empresa, quando houver

    Retorna:
    - bytes do PDF
    """
    if fotos is None:
        fotos = laudo.vistoria.fotos.select_related('tipo_foto')
    return LaudoPDF(laudo, fotos, armazenamento or get_armazenamento(), logo_path).gerar()
