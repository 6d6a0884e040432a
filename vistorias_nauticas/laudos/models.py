"""
Modelos de laudo (relatório de inspeção de risco) e sua configuração.

- Laudo: um por vistoria; guarda os dados impressos no PDF. Os itens das
    seções de equipamentos (sistemas elétricos, fundeio, navegação, incêndio)
    ficam em ``equipamentos`` e as respostas Sim/Não/Não possui em
    ``checklist_eletrica``, ``checklist_hidraulica`` e ``checklist_geral``.
- ConfiguracaoLaudo: dados da empresa usados no cabeçalho e no rodapé.

``url_pdf`` guarda a chave do PDF no armazenamento e ``data_geracao`` só muda
quando o PDF é gerado novamente.
"""

from django.db import models

from vistorias.utils import redimensionar_imagem

VERSAO_PADRAO = 'BS 2021-01'
EMPRESA_PADRAO = 'Vessel Inspection'


def _texto(max_length=255):
    return models.CharField(max_length=max_length, blank=True, null=True)


# -----------------------------
# Laudo
# -----------------------------
class Laudo(models.Model):
    vistoria = models.OneToOneField('vistorias.Vistoria', on_delete=models.CASCADE, related_name='laudo')
    numero_laudo = models.CharField(max_length=20, unique=True)
    versao = models.CharField(max_length=20, default=VERSAO_PADRAO)
    url_pdf = models.CharField(max_length=512, blank=True, null=True)
    data_geracao = models.DateTimeField(blank=True, null=True)

    # cabeçalho / rodapé
    nome_empresa = _texto(150)
    nota_rodape = models.TextField(blank=True, null=True)
    empresa_prestadora = _texto(150)

    # dados gerais
    nome_embarcacao = _texto()
    local_guarda = _texto()
    proprietario = _texto()
    cpf_cnpj = _texto(20)
    endereco_proprietario = _texto()
    responsavel = _texto()
    data_inspecao = models.DateField(blank=True, null=True)
    local_vistoria = _texto()
    responsavel_inspecao = _texto()
    participantes_inspecao = models.TextField(blank=True, null=True)

    # 1. dados da embarcação
    inscricao_capitania = _texto()
    estaleiro_construtor = _texto()
    tipo_embarcacao = _texto()
    modelo_embarcacao = _texto()
    ano_fabricacao = models.PositiveIntegerField(blank=True, null=True)
    capacidade = _texto()
    classificacao_embarcacao = _texto()
    area_navegacao = _texto()
    situacao_capitania = _texto()
    valor_risco = models.DecimalField(max_digits=12, decimal_places=2, blank=True, null=True)

    # 2. casco
    material_casco = _texto()
    observacoes_casco = models.TextField(blank=True, null=True)

    # 3. propulsão
    quantidade_motores = models.PositiveIntegerField(blank=True, null=True)
    tipo_motor = _texto()
    fabricante_motor = _texto()
    modelo_motor = _texto()
    numero_serie_motor = _texto()
    potencia_motor = _texto()
    combustivel_utilizado = _texto()
    capacidade_tanque = _texto()
    ano_fabricacao_motor = _texto(10)
    numero_helices = _texto()
    rabeta_reversora = _texto()
    blower = _texto()

    # 4 a 7. equipamentos (chaves definidas em laudos.layout)
    equipamentos = models.JSONField(default=dict, blank=True)

    # 8. vistoria
    acumulo_agua = _texto()
    avarias_casco = _texto()
    estado_geral_limpeza = _texto()
    teste_funcionamento_motor = _texto()
    funcionamento_bombas_porao = _texto()
    manutencao = _texto()
    observacoes_vistoria = models.TextField(blank=True, null=True)

    # 9 a 11. checklists
    checklist_eletrica = models.JSONField(default=dict, blank=True)
    checklist_hidraulica = models.JSONField(default=dict, blank=True)
    checklist_geral = models.JSONField(default=dict, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at', '-id']

    @property
    def is_jet_ski(self):
        return self.vistoria.embarcacao.is_jet_ski

    @property
    def nome_arquivo(self):
        return f'laudo-{self.numero_laudo}.pdf'

    def __str__(self):
        return f'Laudo {self.numero_laudo} (vistoria #{self.vistoria_id})'


# -----------------------------
# Configuração do laudo
# -----------------------------
class ConfiguracaoLaudo(models.Model):
    nome_empresa = _texto(150)
    logo_empresa = models.ImageField(upload_to='configuracoes/logo/', blank=True, null=True)
    nota_rodape = models.TextField(blank=True, null=True)
    empresa_prestadora = models.CharField(max_length=150, default=EMPRESA_PADRAO)
    padrao = models.BooleanField(default=True)
    # último usuário que alterou a configuração
    usuario = models.ForeignKey('usuarios.Usuario', on_delete=models.SET_NULL, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'configuração de laudo'
        verbose_name_plural = 'configurações de laudo'

    @classmethod
    def padrao_atual(cls):
        """Retorna a configuração padrão, criando-a quando ainda não existe."""
        config = cls.objects.filter(padrao=True).order_by('-updated_at').first()
        if config is None:
            config = cls.objects.create(padrao=True)
        return config

    def save(self, *args, **kwargs):
        # só o arquivo recém-enviado é redimensionado; o já gravado não é recodificado
        logo_novo = bool(self.logo_empresa) and not self.logo_empresa._committed
        super().save(*args, **kwargs)
        if logo_novo:
            redimensionar_imagem(self.logo_empresa.path, max_size=(600, 300))

    def __str__(self):
        return self.nome_empresa or self.empresa_prestadora
