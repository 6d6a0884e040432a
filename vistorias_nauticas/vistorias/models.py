"""
Modelos de vistorias náuticas.

- StatusVistoria: tabela de status do fluxo (PENDENTE ... APROVADA).
- Embarcacao / Local: o que é vistoriado e onde.
- Vistoria: a inspeção atribuída a um vistoriador.
- TipoFotoChecklist / Foto: checklist de fotos e as fotos enviadas.

As fotos guardam apenas a chave no armazenamento (``url_arquivo``); o
conteúdo fica no disco ou no S3 conforme ``UPLOAD_STRATEGY``.
"""

from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from .validators import validar_cep, validar_cpf, validar_telefone_e164, validar_uf

VALOR_MAXIMO = Decimal('99999999.99')


def _valor_monetario(**kwargs):
    return models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True,
        validators=[MinValueValidator(0), MaxValueValidator(VALOR_MAXIMO)], **kwargs
    )


# -----------------------------
# Status da vistoria
# -----------------------------
class StatusVistoria(models.Model):
    PENDENTE = 'PENDENTE'
    EM_ANDAMENTO = 'EM_ANDAMENTO'
    CONCLUIDA = 'CONCLUIDA'
    APROVADA = 'APROVADA'
    REPROVADA = 'REPROVADA'
    CANCELADA = 'CANCELADA'

    NOMES = (PENDENTE, EM_ANDAMENTO, CONCLUIDA, APROVADA, REPROVADA, CANCELADA)

    nome = models.CharField(max_length=50, unique=True)
    descricao = models.CharField(max_length=255, blank=True, null=True)

    class Meta:
        ordering = ['id']
        verbose_name = 'status de vistoria'
        verbose_name_plural = 'status de vistoria'

    @classmethod
    def obter(cls, nome):
        status, _ = cls.objects.get_or_create(nome=nome)
        return status

    def __str__(self):
        return self.nome


# -----------------------------
# Embarcação
# -----------------------------
class Embarcacao(models.Model):
    TIPO_CHOICES = [
        ('JET_SKI', 'Jet Ski'),
        ('LANCHA', 'Lancha'),
        ('IATE', 'Iate'),
        ('VELEIRO', 'Veleiro'),
        ('BALSA', 'Balsa'),
        ('REBOCADOR', 'Rebocador'),
        ('EMPURRADOR', 'Empurrador'),
        ('BARCO', 'Barco'),
        ('EMBARCACAO_COMERCIAL', 'Embarcação Comercial'),
        ('OUTRO', 'Outro'),
    ]

    nome = models.CharField(max_length=150)
    numero_casco = models.CharField(max_length=50, unique=True)
    tipo_embarcacao = models.CharField(max_length=30, choices=TIPO_CHOICES, default='LANCHA')
    nr_inscricao_barco = models.CharField(max_length=50, blank=True, null=True)
    ano_fabricacao = models.PositiveIntegerField(
        blank=True, null=True, validators=[MinValueValidator(1900), MaxValueValidator(2100)]
    )
    valor_embarcacao = _valor_monetario()
    proprietario_nome = models.CharField(max_length=150, blank=True, null=True)
    proprietario_cpf = models.CharField(max_length=14, blank=True, null=True, validators=[validar_cpf])
    proprietario_email = models.EmailField(blank=True, null=True)
    proprietario_telefone_e164 = models.CharField(
        max_length=20, blank=True, null=True, validators=[validar_telefone_e164]
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['nome']
        verbose_name = 'embarcação'
        verbose_name_plural = 'embarcações'

    @property
    def is_jet_ski(self):
        return self.tipo_embarcacao == 'JET_SKI'

    def __str__(self):
        return f'{self.nome} ({self.numero_casco})'


# -----------------------------
# Local da vistoria
# -----------------------------
class Local(models.Model):
    TIPO_CHOICES = [
        ('MARINA', 'Marina'),
        ('RESIDENCIA', 'Residência'),
    ]

    tipo = models.CharField(max_length=20, choices=TIPO_CHOICES)
    nome_local = models.CharField(max_length=150, blank=True, null=True)
    cep = models.CharField(max_length=9, blank=True, null=True, validators=[validar_cep])
    logradouro = models.CharField(max_length=255, blank=True, null=True)
    numero = models.CharField(max_length=20, blank=True, null=True)
    complemento = models.CharField(max_length=100, blank=True, null=True)
    bairro = models.CharField(max_length=100, blank=True, null=True)
    cidade = models.CharField(max_length=100, blank=True, null=True)
    estado = models.CharField(max_length=2, blank=True, null=True, validators=[validar_uf])
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = 'locais'

    def endereco_completo(self):
        """Monta 'Logradouro, Nº - Complemento - Bairro, Cidade/UF'."""
        partes = []
        if self.logradouro:
            rua = self.logradouro
            if self.numero:
                rua += f', {self.numero}'
            if self.complemento:
                rua += f' - {self.complemento}'
            partes.append(rua)
        if self.bairro:
            partes.append(self.bairro)
        if self.cidade:
            partes.append(f'{self.cidade}/{self.estado}' if self.estado else self.cidade)
        return ' - '.join(partes)

    def __str__(self):
        return self.nome_local or self.endereco_completo() or self.get_tipo_display()


# -----------------------------
# Vistoria
# -----------------------------
class Vistoria(models.Model):
    CONTATO_CHOICES = [
        ('PROPRIETARIO', 'Proprietário'),
        ('MARINHEIRO', 'Marinheiro'),
        ('TERCEIRO', 'Terceiro'),
    ]

    embarcacao = models.ForeignKey(Embarcacao, on_delete=models.PROTECT, related_name='vistorias')
    local = models.ForeignKey(Local, on_delete=models.SET_NULL, null=True, blank=True, related_name='vistorias')
    status = models.ForeignKey(StatusVistoria, on_delete=models.PROTECT, related_name='vistorias')
    vistoriador = models.ForeignKey(
        'usuarios.Usuario', on_delete=models.PROTECT, null=True, blank=True, related_name='vistorias_atribuidas'
    )
    administrador = models.ForeignKey(
        'usuarios.Usuario', on_delete=models.SET_NULL, null=True, blank=True, related_name='vistorias_criadas'
    )
    aprovado_por = models.ForeignKey(
        'usuarios.Usuario', on_delete=models.SET_NULL, null=True, blank=True, related_name='vistorias_aprovadas'
    )
    # respostas parciais do formulário do vistoriador
    dados_rascunho = models.JSONField(blank=True, null=True)

    valor_embarcacao = _valor_monetario()
    valor_vistoria = _valor_monetario()
    valor_vistoriador = _valor_monetario()

    contato_acompanhante_tipo = models.CharField(max_length=20, choices=CONTATO_CHOICES, blank=True, null=True)
    contato_acompanhante_nome = models.CharField(max_length=150, blank=True, null=True)
    contato_acompanhante_telefone_e164 = models.CharField(
        max_length=20, blank=True, null=True, validators=[validar_telefone_e164]
    )
    contato_acompanhante_email = models.EmailField(blank=True, null=True)
    observacoes = models.TextField(blank=True, null=True)

    data_inicio = models.DateTimeField(blank=True, null=True)
    data_conclusao = models.DateTimeField(blank=True, null=True)
    data_aprovacao = models.DateTimeField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at', '-id']

    def pertence_a(self, usuario):
        return usuario is not None and self.vistoriador_id == usuario.pk

    def __str__(self):
        return f'Vistoria #{self.pk} - {self.embarcacao.nome} ({self.status.nome})'


# -----------------------------
# Checklist de fotos
# -----------------------------
class TipoFotoChecklist(models.Model):
    codigo = models.CharField(max_length=20, unique=True)
    nome_exibicao = models.CharField(max_length=100)
    descricao = models.TextField(blank=True, null=True)
    obrigatorio = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['codigo']
        verbose_name = 'tipo de foto do checklist'
        verbose_name_plural = 'tipos de foto do checklist'

    def __str__(self):
        return f'{self.codigo} - {self.nome_exibicao}'


class Foto(models.Model):
    vistoria = models.ForeignKey(Vistoria, on_delete=models.CASCADE, related_name='fotos')
    tipo_foto = models.ForeignKey(TipoFotoChecklist, on_delete=models.PROTECT, related_name='fotos')
    # chave do arquivo no armazenamento configurado
    url_arquivo = models.CharField(max_length=512)
    observacao = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['tipo_foto__codigo', 'id']

    def __str__(self):
        return f'Foto {self.tipo_foto.codigo} da vistoria #{self.vistoria_id}'
