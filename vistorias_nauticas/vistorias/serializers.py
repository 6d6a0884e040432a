"""
Serializers de vistorias, embarcações, locais e fotos.

A criação de vistoria recebe a embarcação e o local aninhados; a embarcação é
localizada pelo número do casco e só é criada quando ainda não existe.
"""

from django.db import transaction
from django.urls import reverse
from rest_framework import serializers
from rest_framework.exceptions import PermissionDenied

from usuarios.models import Usuario
from vistorias_nauticas.exceptions import ConflitoError
from .models import Embarcacao, Foto, Local, StatusVistoria, TipoFotoChecklist, Vistoria


class StatusVistoriaSerializer(serializers.ModelSerializer):
    class Meta:
        model = StatusVistoria
        fields = ['id', 'nome', 'descricao']


class UsuarioResumoSerializer(serializers.ModelSerializer):
    class Meta:
        model = Usuario
        fields = ['id', 'nome', 'email']


# -----------------------------
# Embarcação e local
# -----------------------------
class EmbarcacaoSerializer(serializers.ModelSerializer):
    # declarado explicitamente para tratar duplicidade como conflito (409)
    numero_casco = serializers.CharField(max_length=50)

    class Meta:
        model = Embarcacao
        fields = [
            'id', 'nome', 'numero_casco', 'tipo_embarcacao', 'nr_inscricao_barco', 'ano_fabricacao',
            'valor_embarcacao', 'proprietario_nome', 'proprietario_cpf', 'proprietario_email',
            'proprietario_telefone_e164', 'created_at', 'updated_at',
        ]
        read_only_fields = ['created_at', 'updated_at']

    def validate_numero_casco(self, value):
        value = value.strip().upper()
        qs = Embarcacao.objects.filter(numero_casco__iexact=value)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise ConflitoError('Já existe uma embarcação com este número de casco.')
        return value


class EmbarcacaoRefSerializer(EmbarcacaoSerializer):
    """Embarcação informada na criação de vistoria: um casco já cadastrado é reaproveitado."""

    def validate_numero_casco(self, value):
        return value.strip().upper()


class LocalSerializer(serializers.ModelSerializer):
    class Meta:
        model = Local
        fields = [
            'id', 'tipo', 'nome_local', 'cep', 'logradouro', 'numero', 'complemento',
            'bairro', 'cidade', 'estado', 'created_at', 'updated_at',
        ]
        read_only_fields = ['created_at', 'updated_at']

    def validate_estado(self, value):
        return value.upper() if value else value


# -----------------------------
# Checklist e fotos
# -----------------------------
class TipoFotoChecklistSerializer(serializers.ModelSerializer):
    codigo = serializers.CharField(max_length=20)

    class Meta:
        model = TipoFotoChecklist
        fields = ['id', 'codigo', 'nome_exibicao', 'descricao', 'obrigatorio', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def validate_codigo(self, value):
        value = value.strip().upper()
        qs = TipoFotoChecklist.objects.filter(codigo=value)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise ConflitoError('Já existe um tipo de foto com este código.')
        return value


class FotoSerializer(serializers.ModelSerializer):
    tipo_foto = TipoFotoChecklistSerializer(read_only=True)
    imagem_url = serializers.SerializerMethodField()

    class Meta:
        model = Foto
        fields = ['id', 'vistoria_id', 'tipo_foto', 'url_arquivo', 'observacao', 'imagem_url', 'created_at']
        read_only_fields = fields

    def get_imagem_url(self, obj):
        url = reverse('vistorias_api:fotos-imagem', args=[obj.pk])
        request = self.context.get('request')
        return request.build_absolute_uri(url) if request is not None else url


class FotoUploadSerializer(serializers.Serializer):
    vistoria_id = serializers.IntegerField()
    tipo_foto_id = serializers.PrimaryKeyRelatedField(queryset=TipoFotoChecklist.objects.all())
    observacao = serializers.CharField(required=False, allow_blank=True, allow_null=True)


# -----------------------------
# Vistoria
# -----------------------------
class VistoriaSerializer(serializers.ModelSerializer):
    """Representação completa da vistoria (leitura)."""
    embarcacao = EmbarcacaoSerializer(read_only=True)
    local = LocalSerializer(read_only=True)
    status = StatusVistoriaSerializer(read_only=True)
    vistoriador = UsuarioResumoSerializer(read_only=True)
    administrador = UsuarioResumoSerializer(read_only=True)
    aprovado_por = UsuarioResumoSerializer(read_only=True)

    class Meta:
        model = Vistoria
        fields = [
            'id', 'embarcacao', 'local', 'status', 'vistoriador', 'administrador', 'aprovado_por',
            'dados_rascunho', 'valor_embarcacao', 'valor_vistoria', 'valor_vistoriador',
            'contato_acompanhante_tipo', 'contato_acompanhante_nome', 'contato_acompanhante_telefone_e164',
            'contato_acompanhante_email', 'observacoes', 'data_inicio', 'data_conclusao', 'data_aprovacao',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields


class VistoriaDetalheSerializer(VistoriaSerializer):
    fotos = FotoSerializer(many=True, read_only=True)

    class Meta(VistoriaSerializer.Meta):
        fields = VistoriaSerializer.Meta.fields + ['fotos']
        read_only_fields = fields


CAMPOS_EDITAVEIS = [
    'valor_embarcacao', 'valor_vistoria', 'valor_vistoriador', 'dados_rascunho',
    'contato_acompanhante_tipo', 'contato_acompanhante_nome', 'contato_acompanhante_telefone_e164',
    'contato_acompanhante_email', 'observacoes',
]

# campos que apenas o administrador altera
CAMPOS_ADMIN = {'vistoriador_id', 'valor_vistoria', 'valor_vistoriador'}

# valores que o vistoriador informa ao salvar o formulário da vistoria
CAMPOS_VALORES = {'valor_embarcacao', 'valor_vistoria', 'valor_vistoriador'}


class VistoriaCreateSerializer(serializers.ModelSerializer):
    """
    Criação de vistoria pelo administrador.

    Payload: {"embarcacao": {...}, "local": {...}, "vistoriador_id": <id>, "valor_vistoria": ...}
    """
    embarcacao = EmbarcacaoRefSerializer()
    local = LocalSerializer(required=False, allow_null=True)
    vistoriador_id = serializers.PrimaryKeyRelatedField(
        source='vistoriador', queryset=Usuario.objects.filter(ativo=True)
    )

    class Meta:
        model = Vistoria
        fields = ['embarcacao', 'local', 'vistoriador_id'] + CAMPOS_EDITAVEIS

    @transaction.atomic
    def create(self, validated_data):
        dados_embarcacao = validated_data.pop('embarcacao')
        dados_local = validated_data.pop('local', None)
        numero_casco = dados_embarcacao.pop('numero_casco')

        embarcacao, _ = Embarcacao.objects.get_or_create(numero_casco=numero_casco, defaults=dados_embarcacao)
        local = Local.objects.create(**dados_local) if dados_local else None

        if validated_data.get('valor_embarcacao') is None:
            validated_data['valor_embarcacao'] = embarcacao.valor_embarcacao

        return Vistoria.objects.create(
            embarcacao=embarcacao,
            local=local,
            status=StatusVistoria.obter(StatusVistoria.PENDENTE),
            administrador=self.context.get('administrador'),
            **validated_data
        )

    def to_representation(self, instance):
        return VistoriaDetalheSerializer(instance, context=self.context).data


class VistoriaUpdateSerializer(serializers.ModelSerializer):
    """Atualização dos dados da vistoria; o status muda apenas pelo fluxo."""
    vistoriador_id = serializers.PrimaryKeyRelatedField(
        source='vistoriador', queryset=Usuario.objects.filter(ativo=True), required=False
    )

    class Meta:
        model = Vistoria
        fields = ['vistoriador_id'] + CAMPOS_EDITAVEIS

    def validate(self, attrs):
        if not self.context.get('is_administrador'):
            proibidos = CAMPOS_ADMIN & set(self.initial_data.keys())
            if self.context.get('permitir_valores'):
                proibidos -= CAMPOS_VALORES
            if proibidos:
                raise PermissionDenied(f'Campos restritos ao administrador: {", ".join(sorted(proibidos))}.')
        return attrs

    def to_representation(self, instance):
        return VistoriaDetalheSerializer(instance, context=self.context).data


class StatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=StatusVistoria.NOMES)
