from django.conf import settings
from django.urls import reverse
from rest_framework import serializers

from .generator import normalizar_resposta
from .layout import CAMPOS_EQUIPAMENTOS, CHAVES_CHECKLIST
from .models import ConfiguracaoLaudo, Laudo


class LaudoSerializer(serializers.ModelSerializer):
    vistoria_id = serializers.IntegerField(read_only=True)
    tipo_veiculo = serializers.SerializerMethodField()
    download_url = serializers.SerializerMethodField()

    class Meta:
        model = Laudo
        exclude = ['vistoria']
        read_only_fields = ['numero_laudo', 'url_pdf', 'data_geracao', 'created_at', 'updated_at']

    def get_tipo_veiculo(self, obj):
        return 'MOTO_AQUATICA' if obj.is_jet_ski else 'EMBARCACAO'

    def get_download_url(self, obj):
        if not obj.url_pdf:
            return None
        url = reverse('laudos_api:laudos-download', args=[obj.pk])
        if settings.API_BASE_URL:
            return f'{settings.API_BASE_URL}{url}'
        request = self.context.get('request')
        return request.build_absolute_uri(url) if request is not None else url

    def update(self, instance, validated_data):
        # itens de equipamentos e checklists são mesclados com os já gravados
        for campo in ['equipamentos', *CHAVES_CHECKLIST]:
            if campo in validated_data:
                validated_data[campo] = {**(getattr(instance, campo) or {}), **validated_data[campo]}
        return super().update(instance, validated_data)

    def validate_equipamentos(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError('Informe um objeto com os equipamentos.')
        desconhecidos = set(value) - CAMPOS_EQUIPAMENTOS
        if desconhecidos:
            raise serializers.ValidationError(f'Itens desconhecidos: {", ".join(sorted(desconhecidos))}.')
        return value

    def _validar_checklist(self, campo, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError('Informe um objeto com as respostas do checklist.')
        desconhecidos = set(value) - CHAVES_CHECKLIST[campo]
        if desconhecidos:
            raise serializers.ValidationError(f'Itens desconhecidos: {", ".join(sorted(desconhecidos))}.')
        respostas = {}
        for chave, resposta in value.items():
            normalizada = normalizar_resposta(resposta)
            if normalizada is None:
                raise serializers.ValidationError(
                    f'Resposta inválida para {chave}. Use Sim, Não ou Não possui.'
                )
            respostas[chave] = normalizada
        return respostas

    def validate_checklist_eletrica(self, value):
        return self._validar_checklist('checklist_eletrica', value)

    def validate_checklist_hidraulica(self, value):
        return self._validar_checklist('checklist_hidraulica', value)

    def validate_checklist_geral(self, value):
        return self._validar_checklist('checklist_geral', value)


class ConfiguracaoLaudoSerializer(serializers.ModelSerializer):
    logo_url = serializers.SerializerMethodField()

    class Meta:
        model = ConfiguracaoLaudo
        fields = [
            'id', 'nome_empresa', 'logo_empresa', 'logo_url', 'nota_rodape', 'empresa_prestadora',
            'padrao', 'usuario', 'created_at', 'updated_at',
        ]
        read_only_fields = ['padrao', 'usuario', 'created_at', 'updated_at']
        extra_kwargs = {'logo_empresa': {'write_only': True}}

    def get_logo_url(self, obj):
        if not obj.logo_empresa:
            return None
        request = self.context.get('request')
        return request.build_absolute_uri(obj.logo_empresa.url) if request is not None else obj.logo_empresa.url
