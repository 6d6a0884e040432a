"""
Serializers de usuários, níveis de acesso e fluxos de senha.
"""

from django.conf import settings
from django.contrib.auth import password_validation
from rest_framework import serializers

from vistorias_nauticas.exceptions import ConflitoError
from .models import NivelAcesso, Usuario
from .utils import criar_usuario, email_em_uso, nivel_padrao


class NivelAcessoSerializer(serializers.ModelSerializer):
    class Meta:
        model = NivelAcesso
        fields = ['id', 'nome', 'descricao']


class UsuarioSerializer(serializers.ModelSerializer):
    """Representação pública do usuário (nunca inclui senha)."""
    nivel_acesso = NivelAcessoSerializer(read_only=True)

    class Meta:
        model = Usuario
        fields = ['id', 'nome', 'email', 'nivel_acesso', 'ativo', 'deve_atualizar_senha', 'created_at', 'updated_at']
        read_only_fields = fields


class UsuarioCreateSerializer(serializers.Serializer):
    """
    Criação de usuário pelo administrador.

    O usuário recebe a senha provisória padrão e é obrigado a trocá-la no primeiro acesso.
    """
    nome = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    nivel_acesso_id = serializers.PrimaryKeyRelatedField(queryset=NivelAcesso.objects.all(), required=False)

    def validate_email(self, value):
        if email_em_uso(value):
            raise ConflitoError('Email já cadastrado.')
        return value.strip().lower()

    def create(self, validated_data):
        return criar_usuario(
            nome=validated_data['nome'],
            email=validated_data['email'],
            senha=settings.SENHA_PROVISORIA_PADRAO,
            nivel_acesso=validated_data.get('nivel_acesso_id') or nivel_padrao(),
            deve_atualizar_senha=True,
        )

    def to_representation(self, instance):
        return UsuarioSerializer(instance).data


class UsuarioUpdateSerializer(serializers.ModelSerializer):
    email = serializers.EmailField(required=False)
    nivel_acesso_id = serializers.PrimaryKeyRelatedField(
        source='nivel_acesso', queryset=NivelAcesso.objects.all(), required=False
    )

    class Meta:
        model = Usuario
        fields = ['nome', 'email', 'nivel_acesso_id', 'ativo']

    def validate_email(self, value):
        if email_em_uso(value, exceto=self.instance):
            raise ConflitoError('Email já cadastrado.')
        return value.strip().lower()

    def to_representation(self, instance):
        return UsuarioSerializer(instance).data


class LoginSerializer(serializers.Serializer):
    email = serializers.CharField(error_messages={'required': 'Email e senha são obrigatórios.',
                                                  'blank': 'Email e senha são obrigatórios.'})
    senha = serializers.CharField(trim_whitespace=False,
                                  error_messages={'required': 'Email e senha são obrigatórios.',
                                                  'blank': 'Email e senha são obrigatórios.'})


class NovaSenhaMixin:
    """Aplica ``AUTH_PASSWORD_VALIDATORS`` ao campo ``nova_senha``."""

    def validate_nova_senha(self, value):
        password_validation.validate_password(value, self.context.get('user'))
        return value


class TrocaSenhaSerializer(NovaSenhaMixin, serializers.Serializer):
    senha_atual = serializers.CharField(trim_whitespace=False)
    nova_senha = serializers.CharField(trim_whitespace=False)

    def validate(self, attrs):
        if attrs['senha_atual'] == attrs['nova_senha']:
            raise serializers.ValidationError({'nova_senha': ['A nova senha deve ser diferente da atual.']})
        return attrs


class AtualizacaoForcadaSerializer(NovaSenhaMixin, serializers.Serializer):
    token = serializers.CharField()
    nova_senha = serializers.CharField(trim_whitespace=False)


class ResetSenhaSerializer(NovaSenhaMixin, serializers.Serializer):
    nova_senha = serializers.CharField(trim_whitespace=False)
