from rest_framework import serializers

from .models import AuditoriaLog


class AuditoriaLogSerializer(serializers.ModelSerializer):
    usuario = serializers.SerializerMethodField()

    class Meta:
        model = AuditoriaLog
        fields = [
            'id', 'usuario', 'usuario_email', 'usuario_nome', 'acao', 'entidade', 'entidade_id',
            'dados_anteriores', 'dados_novos', 'ip_address', 'user_agent', 'nivel_critico',
            'detalhes', 'created_at',
        ]

    def get_usuario(self, obj):
        if obj.usuario_id is None:
            return None
        return {'id': obj.usuario_id, 'nome': obj.usuario.nome, 'email': obj.usuario.email}
