"""
Mixin para views genéricas do DRF que audita create/update/delete.
"""

from .utils import registrar_auditoria, snapshot


class AuditoriaMixin:
    """Registra CREATE/UPDATE/DELETE com snapshots antes e depois da operação.

    - auditoria_entidade: nome da entidade no log (padrão: nome do model)
    - auditoria_delete_critico: marca exclusões como críticas
    - get_save_kwargs(): argumentos extras repassados a serializer.save()
    """
    auditoria_entidade = None
    auditoria_delete_critico = False

    def get_auditoria_entidade(self, instance):
        return self.auditoria_entidade or instance.__class__.__name__

    def get_save_kwargs(self):
        return {}

    def perform_create(self, serializer):
        instance = serializer.save(**self.get_save_kwargs())
        registrar_auditoria(
            request=self.request,
            acao='CREATE',
            entidade=self.get_auditoria_entidade(instance),
            entidade_id=instance.pk,
            dados_novos=snapshot(instance),
        )

    def perform_update(self, serializer):
        anteriores = snapshot(serializer.instance)
        instance = serializer.save()
        registrar_auditoria(
            request=self.request,
            acao='UPDATE',
            entidade=self.get_auditoria_entidade(instance),
            entidade_id=instance.pk,
            dados_anteriores=anteriores,
            dados_novos=snapshot(instance),
        )

    def perform_destroy(self, instance):
        anteriores = snapshot(instance)
        entidade = self.get_auditoria_entidade(instance)
        pk = instance.pk
        instance.delete()
        registrar_auditoria(
            request=self.request,
            acao='DELETE',
            entidade=entidade,
            entidade_id=pk,
            dados_anteriores=anteriores,
            nivel_critico=self.auditoria_delete_critico,
        )
