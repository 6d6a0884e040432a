"""
Modelo da trilha de auditoria.

Cada linha registra quem fez o quê, sobre qual entidade, com o estado
anterior e o novo em JSON. Os dados do usuário (email/nome) são copiados
para o registro para que o histórico sobreviva à exclusão do usuário.
"""

from django.db import models


class AuditoriaLog(models.Model):
    usuario = models.ForeignKey(
        'usuarios.Usuario', on_delete=models.SET_NULL, null=True, blank=True, related_name='logs_auditoria'
    )
    usuario_email = models.EmailField(blank=True, null=True)
    usuario_nome = models.CharField(max_length=150, blank=True, null=True)
    acao = models.CharField(max_length=50, db_index=True)
    entidade = models.CharField(max_length=100, db_index=True)
    entidade_id = models.CharField(max_length=50, blank=True, null=True)
    dados_anteriores = models.JSONField(blank=True, null=True)
    dados_novos = models.JSONField(blank=True, null=True)
    ip_address = models.CharField(max_length=45, blank=True, null=True)
    user_agent = models.TextField(blank=True, null=True)
    nivel_critico = models.BooleanField(default=False, db_index=True)
    detalhes = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ['-created_at', '-id']
        verbose_name = 'log de auditoria'
        verbose_name_plural = 'logs de auditoria'

    def save(self, *args, **kwargs):
        # registros de auditoria são somente inserção
        if not self._state.adding:
            raise ValueError('Registros de auditoria não podem ser alterados.')
        super().save(*args, **kwargs)

    def __str__(self):
        return f'{self.acao} {self.entidade}#{self.entidade_id or "-"} por {self.usuario_email or "anônimo"}'
