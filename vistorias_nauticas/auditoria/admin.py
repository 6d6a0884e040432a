"""
Visualizador da auditoria no Django Admin (somente leitura).
"""

from django.contrib import admin

from .models import AuditoriaLog


@admin.register(AuditoriaLog)
class AuditoriaLogAdmin(admin.ModelAdmin):
    list_display = ('created_at', 'acao', 'entidade', 'entidade_id', 'usuario_email', 'nivel_critico', 'ip_address')
    list_filter = ('acao', 'entidade', 'nivel_critico', 'created_at')
    search_fields = ('usuario_email', 'usuario_nome', 'entidade_id', 'detalhes')
    date_hierarchy = 'created_at'
    readonly_fields = [f.name for f in AuditoriaLog._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
