"""
Configuração do Django Admin para usuários e níveis de acesso.
"""

from django.contrib import admin

from .models import NivelAcesso, Usuario

admin.site.register(NivelAcesso)


@admin.register(Usuario)
class UsuarioAdmin(admin.ModelAdmin):
    list_display = ('nome', 'email', 'nivel_acesso', 'ativo', 'deve_atualizar_senha', 'created_at')
    list_filter = ('nivel_acesso', 'ativo', 'deve_atualizar_senha')
    search_fields = ('nome', 'email')
    raw_id_fields = ('user',)
