"""
Configuração do Django Admin para vistorias, embarcações, locais e fotos.
"""

from django.contrib import admin

from .models import Embarcacao, Foto, Local, StatusVistoria, TipoFotoChecklist, Vistoria

admin.site.register(StatusVistoria)
admin.site.register(Local)


@admin.register(Embarcacao)
class EmbarcacaoAdmin(admin.ModelAdmin):
    list_display = ('nome', 'numero_casco', 'tipo_embarcacao', 'proprietario_nome')
    list_filter = ('tipo_embarcacao',)
    search_fields = ('nome', 'numero_casco', 'proprietario_nome')


@admin.register(TipoFotoChecklist)
class TipoFotoChecklistAdmin(admin.ModelAdmin):
    list_display = ('codigo', 'nome_exibicao', 'obrigatorio')
    list_filter = ('obrigatorio',)


class FotoInline(admin.TabularInline):
    model = Foto
    extra = 0
    readonly_fields = ('tipo_foto', 'url_arquivo', 'observacao', 'created_at')


@admin.register(Vistoria)
class VistoriaAdmin(admin.ModelAdmin):
    list_display = ('id', 'embarcacao', 'status', 'vistoriador', 'data_inicio', 'data_conclusao', 'created_at')
    list_filter = ('status', 'vistoriador')
    search_fields = ('embarcacao__nome', 'embarcacao__numero_casco')
    inlines = [FotoInline]
