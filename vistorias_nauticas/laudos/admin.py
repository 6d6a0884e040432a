from django.contrib import admin

from .models import ConfiguracaoLaudo, Laudo


@admin.register(Laudo)
class LaudoAdmin(admin.ModelAdmin):
    list_display = ('numero_laudo', 'vistoria', 'nome_embarcacao', 'data_inspecao', 'data_geracao')
    search_fields = ('numero_laudo', 'nome_embarcacao', 'proprietario')
    readonly_fields = ('numero_laudo', 'url_pdf', 'data_geracao', 'created_at', 'updated_at')


@admin.register(ConfiguracaoLaudo)
class ConfiguracaoLaudoAdmin(admin.ModelAdmin):
    list_display = ('nome_empresa', 'empresa_prestadora', 'padrao', 'updated_at')
