"""
URL configuration for vistorias_nauticas project.

Todas as rotas da API ficam sob ``/api/``; o admin do Django serve como
painel administrativo (inclusive para consulta da auditoria).
"""

from django.contrib import admin
from django.urls import path, include, re_path

from .views import health, logo_empresa, custom_400, custom_403, custom_404, custom_500

urlpatterns = [
    path("admin/", admin.site.urls),
    path("", health, name='health'),
    path('api/', include('usuarios.urls_api')),
    path('api/', include('vistorias.urls_api')),
    path('api/', include('laudos.urls_api')),
    path('api/', include('auditoria.urls_api')),
    # apenas o logo é público; fotos e PDFs exigem autenticação
    re_path(r"^media/configuracoes/logo/(?P<path>.+)$", logo_empresa, name="logo-empresa"),
]

handler400 = custom_400
handler403 = custom_403
handler404 = custom_404
handler500 = custom_500
