from django.urls import path

from . import api_views

app_name = 'laudos_api'

urlpatterns = [
    path('laudos/', api_views.LaudoListAPIView.as_view(), name='laudos-list'),
    path('laudos/<int:pk>/', api_views.LaudoDetailAPIView.as_view(), name='laudos-detail'),
    path('laudos/vistoria/<int:vistoria_id>/', api_views.LaudoPorVistoriaAPIView.as_view(), name='laudos-por-vistoria'),
    path('laudos/<int:pk>/gerar-pdf', api_views.LaudoGerarPDFAPIView.as_view(), name='laudos-gerar-pdf'),
    path('laudos/<int:pk>/download', api_views.LaudoDownloadAPIView.as_view(), name='laudos-download'),

    path('configuracoes-laudo/', api_views.ConfiguracaoLaudoAPIView.as_view(), name='configuracoes-laudo'),
]
