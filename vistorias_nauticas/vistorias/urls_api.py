from django.urls import path

from . import api_views

app_name = 'vistorias_api'

urlpatterns = [
    # Vistorias
    path('vistorias/', api_views.VistoriaListCreateAPIView.as_view(), name='vistorias-list'),
    path('vistorias/<int:pk>/', api_views.VistoriaDetailAPIView.as_view(), name='vistorias-detail'),
    path('vistorias/<int:pk>/status', api_views.VistoriaStatusAPIView.as_view(), name='vistorias-status'),

    # Vistoriador
    path('vistoriador/vistorias/', api_views.VistoriadorVistoriaListAPIView.as_view(), name='vistoriador-list'),
    path('vistoriador/vistorias/<int:pk>/', api_views.VistoriadorVistoriaDetailAPIView.as_view(), name='vistoriador-detail'),
    path('vistoriador/vistorias/<int:pk>/iniciar', api_views.VistoriaIniciarAPIView.as_view(), name='vistoriador-iniciar'),
    path('vistoriador/vistorias/<int:pk>/status', api_views.VistoriadorStatusAPIView.as_view(), name='vistoriador-status'),
    path('vistoriador/vistorias/<int:pk>/checklist-status', api_views.ChecklistStatusAPIView.as_view(), name='vistoriador-checklist'),

    # Checklist de fotos
    path('tipos-foto-checklist/', api_views.TipoFotoChecklistListCreateAPIView.as_view(), name='tipos-foto-list'),
    path('tipos-foto-checklist/<int:pk>/', api_views.TipoFotoChecklistDetailAPIView.as_view(), name='tipos-foto-detail'),

    # Fotos
    path('fotos/', api_views.FotoUploadAPIView.as_view(), name='fotos-upload'),
    path('fotos/storage-info', api_views.StorageInfoAPIView.as_view(), name='fotos-storage-info'),
    path('fotos/vistoria/<int:vistoria_id>', api_views.FotosPorVistoriaAPIView.as_view(), name='fotos-por-vistoria'),
    path('fotos/<int:pk>', api_views.FotoDetailAPIView.as_view(), name='fotos-detail'),
    path('fotos/<int:pk>/imagem', api_views.FotoImagemAPIView.as_view(), name='fotos-imagem'),

    # Embarcações e locais
    path('embarcacoes/', api_views.EmbarcacaoListCreateAPIView.as_view(), name='embarcacoes-list'),
    path('embarcacoes/<int:pk>/', api_views.EmbarcacaoDetailAPIView.as_view(), name='embarcacoes-detail'),
    path('locais/', api_views.LocalListCreateAPIView.as_view(), name='locais-list'),
    path('locais/<int:pk>/', api_views.LocalDetailAPIView.as_view(), name='locais-detail'),

    # Painel
    path('dashboard/estatisticas', api_views.DashboardEstatisticasAPIView.as_view(), name='dashboard-estatisticas'),
]
