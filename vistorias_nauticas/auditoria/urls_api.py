from django.urls import path

from . import api_views

app_name = 'auditoria_api'

urlpatterns = [
    path('auditoria/', api_views.AuditoriaLogListAPIView.as_view(), name='auditoria-list'),
    path('auditoria/estatisticas', api_views.AuditoriaEstatisticasAPIView.as_view(), name='auditoria-estatisticas'),
]
