"""
Views gerais do projeto: health check e handlers de erro em JSON.
"""

import os

from django.conf import settings
from django.http import JsonResponse
from django.views.static import serve
from rest_framework.decorators import api_view, permission_classes, authentication_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response


@api_view(['GET'])
@permission_classes([AllowAny])
@authentication_classes([])
def health(request):
    """Verifica se a API está no ar."""
    return Response({'status': 'ok', 'message': 'API do SGVN está funcionando!'})


def custom_400(request, exception):
    return JsonResponse({'error': 'Requisição inválida.'}, status=400)


def custom_403(request, exception):
    return JsonResponse({'error': 'Acesso negado.'}, status=403)


def custom_404(request, exception):
    return JsonResponse({'error': 'Rota não encontrada.'}, status=404)


def custom_500(request):
    return JsonResponse({'error': 'Erro interno do servidor.'}, status=500)


def logo_empresa(request, path):
    """Serve o logo da configuração do laudo; as demais mídias só saem pela API autenticada."""
    return serve(request, path, document_root=os.path.join(settings.MEDIA_ROOT, 'configuracoes', 'logo'))
