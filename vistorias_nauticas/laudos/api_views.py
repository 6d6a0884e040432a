"""
API de laudos.

Administrador:
- POST /api/laudos/vistoria/<vistoria_id>/ (cria ou atualiza o laudo da vistoria)
- PUT|DELETE /api/laudos/<id>/, POST /api/laudos/<id>/gerar-pdf
- PUT /api/configuracoes-laudo/ (multipart para o logo)

Administrador e vistoriador responsável pela vistoria:
- GET /api/laudos/, /api/laudos/<id>/, /api/laudos/vistoria/<vistoria_id>/
- GET /api/laudos/<id>/download
- GET /api/configuracoes-laudo/
"""

import logging

from django.core.files.storage import default_storage
from django.db import transaction
from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework import generics, status
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.response import Response
from rest_framework.views import APIView

from auditoria.mixins import AuditoriaMixin
from auditoria.utils import registrar_auditoria, snapshot
from usuarios.permissions import (
    PERMISSOES_ADMIN,
    PERMISSOES_VISTORIADOR,
    EscritaAdminMixin,
    is_administrador,
    perfil_de,
)
from vistorias.api_views import verificar_acesso, vistorias_queryset
from vistorias.models import StatusVistoria
from vistorias.signals import remover_arquivo
from vistorias.storage import chave_laudo, get_armazenamento
from .generator import gerar_pdf_laudo
from .models import ConfiguracaoLaudo, Laudo
from .preenchimento import dados_atuais, gerar_numero_laudo, preencher_dados_laudo
from .serializers import ConfiguracaoLaudoSerializer, LaudoSerializer

logger = logging.getLogger(__name__)

# status em que a vistoria pode receber laudo
STATUS_LAUDO = {StatusVistoria.CONCLUIDA, StatusVistoria.APROVADA}


def laudos_queryset():
    return Laudo.objects.select_related(
        'vistoria__embarcacao', 'vistoria__local', 'vistoria__status', 'vistoria__vistoriador'
    )


def caminho_logo(configuracao):
    if configuracao is None or not configuracao.logo_empresa:
        return None
    return configuracao.logo_empresa.path


class LaudoAcessoMixin:
    """Administradores veem todos os laudos; vistoriadores, os das próprias vistorias."""

    def get_queryset(self):
        qs = laudos_queryset()
        if not is_administrador(self.request.user):
            qs = qs.filter(vistoria__vistoriador=perfil_de(self.request.user))
        return qs


# -------------------------------------------------------------------
# Laudos
# -------------------------------------------------------------------
class LaudoListAPIView(LaudoAcessoMixin, generics.ListAPIView):
    permission_classes = PERMISSOES_VISTORIADOR
    serializer_class = LaudoSerializer


class LaudoDetailAPIView(EscritaAdminMixin, AuditoriaMixin, LaudoAcessoMixin, generics.RetrieveUpdateDestroyAPIView):
    serializer_class = LaudoSerializer
    auditoria_entidade = 'Laudo'
    auditoria_delete_critico = True

    def put(self, request, *args, **kwargs):
        return self.partial_update(request, *args, **kwargs)


class LaudoPorVistoriaAPIView(APIView):
    """Consulta, cria ou atualiza o laudo de uma vistoria."""

    def get_permissions(self):
        if self.request.method == 'POST':
            return [p() for p in PERMISSOES_ADMIN]
        return [p() for p in PERMISSOES_VISTORIADOR]

    def get(self, request, vistoria_id):
        vistoria = get_object_or_404(vistorias_queryset(), pk=vistoria_id)
        verificar_acesso(request, vistoria)
        laudo = laudos_queryset().filter(vistoria=vistoria).first()
        if laudo is None:
            raise NotFound('Laudo não encontrado para esta vistoria.')
        return Response(LaudoSerializer(laudo, context={'request': request}).data)

    def post(self, request, vistoria_id):
        vistoria = get_object_or_404(vistorias_queryset(), pk=vistoria_id)
        if vistoria.status.nome not in STATUS_LAUDO:
            raise ValidationError({
                'status': ['A vistoria precisa estar concluída ou aprovada para receber o laudo.']
            })

        laudo = laudos_queryset().filter(vistoria=vistoria).first()
        serializer = LaudoSerializer(laudo, data=request.data, partial=True, context={'request': request})
        serializer.is_valid(raise_exception=True)
        configuracao = ConfiguracaoLaudo.padrao_atual()

        with transaction.atomic():
            if laudo is None:
                dados = preencher_dados_laudo(vistoria, serializer.validated_data, configuracao)
                laudo = Laudo.objects.create(vistoria=vistoria, numero_laudo=gerar_numero_laudo(), **dados)
                registrar_auditoria(request=request, acao='CREATE', entidade='Laudo', entidade_id=laudo.pk,
                                    dados_novos=snapshot(laudo), detalhes=f'Vistoria #{vistoria.pk}')
                codigo = status.HTTP_201_CREATED
            else:
                anteriores = snapshot(laudo)
                dados = preencher_dados_laudo(
                    vistoria, dados_atuais(laudo, serializer.validated_data), configuracao
                )
                for campo, valor in dados.items():
                    setattr(laudo, campo, valor)
                laudo.save()
                registrar_auditoria(request=request, acao='UPDATE', entidade='Laudo', entidade_id=laudo.pk,
                                    dados_anteriores=anteriores, dados_novos=snapshot(laudo))
                codigo = status.HTTP_200_OK

        logger.info('Laudo %s salvo para a vistoria #%s', laudo.numero_laudo, vistoria.pk)
        return Response(LaudoSerializer(laudo, context={'request': request}).data, status=codigo)


class LaudoGerarPDFAPIView(APIView):
    """Desenha o PDF, grava no armazenamento e substitui o arquivo anterior."""
    permission_classes = PERMISSOES_ADMIN

    def post(self, request, pk):
        laudo = get_object_or_404(laudos_queryset(), pk=pk)
        configuracao = ConfiguracaoLaudo.padrao_atual()
        armazenamento = get_armazenamento()

        conteudo = gerar_pdf_laudo(laudo, armazenamento=armazenamento, logo_path=caminho_logo(configuracao))
        agora = timezone.now()
        key = chave_laudo(laudo.pk, agora)
        armazenamento.salvar(key, conteudo, 'application/pdf')

        anterior = laudo.url_pdf
        laudo.url_pdf = key
        laudo.data_geracao = agora
        laudo.save(update_fields=['url_pdf', 'data_geracao', 'updated_at'])
        if anterior and anterior != key:
            remover_arquivo(anterior)

        registrar_auditoria(request=request, acao='GERAR_PDF', entidade='Laudo', entidade_id=laudo.pk,
                            detalhes=f'Laudo {laudo.numero_laudo}: {key} ({len(conteudo)} bytes)')

        dados = LaudoSerializer(laudo, context={'request': request}).data
        return Response({
            'message': 'PDF do laudo gerado com sucesso.',
            'laudo': dados,
            'download_url': dados['download_url'],
        })


class LaudoDownloadAPIView(LaudoAcessoMixin, APIView):
    permission_classes = PERMISSOES_VISTORIADOR

    def get(self, request, pk):
        laudo = get_object_or_404(self.get_queryset(), pk=pk)
        if not laudo.url_pdf:
            raise NotFound('O PDF deste laudo ainda não foi gerado.')
        conteudo = get_armazenamento().ler(laudo.url_pdf)
        response = HttpResponse(conteudo, content_type='application/pdf')
        response['Content-Disposition'] = f'attachment; filename="{laudo.nome_arquivo}"'
        return response


# -------------------------------------------------------------------
# Configuração do laudo
# -------------------------------------------------------------------
class ConfiguracaoLaudoAPIView(APIView):
    parser_classes = [JSONParser, MultiPartParser, FormParser]

    def get_permissions(self):
        if self.request.method == 'GET':
            return [p() for p in PERMISSOES_VISTORIADOR]
        return [p() for p in PERMISSOES_ADMIN]

    def get(self, request):
        configuracao = ConfiguracaoLaudo.padrao_atual()
        return Response(ConfiguracaoLaudoSerializer(configuracao, context={'request': request}).data)

    def put(self, request):
        configuracao = ConfiguracaoLaudo.padrao_atual()
        anteriores = snapshot(configuracao)
        logo_anterior = configuracao.logo_empresa.name if configuracao.logo_empresa else None

        serializer = ConfiguracaoLaudoSerializer(
            configuracao, data=request.data, partial=True, context={'request': request}
        )
        serializer.is_valid(raise_exception=True)
        serializer.save(usuario=perfil_de(request.user))

        if logo_anterior and logo_anterior != (configuracao.logo_empresa.name or None):
            default_storage.delete(logo_anterior)

        registrar_auditoria(request=request, acao='UPDATE', entidade='ConfiguracaoLaudo',
                            entidade_id=configuracao.pk, dados_anteriores=anteriores,
                            dados_novos=snapshot(configuracao))
        return Response(serializer.data)
