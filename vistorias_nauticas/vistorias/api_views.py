"""
API de vistorias, checklist de fotos, uploads, embarcações e locais.

Administrador:
- /api/vistorias/ (listar todas, criar), /api/vistorias/<id>/ (detalhar, atualizar, excluir)
- PUT /api/vistorias/<id>/status (aprovar, reprovar, cancelar)

Vistoriador (somente vistorias atribuídas a ele):
- /api/vistoriador/vistorias/, /api/vistoriador/vistorias/<id>/
- PUT .../iniciar, PUT .../status, GET .../checklist-status

Fotos:
- POST /api/fotos/ (multipart: foto, vistoria_id, tipo_foto_id, observacao)
- GET /api/fotos/vistoria/<id>, GET /api/fotos/<id>/imagem, DELETE /api/fotos/<id>

Painel:
- GET /api/dashboard/estatisticas (administrador)
"""

import logging

from django.conf import settings
from django.db import transaction
from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from rest_framework import generics, status
from rest_framework.exceptions import PermissionDenied, ValidationError
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.response import Response
from rest_framework.views import APIView

from auditoria.mixins import AuditoriaMixin
from auditoria.utils import registrar_auditoria, snapshot
from usuarios.permissions import (
    PERMISSOES_ADMIN,
    PERMISSOES_AUTENTICADO,
    PERMISSOES_VISTORIADOR,
    EscritaAdminMixin,
    is_administrador,
    perfil_de,
)
from vistorias_nauticas.exceptions import ConflitoError
from .dashboard import estatisticas_dashboard
from .models import Embarcacao, Foto, Local, StatusVistoria, TipoFotoChecklist, Vistoria
from .serializers import (
    EmbarcacaoSerializer,
    FotoSerializer,
    FotoUploadSerializer,
    LocalSerializer,
    StatusUpdateSerializer,
    TipoFotoChecklistSerializer,
    VistoriaCreateSerializer,
    VistoriaDetalheSerializer,
    VistoriaSerializer,
    VistoriaUpdateSerializer,
)
from .storage import chave_foto, get_armazenamento
from .utils import ImagemInvalida, TIPOS_PERMITIDOS, comprimir_imagem, validar_upload
from .workflow import STATUS_FINAIS, alterar_status, checklist_status

logger = logging.getLogger(__name__)


def vistorias_queryset():
    return Vistoria.objects.select_related(
        'embarcacao', 'local', 'status', 'vistoriador', 'administrador', 'aprovado_por'
    )


def verificar_acesso(request, vistoria):
    """Administradores acessam qualquer vistoria; os demais apenas as atribuídas."""
    if is_administrador(request.user):
        return
    if not vistoria.pertence_a(perfil_de(request.user)):
        raise PermissionDenied('Acesso negado a esta vistoria.')


def verificar_edicao_fotos(request, vistoria):
    """Vistoriadores editam fotos com a vistoria em andamento; o administrador, até o status final."""
    atual = vistoria.status.nome
    if is_administrador(request.user):
        if atual in STATUS_FINAIS:
            raise ConflitoError(f'Não é possível alterar fotos de uma vistoria {atual}.')
    elif atual != StatusVistoria.EM_ANDAMENTO:
        raise ConflitoError('Fotos só podem ser alteradas com a vistoria em andamento.')


def _filtrar(qs, params):
    if params.get('status'):
        qs = qs.filter(status__nome=params['status'].upper())
    if params.get('vistoriador'):
        qs = qs.filter(vistoriador_id=params['vistoriador'])
    return qs


def _mudar_status(request, vistoria, novo_status):
    anteriores = snapshot(vistoria)
    atual = vistoria.status.nome
    alterar_status(vistoria, novo_status, perfil_de(request.user), administrador=is_administrador(request.user))
    registrar_auditoria(
        request=request,
        acao='ALTERAR_STATUS',
        entidade='Vistoria',
        entidade_id=vistoria.pk,
        dados_anteriores=anteriores,
        dados_novos=snapshot(vistoria),
        nivel_critico=novo_status in (StatusVistoria.APROVADA, StatusVistoria.CANCELADA),
        detalhes=f'{atual} -> {vistoria.status.nome}',
    )


# -------------------------------------------------------------------
# Vistorias (visão geral / administrador)
# -------------------------------------------------------------------
class VistoriaListCreateAPIView(AuditoriaMixin, generics.ListCreateAPIView):
    """Administradores veem todas as vistorias; vistoriadores, as próprias (?status=&vistoriador=)."""
    auditoria_entidade = 'Vistoria'

    def get_permissions(self):
        if self.request.method == 'POST':
            return [p() for p in PERMISSOES_ADMIN]
        return [p() for p in PERMISSOES_VISTORIADOR]

    def get_queryset(self):
        qs = _filtrar(vistorias_queryset(), self.request.query_params)
        if not is_administrador(self.request.user):
            qs = qs.filter(vistoriador=perfil_de(self.request.user))
        return qs

    def get_serializer_class(self):
        if self.request.method == 'POST':
            return VistoriaCreateSerializer
        return VistoriaSerializer

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context['administrador'] = perfil_de(self.request.user)
        return context


class VistoriaDetailAPIView(AuditoriaMixin, generics.RetrieveUpdateDestroyAPIView):
    auditoria_entidade = 'Vistoria'
    auditoria_delete_critico = True

    def get_permissions(self):
        if self.request.method == 'DELETE':
            return [p() for p in PERMISSOES_ADMIN]
        return [p() for p in PERMISSOES_VISTORIADOR]

    def get_queryset(self):
        return vistorias_queryset().prefetch_related('fotos__tipo_foto')

    def get_object(self):
        vistoria = super().get_object()
        verificar_acesso(self.request, vistoria)
        return vistoria

    def get_serializer_class(self):
        if self.request.method in ('PUT', 'PATCH'):
            return VistoriaUpdateSerializer
        return VistoriaDetalheSerializer

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context['is_administrador'] = is_administrador(self.request.user)
        return context

    def put(self, request, *args, **kwargs):
        return self.partial_update(request, *args, **kwargs)


class VistoriaStatusAPIView(APIView):
    """Transições de status feitas pelo administrador."""
    permission_classes = PERMISSOES_ADMIN

    def put(self, request, pk):
        vistoria = get_object_or_404(vistorias_queryset(), pk=pk)
        serializer = StatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        with transaction.atomic():
            _mudar_status(request, vistoria, serializer.validated_data['status'])
        return Response(VistoriaSerializer(vistoria, context={'request': request}).data)


# -------------------------------------------------------------------
# Vistoriador
# -------------------------------------------------------------------
class VistoriadorMixin:
    permission_classes = PERMISSOES_VISTORIADOR

    def vistorias_do_usuario(self):
        return vistorias_queryset().filter(vistoriador=perfil_de(self.request.user))

    def get_vistoria(self, pk):
        return get_object_or_404(self.vistorias_do_usuario(), pk=pk)


class VistoriadorVistoriaListAPIView(VistoriadorMixin, generics.ListAPIView):
    serializer_class = VistoriaSerializer

    def get_queryset(self):
        return _filtrar(self.vistorias_do_usuario(), self.request.query_params)


class VistoriadorVistoriaDetailAPIView(VistoriadorMixin, generics.RetrieveAPIView):
    serializer_class = VistoriaDetalheSerializer

    def get_queryset(self):
        return self.vistorias_do_usuario().prefetch_related('fotos__tipo_foto')


class VistoriaIniciarAPIView(VistoriadorMixin, APIView):
    def put(self, request, pk):
        vistoria = self.get_vistoria(pk)
        if vistoria.status.nome != StatusVistoria.PENDENTE or vistoria.data_inicio is not None:
            raise ConflitoError('Vistoria já foi iniciada ou não está pendente.')
        with transaction.atomic():
            _mudar_status(request, vistoria, StatusVistoria.EM_ANDAMENTO)
        return Response({
            'message': 'Vistoria iniciada com sucesso.',
            'vistoria': VistoriaSerializer(vistoria, context={'request': request}).data,
        })


class VistoriadorStatusAPIView(VistoriadorMixin, APIView):
    """Salva os dados do formulário e, se informado, muda o status (ex.: CONCLUIDA)."""

    def put(self, request, pk):
        vistoria = self.get_vistoria(pk)
        dados = {k: v for k, v in request.data.items() if k != 'status'}
        novo_status = request.data.get('status')

        with transaction.atomic():
            if dados:
                serializer = VistoriaUpdateSerializer(
                    vistoria, data=dados, partial=True,
                    context={
                        'request': request,
                        'is_administrador': is_administrador(request.user),
                        'permitir_valores': True,
                    },
                )
                serializer.is_valid(raise_exception=True)
                anteriores = snapshot(vistoria)
                serializer.save()
                registrar_auditoria(request=request, acao='UPDATE', entidade='Vistoria', entidade_id=vistoria.pk,
                                    dados_anteriores=anteriores, dados_novos=snapshot(vistoria))
            if novo_status and novo_status.upper() != vistoria.status.nome:
                _mudar_status(request, vistoria, novo_status)

        return Response(VistoriaDetalheSerializer(vistoria, context={'request': request}).data)


class ChecklistStatusAPIView(VistoriadorMixin, APIView):
    def get(self, request, pk):
        vistoria = self.get_vistoria(pk)
        dados = checklist_status(vistoria)
        dados['vistoria_id'] = vistoria.pk
        return Response(dados)


# -------------------------------------------------------------------
# Tipos de foto do checklist
# -------------------------------------------------------------------
class TipoFotoChecklistListCreateAPIView(EscritaAdminMixin, AuditoriaMixin, generics.ListCreateAPIView):
    queryset = TipoFotoChecklist.objects.all()
    serializer_class = TipoFotoChecklistSerializer
    auditoria_entidade = 'TipoFotoChecklist'


class TipoFotoChecklistDetailAPIView(EscritaAdminMixin, AuditoriaMixin, generics.RetrieveUpdateDestroyAPIView):
    queryset = TipoFotoChecklist.objects.all()
    serializer_class = TipoFotoChecklistSerializer
    auditoria_entidade = 'TipoFotoChecklist'

    def put(self, request, *args, **kwargs):
        return self.partial_update(request, *args, **kwargs)

    def perform_destroy(self, instance):
        if instance.fotos.exists():
            raise ConflitoError('Tipo de foto em uso por fotos de vistorias.')
        super().perform_destroy(instance)


# -------------------------------------------------------------------
# Fotos
# -------------------------------------------------------------------
class FotoUploadAPIView(APIView):
    """
    Recebe uma foto do checklist, comprime para JPEG e grava no armazenamento.

    Uma nova foto de um tipo já fotografado substitui a anterior.
    """
    permission_classes = PERMISSOES_VISTORIADOR
    parser_classes = [MultiPartParser, FormParser]

    def post(self, request):
        arquivo = request.FILES.get('foto')
        if arquivo is None:
            raise ValidationError({'foto': ['Nenhuma foto enviada.']})

        serializer = FotoUploadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        tipo = serializer.validated_data['tipo_foto_id']

        vistoria = get_object_or_404(vistorias_queryset(), pk=serializer.validated_data['vistoria_id'])
        verificar_acesso(request, vistoria)
        verificar_edicao_fotos(request, vistoria)

        try:
            validar_upload(arquivo, settings.UPLOAD_MAX_BYTES)
            conteudo = comprimir_imagem(arquivo)
        except ImagemInvalida as exc:
            raise ValidationError({'foto': [str(exc)]})

        armazenamento = get_armazenamento()
        key = chave_foto(vistoria.pk)
        armazenamento.salvar(key, conteudo, 'image/jpeg')

        try:
            with transaction.atomic():
                substituidas = list(vistoria.fotos.filter(tipo_foto=tipo))
                foto = Foto.objects.create(
                    vistoria=vistoria,
                    tipo_foto=tipo,
                    url_arquivo=key,
                    observacao=serializer.validated_data.get('observacao'),
                )
                for antiga in substituidas:
                    antiga.delete()
        except Exception:
            armazenamento.excluir(key)
            raise

        registrar_auditoria(request=request, acao='UPLOAD_FOTO', entidade='Foto', entidade_id=foto.pk,
                            dados_novos=snapshot(foto),
                            detalhes=f'Vistoria #{vistoria.pk}, tipo {tipo.codigo}')
        return Response(FotoSerializer(foto, context={'request': request}).data, status=status.HTTP_201_CREATED)


class FotosPorVistoriaAPIView(APIView):
    permission_classes = PERMISSOES_VISTORIADOR

    def get(self, request, vistoria_id):
        vistoria = get_object_or_404(vistorias_queryset(), pk=vistoria_id)
        verificar_acesso(request, vistoria)
        fotos = vistoria.fotos.select_related('tipo_foto')
        return Response(FotoSerializer(fotos, many=True, context={'request': request}).data)


class FotoDetailAPIView(APIView):
    permission_classes = PERMISSOES_VISTORIADOR

    def delete(self, request, pk):
        foto = get_object_or_404(Foto.objects.select_related('vistoria__status', 'tipo_foto'), pk=pk)
        verificar_acesso(request, foto.vistoria)
        verificar_edicao_fotos(request, foto.vistoria)

        anteriores = snapshot(foto)
        foto.delete()
        registrar_auditoria(request=request, acao='DELETE', entidade='Foto', entidade_id=pk,
                            dados_anteriores=anteriores)
        return Response(status=status.HTTP_204_NO_CONTENT)


class FotoImagemAPIView(APIView):
    """Entrega os bytes da foto, venha do disco ou do S3."""
    permission_classes = PERMISSOES_VISTORIADOR

    def get(self, request, pk):
        foto = get_object_or_404(Foto.objects.select_related('vistoria'), pk=pk)
        verificar_acesso(request, foto.vistoria)
        conteudo = get_armazenamento().ler(foto.url_arquivo)
        response = HttpResponse(conteudo, content_type='image/jpeg')
        response['Cache-Control'] = 'private, max-age=3600'
        return response


class StorageInfoAPIView(APIView):
    permission_classes = PERMISSOES_AUTENTICADO

    def get(self, request):
        info = get_armazenamento().descricao()
        info.update({
            'max_file_size': settings.UPLOAD_MAX_BYTES,
            'allowed_types': sorted(TIPOS_PERMITIDOS),
        })
        return Response(info)


# -------------------------------------------------------------------
# Embarcações e locais
# -------------------------------------------------------------------
class EmbarcacaoListCreateAPIView(EscritaAdminMixin, AuditoriaMixin, generics.ListCreateAPIView):
    serializer_class = EmbarcacaoSerializer
    auditoria_entidade = 'Embarcacao'

    def get_queryset(self):
        qs = Embarcacao.objects.all()
        busca = self.request.query_params.get('q')
        if busca:
            qs = qs.filter(nome__icontains=busca) | qs.filter(numero_casco__icontains=busca)
        return qs


class EmbarcacaoDetailAPIView(EscritaAdminMixin, AuditoriaMixin, generics.RetrieveUpdateDestroyAPIView):
    queryset = Embarcacao.objects.all()
    serializer_class = EmbarcacaoSerializer
    auditoria_entidade = 'Embarcacao'
    auditoria_delete_critico = True

    def put(self, request, *args, **kwargs):
        return self.partial_update(request, *args, **kwargs)


class LocalListCreateAPIView(EscritaAdminMixin, AuditoriaMixin, generics.ListCreateAPIView):
    queryset = Local.objects.all().order_by('-created_at')
    serializer_class = LocalSerializer
    auditoria_entidade = 'Local'


class LocalDetailAPIView(EscritaAdminMixin, AuditoriaMixin, generics.RetrieveUpdateDestroyAPIView):
    queryset = Local.objects.all()
    serializer_class = LocalSerializer
    auditoria_entidade = 'Local'

    def put(self, request, *args, **kwargs):
        return self.partial_update(request, *args, **kwargs)


# -------------------------------------------------------------------
# Painel
# -------------------------------------------------------------------
class DashboardEstatisticasAPIView(APIView):
    """Vistorias por status, mês atual x anterior e concluídas por mês."""
    permission_classes = PERMISSOES_ADMIN

    def get(self, request):
        return Response(estatisticas_dashboard())
