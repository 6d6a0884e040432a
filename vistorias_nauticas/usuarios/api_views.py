"""
API de autenticação e gestão de usuários.

Autenticação:
- POST /api/auth/login, POST /api/auth/logout, GET /api/auth/me
- GET /api/auth/password-status, PUT /api/auth/change-password,
  PUT /api/auth/force-password-update

Gestão (somente administradores):
- /api/usuarios/ (listar, criar), /api/usuarios/<id>/ (detalhar, atualizar, excluir)
- POST /api/usuarios/<id>/reset-password, PATCH /api/usuarios/<id>/toggle-status
- GET /api/usuarios/niveis-acesso/
"""

import logging

from django.contrib.auth.models import update_last_login
from django.shortcuts import get_object_or_404
from rest_framework import generics, status
from rest_framework.authtoken.models import Token
from rest_framework.decorators import api_view, permission_classes, authentication_classes, throttle_classes
from rest_framework.exceptions import AuthenticationFailed, ValidationError
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import SimpleRateThrottle
from rest_framework.views import APIView

from auditoria.mixins import AuditoriaMixin
from auditoria.utils import registrar_auditoria, snapshot
from vistorias_nauticas.authentication import BearerTokenAuthentication, emitir_token, token_expirado
from .models import NivelAcesso, Usuario
from .permissions import PERMISSOES_ADMIN, perfil_de
from .serializers import (
    AtualizacaoForcadaSerializer,
    LoginSerializer,
    NivelAcessoSerializer,
    ResetSenhaSerializer,
    TrocaSenhaSerializer,
    UsuarioCreateSerializer,
    UsuarioSerializer,
    UsuarioUpdateSerializer,
)
from .utils import definir_senha, revogar_tokens

logger = logging.getLogger(__name__)


class LoginRateThrottle(SimpleRateThrottle):
    """Limita tentativas de login por IP."""
    scope = 'login'

    def get_cache_key(self, request, view):
        return self.cache_format % {
            'scope': self.scope,
            'ident': self.get_ident(request),
        }


def _perfil_obrigatorio(request):
    perfil = perfil_de(request.user)
    if perfil is None:
        raise ValidationError('Perfil do usuário não encontrado.')
    return perfil


# -------------------------------------------------------------------
# Autenticação
# -------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
@authentication_classes([])
@throttle_classes([LoginRateThrottle])
def login(request):
    """Autentica por email e senha e devolve um token Bearer."""
    serializer = LoginSerializer(data=request.data)
    if not serializer.is_valid():
        return Response({'error': 'Email e senha são obrigatórios.'}, status=status.HTTP_400_BAD_REQUEST)

    email = serializer.validated_data['email'].strip().lower()
    senha = serializer.validated_data['senha']

    usuario = Usuario.objects.select_related('user', 'nivel_acesso').filter(email__iexact=email).first()
    if usuario is None:
        registrar_auditoria(request=request, acao='LOGIN_FALHOU', entidade='Usuario', nivel_critico=True,
                            dados_novos={'email': email}, detalhes='Email não cadastrado')
        return Response({'error': 'Email não cadastrado no sistema.'}, status=status.HTTP_401_UNAUTHORIZED)

    if not usuario.user.check_password(senha):
        registrar_auditoria(request=request, usuario=usuario, acao='LOGIN_FALHOU', entidade='Usuario',
                            entidade_id=usuario.pk, nivel_critico=True, detalhes='Senha incorreta')
        return Response({'error': 'Senha incorreta.'}, status=status.HTTP_401_UNAUTHORIZED)

    if not usuario.ativo:
        registrar_auditoria(request=request, usuario=usuario, acao='LOGIN_FALHOU', entidade='Usuario',
                            entidade_id=usuario.pk, nivel_critico=True, detalhes='Usuário inativo')
        return Response({'error': 'Usuário inativo. Contate o administrador.'}, status=status.HTTP_403_FORBIDDEN)

    token = emitir_token(usuario.user)
    update_last_login(None, usuario.user)
    registrar_auditoria(request=request, usuario=usuario, acao='LOGIN', entidade='Usuario', entidade_id=usuario.pk)
    logger.info('Login de %s', usuario.email)

    return Response({
        'token': token.key,
        'user': UsuarioSerializer(usuario).data,
        'deve_atualizar_senha': usuario.deve_atualizar_senha,
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def logout(request):
    if request.auth is not None:
        request.auth.delete()
    registrar_auditoria(request=request, acao='LOGOUT', entidade='Usuario', entidade_id=request.user.pk)
    return Response({'message': 'Logout realizado com sucesso.'})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def me(request):
    perfil = _perfil_obrigatorio(request)
    return Response(UsuarioSerializer(perfil).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def password_status(request):
    perfil = _perfil_obrigatorio(request)
    return Response({
        'deve_atualizar_senha': perfil.deve_atualizar_senha,
        'message': 'Atualização de senha obrigatória.' if perfil.deve_atualizar_senha else 'Senha em dia.',
    })


@api_view(['PUT'])
@permission_classes([IsAuthenticated])
def change_password(request):
    """Troca a própria senha; permitido mesmo com atualização pendente."""
    perfil = _perfil_obrigatorio(request)
    serializer = TrocaSenhaSerializer(data=request.data, context={'user': request.user})
    serializer.is_valid(raise_exception=True)

    if not request.user.check_password(serializer.validated_data['senha_atual']):
        raise AuthenticationFailed('Senha atual incorreta.')

    definir_senha(perfil, serializer.validated_data['nova_senha'], deve_atualizar_senha=False)
    token = emitir_token(request.user)
    registrar_auditoria(request=request, acao='ALTERAR_SENHA', entidade='Usuario', entidade_id=perfil.pk)
    return Response({'message': 'Senha alterada com sucesso.', 'token': token.key})


@api_view(['PUT'])
@permission_classes([AllowAny])
@authentication_classes([BearerTokenAuthentication])
def force_password_update(request):
    """Atualização obrigatória da senha usando o token recebido no login."""
    token_key = request.data.get('token')
    if not token_key:
        raise ValidationError({'token': ['Este campo é obrigatório.']})

    token = Token.objects.select_related('user').filter(key=token_key).first()
    if token is None:
        raise AuthenticationFailed('Token inválido.')
    if token_expirado(token):
        token.delete()
        raise AuthenticationFailed('Token expirado.')

    perfil = perfil_de(token.user)
    if perfil is None or not perfil.deve_atualizar_senha:
        raise ValidationError('Não há atualização de senha pendente para este usuário.')

    serializer = AtualizacaoForcadaSerializer(data=request.data, context={'user': token.user})
    serializer.is_valid(raise_exception=True)

    definir_senha(perfil, serializer.validated_data['nova_senha'], deve_atualizar_senha=False)
    novo = emitir_token(token.user)
    registrar_auditoria(request=request, usuario=perfil, acao='ALTERAR_SENHA', entidade='Usuario',
                        entidade_id=perfil.pk, detalhes='Atualização obrigatória')
    return Response({
        'message': 'Senha atualizada com sucesso.',
        'token': novo.key,
        'user': UsuarioSerializer(perfil).data,
    })


# -------------------------------------------------------------------
# Gestão de usuários (administrador)
# -------------------------------------------------------------------
class UsuarioListCreateAPIView(AuditoriaMixin, generics.ListCreateAPIView):
    """Listagem (filtros ?ativo=&nivel_acesso=) e criação de usuários."""
    permission_classes = PERMISSOES_ADMIN
    auditoria_entidade = 'Usuario'

    def get_queryset(self):
        qs = Usuario.objects.select_related('nivel_acesso').order_by('nome')
        ativo = self.request.query_params.get('ativo')
        if ativo is not None:
            qs = qs.filter(ativo=ativo.lower() in ('1', 'true', 'sim'))
        nivel = self.request.query_params.get('nivel_acesso')
        if nivel:
            qs = qs.filter(nivel_acesso__nome=nivel.upper()) if not nivel.isdigit() else qs.filter(nivel_acesso_id=nivel)
        return qs

    def get_serializer_class(self):
        if self.request.method == 'POST':
            return UsuarioCreateSerializer
        return UsuarioSerializer


class UsuarioDetailAPIView(AuditoriaMixin, generics.RetrieveUpdateDestroyAPIView):
    permission_classes = PERMISSOES_ADMIN
    queryset = Usuario.objects.select_related('nivel_acesso', 'user')
    auditoria_entidade = 'Usuario'
    auditoria_delete_critico = True

    def get_serializer_class(self):
        if self.request.method in ('PUT', 'PATCH'):
            return UsuarioUpdateSerializer
        return UsuarioSerializer

    def put(self, request, *args, **kwargs):
        return self.partial_update(request, *args, **kwargs)

    def perform_update(self, serializer):
        desativando = serializer.validated_data.get('ativo') is False
        if desativando and serializer.instance.pk == getattr(perfil_de(self.request.user), 'pk', None):
            raise ValidationError('Você não pode desativar o próprio usuário.')
        super().perform_update(serializer)
        if desativando:
            revogar_tokens(serializer.instance)

    def perform_destroy(self, instance):
        if instance.pk == getattr(perfil_de(self.request.user), 'pk', None):
            raise ValidationError('Você não pode excluir o próprio usuário.')
        super().perform_destroy(instance)


class UsuarioResetSenhaAPIView(APIView):
    """Define uma nova senha para o usuário e exige a troca no próximo acesso."""
    permission_classes = PERMISSOES_ADMIN

    def post(self, request, pk):
        usuario = get_object_or_404(Usuario.objects.select_related('user'), pk=pk)
        serializer = ResetSenhaSerializer(data=request.data, context={'user': usuario.user})
        serializer.is_valid(raise_exception=True)

        definir_senha(usuario, serializer.validated_data['nova_senha'], deve_atualizar_senha=True)
        registrar_auditoria(request=request, acao='RESET_SENHA', entidade='Usuario', entidade_id=usuario.pk,
                            nivel_critico=True, detalhes=f'Senha redefinida para {usuario.email}')
        return Response({'message': 'Senha redefinida. O usuário deverá alterá-la no próximo acesso.'})


class UsuarioToggleStatusAPIView(APIView):
    permission_classes = PERMISSOES_ADMIN

    def patch(self, request, pk):
        usuario = get_object_or_404(Usuario.objects.select_related('user', 'nivel_acesso'), pk=pk)
        if usuario.pk == getattr(perfil_de(request.user), 'pk', None):
            raise ValidationError('Você não pode desativar o próprio usuário.')

        anteriores = snapshot(usuario)
        usuario.ativo = not usuario.ativo
        usuario.save()
        if not usuario.ativo:
            revogar_tokens(usuario)

        registrar_auditoria(request=request, acao='ALTERAR_STATUS', entidade='Usuario', entidade_id=usuario.pk,
                            dados_anteriores=anteriores, dados_novos=snapshot(usuario),
                            nivel_critico=not usuario.ativo)
        return Response(UsuarioSerializer(usuario).data)


class NivelAcessoListAPIView(generics.ListAPIView):
    permission_classes = PERMISSOES_ADMIN
    queryset = NivelAcesso.objects.all()
    serializer_class = NivelAcessoSerializer
    pagination_class = None
