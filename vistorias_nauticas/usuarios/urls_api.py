from django.urls import path

from . import api_views

app_name = 'usuarios_api'

urlpatterns = [
    # Autenticação
    path('auth/login', api_views.login, name='login'),
    path('auth/logout', api_views.logout, name='logout'),
    path('auth/me', api_views.me, name='me'),
    path('auth/password-status', api_views.password_status, name='password-status'),
    path('auth/change-password', api_views.change_password, name='change-password'),
    path('auth/force-password-update', api_views.force_password_update, name='force-password-update'),

    # Gestão de usuários
    path('usuarios/', api_views.UsuarioListCreateAPIView.as_view(), name='usuarios-list'),
    path('usuarios/niveis-acesso/', api_views.NivelAcessoListAPIView.as_view(), name='niveis-acesso'),
    path('usuarios/<int:pk>/', api_views.UsuarioDetailAPIView.as_view(), name='usuarios-detail'),
    path('usuarios/<int:pk>/reset-password', api_views.UsuarioResetSenhaAPIView.as_view(), name='usuarios-reset-password'),
    path('usuarios/<int:pk>/toggle-status', api_views.UsuarioToggleStatusAPIView.as_view(), name='usuarios-toggle-status'),
]
