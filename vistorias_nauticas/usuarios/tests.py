from datetime import timedelta
from io import StringIO

from django.contrib.auth.models import User
from django.core.cache import cache
from django.core.management import call_command
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework.authtoken.models import Token
from rest_framework.test import APIClient

from auditoria.models import AuditoriaLog
from vistorias.models import TipoFotoChecklist
from vistorias_nauticas.authentication import emitir_token
from .models import NivelAcesso, Usuario
from .utils import criar_usuario

SENHA = 'Nautica@2024'


def criar_admin(email='admin@sgvn.com', senha=SENHA, **kwargs):
    nivel, _ = NivelAcesso.objects.get_or_create(nome=NivelAcesso.ADMINISTRADOR)
    return criar_usuario('Administrador', email, senha, nivel_acesso=nivel, **kwargs)


def criar_vistoriador(email='vistoriador@sgvn.com', senha=SENHA, nome='Vistoriador', **kwargs):
    nivel, _ = NivelAcesso.objects.get_or_create(nome=NivelAcesso.VISTORIADOR)
    return criar_usuario(nome, email, senha, nivel_acesso=nivel, **kwargs)


def autenticar(client, usuario):
    """Emite um token para ``usuario`` e o envia como Bearer nas próximas requisições."""
    token = emitir_token(usuario.user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {token.key}')
    return token


class LoginTests(TestCase):
    def setUp(self):
        cache.clear()
        self.client = APIClient()
        self.url = reverse('usuarios_api:login')
        self.vistoriador = criar_vistoriador()

    def test_login_retorna_token_e_usuario(self):
        resp = self.client.post(self.url, {'email': 'VISTORIADOR@sgvn.com', 'senha': SENHA}, format='json')
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.data['token'])
        self.assertEqual(resp.data['user']['email'], 'vistoriador@sgvn.com')
        self.assertEqual(resp.data['user']['nivel_acesso']['nome'], NivelAcesso.VISTORIADOR)
        self.assertFalse(resp.data['deve_atualizar_senha'])
        self.assertNotIn('senha', resp.data['user'])
        self.assertTrue(AuditoriaLog.objects.filter(acao='LOGIN', usuario=self.vistoriador).exists())

    def test_login_sem_campos(self):
        resp = self.client.post(self.url, {'email': 'vistoriador@sgvn.com'}, format='json')
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data['error'], 'Email e senha são obrigatórios.')

    def test_login_email_desconhecido(self):
        resp = self.client.post(self.url, {'email': 'ninguem@sgvn.com', 'senha': SENHA}, format='json')
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.data['error'], 'Email não cadastrado no sistema.')
        log = AuditoriaLog.objects.get(acao='LOGIN_FALHOU')
        self.assertTrue(log.nivel_critico)
        self.assertIsNone(log.usuario)

    def test_login_senha_incorreta(self):
        resp = self.client.post(self.url, {'email': 'vistoriador@sgvn.com', 'senha': 'errada'}, format='json')
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.data['error'], 'Senha incorreta.')
        # a senha digitada nunca vai para o log
        log = AuditoriaLog.objects.get(acao='LOGIN_FALHOU')
        self.assertNotIn('errada', str(log.dados_novos))

    def test_login_usuario_inativo(self):
        self.vistoriador.ativo = False
        self.vistoriador.save()
        resp = self.client.post(self.url, {'email': 'vistoriador@sgvn.com', 'senha': SENHA}, format='json')
        self.assertEqual(resp.status_code, 403)

    def test_login_emite_novo_token_e_revoga_o_anterior(self):
        primeiro = self.client.post(self.url, {'email': 'vistoriador@sgvn.com', 'senha': SENHA}, format='json')
        segundo = self.client.post(self.url, {'email': 'vistoriador@sgvn.com', 'senha': SENHA}, format='json')
        self.assertNotEqual(primeiro.data['token'], segundo.data['token'])
        self.assertFalse(Token.objects.filter(key=primeiro.data['token']).exists())


class TokenTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.vistoriador = criar_vistoriador()

    def test_me_com_bearer(self):
        autenticar(self.client, self.vistoriador)
        resp = self.client.get(reverse('usuarios_api:me'))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data['id'], self.vistoriador.pk)

    def test_sem_token(self):
        resp = self.client.get(reverse('usuarios_api:me'))
        self.assertEqual(resp.status_code, 401)
        self.assertIn('error', resp.data)

    def test_token_expirado(self):
        token = autenticar(self.client, self.vistoriador)
        Token.objects.filter(pk=token.pk).update(created=timezone.now() - timedelta(hours=25))
        resp = self.client.get(reverse('usuarios_api:me'))
        self.assertEqual(resp.status_code, 401)
        self.assertFalse(Token.objects.filter(pk=token.pk).exists())

    def test_logout_revoga_token(self):
        token = autenticar(self.client, self.vistoriador)
        resp = self.client.post(reverse('usuarios_api:logout'))
        self.assertEqual(resp.status_code, 200)
        self.assertFalse(Token.objects.filter(pk=token.pk).exists())
        self.assertEqual(self.client.get(reverse('usuarios_api:me')).status_code, 401)


class SenhaTests(TestCase):
    def setUp(self):
        cache.clear()
        self.client = APIClient()
        self.vistoriador = criar_vistoriador(deve_atualizar_senha=True)

    def test_atualizacao_pendente_bloqueia_api(self):
        autenticar(self.client, self.vistoriador)
        resp = self.client.get(reverse('vistorias_api:vistorias-list'))
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.data['code'], 'PASSWORD_UPDATE_REQUIRED')

        # consulta do próprio usuário e status da senha continuam liberados
        self.assertEqual(self.client.get(reverse('usuarios_api:me')).status_code, 200)
        resp = self.client.get(reverse('usuarios_api:password-status'))
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.data['deve_atualizar_senha'])

    def test_troca_de_senha(self):
        token = autenticar(self.client, self.vistoriador)
        resp = self.client.put(reverse('usuarios_api:change-password'),
                               {'senha_atual': SENHA, 'nova_senha': 'Outra#Senha9'}, format='json')
        self.assertEqual(resp.status_code, 200)
        self.assertNotEqual(resp.data['token'], token.key)

        self.vistoriador.refresh_from_db()
        self.assertFalse(self.vistoriador.deve_atualizar_senha)
        self.assertTrue(self.vistoriador.user.check_password('Outra#Senha9'))
        self.assertFalse(Token.objects.filter(key=token.key).exists())
        self.assertTrue(AuditoriaLog.objects.filter(acao='ALTERAR_SENHA').exists())

    def test_troca_com_senha_atual_incorreta(self):
        autenticar(self.client, self.vistoriador)
        resp = self.client.put(reverse('usuarios_api:change-password'),
                               {'senha_atual': 'Errada@123', 'nova_senha': 'Outra#Senha9'}, format='json')
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.data['error'], 'Senha atual incorreta.')

    def test_nova_senha_fora_da_politica(self):
        autenticar(self.client, self.vistoriador)
        resp = self.client.put(reverse('usuarios_api:change-password'),
                               {'senha_atual': SENHA, 'nova_senha': 'semnumero'}, format='json')
        self.assertEqual(resp.status_code, 400)
        self.assertIn('nova_senha', resp.data['details'])

    def test_atualizacao_forcada_com_token_do_login(self):
        login = self.client.post(reverse('usuarios_api:login'),
                                 {'email': 'vistoriador@sgvn.com', 'senha': SENHA}, format='json')
        self.assertTrue(login.data['deve_atualizar_senha'])

        resp = self.client.put(reverse('usuarios_api:force-password-update'),
                               {'token': login.data['token'], 'nova_senha': 'Forte!Senha7'}, format='json')
        self.assertEqual(resp.status_code, 200)
        self.assertFalse(resp.data['user']['deve_atualizar_senha'])

        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {resp.data["token"]}')
        self.assertEqual(self.client.get(reverse('vistorias_api:vistorias-list')).status_code, 200)

    def test_atualizacao_forcada_sem_pendencia(self):
        self.vistoriador.deve_atualizar_senha = False
        self.vistoriador.save()
        token = emitir_token(self.vistoriador.user)
        resp = self.client.put(reverse('usuarios_api:force-password-update'),
                               {'token': token.key, 'nova_senha': 'Forte!Senha7'}, format='json')
        self.assertEqual(resp.status_code, 400)

    def test_atualizacao_forcada_token_invalido(self):
        resp = self.client.put(reverse('usuarios_api:force-password-update'),
                               {'token': 'nao-existe', 'nova_senha': 'Forte!Senha7'}, format='json')
        self.assertEqual(resp.status_code, 401)


class GestaoUsuariosTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = criar_admin()
        self.vistoriador = criar_vistoriador()
        autenticar(self.client, self.admin)

    def test_admin_cria_usuario_com_senha_provisoria(self):
        nivel = NivelAcesso.objects.get(nome=NivelAcesso.VISTORIADOR)
        resp = self.client.post(reverse('usuarios_api:usuarios-list'),
                                {'nome': 'Novo', 'email': 'Novo@SGVN.com', 'nivel_acesso_id': nivel.pk},
                                format='json')
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.data['email'], 'novo@sgvn.com')
        self.assertTrue(resp.data['deve_atualizar_senha'])

        novo = Usuario.objects.get(email='novo@sgvn.com')
        self.assertTrue(novo.user.check_password('mudar123'))
        self.assertTrue(AuditoriaLog.objects.filter(acao='CREATE', entidade='Usuario', entidade_id=str(novo.pk)).exists())

    def test_email_duplicado(self):
        resp = self.client.post(reverse('usuarios_api:usuarios-list'),
                                {'nome': 'Outro', 'email': 'vistoriador@sgvn.com'}, format='json')
        self.assertEqual(resp.status_code, 409)

    def test_lista_com_filtro_de_nivel(self):
        resp = self.client.get(reverse('usuarios_api:usuarios-list'), {'nivel_acesso': 'vistoriador'})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual([u['email'] for u in resp.data], ['vistoriador@sgvn.com'])

    def test_vistoriador_nao_gerencia_usuarios(self):
        autenticar(self.client, self.vistoriador)
        resp = self.client.get(reverse('usuarios_api:usuarios-list'))
        self.assertEqual(resp.status_code, 403)

    def test_atualiza_usuario(self):
        resp = self.client.put(reverse('usuarios_api:usuarios-detail', args=[self.vistoriador.pk]),
                               {'nome': 'Vistoriador Renomeado'}, format='json')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data['nome'], 'Vistoriador Renomeado')

    def test_admin_nao_exclui_a_si_mesmo(self):
        resp = self.client.delete(reverse('usuarios_api:usuarios-detail', args=[self.admin.pk]))
        self.assertEqual(resp.status_code, 400)
        self.assertTrue(Usuario.objects.filter(pk=self.admin.pk).exists())

    def test_exclusao_remove_user_do_django(self):
        user_id = self.vistoriador.user_id
        resp = self.client.delete(reverse('usuarios_api:usuarios-detail', args=[self.vistoriador.pk]))
        self.assertEqual(resp.status_code, 204)
        self.assertFalse(User.objects.filter(pk=user_id).exists())
        log = AuditoriaLog.objects.get(acao='DELETE', entidade='Usuario')
        self.assertTrue(log.nivel_critico)

    def test_reset_de_senha(self):
        token = emitir_token(self.vistoriador.user)
        resp = self.client.post(reverse('usuarios_api:usuarios-reset-password', args=[self.vistoriador.pk]),
                                {'nova_senha': 'Reset@Senha1'}, format='json')
        self.assertEqual(resp.status_code, 200)
        self.vistoriador.refresh_from_db()
        self.assertTrue(self.vistoriador.deve_atualizar_senha)
        self.assertFalse(Token.objects.filter(key=token.key).exists())

    def test_toggle_status(self):
        url = reverse('usuarios_api:usuarios-toggle-status', args=[self.vistoriador.pk])
        resp = self.client.patch(url)
        self.assertEqual(resp.status_code, 200)
        self.assertFalse(resp.data['ativo'])
        self.vistoriador.refresh_from_db()
        self.assertFalse(self.vistoriador.user.is_active)

        resp = self.client.patch(url)
        self.assertTrue(resp.data['ativo'])

    def test_toggle_do_proprio_usuario(self):
        resp = self.client.patch(reverse('usuarios_api:usuarios-toggle-status', args=[self.admin.pk]))
        self.assertEqual(resp.status_code, 400)

    def test_niveis_de_acesso(self):
        resp = self.client.get(reverse('usuarios_api:niveis-acesso'))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual({n['nome'] for n in resp.data}, {NivelAcesso.ADMINISTRADOR, NivelAcesso.VISTORIADOR})


class PopularDadosTests(TestCase):
    def test_cria_tipos_de_foto_e_administrador(self):
        call_command('popular_dados', admin_email='chefe@sgvn.com', stdout=StringIO())

        self.assertEqual(TipoFotoChecklist.objects.count(), 8)
        self.assertEqual(TipoFotoChecklist.objects.filter(obrigatorio=True).count(), 6)
        admin = Usuario.objects.get(email='chefe@sgvn.com')
        self.assertTrue(admin.is_administrador)
        self.assertTrue(admin.deve_atualizar_senha)

    def test_idempotente(self):
        call_command('popular_dados', admin_email='chefe@sgvn.com', stdout=StringIO())
        call_command('popular_dados', admin_email='chefe@sgvn.com', stdout=StringIO())
        self.assertEqual(TipoFotoChecklist.objects.count(), 8)
        self.assertEqual(Usuario.objects.filter(email='chefe@sgvn.com').count(), 1)
