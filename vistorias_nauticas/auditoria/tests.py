from datetime import datetime, timedelta
from unittest import mock

from django.db import DatabaseError, transaction
from django.test import RequestFactory, TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework.test import APIClient

from usuarios.tests import autenticar, criar_admin, criar_vistoriador
from vistorias.models import Embarcacao
from .models import AuditoriaLog
from .utils import registrar_auditoria, sanitizar, snapshot


class AuditoriaUtilsTests(TestCase):
    def test_sanitizar_remove_chaves_sensiveis(self):
        dados = {'email': 'a@b.com', 'Senha': '123', 'itens': [{'token': 'x', 'nome': 'y'}]}
        self.assertEqual(sanitizar(dados), {'email': 'a@b.com', 'itens': [{'nome': 'y'}]})

    def test_snapshot(self):
        embarcacao = Embarcacao.objects.create(nome='Netuno', numero_casco='C-1', valor_embarcacao='1000.50')
        dados = snapshot(embarcacao)
        self.assertEqual(dados['nome'], 'Netuno')
        self.assertEqual(dados['valor_embarcacao'], '1000.50')
        self.assertIsInstance(dados['created_at'], str)
        self.assertIsNone(snapshot(None))

    def test_registrar_auditoria_com_request(self):
        admin = criar_admin()
        request = RequestFactory().post('/api/vistorias/', HTTP_USER_AGENT='pytest',
                                        HTTP_X_FORWARDED_FOR='200.1.2.3, 10.0.0.1')
        request.user = admin.user

        log = registrar_auditoria(request=request, acao='CREATE', entidade='Vistoria', entidade_id=9,
                                  dados_novos={'nome': 'x', 'senha': 'segredo'})
        self.assertEqual(log.usuario, admin)
        self.assertEqual(log.usuario_email, admin.email)
        self.assertEqual(log.ip_address, '200.1.2.3')
        self.assertEqual(log.user_agent, 'pytest')
        self.assertEqual(log.entidade_id, '9')
        self.assertEqual(log.dados_novos, {'nome': 'x'})

    def test_registrar_auditoria_sem_acao(self):
        self.assertIsNone(registrar_auditoria(entidade='Vistoria'))
        self.assertFalse(AuditoriaLog.objects.exists())

    def test_log_nao_pode_ser_alterado(self):
        log = registrar_auditoria(acao='LOGIN', entidade='Usuario')
        log.detalhes = 'alterado'
        with self.assertRaises(ValueError):
            log.save()

    def test_falha_ao_gravar_nao_invalida_a_transacao(self):
        def falha(**kwargs):
            with transaction.mark_for_rollback_on_error():
                raise DatabaseError('falha simulada')

        with mock.patch.object(AuditoriaLog.objects, 'create', side_effect=falha), \
                self.assertLogs('auditoria.utils', level='ERROR'):
            self.assertIsNone(registrar_auditoria(acao='LOGIN', entidade='Usuario'))
        # a transação do teste continua utilizável
        self.assertEqual(AuditoriaLog.objects.count(), 0)
        self.assertIsNotNone(registrar_auditoria(acao='LOGIN', entidade='Usuario'))


class AuditoriaAPITests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = criar_admin()
        self.vistoriador = criar_vistoriador()
        AuditoriaLog.objects.all().delete()

        registrar_auditoria(usuario=self.admin, acao='CREATE', entidade='Vistoria', entidade_id=1)
        registrar_auditoria(usuario=self.admin, acao='DELETE', entidade='Vistoria', entidade_id=1,
                            nivel_critico=True)
        registrar_auditoria(usuario=self.vistoriador, acao='LOGIN', entidade='Usuario')
        registrar_auditoria(acao='LOGIN_FALHOU', entidade='Usuario', detalhes='x@sgvn.com')
        autenticar(self.client, self.admin)
        self.url = reverse('auditoria_api:auditoria-list')

    def test_lista_paginada(self):
        resp = self.client.get(self.url, {'limit': 3})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(len(resp.data['logs']), 3)
        self.assertEqual(resp.data['pagination'], {'total': 4, 'page': 1, 'limit': 3, 'total_pages': 2})
        # mais recentes primeiro
        self.assertEqual(resp.data['logs'][0]['acao'], 'LOGIN_FALHOU')

        resp = self.client.get(self.url, {'limit': 3, 'page': 2})
        self.assertEqual(len(resp.data['logs']), 1)

    def test_limite_maximo(self):
        resp = self.client.get(self.url, {'limit': 1000})
        self.assertEqual(resp.data['pagination']['limit'], 100)

    def test_filtros(self):
        resp = self.client.get(self.url, {'entidade': 'Vistoria', 'nivel_critico': 'true'})
        self.assertEqual([log['acao'] for log in resp.data['logs']], ['DELETE'])

        resp = self.client.get(self.url, {'usuario_id': self.vistoriador.pk})
        self.assertEqual(resp.data['pagination']['total'], 1)
        self.assertEqual(resp.data['logs'][0]['usuario']['email'], self.vistoriador.email)

        amanha = (timezone.localdate() + timedelta(days=1)).isoformat()
        resp = self.client.get(self.url, {'data_inicio': amanha})
        self.assertEqual(resp.data['pagination']['total'], 0)

        hoje = timezone.localdate().isoformat()
        resp = self.client.get(self.url, {'data_inicio': hoje, 'data_fim': hoje})
        self.assertEqual(resp.data['pagination']['total'], 4)

    def test_parametros_invalidos(self):
        self.assertEqual(self.client.get(self.url, {'data_inicio': 'ontem'}).status_code, 400)
        self.assertEqual(self.client.get(self.url, {'page': 'dois'}).status_code, 400)
        # data impossível no calendário
        self.assertEqual(self.client.get(self.url, {'data_inicio': '2024-02-30'}).status_code, 400)
        self.assertEqual(self.client.get(self.url, {'data_fim': '2024-13-01T10:00:00'}).status_code, 400)

    def test_data_fim_inclui_o_dia_inteiro(self):
        log = AuditoriaLog.objects.filter(acao='LOGIN').get()
        AuditoriaLog.objects.filter(pk=log.pk).update(created_at=timezone.make_aware(datetime(2024, 3, 10, 23, 30)))

        resp = self.client.get(self.url, {'data_inicio': '2024-03-10', 'data_fim': '2024-03-10'})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual([item['id'] for item in resp.data['logs']], [log.pk])

        resp = self.client.get(self.url, {'data_fim': '2024-03-09'})
        self.assertEqual(resp.data['pagination']['total'], 0)

    def test_estatisticas(self):
        resp = self.client.get(reverse('auditoria_api:auditoria-estatisticas'))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data['total_acoes'], 4)
        self.assertEqual(resp.data['acoes_criticas'], 1)
        self.assertEqual(resp.data['logins_falhados'], 1)
        self.assertEqual(resp.data['operacoes_bloqueadas'], 0)
        self.assertEqual(resp.data['acoes_por_tipo']['CREATE'], 1)
        self.assertEqual(resp.data['usuarios_mais_ativos'][0]['email'], self.admin.email)
        self.assertEqual(resp.data['usuarios_mais_ativos'][0]['total'], 2)

    def test_vistoriador_bloqueado_gera_acesso_negado(self):
        autenticar(self.client, self.vistoriador)
        resp = self.client.get(self.url)
        self.assertEqual(resp.status_code, 403)

        log = AuditoriaLog.objects.filter(acao='ACESSO_NEGADO').get()
        self.assertTrue(log.nivel_critico)
        self.assertEqual(log.usuario, self.vistoriador)
        self.assertEqual(log.dados_novos, {'metodo': 'GET', 'rota': self.url})

    def test_anonimo(self):
        self.client.credentials()
        self.assertEqual(self.client.get(self.url).status_code, 401)
