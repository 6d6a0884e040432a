import io
import shutil
import tempfile
from datetime import datetime, timedelta
from decimal import Decimal
from unittest import mock

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, override_settings
from django.urls import reverse
from django.utils import timezone
from PIL import Image
from rest_framework.test import APIClient

from auditoria.models import AuditoriaLog
from usuarios.tests import autenticar, criar_admin, criar_vistoriador
from .dashboard import estatisticas_dashboard
from .models import Embarcacao, Foto, StatusVistoria, TipoFotoChecklist, Vistoria
from .storage import ArmazenamentoLocal
from .validators import cpf_valido
from .workflow import checklist_status

MEDIA_TESTE = tempfile.mkdtemp(prefix='sgvn-tests-')


def imagem_teste(nome='foto.png', formato='PNG', tamanho=(64, 48)):
    buffer = io.BytesIO()
    Image.new('RGB', tamanho, (200, 30, 30)).save(buffer, format=formato)
    content_type = 'image/png' if formato == 'PNG' else 'image/jpeg'
    return SimpleUploadedFile(nome, buffer.getvalue(), content_type=content_type)


def criar_tipos_foto():
    return [
        TipoFotoChecklist.objects.create(codigo='FOTO001', nome_exibicao='Foto Geral', obrigatorio=True),
        TipoFotoChecklist.objects.create(codigo='FOTO002', nome_exibicao='Foto do Motor', obrigatorio=True),
        TipoFotoChecklist.objects.create(codigo='FOTO007', nome_exibicao='Local de Atracação', obrigatorio=False),
    ]


def criar_vistoria(vistoriador, status=StatusVistoria.PENDENTE, tipo='LANCHA', casco='CASCO-001', **kwargs):
    embarcacao, _ = Embarcacao.objects.get_or_create(
        numero_casco=casco,
        defaults={'nome': 'Mar Azul', 'tipo_embarcacao': tipo, 'proprietario_nome': 'João da Silva'},
    )
    return Vistoria.objects.create(
        embarcacao=embarcacao,
        status=StatusVistoria.obter(status),
        vistoriador=vistoriador,
        **kwargs
    )


class MediaTemporariaMixin:
    @classmethod
    def tearDownClass(cls):
        super().tearDownClass()
        shutil.rmtree(MEDIA_TESTE, ignore_errors=True)


@override_settings(MEDIA_ROOT=MEDIA_TESTE, UPLOAD_STRATEGY='local')
class VistoriaAdminTests(MediaTemporariaMixin, TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = criar_admin()
        self.vistoriador = criar_vistoriador()
        autenticar(self.client, self.admin)

    def payload(self, **extra):
        dados = {
            'embarcacao': {
                'nome': 'Mar Azul',
                'numero_casco': 'br-123',
                'tipo_embarcacao': 'LANCHA',
                'valor_embarcacao': '150000.00',
                'proprietario_cpf': '529.982.247-25',
            },
            'local': {'tipo': 'MARINA', 'nome_local': 'Marina da Glória', 'cidade': 'Rio de Janeiro', 'estado': 'rj'},
            'vistoriador_id': self.vistoriador.pk,
            'valor_vistoria': '800.00',
        }
        dados.update(extra)
        return dados

    def test_cria_vistoria_pendente(self):
        resp = self.client.post(reverse('vistorias_api:vistorias-list'), self.payload(), format='json')
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.data['status']['nome'], StatusVistoria.PENDENTE)
        self.assertEqual(resp.data['embarcacao']['numero_casco'], 'BR-123')
        self.assertEqual(resp.data['local']['estado'], 'RJ')
        self.assertEqual(resp.data['administrador']['id'], self.admin.pk)
        # valor da embarcação herdado do cadastro
        self.assertEqual(resp.data['valor_embarcacao'], '150000.00')
        self.assertTrue(AuditoriaLog.objects.filter(acao='CREATE', entidade='Vistoria').exists())

    def test_reaproveita_embarcacao_pelo_casco(self):
        self.client.post(reverse('vistorias_api:vistorias-list'), self.payload(), format='json')
        resp = self.client.post(reverse('vistorias_api:vistorias-list'), self.payload(), format='json')
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(Embarcacao.objects.count(), 1)
        self.assertEqual(Vistoria.objects.count(), 2)

    def test_cpf_invalido(self):
        payload = self.payload()
        payload['embarcacao']['proprietario_cpf'] = '111.111.111-11'
        resp = self.client.post(reverse('vistorias_api:vistorias-list'), payload, format='json')
        self.assertEqual(resp.status_code, 400)

    def test_vistoriador_nao_cria_vistoria(self):
        autenticar(self.client, self.vistoriador)
        resp = self.client.post(reverse('vistorias_api:vistorias-list'), self.payload(), format='json')
        self.assertEqual(resp.status_code, 403)

    def test_filtro_por_status(self):
        criar_vistoria(self.vistoriador)
        criar_vistoria(self.vistoriador, status=StatusVistoria.CANCELADA)
        resp = self.client.get(reverse('vistorias_api:vistorias-list'), {'status': 'cancelada'})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(len(resp.data), 1)
        self.assertEqual(resp.data[0]['status']['nome'], StatusVistoria.CANCELADA)

    def test_aprovar_e_transicao_invalida(self):
        vistoria = criar_vistoria(self.vistoriador, status=StatusVistoria.CONCLUIDA)
        url = reverse('vistorias_api:vistorias-status', args=[vistoria.pk])

        resp = self.client.put(url, {'status': 'APROVADA'}, format='json')
        self.assertEqual(resp.status_code, 200)
        vistoria.refresh_from_db()
        self.assertEqual(vistoria.status.nome, StatusVistoria.APROVADA)
        self.assertEqual(vistoria.aprovado_por, self.admin)
        self.assertIsNotNone(vistoria.data_aprovacao)
        self.assertTrue(AuditoriaLog.objects.filter(acao='ALTERAR_STATUS', nivel_critico=True).exists())

        resp = self.client.put(url, {'status': 'EM_ANDAMENTO'}, format='json')
        self.assertEqual(resp.status_code, 409)

    def test_status_desconhecido(self):
        vistoria = criar_vistoria(self.vistoriador)
        resp = self.client.put(reverse('vistorias_api:vistorias-status', args=[vistoria.pk]),
                               {'status': 'ARQUIVADA'}, format='json')
        self.assertEqual(resp.status_code, 400)

    def test_exclusao_de_embarcacao_em_uso(self):
        vistoria = criar_vistoria(self.vistoriador)
        resp = self.client.delete(reverse('vistorias_api:embarcacoes-detail', args=[vistoria.embarcacao_id]))
        self.assertEqual(resp.status_code, 409)


@override_settings(MEDIA_ROOT=MEDIA_TESTE, UPLOAD_STRATEGY='local')
class FluxoVistoriadorTests(MediaTemporariaMixin, TestCase):
    def setUp(self):
        self.client = APIClient()
        self.vistoriador = criar_vistoriador()
        self.outro = criar_vistoriador(email='outro@sgvn.com', nome='Outro')
        self.tipos = criar_tipos_foto()
        self.vistoria = criar_vistoria(self.vistoriador)
        autenticar(self.client, self.vistoriador)

    def enviar_foto(self, tipo, arquivo=None, vistoria=None):
        return self.client.post(reverse('vistorias_api:fotos-upload'), {
            'foto': arquivo or imagem_teste(),
            'vistoria_id': (vistoria or self.vistoria).pk,
            'tipo_foto_id': tipo.pk,
        }, format='multipart')

    def iniciar(self):
        return self.client.put(reverse('vistorias_api:vistoriador-iniciar', args=[self.vistoria.pk]))

    def test_lista_apenas_vistorias_atribuidas(self):
        criar_vistoria(self.outro, casco='CASCO-002')
        resp = self.client.get(reverse('vistorias_api:vistoriador-list'))
        self.assertEqual([v['id'] for v in resp.data], [self.vistoria.pk])

    def test_acesso_negado_a_vistoria_de_outro(self):
        alheia = criar_vistoria(self.outro, casco='CASCO-002')
        resp = self.client.get(reverse('vistorias_api:vistorias-detail', args=[alheia.pk]))
        self.assertEqual(resp.status_code, 403)
        self.assertTrue(AuditoriaLog.objects.filter(acao='ACESSO_NEGADO').exists())

    def test_iniciar_vistoria(self):
        resp = self.iniciar()
        self.assertEqual(resp.status_code, 200)
        self.vistoria.refresh_from_db()
        self.assertEqual(self.vistoria.status.nome, StatusVistoria.EM_ANDAMENTO)
        self.assertIsNotNone(self.vistoria.data_inicio)

        resp = self.iniciar()
        self.assertEqual(resp.status_code, 409)

    def test_foto_exige_vistoria_em_andamento(self):
        resp = self.enviar_foto(self.tipos[0])
        self.assertEqual(resp.status_code, 409)

    def test_upload_comprime_para_jpeg(self):
        self.iniciar()
        resp = self.enviar_foto(self.tipos[0], imagem_teste(tamanho=(3000, 1500)))
        self.assertEqual(resp.status_code, 201)

        foto = Foto.objects.get(pk=resp.data['id'])
        self.assertTrue(foto.url_arquivo.startswith(f'vistorias/id-{self.vistoria.pk}/foto-'))
        conteudo = ArmazenamentoLocal().ler(foto.url_arquivo)
        self.assertEqual(conteudo[:2], b'\xff\xd8')
        with Image.open(io.BytesIO(conteudo)) as img:
            self.assertEqual(img.size, (1920, 960))

        imagem = self.client.get(reverse('vistorias_api:fotos-imagem', args=[foto.pk]))
        self.assertEqual(imagem.status_code, 200)
        self.assertEqual(imagem['Content-Type'], 'image/jpeg')
        self.assertEqual(imagem.content, conteudo)

    def test_upload_rejeita_arquivo_que_nao_e_imagem(self):
        self.iniciar()
        falso = SimpleUploadedFile('foto.jpg', b'isto nao e uma imagem', content_type='image/jpeg')
        resp = self.enviar_foto(self.tipos[0], falso)
        self.assertEqual(resp.status_code, 400)

        texto = SimpleUploadedFile('notas.txt', b'abc', content_type='text/plain')
        resp = self.enviar_foto(self.tipos[0], texto)
        self.assertEqual(resp.status_code, 400)
        self.assertFalse(Foto.objects.exists())

    @override_settings(UPLOAD_MAX_BYTES=10)
    def test_upload_acima_do_limite(self):
        self.iniciar()
        resp = self.enviar_foto(self.tipos[0])
        self.assertEqual(resp.status_code, 400)

    def test_nova_foto_substitui_a_do_mesmo_tipo(self):
        self.iniciar()
        primeira = self.enviar_foto(self.tipos[0]).data
        with self.captureOnCommitCallbacks(execute=True):
            segunda = self.enviar_foto(self.tipos[0]).data

        self.assertEqual(list(self.vistoria.fotos.values_list('pk', flat=True)), [segunda['id']])
        armazenamento = ArmazenamentoLocal()
        self.assertFalse(armazenamento.existe(primeira['url_arquivo']))
        self.assertTrue(armazenamento.existe(segunda['url_arquivo']))

    def test_excluir_foto_remove_arquivo(self):
        self.iniciar()
        foto = self.enviar_foto(self.tipos[0]).data
        with self.captureOnCommitCallbacks(execute=True):
            resp = self.client.delete(reverse('vistorias_api:fotos-detail', args=[foto['id']]))
        self.assertEqual(resp.status_code, 204)
        self.assertFalse(ArmazenamentoLocal().existe(foto['url_arquivo']))

    def test_concluir_exige_fotos_obrigatorias(self):
        self.iniciar()
        self.enviar_foto(self.tipos[0])
        url = reverse('vistorias_api:vistoriador-status', args=[self.vistoria.pk])

        resp = self.client.put(url, {'status': 'CONCLUIDA'}, format='json')
        self.assertEqual(resp.status_code, 422)
        self.assertEqual(resp.data['resumo']['total_obrigatorios'], 2)
        self.assertEqual(resp.data['resumo']['fotos_obrigatorias_tiradas'], 1)
        self.assertFalse(resp.data['resumo']['checklist_completo'])

        self.enviar_foto(self.tipos[1])
        resp = self.client.put(url, {'status': 'CONCLUIDA', 'observacoes': 'Tudo conforme.'}, format='json')
        self.assertEqual(resp.status_code, 200)
        self.vistoria.refresh_from_db()
        self.assertEqual(self.vistoria.status.nome, StatusVistoria.CONCLUIDA)
        self.assertEqual(self.vistoria.observacoes, 'Tudo conforme.')
        self.assertIsNotNone(self.vistoria.data_conclusao)

    def test_vistoriador_nao_cancela(self):
        self.iniciar()
        resp = self.client.put(reverse('vistorias_api:vistoriador-status', args=[self.vistoria.pk]),
                               {'status': 'CANCELADA'}, format='json')
        self.assertEqual(resp.status_code, 403)

    def test_vistoriador_nao_altera_valores_restritos(self):
        resp = self.client.put(reverse('vistorias_api:vistorias-detail', args=[self.vistoria.pk]),
                               {'valor_vistoria': '10.00'}, format='json')
        self.assertEqual(resp.status_code, 403)

    def test_vistoriador_informa_valores_no_formulario(self):
        resp = self.client.put(reverse('vistorias_api:vistoriador-status', args=[self.vistoria.pk]),
                               {'valor_vistoria': '99999999.99', 'valor_vistoriador': '350.00'}, format='json')
        self.assertEqual(resp.status_code, 200)
        self.vistoria.refresh_from_db()
        self.assertEqual(self.vistoria.valor_vistoria, Decimal('99999999.99'))
        self.assertEqual(self.vistoria.valor_vistoriador, Decimal('350.00'))

        resp = self.client.put(reverse('vistorias_api:vistoriador-status', args=[self.vistoria.pk]),
                               {'valor_vistoria': '100000000.00'}, format='json')
        self.assertEqual(resp.status_code, 400)

        resp = self.client.put(reverse('vistorias_api:vistoriador-status', args=[self.vistoria.pk]),
                               {'vistoriador_id': self.outro.pk}, format='json')
        self.assertEqual(resp.status_code, 403)

    def test_refazer_vistoria_reprovada_mantem_data_inicio(self):
        inicio = timezone.now() - timedelta(days=3)
        reprovada = criar_vistoria(self.vistoriador, status=StatusVistoria.REPROVADA, casco='CASCO-003',
                                   data_inicio=inicio, data_conclusao=inicio + timedelta(hours=2))
        resp = self.client.put(reverse('vistorias_api:vistoriador-status', args=[reprovada.pk]),
                               {'status': 'EM_ANDAMENTO'}, format='json')
        self.assertEqual(resp.status_code, 200)
        reprovada.refresh_from_db()
        self.assertEqual(reprovada.status.nome, StatusVistoria.EM_ANDAMENTO)
        self.assertEqual(reprovada.data_inicio, inicio)

    def test_excluir_vistoria_remove_arquivos_das_fotos(self):
        self.iniciar()
        fotos = [self.enviar_foto(tipo).data for tipo in self.tipos[:2]]
        armazenamento = ArmazenamentoLocal()
        self.assertTrue(all(armazenamento.existe(f['url_arquivo']) for f in fotos))

        autenticar(self.client, criar_admin())
        with self.captureOnCommitCallbacks(execute=True):
            resp = self.client.delete(reverse('vistorias_api:vistorias-detail', args=[self.vistoria.pk]))
        self.assertEqual(resp.status_code, 204)
        self.assertFalse(Foto.objects.exists())
        for foto in fotos:
            self.assertFalse(armazenamento.existe(foto['url_arquivo']))

    def test_upload_rejeita_imagem_gigante(self):
        self.iniciar()
        with mock.patch.object(Image, 'MAX_IMAGE_PIXELS', 100):
            resp = self.enviar_foto(self.tipos[0])
        self.assertEqual(resp.status_code, 400)
        self.assertFalse(Foto.objects.exists())

    def test_rascunho_e_salvo(self):
        rascunho = {'material_casco': 'Fibra de vidro', 'equipamentos': {'gps': 'Garmin'}}
        resp = self.client.put(reverse('vistorias_api:vistoriador-status', args=[self.vistoria.pk]),
                               {'dados_rascunho': rascunho}, format='json')
        self.assertEqual(resp.status_code, 200)
        self.vistoria.refresh_from_db()
        self.assertEqual(self.vistoria.dados_rascunho, rascunho)

    def test_checklist_status(self):
        self.iniciar()
        self.enviar_foto(self.tipos[0])
        resp = self.client.get(reverse('vistorias_api:vistoriador-checklist', args=[self.vistoria.pk]))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data['vistoria_id'], self.vistoria.pk)
        self.assertEqual(resp.data['resumo']['progresso'], 50)
        itens = {i['codigo']: i for i in resp.data['checklist']}
        self.assertTrue(itens['FOTO001']['foto_tirada'])
        self.assertFalse(itens['FOTO002']['foto_tirada'])


class DashboardTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = criar_admin()
        self.vistoriador = criar_vistoriador(nome='Pedro Alves')

    def criar(self, status, casco, criada_em, concluida_em=None, **kwargs):
        vistoria = criar_vistoria(self.vistoriador, status=status, casco=casco,
                                  data_conclusao=concluida_em and self.data(*concluida_em), **kwargs)
        Vistoria.objects.filter(pk=vistoria.pk).update(created_at=self.data(*criada_em))
        return vistoria

    def data(self, ano, mes, dia):
        return timezone.make_aware(datetime(ano, mes, dia, 12, 0))

    def test_estatisticas_do_mes(self):
        self.criar(StatusVistoria.CONCLUIDA, 'C-1', (2024, 3, 2), (2024, 3, 5),
                   valor_vistoria=Decimal('800.00'), valor_vistoriador=Decimal('300.00'))
        self.criar(StatusVistoria.APROVADA, 'C-2', (2024, 2, 10), (2024, 2, 20),
                   valor_vistoria=Decimal('500.00'), valor_vistoriador=Decimal('200.00'))
        self.criar(StatusVistoria.PENDENTE, 'C-3', (2024, 3, 10))

        dados = estatisticas_dashboard(agora=self.data(2024, 3, 15))

        atual = dados['mes_atual']
        self.assertEqual((atual['mes'], atual['ano'], atual['nome_mes']), (3, 2024, 'março de 2024'))
        self.assertEqual(atual['vistorias'], {'total': 2, 'concluidas': 1})
        self.assertEqual(atual['financeiro'],
                         {'receita': Decimal('800.00'), 'despesa': Decimal('300.00'), 'lucro': Decimal('500.00')})
        anterior = dados['mes_anterior']
        self.assertEqual((anterior['mes'], anterior['ano']), (2, 2024))
        self.assertEqual(anterior['vistorias'], {'total': 1, 'concluidas': 1})

        self.assertEqual(dados['comparacao']['vistorias'], {'variacao': 1, 'percentual': 100.0})
        self.assertEqual(dados['comparacao']['receita']['percentual'], 60.0)
        self.assertEqual(dados['comparacao']['lucro']['percentual'], 66.7)

        por_status = {item['status']: item['quantidade'] for item in dados['vistorias_por_status']}
        self.assertEqual(por_status[StatusVistoria.PENDENTE], 1)
        self.assertEqual(por_status[StatusVistoria.APROVADA], 1)
        self.assertEqual(por_status[StatusVistoria.CANCELADA], 0)

        self.assertEqual([m['mes'] for m in dados['concluidas_por_mes']],
                         ['2023-10', '2023-11', '2023-12', '2024-01', '2024-02', '2024-03'])
        self.assertEqual([m['total'] for m in dados['concluidas_por_mes']], [0, 0, 0, 0, 1, 1])

        self.assertEqual(dados['ranking_vistoriadores'], [{
            'id': self.vistoriador.pk, 'nome': 'Pedro Alves', 'email': self.vistoriador.email,
            'total_vistorias': 1, 'total_ganho': Decimal('300.00'),
        }])
        self.assertEqual(dados['totais_gerais'],
                         {'total_vistorias': 3, 'total_embarcacoes': 3, 'total_vistoriadores': 1})

    def test_janeiro_compara_com_dezembro(self):
        dados = estatisticas_dashboard(agora=self.data(2025, 1, 3))
        self.assertEqual((dados['mes_anterior']['mes'], dados['mes_anterior']['ano']), (12, 2024))
        self.assertEqual(dados['comparacao']['vistorias'], {'variacao': 0, 'percentual': 0.0})

    def test_endpoint_restrito_ao_administrador(self):
        url = reverse('vistorias_api:dashboard-estatisticas')
        autenticar(self.client, self.vistoriador)
        self.assertEqual(self.client.get(url).status_code, 403)

        autenticar(self.client, self.admin)
        criar_vistoria(self.vistoriador, casco='C-9')
        resp = self.client.get(url)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data['mes_atual']['vistorias']['total'], 1)
        self.assertEqual(len(resp.data['concluidas_por_mes']), 6)


class ChecklistTests(TestCase):
    def test_sem_tipos_obrigatorios_esta_completo(self):
        vistoria = criar_vistoria(criar_vistoriador())
        resumo = checklist_status(vistoria)['resumo']
        self.assertTrue(resumo['checklist_completo'])
        self.assertEqual(resumo['progresso'], 100)


class TipoFotoChecklistTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = criar_admin()
        autenticar(self.client, self.admin)

    def test_codigo_duplicado(self):
        url = reverse('vistorias_api:tipos-foto-list')
        self.assertEqual(self.client.post(url, {'codigo': 'foto010', 'nome_exibicao': 'Popa'}, format='json').status_code, 201)
        resp = self.client.post(url, {'codigo': 'FOTO010', 'nome_exibicao': 'Outra'}, format='json')
        self.assertEqual(resp.status_code, 409)

    def test_tipo_em_uso_nao_pode_ser_excluido(self):
        tipo = TipoFotoChecklist.objects.create(codigo='FOTO001', nome_exibicao='Geral')
        vistoria = criar_vistoria(criar_vistoriador())
        Foto.objects.create(vistoria=vistoria, tipo_foto=tipo, url_arquivo='vistorias/id-1/foto-1-1.jpg')
        resp = self.client.delete(reverse('vistorias_api:tipos-foto-detail', args=[tipo.pk]))
        self.assertEqual(resp.status_code, 409)

    def test_vistoriador_apenas_consulta(self):
        vistoriador = criar_vistoriador()
        autenticar(self.client, vistoriador)
        url = reverse('vistorias_api:tipos-foto-list')
        self.assertEqual(self.client.get(url).status_code, 200)
        self.assertEqual(self.client.post(url, {'codigo': 'X', 'nome_exibicao': 'X'}, format='json').status_code, 403)


class ValidadoresTests(TestCase):
    def test_cpf(self):
        self.assertTrue(cpf_valido('529.982.247-25'))
        self.assertTrue(cpf_valido('52998224725'))
        self.assertFalse(cpf_valido('111.111.111-11'))
        self.assertFalse(cpf_valido('529.982.247-24'))
        self.assertFalse(cpf_valido('123'))
