import io
import os
import shutil
import tempfile
from datetime import date
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
from vistorias.models import Embarcacao, Foto, Local, StatusVistoria, TipoFotoChecklist, Vistoria
from vistorias.storage import ArmazenamentoLocal
from .generator import formatar_moeda, formatar_valor, gerar_pdf_laudo, normalizar_resposta
from .layout import CAMPOS_EQUIPAMENTOS, secoes_para
from .models import ConfiguracaoLaudo, Laudo
from .preenchimento import _sufixo, gerar_numero_laudo, preencher_dados_laudo

MEDIA_TESTE = tempfile.mkdtemp(prefix='sgvn-laudos-')


def jpeg(tamanho=(120, 90)):
    buffer = io.BytesIO()
    Image.new('RGB', tamanho, (20, 90, 160)).save(buffer, format='JPEG')
    return buffer.getvalue()


def criar_vistoria_concluida(vistoriador, tipo='LANCHA', casco='CASCO-100', status=StatusVistoria.CONCLUIDA, **kwargs):
    embarcacao = Embarcacao.objects.create(
        nome='Netuno',
        numero_casco=casco,
        tipo_embarcacao=tipo,
        ano_fabricacao=2018,
        valor_embarcacao=Decimal('250000.00'),
        proprietario_nome='Maria Souza',
        proprietario_cpf='529.982.247-25',
    )
    local = Local.objects.create(tipo='MARINA', nome_local='Marina Verolme', cidade='Angra dos Reis', estado='RJ')
    agora = timezone.now()
    return Vistoria.objects.create(
        embarcacao=embarcacao,
        local=local,
        status=StatusVistoria.obter(status),
        vistoriador=vistoriador,
        contato_acompanhante_nome='Carlos Lima',
        data_inicio=agora,
        data_conclusao=agora,
        **kwargs
    )


class LaudoUtilsTests(TestCase):
    def test_sufixo(self):
        self.assertEqual(_sufixo(0), 'A')
        self.assertEqual(_sufixo(25), 'Z')
        self.assertEqual(_sufixo(26), 'AA')
        self.assertEqual(_sufixo(27), 'AB')

    def test_formatar_moeda(self):
        self.assertEqual(formatar_moeda(Decimal('1234.5')), 'R$ 1.234,50')
        self.assertEqual(formatar_moeda(Decimal('250000')), 'R$ 250.000,00')

    def test_formatar_valor(self):
        self.assertEqual(formatar_valor('capacidade', None), '---')
        self.assertEqual(formatar_valor('capacidade', ''), '---')
        self.assertEqual(formatar_valor('data_inspecao', date(2024, 3, 5)), '05/03/2024')
        self.assertEqual(formatar_valor('valor_risco', Decimal('10')), 'R$ 10,00')

    def test_normalizar_resposta(self):
        self.assertEqual(normalizar_resposta(True), 'Sim')
        self.assertEqual(normalizar_resposta(False), 'Não')
        self.assertEqual(normalizar_resposta('nao possui'), 'Não possui')
        self.assertEqual(normalizar_resposta(' SIM '), 'Sim')
        self.assertIsNone(normalizar_resposta('talvez'))

    def test_secoes_de_jet_ski(self):
        titulos = [s['titulo'] for s in secoes_para(jet_ski=True)]
        self.assertNotIn('MATERIAIS DE FUNDEIO', titulos)
        self.assertNotIn('EQUIPAMENTOS DE NAVEGAÇÃO', titulos)
        self.assertEqual(len(secoes_para(jet_ski=False)), len(titulos) + 2)

    def test_numeracao_sequencial_do_dia(self):
        dia = date(2025, 3, 14)
        vistoriador = criar_vistoriador()
        self.assertEqual(gerar_numero_laudo(dia), '250314A')
        Laudo.objects.create(vistoria=criar_vistoria_concluida(vistoriador), numero_laudo='250314A')
        Laudo.objects.create(vistoria=criar_vistoria_concluida(vistoriador, casco='C2'), numero_laudo='250314C')
        self.assertEqual(gerar_numero_laudo(dia), '250314B')


class PreenchimentoTests(TestCase):
    def setUp(self):
        self.vistoriador = criar_vistoriador(nome='Pedro Alves')
        self.vistoria = criar_vistoria_concluida(self.vistoriador)

    def test_dados_da_vistoria(self):
        dados = preencher_dados_laudo(self.vistoria)
        self.assertEqual(dados['nome_embarcacao'], 'Netuno')
        self.assertEqual(dados['proprietario'], 'Maria Souza')
        self.assertEqual(dados['cpf_cnpj'], '529.982.247-25')
        self.assertEqual(dados['tipo_embarcacao'], 'Lancha')
        self.assertEqual(dados['responsavel'], 'Carlos Lima')
        self.assertEqual(dados['responsavel_inspecao'], 'Pedro Alves')
        self.assertEqual(dados['valor_risco'], Decimal('250000.00'))
        self.assertEqual(dados['data_inspecao'], timezone.localdate(self.vistoria.data_conclusao))
        self.assertIn('Marina Verolme', dados['local_vistoria'])
        self.assertEqual(dados['versao'], 'BS 2021-01')
        self.assertEqual(dados['empresa_prestadora'], 'Vessel Inspection')

    def test_prioridade_requisicao_rascunho_vistoria(self):
        self.vistoria.dados_rascunho = {
            'material_casco': 'Fibra de vidro',
            'modelo_embarcacao': 'Focker 240',
            'ano_fabricacao': 'não sei',
            'equipamentos': {'ancora': 'Danforth', 'buzina': 'Elétrica', 'desconhecido': 'x'},
        }
        dados = preencher_dados_laudo(self.vistoria, {
            'material_casco': 'Alumínio',
            'equipamentos': {'buzina': 'Pneumática'},
        })
        self.assertEqual(dados['material_casco'], 'Alumínio')
        self.assertEqual(dados['modelo_embarcacao'], 'Focker 240')
        # valor inválido do rascunho é ignorado
        self.assertEqual(dados['ano_fabricacao'], 2018)
        self.assertEqual(dados['equipamentos'], {'ancora': 'Danforth', 'buzina': 'Pneumática'})

    def test_checklist_do_rascunho_normalizado(self):
        self.vistoria.dados_rascunho = {
            'checklist_eletrica': {'chave_geral': 'sim', 'cabo_arranque': 'talvez', 'pergunta_nova': 'Sim'},
            'checklist_geral': 'Sim',
        }
        dados = preencher_dados_laudo(self.vistoria)
        self.assertEqual(dados['checklist_eletrica'], {'chave_geral': 'Sim'})
        self.assertEqual(dados['checklist_geral'], {})

    def test_sem_vistoriador(self):
        self.vistoria.vistoriador = None
        self.assertIsNone(preencher_dados_laudo(self.vistoria)['responsavel_inspecao'])


@override_settings(MEDIA_ROOT=MEDIA_TESTE, UPLOAD_STRATEGY='local')
class LaudoAPITests(TestCase):
    @classmethod
    def tearDownClass(cls):
        super().tearDownClass()
        shutil.rmtree(MEDIA_TESTE, ignore_errors=True)

    def setUp(self):
        self.client = APIClient()
        self.admin = criar_admin()
        self.vistoriador = criar_vistoriador()
        self.vistoria = criar_vistoria_concluida(self.vistoriador)
        autenticar(self.client, self.admin)

    def url_vistoria(self, vistoria=None):
        return reverse('laudos_api:laudos-por-vistoria', args=[(vistoria or self.vistoria).pk])

    def criar_laudo(self, dados=None, vistoria=None):
        resp = self.client.post(self.url_vistoria(vistoria), dados or {}, format='json')
        self.assertEqual(resp.status_code, 201, resp.data)
        return resp.data

    def test_cria_laudo_pre_preenchido(self):
        laudo = self.criar_laudo({'material_casco': 'Fibra'})
        self.assertEqual(laudo['vistoria_id'], self.vistoria.pk)
        self.assertEqual(laudo['numero_laudo'], timezone.localdate().strftime('%y%m%d') + 'A')
        self.assertEqual(laudo['nome_embarcacao'], 'Netuno')
        self.assertEqual(laudo['material_casco'], 'Fibra')
        self.assertEqual(laudo['tipo_veiculo'], 'EMBARCACAO')
        self.assertIsNone(laudo['download_url'])
        self.assertTrue(AuditoriaLog.objects.filter(acao='CREATE', entidade='Laudo').exists())

        outra = criar_vistoria_concluida(self.vistoriador, casco='CASCO-200')
        self.assertTrue(self.criar_laudo(vistoria=outra)['numero_laudo'].endswith('B'))

    def test_vistoria_nao_concluida(self):
        self.vistoria.status = StatusVistoria.obter(StatusVistoria.EM_ANDAMENTO)
        self.vistoria.save()
        resp = self.client.post(self.url_vistoria(), {}, format='json')
        self.assertEqual(resp.status_code, 400)
        self.assertIn('status', resp.data['details'])

    def test_atualiza_laudo_existente(self):
        self.criar_laudo({'equipamentos': {'ancora': 'Danforth'}, 'capacidade': '8 pessoas'})
        resp = self.client.post(self.url_vistoria(), {'equipamentos': {'buzina': 'Elétrica'}}, format='json')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data['equipamentos'], {'ancora': 'Danforth', 'buzina': 'Elétrica'})
        self.assertEqual(resp.data['capacidade'], '8 pessoas')
        self.assertEqual(Laudo.objects.count(), 1)

    def test_consulta_por_vistoria(self):
        resp = self.client.get(self.url_vistoria())
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.data['error'], 'Laudo não encontrado para esta vistoria.')
        self.criar_laudo()
        self.assertEqual(self.client.get(self.url_vistoria()).status_code, 200)

    def test_checklist_normalizado_e_mesclado(self):
        laudo = self.criar_laudo({'checklist_eletrica': {'chave_geral': 'sim'}})
        self.assertEqual(laudo['checklist_eletrica'], {'chave_geral': 'Sim'})

        url = reverse('laudos_api:laudos-detail', args=[laudo['id']])
        resp = self.client.put(url, {'checklist_eletrica': {'cabo_arranque': 'nao possui'}}, format='json')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data['checklist_eletrica'], {'chave_geral': 'Sim', 'cabo_arranque': 'Não possui'})

    def test_checklist_invalido(self):
        resp = self.client.post(self.url_vistoria(), {'checklist_geral': {'carreta_condicoes': 'talvez'}},
                                format='json')
        self.assertEqual(resp.status_code, 400)
        resp = self.client.post(self.url_vistoria(), {'checklist_geral': {'pergunta_nova': 'Sim'}}, format='json')
        self.assertEqual(resp.status_code, 400)
        resp = self.client.post(self.url_vistoria(), {'equipamentos': {'radar_x': 'Sim'}}, format='json')
        self.assertEqual(resp.status_code, 400)
        self.assertFalse(Laudo.objects.exists())

    def test_gerar_pdf_e_download(self):
        tipo = TipoFotoChecklist.objects.create(codigo='FOTO001', nome_exibicao='Foto Geral', obrigatorio=True)
        armazenamento = ArmazenamentoLocal()
        armazenamento.salvar(f'vistorias/id-{self.vistoria.pk}/foto-1-1.jpg', jpeg())
        Foto.objects.create(vistoria=self.vistoria, tipo_foto=tipo,
                            url_arquivo=f'vistorias/id-{self.vistoria.pk}/foto-1-1.jpg', observacao='Proa')
        laudo = self.criar_laudo({'checklist_geral': {'carreta_condicoes': 'Sim'}})

        download = reverse('laudos_api:laudos-download', args=[laudo['id']])
        resp = self.client.get(download)
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.data['error'], 'O PDF deste laudo ainda não foi gerado.')

        resp = self.client.post(reverse('laudos_api:laudos-gerar-pdf', args=[laudo['id']]))
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.data['download_url'].endswith(f'/api/laudos/{laudo["id"]}/download'))

        gerado = Laudo.objects.get(pk=laudo['id'])
        self.assertIsNotNone(gerado.data_geracao)
        self.assertTrue(gerado.url_pdf.startswith('laudos/'))
        self.assertTrue(AuditoriaLog.objects.filter(acao='GERAR_PDF', entidade_id=gerado.pk).exists())

        resp = self.client.get(download)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp['Content-Type'], 'application/pdf')
        self.assertIn(f'laudo-{gerado.numero_laudo}.pdf', resp['Content-Disposition'])
        self.assertTrue(resp.content.startswith(b'%PDF'))

    def test_exclusao_remove_pdf(self):
        laudo = self.criar_laudo()
        self.client.post(reverse('laudos_api:laudos-gerar-pdf', args=[laudo['id']]))
        key = Laudo.objects.get(pk=laudo['id']).url_pdf
        self.assertTrue(ArmazenamentoLocal().existe(key))

        with self.captureOnCommitCallbacks(execute=True):
            resp = self.client.delete(reverse('laudos_api:laudos-detail', args=[laudo['id']]))
        self.assertEqual(resp.status_code, 204)
        self.assertFalse(ArmazenamentoLocal().existe(key))
        self.assertTrue(AuditoriaLog.objects.filter(acao='DELETE', entidade='Laudo', nivel_critico=True).exists())

    def test_vistoriador_consulta_apenas_os_proprios(self):
        laudo = self.criar_laudo()
        outro = criar_vistoriador(email='outro@sgvn.com', nome='Outro')
        self.criar_laudo(vistoria=criar_vistoria_concluida(outro, casco='CASCO-300'))

        autenticar(self.client, self.vistoriador)
        resp = self.client.get(reverse('laudos_api:laudos-list'))
        self.assertEqual([l['id'] for l in resp.data], [laudo['id']])
        self.assertEqual(self.client.post(self.url_vistoria(), {}, format='json').status_code, 403)
        resp = self.client.put(reverse('laudos_api:laudos-detail', args=[laudo['id']]),
                               {'capacidade': '2'}, format='json')
        self.assertEqual(resp.status_code, 403)


@override_settings(MEDIA_ROOT=MEDIA_TESTE, UPLOAD_STRATEGY='local')
class LaudoJetSkiPDFTests(TestCase):
    def test_pdf_de_moto_aquatica(self):
        vistoria = criar_vistoria_concluida(criar_vistoriador(), tipo='JET_SKI')
        dados = preencher_dados_laudo(vistoria)
        dados['equipamentos'] = {campo: 'Sim' for campo in sorted(CAMPOS_EQUIPAMENTOS)[:5]}
        laudo = Laudo.objects.create(vistoria=vistoria, numero_laudo='250101A', **dados)

        self.assertTrue(laudo.is_jet_ski)
        conteudo = gerar_pdf_laudo(laudo, fotos=[], armazenamento=ArmazenamentoLocal())
        self.assertTrue(conteudo.startswith(b'%PDF'))

    def test_foto_ausente_e_ignorada(self):
        vistoria = criar_vistoria_concluida(criar_vistoriador())
        tipo = TipoFotoChecklist.objects.create(codigo='FOTO001', nome_exibicao='Foto Geral')
        Foto.objects.create(vistoria=vistoria, tipo_foto=tipo, url_arquivo='vistorias/id-0/sumiu.jpg')
        laudo = Laudo.objects.create(vistoria=vistoria, numero_laudo='250101B', **preencher_dados_laudo(vistoria))

        with self.assertLogs('laudos.generator', level='WARNING'):
            conteudo = gerar_pdf_laudo(laudo, armazenamento=ArmazenamentoLocal())
        self.assertTrue(conteudo.startswith(b'%PDF'))


@override_settings(MEDIA_ROOT=MEDIA_TESTE)
class ConfiguracaoLaudoTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = criar_admin()
        self.url = reverse('laudos_api:configuracoes-laudo')
        autenticar(self.client, self.admin)

    def test_configuracao_padrao(self):
        resp = self.client.get(self.url)
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.data['padrao'])
        self.assertEqual(resp.data['empresa_prestadora'], 'Vessel Inspection')
        self.assertIsNone(resp.data['logo_url'])
        self.assertEqual(ConfiguracaoLaudo.objects.count(), 1)

    def test_atualiza_com_logo(self):
        buffer = io.BytesIO()
        Image.new('RGB', (1200, 600), (255, 255, 255)).save(buffer, format='PNG')
        logo = SimpleUploadedFile('logo.png', buffer.getvalue(), content_type='image/png')

        resp = self.client.put(self.url, {'nome_empresa': 'Náutica Segura', 'logo_empresa': logo},
                               format='multipart')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data['nome_empresa'], 'Náutica Segura')
        self.assertIn('/media/configuracoes/logo/', resp.data['logo_url'])

        configuracao = ConfiguracaoLaudo.padrao_atual()
        self.assertEqual(configuracao.usuario, self.admin)
        with Image.open(configuracao.logo_empresa.path) as img:
            self.assertLessEqual(img.width, 600)
            self.assertLessEqual(img.height, 300)
        self.assertTrue(os.path.exists(configuracao.logo_empresa.path))

    def test_logo_nao_e_recodificado_sem_novo_envio(self):
        buffer = io.BytesIO()
        Image.new('RGB', (1200, 600), (255, 255, 255)).save(buffer, format='PNG')
        logo = SimpleUploadedFile('logo.png', buffer.getvalue(), content_type='image/png')
        self.client.put(self.url, {'logo_empresa': logo}, format='multipart')
        configuracao = ConfiguracaoLaudo.padrao_atual()
        with open(configuracao.logo_empresa.path, 'rb') as f:
            original = f.read()

        with mock.patch('laudos.models.redimensionar_imagem') as redimensionar:
            resp = self.client.put(self.url, {'nota_rodape': 'Somente texto.'}, format='json')
        self.assertEqual(resp.status_code, 200)
        redimensionar.assert_not_called()
        with open(configuracao.logo_empresa.path, 'rb') as f:
            self.assertEqual(f.read(), original)

    def test_logo_publico_demais_midias_nao(self):
        buffer = io.BytesIO()
        Image.new('RGB', (300, 100), (255, 255, 255)).save(buffer, format='PNG')
        logo = SimpleUploadedFile('logo.png', buffer.getvalue(), content_type='image/png')
        self.client.put(self.url, {'logo_empresa': logo}, format='multipart')
        caminho = ConfiguracaoLaudo.padrao_atual().logo_empresa.name

        os.makedirs(os.path.join(MEDIA_TESTE, 'laudos'), exist_ok=True)
        with open(os.path.join(MEDIA_TESTE, 'laudos', 'laudo.pdf'), 'wb') as f:
            f.write(b'%PDF-1.4')

        anonimo = APIClient()
        resp = anonimo.get(f'/media/{caminho}')
        self.assertEqual(resp.status_code, 200)
        resp.close()
        self.assertEqual(anonimo.get('/media/laudos/laudo.pdf').status_code, 404)

    def test_nome_da_empresa_vai_para_o_laudo(self):
        self.client.put(self.url, {'nome_empresa': 'Náutica Segura', 'nota_rodape': 'Documento confidencial.'},
                        format='json')
        vistoria = criar_vistoria_concluida(criar_vistoriador())
        resp = self.client.post(reverse('laudos_api:laudos-por-vistoria', args=[vistoria.pk]), {}, format='json')
        self.assertEqual(resp.data['nome_empresa'], 'Náutica Segura')
        self.assertEqual(resp.data['nota_rodape'], 'Documento confidencial.')

    def test_vistoriador_nao_altera(self):
        autenticar(self.client, criar_vistoriador())
        self.assertEqual(self.client.get(self.url).status_code, 200)
        self.assertEqual(self.client.put(self.url, {'nome_empresa': 'X'}, format='json').status_code, 403)
