import io
import shutil
import tempfile
from datetime import datetime
from unittest import mock

from botocore.exceptions import ClientError
from django.test import SimpleTestCase, override_settings

from .storage import (
    ArmazenamentoError,
    ArmazenamentoLocal,
    ArmazenamentoNaoEncontrado,
    ArmazenamentoS3,
    chave_foto,
    chave_laudo,
    get_armazenamento,
)


def erro_s3(code, operacao='GetObject'):
    return ClientError({'Error': {'Code': code, 'Message': code}}, operacao)


class ChavesTests(SimpleTestCase):
    def test_chave_foto(self):
        key = chave_foto(7)
        self.assertRegex(key, r'^vistorias/id-7/foto-\d{13}-\d{9}\.jpg$')
        self.assertNotEqual(key, chave_foto(7))

    def test_chave_laudo(self):
        self.assertEqual(chave_laudo(3, datetime(2024, 5, 9)), 'laudos/2024/05/laudo-3.pdf')


class ArmazenamentoLocalTests(SimpleTestCase):
    def setUp(self):
        self.root = tempfile.mkdtemp(prefix='sgvn-storage-')
        self.armazenamento = ArmazenamentoLocal(self.root)

    def tearDown(self):
        shutil.rmtree(self.root, ignore_errors=True)

    def test_salvar_ler_excluir(self):
        key = 'vistorias/id-1/foto-1-1.jpg'
        self.assertEqual(self.armazenamento.salvar(key, b'conteudo'), key)
        self.assertTrue(self.armazenamento.existe(key))
        self.assertEqual(self.armazenamento.ler(key), b'conteudo')

        self.armazenamento.excluir(key)
        self.assertFalse(self.armazenamento.existe(key))
        # excluir de novo não falha
        self.armazenamento.excluir(key)

    def test_ler_inexistente(self):
        with self.assertRaises(ArmazenamentoNaoEncontrado):
            self.armazenamento.ler('vistorias/id-1/nao-existe.jpg')

    def test_chave_fora_da_raiz(self):
        with self.assertRaises(ArmazenamentoError):
            self.armazenamento.salvar('../fora.jpg', b'x')
        with self.assertRaises(ArmazenamentoError):
            self.armazenamento.ler('')


class ArmazenamentoS3Tests(SimpleTestCase):
    def setUp(self):
        self.client = mock.MagicMock()
        self.armazenamento = ArmazenamentoS3(bucket='sgvn-teste', client=self.client)

    def test_salvar(self):
        self.armazenamento.salvar('laudos/2024/05/laudo-1.pdf', b'%PDF', 'application/pdf')
        self.client.put_object.assert_called_once_with(
            Bucket='sgvn-teste', Key='laudos/2024/05/laudo-1.pdf', Body=b'%PDF', ContentType='application/pdf'
        )

    def test_ler(self):
        self.client.get_object.return_value = {'Body': io.BytesIO(b'jpeg')}
        self.assertEqual(self.armazenamento.ler('k.jpg'), b'jpeg')

    def test_ler_inexistente(self):
        self.client.get_object.side_effect = erro_s3('NoSuchKey')
        with self.assertRaises(ArmazenamentoNaoEncontrado):
            self.armazenamento.ler('k.jpg')

    def test_erro_de_acesso(self):
        self.client.put_object.side_effect = erro_s3('AccessDenied', 'PutObject')
        with self.assertRaisesRegex(ArmazenamentoError, 'code=AccessDenied'):
            self.armazenamento.salvar('k.jpg', b'x')

    def test_existe(self):
        self.assertTrue(self.armazenamento.existe('k.jpg'))
        self.client.head_object.side_effect = erro_s3('404', 'HeadObject')
        self.assertFalse(self.armazenamento.existe('k.jpg'))

    def test_bucket_obrigatorio(self):
        with self.assertRaises(ArmazenamentoError):
            ArmazenamentoS3(bucket='', client=self.client)


class GetArmazenamentoTests(SimpleTestCase):
    @override_settings(UPLOAD_STRATEGY='local')
    def test_local(self):
        self.assertIsInstance(get_armazenamento(), ArmazenamentoLocal)

    @override_settings(UPLOAD_STRATEGY='ftp')
    def test_estrategia_desconhecida_usa_local(self):
        with self.assertLogs('vistorias.storage', level='WARNING'):
            self.assertIsInstance(get_armazenamento(), ArmazenamentoLocal)

    @override_settings(UPLOAD_STRATEGY='s3', AWS_S3_BUCKET='sgvn-teste', AWS_REGION='sa-east-1')
    def test_s3(self):
        armazenamento = get_armazenamento()
        self.assertIsInstance(armazenamento, ArmazenamentoS3)
        self.assertEqual(armazenamento.descricao(), {
            'strategy': 's3', 'location': 's3://sgvn-teste', 'region': 'sa-east-1',
        })
