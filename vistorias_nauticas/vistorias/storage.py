"""
Armazenamento de arquivos (fotos de vistoria e PDFs de laudo).

Duas estratégias, escolhidas por ``settings.UPLOAD_STRATEGY``:

- ``local``: grava em disco sob ``MEDIA_ROOT``.
- ``s3``: grava no bucket S3 (ou compatível) configurado em ``AWS_*`` via boto3.

Os registros no banco guardam apenas a chave (``vistorias/id-7/foto-...jpg``),
de modo que trocar a estratégia não muda o formato salvo.
"""

import logging
import os
import random
import string
import time

from django.conf import settings
from django.utils import timezone

logger = logging.getLogger(__name__)


class ArmazenamentoError(Exception):
    """Falha genérica ao acessar o armazenamento."""


class ArmazenamentoNaoEncontrado(ArmazenamentoError):
    """O objeto solicitado não existe no armazenamento."""


# -----------------------------
# Chaves dos arquivos
# -----------------------------
def chave_foto(vistoria_id):
    """Gera a chave de uma foto: vistorias/id-<id>/foto-<timestamp>-<aleatorio>.jpg"""
    sufixo = ''.join(random.choices(string.digits, k=9))
    return f'vistorias/id-{vistoria_id}/foto-{int(time.time() * 1000)}-{sufixo}.jpg'


def chave_laudo(laudo_id, quando=None):
    quando = quando or timezone.now()
    return f'laudos/{quando.year}/{quando.month:02d}/laudo-{laudo_id}.pdf'


# -----------------------------
# Disco local
# -----------------------------
class ArmazenamentoLocal:
    estrategia = 'local'

    def __init__(self, root=None):
        self.root = str(root or settings.MEDIA_ROOT)

    def _caminho(self, key):
        if not key or not key.strip():
            raise ArmazenamentoError('Chave de armazenamento é obrigatória.')
        caminho = os.path.normpath(os.path.join(self.root, key))
        # impede chaves que escapem da raiz (ex.: ../../etc)
        if not caminho.startswith(os.path.normpath(self.root) + os.sep):
            raise ArmazenamentoError(f'Chave inválida: {key}')
        return caminho

    def salvar(self, key, conteudo, content_type=None):
        caminho = self._caminho(key)
        try:
            os.makedirs(os.path.dirname(caminho), exist_ok=True)
            with open(caminho, 'wb') as f:
                f.write(conteudo)
        except OSError as exc:
            raise ArmazenamentoError(f'Falha ao gravar {key}: {exc}') from exc
        logger.info('Arquivo salvo localmente: %s (%d bytes)', key, len(conteudo))
        return key

    def ler(self, key):
        caminho = self._caminho(key)
        if not os.path.exists(caminho):
            raise ArmazenamentoNaoEncontrado(key)
        with open(caminho, 'rb') as f:
            return f.read()

    def existe(self, key):
        return os.path.exists(self._caminho(key))

    def excluir(self, key):
        caminho = self._caminho(key)
        try:
            os.remove(caminho)
            logger.info('Arquivo removido localmente: %s', key)
        except FileNotFoundError:
            pass
        except OSError as exc:
            raise ArmazenamentoError(f'Falha ao remover {key}: {exc}') from exc

    def descricao(self):
        return {'strategy': self.estrategia, 'location': self.root}


# -----------------------------
# Bucket S3
# -----------------------------
class ArmazenamentoS3:
    estrategia = 's3'

    def __init__(self, bucket=None, access_key=None, secret_key=None, region=None, endpoint_url=None, client=None):
        self.bucket = (bucket if bucket is not None else settings.AWS_S3_BUCKET or '').strip()
        self.region = region or settings.AWS_REGION
        if not self.bucket:
            raise ArmazenamentoError('AWS_S3_BUCKET não configurado.')

        # cliente injetável para testes
        if client is not None:
            self._client = client
            return

        import boto3

        self._client = boto3.client(
            's3',
            aws_access_key_id=access_key or settings.AWS_ACCESS_KEY_ID or None,
            aws_secret_access_key=secret_key or settings.AWS_SECRET_ACCESS_KEY or None,
            region_name=self.region,
            endpoint_url=endpoint_url or settings.AWS_S3_ENDPOINT_URL,
        )

    def salvar(self, key, conteudo, content_type=None):
        try:
            self._client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=conteudo,
                ContentType=content_type or 'application/octet-stream',
            )
        except Exception as exc:
            raise self._mapear_erro(exc, key, 'upload') from exc
        logger.info('Arquivo enviado ao S3: s3://%s/%s', self.bucket, key)
        return key

    def ler(self, key):
        try:
            resposta = self._client.get_object(Bucket=self.bucket, Key=key)
            return resposta['Body'].read()
        except Exception as exc:
            raise self._mapear_erro(exc, key, 'download') from exc

    def existe(self, key):
        try:
            self._client.head_object(Bucket=self.bucket, Key=key)
            return True
        except Exception as exc:
            erro = self._mapear_erro(exc, key, 'head')
            if isinstance(erro, ArmazenamentoNaoEncontrado):
                return False
            raise erro from exc

    def excluir(self, key):
        # delete_object é idempotente no S3
        try:
            self._client.delete_object(Bucket=self.bucket, Key=key)
        except Exception as exc:
            raise self._mapear_erro(exc, key, 'delete') from exc
        logger.info('Arquivo removido do S3: s3://%s/%s', self.bucket, key)

    def descricao(self):
        return {'strategy': self.estrategia, 'location': f's3://{self.bucket}', 'region': self.region}

    def _mapear_erro(self, exc, key, acao):
        from botocore.exceptions import ClientError

        if isinstance(exc, ClientError):
            code = str((exc.response.get('Error') or {}).get('Code') or '')
            if code in {'NoSuchKey', '404', 'NotFound'}:
                return ArmazenamentoNaoEncontrado(key)
            logger.error('Erro S3 (%s) em %s: %s', acao, key, code)
            return ArmazenamentoError(f'Falha no S3 ({acao}). code={code}')
        logger.exception('Erro inesperado no S3 (%s) em %s', acao, key)
        return ArmazenamentoError(f'Falha no S3 ({acao}).')


def get_armazenamento():
    """Retorna o armazenamento configurado em ``UPLOAD_STRATEGY``."""
    estrategia = getattr(settings, 'UPLOAD_STRATEGY', 'local')
    if estrategia == 's3':
        return ArmazenamentoS3()
    if estrategia != 'local':
        logger.warning('UPLOAD_STRATEGY desconhecida (%s); usando disco local.', estrategia)
    return ArmazenamentoLocal()
