"""
Signals de limpeza do armazenamento.

Ao excluir uma Foto (diretamente ou em cascata com a vistoria), o arquivo é
removido do disco/S3 depois que a transação for confirmada.
"""

import logging

from django.db import transaction
from django.db.models.signals import post_delete
from django.dispatch import receiver

from .models import Foto
from .storage import ArmazenamentoError, get_armazenamento

logger = logging.getLogger(__name__)


def remover_arquivo(key):
    """Remove ``key`` do armazenamento sem propagar falhas."""
    if not key:
        return
    try:
        get_armazenamento().excluir(key)
    except ArmazenamentoError:
        logger.exception('Não foi possível remover o arquivo %s', key)


@receiver(post_delete, sender=Foto)
def remover_arquivo_da_foto(sender, instance, **kwargs):
    key = instance.url_arquivo
    transaction.on_commit(lambda: remover_arquivo(key))
