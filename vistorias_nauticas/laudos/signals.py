"""
Remove o PDF do armazenamento quando o laudo é excluído (inclusive em cascata
com a vistoria).
"""

from django.db import transaction
from django.db.models.signals import post_delete
from django.dispatch import receiver

from vistorias.signals import remover_arquivo
from .models import Laudo


@receiver(post_delete, sender=Laudo)
def remover_pdf_do_laudo(sender, instance, **kwargs):
    key = instance.url_pdf
    if key:
        transaction.on_commit(lambda: remover_arquivo(key))
