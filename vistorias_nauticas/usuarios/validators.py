"""
Validador da política de senhas, registrado em ``AUTH_PASSWORD_VALIDATORS``.

Regras: ao menos uma letra maiúscula, uma minúscula, um número e um caractere
especial. O tamanho mínimo (8) fica a cargo do ``MinimumLengthValidator``.
"""

import re

from django.core.exceptions import ValidationError


class PoliticaSenhaValidator:
    regras = (
        (r'[A-Z]', 'A senha deve conter pelo menos uma letra maiúscula.', 'senha_sem_maiuscula'),
        (r'[a-z]', 'A senha deve conter pelo menos uma letra minúscula.', 'senha_sem_minuscula'),
        (r'\d', 'A senha deve conter pelo menos um número.', 'senha_sem_numero'),
        (r'[^A-Za-z0-9]', 'A senha deve conter pelo menos um caractere especial.', 'senha_sem_especial'),
    )

    def validate(self, password, user=None):
        erros = [
            ValidationError(mensagem, code=code)
            for padrao, mensagem, code in self.regras
            if not re.search(padrao, password or '')
        ]
        if erros:
            raise ValidationError(erros)

    def get_help_text(self):
        return 'A senha deve conter letras maiúsculas e minúsculas, números e caracteres especiais.'
