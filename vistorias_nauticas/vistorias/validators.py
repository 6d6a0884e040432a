"""
Validadores de campos brasileiros usados nos cadastros de embarcação e local.
"""

import re

from django.core.exceptions import ValidationError

UFS = {
    'AC', 'AL', 'AP', 'AM', 'BA', 'CE', 'DF', 'ES', 'GO', 'MA', 'MT', 'MS', 'MG', 'PA',
    'PB', 'PR', 'PE', 'PI', 'RJ', 'RN', 'RS', 'RO', 'RR', 'SC', 'SP', 'SE', 'TO',
}


def cpf_valido(cpf):
    digitos = re.sub(r'\D', '', cpf or '')
    if len(digitos) != 11 or digitos == digitos[0] * 11:
        return False
    for tamanho in (9, 10):
        soma = sum(int(d) * peso for d, peso in zip(digitos[:tamanho], range(tamanho + 1, 1, -1)))
        dv = (soma * 10) % 11 % 10
        if dv != int(digitos[tamanho]):
            return False
    return True


def validar_cpf(value):
    if value and not cpf_valido(value):
        raise ValidationError('CPF inválido.', code='cpf_invalido')


def validar_telefone_e164(value):
    if value and not re.fullmatch(r'\+[1-9]\d{7,14}', value):
        raise ValidationError('Telefone deve estar no formato E.164 (ex.: +5511999998888).', code='telefone_invalido')


def validar_uf(value):
    if value and value.upper() not in UFS:
        raise ValidationError('UF inválida.', code='uf_invalida')


def validar_cep(value):
    if value and not re.fullmatch(r'\d{5}-?\d{3}', value):
        raise ValidationError('CEP inválido.', code='cep_invalido')
