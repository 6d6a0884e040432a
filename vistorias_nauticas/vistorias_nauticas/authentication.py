"""
Autenticação da API por token no cabeçalho ``Authorization: Bearer <token>``.

Os tokens são os do ``rest_framework.authtoken`` e expiram após
``TOKEN_EXPIRATION_HOURS`` contadas a partir da emissão.
"""

from datetime import timedelta

from django.conf import settings
from django.utils import timezone
from rest_framework.authentication import TokenAuthentication
from rest_framework.authtoken.models import Token
from rest_framework.exceptions import AuthenticationFailed


def token_expirado(token):
    validade = timedelta(hours=getattr(settings, 'TOKEN_EXPIRATION_HOURS', 24))
    return token.created < timezone.now() - validade


def emitir_token(user):
    """Revoga o token anterior do usuário e emite um novo."""
    Token.objects.filter(user=user).delete()
    return Token.objects.create(user=user)


class BearerTokenAuthentication(TokenAuthentication):
    keyword = 'Bearer'

    def authenticate_credentials(self, key):
        user, token = super().authenticate_credentials(key)
        if token_expirado(token):
            token.delete()
            raise AuthenticationFailed('Token expirado.', code='token_expirado')
        return user, token
