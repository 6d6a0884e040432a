"""
Modelos de usuários e níveis de acesso.

Decisões de projeto:

- A senha fica no ``User`` do Django (hashers padrão); ``Usuario`` é o perfil
    da aplicação, ligado por ``Usuario.user`` (``related_name='profile'``).
- ``Usuario.ativo`` é espelhado em ``User.is_active`` para que a autenticação
    por token recuse usuários desativados.
- O email é a credencial de login e é normalizado em minúsculas.
"""

from django.conf import settings
from django.db import models, transaction


# -----------------------------
# Níveis de acesso
# -----------------------------
class NivelAcesso(models.Model):
    ADMINISTRADOR = 'ADMINISTRADOR'
    VISTORIADOR = 'VISTORIADOR'

    nome = models.CharField(max_length=50, unique=True)
    descricao = models.CharField(max_length=255, blank=True, null=True)

    class Meta:
        ordering = ['id']
        verbose_name = 'nível de acesso'
        verbose_name_plural = 'níveis de acesso'

    def __str__(self):
        return self.nome


# -----------------------------
# Usuário
# -----------------------------
class Usuario(models.Model):
    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='profile')
    nome = models.CharField(max_length=150)
    email = models.EmailField(unique=True)
    nivel_acesso = models.ForeignKey(NivelAcesso, on_delete=models.PROTECT, related_name='usuarios')
    ativo = models.BooleanField(default=True)
    # obriga a troca de senha no próximo acesso (senha provisória ou resetada)
    deve_atualizar_senha = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['nome']

    @property
    def is_administrador(self):
        return self.nivel_acesso.nome == NivelAcesso.ADMINISTRADOR

    @property
    def is_vistoriador(self):
        return self.nivel_acesso.nome == NivelAcesso.VISTORIADOR

    def save(self, *args, **kwargs):
        self.email = (self.email or '').strip().lower()
        super().save(*args, **kwargs)

        # mantém o User do Django sincronizado com o perfil
        user = self.user
        campos = []
        if user.is_active != self.ativo:
            user.is_active = self.ativo
            campos.append('is_active')
        if user.email != self.email:
            user.email = self.email
            user.username = self.email
            campos += ['email', 'username']
        if campos:
            user.save(update_fields=campos)

    def delete(self, *args, **kwargs):
        # remove também o User do Django (o perfil é apagado em cascata)
        with transaction.atomic():
            user = self.user
            result = super().delete(*args, **kwargs)
            user.delete()
        return result

    def __str__(self):
        return f'{self.nome} <{self.email}>'
