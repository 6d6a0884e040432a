from django.conf import settings
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from usuarios.models import NivelAcesso
from usuarios.utils import criar_usuario, email_em_uso
from vistorias.models import TipoFotoChecklist

TIPOS_FOTO_PADRAO = [
    ('FOTO001', 'Foto Geral da Embarcação', 'Foto geral mostrando a embarcação completa', True),
    ('FOTO002', 'Foto do Motor', 'Foto do motor da embarcação', True),
    ('FOTO003', 'Foto do Casco', 'Foto do casco da embarcação', True),
    ('FOTO004', 'Foto do Interior', 'Foto do interior da embarcação', True),
    ('FOTO005', 'Foto dos Equipamentos de Segurança',
     'Foto dos equipamentos de segurança (coletes, extintores, etc.)', True),
    ('FOTO006', 'Foto da Documentação', 'Foto da documentação da embarcação', True),
    ('FOTO007', 'Foto do Local de Atracação', 'Foto do local onde a embarcação está atracada', False),
    ('FOTO008', 'Foto de Detalhes Específicos',
     'Foto de detalhes específicos identificados durante a vistoria', False),
]


class Command(BaseCommand):
    help = 'Cria os tipos de foto padrão do checklist e o administrador inicial.'

    def add_arguments(self, parser):
        parser.add_argument('--admin-email', default='admin@sgvn.com', help='E-mail do administrador inicial')
        parser.add_argument('--admin-senha', default=None,
                            help='Senha provisória do administrador (padrão: SENHA_PROVISORIA_PADRAO)')
        parser.add_argument('--admin-nome', default='Administrador', help='Nome do administrador inicial')

    @transaction.atomic
    def handle(self, *args, **options):
        criados = 0
        for codigo, nome, descricao, obrigatorio in TIPOS_FOTO_PADRAO:
            _, novo = TipoFotoChecklist.objects.get_or_create(
                codigo=codigo,
                defaults={'nome_exibicao': nome, 'descricao': descricao, 'obrigatorio': obrigatorio},
            )
            criados += int(novo)
        self.stdout.write(f'Tipos de foto: {criados} criado(s), {len(TIPOS_FOTO_PADRAO) - criados} já existente(s).')

        email = (options['admin_email'] or '').strip().lower()
        if not email:
            raise CommandError('Informe --admin-email.')
        if email_em_uso(email):
            self.stdout.write(f'Administrador {email} já existe; nada a fazer.')
            return

        nivel, _ = NivelAcesso.objects.get_or_create(nome=NivelAcesso.ADMINISTRADOR)
        senha = options['admin_senha'] or settings.SENHA_PROVISORIA_PADRAO
        criar_usuario(
            nome=options['admin_nome'],
            email=email,
            senha=senha,
            nivel_acesso=nivel,
            deve_atualizar_senha=True,
        )
        self.stdout.write(self.style.SUCCESS(
            f'Administrador {email} criado. A senha deve ser trocada no primeiro acesso.'
        ))
