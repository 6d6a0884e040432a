from django.db import migrations

NIVEIS = [
    ('ADMINISTRADOR', 'Acesso total ao sistema'),
    ('VISTORIADOR', 'Executa as vistorias atribuídas'),
]


def criar_niveis(apps, schema_editor):
    NivelAcesso = apps.get_model('usuarios', 'NivelAcesso')
    for nome, descricao in NIVEIS:
        NivelAcesso.objects.get_or_create(nome=nome, defaults={'descricao': descricao})


class Migration(migrations.Migration):

    dependencies = [
        ('usuarios', '0001_initial'),
    ]

    operations = [
        migrations.RunPython(criar_niveis, migrations.RunPython.noop),
    ]
