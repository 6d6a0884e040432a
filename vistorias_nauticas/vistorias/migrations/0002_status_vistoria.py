from django.db import migrations

STATUS = [
    ('PENDENTE', 'Vistoria criada e aguardando início'),
    ('EM_ANDAMENTO', 'Vistoria em execução pelo vistoriador'),
    ('CONCLUIDA', 'Vistoria concluída, aguardando aprovação'),
    ('APROVADA', 'Vistoria aprovada pelo administrador'),
    ('REPROVADA', 'Vistoria reprovada, deve ser refeita'),
    ('CANCELADA', 'Vistoria cancelada'),
]


def criar_status(apps, schema_editor):
    StatusVistoria = apps.get_model('vistorias', 'StatusVistoria')
    for nome, descricao in STATUS:
        StatusVistoria.objects.get_or_create(nome=nome, defaults={'descricao': descricao})


class Migration(migrations.Migration):

    dependencies = [
        ('vistorias', '0001_initial'),
    ]

    operations = [
        migrations.RunPython(criar_status, migrations.RunPython.noop),
    ]
