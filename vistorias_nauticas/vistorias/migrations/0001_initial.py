import decimal
import django.core.validators
from django.db import migrations, models
import django.db.models.deletion
import vistorias.validators


def _valor():
    return models.DecimalField(
        blank=True, decimal_places=2, max_digits=12, null=True,
        validators=[django.core.validators.MinValueValidator(0), django.core.validators.MaxValueValidator(decimal.Decimal('99999999.99'))],
    )


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('usuarios', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='StatusVistoria',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('nome', models.CharField(max_length=50, unique=True)),
                ('descricao', models.CharField(blank=True, max_length=255, null=True)),
            ],
            options={
                'verbose_name': 'status de vistoria',
                'verbose_name_plural': 'status de vistoria',
                'ordering': ['id'],
            },
        ),
        migrations.CreateModel(
            name='Embarcacao',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('nome', models.CharField(max_length=150)),
                ('numero_casco', models.CharField(max_length=50, unique=True)),
                ('tipo_embarcacao', models.CharField(choices=[('JET_SKI', 'Jet Ski'), ('LANCHA', 'Lancha'), ('IATE', 'Iate'), ('VELEIRO', 'Veleiro'), ('BALSA', 'Balsa'), ('REBOCADOR', 'Rebocador'), ('EMPURRADOR', 'Empurrador'), ('BARCO', 'Barco'), ('EMBARCACAO_COMERCIAL', 'Embarcação Comercial'), ('OUTRO', 'Outro')], default='LANCHA', max_length=30)),
                ('nr_inscricao_barco', models.CharField(blank=True, max_length=50, null=True)),
                ('ano_fabricacao', models.PositiveIntegerField(blank=True, null=True, validators=[django.core.validators.MinValueValidator(1900), django.core.validators.MaxValueValidator(2100)])),
                ('valor_embarcacao', _valor()),
                ('proprietario_nome', models.CharField(blank=True, max_length=150, null=True)),
                ('proprietario_cpf', models.CharField(blank=True, max_length=14, null=True, validators=[vistorias.validators.validar_cpf])),
                ('proprietario_email', models.EmailField(blank=True, max_length=254, null=True)),
                ('proprietario_telefone_e164', models.CharField(blank=True, max_length=20, null=True, validators=[vistorias.validators.validar_telefone_e164])),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'embarcação',
                'verbose_name_plural': 'embarcações',
                'ordering': ['nome'],
            },
        ),
        migrations.CreateModel(
            name='Local',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('tipo', models.CharField(choices=[('MARINA', 'Marina'), ('RESIDENCIA', 'Residência')], max_length=20)),
                ('nome_local', models.CharField(blank=True, max_length=150, null=True)),
                ('cep', models.CharField(blank=True, max_length=9, null=True, validators=[vistorias.validators.validar_cep])),
                ('logradouro', models.CharField(blank=True, max_length=255, null=True)),
                ('numero', models.CharField(blank=True, max_length=20, null=True)),
                ('complemento', models.CharField(blank=True, max_length=100, null=True)),
                ('bairro', models.CharField(blank=True, max_length=100, null=True)),
                ('cidade', models.CharField(blank=True, max_length=100, null=True)),
                ('estado', models.CharField(blank=True, max_length=2, null=True, validators=[vistorias.validators.validar_uf])),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name_plural': 'locais',
            },
        ),
        migrations.CreateModel(
            name='TipoFotoChecklist',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('codigo', models.CharField(max_length=20, unique=True)),
                ('nome_exibicao', models.CharField(max_length=100)),
                ('descricao', models.TextField(blank=True, null=True)),
                ('obrigatorio', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'tipo de foto do checklist',
                'verbose_name_plural': 'tipos de foto do checklist',
                'ordering': ['codigo'],
            },
        ),
        migrations.CreateModel(
            name='Vistoria',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('dados_rascunho', models.JSONField(blank=True, null=True)),
                ('valor_embarcacao', _valor()),
                ('valor_vistoria', _valor()),
                ('valor_vistoriador', _valor()),
                ('contato_acompanhante_tipo', models.CharField(blank=True, choices=[('PROPRIETARIO', 'Proprietário'), ('MARINHEIRO', 'Marinheiro'), ('TERCEIRO', 'Terceiro')], max_length=20, null=True)),
                ('contato_acompanhante_nome', models.CharField(blank=True, max_length=150, null=True)),
                ('contato_acompanhante_telefone_e164', models.CharField(blank=True, max_length=20, null=True, validators=[vistorias.validators.validar_telefone_e164])),
                ('contato_acompanhante_email', models.EmailField(blank=True, max_length=254, null=True)),
                ('observacoes', models.TextField(blank=True, null=True)),
                ('data_inicio', models.DateTimeField(blank=True, null=True)),
                ('data_conclusao', models.DateTimeField(blank=True, null=True)),
                ('data_aprovacao', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('administrador', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='vistorias_criadas', to='usuarios.usuario')),
                ('aprovado_por', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='vistorias_aprovadas', to='usuarios.usuario')),
                ('embarcacao', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='vistorias', to='vistorias.embarcacao')),
                ('local', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='vistorias', to='vistorias.local')),
                ('status', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='vistorias', to='vistorias.statusvistoria')),
                ('vistoriador', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='vistorias_atribuidas', to='usuarios.usuario')),
            ],
            options={
                'ordering': ['-created_at', '-id'],
            },
        ),
        migrations.CreateModel(
            name='Foto',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('url_arquivo', models.CharField(max_length=512)),
                ('observacao', models.TextField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('tipo_foto', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='fotos', to='vistorias.tipofotochecklist')),
                ('vistoria', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='fotos', to='vistorias.vistoria')),
            ],
            options={
                'ordering': ['tipo_foto__codigo', 'id'],
            },
        ),
    ]
