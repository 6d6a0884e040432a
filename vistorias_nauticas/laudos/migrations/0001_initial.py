from django.db import migrations, models
import django.db.models.deletion


def _texto(max_length=255):
    return models.CharField(blank=True, max_length=max_length, null=True)


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('usuarios', '0001_initial'),
        ('vistorias', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Laudo',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('numero_laudo', models.CharField(max_length=20, unique=True)),
                ('versao', models.CharField(default='BS 2021-01', max_length=20)),
                ('url_pdf', models.CharField(blank=True, max_length=512, null=True)),
                ('data_geracao', models.DateTimeField(blank=True, null=True)),
                ('nome_empresa', _texto(150)),
                ('nota_rodape', models.TextField(blank=True, null=True)),
                ('empresa_prestadora', _texto(150)),
                ('nome_embarcacao', _texto()),
                ('local_guarda', _texto()),
                ('proprietario', _texto()),
                ('cpf_cnpj', _texto(20)),
                ('endereco_proprietario', _texto()),
                ('responsavel', _texto()),
                ('data_inspecao', models.DateField(blank=True, null=True)),
                ('local_vistoria', _texto()),
                ('responsavel_inspecao', _texto()),
                ('participantes_inspecao', models.TextField(blank=True, null=True)),
                ('inscricao_capitania', _texto()),
                ('estaleiro_construtor', _texto()),
                ('tipo_embarcacao', _texto()),
                ('modelo_embarcacao', _texto()),
                ('ano_fabricacao', models.PositiveIntegerField(blank=True, null=True)),
                ('capacidade', _texto()),
                ('classificacao_embarcacao', _texto()),
                ('area_navegacao', _texto()),
                ('situacao_capitania', _texto()),
                ('valor_risco', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('material_casco', _texto()),
                ('observacoes_casco', models.TextField(blank=True, null=True)),
                ('quantidade_motores', models.PositiveIntegerField(blank=True, null=True)),
                ('tipo_motor', _texto()),
                ('fabricante_motor', _texto()),
                ('modelo_motor', _texto()),
                ('numero_serie_motor', _texto()),
                ('potencia_motor', _texto()),
                ('combustivel_utilizado', _texto()),
                ('capacidade_tanque', _texto()),
                ('ano_fabricacao_motor', _texto(10)),
                ('numero_helices', _texto()),
                ('rabeta_reversora', _texto()),
                ('blower', _texto()),
                ('equipamentos', models.JSONField(blank=True, default=dict)),
                ('acumulo_agua', _texto()),
                ('avarias_casco', _texto()),
                ('estado_geral_limpeza', _texto()),
                ('teste_funcionamento_motor', _texto()),
                ('funcionamento_bombas_porao', _texto()),
                ('manutencao', _texto()),
                ('observacoes_vistoria', models.TextField(blank=True, null=True)),
                ('checklist_eletrica', models.JSONField(blank=True, default=dict)),
                ('checklist_hidraulica', models.JSONField(blank=True, default=dict)),
                ('checklist_geral', models.JSONField(blank=True, default=dict)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('vistoria', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='laudo', to='vistorias.vistoria')),
            ],
            options={
                'ordering': ['-created_at', '-id'],
            },
        ),
        migrations.CreateModel(
            name='ConfiguracaoLaudo',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('nome_empresa', _texto(150)),
                ('logo_empresa', models.ImageField(blank=True, null=True, upload_to='configuracoes/logo/')),
                ('nota_rodape', models.TextField(blank=True, null=True)),
                ('empresa_prestadora', models.CharField(default='Vessel Inspection', max_length=150)),
                ('padrao', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('usuario', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to='usuarios.usuario')),
            ],
            options={
                'verbose_name': 'configuração de laudo',
                'verbose_name_plural': 'configurações de laudo',
            },
        ),
    ]
