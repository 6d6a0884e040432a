"""
Estrutura do relatório de inspeção de risco.

Cada seção lista pares ``(rótulo, campo)``; os números dos itens (1.1, 1.2...)
são atribuídos na hora de desenhar, pois moto aquática não tem as seções de
fundeio e navegação. ``{veiculo}`` no texto é trocado por "moto aquática" ou
"embarcação".

Os campos das seções de equipamentos ficam no JSON ``Laudo.equipamentos``;
os demais são colunas do modelo.
"""

RESPOSTAS_CHECKLIST = ('Sim', 'Não', 'Não possui')

# campo opcional: só é impresso quando preenchido
OPCIONAL = True

DADOS_GERAIS = {
    'titulo': 'DADOS GERAIS',
    'numerada': False,
    'campos': [
        ('Nome da {veiculo}', 'nome_embarcacao'),
        ('Local de Guarda', 'local_guarda'),
        ('Proprietário', 'proprietario'),
        ('CPF / CNPJ', 'cpf_cnpj'),
        ('Endereço do Proprietário', 'endereco_proprietario'),
        ('Responsável', 'responsavel'),
        ('Data da Inspeção', 'data_inspecao'),
        ('Local da Vistoria', 'local_vistoria'),
        ('Empresa Prestadora', 'empresa_prestadora'),
        ('Responsável pela Inspeção', 'responsavel_inspecao'),
        ('Participantes na Inspeção', 'participantes_inspecao'),
    ],
}

DADOS_EMBARCACAO = {
    'titulo': 'DADOS DA {VEICULO}',
    'campos': [
        ('Inscrição na Capitania dos Portos', 'inscricao_capitania'),
        ('Estaleiro Construtor', 'estaleiro_construtor'),
        ('Tipo de Embarcação', 'tipo_embarcacao'),
        ('Modelo', 'modelo_embarcacao'),
        ('Ano de Fabricação', 'ano_fabricacao'),
        ('Capacidade', 'capacidade'),
        ('Classificação da Embarcação', 'classificacao_embarcacao'),
        ('Área de Navegação', 'area_navegacao'),
        ('Situação perante a Capitania dos Portos', 'situacao_capitania'),
        ('Valor em Risco', 'valor_risco'),
    ],
}

CASCO = {
    'titulo': 'CASCO',
    'campos': [
        ('Material do Casco', 'material_casco'),
        ('Observações', 'observacoes_casco'),
    ],
}

PROPULSAO = {
    'titulo': 'PROPULSÃO',
    'campos': [
        ('Quantidade de Motores', 'quantidade_motores'),
        ('Tipo', 'tipo_motor'),
        ('Fabricante do(s) Motor(es)', 'fabricante_motor'),
        ('Modelo do(s) Motor(es)', 'modelo_motor'),
        ('Número(s) de Série', 'numero_serie_motor'),
        ('Potência do(s) Motor(es)', 'potencia_motor'),
        ('Combustível Utilizado', 'combustivel_utilizado'),
        ('Capacidade do Tanque de Combustível', 'capacidade_tanque'),
        ('Ano de Fabricação', 'ano_fabricacao_motor'),
        ('Número de Hélices e Material', 'numero_helices'),
        ('Rabeta / Reversora', 'rabeta_reversora'),
        ('Blower', 'blower'),
    ],
}

SISTEMAS_ELETRICOS = {
    'titulo': 'SISTEMAS ELÉTRICOS E DE SUPORTE',
    'campos': [
        ('Quantidade de Baterias', 'quantidade_baterias'),
        ('Marca das Baterias', 'marca_baterias'),
        ('Capacidade das Baterias (Ah)', 'capacidade_baterias'),
        ('Carregador de Bateria', 'carregador_bateria'),
        ('Transformador', 'transformador'),
        ('Quantidade de Geradores', 'quantidade_geradores'),
        ('Fabricante do(s) Gerador(es)', 'fabricante_geradores'),
        ('Tipo e Modelo do(s) Gerador(es)', 'tipo_modelo_geradores'),
        ('Capacidade de Geração', 'capacidade_geracao'),
        ('Quantidade de Bombas de Porão', 'quantidade_bombas_porao'),
        ('Fabricante da(s) Bomba(s) de Porão', 'fabricante_bombas_porao'),
        ('Modelo da(s) Bomba(s) de Porão', 'modelo_bombas_porao'),
        ('Quantidade de Bombas de Água Doce', 'quantidade_bombas_agua_doce'),
        ('Fabricante da(s) Bomba(s) de Água Doce', 'fabricante_bombas_agua_doce'),
        ('Modelo da(s) Bomba(s) de Água Doce', 'modelo_bombas_agua_doce'),
        ('Observações', 'observacoes_eletricos', OPCIONAL),
    ],
    'equipamentos': True,
}

MATERIAIS_FUNDEIO = {
    'titulo': 'MATERIAIS DE FUNDEIO',
    'campos': [
        ('Guincho Elétrico', 'guincho_eletrico'),
        ('Âncora', 'ancora'),
        ('Cabos', 'cabos'),
    ],
    'equipamentos': True,
    'exceto_jet_ski': True,
}

EQUIPAMENTOS_NAVEGACAO = {
    'titulo': 'EQUIPAMENTOS DE NAVEGAÇÃO',
    'campos': [
        ('Agulha Giroscópica', 'agulha_giroscopica'),
        ('Agulha Magnética', 'agulha_magnetica'),
        ('Antena', 'antena'),
        ('Bidata', 'bidata'),
        ('Barômetro', 'barometro'),
        ('Buzina', 'buzina'),
        ('Conta Giros', 'conta_giros'),
        ('Farol de Milha', 'farol_milha'),
        ('GPS', 'gps'),
        ('Higrômetro', 'higrometro'),
        ('Horímetro', 'horimetro'),
        ('Limpador de Para-brisas', 'limpador_parabrisa'),
        ('Manômetros', 'manometros'),
        ('Odômetro de Fundo', 'odometro_fundo'),
        ('Passarela de Embarque', 'passarela_embarque'),
        ('Piloto Automático', 'piloto_automatico'),
        ('PSI', 'psi'),
        ('Radar', 'radar'),
        ('Rádio SSB', 'radio_ssb'),
        ('Rádio VHF', 'radio_vhf'),
        ('Radiogoniômetro', 'radiogoniometro'),
        ('Sonda', 'sonda'),
        ('Speed Log', 'speed_log'),
        ('Strobow', 'strobow'),
        ('Termômetro', 'termometro'),
        ('Voltímetro', 'voltimetro'),
        ('Outros', 'outros_equipamentos', OPCIONAL),
    ],
    'equipamentos': True,
    'exceto_jet_ski': True,
}

COMBATE_INCENDIO = {
    'titulo': 'SISTEMAS DE COMBATE A INCÊNDIO',
    'campos': [
        ('Extintores Automáticos', 'extintores_automaticos'),
        ('Extintores Portáteis', 'extintores_portateis'),
        ('Outros', 'outros_incendio', OPCIONAL),
        ('Atendimento às Normas de Segurança', 'atendimento_normas'),
    ],
    'equipamentos': True,
}

VISTORIA = {
    'titulo': 'VISTORIA',
    'campos': [
        ('Acúmulo de água no fundo da embarcação', 'acumulo_agua'),
        ('Avarias no casco', 'avarias_casco'),
        ('Estado Geral de Limpeza e Conservação', 'estado_geral_limpeza'),
        ('Teste de Funcionamento do Motor Propulsor', 'teste_funcionamento_motor'),
        ('Funcionamento de Bombas de Porão', 'funcionamento_bombas_porao'),
        ('Manutenção', 'manutencao'),
        ('Observações', 'observacoes_vistoria', OPCIONAL),
    ],
}

INSTALACOES_ELETRICAS = {
    'titulo': 'INSTALAÇÕES ELÉTRICAS',
    'checklist': 'checklist_eletrica',
    'campos': [
        ('Os terminais de cabos elétricos estão devidamente estanhados?', 'terminais_estanhados'),
        ('Circuitos elétricos estão protegidos por disjuntores ou fusíveis?', 'circuitos_protegidos'),
        ('A chave geral é de uso náutico, está em local de fácil acesso e protegido de respingos?',
         'chave_geral'),
        ('Os terminais de cabos de baterias estão devidamente prensados?', 'terminais_baterias'),
        ('As baterias estão devidamente fixadas, sem apresentar movimento?', 'baterias_fixadas'),
        ('A passagem dos chicotes elétricos pelas anteparas estão protegidos com anéis de borracha '
         'para evitar danos às capas de fiação?', 'passagem_chicotes'),
        ('O cabo de alimentação do motor de arranque tem fusível próprio?', 'cabo_arranque'),
    ],
}

INSTALACAO_HIDRAULICA = {
    'titulo': 'INSTALAÇÃO HIDRÁULICA',
    'checklist': 'checklist_hidraulica',
    'campos': [
        ('O material de fabricação dos tanques de combustível está de acordo com o combustível '
         'utilizado pela embarcação?', 'material_tanques'),
        ('As abraçadeiras usadas a bordo são de aço inox?', 'abracadeiras_inox'),
    ],
}

GERAL = {
    'titulo': 'GERAL',
    'checklist': 'checklist_geral',
    'campos': [
        ('A carreta da embarcação se encontra em boas condições e com manutenção em dia?',
         'carreta_condicoes'),
    ],
}

SECOES = [
    DADOS_GERAIS,
    DADOS_EMBARCACAO,
    CASCO,
    PROPULSAO,
    SISTEMAS_ELETRICOS,
    MATERIAIS_FUNDEIO,
    EQUIPAMENTOS_NAVEGACAO,
    COMBATE_INCENDIO,
    VISTORIA,
]

SECOES_CHECKLIST = [INSTALACOES_ELETRICAS, INSTALACAO_HIDRAULICA, GERAL]


def _chaves(secoes):
    return {campo[1] for secao in secoes for campo in secao['campos']}


CAMPOS_EQUIPAMENTOS = _chaves(s for s in SECOES if s.get('equipamentos'))

CHAVES_CHECKLIST = {secao['checklist']: _chaves([secao]) for secao in SECOES_CHECKLIST}


def secoes_para(jet_ski):
    """Seções aplicáveis ao tipo de embarcação."""
    return [s for s in SECOES if not (jet_ski and s.get('exceto_jet_ski'))]
