
"""
Configurações do projeto Django vistorias_nauticas (SGVN).

Inclui carregamento de variáveis de ambiente, configuração de apps, middlewares, banco de dados,
armazenamento de uploads (local ou S3), autenticação da API, logging e internacionalização.
"""

import os
from pathlib import Path

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent


# -------------------------------------------------------------------
# Função utilitária para carregar variáveis de ambiente de um arquivo .env
# Procura o .env na pasta do projeto e na raiz do repositório
# -------------------------------------------------------------------
def _load_env_file(path):
    """
    Carrega variáveis de ambiente de um arquivo .env (key=value por linha).
    Ignora linhas comentadas ou inválidas.
    """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            for line in f:
                line = line.strip()
                if not line or line.startswith('#') or '=' not in line:
                    continue
                k, v = line.split('=', 1)
                os.environ.setdefault(k.strip(), v.strip().strip('"').strip("'"))
    except OSError:
        pass


env_candidates = [
    os.path.join(BASE_DIR, '.env'),            # pasta do projeto
    os.path.join(BASE_DIR.parent, '.env'),     # raiz do repositório
]
for env_path in env_candidates:
    if os.path.exists(env_path):
        _load_env_file(env_path)
        break


def _env_bool(name, default='false'):
    return os.environ.get(name, default).lower() in ('1', 'true', 'yes')


# -------------------------------------------------------------------
# Segurança
# -------------------------------------------------------------------

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = os.environ.get(
    'DJANGO_SECRET_KEY',
    'django-insecure-sgvn-dev-0c9#kq1v@y7d!t2s8r3w$e5u6i4o%p0z',
)

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = _env_bool('DJANGO_DEBUG', 'false')

ALLOWED_HOSTS = [h.strip() for h in os.environ.get('DJANGO_ALLOWED_HOSTS', '*').split(',') if h.strip()]

# URL pública da API, usada para montar links absolutos de download
API_BASE_URL = os.environ.get('API_BASE_URL', '').rstrip('/')


# -------------------------------------------------------------------
# Configuração de arquivos de mídia (fotos de vistoria e PDFs de laudo)
# -------------------------------------------------------------------
MEDIA_URL = '/media/'
MEDIA_ROOT = os.environ.get('MEDIA_ROOT', os.path.join(BASE_DIR, 'media'))

# Cria a pasta de mídia ao importar settings, se não existir
try:
    os.makedirs(MEDIA_ROOT, exist_ok=True)
except OSError:
    pass

# 'local' grava em MEDIA_ROOT; 's3' envia para o bucket configurado abaixo
UPLOAD_STRATEGY = os.environ.get('UPLOAD_STRATEGY', 'local').lower()
UPLOAD_MAX_BYTES = int(os.environ.get('UPLOAD_MAX_BYTES', str(10 * 1024 * 1024)))

AWS_ACCESS_KEY_ID = os.environ.get('AWS_ACCESS_KEY_ID', '')
AWS_SECRET_ACCESS_KEY = os.environ.get('AWS_SECRET_ACCESS_KEY', '')
AWS_REGION = os.environ.get('AWS_REGION', 'us-east-1')
AWS_S3_BUCKET = os.environ.get('AWS_S3_BUCKET', '')
AWS_S3_ENDPOINT_URL = os.environ.get('AWS_S3_ENDPOINT_URL') or None


# -------------------------------------------------------------------
# Definição das aplicações instaladas
# -------------------------------------------------------------------

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    'rest_framework',
    'rest_framework.authtoken',
    'auditoria',
    'usuarios',
    'vistorias',
    'laudos',
]


# -------------------------------------------------------------------
# Configuração do Django REST Framework (autenticação, permissões, throttling)
# -------------------------------------------------------------------
REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': (
        'vistorias_nauticas.authentication.BearerTokenAuthentication',
    ),
    'DEFAULT_PERMISSION_CLASSES': (
        'rest_framework.permissions.IsAuthenticated',
        'usuarios.permissions.SenhaAtualizada',
    ),
    'EXCEPTION_HANDLER': 'vistorias_nauticas.exceptions.api_exception_handler',
    # Os escopos são referenciados pelos throttles customizados
    'DEFAULT_THROTTLE_RATES': {
        'login': os.environ.get('LOGIN_THROTTLE_RATE', '10/min'),
    },
}

# Validade do token de acesso (horas)
TOKEN_EXPIRATION_HOURS = int(os.environ.get('TOKEN_EXPIRATION_HOURS', '24'))

# Senha provisória atribuída a usuários criados pelo administrador
SENHA_PROVISORIA_PADRAO = os.environ.get('SENHA_PROVISORIA_PADRAO', 'mudar123')


# -------------------------------------------------------------------
# Middlewares do projeto
# -------------------------------------------------------------------
MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "whitenoise.middleware.WhiteNoiseMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "auditoria.middleware.AuditoriaMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]


# -------------------------------------------------------------------
# Configuração de URLs, templates e WSGI
# -------------------------------------------------------------------
ROOT_URLCONF = "vistorias_nauticas.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "vistorias_nauticas.wsgi.application"


# -------------------------------------------------------------------
# Configuração do banco de dados
# -------------------------------------------------------------------

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.environ.get('SQLITE_PATH', BASE_DIR / "db.sqlite3"),
    }
}


# -------------------------------------------------------------------
# Validação de senha
# -------------------------------------------------------------------

AUTH_PASSWORD_VALIDATORS = [
    {
        "NAME": "django.contrib.auth.password_validation.MinimumLengthValidator",
        "OPTIONS": {"min_length": 8},
    },
    {
        "NAME": "django.contrib.auth.password_validation.CommonPasswordValidator",
    },
    {
        "NAME": "usuarios.validators.PoliticaSenhaValidator",
    },
]


# -------------------------------------------------------------------
# Internacionalização e fuso horário
# -------------------------------------------------------------------

LANGUAGE_CODE = "pt-br"

TIME_ZONE = "America/Sao_Paulo"

USE_I18N = True

USE_TZ = True


# -------------------------------------------------------------------
# Arquivos estáticos (admin)
# -------------------------------------------------------------------

STATIC_URL = "/static/"
STATIC_ROOT = os.path.join(BASE_DIR, 'staticfiles')

STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
    "staticfiles": {"BACKEND": "whitenoise.storage.CompressedManifestStaticFilesStorage"},
}


# -------------------------------------------------------------------
# Tipo de campo primário padrão para modelos
# -------------------------------------------------------------------

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"


# -------------------------------------------------------------------
# Logging
# -------------------------------------------------------------------
LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()
LOG_DIR = Path(os.environ.get('LOG_DIR', BASE_DIR / 'logs'))

try:
    os.makedirs(LOG_DIR, exist_ok=True)
except OSError:
    pass

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{levelname} {asctime} {name} {process:d} {message}',
            'style': '{',
        },
        'simple': {
            'format': '{levelname} {name} {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'level': LOG_LEVEL,
            'class': 'logging.StreamHandler',
            'formatter': 'simple',
        },
        'file': {
            'level': LOG_LEVEL,
            'class': 'logging.FileHandler',
            'filename': LOG_DIR / 'sgvn.log',
            'formatter': 'verbose',
            'delay': True,
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'WARNING',
    },
    'loggers': {
        'django': {
            'handlers': ['console', 'file'],
            'level': 'INFO',
            'propagate': False,
        },
        **{
            app: {
                'handlers': ['console', 'file'],
                'level': LOG_LEVEL,
                'propagate': False,
            }
            for app in ('vistorias_nauticas', 'usuarios', 'vistorias', 'laudos', 'auditoria')
        },
    },
}
