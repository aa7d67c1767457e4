from pathlib import Path
import os

import environ
import datetime
from django.core.exceptions import ImproperlyConfigured

BASE_DIR = Path(__file__).resolve().parent.parent

env = environ.Env(
    DEBUG=(bool, False),
)

# Optional local env file support (deployments usually set env vars directly).
environ.Env.read_env(os.path.join(BASE_DIR, ".env"))

DEBUG = env.bool("DEBUG", default=False)

SECRET_KEY = env(
    "SECRET_KEY",
    default="django-insecure-dev-only-change-me",
)
if not DEBUG and SECRET_KEY.startswith("django-insecure-dev-only"):
    raise ImproperlyConfigured("SECRET_KEY must be set in production.")

_dev_allowed_hosts = ["localhost", "127.0.0.1", "[::1]"]
ALLOWED_HOSTS = env.list(
    "ALLOWED_HOSTS",
    default=_dev_allowed_hosts if DEBUG else [],
)
if not DEBUG and not ALLOWED_HOSTS:
    raise ImproperlyConfigured("ALLOWED_HOSTS must be set in production.")

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'core',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'config.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'config.wsgi.application'

# Database
# Vote submission needs a database with multi-row transactions; production
# runs on PostgreSQL. SQLite is only a local-development default.
DATABASES = {
    'default': {
        **env.db(
            'DATABASE_URL',
            default=f'sqlite:///{BASE_DIR / "db.sqlite3"}',
        ),
    }
}

if DATABASES['default']['ENGINE'] == 'django.db.backends.sqlite3':
    # SQLite has no row locks; take the write lock when a transaction starts
    # so concurrent vote submissions queue instead of failing mid-transaction.
    DATABASES['default'].setdefault('OPTIONS', {}).update(
        transaction_mode='IMMEDIATE',
        timeout=env.int('SQLITE_BUSY_TIMEOUT_SECONDS', default=20),
    )

# Internationalization
LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True

# Security
# Keep these production-oriented but configurable; many deployments sit behind
# a TLS-terminating proxy/load balancer.
if not DEBUG:
    if env.bool("SECURE_PROXY_SSL", default=True):
        SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")

    SECURE_SSL_REDIRECT = env.bool("SECURE_SSL_REDIRECT", default=False)
    SESSION_COOKIE_SECURE = env.bool("SESSION_COOKIE_SECURE", default=True)
    CSRF_COOKIE_SECURE = env.bool("CSRF_COOKIE_SECURE", default=True)
    SECURE_CONTENT_TYPE_NOSNIFF = True
    SECURE_REFERRER_POLICY = env("SECURE_REFERRER_POLICY", default="same-origin")

    CSRF_TRUSTED_ORIGINS = env.list("CSRF_TRUSTED_ORIGINS", default=[])

STATIC_URL = '/static/'
STATIC_ROOT = BASE_DIR / "staticfiles"

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# Elections
# Election used when a caller does not name one.
DEFAULT_ELECTION_ID = env("DEFAULT_ELECTION_ID", default="default")

# Treat elections without a stored row as open. Convenient while bootstrapping
# a deployment; set to False once every election is created explicitly.
ELECTION_OPEN_WHEN_MISSING = env.bool("ELECTION_OPEN_WHEN_MISSING", default=True)

VOTING_TOKEN_TTL = datetime.timedelta(seconds=env.int("VOTING_TOKEN_TTL_SECONDS", default=5 * 60))

# Expired tokens are kept this long before `purge_expired` removes them, so a
# late submission still reports an expired token rather than an unknown one.
VOTING_TOKEN_RETENTION = datetime.timedelta(
    seconds=env.int("VOTING_TOKEN_RETENTION_SECONDS", default=60 * 60 * 24),
)

# One-time codes
OTP_TTL = datetime.timedelta(seconds=env.int("OTP_TTL_SECONDS", default=5 * 60))
OTP_WINDOW = datetime.timedelta(seconds=env.int("OTP_WINDOW_SECONDS", default=60 * 60))
OTP_MAX_PER_WINDOW = env.int("OTP_MAX_PER_WINDOW", default=10)
OTP_SENDER = env("OTP_SENDER", default="core.otp_services.LoggingOtpSender")

# Login lockout
LOGIN_WINDOW = datetime.timedelta(seconds=env.int("LOGIN_WINDOW_SECONDS", default=15 * 60))
LOGIN_MAX_FAILED_ATTEMPTS = env.int("LOGIN_MAX_FAILED_ATTEMPTS", default=5)

# Logging
# Ensure app logs are visible in container stdout.
LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'filters': {
        'skip_healthz': {
            '()': 'core.logging_filters.SkipHealthzFilter',
        },
    },
    'formatters': {
        'console': {
            'format': '[{asctime}] {levelname} {name}: {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'console',
            'filters': ['skip_healthz'],
        },
    },
    'loggers': {
        # Our app
        'core': {
            'handlers': ['console'],
            'level': 'DEBUG' if DEBUG else 'INFO',
            'propagate': False,
        },
        # Django request errors still visible
        'django.request': {
            'handlers': ['console'],
            'level': 'WARNING',
            'propagate': False,
        },
        # Access logs from `runserver`.
        'django.server': {
            'handlers': ['console'],
            'level': 'INFO',
            'propagate': False,
        },
    },
}
