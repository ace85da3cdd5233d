"""
Django settings for match_gateway project.
"""
import os
import sys
from pathlib import Path
from celery.schedules import crontab
from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.getenv('DJANGO_SECRET_KEY', 'dev-secret-key-change-in-production')
DEBUG = os.getenv('DEBUG', 'True').lower() == 'true'
ALLOWED_HOSTS = os.getenv('ALLOWED_HOSTS', 'localhost,127.0.0.1').split(',')

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'rest_framework',
    'matching',
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

ROOT_URLCONF = 'match_gateway.urls'

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

ASGI_APPLICATION = 'match_gateway.asgi.application'

# Database configuration
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.postgresql',
        'NAME': os.getenv('DB_NAME', 'match_gateway'),
        'USER': os.getenv('DB_USER', 'postgres'),
        'PASSWORD': os.getenv('DB_PASSWORD', 'postgres'),
        'HOST': os.getenv('DB_HOST', 'localhost'),
        'PORT': os.getenv('DB_PORT', '5432'),
    }
}

RUNNING_TESTS = (
    os.getenv('USE_SQLITE_FOR_TESTS', '').lower() == 'true'
    or any('pytest' in arg for arg in sys.argv)
    or bool(os.getenv('PYTEST_CURRENT_TEST'))
)

# Use SQLite for tests to avoid requiring a running PostgreSQL server
if RUNNING_TESTS:
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': os.getenv('SQLITE_NAME', ':memory:'),
        }
    }

AUTH_PASSWORD_VALIDATORS = [
    {'NAME': 'django.contrib.auth.password_validation.UserAttributeSimilarityValidator'},
    {'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator'},
    {'NAME': 'django.contrib.auth.password_validation.CommonPasswordValidator'},
    {'NAME': 'django.contrib.auth.password_validation.NumericPasswordValidator'},
]

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True

STATIC_URL = 'static/'
DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# Celery configuration
CELERY_BROKER_URL = os.getenv('CELERY_BROKER_URL', 'redis://localhost:6379/0')
CELERY_RESULT_BACKEND = os.getenv('CELERY_RESULT_BACKEND', 'redis://localhost:6379/0')
CELERY_ACCEPT_CONTENT = ['json']
CELERY_TASK_SERIALIZER = 'json'
CELERY_RESULT_SERIALIZER = 'json'
CELERY_TIMEZONE = 'UTC'

CELERY_BEAT_SCHEDULE = {
    'sweep-expired-assignments': {
        'task': 'matching.tasks.sweep_expired_assignments',
        'schedule': crontab(minute=0),
    },
    'reset-weekly-lead-counts': {
        'task': 'matching.tasks.reset_weekly_lead_counts',
        'schedule': crontab(minute=0, hour=0, day_of_week='monday'),
    },
}

if RUNNING_TESTS:
    CELERY_BROKER_URL = 'memory://'
    CELERY_RESULT_BACKEND = 'cache+memory://'
    CELERY_TASK_ALWAYS_EAGER = True
    CELERY_TASK_EAGER_PROPAGATES = True

# Matching configuration
MATCHING_MAX_RESULTS = int(os.getenv('MATCHING_MAX_RESULTS', '5'))
MATCHING_RESPONSE_WINDOW_HOURS = int(os.getenv('MATCHING_RESPONSE_WINDOW_HOURS', '48'))
MATCHING_GEOCODER = os.getenv(
    'MATCHING_GEOCODER',
    'matching.services.geocoding.StaticZipGeocoder'
)
MATCHING_FALLBACK_ENABLED = os.getenv('MATCHING_FALLBACK_ENABLED', 'True').lower() == 'true'
MATCHING_FALLBACK_POOL_PATH = os.getenv(
    'MATCHING_FALLBACK_POOL_PATH',
    str(BASE_DIR / 'matching' / 'fallback_professionals.json')
)
MATCH_RETRY_COUNTDOWN = int(os.getenv('MATCH_RETRY_COUNTDOWN', '300'))

# Professional notification webhook (optional)
NOTIFICATION_WEBHOOK_URL = os.getenv('NOTIFICATION_WEBHOOK_URL', '')
NOTIFICATION_TOKEN = os.getenv('NOTIFICATION_TOKEN', '')

# Validation configuration
ZIPCODE_PATTERN = os.getenv('ZIPCODE_PATTERN', r'^\d{5}$')
ZIPCODE_PATTERN_ERROR = os.getenv('ZIPCODE_PATTERN_ERROR', 'ZIPCODE_INVALID')
MISSING_REQUIRED_FIELD = os.getenv('MISSING_REQUIRED_FIELD', 'MISSING_REQUIRED_FIELD')
INVALID_PROFESSIONAL_TYPE = os.getenv('INVALID_PROFESSIONAL_TYPE', 'INVALID_PROFESSIONAL_TYPE')
INVALID_URGENCY = os.getenv('INVALID_URGENCY', 'INVALID_URGENCY')
INVALID_BUDGET = os.getenv('INVALID_BUDGET', 'INVALID_BUDGET')
FIELD_TOO_LONG = os.getenv('FIELD_TOO_LONG', 'FIELD_TOO_LONG')

# Logging configuration
LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{levelname} {asctime} {module} {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'INFO',
    },
    'loggers': {
        'matching': {
            'handlers': ['console'],
            'level': 'DEBUG',
            'propagate': False,
        },
    },
}

# REST Framework configuration
REST_FRAMEWORK = {
    'DEFAULT_RENDERER_CLASSES': [
        'rest_framework.renderers.JSONRenderer',
    ],
    'DEFAULT_PARSER_CLASSES': [
        'rest_framework.parsers.JSONParser',
    ],
}
