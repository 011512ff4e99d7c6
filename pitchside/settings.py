"""
Django settings for pitchside.
"""
import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.environ.get('PITCHSIDE_SECRET_KEY', 'pitchside-development-key')

DEBUG = os.environ.get('PITCHSIDE_DEBUG', '1') == '1'

ALLOWED_HOSTS = []

INSTALLED_APPS = [
    'django.contrib.contenttypes',
    'django.contrib.auth',
    'pitchside.points_core',
]

MIDDLEWARE = []

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': BASE_DIR / 'db.sqlite3',
    }
}

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

USE_TZ = True
TIME_ZONE = 'UTC'

# Overrides for pitchside.points_core.conf
POINTS_CORE = {
    'WALKOVER_WIN_POINTS': 3,
    'WALKOVER_LOSS_POINTS': -3,
    'DEFAULT_POINT_SYSTEM': 'standard',
}

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '%(asctime)s %(levelname)s %(name)s: %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'loggers': {
        'pitchside': {
            'handlers': ['console'],
            'level': os.environ.get('PITCHSIDE_LOG_LEVEL', 'INFO'),
            'propagate': False,
        },
    },
}
