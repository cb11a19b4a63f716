
import os
from pathlib import Path


INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'weekly',  # Setmanes, nominacions i vots
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

SECRET_KEY = os.getenv('DJANGO_SECRET_KEY', 'django-insecure-film-club-change-in-production')
ROOT_URLCONF = 'filmclub.urls'
ALLOWED_HOSTS = os.getenv('DJANGO_ALLOWED_HOSTS', 'localhost,127.0.0.1').split(',')


BASE_DIR = Path(__file__).resolve().parent.parent
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
DEBUG = os.getenv('DJANGO_DEBUG', 'true').lower() == 'true'

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': os.getenv('FILMCLUB_DB_PATH', str(BASE_DIR / 'filmclub.sqlite3')),
        # a SQLite select_for_update no bloqueja: BEGIN IMMEDIATE serialitza les escriptures
        'OPTIONS': {'transaction_mode': 'IMMEDIATE', 'timeout': 20},
    }
}


WSGI_APPLICATION = 'filmclub.wsgi.application'

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True

STATIC_URL = '/static/'

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# Calendari i flux setmanal
FILMCLUB_MIN_NOMINATIONS = int(os.getenv('FILMCLUB_MIN_NOMINATIONS', '3'))
FILMCLUB_WEEKS_PAST = int(os.getenv('FILMCLUB_WEEKS_PAST', '4'))
FILMCLUB_WEEKS_FUTURE = int(os.getenv('FILMCLUB_WEEKS_FUTURE', '12'))
FILMCLUB_MAX_GENRE_LENGTH = 50
FILMCLUB_MAX_SEARCH_RESULTS = int(os.getenv('FILMCLUB_MAX_SEARCH_RESULTS', '5'))

# Catàleg extern de pel·lícules (TMDB)
TMDB_API_KEY = os.getenv('TMDB_API_KEY', '')
TMDB_BASE_URL = os.getenv('TMDB_BASE_URL', 'https://api.themoviedb.org/3')
TMDB_IMAGE_BASE = os.getenv('TMDB_IMAGE_BASE', 'https://image.tmdb.org/t/p')
TMDB_POSTER_SIZE = os.getenv('TMDB_POSTER_SIZE', 'w92')
TMDB_TIMEOUT = float(os.getenv('TMDB_TIMEOUT', '10'))

# Logs consola
LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'simple': {
            'format': '%(asctime)s %(levelname)s %(name)s: %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'simple',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'INFO',
    },
    'loggers': {
        'django': {
            'handlers': ['console'],
            'level': 'INFO',
            'propagate': False,
        },
        'weekly': {
            'handlers': ['console'],
            'level': os.getenv('FILMCLUB_LOG_LEVEL', 'INFO'),
            'propagate': False,
        },
    },
}
