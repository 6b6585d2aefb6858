import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.getenv('DJANGO_SECRET_KEY', 'dev-secret-key-change-in-production')
DEBUG = os.getenv('DEBUG', '0') == '1'
ALLOWED_HOSTS = ['*']

INSTALLED_APPS = [
    'django.contrib.contenttypes',
    'django.contrib.auth',
    'rest_framework',
    'corsheaders',
    'checkout',
]

MIDDLEWARE = [
    'corsheaders.middleware.CorsMiddleware',
    'django.middleware.common.CommonMiddleware',
]

ROOT_URLCONF = 'config.urls'
WSGI_APPLICATION = 'config.wsgi.application'

# 没有数据库：订单和去重账本只活在进程内存里（重启即丢失）
DATABASES = {}

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

USE_TZ = True
TIME_ZONE = 'America/Costa_Rica'

# CORS
CORS_ALLOW_ALL_ORIGINS = True
CORS_ALLOW_HEADERS = [
    'accept',
    'content-type',
    'x-order-source',
    'x-tilopay-secret',
    'hash-tilopay',
]

# REST Framework
REST_FRAMEWORK = {
    'DEFAULT_RENDERER_CLASSES': [
        'rest_framework.renderers.JSONRenderer',
    ],
    'DEFAULT_PARSER_CLASSES': [
        'rest_framework.parsers.JSONParser',
    ],
    'DEFAULT_AUTHENTICATION_CLASSES': [],
    'DEFAULT_PERMISSION_CLASSES': [
        'rest_framework.permissions.AllowAny',
    ],
    'UNAUTHENTICATED_USER': None,
    'EXCEPTION_HANDLER': 'checkout.exception_handler.unified_exception_handler',
}

# Logging
LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'simple': {
            'format': '%(asctime)s %(levelname)s %(name)s %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'simple',
        },
    },
    'loggers': {
        'checkout': {
            'handlers': ['console'],
            'level': 'DEBUG' if DEBUG else 'INFO',
        },
    },
}

APP_URL = os.getenv('APP_URL', 'https://deepclean.shopping')

# Tilopay (payment gateway)
TILOPAY_BASE_URL = os.getenv('TILOPAY_BASE_URL', 'https://app.tilopay.com/api/v1')
TILOPAY_USER = os.getenv('TILOPAY_USER', '')
TILOPAY_PASSWORD = os.getenv('TILOPAY_PASSWORD', '')
TILOPAY_API_KEY = os.getenv('TILOPAY_API_KEY', '')
# 为空时 webhook 签名校验直接放行（只打 warning）
TILOPAY_WEBHOOK_SECRET = os.getenv('TILOPAY_WEBHOOK_SECRET', '')
GATEWAY_TIMEOUT = float(os.getenv('GATEWAY_TIMEOUT', '15'))
PAYMENT_CURRENCY = os.getenv('PAYMENT_CURRENCY', 'CRC')

# CRM
CRM_API_URL = os.getenv('CRM_API_URL', '')
CRM_API_KEY = os.getenv('CRM_API_KEY', '')
CRM_TIMEOUT = float(os.getenv('CRM_TIMEOUT', '10'))
CRM_MAX_RETRIES = int(os.getenv('CRM_MAX_RETRIES', '3'))
CRM_RETRY_BASE_DELAY = float(os.getenv('CRM_RETRY_BASE_DELAY', '1.0'))
# 1 → CRM 同步交给 Celery worker，HTTP 响应不等待重试退避
CRM_SYNC_ASYNC = os.getenv('CRM_SYNC_ASYNC', '0') == '1'

# Email
EMAIL_PROVIDER = os.getenv('EMAIL_PROVIDER', 'resend')
RESEND_API_KEY = os.getenv('RESEND_API_KEY', '')
EMAIL_FROM = os.getenv('EMAIL_FROM', 'DeepClean <orders@deepclean.shopping>')
ORDER_NOTIFICATION_EMAIL = os.getenv('ORDER_NOTIFICATION_EMAIL', '')
EMAIL_TIMEOUT = float(os.getenv('EMAIL_TIMEOUT', '10'))

# Celery
CELERY_BROKER_URL = os.getenv('REDIS_URL', 'redis://localhost:6379/0')
CELERY_RESULT_BACKEND = os.getenv('REDIS_URL', 'redis://localhost:6379/0')
CELERY_ACCEPT_CONTENT = ['json']
CELERY_TASK_SERIALIZER = 'json'
CELERY_RESULT_SERIALIZER = 'json'
CELERY_TIMEZONE = 'America/Costa_Rica'
# 重试最多 3 次 × (10s 超时 + 退避)，2 分钟足够
CELERY_TASK_SOFT_TIME_LIMIT = 120
