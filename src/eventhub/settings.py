"""
Django settings for the eventhub project.

Values are read from the environment (or a .env file next to manage.py). When
AWS_SECRETS_REGION is set, secrets are looked up in AWS Secrets Manager first.
"""

from pathlib import Path
import environ
from .secrets import AWSSecretsManager, SecretManager

BASE_DIR = Path(__file__).resolve().parent.parent

env = environ.Env(
    DEBUG=(bool, False),
    PAYMENT_MOCK_MODE=(bool, True),
    USE_S3=(bool, False),
)
environ.Env.read_env(BASE_DIR / ".env")

AWS_SECRETS_REGION = env("AWS_SECRETS_REGION", default=None)
AWS_ACCESS_KEY_ID = env("AWS_ACCESS_KEY_ID", default=None)
AWS_SECRET_ACCESS_KEY = env("AWS_SECRET_ACCESS_KEY", default=None)

aws_secrets_manager = None
if AWS_SECRETS_REGION:
    aws_secrets_manager = AWSSecretsManager(
        AWS_SECRETS_REGION, AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY
    )
secrets = SecretManager(aws_secrets_manager=aws_secrets_manager, env=env)

SECRET_KEY = secrets.get_secret("SECRET_KEY", default="django-insecure-eventhub-dev")
DEBUG = env("DEBUG")
ALLOWED_HOSTS = env.list("ALLOWED_HOSTS", default=["*"])

INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "django.contrib.auth",
    "django.contrib.staticfiles",
    "rest_framework",
    "django_filters",
    "drf_yasg",
    "base",
    "ticketing",
    "engagement",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "eventhub.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
            ],
        },
    },
]

WSGI_APPLICATION = "eventhub.wsgi.application"

DATABASES = {
    "default": env.db("DATABASE_URL", default=f"sqlite:///{BASE_DIR / 'db.sqlite3'}")
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

LANGUAGE_CODE = "en-us"
TIME_ZONE = env("TIME_ZONE", default="Asia/Kolkata")
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"
STATIC_ROOT = BASE_DIR / "staticfiles"
MEDIA_URL = "media/"
MEDIA_ROOT = BASE_DIR / "media"

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [
        "base.auth.JwtAuthentication",
    ],
    "DEFAULT_PERMISSION_CLASSES": [
        "rest_framework.permissions.AllowAny",
    ],
    "DEFAULT_FILTER_BACKENDS": [
        "django_filters.rest_framework.DjangoFilterBackend",
    ],
    "UNAUTHENTICATED_USER": None,
    # Reports use ?format=csv themselves.
    "URL_FORMAT_OVERRIDE": None,
}

SWAGGER_SETTINGS = {
    "SECURITY_DEFINITIONS": {
        "Jwt": {"type": "apiKey", "name": "Jwt", "in": "header"},
    },
}

LOG_LEVEL = env("LOG_LEVEL", default="INFO")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "{asctime} {levelname} {name} {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": LOG_LEVEL,
    },
    "loggers": {
        "django": {
            "handlers": ["console"],
            "level": env("DJANGO_LOG_LEVEL", default="WARNING"),
            "propagate": False,
        },
    },
}

# Site
SITE_NAME = env("SITE_NAME", default="EventHub")
APP_URL = env("APP_URL", default="http://localhost:3000")
BASE_URL = env("BASE_URL", default=APP_URL)

# Member auth
JWT_EXPIRY_DAYS = env.int("JWT_EXPIRY_DAYS", default=30)

# Tickets
TICKET_SECRET_KEY = secrets.get_secret(
    "TICKET_SECRET_KEY", default="default-secret-key-for-demo"
)
MAX_CERTIFICATES_PER_BATCH = env.int("MAX_CERTIFICATES_PER_BATCH", default=100)

# Payments
ACTIVE_PAYMENT_GATEWAY = env("ACTIVE_PAYMENT_GATEWAY", default="razorpay")
PAYMENT_MOCK_MODE = env("PAYMENT_MOCK_MODE")
PAYMENT_CURRENCY = "INR"

RAZORPAY_API_KEY = secrets.get_secret("RAZORPAY_API_KEY", default="")
RAZORPAY_API_SECRET = secrets.get_secret("RAZORPAY_API_SECRET", default="")
RAZORPAY_WEBHOOK_SECRET = secrets.get_secret("RAZORPAY_WEBHOOK_SECRET", default="")

PHONEPE_API_URL = env(
    "PHONEPE_API_URL", default="https://api-preprod.phonepe.com/apis/pg-sandbox"
)
PHONEPE_MERCHANT_ID = secrets.get_secret("PHONEPE_MERCHANT_ID", default="")
PHONEPE_SALT_KEY = secrets.get_secret("PHONEPE_SALT_KEY", default="")
PHONEPE_SALT_INDEX = env("PHONEPE_SALT_INDEX", default="1")

# Email (Brevo SMTP relay)
BREVO_API_KEY = secrets.get_secret("BREVO_API_KEY", default="")
BREVO_SENDER_EMAIL = env("BREVO_SENDER_EMAIL", default="")
BREVO_SENDER_NAME = env("BREVO_SENDER_NAME", default=SITE_NAME)
BREVO_SMTP_LOGIN = env("BREVO_SMTP_LOGIN", default="")

EMAIL_BACKEND = env(
    "EMAIL_BACKEND", default="django.core.mail.backends.smtp.EmailBackend"
)
EMAIL_HOST = "smtp-relay.brevo.com"
EMAIL_PORT = 587
EMAIL_USE_TLS = True
EMAIL_HOST_USER = BREVO_SMTP_LOGIN or BREVO_SENDER_EMAIL
EMAIL_HOST_PASSWORD = BREVO_API_KEY
EMAIL_TIMEOUT = 30
DEFAULT_FROM_EMAIL = f'"{BREVO_SENDER_NAME}" <{BREVO_SENDER_EMAIL or "noreply@eventhub.com"}>'

# SMS / WhatsApp
SMS_PROVIDER = env("SMS_PROVIDER", default="fast2sms")
FAST2SMS_API_KEY = secrets.get_secret("FAST2SMS_API_KEY", default="")
SNS_REGION_NAME = env("SNS_REGION_NAME", default="ap-south-1")
SNS_SENDER_ID = env("SNS_SENDER_ID", default="EVNTHB")
WHATSAPP_PHONE_NUMBER_ID = env("WHATSAPP_PHONE_NUMBER_ID", default="")
WHATSAPP_ACCESS_TOKEN = secrets.get_secret("WHATSAPP_ACCESS_TOKEN", default="")
THIRD_PARTY_TIMEOUT_SECS = env.int("THIRD_PARTY_TIMEOUT_SECS", default=15)

# Storage
USE_S3 = env("USE_S3")
AWS_STORAGE_BUCKET_NAME = env("AWS_STORAGE_BUCKET_NAME", default=None)
AWS_S3_REGION_NAME = env("AWS_S3_REGION_NAME", default="ap-south-1")
AWS_S3_CUSTOM_DOMAIN = env("AWS_S3_CUSTOM_DOMAIN", default=None)
PUBLIC_MEDIA_LOCATION = "media/public"
PRIVATE_MEDIA_LOCATION = "media/private"
