"""
Base settings for the distro project.
Shared between local and cloud deployments.
"""

from pathlib import Path
import os

from django.urls import reverse_lazy

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent.parent


# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = os.getenv('SECRET_KEY', 'django-insecure-k2v#9x!m4q0r7w1e&c8z=t3y5u(b6n)p+h@j2s$d-f4g')

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = os.getenv('DEBUG', 'True').lower() == 'true'

ALLOWED_HOSTS = os.getenv('ALLOWED_HOSTS', '*').split(',')


# Application definition
INSTALLED_APPS = [
    "unfold",
    "unfold.contrib.filters",
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'directory',
    'stock',
    'orders',
    'agent',
    'corsheaders',
    'rest_framework',
    'drf_spectacular',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'corsheaders.middleware.CorsMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'distro.urls'

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

WSGI_APPLICATION = 'distro.wsgi.application'


# Password validation
AUTH_PASSWORD_VALIDATORS = [
    {'NAME': 'django.contrib.auth.password_validation.UserAttributeSimilarityValidator'},
    {'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator'},
    {'NAME': 'django.contrib.auth.password_validation.CommonPasswordValidator'},
    {'NAME': 'django.contrib.auth.password_validation.NumericPasswordValidator'},
]


# Internationalization
LANGUAGE_CODE = 'es-ar'
TIME_ZONE = os.getenv('TIME_ZONE', 'America/Argentina/Buenos_Aires')
USE_I18N = True
USE_TZ = True


# Static files
STATIC_URL = 'static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'


# CORS
CORS_ALLOW_ALL_ORIGINS = True


# Default primary key field type
DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'


# =============================================================================
# INVENTORY LEDGER
# =============================================================================
STOCK_LEDGER = {
    'DEFAULT_OUTBOUND_REASON': 'Order fulfillment',
    'CANCELLATION_REASON': 'Order cancelled',
    'EXPIRY_ALERT_DAYS': int(os.getenv('EXPIRY_ALERT_DAYS', '30')),
}


# =============================================================================
# SUGGESTION ENGINE
# =============================================================================
# Weights multiply the per-component scores computed in
# orders.services.suggestion_service. Ties are broken by client history,
# expiring stock, global popularity and finally SKU.
SUGGESTION_ENGINE = {
    'CLIENT_WINDOW_DAYS': 182,
    'GLOBAL_WINDOW_DAYS': 365,
    'EXPIRING_SOON_DAYS': int(os.getenv('SUGGESTION_EXPIRING_SOON_DAYS', '30')),
    'DEFAULT_TOP_N': 5,
    'MAX_TOP_N': 50,
    'WEIGHTS': {
        'CLIENT_AFFINITY': float(os.getenv('SUGGESTION_WEIGHT_CLIENT_AFFINITY', '3.0')),
        'GLOBAL_POPULARITY': float(os.getenv('SUGGESTION_WEIGHT_GLOBAL_POPULARITY', '2.0')),
        'HIGH_ROTATION': float(os.getenv('SUGGESTION_WEIGHT_HIGH_ROTATION', '1.2')),
        'DISCOUNT': float(os.getenv('SUGGESTION_WEIGHT_DISCOUNT', '2.5')),
        'EXPIRY_URGENCY': float(os.getenv('SUGGESTION_WEIGHT_EXPIRY_URGENCY', '10.0')),
        'NOVELTY': float(os.getenv('SUGGESTION_WEIGHT_NOVELTY', '3.0')),
        'IN_STOCK': float(os.getenv('SUGGESTION_WEIGHT_IN_STOCK', '1.0')),
    },
}


# =============================================================================
# CONVERSATIONAL AGENT
# =============================================================================
OPENAI_API_KEY = os.getenv('OPENAI_API_KEY', '')

AGENT = {
    'MODEL': os.getenv('AGENT_MODEL', 'gpt-4o-mini'),
    'TEMPERATURE': float(os.getenv('AGENT_TEMPERATURE', '0')),
    'MAX_STEPS': int(os.getenv('AGENT_MAX_STEPS', '8')),
    'MAX_HISTORY_MESSAGES': int(os.getenv('AGENT_MAX_HISTORY_MESSAGES', '20')),
    'CONVERSATION_TTL_SECONDS': int(os.getenv('AGENT_CONVERSATION_TTL_SECONDS', str(6 * 60 * 60))),
    'CACHE_ALIAS': 'default',
}


# Unfold Admin Configuration
UNFOLD = {
    "SITE_TITLE": "Distro Admin",
    "SITE_HEADER": "Distro",
    "SITE_URL": "/",
    "SITE_SYMBOL": "local_shipping",

    "SIDEBAR": {
        "show_search": True,
        "show_all_applications": True,
        "navigation": [
            {
                "title": "Orders",
                "separator": True,
                "items": [
                    {
                        "title": "Orders",
                        "icon": "shopping_cart",
                        "link": reverse_lazy("admin:orders_order_changelist"),
                    },
                ],
            },
            {
                "title": "Inventory",
                "separator": True,
                "items": [
                    {
                        "title": "Products",
                        "icon": "inventory_2",
                        "link": reverse_lazy("admin:stock_product_changelist"),
                    },
                    {
                        "title": "Lots",
                        "icon": "event",
                        "link": reverse_lazy("admin:stock_inventorylot_changelist"),
                    },
                    {
                        "title": "Stock Movements",
                        "icon": "swap_vert",
                        "link": reverse_lazy("admin:stock_stockmovement_changelist"),
                    },
                ],
            },
            {
                "title": "Directory",
                "separator": True,
                "items": [
                    {
                        "title": "Distributors",
                        "icon": "store",
                        "link": reverse_lazy("admin:directory_distributor_changelist"),
                    },
                    {
                        "title": "Customers",
                        "icon": "people",
                        "link": reverse_lazy("admin:directory_customer_changelist"),
                    },
                    {
                        "title": "Salespeople",
                        "icon": "badge",
                        "link": reverse_lazy("admin:directory_salesperson_changelist"),
                    },
                ],
            },
        ],
    },
}

REST_FRAMEWORK = {
    'DEFAULT_SCHEMA_CLASS': 'drf_spectacular.openapi.AutoSchema',

    # Authentication is resolved upstream of this service.
    'DEFAULT_AUTHENTICATION_CLASSES': [],
    'DEFAULT_PERMISSION_CLASSES': [
        'rest_framework.permissions.AllowAny',
    ],
    'UNAUTHENTICATED_USER': None,

    'DEFAULT_RENDERER_CLASSES': [
        'rest_framework.renderers.JSONRenderer',
        'rest_framework.renderers.BrowsableAPIRenderer',
    ],
}


SPECTACULAR_SETTINGS = {
    'TITLE': 'Distro',
    'DESCRIPTION': 'Distributor ordering agent API documentation',
    'VERSION': '1.0.0',
}
