"""
WSGI config for the distro project.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'distro.settings.local')

application = get_wsgi_application()
